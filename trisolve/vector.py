from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .errors import MatrixDimError


class SparseVector(object):
    """ Sparse vector of dimension `dim`, as parallel `indices` and `data` lists.
    Indices are unique; their order is kept as given, and is usually ascending. """

    def __init__(self, dim: int, indices, data):
        self.dim = int(dim)
        self.indices: List[int] = [int(i) for i in indices]
        self.data: list = list(data)
        MatrixDimError.assert_eq(len(self.indices), len(self.data), "indices and data lengths differ")
        MatrixDimError.assert_eq(len(set(self.indices)), len(self.indices), "duplicate index")
        for i in self.indices:
            MatrixDimError.assert_true(0 <= i < self.dim, f"index {i} out of bounds for dimension {self.dim}")

    def __repr__(self):
        return f"<{self.__class__.__name__}(dim={self.dim}, {dict(self)})>"

    def __iter__(self) -> Iterator[Tuple[int, object]]:
        return zip(self.indices, self.data)

    def __eq__(self, other):
        if not isinstance(other, SparseVector): return NotImplemented
        return self.dim == other.dim and self.to_dict() == other.to_dict()

    @property
    def nnz(self) -> int:
        return len(self.indices)

    def get(self, index: int) -> Optional[object]:
        """ Value stored at `index`, or None """
        for i, v in self:
            if i == index:
                return v
        return None

    def scatter(self, buf):
        """ Write our values into dense `buf`, leaving all other positions untouched """
        MatrixDimError.assert_eq(len(buf), self.dim)
        for i, v in self:
            buf[i] = v

    def to_dict(self) -> Dict[int, object]:
        return dict(zip(self.indices, self.data))

    def to_set(self) -> set:
        return set(zip(self.indices, self.data))

    def to_dense(self, zero=0) -> np.ndarray:
        dense = np.full(self.dim, zero, dtype=np.asarray(self.data).dtype if self.data else float)
        self.scatter(dense)
        return dense

    @classmethod
    def from_dict(cls, dim: int, d: Dict[int, object]):
        """ Create from an {index: value} dictionary, sorted by index """
        indices = sorted(d)
        return cls(dim, indices, [d[i] for i in indices])
