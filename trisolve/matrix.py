from typing import List, Optional, Tuple, Iterator
from enum import Enum, auto

import numpy as np

from .errors import MatrixError, MatrixDimError


class Axis(Enum):
    """ Storage orientation.  `rows` is compressed-row (CSR), `cols` is compressed-column (CSC). """
    rows = auto()
    cols = auto()

    def __invert__(self):
        if self is Axis.rows: return Axis.cols
        if self is Axis.cols: return Axis.rows
        raise ValueError


class Element(object):
    def __init__(self, row: int, col: int, val):
        self.row = row
        self.col = col
        self.val = val
        self.next_in_row = None
        self.next_in_col = None

    def __repr__(self):
        return f"<{self.__class__.__name__}(row={self.row}, col={self.col}, val={self.val})>"

    def index(self, ax: Axis):
        if ax is Axis.rows: return self.row
        if ax is Axis.cols: return self.col
        raise ValueError

    def next(self, ax: Axis):
        if ax is Axis.rows: return self.next_in_row
        if ax is Axis.cols: return self.next_in_col
        raise ValueError


class SparseMatrix(object):
    """ Orthogonal linked-list matrix, used to build up entries one at a time.
    Each row and column list is kept sorted by index.
    Compress into an immutable `CsMatView` with `view()` before solving. """

    def __init__(self):
        self.rows: List[Optional[Element]] = []
        self.cols: List[Optional[Element]] = []
        self.diag: List[Optional[Element]] = []

    def hdrs(self, axis: Axis):
        """ Return the axis-header array for either rows or columns. """
        MatrixError.assert_true(isinstance(axis, Axis))
        if axis is Axis.rows: return self.rows
        if axis is Axis.cols: return self.cols
        raise ValueError

    def get(self, row: int, col: int) -> Optional[Element]:
        """ Get the element at (row,col), or None if no element present """
        if row < 0: return None
        if col < 0: return None
        if row > len(self.rows) - 1: return None
        if col > len(self.cols) - 1: return None

        # Easy access cases
        if row == col: return self.diag[row]

        # Real search
        e = self.rows[row]
        while e is not None and e.col < col:
            e = e.next_in_row
        if e is None or e.col != col:
            return None
        return e

    def grow(self, rows: int, cols: int):
        """ Grow to at least `rows` x `cols`, e.g. to hold empty trailing rows. """
        if rows > len(self.rows):
            self.rows.extend([None] * (rows - len(self.rows)))
        if cols > len(self.cols):
            self.cols.extend([None] * (cols - len(self.cols)))
        new_diag_len = min(len(self.rows), len(self.cols))
        self.diag.extend([None] * (new_diag_len - len(self.diag)))

    def insert(self, e: Element) -> Element:
        """ Insert new Element `e` """
        MatrixDimError.assert_true(e.row >= 0 and e.col >= 0, f"Negative index for {e}")
        self.grow(e.row + 1, e.col + 1)

        # Insert into the col
        col_head = self.cols[e.col]
        if col_head is None:
            self.cols[e.col] = e
        elif col_head.row > e.row:
            e.next_in_col = col_head
            self.cols[e.col] = e
        else:
            elem = col_head
            next = col_head.next_in_col
            while next is not None and next.row < e.row:
                elem = next
                next = next.next_in_col
            # Now elem and next straddle e.row
            elem.next_in_col = e
            e.next_in_col = next

        # Insert into the row
        row_head = self.rows[e.row]
        if row_head is None:
            self.rows[e.row] = e
        elif row_head.col > e.col:
            e.next_in_row = row_head
            self.rows[e.row] = e
        else:
            elem = row_head
            next = row_head.next_in_row
            while next is not None and next.col < e.col:
                elem = next
                next = next.next_in_row
            # Now elem and next straddle e.col
            elem.next_in_row = e
            e.next_in_row = next

        if e.row == e.col:
            self.diag[e.col] = e
        return e

    def add_element(self, *args, **kwargs):
        e = Element(*args, **kwargs)
        return self.insert(e)

    def mult(self, rhs):
        """ Multiply with a column vector """
        if isinstance(rhs, dict):  # Collect a sparse rhs into a dense list
            x = [0] * len(self.cols)
            for r, v in rhs.items(): x[r] = v
        else:
            if len(rhs) != len(self.cols):
                raise MatrixDimError(f'Invalid rhs: length {len(rhs)} for matrix size {len(self.cols)}')
            x = rhs

        y = [0] * len(self.rows)
        for (row, e) in enumerate(self.rows):
            while e is not None:
                y[row] += e.val * x[e.col]
                e = e.next_in_row
        return y

    @classmethod
    def from_entries(cls, entries, size: Optional[int] = None):
        """ Build from an iterable of (row, col, val) triples """
        m = SparseMatrix()
        if size is not None:
            m.grow(size, size)
        for r, c, v in entries:
            m.add_element(r, c, v)
        return m

    def view(self, storage: Axis = Axis.cols) -> "CsMatView":
        """ Compress into an immutable `CsMatView`, major axis `storage`.
        Inner indices come out ascending. """
        indptr = [0]
        indices = []
        data = []
        for e in self.hdrs(storage):
            while e is not None:
                indices.append(e.index(~storage))
                data.append(e.val)
                e = e.next(storage)
            indptr.append(len(indices))
        shape = (len(self.rows), len(self.cols))
        return CsMatView(shape, indptr, indices, data, storage=storage)


class CsMatView(object):
    """ Immutable compressed sparse matrix.

    `storage` is the major (outer) axis: `Axis.rows` for CSR, `Axis.cols` for CSC.
    Outer slice `k` holds entries `indices[indptr[k]:indptr[k+1]]`, `data[...]`.
    Entries within an outer slice need not be sorted; `sorted_indices` reports whether they are. """

    def __init__(self, shape: Tuple[int, int], indptr, indices, data, storage: Axis = Axis.rows):
        MatrixError.assert_true(isinstance(storage, Axis))
        self.shape = (int(shape[0]), int(shape[1]))
        self.storage = storage
        self.indptr = np.asarray(indptr, dtype=np.intp)
        self.indices = np.asarray(indices, dtype=np.intp)
        self.data = np.asarray(data)

        outer, inner = self.outer_dims, self.inner_dims
        MatrixDimError.assert_eq(len(self.indptr), outer + 1, "indptr length should be outer dimension + 1")
        MatrixDimError.assert_eq(len(self.indices), len(self.data), "indices and data lengths differ")
        MatrixDimError.assert_eq(int(self.indptr[0]), 0, "indptr should start at zero")
        MatrixDimError.assert_eq(int(self.indptr[-1]), len(self.indices), "indptr should end at nnz")
        MatrixDimError.assert_true(bool(np.all(np.diff(self.indptr) >= 0)), "indptr should be non-decreasing")
        if len(self.indices):
            MatrixDimError.assert_true(bool(self.indices.min() >= 0), "negative inner index")
            MatrixDimError.assert_true(bool(self.indices.max() < inner), "inner index out of bounds")

        self.sorted_indices = all(
            bool(np.all(np.diff(self.outer_indices(k)) > 0)) for k in range(outer))

    def __repr__(self):
        return f"<{self.__class__.__name__}(shape={self.shape}, nnz={self.nnz}, storage={self.storage.name})>"

    @property
    def rows(self) -> int:
        return self.shape[0]

    @property
    def cols(self) -> int:
        return self.shape[1]

    @property
    def nnz(self) -> int:
        return len(self.indices)

    @property
    def outer_dims(self) -> int:
        return self.rows if self.storage is Axis.rows else self.cols

    @property
    def inner_dims(self) -> int:
        return self.cols if self.storage is Axis.rows else self.rows

    def is_csr(self) -> bool:
        return self.storage is Axis.rows

    def is_csc(self) -> bool:
        return self.storage is Axis.cols

    def outer_indices(self, k: int) -> np.ndarray:
        """ Inner indices of outer slice `k`, as a (no-copy) array slice. """
        return self.indices[self.indptr[k]:self.indptr[k + 1]]

    def outer_view(self, k: int) -> List[Tuple[int, object]]:
        """ (inner index, value) pairs of outer slice `k`, in storage order. """
        start, stop = self.indptr[k], self.indptr[k + 1]
        return list(zip(self.indices[start:stop].tolist(), self.data[start:stop].tolist()))

    def outer_iterator(self) -> Iterator[Tuple[int, List[Tuple[int, object]]]]:
        for k in range(self.outer_dims):
            yield k, self.outer_view(k)

    def get(self, outer: int, inner: int):
        """ Value stored at (outer, inner), or None.  First match wins on duplicates. """
        if outer < 0 or outer >= self.outer_dims: return None
        for ind, val in self.outer_view(outer):
            if ind == inner:
                return val
        return None

    def get_rc(self, row: int, col: int):
        """ Value stored at (row, col), regardless of storage """
        if self.is_csr(): return self.get(row, col)
        return self.get(col, row)

    def transpose(self) -> "CsMatView":
        """ Transposed matrix, sharing our arrays: CSR of A is CSC of A^T """
        return CsMatView((self.cols, self.rows), self.indptr, self.indices, self.data, storage=~self.storage)

    def dot(self, x) -> list:
        """ Matrix-vector product, as a list.  Exact for integer and rational entries. """
        MatrixDimError.assert_eq(len(x), self.cols)
        y = [0] * self.rows
        for k, entries in self.outer_iterator():
            for ind, val in entries:
                if self.is_csr():
                    y[k] += val * x[ind]
                else:
                    y[ind] += val * x[k]
        return y

    def to_dense(self) -> np.ndarray:
        dtype = self.data.dtype if len(self.data) else float
        dense = np.zeros(self.shape, dtype=dtype)
        for k, entries in self.outer_iterator():
            for ind, val in entries:
                if self.is_csr():
                    dense[k, ind] += val
                else:
                    dense[ind, k] += val
        return dense
