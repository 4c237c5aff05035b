"""
Sparse triangular solves with sparse right-hand sides.

The solve runs in two phases:
* `reach.elimination_order` finds the nonzero pattern of the solution, and an order to compute it in
* `numeric_solve` replays that order, one column elimination per nonzero

Scratch space (the dependency stack, visited markers, and dense workspace) is owned by the caller,
so it can be reused across many solves. `SparseTriSolver` packages that up.
"""

import logging
from typing import Optional

import numpy as np

from .errors import MatrixDimError
from .field import Field
from .matrix import CsMatView
from .stack import DependencyStack
from .vector import SparseVector
from .eliminate import eliminate_column
from .reach import elimination_order

logger = logging.getLogger(__name__)


def numeric_solve(tri_mat: CsMatView,
                  rhs: SparseVector,
                  dstack: DependencyStack,
                  workspace,
                  field: Optional[Field] = None,
                  lower: bool = True):
    """ Compute the solution values, in the order left in `dstack` by `elimination_order`.
    On return `workspace` holds the solution at each of `dstack.finished_indices()`.
    Its other entries are left as they were. """
    n = tri_mat.rows
    MatrixDimError.assert_eq(len(workspace), n, "workspace should be of len n")
    if field is None:
        field = Field.infer_for(workspace, tri_mat.data, rhs.data)

    # Clear our reach, which may include entries beyond the pattern of `rhs`, then scatter `rhs` in
    for ind in dstack.finished_indices():
        workspace[ind] = field.zero
    rhs.scatter(workspace)

    for ind in dstack.finished_indices():
        logger.debug(f"Eliminating column {ind}")
        col = tri_mat.outer_view(ind)
        eliminate_column(col, ind, workspace, field, lower=lower, sorted_indices=tri_mat.sorted_indices)


def lsolve_csc_sparse_rhs(lower_tri_mat: CsMatView,
                          rhs: SparseVector,
                          dstack: DependencyStack,
                          x_workspace,
                          visited,
                          field: Optional[Field] = None):
    """ Sparse triangular CSC / sparse vector solve.

    lower_tri_mat is a sparse lower triangular matrix of shape (n, n), in CSC storage.
    rhs is a sparse vector of dimension n.
    dstack is an empty dependency stack with capacity 2*n.
    x_workspace is a dense vector of length n. Its input values can be anything.
    visited is a length-n sequence, and must be all False.

    On success the non-zero pattern of the solution is `dstack.finished_indices()`,
    and `x_workspace` holds the solution values at those indices.
    The pattern is not sorted; it is ordered within each connected component of the matrix's graph.

    Raises `BadStorageType` if the matrix is not CSC, and `SingularMatrix` on a missing or zero pivot.
    Misuse of the scratch space raises `MatrixError`s. """
    elimination_order(lower_tri_mat, rhs, dstack, visited, lower=True)
    numeric_solve(lower_tri_mat, rhs, dstack, x_workspace, field, lower=True)


def usolve_csc_sparse_rhs(upper_tri_mat: CsMatView,
                          rhs: SparseVector,
                          dstack: DependencyStack,
                          x_workspace,
                          visited,
                          field: Optional[Field] = None):
    """ Upper triangular counterpart of `lsolve_csc_sparse_rhs` """
    elimination_order(upper_tri_mat, rhs, dstack, visited, lower=False)
    numeric_solve(upper_tri_mat, rhs, dstack, x_workspace, field, lower=False)


class SparseTriSolver(object):
    """ Holds the scratch space for repeated sparse solves of dimension `n`. """

    def __init__(self, n: int):
        self.n = n
        self.dstack = DependencyStack.with_capacity(2 * n)
        self.visited = np.zeros(n, dtype=bool)
        self.workspace = [0] * n

    def reset(self):
        self.dstack.clear()
        self.visited[:] = False

    def solve(self,
              tri_mat: CsMatView,
              rhs: SparseVector,
              lower: bool = True,
              field: Optional[Field] = None) -> SparseVector:
        """ Solve `tri_mat * x = rhs`, returning `x` with ascending indices.
        Every reached index is included, even where its computed value is zero. """
        MatrixDimError.assert_eq(tri_mat.rows, self.n, "Solver dimension mismatch")
        self.reset()
        if lower:
            lsolve_csc_sparse_rhs(tri_mat, rhs, self.dstack, self.workspace, self.visited, field)
        else:
            usolve_csc_sparse_rhs(tri_mat, rhs, self.dstack, self.workspace, self.visited, field)
        indices = sorted(self.dstack.finished_indices())
        return SparseVector(self.n, indices, [self.workspace[i] for i in indices])
