"""
Symbolic phase of the sparse right-hand-side solve.

Finds which unknowns of `L x = b` can be nonzero, given the nonzero pattern of `b`,
and an order in which to solve for them.
Column j of a lower triangular matrix having an entry in row i > j
means x_i can't be computed until x_j is known: an edge j -> i.
The reachable set from b's nonzeros, walked depth-first, gives both.

  |0              | |   |     |   |
  |  1            | | x |     | a |     x = a / l1
  |    2          | |   |     |   |
  |      3        | |   |     |   |
  |  d     4      | | y |  =  | b |     x*d + l4*y = b
  |          5    | |   |     |   |
  |        e   6  | | z |     |   |     y*e + l6*z = 0
  |      f       7| | w |     | c |     w = c / l7

Upper triangular matrices work the same way, with edges pointing up (i < j).
"""

import logging

from .errors import BadStorageType, MatrixDimError, StackError
from .matrix import CsMatView
from .stack import DependencyStack, StackVal, Visit
from .vector import SparseVector

logger = logging.getLogger(__name__)


def elimination_order(tri_mat: CsMatView,
                      rhs: SparseVector,
                      dstack: DependencyStack,
                      visited,
                      lower: bool = True):
    """ Depth-first search over the dependency graph of CSC matrix `tri_mat`,
    starting from each nonzero of `rhs` in turn.

    `dstack` must be empty, with capacity of at least 2*n.
    `visited` must be a length-n sequence of all False; it is marked for every node reached.
    On return, `dstack.iter_finished()` yields each reached node once, in an order
    in which every node comes after all the nodes it depends on.

    Each pending `finalize` entry records how far along its column the search has gone,
    so every column is scanned once, and at most one `discover` entry is ever pending.
    This bounds the pending stack by the current search depth, regardless of entry order. """

    if not tri_mat.is_csc():
        raise BadStorageType(f"Sparse right-hand-side solves require CSC storage, got {tri_mat.storage.name}")
    n = tri_mat.rows
    MatrixDimError.assert_eq(tri_mat.rows, tri_mat.cols, "Non square matrix passed to solver")
    MatrixDimError.assert_eq(rhs.dim, n, "Dimension mismatch")
    MatrixDimError.assert_eq(len(visited), n, "visited should be of len n")
    StackError.assert_true(not any(visited), "visited should be all False")
    StackError.assert_true(dstack.capacity >= 2 * n, "dstack capacity should be 2*n")
    StackError.assert_true(dstack.is_empty(), "dstack should be empty")

    for root_ind, _ in rhs:
        if visited[root_ind]:
            continue
        dstack.push_pending(StackVal.discover(root_ind))

        while True:
            stack_val = dstack.pop_pending()
            if stack_val is None:
                break

            if stack_val.kind is Visit.discover:
                ind = stack_val.index
                if visited[ind]:
                    continue
                visited[ind] = True
                pos = 0
            else:
                ind, pos = stack_val.index, stack_val.pos

            # Resume the scan of column `ind`, for its next not-yet-visited dependent
            children = tri_mat.outer_indices(ind)
            child = None
            while pos < len(children):
                c = int(children[pos])
                pos += 1
                if visited[c]:
                    continue
                if (lower and c > ind) or (not lower and c < ind):
                    child = c
                    break

            if child is None:  # All dependents are done
                dstack.push_finished(StackVal.finalize(ind))
            else:
                dstack.push_pending(StackVal.finalize(ind, pos))
                dstack.push_pending(StackVal.discover(child))

    logger.debug(f"Reached {len(dstack)} of {n} nodes from {rhs.nnz} right-hand-side nonzeros")
