import pytest
from fractions import Fraction

import numpy as np

from ..matrix import CsMatView, SparseMatrix, Axis
from ..vector import SparseVector
from ..stack import DependencyStack, StackVal
from ..errors import BadStorageType, SingularMatrix, StackError, MatrixDimError, MatrixError
from ..dense import solve_triangular
from ..reach import elimination_order
from ..spsolve import lsolve_csc_sparse_rhs, usolve_csc_sparse_rhs, numeric_solve, SparseTriSolver
from .cases import random_triangular


def solve_sparse(mat, rhs, lower=True, workspace=None):
    """ Helper function.  (Not a test!)
    Run a sparse solve with fresh scratch space, and collect the (index, value) pairs. """
    n = mat.rows
    dstack = DependencyStack.with_capacity(2 * n)
    xw = workspace if workspace is not None else [1] * n  # Initial values should not matter
    visited = [False] * n  # Initial values matter here
    solve = lsolve_csc_sparse_rhs if lower else usolve_csc_sparse_rhs
    solve(mat, rhs, dstack, xw, visited)
    return {(i, xw[i]) for i in dstack.finished_indices()}


def reachable(mat: CsMatView, roots, lower=True) -> set:
    """ Helper function.  (Not a test!)
    Reference reachability, via a plain set-based walk. """
    seen = set()
    todo = list(roots)
    while todo:
        j = todo.pop()
        if j in seen:
            continue
        seen.add(j)
        for i in mat.outer_indices(j).tolist():
            if (lower and i > j) or (not lower and i < j):
                todo.append(i)
    return seen


def test_lspsolve_csc():
    # |1        | | |   | |
    # |1 2      | |2| = |4|
    # |  3 3    | |1|   |9|
    # |      7  | | |   | |
    # |  2   3 5| |1|   |9|
    l = CsMatView((5, 5),
                  [0, 2, 5, 6, 8, 9],
                  [0, 1, 1, 2, 4, 2, 3, 4, 4],
                  [1, 1, 2, 3, 2, 3, 7, 3, 5],
                  storage=Axis.cols)
    b = SparseVector(5, [1, 2, 4], [4, 9, 9])
    x = solve_sparse(l, b)
    assert x == SparseVector(5, [1, 2, 4], [2, 1, 1]).to_set()

    # |1            | |1|   |1|
    # |  2          | | | = | |
    # |1   3        | |2|   |7|
    # |      7      | |1|   |7|
    # |        5    | | |   | |
    # |    1     1  | |1|   |3|
    # |  3     2   2| | |   | |
    l = CsMatView((7, 7),
                  [0, 2, 4, 6, 7, 9, 10, 11],
                  [0, 2, 1, 6, 2, 5, 3, 4, 6, 5, 6],
                  [1, 1, 2, 3, 3, 1, 7, 5, 2, 1, 2],
                  storage=Axis.cols)
    b = SparseVector(7, [0, 2, 3, 5], [1, 7, 7, 3])
    x = solve_sparse(l, b)
    assert x == SparseVector(7, [0, 2, 3, 5], [1, 2, 1, 1]).to_set()


def test_reach_beyond_rhs():
    # |2    | | 3 |   |6|
    # |4 1  | |-12| = |0|
    # |    1| |   |   | |
    l = CsMatView((3, 3), [0, 2, 3, 4], [0, 1, 1, 2], [2, 4, 1, 1], storage=Axis.cols)
    b = SparseVector(3, [0], [6])
    # Stale workspace values must not leak into the solution
    x = solve_sparse(l, b, workspace=[100, 100, 100])
    assert x == {(0, 3), (1, -12)}


def test_elimination_order():
    l = CsMatView((5, 5),
                  [0, 2, 5, 6, 8, 9],
                  [0, 1, 1, 2, 4, 2, 3, 4, 4],
                  [1, 1, 2, 3, 2, 3, 7, 3, 5],
                  storage=Axis.cols)
    b = SparseVector(5, [1, 2, 4], [4, 9, 9])
    dstack = DependencyStack.with_capacity(10)
    visited = [False] * 5
    elimination_order(l, b, dstack, visited)
    assert list(dstack.finished_indices()) == [1, 4, 2]
    assert visited == [False, True, True, False, True]
    assert dstack.is_pending_empty()


def test_shared_visited():
    # Root 1 is reached from root 0, and must only be finalized once
    l = CsMatView((3, 3), [0, 2, 4, 5], [0, 1, 1, 2, 2], [1, 1, 1, 1, 1], storage=Axis.cols)
    b = SparseVector(3, [0, 1], [1, 1])
    dstack = DependencyStack.with_capacity(6)
    visited = [False] * 3
    elimination_order(l, b, dstack, visited)
    assert list(dstack.finished_indices()) == [0, 1, 2]


def test_bad_storage():
    l = CsMatView((2, 2), [0, 1, 2], [0, 1], [1, 1], storage=Axis.rows)
    b = SparseVector(2, [0], [1])
    with pytest.raises(BadStorageType):
        solve_sparse(l, b)
    with pytest.raises(BadStorageType):
        solve_sparse(l, b, lower=False)


def test_fatal_preconditions():
    l = CsMatView((2, 2), [0, 1, 2], [0, 1], [1, 1], storage=Axis.cols)
    b = SparseVector(2, [0], [1])

    dstack = DependencyStack.with_capacity(3)  # Too small
    with pytest.raises(StackError):
        lsolve_csc_sparse_rhs(l, b, dstack, [0, 0], [False, False])

    dstack = DependencyStack.with_capacity(4)
    dstack.push_finished(StackVal.finalize(0))  # Not empty
    with pytest.raises(StackError):
        lsolve_csc_sparse_rhs(l, b, dstack, [0, 0], [False, False])

    dstack = DependencyStack.with_capacity(4)
    with pytest.raises(MatrixDimError):
        lsolve_csc_sparse_rhs(l, b, dstack, [0, 0], [False, False, False])

    dstack = DependencyStack.with_capacity(4)
    with pytest.raises(MatrixDimError):
        lsolve_csc_sparse_rhs(l, b, dstack, [0, 0, 0], [False, False])

    dstack = DependencyStack.with_capacity(6)
    with pytest.raises(MatrixError):
        lsolve_csc_sparse_rhs(l, SparseVector(3, [0], [1]), dstack, [0, 0], [False, False])

    # A stale mark would drop index 1 from the solution
    l = CsMatView((3, 3), [0, 2, 3, 4], [0, 1, 1, 2], [1, 1, 1, 1], storage=Axis.cols)
    b = SparseVector(3, [0], [1])
    dstack = DependencyStack.with_capacity(6)
    with pytest.raises(StackError):
        lsolve_csc_sparse_rhs(l, b, dstack, [0, 0, 0], [False, True, False])
    with pytest.raises(StackError):
        lsolve_csc_sparse_rhs(l, b, dstack, [0, 0, 0], np.array([False, True, False]))
    assert solve_sparse(l, b) == {(0, 1), (1, -1)}


def test_integer_data_is_exact():
    # |2  | | 1/2|   |1|
    # |1 2| |-1/4| = | |
    l = CsMatView((2, 2), [0, 2, 3], [0, 1, 1], [2, 1, 2], storage=Axis.cols)
    b = SparseVector(2, [0], [1])
    assert solve_sparse(l, b) == {(0, Fraction(1, 2)), (1, Fraction(-1, 4))}
    assert SparseTriSolver(2).solve(l, b) == SparseVector(2, [0, 1], [Fraction(1, 2), Fraction(-1, 4)])


def test_singular():
    # Column 2 is reached, and has no diagonal
    l = CsMatView((3, 3), [0, 2, 3, 3], [0, 2, 1], [1, 1, 1], storage=Axis.cols)
    b = SparseVector(3, [0], [1])
    with pytest.raises(SingularMatrix) as exc:
        solve_sparse(l, b)
    assert exc.value.pivot == 2

    # But it's fine if column 2 is never reached
    b = SparseVector(3, [1], [1])
    assert solve_sparse(l, b) == {(1, 1)}


def test_usolve_csc_sparse_rhs():
    # |1 2 0 0| |12|   | |
    # |  1 0 3| |-6| = | |
    # |    2 0| |  |   | |
    # |      1| | 2|   |2|
    u = CsMatView((4, 4), [0, 1, 3, 4, 6], [0, 0, 1, 2, 1, 3], [1, 2, 1, 2, 3, 1], storage=Axis.cols)
    b = SparseVector(4, [3], [2])
    x = solve_sparse(u, b, lower=False)
    assert x == {(3, 2), (1, -6), (0, 12)}


def test_unsorted_columns():
    """ A full lower triangle, with each column stored bottom-up.
    The scratch stack must still fit in 2*n. """
    n = 8
    indptr, indices, data = [0], [], []
    for j in range(n):
        for i in reversed(range(j, n)):
            indices.append(i)
            data.append(1 if i == j else -1)
        indptr.append(len(indices))
    l = CsMatView((n, n), indptr, indices, data, storage=Axis.cols)
    assert not l.sorted_indices

    b = SparseVector(n, [0], [1])
    x = solve_sparse(l, b)
    dense = solve_triangular(l, b.to_dense().tolist())
    assert x == {(i, v) for i, v in enumerate(dense)}
    assert dense == [2 ** max(i - 1, 0) for i in range(n)]


@pytest.mark.parametrize("seed", range(6))
@pytest.mark.parametrize("lower", [True, False])
def test_random_against_dense(seed, lower):
    """ Sparse solutions match dense ones on the reachable set, and the dense ones are zero elsewhere """
    rng = np.random.default_rng(seed)
    n = 30
    m = random_triangular(rng, n, lower=lower, density=0.05)
    mat = m.view(Axis.cols)
    roots = sorted(set(int(i) for i in rng.choice(n, size=3, replace=False)))
    b = SparseVector(n, roots, [int(v) for v in rng.choice([-2, -1, 1, 2], size=len(roots))])

    x = solve_sparse(mat, b, lower=lower)
    support = {i for i, _ in x}
    assert support == reachable(mat, roots, lower=lower)

    dense = solve_triangular(mat, b.to_dense().tolist(), lower=lower)
    for i, v in x:
        assert dense[i] == v
    for i in range(n):
        if i not in support:
            assert dense[i] == 0


@pytest.mark.parametrize("seed", range(4))
def test_order_respects_dependencies(seed):
    rng = np.random.default_rng(100 + seed)
    n = 25
    mat = random_triangular(rng, n, density=0.15).view(Axis.cols)
    b = SparseVector(n, [0, 5, 11], [1, 1, 1])
    dstack = DependencyStack.with_capacity(2 * n)
    elimination_order(mat, b, dstack, [False] * n)

    order = list(dstack.finished_indices())
    assert len(order) == len(set(order))
    position = {ind: k for k, ind in enumerate(order)}
    for j in order:
        for i in mat.outer_indices(j).tolist():
            if i > j:
                assert position[j] < position[i]


def test_numeric_solve_workspace_length():
    l = CsMatView((2, 2), [0, 1, 2], [0, 1], [1, 1], storage=Axis.cols)
    b = SparseVector(2, [0], [1])
    dstack = DependencyStack.with_capacity(4)
    elimination_order(l, b, dstack, [False, False])
    with pytest.raises(MatrixDimError):
        numeric_solve(l, b, dstack, [0])


def test_solver_reuse():
    rng = np.random.default_rng(7)
    n = 20
    mat = random_triangular(rng, n, density=0.1).view(Axis.cols)
    b = SparseVector(n, [2, 9], [3, -1])

    solver = SparseTriSolver(n)
    x1 = solver.solve(mat, b)
    x2 = solver.solve(mat, b)
    assert x1 == x2
    assert x1.indices == sorted(x1.indices)
    assert x1.to_set() == solve_sparse(mat, b)

    # Other solves in between leave no trace
    solver.solve(mat, SparseVector(n, [0], [5]))
    assert solver.solve(mat, b) == x1

    with pytest.raises(MatrixDimError):
        solver.solve(random_triangular(rng, n + 1).view(Axis.cols), SparseVector(n + 1, [0], [1]))


def test_solver_upper():
    m = SparseMatrix.from_entries([(0, 0, 1), (0, 1, 2), (1, 1, 1), (1, 3, 3), (2, 2, 2), (3, 3, 1)])
    solver = SparseTriSolver(4)
    x = solver.solve(m.view(Axis.cols), SparseVector(4, [3], [2]), lower=False)
    assert x == SparseVector(4, [0, 1, 3], [12, -6, 2])
