"""
Sparse triangular solves.

Forward and backward substitution against dense right-hand sides,
in either compressed-row or compressed-column storage,
and sparse right-hand-side solves which first find the solution's nonzero pattern.
"""

import logging as _logging

from .errors import (MatrixError, MatrixDimError, StorageMismatch, StackError,
                     SolveError, SingularMatrix, BadStorageType, InexactDivision)
from .field import Field, INTEGER, REAL, RATIONAL
from .matrix import Axis, Element, SparseMatrix, CsMatView
from .vector import SparseVector
from .stack import Visit, StackVal, DependencyStack
from .eliminate import find_diagonal, eliminate_column
from .dense import (lsolve_csr_dense_rhs, lsolve_csc_dense_rhs,
                    usolve_csc_dense_rhs, usolve_csr_dense_rhs, solve_triangular)
from .reach import elimination_order
from .spsolve import numeric_solve, lsolve_csc_sparse_rhs, usolve_csc_sparse_rhs, SparseTriSolver

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
