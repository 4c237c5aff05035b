"""
Triangular solves against dense right-hand sides.

All four solvers work in place: `rhs` holds b on entry, and x on return.
None of them check that the matrix is actually triangular;
entries on the wrong side of the diagonal are skipped.

Without an explicit `field`, integer data is solved exactly into `Fraction`s.
An integer ndarray `rhs` can only take integer results: those solves use
`INTEGER`, and raise `InexactDivision` on a remainder.
"""

import logging
from typing import Optional

import numpy as np

from .errors import MatrixDimError, StorageMismatch, SingularMatrix
from .field import Field, REAL, RATIONAL
from .matrix import CsMatView
from .eliminate import eliminate_column

logger = logging.getLogger(__name__)


def check_solver_dimensions(tri_mat: CsMatView, rhs):
    MatrixDimError.assert_eq(tri_mat.rows, tri_mat.cols, "Non square matrix passed to solver")
    MatrixDimError.assert_eq(tri_mat.cols, len(rhs), "Dimension mismatch")


def _field_for(tri_mat: CsMatView, rhs, field: Optional[Field]) -> Field:
    if field is not None:
        return field
    return Field.infer_for(rhs, tri_mat.data, rhs)


def lsolve_csr_dense_rhs(lower_tri_mat: CsMatView, rhs, field: Optional[Field] = None):
    """ Solve a lower triangular system, given a CSR matrix.

    Relies on the decomposition
    | L_0_0    0     | | x_0 |    | b_0 |
    | l_1_0^T  l_1_1 | | x_1 |  = | b_1 |
    At each row x_0 is already known, and x_1 = (b_1 - l_1_0^T.x_0) / l_1_1 """
    check_solver_dimensions(lower_tri_mat, rhs)
    StorageMismatch.assert_true(lower_tri_mat.is_csr(), "Storage mismatch: expected CSR")
    field = _field_for(lower_tri_mat, rhs, field)

    for row_ind, row in lower_tri_mat.outer_iterator():
        diag_val = field.zero
        x = rhs[row_ind]
        for col_ind, val in row:
            if col_ind == row_ind:
                diag_val = val
                continue
            if col_ind > row_ind:
                continue
            x = field.sub(x, field.mul(val, rhs[col_ind]))
        if field.is_zero(diag_val):
            logger.debug(f"Zero pivot in row {row_ind}")
            raise SingularMatrix(row_ind)
        rhs[row_ind] = field.div(x, diag_val)


def lsolve_csc_dense_rhs(lower_tri_mat: CsMatView, rhs, field: Optional[Field] = None):
    """ Solve a lower triangular system, given a CSC matrix.

    Relies on the decomposition
    | l_0_0    0     | | x_0 |    | b_0 |
    | l_1_0    L_1_1 | | x_1 |  = | b_1 |
    Each column computes x_0 = b_0 / l_0_0,
    and leaves the reduced system L_1_1 x_1 = b_1 - x_0 * l_1_0 """
    check_solver_dimensions(lower_tri_mat, rhs)
    StorageMismatch.assert_true(lower_tri_mat.is_csc(), "Storage mismatch: expected CSC")
    field = _field_for(lower_tri_mat, rhs, field)

    for col_ind, col in lower_tri_mat.outer_iterator():
        eliminate_column(col, col_ind, rhs, field, lower=True, sorted_indices=lower_tri_mat.sorted_indices)


def usolve_csc_dense_rhs(upper_tri_mat: CsMatView, rhs, field: Optional[Field] = None):
    """ Solve an upper triangular system, given a CSC matrix.

    Relies on the decomposition
    | U_0_0    u_0_1 | | x_0 |    | b_0 |
    |   0      u_1_1 | | x_1 |  = | b_1 |
    Columns are walked backwards. Each computes x_1 = b_1 / u_1_1,
    and leaves the reduced system U_0_0 x_0 = b_0 - x_1 * u_0_1 """
    check_solver_dimensions(upper_tri_mat, rhs)
    StorageMismatch.assert_true(upper_tri_mat.is_csc(), "Storage mismatch: expected CSC")
    field = _field_for(upper_tri_mat, rhs, field)

    for col_ind in reversed(range(upper_tri_mat.outer_dims)):
        col = upper_tri_mat.outer_view(col_ind)
        eliminate_column(col, col_ind, rhs, field, lower=False, sorted_indices=upper_tri_mat.sorted_indices)


def usolve_csr_dense_rhs(upper_tri_mat: CsMatView, rhs, field: Optional[Field] = None):
    """ Solve an upper triangular system, given a CSR matrix.

    Relies on the decomposition
    | u_0_0    u_0_1^T | | x_0 |    | b_0 |
    |   0      U_1_1   | | x_1 |  = | b_1 |
    Rows are walked backwards, so x_1 is known from prior rows, and
    x_0 = (b_0 - u_0_1^T.x_1) / u_0_0 """
    check_solver_dimensions(upper_tri_mat, rhs)
    StorageMismatch.assert_true(upper_tri_mat.is_csr(), "Storage mismatch: expected CSR")
    field = _field_for(upper_tri_mat, rhs, field)

    for row_ind in reversed(range(upper_tri_mat.outer_dims)):
        diag_val = field.zero
        x = rhs[row_ind]
        for col_ind, val in upper_tri_mat.outer_view(row_ind):
            if col_ind == row_ind:
                diag_val = val
                continue
            if col_ind < row_ind:
                continue
            x = field.sub(x, field.mul(val, rhs[col_ind]))
        if field.is_zero(diag_val):
            logger.debug(f"Zero pivot in row {row_ind}")
            raise SingularMatrix(row_ind)
        rhs[row_ind] = field.div(x, diag_val)


def solve_triangular(tri_mat: CsMatView, b, lower: bool = True, field: Optional[Field] = None):
    """ Solve the equation `A x = b` for `x`, assuming `A` is triangular.

    Parameters
    ----------
    tri_mat : CsMatView
        Square triangular matrix, in either CSR or CSC storage.
    b : list or 1-D ndarray
        Right-hand side. Not modified.
    lower : bool, optional
        Whether `tri_mat` is lower or upper triangular. Default: lower.
    field : Field, optional
        Numeric field to compute in. Inferred from `tri_mat` and `b` if omitted.

    Returns
    -------
    x : list or ndarray, matching the type of `b`.
    """
    if field is None:
        field = Field.infer(tri_mat.data, b)
    if isinstance(b, np.ndarray):
        if field is REAL and b.dtype.kind in "iub":
            x = b.astype(float)
        elif field is RATIONAL and b.dtype.kind != "O":
            x = b.astype(object)
        else:
            x = b.copy()
    else:
        x = list(b)

    if lower and tri_mat.is_csr():
        lsolve_csr_dense_rhs(tri_mat, x, field)
    elif lower:
        lsolve_csc_dense_rhs(tri_mat, x, field)
    elif tri_mat.is_csr():
        usolve_csr_dense_rhs(tri_mat, x, field)
    else:
        usolve_csc_dense_rhs(tri_mat, x, field)
    return x
