from bisect import bisect_left
from operator import itemgetter
from typing import List, Optional, Tuple

from .errors import SingularMatrix
from .field import Field


def find_diagonal(column: List[Tuple[int, object]], pivot: int, sorted_indices: bool = False) -> Optional[object]:
    """ Find the value at inner index `pivot` in `column`, or None.
    Binary search if the column is known to be sorted, otherwise a linear scan. """
    if sorted_indices:
        pos = bisect_left(column, pivot, key=itemgetter(0))
        if pos < len(column) and column[pos][0] == pivot:
            return column[pos][1]
        return None
    for ind, val in column:
        if ind == pivot:
            return val
    return None


def eliminate_column(column: List[Tuple[int, object]],
                     pivot: int,
                     workspace,
                     field: Field,
                     lower: bool = True,
                     sorted_indices: bool = False):
    """ Solve for unknown `pivot` and propagate it through its column.

    Divides `workspace[pivot]` by the diagonal entry, then subtracts its scaled column entries
    from every dependent row: rows below the pivot if `lower`, above it otherwise.
    Entries on the other side of the diagonal are ignored.
    Raises `SingularMatrix` if the diagonal is missing or zero. """

    diag_val = find_diagonal(column, pivot, sorted_indices)
    if diag_val is None or field.is_zero(diag_val):
        raise SingularMatrix(pivot)

    x = field.div(workspace[pivot], diag_val)
    workspace[pivot] = x
    for row_ind, val in column:
        if lower and row_ind <= pivot:
            continue
        if not lower and row_ind >= pivot:
            continue
        workspace[row_ind] = field.sub(workspace[row_ind], field.mul(val, x))
