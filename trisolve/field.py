"""
Numeric fields the solvers compute over.

A `Field` bundles the additive identity and the four operations the
substitution algorithms need, so one implementation serves exact integer,
rational and floating-point element types alike.
"""

import numbers
import operator
from fractions import Fraction
from typing import Any, Callable

import numpy as np

from .errors import InexactDivision


class Field(object):
    def __init__(self,
                 name: str,
                 zero: Any,
                 div: Callable,
                 sub: Callable = operator.sub,
                 mul: Callable = operator.mul):
        self.name = name
        self.zero = zero
        self.div = div
        self.sub = sub
        self.mul = mul

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.name})>"

    def is_zero(self, x) -> bool:
        return x == self.zero

    @classmethod
    def infer(cls, *seqs) -> "Field":
        """ Pick a field able to hold every element of `seqs`, and every quotient of them.
        Integral and `Fraction` data solve exactly, as rationals; anything else as reals.
        `INTEGER` is never inferred, and must be asked for. """
        for seq in seqs:
            if _is_real(seq):
                return REAL
        return RATIONAL

    @classmethod
    def infer_for(cls, buf, *seqs) -> "Field":
        """ Like `infer`, for results written into `buf` in place.
        The contents of `buf` are not inspected, only its type: an integer ndarray
        can't hold fractions, so it gets `INTEGER`, which raises rather than truncate. """
        field = cls.infer(*seqs)
        if field is RATIONAL and isinstance(buf, np.ndarray) and buf.dtype.kind in "iub":
            return INTEGER
        return field


def _is_real(seq) -> bool:
    """ Whether `seq` holds anything beyond integers and `Fraction`s """
    if isinstance(seq, np.ndarray) and seq.dtype.kind != "O":
        return seq.dtype.kind not in "iub"
    for x in seq:
        if not isinstance(x, (bool, numbers.Integral, Fraction)):
            return True
    return False


def _exact_div(a, b):
    q, r = divmod(a, b)
    if r != 0:
        raise InexactDivision(a, b)
    return q


def _fraction_div(a, b):
    return Fraction(a) / Fraction(b)


INTEGER = Field("integer", zero=0, div=_exact_div)
REAL = Field("real", zero=0.0, div=operator.truediv)
RATIONAL = Field("rational", zero=Fraction(0), div=_fraction_div)
