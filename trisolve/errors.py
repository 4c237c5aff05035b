"""
Error taxonomy.

`MatrixError` and its subclasses flag caller bugs: bad shapes, the wrong
storage passed to a dense solver, misuse of the dependency stack.
`SolveError` and its subclasses are properties of the numeric data and are
expected to be handled by the caller.
"""


class MatrixError(Exception):
    @classmethod
    def assert_true(cls, cond, msg: str = ""):
        if not cond:
            raise cls(msg)

    @classmethod
    def assert_eq(cls, x, y, msg: str = ""):
        if x != y:
            raise cls(msg or f"{x!r} != {y!r}")

    @classmethod
    def assert_not_eq(cls, x, y, msg: str = ""):
        if x == y:
            raise cls(msg or f"{x!r} == {y!r}")

    @classmethod
    def assert_is(cls, x, y, msg: str = ""):
        if x is not y:
            raise cls(msg)

    @classmethod
    def assert_is_not(cls, x, y, msg: str = ""):
        if x is y:
            raise cls(msg)


class MatrixDimError(MatrixError): pass


class StorageMismatch(MatrixError): pass


class StackError(MatrixError): pass


class SolveError(Exception): pass


class SingularMatrix(SolveError):
    """ Pivot `pivot` is either missing or zero. """

    def __init__(self, pivot: int):
        super().__init__(f"Singular matrix: missing or zero pivot at index {pivot}")
        self.pivot = pivot


class BadStorageType(SolveError): pass


class InexactDivision(SolveError):
    """ Integer-only arithmetic hit a quotient with a remainder. """

    def __init__(self, num, den):
        super().__init__(f"{num} is not divisible by {den}")
        self.num = num
        self.den = den
