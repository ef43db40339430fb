class BarrierError(Exception):
    """Base class of every error raised by a `Barrier`."""


class InvalidArgumentError(BarrierError, ValueError):
    """
    A count passed to a barrier operation is out of range.

    Raised for a negative initial count, a negative `acquire` amount or a `release`
    amount outside of `(0, value]`.
    The barrier is left untouched.
    """

    operation: str
    n: int
    value: int

    def __init__(self, operation: str, n: int, value: int):
        super().__init__(f"invalid argument for {operation}: {n} (value is {value})")
        self.operation = operation
        self.n = n
        self.value = value


class BarrierNotSetError(BarrierError, RuntimeError):
    """`release` was called on a barrier that holds nothing."""

    value: int

    def __init__(self, value: int = 0):
        super().__init__("barrier not set")
        self.value = value
