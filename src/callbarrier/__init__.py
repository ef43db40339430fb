from .barrier import Barrier, Continuation, DrainOrder
from .errors import BarrierError, BarrierNotSetError, InvalidArgumentError
from .util import held, releaser, wait_async

__all__ = [
    "Barrier",
    "BarrierError",
    "BarrierNotSetError",
    "Continuation",
    "DrainOrder",
    "InvalidArgumentError",
    "held",
    "releaser",
    "wait_async",
]
