import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import BarrierNotSetError, InvalidArgumentError

log = logging.getLogger(__name__)


class DrainOrder(Enum):
    LIFO = "lifo"
    FIFO = "fifo"


@dataclass
class Continuation:
    callback: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __call__(self):
        self.callback(*self.args, **self.kwargs)


class Barrier:
    """
    Counting barrier for callback driven code.

    Acquire the barrier before starting an asynchronous operation and release it in
    the completion callback of that operation.
    Once every acquired unit has been released, the waiting callbacks are called one
    after another until either none are left or one of them acquires the barrier
    again.

    Example::

        barrier = Barrier()
        barrier.acquire(2)
        start_download(url_a, on_done=lambda _: barrier.release())
        start_download(url_b, on_done=lambda _: barrier.release())
        barrier.wait(print, "both downloads finished")

    Nothing here blocks, every operation returns after its bookkeeping and the
    callbacks it had to call.
    The barrier is not thread safe.
    """

    value: int
    waiting: deque[Continuation]
    order: DrainOrder

    def __init__(self, n: int = 0, *, order: DrainOrder = DrainOrder.LIFO):
        if not isinstance(n, int) or n < 0:
            raise InvalidArgumentError("init", n, 0)
        self.value = n
        self.waiting = deque()
        self.order = order

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(value={self.value}, "
            f"waiting={len(self.waiting)}, order={self.order.value})"
        )

    def is_set(self) -> bool:
        """Check if any acquired unit is still outstanding."""
        return self.value > 0

    def acquire(self, n: int | None = None) -> int:
        """
        Acquire the barrier, once without an argument or `n` times.

        `n` has to be a non-negative integer, 0 leaves the count as it is.
        Acquiring from inside a waiting callback stops the current drain.

        :return: the new count
        """
        if n is None:
            self.value += 1
        elif isinstance(n, int) and n >= 0:
            self.value += n
        else:
            raise InvalidArgumentError("acquire", n, self.value)
        return self.value

    def release(self, n: int | None = None):
        """
        Release the barrier, once without an argument or `n` times.

        `n` has to be an integer in `(0, value]`.
        If nothing is held afterwards, the waiting callbacks are called.
        An exception raised by one of them propagates to the caller, the callbacks
        that did not run yet stay queued.
        """
        if not self.is_set():
            raise BarrierNotSetError(self.value)
        if n is None:
            self.value -= 1
        elif isinstance(n, int) and 0 < n <= self.value:
            self.value -= n
        else:
            raise InvalidArgumentError("release", n, self.value)

        if not self.is_set():
            self._drain()

    def wait(self, fn: Callable[..., Any], *args: Any, **kwargs: Any):
        """
        Call `fn` with the given arguments once all acquired units are released.

        If the barrier is not set, `fn` is called right away before `wait` returns.
        """
        if self.is_set():
            self.waiting.append(Continuation(fn, args, kwargs))
        else:
            fn(*args, **kwargs)

    def _drain(self):
        if self.waiting:
            log.debug("draining %d waiting callback(s)", len(self.waiting))

        # callbacks may acquire, release or wait on this barrier, so the condition
        # has to be checked against the live queue after every call
        while not self.is_set() and self.waiting:
            match self.order:
                case DrainOrder.LIFO:
                    continuation = self.waiting.pop()
                case DrainOrder.FIFO:
                    continuation = self.waiting.popleft()
            continuation()

        if self.waiting:
            log.debug("drain halted with %d callback(s) left", len(self.waiting))
