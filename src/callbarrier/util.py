import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from .barrier import Barrier


def releaser(barrier: Barrier, n: int | None = None) -> Callable[..., None]:
    """
    Acquire the barrier and return a completion callback that releases it again.

    The callback accepts and ignores any arguments so it can be handed directly to
    APIs that pass results to their callbacks.
    It may only be called once.
    """
    barrier.acquire(n)
    called = False

    def release(*_args: Any, **_kwargs: Any):
        nonlocal called
        if called:
            raise RuntimeError("completion callback already called")
        called = True
        barrier.release(n)

    return release


def wait_async(barrier: Barrier) -> asyncio.Future[None]:
    """
    Wait on the barrier from a coroutine.

    The returned future belongs to the running event loop and completes as soon as
    the barrier drains it, or immediately if the barrier is not set.
    Cancelling the future does not unregister it from the barrier.
    """
    future = asyncio.get_running_loop().create_future()

    def resolve():
        if not future.done():
            future.set_result(None)

    barrier.wait(resolve)
    return future


@contextmanager
def held(barrier: Barrier, n: int | None = None) -> Iterator[Barrier]:
    """Hold the barrier for the duration of the `with` block."""
    barrier.acquire(n)
    try:
        yield barrier
    finally:
        barrier.release(n)
