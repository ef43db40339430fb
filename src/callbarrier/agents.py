import asyncio
import logging
import random
from asyncio import Event
from collections.abc import Callable
from typing import Any

import mango

from .barrier import Barrier, DrainOrder
from .ids import RequestId
from .messages import ProbeRequest, ProbeResponse
from .util import held

ADDRESS = ("localhost", 5555)
log = logging.getLogger(__name__)

Neighbors = set[mango.AgentAddress]
OnDone = Callable[[list[ProbeResponse]], Any]


class Agent(mango.Agent):
    """
    Base agent class extending the Mango Agent with logging and message dispatch.

    Requests are answered from async handlers so they can use `send_message`.
    Responses are plain callbacks, they only need to update bookkeeping.
    """

    neighbors: Neighbors

    resolved: Event
    """
    Set once the agent has nothing left to do.

    Using this event allows external code to properly wait until every agent is done
    working.
    """

    def __init__(self, *, neighbors: Neighbors | None = None):
        super().__init__()
        self.neighbors = neighbors or set()
        self.resolved = Event()

    def log(self, *msg):
        """
        Log a message with the agent aid prefixed.

        Multiple messages are logged as indented lines below the aid.
        """
        match len(msg):
            case 1:
                log.info("%s: %s", self.aid, msg[0])
            case _:
                log.info("%s:\n%s", self.aid, "\n".join(f"\t{m}" for m in msg))

    def handle_message(self, content: Any, meta: dict[str, Any]):
        match content:
            case ProbeRequest():
                self.schedule_instant_task(self.handle_probe_request(content, meta))
            case ProbeResponse():
                self.handle_probe_response(content, meta)

    async def handle_probe_request(
        self, request: ProbeRequest, meta: dict[str, Any]
    ): ...

    def handle_probe_response(self, response: ProbeResponse, meta: dict[str, Any]): ...


class EchoAgent(Agent):
    """Answers every probe with its transformed payload after `delay` seconds."""

    transform: Callable[[Any], Any]
    delay: float

    def __init__(
        self,
        *,
        neighbors: Neighbors | None = None,
        transform: Callable[[Any], Any] | None = None,
        delay: float = 0.0,
    ):
        super().__init__(neighbors=neighbors)
        self.transform = transform or (lambda payload: payload)
        self.delay = delay
        # echo agents have no work of their own
        self.resolved.set()

    async def handle_probe_request(self, request, meta):
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        response = ProbeResponse.from_request(
            request, self.aid, self.transform(request.payload)
        )
        await self.send_message(response, mango.sender_addr(meta))


class GatherAgent(Agent):
    """
    Agent fanning a probe out to all neighbors and collecting the responses.

    Every outstanding request holds one unit of a per-request `Barrier`, every
    response releases one.
    The completion callback is registered with `Barrier.wait` and therefore runs
    exactly once, right after the last response arrived.
    """

    pending: dict[RequestId, tuple[Barrier, list[ProbeResponse]]]
    order: DrainOrder
    payload: Any
    auto_gather: bool
    responses: list[ProbeResponse] | None

    def __init__(
        self,
        *,
        neighbors: Neighbors | None = None,
        payload: Any = None,
        auto_gather: bool = False,
        order: DrainOrder = DrainOrder.LIFO,
    ):
        super().__init__(neighbors=neighbors)
        self.pending = {}
        self.order = order
        self.payload = payload
        self.auto_gather = auto_gather
        self.responses = None

    def on_ready(self):
        if not self.auto_gather:
            return

        def done(responses: list[ProbeResponse]):
            self.responses = responses
            self.resolved.set()
            self.log(f"Gathered {len(responses)} response(s).")

        self.schedule_instant_task(self.gather(self.payload, done))
        self.log("Gathering...")

    async def gather(self, payload: Any, on_done: OnDone) -> RequestId:
        """
        Send a `ProbeRequest` to every neighbor and call `on_done` with all responses.

        :return: id of the sent request
        """
        request = ProbeRequest(rid=RequestId(), payload=payload)
        barrier = Barrier(order=self.order)
        self.pending[request.rid] = (barrier, [])

        try:
            # hold the barrier while sending, responses may arrive before the last send
            with held(barrier):
                for neighbor in self.neighbors:
                    barrier.acquire()
                    if not await self.send_message(request, neighbor):
                        # undeliverable, no response will ever release this unit
                        self.log(f"Could not deliver {request.rid} to {neighbor}.")
                        barrier.release()
                barrier.wait(self._finish, request.rid, on_done)
        except Exception:
            self.pending.pop(request.rid, None)
            raise

        return request.rid

    def _finish(self, rid: RequestId, on_done: OnDone):
        if rid not in self.pending:
            # abandoned while still sending
            return
        _, responses = self.pending.pop(rid)
        on_done(responses)

    def abandon(self, rid: RequestId | None = None) -> list[ProbeResponse]:
        """
        Stop waiting for the responses of `rid`, or of every pending request.

        The completion callbacks of abandoned requests are never called and responses
        arriving later are dropped.

        :return: the responses received so far
        """
        rids = [rid] if rid is not None else list(self.pending)
        responses = []
        for key in rids:
            _, received = self.pending.pop(key)
            responses.extend(received)
        return responses

    def handle_probe_response(self, response, meta):
        if response.rid not in self.pending:
            self.log(f"Dropping response to unknown request {response.rid}.")
            return

        barrier, responses = self.pending[response.rid]
        responses.append(response)
        barrier.release()


async def run_gather(
    workers: int,
    payload: Any = None,
    *,
    addr: tuple[str, int] = ADDRESS,
    delay: float = 0.0,
    transform: Callable[[Any], Any] | None = None,
    timeout: float | None = 10,
) -> list[ProbeResponse]:
    """
    Run one `GatherAgent` against `workers` `EchoAgent`s until the gather resolved.

    Each echo agent answers after a random delay in `[0, delay]` so responses arrive
    in arbitrary order.
    If not every response arrived within `timeout` seconds, the gather is abandoned
    and the responses received so far are returned.

    :return: responses sorted by sender
    """
    container = mango.create_tcp_container(addr=addr, copy_internal_messages=True)

    echoes = [
        container.register(
            EchoAgent(transform=transform, delay=random.uniform(0, delay)),
            f"echo-{i}",
        )
        for i in range(workers)
    ]
    gatherer = container.register(
        GatherAgent(
            neighbors={echo.addr for echo in echoes},
            payload=payload,
            auto_gather=True,
        ),
        "gather",
    )

    async with mango.activate(container):
        try:
            await asyncio.wait_for(gatherer.resolved.wait(), timeout=timeout)
            responses = gatherer.responses
        except TimeoutError:
            log.warning("gather timed out, returning intermediate results")
            responses = gatherer.abandon()

    return sorted(responses, key=lambda response: response.sender)
