"""Request/response correlation for one-shot protocol operations.

Every one-shot operation reserves a protocol ID, registers interest in the
inbound events carrying that ID, and suspends the caller until a matching
response arrives. Multi-part responses (paginated lists, facility records)
are consumed as streams instead.

Typical usage:
    correlator = RequestCorrelator(allocator, default_timeout=30.0)

    async def issue(request_id: int) -> None:
        await transport.request_data_on_sim_object(request_id, request_id)

    value = await correlator.request((SimObjectData,), issue, decode)

    # Inbound events are fed from the transport listener:
    correlator.dispatch(event)
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from msfs_api.core.errors import RequestTimeoutError
from msfs_api.core.ids import ResourceIdAllocator

logger = logging.getLogger(__name__)

IssueFn = Callable[[int], Awaitable[None]]
CleanupFn = Callable[[int], Awaitable[None]]
MatchFn = Callable[[Any], Any]

# Returned by a match function to keep waiting for more events.
INCOMPLETE = object()


@dataclass
class PendingRequest:
    """An in-flight operation waiting for inbound events.

    Exactly one of future (one-shot requests) or queue (streams) is set.

    Attributes:
        request_id: Protocol ID the operation was issued under.
        kinds: Inbound event classes this operation accepts.
        on_match: Converts a matching event into the result, or INCOMPLETE.
        future: Completed once with the result of a one-shot request.
        queue: Receives every matching event of a stream.
    """

    request_id: int
    kinds: tuple[type, ...]
    on_match: MatchFn | None = None
    future: asyncio.Future | None = None
    queue: asyncio.Queue | None = None

    def accepts(self, event: Any) -> bool:
        """Check whether an inbound event belongs to this operation."""
        return isinstance(event, self.kinds)


class EventStream:
    """Sequential reader over the inbound events of one streamed request."""

    def __init__(self, pending: PendingRequest, timeout: float | None) -> None:
        self._pending = pending
        self._timeout = timeout

    @property
    def request_id(self) -> int:
        """Protocol ID the stream is bound to."""
        return self._pending.request_id

    async def next(self, timeout: float | None = None) -> Any:
        """Wait for the next matching event.

        Args:
            timeout: Seconds to wait; defaults to the stream timeout.
                None on both means wait indefinitely.

        Returns:
            The next inbound event for this request.

        Raises:
            RequestTimeoutError: If no event arrived in time.
        """
        if self._pending.queue is None:
            raise RuntimeError(f"Request {self.request_id} is not a stream")
        limit = timeout if timeout is not None else self._timeout
        if limit is None:
            return await self._pending.queue.get()
        try:
            return await asyncio.wait_for(self._pending.queue.get(), limit)
        except TimeoutError:
            raise RequestTimeoutError(self.request_id, limit) from None


class RequestCorrelator:
    """Tracks in-flight operations and resolves them from inbound events.

    Responses are matched strictly by protocol ID, so concurrent requests on
    different IDs never resolve each other. All methods must be called from
    the event loop thread.
    """

    def __init__(
        self,
        allocator: ResourceIdAllocator,
        default_timeout: float | None = 30.0,
    ) -> None:
        """Initialize correlator.

        Args:
            allocator: Allocator used to reserve request IDs.
            default_timeout: Seconds to wait for a response when the caller
                does not pass a timeout. None waits indefinitely.
        """
        self._allocator = allocator
        self.default_timeout = default_timeout
        self._pending: dict[int, PendingRequest] = {}
        self._cleanup_tasks: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        """Number of operations waiting for a response."""
        return len(self._pending)

    def is_pending(self, request_id: int) -> bool:
        """Check whether an ID has an operation waiting on it."""
        return request_id in self._pending

    async def request(
        self,
        kinds: tuple[type, ...],
        issue: IssueFn,
        on_match: MatchFn,
        cleanup: CleanupFn | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Issue a one-shot operation and wait for its response.

        Args:
            kinds: Inbound event classes that may answer this request.
            issue: Coroutine function performing the protocol call for the
                reserved ID. If it raises, the ID is released and the error
                propagates.
            on_match: Called with each matching event; returns the result, or
                INCOMPLETE to keep waiting.
            cleanup: Coroutine function run before the ID is released
                (e.g. clearing a data definition).
            timeout: Seconds to wait; defaults to default_timeout.

        Returns:
            Whatever on_match returned for the completing event.

        Raises:
            RequestTimeoutError: If no completing response arrived in time.
        """
        request_id = self._allocator.next_id()
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = PendingRequest(
            request_id=request_id,
            kinds=kinds,
            on_match=on_match,
            future=future,
        )
        limit = timeout if timeout is not None else self.default_timeout

        try:
            await issue(request_id)
            if limit is None:
                return await future
            try:
                return await asyncio.wait_for(future, limit)
            except TimeoutError:
                logger.warning("Request %d timed out after %.1fs", request_id, limit)
                raise RequestTimeoutError(request_id, limit) from None
        finally:
            self._pending.pop(request_id, None)
            await self._finish(request_id, cleanup)

    @asynccontextmanager
    async def stream(
        self,
        kinds: tuple[type, ...],
        issue: IssueFn,
        cleanup: CleanupFn | None = None,
        timeout: float | None = None,
    ) -> AsyncIterator[EventStream]:
        """Issue an operation whose response spans several inbound events.

        Events are queued in arrival order and read with EventStream.next().
        Leaving the context unregisters the stream, runs cleanup and releases
        the ID.

        Args:
            kinds: Inbound event classes belonging to the response.
            issue: Coroutine function performing the protocol call.
            cleanup: Coroutine function run before the ID is released.
            timeout: Per-event wait in seconds; defaults to default_timeout.

        Yields:
            EventStream bound to the reserved ID.
        """
        request_id = self._allocator.next_id()
        pending = PendingRequest(request_id=request_id, kinds=kinds, queue=asyncio.Queue())
        self._pending[request_id] = pending
        limit = timeout if timeout is not None else self.default_timeout

        try:
            await issue(request_id)
            yield EventStream(pending, limit)
        finally:
            self._pending.pop(request_id, None)
            await self._finish(request_id, cleanup)

    async def fire_and_forget(
        self,
        issue: IssueFn,
        cleanup: CleanupFn | None,
        cleanup_delay: float,
    ) -> int:
        """Issue an operation that gets no acknowledgment.

        The ID stays reserved for cleanup_delay seconds, which must exceed the
        worst-case time the simulator needs to consume the payload, then
        cleanup runs and the ID is released.

        Args:
            issue: Coroutine function performing the protocol call. If it
                raises, cleanup runs at once, the ID is released and the
                error propagates.
            cleanup: Coroutine function run after the delay.
            cleanup_delay: Seconds to wait before cleanup.

        Returns:
            The ID the operation was issued under.
        """
        request_id = self._allocator.next_id()
        try:
            await issue(request_id)
        except Exception:
            await self._finish(request_id, cleanup)
            raise

        task = asyncio.create_task(self._delayed_finish(request_id, cleanup, cleanup_delay))
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_tasks.discard)
        return request_id

    def dispatch(self, event: Any) -> bool:
        """Offer an inbound event to the operation waiting on its ID.

        Args:
            event: Inbound event with a request_id attribute.

        Returns:
            True if the event was consumed by a pending operation.
        """
        pending = self._pending.get(getattr(event, "request_id", -1))
        if pending is None or not pending.accepts(event):
            return False

        if pending.queue is not None:
            pending.queue.put_nowait(event)
            return True

        if pending.future is None or pending.on_match is None:
            raise RuntimeError(f"Request {pending.request_id} has no result future")
        if pending.future.done():
            return True

        try:
            result = pending.on_match(event)
        except Exception as e:
            del self._pending[pending.request_id]
            pending.future.set_exception(e)
            return True

        if result is INCOMPLETE:
            return True

        del self._pending[pending.request_id]
        pending.future.set_result(result)
        return True

    async def close(self) -> None:
        """Cancel every pending operation and scheduled cleanup."""
        for pending in list(self._pending.values()):
            if pending.future is not None and not pending.future.done():
                pending.future.cancel()
        self._pending.clear()

        tasks = list(self._cleanup_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _finish(self, request_id: int, cleanup: CleanupFn | None) -> None:
        """Run cleanup for an ID, then release it."""
        try:
            if cleanup is not None:
                await cleanup(request_id)
        except Exception as e:
            logger.error("Cleanup failed for id %d: %s", request_id, e)
        finally:
            self._allocator.release_id(request_id)

    async def _delayed_finish(
        self, request_id: int, cleanup: CleanupFn | None, delay: float
    ) -> None:
        """Wait out the write window, then clean up and release."""
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self._allocator.release_id(request_id)
            raise
        await self._finish(request_id, cleanup)
