"""Event subscription multiplexing.

The simulator allows exactly one subscription per protocol ID and has no
notion of multiple handlers. EventMultiplexer maps each logical event name to
a single protocol subscription and fans inbound events out to any number of
local handlers.

Typical usage:
    mux = EventMultiplexer(allocator, transport.subscribe_to_system_event)
    await mux.add_listener("Pause", on_pause)
    mux.dispatch(event.request_id, event.data)
    mux.remove_listener("Pause", on_pause)
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from msfs_api.core.ids import ResourceIdAllocator

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]
SubscribeFn = Callable[[int, str], Awaitable[None]]


@dataclass
class Subscription:
    """One protocol-level subscription shared by every local handler.

    The last dispatched value is kept so that handlers registered later can
    be brought up to date immediately, without waiting for the next event.

    Attributes:
        name: Logical event name.
        protocol_id: ID the subscription was registered under.
        handlers: Handlers in registration order.
        last_value: Most recently dispatched value (valid if has_value).
        has_value: True once at least one value was dispatched.
    """

    name: str
    protocol_id: int
    handlers: list[EventHandler] = field(default_factory=list)
    last_value: Any = None
    has_value: bool = False

    def record(self, value: Any) -> None:
        """Store a dispatched value as the last known value."""
        self.last_value = value
        self.has_value = True


class EventMultiplexer:
    """Maps logical event names onto single protocol subscriptions.

    Subscriptions are created on first listener registration and are never
    unsubscribed from the protocol; removing the last handler only empties the
    local handler list.
    """

    def __init__(self, allocator: ResourceIdAllocator, subscribe: SubscribeFn) -> None:
        """Initialize multiplexer.

        Args:
            allocator: Allocator used to reserve subscription IDs.
            subscribe: Coroutine function issuing the protocol subscribe call
                for (protocol_id, event_name).
        """
        self._allocator = allocator
        self._subscribe = subscribe
        self._by_name: dict[str, Subscription] = {}
        self._by_id: dict[int, Subscription] = {}

    def get(self, name: str) -> Subscription | None:
        """Get the subscription for a logical event name."""
        return self._by_name.get(name)

    def handles(self, protocol_id: int) -> bool:
        """Check whether a protocol ID belongs to a subscription."""
        return protocol_id in self._by_id

    @property
    def subscription_count(self) -> int:
        """Number of protocol subscriptions created so far."""
        return len(self._by_name)

    def register(self, name: str, protocol_id: int) -> Subscription:
        """Register a channel that was subscribed by other means.

        Used for protocol streams that are not plain system events (e.g. the
        airport range notifications), so that listeners can attach to them by
        name like any other event.

        Args:
            name: Logical event name.
            protocol_id: ID the channel was subscribed under.

        Returns:
            The subscription entry.
        """
        subscription = Subscription(name=name, protocol_id=protocol_id)
        self._by_name[name] = subscription
        self._by_id[protocol_id] = subscription
        return subscription

    async def add_listener(self, name: str, handler: EventHandler) -> Subscription:
        """Add a handler for a logical event.

        The first handler for a name causes exactly one protocol subscribe.
        Later handlers are appended and, if a value was already dispatched,
        immediately called with that value.

        Args:
            name: Logical event name.
            handler: Callable receiving the event data.

        Returns:
            The subscription the handler was attached to.
        """
        subscription = self._by_name.get(name)

        if subscription is None:
            protocol_id = self._allocator.next_id()
            subscription = self.register(name, protocol_id)
            subscription.handlers.append(handler)
            try:
                await self._subscribe(protocol_id, name)
            except Exception:
                del self._by_name[name]
                del self._by_id[protocol_id]
                self._allocator.release_id(protocol_id)
                raise
            logger.debug("Subscribed to %s with id %d", name, protocol_id)
            return subscription

        subscription.handlers.append(handler)
        if subscription.has_value:
            handler(subscription.last_value)
        return subscription

    def remove_listener(self, name: str, handler: EventHandler) -> bool:
        """Remove the first registration of a handler.

        Args:
            name: Logical event name.
            handler: Handler to remove.

        Returns:
            True if a handler was removed.
        """
        subscription = self._by_name.get(name)
        if subscription is None:
            return False

        for index, registered in enumerate(subscription.handlers):
            if registered is handler:
                del subscription.handlers[index]
                return True
        return False

    def dispatch(self, protocol_id: int, data: Any) -> bool:
        """Deliver inbound event data to every handler of its subscription.

        Args:
            protocol_id: ID carried by the inbound event.
            data: Event payload.

        Returns:
            True if the ID matched a subscription.
        """
        subscription = self._by_id.get(protocol_id)
        if subscription is None:
            logger.error("Handling data for id %d without an event handler entry", protocol_id)
            return False

        subscription.record(data)
        for handler in list(subscription.handlers):
            handler(data)
        return True
