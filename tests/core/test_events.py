"""Tests for event subscription multiplexing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from msfs_api.core.events import EventMultiplexer
from msfs_api.core.ids import ResourceIdAllocator


@pytest.fixture
def allocator() -> ResourceIdAllocator:
    """Create an allocator."""
    return ResourceIdAllocator()


@pytest.fixture
def subscribe() -> AsyncMock:
    """Create a mock protocol subscribe call."""
    return AsyncMock()


@pytest.fixture
def mux(allocator: ResourceIdAllocator, subscribe: AsyncMock) -> EventMultiplexer:
    """Create a multiplexer."""
    return EventMultiplexer(allocator, subscribe)


class TestAddListener:
    """Test listener registration."""

    @pytest.mark.asyncio
    async def test_first_listener_subscribes(
        self, mux: EventMultiplexer, subscribe: AsyncMock
    ) -> None:
        """Test that the first handler issues one subscribe."""
        subscription = await mux.add_listener("Pause", MagicMock())

        subscribe.assert_awaited_once_with(subscription.protocol_id, "Pause")
        assert mux.handles(subscription.protocol_id)

    @pytest.mark.asyncio
    async def test_two_listeners_share_one_subscription(
        self, mux: EventMultiplexer, subscribe: AsyncMock
    ) -> None:
        """Test that a second handler for the same name does not subscribe again."""
        first = await mux.add_listener("Pause", MagicMock())
        second = await mux.add_listener("Pause", MagicMock())

        assert subscribe.await_count == 1
        assert first is second
        assert len(first.handlers) == 2
        assert mux.subscription_count == 1

    @pytest.mark.asyncio
    async def test_distinct_names_get_distinct_ids(self, mux: EventMultiplexer) -> None:
        """Test that different events use different protocol IDs."""
        pause = await mux.add_listener("Pause", MagicMock())
        crash = await mux.add_listener("Crashed", MagicMock())

        assert pause.protocol_id != crash.protocol_id

    @pytest.mark.asyncio
    async def test_late_listener_receives_last_value(self, mux: EventMultiplexer) -> None:
        """Test that a handler added after a dispatch is called with the last value."""
        subscription = await mux.add_listener("Pause", MagicMock())
        mux.dispatch(subscription.protocol_id, 1)

        late = MagicMock()
        await mux.add_listener("Pause", late)

        late.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_falsy_last_value_is_replayed(self, mux: EventMultiplexer) -> None:
        """Test that a last value of 0 still reaches late handlers."""
        subscription = await mux.add_listener("Pause", MagicMock())
        mux.dispatch(subscription.protocol_id, 0)

        late = MagicMock()
        await mux.add_listener("Pause", late)

        late.assert_called_once_with(0)

    @pytest.mark.asyncio
    async def test_no_replay_before_first_dispatch(self, mux: EventMultiplexer) -> None:
        """Test that late handlers are not called when nothing was dispatched."""
        await mux.add_listener("Pause", MagicMock())
        late = MagicMock()
        await mux.add_listener("Pause", late)

        late.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_subscribe_rolls_back(
        self, allocator: ResourceIdAllocator, subscribe: AsyncMock
    ) -> None:
        """Test that a failing subscribe leaves no subscription and frees the ID."""
        subscribe.side_effect = RuntimeError("send failed")
        mux = EventMultiplexer(allocator, subscribe)

        with pytest.raises(RuntimeError):
            await mux.add_listener("Pause", MagicMock())

        assert mux.get("Pause") is None
        assert allocator.reserved_count == 0


class TestRemoveListener:
    """Test listener removal."""

    @pytest.mark.asyncio
    async def test_remove_stops_delivery(self, mux: EventMultiplexer) -> None:
        """Test that a removed handler is no longer called."""
        handler = MagicMock()
        subscription = await mux.add_listener("Pause", handler)

        assert mux.remove_listener("Pause", handler) is True
        mux.dispatch(subscription.protocol_id, 1)

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_only_first_registration(self, mux: EventMultiplexer) -> None:
        """Test that a handler registered twice is removed once per call."""
        handler = MagicMock()
        subscription = await mux.add_listener("Pause", handler)
        await mux.add_listener("Pause", handler)

        mux.remove_listener("Pause", handler)
        mux.dispatch(subscription.protocol_id, 1)

        handler.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_empty_subscription_is_kept(
        self, mux: EventMultiplexer, subscribe: AsyncMock
    ) -> None:
        """Test that removing the last handler keeps the protocol subscription."""
        handler = MagicMock()
        subscription = await mux.add_listener("Pause", handler)
        mux.remove_listener("Pause", handler)

        assert mux.get("Pause") is subscription
        await mux.add_listener("Pause", MagicMock())
        assert subscribe.await_count == 1

    def test_remove_unknown_returns_false(self, mux: EventMultiplexer) -> None:
        """Test removing from an unknown event."""
        assert mux.remove_listener("Nope", MagicMock()) is False


class TestDispatch:
    """Test inbound event delivery."""

    @pytest.mark.asyncio
    async def test_handlers_called_in_registration_order(self, mux: EventMultiplexer) -> None:
        """Test that every handler is called, in order."""
        calls: list[str] = []
        subscription = await mux.add_listener("Pause", lambda data: calls.append("a"))
        await mux.add_listener("Pause", lambda data: calls.append("b"))

        assert mux.dispatch(subscription.protocol_id, 1) is True
        assert calls == ["a", "b"]

    @pytest.mark.asyncio
    async def test_dispatch_records_last_value(self, mux: EventMultiplexer) -> None:
        """Test that dispatch stores the value on the subscription."""
        subscription = await mux.add_listener("Pause", MagicMock())
        mux.dispatch(subscription.protocol_id, 42)

        assert subscription.has_value
        assert subscription.last_value == 42

    def test_unknown_id_is_dropped(self, mux: EventMultiplexer) -> None:
        """Test that an unmatched ID is reported, not raised."""
        assert mux.dispatch(777, 1) is False

    @pytest.mark.asyncio
    async def test_registered_channel_dispatches(
        self, mux: EventMultiplexer, subscribe: AsyncMock
    ) -> None:
        """Test that pre-registered channels accept listeners without subscribing."""
        mux.register("AirportsInRange", 5)
        handler = MagicMock()
        await mux.add_listener("AirportsInRange", handler)
        mux.dispatch(5, ["KSEA"])

        handler.assert_called_once_with(["KSEA"])
        subscribe.assert_not_awaited()
