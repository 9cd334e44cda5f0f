"""Tests for the WebSocket bridge transport."""

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
import websockets

from msfs_api.core.errors import TransportError
from msfs_api.transport.protocol import EventNotification, InboundEvent
from msfs_api.transport.websocket import WebSocketTransport


class FakeWebSocket:
    """In-memory stand-in for a client connection."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.closed = False

    async def send(self, message: str) -> None:
        self.sent.append(json.loads(message))

    async def recv(self) -> str:
        item = await self.inbox.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def websocket() -> FakeWebSocket:
    """Create a fake WebSocket connection."""
    return FakeWebSocket()


@pytest.fixture
def connect_mock(websocket: FakeWebSocket):
    """Patch websockets.connect to return the fake connection."""
    with patch.object(websockets, "connect", AsyncMock(return_value=websocket)) as mock:
        yield mock


class TestOpenClose:
    """Test connection lifecycle."""

    @pytest.mark.asyncio
    async def test_open_sends_open_command(
        self, websocket: FakeWebSocket, connect_mock: AsyncMock
    ) -> None:
        """Test that opening connects and announces the application."""
        transport = WebSocketTransport("ws://sim:1")
        await transport.open("Copilot")

        connect_mock.assert_called_once_with("ws://sim:1")
        assert transport.connected
        assert websocket.sent == [{"cmd": "open", "id": 0, "app_name": "Copilot"}]
        await transport.close()

    @pytest.mark.asyncio
    async def test_close_stops_transport(
        self, websocket: FakeWebSocket, connect_mock: AsyncMock
    ) -> None:
        """Test that close() closes the socket and is repeatable."""
        transport = WebSocketTransport()
        await transport.open("Copilot")
        await transport.close()
        await transport.close()

        assert websocket.closed
        assert not transport.connected

    @pytest.mark.asyncio
    async def test_unreachable_bridge_raises(self) -> None:
        """Test that connection errors become TransportError."""
        failing = AsyncMock(side_effect=OSError("Connection refused"))
        with patch.object(websockets, "connect", failing):
            transport = WebSocketTransport()
            with pytest.raises(TransportError):
                await transport.open("Copilot")

        assert not transport.connected

    @pytest.mark.asyncio
    async def test_send_without_connection_raises(self) -> None:
        """Test that primitives fail before open()."""
        transport = WebSocketTransport()
        with pytest.raises(TransportError):
            await transport.subscribe_to_system_event(1, "Pause")


class TestMessages:
    """Test command sending and inbound delivery."""

    @pytest.mark.asyncio
    async def test_primitives_send_commands(
        self, websocket: FakeWebSocket, connect_mock: AsyncMock
    ) -> None:
        """Test that primitives are sent as JSON commands."""
        transport = WebSocketTransport()
        await transport.open("Copilot")

        await transport.subscribe_to_system_event(3, "Pause")
        await transport.set_data_on_sim_object(4, b"\x01")
        await transport.request_facility_data(10, 11, "KSEA")

        assert websocket.sent[1] == {"cmd": "subscribe_system_event", "id": 3, "name": "Pause"}
        assert websocket.sent[2] == {"cmd": "set_data_on_sim_object", "id": 4, "data": "AQ=="}
        assert websocket.sent[3]["icao"] == "KSEA"
        await transport.close()

    @pytest.mark.asyncio
    async def test_inbound_messages_reach_listeners(
        self, websocket: FakeWebSocket, connect_mock: AsyncMock
    ) -> None:
        """Test that parsed events are emitted and bad messages skipped."""
        received: list[InboundEvent] = []
        transport = WebSocketTransport()
        transport.add_listener(received.append)
        await transport.open("Copilot")

        websocket.inbox.put_nowait("not json")
        websocket.inbox.put_nowait(json.dumps(["not", "a", "dict"]))
        websocket.inbox.put_nowait(json.dumps({"kind": "event", "id": 3, "data": 1}))
        for _ in range(10):
            await asyncio.sleep(0)

        assert received == [EventNotification(request_id=3, data=1)]
        await transport.close()

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_others(
        self, websocket: FakeWebSocket, connect_mock: AsyncMock
    ) -> None:
        """Test that one listener's error does not block delivery."""

        def broken(event: InboundEvent) -> None:
            raise RuntimeError("boom")

        received: list[InboundEvent] = []
        transport = WebSocketTransport()
        transport.add_listener(broken)
        transport.add_listener(received.append)
        await transport.open("Copilot")

        websocket.inbox.put_nowait(json.dumps({"kind": "event", "id": 3, "data": 0}))
        for _ in range(10):
            await asyncio.sleep(0)

        assert len(received) == 1
        await transport.close()

    @pytest.mark.asyncio
    async def test_closed_connection_marks_disconnected(
        self, websocket: FakeWebSocket, connect_mock: AsyncMock
    ) -> None:
        """Test that the receive loop ends when the bridge goes away."""
        transport = WebSocketTransport()
        await transport.open("Copilot")

        websocket.inbox.put_nowait(websockets.exceptions.ConnectionClosed(None, None))
        for _ in range(10):
            await asyncio.sleep(0)

        assert not transport.connected
        await transport.close()
