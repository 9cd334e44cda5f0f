"""WebSocket transport to a simulator bridge process.

The bridge runs next to the simulator, owns the native connection and relays
it as JSON over a WebSocket (see transport.protocol for the message format).

Typical usage:
    transport = WebSocketTransport("ws://127.0.0.1:51128")
    transport.add_listener(print)
    await transport.open("My App")
    await transport.subscribe_to_system_event(1, "Pause")
    ...
    await transport.close()
"""

import asyncio
import json
import logging
from typing import Any

import websockets

from msfs_api.core.errors import TransportError
from msfs_api.transport.base import Transport
from msfs_api.transport.protocol import (
    AddDataDefinitionCommand,
    AddFacilityDefinitionCommand,
    ClearDataDefinitionCommand,
    Command,
    MapClientEventCommand,
    OpenCommand,
    RequestDataCommand,
    RequestFacilitiesListCommand,
    RequestFacilityDataCommand,
    SetDataCommand,
    SubscribeFacilitiesCommand,
    SubscribeSystemEventCommand,
    TransmitClientEventCommand,
    parse_event,
)

logger = logging.getLogger(__name__)


class WebSocketTransport(Transport):
    """Transport speaking JSON to a simulator bridge over a WebSocket.

    Attributes:
        url: WebSocket URL of the bridge.
    """

    CONNECT_TIMEOUT_S = 10.0

    def __init__(self, url: str = "ws://127.0.0.1:51128") -> None:
        """Initialize transport.

        Args:
            url: WebSocket URL of the bridge.
        """
        super().__init__()
        self.url = url
        self._websocket: Any = None
        self._connected = False
        self._receive_task: asyncio.Task | None = None

    @property
    def connected(self) -> bool:
        """Check if connected to the bridge."""
        return self._connected and self._websocket is not None

    async def open(self, app_name: str) -> None:
        """Connect to the bridge and open the simulator connection.

        Raises:
            TransportError: If the bridge is unreachable.
        """
        if self.connected:
            return

        try:
            logger.info("Connecting to %s", self.url)
            self._websocket = await asyncio.wait_for(
                websockets.connect(self.url),
                timeout=self.CONNECT_TIMEOUT_S,
            )
        except TimeoutError:
            raise TransportError(f"Connection timeout: {self.url}") from None
        except (OSError, websockets.exceptions.WebSocketException) as e:
            raise TransportError(f"Connection failed: {e}") from e

        self._connected = True
        self._receive_task = asyncio.create_task(self._receive_loop())
        await self._send(OpenCommand(id=0, app_name=app_name))
        logger.info("Connected to simulator bridge as %s", app_name)

    async def close(self) -> None:
        """Stop receiving and close the WebSocket."""
        self._connected = False

        if self._receive_task:
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
            self._receive_task = None

        if self._websocket:
            try:
                await self._websocket.close()
            except websockets.exceptions.WebSocketException as e:
                logger.debug("Error closing WebSocket: %s", e)
            self._websocket = None

    async def _send(self, command: Command) -> None:
        """Serialize and send one command.

        Raises:
            TransportError: If not connected or the send fails.
        """
        if not self.connected:
            raise TransportError(f"Not connected, cannot send {command.cmd}")

        try:
            await self._websocket.send(json.dumps(command.to_dict()))
        except websockets.exceptions.ConnectionClosed as e:
            self._connected = False
            raise TransportError(f"Connection closed while sending {command.cmd}") from e

    async def _receive_loop(self) -> None:
        """Background loop delivering inbound messages to listeners."""
        while self._connected:
            try:
                message = await self._websocket.recv()
            except websockets.exceptions.ConnectionClosed:
                logger.warning("Connection to simulator bridge closed")
                self._connected = False
                break

            try:
                data = json.loads(message)
            except json.JSONDecodeError as e:
                logger.error("Invalid JSON from bridge: %s", e)
                continue

            if not isinstance(data, dict):
                logger.error("Unexpected message from bridge: %r", data)
                continue

            event = parse_event(data)
            if event is not None:
                self._emit(event)

    async def subscribe_to_system_event(self, event_id: int, name: str) -> None:
        await self._send(SubscribeSystemEventCommand(id=event_id, name=name))

    async def add_to_data_definition(
        self, definition_id: int, name: str, units: str | None, data_type: int
    ) -> None:
        await self._send(
            AddDataDefinitionCommand(id=definition_id, name=name, units=units, data_type=data_type)
        )

    async def clear_data_definition(self, definition_id: int) -> None:
        await self._send(ClearDataDefinitionCommand(id=definition_id))

    async def request_data_on_sim_object(self, request_id: int, definition_id: int) -> None:
        await self._send(RequestDataCommand(id=request_id, definition_id=definition_id))

    async def set_data_on_sim_object(self, definition_id: int, payload: bytes) -> None:
        await self._send(SetDataCommand(id=definition_id, payload=payload))

    async def map_client_event_to_sim_event(self, event_id: int, name: str) -> None:
        await self._send(MapClientEventCommand(id=event_id, name=name))

    async def transmit_client_event(self, event_id: int, value: int) -> None:
        await self._send(TransmitClientEventCommand(id=event_id, value=value))

    async def subscribe_to_facilities(
        self, facility_type: int, in_range_id: int, out_of_range_id: int
    ) -> None:
        await self._send(
            SubscribeFacilitiesCommand(
                id=in_range_id,
                facility_type=facility_type,
                out_of_range_id=out_of_range_id,
            )
        )

    async def request_facilities_list(self, facility_type: int, request_id: int) -> None:
        await self._send(RequestFacilitiesListCommand(id=request_id, facility_type=facility_type))

    async def add_to_facility_definition(self, definition_id: int, field_name: str) -> None:
        await self._send(AddFacilityDefinitionCommand(id=definition_id, field_name=field_name))

    async def request_facility_data(self, definition_id: int, request_id: int, icao: str) -> None:
        await self._send(
            RequestFacilityDataCommand(id=request_id, definition_id=definition_id, icao=icao)
        )
