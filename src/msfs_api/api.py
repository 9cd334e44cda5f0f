"""Public facade of the MSFS API.

MSFSApi connects to the simulator, hands out protocol IDs, routes inbound
events and exposes a small surface:

- on(event, handler) / off(event, handler)
- get(*names)
- set(name, value)
- trigger(name, value)
- schedule(handler, interval_s, *names)

Typical usage:
    from msfs_api import MSFSApi, SystemEvents

    api = MSFSApi()
    await api.connect(retries=5, retry_interval=2)

    off = await api.on(SystemEvents.PAUSE, lambda paused: print("paused", paused))
    values = await api.get("PLANE_LATITUDE", "PLANE_LONGITUDE")
    await api.set("PLANE_ALTITUDE", 3500)
    nearby = await api.get("NEARBY_AIRPORTS:25")

    off()
    await api.close()
"""

import asyncio
import logging
import struct
from collections.abc import Callable
from typing import Any

from msfs_api.airports.cache import AirportCache
from msfs_api.airports.constants import FACILITY_LIST_TYPE_AIRPORT
from msfs_api.airports.queries import is_special_query
from msfs_api.binary import BinaryReader
from msfs_api.core.config import ApiConfig
from msfs_api.core.errors import (
    MSFSApiError,
    SimConnectionError,
    TransportError,
    UnknownPropertyError,
)
from msfs_api.core.events import EventHandler, EventMultiplexer
from msfs_api.core.ids import ResourceIdAllocator
from msfs_api.core.requests import RequestCorrelator
from msfs_api.simvars import SimVarTable, code_safe, prop_name
from msfs_api.system_events import SystemEvent, SystemEvents
from msfs_api.transport.base import Transport
from msfs_api.transport.protocol import (
    EventNotification,
    ExceptionNotification,
    FacilityListPage,
    InboundEvent,
    SimObjectData,
)
from msfs_api.transport.websocket import WebSocketTransport
from msfs_api.version import get_version

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], Transport]
RetryCallback = Callable[[int, float], None]


def coerce_number(value: Any) -> Any:
    """Turn a numeric string into a float; leave everything else unchanged."""
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return value
    return value


class MSFSApi:
    """Client for the simulator.

    One instance owns one connection and all protocol state that goes with
    it: the ID allocator, event subscriptions, pending requests, client event
    mappings and the airport database.

    Attributes:
        config: API configuration.
        simvars: Variable table used by get() and set().
        transport: Open transport, or None while disconnected.
        airports: Airport database, or None if disabled or disconnected.
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        """Initialize API.

        Args:
            config: API configuration. Defaults to built-in defaults.
            transport_factory: Creates a transport per connection attempt.
                Defaults to a WebSocketTransport on config.connection.url.
        """
        self.config = config or ApiConfig()
        self._transport_factory = transport_factory or self._default_transport
        self.simvars = SimVarTable.with_defaults(self.config.simvars)

        self.transport: Transport | None = None
        self._facility_transport: Transport | None = None
        self.airports: AirportCache | None = None
        self._tasks: set[asyncio.Task] = set()
        self._reset()

    def _default_transport(self) -> Transport:
        return WebSocketTransport(self.config.connection.url)

    def _reset(self) -> None:
        """Create fresh protocol state for a new connection."""
        ids = self.config.ids
        self.allocator = ResourceIdAllocator(ids.first_id, ids.ceiling)
        self.events = EventMultiplexer(self.allocator, self._subscribe_system_event)
        self.correlator = RequestCorrelator(self.allocator, self.config.requests.timeout_s)
        self._client_events: dict[str, int] = {}

    @property
    def connected(self) -> bool:
        """True while connected to the simulator."""
        return self.transport is not None and self.transport.connected

    def _require_transport(self) -> Transport:
        if self.transport is None:
            raise SimConnectionError("Not connected to MSFS")
        return self.transport

    # --- Connection ---

    async def connect(
        self,
        retries: int | None = None,
        retry_interval: float | None = None,
        on_connect: Callable[[Transport], None] | None = None,
        on_retry: RetryCallback | None = None,
    ) -> None:
        """Connect to the simulator.

        Args:
            retries: Extra attempts after the first failure. Defaults to config.
            retry_interval: Seconds between attempts. Defaults to config.
            on_connect: Called with the open transport once connected.
            on_retry: Called with (retries left, interval) before each retry.

        Raises:
            SimConnectionError: If every attempt failed.
        """
        if self.transport is not None:
            return

        retries_left = self.config.connection.retries if retries is None else retries
        interval = (
            self.config.connection.retry_interval_s if retry_interval is None else retry_interval
        )

        while True:
            transport = self._transport_factory()
            try:
                await transport.open(self.config.app_name)
                break
            except TransportError as e:
                await transport.close()
                if retries_left <= 0:
                    logger.error("No connection to MSFS: %s", e)
                    raise SimConnectionError("No connection to MSFS") from e
                retries_left -= 1
                logger.warning(
                    "Connection failed (%s), retrying in %.1fs (%d retries left)",
                    e,
                    interval,
                    retries_left,
                )
                if on_retry:
                    on_retry(retries_left, interval)
                await asyncio.sleep(interval)

        self.transport = transport
        transport.add_listener(self._handle_inbound)
        logger.info("Connected to MSFS (msfs-api %s)", get_version())
        if on_connect:
            on_connect(transport)

        await self._subscribe_airport_events(transport)
        if self.config.airports.enabled:
            await self._start_airport_database(transport)

    async def close(self) -> None:
        """Stop background work and close the connection."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        await self.correlator.close()

        if self._facility_transport is not None:
            await self._facility_transport.close()
            self._facility_transport = None
        if self.transport is not None:
            self.transport.remove_listener(self._handle_inbound)
            await self.transport.close()
            self.transport = None

        self.airports = None
        self._reset()
        logger.info("Disconnected from MSFS")

    # --- Inbound routing ---

    def _handle_inbound(self, event: InboundEvent) -> None:
        """Route an inbound event to its request or subscription."""
        if self.correlator.dispatch(event):
            return

        if isinstance(event, FacilityListPage) and self.events.handles(event.request_id):
            self.events.dispatch(event.request_id, event.entries)
        elif isinstance(event, EventNotification):
            self.events.dispatch(event.request_id, event.data)
        elif isinstance(event, ExceptionNotification):
            logger.error(
                "Simulator exception %d for send %d (parameter %d)",
                event.exception,
                event.request_id,
                event.index,
            )
        else:
            logger.error(
                "Dropping %s for id %d: no pending request",
                type(event).__name__,
                event.request_id,
            )

    def _handle_facility_inbound(self, event: InboundEvent) -> None:
        if not self.correlator.dispatch(event):
            logger.debug("Dropping %s on facility connection", type(event).__name__)

    async def _subscribe_system_event(self, event_id: int, name: str) -> None:
        await self._require_transport().subscribe_to_system_event(event_id, name)

    async def _subscribe_airport_events(self, transport: Transport) -> None:
        """Expose airport range notifications as named events."""
        in_range_id = self.allocator.next_id()
        out_of_range_id = self.allocator.next_id()
        self.events.register(SystemEvents.AIRPORTS_IN_RANGE.name, in_range_id)
        self.events.register(SystemEvents.AIRPORTS_OUT_OF_RANGE.name, out_of_range_id)
        await transport.subscribe_to_facilities(
            FACILITY_LIST_TYPE_AIRPORT, in_range_id, out_of_range_id
        )

    # --- Airport database ---

    async def _start_airport_database(self, transport: Transport) -> None:
        """Create the airport database and build it in the background."""
        facility_transport = transport
        if self.config.airports.dedicated_connection:
            dedicated = self._transport_factory()
            try:
                await dedicated.open(f"{self.config.app_name} airports")
            except TransportError as e:
                logger.warning("No dedicated facility connection, using the main one: %s", e)
                await dedicated.close()
            else:
                dedicated.add_listener(self._handle_facility_inbound)
                self._facility_transport = facility_transport = dedicated

        self.airports = AirportCache(
            facility_transport,
            self.allocator,
            self.correlator,
            self.config.airports,
            position=self._aircraft_position,
        )
        self._start_task(self._build_airports(self.airports))

    async def _build_airports(self, cache: AirportCache) -> None:
        try:
            await cache.build()
        except MSFSApiError:
            # Logged by build() and raised again from wait_ready().
            pass
        finally:
            if self._facility_transport is not None:
                await self._facility_transport.close()
                self._facility_transport = None

    async def _aircraft_position(self) -> tuple[float, float]:
        values = await self.get("PLANE LATITUDE", "PLANE LONGITUDE")
        return values["PLANE_LATITUDE"], values["PLANE_LONGITUDE"]

    # --- Events ---

    async def on(self, event: SystemEvent | str, handler: EventHandler) -> Callable[[], bool]:
        """Add an event handler.

        A handler added after the event already fired is called right away
        with the last value.

        Args:
            event: Event from SystemEvents, or an event name.
            handler: Callable receiving the event data.

        Returns:
            An argument-less function removing the handler again.
        """
        self._require_transport()
        name = event.name if isinstance(event, SystemEvent) else event
        await self.events.add_listener(name, handler)

        def off() -> bool:
            return self.off(name, handler)

        return off

    def off(self, event: SystemEvent | str, handler: EventHandler) -> bool:
        """Remove an event handler.

        Returns:
            True if the handler was registered.
        """
        name = event.name if isinstance(event, SystemEvent) else event
        return self.events.remove_listener(name, handler)

    async def trigger(self, name: str, value: int = 0) -> None:
        """Fire a simulator event (e.g. "PARKING_BRAKES") at the user aircraft.

        The client event mapping is created on the first trigger of a name
        and reused for the rest of the connection.
        """
        transport = self._require_transport()

        event_id = self._client_events.get(name)
        if event_id is None:
            event_id = self.allocator.next_id()
            self._client_events[name] = event_id
            try:
                await transport.map_client_event_to_sim_event(event_id, name)
            except Exception:
                del self._client_events[name]
                self.allocator.release_id(event_id)
                raise

        await transport.transmit_client_event(event_id, int(value))

    # --- Variables ---

    async def get(self, *names: str) -> dict[str, Any]:
        """Get one or more variable values.

        Simulation variables are read with a single request. The special
        airport names (ALL_AIRPORTS, NEARBY_AIRPORTS[:nm], AIRPORT:<ICAO>)
        are answered from the airport database once it is ready.

        Args:
            names: Variable names, with spaces or underscores.

        Returns:
            Values keyed by code-safe (underscore) name.

        Raises:
            UnknownPropertyError: If a name is not in the variable table.
            RequestTimeoutError: If the simulator did not answer in time.
        """
        transport = self._require_transport()
        special = [name for name in names if is_special_query(name)]
        regular = [name for name in names if not is_special_query(name)]

        result: dict[str, Any] = {}
        if regular:
            result.update(await self._get_simvars(transport, regular))
        for name in special:
            if self.airports is None:
                raise MSFSApiError(f'Cannot get "{name}": airport database is disabled')
            result.update(await self.airports.get(name))
        return result

    async def _get_simvars(self, transport: Transport, names: list[str]) -> dict[str, Any]:
        definitions = [self.simvars.get(name) for name in names]
        defined = False

        async def issue(request_id: int) -> None:
            nonlocal defined
            for name, definition in zip(names, definitions, strict=True):
                if definition is None:
                    raise UnknownPropertyError(prop_name(name), "get")
            defined = True
            for definition in definitions:
                await transport.add_to_data_definition(
                    request_id, definition.name, definition.units, int(definition.data_type)
                )
            await transport.request_data_on_sim_object(request_id, request_id)

        def on_match(event: SimObjectData) -> dict[str, Any]:
            reader = BinaryReader(event.data)
            return {code_safe(d.name): d.read(reader) for d in definitions}

        async def cleanup(request_id: int) -> None:
            if defined:
                await transport.clear_data_definition(request_id)

        return await self.correlator.request((SimObjectData,), issue, on_match, cleanup)

    async def set(self, name: str, value: Any) -> None:
        """Set a variable on the user aircraft.

        Numeric strings are converted to numbers. The simulator does not
        acknowledge writes; the data definition is cleared after
        requests.write_cleanup_delay_s.

        Raises:
            UnknownPropertyError: If the name is not in the variable table.
            MSFSApiError: If the value cannot be encoded for the variable.
        """
        transport = self._require_transport()
        definition = self.simvars.get(name)
        value = coerce_number(value)
        defined = False

        async def issue(definition_id: int) -> None:
            nonlocal defined
            if definition is None:
                raise UnknownPropertyError(prop_name(name), "set")
            if not definition.settable:
                logger.warning("Setting %s, which is not marked settable", definition.name)
            try:
                payload = definition.write(value)
            except (TypeError, ValueError, struct.error) as e:
                raise MSFSApiError(
                    f'Cannot set SimVar: "{definition.name}" to {value!r}: {e}'
                ) from e
            defined = True
            await transport.add_to_data_definition(
                definition_id, definition.name, definition.units, int(definition.data_type)
            )
            await transport.set_data_on_sim_object(definition_id, payload)

        async def cleanup(definition_id: int) -> None:
            if defined:
                await transport.clear_data_definition(definition_id)

        await self.correlator.fire_and_forget(
            issue, cleanup, self.config.requests.write_cleanup_delay_s
        )

    def schedule(
        self,
        handler: Callable[[dict[str, Any]], None],
        interval_s: float,
        *names: str,
    ) -> Callable[[], None]:
        """Call handler with get(*names) every interval_s seconds.

        Stopping suppresses the next tick; a get already in flight still
        completes and is delivered.

        Returns:
            An argument-less function stopping the schedule.
        """
        running = True

        async def run() -> None:
            while running:
                handler(await self.get(*names))
                if running:
                    await asyncio.sleep(interval_s)

        def stop() -> None:
            nonlocal running
            running = False

        self._start_task(run())
        return stop

    def _start_task(self, coro: Any) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background task failed: %s", task.exception())
