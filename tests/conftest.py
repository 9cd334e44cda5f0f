"""Shared fixtures: an in-memory transport and facility record builders."""

import math
from collections.abc import Callable
from typing import Any

import pytest

from msfs_api.binary import BinaryWriter
from msfs_api.core.errors import TransportError
from msfs_api.transport.base import Transport
from msfs_api.transport.protocol import InboundEvent


class FakeTransport(Transport):
    """Transport recording every primitive call.

    Tests inject inbound events with inject(), or set on_call to answer
    commands as they are sent.
    """

    def __init__(self, fail_opens: int = 0) -> None:
        super().__init__()
        self.fail_opens = fail_opens
        self.open_attempts = 0
        self.closed = False
        self.calls: list[tuple[Any, ...]] = []
        self.on_call: Callable[..., None] | None = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def inject(self, event: InboundEvent) -> None:
        """Deliver an inbound event to the listeners."""
        self._emit(event)

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        """Get the arguments of every call to one primitive."""
        return [call[1:] for call in self.calls if call[0] == name]

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if self.on_call is not None:
            self.on_call(name, *args)

    async def open(self, app_name: str) -> None:
        self.open_attempts += 1
        if self.fail_opens > 0:
            self.fail_opens -= 1
            raise TransportError("Connection refused")
        self._connected = True
        self._record("open", app_name)

    async def close(self) -> None:
        self._connected = False
        self.closed = True

    async def subscribe_to_system_event(self, event_id: int, name: str) -> None:
        self._record("subscribe_to_system_event", event_id, name)

    async def add_to_data_definition(
        self, definition_id: int, name: str, units: str | None, data_type: int
    ) -> None:
        self._record("add_to_data_definition", definition_id, name, units, data_type)

    async def clear_data_definition(self, definition_id: int) -> None:
        self._record("clear_data_definition", definition_id)

    async def request_data_on_sim_object(self, request_id: int, definition_id: int) -> None:
        self._record("request_data_on_sim_object", request_id, definition_id)

    async def set_data_on_sim_object(self, definition_id: int, payload: bytes) -> None:
        self._record("set_data_on_sim_object", definition_id, payload)

    async def map_client_event_to_sim_event(self, event_id: int, name: str) -> None:
        self._record("map_client_event_to_sim_event", event_id, name)

    async def transmit_client_event(self, event_id: int, value: int) -> None:
        self._record("transmit_client_event", event_id, value)

    async def subscribe_to_facilities(
        self, facility_type: int, in_range_id: int, out_of_range_id: int
    ) -> None:
        self._record("subscribe_to_facilities", facility_type, in_range_id, out_of_range_id)

    async def request_facilities_list(self, facility_type: int, request_id: int) -> None:
        self._record("request_facilities_list", facility_type, request_id)

    async def add_to_facility_definition(self, definition_id: int, field_name: str) -> None:
        self._record("add_to_facility_definition", definition_id, field_name)

    async def request_facility_data(self, definition_id: int, request_id: int, icao: str) -> None:
        self._record("request_facility_data", definition_id, request_id, icao)


class Records:
    """Builders for binary facility records."""

    @staticmethod
    def airport(
        latitude: float = 47.449,
        longitude: float = -122.309,
        altitude_m: float = 100.0,
        declination: float = 15.5,
        name: str = "Seattle-Tacoma",
        name64: str = "Seattle-Tacoma Intl",
        region: str = "K1",
        runway_count: int = 1,
    ) -> bytes:
        return (
            BinaryWriter()
            .write_float64(latitude)
            .write_float64(longitude)
            .write_float64(altitude_m)
            .write_float32(declination)
            .write_string(name, 32)
            .write_string(name64, 64)
            .write_string(region, 8)
            .write_int32(runway_count)
            .to_bytes()
        )

    @staticmethod
    def approach(
        writer: BinaryWriter,
        number: int = 16,
        designator: int = 1,
        ils_type: int = 0,
        ils_icao: str = "",
        ils_region: str = "",
    ) -> BinaryWriter:
        return (
            writer.write_int32(number)
            .write_int32(designator)
            .write_int32(ils_type)
            .write_string(ils_icao, 8)
            .write_string(ils_region, 8)
        )

    @classmethod
    def runway(
        cls,
        heading: float = 163.0,
        slope_rad: float = math.radians(0.5),
        surface: int = 0,
        primary: dict[str, Any] | None = None,
        secondary: dict[str, Any] | None = None,
    ) -> bytes:
        writer = (
            BinaryWriter()
            .write_float64(47.45)
            .write_float64(-122.31)
            .write_float64(100.0)
            .write_float32(heading)
            .write_float32(3500.0)
            .write_float32(45.0)
            .write_float32(300.0)
            .write_float32(slope_rad)
            .write_float32(slope_rad)
            .write_int32(surface)
        )
        cls.approach(writer, **(primary or {}))
        cls.approach(writer, **(secondary or {"number": 34, "designator": 2}))
        return writer.to_bytes()


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Create an in-memory transport."""
    return FakeTransport()


@pytest.fixture
def records() -> type[Records]:
    """Facility record builders."""
    return Records
