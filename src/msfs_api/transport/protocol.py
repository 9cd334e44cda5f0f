"""JSON protocol for the simulator bridge.

The bridge process owns the native simulator connection and relays it over a
WebSocket. Every transport primitive becomes a JSON command; everything the
simulator sends back becomes a JSON message tagged with a kind.

Protocol:
    - All messages are JSON
    - Binary payloads are base64 encoded
    - Command format: {"cmd": "...", "id": <int>, ...}
    - Inbound format: {"kind": "...", "id": <int>, ...}

Example exchange:
    >>> {"cmd": "add_to_data_definition", "id": 12, "name": "PLANE LATITUDE",
    ...  "units": "degrees", "data_type": 4}
    >>> {"cmd": "request_data_on_sim_object", "id": 12, "definition_id": 12}
    <<< {"kind": "data", "id": 12, "data": "<base64>"}
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import Any

from msfs_api.airports.models import FacilityListEntry

logger = logging.getLogger(__name__)


def encode_payload(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_payload(text: str | None) -> bytes:
    return base64.b64decode(text) if text else b""


# --- Commands (client -> bridge) ---


@dataclass
class Command:
    """Base command message."""

    cmd: str
    id: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"cmd": self.cmd, "id": self.id}


@dataclass
class OpenCommand(Command):
    """Open the native connection under an application name."""

    app_name: str = "MSFS API"
    cmd: str = field(default="open", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "app_name": self.app_name}


@dataclass
class SubscribeSystemEventCommand(Command):
    """Subscribe to a named system event."""

    name: str = ""
    cmd: str = field(default="subscribe_system_event", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "name": self.name}


@dataclass
class AddDataDefinitionCommand(Command):
    """Add a simulation variable to a data definition."""

    name: str = ""
    units: str | None = None
    data_type: int = 4
    cmd: str = field(default="add_to_data_definition", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cmd": self.cmd,
            "id": self.id,
            "name": self.name,
            "units": self.units,
            "data_type": self.data_type,
        }


@dataclass
class ClearDataDefinitionCommand(Command):
    """Remove a data definition."""

    cmd: str = field(default="clear_data_definition", init=False)


@dataclass
class RequestDataCommand(Command):
    """Request the user aircraft's values for a data definition, once."""

    definition_id: int = 0
    cmd: str = field(default="request_data_on_sim_object", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "definition_id": self.definition_id}


@dataclass
class SetDataCommand(Command):
    """Write values for a data definition to the user aircraft."""

    payload: bytes = b""
    cmd: str = field(default="set_data_on_sim_object", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "data": encode_payload(self.payload)}


@dataclass
class MapClientEventCommand(Command):
    """Map a client event ID to a named simulator event."""

    name: str = ""
    cmd: str = field(default="map_client_event_to_sim_event", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "name": self.name}


@dataclass
class TransmitClientEventCommand(Command):
    """Fire a mapped client event at the user aircraft."""

    value: int = 0
    cmd: str = field(default="transmit_client_event", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "value": self.value}


@dataclass
class SubscribeFacilitiesCommand(Command):
    """Subscribe to facilities entering (id) and leaving (out_of_range_id) range."""

    facility_type: int = 0
    out_of_range_id: int = 0
    cmd: str = field(default="subscribe_to_facilities", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cmd": self.cmd,
            "id": self.id,
            "facility_type": self.facility_type,
            "out_of_range_id": self.out_of_range_id,
        }


@dataclass
class RequestFacilitiesListCommand(Command):
    """Request the full facility list of a type."""

    facility_type: int = 0
    cmd: str = field(default="request_facilities_list", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "facility_type": self.facility_type}


@dataclass
class AddFacilityDefinitionCommand(Command):
    """Append a field to a facility definition."""

    field_name: str = ""
    cmd: str = field(default="add_to_facility_definition", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "id": self.id, "field": self.field_name}


@dataclass
class RequestFacilityDataCommand(Command):
    """Request one facility's details using a facility definition."""

    definition_id: int = 0
    icao: str = ""
    cmd: str = field(default="request_facility_data", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cmd": self.cmd,
            "id": self.id,
            "definition_id": self.definition_id,
            "icao": self.icao,
        }


# --- Inbound events (bridge -> client) ---


@dataclass
class InboundEvent:
    """Base inbound message. request_id is the protocol ID it answers."""

    request_id: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"kind": getattr(self, "kind", ""), "id": self.request_id}


@dataclass
class SimObjectData(InboundEvent):
    """Values for a data request, packed in definition order."""

    data: bytes = b""
    kind: str = field(default="data", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "id": self.request_id, "data": encode_payload(self.data)}


@dataclass
class FacilityListPage(InboundEvent):
    """One page of a facility list (or a range notification).

    Pages are numbered entry_number = 0 .. out_of - 1.
    """

    entries: list[FacilityListEntry] = field(default_factory=list)
    entry_number: int = 0
    out_of: int = 1
    kind: str = field(default="facility_list", init=False)

    @property
    def is_last(self) -> bool:
        """True for the final page of the list."""
        return self.entry_number >= self.out_of - 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.request_id,
            "entries": [entry.to_dict() for entry in self.entries],
            "entry_number": self.entry_number,
            "out_of": self.out_of,
        }


@dataclass
class FacilityData(InboundEvent):
    """One binary record of a facility detail response."""

    record_type: int = 0
    data: bytes = b""
    kind: str = field(default="facility_data", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.request_id,
            "record_type": self.record_type,
            "data": encode_payload(self.data),
        }


@dataclass
class FacilityDataEnd(InboundEvent):
    """End marker of a facility detail response."""

    kind: str = field(default="facility_data_end", init=False)


@dataclass
class EventNotification(InboundEvent):
    """A subscribed system event fired."""

    data: int = 0
    kind: str = field(default="event", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "id": self.request_id, "data": self.data}


@dataclass
class ExceptionNotification(InboundEvent):
    """The simulator rejected a command. request_id is the rejected send ID."""

    exception: int = 0
    index: int = 0
    kind: str = field(default="exception", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.request_id,
            "exception": self.exception,
            "index": self.index,
        }


def parse_event(data: dict[str, Any]) -> InboundEvent | None:
    """Parse an inbound message dictionary into an event.

    Args:
        data: Message dictionary.

    Returns:
        Event instance or None if kind unknown or message malformed.
    """
    kind = data.get("kind")
    request_id = data.get("id")
    if not isinstance(request_id, int):
        logger.warning("Inbound %s message without integer id", kind)
        return None

    try:
        if kind == "data":
            return SimObjectData(request_id=request_id, data=decode_payload(data.get("data")))
        elif kind == "facility_list":
            return FacilityListPage(
                request_id=request_id,
                entries=[FacilityListEntry.from_dict(item) for item in data.get("entries", [])],
                entry_number=int(data.get("entry_number", 0)),
                out_of=int(data.get("out_of", 1)),
            )
        elif kind == "facility_data":
            return FacilityData(
                request_id=request_id,
                record_type=int(data.get("record_type", 0)),
                data=decode_payload(data.get("data")),
            )
        elif kind == "facility_data_end":
            return FacilityDataEnd(request_id=request_id)
        elif kind == "event":
            return EventNotification(request_id=request_id, data=int(data.get("data", 0)))
        elif kind == "exception":
            return ExceptionNotification(
                request_id=request_id,
                exception=int(data.get("exception", 0)),
                index=int(data.get("index", 0)),
            )
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Malformed inbound %s message: %s", kind, e)
        return None

    logger.warning("Unknown inbound message kind: %s", kind)
    return None
