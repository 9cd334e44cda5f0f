"""Simulator transports.

Components:
    - base.py: Transport contract (protocol primitives + inbound listeners)
    - protocol.py: JSON command and inbound event messages
    - websocket.py: WebSocketTransport for the simulator bridge
"""

from msfs_api.transport.base import Transport
from msfs_api.transport.protocol import (
    EventNotification,
    ExceptionNotification,
    FacilityData,
    FacilityDataEnd,
    FacilityListPage,
    InboundEvent,
    SimObjectData,
    parse_event,
)
from msfs_api.transport.websocket import WebSocketTransport

__all__ = [
    "Transport",
    "WebSocketTransport",
    # Inbound events
    "InboundEvent",
    "SimObjectData",
    "FacilityListPage",
    "FacilityData",
    "FacilityDataEnd",
    "EventNotification",
    "ExceptionNotification",
    "parse_event",
]
