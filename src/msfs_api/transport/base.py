"""Transport contract between the MSFS API and the simulator.

A transport exposes the protocol primitives the API needs as coroutines and
delivers everything the simulator sends back to registered listeners as
inbound event dataclasses (see transport.protocol). Listeners run on the
event loop thread, one event at a time.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from msfs_api.transport.protocol import InboundEvent

logger = logging.getLogger(__name__)

InboundListener = Callable[[InboundEvent], None]


class Transport(ABC):
    """Abstract simulator transport.

    Subclasses implement the primitives and call _emit() for every inbound
    event.
    """

    def __init__(self) -> None:
        self._listeners: list[InboundListener] = []

    def add_listener(self, listener: InboundListener) -> None:
        """Register a callable receiving every inbound event."""
        self._listeners.append(listener)

    def remove_listener(self, listener: InboundListener) -> None:
        """Unregister an inbound event listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: InboundEvent) -> None:
        """Deliver an inbound event to every listener.

        A failing listener is logged and does not stop delivery to the others.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error("Inbound listener failed on %s: %s", type(event).__name__, e)

    @property
    @abstractmethod
    def connected(self) -> bool:
        """True while the transport can send commands."""

    @abstractmethod
    async def open(self, app_name: str) -> None:
        """Open the simulator connection.

        Raises:
            TransportError: If the connection cannot be established.
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""

    @abstractmethod
    async def subscribe_to_system_event(self, event_id: int, name: str) -> None:
        """Subscribe to a named system event under event_id."""

    @abstractmethod
    async def add_to_data_definition(
        self, definition_id: int, name: str, units: str | None, data_type: int
    ) -> None:
        """Append a simulation variable to a data definition."""

    @abstractmethod
    async def clear_data_definition(self, definition_id: int) -> None:
        """Remove a data definition."""

    @abstractmethod
    async def request_data_on_sim_object(self, request_id: int, definition_id: int) -> None:
        """Request the user aircraft's values for a data definition, once."""

    @abstractmethod
    async def set_data_on_sim_object(self, definition_id: int, payload: bytes) -> None:
        """Write packed values for a data definition to the user aircraft."""

    @abstractmethod
    async def map_client_event_to_sim_event(self, event_id: int, name: str) -> None:
        """Map a client event ID to a named simulator event."""

    @abstractmethod
    async def transmit_client_event(self, event_id: int, value: int) -> None:
        """Fire a mapped client event at the user aircraft."""

    @abstractmethod
    async def subscribe_to_facilities(
        self, facility_type: int, in_range_id: int, out_of_range_id: int
    ) -> None:
        """Subscribe to facilities entering and leaving the reality bubble."""

    @abstractmethod
    async def request_facilities_list(self, facility_type: int, request_id: int) -> None:
        """Request the full facility list of a type, delivered in pages."""

    @abstractmethod
    async def add_to_facility_definition(self, definition_id: int, field_name: str) -> None:
        """Append a field to a facility definition."""

    @abstractmethod
    async def request_facility_data(self, definition_id: int, request_id: int, icao: str) -> None:
        """Request one facility's records using a facility definition."""
