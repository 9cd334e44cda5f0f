"""Named simulator system events.

Pass any of these to MSFSApi.on(). The airport range events are not
simulator system events; the API serves them from its facility subscription.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SystemEvent:
    """A subscribable event.

    Attributes:
        name: Name sent to the simulator (or the local name for API events).
        desc: Human-readable description.
    """

    name: str
    desc: str = ""


class SystemEvents:
    """Catalog of well-known events."""

    ONE_SECOND = SystemEvent("1sec", "Fires every second while the sim is running.")
    FOUR_SECONDS = SystemEvent("4sec", "Fires every four seconds while the sim is running.")
    SIX_HZ = SystemEvent("6Hz", "Fires six times per second while the sim is running.")
    FRAME = SystemEvent("Frame", "Fires every visual frame.")
    PAUSE = SystemEvent("Pause", "Fires when the flight is paused or unpaused.")
    PAUSED = SystemEvent("Paused", "Fires when the flight is paused.")
    UNPAUSED = SystemEvent("Unpaused", "Fires when the flight is unpaused.")
    SIM = SystemEvent("Sim", "Fires when the user starts or stops flying.")
    SIM_START = SystemEvent("SimStart", "Fires when the user starts flying.")
    SIM_STOP = SystemEvent("SimStop", "Fires when the user stops flying.")
    CRASHED = SystemEvent("Crashed", "Fires when the user aircraft crashes.")
    CRASH_RESET = SystemEvent("CrashReset", "Fires when the crash cycle completes.")
    AIRCRAFT_LOADED = SystemEvent("AircraftLoaded", "Fires when an aircraft file is loaded.")
    FLIGHT_LOADED = SystemEvent("FlightLoaded", "Fires when a flight file is loaded.")
    POSITION_CHANGED = SystemEvent("PositionChanged", "Fires when the user changes position.")
    VIEW = SystemEvent("View", "Fires when the user view changes.")

    # Served from the facility subscription
    AIRPORTS_IN_RANGE = SystemEvent(
        "AirportsInRange",
        "Airports coming into range of the aircraft (loaded into the reality bubble).",
    )
    AIRPORTS_OUT_OF_RANGE = SystemEvent(
        "AirportsOutOfRange",
        "Airports dropping out of range of the aircraft (removed from the reality bubble).",
    )
