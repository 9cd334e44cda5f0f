"""Airport data models.

All models are immutable once built. They serialize to plain dictionaries
(JSON-compatible) for the on-disk airport snapshot.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FacilityListEntry:
    """Summary entry from a facility list page.

    Attributes:
        icao: ICAO code (e.g., "KSEA").
        region: Two-letter region code.
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        altitude: Altitude in meters.
    """

    icao: str
    region: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "icao": self.icao,
            "region": self.region,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FacilityListEntry":
        """Create from dictionary."""
        return cls(
            icao=data["icao"],
            region=data.get("region", ""),
            latitude=float(data.get("latitude", 0.0)),
            longitude=float(data.get("longitude", 0.0)),
            altitude=float(data.get("altitude", 0.0)),
        )


@dataclass(frozen=True)
class IlsInfo:
    """ILS (or other approach aid) serving a runway end.

    Attributes:
        type: Aid type label ("none", "airport", "VOR", "NDB", "waypoint"),
            or None for an unknown index.
        icao: ICAO code of the aid.
        region: Region code of the aid.
    """

    type: str | None
    icao: str
    region: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"type": self.type, "icao": self.icao, "region": self.region}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IlsInfo":
        """Create from dictionary."""
        return cls(type=data.get("type"), icao=data.get("icao", ""), region=data.get("region", ""))


@dataclass(frozen=True)
class Approach:
    """One runway end.

    Attributes:
        designation: Designator label ("left", "right", "center", ...).
        marking: Runway number label ("1".."36", "north", ...).
        ils: Approach aid information.
    """

    designation: str | None
    marking: str | None
    ils: IlsInfo

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "designation": self.designation,
            "marking": self.marking,
            "ILS": self.ils.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Approach":
        """Create from dictionary."""
        return cls(
            designation=data.get("designation"),
            marking=data.get("marking"),
            ils=IlsInfo.from_dict(data.get("ILS", {})),
        )


@dataclass(frozen=True)
class Runway:
    """Runway information.

    Attributes:
        latitude: Center latitude in degrees.
        longitude: Center longitude in degrees.
        altitude: Elevation in feet.
        heading: Heading in degrees.
        length: Length in meters.
        width: Width in meters.
        pattern_altitude: Pattern altitude in meters.
        slope: Slope in degrees.
        slope_true: True slope in degrees.
        surface: Surface label, or None for an unknown index.
        approach: Primary and secondary runway ends.
    """

    latitude: float
    longitude: float
    altitude: float
    heading: float
    length: float
    width: float
    pattern_altitude: float
    slope: float
    slope_true: float
    surface: str | None
    approach: tuple[Approach, Approach]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "heading": self.heading,
            "length": self.length,
            "width": self.width,
            "patternAltitude": self.pattern_altitude,
            "slope": self.slope,
            "slopeTrue": self.slope_true,
            "surface": self.surface,
            "approach": [approach.to_dict() for approach in self.approach],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Runway":
        """Create from dictionary."""
        primary, secondary = (Approach.from_dict(item) for item in data["approach"])
        return cls(
            latitude=data["latitude"],
            longitude=data["longitude"],
            altitude=data["altitude"],
            heading=data["heading"],
            length=data["length"],
            width=data["width"],
            pattern_altitude=data["patternAltitude"],
            slope=data["slope"],
            slope_true=data["slopeTrue"],
            surface=data.get("surface"),
            approach=(primary, secondary),
        )


@dataclass(frozen=True)
class Airport:
    """Airport information from a facility detail fetch.

    Attributes:
        icao: ICAO code (e.g., "KSEA").
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        altitude: Elevation in feet.
        declination: Magnetic variation in degrees.
        name: Short name (32 characters max).
        name64: Long name (64 characters max).
        region: Region code.
        runway_count: Runway count reported by the airport record.
        runways: Decoded runways.
    """

    icao: str
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0
    declination: float = 0.0
    name: str = ""
    name64: str = ""
    region: str = ""
    runway_count: int = 0
    runways: tuple[Runway, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "icao": self.icao,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "declination": self.declination,
            "name": self.name,
            "name64": self.name64,
            "region": self.region,
            "runwayCount": self.runway_count,
            "runways": [runway.to_dict() for runway in self.runways],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Airport":
        """Create from dictionary."""
        return cls(
            icao=data["icao"],
            latitude=data.get("latitude", 0.0),
            longitude=data.get("longitude", 0.0),
            altitude=data.get("altitude", 0.0),
            declination=data.get("declination", 0.0),
            name=data.get("name", ""),
            name64=data.get("name64", ""),
            region=data.get("region", ""),
            runway_count=data.get("runwayCount", 0),
            runways=tuple(Runway.from_dict(item) for item in data.get("runways", [])),
        )
