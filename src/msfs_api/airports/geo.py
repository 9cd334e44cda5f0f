"""Geospatial queries over the airport set."""

import math
from collections.abc import Sequence

from msfs_api.airports.constants import KM_PER_NM
from msfs_api.airports.models import Airport

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points given in radians.

    Args:
        lat1: Latitude of the first point in radians.
        lon1: Longitude of the first point in radians.
        lat2: Latitude of the second point in radians.
        lon2: Longitude of the second point in radians.

    Returns:
        Distance in kilometers.
    """
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(min(1.0, math.sqrt(a)))

    return c * EARTH_RADIUS_KM


class GeoQuery:
    """Read-only queries over a sequence of airports.

    Examples:
        >>> geo = GeoQuery(airports)
        >>> for airport, distance in geo.nearby(47.45, -122.31, 25):
        ...     print(f"{airport.icao}: {distance:.1f} nm")
    """

    def __init__(self, airports: Sequence[Airport]) -> None:
        self._airports = airports

    def nearby(
        self, latitude: float, longitude: float, radius_nm: float
    ) -> list[tuple[Airport, float]]:
        """Get airports within a radius of a point.

        Args:
            latitude: Reference latitude in degrees.
            longitude: Reference longitude in degrees.
            radius_nm: Search radius in nautical miles (inclusive).

        Returns:
            (airport, distance_nm) pairs sorted by distance; airports at equal
            distance keep their input order.
        """
        radius_km = radius_nm * KM_PER_NM
        lat = math.radians(latitude)
        lon = math.radians(longitude)

        found = []
        for airport in self._airports:
            d = distance_km(
                lat, lon, math.radians(airport.latitude), math.radians(airport.longitude)
            )
            if d <= radius_km:
                found.append((airport, d / KM_PER_NM))

        found.sort(key=lambda item: item[1])
        return found

    def by_icao(self, code: str) -> Airport | None:
        """Get the first airport whose ICAO code equals code (case-sensitive)."""
        for airport in self._airports:
            if airport.icao == code:
                return airport
        return None
