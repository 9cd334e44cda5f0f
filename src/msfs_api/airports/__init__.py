"""Airport database.

Components:
    - models.py: Airport, Runway, Approach, IlsInfo, FacilityListEntry
    - decoder.py: facility record decoding
    - geo.py: great-circle distance and nearby/ICAO lookups
    - queries.py: special airport variable names
    - cache.py: AirportCache (acquisition, snapshot, queries)
"""

from msfs_api.airports.models import Airport, Approach, FacilityListEntry, IlsInfo, Runway
from msfs_api.airports.geo import GeoQuery, distance_km
from msfs_api.airports.queries import SpecialQuery, SpecialQueryKind, parse_special_query
from msfs_api.airports.cache import AirportCache

__all__ = [
    "Airport",
    "AirportCache",
    "Approach",
    "FacilityListEntry",
    "GeoQuery",
    "IlsInfo",
    "Runway",
    "SpecialQuery",
    "SpecialQueryKind",
    "distance_km",
    "parse_special_query",
]
