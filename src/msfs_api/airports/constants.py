"""Facility protocol constants.

The enum tables map the indices found in facility records to labels. Their
order is part of the wire contract and must match the simulator exactly.
"""

# Facility list types
FACILITY_LIST_TYPE_AIRPORT = 0

# Record types inside a facility data response
FACILITY_DATA_AIRPORT = 0
FACILITY_DATA_RUNWAY = 1

FEET_PER_METER = 3.28084
KM_PER_NM = 1.852

_SURFACE_LABELS = [
    "concrete",
    "grass",
    "water fsx",
    "grass bumpy",
    "asphalt",
    "short grass",
    "long grass",
    "hard turf",
    "snow",
    "ice",
    "urban",
    "forest",
    "dirt",
    "coral",
    "gravel",
    "oil treated",
    "steel mats",
    "bituminus",
    "brick",
    "macadam",
    "planks",
    "sand",
    "shale",
    "tarmac",
    "wright flyer track",
    "ocean",
    "water",
    "pond",
    "lake",
    "river",
    "waste water",
    "paint",
]

RUNWAY_SURFACES: dict[int, str] = dict(enumerate(_SURFACE_LABELS))
RUNWAY_SURFACES[254] = "unknown"

RUNWAY_NUMBER: list[str] = [
    "none",
    *(str(number) for number in range(1, 37)),
    "north",
    "northeast",
    "east",
    "southeast",
    "south",
    "southwest",
    "west",
    "northwest",
    "last",
]

RUNWAY_DESIGNATOR: list[str] = [
    "none",
    "left",
    "right",
    "center",
    "water",
    "a",
    "b",
    "last",
]

# Keyed by ASCII code: "A", "V", "N", "W"
ILS_TYPES: dict[int, str] = {
    0: "none",
    65: "airport",
    86: "VOR",
    78: "NDB",
    87: "waypoint",
}

# Field order of the airport facility definition. Decoding in
# airports.decoder reads records in exactly this order.
AIRPORT_DETAIL_FIELDS: list[str] = [
    "OPEN AIRPORT",
    "LATITUDE",
    "LONGITUDE",
    "ALTITUDE",
    "MAGVAR",
    "NAME",
    "NAME64",
    "REGION",
    "N_RUNWAYS",
    "OPEN RUNWAY",
    "LATITUDE",
    "LONGITUDE",
    "ALTITUDE",
    "HEADING",
    "LENGTH",
    "WIDTH",
    "PATTERN_ALTITUDE",
    "SLOPE",
    "TRUE_SLOPE",
    "SURFACE",
    "PRIMARY_NUMBER",
    "PRIMARY_DESIGNATOR",
    "PRIMARY_ILS_TYPE",
    "PRIMARY_ILS_ICAO",
    "PRIMARY_ILS_REGION",
    "SECONDARY_NUMBER",
    "SECONDARY_DESIGNATOR",
    "SECONDARY_ILS_TYPE",
    "SECONDARY_ILS_ICAO",
    "SECONDARY_ILS_REGION",
    "CLOSE RUNWAY",
    "CLOSE AIRPORT",
]


def lookup(table: list[str] | dict[int, str], index: int) -> str | None:
    """Look up an enum label, returning None for out-of-table indices."""
    if isinstance(table, dict):
        return table.get(index)
    if 0 <= index < len(table):
        return table[index]
    return None
