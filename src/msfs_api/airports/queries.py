"""Special airport variable names.

The API answers a few variable names from the airport database instead of
the simulator:

- ALL AIRPORTS: every airport in the database.
- NEARBY AIRPORTS: airports within the default radius of the aircraft.
- NEARBY AIRPORTS:<nm>: airports within <nm> nautical miles of the aircraft.
- AIRPORT:<ICAO>: one airport by ICAO code.

Underscores are accepted in place of spaces.
"""

from dataclasses import dataclass
from enum import Enum


class SpecialQueryKind(Enum):
    """Kinds of special airport queries."""

    ALL_AIRPORTS = "ALL AIRPORTS"
    NEARBY_AIRPORTS = "NEARBY AIRPORTS"
    AIRPORT = "AIRPORT"


@dataclass(frozen=True)
class SpecialQuery:
    """A parsed special airport query.

    Attributes:
        kind: Query kind.
        name: Original variable name, as passed by the caller.
        radius_nm: Search radius for NEARBY_AIRPORTS (None = default).
        icao: ICAO code for AIRPORT.
    """

    kind: SpecialQueryKind
    name: str
    radius_nm: float | None = None
    icao: str | None = None


def _argument(name: str) -> str | None:
    if ":" not in name:
        return None
    return name[name.index(":") + 1 :]


def parse_special_query(name: str) -> SpecialQuery | None:
    """Parse a variable name into a special query.

    Args:
        name: Variable name, with spaces or underscores.

    Returns:
        The parsed query, or None if the name is not a special variable or
        its argument is malformed.
    """
    normalized = name.replace("_", " ")

    if normalized == SpecialQueryKind.ALL_AIRPORTS.value:
        return SpecialQuery(kind=SpecialQueryKind.ALL_AIRPORTS, name=name)

    if normalized.startswith(SpecialQueryKind.NEARBY_AIRPORTS.value):
        rest = normalized[len(SpecialQueryKind.NEARBY_AIRPORTS.value) :]
        if rest and not rest.startswith(":"):
            return None
        argument = _argument(rest)
        radius = None
        if argument:
            try:
                radius = float(argument)
            except ValueError:
                return None
        return SpecialQuery(kind=SpecialQueryKind.NEARBY_AIRPORTS, name=name, radius_nm=radius)

    if normalized.startswith(SpecialQueryKind.AIRPORT.value + ":"):
        return SpecialQuery(
            kind=SpecialQueryKind.AIRPORT,
            name=name,
            icao=_argument(name),
        )

    return None


def is_special_query(name: str) -> bool:
    """Check whether a variable name is answered by the airport database."""
    return parse_special_query(name) is not None
