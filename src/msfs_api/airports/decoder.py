"""Facility record decoding.

A facility detail response arrives as a series of binary records whose field
layout follows AIRPORT_DETAIL_FIELDS: one airport record, then one record per
runway. These functions turn those records into Airport and Runway values,
converting units and resolving enum indices on the way.

Enum indices outside their tables decode to None; they never raise.
"""

import logging
import math
from typing import Any

from msfs_api.airports.constants import (
    FACILITY_DATA_AIRPORT,
    FACILITY_DATA_RUNWAY,
    FEET_PER_METER,
    ILS_TYPES,
    RUNWAY_DESIGNATOR,
    RUNWAY_NUMBER,
    RUNWAY_SURFACES,
    lookup,
)
from msfs_api.airports.models import Airport, Approach, IlsInfo, Runway
from msfs_api.binary import BinaryReader

logger = logging.getLogger(__name__)


def decode_airport_header(reader: BinaryReader) -> dict[str, Any]:
    """Decode the airport record.

    Layout: latitude (f64 deg), longitude (f64 deg), altitude (f64 m),
    declination (f32 deg), name (32 chars), name64 (64 chars),
    region (8 chars), runway count (i32).

    Returns:
        Airport fields keyed by Airport attribute name, altitude in feet.
    """
    return {
        "latitude": reader.read_float64(),
        "longitude": reader.read_float64(),
        "altitude": reader.read_float64() * FEET_PER_METER,
        "declination": reader.read_float32(),
        "name": reader.read_string(32),
        "name64": reader.read_string(64),
        "region": reader.read_string(8),
        "runway_count": reader.read_int32(),
    }


def decode_approach(reader: BinaryReader) -> Approach:
    """Decode one runway end block (number, designator, ILS type/icao/region)."""
    marking = lookup(RUNWAY_NUMBER, reader.read_int32())
    designation = lookup(RUNWAY_DESIGNATOR, reader.read_int32())
    ils_type = lookup(ILS_TYPES, reader.read_int32())
    ils_icao = reader.read_string(8)
    ils_region = reader.read_string(8)
    return Approach(
        designation=designation,
        marking=marking,
        ils=IlsInfo(type=ils_type, icao=ils_icao, region=ils_region),
    )


def decode_runway(reader: BinaryReader) -> Runway:
    """Decode a runway record.

    Layout: latitude, longitude (f64 deg), altitude (f64 m), heading, length,
    width, pattern altitude (f32), slope, true slope (f32 rad), surface (i32),
    then the primary and secondary runway end blocks.
    """
    latitude = reader.read_float64()
    longitude = reader.read_float64()
    altitude = reader.read_float64() * FEET_PER_METER
    heading = reader.read_float32()
    length = reader.read_float32()
    width = reader.read_float32()
    pattern_altitude = reader.read_float32()
    slope = math.degrees(reader.read_float32())
    slope_true = math.degrees(reader.read_float32())
    surface = lookup(RUNWAY_SURFACES, reader.read_int32())
    primary = decode_approach(reader)
    secondary = decode_approach(reader)

    return Runway(
        latitude=latitude,
        longitude=longitude,
        altitude=altitude,
        heading=heading,
        length=length,
        width=width,
        pattern_altitude=pattern_altitude,
        slope=slope,
        slope_true=slope_true,
        surface=surface,
        approach=(primary, secondary),
    )


class AirportRecordBuilder:
    """Accumulates the records of one facility detail response.

    Examples:
        >>> builder = AirportRecordBuilder("KSEA")
        >>> builder.add_record(FACILITY_DATA_AIRPORT, header_bytes)
        >>> builder.add_record(FACILITY_DATA_RUNWAY, runway_bytes)
        >>> airport = builder.build()
    """

    def __init__(self, icao: str) -> None:
        self.icao = icao
        self._header: dict[str, Any] = {}
        self._runways: list[Runway] = []

    def add_record(self, record_type: int, payload: bytes) -> None:
        """Decode one record and add it to the airport being built.

        Unknown record types are logged and ignored.
        """
        reader = BinaryReader(payload)
        if record_type == FACILITY_DATA_AIRPORT:
            self._header = decode_airport_header(reader)
        elif record_type == FACILITY_DATA_RUNWAY:
            self._runways.append(decode_runway(reader))
        else:
            logger.warning("Ignoring facility record type %d for %s", record_type, self.icao)

    def build(self) -> Airport:
        """Create the immutable Airport from the records seen so far."""
        return Airport(icao=self.icao, runways=tuple(self._runways), **self._header)
