"""Simulation variable definitions.

Maps simulation variable names to the units and wire datatype the simulator
expects, and knows how to read/write each datatype. Only a small catalog is
built in; applications add their own entries through the `simvars` config
section or SimVarTable.add().

Typical usage:
    table = SimVarTable.with_defaults()
    definition = table.get("PLANE_LATITUDE")
    latitude = definition.read(BinaryReader(payload))
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from msfs_api.binary import BinaryReader, BinaryWriter
from msfs_api.core.errors import ConfigError


class DataType(IntEnum):
    """Wire datatypes, numbered as the simulator numbers them."""

    INT32 = 1
    INT64 = 2
    FLOAT32 = 3
    FLOAT64 = 4
    STRING8 = 5
    STRING32 = 6
    STRING64 = 7
    STRING128 = 8
    STRING256 = 9
    STRING260 = 10


STRING_SIZES = {
    DataType.STRING8: 8,
    DataType.STRING32: 32,
    DataType.STRING64: 64,
    DataType.STRING128: 128,
    DataType.STRING256: 256,
    DataType.STRING260: 260,
}


def prop_name(name: str) -> str:
    """Normalize an API-facing name to the simulator's spelling."""
    return name.replace("_", " ")


def code_safe(name: str) -> str:
    """Normalize a simulator name to the key used in result dictionaries."""
    return name.replace(" ", "_")


@dataclass(frozen=True)
class SimVarDefinition:
    """Units and datatype of one simulation variable.

    Attributes:
        name: Simulator name (with spaces, e.g. "PLANE LATITUDE").
        units: Unit string sent with the data definition.
        data_type: Wire datatype.
        settable: Whether the simulator accepts writes to this variable.
    """

    name: str
    units: str | None
    data_type: DataType
    settable: bool = False

    def read(self, reader: BinaryReader) -> Any:
        """Read this variable's value from a payload."""
        if self.data_type == DataType.INT32:
            return reader.read_int32()
        if self.data_type == DataType.INT64:
            return reader.read_int64()
        if self.data_type == DataType.FLOAT32:
            return reader.read_float32()
        if self.data_type == DataType.FLOAT64:
            return reader.read_float64()
        return reader.read_string(STRING_SIZES[self.data_type])

    def write(self, value: Any) -> bytes:
        """Encode a value for this variable."""
        writer = BinaryWriter()
        if self.data_type == DataType.INT32:
            writer.write_int32(value)
        elif self.data_type == DataType.INT64:
            writer.write_int64(value)
        elif self.data_type == DataType.FLOAT32:
            writer.write_float32(value)
        elif self.data_type == DataType.FLOAT64:
            writer.write_float64(value)
        else:
            writer.write_string(str(value), STRING_SIZES[self.data_type])
        return writer.to_bytes()

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "SimVarDefinition":
        """Create from a config entry like {units: feet, data_type: FLOAT64}.

        Raises:
            ConfigError: If the datatype is not recognized.
        """
        raw_type = data.get("data_type", "FLOAT64")
        try:
            data_type = DataType[raw_type] if isinstance(raw_type, str) else DataType(raw_type)
        except (KeyError, ValueError) as e:
            raise ConfigError(f"Unknown data type for {name}: {raw_type}") from e

        return cls(
            name=prop_name(name),
            units=data.get("units"),
            data_type=data_type,
            settable=bool(data.get("settable", False)),
        )


DEFAULT_SIMVARS: list[SimVarDefinition] = [
    # Position
    SimVarDefinition("PLANE LATITUDE", "degrees", DataType.FLOAT64, settable=True),
    SimVarDefinition("PLANE LONGITUDE", "degrees", DataType.FLOAT64, settable=True),
    SimVarDefinition("PLANE ALTITUDE", "feet", DataType.FLOAT64, settable=True),
    SimVarDefinition("PLANE ALT ABOVE GROUND", "feet", DataType.FLOAT64),
    SimVarDefinition("GROUND ALTITUDE", "feet", DataType.FLOAT64),
    # Attitude
    SimVarDefinition("PLANE HEADING DEGREES TRUE", "degrees", DataType.FLOAT64, settable=True),
    SimVarDefinition("PLANE HEADING DEGREES MAGNETIC", "degrees", DataType.FLOAT64, settable=True),
    SimVarDefinition("PLANE PITCH DEGREES", "degrees", DataType.FLOAT64, settable=True),
    SimVarDefinition("PLANE BANK DEGREES", "degrees", DataType.FLOAT64, settable=True),
    SimVarDefinition("MAGVAR", "degrees", DataType.FLOAT64),
    # Speeds
    SimVarDefinition("AIRSPEED INDICATED", "knots", DataType.FLOAT64, settable=True),
    SimVarDefinition("AIRSPEED TRUE", "knots", DataType.FLOAT64, settable=True),
    SimVarDefinition("GROUND VELOCITY", "knots", DataType.FLOAT64),
    SimVarDefinition("VERTICAL SPEED", "feet per minute", DataType.FLOAT64, settable=True),
    # State
    SimVarDefinition("SIM ON GROUND", "bool", DataType.INT32),
    SimVarDefinition("TITLE", None, DataType.STRING256),
    SimVarDefinition("CAMERA STATE", "number", DataType.INT32, settable=True),
    SimVarDefinition("AUTOPILOT MASTER", "bool", DataType.INT32),
    SimVarDefinition("AUTOPILOT HEADING LOCK DIR", "degrees", DataType.FLOAT64),
]


class SimVarTable:
    """Lookup table from variable names to definitions.

    Names are accepted with spaces or underscores.
    """

    def __init__(self, definitions: list[SimVarDefinition] | None = None) -> None:
        self._definitions: dict[str, SimVarDefinition] = {}
        for definition in definitions or []:
            self.add(definition)

    @classmethod
    def with_defaults(cls, extra: dict[str, dict[str, Any]] | None = None) -> "SimVarTable":
        """Create a table holding the built-in catalog plus config entries.

        Args:
            extra: Mapping of name to {units, data_type, settable}.
        """
        table = cls(DEFAULT_SIMVARS)
        for name, data in (extra or {}).items():
            table.add(SimVarDefinition.from_dict(name, data))
        return table

    def add(self, definition: SimVarDefinition) -> None:
        """Add or replace a definition."""
        self._definitions[prop_name(definition.name)] = definition

    def get(self, name: str) -> SimVarDefinition | None:
        """Get a definition by name, or None if unknown."""
        return self._definitions.get(prop_name(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and prop_name(name) in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
