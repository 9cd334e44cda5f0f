"""Little-endian binary cursors for protocol payloads.

Simulator payloads are packed structures with fixed field order and no
padding. BinaryReader walks such a payload field by field; BinaryWriter
builds one.
"""

import struct

from msfs_api.core.errors import MSFSApiError


class BinaryDecodeError(MSFSApiError):
    """Raised when a payload is shorter than the fields read from it."""


class BinaryReader:
    """Sequential reader over a bytes payload.

    Examples:
        >>> reader = BinaryReader(payload)
        >>> latitude = reader.read_float64()
        >>> name = reader.read_string(32)
    """

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._offset = 0

    @property
    def offset(self) -> int:
        """Current read position in bytes."""
        return self._offset

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self._offset

    def _take(self, size: int) -> memoryview:
        if size > self.remaining:
            raise BinaryDecodeError(
                f"Need {size} bytes at offset {self._offset}, only {self.remaining} left"
            )
        chunk = self._data[self._offset : self._offset + size]
        self._offset += size
        return chunk

    def _unpack(self, fmt: str) -> int | float:
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))[0]

    def read_int32(self) -> int:
        return int(self._unpack("<i"))

    def read_int64(self) -> int:
        return int(self._unpack("<q"))

    def read_float32(self) -> float:
        return float(self._unpack("<f"))

    def read_float64(self) -> float:
        return float(self._unpack("<d"))

    def read_string(self, size: int) -> str:
        """Read a fixed-width, NUL-padded string field."""
        raw = bytes(self._take(size))
        return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


class BinaryWriter:
    """Builds a packed little-endian payload."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def write_int32(self, value: int) -> "BinaryWriter":
        self._buffer += struct.pack("<i", int(value))
        return self

    def write_int64(self, value: int) -> "BinaryWriter":
        self._buffer += struct.pack("<q", int(value))
        return self

    def write_float32(self, value: float) -> "BinaryWriter":
        self._buffer += struct.pack("<f", float(value))
        return self

    def write_float64(self, value: float) -> "BinaryWriter":
        self._buffer += struct.pack("<d", float(value))
        return self

    def write_string(self, value: str, size: int) -> "BinaryWriter":
        """Write a fixed-width string, truncated and NUL-padded to size."""
        encoded = value.encode("utf-8")[: size - 1]
        self._buffer += encoded.ljust(size, b"\x00")
        return self

    def to_bytes(self) -> bytes:
        """Get the payload built so far."""
        return bytes(self._buffer)
