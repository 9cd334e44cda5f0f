"""Bounded protocol ID allocation.

The simulator protocol only accepts small integer IDs for data definitions,
requests and client events. ResourceIdAllocator hands those out from a fixed
range, recycling released values on wraparound.

Typical usage:
    allocator = ResourceIdAllocator()
    request_id = allocator.next_id()
    ...
    allocator.release_id(request_id)
"""

from msfs_api.core.errors import ResourceIdExhaustedError


class ResourceIdAllocator:
    """Issues reusable integer IDs in the range [first_id, ceiling].

    An ID stays reserved until release_id() is called for it, and next_id()
    never returns a reserved value. Callers are expected to keep the number of
    concurrently outstanding IDs well below the size of the range.

    Attributes:
        first_id: Lowest ID handed out (and the value the counter wraps to).
        ceiling: Highest ID handed out.
    """

    DEFAULT_FIRST_ID = 1
    DEFAULT_CEILING = 900

    def __init__(self, first_id: int = DEFAULT_FIRST_ID, ceiling: int = DEFAULT_CEILING) -> None:
        """Initialize allocator.

        Args:
            first_id: Lowest ID in the range.
            ceiling: Highest ID in the range (inclusive).
        """
        if ceiling < first_id:
            raise ValueError(f"Invalid ID range: {first_id}..{ceiling}")

        self.first_id = first_id
        self.ceiling = ceiling
        self._counter = first_id
        self._reserved: set[int] = set()

    @property
    def capacity(self) -> int:
        """Number of distinct IDs in the range."""
        return self.ceiling - self.first_id + 1

    @property
    def reserved_count(self) -> int:
        """Number of IDs currently reserved."""
        return len(self._reserved)

    def is_reserved(self, value: int) -> bool:
        """Check whether an ID is currently reserved."""
        return value in self._reserved

    def next_id(self) -> int:
        """Reserve and return the next free ID.

        Returns:
            A previously unreserved ID, now marked reserved.

        Raises:
            ResourceIdExhaustedError: If every ID in the range is reserved.
        """
        if len(self._reserved) >= self.capacity:
            raise ResourceIdExhaustedError(
                f"All {self.capacity} protocol IDs are reserved"
            )

        while True:
            if self._counter > self.ceiling:
                self._counter = self.first_id
            candidate = self._counter
            self._counter += 1
            if candidate not in self._reserved:
                break

        self._reserved.add(candidate)
        return candidate

    def release_id(self, value: int) -> None:
        """Release a reserved ID. Releasing an unreserved ID is a no-op."""
        self._reserved.discard(value)
