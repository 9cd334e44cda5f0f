"""Exception types raised by the MSFS API.

All errors derive from MSFSApiError so callers can catch everything coming
out of the library with a single except clause.
"""


class MSFSApiError(Exception):
    """Base class for all MSFS API errors."""


class ConfigError(MSFSApiError):
    """Raised when configuration operations fail."""


class TransportError(MSFSApiError):
    """Raised when the transport cannot be opened or a command cannot be sent."""


class SimConnectionError(MSFSApiError):
    """Raised when no connection to the simulator could be established."""


class ResourceIdExhaustedError(MSFSApiError):
    """Raised when every protocol ID in the allocator range is reserved."""


class UnknownPropertyError(MSFSApiError):
    """Raised when a get/set names a property missing from the property table.

    Attributes:
        name: The property name that could not be resolved.
    """

    def __init__(self, name: str, action: str = "get") -> None:
        super().__init__(f'Cannot {action} SimVar: "{name}" unknown.')
        self.name = name
        self.action = action


class RequestTimeoutError(MSFSApiError):
    """Raised when no matching response arrived within the request timeout.

    Attributes:
        request_id: Protocol ID the request was waiting on.
        timeout: Timeout that expired, in seconds.
    """

    def __init__(self, request_id: int, timeout: float) -> None:
        super().__init__(f"No response for request {request_id} after {timeout:.1f}s")
        self.request_id = request_id
        self.timeout = timeout
