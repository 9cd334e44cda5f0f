"""MSFS API - async client for Microsoft Flight Simulator.

Components:
    - api.py: MSFSApi facade (get/set/on/off/trigger/schedule)
    - core/: ID allocation, event multiplexing, request correlation, config
    - transport/: transport contract and the WebSocket bridge transport
    - airports/: airport database, facility record decoding, nearby queries

Typical usage:
    from msfs_api import MSFSApi, SystemEvents

    async def main():
        api = MSFSApi()
        await api.connect(retries=3, retry_interval=5)
        print(await api.get("PLANE_ALTITUDE"))
        await api.close()
"""

from msfs_api.api import MSFSApi
from msfs_api.core.config import ApiConfig, load_config
from msfs_api.core.errors import (
    ConfigError,
    MSFSApiError,
    RequestTimeoutError,
    ResourceIdExhaustedError,
    SimConnectionError,
    TransportError,
    UnknownPropertyError,
)
from msfs_api.system_events import SystemEvent, SystemEvents
from msfs_api.version import __version__

__all__ = [
    # API
    "MSFSApi",
    "SystemEvent",
    "SystemEvents",
    # Config
    "ApiConfig",
    "load_config",
    # Errors
    "MSFSApiError",
    "ConfigError",
    "RequestTimeoutError",
    "ResourceIdExhaustedError",
    "SimConnectionError",
    "TransportError",
    "UnknownPropertyError",
    "__version__",
]
