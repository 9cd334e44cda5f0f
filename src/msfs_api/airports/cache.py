"""Airport database acquisition, persistence and queries.

On first use the complete airport list is read from the simulator and every
airport's details (runways, approaches) are fetched one at a time, which can
take a long while. The result is persisted as a gzip-compressed JSON
snapshot and reloaded on later runs.

Snapshot format:
    {"version": 1, "airports": [<Airport.to_dict()>, ...]}

Typical usage:
    cache = AirportCache(transport, allocator, correlator, config.airports, position)
    await cache.build()
    result = await cache.get("NEARBY AIRPORTS:25")
"""

import asyncio
import gzip
import json
import logging
import zlib
from collections import deque
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from msfs_api.airports.constants import AIRPORT_DETAIL_FIELDS, FACILITY_LIST_TYPE_AIRPORT
from msfs_api.airports.decoder import AirportRecordBuilder
from msfs_api.airports.geo import GeoQuery
from msfs_api.airports.models import Airport, FacilityListEntry
from msfs_api.airports.queries import SpecialQueryKind, parse_special_query
from msfs_api.binary import BinaryDecodeError
from msfs_api.core.config import AirportConfig
from msfs_api.core.errors import RequestTimeoutError
from msfs_api.core.ids import ResourceIdAllocator
from msfs_api.core.requests import RequestCorrelator
from msfs_api.simvars import code_safe
from msfs_api.transport.base import Transport
from msfs_api.transport.protocol import FacilityData, FacilityDataEnd, FacilityListPage

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

PositionProvider = Callable[[], Awaitable[tuple[float, float]]]


class AirportCache:
    """Owns the decoded airport set and answers special airport queries.

    The airport set is replaced exactly once, when build() completes; queries
    wait until then.
    """

    PROGRESS_LOG_INTERVAL = 1000

    def __init__(
        self,
        transport: Transport,
        allocator: ResourceIdAllocator,
        correlator: RequestCorrelator,
        config: AirportConfig | None = None,
        position: PositionProvider | None = None,
    ) -> None:
        """Initialize cache.

        Args:
            transport: Transport used for facility requests.
            allocator: Allocator shared with the rest of the API.
            correlator: Correlator fed with the transport's inbound events.
            config: Airport settings (snapshot path, default radius, timeouts).
            position: Coroutine function returning the aircraft's
                (latitude, longitude) in degrees, used by NEARBY AIRPORTS.
        """
        self._transport = transport
        self._allocator = allocator
        self._correlator = correlator
        self.config = config or AirportConfig()
        self._position = position

        self._airports: list[Airport] = []
        self._geo = GeoQuery(self._airports)
        self._ready = asyncio.Event()
        self._build_error: BaseException | None = None

    @property
    def path(self) -> Path:
        """Location of the persisted snapshot."""
        return self.config.cache_path

    @property
    def ready(self) -> bool:
        """True once the airport set is available (or the build failed)."""
        return self._ready.is_set()

    @property
    def airports(self) -> list[Airport]:
        """Every airport in the database, in build order."""
        return list(self._airports)

    async def wait_ready(self) -> None:
        """Wait until build() has finished.

        Raises:
            The exception that made the build fail, if it failed.
        """
        await self._ready.wait()
        if self._build_error is not None:
            raise self._build_error

    async def build(self) -> None:
        """Load or build the airport database.

        The live facility list is always read first. A readable snapshot is
        used even when its size differs from the live count (a warning is
        logged); otherwise every airport's details are fetched and the result
        is persisted.
        """
        try:
            entries = await self.fetch_facility_list()
            logger.info("Simulator reported %d airports", len(entries))

            airports = self.load_snapshot()
            if airports is not None:
                if len(airports) != len(entries):
                    logger.warning(
                        "Simulator has %d airports, database has %d airports; "
                        "delete %s to rebuild it",
                        len(entries),
                        len(airports),
                        self.path,
                    )
            else:
                logger.info("No airport database found: building a new one")
                airports = await self.fetch_details(entries)
                self.save_snapshot(airports)
        except Exception as e:
            logger.error("Airport database build failed: %s", e)
            self._build_error = e
            self._ready.set()
            raise

        self._set_airports(airports)
        logger.info("Airport database ready (%d airports)", len(airports))

    def _set_airports(self, airports: list[Airport]) -> None:
        self._airports = airports
        self._geo = GeoQuery(airports)
        self._build_error = None
        self._ready.set()

    async def fetch_facility_list(self) -> list[FacilityListEntry]:
        """Read every page of the airport facility list.

        Returns:
            Entries of all pages, in page order.
        """

        async def issue(request_id: int) -> None:
            await self._transport.request_facilities_list(FACILITY_LIST_TYPE_AIRPORT, request_id)

        entries: list[FacilityListEntry] = []
        async with self._correlator.stream((FacilityListPage,), issue) as stream:
            last_page = False
            while not last_page:
                page = await stream.next()
                entries.extend(page.entries)
                last_page = page.is_last
                logger.debug("Facility list page %d of %d", page.entry_number + 1, page.out_of)
        return entries

    async def fetch_details(self, entries: list[FacilityListEntry]) -> list[Airport]:
        """Fetch airport details one airport at a time.

        Airports whose detail fetch times out or cannot be decoded are logged
        and left out.

        Args:
            entries: Facility list entries to fetch.

        Returns:
            Decoded airports, in entry order.
        """
        definition_id = self._allocator.next_id()
        try:
            for field_name in AIRPORT_DETAIL_FIELDS:
                await self._transport.add_to_facility_definition(definition_id, field_name)

            queue = deque(entries)
            total = len(queue)
            airports: list[Airport] = []
            while queue:
                entry = queue.popleft()
                done = total - len(queue)
                if done % self.PROGRESS_LOG_INTERVAL == 0:
                    logger.info("Fetching airport details: %.2f%%", done / total * 100)

                try:
                    airports.append(await self.fetch_airport(definition_id, entry.icao))
                except RequestTimeoutError as e:
                    logger.warning("Skipping %s: %s", entry.icao, e)
                except BinaryDecodeError as e:
                    logger.warning("Skipping %s: undecodable record: %s", entry.icao, e)
            return airports
        finally:
            self._allocator.release_id(definition_id)

    async def fetch_airport(self, definition_id: int, icao: str) -> Airport:
        """Fetch and decode one airport's records.

        Args:
            definition_id: Facility definition set up with AIRPORT_DETAIL_FIELDS.
            icao: ICAO code of the airport.

        Returns:
            The decoded airport.

        Raises:
            RequestTimeoutError: If a record or the end marker did not arrive in time.
        """

        async def issue(request_id: int) -> None:
            await self._transport.request_facility_data(definition_id, request_id, icao)

        builder = AirportRecordBuilder(icao)
        async with self._correlator.stream(
            (FacilityData, FacilityDataEnd), issue, timeout=self.config.detail_timeout_s
        ) as stream:
            while True:
                event = await stream.next()
                if isinstance(event, FacilityDataEnd):
                    break
                builder.add_record(event.record_type, event.data)
        return builder.build()

    def load_snapshot(self) -> list[Airport] | None:
        """Read the persisted snapshot.

        Returns:
            The airports, or None if the snapshot is missing, unreadable or
            written in another format version.
        """
        if not self.path.exists():
            return None

        try:
            with gzip.open(self.path, "rt", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Error loading airport database %s: %s", self.path, e)
            return None

        if not isinstance(data, dict) or data.get("version") != SNAPSHOT_VERSION:
            logger.warning("Ignoring airport database %s: unsupported format", self.path)
            return None

        try:
            return [Airport.from_dict(item) for item in data.get("airports", [])]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("Error decoding airport database %s: %s", self.path, e)
            return None

    def save_snapshot(self, airports: list[Airport]) -> None:
        """Persist airports as a compressed snapshot, replacing any previous one."""
        data = {
            "version": SNAPSHOT_VERSION,
            "airports": [airport.to_dict() for airport in airports],
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(".tmp")
            with gzip.open(temp_path, "wt", encoding="utf-8") as f:
                json.dump(data, f)
            temp_path.replace(self.path)
            logger.info("Saved airport database: %s", self.path)
        except OSError as e:
            logger.error("Error saving airport database: %s", e)

    def nearby(
        self, latitude: float, longitude: float, radius_nm: float | None = None
    ) -> list[tuple[Airport, float]]:
        """Get airports within radius_nm (default from config) of a point."""
        if radius_nm is None:
            radius_nm = self.config.default_radius_nm
        return self._geo.nearby(latitude, longitude, radius_nm)

    def by_icao(self, code: str) -> Airport | None:
        """Get an airport by exact ICAO code."""
        return self._geo.by_icao(code)

    async def get(self, var_name: str) -> dict[str, Any]:
        """Answer a special airport variable.

        Args:
            var_name: ALL AIRPORTS, NEARBY AIRPORTS[:<nm>] or AIRPORT:<ICAO>.

        Returns:
            {code-safe name: value}, or an empty dict for other names.
        """
        query = parse_special_query(var_name)
        if query is None:
            return {}

        await self.wait_ready()
        key = code_safe(var_name)

        if query.kind == SpecialQueryKind.ALL_AIRPORTS:
            return {key: self.airports}
        elif query.kind == SpecialQueryKind.NEARBY_AIRPORTS:
            if self._position is None:
                raise RuntimeError("No aircraft position provider configured")
            latitude, longitude = await self._position()
            return {key: self.nearby(latitude, longitude, query.radius_nm)}
        else:
            return {key: self.by_icao(query.icao or "")}
