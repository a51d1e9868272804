"""
Feed controller: reference location, periodic refresh and the ranked feed.

One controller per session. It owns its cache and vote mutator; nothing
here is a process-wide singleton, so several controllers can coexist.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from ..config import FALLBACK_LOCATION, FeedSettings
from ..errors import LocationError, StoreError
from ..models import Coordinates, Incident, IncidentCreate, VoteDirection
from ..processors import rank
from ..sources import GeolocationProvider, provider_from_settings
from ..store import IncidentStoreClient
from .cache import DEFAULT_STALE_AFTER, FeedCache
from .votes import VoteMutator

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 30.0  # seconds


class FeedController:
    """Keeps the incident feed fresh and ranked for presentation."""

    def __init__(
        self,
        client: IncidentStoreClient,
        geolocation: GeolocationProvider,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        stale_after: float = DEFAULT_STALE_AFTER,
        cache: Optional[FeedCache] = None,
    ):
        self.client = client
        self.geolocation = geolocation
        self.refresh_interval = refresh_interval
        self.cache = cache or FeedCache(client, stale_after=stale_after)
        self.votes = VoteMutator(client, self.cache, after_success=self.refresh)

        self.reference_location: Optional[Coordinates] = None
        self.location_error: Optional[LocationError] = None
        self.last_error: Optional[StoreError] = None
        self._location_requested = False
        self.running = False
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings: FeedSettings) -> "FeedController":
        client = IncidentStoreClient(
            settings.api_url,
            api_key=settings.api_key,
            timeout=settings.request_timeout,
        )
        return cls(
            client,
            provider_from_settings(settings),
            refresh_interval=settings.refresh_interval,
            stale_after=settings.stale_after,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, poll: bool = True):
        """Resolve the reference location, load the feed and start polling."""
        if self.running:
            return
        self.running = True
        await self.resolve_reference_location()
        await self.refresh()
        if poll:
            self._task = asyncio.create_task(self._run_loop())
        logger.info("Feed controller started")

    async def stop(self):
        """Stop the poll loop."""
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Feed controller stopped")

    async def aclose(self):
        """Stop polling and release the store client."""
        await self.stop()
        await self.client.aclose()

    async def _run_loop(self):
        while self.running:
            try:
                await asyncio.sleep(self.refresh_interval)
                await self.refresh()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Feed poll loop error: {e}")

    # ------------------------------------------------------------------
    # Reference location
    # ------------------------------------------------------------------

    async def resolve_reference_location(self) -> Optional[Coordinates]:
        """
        Ask for the device position once per session.

        Any geolocation failure falls back to the fixed default coordinate.
        Later calls return whatever the first call settled on.
        """
        if self._location_requested:
            return self.reference_location
        self._location_requested = True

        try:
            self.reference_location = await self.geolocation.get_current_position()
            logger.info(f"Reference location: {self.reference_location}")
        except LocationError as e:
            self.location_error = e
            self.reference_location = FALLBACK_LOCATION
            logger.info(f"Geolocation unavailable ({e}); using fallback {FALLBACK_LOCATION}")
        return self.reference_location

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """
        Refresh the cache. Returns True on success.

        Fetch errors are recorded in ``last_error`` instead of raised; the
        previous snapshot stays visible.
        """
        try:
            await self.cache.refresh()
        except StoreError as e:
            self.last_error = e
            logger.warning(f"Feed refresh failed: {e}")
            return False
        self.last_error = None
        return True

    async def ensure_fresh(self) -> bool:
        """Refresh only if the snapshot is stale or invalidated."""
        if not self.cache.needs_refresh:
            return True
        return await self.refresh()

    @property
    def feed_unavailable(self) -> bool:
        return self.last_error is not None

    def current_feed(self) -> Sequence[Incident]:
        """Cached incidents ranked by distance from the reference location."""
        return rank(self.cache.get(), self.reference_location)

    def get_incident(self, incident_id: str) -> Optional[Incident]:
        """A cached incident for the detail view, or None if unknown or unlocated."""
        incident = self.cache.lookup(incident_id)
        if incident is None or not incident.has_location:
            return None
        return incident

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def submit_incident(self, draft: IncidentCreate) -> Incident:
        """Create an incident, then refresh. Store errors propagate."""
        incident = await self.client.create_incident(draft)
        self.cache.invalidate()
        await self.refresh()
        return incident

    async def vote(self, incident_id: str, direction: VoteDirection) -> bool:
        """Vote on an incident; False if a vote for it is already in flight."""
        return await self.votes.cast_vote(incident_id, direction)

    def pending_votes(self) -> List[str]:
        return sorted(self.votes.pending)
