"""
Feed cache: last good incident snapshot from the store.

The snapshot is only ever replaced wholesale by a successful refresh. A
failed refresh leaves it untouched so readers keep seeing the last known
good feed. Overlapping refreshes are not sequenced; whichever response
arrives last wins.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from ..models import Incident
from ..store import IncidentStoreClient

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER = 60.0  # seconds


class FeedCache:
    """Incident snapshot keyed by id, with staleness and invalidation tracking."""

    def __init__(
        self,
        client: IncidentStoreClient,
        stale_after: float = DEFAULT_STALE_AFTER,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client = client
        self.stale_after = stale_after
        self._clock = clock
        self._snapshot: Dict[str, Incident] = {}
        self._fetched_at: Optional[float] = None
        self._invalidated = False

    def get(self) -> List[Incident]:
        """Return the last good snapshot, possibly stale, in fetch order."""
        return list(self._snapshot.values())

    def lookup(self, incident_id: str) -> Optional[Incident]:
        return self._snapshot.get(incident_id)

    async def refresh(self) -> List[Incident]:
        """
        Fetch from the store and replace the snapshot.

        Always fetches. On failure the previous snapshot is kept and the
        store error is raised to the caller.
        """
        incidents = await self._client.list_incidents()

        self._snapshot = {incident.id: incident for incident in incidents}
        self._fetched_at = self._clock()
        self._invalidated = False
        logger.debug(f"Feed cache refreshed: {len(self._snapshot)} incidents")
        return self.get()

    def invalidate(self):
        """Mark the snapshot untrusted until the next successful refresh."""
        self._invalidated = True

    @property
    def invalidated(self) -> bool:
        return self._invalidated

    @property
    def fetched_at(self) -> Optional[float]:
        return self._fetched_at

    @property
    def age(self) -> Optional[float]:
        """Seconds since the last successful refresh, or None if never fetched."""
        if self._fetched_at is None:
            return None
        return self._clock() - self._fetched_at

    @property
    def is_stale(self) -> bool:
        age = self.age
        return age is None or age >= self.stale_after

    @property
    def needs_refresh(self) -> bool:
        """True when the snapshot should not be trusted for a new ranking pass."""
        return self._invalidated or self.is_stale
