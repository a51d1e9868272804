"""
Vote mutations with at-most-one in-flight vote per incident.
"""

import logging
from typing import Awaitable, Callable, Optional, Set

from ..models import VoteDirection
from ..store import IncidentStoreClient
from .cache import FeedCache

logger = logging.getLogger(__name__)


class VoteMutator:
    """
    Applies vote intents against the store.

    An incident id stays in the pending set from the moment its vote is sent
    until the store answers. Further votes for that id are ignored meanwhile,
    so repeated clicks cannot double count. Only a successful vote
    invalidates the cache and triggers ``after_success``; a failed vote
    leaves the cache as it was.
    """

    def __init__(
        self,
        client: IncidentStoreClient,
        cache: FeedCache,
        after_success: Optional[Callable[[], Awaitable[object]]] = None,
    ):
        self._client = client
        self._cache = cache
        self._after_success = after_success
        self._pending: Set[str] = set()

    def is_pending(self, incident_id: str) -> bool:
        return incident_id in self._pending

    @property
    def pending(self) -> frozenset:
        return frozenset(self._pending)

    async def cast_vote(self, incident_id: str, direction: VoteDirection) -> bool:
        """
        Vote on an incident.

        Returns False without contacting the store if a vote for this id is
        already in flight, True once the vote has been recorded. Store
        errors propagate after the id is released.
        """
        direction = VoteDirection(direction)
        if incident_id in self._pending:
            logger.debug(f"Ignoring {direction.value} on {incident_id}: vote already in flight")
            return False

        self._pending.add(incident_id)
        try:
            await self._client.cast_vote(incident_id, direction)
            self._cache.invalidate()
        finally:
            self._pending.discard(incident_id)

        if self._after_success is not None:
            await self._after_success()
        return True
