"""
LakayAlert incident feed

Keeps a local view of community incident reports in sync with the remote
store, ranks it by distance from the user and applies votes safely.
"""

from .config import FALLBACK_LOCATION, FeedSettings, load_settings
from .feed import FeedCache, FeedController, VoteMutator
from .processors import distance_km, rank
from .store import IncidentStoreClient

__version__ = "1.0.0"
__all__ = [
    "FALLBACK_LOCATION",
    "FeedSettings",
    "load_settings",
    "FeedCache",
    "FeedController",
    "VoteMutator",
    "distance_km",
    "rank",
    "IncidentStoreClient",
]
