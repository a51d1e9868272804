"""Feed synchronization: cache, votes, controller and views."""

from .cache import FeedCache
from .votes import VoteMutator
from .controller import FeedController
from .views import IncidentView, build_view, category_label, map_markers, media_count, severity_class

__all__ = [
    "FeedCache",
    "VoteMutator",
    "FeedController",
    "IncidentView",
    "build_view",
    "category_label",
    "map_markers",
    "media_count",
    "severity_class",
]
