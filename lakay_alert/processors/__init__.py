"""Distance and ranking processors for incident feeds."""

from .distance import distance_km
from .ranker import rank, incident_distance

__all__ = ["distance_km", "rank", "incident_distance"]
