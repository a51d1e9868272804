"""
Proximity ranking of incidents relative to a reference location.
"""

from typing import List, Optional, Sequence

from ..models import Coordinates, Incident
from .distance import distance_km


def incident_distance(incident: Incident, reference: Coordinates) -> Optional[float]:
    """Distance from ``reference`` to the incident, or None if it has no usable location."""
    if not incident.has_location:
        return None
    return distance_km(reference.lat, reference.lng, incident.location.lat, incident.location.lng)


def rank(incidents: Sequence[Incident], reference: Optional[Coordinates]) -> Sequence[Incident]:
    """
    Order incidents nearest first.

    Incidents without a location cannot be compared, so they keep their
    original index and the located incidents are sorted around them. The
    sort is stable: equidistant incidents keep their fetch order.

    Returns ``incidents`` itself when there is no reference or nothing to rank.
    """
    if reference is None or not incidents:
        return incidents

    distances = [incident_distance(inc, reference) for inc in incidents]
    slots = [i for i, dist in enumerate(distances) if dist is not None]
    by_distance = sorted(slots, key=lambda i: distances[i])

    ranked: List[Incident] = list(incidents)
    for slot, source in zip(slots, by_distance):
        ranked[slot] = incidents[source]
    return ranked
