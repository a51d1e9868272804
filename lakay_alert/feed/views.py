"""
Presentation helpers: display tiers, labels and per-incident view records.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel

from ..models import Coordinates, Incident, IncidentLocation, IncidentMedia, IncidentType, Severity
from ..processors import incident_distance

SEVERITY_TIERS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "orange",
    Severity.MODERATE: "yellow",
    Severity.LOW: "blue",
}
DEFAULT_TIER = "gray"

CATEGORY_LABELS = {
    IncidentType.GANG_ACTIVITY: "Gang Activity",
    IncidentType.SEXUAL_VIOLENCE: "Sexual Violence",
    IncidentType.CIVIL_UNREST: "Civil Unrest",
    IncidentType.KIDNAPPING: "Kidnapping",
    IncidentType.ROBBERY: "Robbery",
    IncidentType.NATURAL_DISASTER: "Natural Disaster",
    IncidentType.ROAD_CLOSURE: "Road Closure",
}


def severity_class(severity) -> str:
    """Display tier for a severity; unknown values get the neutral tier."""
    try:
        return SEVERITY_TIERS[Severity(severity)]
    except ValueError:
        return DEFAULT_TIER


def category_label(incident_type) -> str:
    try:
        return CATEGORY_LABELS[IncidentType(incident_type)]
    except ValueError:
        return str(incident_type).replace("_", " ").title()


def media_count(incident: Incident) -> int:
    return len(incident.media)


class IncidentView(BaseModel):
    """An incident with the fields list and detail views render."""
    id: str
    incident_type: IncidentType
    category_label: str
    severity: Severity
    severity_class: str
    description: Optional[str] = None
    location: Optional[IncidentLocation] = None
    created_at: datetime
    verified: bool
    upvotes: int
    downvotes: int
    media: List[IncidentMedia]
    media_count: int
    distance_km: Optional[float] = None


def build_view(incident: Incident, reference: Optional[Coordinates] = None) -> IncidentView:
    distance = incident_distance(incident, reference) if reference is not None else None
    return IncidentView(
        id=incident.id,
        incident_type=incident.incident_type,
        category_label=category_label(incident.incident_type),
        severity=incident.severity,
        severity_class=severity_class(incident.severity),
        description=incident.description,
        location=incident.location,
        created_at=incident.created_at,
        verified=incident.verified,
        upvotes=incident.upvotes,
        downvotes=incident.downvotes,
        media=list(incident.media),
        media_count=media_count(incident),
        distance_km=round(distance, 2) if distance is not None else None,
    )


def map_markers(incidents: Sequence[Incident]) -> List[Incident]:
    """Incidents that can be placed on a map (finite coordinates only)."""
    return [incident for incident in incidents if incident.has_location]
