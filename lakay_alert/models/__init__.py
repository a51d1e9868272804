"""
Pydantic models for the incident feed.
"""

from .incident import (
    MAX_MEDIA_BYTES,
    UNKNOWN_ZONE,
    IncidentType,
    Severity,
    MediaType,
    VoteDirection,
    Coordinates,
    IncidentLocation,
    IncidentMedia,
    Incident,
    MediaPayload,
    IncidentCreate,
)

__all__ = [
    "MAX_MEDIA_BYTES",
    "UNKNOWN_ZONE",
    "IncidentType",
    "Severity",
    "MediaType",
    "VoteDirection",
    "Coordinates",
    "IncidentLocation",
    "IncidentMedia",
    "Incident",
    "MediaPayload",
    "IncidentCreate",
]
