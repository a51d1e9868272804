"""
Incident models shared by the store client, the feed cache and the views.

Field aliases follow the store's wire format (``type``, ``incident_media``).
"""

import math
from datetime import datetime
from enum import Enum
from typing import List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_ZONE = "Unknown Area"

# Upload limit advertised by the report form (PNG, JPG, GIF, MP4 up to 10MB)
MAX_MEDIA_BYTES = 10 * 1024 * 1024


class IncidentType(str, Enum):
    """Incident category as reported by the community."""
    GANG_ACTIVITY = "GANG_ACTIVITY"
    SEXUAL_VIOLENCE = "SEXUAL_VIOLENCE"
    CIVIL_UNREST = "CIVIL_UNREST"
    KIDNAPPING = "KIDNAPPING"
    ROBBERY = "ROBBERY"
    NATURAL_DISASTER = "NATURAL_DISASTER"
    ROAD_CLOSURE = "ROAD_CLOSURE"


class Severity(str, Enum):
    """Severity level, most severe first."""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class VoteDirection(str, Enum):
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class Coordinates(NamedTuple):
    """A bare latitude/longitude pair in degrees."""
    lat: float
    lng: float


class IncidentLocation(BaseModel):
    """Where an incident happened, with a human-readable zone label."""
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    zone: str = UNKNOWN_ZONE

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.lat, self.lng)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lng)


class IncidentMedia(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: MediaType
    url: str


class Incident(BaseModel):
    """Incident record as last fetched from the store."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    incident_type: IncidentType = Field(alias="type")
    severity: Severity
    description: Optional[str] = None
    location: Optional[IncidentLocation] = None
    created_at: datetime
    verified: bool = False
    upvotes: int = 0
    downvotes: int = 0
    media: List[IncidentMedia] = Field(default_factory=list, alias="incident_media")

    @field_validator("media", mode="before")
    @classmethod
    def _null_media(cls, value):
        # The store returns null rather than [] for incidents without media
        return [] if value is None else value

    @property
    def has_location(self) -> bool:
        return self.location is not None and self.location.is_finite


class MediaPayload(BaseModel):
    """A media file attached to a new report."""
    filename: str
    content_type: str
    data: bytes = Field(repr=False)

    @field_validator("content_type")
    @classmethod
    def _image_or_video(cls, value: str) -> str:
        value = value.split(";")[0].strip().lower()
        if not value.startswith(("image/", "video/")):
            raise ValueError(f"Unsupported media type: {value}")
        return value

    @field_validator("data")
    @classmethod
    def _size_limit(cls, value: bytes) -> bytes:
        if len(value) > MAX_MEDIA_BYTES:
            raise ValueError(f"Media file exceeds {MAX_MEDIA_BYTES // (1024 * 1024)}MB limit")
        return value


class IncidentCreate(BaseModel):
    """Draft for a new incident report."""
    model_config = ConfigDict(populate_by_name=True)

    incident_type: IncidentType = Field(alias="type")
    severity: Severity
    description: Optional[str] = None
    location: IncidentLocation
    anonymous: bool = False
    media: List[MediaPayload] = Field(default_factory=list)

    def to_payload(self) -> dict:
        """JSON body for the store, without the media files."""
        return self.model_dump(mode="json", by_alias=True, exclude={"media"})
