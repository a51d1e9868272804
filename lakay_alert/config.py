"""
Configuration for the incident feed client.

Values come from the environment (a local .env file is loaded first) with
defaults matching the hosted LakayAlert deployment.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .models import Coordinates, MAX_MEDIA_BYTES, UNKNOWN_ZONE

# Used when the device position cannot be obtained (central Haiti)
FALLBACK_LOCATION = Coordinates(lat=18.9712, lng=-72.2852)

DEFAULT_API_URL = "http://localhost:54321/rest/v1"
DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_GEOLOCATION_URL = "http://ip-api.com/json"
DEFAULT_USER_AGENT = "LakayAlert Feed Client"


@dataclass
class FeedSettings:
    """Settings for one feed controller session."""
    api_url: str = DEFAULT_API_URL
    api_key: Optional[str] = None
    refresh_interval: float = 30.0  # seconds between polls
    stale_after: float = 60.0  # snapshot age considered stale
    request_timeout: Optional[float] = None  # None keeps the httpx default

    # Geolocation
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    ip_geolocation: bool = False
    geolocation_url: str = DEFAULT_GEOLOCATION_URL

    # Reverse geocoding (submission zone labels)
    geocoder_url: str = DEFAULT_GEOCODER_URL
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def device_position(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(lat=self.latitude, lng=self.longitude)


def _get_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def load_settings(env_file: Optional[str] = None) -> FeedSettings:
    """Build settings from the environment."""
    load_dotenv(env_file)

    return FeedSettings(
        api_url=os.getenv("LAKAY_API_URL", DEFAULT_API_URL).rstrip("/"),
        api_key=os.getenv("LAKAY_API_KEY") or None,
        refresh_interval=_get_float("LAKAY_REFRESH_INTERVAL", 30.0),
        stale_after=_get_float("LAKAY_STALE_AFTER", 60.0),
        request_timeout=_get_float("LAKAY_REQUEST_TIMEOUT", None),
        latitude=_get_float("LAKAY_LATITUDE", None),
        longitude=_get_float("LAKAY_LONGITUDE", None),
        ip_geolocation=os.getenv("LAKAY_IP_GEOLOCATION", "false").lower() == "true",
        geolocation_url=os.getenv("LAKAY_GEOLOCATION_URL", DEFAULT_GEOLOCATION_URL),
        geocoder_url=os.getenv("LAKAY_GEOCODER_URL", DEFAULT_GEOCODER_URL),
        user_agent=os.getenv("LAKAY_USER_AGENT", DEFAULT_USER_AGENT),
    )
