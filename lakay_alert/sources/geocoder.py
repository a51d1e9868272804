"""
Reverse geocoding for submission zone labels.

Best effort only: any failure yields "Unknown Area" rather than an error.
"""

import logging
from typing import Optional

import httpx

from ..config import DEFAULT_GEOCODER_URL, DEFAULT_USER_AGENT
from ..models import UNKNOWN_ZONE, IncidentLocation
from .geolocation import GeolocationProvider

logger = logging.getLogger(__name__)

# Nominatim address keys, most specific first
ZONE_KEYS = ("suburb", "neighbourhood", "city_district")


class ReverseGeocoder:
    """Look up a human-readable zone for a coordinate (Nominatim/OpenStreetMap)."""

    def __init__(
        self,
        url: str = DEFAULT_GEOCODER_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout
        self._client = client

    async def zone_label(self, lat: float, lng: float) -> str:
        """Return the zone label for a coordinate, or "Unknown Area"."""
        params = {"lat": lat, "lon": lng, "format": "json"}
        headers = {"User-Agent": self.user_agent}
        kwargs = {"timeout": self.timeout} if self.timeout is not None else {}

        try:
            if self._client is not None:
                response = await self._client.get(self.url, params=params, headers=headers, **kwargs)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(self.url, params=params, headers=headers, **kwargs)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Reverse geocoding failed for ({lat}, {lng}): {e}")
            return UNKNOWN_ZONE

        address = data.get("address") if isinstance(data, dict) else None
        if not isinstance(address, dict):
            return UNKNOWN_ZONE

        for key in ZONE_KEYS:
            if address.get(key):
                return str(address[key])
        return UNKNOWN_ZONE


async def locate_submission(geolocation: GeolocationProvider, geocoder: ReverseGeocoder) -> IncidentLocation:
    """
    Resolve the location for a new report.

    Unlike the feed reference location there is no fallback here: a report
    must carry the reporter's real position, so LocationError propagates.
    """
    position = await geolocation.get_current_position()
    zone = await geocoder.zone_label(position.lat, position.lng)
    return IncidentLocation(lat=position.lat, lng=position.lng, zone=zone)
