"""
One-shot device position providers.

Providers either return a position or raise LocationError with the reason;
they never fall back on their own. Falling back is the feed controller's job.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..config import DEFAULT_GEOLOCATION_URL, FeedSettings
from ..errors import LocationError, LocationFailure
from ..models import Coordinates

logger = logging.getLogger(__name__)


class GeolocationProvider(ABC):
    """Base class for position sources."""

    @abstractmethod
    async def get_current_position(self) -> Coordinates:
        """Return the current position or raise LocationError."""
        pass


class StaticGeolocation(GeolocationProvider):
    """Position fixed by configuration; unsupported when none is configured."""

    def __init__(self, position: Optional[Coordinates] = None):
        self.position = position

    async def get_current_position(self) -> Coordinates:
        if self.position is None:
            raise LocationError(LocationFailure.UNSUPPORTED, "No device position configured")
        return self.position


class IPGeolocation(GeolocationProvider):
    """Approximate position from an IP lookup service (ip-api.com compatible)."""

    def __init__(
        self,
        url: str = DEFAULT_GEOLOCATION_URL,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._client = client

    async def get_current_position(self) -> Coordinates:
        try:
            if self._client is not None:
                response = await self._request(self._client)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._request(client)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise LocationError(LocationFailure.TIMEOUT, "Position lookup timed out", original=e)
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                raise LocationError(LocationFailure.PERMISSION_DENIED, "Position lookup refused", original=e)
            raise LocationError(LocationFailure.UNAVAILABLE, f"HTTP {e.response.status_code}", original=e)
        except (httpx.HTTPError, ValueError) as e:
            raise LocationError(LocationFailure.UNAVAILABLE, str(e), original=e)

        if not isinstance(data, dict):
            raise LocationError(LocationFailure.UNAVAILABLE, "Unexpected lookup response")
        if data.get("status", "success") != "success":
            raise LocationError(LocationFailure.UNAVAILABLE, data.get("message", "lookup failed"))

        lat = data.get("lat", data.get("latitude"))
        lng = data.get("lon", data.get("longitude"))
        if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            raise LocationError(LocationFailure.UNAVAILABLE, "Lookup returned no coordinates")
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise LocationError(LocationFailure.UNAVAILABLE, "Lookup returned invalid coordinates")

        logger.debug(f"IP geolocation: ({lat}, {lng})")
        return Coordinates(float(lat), float(lng))

    async def _request(self, client: httpx.AsyncClient) -> httpx.Response:
        kwargs = {"timeout": self.timeout} if self.timeout is not None else {}
        return await client.get(self.url, **kwargs)


def provider_from_settings(settings: FeedSettings) -> GeolocationProvider:
    """Pick the provider the settings ask for."""
    if settings.device_position is not None:
        return StaticGeolocation(settings.device_position)
    if settings.ip_geolocation:
        return IPGeolocation(settings.geolocation_url, timeout=settings.request_timeout)
    return StaticGeolocation(None)
