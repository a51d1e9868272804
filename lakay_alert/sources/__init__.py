"""Position and zone-label sources."""

from .geolocation import GeolocationProvider, StaticGeolocation, IPGeolocation, provider_from_settings
from .geocoder import ReverseGeocoder, locate_submission

__all__ = [
    "GeolocationProvider",
    "StaticGeolocation",
    "IPGeolocation",
    "provider_from_settings",
    "ReverseGeocoder",
    "locate_submission",
]
