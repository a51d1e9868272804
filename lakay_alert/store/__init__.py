"""Remote incident store access."""

from .client import IncidentStoreClient

__all__ = ["IncidentStoreClient"]
