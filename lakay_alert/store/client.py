"""
HTTP client for the remote incident store.

Three operations: list, create and vote. Every failure is classified into
the store error taxonomy; nothing is retried here.
"""

import json
import logging
from typing import List, Optional
from urllib.parse import quote

import httpx
import pydantic

from ..errors import classify_http_error
from ..models import Incident, IncidentCreate, VoteDirection

logger = logging.getLogger(__name__)


class IncidentStoreClient:
    """Async client for the incident store REST endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        if client is None:
            headers = {"Accept": "application/json"}
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
                headers["apikey"] = api_key
            kwargs = {"timeout": timeout} if timeout is not None else {}
            client = httpx.AsyncClient(headers=headers, **kwargs)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    async def __aenter__(self) -> "IncidentStoreClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    async def list_incidents(self) -> List[Incident]:
        """Fetch every incident. Raises TransportError."""
        try:
            response = await self._client.get(f"{self.base_url}/incidents")
            response.raise_for_status()
            payload = response.json()
            if isinstance(payload, dict):
                payload = payload.get("incidents", [])
            incidents = [Incident.model_validate(item) for item in payload]
        except (httpx.HTTPError, ValueError, TypeError, pydantic.ValidationError) as e:
            raise classify_http_error(e, "list") from e

        logger.debug(f"Fetched {len(incidents)} incidents")
        return incidents

    async def create_incident(self, draft: IncidentCreate) -> Incident:
        """Submit a new report. Raises ValidationError or TransportError."""
        url = f"{self.base_url}/incidents"
        try:
            if draft.media:
                files = [
                    ("media", (item.filename, item.data, item.content_type))
                    for item in draft.media
                ]
                response = await self._client.post(
                    url,
                    data={"incident": json.dumps(draft.to_payload())},
                    files=files,
                )
            else:
                response = await self._client.post(url, json=draft.to_payload())
            response.raise_for_status()
            payload = response.json()
            # PostgREST-style stores answer inserts with a one-row list
            if isinstance(payload, list):
                payload = payload[0]
            incident = Incident.model_validate(payload)
        except (httpx.HTTPError, ValueError, TypeError, IndexError, pydantic.ValidationError) as e:
            raise classify_http_error(e, "create") from e

        logger.info(f"Created incident {incident.id} ({incident.incident_type.value}, {len(draft.media)} media)")
        return incident

    async def cast_vote(self, incident_id: str, direction: VoteDirection) -> None:
        """Record a vote. Raises NotFoundError or TransportError."""
        direction = VoteDirection(direction)
        try:
            response = await self._client.patch(
                f"{self.base_url}/incidents/{quote(incident_id, safe='')}/votes",
                json={"direction": direction.value},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise classify_http_error(e, "vote") from e

        logger.debug(f"Recorded {direction.value} on incident {incident_id}")
