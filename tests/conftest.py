"""Shared fixtures and fakes for the feed tests."""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

import pytest

from lakay_alert.errors import NotFoundError, TransportError
from lakay_alert.models import Incident, IncidentCreate, IncidentLocation, VoteDirection

PORT_AU_PRINCE = (18.5392, -72.3364)


def make_incident(
    incident_id: str,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    zone: str = "Delmas",
    **overrides,
) -> Incident:
    data = {
        "id": incident_id,
        "type": "ROBBERY",
        "severity": "HIGH",
        "description": f"Incident {incident_id}",
        "created_at": datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        "location": IncidentLocation(lat=lat, lng=lng, zone=zone) if lat is not None else None,
    }
    data.update(overrides)
    return Incident.model_validate(data)


class FakeStore:
    """In-memory stand-in for IncidentStoreClient.

    ``list_gate`` / ``vote_gate`` hold calls open until the test sets them.
    """

    def __init__(self, incidents: Optional[List[Incident]] = None):
        self.incidents = list(incidents or [])
        self.list_calls = 0
        self.vote_calls: list = []
        self.created: list = []
        self.list_error: Optional[Exception] = None
        self.vote_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None
        self.vote_gate: Optional[asyncio.Event] = None
        self.closed = False

    async def list_incidents(self) -> List[Incident]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.incidents)

    async def create_incident(self, draft: IncidentCreate) -> Incident:
        if self.create_error is not None:
            raise self.create_error
        incident = make_incident(
            f"new-{len(self.created) + 1}",
            draft.location.lat,
            draft.location.lng,
            zone=draft.location.zone,
            type=draft.incident_type.value,
            severity=draft.severity.value,
        )
        self.created.append(draft)
        self.incidents.append(incident)
        return incident

    async def cast_vote(self, incident_id: str, direction: VoteDirection) -> None:
        self.vote_calls.append((incident_id, direction))
        if self.vote_gate is not None:
            await self.vote_gate.wait()
        if self.vote_error is not None:
            raise self.vote_error
        for i, incident in enumerate(self.incidents):
            if incident.id == incident_id:
                field = "upvotes" if direction == VoteDirection.UPVOTE else "downvotes"
                self.incidents[i] = incident.model_copy(update={field: getattr(incident, field) + 1})
                return
        raise NotFoundError(error_code="incident_not_found", message=incident_id, status_code=404)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def store():
    return FakeStore([
        make_incident("near", 18.54, -72.34, zone="Delmas"),
        make_incident("far", 19.76, -72.20, zone="Cap-Haitien"),
        make_incident("unlocated"),
    ])


@pytest.fixture
def transport_error():
    return TransportError(error_code="connection_error", message="store unreachable")
