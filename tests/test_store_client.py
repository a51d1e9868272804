import json

import httpx
import pytest

from lakay_alert.errors import NotFoundError, TransportError, ValidationError
from lakay_alert.models import IncidentCreate, IncidentLocation, MediaPayload, VoteDirection
from lakay_alert.store import IncidentStoreClient

BASE = "https://store.example/rest/v1"

INCIDENT_JSON = {
    "id": "inc-1",
    "type": "ROAD_CLOSURE",
    "severity": "MODERATE",
    "description": "Route de Delmas blocked",
    "location": {"lat": 18.545, "lng": -72.31, "zone": "Delmas 33"},
    "created_at": "2024-03-01T12:00:00Z",
    "verified": True,
    "upvotes": 4,
    "downvotes": 1,
    "incident_media": [{"type": "image", "url": "https://cdn.example/1.jpg"}],
}


def make_client(handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IncidentStoreClient(BASE, client=http)


def _draft(**overrides):
    data = dict(
        incident_type="ROAD_CLOSURE",
        severity="MODERATE",
        description="Route de Delmas blocked",
        location=IncidentLocation(lat=18.545, lng=-72.31, zone="Delmas 33"),
        anonymous=True,
    )
    data.update(overrides)
    return IncidentCreate(**data)


async def test_list_incidents_parses_wire_format():
    def handler(request):
        assert request.method == "GET"
        assert str(request.url) == f"{BASE}/incidents"
        return httpx.Response(200, json=[INCIDENT_JSON, {**INCIDENT_JSON, "id": "inc-2", "location": None, "incident_media": None}])

    client = make_client(handler)
    incidents = await client.list_incidents()

    assert [i.id for i in incidents] == ["inc-1", "inc-2"]
    first = incidents[0]
    assert first.incident_type.value == "ROAD_CLOSURE"
    assert first.location.zone == "Delmas 33"
    assert first.media[0].url == "https://cdn.example/1.jpg"
    assert incidents[1].location is None
    assert incidents[1].media == []


async def test_list_incidents_accepts_wrapped_payload():
    client = make_client(lambda request: httpx.Response(200, json={"incidents": [INCIDENT_JSON]}))
    assert len(await client.list_incidents()) == 1


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"message": "boom"}),
    httpx.Response(200, text="<html>not json</html>"),
    httpx.Response(200, json=[{"id": "missing-fields"}]),
    httpx.Response(404, json={"message": "no table"}),
])
async def test_list_incidents_failures_are_transport_errors(response):
    client = make_client(lambda request: response)
    with pytest.raises(TransportError):
        await client.list_incidents()


async def test_list_incidents_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    with pytest.raises(TransportError) as excinfo:
        await client.list_incidents()
    assert excinfo.value.error_code == "connection_error"


async def test_create_incident_sends_json():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=[INCIDENT_JSON])

    client = make_client(handler)
    incident = await client.create_incident(_draft())

    assert incident.id == "inc-1"
    assert seen["body"]["type"] == "ROAD_CLOSURE"
    assert seen["body"]["anonymous"] is True
    assert seen["body"]["location"]["zone"] == "Delmas 33"
    assert "media" not in seen["body"]


async def test_create_incident_with_media_is_multipart():
    seen = {}

    def handler(request):
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = request.content
        return httpx.Response(201, json=INCIDENT_JSON)

    client = make_client(handler)
    media = [MediaPayload(filename="road.jpg", content_type="image/jpeg", data=b"\xff\xd8jpeg")]
    await client.create_incident(_draft(media=media))

    assert seen["content_type"].startswith("multipart/form-data")
    assert b'name="incident"' in seen["body"]
    assert b'filename="road.jpg"' in seen["body"]


@pytest.mark.parametrize("status", [400, 422])
async def test_create_incident_rejected_draft(status):
    client = make_client(lambda request: httpx.Response(status, json={"message": "severity is required"}))
    with pytest.raises(ValidationError) as excinfo:
        await client.create_incident(_draft())
    assert excinfo.value.message == "severity is required"
    assert excinfo.value.status_code == status


async def test_create_incident_server_error_is_transport():
    client = make_client(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(TransportError):
        await client.create_incident(_draft())


async def test_cast_vote_patches_votes_endpoint():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    client = make_client(handler)
    assert await client.cast_vote("inc-1", VoteDirection.DOWNVOTE) is None
    assert seen == {
        "method": "PATCH",
        "url": f"{BASE}/incidents/inc-1/votes",
        "body": {"direction": "downvote"},
    }


async def test_cast_vote_not_found():
    client = make_client(lambda request: httpx.Response(404, json={"message": "Incident not found"}))
    with pytest.raises(NotFoundError):
        await client.cast_vote("gone", VoteDirection.UPVOTE)


async def test_cast_vote_timeout_is_transport():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(handler)
    with pytest.raises(TransportError) as excinfo:
        await client.cast_vote("inc-1", VoteDirection.UPVOTE)
    assert excinfo.value.error_code == "timeout"


async def test_api_key_headers():
    client = IncidentStoreClient(BASE, api_key="secret")
    try:
        assert client._client.headers["Authorization"] == "Bearer secret"
        assert client._client.headers["apikey"] == "secret"
    finally:
        await client.aclose()


async def test_cast_vote_escapes_incident_id():
    seen = {}

    def handler(request):
        seen["raw_path"] = request.url.raw_path
        seen["query"] = request.url.query
        return httpx.Response(204)

    client = make_client(handler)
    await client.cast_vote("abc?x=1/y#z", VoteDirection.UPVOTE)
    assert seen["raw_path"] == b"/rest/v1/incidents/abc%3Fx%3D1%2Fy%23z/votes"
    assert seen["query"] == b""
