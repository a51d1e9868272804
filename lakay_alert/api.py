"""
FastAPI surface for the incident feed.

Serves the ranked feed and forwards reports and votes to the store through
a single FeedController that lives for the app's lifetime.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from .errors import NotFoundError, StoreError, TransportError, ValidationError
from .feed import FeedController, build_view
from .models import IncidentLocation, IncidentCreate, IncidentType, Severity, VoteDirection

logger = logging.getLogger(__name__)

router = APIRouter()


class IncidentSubmission(BaseModel):
    """Report body accepted over HTTP (media uploads go through the CLI)."""
    model_config = ConfigDict(populate_by_name=True)

    incident_type: IncidentType = Field(alias="type")
    severity: Severity
    description: Optional[str] = None
    location: IncidentLocation
    anonymous: bool = False


class VoteRequest(BaseModel):
    direction: VoteDirection


def _controller(request: Request) -> FeedController:
    return request.app.state.controller


def _store_http_error(e: StoreError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=e.message)
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail="Incident not found")
    if isinstance(e, TransportError):
        return HTTPException(status_code=502, detail=f"Incident store unavailable: {e.error_code}")
    return HTTPException(status_code=500, detail=str(e))


@router.get("/health", tags=["Meta"])
async def health(request: Request):
    controller = _controller(request)
    return {
        "status": "ok",
        "feed_unavailable": controller.feed_unavailable,
        "running": controller.running,
    }


@router.get("/api/feed", tags=["Feed"])
async def get_feed(request: Request):
    """Incidents ranked nearest first, plus feed health."""
    controller = _controller(request)
    await controller.ensure_fresh()
    reference = controller.reference_location
    incidents = [build_view(inc, reference) for inc in controller.current_feed()]
    return {
        "incidents": [view.model_dump(mode="json") for view in incidents],
        "total": len(incidents),
        "reference_location": reference._asdict() if reference else None,
        "feed_unavailable": controller.feed_unavailable,
        "error": str(controller.last_error) if controller.last_error else None,
        "stale": controller.cache.is_stale,
    }


@router.get("/api/incidents/{incident_id}", tags=["Feed"])
async def get_incident(incident_id: str, request: Request):
    controller = _controller(request)
    await controller.ensure_fresh()
    incident = controller.get_incident(incident_id)
    if incident is None:
        raise HTTPException(status_code=404, detail="Incident not found")
    return build_view(incident, controller.reference_location).model_dump(mode="json")


@router.post("/api/incidents", status_code=201, tags=["Reports"])
async def submit_incident(submission: IncidentSubmission, request: Request):
    controller = _controller(request)
    draft = IncidentCreate(**submission.model_dump())
    try:
        incident = await controller.submit_incident(draft)
    except StoreError as e:
        logger.warning(f"Report rejected: {e}")
        raise _store_http_error(e)
    return build_view(incident, controller.reference_location).model_dump(mode="json")


@router.post("/api/incidents/{incident_id}/votes", tags=["Reports"])
async def vote(incident_id: str, body: VoteRequest, request: Request):
    controller = _controller(request)
    try:
        applied = await controller.vote(incident_id, body.direction)
    except StoreError as e:
        logger.warning(f"Vote on {incident_id} failed: {e}")
        raise _store_http_error(e)
    return {"applied": applied, "incident_id": incident_id, "direction": body.direction.value}


def create_app(controller: FeedController, poll: bool = True) -> FastAPI:
    """Build the app around a controller; its lifecycle follows the app's."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await controller.start(poll=poll)
        yield
        await controller.aclose()

    app = FastAPI(
        title="LakayAlert Feed API",
        description="Ranked community incident feed with reporting and voting",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.controller = controller
    app.include_router(router)
    return app
