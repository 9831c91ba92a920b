"""
Relationship event CRUD at /api/relationship-events.

PUT takes the event id in the body, DELETE takes it as ?id=.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from api.identity import require_identity
from api.response_models import Envelope, EventFields, EventUpdate, ListEnvelope, wrap
from lib import config, events
from lib.api.pagination import build_pagination
from lib.db import get_connection

logger = logging.getLogger(__name__)

events_router = APIRouter(
    prefix="/api/relationship-events",
    tags=["events"],
    dependencies=[Depends(require_identity)],
)


@events_router.get("", response_model=ListEnvelope)
def list_events(
    start_date: str | None = Query(None, description="Applies only together with end_date"),
    end_date: str | None = Query(None),
    event_type: str | None = Query(None),
    category: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_EVENTS_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
):
    filters = events.EventFilters(
        start_date=start_date, end_date=end_date, event_type=event_type, category=category
    )
    with get_connection() as conn:
        rows, total = events.list_events(conn, filters, page, limit)
    return {
        "success": True,
        "data": rows,
        "pagination": build_pagination(page, limit, total),
    }


@events_router.post("", response_model=Envelope)
def create_event(body: EventFields):
    try:
        with get_connection() as conn:
            event = events.create_event(conn, body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return wrap(event)


@events_router.put("", response_model=Envelope)
def update_event(body: EventUpdate):
    if not body.id:
        raise HTTPException(status_code=400, detail="Event ID is required")

    updates = body.model_dump(exclude_unset=True, exclude={"id"})
    try:
        with get_connection() as conn:
            event = events.update_event(conn, body.id, updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return wrap(event)


@events_router.delete("", response_model=Envelope)
def delete_event(id: int | None = Query(None, description="Event id")):  # noqa: A002
    if not id:
        raise HTTPException(status_code=400, detail="Event ID is required")
    try:
        with get_connection() as conn:
            events.delete_event(conn, id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return wrap({"id": id}, message="Event deleted successfully")
