"""
Message history endpoints.

GET    /api/messages           de-duplicated, paginated, filterable
GET    /api/messages/filters   distinct values for the filter controls
GET    /api/messages/{id}
PATCH  /api/messages/{id}      edit annotations
DELETE /api/messages/{id}
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from api.identity import require_identity
from api.response_models import Envelope, ListEnvelope, MessageUpdate, wrap
from lib import messages
from lib.api.pagination import PaginationParams, build_pagination, pagination_params
from lib.db import get_connection

logger = logging.getLogger(__name__)

messages_router = APIRouter(
    prefix="/api/messages", tags=["messages"], dependencies=[Depends(require_identity)]
)


@messages_router.get("", response_model=ListEnvelope)
def list_messages(
    params: PaginationParams = Depends(pagination_params),
    search: str | None = Query(None, description="Substring of message text or sender"),
    sender: str | None = Query(None),
    category: str | None = Query(None),
    tag: str | None = Query(None, description="Case-insensitive tag"),
    sentiment: str | None = Query(None),
    year: str | None = Query(None, pattern=r"^\d{4}$"),
    start_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    end_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    conflict: Literal["conflicts", "peaceful"] | None = Query(None),
):
    filters = messages.MessageFilters(
        search=search,
        sender=sender,
        category=category,
        tag=tag,
        sentiment=sentiment,
        year=year,
        start_date=start_date,
        end_date=end_date,
        conflict=conflict,
    )
    with get_connection() as conn:
        rows, total = messages.list_messages(conn, filters, params.page, params.limit)

    return {
        "success": True,
        "data": rows,
        "pagination": build_pagination(params.page, params.limit, total),
        "filters": filters.active(),
    }


@messages_router.get("/filters", response_model=Envelope)
def filter_options():
    with get_connection() as conn:
        return wrap(messages.get_filter_options(conn))


@messages_router.get("/{message_id}", response_model=Envelope)
def get_message(message_id: int):
    with get_connection() as conn:
        row = messages.get_message(conn, message_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Message not found")
    return wrap(row)


@messages_router.patch("/{message_id}", response_model=Envelope)
def update_message(message_id: int, body: MessageUpdate):
    updates = body.model_dump(exclude_unset=True)
    try:
        with get_connection() as conn:
            row = messages.update_message(conn, message_id, updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except LookupError as e:
        raise HTTPException(status_code=404, detail="Message not found") from e
    return wrap(row)


@messages_router.delete("/{message_id}", response_model=Envelope)
def delete_message(message_id: int):
    with get_connection() as conn:
        deleted = messages.delete_message(conn, message_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Message not found")
    logger.info("deleted message %s", message_id)
    return wrap({"id": message_id}, message="Message deleted successfully")
