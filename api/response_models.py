"""
Shared Pydantic models for API endpoints.

Every endpoint answers with the same envelope:

    {"success": true, "data": ...}                      # single result
    {"success": true, "data": [...], "pagination": {}}  # list result
    {"success": false, "error": "..."}                  # any failure

Usage:
    from api.response_models import Envelope, ListEnvelope, wrap

    @router.get("/endpoint", response_model=Envelope)
    def my_endpoint():
        return wrap(data)
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lib.api.pagination import PaginationMeta

# ==== Envelopes ====


class Envelope(BaseModel):
    """Standard success/error envelope."""

    success: bool = Field(description="Whether the request succeeded")
    data: Any = Field(default=None, description="Response payload")
    error: str | None = Field(default=None, description="Error message when success is false")

    model_config = ConfigDict(extra="allow")


class ListEnvelope(BaseModel):
    """Envelope for paginated list endpoints."""

    success: bool = True
    data: list[Any] = Field(default_factory=list, description="Items on this page")
    pagination: PaginationMeta
    filters: dict[str, Any] = Field(default_factory=dict, description="Echo of applied filters")


def wrap(data: Any = None, **extra: Any) -> dict:
    """Success envelope."""
    return {"success": True, "data": data, **extra}


def error_body(message: str, **extra: Any) -> dict:
    """Failure envelope."""
    return {"success": False, "error": message, **extra}


# ==== Request bodies ====


class MessageUpdate(BaseModel):
    """Editable annotations on a message. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    sentiment: str | None = None
    sentiment_score: float | None = Field(default=None, ge=-1, le=1)
    category: str | None = None
    tag: str | None = None
    notes: str | None = None
    conflict_detected: bool | None = None


class EventFields(BaseModel):
    event_date: str | None = None
    event_time: str | None = None
    event_type: str | None = None
    title: str | None = None
    description: str | None = None
    notes: str | None = None
    category: str | None = None
    sentiment: str | None = None
    significance: int | None = Field(default=None, ge=1, le=5)
    initiated_by: str | None = None
    location: str | None = None
    mood_before: str | None = None
    mood_after: str | None = None
    relationship_id: int | None = None


class EventUpdate(EventFields):
    id: int | None = None


class CsvImportRequest(BaseModel):
    csvData: str | None = None
