"""
Relationship events: manually logged milestones, dates and fights.

CRUD over the relationship_events table. Validation failures raise
ValueError, missing rows raise LookupError; routers translate both.
"""

import logging
import sqlite3
from dataclasses import dataclass

from lib import safe_sql

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("event_date", "event_type", "title")

EVENT_COLUMNS: tuple[str, ...] = (
    "event_date",
    "event_time",
    "event_type",
    "title",
    "description",
    "notes",
    "category",
    "sentiment",
    "significance",
    "initiated_by",
    "location",
    "mood_before",
    "mood_after",
    "relationship_id",
)

DEFAULTS = {
    "category": "general",
    "sentiment": "neutral",
    "significance": 3,
    "relationship_id": 1,
}

_SELECT_WITH_AGE = (
    "id, " + ", ".join(EVENT_COLUMNS) + ", created_at, updated_at, "
    "CAST(julianday('now') - julianday(event_date) AS INTEGER) AS days_ago"
)


@dataclass
class EventFilters:
    start_date: str | None = None
    end_date: str | None = None
    event_type: str | None = None
    category: str | None = None

    def build_where(self) -> tuple[str | None, list]:
        conditions: list[str] = []
        params: list = []
        # a date window only applies when both ends are given
        if self.start_date and self.end_date:
            conditions.append("event_date >= ? AND event_date <= ?")
            params.extend([self.start_date, self.end_date])
        if self.event_type:
            conditions.append("event_type = ?")
            params.append(self.event_type)
        if self.category:
            conditions.append("category = ?")
            params.append(self.category)
        return safe_sql.where_and(conditions) or None, params


def list_events(
    conn: sqlite3.Connection,
    filters: EventFilters | None = None,
    page: int = 1,
    limit: int = 100,
) -> tuple[list[dict], int]:
    """Newest events first, with days_ago computed at query time."""
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")

    where, params = (filters or EventFilters()).build_where()
    total = conn.execute(safe_sql.select_count("relationship_events", where), params).fetchone()[0]
    rows = conn.execute(
        safe_sql.select(
            "relationship_events",
            _SELECT_WITH_AGE,
            where=where,
            order_by="event_date DESC, event_time DESC",
            suffix="LIMIT ? OFFSET ?",
        ),
        [*params, limit, (page - 1) * limit],
    ).fetchall()
    return [dict(row) for row in rows], total


def get_event(conn: sqlite3.Connection, event_id: int) -> dict | None:
    row = conn.execute(
        safe_sql.select("relationship_events", _SELECT_WITH_AGE, where="id = ?"), (event_id,)
    ).fetchone()
    return dict(row) if row else None


def create_event(conn: sqlite3.Connection, data: dict) -> dict:
    """
    Insert an event and return the stored row.

    Raises:
        ValueError: If event_date, event_type or title is missing
    """
    if any(not data.get(name) for name in REQUIRED_FIELDS):
        raise ValueError("Missing required fields: " + ", ".join(REQUIRED_FIELDS))

    values = {col: data.get(col) or None for col in EVENT_COLUMNS}
    for col, default in DEFAULTS.items():
        if data.get(col) is None:
            values[col] = default
        else:
            values[col] = data[col]

    columns = list(EVENT_COLUMNS)
    cursor = conn.execute(
        safe_sql.insert("relationship_events", columns), [values[c] for c in columns]
    )
    logger.info("created event %s (%s)", cursor.lastrowid, values["event_type"])
    return get_event(conn, cursor.lastrowid)


def update_event(conn: sqlite3.Connection, event_id: int, updates: dict) -> dict:
    """
    Update whitelisted columns of an event.

    Raises:
        ValueError: No updatable fields
        LookupError: Event does not exist
    """
    clean = {k: v for k, v in updates.items() if k in EVENT_COLUMNS and v is not None}
    if not clean:
        raise ValueError("No fields to update")

    columns = list(clean)
    cursor = conn.execute(
        safe_sql.update("relationship_events", columns),
        [*(clean[c] for c in columns), event_id],
    )
    if cursor.rowcount == 0:
        raise LookupError("Event not found")
    return get_event(conn, event_id)


def delete_event(conn: sqlite3.Connection, event_id: int) -> None:
    """Raises LookupError when the event does not exist."""
    cursor = conn.execute(safe_sql.delete("relationship_events"), (event_id,))
    if cursor.rowcount == 0:
        raise LookupError("Event not found")
    logger.info("deleted event %s", event_id)
