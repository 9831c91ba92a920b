"""
Message store: queries over the imported text history.

Exports duplicate rows freely (the same message exported twice, sometimes with
trailing whitespace). Every read here goes through a de-duplicated view:
rows sharing date_time and TRIM(message) are ranked by id and only the first
is kept. The page query and the count query share the same CTE and the same
filter parameters, so totals always match what pagination walks over.
"""

import logging
import sqlite3
from dataclasses import dataclass, fields

from lib import safe_sql
from lib.relationship.models import Message

logger = logging.getLogger(__name__)

MESSAGE_COLUMNS = (
    "id, date_time, date, time, sender, message, type, sentiment, sentiment_score, "
    "category, tag, notes, conflict_detected"
)

EDITABLE_COLUMNS: tuple[str, ...] = (
    "sentiment",
    "sentiment_score",
    "category",
    "tag",
    "notes",
    "conflict_detected",
)

_DEDUP_CTE = """
WITH ranked AS (
    SELECT {columns},
           ROW_NUMBER() OVER (
               PARTITION BY date_time, TRIM(message)
               ORDER BY id
           ) AS rn
    FROM messages
    {where}
)
"""


@dataclass
class MessageFilters:
    """Optional filters; empty strings and None are ignored."""

    search: str | None = None
    sender: str | None = None
    category: str | None = None
    tag: str | None = None
    sentiment: str | None = None
    year: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    conflict: str | None = None  # "conflicts" | "peaceful"

    def build_where(self) -> tuple[str, list]:
        """Return (WHERE clause or "", params)."""
        conditions: list[str] = []
        params: list = []

        if self.search:
            conditions.append("(message LIKE ? OR sender LIKE ?)")
            params.extend([f"%{self.search}%", f"%{self.search}%"])
        if self.sender:
            conditions.append("sender = ?")
            params.append(self.sender)
        if self.category:
            conditions.append("category = ?")
            params.append(self.category)
        if self.tag:
            conditions.append("LOWER(tag) = LOWER(?)")
            params.append(self.tag)
        if self.sentiment:
            conditions.append("sentiment = ?")
            params.append(self.sentiment)
        if self.year:
            conditions.append("strftime('%Y', date_time) = ?")
            params.append(str(self.year))
        if self.start_date:
            conditions.append("DATE(date_time) >= ?")
            params.append(self.start_date)
        if self.end_date:
            conditions.append("DATE(date_time) <= ?")
            params.append(self.end_date)
        if self.conflict == "conflicts":
            conditions.append("conflict_detected = 1")
        elif self.conflict == "peaceful":
            conditions.append("conflict_detected = 0")

        where = safe_sql.where_and(conditions)
        return (f"WHERE {where}" if where else ""), params

    def active(self) -> dict:
        """Filters that were actually set, for echoing back to clients."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}


# ============================================================
# Reads
# ============================================================


def list_messages(
    conn: sqlite3.Connection,
    filters: MessageFilters | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[dict], int]:
    """
    One page of de-duplicated messages, oldest first, plus the de-duplicated total.

    Raises:
        ValueError: If page or limit are < 1
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be >= 1")

    where, params = (filters or MessageFilters()).build_where()
    cte = _DEDUP_CTE.format(columns=MESSAGE_COLUMNS, where=where)

    rows = conn.execute(
        cte
        + f"SELECT {MESSAGE_COLUMNS} FROM ranked WHERE rn = 1 "
        "ORDER BY date_time ASC, id ASC LIMIT ? OFFSET ?",
        [*params, limit, (page - 1) * limit],
    ).fetchall()

    total = conn.execute(
        cte + "SELECT COUNT(*) AS total FROM ranked WHERE rn = 1",
        params,
    ).fetchone()[0]

    return [_row_to_dict(row) for row in rows], total


def get_filter_options(conn: sqlite3.Connection) -> dict[str, list[str]]:
    """Distinct values for each filterable column, sorted."""

    def distinct(expr: str) -> list[str]:
        rows = conn.execute(
            f"SELECT DISTINCT {expr} AS v FROM messages WHERE {expr} IS NOT NULL "  # noqa: S608
            f"AND {expr} != '' ORDER BY v"
        ).fetchall()
        return [str(row[0]) for row in rows]

    return {
        "years": distinct("strftime('%Y', date_time)"),
        "senders": distinct("sender"),
        "categories": distinct("category"),
        "tags": distinct("tag"),
        "sentiments": distinct("sentiment"),
    }


def get_message(conn: sqlite3.Connection, message_id: int) -> dict | None:
    row = conn.execute(
        safe_sql.select("messages", MESSAGE_COLUMNS, where="id = ?"), (message_id,)
    ).fetchone()
    return _row_to_dict(row) if row else None


def load_messages(
    conn: sqlite3.Connection,
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[Message]:
    """All de-duplicated messages in the window as Message objects, oldest first."""
    where, params = MessageFilters(start_date=start_date, end_date=end_date).build_where()
    cte = _DEDUP_CTE.format(columns=MESSAGE_COLUMNS, where=where)
    rows = conn.execute(
        cte + f"SELECT {MESSAGE_COLUMNS} FROM ranked WHERE rn = 1 ORDER BY date_time ASC, id ASC",
        params,
    ).fetchall()
    return [Message.from_row(row) for row in rows]


def count_conflicts(
    conn: sqlite3.Connection,
    start_date: str | None = None,
    end_date: str | None = None,
) -> int:
    """Conflict-flagged messages plus conflict events in the window."""
    where, params = MessageFilters(
        start_date=start_date, end_date=end_date, conflict="conflicts"
    ).build_where()
    cte = _DEDUP_CTE.format(columns=MESSAGE_COLUMNS, where=where)
    flagged = conn.execute(cte + "SELECT COUNT(*) FROM ranked WHERE rn = 1", params).fetchone()[0]

    conditions = ["(event_type = 'conflict' OR category = 'conflict')"]
    event_params: list = []
    if start_date:
        conditions.append("event_date >= ?")
        event_params.append(start_date)
    if end_date:
        conditions.append("event_date <= ?")
        event_params.append(end_date)
    events = conn.execute(
        safe_sql.select_count("relationship_events", safe_sql.where_and(conditions)),
        event_params,
    ).fetchone()[0]

    return flagged + events


# ============================================================
# Writes
# ============================================================


def update_message(conn: sqlite3.Connection, message_id: int, updates: dict) -> dict:
    """
    Update editable annotation columns and return the stored row.

    Raises:
        ValueError: No editable fields given, an invalid sentiment score or a
            null conflict flag
        LookupError: Message does not exist
    """
    clean = {k: v for k, v in updates.items() if k in EDITABLE_COLUMNS}
    unknown = sorted(set(updates) - set(EDITABLE_COLUMNS) - {"id"})
    if unknown:
        raise ValueError(f"Fields not editable: {', '.join(unknown)}")
    if not clean:
        raise ValueError("No fields to update")

    if clean.get("sentiment_score") is not None:
        score = float(clean["sentiment_score"])
        if not -1 <= score <= 1:
            raise ValueError("sentiment_score must be between -1 and 1")
        clean["sentiment_score"] = score
    if "conflict_detected" in clean:
        if clean["conflict_detected"] is None:
            raise ValueError("conflict_detected cannot be null")
        clean["conflict_detected"] = 1 if clean["conflict_detected"] else 0

    columns = list(clean)
    cursor = conn.execute(
        safe_sql.update("messages", columns),
        [*(clean[c] for c in columns), message_id],
    )
    if cursor.rowcount == 0:
        raise LookupError(f"Message {message_id} not found")

    logger.info("updated message %s: %s", message_id, columns)
    return get_message(conn, message_id)


def backfill_sentiment(conn: sqlite3.Connection, message_id: int, score: float) -> dict:
    """Attach a post-hoc sentiment score to an imported message."""
    return update_message(conn, message_id, {"sentiment_score": score})


def delete_message(conn: sqlite3.Connection, message_id: int) -> bool:
    """Delete one message. Returns False when it did not exist."""
    cursor = conn.execute(safe_sql.delete("messages"), (message_id,))
    return cursor.rowcount > 0


def _row_to_dict(row: sqlite3.Row) -> dict:
    data = dict(row)
    data["conflict_detected"] = bool(data.get("conflict_detected"))
    return data
