"""Dashboard statistics over the stored message history."""

import logging
import sqlite3
from datetime import UTC, datetime, timedelta

from lib.relationship.health_score import communication_health
from lib.relationship.metrics import parse_timestamp

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365
MIN_YEARS_OF_DATA = 0.1
RECENT_ACTIVITY_DAYS = 30
MONTHS_SHOWN = 12


def years_between(earliest: str | None, latest: str | None) -> float:
    """Absolute span in 365-day years, at least 0.1. 0 when either end is missing."""
    start = parse_timestamp(earliest) if earliest else None
    end = parse_timestamp(latest) if latest else None
    if start is None or end is None:
        return 0.0
    start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
    days = abs((end - start).total_seconds()) / 86400
    return max(MIN_YEARS_OF_DATA, days / DAYS_PER_YEAR)


def get_dashboard_stats(conn: sqlite3.Connection, now: datetime | None = None) -> dict:
    now = now or datetime.now(UTC)

    total = conn.execute("SELECT COUNT(*) FROM messages").fetchone()[0]
    bounds = conn.execute(
        "SELECT MIN(date_time) AS earliest, MAX(date_time) AS latest FROM messages"
    ).fetchone()
    earliest, latest = bounds["earliest"], bounds["latest"]
    years = years_between(earliest, latest)

    senders = {
        row[0]
        for row in conn.execute(
            "SELECT DISTINCT sender FROM messages WHERE sender IS NOT NULL AND sender != ''"
        )
    }
    if conn.execute("SELECT 1 FROM messages WHERE LOWER(type) = 'outgoing' LIMIT 1").fetchone():
        senders.add("You")

    cutoff = (now - timedelta(days=RECENT_ACTIVITY_DAYS)).strftime("%Y-%m-%d %H:%M:%S")
    recent = conn.execute(
        "SELECT COUNT(*) FROM messages WHERE datetime(date_time) >= ?", (cutoff,)
    ).fetchone()[0]

    by_month = conn.execute(
        """
        SELECT strftime('%Y-%m', date_time) AS month, COUNT(*) AS count
        FROM messages
        WHERE strftime('%Y-%m', date_time) IS NOT NULL
        GROUP BY month
        ORDER BY month DESC
        LIMIT ?
        """,
        (MONTHS_SHOWN,),
    ).fetchall()

    busiest = conn.execute(
        """
        SELECT strftime('%H', date_time) AS hour, COUNT(*) AS count
        FROM messages
        WHERE strftime('%H', date_time) IS NOT NULL
        GROUP BY hour
        ORDER BY count DESC, hour ASC
        LIMIT 1
        """
    ).fetchone()

    return {
        "stats": {
            "totalMessages": total,
            "earliest": earliest,
            "latest": latest,
            "yearsOfData": round(years, 1),
            "participants": len(senders),
            "aiReady": recent > 0,
            "lastUpdated": now.isoformat(),
        },
        "insights": {
            "messagesByMonth": [dict(row) for row in by_month],
            "mostActiveHour": f"{busiest['hour']}:00" if busiest else "Unknown",
            "averagePerDay": round(total / (years * DAYS_PER_YEAR)) if years else 0,
            "communicationHealth": round(communication_health(total, years), 2),
        },
    }
