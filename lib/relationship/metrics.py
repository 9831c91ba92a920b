"""
Derive the raw health-score inputs from stored messages.

The emotional agent computes its own score remotely; this module lets the
service compute one locally from the same data.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from lib.relationship.health_score import HealthMetrics
from lib.relationship.models import Message
from lib.relationship.seasons import average_sentiment

logger = logging.getLogger(__name__)

INTIMACY_KEYWORDS: tuple[str, ...] = (
    "love you",
    "miss you",
    "proud of you",
    "babe",
    "baby",
    "kiss",
    "xoxo",
    "beautiful",
    "❤",  # red heart
    "\U0001f618",  # face blowing a kiss
)

SECONDS_PER_DAY = 86400


def parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


def span_days(messages: Sequence[Message]) -> float:
    """Days between first and last message, at least 1."""
    stamps = [ts for ts in (parse_timestamp(m.timestamp) for m in messages) if ts is not None]
    if len(stamps) < 2:
        return 1.0
    # naive and aware timestamps can't be compared; drop tz on mixed input
    stamps = [ts.replace(tzinfo=None) for ts in stamps]
    seconds = (max(stamps) - min(stamps)).total_seconds()
    return max(1.0, seconds / SECONDS_PER_DAY)


def responsiveness_ratio(messages: Sequence[Message]) -> float:
    """Share of consecutive message pairs where the sender switches."""
    if len(messages) < 2:
        return 0.0
    ordered = sorted(messages, key=lambda m: m.timestamp)
    switches = sum(1 for prev, cur in zip(ordered, ordered[1:]) if prev.sender != cur.sender)
    return switches / (len(ordered) - 1)


def count_intimacy_indicators(messages: Sequence[Message]) -> int:
    count = 0
    for message in messages:
        content = message.content.lower()
        if any(keyword in content for keyword in INTIMACY_KEYWORDS):
            count += 1
    return count


def derive_metrics(messages: Sequence[Message], conflict_count: int) -> HealthMetrics:
    """
    Build HealthMetrics for a window of messages.

    Args:
        messages: Messages in the window, any order.
        conflict_count: Conflict-flagged messages plus conflict events in the window.
    """
    days = span_days(messages)
    weeks = max(1.0, days / 7)

    metrics = HealthMetrics(
        communication_frequency=len(messages) / days,
        average_sentiment=average_sentiment(list(messages)),
        conflict_frequency=conflict_count / weeks,
        intimacy_indicators=count_intimacy_indicators(messages),
        responsiveness=responsiveness_ratio(messages),
    )
    logger.debug("derived metrics over %.1f days: %s", days, metrics)
    return metrics
