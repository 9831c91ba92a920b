"""
Emotional seasons: monthly sentiment buckets.

Messages are grouped by calendar month, averaged, labelled with a theme and
tagged with a few key events found by keyword. Buckets are derived on every
call and never stored.

Unscored messages count as 0 in the average rather than being left out, so
sparsely scored months drift toward "Neutral Phase".
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from lib.relationship.models import Message

KEY_EVENT_KEYWORDS: tuple[str, ...] = (
    "birthday",
    "anniversary",
    "vacation",
    "work",
    "family",
    "fight",
    "celebration",
)
MAX_KEY_EVENTS = 3


class Theme(Enum):
    HIGH_CONNECTION = "High Connection"
    STABLE_PERIOD = "Stable Period"
    NEUTRAL_PHASE = "Neutral Phase"
    TENSION_PERIOD = "Tension Period"
    CONFLICT_PHASE = "Conflict Phase"


# Strictly-greater-than lower bounds, checked top-down
THEME_THRESHOLDS: tuple[tuple[float, Theme], ...] = (
    (0.5, Theme.HIGH_CONNECTION),
    (0.2, Theme.STABLE_PERIOD),
    (-0.2, Theme.NEUTRAL_PHASE),
    (-0.5, Theme.TENSION_PERIOD),
)


@dataclass
class MonthlyBucket:
    period: str  # YYYY-MM
    average_sentiment: float
    theme: Theme
    key_events: list[str] = field(default_factory=list)
    message_count: int = 0

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "averageSentiment": self.average_sentiment,
            "theme": self.theme.value,
            "keyEvents": list(self.key_events),
            "messageCount": self.message_count,
        }


def group_by_month(messages: Iterable[Message]) -> dict[str, list[Message]]:
    """Group by YYYY-MM. Dict order is first-seen order, not chronological."""
    groups: dict[str, list[Message]] = {}
    for message in messages:
        groups.setdefault(message.period, []).append(message)
    return groups


def classify_theme(average_sentiment: float) -> Theme:
    for lower_bound, theme in THEME_THRESHOLDS:
        if average_sentiment > lower_bound:
            return theme
    return Theme.CONFLICT_PHASE


def extract_key_events(messages: Iterable[Message]) -> list[str]:
    """First distinct keyword hits in encounter order, capped at MAX_KEY_EVENTS."""
    events: list[str] = []
    for message in messages:
        content = message.content.lower()
        for keyword in KEY_EVENT_KEYWORDS:
            if keyword in content and keyword not in events:
                events.append(keyword)
    return events[:MAX_KEY_EVENTS]


def average_sentiment(messages: list[Message]) -> float:
    if not messages:
        return 0.0
    return sum(m.sentiment_score or 0 for m in messages) / len(messages)


def detect_emotional_seasons(messages: Iterable[Message]) -> list[MonthlyBucket]:
    """
    Bucket messages by month and label each bucket.

    Empty input gives an empty list. Output order follows the first message
    seen for each month; sort by period if a timeline is needed.
    """
    buckets = []
    for period, month_messages in group_by_month(messages).items():
        avg = average_sentiment(month_messages)
        buckets.append(
            MonthlyBucket(
                period=period,
                average_sentiment=avg,
                theme=classify_theme(avg),
                key_events=extract_key_events(month_messages),
                message_count=len(month_messages),
            )
        )
    return buckets
