"""Message model shared by the relationship analytics."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class Sender(Enum):
    """The two parties of a conversation."""

    USER = "user"
    PARTNER = "partner"

    @classmethod
    def from_direction(cls, direction: str | None) -> "Sender":
        """Map an export's message direction (Outgoing/Incoming) to a party."""
        if direction and direction.strip().lower() in ("outgoing", "sent", "user", "you"):
            return cls.USER
        return cls.PARTNER


@dataclass(frozen=True)
class Message:
    """An imported text message. sentiment_score is -1..1 or None when not yet scored."""

    id: int | None
    timestamp: str
    sender: Sender
    content: str
    sentiment_score: float | None = None

    @property
    def period(self) -> str:
        """Calendar month key, YYYY-MM, taken from the timestamp's own wall clock."""
        return self.timestamp[:7]

    @classmethod
    def from_row(cls, row: Any) -> "Message":
        """Build from a messages table row (sqlite3.Row or dict)."""
        row = dict(row)
        timestamp = row.get("date_time") or ""
        if isinstance(timestamp, datetime):
            timestamp = timestamp.isoformat()
        return cls(
            id=row.get("id"),
            timestamp=timestamp,
            sender=Sender.from_direction(row.get("type")),
            content=row.get("message") or "",
            sentiment_score=row.get("sentiment_score"),
        )
