"""
Tests for deriving health-score inputs from messages.
"""

import pytest

from lib.relationship.metrics import (
    count_intimacy_indicators,
    derive_metrics,
    responsiveness_ratio,
    span_days,
)
from lib.relationship.models import Message, Sender


def msg(timestamp: str, sender: Sender = Sender.USER, content: str = "hi", score=None) -> Message:
    return Message(id=None, timestamp=timestamp, sender=sender, content=content, sentiment_score=score)


class TestSender:
    @pytest.mark.parametrize("direction", ["Outgoing", "outgoing", " sent ", "user"])
    def test_outgoing_is_user(self, direction):
        assert Sender.from_direction(direction) == Sender.USER

    @pytest.mark.parametrize("direction", ["Incoming", "received", "", None])
    def test_everything_else_is_partner(self, direction):
        assert Sender.from_direction(direction) == Sender.PARTNER


class TestMessageFromRow:
    def test_maps_columns(self):
        message = Message.from_row(
            {
                "id": 4,
                "date_time": "2024-01-20T21:30:00",
                "type": "Outgoing",
                "message": "hello",
                "sentiment_score": -0.5,
            }
        )
        assert message.id == 4
        assert message.sender == Sender.USER
        assert message.content == "hello"
        assert message.sentiment_score == -0.5
        assert message.period == "2024-01"

    def test_null_message_becomes_empty(self):
        message = Message.from_row({"id": 1, "date_time": "2024-01-01", "message": None})
        assert message.content == ""
        assert message.sentiment_score is None


class TestSpanDays:
    def test_single_message_is_one_day(self):
        assert span_days([msg("2024-01-01T00:00:00")]) == 1.0

    def test_ten_days(self):
        assert span_days([msg("2024-01-01T00:00:00"), msg("2024-01-11T00:00:00")]) == 10.0

    def test_mixed_timezones(self):
        days = span_days([msg("2024-01-01T00:00:00Z"), msg("2024-01-04T00:00:00")])
        assert days == 3.0

    def test_unparseable_ignored(self):
        assert span_days([msg("garbage"), msg("2024-01-04")]) == 1.0


class TestResponsiveness:
    def test_alternating(self):
        messages = [
            msg("2024-01-01T10:00", Sender.USER),
            msg("2024-01-01T10:01", Sender.PARTNER),
            msg("2024-01-01T10:02", Sender.USER),
            msg("2024-01-01T10:03", Sender.PARTNER),
        ]
        assert responsiveness_ratio(messages) == 1.0

    def test_monologue(self):
        messages = [msg(f"2024-01-01T10:0{i}", Sender.USER) for i in range(4)]
        assert responsiveness_ratio(messages) == 0.0

    def test_sorted_before_counting(self):
        messages = [
            msg("2024-01-01T10:02", Sender.USER),
            msg("2024-01-01T10:00", Sender.USER),
            msg("2024-01-01T10:01", Sender.PARTNER),
        ]
        assert responsiveness_ratio(messages) == 1.0

    def test_fewer_than_two(self):
        assert responsiveness_ratio([msg("2024-01-01")]) == 0.0


class TestDeriveMetrics:
    def test_intimacy_counts_messages(self):
        messages = [
            msg("2024-01-01", content="I LOVE YOU"),
            msg("2024-01-02", content="miss you, love you"),
            msg("2024-01-03", content="hello"),
        ]
        assert count_intimacy_indicators(messages) == 2

    def test_week_of_messages(self):
        messages = [
            msg("2024-01-01T00:00:00", Sender.USER, "love you", 0.5),
            msg("2024-01-08T00:00:00", Sender.PARTNER, "ok", None),
        ]
        metrics = derive_metrics(messages, conflict_count=1)
        assert metrics.communication_frequency == pytest.approx(2 / 7)
        assert metrics.average_sentiment == pytest.approx(0.25)
        assert metrics.conflict_frequency == pytest.approx(1.0)
        assert metrics.intimacy_indicators == 1
        assert metrics.responsiveness == 1.0

    def test_empty(self):
        metrics = derive_metrics([], conflict_count=0)
        assert metrics.communication_frequency == 0
        assert metrics.average_sentiment == 0.0
