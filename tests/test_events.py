"""
Tests for relationship events CRUD.
"""

import pytest

from lib import events
from lib.events import EventFilters
from tests.fixtures import FIXTURE_EXPECTATIONS


def ids(rows):
    return [row["id"] for row in rows]


class TestListEvents:
    def test_newest_first(self, fixture_conn):
        rows, total = events.list_events(fixture_conn)
        assert ids(rows) == [2, 1, 3]
        assert total == FIXTURE_EXPECTATIONS["events"]

    def test_days_ago_is_computed(self, fixture_conn):
        rows, _ = events.list_events(fixture_conn)
        christmas = rows[-1]
        assert christmas["days_ago"] > rows[0]["days_ago"] > 0

    def test_window_needs_both_ends(self, fixture_conn):
        _, total = events.list_events(fixture_conn, EventFilters(start_date="2024-01-01"))
        assert total == 3

        rows, total = events.list_events(
            fixture_conn, EventFilters(start_date="2024-01-01", end_date="2024-01-31")
        )
        assert ids(rows) == [1]
        assert total == 1

    def test_type_and_category(self, fixture_conn):
        rows, _ = events.list_events(fixture_conn, EventFilters(event_type="milestone"))
        assert ids(rows) == [2]
        rows, _ = events.list_events(fixture_conn, EventFilters(category="family"))
        assert ids(rows) == [3]

    def test_paging(self, fixture_conn):
        rows, total = events.list_events(fixture_conn, page=2, limit=2)
        assert ids(rows) == [3]
        assert total == 3

    def test_invalid_paging(self, fixture_conn):
        with pytest.raises(ValueError):
            events.list_events(fixture_conn, page=0)


class TestCreateEvent:
    def test_defaults(self, fixture_conn):
        event = events.create_event(
            fixture_conn,
            {"event_date": "2024-04-01", "event_type": "date", "title": "Picnic"},
        )
        assert event["id"] == 4
        assert event["category"] == "general"
        assert event["sentiment"] == "neutral"
        assert event["significance"] == 3
        assert event["relationship_id"] == 1
        assert event["description"] is None

    def test_explicit_values_win(self, fixture_conn):
        event = events.create_event(
            fixture_conn,
            {
                "event_date": "2024-04-01",
                "event_type": "trip",
                "title": "Lisbon",
                "category": "travel",
                "significance": 5,
                "location": "Lisbon",
            },
        )
        assert event["category"] == "travel"
        assert event["significance"] == 5
        assert event["location"] == "Lisbon"

    @pytest.mark.parametrize("missing", ["event_date", "event_type", "title"])
    def test_required_fields(self, fixture_conn, missing):
        data = {"event_date": "2024-04-01", "event_type": "date", "title": "Picnic"}
        data[missing] = ""
        with pytest.raises(ValueError, match="Missing required fields: event_date, event_type, title"):
            events.create_event(fixture_conn, data)


class TestUpdateEvent:
    def test_update(self, fixture_conn):
        event = events.update_event(fixture_conn, 3, {"title": "Christmas Eve", "notes": None})
        assert event["title"] == "Christmas Eve"
        assert event["category"] == "family"

    def test_unknown_columns_ignored(self, fixture_conn):
        with pytest.raises(ValueError, match="No fields to update"):
            events.update_event(fixture_conn, 1, {"id": 7, "days_ago": 3})

    def test_missing_event(self, fixture_conn):
        with pytest.raises(LookupError, match="Event not found"):
            events.update_event(fixture_conn, 999, {"title": "x"})


class TestDeleteEvent:
    def test_delete(self, fixture_conn):
        events.delete_event(fixture_conn, 1)
        assert events.get_event(fixture_conn, 1) is None

    def test_delete_missing(self, fixture_conn):
        with pytest.raises(LookupError):
            events.delete_event(fixture_conn, 999)
