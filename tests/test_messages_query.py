"""
Tests for the de-duplicated message store.

Tests cover:
- Duplicate rows collapse before pagination and counting
- Filters (search, sender, tag, year, date window, conflict state)
- Filter option lists
- Annotation updates and deletes
"""

import pytest

from lib import messages, safe_sql
from lib.messages import MessageFilters
from tests.fixtures import FIXTURE_EXPECTATIONS, create_fixture_db

ALL_IDS = [1, 3, 4, 5, 6, 7, 8]


def ids(rows):
    return [row["id"] for row in rows]


class TestDeduplication:
    def test_duplicate_pair_is_one_message(self):
        conn = create_fixture_db(seed=False)
        sql = safe_sql.insert("messages", ["date_time", "message"])
        conn.execute(sql, ("2024-05-01T10:00:00", "hello"))
        conn.execute(sql, ("2024-05-01T10:00:00", "hello   "))

        rows, total = messages.list_messages(conn, page=1, limit=1)

        assert total == 1
        assert len(rows) == 1
        assert rows[0]["message"] == "hello"
        conn.close()

    def test_total_counts_distinct_messages(self, fixture_conn):
        _, total = messages.list_messages(fixture_conn)
        assert total == FIXTURE_EXPECTATIONS["deduplicated_messages"]

    def test_walking_pages_never_shows_duplicates(self, fixture_conn):
        seen = []
        page = 1
        while True:
            rows, total = messages.list_messages(fixture_conn, page=page, limit=3)
            if not rows:
                break
            seen.extend(ids(rows))
            page += 1

        assert seen == ALL_IDS
        assert len(seen) == total

    def test_first_page_of_one(self, fixture_conn):
        rows, total = messages.list_messages(fixture_conn, page=1, limit=1)
        assert ids(rows) == [1]
        assert total == 7

    def test_page_past_the_end_is_empty(self, fixture_conn):
        rows, total = messages.list_messages(fixture_conn, page=99, limit=10)
        assert rows == []
        assert total == 7

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
    def test_invalid_paging(self, fixture_conn, page, limit):
        with pytest.raises(ValueError):
            messages.list_messages(fixture_conn, page=page, limit=limit)


class TestFilters:
    @pytest.mark.parametrize(
        "filters,expected",
        [
            (MessageFilters(tag="birthday"), [1]),
            (MessageFilters(sender="Me"), [3, 5, 6]),
            (MessageFilters(category="conflict"), [4]),
            (MessageFilters(sentiment="negative"), [4, 5]),
            (MessageFilters(search="dinner"), [6, 8]),
            (MessageFilters(search="Alex"), [1, 4, 7, 8]),
            (MessageFilters(year="2024"), ALL_IDS),
            (MessageFilters(year="2023"), []),
            (MessageFilters(start_date="2024-02-01", end_date="2024-02-29"), [6, 7]),
            (MessageFilters(start_date="2024-02-14"), [6, 7, 8]),
            (MessageFilters(end_date="2024-01-05"), [1, 3]),
            (MessageFilters(conflict="conflicts"), [4]),
            (MessageFilters(conflict="peaceful"), [1, 3, 5, 6, 7, 8]),
            (MessageFilters(sender="Alex", conflict="peaceful"), [1, 7, 8]),
        ],
    )
    def test_filter(self, fixture_conn, filters, expected):
        rows, total = messages.list_messages(fixture_conn, filters, limit=50)
        assert ids(rows) == expected
        assert total == len(expected)

    def test_unknown_conflict_value_is_ignored(self, fixture_conn):
        _, total = messages.list_messages(fixture_conn, MessageFilters(conflict="maybe"))
        assert total == 7

    def test_active_filters(self):
        filters = MessageFilters(tag="x", sender="", year="2024")
        assert filters.active() == {"tag": "x", "year": "2024"}

    def test_no_filters_builds_no_where(self):
        assert MessageFilters().build_where() == ("", [])


class TestFilterOptions:
    def test_distinct_sorted_values(self, fixture_conn):
        options = messages.get_filter_options(fixture_conn)
        assert options["years"] == ["2024"]
        assert options["senders"] == ["Alex", "Me"]
        assert options["categories"] == ["affection", "conflict", "milestone"]
        assert options["tags"] == ["Birthday", "anniversary", "conflict"]
        assert options["sentiments"] == ["negative", "positive"]

    def test_empty_store(self):
        conn = create_fixture_db(seed=False)
        assert messages.get_filter_options(conn) == {
            "years": [],
            "senders": [],
            "categories": [],
            "tags": [],
            "sentiments": [],
        }
        conn.close()


class TestLoadMessages:
    def test_all_messages(self, fixture_conn):
        loaded = messages.load_messages(fixture_conn)
        assert [m.id for m in loaded] == ALL_IDS
        assert loaded[0].period == "2024-01"

    def test_window(self, fixture_conn):
        loaded = messages.load_messages(fixture_conn, start_date="2024-02-01")
        assert [m.id for m in loaded] == [6, 7, 8]

    def test_count_conflicts(self, fixture_conn):
        assert messages.count_conflicts(fixture_conn) == FIXTURE_EXPECTATIONS["conflicts"]
        assert messages.count_conflicts(fixture_conn, start_date="2024-02-01") == 0
        assert messages.count_conflicts(fixture_conn, end_date="2024-01-31") == 2


class TestGetMessage:
    def test_found(self, fixture_conn):
        message = messages.get_message(fixture_conn, 4)
        assert message["sender"] == "Alex"
        assert message["conflict_detected"] is True

    def test_flag_defaults_false(self, fixture_conn):
        assert messages.get_message(fixture_conn, 1)["conflict_detected"] is False

    def test_missing(self, fixture_conn):
        assert messages.get_message(fixture_conn, 999) is None


class TestUpdateMessage:
    def test_update_annotations(self, fixture_conn):
        updated = messages.update_message(
            fixture_conn, 5, {"tag": "apology", "conflict_detected": True}
        )
        assert updated["tag"] == "apology"
        assert updated["conflict_detected"] is True
        assert messages.count_conflicts(fixture_conn) == 3

    def test_unknown_field_rejected(self, fixture_conn):
        with pytest.raises(ValueError, match="message"):
            messages.update_message(fixture_conn, 1, {"message": "rewritten"})
        assert messages.get_message(fixture_conn, 1)["message"] == "Happy birthday! Love you"

    def test_null_conflict_flag_rejected(self, fixture_conn):
        with pytest.raises(ValueError, match="conflict_detected"):
            messages.update_message(fixture_conn, 4, {"conflict_detected": None})
        assert messages.get_message(fixture_conn, 4)["conflict_detected"] is True

    def test_nothing_to_update(self, fixture_conn):
        with pytest.raises(ValueError, match="No fields to update"):
            messages.update_message(fixture_conn, 1, {})

    @pytest.mark.parametrize("score", [1.5, -2])
    def test_score_out_of_range(self, fixture_conn, score):
        with pytest.raises(ValueError):
            messages.update_message(fixture_conn, 1, {"sentiment_score": score})

    def test_missing_message(self, fixture_conn):
        with pytest.raises(LookupError):
            messages.update_message(fixture_conn, 999, {"tag": "x"})

    def test_backfill_sentiment(self, fixture_conn):
        updated = messages.backfill_sentiment(fixture_conn, 8, 0.3)
        assert updated["sentiment_score"] == pytest.approx(0.3)


class TestDeleteMessage:
    def test_delete(self, fixture_conn):
        assert messages.delete_message(fixture_conn, 3) is True
        assert messages.get_message(fixture_conn, 3) is None
        _, total = messages.list_messages(fixture_conn)
        assert total == 6

    def test_delete_missing(self, fixture_conn):
        assert messages.delete_message(fixture_conn, 999) is False

    def test_deleting_kept_duplicate_promotes_the_other(self, fixture_conn):
        messages.delete_message(fixture_conn, 8)
        rows, total = messages.list_messages(fixture_conn, MessageFilters(search="Family"))
        assert ids(rows) == [9]
        assert total == 1
