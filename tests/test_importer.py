"""
Tests for CSV import.
"""

import pytest

from lib import importer, messages
from lib.relationship.seasons import detect_emotional_seasons
from tests.fixtures import create_fixture_db

HEADER = "date,date-time,sender,message,type,notes,sentiment"


@pytest.fixture
def empty_conn():
    conn = create_fixture_db(seed=False)
    yield conn
    conn.close()


class TestImportCsv:
    def test_counts(self, empty_conn):
        text = "\n".join(
            [
                HEADER,
                "2024-05-01,2024-05-01T10:00:00,Alex,Hi there,Incoming,,positive",
                "2024-05-01,2024-05-01T10:01:00,Me,,Outgoing,,",
                ",,Me,Orphan,Outgoing,,",
            ]
        )
        result = importer.import_csv(empty_conn, text)

        assert result.to_dict() == {
            "totalRecords": 3,
            "insertedCount": 1,
            "skippedCount": 1,
            "errorsCount": 1,
            "errors": result.errors,
        }
        assert result.errors[0]["error"] == "Row has no date-time"

    def test_stored_row(self, empty_conn):
        importer.import_csv(
            empty_conn,
            HEADER + "\n2024-05-01,2024-05-01T10:00:00,Alex,  Hi there  ,Incoming,first,positive",
        )
        row = messages.get_message(empty_conn, 1)
        assert row["message"] == "Hi there"
        assert row["date"] == "2024-05-01"
        assert row["time"] == "10:00:00"
        assert row["notes"] == "first"
        assert row["sentiment"] == "positive"

    def test_date_only_row(self, empty_conn):
        result = importer.import_csv(empty_conn, "date,sender,message\n2024-05-02,Alex,Morning")
        assert result.inserted_count == 1
        assert messages.get_message(empty_conn, 1)["date_time"] == "2024-05-02"

    def test_headers_are_normalized(self, empty_conn):
        result = importer.import_csv(empty_conn, " Date_Time , Message \n2024-05-01T08:00:00,hey")
        assert result.inserted_count == 1

    def test_sentiment_score_validated(self, empty_conn):
        text = "date_time,message,sentiment_score\n2024-05-01T08:00:00,ok,0.4\n2024-05-01T09:00:00,bad,4"
        result = importer.import_csv(empty_conn, text)
        assert result.inserted_count == 1
        assert "out of range" in result.errors[0]["error"]

    @pytest.mark.parametrize("stamp", ["01/05/2025 10:00", "yesterday", "2025-13-01T10:00:00"])
    def test_non_iso_timestamp_rejected(self, empty_conn, stamp):
        result = importer.import_csv(empty_conn, f"date_time,message\n{stamp},hi\n2025-05-01T10:00:00Z,ok")
        assert result.inserted_count == 1
        assert "not ISO-8601" in result.errors[0]["error"]
        periods = [b.period for b in detect_emotional_seasons(messages.load_messages(empty_conn))]
        assert periods == ["2025-05"]

    def test_reported_errors_are_capped(self, empty_conn):
        rows = [f",,Me,Orphan {i},Outgoing,," for i in range(7)]
        result = importer.import_csv(empty_conn, "\n".join([HEADER, *rows]))
        summary = result.to_dict()
        assert summary["errorsCount"] == 7
        assert len(summary["errors"]) == importer.MAX_REPORTED_ERRORS

    def test_blank_lines_not_counted(self, empty_conn):
        text = HEADER + "\n\n2024-05-01,2024-05-01T10:00:00,Alex,Hi,Incoming,,\n,,,,,,\n"
        assert importer.import_csv(empty_conn, text).total_records == 1

    @pytest.mark.parametrize("text", ["", "   \n  "])
    def test_empty_input(self, empty_conn, text):
        with pytest.raises(ValueError, match="CSV data not provided"):
            importer.import_csv(empty_conn, text)

    def test_duplicates_import_but_read_once(self, empty_conn):
        line = "2024-05-01,2024-05-01T10:00:00,Alex,Hi,Incoming,,"
        result = importer.import_csv(empty_conn, "\n".join([HEADER, line, line]))
        assert result.inserted_count == 2
        _, total = messages.list_messages(empty_conn)
        assert total == 1


class TestImportCsvFile:
    def test_bom_is_tolerated(self, empty_conn, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text("date_time,message\n2024-05-01T08:00:00,hey\n", encoding="utf-8-sig")
        result = importer.import_csv_file(empty_conn, path)
        assert result.inserted_count == 1
        assert result.errors == []
