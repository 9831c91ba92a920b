"""
CSV import of exported text history into the messages table.

Expected header columns: date, date-time (or date_time), sender, message,
type, notes, sentiment, and optionally sentiment_score. Values are trimmed.
Timestamps must be ISO-8601. Rows with an empty message are skipped;
rows that fail validation or insert are collected as errors and the
import carries on.
"""

import csv
import io
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from lib import safe_sql
from lib.relationship.metrics import parse_timestamp

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 5

INSERT_COLUMNS = [
    "date",
    "date_time",
    "time",
    "sender",
    "message",
    "type",
    "notes",
    "sentiment",
    "sentiment_score",
]


@dataclass
class ImportResult:
    total_records: int = 0
    inserted_count: int = 0
    skipped_count: int = 0
    errors: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalRecords": self.total_records,
            "insertedCount": self.inserted_count,
            "skippedCount": self.skipped_count,
            "errorsCount": len(self.errors),
            "errors": self.errors[:MAX_REPORTED_ERRORS],
        }


def _clean(record: dict) -> dict:
    return {
        (k or "").strip().lower(): (v.strip() if isinstance(v, str) else v)
        for k, v in record.items()
    }


def _row_values(rec: dict) -> dict:
    date_time = rec.get("date-time") or rec.get("date_time") or rec.get("date")
    if not date_time:
        raise ValueError("Row has no date-time")
    if parse_timestamp(date_time) is None:
        raise ValueError(f"date-time is not ISO-8601: {date_time!r}")

    score = rec.get("sentiment_score") or None
    if score is not None:
        score = float(score)
        if not -1 <= score <= 1:
            raise ValueError(f"sentiment_score out of range: {score}")

    time_part = rec.get("time")
    if not time_part and "T" in date_time:
        time_part = date_time.split("T", 1)[1][:8]

    return {
        "date": rec.get("date") or date_time[:10],
        "date_time": date_time,
        "time": time_part or None,
        "sender": rec.get("sender") or None,
        "message": rec["message"],
        "type": rec.get("type") or None,
        "notes": rec.get("notes") or None,
        "sentiment": rec.get("sentiment") or None,
        "sentiment_score": score,
    }


def import_csv(conn: sqlite3.Connection, csv_text: str) -> ImportResult:
    """
    Parse CSV text and insert every usable row.

    Raises:
        ValueError: If the text is empty or has no header row
    """
    if not csv_text or not csv_text.strip():
        raise ValueError("CSV data not provided")

    reader = csv.DictReader(io.StringIO(csv_text.strip()))
    if not reader.fieldnames:
        raise ValueError("CSV has no header row")

    sql = safe_sql.insert("messages", INSERT_COLUMNS)
    result = ImportResult()

    for record in reader:
        rec = _clean(record)
        if not any(rec.values()):
            continue
        result.total_records += 1

        if not rec.get("message"):
            result.skipped_count += 1
            continue

        try:
            values = _row_values(rec)
            conn.execute(sql, [values[c] for c in INSERT_COLUMNS])
            result.inserted_count += 1
        except (ValueError, sqlite3.IntegrityError) as e:
            result.errors.append({"record": record, "error": str(e)})

    logger.info(
        "CSV import: %d records, %d inserted, %d skipped, %d errors",
        result.total_records,
        result.inserted_count,
        result.skipped_count,
        len(result.errors),
    )
    return result


def import_csv_file(conn: sqlite3.Connection, path: Path | str) -> ImportResult:
    """Import from a file on disk (UTF-8, BOM tolerated)."""
    text = Path(path).read_text(encoding="utf-8-sig")
    return import_csv(conn, text)
