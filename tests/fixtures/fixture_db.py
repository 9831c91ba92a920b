"""
Fixture Database Factory for deterministic tests.

Creates a temp SQLite DB with the declared schema + pinned seed data.
Tests MUST use this fixture, never the live ~/.unmask/data/unmask.db.

Design:
- Schema comes from schema_engine.create_fresh() (same source as lib/db.py)
- Seed data is from tests/fixtures/seed.json (pinned, committed)
- All counts/values are deterministic and match FIXTURE_EXPECTATIONS
"""

import json
import sqlite3
from pathlib import Path
from typing import Any

from lib import safe_sql, schema_engine

SEED_PATH = Path(__file__).parent / "seed.json"

_LIVE_DB_SUFFIX = ".unmask/data/unmask.db"

# Values derived by hand from seed.json
FIXTURE_EXPECTATIONS = {
    "raw_messages": 9,
    "deduplicated_messages": 7,
    "events": 3,
    "conflicts": 2,  # one flagged message + one conflict event
    "months": ["2024-01", "2024-02", "2024-03"],
}


def guard_no_live_db(db_path: str | Path) -> None:
    """Fail loudly if tests try to access the live database."""
    if str(db_path).endswith(_LIVE_DB_SUFFIX):
        raise RuntimeError(
            f"DETERMINISM VIOLATION: Test attempted to access live DB at {db_path}.\n"
            "Tests must use the fixture DB only. See tests/fixtures/fixture_db.py."
        )


def load_seed_data() -> dict[str, Any]:
    """Load pinned seed data from seed.json."""
    return json.loads(SEED_PATH.read_text())


def create_fixture_db(db_path: str | Path = ":memory:", seed: bool = True) -> sqlite3.Connection:
    """
    Create a fixture database with schema + seeded data.

    Args:
        db_path: Path to DB file, or ":memory:" for in-memory DB.
        seed: Insert seed.json rows. False gives an empty, fully migrated DB.

    Returns:
        sqlite3.Connection to the initialized DB.
    """
    guard_no_live_db(db_path)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row

    schema_engine.create_fresh(conn)
    if seed:
        _seed_tables(conn, load_seed_data())

    conn.commit()
    return conn


def _seed_tables(conn: sqlite3.Connection, seed: dict[str, list[dict]]) -> None:
    for table in ("messages", "relationship_events"):
        for row in seed.get(table, []):
            if table == "messages" and "date" not in row:
                row = {**row, "date": row["date_time"][:10], "time": row["date_time"][11:19]}
            columns = list(row)
            conn.execute(safe_sql.insert(table, columns), [row[c] for c in columns])


def get_fixture_db_path(tmp_path: Path, seed: bool = True) -> Path:
    """
    Create a fixture DB file in the given tmp_path.

    Use this with pytest's tmp_path fixture:
        db_path = get_fixture_db_path(tmp_path)
    """
    db_path = tmp_path / "fixture.db"
    conn = create_fixture_db(db_path, seed=seed)
    conn.close()
    return db_path
