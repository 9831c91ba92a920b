"""
Database access for Unmask.

Every module opens the store through get_connection(); nothing else calls
sqlite3.connect(). Schema upgrades go through run_migrations(), which hands
the work to schema_engine and records the version it started from.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from lib import paths, schema, schema_engine

logger = logging.getLogger(__name__)

_migrations_run = False


class StorageUnavailable(Exception):
    """The database could not be opened or is missing its tables."""


def get_db_path() -> Path:
    """UNMASK_DB when set, else data/unmask.db under the app home."""
    return paths.db_path()


@contextmanager
def get_connection(row_factory: bool = True) -> Iterator[sqlite3.Connection]:
    """Open the store, commit if the block finishes cleanly, always close.

        with get_connection() as conn:
            conn.execute(...)

    Raises StorageUnavailable when the file or its directory cannot be
    opened; errors raised inside the block roll back and propagate.
    """
    location = get_db_path()
    try:
        location.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(location))
    except (OSError, sqlite3.Error) as e:
        logger.error("Cannot open database %s: %s", location, e)
        raise StorageUnavailable(f"Database unavailable: {e}") from e

    if row_factory:
        conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
    ).fetchone()
    return row is not None


def get_schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def run_migrations(conn: sqlite3.Connection) -> dict:
    """Converge *conn* to lib/schema and report what changed."""
    before = get_schema_version(conn)
    report = schema_engine.converge(conn)
    report["previous_version"] = before
    return report


def run_startup_migrations() -> dict:
    """Converge the configured database once per process.

    Later calls return ``{"status": "skipped"}`` while the stored version is
    current. Missing critical tables are logged, not raised; requests that
    need them fail with StorageUnavailable.
    """
    global _migrations_run  # noqa: PLW0603

    logger.info("Database %s, target schema v%s", get_db_path(), schema.SCHEMA_VERSION)
    with get_connection() as conn:
        current = get_schema_version(conn)
        if _migrations_run and current >= schema.SCHEMA_VERSION:
            return {"status": "skipped", "schema_version": current}

        report = run_migrations(conn)
        for key in ("tables_created", "columns_added", "indexes_created"):
            if report.get(key):
                logger.info("Schema %s: %s", key.replace("_", " "), report[key])
        if report.get("errors"):
            logger.warning("Schema convergence errors: %s", report["errors"])

        missing = [t for t in schema.CRITICAL_TABLES if not table_exists(conn, t)]
        if missing:
            logger.error("Critical tables missing after convergence: %s", missing)

    _migrations_run = True
    return report


def ensure_migrations() -> None:
    if not _migrations_run:
        run_startup_migrations()
