"""
Test configuration: repo root on sys.path, live DB guard, isolated home.

This allows tests to import from top-level packages (api, cli, lib).
Enforces determinism by blocking live DB access and pointing UNMASK_HOME
at a temp directory for every test.
"""

import sqlite3
import sys
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

# Add repo root to sys.path so tests can import api.*, cli.*, lib.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

USER_HEADERS = {"X-User-Id": "test-user"}

# The autouse DB guard is function-scoped and shared by all examples of a @given test.
settings.register_profile("unmask", suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile("unmask")


# =============================================================================
# DETERMINISM GUARD: Block live database access
# =============================================================================

HOME_DB_ABSOLUTE = Path.home() / ".unmask" / "data" / "unmask.db"

_original_sqlite_connect = sqlite3.connect


def _guarded_sqlite_connect(database, *args, **kwargs):
    """Intercept sqlite3.connect to block live DB access."""
    db_str = str(database)
    if db_str != ":memory:" and (db_str == str(HOME_DB_ABSOLUTE) or db_str.endswith(".unmask/data/unmask.db")):
        raise RuntimeError(
            f"DETERMINISM VIOLATION: Test attempted to access live DB at {database}.\n"
            "Tests must use fixture_db from tests/fixtures/fixture_db.py.\n"
            "Use: from tests.fixtures import create_fixture_db"
        )
    return _original_sqlite_connect(database, *args, **kwargs)


@pytest.fixture(autouse=True)
def guard_live_db_access(monkeypatch, tmp_path):
    """Block the live DB and isolate UNMASK_HOME for every test."""
    monkeypatch.setattr(sqlite3, "connect", _guarded_sqlite_connect)
    monkeypatch.setenv("UNMASK_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("UNMASK_DB", raising=False)


# =============================================================================
# FIXTURE DB
# =============================================================================


@pytest.fixture
def fixture_conn():
    """In-memory seeded DB connection."""
    from tests.fixtures.fixture_db import create_fixture_db

    conn = create_fixture_db(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def fixture_db_path(tmp_path, monkeypatch):
    """
    Seeded DB file, wired in as UNMASK_DB so lib.db.get_connection() uses it.
    Function-scoped: tests may write to it.
    """
    from tests.fixtures.fixture_db import get_fixture_db_path

    db_path = get_fixture_db_path(tmp_path)
    monkeypatch.setenv("UNMASK_DB", str(db_path))
    return db_path


@pytest.fixture
def empty_db_path(tmp_path, monkeypatch):
    """Migrated DB with no rows, wired in as UNMASK_DB."""
    from tests.fixtures.fixture_db import get_fixture_db_path

    db_dir = tmp_path / "empty"
    db_dir.mkdir()
    db_path = get_fixture_db_path(db_dir, seed=False)
    monkeypatch.setenv("UNMASK_DB", str(db_path))
    return db_path


# =============================================================================
# API CLIENT
# =============================================================================


@pytest.fixture
def client(fixture_db_path):
    """TestClient against the seeded fixture DB, sending a user id header."""
    from fastapi.testclient import TestClient

    from api.server import app

    test_client = TestClient(app, headers=USER_HEADERS)
    yield test_client
    app.dependency_overrides.clear()
