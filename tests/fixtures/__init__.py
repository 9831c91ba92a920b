"""
Test fixtures for deterministic testing.

This module provides:
- fixture_db: Creates temp SQLite databases with pinned seed data
- seed.json: Pinned data that defines FIXTURE_EXPECTATIONS
"""

from .fixture_db import FIXTURE_EXPECTATIONS, create_fixture_db, get_fixture_db_path, guard_no_live_db

__all__ = ["FIXTURE_EXPECTATIONS", "create_fixture_db", "get_fixture_db_path", "guard_no_live_db"]
