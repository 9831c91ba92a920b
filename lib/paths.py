"""
Filesystem locations for Unmask.

Everything the service writes lives under the app home: ``~/.unmask`` by
default, or UNMASK_HOME. UNMASK_DB points the store somewhere else
entirely.
"""

from __future__ import annotations

import os
from pathlib import Path

HOME_ENV = "UNMASK_HOME"
DB_ENV = "UNMASK_DB"
DB_FILENAME = "unmask.db"


def _from_env(name: str) -> Path | None:
    value = os.environ.get(name)
    return Path(value).expanduser().resolve() if value else None


def app_home() -> Path:
    return _from_env(HOME_ENV) or (Path.home() / ".unmask").resolve()


def data_dir() -> Path:
    """app_home()/data, created on first use."""
    directory = app_home() / "data"
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def db_path() -> Path:
    """UNMASK_DB when set, else app_home()/data/unmask.db."""
    return _from_env(DB_ENV) or data_dir() / DB_FILENAME
