# Unmask - Core Library
"""
Exports for cli/main.py and other consumers.
"""

from .dashboard import get_dashboard_stats
from .db import StorageUnavailable, get_connection, run_migrations
from .importer import import_csv, import_csv_file
from .messages import MessageFilters, list_messages, load_messages

__all__ = [
    "StorageUnavailable",
    "get_connection",
    "run_migrations",
    "get_dashboard_stats",
    "import_csv",
    "import_csv_file",
    "MessageFilters",
    "list_messages",
    "load_messages",
]
