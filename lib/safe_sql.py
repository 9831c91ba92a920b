"""
SQL text builders for the unmask store.

SQLite binds values with ``?`` but cannot bind table or column names, so
every builder here checks its identifiers against IDENTIFIER before they
reach an f-string. Callers pass values separately as parameters.
"""

# ruff: noqa: S608 - identifiers pass through ident() before interpolation.

from __future__ import annotations

import re
from collections.abc import Iterable

IDENTIFIER = re.compile(r"^[A-Za-z_]\w*$", re.ASCII)


def ident(name: str) -> str:
    """Return *name* if it is a plain SQL identifier, else raise ValueError."""
    if not isinstance(name, str) or not IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def _column_list(columns: Iterable[str]) -> list[str]:
    names = [ident(c) for c in columns]
    if not names:
        raise ValueError("At least one column is required")
    return names


# -- pragmas --------------------------------------------------


def pragma_table_info(table: str) -> str:
    return f"PRAGMA table_info([{ident(table)}])"


def pragma_user_version_set(version: int) -> str:
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        raise ValueError(f"Invalid schema version: {version!r}")
    return f"PRAGMA user_version = {version}"


# -- reads ----------------------------------------------------


def select(
    table: str,
    columns: str = "*",
    where: str | None = None,
    order_by: str | None = None,
    suffix: str = "",
) -> str:
    """SELECT from a checked table.

    *columns*, *where* (without the keyword) and *order_by* are raw SQL
    fragments written by this package; *where* must use ``?`` for values.
    """
    parts = [f"SELECT {columns} FROM {ident(table)}"]
    if where:
        parts.append(f"WHERE {where}")
    if order_by:
        parts.append(f"ORDER BY {order_by}")
    if suffix:
        parts.append(suffix)
    return " ".join(parts)


def select_count(table: str, where: str | None = None) -> str:
    return select(table, "COUNT(*) AS total", where)


# -- writes ---------------------------------------------------


def insert(table: str, columns: Iterable[str]) -> str:
    names = _column_list(columns)
    placeholders = ", ".join("?" * len(names))
    return f"INSERT INTO {ident(table)} ({', '.join(names)}) VALUES ({placeholders})"


def update(table: str, set_columns: Iterable[str], where: str = "id = ?") -> str:
    """UPDATE the given columns; ``updated_at`` is always stamped."""
    assignments = [f"{c} = ?" for c in _column_list(set_columns)]
    assignments.append("updated_at = datetime('now')")
    return f"UPDATE {ident(table)} SET {', '.join(assignments)} WHERE {where}"


def delete(table: str, where: str = "id = ?") -> str:
    return f"DELETE FROM {ident(table)} WHERE {where}"


# -- ddl ------------------------------------------------------


def alter_add_column(table: str, column: str, column_type: str) -> str:
    return f"ALTER TABLE [{ident(table)}] ADD COLUMN [{ident(column)}] {column_type}"


def create_index(name: str, table: str, columns: Iterable[str]) -> str:
    # No IF NOT EXISTS: a second run must report "already exists".
    return f"CREATE INDEX {ident(name)} ON {ident(table)}({', '.join(_column_list(columns))})"


def drop_table(name: str) -> str:
    return f"DROP TABLE IF EXISTS [{ident(name)}]"


def drop_view(name: str) -> str:
    return f"DROP VIEW IF EXISTS [{ident(name)}]"


def where_and(conditions: Iterable[str]) -> str:
    """AND the conditions together; empty string when there are none."""
    return " AND ".join(conditions)
