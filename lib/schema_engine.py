"""
Schema convergence for the unmask store.

lib/schema declares what the database should look like; this module makes
a live SQLite file match it.

  converge(conn)      Upgrade in place. Creates missing tables, columns and
                      indexes. Never drops anything.
  create_fresh(conn)  Wipe and rebuild. Only for new files and test fixtures.

Both return a report dict and stamp PRAGMA user_version.
"""

import logging
import re
import sqlite3

from lib import safe_sql, schema

logger = logging.getLogger(__name__)

# Constraints SQLite accepts in CREATE TABLE but rejects in ADD COLUMN.
_ADD_COLUMN_REJECTS = re.compile(
    r"\bPRIMARY\s+KEY\b"
    r"|\bAUTOINCREMENT\b"
    r"|\bUNIQUE\b"
    r"|\bREFERENCES\s+\w+\s*\([^)]*\)(?:\s+ON\s+DELETE\s+\w+)?"
    r"|\bCHECK\s*\((?:[^()]|\([^()]*\))*\)",
    re.IGNORECASE,
)
_EXPRESSION_DEFAULT = re.compile(r"\bDEFAULT\s*\([^)]*\)\)?", re.IGNORECASE)


def add_column_ddl(column_ddl: str) -> str:
    """Rewrite a CREATE TABLE column definition for ALTER TABLE ADD COLUMN.

    Table-level constraints are dropped, expression defaults become ``''``
    and a NOT NULL column without a default gets one.
    """
    ddl = _ADD_COLUMN_REJECTS.sub("", column_ddl)
    ddl = _EXPRESSION_DEFAULT.sub("DEFAULT ''", ddl)
    ddl = " ".join(ddl.split())
    if re.search(r"\bNOT\s+NULL\b", ddl, re.I) and not re.search(r"\bDEFAULT\b", ddl, re.I):
        ddl += " DEFAULT ''"
    return ddl


def create_table_sql(name: str, definition: dict) -> str:
    lines = [f"{column} {ddl}" for column, ddl in definition["columns"]]
    lines += [f"UNIQUE({', '.join(cols)})" for cols in definition.get("unique", [])]
    body = ",\n    ".join(lines)
    return f"CREATE TABLE IF NOT EXISTS [{safe_sql.ident(name)}] (\n    {body}\n)"


def create_index_sql(name: str, table: str, columns: str, where: str | None) -> str:
    sql = f"CREATE INDEX IF NOT EXISTS [{safe_sql.ident(name)}] ON [{safe_sql.ident(table)}]({columns})"
    return f"{sql} WHERE {where}" if where else sql


def _catalog(conn: sqlite3.Connection) -> dict[str, str]:
    """Map of every user object name to its type (table, view, index)."""
    rows = conn.execute(
        "SELECT name, type FROM sqlite_master "
        "WHERE type IN ('table', 'view', 'index') AND name NOT LIKE 'sqlite_%'"
    ).fetchall()
    return {name: kind for name, kind in rows}


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(safe_sql.pragma_table_info(table))}


def _attempt(conn: sqlite3.Connection, sql: str, label: str, report: dict) -> bool:
    try:
        conn.execute(sql)
    except sqlite3.OperationalError as e:
        report["errors"].append(f"{label}: {e}")
        logger.warning("schema_engine: %s failed: %s", label, e)
        return False
    return True


def _stamp(conn: sqlite3.Connection, report: dict) -> dict:
    conn.execute(safe_sql.pragma_user_version_set(schema.SCHEMA_VERSION))
    report["schema_version"] = schema.SCHEMA_VERSION
    return report


def converge(conn: sqlite3.Connection) -> dict:
    """Bring an existing database up to the declared schema.

    A view occupying a declared table's name is left alone and reported
    under ``skipped_views``.
    """
    report: dict = {
        "tables_created": [],
        "columns_added": [],
        "indexes_created": [],
        "skipped_views": [],
        "errors": [],
    }
    catalog = _catalog(conn)

    for table, definition in schema.TABLES.items():
        kind = catalog.get(table)
        if kind == "view":
            report["skipped_views"].append(table)
            continue
        if kind is None:
            if _attempt(conn, create_table_sql(table, definition), f"CREATE TABLE {table}", report):
                report["tables_created"].append(table)
                logger.info("schema_engine: created table %s", table)
            continue

        present = _columns(conn, table)
        for column, ddl in definition["columns"]:
            if column in present:
                continue
            sql = safe_sql.alter_add_column(table, column, add_column_ddl(ddl))
            if _attempt(conn, sql, f"ADD COLUMN {table}.{column}", report):
                report["columns_added"].append(f"{table}.{column}")
                logger.info("schema_engine: added column %s.%s", table, column)

    catalog = _catalog(conn)
    for name, table, columns, where in schema.INDEXES:
        if name in catalog or catalog.get(table) != "table":
            continue
        if _attempt(conn, create_index_sql(name, table, columns, where), f"CREATE INDEX {name}", report):
            report["indexes_created"].append(name)

    return _stamp(conn, report)


def create_fresh(conn: sqlite3.Connection) -> dict:
    """Drop every table and view, then build the declared schema."""
    report: dict = {"tables_created": [], "indexes_created": [], "errors": []}

    catalog = _catalog(conn)
    for name in [n for n, kind in catalog.items() if kind == "view"]:
        conn.execute(safe_sql.drop_view(name))
    for name in [n for n, kind in catalog.items() if kind == "table"]:
        conn.execute(safe_sql.drop_table(name))

    for table, definition in schema.TABLES.items():
        if _attempt(conn, create_table_sql(table, definition), f"CREATE TABLE {table}", report):
            report["tables_created"].append(table)

    for name, table, columns, where in schema.INDEXES:
        if _attempt(conn, create_index_sql(name, table, columns, where), f"CREATE INDEX {name}", report):
            report["indexes_created"].append(name)

    return _stamp(conn, report)
