"""
Stepwise migration adding relationship_id to relationship_insights.

Each step is attempted and reported on its own. Re-running is harmless:
a duplicate column or an existing index counts as success.
"""

import logging
import sqlite3

from lib import safe_sql

logger = logging.getLogger(__name__)

TABLE = "relationship_insights"
COLUMN = "relationship_id"
INDEX = "idx_relationship_insights_relationship_id"

OPERATIONS = [
    safe_sql.alter_add_column(TABLE, COLUMN, "INTEGER"),
    safe_sql.create_index(INDEX, TABLE, [COLUMN]),
    safe_sql.pragma_table_info(TABLE),
]


def describe() -> dict:
    return {
        "message": "POST to modify the relationship_insights table",
        "operations": list(OPERATIONS),
    }


def _step(conn: sqlite3.Connection, sql: str, done: str, tolerated: str, already: str) -> dict:
    try:
        conn.execute(sql)
        return {"success": True, "message": done}
    except sqlite3.OperationalError as e:
        if tolerated in str(e):
            return {"success": True, "message": already}
        logger.warning("migration step failed: %s (%s)", sql, e)
        return {"success": False, "error": str(e)}


def run(conn: sqlite3.Connection) -> dict:
    """Run all three steps and return per-step results."""
    results = {
        "alterTable": _step(
            conn,
            OPERATIONS[0],
            "Column added successfully",
            "duplicate column name",
            "Column already exists",
        ),
        "createIndex": _step(
            conn,
            OPERATIONS[1],
            "Index created successfully",
            "already exists",
            "Index already exists",
        ),
    }

    try:
        columns = [dict(row) for row in conn.execute(OPERATIONS[2]).fetchall()]
        results["tableInfo"] = {
            "success": True,
            "columns": columns,
            "hasRelationshipId": any(col["name"] == COLUMN for col in columns),
        }
    except sqlite3.Error as e:
        results["tableInfo"] = {"success": False, "error": str(e)}

    status = "completed" if all(step["success"] for step in results.values()) else "partial"
    logger.info("relationship_insights migration %s", status)
    return {"status": status, "table": TABLE, "results": results}
