"""
Declarative Schema Definition: THE single source of truth.

Every table, column, and index for Unmask lives here. The schema_engine reads
this and converges any database to match.

Adding a column = add one line here. The engine handles the rest.

Column definitions use CREATE TABLE syntax. The schema_engine knows how
to derive ALTER TABLE ADD COLUMN DDL (strips PK, adjusts NOT NULL, etc.).
"""

from collections import OrderedDict

# =============================================================================
# Schema version. Bump when you change this file
# =============================================================================
SCHEMA_VERSION = 3

# =============================================================================
# Table Definitions
#
# Format: TABLES[name] = {"columns": [(col_name, col_ddl), ...]}
# =============================================================================

TABLES: dict[str, dict] = OrderedDict()

# ---------------------------------------------------------------------------
# messages: imported text history
# ---------------------------------------------------------------------------
TABLES["messages"] = {
    "columns": [
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        ("date_time", "TEXT NOT NULL"),
        ("date", "TEXT"),
        ("time", "TEXT"),
        ("sender", "TEXT"),
        ("message", "TEXT"),
        ("type", "TEXT"),
        ("sentiment", "TEXT"),
        ("sentiment_score", "REAL CHECK(sentiment_score IS NULL OR sentiment_score BETWEEN -1 AND 1)"),
        ("category", "TEXT"),
        ("tag", "TEXT"),
        ("notes", "TEXT"),
        ("conflict_detected", "INTEGER NOT NULL DEFAULT 0"),
        ("created_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
        ("updated_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
    ],
}

# ---------------------------------------------------------------------------
# relationship_events: manually logged milestones, dates, fights
# ---------------------------------------------------------------------------
TABLES["relationship_events"] = {
    "columns": [
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        ("event_date", "TEXT NOT NULL"),
        ("event_time", "TEXT"),
        ("event_type", "TEXT NOT NULL"),
        ("title", "TEXT NOT NULL"),
        ("description", "TEXT"),
        ("notes", "TEXT"),
        ("category", "TEXT DEFAULT 'general'"),
        ("sentiment", "TEXT DEFAULT 'neutral'"),
        ("significance", "INTEGER DEFAULT 3"),
        ("initiated_by", "TEXT"),
        ("location", "TEXT"),
        ("mood_before", "TEXT"),
        ("mood_after", "TEXT"),
        ("relationship_id", "INTEGER DEFAULT 1"),
        ("created_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
        ("updated_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
    ],
}

# ---------------------------------------------------------------------------
# conversation_chunks: summarized windows of messages
# ---------------------------------------------------------------------------
TABLES["conversation_chunks"] = {
    "columns": [
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        ("start_time", "TEXT NOT NULL"),
        ("end_time", "TEXT NOT NULL"),
        ("message_count", "INTEGER DEFAULT 0"),
        ("chunk_summary", "TEXT"),
        (
            "emotional_tone",
            "TEXT CHECK(emotional_tone IN ('positive', 'negative', 'neutral', 'mixed'))",
        ),
        ("conflict_detected", "INTEGER DEFAULT 0"),
        ("sentiment_score", "REAL DEFAULT 5.0 CHECK(sentiment_score >= 0 AND sentiment_score <= 10)"),
        ("participants", "TEXT"),
        ("conversation_type", "TEXT"),
        ("relationship_id", "INTEGER"),
        ("created_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
        ("updated_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
    ],
}

TABLES["conversation_tags"] = {
    "columns": [
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        (
            "conversation_chunk_id",
            "INTEGER NOT NULL REFERENCES conversation_chunks(id) ON DELETE CASCADE",
        ),
        ("tag_name", "TEXT NOT NULL"),
        ("tag_color", "TEXT DEFAULT '#6B7280'"),
        ("created_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
    ],
}

# ---------------------------------------------------------------------------
# relationship_insights: stored agent output.
# relationship_id is added by lib/insights_migration.py, not declared here.
# ---------------------------------------------------------------------------
TABLES["relationship_insights"] = {
    "columns": [
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        ("insight_type", "TEXT NOT NULL"),
        ("content", "TEXT NOT NULL"),
        ("confidence", "REAL"),
        ("agent_type", "TEXT"),
        ("created_at", "TEXT NOT NULL DEFAULT (datetime('now'))"),
    ],
}

# =============================================================================
# Indexes: (name, table, columns, partial WHERE or None)
# =============================================================================

INDEXES: list[tuple[str, str, str, str | None]] = [
    ("idx_messages_date_time", "messages", "date_time", None),
    ("idx_messages_sender", "messages", "sender", None),
    ("idx_messages_tag", "messages", "tag", None),
    ("idx_messages_conflict", "messages", "date_time", "conflict_detected = 1"),
    ("idx_relationship_events_date", "relationship_events", "event_date", None),
    ("idx_relationship_events_type", "relationship_events", "event_type", None),
    (
        "idx_conversation_chunks_relationship_time",
        "conversation_chunks",
        "relationship_id, start_time",
        None,
    ),
    ("idx_conversation_tags_chunk_id", "conversation_tags", "conversation_chunk_id", None),
]

# =============================================================================
# Tables every healthy database must have
# =============================================================================

CRITICAL_TABLES: tuple[str, ...] = ("messages", "relationship_events")
