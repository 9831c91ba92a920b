#!/usr/bin/env python3
"""
Unmask CLI - local access to the message store and analytics.
"""

import sys
from pathlib import Path

from lib import config, dashboard, db, importer, messages
from lib.observability import configure_logging
from lib.relationship import (
    calculate_health_score,
    derive_metrics,
    detect_emotional_seasons,
    score_breakdown,
)


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def print_table(headers: list, rows: list, widths: list = None):
    """Print a simple table."""
    if not widths:
        widths = [max(len(str(row[i])) for row in [headers] + rows) for i in range(len(headers))]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def _date_window(args: list) -> tuple[str | None, str | None]:
    start = args[0] if len(args) > 0 else None
    end = args[1] if len(args) > 1 else None
    return start, end


def cmd_init(args):
    """Create or converge the database."""
    with db.get_connection() as conn:
        result = db.run_migrations(conn)
    print_header("DATABASE")
    print(f"Path:           {db.get_db_path()}")
    print(f"Schema version: {result['schema_version']}")
    if result.get("tables_created"):
        print(f"Tables created: {', '.join(result['tables_created'])}")
    if result.get("errors"):
        print(f"Errors:         {result['errors']}")


def cmd_import(args):
    """Import a CSV export."""
    if not args:
        print("Usage: import <file.csv>")
        return
    path = Path(args[0])
    if not path.exists():
        print(f"File not found: {path}")
        return

    with db.get_connection() as conn:
        db.run_migrations(conn)
        result = importer.import_csv_file(conn, path).to_dict()

    print_header("IMPORT")
    print(f"Records:  {result['totalRecords']}")
    print(f"Inserted: {result['insertedCount']}")
    print(f"Skipped:  {result['skippedCount']}")
    print(f"Errors:   {result['errorsCount']}")
    for err in result["errors"]:
        print(f"  - {err['error']}")


def cmd_score(args):
    """Compute the health score locally. Optional: start_date end_date."""
    start, end = _date_window(args)
    with db.get_connection() as conn:
        window = messages.load_messages(conn, start, end)
        conflicts = messages.count_conflicts(conn, start, end)

    if not window:
        print("No messages in range.")
        return

    metrics = derive_metrics(window, conflicts)
    print_header(f"HEALTH SCORE: {calculate_health_score(metrics):.2f} / 10")
    rows = [
        [name, f"{part['normalized']:.2f}", f"{part['weight']:.2f}", f"{part['contribution']:.2f}"]
        for name, part in score_breakdown(metrics).items()
    ]
    print_table(["Signal", "Normalized", "Weight", "Points"], rows)
    print(f"\n{len(window)} messages, {conflicts} conflicts")


def cmd_seasons(args):
    """Monthly sentiment buckets. Optional: start_date end_date."""
    start, end = _date_window(args)
    with db.get_connection() as conn:
        window = messages.load_messages(conn, start, end)

    buckets = detect_emotional_seasons(window)
    print_header("EMOTIONAL SEASONS")
    if not buckets:
        print("No messages in range.")
        return

    rows = [
        [b.period, f"{b.average_sentiment:+.2f}", b.theme.value, b.message_count, ", ".join(b.key_events)]
        for b in buckets
    ]
    print_table(["Month", "Avg", "Theme", "Msgs", "Key events"], rows)


def cmd_stats(args):
    """Show dashboard statistics."""
    with db.get_connection() as conn:
        stats = dashboard.get_dashboard_stats(conn)

    print_header("STATS")
    s, i = stats["stats"], stats["insights"]
    print(f"Messages:          {s['totalMessages']:,}")
    print(f"Years of data:     {s['yearsOfData']}")
    print(f"Participants:      {s['participants']}")
    print(f"Recent activity:   {'yes' if s['aiReady'] else 'no'}")
    print(f"Most active hour:  {i['mostActiveHour']}")
    print(f"Average per day:   {i['averagePerDay']}")
    print(f"Volume health:     {i['communicationHealth']:.1f} / 10")


def cmd_serve(args):
    """Run the API server. Options: --host H --port P"""
    import uvicorn

    host, port = "127.0.0.1", 8420
    i = 0
    while i < len(args):
        if args[i] == "--host" and i + 1 < len(args):
            host = args[i + 1]
            i += 2
        elif args[i] == "--port" and i + 1 < len(args):
            if not args[i + 1].isdigit():
                print(f"Invalid port: {args[i + 1]}")
                return
            port = int(args[i + 1])
            i += 2
        else:
            print(f"Unknown option: {args[i]}")
            return

    uvicorn.run("api.server:app", host=host, port=port)


def cmd_help(args):
    """Show help."""
    print("""
UNMASK CLI

USAGE: unmask <command> [args]   (or: python -m cli.main <command>)

COMMANDS:
  init                     Create or converge the database
  import <file.csv>        Import a message export
  score [start] [end]      Compute the health score from stored messages
  seasons [start] [end]    Monthly sentiment buckets
  stats                    Dashboard statistics
  serve [--host H] [--port P]
                           Run the API server
  help                     Show this help

Dates are YYYY-MM-DD. The database lives at $UNMASK_DB or ~/.unmask/data/unmask.db.
""")


COMMANDS = {
    "init": cmd_init,
    "import": cmd_import,
    "score": cmd_score,
    "seasons": cmd_seasons,
    "stats": cmd_stats,
    "serve": cmd_serve,
    "help": cmd_help,
    "h": cmd_help,
}


def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        cmd_help([])
        return

    cmd = sys.argv[1]
    args = sys.argv[2:]

    configure_logging(level=config.LOG_LEVEL, json_format=config.LOG_JSON)

    if cmd in COMMANDS:
        try:
            if cmd not in ("help", "h", "serve"):
                db.ensure_migrations()
            COMMANDS[cmd](args)
        except db.StorageUnavailable as e:
            print(f"Database not available: {e}")
            sys.exit(1)
    else:
        print(f"Unknown command: {cmd}")
        print("Run 'help' for available commands.")
        sys.exit(2)


if __name__ == "__main__":
    main()
