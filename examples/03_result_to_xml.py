"""Serialize a query result into a `recordset` XML document."""

from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "db_helper").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from db_helper import QueryExecutor, document_to_string, format_temporal, result_to_document


def main() -> None:
    with QueryExecutor("sqlite3", ":memory:") as db:
        db.update("CREATE TABLE events (name TEXT, amount REAL, happened TEXT)")
        db.update(
            "INSERT INTO events VALUES (?, ?, ?)",
            "deploy",
            1.5,
            dt.datetime(2013, 12, 19, 21, 7, 2),
        )

        with db.query("SELECT name, amount, happened FROM events") as cursor:
            document = result_to_document(cursor)
        print(document_to_string(document))

    # Temporal values use a fixed pattern.
    print(format_temporal(dt.datetime(2013, 12, 19, 21, 7, 2)))


if __name__ == "__main__":
    main()
