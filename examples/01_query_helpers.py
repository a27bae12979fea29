"""Query, update, and projection helpers against an in-memory SQLite database."""

from __future__ import annotations

import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "db_helper").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from db_helper import NoResultError, QueryExecutor, SqlParam, configure_logging


def main() -> None:
    configure_logging()

    # 1) The connection opens lazily on the first statement.
    with QueryExecutor("sqlite3", ":memory:") as db:
        db.update("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT, age INTEGER)")

        # 2) Raw values are typed automatically; SqlParam forces a kind.
        db.update("INSERT INTO users (email, age) VALUES (?, ?)", "alice@example.com", 25)
        db.update("INSERT INTO users (email, age) VALUES (?, ?)", "bob@example.com", SqlParam.int32(31))

        # 3) Projection helpers release their cursor before returning.
        print("Alice's age:", db.single_result("SELECT age FROM users WHERE email = ?", ["alice@example.com"], "age"))
        print("All emails:", db.result_list("SELECT email FROM users ORDER BY id", None, "email"))
        print("Has bob:", db.record_exists("SELECT 1 FROM users WHERE email = ?", ["bob@example.com"]))

        # 4) Lenient vs strict single result.
        print("Missing (lenient):", db.single_result("SELECT age FROM users WHERE id = ?", [99], 1))
        try:
            db.require_single_result("SELECT age FROM users WHERE id = ?", [99], 1)
        except NoResultError as exc:
            print("Missing (strict):", exc)

        # 5) Caller-owned cursor.
        with db.query("SELECT id, email FROM users ORDER BY id") as cursor:
            while cursor.next():
                print(cursor.get("id"), cursor.get(2))


if __name__ == "__main__":
    main()
