"""Named configuration sets feeding an executor."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "db_helper").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from db_helper import ConfigStore, DbSettings, QueryExecutor


def main() -> None:
    store = ConfigStore()

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "app.properties"
        path.write_text("# overrides\ndb.url=:memory:\n", encoding="iso-8859-1")

        # 1) Defaults first, then the properties file overrides them.
        config = store.get("app", {"db.driver": "sqlite3", "db.url": "app.db"}, str(path))
        print("Config:", config)

    # 2) Same name returns the same set.
    print("Same object:", store.get("app") is config)

    # 3) Build an executor from the set.
    with QueryExecutor.from_settings(DbSettings.from_mapping(config)) as db:
        print("SQLite version:", db.single_result("SELECT sqlite_version() AS v", None, "v"))

    store.remove("app")
    print("Exists after remove:", store.exists("app"))


if __name__ == "__main__":
    main()
