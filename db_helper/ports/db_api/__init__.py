"""DB-API executor, cursor, statement, and dialect exports."""

from .cursor import ColumnInfo, ResultCursor
from .dialects import (
    Dialect,
    InformixDialect,
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
    dialect_for_driver,
)
from .executor import QueryExecutor
from .statement import PreparedStatement

__all__ = [
    "ColumnInfo",
    "Dialect",
    "InformixDialect",
    "MySQLDialect",
    "PostgresDialect",
    "PreparedStatement",
    "QueryExecutor",
    "ResultCursor",
    "SQLiteDialect",
    "dialect_for_driver",
]
