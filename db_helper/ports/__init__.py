"""Public port exports for concrete adapter implementations."""

from .db_api import (
    ColumnInfo,
    Dialect,
    InformixDialect,
    MySQLDialect,
    PostgresDialect,
    PreparedStatement,
    QueryExecutor,
    ResultCursor,
    SQLiteDialect,
    dialect_for_driver,
)

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
