"""DB-API query helpers, named configuration sets, and result-to-XML serialization."""

from .config import DbSettings, load_settings
from .core import (
    ConfigHelperError,
    ConfigSet,
    ConfigStore,
    DbHelperError,
    NoResultError,
    ParamKind,
    ResultTypeError,
    SqlParam,
    UnsupportedParameterError,
    document_to_bytes,
    document_to_string,
    format_temporal,
    result_to_document,
    to_param,
    to_params,
)
from .ports import (
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
from .utils.logger import configure_logging, get_logger

__all__ = [
    "ColumnInfo",
    "ConfigHelperError",
    "ConfigSet",
    "ConfigStore",
    "DbHelperError",
    "DbSettings",
    "Dialect",
    "InformixDialect",
    "MySQLDialect",
    "NoResultError",
    "ParamKind",
    "PostgresDialect",
    "PreparedStatement",
    "QueryExecutor",
    "ResultCursor",
    "ResultTypeError",
    "SQLiteDialect",
    "SqlParam",
    "UnsupportedParameterError",
    "configure_logging",
    "dialect_for_driver",
    "document_to_bytes",
    "document_to_string",
    "format_temporal",
    "get_logger",
    "load_settings",
    "result_to_document",
    "to_param",
    "to_params",
]
