"""Public core API: errors, typed parameters, configuration store, and serialization."""

from .config_store import ConfigStore
from .errors import (
    ConfigHelperError,
    DbHelperError,
    NoResultError,
    ResultTypeError,
    UnsupportedParameterError,
)
from .params import ParamKind, SqlParam, to_param, to_params
from .result_document import (
    document_to_bytes,
    document_to_string,
    format_temporal,
    result_to_document,
)
from .types import ColumnRef, ConfigSet

__all__ = [
    "ColumnRef",
    "ConfigHelperError",
    "ConfigSet",
    "ConfigStore",
    "DbHelperError",
    "NoResultError",
    "ParamKind",
    "ResultTypeError",
    "SqlParam",
    "UnsupportedParameterError",
    "document_to_bytes",
    "document_to_string",
    "format_temporal",
    "result_to_document",
    "to_param",
    "to_params",
]
