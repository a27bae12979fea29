"""Result cursor wrapper with 1-based column access and column metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ...core.errors import DbHelperError
from ...core.types import ColumnRef

_DBAPI_TYPE_OBJECTS = ("STRING", "BINARY", "NUMBER", "DATETIME", "ROWID")


@dataclass(frozen=True)
class ColumnInfo:
    """Column label and the type name reported by the driver (may be empty)."""

    name: str
    type_name: str
    type_code: Any = None


class ResultCursor:
    """Forward-only view over a DB-API cursor.

    `next()` advances and reports whether a row is current; `get()` reads a
    column of the current row by 1-based index or by label. The caller owns
    the cursor and must close it.
    """

    def __init__(self, cursor: Any, driver: Any = None):
        self._cursor = cursor
        self._driver = driver
        self._row: Optional[Sequence[Any]] = None
        self._columns: Optional[List[ColumnInfo]] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def columns(self) -> List[ColumnInfo]:
        if self._columns is None:
            self._columns = self._describe()
        return self._columns

    def next(self) -> bool:
        """Advance to the next row; return False once rows are exhausted."""

        self._require_open()
        try:
            row = self._cursor.fetchone()
        except Exception as exc:
            raise DbHelperError("Failed to fetch the next row", exc) from exc
        self._row = row
        return row is not None

    def get(self, column: ColumnRef) -> Any:
        """Return a value of the current row."""

        if self._row is None:
            raise DbHelperError("No current row; call next() first")
        position = self._column_position(column)
        if isinstance(self._row, dict):
            return self._row[self.columns[position].name]
        return self._row[position]

    def before_first(self) -> None:
        """Rewind to before the first row.

        Raises:
            DbHelperError: The driver cursor cannot scroll.
        """

        self._require_open()
        scroll = getattr(self._cursor, "scroll", None)
        if not callable(scroll):
            raise DbHelperError("Cursor does not support repositioning")
        try:
            scroll(0, mode="absolute")
        except Exception as exc:
            raise DbHelperError("Cursor does not support repositioning", exc) from exc
        self._row = None

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._cursor, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> ResultCursor:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _require_open(self) -> None:
        if self._closed:
            raise DbHelperError("Result cursor is closed")

    def _column_position(self, column: ColumnRef) -> int:
        columns = self.columns
        if isinstance(column, bool) or not isinstance(column, (int, str)):
            raise DbHelperError(f"Column reference must be an index or a label, got {column!r}")
        if isinstance(column, int):
            if not 1 <= column <= len(columns):
                raise DbHelperError(
                    f"Column index {column} out of range 1..{len(columns)}"
                )
            return column - 1
        lowered = column.lower()
        for position, info in enumerate(columns):
            if info.name.lower() == lowered:
                return position
        raise DbHelperError(f"Unknown column label {column!r}")

    def _describe(self) -> List[ColumnInfo]:
        description = getattr(self._cursor, "description", None)
        if not description:
            return []
        return [
            ColumnInfo(name=str(entry[0]), type_name=self._type_name(entry[1]), type_code=entry[1])
            for entry in description
        ]

    def _type_name(self, type_code: Any) -> str:
        if type_code is None:
            return ""
        if isinstance(type_code, str):
            return type_code.upper()
        if isinstance(type_code, type):
            return type_code.__name__.upper()
        # PEP 249 type objects compare equal to every type code they cover.
        for attr in _DBAPI_TYPE_OBJECTS:
            type_object = getattr(self._driver, attr, None)
            if type_object is not None and type_code == type_object:
                return attr
        return str(type_code)
