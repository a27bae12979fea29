"""Vendor strategies for DB-API drivers.

A dialect is chosen once when the executor opens its connection. It owns the
driver-specific pieces: enabling auto-commit, session setup, connection
validation, placeholder style, and how some parameter kinds are handed to
the driver.
"""

from __future__ import annotations

import datetime as dt
import sqlite3
from typing import Any, List, Optional, Sequence

from ...utils.logger import get_logger

logger = get_logger(__name__)

_CONNECTION_FAULTS = ("OperationalError", "InterfaceError")


class Dialect:
    """Generic DB-API behavior used when no vendor dialect matches.

    The generic dialect does not ping: there is no statement every backend
    accepts, so a connection counts as valid until its `closed` flag says
    otherwise.
    """

    name: str = "generic"
    driver_markers: Sequence[str] = ()
    paramstyle: Optional[str] = None
    ping_sql: Optional[str] = None
    session_setup_sql: Sequence[str] = ()

    def matches(self, driver_name: str) -> bool:
        """Return whether `driver_name` contains one of the vendor markers."""

        lowered = driver_name.lower()
        return any(marker in lowered for marker in self.driver_markers)

    def resolve_paramstyle(self, driver: Any = None) -> str:
        """Return the dialect's paramstyle, else the driver module's, else `qmark`."""

        return self.paramstyle or getattr(driver, "paramstyle", None) or "qmark"

    def placeholder(self, position: int, paramstyle: Optional[str] = None) -> str:
        """Return the marker for the 1-based parameter `position`."""

        paramstyle = paramstyle or self.paramstyle or "qmark"
        if paramstyle == "qmark":
            return "?"
        if paramstyle in ("format", "pyformat"):
            return "%s"
        if paramstyle in ("numeric", "named"):
            return f":{position}"
        raise ValueError(f"Unsupported paramstyle: {paramstyle}")

    def render_sql(self, sql: str, driver: Any = None) -> str:
        """Rewrite `?` placeholders in `sql` for the driver's paramstyle.

        Question marks inside quoted literals and identifiers are kept. SQL
        without any `?` placeholder is returned unchanged, so statements that
        already use the driver's own markers still work. For `format` styles
        a literal `%` is doubled.
        """

        paramstyle = self.resolve_paramstyle(driver)
        if paramstyle == "qmark":
            return sql
        pieces = _split_on_placeholders(sql)
        if len(pieces) == 1:
            return sql
        escape = paramstyle in ("format", "pyformat")
        rendered: List[str] = []
        for position, piece in enumerate(pieces):
            if position:
                rendered.append(self.placeholder(position, paramstyle))
            rendered.append(piece.replace("%", "%%") if escape else piece)
        return "".join(rendered)

    def set_autocommit(self, conn: Any, enabled: bool) -> None:
        """Switch auto-commit using the PEP 249 `autocommit` attribute."""

        conn.autocommit = enabled

    def get_autocommit(self, conn: Any) -> bool:
        return bool(getattr(conn, "autocommit", False))

    def prepare_connection(self, conn: Any) -> None:
        """Apply defaults to a freshly opened connection."""

        self.set_autocommit(conn, True)
        if not self.session_setup_sql:
            return
        cur = conn.cursor()
        try:
            for sql in self.session_setup_sql:
                cur.execute(sql)
        finally:
            cur.close()

    def is_closed(self, conn: Any) -> bool:
        closed = getattr(conn, "closed", False)
        return bool(closed) if not callable(closed) else False

    def is_valid(self, conn: Any, driver: Any = None) -> bool:
        """Return whether `conn` is still usable.

        Without `ping_sql` only the `closed` flag is consulted. A failing ping
        marks the connection invalid only when the driver reports a connection
        fault (its `OperationalError` or `InterfaceError`); other errors, such
        as a statement rejected inside an aborted transaction, keep it.
        """

        if self.is_closed(conn):
            return False
        if not self.ping_sql:
            return True
        try:
            cur = conn.cursor()
            try:
                cur.execute(self.ping_sql)
                cur.fetchall()
            finally:
                cur.close()
        except Exception as exc:
            if _is_connection_fault(exc, driver):
                return False
            logger.debug("Ping failed without a connection fault, keeping connection: %s", exc)
        return True

    def bind_boolean(self, value: bool) -> Any:
        return bool(value)

    def bind_bytes(self, driver: Any, value: bytes) -> Any:
        binary = getattr(driver, "Binary", None)
        if callable(binary):
            return binary(value)
        return value

    def bind_timestamp(self, value: dt.datetime) -> Any:
        return value

    def bind_time(self, value: dt.time) -> Any:
        return value

    def bind_date(self, value: dt.date) -> Any:
        return value


class SQLiteDialect(Dialect):
    """SQLite (`sqlite3`): auto-commit via `isolation_level`, ISO temporal text."""

    name = "sqlite"
    driver_markers = ("sqlite",)
    paramstyle = "qmark"

    def set_autocommit(self, conn: Any, enabled: bool) -> None:
        conn.isolation_level = None if enabled else ""

    def get_autocommit(self, conn: Any) -> bool:
        return getattr(conn, "isolation_level", "") is None

    def is_closed(self, conn: Any) -> bool:
        # sqlite3 connections have no `closed` flag; a closed one rejects every access.
        try:
            conn.total_changes
        except sqlite3.ProgrammingError:
            return True
        return False

    def bind_timestamp(self, value: dt.datetime) -> Any:
        return value.isoformat(sep=" ")

    def bind_time(self, value: dt.time) -> Any:
        return value.isoformat()

    def bind_date(self, value: dt.date) -> Any:
        return value.isoformat()


class PostgresDialect(Dialect):
    """PostgreSQL (`psycopg2`, `psycopg`, `pg8000`)."""

    name = "postgres"
    driver_markers = ("psycopg", "pg8000", "postgres")
    paramstyle = "format"


class MySQLDialect(Dialect):
    """MySQL (`pymysql`, `MySQLdb`): `autocommit()` is a method, `ping()` validates."""

    name = "mysql"
    driver_markers = ("mysql",)
    paramstyle = "format"

    def set_autocommit(self, conn: Any, enabled: bool) -> None:
        toggle = getattr(conn, "autocommit", None)
        if callable(toggle):
            toggle(enabled)
            return
        conn.autocommit = enabled

    def get_autocommit(self, conn: Any) -> bool:
        getter = getattr(conn, "get_autocommit", None)
        if callable(getter):
            return bool(getter())
        return super().get_autocommit(conn)

    def is_valid(self, conn: Any, driver: Any = None) -> bool:
        ping = getattr(conn, "ping", None)
        if not callable(ping):
            return super().is_valid(conn, driver)
        try:
            ping(False)
        except Exception:
            return False
        return True


class InformixDialect(Dialect):
    """Informix: no native boolean binding, dirty-read isolation per session."""

    name = "informix"
    driver_markers = ("informix", "ifx")
    ping_sql = "SELECT 1 FROM systables WHERE tabid = 1"
    session_setup_sql = ("SET ISOLATION TO DIRTY READ",)

    def bind_boolean(self, value: bool) -> Any:
        return "t" if value else "f"


_VENDOR_DIALECTS: tuple[type[Dialect], ...] = (
    InformixDialect,
    SQLiteDialect,
    PostgresDialect,
    MySQLDialect,
)


def dialect_for_driver(driver_name: Optional[str]) -> Dialect:
    """Pick the vendor dialect whose marker occurs in `driver_name`."""

    if driver_name:
        for dialect_cls in _VENDOR_DIALECTS:
            dialect = dialect_cls()
            if dialect.matches(driver_name):
                return dialect
    return Dialect()


def _is_connection_fault(exc: BaseException, driver: Any) -> bool:
    faults = tuple(
        fault
        for fault in (getattr(driver, name, None) for name in _CONNECTION_FAULTS)
        if isinstance(fault, type) and issubclass(fault, BaseException)
    )
    if not faults:
        return True
    return isinstance(exc, faults)


def _split_on_placeholders(sql: str) -> List[str]:
    """Split `sql` at each `?` that is outside quotes."""

    pieces: List[str] = []
    start = 0
    quote: Optional[str] = None
    for pos, char in enumerate(sql):
        if quote is not None:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "?":
            pieces.append(sql[start:pos])
            start = pos + 1
    pieces.append(sql[start:])
    return pieces
