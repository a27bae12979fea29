"""Query executor owning one lazily-opened DB-API connection."""

from __future__ import annotations

import contextlib
import importlib
import threading
from typing import TYPE_CHECKING, Any, Iterator, List, Mapping, Optional, Sequence

from ...core.errors import DbHelperError, NoResultError, ResultTypeError
from ...core.types import ColumnRef, RawParams
from ...utils.logger import get_logger
from .cursor import ResultCursor
from .dialects import Dialect, dialect_for_driver
from .statement import PreparedStatement

if TYPE_CHECKING:
    from ...config import DbSettings

logger = get_logger(__name__)


class QueryExecutor:
    """Prepare, bind, and execute SQL against one DB-API connection.

    The connection is opened on first use and re-validated before every
    statement. Cursors returned by `query()` belong to the caller.
    """

    def __init__(
        self,
        driver_name: Optional[str],
        connection_url: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        *,
        dialect: Optional[Dialect] = None,
        connect_kwargs: Optional[Mapping[str, Any]] = None,
    ):
        """Create executor.

        Args:
            driver_name: Import name of a PEP 249 driver module, e.g. `sqlite3`.
            connection_url: DSN/database argument passed to `driver.connect()`.
            username: Optional user passed as `user=`.
            password: Optional password passed as `password=`.
            dialect: Vendor strategy; detected from the driver name when omitted.
            connect_kwargs: Extra keyword arguments for `driver.connect()`.
        """

        self.driver_name = driver_name
        self.connection_url = connection_url
        self.username = username
        self.password = password
        self._explicit_dialect = dialect
        self._connect_kwargs = dict(connect_kwargs or {})

        self.conn: Any | None = None
        self.driver: Any | None = None
        self.dialect: Dialect | None = None
        self._release_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: DbSettings, **kwargs: Any) -> QueryExecutor:
        return cls(
            settings.driver_name,
            settings.connection_url,
            settings.username,
            settings.password,
            **kwargs,
        )

    @property
    def is_open(self) -> bool:
        return self.conn is not None

    def open_connection(self, force: bool = False) -> Any:
        """Return a usable connection, opening or reopening it when needed.

        Args:
            force: Reopen without validating the current connection.

        Raises:
            DbHelperError: The driver is not configured, cannot be imported, or
                the connection cannot be established.
        """

        if self.driver_name is None:
            raise DbHelperError("driver_name supplied is None")
        if self.driver_name == "":
            raise DbHelperError("driver_name supplied is empty")

        if self.conn is not None:
            if not force and self._connection_valid():
                logger.debug("Reusing open connection")
                return self.conn
            logger.info("Connection is stale or reopen was forced; releasing it")
            self._discard_connection()

        logger.info("Opening a connection with driver %s", self.driver_name)
        driver = self._load_driver()
        try:
            conn = driver.connect(*self._connect_args(), **self._connect_options())
        except Exception as exc:
            raise DbHelperError("Failed to get a connection from the driver", exc) from exc

        dialect = self._explicit_dialect or dialect_for_driver(self._reported_name(driver))
        try:
            dialect.prepare_connection(conn)
        except Exception as exc:
            _close_quietly(conn)
            raise DbHelperError(
                f"Failed to prepare connection for dialect {dialect.name!r}", exc
            ) from exc

        self.driver = driver
        self.dialect = dialect
        self.conn = conn
        logger.info("Connection opened (dialect=%s, autocommit=on)", dialect.name)
        return conn

    def release_connection(self) -> None:
        """Close the connection, if any. Safe to call from several threads."""

        with self._release_lock:
            conn = self.conn
            if conn is None:
                return
            self.conn = None
            try:
                conn.close()
            except Exception as exc:
                raise DbHelperError("Failed to close the connection", exc) from exc
            logger.info("Connection released")

    def close(self) -> None:
        self.release_connection()

    def __enter__(self) -> QueryExecutor:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.release_connection()

    def set_auto_commit(self, enabled: bool) -> None:
        conn = self.open_connection()
        try:
            self._dialect().set_autocommit(conn, enabled)
        except Exception as exc:
            raise DbHelperError(f"Failed to set autocommit to {enabled}", exc) from exc

    def get_auto_commit(self) -> bool:
        conn = self.open_connection()
        try:
            return self._dialect().get_autocommit(conn)
        except Exception as exc:
            raise DbHelperError("Failed to read autocommit for the connection", exc) from exc

    def commit(self) -> None:
        conn = self.open_connection()
        try:
            conn.commit()
        except Exception as exc:
            raise DbHelperError("Failed to commit transaction", exc) from exc

    def rollback(self) -> None:
        conn = self.open_connection()
        try:
            conn.rollback()
        except Exception as exc:
            raise DbHelperError("Failed to roll back transaction", exc) from exc

    @contextlib.contextmanager
    def transaction(self) -> Iterator[QueryExecutor]:
        """Run statements with auto-commit off; commit on success, roll back on error."""

        self.set_auto_commit(False)
        try:
            yield self
            self.commit()
        except BaseException:
            self.rollback()
            raise
        finally:
            if self.conn is not None:
                self.set_auto_commit(True)

    def prepare(self, sql: str) -> PreparedStatement:
        """Open/validate the connection and create a statement for `sql`."""

        if sql is None:
            raise DbHelperError("SQL provided is None")
        if sql == "":
            raise DbHelperError("SQL provided is empty")

        conn = self.open_connection()
        logger.debug("Preparing a statement for SQL %r", sql)
        try:
            cursor = conn.cursor()
        except Exception as exc:
            raise DbHelperError(f"Failed to prepare statement for SQL {sql!r}", exc) from exc
        return PreparedStatement(cursor, sql, self._dialect(), self.driver)

    def query(self, sql: str, params: RawParams = None) -> ResultCursor:
        """Execute a query and return its cursor. The caller must close it."""

        statement = self.prepare(sql)
        try:
            statement.bind_parameters(params)
            cursor = statement.execute_query()
        except BaseException:
            statement.close()
            raise
        return ResultCursor(cursor, self.driver)

    def update(self, sql: str, *params: Any) -> int:
        """Execute a mutation and return the affected row count (0 when unknown)."""

        with self.prepare(sql) as statement:
            statement.bind_parameters(params)
            return statement.execute_update()

    def single_result(self, sql: str, params: RawParams, column: ColumnRef) -> Any:
        """Return `column` of the first row, or None when there is no row."""

        with self.query(sql, params) as cursor:
            if not cursor.next():
                return None
            return cursor.get(column)

    def require_single_result(self, sql: str, params: RawParams, column: ColumnRef) -> Any:
        """Like `single_result()`, but a missing row raises `NoResultError`."""

        with self.query(sql, params) as cursor:
            if not cursor.next():
                raise NoResultError(f"No row returned for SQL {sql!r}")
            return cursor.get(column)

    def single_result_typed(
        self,
        sql: str,
        params: RawParams,
        column: ColumnRef,
        expected_type: type,
    ) -> Any:
        """Like `single_result()`, and check the runtime type of a non-None value.

        A boolean only matches `bool` (or `object`), not `int`.
        """

        result = self.single_result(sql, params, column)
        if result is not None and not _is_instance(result, expected_type):
            raise ResultTypeError(type(result), expected_type)
        return result

    def result_list(self, sql: str, params: RawParams, column: ColumnRef) -> List[Any]:
        """Collect `column` from every row; empty list when there are no rows."""

        values: List[Any] = []
        with self.query(sql, params) as cursor:
            while cursor.next():
                values.append(cursor.get(column))
        return values

    def record_exists(self, sql: str, params: RawParams = None) -> bool:
        with self.query(sql, params) as cursor:
            return cursor.next()

    def _dialect(self) -> Dialect:
        if self.dialect is None:
            raise DbHelperError("Connection is not open")
        return self.dialect

    def _connection_valid(self) -> bool:
        dialect = self.dialect or Dialect()
        return dialect.is_valid(self.conn, self.driver)

    def _discard_connection(self) -> None:
        conn = self.conn
        self.conn = None
        if conn is not None:
            _close_quietly(conn)

    def _load_driver(self) -> Any:
        try:
            return importlib.import_module(str(self.driver_name))
        except ImportError as exc:
            raise DbHelperError(
                f"Cannot locate database driver module {self.driver_name!r}", exc
            ) from exc

    def _connect_args(self) -> Sequence[Any]:
        if self.connection_url is None:
            return ()
        return (self.connection_url,)

    def _connect_options(self) -> dict[str, Any]:
        options = dict(self._connect_kwargs)
        if self.username is not None:
            options.setdefault("user", self.username)
        if self.password is not None:
            options.setdefault("password", self.password)
        return options

    @staticmethod
    def _reported_name(driver: Any) -> str:
        return str(getattr(driver, "__name__", ""))


def _close_quietly(conn: Any) -> None:
    try:
        conn.close()
    except Exception as exc:
        logger.warning("Ignoring error while closing a stale connection: %s", exc)


def _is_instance(value: Any, expected_type: type) -> bool:
    if isinstance(value, bool) and expected_type not in (bool, object):
        return False
    return isinstance(value, expected_type)
