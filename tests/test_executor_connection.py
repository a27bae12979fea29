from __future__ import annotations

import threading
import unittest
from unittest import mock

from db_helper import DbHelperError, Dialect, InformixDialect, QueryExecutor, ResultTypeError
from tests import stub_driver

DRIVER = "tests.stub_driver"


class _PingingDialect(Dialect):
    ping_sql = "SELECT 1"


class OpenConnectionTests(unittest.TestCase):
    def setUp(self) -> None:
        stub_driver.reset()

    def test_missing_driver_name_is_rejected(self) -> None:
        with self.assertRaises(DbHelperError) as ctx:
            QueryExecutor(None, "db").open_connection()
        self.assertIn("None", str(ctx.exception))

    def test_empty_driver_name_is_rejected(self) -> None:
        with self.assertRaises(DbHelperError) as ctx:
            QueryExecutor("", "db").open_connection()
        self.assertIn("empty", str(ctx.exception))

    def test_unknown_driver_module_is_wrapped(self) -> None:
        with self.assertRaises(DbHelperError) as ctx:
            QueryExecutor("no_such_driver_module_xyz", "db").open_connection()
        self.assertIsInstance(ctx.exception.cause, ImportError)

    def test_connect_failure_is_wrapped(self) -> None:
        stub_driver.fail_connect = True
        executor = QueryExecutor(DRIVER, "db")
        with self.assertRaises(DbHelperError) as ctx:
            executor.open_connection()
        self.assertIsInstance(ctx.exception.cause, stub_driver.OperationalError)
        self.assertFalse(executor.is_open)

    def test_first_open_connects_and_enables_autocommit(self) -> None:
        executor = QueryExecutor(DRIVER, "stub://db")
        conn = executor.open_connection()

        self.assertEqual(len(stub_driver.connections), 1)
        self.assertIs(conn, stub_driver.connections[0])
        self.assertTrue(conn.autocommit)
        self.assertEqual(stub_driver.connect_calls[0], (("stub://db",), {}))
        self.assertEqual(type(executor.dialect), Dialect)

    def test_credentials_are_passed_to_connect(self) -> None:
        executor = QueryExecutor(
            DRIVER, "stub://db", "scott", "tiger", connect_kwargs={"timeout": 5}
        )
        executor.open_connection()
        self.assertEqual(
            stub_driver.connect_calls[0],
            (("stub://db",), {"timeout": 5, "user": "scott", "password": "tiger"}),
        )

    def test_open_is_idempotent_for_valid_connection(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        first = executor.open_connection()
        second = executor.open_connection()

        self.assertIs(first, second)
        self.assertEqual(len(stub_driver.connections), 1)

    def test_closed_connection_is_replaced_once(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        first = executor.open_connection()
        first.close()
        first.autocommit = False

        second = executor.open_connection()

        self.assertIsNot(first, second)
        self.assertEqual(len(stub_driver.connections), 2)
        self.assertTrue(second.autocommit)
        self.assertIs(executor.open_connection(), second)

    def test_invalid_connection_is_released_and_replaced(self) -> None:
        executor = QueryExecutor(DRIVER, "db", dialect=_PingingDialect())
        first = executor.open_connection()
        first.broken = True

        second = executor.open_connection()

        self.assertIsNot(first, second)
        self.assertEqual(first.close_calls, 1)
        self.assertEqual(len(stub_driver.connections), 2)
        self.assertTrue(second.autocommit)

    def test_force_reopens_without_validation(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        first = executor.open_connection()
        second = executor.open_connection(force=True)

        self.assertIsNot(first, second)
        self.assertTrue(first.closed)
        self.assertEqual(len(stub_driver.connections), 2)

    def test_explicit_dialect_runs_vendor_session_setup(self) -> None:
        executor = QueryExecutor(DRIVER, "db", dialect=InformixDialect())
        conn = executor.open_connection()

        self.assertEqual(conn.executed[0], ("SET ISOLATION TO DIRTY READ", None))
        self.assertIsInstance(executor.dialect, InformixDialect)

    def test_failed_session_setup_closes_connection(self) -> None:
        class _BrokenSetup(Dialect):
            def prepare_connection(self, conn):  # noqa: ANN001,ANN201
                raise RuntimeError("cannot set isolation")

        executor = QueryExecutor(DRIVER, "db", dialect=_BrokenSetup())
        with self.assertRaises(DbHelperError):
            executor.open_connection()
        self.assertTrue(stub_driver.connections[0].closed)
        self.assertFalse(executor.is_open)


class ReleaseConnectionTests(unittest.TestCase):
    def setUp(self) -> None:
        stub_driver.reset()

    def test_release_closes_and_forgets_connection(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        conn = executor.open_connection()
        executor.release_connection()

        self.assertTrue(conn.closed)
        self.assertFalse(executor.is_open)
        executor.release_connection()
        self.assertEqual(conn.close_calls, 1)

    def test_context_manager_releases_on_exit(self) -> None:
        with QueryExecutor(DRIVER, "db") as executor:
            conn = executor.open_connection()
        self.assertTrue(conn.closed)

    def test_concurrent_release_closes_once(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        conn = executor.open_connection()
        barrier = threading.Barrier(8)

        def release() -> None:
            barrier.wait()
            executor.release_connection()

        threads = [threading.Thread(target=release) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(conn.close_calls, 1)

    def test_close_error_is_wrapped(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        conn = executor.open_connection()

        def _fail() -> None:
            raise stub_driver.OperationalError("close failed")

        conn.close = _fail
        with self.assertRaises(DbHelperError):
            executor.release_connection()
        self.assertFalse(executor.is_open)


class TransactionControlTests(unittest.TestCase):
    def setUp(self) -> None:
        stub_driver.reset()
        self.executor = QueryExecutor(DRIVER, "db")

    def test_auto_commit_round_trip(self) -> None:
        self.assertTrue(self.executor.get_auto_commit())
        self.executor.set_auto_commit(False)
        self.assertFalse(self.executor.get_auto_commit())

    def test_commit_and_rollback_delegate_to_connection(self) -> None:
        self.executor.commit()
        self.executor.rollback()
        conn = stub_driver.connections[0]
        self.assertEqual((conn.commit_calls, conn.rollback_calls), (1, 1))

    def test_transaction_commits_and_restores_autocommit(self) -> None:
        with self.executor.transaction():
            self.assertFalse(self.executor.get_auto_commit())
        conn = stub_driver.connections[0]
        self.assertEqual(conn.commit_calls, 1)
        self.assertEqual(conn.rollback_calls, 0)
        self.assertTrue(conn.autocommit)

    def test_transaction_rolls_back_on_error(self) -> None:
        with self.assertRaises(RuntimeError):
            with self.executor.transaction():
                raise RuntimeError("boom")
        conn = stub_driver.connections[0]
        self.assertEqual(conn.rollback_calls, 1)
        self.assertEqual(conn.commit_calls, 0)
        self.assertTrue(conn.autocommit)


class GenericValidationTests(unittest.TestCase):
    """Backends such as Oracle or DB2 reject a bare `SELECT 1`."""

    def setUp(self) -> None:
        stub_driver.reset()
        stub_driver.rejected_sql.add("SELECT 1")

    def test_generic_dialect_keeps_connection_without_pinging(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        first = executor.open_connection()
        executor.open_connection()
        executor.open_connection()

        self.assertEqual(len(stub_driver.connections), 1)
        self.assertIs(executor.conn, first)
        self.assertEqual(first.executed, [])

    def test_transaction_runs_on_a_single_connection(self) -> None:
        executor = QueryExecutor(DRIVER, "db")
        with executor.transaction():
            executor.update("UPDATE accounts SET balance = balance - ? WHERE id = ?", 10, 1)
            executor.update("UPDATE accounts SET balance = balance + ? WHERE id = ?", 10, 2)

        self.assertEqual(len(stub_driver.connections), 1)
        conn = stub_driver.connections[0]
        self.assertEqual(len(conn.executed), 2)
        self.assertEqual(conn.commit_calls, 1)
        self.assertTrue(conn.autocommit)

    def test_rejected_ping_is_not_a_connection_fault(self) -> None:
        executor = QueryExecutor(DRIVER, "db", dialect=_PingingDialect())
        first = executor.open_connection()

        self.assertIs(executor.open_connection(), first)
        self.assertEqual(len(stub_driver.connections), 1)
        self.assertEqual(first.close_calls, 0)


class TypedResultTests(unittest.TestCase):
    def setUp(self) -> None:
        stub_driver.reset()
        stub_driver.description = [("flag", "BOOLEAN")]
        stub_driver.rows = [(True,)]
        self.executor = QueryExecutor(DRIVER, "db")

    def test_boolean_result_does_not_match_int(self) -> None:
        with self.assertRaises(ResultTypeError) as ctx:
            self.executor.single_result_typed("SELECT flag FROM t", None, 1, int)
        self.assertIn("result is bool, expected int", str(ctx.exception))

    def test_boolean_result_matches_bool(self) -> None:
        self.assertIs(self.executor.single_result_typed("SELECT flag FROM t", None, "flag", bool), True)


class PlaceholderRenderingTests(unittest.TestCase):
    def setUp(self) -> None:
        stub_driver.reset()

    def test_question_marks_follow_driver_paramstyle(self) -> None:
        with mock.patch.object(stub_driver, "paramstyle", "format"):
            executor = QueryExecutor(DRIVER, "db")
            executor.update("UPDATE t SET a = ? WHERE note = 'why?' AND b = ?", 1, "x")

        self.assertEqual(
            stub_driver.connections[0].executed,
            [("UPDATE t SET a = %s WHERE note = 'why?' AND b = %s", (1, "x"))],
        )

    def test_statement_without_values_is_sent_verbatim(self) -> None:
        with mock.patch.object(stub_driver, "paramstyle", "format"):
            executor = QueryExecutor(DRIVER, "db")
            executor.update("DELETE FROM t WHERE note LIKE '50%'")

        self.assertEqual(
            stub_driver.connections[0].executed,
            [("DELETE FROM t WHERE note LIKE '50%'", None)],
        )


if __name__ == "__main__":
    unittest.main()
