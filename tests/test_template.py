import logging
import sqlite3
from dataclasses import dataclass

import pytest

from SQLTemplate import (
    DataAccessError,
    NoDataFoundError,
    QueryExecutor,
    TooManyResultsError,
    as_tuple,
    into,
    single_column,
)
from conftest import FakeConnection, FakeCursor, FakeDataSource


@dataclass
class User:
    id: int
    name: str
    age: int


def _insert_users(executor, *users):
    for name, age in users:
        executor.update("INSERT INTO users (name, age) VALUES (?, ?)", name, age)


def test_update_returns_affected_row_count(sqlite_source):
    executor = QueryExecutor(sqlite_source)

    assert executor.update("INSERT INTO users (name, age) VALUES (?, ?)", "alice", 30) == 1

    _insert_users(executor, ("bob", 40), ("carol", 50))
    assert executor.update("UPDATE users SET age = age + 1 WHERE age >= ?", 40) == 2
    assert executor.update("DELETE FROM users WHERE name = ?", "nobody") == 0


def test_query_maps_rows_in_cursor_order(sqlite_source):
    executor = QueryExecutor(sqlite_source)
    _insert_users(executor, ("carol", 50), ("alice", 30), ("bob", 40))

    names = executor.query("SELECT name FROM users ORDER BY age", single_column())
    assert names == ["alice", "bob", "carol"]

    users = executor.query("SELECT id, name, age FROM users WHERE age > ? ORDER BY name", into(User), 35)
    assert [u.name for u in users] == ["bob", "carol"]
    assert all(isinstance(u, User) for u in users)


def test_query_without_matches_returns_empty_list(sqlite_source):
    executor = QueryExecutor(sqlite_source)

    assert executor.query("SELECT name FROM users WHERE age > ?", single_column(), 100) == []


def test_query_for_object_returns_single_row(sqlite_source):
    executor = QueryExecutor(sqlite_source)
    _insert_users(executor, ("alice", 30), ("bob", 40))

    age = executor.query_for_object("SELECT age FROM users WHERE name = ?", single_column("age"), "bob")
    assert age == 40


def test_query_for_object_without_rows(sqlite_source):
    executor = QueryExecutor(sqlite_source)

    with pytest.raises(NoDataFoundError):
        executor.query_for_object("SELECT age FROM users WHERE name = ?", single_column(), "nobody")


def test_query_for_object_with_several_rows(sqlite_source):
    executor = QueryExecutor(sqlite_source)
    _insert_users(executor, ("alice", 30), ("alice", 31))

    with pytest.raises(TooManyResultsError):
        executor.query_for_object("SELECT age FROM users WHERE name = ?", single_column(), "alice")


def test_arguments_bind_positionally(sqlite_source):
    executor = QueryExecutor(sqlite_source)

    row = executor.query_for_object("SELECT ? AS first, ? AS second", as_tuple, "a", 2)
    assert row == ("a", 2)


def test_arguments_are_not_restricted_to_text(sqlite_source):
    executor = QueryExecutor(sqlite_source)
    executor.update("INSERT INTO users (name, age) VALUES (?, ?)", "dave", None)

    assert executor.query_for_object("SELECT age FROM users WHERE name = ?", single_column(), "dave") is None


def test_malformed_sql_raises_data_access_error(sqlite_source):
    executor = QueryExecutor(sqlite_source)

    with pytest.raises(DataAccessError) as excinfo:
        executor.update("INSERT INTO no_such_table VALUES (?)", 1)

    assert not isinstance(excinfo.value, sqlite3.Error)
    assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
    assert excinfo.value.sql == "INSERT INTO no_such_table VALUES (?)"


def test_argument_count_mismatch_raises_data_access_error(sqlite_source):
    executor = QueryExecutor(sqlite_source)

    with pytest.raises(DataAccessError):
        executor.update("INSERT INTO users (name, age) VALUES (?, ?)", "alice")


def test_connections_are_closed_after_each_call(sqlite_source):
    executor = QueryExecutor(sqlite_source)
    _insert_users(executor, ("alice", 30))
    executor.query("SELECT name FROM users", single_column())
    with pytest.raises(DataAccessError):
        executor.query("SELECT nope FROM users", single_column())

    assert len(sqlite_source.opened) == 3
    assert all(conn.closed for conn in sqlite_source.opened)


def test_mapper_failure_raises_data_access_error():
    cursor = FakeCursor(rows=[(1,)])
    source = FakeDataSource(FakeConnection(cursor))

    def broken(row):
        raise KeyError("missing")

    with pytest.raises(DataAccessError) as excinfo:
        QueryExecutor(source).query("SELECT 1", broken)

    assert isinstance(excinfo.value.__cause__, KeyError)
    assert cursor.closed


def test_query_for_object_checks_for_a_second_row():
    cursor = FakeCursor(rows=[(1,), (2,), (3,)])
    source = FakeDataSource(FakeConnection(cursor))
    mapped = []

    def mapper(row):
        mapped.append(row)
        return row[0]

    with pytest.raises(TooManyResultsError):
        QueryExecutor(source).query_for_object("SELECT n FROM t", mapper)

    assert cursor.fetch_calls == 2
    assert mapped == []


def test_statement_without_arguments_is_executed_without_parameters():
    cursor = FakeCursor(rowcount=5)
    source = FakeDataSource(FakeConnection(cursor))

    assert QueryExecutor(source).update("DELETE FROM t") == 5
    assert cursor.executed == [("DELETE FROM t", None)]


def test_cursor_closed_and_connection_released_on_failure():
    cursor = FakeCursor(error=RuntimeError("driver exploded"))
    conn = FakeConnection(cursor, autocommit=True)
    source = FakeDataSource(conn)

    with pytest.raises(DataAccessError):
        QueryExecutor(source).update("UPDATE t SET x = %s", 1)

    assert cursor.closed
    assert source.released == [conn]
    assert not conn.closed


def test_connection_in_transaction_is_not_released():
    cursor = FakeCursor(rowcount=1)
    conn = FakeConnection(cursor, autocommit=False)
    source = FakeDataSource(conn)

    assert QueryExecutor(source).update("UPDATE t SET x = %s", 1) == 1

    assert cursor.closed
    assert source.released == []
    assert not conn.closed


class UnknownModeConnection(FakeConnection):
    @property
    def autocommit(self):
        raise RuntimeError("connection lost")

    @autocommit.setter
    def autocommit(self, value):
        pass


def test_auto_commit_status_failure_raises_data_access_error():
    conn = UnknownModeConnection(FakeCursor(rowcount=1))
    source = FakeDataSource(conn)

    with pytest.raises(DataAccessError, match="auto-commit"):
        QueryExecutor(source).update("UPDATE t SET x = 1")

    assert source.released == [conn]


def test_statement_error_survives_unknown_auto_commit_status():
    driver_error = RuntimeError("syntax error at or near SELEC")
    cursor = FakeCursor(error=driver_error)
    conn = UnknownModeConnection(cursor)
    source = FakeDataSource(conn)

    with pytest.raises(DataAccessError) as excinfo:
        QueryExecutor(source).query("SELEC 1", as_tuple)

    assert excinfo.value.__cause__ is driver_error
    assert excinfo.value.sql == "SELEC 1"
    assert cursor.closed
    assert source.released == [conn]


def test_result_size_error_survives_failed_release():
    class BrokenRelease(FakeDataSource):
        def release_connection(self, conn):
            raise OSError("pool gone")

    source = BrokenRelease(FakeConnection(FakeCursor(rows=[])))

    with pytest.raises(NoDataFoundError):
        QueryExecutor(source).query_for_object("SELECT n FROM t", as_tuple)


def test_failed_release_after_success_raises_data_access_error():
    class BrokenRelease(FakeDataSource):
        def release_connection(self, conn):
            raise OSError("pool gone")

    source = BrokenRelease(FakeConnection(FakeCursor(rowcount=1)))

    with pytest.raises(DataAccessError, match="release"):
        QueryExecutor(source).update("UPDATE t SET x = 1")


def test_connection_failure_raises_data_access_error():
    class Unreachable:
        def get_connection(self):
            raise ConnectionRefusedError("no server")

    with pytest.raises(DataAccessError) as excinfo:
        QueryExecutor(Unreachable()).update("UPDATE t SET x = 1")

    assert isinstance(excinfo.value.__cause__, ConnectionRefusedError)


@pytest.mark.parametrize("sql", ["", "   ", None])
def test_empty_sql_is_rejected(sql):
    source = FakeDataSource(FakeConnection())

    with pytest.raises(ValueError):
        QueryExecutor(source).update(sql)


def test_statements_are_logged_with_arguments(sqlite_source, caplog):
    executor = QueryExecutor(sqlite_source)

    with caplog.at_level(logging.DEBUG, logger="SQLTemplate.sql"):
        executor.update("INSERT INTO users (name, age) VALUES (?, ?)", "erin", 22)

    assert "INSERT INTO users (name, age) VALUES (?, ?) ('erin', 22)" in caplog.text
