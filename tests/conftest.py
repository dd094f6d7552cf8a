import sqlite3

import pytest

from SQLTemplate import config


class SQLiteConnection:
    """sqlite3 connection in auto-commit mode, exposing ``autocommit`` like psycopg2."""

    def __init__(self, path, named_rows=True):
        self._conn = sqlite3.connect(str(path), isolation_level=None)
        if named_rows:
            self._conn.row_factory = sqlite3.Row
        self.autocommit = True
        self.closed = False

    def __getattr__(self, item):
        return getattr(self._conn, item)

    def close(self):
        self._conn.close()
        self.closed = True


class SQLiteDataSource:
    """Data source without a release hook: connections are simply closed."""

    def __init__(self, path, named_rows=True):
        self.path = path
        self.named_rows = named_rows
        self.opened = []

    def get_connection(self):
        conn = SQLiteConnection(self.path, self.named_rows)
        self.opened.append(conn)
        return conn

    def close(self):
        for conn in self.opened:
            if not conn.closed:
                conn.close()


class FakeCursor:
    def __init__(self, rows=(), rowcount=-1, error=None):
        self.rows = list(rows)
        self.rowcount = rowcount
        self.error = error
        self.executed = []
        self.fetch_calls = 0
        self.closed = False

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.error is not None:
            raise self.error

    def fetchone(self):
        self.fetch_calls += 1
        if self.rows:
            return self.rows.pop(0)
        return None

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor=None, autocommit=True):
        self._cursor = cursor or FakeCursor()
        self.autocommit = autocommit
        self.closed = False

    def cursor(self):
        return self._cursor

    def close(self):
        self.closed = True


class FakeDataSource:
    def __init__(self, conn):
        self.conn = conn
        self.released = []

    def get_connection(self):
        return self.conn

    def release_connection(self, conn):
        self.released.append(conn)


@pytest.fixture
def sqlite_source(tmp_path):
    source = SQLiteDataSource(tmp_path / "test.db")
    conn = source.get_connection()
    conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, age INTEGER)")
    conn.close()
    source.opened.clear()
    yield source
    source.close()


@pytest.fixture(autouse=True)
def reset_config():
    config.set_config_for_testing(None)
    yield
    config.set_config_for_testing(None)
