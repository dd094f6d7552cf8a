from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

import psycopg2
import psycopg2.extensions
import psycopg2.extras
from psycopg2.pool import ThreadedConnectionPool
from psycopg2.extensions import (
    TRANSACTION_STATUS_ACTIVE,
    TRANSACTION_STATUS_INERROR,
    TRANSACTION_STATUS_INTRANS,
)

from ..errors import DataAccessError
from ..log import log

RealDictCursor = psycopg2.extras.RealDictCursor
Connection = psycopg2.extensions.connection

_OPEN_TRANSACTION_STATES = (
    TRANSACTION_STATUS_ACTIVE,
    TRANSACTION_STATUS_INTRANS,
    TRANSACTION_STATUS_INERROR,
)


@dataclass
class PoolConfig:
    minconn: int = 1
    maxconn: int = 10


class DatabaseManager:
    """Pooled PostgreSQL data source.

    Outside of :meth:`transaction` every connection is handed out in
    auto-commit mode and goes back to the pool on :meth:`release_connection`.
    Inside :meth:`transaction` the current thread always gets the same
    connection, and releasing it is left to the transaction scope.
    """

    def __init__(
        self,
        connection_settings: Dict[str, Any],
        *,
        pool: Optional[PoolConfig] = None,
        application_name: Optional[str] = None,
        dict_rows: bool = False,
        default_connect_timeout: int = 10,
    ) -> None:
        settings = dict(connection_settings)

        pool = pool or PoolConfig()
        if pool.maxconn < pool.minconn:
            pool.maxconn = pool.minconn

        if "application_name" not in settings and application_name:
            settings["application_name"] = application_name
        settings.setdefault("connect_timeout", default_connect_timeout)

        self._dict_rows = dict_rows
        try:
            self._pool = ThreadedConnectionPool(pool.minconn, pool.maxconn, **settings)
        except psycopg2.Error as exc:
            log.error(f"Could not open connection pool: {exc}")
            raise DataAccessError(f"Could not open connection pool: {exc}") from exc
        self._lock = threading.Lock()
        self._local = threading.local()
        self._closed = False

    @classmethod
    def from_config(
        cls,
        db_config: Dict[str, Any],
        *,
        application_name: Optional[str] = None,
        dict_rows: Optional[bool] = None,
    ) -> "DatabaseManager":
        config = dict(db_config)
        pool_cfg = config.pop("pool", None) or {}
        pool = PoolConfig(
            minconn=int(pool_cfg.get("minconn", pool_cfg.get("min_conn", 1))),
            maxconn=int(pool_cfg.get("maxconn", pool_cfg.get("max_conn", 10))),
        )
        dict_flag = bool(config.pop("dict_rows", False))
        if dict_rows is not None:
            dict_flag = dict_rows
        default_timeout = int(config.pop("connect_timeout", 10))
        # psycopg2 knows the database name as "dbname"
        if "database" in config and "dbname" not in config:
            config["dbname"] = config.pop("database")
        config.pop("type", None)
        return cls(
            config,
            pool=pool,
            application_name=application_name,
            dict_rows=dict_flag,
            default_connect_timeout=default_timeout,
        )

    def _acquire(self, autocommit: bool = True) -> Connection:
        with self._lock:
            if self._closed:
                raise DataAccessError("DatabaseManager pool has been closed")
            conn = self._pool.getconn()
            while conn.closed:
                log.warning("Discarding closed connection found in pool")
                self._pool.putconn(conn, close=True)
                conn = self._pool.getconn()
        self._prepare_connection(conn, autocommit)
        return conn

    def _prepare_connection(self, conn: Connection, autocommit: bool) -> None:
        if self._dict_rows:
            conn.cursor_factory = RealDictCursor
        if conn.autocommit != autocommit:
            conn.autocommit = autocommit

    def _release(self, conn: Connection) -> None:
        if conn.closed:
            self._pool.putconn(conn, close=True)
            return
        try:
            if conn.get_transaction_status() in _OPEN_TRANSACTION_STATES:
                conn.rollback()
        except psycopg2.Error as exc:
            log.warning(f"Rollback before returning connection to pool failed: {exc}")
        with self._lock:
            if self._closed:
                conn.close()
            else:
                self._pool.putconn(conn)

    def _bound_connection(self) -> Optional[Connection]:
        return getattr(self._local, "connection", None)

    def in_transaction(self) -> bool:
        """Return True if the current thread is inside :meth:`transaction`."""
        return self._bound_connection() is not None

    def get_connection(self) -> Connection:
        """Return the thread's transaction connection or a pooled auto-commit one."""
        conn = self._bound_connection()
        if conn is not None:
            return conn
        return self._acquire(autocommit=True)

    def release_connection(self, conn: Optional[Connection]) -> None:
        """Return ``conn`` to the pool unless it belongs to the running transaction."""
        if conn is None or conn is self._bound_connection():
            return
        self._release(conn)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Run the enclosed block on one connection, committing at the end.

        Statements issued through this manager on the same thread share the
        connection. Any exception rolls the transaction back and propagates.
        Nested calls join the outer transaction.
        """
        outer = self._bound_connection()
        if outer is not None:
            yield outer
            return

        conn = self._acquire(autocommit=False)
        self._local.connection = conn
        try:
            yield conn
        except Exception:
            self._rollback(conn)
            raise
        else:
            try:
                conn.commit()
            except psycopg2.Error as exc:
                log.error(f"Database commit failed: {exc}")
                self._rollback(conn)
                raise DataAccessError(f"Commit failed: {exc}") from exc
        finally:
            self._local.connection = None
            self._release(conn)

    def _rollback(self, conn: Connection) -> None:
        if conn.closed:
            return
        try:
            conn.rollback()
        except psycopg2.Error as exc:
            log.warning(f"Rollback failed: {exc}")

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._pool.closeall()

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
