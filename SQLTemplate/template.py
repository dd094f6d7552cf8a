#!/usr/bin/env python3
#
# Copyright (c) 2024-2025 Seoul National University
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.
#

"""Parameterized statement execution over a data source."""

from __future__ import annotations

from contextlib import closing
from typing import Any, Callable, List, Sequence, TypeVar

from .db.utils import get_connection, is_auto_commit, release_connection
from .errors import DataAccessError, NoDataFoundError, TooManyResultsError
from .log import log, sql_log
from .mapping import RowMapper

T = TypeVar("T")
R = TypeVar("R")


def all_rows(row_mapper: RowMapper[T]) -> Callable[[Any], List[T]]:
    """Cursor action mapping every remaining row, in cursor order."""

    def action(cursor) -> List[T]:
        return [row_mapper(row) for row in iter(cursor.fetchone, None)]

    return action


def single_row(row_mapper: RowMapper[T], sql: str = None) -> Callable[[Any], T]:
    """Cursor action mapping the only row of the result.

    A second row is always looked for, so "more than one" is told apart from
    "exactly one" before the row is mapped.
    """

    def action(cursor) -> T:
        row = cursor.fetchone()
        if row is None:
            raise NoDataFoundError("Expected one row, got none", sql=sql)
        if cursor.fetchone() is not None:
            raise TooManyResultsError("Expected one row, got more", sql=sql)
        return row_mapper(row)

    return action


class QueryExecutor:
    """Runs SQL statements against a data source and maps the results.

    Each call takes a connection from the data source, executes one statement
    with positional arguments, hands the cursor to an operation-specific
    action, and cleans up. The cursor is always closed. The connection is
    released only when it is in auto-commit mode; a connection taking part in
    an outer transaction is left to whoever owns that transaction.

    The executor keeps no state besides the data source, so one instance can
    be shared between threads.

    Args:
        data_source: Object providing ``get_connection()`` and optionally
            ``release_connection(conn)``, e.g. :class:`SQLTemplate.db.DatabaseManager`.
    """

    def __init__(self, data_source: Any):
        self.data_source = data_source

    def update(self, sql: str, *args: Any) -> int:
        """Execute an INSERT/UPDATE/DELETE and return the affected row count."""
        return self.execute(sql, args, lambda cursor: cursor.rowcount)

    def query(self, sql: str, row_mapper: RowMapper[T], *args: Any) -> List[T]:
        """Execute a SELECT and map every row, in cursor order."""
        return self.execute(sql, args, all_rows(row_mapper))

    def query_for_object(self, sql: str, row_mapper: RowMapper[T], *args: Any) -> T:
        """Execute a SELECT expected to return exactly one row and map it.

        Raises:
            NoDataFoundError: the statement returned no rows.
            TooManyResultsError: the statement returned more than one row.
        """
        return self.execute(sql, args, single_row(row_mapper, sql))

    def execute(self, sql: str, args: Sequence[Any], action: Callable[[Any], R]) -> R:
        """Execute ``sql`` with ``args`` bound in order and return ``action(cursor)``.

        Any failure other than the result-size errors is logged and re-raised
        as :class:`DataAccessError` with the driver error as its cause.
        """
        if not isinstance(sql, str) or not sql.strip():
            raise ValueError("SQL statement must be a non-empty string")

        params = tuple(args)
        conn = get_connection(self.data_source)
        try:
            result = self._run(conn, sql, params, action)
        except BaseException:
            self._finish(conn, error_pending=True)
            raise
        self._finish(conn, error_pending=False)
        return result

    def _run(self, conn, sql: str, params: tuple, action: Callable[[Any], R]) -> R:
        try:
            with closing(conn.cursor()) as cursor:
                sql_log.debug(f"{sql} {params!r}")
                if params:
                    cursor.execute(sql, params)
                else:
                    cursor.execute(sql)
                return action(cursor)
        except DataAccessError:
            raise
        except Exception as exc:
            log.exception(f"SQL execution failed: {exc}")
            raise DataAccessError(f"Failed to execute statement: {exc}", sql=sql) from exc

    def _finish(self, conn, error_pending: bool) -> None:
        # An unreadable auto-commit flag still releases the connection.
        # Cleanup errors never replace an error that is already propagating.
        try:
            try:
                auto_commit = is_auto_commit(conn)
            except DataAccessError:
                release_connection(conn, self.data_source)
                raise
            if auto_commit:
                release_connection(conn, self.data_source)
        except DataAccessError:
            if not error_pending:
                raise
            log.warning("Connection cleanup failed after a statement error")
