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

"""Row mappers: callables turning one fetched row into a value."""

from __future__ import annotations

from typing import Any, Callable, Protocol, TypeVar, Union

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class RowMapper(Protocol[T_co]):
    """Converts the current row of a result cursor into a value.

    Any plain function accepting one row satisfies this protocol. The row is
    whatever the connection's cursor yields: a tuple by default, a
    ``RealDictRow`` with ``dict_rows`` enabled, or a ``sqlite3.Row``.
    """

    def __call__(self, row: Any) -> T_co:
        ...


def single_column(key: Union[int, str] = 0) -> Callable[[Any], Any]:
    """Return a mapper that picks one column by position or name."""

    def mapper(row: Any) -> Any:
        return row[key]

    return mapper


def as_dict(row: Any) -> dict:
    """Map a mapping-like row to a plain dict."""
    if hasattr(row, "keys"):
        return {key: row[key] for key in row.keys()}
    raise TypeError(f"Row of type {type(row).__name__} has no column names")


def as_tuple(row: Any) -> tuple:
    """Map any row to a tuple of its column values, in select-list order."""
    if hasattr(row, "keys") and not hasattr(row, "index"):
        # dict-like rows iterate over keys
        return tuple(row[key] for key in row.keys())
    return tuple(row)


def into(factory: Callable[..., T]) -> Callable[[Any], T]:
    """Return a mapper building ``factory(**columns)`` from each row.

    Useful with dataclasses whose field names match the selected columns.
    """

    def mapper(row: Any) -> T:
        return factory(**as_dict(row))

    return mapper


def column_names(cursor: Any) -> list:
    """Return the names of the columns produced by the cursor's last statement."""
    if cursor.description is None:
        return []
    return [column[0] for column in cursor.description]
