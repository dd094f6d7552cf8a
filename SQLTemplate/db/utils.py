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

"""Connection helpers that respect externally managed transactions.

A data source is anything with ``get_connection()``. When it also offers
``release_connection(conn)`` that method is used to give connections back, so
a connection enlisted in a transaction is not returned to the pool early.
"""

from typing import Any

from ..errors import DataAccessError
from ..log import log


def get_connection(data_source: Any):
    """Obtain a connection from ``data_source``."""
    try:
        return data_source.get_connection()
    except DataAccessError:
        raise
    except Exception as exc:
        log.exception(f"Failed to obtain a database connection: {exc}")
        raise DataAccessError(f"Could not get connection: {exc}") from exc


def is_auto_commit(conn: Any) -> bool:
    """Return True if ``conn`` runs each statement in its own transaction."""
    try:
        return bool(conn.autocommit)
    except Exception as exc:
        log.exception(f"Failed to read auto-commit status: {exc}")
        raise DataAccessError(f"Could not determine auto-commit status: {exc}") from exc


def release_connection(conn: Any, data_source: Any) -> None:
    """Give ``conn`` back to ``data_source``, or close it if the source has no hook."""
    if conn is None:
        return
    release = getattr(data_source, "release_connection", None)
    try:
        if release is not None:
            release(conn)
        else:
            conn.close()
    except Exception as exc:
        log.exception(f"Failed to release database connection: {exc}")
        raise DataAccessError(f"Could not release connection: {exc}") from exc
