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

import argparse
import json
import sys

from ..cli.base import BaseCommand, registry
from ..cli.types import sql_value
from ..errors import DataAccessError
from ..log import log
from ..mapping import as_tuple, column_names
from ..template import all_rows, single_row


class QueryCommand(BaseCommand):
    """Run a SELECT statement and print the resulting rows."""

    name = 'query'
    help = 'Run a SELECT statement and print the rows'

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument('sql', help='SQL statement with %%s placeholders')
        parser.add_argument(
            'params',
            nargs='*',
            type=sql_value,
            help='Values bound to the placeholders in order'
        )
        parser.add_argument(
            '--json',
            action='store_true',
            help='Print one JSON object per row'
        )
        parser.add_argument(
            '--single',
            action='store_true',
            help='Require exactly one row'
        )

    def handle(self, args: argparse.Namespace, context) -> int:
        # Column names come from the cursor, so tuple rows print as JSON too
        if args.single:
            fetch = single_row(as_tuple, args.sql)
        else:
            fetch = all_rows(as_tuple)

        def fetch_with_columns(cursor):
            found = fetch(cursor)
            return column_names(cursor), [found] if args.single else found

        try:
            columns, rows = context.executor.execute(args.sql, args.params, fetch_with_columns)
        except DataAccessError as e:
            log.error(f"Query failed: {e}")
            return 1

        for row in rows:
            if args.json:
                print(json.dumps(dict(zip(columns, row)), default=str))
            else:
                print('\t'.join('' if v is None else str(v) for v in row))

        if not args.quiet:
            print(f"({len(rows)} row{'s' if len(rows) != 1 else ''})", file=sys.stderr)
        return 0

registry.register(QueryCommand)
