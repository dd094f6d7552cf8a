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

from ..cli.base import BaseCommand, registry
from ..cli.types import sql_value
from ..errors import DataAccessError
from ..log import log


class UpdateCommand(BaseCommand):
    """Run an INSERT, UPDATE or DELETE statement."""

    name = 'update'
    help = 'Run a data-modifying statement and print the affected row count'

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument('sql', help='SQL statement with %%s placeholders')
        parser.add_argument(
            'params',
            nargs='*',
            type=sql_value,
            help='Values bound to the placeholders in order'
        )

    def handle(self, args: argparse.Namespace, context) -> int:
        try:
            count = context.executor.update(args.sql, *args.params)
        except DataAccessError as e:
            log.error(f"Update failed: {e}")
            return 1

        print(count)
        return 0

registry.register(UpdateCommand)
