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

"""``sqltemplate`` console script: run one statement against the configured database."""

import argparse
import importlib
import sys

from .__version__ import __version__
from .cli.base import registry
from .cli.context import CommandContext
from .tasks import __all__ as alltasks


def main(argv=None):
    """Parse ``argv``, run the chosen command and return its exit code."""
    for task in alltasks:
        # Importing a task module registers its command
        importlib.import_module(f".tasks.{task}", package="SQLTemplate")

    parser = argparse.ArgumentParser(
        prog='sqltemplate',
        description='Run parameterized SQL statements against a configured database',
    )
    parser.add_argument('--version', action='version', version=f'SQLTemplate, version {__version__}')
    registry.create_subparsers(parser)

    args = parser.parse_args(argv)
    command = getattr(args, 'command_handler', None)
    if command is None:
        parser.print_help()
        return 0

    context = CommandContext(
        config_path=args.config,
        log_file=args.log_file,
        quiet=args.quiet,
        echo_sql=args.echo_sql,
    )
    try:
        return command.handle(args, context)
    finally:
        context.cleanup()

if __name__ == "__main__":
    sys.exit(main())

__all__ = ['main']
