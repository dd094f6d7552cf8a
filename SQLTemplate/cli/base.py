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

"""Command base class and registry for the sqltemplate CLI.

Task modules define a :class:`BaseCommand` subclass and pass it to
``registry.register`` at import time; the parser then builds one subcommand
per registered class.
"""

import argparse
from abc import ABC, abstractmethod
from typing import Dict, List, Type, Any


class BaseCommand(ABC):
    """A ``sqltemplate`` subcommand."""

    name: str = None
    help: str = None

    @abstractmethod
    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Add command-specific arguments to the parser."""

    @abstractmethod
    def handle(self, args: argparse.Namespace, context: Any) -> int:
        """
        Execute the command.

        Args:
            args: Parsed command-line arguments
            context: CommandContext giving access to the query executor

        Returns:
            Exit code (0 for success)
        """

    def add_common_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Options every command accepts: where the database is and how chatty to be."""
        parser.add_argument(
            '--config', '-c',
            default='./config.yml',
            help='YAML file with a "db" section'
        )
        parser.add_argument(
            '--log-file',
            help='Append log messages to this file'
        )
        parser.add_argument(
            '-q', '--quiet',
            action='store_true',
            help='Only report warnings and errors'
        )
        parser.add_argument(
            '--echo-sql',
            action='store_true',
            help='Log each statement and its arguments'
        )


class CommandRegistry:
    """Registered commands, instantiated once on first use."""

    def __init__(self):
        self._commands: Dict[str, BaseCommand] = {}

    def register(self, command_class: Type[BaseCommand]) -> None:
        if not command_class.name:
            raise ValueError(f"Command {command_class.__name__} must have a name")
        existing = self._commands.get(command_class.name)
        if existing is None or type(existing) is not command_class:
            self._commands[command_class.name] = command_class()

    def get_command(self, name: str) -> BaseCommand:
        return self._commands.get(name)

    def create_subparsers(self, parser: argparse.ArgumentParser) -> None:
        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='<command>'
        )

        for name in self.list_commands():
            command = self._commands[name]
            subparser = subparsers.add_parser(
                name.replace('_', '-'),
                help=command.help,
                description=command.__doc__,
                formatter_class=argparse.RawDescriptionHelpFormatter
            )
            command.add_common_arguments(subparser)
            command.add_arguments(subparser)
            subparser.set_defaults(command_handler=command)

    def list_commands(self) -> List[str]:
        return sorted(self._commands)


registry = CommandRegistry()
