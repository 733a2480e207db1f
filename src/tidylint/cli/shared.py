# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Logger and error type shared by the CLI commands."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

import typer
from rich.console import Console
from rich.text import Text

from ..logging import Level, emit

_KEY_VALUE: Final[re.Pattern[str]] = re.compile(r"(?P<key>[\w-]+)=(?P<value>\S+)")


class CLIError(RuntimeError):
    """A command failure that maps to a process exit code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Status logging bound to one command's ``--no-emoji``/``--no-color``/``--verbose`` flags.

    Status goes to stderr through :mod:`tidylint.logging`; :meth:`echo` is the
    only writer to stdout.
    """

    use_emoji: bool = True
    use_color: bool = True
    debug_enabled: bool = False
    console: Console = field(default_factory=lambda: Console(stderr=True, highlight=False, soft_wrap=True))

    def _status(self, level: Level, message: str) -> None:
        emit(level, message, use_emoji=self.use_emoji, use_color=self.use_color)

    def info(self, message: str) -> None:
        self._status("info", message)

    def ok(self, message: str) -> None:
        self._status("ok", message)

    def warn(self, message: str) -> None:
        self._status("warn", message)

    def fail(self, message: str) -> None:
        self._status("fail", message)

    def echo(self, message: str) -> None:
        typer.echo(message)

    def debug(self, message: str) -> None:
        """Print ``message`` with ``key=value`` pairs highlighted, in verbose mode only."""

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        text.append(message, style="dim")
        text.highlight_regex(_KEY_VALUE.pattern, style="bold green")
        self.console.print(text)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a :class:`CLILogger` for the command's presentation flags."""

    console = Console(stderr=True, highlight=False, soft_wrap=True, no_color=no_color)
    return CLILogger(use_emoji=emoji, use_color=not no_color, debug_enabled=debug, console=console)


__all__ = ["CLIError", "CLILogger", "build_cli_logger"]
