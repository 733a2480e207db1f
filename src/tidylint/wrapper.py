# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run clang-tidy, redirecting its output and exit code into files.

Usage: ``python -m tidylint.wrapper <clang-tidy> <args...>``

Environment:
    CLANG_TIDY__STDOUT_STDERR_OUTPUT_FILE: file receiving stdout and stderr.
    CLANG_TIDY__EXIT_CODE_OUTPUT_FILE: file receiving the exit code; when set
        the wrapper itself always exits 0.
    CLANG_TIDY__VERBOSE: echo the command line to stderr.
    CLANG_TIDY__TIMEOUT: seconds after which clang-tidy is killed and exit
        code 124 is reported.
"""

from __future__ import annotations

import os
import re
import shlex
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from .actions import EXIT_CODE_ENV, STDOUT_ENV, TIMEOUT_ENV, VERBOSE_ENV
from .process import CommandOptions, run_command

LAUNCH_FAILURE_EXIT_CODE: Final[int] = 127

_NOISE_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"^\d+ warnings?( and \d+ errors?)? generated\.$"),
    re.compile(r"^\d+ errors? generated\.$"),
    re.compile(r"^Suppressed \d+ warnings? \(.*\)\.$"),
    re.compile(r"^Use -header-filter=.* to display errors from all non-system headers\."),
)


def filter_output(output: str) -> str:
    """Drop clang-tidy's per-run summary lines from ``output``."""

    kept = [line for line in output.splitlines() if not any(pattern.match(line) for pattern in _NOISE_PATTERNS)]
    return "".join(f"{line}\n" for line in kept)


def run_linter(command: Sequence[str], env: Mapping[str, str], *, timeout: float | None = None) -> int:
    """Run ``command`` honouring the wrapper environment variables.

    Args:
        command: Linter executable followed by its arguments.
        env: Environment carrying the redirection variables.
        timeout: Seconds after which the linter and its children are killed.

    Returns:
        int: Exit status the wrapper process should terminate with.
    """

    stdout_file = env.get(STDOUT_ENV)
    exit_code_file = env.get(EXIT_CODE_ENV)
    if env.get(VERBOSE_ENV):
        print(f"+ {shlex.join(command)}", file=sys.stderr)

    try:
        completed = run_command(command, options=CommandOptions(timeout=timeout))
    except OSError as exc:
        returncode, output = LAUNCH_FAILURE_EXIT_CODE, f"{command[0]}: {exc}\n"
    else:
        returncode, output = completed.returncode, filter_output(completed.stdout or "")

    if stdout_file:
        Path(stdout_file).write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    if exit_code_file:
        Path(exit_code_file).write_text(f"{returncode}\n", encoding="utf-8")
        return 0
    return returncode


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``tidylint-wrapper``."""

    command = list(sys.argv[1:] if argv is None else argv)
    if not command:
        print("usage: tidylint-wrapper <linter> [args...]", file=sys.stderr)
        return 2
    raw_timeout = os.environ.get(TIMEOUT_ENV)
    try:
        timeout = float(raw_timeout) if raw_timeout else None
    except ValueError:
        print(f"tidylint-wrapper: {TIMEOUT_ENV} must be a number of seconds, got {raw_timeout!r}", file=sys.stderr)
        return 2
    return run_linter(command, os.environ, timeout=timeout)


if __name__ == "__main__":
    sys.exit(main())
