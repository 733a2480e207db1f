# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run linter and helper processes without a shell."""

from __future__ import annotations

import contextlib
import os
import shutil
import signal

# Bandit: commands are argv lists built by tidylint itself and never reach a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

#: Exit status reported for a process killed by ``CommandOptions.timeout``,
#: matching coreutils ``timeout``.
TIMEOUT_EXIT_CODE: Final[int] = 124


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """How a linter or helper process is launched.

    ``merge_stderr`` folds stderr into ``stdout`` so reports keep clang-tidy's
    interleaving of diagnostics and notes.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    check: bool = False
    merge_stderr: bool = True
    timeout: float | None = None


class SubprocessExecutionError(RuntimeError):
    """A checked command exited non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, output: str) -> None:
        tail = output.strip().splitlines()[-1:] or ["<no output>"]
        super().__init__(f"{Path(command[0]).name} exited with status {returncode}: {tail[0]}")
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output


def resolve_executable(args: Sequence[str]) -> list[str]:
    """Return ``args`` with a bare executable name resolved against ``PATH``.

    Explicit paths (absolute, or containing a separator) are left alone so the
    operating system reports them missing at launch.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If a bare executable name is not on ``PATH``.
    """

    if not args:
        raise ValueError("cannot run an empty command")
    head, *rest = args
    if Path(head).is_absolute() or len(Path(head).parts) > 1:
        return [head, *rest]
    found = shutil.which(head)
    if found is None:
        raise FileNotFoundError(f"{head}: not found on PATH")
    return [found, *rest]


def _kill_process_tree(process: subprocess.Popen[str], *, own_group: bool) -> None:
    """Kill ``process`` and, when it leads its own process group, everything it spawned.

    The group also holds grandchildren such as the clang-tidy started by the
    wrapper helper.
    """

    if own_group:
        with contextlib.suppress(ProcessLookupError):
            os.killpg(process.pid, signal.SIGKILL)
    else:
        process.kill()


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Run ``args`` and capture its output as text.

    A process exceeding ``options.timeout`` is killed together with its
    descendants and reported with :data:`TIMEOUT_EXIT_CODE`; the partial
    output is kept and a timeout line appended.

    Raises:
        FileNotFoundError: If the executable cannot be resolved.
        SubprocessExecutionError: When ``options.check`` is set and the process
            exits non-zero.
    """

    opts = options or CommandOptions()
    command = resolve_executable(args)
    # Timed commands get their own process group so a timeout reaches grandchildren.
    own_group = opts.timeout is not None and os.name == "posix"
    # Bandit: argv list, no shell expansion.
    with subprocess.Popen(  # nosec B603
        command,
        cwd=opts.cwd,
        env=None if opts.env is None else dict(opts.env),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT if opts.merge_stderr else subprocess.PIPE,
        stdin=subprocess.DEVNULL,
        text=True,
        errors="replace",
        start_new_session=own_group,
    ) as process:
        try:
            stdout, stderr = process.communicate(timeout=opts.timeout)
            returncode = process.returncode
        except subprocess.TimeoutExpired:
            _kill_process_tree(process, own_group=own_group)
            partial, stderr = process.communicate()
            if partial and not partial.endswith("\n"):
                partial += "\n"
            stdout = f"{partial or ''}{Path(command[0]).name}: timed out after {opts.timeout:g}s\n"
            returncode = TIMEOUT_EXIT_CODE

    completed = CompletedProcess(command, returncode, stdout=stdout, stderr=stderr)
    if opts.check and returncode != 0:
        raise SubprocessExecutionError(command, returncode, stdout or "")
    return completed


__all__ = [
    "CommandOptions",
    "SubprocessExecutionError",
    "TIMEOUT_EXIT_CODE",
    "resolve_executable",
    "run_command",
]
