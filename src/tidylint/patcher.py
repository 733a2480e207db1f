# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn the in-place edits of ``clang-tidy --fix`` into a unified patch.

Usage: ``python -m tidylint.patcher <patch_cfg.json>``

The config document names the linter command, its environment, the files to
diff, the patch destination and an optional linter timeout. Sources are
restored after diffing, also when the linter times out, so a fix run never
leaves the workspace modified.
"""

from __future__ import annotations

import difflib
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from .actions import PATCHER_EXIT_CODE_ENV, PATCHER_SILENT_ENV, PATCHER_STDOUT_ENV
from .models import PatchConfig
from .process import CommandOptions, run_command
from .wrapper import LAUNCH_FAILURE_EXIT_CODE

_NO_NEWLINE_MARKER: Final[str] = "\\ No newline at end of file\n"


class PatchConfigError(RuntimeError):
    """Raised when the patch config document cannot be read."""


def load_patch_config(path: Path) -> PatchConfig:
    """Read and validate the patch config document at ``path``."""

    try:
        return PatchConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise PatchConfigError(f"Unable to read patch config {path}: {exc}") from exc


def _diff_lines(lines: list[str]) -> list[str]:
    normalised: list[str] = []
    for line in lines:
        if line.endswith("\n"):
            normalised.append(line)
        else:
            normalised.extend((f"{line}\n", _NO_NEWLINE_MARKER))
    return normalised


def unified_patch(path: str, before: str, after: str) -> str:
    """Return the unified diff turning ``before`` into ``after`` for ``path``."""

    diff = difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
    )
    return "".join(_diff_lines(list(diff)))


def _read(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def _decode(payload: bytes | None) -> str:
    return "" if payload is None else payload.decode("utf-8", errors="surrogateescape")


def run_patcher(config: PatchConfig, env: Mapping[str, str]) -> int:
    """Run the configured linter, write the patch and restore the sources.

    Args:
        config: Patch config document.
        env: Process environment carrying the ``PATCHER__*`` variables.

    Returns:
        int: Exit status the patcher process should terminate with.
    """

    snapshots = {name: _read(Path(name)) for name in config.files_to_diff}
    command = [config.linter, *config.args]
    linter_env = {**env, **config.env}

    patches: list[str] = []
    try:
        try:
            completed = run_command(command, options=CommandOptions(env=linter_env, timeout=config.timeout))
        except OSError as exc:
            returncode, output = LAUNCH_FAILURE_EXIT_CODE, f"{command[0]}: {exc}\n"
        else:
            returncode, output = completed.returncode, completed.stdout or ""
        for name, before in snapshots.items():
            after = _read(Path(name))
            if after != before:
                patches.append(unified_patch(name, _decode(before), _decode(after)))
    finally:
        for name, before in snapshots.items():
            path = Path(name)
            if before is None:
                path.unlink(missing_ok=True)
            elif _read(path) != before:
                path.write_bytes(before)

    Path(config.output).write_text("".join(patches), encoding="utf-8", errors="surrogateescape")

    stdout_file = env.get(PATCHER_STDOUT_ENV)
    exit_code_file = env.get(PATCHER_EXIT_CODE_ENV)
    if stdout_file:
        Path(stdout_file).write_text(output, encoding="utf-8")
    elif returncode != 0 or not env.get(PATCHER_SILENT_ENV):
        sys.stdout.write(output)

    if exit_code_file:
        Path(exit_code_file).write_text(f"{returncode}\n", encoding="utf-8")
        return 0
    return returncode


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``tidylint-patcher``."""

    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("usage: tidylint-patcher <patch_cfg.json>", file=sys.stderr)
        return 2
    try:
        config = load_patch_config(Path(args[0]))
    except PatchConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return run_patcher(config, os.environ)


if __name__ == "__main__":
    sys.exit(main())
