# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Execution helpers for running planned lint actions."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from textwrap import shorten

from .logging import info
from .models import LintAction
from .process import CommandOptions, run_command

RunnerCallable = Callable[..., CompletedProcess[str]]


class LintActionError(RuntimeError):
    """Raised when an action without exit-code capture exits non-zero."""

    def __init__(self, action: LintAction, returncode: int, output: str) -> None:
        first_line = next((line for line in output.splitlines() if line.strip()), "")
        detail = f": {shorten(first_line, width=160, placeholder='...')}" if first_line else ""
        super().__init__(f"{action.progress_message} failed (exit {returncode}){detail}")
        self.action = action
        self.returncode = returncode
        self.output = output


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of a single executed action."""

    action: LintAction
    returncode: int
    output: str = ""

    @property
    def outputs(self) -> tuple[Path, ...]:
        return self.action.outputs


def materialize_outputs(action: LintAction) -> None:
    """Create every declared output of ``action`` with neutral content.

    Exit-code files receive ``0``; reports and patches are left empty.
    """

    exit_codes = set(action.exit_code_outputs)
    for path in action.outputs:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("0\n" if path in exit_codes else "", encoding="utf-8")


def backfill_outputs(action: LintAction, returncode: int) -> None:
    """Create declared outputs a helper left behind, recording ``returncode``.

    A helper that crashed or was killed may not have written its exit-code
    file; the process status stands in for the linter's.
    """

    exit_codes = set(action.exit_code_outputs)
    for path in action.outputs:
        if path.exists():
            continue
        path.write_text(f"{returncode}\n" if path in exit_codes else "", encoding="utf-8")


def write_patch_config(action: LintAction) -> None:
    """Write the patch config document a fix action hands to the patcher."""

    if action.patch_config is None or action.patch_config_path is None:
        raise ValueError(f"fix action for {action.target} has no patch config")
    action.patch_config_path.parent.mkdir(parents=True, exist_ok=True)
    action.patch_config_path.write_text(action.patch_config.model_dump_json(indent=2), encoding="utf-8")


class ActionExecutor:
    """Run lint actions with a bounded worker pool.

    Args:
        root: Working directory the actions run in; source paths are relative to it.
        jobs: Number of actions executed concurrently.
        runner: Process runner, replaceable in tests.
        env: Base environment merged under each action's own variables.
        verbose: Announce each action before it runs.
    """

    def __init__(
        self,
        *,
        root: Path,
        jobs: int = 1,
        runner: RunnerCallable = run_command,
        env: Mapping[str, str] | None = None,
        verbose: bool = False,
    ) -> None:
        self._root = root
        self._jobs = max(1, jobs)
        self._runner = runner
        self._env = dict(os.environ if env is None else env)
        self._verbose = verbose

    def run_action(self, action: LintAction) -> ActionResult:
        """Execute ``action`` and return its result.

        Raises:
            LintActionError: If the process fails and its exit code is not
                captured as an output.
        """

        if action.kind == "noop":
            materialize_outputs(action)
            return ActionResult(action=action, returncode=0)

        for path in action.outputs:
            path.parent.mkdir(parents=True, exist_ok=True)
        if action.kind == "fix":
            write_patch_config(action)
        if self._verbose:
            info(action.progress_message)

        # Timeouts are enforced by the helpers around the linter so that
        # sources are restored and exit codes recorded.
        options = CommandOptions(cwd=self._root, env={**self._env, **action.env})
        completed = self._runner(action.command, options=options)
        output = completed.stdout or ""
        if completed.returncode != 0 and not action.exit_code_outputs:
            raise LintActionError(action, completed.returncode, output)
        backfill_outputs(action, completed.returncode)
        return ActionResult(action=action, returncode=completed.returncode, output=output)

    def run(self, actions: Sequence[LintAction]) -> list[ActionResult]:
        """Execute ``actions`` concurrently, returning results in submission order.

        Fix actions edit sources in place until the patcher restores them, so
        they run to completion before any report action starts.

        Raises:
            LintActionError: For the first failing action in submission order,
                after all submitted actions of its phase finished.
        """

        if not actions:
            return []
        phases = [
            [index for index, action in enumerate(actions) if action.kind == "fix"],
            [index for index, action in enumerate(actions) if action.kind != "fix"],
        ]
        results: dict[int, ActionResult] = {}
        with ThreadPoolExecutor(max_workers=self._jobs) as pool:
            for phase in phases:
                futures = {index: pool.submit(self.run_action, actions[index]) for index in phase}
                for index, future in futures.items():
                    results[index] = future.result()
        return [results[index] for index in range(len(actions))]


__all__ = [
    "ActionExecutor",
    "ActionResult",
    "LintActionError",
    "RunnerCallable",
    "backfill_outputs",
    "materialize_outputs",
    "write_patch_config",
]
