# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``plan`` and ``run`` commands."""

from __future__ import annotations

import json
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from ..actions import declare_outputs, plan_targets
from ..config import ConfigError, TidyLintConfig
from ..config_loader import load_config
from ..executor import ActionExecutor, ActionResult, LintActionError
from ..models import LintTarget, Severity
from ..parsers import parse_report
from ..targets import TargetError, load_targets
from .shared import CLIError, CLILogger, build_cli_logger

TargetsArgument = Annotated[
    Path,
    typer.Argument(help="JSON document describing the targets to lint.", dir_okay=False),
]
RootOption = Annotated[
    Path,
    typer.Option("--root", help="Workspace root; source paths are relative to it.", file_okay=False),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Use this TOML file instead of .tidylint.toml."),
]
FixOption = Annotated[bool, typer.Option("--fix", help="Compute fix patches instead of the human report.")]
NoEmojiOption = Annotated[bool, typer.Option("--no-emoji", help="Disable emoji output.")]
NoColorOption = Annotated[bool, typer.Option("--no-color", help="Disable coloured output.")]


@dataclass(slots=True)
class TargetSummary:
    """Findings collected from one target's human report."""

    target: LintTarget
    findings: int
    exit_code: int | None
    patch: Path | None


def _load(root: Path, config_path: Path | None, targets_path: Path) -> tuple[TidyLintConfig, list[LintTarget]]:
    try:
        config = load_config(root, project_config=config_path)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    try:
        targets = load_targets(targets_path)
    except TargetError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    return config, targets


def _read_exit_code(path: Path | None) -> int | None:
    if path is None or not path.exists():
        return None
    text = path.read_text(encoding="utf-8").strip()
    return int(text) if text.lstrip("-").isdigit() else None


def summarize(targets: list[LintTarget], config: TidyLintConfig, *, logger: CLILogger) -> list[TargetSummary]:
    """Log the findings of every linted target and return per-target summaries."""

    summaries: list[TargetSummary] = []
    for target in targets:
        if not target.is_cc:
            continue
        outputs = declare_outputs(target, config)
        diagnostics = [diag for diag in parse_report(outputs.human.out) if diag.severity is not Severity.NOTE]
        for diag in diagnostics:
            location = f"{diag.file}:{diag.line}" + (f":{diag.column}" if diag.column else "")
            code = f" [{diag.code}]" if diag.code else ""
            logger.echo(f"{location}: {diag.severity.value}: {diag.message}{code}")
        patch = outputs.patch if outputs.patch is not None and outputs.patch.exists() else None
        if patch is not None and patch.stat().st_size:
            logger.info(f"{target.label}: fixes written to {patch}")
        summaries.append(
            TargetSummary(
                target=target,
                findings=len(diagnostics),
                exit_code=_read_exit_code(outputs.human.exit_code),
                patch=patch,
            ),
        )
    return summaries


def plan_actions(
    targets_path: TargetsArgument,
    root: RootOption = Path("."),
    config_path: ConfigOption = None,
    fix: FixOption = False,
    no_emoji: NoEmojiOption = False,
    no_color: NoColorOption = False,
) -> None:
    """Print the planned clang-tidy actions as JSON."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color)
    try:
        config, targets = _load(root, config_path, targets_path)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    if fix:
        config.options.fix = True
    actions = plan_targets(targets, config)
    logger.echo(json.dumps([action.model_dump(mode="json") for action in actions], indent=2))


def run_lint(
    targets_path: TargetsArgument,
    root: RootOption = Path("."),
    config_path: ConfigOption = None,
    fix: FixOption = False,
    jobs: Annotated[int | None, typer.Option("--jobs", "-j", min=1, help="Concurrent actions.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Print skipped flags and commands.")] = False,
    no_emoji: NoEmojiOption = False,
    no_color: NoColorOption = False,
) -> None:
    """Lint the targets with clang-tidy and summarise the findings."""

    logger = build_cli_logger(emoji=not no_emoji, debug=verbose, no_color=no_color)
    try:
        config, targets = _load(root, config_path, targets_path)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    if fix:
        config.options.fix = True
    if jobs is not None:
        config.execution.jobs = jobs
    if verbose:
        config.aspect.verbose = True

    actions = plan_targets(targets, config)
    for action in actions:
        logger.debug(f"target={action.target} kind={action.kind} command={shlex.join(action.command) or '-'}")
    executor = ActionExecutor(
        root=root.resolve(),
        jobs=config.execution.jobs,
        verbose=verbose,
    )
    try:
        results: list[ActionResult] = executor.run(actions)
    except LintActionError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        logger.fail(f"Unable to start linter: {exc}")
        raise typer.Exit(code=2) from exc

    summaries = summarize(targets, config, logger=logger)
    failing = [item for item in summaries if item.findings or item.exit_code]
    if failing:
        total = sum(item.findings for item in failing)
        logger.fail(f"clang-tidy reported {total} finding(s) in {len(failing)} target(s)")
        raise typer.Exit(code=1)
    logger.ok(f"{len(summaries)} target(s) linted, {len(results)} action(s) executed, no findings")


__all__ = ["TargetSummary", "plan_actions", "run_lint", "summarize"]
