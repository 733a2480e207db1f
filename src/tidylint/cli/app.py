# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

import typer

from .commands import plan_actions, run_lint

app = typer.Typer(
    name="tidylint",
    help="Attach clang-tidy linting to C/C++ build targets.",
    no_args_is_help=True,
    add_completion=False,
)
app.command("plan", help="Print the planned clang-tidy actions as JSON.")(plan_actions)
app.command("run", help="Lint the targets with clang-tidy and summarise the findings.")(run_lint)


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]
