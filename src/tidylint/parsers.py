# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parse clang-tidy reports into :class:`~tidylint.models.Diagnostic` objects."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from .models import Diagnostic, Severity

_CLANG_TIDY_PATTERN = re.compile(
    r"""
    ^(?P<file>.+?):(?P<line>\d+):(?:(?P<column>\d+):)?\s+
    (?P<severity>error|warning|note):\s+
    (?P<message>.*?)
    (?:\s+\[(?P<code>[^\[\]\s]+)\])?$
    """,
    re.VERBOSE,
)


def parse_clang_tidy(lines: Iterable[str]) -> list[Diagnostic]:
    """Parse clang-tidy textual diagnostics.

    Source excerpts, caret lines and summary noise do not match the
    ``file:line:col: severity: message [check]`` shape and are skipped.

    Args:
        lines: Report lines as written by the wrapper.

    Returns:
        list[Diagnostic]: Diagnostics in report order.
    """

    results: list[Diagnostic] = []
    for line in lines:
        match = _CLANG_TIDY_PATTERN.match(line.rstrip())
        if not match:
            continue
        column = match.group("column")
        results.append(
            Diagnostic(
                file=match.group("file"),
                line=int(match.group("line")),
                column=int(column) if column else None,
                severity=Severity(match.group("severity")),
                message=match.group("message").strip(),
                code=match.group("code"),
            ),
        )
    return results


def parse_report(path: Path) -> list[Diagnostic]:
    """Parse the report file at ``path``; a missing file yields no diagnostics."""

    if not path.exists():
        return []
    return parse_clang_tidy(path.read_text(encoding="utf-8", errors="replace").splitlines())


__all__ = ["parse_clang_tidy", "parse_report"]
