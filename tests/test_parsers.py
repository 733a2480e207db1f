# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

from pathlib import Path

from tidylint.models import Severity
from tidylint.parsers import parse_clang_tidy, parse_report

REPORT = """\
src/widget.cc:12:7: warning: variable 'count' is not initialized [cppcoreguidelines-init-variables]
   12 |   int count;
      |       ^
src/widget.cc:30:1: error: unknown type name 'foo' [clang-diagnostic-error]
src/widget.h:4:3: note: expanded from macro 'CHECK'
src/legacy.c:9: warning: missing column but still useful
Suppressed 3 warnings (3 in non-user code).
"""


def test_parse_clang_tidy_extracts_diagnostics() -> None:
    diagnostics = parse_clang_tidy(REPORT.splitlines())

    assert [(diag.file, diag.line, diag.column, diag.severity) for diag in diagnostics] == [
        ("src/widget.cc", 12, 7, Severity.WARNING),
        ("src/widget.cc", 30, 1, Severity.ERROR),
        ("src/widget.h", 4, 3, Severity.NOTE),
        ("src/legacy.c", 9, None, Severity.WARNING),
    ]
    first = diagnostics[0]
    assert first.message == "variable 'count' is not initialized"
    assert first.code == "cppcoreguidelines-init-variables"
    assert first.tool == "clang-tidy"
    assert diagnostics[2].code is None


def test_parse_report_reads_file_and_tolerates_missing(tmp_path: Path) -> None:
    report = tmp_path / "lib.ClangTidy.out"
    report.write_text(REPORT, encoding="utf-8")

    assert len(parse_report(report)) == 4
    assert parse_report(tmp_path / "absent.out") == []
