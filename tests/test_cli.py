# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for the ``tidylint`` command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tidylint.cli import app

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, fake_linter: Path) -> Path:
    root = tmp_path / "ws"
    (root / "lib").mkdir(parents=True)
    (root / "lib" / "clean.cc").write_text("int ok = 0;\n", encoding="utf-8")
    (root / "lib" / "dirty.cc").write_text("int BAD = 0;\n", encoding="utf-8")
    (root / ".tidylint.toml").write_text(
        f"""
[aspect]
binary = "{fake_linter}"

[execution]
output_dir = "reports"
jobs = 2
""".strip(),
        encoding="utf-8",
    )
    return root


def _write_targets(root: Path, *targets: dict[str, object]) -> Path:
    path = root / "targets.json"
    path.write_text(json.dumps({"targets": list(targets)}), encoding="utf-8")
    return path


def _cc(label: str, *srcs: str) -> dict[str, object]:
    return {"label": label, "srcs": list(srcs), "compilation_context": {"includes": ["lib"]}}


def test_plan_prints_actions_as_json(workspace: Path) -> None:
    targets = _write_targets(workspace, _cc("//lib:clean", "lib/clean.cc"), _cc("//lib:hdrs", "lib/only.h"))

    result = runner.invoke(app, ["plan", str(targets), "--root", str(workspace)])

    assert result.exit_code == 0, result.output
    actions = json.loads(result.stdout)
    assert [(action["target"], action["kind"]) for action in actions] == [
        ("//lib:clean", "lint"),
        ("//lib:clean", "lint"),
        ("//lib:hdrs", "noop"),
    ]
    assert actions[0]["outputs"][0].endswith("reports/lib/clean.ClangTidy.out")
    assert "lib/clean.cc" in actions[0]["command"]


def test_plan_with_fix_switches_human_pass(workspace: Path) -> None:
    targets = _write_targets(workspace, _cc("//lib:clean", "lib/clean.cc"))

    result = runner.invoke(app, ["plan", str(targets), "--root", str(workspace), "--fix"])

    assert result.exit_code == 0, result.output
    kinds = [action["kind"] for action in json.loads(result.stdout)]
    assert kinds == ["fix", "lint"]


def test_run_clean_target_succeeds(workspace: Path) -> None:
    targets = _write_targets(workspace, _cc("//lib:clean", "lib/clean.cc"))

    result = runner.invoke(app, ["run", str(targets), "--root", str(workspace), "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "no findings" in result.output
    assert (workspace / "reports" / "lib" / "clean.ClangTidy.report").exists()


def test_run_reports_findings_and_fails(workspace: Path) -> None:
    targets = _write_targets(workspace, _cc("//lib:clean", "lib/clean.cc"), _cc("//lib:dirty", "lib/dirty.cc"))

    result = runner.invoke(app, ["run", str(targets), "--root", str(workspace), "--no-emoji", "-j", "1"])

    assert result.exit_code == 1
    assert "lib/dirty.cc:1:5: warning: found BAD token [fake-bad-token]" in result.output
    assert "1 finding(s) in 1 target(s)" in result.output


def test_run_fix_writes_patch_and_keeps_sources(workspace: Path) -> None:
    targets = _write_targets(workspace, _cc("//lib:dirty", "lib/dirty.cc"))

    result = runner.invoke(app, ["run", str(targets), "--root", str(workspace), "--no-emoji", "--fix"])

    assert result.exit_code == 1
    patch = (workspace / "reports" / "lib" / "dirty.ClangTidy.patch").read_text(encoding="utf-8")
    assert "--- a/lib/dirty.cc" in patch
    assert "+int GOOD = 0;" in patch
    assert (workspace / "lib" / "dirty.cc").read_text(encoding="utf-8") == "int BAD = 0;\n"


def test_run_fail_on_violation_aborts(workspace: Path) -> None:
    with (workspace / ".tidylint.toml").open("a", encoding="utf-8") as handle:
        handle.write("\n\n[options]\nfail_on_violation = true\n")
    targets = _write_targets(workspace, _cc("//lib:dirty", "lib/dirty.cc"))

    result = runner.invoke(app, ["run", str(targets), "--root", str(workspace), "--no-emoji", "-j", "1"])

    assert result.exit_code == 1
    assert "Linting //lib:dirty with clang-tidy failed (exit 1)" in result.output


def test_run_rejects_invalid_inputs(workspace: Path) -> None:
    missing = runner.invoke(app, ["run", str(workspace / "nope.json"), "--root", str(workspace)])
    assert missing.exit_code == 2
    assert "unable to read" in missing.output

    (workspace / ".tidylint.toml").write_text("[execution]\njobs = 0\n", encoding="utf-8")
    targets = _write_targets(workspace, _cc("//lib:clean", "lib/clean.cc"))
    invalid = runner.invoke(app, ["run", str(targets), "--root", str(workspace)])
    assert invalid.exit_code == 2
    assert "Invalid configuration" in invalid.output
