# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the fix-mode patch computation."""

from __future__ import annotations

from pathlib import Path

import pytest

from tidylint.actions import PATCHER_EXIT_CODE_ENV, PATCHER_STDOUT_ENV
from tidylint.models import PatchConfig
from tidylint.patcher import main, run_patcher, unified_patch
from tidylint.process import TIMEOUT_EXIT_CODE


def test_fixes_become_a_patch_and_sources_are_restored(
    fake_linter: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    Path("app").mkdir()
    Path("app/a.cc").write_text("int BAD = 1;\nint ok = 2;\n", encoding="utf-8")
    Path("app/b.cc").write_text("int fine = 3;\n", encoding="utf-8")
    config = PatchConfig(
        linter=str(fake_linter),
        args=("--fix", "app/a.cc", "app/b.cc", "--", "-xc++"),
        files_to_diff=("app/a.cc", "app/b.cc"),
        output=str(tmp_path / "fix.patch"),
    )
    out = tmp_path / "fix.out"
    exit_code = tmp_path / "fix.exit_code"

    status = run_patcher(config, {PATCHER_STDOUT_ENV: str(out), PATCHER_EXIT_CODE_ENV: str(exit_code)})

    assert status == 0
    assert exit_code.read_text(encoding="utf-8").strip() == "1"
    assert "found BAD token" in out.read_text(encoding="utf-8")
    assert Path("app/a.cc").read_text(encoding="utf-8") == "int BAD = 1;\nint ok = 2;\n"
    patch = (tmp_path / "fix.patch").read_text(encoding="utf-8")
    assert patch.startswith("--- a/app/a.cc\n+++ b/app/a.cc\n")
    assert "-int BAD = 1;\n+int GOOD = 1;\n" in patch
    assert "app/b.cc" not in patch


def test_clean_sources_give_an_empty_patch(fake_linter: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    Path("ok.cc").write_text("int ok;\n", encoding="utf-8")
    config = PatchConfig(
        linter=str(fake_linter),
        args=("--fix", "ok.cc", "--"),
        files_to_diff=("ok.cc",),
        output="ok.patch",
    )

    status = run_patcher(config, {PATCHER_STDOUT_ENV: "ok.out"})

    assert status == 0
    assert Path("ok.patch").read_text(encoding="utf-8") == ""


def test_unified_patch_marks_missing_trailing_newline() -> None:
    patch = unified_patch("x.cc", "int a;", "int b;")

    assert patch.splitlines() == [
        "--- a/x.cc",
        "+++ b/x.cc",
        "@@ -1 +1 @@",
        "-int a;",
        "\\ No newline at end of file",
        "+int b;",
        "\\ No newline at end of file",
    ]


def test_main_reads_config_file(fake_linter: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    Path("a.cc").write_text("BAD\n", encoding="utf-8")
    cfg_path = tmp_path / "_a.patch_cfg"
    cfg_path.write_text(
        PatchConfig(
            linter=str(fake_linter),
            args=("--fix", "a.cc", "--"),
            files_to_diff=("a.cc",),
            output="a.patch",
        ).model_dump_json(),
        encoding="utf-8",
    )
    monkeypatch.setenv(PATCHER_EXIT_CODE_ENV, str(tmp_path / "a.exit_code"))
    monkeypatch.setenv(PATCHER_STDOUT_ENV, str(tmp_path / "a.out"))

    assert main([str(cfg_path)]) == 0
    assert "+GOOD" in Path("a.patch").read_text(encoding="utf-8")


def test_main_rejects_malformed_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg_path = tmp_path / "broken.patch_cfg"
    cfg_path.write_text("{not json", encoding="utf-8")

    assert main([str(cfg_path)]) == 1
    assert "Unable to read patch config" in capsys.readouterr().err


def test_stalled_fix_run_is_killed_and_sources_restored(
    fake_linter: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    Path("a.cc").write_text("int BAD = 1; // HANG\n", encoding="utf-8")
    config = PatchConfig(
        linter=str(fake_linter),
        args=("--fix", "a.cc", "--"),
        files_to_diff=("a.cc",),
        output="a.patch",
        timeout=1,
    )
    exit_code = tmp_path / "a.exit_code"

    status = run_patcher(config, {PATCHER_STDOUT_ENV: "a.out", PATCHER_EXIT_CODE_ENV: str(exit_code)})

    assert status == 0
    assert exit_code.read_text(encoding="utf-8").strip() == str(TIMEOUT_EXIT_CODE)
    assert Path("a.cc").read_text(encoding="utf-8") == "int BAD = 1; // HANG\n"
    assert "+int GOOD = 1; // HANG\n" in Path("a.patch").read_text(encoding="utf-8")
    assert "timed out after 1s" in Path("a.out").read_text(encoding="utf-8")
