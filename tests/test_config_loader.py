# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for layered configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tidylint.config import ConfigError, TidyLintConfig
from tidylint.config_loader import ConfigLoader, load_config


def test_load_config_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path)

    assert cfg.aspect.binary == "clang-tidy"
    assert cfg.aspect.angle_includes_are_system is True
    assert cfg.aspect.global_config == []
    assert cfg.options.fix is False
    assert cfg.execution.output_dir == tmp_path.resolve() / ".tidylint"
    assert cfg.execution.jobs >= 1


def test_pyproject_then_project_file(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
[project]
name = "demo"

[tool.tidylint.aspect]
binary = "clang-tidy-17"
header_filter = "src/.*"

[tool.tidylint.execution]
jobs = 3
""".strip(),
        encoding="utf-8",
    )
    (tmp_path / ".tidylint.toml").write_text(
        """
[aspect]
binary = "clang-tidy-18"
global_config = "tools/.clang-tidy"

[options]
fix = true
""".strip(),
        encoding="utf-8",
    )

    cfg = load_config(tmp_path)

    assert cfg.aspect.binary == "clang-tidy-18"
    assert cfg.aspect.header_filter == "src/.*"
    assert cfg.aspect.global_config == ["tools/.clang-tidy"]
    assert cfg.aspect.global_config_file == "tools/.clang-tidy"
    assert cfg.execution.jobs == 3
    assert cfg.options.fix is True


def test_includes_and_env_expansion(tmp_path: Path) -> None:
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "base.toml").write_text(
        """
[toolchain]
cxx_flags = ["-std=c++20"]
copts = ["-I$SDK_ROOT/include"]
""".strip(),
        encoding="utf-8",
    )
    project = tmp_path / ".tidylint.toml"
    project.write_text(
        """
include = "shared/base.toml"

[aspect]
binary = "${LLVM_HOME}/bin/clang-tidy"
""".strip(),
        encoding="utf-8",
    )

    loader = ConfigLoader.for_root(tmp_path, env={"LLVM_HOME": "/opt/llvm", "SDK_ROOT": "/sdk"})
    cfg = loader.load()

    assert cfg.aspect.binary == "/opt/llvm/bin/clang-tidy"
    assert cfg.toolchain.cxx_flags == ["-std=c++20"]
    assert cfg.toolchain.copts == ["-I/sdk/include"]


def test_circular_include_raises(tmp_path: Path) -> None:
    (tmp_path / "a.toml").write_text('include = "b.toml"\n', encoding="utf-8")
    (tmp_path / "b.toml").write_text('include = "a.toml"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="Circular include"):
        load_config(tmp_path, project_config=tmp_path / "a.toml")


def test_invalid_values_raise_config_error(tmp_path: Path) -> None:
    (tmp_path / ".tidylint.toml").write_text("[execution]\njobs = 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(tmp_path)


def test_malformed_toml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".tidylint.toml").write_text("[aspect\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_absolute_output_dir_is_kept(tmp_path: Path) -> None:
    target = tmp_path / "elsewhere"
    (tmp_path / ".tidylint.toml").write_text(f'[execution]\noutput_dir = "{target.as_posix()}"\n', encoding="utf-8")

    assert load_config(tmp_path).execution.output_dir == target


def test_global_config_accepts_string_or_list() -> None:
    cfg = TidyLintConfig.model_validate({"aspect": {"global_config": ["one", "two"]}})

    assert cfg.aspect.global_config_file == "one"
    assert TidyLintConfig.model_validate({"aspect": {"global_config": ""}}).aspect.global_config_file is None


def test_pyproject_table_include_is_resolved_next_to_pyproject(tmp_path: Path) -> None:
    (tmp_path / "tools").mkdir()
    (tmp_path / "tools" / "tidy.toml").write_text(
        '[aspect]\nbinary = "clang-tidy-18"\nheader_filter = "core/.*"\n',
        encoding="utf-8",
    )
    (tmp_path / "pyproject.toml").write_text(
        """
[project]
name = "demo"

[tool.tidylint]
include = ["tools/tidy.toml"]

[tool.tidylint.aspect]
header_filter = "app/.*"
""".strip(),
        encoding="utf-8",
    )

    cfg = load_config(tmp_path)

    assert cfg.aspect.binary == "clang-tidy-18"
    assert cfg.aspect.header_filter == "app/.*"


def test_missing_include_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".tidylint.toml").write_text('include = "absent.toml"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="includes missing file"):
        load_config(tmp_path)


@pytest.mark.parametrize("helper", ["wrapper", "patcher"])
def test_empty_helper_command_is_rejected(tmp_path: Path, helper: str) -> None:
    (tmp_path / ".tidylint.toml").write_text(f"[execution]\n{helper} = []\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(tmp_path)
