# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the tidylint clang-tidy integration."""

from __future__ import annotations

import math
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def default_parallel_jobs() -> int:
    """Return 75% of available CPU cores (minimum of 1)."""
    cores = os.cpu_count() or 1
    return max(1, math.floor(cores * 0.75))


def _module_command(module: str) -> list[str]:
    return [sys.executable, "-m", module]


class AspectConfig(BaseModel):
    """Parameters that shape every clang-tidy invocation.

    Attributes:
        binary: clang-tidy executable name or path.
        configs: ``.clang-tidy`` (and ``.clang-format``) files made available to
            clang-tidy's own config search.
        global_config: A single config passed with ``--config-file``; clang-tidy
            then ignores configs found next to sources. Only the first entry is used.
        header_filter: Regex handed to ``-header-filter``.
        lint_target_headers: Derive the header filter from each target's direct
            headers. Overrides ``header_filter``.
        angle_includes_are_system: Pass system include directories with
            ``-isystem`` (``True``) or ``-I`` so their headers are linted too.
        verbose: Print dropped flags and linter command lines.
    """

    model_config = ConfigDict(validate_assignment=True)

    binary: str = "clang-tidy"
    configs: list[str] = Field(default_factory=list)
    global_config: list[str] = Field(default_factory=list)
    header_filter: str = ""
    lint_target_headers: bool = False
    angle_includes_are_system: bool = True
    verbose: bool = False

    @field_validator("global_config", mode="before")
    @classmethod
    def _coerce_global_config(cls, value: object) -> object:
        if isinstance(value, (str, Path)):
            return [str(value)] if str(value) else []
        return value

    @property
    def global_config_file(self) -> str | None:
        """Return the single global config file, if one was configured."""

        return self.global_config[0] if self.global_config else None


class LintOptions(BaseModel):
    """Run-wide lint switches."""

    model_config = ConfigDict(validate_assignment=True)

    fix: bool = False
    fail_on_violation: bool = False


class ToolchainConfig(BaseModel):
    """Toolchain default flags and user compile options per language."""

    model_config = ConfigDict(validate_assignment=True)

    c_flags: list[str] = Field(default_factory=list)
    cxx_flags: list[str] = Field(default_factory=list)
    copts: list[str] = Field(default_factory=list)
    cxxopts: list[str] = Field(default_factory=list)


class ExecutionConfig(BaseModel):
    """Where actions write their outputs and how they are executed."""

    model_config = ConfigDict(validate_assignment=True)

    output_dir: Path = Path(".tidylint")
    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    timeout: float | None = Field(default=None, gt=0)
    wrapper: list[str] = Field(default_factory=lambda: _module_command("tidylint.wrapper"), min_length=1)
    patcher: list[str] = Field(default_factory=lambda: _module_command("tidylint.patcher"), min_length=1)


class TidyLintConfig(BaseModel):
    """Top-level tidylint configuration."""

    model_config = ConfigDict(validate_assignment=True)

    aspect: AspectConfig = Field(default_factory=AspectConfig)
    options: LintOptions = Field(default_factory=LintOptions)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON compatible snapshot of the configuration."""

        return self.model_dump(mode="json")


__all__ = [
    "AspectConfig",
    "ConfigError",
    "ExecutionConfig",
    "LintOptions",
    "TidyLintConfig",
    "ToolchainConfig",
    "default_parallel_jobs",
]
