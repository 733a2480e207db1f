# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models describing lint targets, planned actions and diagnostics."""

from __future__ import annotations

from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LINTABLE_EXTENSIONS: Final[frozenset[str]] = frozenset({"c", "cc", "cpp", "cxx", "c++", "C"})
LINT_GENFILES_TAG: Final[str] = "lint-genfiles"

ActionKind = Literal["lint", "fix", "noop"]


class Severity(str, Enum):
    """Severity levels reported by clang-tidy."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


class SourceFile(BaseModel):
    """A single source file belonging to a target."""

    model_config = ConfigDict(frozen=True)

    path: str
    generated: bool = False

    @property
    def extension(self) -> str:
        """Return the file extension without the leading dot (case preserved)."""

        suffix = PurePosixPath(self.path).suffix
        return suffix[1:] if suffix else ""

    @property
    def is_cxx(self) -> bool:
        """Return ``True`` unless the file is a plain C source."""

        return self.extension != "c"

    @property
    def is_lintable(self) -> bool:
        """Return ``True`` for checked-in C/C++ translation units."""

        return not self.generated and self.extension in LINTABLE_EXTENSIONS


class CompilationContext(BaseModel):
    """Headers, defines and include directories a target compiles with.

    Include directories are kept per category because each category maps to a
    different compiler option (``-I``, ``-iquote``, ``-isystem``, ``-F``).
    """

    model_config = ConfigDict(frozen=True)

    headers: tuple[str, ...] = Field(default_factory=tuple)
    direct_headers: tuple[str, ...] = Field(default_factory=tuple)
    defines: tuple[str, ...] = Field(default_factory=tuple)
    local_defines: tuple[str, ...] = Field(default_factory=tuple)
    includes: tuple[str, ...] = Field(default_factory=tuple)
    quote_includes: tuple[str, ...] = Field(default_factory=tuple)
    system_includes: tuple[str, ...] = Field(default_factory=tuple)
    framework_includes: tuple[str, ...] = Field(default_factory=tuple)
    external_includes: tuple[str, ...] = Field(default_factory=tuple)


class LintTarget(BaseModel):
    """Build metadata for one target the linter is attached to."""

    model_config = ConfigDict(frozen=True)

    label: str
    srcs: tuple[SourceFile, ...] = Field(default_factory=tuple)
    tags: tuple[str, ...] = Field(default_factory=tuple)
    copts: tuple[str, ...] = Field(default_factory=tuple)
    compilation_context: CompilationContext | None = None

    @field_validator("srcs", mode="before")
    @classmethod
    def _coerce_sources(cls, value: object) -> object:
        """Accept bare path strings as checked-in sources."""

        if isinstance(value, (list, tuple)):
            return tuple({"path": item} if isinstance(item, str) else item for item in value)
        return value

    @field_validator("label")
    @classmethod
    def _check_label(cls, value: str) -> str:
        """Reject labels whose package would escape the output directory."""

        if not value.strip("@/:"):
            raise ValueError("label must name a target")
        if ".." in value.replace(":", "/").split("/"):
            raise ValueError(f"label {value!r} contains a '..' segment")
        return value

    @property
    def package(self) -> str:
        """Return the output subdirectory of the target's package.

        ``//a/b:lib`` maps to ``a/b`` and ``@repo//a:lib`` to
        ``external/repo/a``; targets of the root package map to ``""``.
        """

        label = self.label
        repo = ""
        if label.startswith("@"):
            repo, _, label = label.lstrip("@").partition("//")
        if ":" in label:
            package = label.split(":", 1)[0].removeprefix("//")
        else:
            # "//a/b" is shorthand for "//a/b:b"; a bare name lives in the root package.
            package = label.removeprefix("//") if label.startswith("//") else ""
        parts = [f"external/{repo}" if repo else "", package.strip("/")]
        return "/".join(part for part in parts if part)

    @property
    def name(self) -> str:
        """Return the target name (the part after ``:`` or the last path segment)."""

        if ":" in self.label:
            return self.label.rsplit(":", 1)[1]
        return self.label.rstrip("/").rsplit("/", 1)[-1]

    @property
    def is_cc(self) -> bool:
        """Return ``True`` when the target carries C/C++ compilation metadata."""

        return self.compilation_context is not None


class ReportOutputs(BaseModel):
    """Report file plus the optional file receiving the linter exit code."""

    model_config = ConfigDict(frozen=True)

    out: Path
    exit_code: Path | None = None


class LintOutputs(BaseModel):
    """Every file a target's lint actions promise to produce."""

    model_config = ConfigDict(frozen=True)

    human: ReportOutputs
    machine: ReportOutputs
    patch: Path | None = None

    def files(self) -> list[Path]:
        """Return all declared output files."""

        declared = [self.human.out, self.human.exit_code, self.machine.out, self.machine.exit_code, self.patch]
        return [path for path in declared if path is not None]


class PatchConfig(BaseModel):
    """Hand-off document consumed by the patch computing helper."""

    model_config = ConfigDict(frozen=True)

    linter: str
    args: tuple[str, ...]
    env: dict[str, str] = Field(default_factory=dict)
    files_to_diff: tuple[str, ...] = Field(default_factory=tuple)
    output: str
    timeout: float | None = Field(default=None, gt=0)


class LintAction(BaseModel):
    """A fully specified external process invocation for one target."""

    model_config = ConfigDict(frozen=True)

    mnemonic: str
    kind: ActionKind
    target: str
    command: tuple[str, ...] = Field(default_factory=tuple)
    env: dict[str, str] = Field(default_factory=dict)
    inputs: tuple[str, ...] = Field(default_factory=tuple)
    outputs: tuple[Path, ...] = Field(default_factory=tuple)
    exit_code_outputs: tuple[Path, ...] = Field(default_factory=tuple)
    patch_config: PatchConfig | None = None
    patch_config_path: Path | None = None
    progress_message: str = ""


class Diagnostic(BaseModel):
    """Normalised clang-tidy finding."""

    model_config = ConfigDict(validate_assignment=True)

    file: str
    line: int
    column: int | None = None
    severity: Severity
    message: str
    code: str | None = None
    tool: str = "clang-tidy"


__all__ = [
    "ActionKind",
    "CompilationContext",
    "Diagnostic",
    "LINTABLE_EXTENSIONS",
    "LINT_GENFILES_TAG",
    "LintAction",
    "LintOutputs",
    "LintTarget",
    "PatchConfig",
    "ReportOutputs",
    "Severity",
    "SourceFile",
]
