# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from tidylint.config import TidyLintConfig
from tidylint.models import CompilationContext, LintTarget

# Stand-in for clang-tidy: reports every source containing ``BAD`` and, with
# ``--fix``, rewrites ``BAD`` to ``GOOD`` in place. A source containing ``HANG``
# makes it stall after fixing.
_FAKE_LINTER = """\
#!{python}
import sys
import time
from pathlib import Path

args = sys.argv[1:]
split = args.index("--") if "--" in args else len(args)
sources = [arg for arg in args[:split] if not arg.startswith("-")]
findings = 0
hang = False
for name in sources:
    path = Path(name)
    text = path.read_text()
    hang = hang or "HANG" in text
    for number, line in enumerate(text.splitlines(), start=1):
        if "BAD" in line:
            findings += 1
            print(f"{{name}}:{{number}}:{{line.index('BAD') + 1}}: warning: found BAD token [fake-bad-token]")
    if "--fix" in args[:split]:
        path.write_text(text.replace("BAD", "GOOD"))
if findings:
    print(f"{{findings}} warnings generated.")
print("flags:", " ".join(args[split + 1:]), file=sys.stderr)
if hang:
    sys.stdout.flush()
    time.sleep(60)
sys.exit(1 if findings else 0)
"""


@pytest.fixture
def fake_linter(tmp_path: Path) -> Path:
    """Return an executable fake clang-tidy script."""

    script = tmp_path / "bin" / "fake-clang-tidy"
    script.parent.mkdir(parents=True, exist_ok=True)
    script.write_text(_FAKE_LINTER.format(python=sys.executable), encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., TidyLintConfig]:
    """Return a factory for configs writing outputs below ``tmp_path``."""

    def _make(**aspect: object) -> TidyLintConfig:
        config = TidyLintConfig()
        config.execution.output_dir = tmp_path / "out"
        config.execution.jobs = 2
        for key, value in aspect.items():
            setattr(config.aspect, key, value)
        return config

    return _make


@pytest.fixture
def make_target() -> Callable[..., LintTarget]:
    """Return a factory for C/C++ targets with a compilation context."""

    def _make(
        srcs: list[str | dict[str, object]],
        *,
        label: str = "//app:lib",
        tags: tuple[str, ...] = (),
        copts: tuple[str, ...] = (),
        **context: object,
    ) -> LintTarget:
        return LintTarget.model_validate(
            {
                "label": label,
                "srcs": srcs,
                "tags": tags,
                "copts": copts,
                "compilation_context": CompilationContext.model_validate(context),
            },
        )

    return _make
