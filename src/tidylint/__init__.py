# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Attach clang-tidy linting to C/C++ compilation targets.

The public surface covers the three stages of a lint run: translating
toolchain flags (:func:`translate_flags`), planning the clang-tidy actions of
each target (:func:`plan_targets`) and executing them
(:class:`ActionExecutor`).
"""

from __future__ import annotations

from .actions import plan_target, plan_targets
from .config import ConfigError, TidyLintConfig
from .config_loader import load_config
from .executor import ActionExecutor, ActionResult, LintActionError
from .flags import translate_flag, translate_flags
from .headers import aggregate_regex, common_prefixes
from .models import CompilationContext, LintAction, LintTarget, PatchConfig, SourceFile
from .targets import TargetError, load_targets

__version__ = "0.1.0"

__all__ = [
    "ActionExecutor",
    "ActionResult",
    "CompilationContext",
    "ConfigError",
    "LintAction",
    "LintActionError",
    "LintTarget",
    "PatchConfig",
    "SourceFile",
    "TargetError",
    "TidyLintConfig",
    "__version__",
    "aggregate_regex",
    "common_prefixes",
    "load_config",
    "load_targets",
    "plan_target",
    "plan_targets",
    "translate_flag",
    "translate_flags",
]
