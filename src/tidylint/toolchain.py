# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compile flags a target would be built with, ready for clang-tidy."""

from __future__ import annotations

from typing import Final

from .config import ToolchainConfig
from .flags import translate_flags
from .models import LintTarget

CXX_LANGUAGE_FLAG: Final[str] = "-xc++"
C_LANGUAGE_FLAG: Final[str] = "-xc"


def toolchain_flags(toolchain: ToolchainConfig, *, cxx: bool) -> list[str]:
    """Return toolchain defaults followed by the user's command-line options.

    Args:
        toolchain: Toolchain defaults and user options.
        cxx: Select the C++ compile action instead of the C one.

    Returns:
        list[str]: Flags of the selected compile action.
    """

    if cxx:
        return [*toolchain.cxx_flags, *toolchain.cxxopts, *toolchain.copts]
    return [*toolchain.c_flags, *toolchain.copts]


def compile_flags(target: LintTarget, toolchain: ToolchainConfig, *, cxx: bool, verbose: bool = False) -> list[str]:
    """Return translated compile flags for ``target`` plus the language selector."""

    flags = translate_flags([*toolchain_flags(toolchain, cxx=cxx), *target.copts], verbose=verbose)
    flags.append(CXX_LANGUAGE_FLAG if cxx else C_LANGUAGE_FLAG)
    return flags


__all__ = ["CXX_LANGUAGE_FLAG", "C_LANGUAGE_FLAG", "compile_flags", "toolchain_flags"]
