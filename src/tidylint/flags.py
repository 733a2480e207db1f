# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate toolchain compiler flags into a command line clang-tidy accepts.

Toolchains configured for GCC or MSVC emit options Clang does not understand.
Each flag is looked up in a static rule table that drops unsupported options
and rewrites the MSVC spellings of options that affect parsing. Flags no rule
matches pass through untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Final, Literal

from .logging import warn

MatchKind = Literal["exact", "prefix"]
RuleAction = Literal["drop", "rewrite"]


@dataclass(frozen=True, slots=True)
class TranslationRule:
    """Map a flag pattern to the action applied when it matches.

    Attributes:
        pattern: Exact flag or flag prefix the rule applies to.
        match: Whether ``pattern`` must equal the flag or only prefix it.
        action: ``drop`` removes the flag, ``rewrite`` substitutes the prefix.
        replacement: Prefix substituted for ``pattern`` by ``rewrite`` rules.
    """

    pattern: str
    match: MatchKind
    action: RuleAction
    replacement: str = ""

    def matches(self, flag: str) -> bool:
        if self.match == "exact":
            return flag == self.pattern
        return flag.startswith(self.pattern)

    def apply(self, flag: str) -> str | None:
        """Return the translated flag, or ``None`` when the flag is dropped."""

        if self.action == "drop":
            return None
        return self.replacement + flag.removeprefix(self.pattern)


UNSUPPORTED_FLAGS: Final[tuple[str, ...]] = (
    "-fno-canonical-system-headers",
    "-fstack-usage",
    "/nologo",
    "/COMPILER_MSVC",
    "/showIncludes",
)
WARNING_FLAG_PREFIXES: Final[tuple[str, ...]] = ("/wd", "-W")
FOREIGN_OPTION_PREFIX: Final[str] = "/"

# Evaluated in order, first match wins.
TRANSLATION_RULES: Final[tuple[TranslationRule, ...]] = (
    *(TranslationRule(flag, "exact", "drop") for flag in UNSUPPORTED_FLAGS),
    *(TranslationRule(prefix, "prefix", "drop") for prefix in WARNING_FLAG_PREFIXES),
    TranslationRule("/std:", "prefix", "rewrite", "-std="),
    TranslationRule("/D", "prefix", "rewrite", "-D"),
    TranslationRule("/FI", "prefix", "rewrite", "-include="),
    TranslationRule(FOREIGN_OPTION_PREFIX, "prefix", "drop"),
)


def translate_flag(flag: str, rules: Sequence[TranslationRule] = TRANSLATION_RULES) -> str | None:
    """Translate a single compiler flag.

    Args:
        flag: Flag emitted by the toolchain or declared on the rule.
        rules: Ordered rule table; defaults to :data:`TRANSLATION_RULES`.

    Returns:
        str | None: The flag to pass to clang-tidy, or ``None`` if it is dropped.
    """

    for rule in rules:
        if rule.matches(flag):
            return rule.apply(flag)
    return flag


def translate_flags(flags: Iterable[str], *, verbose: bool = False) -> list[str]:
    """Return ``flags`` with unsupported options removed and MSVC spellings remapped.

    Args:
        flags: Compiler flags in command-line order.
        verbose: Report dropped flags on the console when ``True``.

    Returns:
        list[str]: Flags clang-tidy understands, in their original order.
    """

    safe_flags: list[str] = []
    skipped_flags: list[str] = []
    for flag in flags:
        translated = translate_flag(flag)
        if translated:
            safe_flags.append(translated)
        else:
            skipped_flags.append(flag)
    if verbose and skipped_flags:
        warn("skipped flags: " + " ".join(skipped_flags))
    return safe_flags


__all__ = [
    "FOREIGN_OPTION_PREFIX",
    "TRANSLATION_RULES",
    "TranslationRule",
    "UNSUPPORTED_FLAGS",
    "WARNING_FLAG_PREFIXES",
    "translate_flag",
    "translate_flags",
]
