# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Derive a clang-tidy ``-header-filter`` regex from a target's headers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath
from typing import Final

CATCH_ALL_REGEX: Final[str] = ".*"


def is_parent_in_list(directory: str, candidates: Sequence[str]) -> bool:
    """Return ``True`` when another entry of ``candidates`` prefixes ``directory``."""

    return any(directory != item and directory.startswith(item) for item in candidates)


def common_prefixes(headers: Iterable[str]) -> list[str]:
    """Return the independent header directories of ``headers``.

    Directories are collected in first-seen order and any directory that has
    another collected directory as a prefix is discarded.

    Args:
        headers: Header file paths, relative to the workspace.

    Returns:
        list[str]: Directories none of which is a prefix of another.
    """

    dirs: list[str] = []
    for header in headers:
        directory = str(PurePosixPath(header).parent)
        if directory == ".":
            directory = ""
        if directory not in dirs:
            dirs.append(directory)
    return [directory for directory in dirs if not is_parent_in_list(directory, dirs)]


def aggregate_regex(headers: Iterable[str]) -> str | None:
    """Build the header filter regex for ``headers``.

    A single directory yields a regex anchored on it. Several unrelated
    directories fall back to :data:`CATCH_ALL_REGEX`.

    Args:
        headers: Direct headers of the target being linted.

    Returns:
        str | None: Regex for ``-header-filter``, or ``None`` when there are no
        headers outside the workspace root.
    """

    dirs = common_prefixes(headers)
    # Headers at the workspace root leave only the empty directory behind.
    if not any(dirs):
        return None
    if len(dirs) == 1:
        return f".*{dirs[0]}/.*"
    return CATCH_ALL_REGEX


__all__ = ["CATCH_ALL_REGEX", "aggregate_regex", "common_prefixes", "is_parent_in_list"]
