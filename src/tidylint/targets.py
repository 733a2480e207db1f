# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Load serialized target descriptions exported from a build graph."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from .models import LintTarget

_TARGETS_ADAPTER = TypeAdapter(list[LintTarget])


class TargetError(ValueError):
    """Raised when a targets document cannot be read or validated."""


def parse_targets(payload: object) -> list[LintTarget]:
    """Validate ``payload`` as a list of targets or a ``{"targets": [...]}`` mapping."""

    if isinstance(payload, dict):
        if "targets" not in payload:
            raise TargetError("targets document must be a list or contain a 'targets' key")
        payload = payload["targets"]
    try:
        return _TARGETS_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise TargetError(f"invalid target description: {exc}") from exc


def load_targets(path: Path) -> list[LintTarget]:
    """Read and validate the targets JSON document at ``path``.

    Raises:
        TargetError: If the file is unreadable, not JSON, or not a valid
            target description.
    """

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise TargetError(f"unable to read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise TargetError(f"{path} is not valid JSON: {exc}") from exc
    return parse_targets(payload)


__all__ = ["TargetError", "load_targets", "parse_targets"]
