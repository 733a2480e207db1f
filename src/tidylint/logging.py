# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status messages (``info``, ``ok``, ``warn``, ``fail``) for tidylint runs."""

from __future__ import annotations

from typing import Final, Literal

from rich.text import Text

from .console import detect_tty, get_console_manager

Level = Literal["info", "ok", "warn", "fail"]

# level -> (emoji prefix, rich style)
_LEVELS: Final[dict[Level, tuple[str, str]]] = {
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "bold red"),
}


def emit(level: Level, msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Print ``msg`` at ``level`` on the status console.

    Args:
        level: Message level selecting the emoji prefix and colour.
        msg: Message text; printed literally, never parsed as Rich markup.
        use_emoji: Prefix the message with the level's emoji.
        use_color: Force colour on or off; ``None`` follows terminal detection.
    """

    color = detect_tty() if use_color is None else use_color
    prefix, style = _LEVELS[level]
    text = Text(f"{prefix if use_emoji else ''}{msg}")
    if color:
        text.stylize(style)
    get_console_manager().get(color=color, emoji=use_emoji).print(text)


def info(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    emit("info", msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    emit("ok", msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    emit("warn", msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    emit("fail", msg, use_emoji=use_emoji, use_color=use_color)


__all__ = ["Level", "emit", "fail", "info", "ok", "warn"]
