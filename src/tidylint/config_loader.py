# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration loading.

Precedence, lowest first: built-in defaults, ``[tool.tidylint]`` in
``pyproject.toml``, then ``.tidylint.toml`` (or the file passed with
``--config``). Every TOML layer may pull in other files through an
``include`` key, resolved relative to the including file, and may reference
environment variables as ``$VAR`` or ``${VAR}``.
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from .config import ConfigError, TidyLintConfig

INCLUDE_KEY: Final[str] = "include"
PROJECT_CONFIG_NAME: Final[str] = ".tidylint.toml"
PYPROJECT_NAME: Final[str] = "pyproject.toml"

_ENV_REFERENCE = re.compile(r"\$\{(?P<braced>[^}]+)\}|\$(?P<bare>\w+)")

Selector = Callable[[Mapping[str, Any]], Mapping[str, Any]]


class ConfigSource(Protocol):
    """One configuration layer."""

    def load(self) -> Mapping[str, Any]: ...

    def describe(self) -> str: ...


def merge_tables(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated by ``override``; nested tables merge, everything else is replaced."""

    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_tables(current, value)
        else:
            merged[key] = value
    return merged


def expand_env(value: Any, env: Mapping[str, str]) -> Any:
    """Substitute ``$VAR``/``${VAR}`` in every string of ``value``; unknown names are left as written."""

    if isinstance(value, str):
        return _ENV_REFERENCE.sub(lambda m: env.get(m.group("braced") or m.group("bare"), m.group(0)), value)
    if isinstance(value, Mapping):
        return {key: expand_env(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env(item, env) for item in value]
    return value


def _whole_document(document: Mapping[str, Any]) -> Mapping[str, Any]:
    return document


def _tool_table(document: Mapping[str, Any]) -> Mapping[str, Any]:
    tool = document.get("tool")
    table = tool.get("tidylint") if isinstance(tool, Mapping) else None
    return table if isinstance(table, Mapping) else {}


def _parse_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc


def _include_paths(raw: object, base_dir: Path) -> list[Path]:
    if raw is None:
        return []
    entries = [raw] if isinstance(raw, str) else raw
    if not isinstance(entries, list) or not all(isinstance(entry, str) for entry in entries):
        raise ConfigError(f"'{INCLUDE_KEY}' must be a path or a list of paths, got {raw!r}")
    return [base_dir / entry for entry in entries]


@dataclass(frozen=True)
class TomlConfigSource:
    """A TOML file plus everything it includes.

    ``select`` picks the tidylint table, its ``include`` key included, out of
    the top-level document. Included files always contribute their whole
    document.
    """

    path: Path
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    select: Selector = _whole_document
    label: str = "TOML configuration"

    def load(self) -> Mapping[str, Any]:
        if not self.path.exists():
            return {}
        return expand_env(self._read_tree(self.path, (), self.select), self.env)

    def _read_tree(self, path: Path, chain: tuple[Path, ...], select: Selector) -> dict[str, Any]:
        resolved = path.resolve()
        if resolved in chain:
            cycle = " -> ".join(str(entry) for entry in (*chain, resolved))
            raise ConfigError(f"Circular include detected: {cycle}")
        table = dict(select(_parse_toml(resolved)))
        includes = _include_paths(table.pop(INCLUDE_KEY, None), resolved.parent)

        merged: dict[str, Any] = {}
        for include in includes:
            if not include.exists():
                raise ConfigError(f"{resolved} includes missing file {include}")
            merged = merge_tables(merged, self._read_tree(include, (*chain, resolved), _whole_document))
        return merge_tables(merged, table)

    def describe(self) -> str:
        return f"{self.label} at {self.path}"


def pyproject_source(path: Path, *, env: Mapping[str, str] | None = None) -> TomlConfigSource:
    """Return the layer reading ``[tool.tidylint]`` from ``path``."""

    return TomlConfigSource(
        path,
        env=dict(os.environ) if env is None else env,
        select=_tool_table,
        label="[tool.tidylint]",
    )


class DefaultConfigSource:
    """The model defaults, so that later layers always merge over a complete document."""

    def load(self) -> Mapping[str, Any]:
        return TidyLintConfig().to_dict()

    def describe(self) -> str:
        return "built-in defaults"


class ConfigLoader:
    """Merge configuration layers and validate the result."""

    def __init__(self, *, project_root: Path, sources: Sequence[ConfigSource]) -> None:
        if not sources:
            raise ValueError("at least one configuration source is required")
        self._root = project_root.resolve()
        self._sources = tuple(sources)

    @classmethod
    def for_root(
        cls,
        project_root: Path,
        *,
        project_config: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ConfigLoader:
        """Return a loader for the standard layers of ``project_root``.

        Args:
            project_root: Workspace root holding ``pyproject.toml`` and ``.tidylint.toml``.
            project_config: File read instead of ``.tidylint.toml``.
            env: Variables for ``$VAR`` expansion; defaults to ``os.environ``.
        """

        root = project_root.resolve()
        environ = dict(os.environ) if env is None else env
        sources: list[ConfigSource] = [DefaultConfigSource()]
        if (root / PYPROJECT_NAME).exists():
            sources.append(pyproject_source(root / PYPROJECT_NAME, env=environ))
        sources.append(TomlConfigSource(project_config or root / PROJECT_CONFIG_NAME, env=environ))
        return cls(project_root=root, sources=sources)

    def load(self) -> TidyLintConfig:
        """Return the validated configuration.

        Relative ``execution.output_dir`` values are anchored at the project root.

        Raises:
            ConfigError: If a layer cannot be read or the merged settings are invalid.
        """

        merged: dict[str, Any] = {}
        applied = "built-in defaults"
        for source in self._sources:
            fragment = source.load()
            if fragment:
                merged = merge_tables(merged, fragment)
                applied = source.describe()
        try:
            config = TidyLintConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration (last applied: {applied}): {exc}") from exc
        if not config.execution.output_dir.is_absolute():
            config.execution.output_dir = self._root / config.execution.output_dir
        return config


def load_config(project_root: Path, *, project_config: Path | None = None) -> TidyLintConfig:
    """Load the configuration of ``project_root``."""

    return ConfigLoader.for_root(project_root, project_config=project_config).load()


__all__ = [
    "ConfigLoader",
    "ConfigSource",
    "DefaultConfigSource",
    "PROJECT_CONFIG_NAME",
    "TomlConfigSource",
    "expand_env",
    "load_config",
    "merge_tables",
    "pyproject_source",
]
