# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Formatter settings and layered loading from TOML sources."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_INDENT,
    DEFAULT_LINE_WIDTH,
    DEFAULT_RELEASE_VERSION,
    DUPLICATE_VARIABLE_CODE,
    UNUSED_VARIABLE_CODE,
)
from .errors import ConfigError
from .models import FilterPolicy, FormatOptions, ResolutionOptions

CONFIG_FILENAME: Final[str] = ".aspenfmt.toml"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "aspenfmt"
DIAGNOSTICS_KEY: Final[str] = "diagnostics"
# Key used by earlier editor builds for the unused-variable switch.
LEGACY_UNUSED_KEY: Final[str] = "enable_unused_variable_diagnostics"

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _default_categories() -> dict[str, bool]:
    return {UNUSED_VARIABLE_CODE: True, DUPLICATE_VARIABLE_CODE: True}


class FormatterSettings(BaseModel):
    """User-facing configuration surface consumed by the formatter integration.

    Attributes:
        path: Custom executable path; blank means resolve automatically.
        line_width: Maximum line width passed to the formatter.
        indent: Indentation width passed to the formatter.
        uppercase_keywords: Whether SQL keywords are upper-cased.
        auto_build: Allow building the formatter from workspace sources.
        auto_download: Allow downloading a release archive.
        version: Release version used for downloads.
        diagnostics: Per-code switches for reported diagnostics.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    path: str = ""
    line_width: int = Field(default=DEFAULT_LINE_WIDTH, gt=0)
    indent: int = Field(default=DEFAULT_INDENT, ge=2, le=4)
    uppercase_keywords: bool = True
    auto_build: bool = True
    auto_download: bool = True
    version: str = DEFAULT_RELEASE_VERSION
    diagnostics: dict[str, bool] = Field(default_factory=_default_categories)

    @field_validator("version")
    @classmethod
    def _strip_version(cls, value: str) -> str:
        stripped = value.strip().removeprefix("v")
        if not stripped:
            raise ValueError("version must not be empty")
        return stripped

    @field_validator("diagnostics")
    @classmethod
    def _merge_default_categories(cls, value: dict[str, bool]) -> dict[str, bool]:
        return {**_default_categories(), **value}

    def resolution_options(self) -> ResolutionOptions:
        """Return the options consumed by :class:`~aspenfmt.resolver.BinaryResolver`."""

        return ResolutionOptions(
            custom_path=self.path or None,
            auto_build=self.auto_build,
            auto_download=self.auto_download,
            version=self.version,
        )

    def format_options(self) -> FormatOptions:
        """Return the layout switches forwarded in formatting mode."""

        return FormatOptions(
            line_width=self.line_width,
            indent=self.indent,
            uppercase_keywords=self.uppercase_keywords,
        )

    def filter_policy(self) -> FilterPolicy:
        """Return the diagnostic filter policy derived from ``diagnostics``."""

        return FilterPolicy.from_mapping(self.diagnostics)


class TomlConfigSource:
    """Load a settings table from a standalone TOML document."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        self.path = path
        self._env = env if env is not None else os.environ

    def load(self) -> dict[str, Any]:
        """Return the raw settings table, or an empty mapping when the file is absent.

        Raises:
            ConfigError: If the document is not valid TOML.
        """

        document = self._read()
        return _expand_env(document, self._env)

    def describe(self) -> str:
        return f"TOML configuration at {self.path}"

    def _read(self) -> dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            with self.path.open("rb") as handle:
                return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {self.path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Unable to read {self.path}: {exc}") from exc


class PyProjectConfigSource(TomlConfigSource):
    """Read settings from ``[tool.aspenfmt]`` within ``pyproject.toml``."""

    def load(self) -> dict[str, Any]:
        data = super().load()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return dict(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.path})"


def load_settings(
    root: Path,
    *,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> FormatterSettings:
    """Return settings merged from defaults, project files and ``overrides``.

    Precedence, lowest first: built-in defaults, ``.aspenfmt.toml``,
    ``[tool.aspenfmt]`` in ``pyproject.toml``, then ``overrides``. Keys may be
    written in snake_case, kebab-case or camelCase.

    Args:
        root: Project directory searched for configuration files.
        overrides: Highest-precedence values, typically from CLI flags.
        env: Environment used to expand ``$VAR`` references; defaults to ``os.environ``.

    Returns:
        FormatterSettings: Validated settings.

    Raises:
        ConfigError: If a source is unreadable or a value is invalid.
    """

    sources = (
        TomlConfigSource(root / CONFIG_FILENAME, env=env),
        PyProjectConfigSource(root / PYPROJECT_FILENAME, env=env),
    )
    merged: dict[str, Any] = {}
    for source in sources:
        merged = _merge(merged, normalise_keys(source.load(), origin=source.describe()))
    if overrides:
        merged = _merge(merged, normalise_keys(overrides, origin="overrides"))
    try:
        return FormatterSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid aspenfmt configuration: {exc}") from exc


def normalise_keys(data: Mapping[str, Any], *, origin: str) -> dict[str, Any]:
    """Return ``data`` with snake_case keys and legacy switches folded in.

    Args:
        data: Raw settings table.
        origin: Source description used in error messages.

    Returns:
        dict[str, Any]: Normalised settings table.

    Raises:
        ConfigError: If the ``diagnostics`` entry is not a table.
    """

    result: dict[str, Any] = {}
    legacy_unused: list[Any] = []
    for raw_key, value in data.items():
        key = _snake_case(str(raw_key))
        if key == LEGACY_UNUSED_KEY:
            legacy_unused.append(value)
            continue
        if key == DIAGNOSTICS_KEY:
            if not isinstance(value, Mapping):
                raise ConfigError(f"{origin}: 'diagnostics' must be a table of code = bool")
            result.setdefault(DIAGNOSTICS_KEY, {}).update({str(code): flag for code, flag in value.items()})
            continue
        result[key] = value
    if legacy_unused:
        # An explicit diagnostics entry takes precedence over the legacy switch.
        result.setdefault(DIAGNOSTICS_KEY, {}).setdefault(UNUSED_VARIABLE_CODE, legacy_unused[-1])
    return result


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).replace("-", "_").lower()


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda match: env.get(match.group(1) or match.group(2), match.group(0)), value)
    if isinstance(value, Mapping):
        return {k: _expand_env_value(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(v, env) for v in value]
    return value


__all__ = [
    "CONFIG_FILENAME",
    "FormatterSettings",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_settings",
    "normalise_keys",
]
