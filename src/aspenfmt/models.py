# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pydantic models describing resolution inputs, process results and diagnostics."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import (
    DEFAULT_INDENT,
    DEFAULT_LINE_WIDTH,
    DEFAULT_RELEASE_VERSION,
    INDENT_FLAG,
    LINE_WIDTH_FLAG,
    UPPERCASE_KEYWORDS_FLAG,
)


class DiagnosticSeverity(str, Enum):
    """Severity tokens emitted by the formatter's checking mode."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class InvocationMode(str, Enum):
    """Exit-code convention applied when classifying a formatter run."""

    FORMAT = "format"
    CHECK = "check"


class ResolutionOptions(BaseModel):
    """Caller-supplied switches for one binary resolution attempt."""

    model_config = ConfigDict(frozen=True)

    custom_path: str | None = None
    auto_build: bool = False
    auto_download: bool = False
    version: str = DEFAULT_RELEASE_VERSION

    @property
    def trimmed_custom_path(self) -> str | None:
        """Return the stripped custom path, or ``None`` when it is blank."""

        if self.custom_path is None:
            return None
        stripped = self.custom_path.strip()
        return stripped or None


class ResolverContext(BaseModel):
    """Filesystem anchors the resolver inspects.

    Attributes:
        extension_root: Directory shipping bundled binaries under ``bin/<triple>``.
        storage_root: Writable root that hosts the per-platform download cache.
        workspace_root: Open workspace that may contain the formatter sources.
    """

    model_config = ConfigDict(frozen=True)

    extension_root: Path
    storage_root: Path
    workspace_root: Path | None = None


class InvocationResult(BaseModel):
    """Captured outcome of a single formatter process run."""

    model_config = ConfigDict(frozen=True)

    exit_code: int
    stdout: str = ""
    stderr: str = ""


class DiagnosticRecord(BaseModel):
    """Diagnostic parsed from one report line, using 0-based positions."""

    model_config = ConfigDict(frozen=True)

    line_index: int = Field(ge=0)
    start_column: int = Field(ge=0)
    end_column: int = Field(ge=0)
    severity: DiagnosticSeverity
    message: str
    code: str

    @model_validator(mode="after")
    def _check_span(self) -> DiagnosticRecord:
        if self.start_column > self.end_column:
            raise ValueError("start_column must not exceed end_column")
        return self


class FilterPolicy(BaseModel):
    """Per-category switches deciding which diagnostic codes are reported."""

    model_config = ConfigDict(frozen=True)

    categories: dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, bool] | None) -> FilterPolicy:
        """Build a policy from a plain ``code -> enabled`` mapping."""

        return cls(categories=dict(mapping or {}))

    def is_enabled(self, code: str) -> bool:
        """Return ``False`` only when ``code`` is explicitly disabled."""

        return self.categories.get(code, True)


class FormatOptions(BaseModel):
    """Layout switches forwarded to the formatter in formatting mode."""

    model_config = ConfigDict(frozen=True)

    line_width: int = Field(default=DEFAULT_LINE_WIDTH, gt=0)
    indent: int = Field(default=DEFAULT_INDENT, ge=2, le=4)
    uppercase_keywords: bool = True

    @field_validator("line_width", "indent", mode="before")
    @classmethod
    def _reject_bool(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("expected an integer, not a boolean")
        return value

    def to_arguments(self) -> list[str]:
        """Return the flag/value pairs understood by the formatter.

        Returns:
            list[str]: Arguments selecting line width, indent and keyword case.
        """

        return [
            LINE_WIDTH_FLAG,
            str(self.line_width),
            INDENT_FLAG,
            str(self.indent),
            UPPERCASE_KEYWORDS_FLAG,
            "true" if self.uppercase_keywords else "false",
        ]


__all__ = [
    "DiagnosticRecord",
    "DiagnosticSeverity",
    "FilterPolicy",
    "FormatOptions",
    "InvocationMode",
    "InvocationResult",
    "ResolutionOptions",
    "ResolverContext",
]
