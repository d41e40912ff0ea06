# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Constants describing the external formatter and its release layout."""

from __future__ import annotations

from typing import Final

TOOL_NAME: Final[str] = "aspensqlplus-fmt"
WINDOWS_SUFFIX: Final[str] = ".exe"
RELEASE_BASE_URL: Final[str] = "https://github.com/GermanHeim/aspensqlplus-fmt/releases/download"
RELEASE_ARCHIVE_SUFFIX: Final[str] = ".zip"
DEFAULT_RELEASE_VERSION: Final[str] = "0.1.0"

BIN_DIRNAME: Final[str] = "bin"
SOURCE_PROJECT_DIRNAME: Final[str] = "formatter"
CARGO_MANIFEST: Final[str] = "Cargo.toml"
CARGO_TARGET_DIRNAME: Final[str] = "target"
CARGO_RELEASE_PROFILE: Final[str] = "release"
CARGO_DEBUG_PROFILE: Final[str] = "debug"

LINE_WIDTH_FLAG: Final[str] = "--line-width"
INDENT_FLAG: Final[str] = "--indent"
UPPERCASE_KEYWORDS_FLAG: Final[str] = "--uppercase-keywords"
CHECK_FLAG: Final[str] = "--check"

DEFAULT_LINE_WIDTH: Final[int] = 88
DEFAULT_INDENT: Final[int] = 2

UNUSED_VARIABLE_CODE: Final[str] = "unused-variable"
DUPLICATE_VARIABLE_CODE: Final[str] = "duplicate-variable"

__all__ = [
    "BIN_DIRNAME",
    "CARGO_DEBUG_PROFILE",
    "CARGO_MANIFEST",
    "CARGO_RELEASE_PROFILE",
    "CARGO_TARGET_DIRNAME",
    "CHECK_FLAG",
    "DEFAULT_INDENT",
    "DEFAULT_LINE_WIDTH",
    "DEFAULT_RELEASE_VERSION",
    "DUPLICATE_VARIABLE_CODE",
    "INDENT_FLAG",
    "LINE_WIDTH_FLAG",
    "RELEASE_ARCHIVE_SUFFIX",
    "RELEASE_BASE_URL",
    "SOURCE_PROJECT_DIRNAME",
    "TOOL_NAME",
    "UNUSED_VARIABLE_CODE",
    "UPPERCASE_KEYWORDS_FLAG",
    "WINDOWS_SUFFIX",
]
