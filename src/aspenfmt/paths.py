# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Default locations for bundled binaries and the download cache."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from .models import ResolverContext

STORAGE_ENV: Final[str] = "ASPENFMT_STORAGE"
EXTENSION_ROOT_ENV: Final[str] = "ASPENFMT_EXTENSION_ROOT"
_CACHE_DIRNAME: Final[str] = "aspenfmt"


def default_storage_root(env: Mapping[str, str] | None = None) -> Path:
    """Return the cache root, honouring ``ASPENFMT_STORAGE`` and ``XDG_CACHE_HOME``."""

    environ = os.environ if env is None else env
    override = environ.get(STORAGE_ENV)
    if override:
        return Path(override).expanduser()
    xdg_cache = environ.get("XDG_CACHE_HOME")
    base = Path(xdg_cache).expanduser() if xdg_cache else Path.home() / ".cache"
    return base / _CACHE_DIRNAME


def default_extension_root(env: Mapping[str, str] | None = None) -> Path:
    """Return the directory whose ``bin/<triple>`` holds bundled binaries.

    Defaults to the installed package directory.
    """

    environ = os.environ if env is None else env
    override = environ.get(EXTENSION_ROOT_ENV)
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parent


def build_context(
    *,
    workspace_root: Path | None,
    storage_root: Path | None = None,
    extension_root: Path | None = None,
) -> ResolverContext:
    """Return a :class:`ResolverContext` filling unset anchors with defaults."""

    return ResolverContext(
        extension_root=(extension_root or default_extension_root()).resolve(),
        storage_root=(storage_root or default_storage_root()).resolve(),
        workspace_root=workspace_root.resolve() if workspace_root is not None else None,
    )


__all__ = [
    "EXTENSION_ROOT_ENV",
    "STORAGE_ENV",
    "build_context",
    "default_extension_root",
    "default_storage_root",
]
