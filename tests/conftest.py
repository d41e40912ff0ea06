# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from aspenfmt.models import ResolverContext
from aspenfmt.platform import PlatformTriple


@pytest.fixture
def linux_triple() -> PlatformTriple:
    """Return a fixed Linux x64 triple so paths are host independent."""
    return PlatformTriple(os="linux", arch="x64")


@pytest.fixture
def resolver_context(tmp_path: Path) -> ResolverContext:
    """Return a context whose anchors live in isolated temporary directories."""
    extension_root = tmp_path / "extension"
    storage_root = tmp_path / "storage"
    workspace_root = tmp_path / "workspace"
    for directory in (extension_root, storage_root, workspace_root):
        directory.mkdir()
    return ResolverContext(
        extension_root=extension_root,
        storage_root=storage_root,
        workspace_root=workspace_root,
    )
