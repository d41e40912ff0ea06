# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate or obtain the formatter executable through ordered fallback tiers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .build import SourceBuilder
from .constants import (
    BIN_DIRNAME,
    CARGO_DEBUG_PROFILE,
    CARGO_MANIFEST,
    CARGO_RELEASE_PROFILE,
    CARGO_TARGET_DIRNAME,
    RELEASE_ARCHIVE_SUFFIX,
    RELEASE_BASE_URL,
    SOURCE_PROJECT_DIRNAME,
    TOOL_NAME,
)
from .errors import ArchiveIOError, BuildError, NetworkError
from .fetch import ArchiveFetcher
from .logging import warn
from .models import ResolutionOptions, ResolverContext
from .platform import PlatformTriple, current_triple, executable_name

LOGGER = logging.getLogger(__name__)

WarningSink = Callable[[str], None]

WARNING_PREFIX: Final[str] = "AspenSQLplus-fmt"


def release_url(version: str, triple: PlatformTriple, *, base_url: str = RELEASE_BASE_URL) -> str:
    """Return the release archive URL for ``version`` on ``triple``.

    Example:
        ``<base>/v0.1.0/aspensqlplus-fmt-0.1.0-linux-x64.zip``
    """

    archive = f"{TOOL_NAME}-{version}-{triple}{RELEASE_ARCHIVE_SUFFIX}"
    return f"{base_url.rstrip('/')}/v{version}/{archive}"


def bundled_path(context: ResolverContext, triple: PlatformTriple) -> Path:
    """Return where a binary shipped alongside the integration would live."""

    return context.extension_root / BIN_DIRNAME / str(triple) / executable_name(triple)


def cache_directory(context: ResolverContext, triple: PlatformTriple) -> Path:
    """Return the per-platform cache subdirectory under the storage root."""

    return context.storage_root / BIN_DIRNAME / str(triple)


@dataclass(frozen=True, slots=True)
class _ResolutionRun:
    """Inputs shared by every tier of one :meth:`BinaryResolver.resolve` call."""

    context: ResolverContext
    options: ResolutionOptions
    triple: PlatformTriple

    @property
    def exe_name(self) -> str:
        return executable_name(self.triple)

    @property
    def cache_dir(self) -> Path:
        return cache_directory(self.context, self.triple)

    @property
    def cached_binary(self) -> Path:
        return self.cache_dir / self.exe_name


Tier = Callable[[_ResolutionRun], str | None]


class BinaryResolver:
    """Resolve the formatter executable, falling back tier by tier.

    Tiers run in a fixed order and the first one returning a location wins:
    custom path, bundled binary, cached download, fresh download, source build,
    and finally the bare command name for a ``PATH`` lookup at spawn time.
    Download and build failures are reported through ``on_warning`` and never
    abort resolution.

    Args:
        fetcher: Archive fetcher used by the download tier.
        builder: Source builder used by the build tier.
        on_warning: Sink for advisory messages; defaults to the console ``warn`` helper.
        base_url: Release download base URL.
        triple: Platform override; defaults to the running host.
    """

    def __init__(
        self,
        *,
        fetcher: ArchiveFetcher | None = None,
        builder: SourceBuilder | None = None,
        on_warning: WarningSink | None = None,
        base_url: str = RELEASE_BASE_URL,
        triple: PlatformTriple | None = None,
    ) -> None:
        self._fetcher = fetcher or ArchiveFetcher()
        self._builder = builder or SourceBuilder()
        self._on_warning: WarningSink = on_warning or warn
        self._base_url = base_url
        self._triple = triple

    @property
    def tiers(self) -> tuple[Tier, ...]:
        """Return the resolution tiers in evaluation order."""

        return (
            self._from_custom_path,
            self._from_bundle,
            self._from_cache,
            self._from_download,
            self._from_build,
        )

    def resolve(self, context: ResolverContext, options: ResolutionOptions) -> str:
        """Return the executable location to spawn.

        Args:
            context: Filesystem anchors for bundled, cached and source binaries.
            options: Switches for this resolution attempt.

        Returns:
            str: Absolute path, the caller's custom path, or the bare executable name.
        """

        run = _ResolutionRun(context=context, options=options, triple=self._triple or current_triple())
        for tier in self.tiers:
            location = tier(run)
            if location is not None:
                LOGGER.debug("resolved %s via %s", location, tier.__name__)
                return location
        LOGGER.debug("falling back to PATH lookup for %s", run.exe_name)
        return run.exe_name

    @staticmethod
    def _from_custom_path(run: _ResolutionRun) -> str | None:
        return run.options.trimmed_custom_path

    @staticmethod
    def _from_bundle(run: _ResolutionRun) -> str | None:
        candidate = bundled_path(run.context, run.triple)
        return str(candidate) if candidate.exists() else None

    def _from_cache(self, run: _ResolutionRun) -> str | None:
        if run.cached_binary.exists():
            return str(run.cached_binary)
        try:
            run.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._on_warning(f"{WARNING_PREFIX}: cannot create cache directory {run.cache_dir} ({exc}).")
        return None

    def _from_download(self, run: _ResolutionRun) -> str | None:
        if not run.options.auto_download:
            return None
        url = release_url(run.options.version, run.triple, base_url=self._base_url)
        try:
            self._fetcher.fetch_and_extract(url, run.cache_dir, executable=run.exe_name)
        except (NetworkError, ArchiveIOError) as exc:
            self._on_warning(f"{WARNING_PREFIX}: download failed ({exc}), falling back.")
            return None
        return str(run.cached_binary) if run.cached_binary.exists() else None

    def _from_build(self, run: _ResolutionRun) -> str | None:
        if not run.options.auto_build or run.context.workspace_root is None:
            return None
        project_dir = run.context.workspace_root / SOURCE_PROJECT_DIRNAME
        if not (project_dir / CARGO_MANIFEST).exists():
            return None
        try:
            self._builder.build(project_dir)
        except BuildError as exc:
            self._on_warning(f"{WARNING_PREFIX}: auto-build failed: {exc}")
            return None
        for profile in (CARGO_RELEASE_PROFILE, CARGO_DEBUG_PROFILE):
            candidate = project_dir / CARGO_TARGET_DIRNAME / profile / run.exe_name
            if candidate.exists():
                return str(candidate)
        return None


def resolve_binary(
    context: ResolverContext,
    options: ResolutionOptions,
    *,
    on_warning: WarningSink | None = None,
) -> str:
    """Resolve the formatter executable with the default fetcher and builder."""

    return BinaryResolver(on_warning=on_warning).resolve(context, options)


__all__ = [
    "BinaryResolver",
    "bundled_path",
    "cache_directory",
    "release_url",
    "resolve_binary",
]
