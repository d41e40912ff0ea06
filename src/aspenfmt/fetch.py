# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Download release archives and unpack the formatter executable."""

from __future__ import annotations

import contextlib
import logging
import stat
import sys
import tarfile
import tempfile
import zipfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Final, Protocol

import requests

from .errors import ArchiveIOError, NetworkError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Final[float] = 60.0
DEFAULT_CHUNK_SIZE: Final[int] = 64 * 1024
HTTP_ERROR_THRESHOLD: Final[int] = 400
TEMP_SUFFIX: Final[str] = ".download"
_TAR_SUFFIXES: Final[tuple[str, ...]] = (".tar.gz", ".tgz")
_EXECUTABLE_BITS: Final[int] = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class _HttpResponse(Protocol):
    """Minimal subset of ``requests.Response`` used by downloads."""

    status_code: int

    def iter_content(self, chunk_size: int = 1) -> Iterable[bytes]:
        """Yield response body chunks."""

    def close(self) -> None:
        """Release the underlying connection."""


class _RequestsGet(Protocol):
    """Callable compatible with ``requests.get`` for the parameters we use."""

    def __call__(
        self,
        url: str,
        *,
        stream: bool = False,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> _HttpResponse:
        """Return an HTTP response for ``url``."""


class ArchiveFetcher:
    """Stream a release archive to disk and extract it into a directory.

    Args:
        get: Callable compatible with :func:`requests.get`; injected by tests.
        timeout: Connect/read timeout in seconds handed to ``requests``.
        chunk_size: Size of body chunks written to the temporary archive.
    """

    def __init__(
        self,
        *,
        get: _RequestsGet | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._get: _RequestsGet = get if get is not None else requests.get
        self._timeout = timeout
        self._chunk_size = chunk_size

    def fetch_and_extract(self, url: str, destination: Path, *, executable: str | None = None) -> None:
        """Download ``url`` and extract every archive entry into ``destination``.

        Args:
            url: HTTPS location of the release archive.
            destination: Directory receiving the extracted files; created if missing.
            executable: File name of the extracted executable to mark runnable.

        Raises:
            NetworkError: If the transport fails or the server answers with an error status.
            ArchiveIOError: If the archive cannot be written or extracted locally.
        """

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveIOError(f"Unable to create {destination}: {exc}") from exc

        archive_path = self._download(url, destination)
        try:
            self._extract(archive_path, destination, archive_name=url.rstrip("/").rsplit("/", 1)[-1])
        finally:
            with contextlib.suppress(OSError):
                archive_path.unlink()

        if executable is not None and sys.platform != "win32":
            with contextlib.suppress(OSError):
                _make_executable(destination / executable)

    def _download(self, url: str, destination: Path) -> Path:
        """Stream the response body for ``url`` into a temporary file.

        Returns:
            Path: Location of the temporary archive inside ``destination``.
        """

        LOGGER.debug("downloading %s", url)
        try:
            response = self._get(url, stream=True, timeout=self._timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"Request for {url} failed: {exc}", url=url) from exc

        try:
            if response.status_code >= HTTP_ERROR_THRESHOLD:
                raise NetworkError(f"HTTP {response.status_code} for {url}", url=url, status_code=response.status_code)
            return self._write_body(response, url=url, destination=destination)
        finally:
            response.close()

    def _write_body(self, response: _HttpResponse, *, url: str, destination: Path) -> Path:
        try:
            handle = tempfile.NamedTemporaryFile(dir=destination, suffix=TEMP_SUFFIX, delete=False)
        except OSError as exc:
            raise ArchiveIOError(f"Unable to create a temporary file in {destination}: {exc}") from exc

        archive_path = Path(handle.name)
        try:
            with handle:
                for chunk in response.iter_content(chunk_size=self._chunk_size):
                    if chunk:
                        handle.write(chunk)
        except requests.RequestException as exc:
            with contextlib.suppress(OSError):
                archive_path.unlink()
            raise NetworkError(f"Transfer from {url} was interrupted: {exc}", url=url) from exc
        except OSError as exc:
            with contextlib.suppress(OSError):
                archive_path.unlink()
            raise ArchiveIOError(f"Unable to write {archive_path}: {exc}") from exc
        return archive_path

    @staticmethod
    def _extract(archive_path: Path, destination: Path, *, archive_name: str) -> None:
        """Unpack ``archive_path`` into ``destination``, overwriting existing files."""

        try:
            if archive_name.endswith(_TAR_SUFFIXES):
                with tarfile.open(archive_path, "r:gz") as archive:
                    archive.extractall(destination, filter="data")
                return
            with zipfile.ZipFile(archive_path) as archive:
                archive.extractall(destination)
        except (zipfile.BadZipFile, tarfile.TarError) as exc:
            raise ArchiveIOError(f"Downloaded archive {archive_name} is corrupt: {exc}") from exc
        # zipfile reports encrypted entries and unknown compression methods this way.
        except (RuntimeError, NotImplementedError, ValueError) as exc:
            raise ArchiveIOError(f"Downloaded archive {archive_name} cannot be extracted: {exc}") from exc
        except OSError as exc:
            raise ArchiveIOError(f"Unable to extract {archive_name} into {destination}: {exc}") from exc


def _make_executable(path: Path) -> None:
    """Set executable permissions on ``path`` for user/group/other."""

    path.chmod(path.stat().st_mode | _EXECUTABLE_BITS)


__all__ = ["ArchiveFetcher"]
