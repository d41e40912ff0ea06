# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for release archive download and extraction."""

from __future__ import annotations

import io
import os
import sys
import tarfile
import zipfile
from collections.abc import Iterable, Iterator
from pathlib import Path

import pytest
import requests

from aspenfmt.errors import ArchiveIOError, NetworkError
from aspenfmt.fetch import ArchiveFetcher

URL = "https://example.test/releases/v0.1.0/aspensqlplus-fmt-0.1.0-linux-x64.zip"


class _FakeResponse:
    def __init__(self, body: bytes, *, status_code: int = 200, fail_after: int | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self._fail_after = fail_after
        self.closed = False

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for offset in range(0, len(self._body), chunk_size):
            if self._fail_after is not None and offset >= self._fail_after:
                raise requests.exceptions.ChunkedEncodingError("connection reset")
            yield self._body[offset : offset + chunk_size]

    def close(self) -> None:
        self.closed = True


class _FakeGet:
    def __init__(self, response: _FakeResponse | None = None, *, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, bool, float | None]] = []

    def __call__(self, url: str, *, stream: bool = False, timeout: float | None = None, headers=None):
        self.calls.append((url, stream, timeout))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def _zip_bytes(entries: Iterable[tuple[str, bytes]]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries:
            archive.writestr(name, data)
    return buffer.getvalue()


def _tar_bytes(entries: Iterable[tuple[str, bytes]]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, data in entries:
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def _leftover_downloads(directory: Path) -> list[Path]:
    return list(directory.glob("*.download"))


def test_fetch_extracts_zip_into_new_directory(tmp_path: Path) -> None:
    destination = tmp_path / "cache" / "bin" / "linux-x64"
    response = _FakeResponse(_zip_bytes([("aspensqlplus-fmt", b"binary"), ("LICENSE", b"MIT")]))
    get = _FakeGet(response)

    ArchiveFetcher(get=get, timeout=5.0, chunk_size=4).fetch_and_extract(URL, destination)

    assert (destination / "aspensqlplus-fmt").read_bytes() == b"binary"
    assert (destination / "LICENSE").read_text() == "MIT"
    assert get.calls == [(URL, True, 5.0)]
    assert response.closed
    assert _leftover_downloads(destination) == []


def test_fetch_overwrites_existing_files(tmp_path: Path) -> None:
    (tmp_path / "aspensqlplus-fmt").write_bytes(b"stale")
    get = _FakeGet(_FakeResponse(_zip_bytes([("aspensqlplus-fmt", b"fresh")])))

    ArchiveFetcher(get=get).fetch_and_extract(URL, tmp_path)

    assert (tmp_path / "aspensqlplus-fmt").read_bytes() == b"fresh"


def test_fetch_extracts_tarball(tmp_path: Path) -> None:
    url = "https://example.test/releases/aspensqlplus-fmt.tar.gz"
    get = _FakeGet(_FakeResponse(_tar_bytes([("aspensqlplus-fmt", b"binary")])))

    ArchiveFetcher(get=get).fetch_and_extract(url, tmp_path)

    assert (tmp_path / "aspensqlplus-fmt").read_bytes() == b"binary"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
def test_fetch_marks_executable_runnable(tmp_path: Path) -> None:
    get = _FakeGet(_FakeResponse(_zip_bytes([("aspensqlplus-fmt", b"binary")])))

    ArchiveFetcher(get=get).fetch_and_extract(URL, tmp_path, executable="aspensqlplus-fmt")

    assert os.access(tmp_path / "aspensqlplus-fmt", os.X_OK)


def test_fetch_ignores_missing_executable(tmp_path: Path) -> None:
    get = _FakeGet(_FakeResponse(_zip_bytes([("README", b"text")])))

    ArchiveFetcher(get=get).fetch_and_extract(URL, tmp_path, executable="aspensqlplus-fmt")

    assert not (tmp_path / "aspensqlplus-fmt").exists()


@pytest.mark.parametrize("status", [404, 500])
def test_fetch_http_error_raises_network_error(tmp_path: Path, status: int) -> None:
    response = _FakeResponse(b"not found", status_code=status)

    with pytest.raises(NetworkError) as excinfo:
        ArchiveFetcher(get=_FakeGet(response)).fetch_and_extract(URL, tmp_path)

    assert excinfo.value.status_code == status
    assert excinfo.value.url == URL
    assert f"HTTP {status}" in str(excinfo.value)
    assert response.closed
    assert list(tmp_path.iterdir()) == []


def test_fetch_transport_error_raises_network_error(tmp_path: Path) -> None:
    get = _FakeGet(error=requests.ConnectionError("name resolution failed"))

    with pytest.raises(NetworkError) as excinfo:
        ArchiveFetcher(get=get).fetch_and_extract(URL, tmp_path)

    assert excinfo.value.status_code is None
    assert "name resolution failed" in str(excinfo.value)


def test_fetch_interrupted_transfer_cleans_up(tmp_path: Path) -> None:
    response = _FakeResponse(_zip_bytes([("aspensqlplus-fmt", b"x" * 64)]), fail_after=8)

    with pytest.raises(NetworkError):
        ArchiveFetcher(get=_FakeGet(response), chunk_size=4).fetch_and_extract(URL, tmp_path)

    assert _leftover_downloads(tmp_path) == []
    assert response.closed


def test_fetch_corrupt_archive_raises_archive_error(tmp_path: Path) -> None:
    get = _FakeGet(_FakeResponse(b"this is not a zip archive"))

    with pytest.raises(ArchiveIOError, match="corrupt"):
        ArchiveFetcher(get=get).fetch_and_extract(URL, tmp_path)

    assert _leftover_downloads(tmp_path) == []


def _patched_central_directory(data: bytes, *, offset: int, value: int) -> bytes:
    """Overwrite one byte of the first central-directory header in ``data``."""

    patched = bytearray(data)
    header = patched.find(b"PK\x01\x02")
    patched[header + offset] = value
    return bytes(patched)


@pytest.mark.parametrize(
    ("offset", "value"),
    [
        pytest.param(8, 0x01, id="encrypted-entry"),
        pytest.param(10, 99, id="unknown-compression"),
    ],
)
def test_fetch_unextractable_entry_raises_archive_error(tmp_path: Path, offset: int, value: int) -> None:
    body = _patched_central_directory(_zip_bytes([("aspensqlplus-fmt", b"binary")]), offset=offset, value=value)
    get = _FakeGet(_FakeResponse(body))

    with pytest.raises(ArchiveIOError, match="cannot be extracted"):
        ArchiveFetcher(get=get).fetch_and_extract(URL, tmp_path, executable="aspensqlplus-fmt")

    assert _leftover_downloads(tmp_path) == []


def test_fetch_unwritable_destination_raises_archive_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file in the way")
    get = _FakeGet(_FakeResponse(_zip_bytes([("aspensqlplus-fmt", b"binary")])))

    with pytest.raises(ArchiveIOError):
        ArchiveFetcher(get=get).fetch_and_extract(URL, blocker / "bin")

    assert get.calls == []
