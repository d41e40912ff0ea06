# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the acquisition and invocation layers."""

from __future__ import annotations


class AspenFmtError(Exception):
    """Base class for every error raised by :mod:`aspenfmt`."""


class ConfigError(AspenFmtError):
    """Raised when configuration input is invalid."""


class NetworkError(AspenFmtError):
    """Raised when a release download fails at the transport or HTTP layer."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        """Initialise the error with request metadata.

        Args:
            message: Human-readable failure description.
            url: URL that was being fetched.
            status_code: HTTP status code when the server answered, otherwise ``None``.
        """

        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ArchiveIOError(AspenFmtError, OSError):
    """Raised when a downloaded archive cannot be written or extracted locally."""


class BuildError(AspenFmtError):
    """Raised when the source build toolchain fails or cannot be started."""

    def __init__(self, detail: str, *, returncode: int | None = None) -> None:
        """Initialise the error with the captured build output.

        Args:
            detail: Captured error stream, or a generic message when it was empty.
            returncode: Exit status of the toolchain, ``None`` when it never started.
        """

        super().__init__(detail)
        self.detail = detail
        self.returncode = returncode


class SpawnError(AspenFmtError):
    """Raised when the formatter executable cannot be started."""

    def __init__(self, executable: str, reason: str) -> None:
        super().__init__(f"Unable to start '{executable}': {reason}")
        self.executable = executable
        self.reason = reason


class ProtocolError(AspenFmtError):
    """Raised when the formatter exit status violates the requested mode's convention."""

    def __init__(self, detail: str, *, exit_code: int) -> None:
        super().__init__(detail)
        self.detail = detail
        self.exit_code = exit_code


__all__ = [
    "ArchiveIOError",
    "AspenFmtError",
    "BuildError",
    "ConfigError",
    "NetworkError",
    "ProtocolError",
    "SpawnError",
]
