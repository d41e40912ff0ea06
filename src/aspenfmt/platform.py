# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host platform detection used to pick bundled binaries and release archives."""

from __future__ import annotations

import platform as _platform
import sys
from dataclasses import dataclass
from functools import cache
from typing import Final

from .constants import TOOL_NAME, WINDOWS_SUFFIX

_WINDOWS_OS: Final[str] = "win32"
_MACOS_OS: Final[str] = "darwin"

# Release assets use Node-style architecture names.
_ARCH_ALIASES: Final[dict[str, str]] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "armv7l": "arm",
    "armv6l": "arm",
}


@dataclass(frozen=True, slots=True)
class PlatformTriple:
    """Operating-system and CPU-architecture pair naming a prebuilt binary."""

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"

    @property
    def is_windows(self) -> bool:
        """Return ``True`` when the triple targets Windows."""

        return self.os == _WINDOWS_OS


def normalize_os(system: str) -> str:
    """Return the release identifier for the operating system ``system``.

    Args:
        system: Value reported by :func:`sys.platform` or :func:`platform.system`.

    Returns:
        str: ``win32`` for Windows, ``darwin`` for macOS, otherwise the lower-cased
        native identifier with any trailing version digits removed.
    """

    lowered = system.strip().lower()
    if lowered.startswith(("win", "cygwin", "msys")):
        return _WINDOWS_OS
    if lowered in {"darwin", "macos", "mac"}:
        return _MACOS_OS
    return lowered.rstrip("0123456789") or lowered


def normalize_arch(machine: str) -> str:
    """Return the release identifier for the CPU architecture ``machine``."""

    lowered = machine.strip().lower()
    return _ARCH_ALIASES.get(lowered, lowered)


@cache
def current_triple() -> PlatformTriple:
    """Return the platform triple of the running interpreter.

    The value is computed once and reused for the lifetime of the process.
    """

    return PlatformTriple(os=normalize_os(sys.platform), arch=normalize_arch(_platform.machine()))


def executable_name(triple: PlatformTriple | None = None) -> str:
    """Return the formatter executable file name for ``triple``."""

    target = triple or current_triple()
    return f"{TOOL_NAME}{WINDOWS_SUFFIX}" if target.is_windows else TOOL_NAME


__all__ = [
    "PlatformTriple",
    "current_triple",
    "executable_name",
    "normalize_arch",
    "normalize_os",
]
