# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build the formatter from a local cargo project."""

from __future__ import annotations

import logging

# Bandit: subprocess usage is intentional; the toolchain command is fixed and
# executed without a shell.
import subprocess  # nosec B404 suppression_valid: Shell-free toolchain invocation.
import sys
from pathlib import Path
from typing import Final

from .errors import BuildError

LOGGER = logging.getLogger(__name__)

CARGO_BUILD_ARGS: Final[tuple[str, ...]] = ("build", "--release")


def default_cargo() -> str:
    """Return the cargo executable name for the host platform."""

    return "cargo.exe" if sys.platform == "win32" else "cargo"


class SourceBuilder:
    """Run ``cargo build --release`` inside a formatter source tree."""

    def __init__(self, *, cargo: str | None = None) -> None:
        self._cargo = cargo or default_cargo()

    @property
    def command(self) -> list[str]:
        """Return the toolchain command executed by :meth:`build`."""

        return [self._cargo, *CARGO_BUILD_ARGS]

    def build(self, project_dir: Path) -> None:
        """Compile the project rooted at ``project_dir`` in release mode.

        The toolchain's error stream is accumulated line by line while it runs.

        Args:
            project_dir: Directory containing ``Cargo.toml``.

        Raises:
            BuildError: If the toolchain cannot be started or exits non-zero.
        """

        LOGGER.debug("building %s with %s", project_dir, " ".join(self.command))
        try:
            # Bandit: fixed toolchain command, no shell expansion.
            process = subprocess.Popen(  # nosec B603 - controlled arguments, not user supplied
                self.command,
                cwd=str(project_dir),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise BuildError(f"Unable to start {self._cargo}: {exc}") from exc

        chunks: list[str] = []
        with process:
            if process.stderr is not None:
                for line in process.stderr:
                    chunks.append(line)
            returncode = process.wait()

        if returncode != 0:
            stderr = "".join(chunks)
            detail = stderr or f"cargo build exited with code {returncode}"
            raise BuildError(detail, returncode=returncode)


__all__ = ["SourceBuilder", "default_cargo"]
