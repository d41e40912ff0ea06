# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run the formatter over standard input and classify its exit status."""

from __future__ import annotations

import logging
import shutil

# Bandit: subprocess usage is intentional; we run the resolved formatter with an
# argument list and never through a shell.
import subprocess  # nosec B404 suppression_valid: Shell-free subprocess wrapper enforces safe execution.
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final

from .constants import TOOL_NAME
from .errors import ProtocolError, SpawnError
from .models import InvocationMode, InvocationResult

LOGGER = logging.getLogger(__name__)

STREAM_ENCODING: Final[str] = "utf-8"
CHECK_SUCCESS_CODES: Final[frozenset[int]] = frozenset({0, 1})
FORMAT_SUCCESS_CODES: Final[frozenset[int]] = frozenset({0})


def _resolve_executable(executable: str) -> str:
    """Return a spawnable path for ``executable``.

    Args:
        executable: Absolute path, relative path or bare command name.

    Returns:
        str: ``executable`` itself when absolute, otherwise its ``PATH`` match.

    Raises:
        SpawnError: If no matching executable can be found.
    """

    candidate = Path(executable)
    if candidate.is_absolute():
        return str(candidate)
    resolved = shutil.which(executable)
    if resolved is None:
        raise SpawnError(executable, "executable was not found on PATH")
    return resolved


class ProcessInvoker:
    """Spawn the formatter, feed it text and capture both output streams.

    Args:
        cwd: Optional working directory for the child process.
        env: Optional environment replacing the inherited one.
    """

    def __init__(self, *, cwd: Path | None = None, env: Mapping[str, str] | None = None) -> None:
        self._cwd = cwd
        self._env = dict(env) if env is not None else None

    def invoke(self, executable: str, args: Sequence[str], input_text: str) -> InvocationResult:
        """Run ``executable`` with ``args`` and ``input_text`` on its stdin.

        The input is written in full and the stream closed before waiting; the
        result is returned for every exit status.

        Args:
            executable: Path or command name produced by the resolver.
            args: Arguments appended after the executable.
            input_text: Document text delivered over standard input.

        Returns:
            InvocationResult: Exit status plus the complete stdout and stderr text.

        Raises:
            SpawnError: If the executable is missing, not executable or not permitted.
        """

        command = [_resolve_executable(executable), *args]
        LOGGER.debug("invoking %s", command)
        try:
            # Bandit: the executable comes from the resolver and arguments are a fixed list.
            completed = subprocess.run(  # nosec B603 - controlled arguments, not user supplied
                command,
                input=input_text,
                capture_output=True,
                text=True,
                encoding=STREAM_ENCODING,
                errors="replace",
                cwd=str(self._cwd) if self._cwd is not None else None,
                env=self._env,
                check=False,
            )
        except OSError as exc:
            raise SpawnError(executable, exc.strerror or str(exc)) from exc

        return InvocationResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def failure_detail(result: InvocationResult, *, tool: str = TOOL_NAME) -> str:
    """Return the message describing a failed run.

    Prefers the error stream, then the output stream, then a generic exit-code note.
    """

    return result.stderr or result.stdout or f"{tool} exited with code {result.exit_code}"


def interpret_result(result: InvocationResult, mode: InvocationMode, *, tool: str = TOOL_NAME) -> str:
    """Classify ``result`` according to the exit-code convention of ``mode``.

    Formatting treats only ``0`` as success and returns stdout. Checking treats
    ``0`` (clean) and ``1`` (findings) as success and returns the report, taken
    from stderr when non-empty and stdout otherwise.

    Args:
        result: Captured process outcome.
        mode: Invocation mode whose convention applies.
        tool: Tool name used in the generic failure message.

    Returns:
        str: Formatted text or diagnostic report.

    Raises:
        ProtocolError: If the exit status signals failure for ``mode``.
    """

    if mode is InvocationMode.FORMAT:
        if result.exit_code in FORMAT_SUCCESS_CODES:
            return result.stdout
    elif result.exit_code in CHECK_SUCCESS_CODES:
        return result.stderr or result.stdout
    raise ProtocolError(failure_detail(result, tool=tool), exit_code=result.exit_code)


__all__ = ["ProcessInvoker", "failure_detail", "interpret_result"]
