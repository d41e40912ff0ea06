# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for formatter process invocation and exit-code classification."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from aspenfmt.errors import ProtocolError, SpawnError
from aspenfmt.models import InvocationMode, InvocationResult
from aspenfmt.process import ProcessInvoker, failure_detail, interpret_result

ECHO_UPPER = "import sys; sys.stdout.write(sys.stdin.read().upper())"


def test_invoke_feeds_stdin_and_captures_stdout() -> None:
    result = ProcessInvoker().invoke(sys.executable, ["-c", ECHO_UPPER], "select 1 from dual;\n")

    assert result.exit_code == 0
    assert result.stdout.replace("\r\n", "\n") == "SELECT 1 FROM DUAL;\n"
    assert result.stderr == ""


def test_invoke_returns_nonzero_exit_with_both_streams() -> None:
    script = "import sys; sys.stdout.write('partial'); sys.stderr.write('parse error'); sys.exit(2)"

    result = ProcessInvoker().invoke(sys.executable, ["-c", script], "")

    assert result == InvocationResult(exit_code=2, stdout="partial", stderr="parse error")


def test_invoke_handles_large_input_without_deadlock() -> None:
    text = "x = 1;\n" * 200_000

    result = ProcessInvoker().invoke(sys.executable, ["-c", "import sys; sys.stdout.write(sys.stdin.read())"], text)

    assert len(result.stdout.replace("\r\n", "\n")) == len(text)


def test_invoke_uses_working_directory(tmp_path: Path) -> None:
    result = ProcessInvoker(cwd=tmp_path).invoke(sys.executable, ["-c", "import os; print(os.getcwd())"], "")

    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()


def test_missing_bare_command_raises_spawn_error() -> None:
    with pytest.raises(SpawnError) as excinfo:
        ProcessInvoker().invoke("aspensqlplus-fmt-definitely-missing", [], "")

    assert excinfo.value.executable == "aspensqlplus-fmt-definitely-missing"


def test_missing_absolute_path_raises_spawn_error(tmp_path: Path) -> None:
    missing = str(tmp_path / "aspensqlplus-fmt")

    with pytest.raises(SpawnError, match="Unable to start"):
        ProcessInvoker().invoke(missing, [], "")


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
def test_non_executable_file_raises_spawn_error(tmp_path: Path) -> None:
    target = tmp_path / "aspensqlplus-fmt"
    target.write_text("#!/bin/sh\necho hi\n")
    target.chmod(0o644)

    with pytest.raises(SpawnError):
        ProcessInvoker().invoke(str(target), [], "")


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        (InvocationResult(exit_code=0, stdout="SELECT 1;\n"), "SELECT 1;\n"),
        (InvocationResult(exit_code=0, stdout="", stderr="warning noise"), ""),
    ],
)
def test_format_mode_accepts_only_zero(result: InvocationResult, expected: str) -> None:
    assert interpret_result(result, InvocationMode.FORMAT) == expected


@pytest.mark.parametrize("exit_code", [1, 2, -9])
def test_format_mode_rejects_nonzero(exit_code: int) -> None:
    result = InvocationResult(exit_code=exit_code, stdout="out", stderr="boom")

    with pytest.raises(ProtocolError) as excinfo:
        interpret_result(result, InvocationMode.FORMAT)

    assert excinfo.value.exit_code == exit_code
    assert excinfo.value.detail == "boom"


@pytest.mark.parametrize(
    ("result", "expected"),
    [
        (InvocationResult(exit_code=0), ""),
        (InvocationResult(exit_code=1, stderr="1:1:2: warning: w [c]"), "1:1:2: warning: w [c]"),
        (InvocationResult(exit_code=1, stdout="1:1:2: info: i [c]"), "1:1:2: info: i [c]"),
        (InvocationResult(exit_code=0, stdout="from stdout", stderr="from stderr"), "from stderr"),
    ],
)
def test_check_mode_accepts_zero_and_one(result: InvocationResult, expected: str) -> None:
    assert interpret_result(result, InvocationMode.CHECK) == expected


def test_check_mode_rejects_other_codes() -> None:
    with pytest.raises(ProtocolError) as excinfo:
        interpret_result(InvocationResult(exit_code=2), InvocationMode.CHECK)

    assert str(excinfo.value) == "aspensqlplus-fmt exited with code 2"


def test_failure_detail_prefers_stderr_then_stdout() -> None:
    assert failure_detail(InvocationResult(exit_code=3, stdout="out", stderr="err")) == "err"
    assert failure_detail(InvocationResult(exit_code=3, stdout="out")) == "out"
    assert failure_detail(InvocationResult(exit_code=3), tool="fmt") == "fmt exited with code 3"
