# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for building the formatter from workspace sources."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

from aspenfmt.build import SourceBuilder, default_cargo
from aspenfmt.errors import BuildError


def _toolchain_script(project_dir: Path, body: str) -> None:
    """Write a ``build`` script run as ``python build --release`` inside ``project_dir``."""

    (project_dir / "build").write_text(textwrap.dedent(body), encoding="utf-8")


def test_command_is_release_build() -> None:
    assert SourceBuilder(cargo="cargo").command == ["cargo", "build", "--release"]


def test_default_cargo_matches_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "platform", "win32")
    assert default_cargo() == "cargo.exe"
    monkeypatch.setattr(sys, "platform", "linux")
    assert default_cargo() == "cargo"


def test_build_succeeds_in_project_directory(tmp_path: Path) -> None:
    _toolchain_script(
        tmp_path,
        """
        import pathlib, sys
        assert sys.argv[1:] == ["--release"]
        target = pathlib.Path("target", "release")
        target.mkdir(parents=True)
        (target / "aspensqlplus-fmt").write_text("binary")
        """,
    )

    SourceBuilder(cargo=sys.executable).build(tmp_path)

    assert (tmp_path / "target" / "release" / "aspensqlplus-fmt").is_file()


def test_build_failure_carries_error_stream(tmp_path: Path) -> None:
    _toolchain_script(
        tmp_path,
        """
        import sys
        sys.stderr.write("error[E0425]: cannot find value `x`\\n")
        sys.stderr.write("error: could not compile\\n")
        sys.exit(101)
        """,
    )

    with pytest.raises(BuildError) as excinfo:
        SourceBuilder(cargo=sys.executable).build(tmp_path)

    assert excinfo.value.returncode == 101
    assert "cannot find value" in excinfo.value.detail
    assert "could not compile" in excinfo.value.detail


def test_build_failure_without_output_reports_exit_code(tmp_path: Path) -> None:
    _toolchain_script(tmp_path, "import sys\nsys.exit(3)\n")

    with pytest.raises(BuildError, match="exited with code 3"):
        SourceBuilder(cargo=sys.executable).build(tmp_path)


def test_missing_toolchain_raises_build_error(tmp_path: Path) -> None:
    missing = str(tmp_path / "no-such-cargo")

    with pytest.raises(BuildError) as excinfo:
        SourceBuilder(cargo=missing).build(tmp_path)

    assert excinfo.value.returncode is None
    assert "Unable to start" in str(excinfo.value)
