# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line entry point exposing ``format``, ``check`` and ``which``."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Final

import typer

from .config import FormatterSettings, load_settings
from .diagnostics import format_diagnostic
from .errors import ConfigError, ProtocolError, SpawnError
from .logging import fail, info, ok, warn
from .models import ResolverContext
from .paths import build_context
from .resolver import BinaryResolver
from .service import check_document, format_document

STDIN_MARKER: Final[str] = "-"
EXIT_FINDINGS: Final[int] = 1
EXIT_FAILURE: Final[int] = 2

app = typer.Typer(
    help="Acquire and run the AspenTech SQLplus formatter.",
    no_args_is_help=True,
    add_completion=False,
)

SOURCE_ARGUMENT = Annotated[
    Path | None,
    typer.Argument(help="SQL file to process; omit or pass '-' to read stdin."),
]
ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Workspace root holding configuration and formatter sources."),
]
STORAGE_OPTION = Annotated[
    Path | None,
    typer.Option("--storage", help="Cache root for downloaded binaries."),
]
EXTENSION_ROOT_OPTION = Annotated[
    Path | None,
    typer.Option("--extension-root", help="Directory containing bundled binaries under bin/<platform>."),
]
EXECUTABLE_OPTION = Annotated[
    str | None,
    typer.Option("--executable", help="Use this formatter executable and skip resolution."),
]
RELEASE_OPTION = Annotated[
    str | None,
    typer.Option("--release-version", help="Release version to download."),
]
AUTO_DOWNLOAD_OPTION = Annotated[
    bool | None,
    typer.Option("--auto-download/--no-auto-download", help="Allow downloading a release archive."),
]
AUTO_BUILD_OPTION = Annotated[
    bool | None,
    typer.Option("--auto-build/--no-auto-build", help="Allow building from workspace sources."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji in CLI output."),
]


@dataclass(slots=True)
class _Session:
    """Settings and resolver inputs shared by every command."""

    settings: FormatterSettings
    context: ResolverContext
    resolver: BinaryResolver
    use_emoji: bool


def _open_session(
    *,
    root: Path,
    storage: Path | None,
    extension_root: Path | None,
    use_emoji: bool,
    overrides: dict[str, Any],
) -> _Session:
    """Load settings and build the resolver context, exiting on invalid configuration."""

    resolved_root = root.resolve()
    try:
        settings = load_settings(
            resolved_root,
            overrides={key: value for key, value in overrides.items() if value is not None},
        )
    except ConfigError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=EXIT_FAILURE) from exc

    context = build_context(workspace_root=resolved_root, storage_root=storage, extension_root=extension_root)
    resolver = BinaryResolver(on_warning=lambda message: warn(message, use_emoji=use_emoji))
    return _Session(settings=settings, context=context, resolver=resolver, use_emoji=use_emoji)


def _read_source(source: Path | None, *, use_emoji: bool) -> str:
    if source is None or str(source) == STDIN_MARKER:
        return sys.stdin.read()
    try:
        return source.read_text(encoding="utf-8")
    except OSError as exc:
        fail(f"Unable to read {source}: {exc}", use_emoji=use_emoji)
        raise typer.Exit(code=EXIT_FAILURE) from exc


@app.command("format")
def format_command(
    source: SOURCE_ARGUMENT = None,
    write: Annotated[bool, typer.Option("--write", "-w", help="Write the result back to SOURCE.")] = False,
    line_width: Annotated[int | None, typer.Option("--line-width", help="Maximum line width.")] = None,
    indent: Annotated[int | None, typer.Option("--indent", help="Indentation width (2-4).")] = None,
    uppercase_keywords: Annotated[
        bool | None,
        typer.Option("--uppercase-keywords/--no-uppercase-keywords", help="Upper-case SQL keywords."),
    ] = None,
    root: ROOT_OPTION = Path("."),
    storage: STORAGE_OPTION = None,
    extension_root: EXTENSION_ROOT_OPTION = None,
    executable: EXECUTABLE_OPTION = None,
    release_version: RELEASE_OPTION = None,
    auto_download: AUTO_DOWNLOAD_OPTION = None,
    auto_build: AUTO_BUILD_OPTION = None,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Format SQL text and print it, or rewrite SOURCE with --write."""

    if write and (source is None or str(source) == STDIN_MARKER):
        fail("--write requires a SOURCE file.", use_emoji=emoji)
        raise typer.Exit(code=EXIT_FAILURE)

    session = _open_session(
        root=root,
        storage=storage,
        extension_root=extension_root,
        use_emoji=emoji,
        overrides={
            "path": executable,
            "version": release_version,
            "auto_download": auto_download,
            "auto_build": auto_build,
            "line_width": line_width,
            "indent": indent,
            "uppercase_keywords": uppercase_keywords,
        },
    )
    text = _read_source(source, use_emoji=emoji)
    try:
        formatted = format_document(text, session.settings, session.context, resolver=session.resolver)
    except (SpawnError, ProtocolError) as exc:
        fail(f"Aspen SQLplus formatter error: {exc}", use_emoji=emoji)
        raise typer.Exit(code=EXIT_FAILURE) from exc

    if write and source is not None:
        if formatted == text:
            info(f"{source} already formatted", use_emoji=emoji)
            return
        try:
            source.write_text(formatted, encoding="utf-8")
        except OSError as exc:
            fail(f"Unable to write {source}: {exc}", use_emoji=emoji)
            raise typer.Exit(code=EXIT_FAILURE) from exc
        ok(f"Formatted {source}", use_emoji=emoji)
        return
    typer.echo(formatted, nl=False)


@app.command("check")
def check_command(
    source: SOURCE_ARGUMENT = None,
    root: ROOT_OPTION = Path("."),
    storage: STORAGE_OPTION = None,
    extension_root: EXTENSION_ROOT_OPTION = None,
    executable: EXECUTABLE_OPTION = None,
    release_version: RELEASE_OPTION = None,
    auto_download: AUTO_DOWNLOAD_OPTION = None,
    auto_build: AUTO_BUILD_OPTION = None,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Print diagnostics for SQL text; exits 1 when any are reported."""

    session = _open_session(
        root=root,
        storage=storage,
        extension_root=extension_root,
        use_emoji=emoji,
        overrides={
            "path": executable,
            "version": release_version,
            "auto_download": auto_download,
            "auto_build": auto_build,
        },
    )
    text = _read_source(source, use_emoji=emoji)
    try:
        records = check_document(text, session.settings, session.context, resolver=session.resolver)
    except (SpawnError, ProtocolError) as exc:
        fail(f"Aspen SQLplus checker error: {exc}", use_emoji=emoji)
        raise typer.Exit(code=EXIT_FAILURE) from exc

    for record in records:
        typer.echo(format_diagnostic(record))
    if records:
        raise typer.Exit(code=EXIT_FINDINGS)
    ok("No diagnostics reported.", use_emoji=emoji)


@app.command("which")
def which_command(
    root: ROOT_OPTION = Path("."),
    storage: STORAGE_OPTION = None,
    extension_root: EXTENSION_ROOT_OPTION = None,
    executable: EXECUTABLE_OPTION = None,
    release_version: RELEASE_OPTION = None,
    auto_download: AUTO_DOWNLOAD_OPTION = None,
    auto_build: AUTO_BUILD_OPTION = None,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Print the formatter executable that would be used."""

    session = _open_session(
        root=root,
        storage=storage,
        extension_root=extension_root,
        use_emoji=emoji,
        overrides={
            "path": executable,
            "version": release_version,
            "auto_download": auto_download,
            "auto_build": auto_build,
        },
    )
    typer.echo(session.resolver.resolve(session.context, session.settings.resolution_options()))


def main() -> None:
    """Run the ``aspenfmt`` command line application."""

    app()


__all__ = ["app", "main"]
