# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end formatting and checking of a document's text."""

from __future__ import annotations

from .config import FormatterSettings
from .constants import CHECK_FLAG
from .diagnostics import filter_diagnostics, parse_diagnostics
from .models import DiagnosticRecord, InvocationMode, ResolverContext
from .process import ProcessInvoker, interpret_result
from .resolver import BinaryResolver


def format_document(
    text: str,
    settings: FormatterSettings,
    context: ResolverContext,
    *,
    resolver: BinaryResolver | None = None,
    invoker: ProcessInvoker | None = None,
) -> str:
    """Return ``text`` reformatted by the external formatter.

    The executable is resolved afresh on every call.

    Args:
        text: Document contents.
        settings: Current settings; supplies resolution and layout options.
        context: Filesystem anchors for binary resolution.
        resolver: Resolver override, mainly for tests.
        invoker: Process invoker override, mainly for tests.

    Returns:
        str: Formatted document text.

    Raises:
        SpawnError: If the resolved executable cannot be started.
        ProtocolError: If the formatter exits with a non-zero status.
    """

    executable = (resolver or BinaryResolver()).resolve(context, settings.resolution_options())
    result = (invoker or ProcessInvoker()).invoke(executable, settings.format_options().to_arguments(), text)
    return interpret_result(result, InvocationMode.FORMAT)


def check_document(
    text: str,
    settings: FormatterSettings,
    context: ResolverContext,
    *,
    resolver: BinaryResolver | None = None,
    invoker: ProcessInvoker | None = None,
) -> list[DiagnosticRecord]:
    """Return the diagnostics reported for ``text`` after category filtering.

    Raises:
        SpawnError: If the resolved executable cannot be started.
        ProtocolError: If the formatter exits with a status other than 0 or 1.
    """

    executable = (resolver or BinaryResolver()).resolve(context, settings.resolution_options())
    result = (invoker or ProcessInvoker()).invoke(executable, [CHECK_FLAG], text)
    report = interpret_result(result, InvocationMode.CHECK)
    return filter_diagnostics(parse_diagnostics(report), settings.filter_policy())


__all__ = ["check_document", "format_document"]
