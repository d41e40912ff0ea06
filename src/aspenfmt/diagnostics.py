# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parse the formatter's checking report and filter it by category."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Final

from .models import DiagnosticRecord, DiagnosticSeverity, FilterPolicy

DIAGNOSTIC_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<line>[1-9]\d*):(?P<column>[1-9]\d*):(?P<end>[1-9]\d*):\s"
    r"(?P<severity>error|warning|info):\s"
    r"(?P<message>.+?)\s"
    r"\[(?P<code>[^\]]+)\]$",
)


def _parse_line(line: str) -> DiagnosticRecord | None:
    """Return the record encoded by ``line`` or ``None`` when it does not match."""

    match = DIAGNOSTIC_PATTERN.match(line)
    if match is None:
        return None
    try:
        start = int(match.group("column")) - 1
        end = int(match.group("end")) - 1
        if end < start:
            return None
        return DiagnosticRecord(
            line_index=int(match.group("line")) - 1,
            start_column=start,
            end_column=end,
            severity=DiagnosticSeverity(match.group("severity")),
            message=match.group("message"),
            code=match.group("code"),
        )
    except ValueError:
        # Oversized numbers exceed the int conversion limit; ValidationError is a ValueError too.
        return None


def parse_diagnostics(raw_output: str) -> list[DiagnosticRecord]:
    """Convert a checking report into records with 0-based positions.

    Lines that do not follow ``line:column:end: severity: message [code]`` are
    skipped, so the parser accepts any input without raising.

    Args:
        raw_output: Report text captured from the formatter.

    Returns:
        list[DiagnosticRecord]: Records in report order.
    """

    records: list[DiagnosticRecord] = []
    for raw_line in raw_output.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        record = _parse_line(line)
        if record is not None:
            records.append(record)
    return records


def filter_diagnostics(
    records: Iterable[DiagnosticRecord],
    policy: FilterPolicy | Mapping[str, bool],
) -> list[DiagnosticRecord]:
    """Drop records whose code is disabled by ``policy``.

    Codes the policy does not mention are kept.

    Args:
        records: Parsed diagnostics.
        policy: Filter policy or plain ``code -> enabled`` mapping.

    Returns:
        list[DiagnosticRecord]: Records whose category is enabled.
    """

    active = policy if isinstance(policy, FilterPolicy) else FilterPolicy.from_mapping(policy)
    return [record for record in records if active.is_enabled(record.code)]


def format_diagnostic(record: DiagnosticRecord) -> str:
    """Render ``record`` in the formatter's 1-based report grammar."""

    return (
        f"{record.line_index + 1}:{record.start_column + 1}:{record.end_column + 1}: "
        f"{record.severity.value}: {record.message} [{record.code}]"
    )


__all__ = ["DIAGNOSTIC_PATTERN", "filter_diagnostics", "format_diagnostic", "parse_diagnostics"]
