"""
lastcall_engine.errors — Custom exception classes
=================================================

Defines the exception hierarchy for the fatal error tier.
Operational failures (illegal point value, locked submission, ...)
are never raised; they come back as ``{"success": False, "errors": [...]}``.
"""

from __future__ import annotations
from typing import List, Optional


class LastCallEngineError(Exception):
    """Base exception for all lastcall_engine errors."""
    pass


class RoundConfigurationError(LastCallEngineError):
    """Raised when a round configuration is inconsistent.

    The engine refuses to initialize rather than run with
    non-contiguous rounds, empty or out-of-range point values.
    """

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__(
            f"Invalid round configuration: {'; '.join(self.problems)}"
        )

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type="ROUND_CONFIGURATION",
            problems=self.problems,
        )


class EngineInvariantError(LastCallEngineError):
    """Raised when engine state contradicts itself while grading."""

    def __init__(self, message: str, submission_id: Optional[str] = None):
        self.submission_id = submission_id
        super().__init__(message)


class SnapshotImportError(LastCallEngineError):
    """Raised when an exported state payload fails validation on import."""

    def __init__(self, section: str, validation_errors: List[str]):
        self.section = section
        self.validation_errors = list(validation_errors)
        super().__init__(
            f"Cannot import {section} state: {validation_errors}"
        )

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type="SNAPSHOT_IMPORT",
            problems=self.validation_errors,
            section=self.section,
        )


_ERROR_BANNERS = {
    "ROUND_CONFIGURATION": "INITIALIZATION REFUSED",
    "SNAPSHOT_IMPORT": "STATE IMPORT REFUSED",
}


def _format_error_block(
    error_type: str,
    problems: List[str],
    section: Optional[str] = None,
) -> str:
    """Format a structured multi-line error block for logs."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        f" ENGINE ERROR — {_ERROR_BANNERS.get(error_type, 'REFUSED')}",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Error Type:   {error_type}",
    ]

    if section is not None:
        lines.append(f" Section:      {section}")

    if problems:
        lines.append("")
        lines.append(" ── PROBLEMS " + "─" * 51)
        for problem in problems:
            lines.append(f" • {problem}")

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)
