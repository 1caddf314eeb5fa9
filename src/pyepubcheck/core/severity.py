# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class CheckSeverity(str, Enum):
    """Severity vocabulary emitted by the validator, most severe first."""

    FATAL = "FATAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    USAGE = "USAGE"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        """Return the ordering rank where a higher value is more severe.

        Returns:
            int: Rank used to compare severities.
        """

        return _CHECK_SEVERITY_RANK[self]

    @property
    def is_blocking(self) -> bool:
        """Return whether the severity marks a publication as invalid."""

        return self in _BLOCKING_SEVERITIES


class DiagnosticSeverity(str, Enum):
    """Editor-agnostic diagnostic levels."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HINT = "hint"


_CHECK_SEVERITY_RANK: Final[dict[CheckSeverity, int]] = {
    CheckSeverity.FATAL: 4,
    CheckSeverity.ERROR: 3,
    CheckSeverity.WARNING: 2,
    CheckSeverity.USAGE: 1,
    CheckSeverity.INFO: 0,
}

_BLOCKING_SEVERITIES: Final[frozenset[CheckSeverity]] = frozenset({CheckSeverity.FATAL, CheckSeverity.ERROR})

_SEVERITY_TO_DIAGNOSTIC: Final[dict[str, DiagnosticSeverity]] = {
    CheckSeverity.FATAL.value: DiagnosticSeverity.ERROR,
    CheckSeverity.ERROR.value: DiagnosticSeverity.ERROR,
    CheckSeverity.WARNING.value: DiagnosticSeverity.WARNING,
    CheckSeverity.USAGE.value: DiagnosticSeverity.INFORMATION,
    CheckSeverity.INFO.value: DiagnosticSeverity.HINT,
}


def map_severity(severity: CheckSeverity | str | None) -> DiagnosticSeverity:
    """Map a validator severity to a :class:`DiagnosticSeverity`.

    Unrecognised values map to :attr:`DiagnosticSeverity.ERROR` so that
    unexpected output stays visible.

    Args:
        severity: Severity reported by the validator.

    Returns:
        DiagnosticSeverity: Level used when publishing the diagnostic.
    """

    key = severity.value if isinstance(severity, CheckSeverity) else severity
    if not isinstance(key, str):
        return DiagnosticSeverity.ERROR
    return _SEVERITY_TO_DIAGNOSTIC.get(key, DiagnosticSeverity.ERROR)


def is_blocking(severity: CheckSeverity | str | None) -> bool:
    """Return whether ``severity`` counts as an error for run success."""

    if isinstance(severity, CheckSeverity):
        return severity.is_blocking
    return severity in {item.value for item in _BLOCKING_SEVERITIES}


__all__ = [
    "CheckSeverity",
    "DiagnosticSeverity",
    "is_blocking",
    "map_severity",
]
