# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Translate validator messages into location-anchored diagnostics."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Final

from ..constants import DIAGNOSTIC_SOURCE
from ..core.models import (
    CheckLocation,
    CheckMessage,
    CheckResult,
    Diagnostic,
    Position,
    Range,
    ValidationResult,
)
from ..core.severity import map_severity

LOGGER = logging.getLogger(__name__)

LineLookup = Callable[[Path], Sequence[str] | None]

_MIN_RANGE_WIDTH: Final[int] = 1
_SUGGESTION_PREFIX: Final[str] = "\nSuggestion: "


def read_file_lines(path: Path) -> list[str] | None:
    """Return the lines of ``path`` or ``None`` when it cannot be read.

    Lines are split on ``\\n`` only, matching how the validator counts them;
    a trailing ``\\r`` is dropped.

    Args:
        path: File referenced by a diagnostic location.

    Returns:
        list[str] | None: File lines, or ``None`` for unreadable files.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.debug("cannot read %s for diagnostic ranges: %s", path, exc)
        return None
    return [line.removesuffix("\r") for line in text.split("\n")]


class FileLineCache:
    """Read each file at most once and remember the outcome, including failures."""

    def __init__(self, reader: LineLookup = read_file_lines) -> None:
        """Create an empty cache backed by ``reader``."""

        self._reader = reader
        self._entries: dict[Path, Sequence[str] | None] = {}

    def __call__(self, path: Path) -> Sequence[str] | None:
        """Return cached lines for ``path``, reading it on first access."""

        if path not in self._entries:
            self._entries[path] = self._reader(path)
        return self._entries[path]

    def __len__(self) -> int:
        return len(self._entries)


def diagnostic_range(location: CheckLocation, lines: Sequence[str] | None) -> Range:
    """Return the 0-based range for ``location``.

    The range spans from the reported column to the end of the line when the
    file content is known, and is always at least one character wide.

    Args:
        location: 1-based location from the validator.
        lines: Content of the referenced file, if readable.

    Returns:
        Range: Non-empty half-open range on a single line.
    """

    line = max(0, location.line - 1)
    column = max(0, location.column - 1)
    if lines is not None and line < len(lines):
        end_column = len(lines[line])
    else:
        end_column = column + _MIN_RANGE_WIDTH
    if end_column <= column:
        end_column = column + _MIN_RANGE_WIDTH
    return Range(
        start=Position(line=line, character=column),
        end=Position(line=line, character=end_column),
    )


def diagnostic_message(message: CheckMessage) -> str:
    """Return the display text for ``message`` including any suggestion."""

    if message.suggestion:
        return f"{message.message}{_SUGGESTION_PREFIX}{message.suggestion}"
    return message.message


class DiagnosticMapper:
    """Map validator results to diagnostics grouped by absolute file path.

    One mapper instance corresponds to one mapping pass: file contents are
    cached for its lifetime, so create a new mapper for each batch.
    """

    def __init__(self, line_lookup: LineLookup | None = None) -> None:
        """Create a mapper.

        Args:
            line_lookup: Returns the lines of a file or ``None``; defaults to
                a fresh :class:`FileLineCache`.
        """

        self._line_lookup = line_lookup if line_lookup is not None else FileLineCache()

    def _lines_for(self, path: Path) -> Sequence[str] | None:
        try:
            return self._line_lookup(path)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            LOGGER.debug("line lookup failed for %s: %s", path, exc)
            return None

    def map_check_result(
        self,
        check_result: CheckResult,
        project_dir: Path,
        into: dict[Path, list[Diagnostic]] | None = None,
    ) -> dict[Path, list[Diagnostic]]:
        """Map every message/location pair of ``check_result``.

        Messages without locations produce no diagnostics.

        Args:
            check_result: Parsed validator output.
            project_dir: Directory the message paths are relative to.
            into: Optional mapping to extend in place.

        Returns:
            dict[Path, list[Diagnostic]]: Diagnostics per absolute file, in message order.
        """

        grouped: dict[Path, list[Diagnostic]] = into if into is not None else {}
        for message in check_result.messages:
            for location in message.locations:
                file_path = project_dir / location.path
                diagnostic = Diagnostic(
                    file=file_path,
                    range=diagnostic_range(location, self._lines_for(file_path)),
                    message=diagnostic_message(message),
                    severity=map_severity(message.severity),
                    code=message.id,
                    source=DIAGNOSTIC_SOURCE,
                )
                grouped.setdefault(file_path, []).append(diagnostic)
        return grouped

    def map_results(self, results: Iterable[ValidationResult]) -> dict[Path, list[Diagnostic]]:
        """Map a batch of run results, skipping runs without parsed output.

        Args:
            results: Batch results from the runner.

        Returns:
            dict[Path, list[Diagnostic]]: Diagnostics per absolute file.
        """

        grouped: dict[Path, list[Diagnostic]] = {}
        for result in results:
            if result.check_result is None:
                continue
            self.map_check_result(result.check_result, result.project_dir, into=grouped)
        return grouped


__all__ = [
    "DiagnosticMapper",
    "FileLineCache",
    "LineLookup",
    "diagnostic_message",
    "diagnostic_range",
    "read_file_lines",
]
