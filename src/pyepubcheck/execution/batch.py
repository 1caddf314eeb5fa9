# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Sequential batch execution and result summaries."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..core.models import ValidationResult
from ..core.severity import CheckSeverity
from .runner import ValidationRunner

ProgressCallback = Callable[[int, int, Path], None]


class BatchMode(str, Enum):
    """Which runner entry point a batch uses."""

    VALIDATE = "validate"
    CHECK = "check"
    GENERATE = "generate"


@dataclass(frozen=True, slots=True)
class BatchSummary:
    """Counts aggregated over a batch, one per diagnostic location."""

    errors: int
    warnings: int
    has_execution_error: bool

    @property
    def ok(self) -> bool:
        """Return whether every run executed and reported no errors."""

        return not self.has_execution_error and self.errors == 0


def run_batch(
    runner: ValidationRunner,
    directories: Sequence[Path],
    *,
    mode: BatchMode = BatchMode.VALIDATE,
    on_progress: ProgressCallback | None = None,
) -> list[ValidationResult]:
    """Run ``runner`` over ``directories`` one at a time.

    Args:
        runner: Configured validation runner.
        directories: Project directories in processing order.
        mode: ``VALIDATE`` packages and validates, ``CHECK`` validates only,
            ``GENERATE`` packages only.
        on_progress: Optional callback receiving ``(index, total, directory)``
            before each run; ``index`` is 1-based.

    Returns:
        list[ValidationResult]: One result per directory, in input order.
    """

    results: list[ValidationResult] = []
    total = len(directories)
    for index, directory in enumerate(directories, start=1):
        if on_progress is not None:
            on_progress(index, total, directory)
        if mode is BatchMode.GENERATE:
            results.append(runner.generate(directory))
        else:
            results.append(runner.run(directory, produce_artifact=mode is BatchMode.VALIDATE))
    return results


def summarize(results: Iterable[ValidationResult]) -> BatchSummary:
    """Count errors and warnings across ``results``.

    Messages without locations still count once so totals match what reports show.

    Args:
        results: Batch results.

    Returns:
        BatchSummary: Aggregated counts.
    """

    errors = 0
    warnings = 0
    has_execution_error = False
    for result in results:
        if result.check_result is None:
            if result.error:
                has_execution_error = True
            continue
        for message in result.check_result.messages:
            count = max(1, len(message.locations))
            if message.blocking:
                errors += count
            elif message.severity == CheckSeverity.WARNING:
                warnings += count
    return BatchSummary(errors=errors, warnings=warnings, has_execution_error=has_execution_error)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def status_text(summary: BatchSummary, project_count: int) -> str:
    """Return a one-line status such as ``"EPUB OK"`` or ``"2 errors, 1 warning"``."""

    if summary.ok:
        return f"{project_count} EPUBs OK" if project_count > 1 else "EPUB OK"
    parts: list[str] = []
    if summary.errors:
        parts.append(_plural(summary.errors, "error"))
    if summary.warnings:
        parts.append(_plural(summary.warnings, "warning"))
    return ", ".join(parts) if parts else "Failed"


def summary_message(summary: BatchSummary) -> str:
    """Return the end-of-run sentence shown to the user."""

    if summary.errors == 0 and summary.warnings == 0:
        return "Validation passed with no errors or warnings."
    parts: list[str] = []
    if summary.errors:
        parts.append(_plural(summary.errors, "error"))
    if summary.warnings:
        parts.append(_plural(summary.warnings, "warning"))
    return f"Found {' and '.join(parts)}."


__all__ = [
    "BatchMode",
    "BatchSummary",
    "ProgressCallback",
    "run_batch",
    "status_text",
    "summarize",
    "summary_message",
]
