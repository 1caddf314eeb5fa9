# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Write rendered reports to disk."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

from ..config import ReportFormat
from ..core.models import ValidationResult
from .formatters import render_json, render_markdown, render_text

LOGGER = logging.getLogger(__name__)

REPORT_EXTENSIONS: Final[dict[str, str]] = {"markdown": "md", "text": "txt", "json": "json"}


def render_report(results: Sequence[ValidationResult], fmt: ReportFormat, *, now: datetime | None = None) -> str:
    """Render ``results`` in ``fmt``; unknown formats fall back to Markdown."""

    if fmt == "text":
        return render_text(results, now=now)
    if fmt == "json":
        return render_json(results)
    return render_markdown(results, now=now)


def report_file_name(results: Sequence[ValidationResult], fmt: ReportFormat, *, now: datetime) -> str:
    """Return ``<dir1>_<dir2>-epubcheck-report-<timestamp>.<ext>``."""

    prefix = "_".join(result.project_dir.name for result in results)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    extension = REPORT_EXTENSIONS.get(fmt, REPORT_EXTENSIONS["markdown"])
    return f"{prefix}-epubcheck-report-{timestamp}.{extension}"


def write_report(
    results: Sequence[ValidationResult],
    directory: Path,
    fmt: ReportFormat = "markdown",
    *,
    now: datetime | None = None,
) -> Path | None:
    """Render and save a report for ``results`` into ``directory``.

    Args:
        results: Batch results to report on.
        directory: Destination directory, created when missing.
        fmt: Report format.
        now: Report timestamp; defaults to the current UTC time.

    Returns:
        Path | None: Written report, or ``None`` when the file could not be saved.
    """

    moment = now or datetime.now(UTC)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / report_file_name(results, fmt, now=moment)
        path.write_text(render_report(results, fmt, now=moment), encoding="utf-8")
    except OSError as exc:
        LOGGER.warning("could not write report to %s: %s", directory, exc)
        return None
    return path


__all__ = ["REPORT_EXTENSIONS", "render_report", "report_file_name", "write_report"]
