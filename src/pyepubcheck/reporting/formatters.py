# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render batch results as Markdown, plain text, or JSON."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import UTC, datetime

from ..constants import TOOL_NAME
from ..core.models import CheckMessage, JsonValue, ValidationResult
from ..core.severity import CheckSeverity

_NO_VALUE = "-"


def _location_count(messages: Sequence[CheckMessage]) -> int:
    return sum(max(1, len(message.locations)) for message in messages)


def _format_line(line: int) -> str:
    return str(line) if line >= 0 else _NO_VALUE


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|")


def _timestamp(now: datetime | None) -> str:
    return (now or datetime.now(UTC)).isoformat()


def _markdown_publication(result: ValidationResult, lines: list[str]) -> None:
    publication = result.check_result.publication if result.check_result else None
    if publication is None:
        return
    lines.extend(["", "### Publication Info", "", "| Property | Value |", "|----------|-------|"])
    if publication.title:
        lines.append(f"| Title | {publication.title} |")
    if publication.creator:
        lines.append(f"| Creator | {', '.join(publication.creator)} |")
    if publication.language:
        lines.append(f"| Language | {publication.language} |")
    if publication.epub_version:
        lines.append(f"| EPUB Version | {publication.epub_version} |")


def _markdown_messages(messages: Sequence[CheckMessage], lines: list[str]) -> None:
    if not messages:
        lines.extend(["", "✅ **No errors or warnings found.**"])
        return

    buckets: list[tuple[str, list[CheckMessage]]] = [
        ("Errors", [message for message in messages if message.blocking]),
        ("Warnings", [message for message in messages if message.severity == CheckSeverity.WARNING]),
        ("Usage", [message for message in messages if message.severity == CheckSeverity.USAGE]),
        ("Info", [message for message in messages if message.severity == CheckSeverity.INFO]),
    ]
    lines.extend(["", "### Summary", "", "| Severity | Count |", "|----------|-------|"])
    for label, bucket in buckets:
        if bucket:
            lines.append(f"| {label} | {_location_count(bucket)} |")

    lines.extend(
        [
            "",
            "### Messages",
            "",
            "| Severity | ID | File | Line | Message |",
            "|----------|----|------|------|---------|",
        ],
    )
    for message in messages:
        text = _escape_cell(message.message)
        if not message.locations:
            lines.append(f"| {message.severity_label} | {message.id} | - | - | {text} |")
            continue
        for location in message.locations:
            lines.append(
                f"| {message.severity_label} | {message.id} | {location.path} | "
                f"{_format_line(location.line)} | {text} |",
            )


def render_markdown(results: Sequence[ValidationResult], *, now: datetime | None = None) -> str:
    """Return a Markdown report for ``results``.

    Args:
        results: Batch results, one per project directory.
        now: Report timestamp; defaults to the current UTC time.

    Returns:
        str: Markdown document.
    """

    lines = [
        f"# {TOOL_NAME} Validation Report",
        "",
        f"**Date**: {_timestamp(now)}",
        f"**Projects validated**: {len(results)}",
        "",
    ]
    for result in results:
        lines.extend([f"## {result.project_dir.name}", "", f"**Directory**: `{result.project_dir}`"])
        if result.error:
            lines.extend(["", f"> **Error**: {result.error}", ""])
            continue
        if result.check_result is None:
            lines.extend(["", "> No validation results available.", ""])
            continue
        _markdown_publication(result, lines)
        _markdown_messages(result.check_result.messages, lines)
        lines.extend(["", "---", ""])

    checked = next((result.check_result for result in results if result.check_result is not None), None)
    if checked is not None:
        lines.append(f"*Generated by {TOOL_NAME} v{checked.checker.display_version}*")
    return "\n".join(lines)


def render_text(results: Sequence[ValidationResult], *, now: datetime | None = None) -> str:
    """Return a plain-text report for ``results``."""

    lines = [
        f"{TOOL_NAME} Validation Report",
        "=" * 40,
        f"Date: {_timestamp(now)}",
        f"Projects validated: {len(results)}",
        "",
    ]
    for result in results:
        lines.extend([f"--- {result.project_dir.name} ---", f"Directory: {result.project_dir}"])
        if result.error:
            lines.extend([f"ERROR: {result.error}", ""])
            continue
        if result.check_result is None:
            lines.extend(["No validation results available.", ""])
            continue
        messages = result.check_result.messages
        if not messages:
            lines.append("No errors or warnings found.")
        for message in messages:
            prefix = f"{message.severity_label} [{message.id}]"
            if not message.locations:
                lines.append(f"{prefix} -:- - {message.message}")
            for location in message.locations:
                lines.append(f"{prefix} {location.path}:{_format_line(location.line)} - {message.message}")
            if message.suggestion:
                lines.append(f"  Suggestion: {message.suggestion}")
        lines.append("")
    return "\n".join(lines)


def render_json(results: Sequence[ValidationResult]) -> str:
    """Return a JSON report with one object per project directory."""

    report: list[dict[str, JsonValue]] = []
    for result in results:
        entry: dict[str, JsonValue] = {
            "directory": str(result.project_dir),
            "success": result.success,
            "outcome": result.kind.value,
            "error": result.error,
            "artifact": str(result.artifact_path) if result.artifact_path is not None else None,
        }
        if result.check_result is not None:
            entry.update(result.check_result.model_dump(mode="json", by_alias=True))
        report.append(entry)
    return json.dumps(report, indent=2)


__all__ = ["render_json", "render_markdown", "render_text"]
