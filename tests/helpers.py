# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Builders for validator JSON payloads used across tests."""

from __future__ import annotations

from typing import Any


def make_check_result(*messages: dict[str, Any], title: str = "Sample Book") -> dict[str, Any]:
    """Return a validator JSON document carrying ``messages``."""

    return {
        "checker": {"name": "epubcheck", "checkerVersion": "5.1.0"},
        "publication": {"title": title, "creator": ["A. Author"], "language": "en", "ePubVersion": "3.0"},
        "items": [],
        "messages": list(messages),
    }


def make_message(
    severity: str,
    *,
    message_id: str = "RSC-005",
    text: str = "Error while parsing file",
    path: str | None = "EPUB/content.xhtml",
    line: int = 5,
    column: int = 3,
) -> dict[str, Any]:
    """Return one validator message in the tool's JSON shape."""

    locations = [] if path is None else [{"path": path, "line": line, "column": column}]
    return {"ID": message_id, "severity": severity, "message": text, "locations": locations}
