# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reporting helpers for validation results."""

from __future__ import annotations

from .emitters import render_report, report_file_name, write_report
from .formatters import render_json, render_markdown, render_text

__all__ = [
    "render_json",
    "render_markdown",
    "render_report",
    "render_text",
    "report_file_name",
    "write_report",
]
