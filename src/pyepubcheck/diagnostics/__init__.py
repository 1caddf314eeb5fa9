# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic mapping and publishing utilities."""

from __future__ import annotations

from .mapper import (
    DiagnosticMapper,
    FileLineCache,
    LineLookup,
    diagnostic_message,
    diagnostic_range,
    read_file_lines,
)
from .sink import DiagnosticCollection, DiagnosticSink, update_diagnostics

__all__ = [
    "DiagnosticCollection",
    "DiagnosticMapper",
    "DiagnosticSink",
    "FileLineCache",
    "LineLookup",
    "diagnostic_message",
    "diagnostic_range",
    "read_file_lines",
    "update_diagnostics",
]
