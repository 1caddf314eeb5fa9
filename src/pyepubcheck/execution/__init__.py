# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Validator execution: single runs and sequential batches."""

from __future__ import annotations

from .batch import BatchMode, BatchSummary, ProgressCallback, run_batch, status_text, summarize, summary_message
from .runner import ValidationRunner, build_arguments

__all__ = [
    "BatchMode",
    "BatchSummary",
    "ProgressCallback",
    "ValidationRunner",
    "build_arguments",
    "run_batch",
    "status_text",
    "summarize",
    "summary_message",
]
