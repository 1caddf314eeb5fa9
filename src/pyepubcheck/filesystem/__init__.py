# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem helpers exposed as a cohesive package."""

from __future__ import annotations

from .paths import (
    backup_path_for,
    canonical_artifact_path,
    expand_path,
    inside_artifact_path,
    unique_directory_path,
    unique_path,
)

__all__ = [
    "backup_path_for",
    "canonical_artifact_path",
    "expand_path",
    "inside_artifact_path",
    "unique_directory_path",
    "unique_path",
]
