# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants for EPUBCheck orchestration."""

from __future__ import annotations

from typing import Final

TOOL_NAME: Final[str] = "EPUBCheck"
DIAGNOSTIC_SOURCE: Final[str] = TOOL_NAME

MIMETYPE_FILE_NAME: Final[str] = "mimetype"
EPUB_MIMETYPE: Final[str] = "application/epub+zip"
EPUB_SUFFIX: Final[str] = ".epub"

DEFAULT_JAVA_PATH: Final[str] = "java"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 120.0
EXTRACTION_TIMEOUT_SECONDS: Final[float] = 300.0

# Exit codes reported by the validator in ``exp`` mode.
EXIT_CLEAN: Final[int] = 0
EXIT_VALIDATION_ERRORS: Final[int] = 1

BACKUP_PREFIX: Final[str] = ".epubcheck-protect-"
RESULT_FILE_PREFIX: Final[str] = "epubcheck-"

EXCLUDED_DIRECTORIES: Final[frozenset[str]] = frozenset({".git", "node_modules"})

JAVA_DOWNLOAD_URL: Final[str] = "https://adoptium.net/"

__all__ = [
    "BACKUP_PREFIX",
    "DEFAULT_JAVA_PATH",
    "DEFAULT_TIMEOUT_SECONDS",
    "DIAGNOSTIC_SOURCE",
    "EPUB_MIMETYPE",
    "EPUB_SUFFIX",
    "EXCLUDED_DIRECTORIES",
    "EXTRACTION_TIMEOUT_SECONDS",
    "EXIT_CLEAN",
    "EXIT_VALIDATION_ERRORS",
    "JAVA_DOWNLOAD_URL",
    "MIMETYPE_FILE_NAME",
    "RESULT_FILE_PREFIX",
    "TOOL_NAME",
]
