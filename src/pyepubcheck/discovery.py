# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Locate expanded EPUB projects and packaged ``.epub`` files."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from .constants import EPUB_MIMETYPE, EPUB_SUFFIX, EXCLUDED_DIRECTORIES, MIMETYPE_FILE_NAME


def is_epub_directory(directory: Path) -> bool:
    """Return whether ``directory`` holds a ``mimetype`` file for EPUB.

    Args:
        directory: Candidate project directory.

    Returns:
        bool: ``True`` when ``mimetype`` exists and reads ``application/epub+zip``.
    """

    marker = directory / MIMETYPE_FILE_NAME
    try:
        return marker.read_text(encoding="utf-8").strip() == EPUB_MIMETYPE
    except (OSError, UnicodeDecodeError):
        return False


def _walk(root: Path) -> Iterator[tuple[Path, list[str]]]:
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in EXCLUDED_DIRECTORIES)
        yield Path(current), filenames


def detect_epub_directories(root: Path) -> list[Path]:
    """Return every EPUB project directory beneath ``root`` (inclusive).

    Args:
        root: Workspace root to scan.

    Returns:
        list[Path]: Absolute project directories, sorted.
    """

    found = [
        directory.absolute()
        for directory, filenames in _walk(root)
        if MIMETYPE_FILE_NAME in filenames and is_epub_directory(directory)
    ]
    return sorted(found)


def find_epub_files(root: Path) -> list[Path]:
    """Return every packaged ``.epub`` file beneath ``root``, sorted."""

    found = [
        (directory / name).absolute()
        for directory, filenames in _walk(root)
        for name in filenames
        if name.lower().endswith(EPUB_SUFFIX)
    ]
    return sorted(found)


__all__ = ["detect_epub_directories", "find_epub_files", "is_epub_directory"]
