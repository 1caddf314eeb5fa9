# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about artifact paths."""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from os import PathLike
from pathlib import Path
from typing import Final

from ..constants import BACKUP_PREFIX, EPUB_SUFFIX

_Pathish = str | PathLike[str] | Path
_FIRST_DUPLICATE_INDEX: Final[int] = 2


def expand_path(path: _Pathish) -> Path:
    """Return ``path`` with a leading ``~`` expanded to the home directory.

    Args:
        path: Filesystem path supplied by the caller.

    Returns:
        Path: Expanded path.
    """

    return Path(os.fspath(path)).expanduser()


def canonical_artifact_path(project_dir: _Pathish) -> Path:
    """Return the sibling ``<name>.epub`` path for ``project_dir``.

    Args:
        project_dir: Expanded EPUB directory.

    Returns:
        Path: Default artifact location next to the project directory.
    """

    directory = Path(project_dir)
    return directory.parent / f"{directory.name}{EPUB_SUFFIX}"


def inside_artifact_path(project_dir: _Pathish) -> Path:
    """Return the ``<name>.epub`` path inside ``project_dir`` itself."""

    directory = Path(project_dir)
    return directory / f"{directory.name}{EPUB_SUFFIX}"


def backup_path_for(path: _Pathish, *, clock: Callable[[], int] = time.time_ns) -> Path:
    """Return a hidden, timestamped sibling name used to park ``path``.

    Args:
        path: File that is about to be moved aside.
        clock: Source of the nanosecond timestamp.

    Returns:
        Path: Backup location in the same directory as ``path``.
    """

    target = Path(path)
    return target.with_name(f"{BACKUP_PREFIX}{clock()}{target.suffix}")


def unique_path(path: _Pathish, *, exists: Callable[[Path], bool] | None = None) -> Path:
    """Return ``path`` or the first free ``<stem> (N)<suffix>`` variant.

    Counting starts at ``2`` and increases until an unused name is found, so
    ``book.epub`` becomes ``book (2).epub``, then ``book (3).epub``.

    Args:
        path: Preferred file location.
        exists: Predicate used to probe candidates; defaults to :meth:`Path.exists`.

    Returns:
        Path: A location that does not currently exist.
    """

    probe = exists or Path.exists
    target = Path(path)
    if not probe(target):
        return target
    counter = _FIRST_DUPLICATE_INDEX
    while True:
        candidate = target.with_name(f"{target.stem} ({counter}){target.suffix}")
        if not probe(candidate):
            return candidate
        counter += 1


def unique_directory_path(path: _Pathish) -> Path:
    """Return ``path`` or the first free ``<name> (N)`` directory variant.

    Args:
        path: Preferred directory location.

    Returns:
        Path: A directory location that does not currently exist.
    """

    target = Path(path)
    if not target.exists():
        return target
    counter = _FIRST_DUPLICATE_INDEX
    while True:
        candidate = target.with_name(f"{target.name} ({counter})")
        if not candidate.exists():
            return candidate
        counter += 1


__all__ = [
    "backup_path_for",
    "canonical_artifact_path",
    "expand_path",
    "inside_artifact_path",
    "unique_directory_path",
    "unique_path",
]
