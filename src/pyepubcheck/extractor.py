# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Expand packaged ``.epub`` archives with the platform archive utility."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .constants import EXTRACTION_TIMEOUT_SECONDS
from .filesystem.paths import unique_directory_path
from .runtime.process import CommandOptions, SubprocessExecutionError, run_command

LOGGER = logging.getLogger(__name__)


def extraction_command(archive: Path, destination: Path, *, platform: str | None = None) -> list[str]:
    """Return the archive utility command for the current platform.

    Windows 10+ ships ``tar`` with zip support; other platforms use ``unzip``.
    """

    if (platform or sys.platform) == "win32":
        return ["tar", "-xf", str(archive), "-C", str(destination)]
    return ["unzip", "-o", str(archive), "-d", str(destination)]


def extract_epub(
    archive: Path,
    *,
    platform: str | None = None,
    timeout: float = EXTRACTION_TIMEOUT_SECONDS,
) -> Path | None:
    """Extract ``archive`` into a sibling directory named after its stem.

    An existing directory is never reused; ``book (2)``, ``book (3)`` and so on
    are tried instead.

    Args:
        archive: Packaged ``.epub`` file.
        platform: Override for :data:`sys.platform`.
        timeout: Seconds before the archive utility is killed.

    Returns:
        Path | None: Extracted directory, or ``None`` if extraction failed.
    """

    destination = unique_directory_path(archive.parent / archive.stem)
    try:
        destination.mkdir(parents=True)
    except OSError as exc:
        LOGGER.warning("cannot create %s: %s", destination, exc)
        return None

    command = extraction_command(archive, destination, platform=platform)
    try:
        run_command(command, options=CommandOptions(capture_output=True, discard_stdin=True, timeout=timeout))
    except (OSError, SubprocessExecutionError) as exc:
        LOGGER.warning("extracting %s failed: %s", archive, exc)
        return None
    return destination


__all__ = ["extract_epub", "extraction_command"]
