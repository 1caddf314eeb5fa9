# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Private JSON result files written by the validator."""

from __future__ import annotations

import logging
import os
import secrets
import tempfile
import time
from pathlib import Path

from pydantic import ValidationError

from ..constants import RESULT_FILE_PREFIX
from ..core.models import CheckResult

LOGGER = logging.getLogger(__name__)


class ResultFileError(RuntimeError):
    """Raised when the validator's result file is missing or malformed."""


def allocate_result_file(directory: Path | None = None) -> Path:
    """Return a process-unique, not yet existing result file path.

    Args:
        directory: Parent directory; defaults to the system temp directory.

    Returns:
        Path: Location the validator should write its JSON output to.
    """

    parent = directory if directory is not None else Path(tempfile.gettempdir())
    token = secrets.token_hex(4)
    return parent / f"{RESULT_FILE_PREFIX}{time.time_ns()}-{os.getpid()}-{token}.json"


def load_check_result(path: Path) -> CheckResult:
    """Read and validate the validator output stored at ``path``.

    Args:
        path: Result file written by the validator.

    Returns:
        CheckResult: Parsed validator document.

    Raises:
        ResultFileError: If the file cannot be read or does not match the schema.
    """

    try:
        payload = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ResultFileError(f"result file {path} could not be read: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ResultFileError(f"result file {path} is not valid UTF-8: {exc}") from exc
    try:
        return CheckResult.model_validate_json(payload)
    except ValidationError as exc:
        raise ResultFileError(f"result file {path} is malformed: {exc.error_count()} schema error(s)") from exc


def remove_quietly(path: Path) -> None:
    """Delete ``path`` if present, ignoring any filesystem error."""

    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.debug("could not delete %s: %s", path, exc)


__all__ = ["ResultFileError", "allocate_result_file", "load_check_result", "remove_quietly"]
