# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import logging
import shutil

# Bandit: subprocess usage is intentional; we provide a controlled wrapper around
# external tool execution, normalising arguments and disabling ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

LOGGER = logging.getLogger(__name__)

_TIMEOUT_RETURNCODE: Final[int] = 124


class InvocationStatus(str, Enum):
    """Enumerate the ways a child process invocation can end."""

    EXITED = "exited"
    TIMED_OUT = "timed_out"
    NOT_FOUND = "not_found"
    SPAWN_FAILED = "spawn_failed"


@dataclass(frozen=True, slots=True)
class Invocation:
    """Outcome of a single child process invocation."""

    status: InvocationStatus
    returncode: int | None = None
    stderr: str = ""
    reason: str | None = None

    @property
    def exited(self) -> bool:
        """Return whether the process ran to completion on its own."""

        return self.status is InvocationStatus.EXITED

    @property
    def signalled(self) -> bool:
        """Return whether the process was terminated by a signal."""

        return self.exited and self.returncode is not None and self.returncode < 0


@dataclass(slots=True)
class CommandOptions:
    """Execution options for :func:`run_command`."""

    check: bool = True
    capture_output: bool = False
    timeout: float | None = None
    discard_stdin: bool = False


class SubprocessExecutionError(RuntimeError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        """Initialise the error with captured subprocess metadata.

        Args:
            command: Normalised command sequence that was executed.
            returncode: Exit status reported by the subprocess.
            stdout: Captured standard output stream.
            stderr: Captured standard error stream.
        """
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {stderr or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _ensure_text(value: str | bytes | None) -> str | None:
    """Return ``value`` decoded to text when supplied as ``bytes``.

    Args:
        value: Stream output captured from subprocess execution.

    Returns:
        str | None: Text output or ``None`` when no data was captured.
    """

    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="replace")


def resolve_executable(binary: str) -> str | None:
    """Return an absolute executable path for ``binary`` or ``None``.

    Absolute and relative paths containing a separator are returned unchanged;
    a missing file is reported later by the spawn itself.

    Args:
        binary: Executable name or path.

    Returns:
        str | None: Executable path, or ``None`` when a bare name is not on ``PATH``.
    """

    if not binary:
        return None
    candidate = Path(binary)
    if candidate.is_absolute() or len(candidate.parts) > 1:
        return str(candidate)
    return shutil.which(binary)


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Validated argument list suitable for subprocess execution.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    resolved = resolve_executable(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def invoke(binary: str, args: Sequence[str], timeout: float | None) -> Invocation:
    """Run ``binary`` with ``args``, bounded by ``timeout`` seconds.

    Standard output is discarded and standard error is buffered in full. When
    the deadline passes the child is killed and the invocation is reported as
    :attr:`InvocationStatus.TIMED_OUT`; a child that had already exited by then
    keeps its normal exit status.

    Args:
        binary: Launcher executable name or path.
        args: Arguments passed after the executable.
        timeout: Maximum runtime in seconds, or ``None`` for no limit.

    Returns:
        Invocation: Exit, timeout, or spawn failure details. Never raises for
        process-level failures.
    """

    try:
        command = _normalize_args([binary, *args])
    except FileNotFoundError as exc:
        return Invocation(status=InvocationStatus.NOT_FOUND, reason=str(exc))

    LOGGER.debug("spawning command=%s timeout=%s", command, timeout)
    try:
        # Bandit: the command is assembled from configuration, never a shell string.
        process = subprocess.Popen(  # nosec B603
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        return Invocation(status=InvocationStatus.NOT_FOUND, reason=str(exc))
    except OSError as exc:
        return Invocation(status=InvocationStatus.SPAWN_FAILED, reason=str(exc))

    timed_out = False
    try:
        _stdout, raw_stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        # The child may have exited between the deadline and this check.
        if process.poll() is None:
            process.kill()
            timed_out = True
        _stdout, raw_stderr = process.communicate()

    stderr = _ensure_text(raw_stderr) or ""
    if timed_out:
        LOGGER.debug("command timed out after %ss: %s", timeout, command[0])
        return Invocation(
            status=InvocationStatus.TIMED_OUT,
            returncode=process.returncode,
            stderr=stderr,
            reason=f"Command timed out after {timeout:.1f}s" if timeout is not None else "Command timed out",
        )
    return Invocation(status=InvocationStatus.EXITED, returncode=process.returncode, stderr=stderr)


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
) -> CompletedProcess[str]:
    """Execute ``args`` after normalising the executable path.

    Args:
        args: Command and argument sequence to execute.
        options: Options configuring execution semantics.

    Returns:
        CompletedProcess: Subprocess execution metadata.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
        SubprocessExecutionError: When ``check`` is true and the process exits
            with a non-zero status.
    """

    normalized = _normalize_args(args)
    resolved_options = options or CommandOptions()

    try:
        # Bandit: commands originate from vetted configuration; we pass
        # argument lists directly without shell expansion.
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            check=False,
            capture_output=resolved_options.capture_output,
            text=True,
            timeout=resolved_options.timeout,
            stdin=subprocess.DEVNULL if resolved_options.discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _ensure_text(exc.stdout) or ""
        stderr = _ensure_text(exc.stderr)
        timeout_value = resolved_options.timeout
        timeout_msg = (
            f"Command timed out after {timeout_value:.1f}s" if timeout_value is not None else "Command timed out"
        )
        combined_stderr = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
        completed = subprocess.CompletedProcess(
            args=list(normalized),
            returncode=_TIMEOUT_RETURNCODE,
            stdout=stdout,
            stderr=combined_stderr,
        )

    if resolved_options.check and completed.returncode != 0:
        raise SubprocessExecutionError(
            normalized,
            completed.returncode,
            completed.stdout if isinstance(completed.stdout, str) else None,
            completed.stderr if isinstance(completed.stderr, str) else None,
        )

    return completed


__all__ = [
    "CommandOptions",
    "Invocation",
    "InvocationStatus",
    "SubprocessExecutionError",
    "invoke",
    "resolve_executable",
    "run_command",
]
