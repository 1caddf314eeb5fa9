# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for child process invocation helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from pyepubcheck.runtime.process import (
    CommandOptions,
    InvocationStatus,
    SubprocessExecutionError,
    invoke,
    resolve_executable,
    run_command,
)


def test_invoke_reports_exit_code_and_stderr() -> None:
    invocation = invoke(sys.executable, ["-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"], 30)

    assert invocation.status is InvocationStatus.EXITED
    assert invocation.returncode == 3
    assert invocation.stderr == "boom"
    assert not invocation.signalled


def test_invoke_discards_stdout() -> None:
    invocation = invoke(sys.executable, ["-c", "print('hello')"], 30)

    assert invocation.exited
    assert invocation.returncode == 0
    assert invocation.stderr == ""


def test_invoke_kills_process_after_timeout() -> None:
    invocation = invoke(sys.executable, ["-c", "import time; time.sleep(30)"], 0.5)

    assert invocation.status is InvocationStatus.TIMED_OUT
    assert invocation.reason is not None
    assert "timed out" in invocation.reason


def test_invoke_reports_missing_launcher_on_path() -> None:
    invocation = invoke("pyepubcheck-missing-launcher", ["-version"], 5)

    assert invocation.status is InvocationStatus.NOT_FOUND
    assert invocation.returncode is None


def test_invoke_reports_missing_absolute_launcher(tmp_path: Path) -> None:
    invocation = invoke(str(tmp_path / "no-such-java"), ["-version"], 5)

    assert invocation.status is InvocationStatus.NOT_FOUND


def test_resolve_executable_keeps_explicit_paths(tmp_path: Path) -> None:
    explicit = tmp_path / "bin" / "java"

    assert resolve_executable(str(explicit)) == str(explicit)
    assert resolve_executable("") is None
    assert resolve_executable("pyepubcheck-missing-launcher") is None


def test_run_command_raises_on_failure_when_checked() -> None:
    with pytest.raises(SubprocessExecutionError) as excinfo:
        run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(2)"],
            options=CommandOptions(capture_output=True),
        )

    assert excinfo.value.returncode == 2
    assert excinfo.value.stderr == "bad"


def test_run_command_returns_output_when_unchecked() -> None:
    completed = run_command(
        [sys.executable, "-c", "print('ok')"],
        options=CommandOptions(capture_output=True, check=False, discard_stdin=True),
    )

    assert completed.returncode == 0
    assert completed.stdout.strip() == "ok"


def test_run_command_maps_timeout_to_exit_code() -> None:
    completed = run_command(
        [sys.executable, "-c", "import time; time.sleep(30)"],
        options=CommandOptions(capture_output=True, check=False, timeout=0.5),
    )

    assert completed.returncode == 124
    assert "timed out" in completed.stderr
