# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run the validator against one expanded EPUB directory."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Final

from ..artifacts.reconciler import ArtifactReconciler, ReconcileReport
from ..constants import (
    DEFAULT_JAVA_PATH,
    DEFAULT_TIMEOUT_SECONDS,
    EXIT_CLEAN,
    EXIT_VALIDATION_ERRORS,
    JAVA_DOWNLOAD_URL,
    TOOL_NAME,
)
from ..core.models import CheckResult, OutcomeKind, RunRequest, ValidationResult
from ..runtime.process import Invocation, InvocationStatus, invoke
from .result_file import ResultFileError, allocate_result_file, load_check_result, remove_quietly

if TYPE_CHECKING:
    from ..config import EpubCheckConfig

LOGGER = logging.getLogger(__name__)

Invoker = Callable[[str, Sequence[str], float | None], Invocation]

_GENERATION_EXIT_CODES: Final[frozenset[int]] = frozenset({EXIT_CLEAN, EXIT_VALIDATION_ERRORS})


def build_arguments(request: RunRequest, result_file: Path | None) -> list[str]:
    """Return the launcher arguments for ``request``.

    Args:
        request: Run parameters.
        result_file: JSON output location, or ``None`` to skip JSON output.

    Returns:
        list[str]: ``-jar <jar> -mode exp <dir> [--json <file>] [--save]``.
    """

    args = ["-jar", str(request.jar_path), "-mode", "exp", str(request.project_dir)]
    if result_file is not None:
        args.extend(["--json", str(result_file)])
    if request.produce_artifact:
        args.append("--save")
    return args


def _finished_normally(invocation: Invocation) -> bool:
    return invocation.exited and not invocation.signalled


class ValidationRunner:
    """Compose process invocation and artifact reconciliation for one directory."""

    def __init__(
        self,
        *,
        jar_path: Path,
        java_path: str = DEFAULT_JAVA_PATH,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        invoker: Invoker = invoke,
        temp_dir: Path | None = None,
    ) -> None:
        """Create a runner bound to a validator installation.

        Args:
            jar_path: Path to the validator jar.
            java_path: Launcher executable used to start the jar.
            timeout: Seconds before a run is killed.
            invoker: Process invoker, replaceable for testing.
            temp_dir: Directory for private result files; defaults to the system temp dir.
        """

        self.jar_path = Path(jar_path)
        self.java_path = java_path
        self.timeout = timeout
        self._invoker = invoker
        self._temp_dir = temp_dir

    @classmethod
    def from_config(cls, config: EpubCheckConfig, *, invoker: Invoker = invoke) -> ValidationRunner:
        """Build a runner from loaded configuration.

        Args:
            config: Configuration providing jar, launcher and timeout values.
            invoker: Process invoker, replaceable for testing.

        Returns:
            ValidationRunner: Runner using the configured installation.

        Raises:
            ValueError: If the configuration has no jar path.
        """

        if config.jar_path is None:
            raise ValueError("jar_path is not configured")
        return cls(jar_path=config.jar_path, java_path=config.java_path, timeout=config.timeout, invoker=invoker)

    def request(self, project_dir: Path, produce_artifact: bool) -> RunRequest:
        """Return the immutable request for one invocation."""

        return RunRequest(
            project_dir=Path(project_dir).absolute(),
            produce_artifact=produce_artifact,
            timeout=self.timeout,
            jar_path=self.jar_path,
            java_path=self.java_path,
        )

    def run(self, project_dir: Path, produce_artifact: bool = True) -> ValidationResult:
        """Validate ``project_dir`` and optionally package it.

        Args:
            project_dir: Expanded EPUB directory.
            produce_artifact: ``True`` to pass ``--save`` and reconcile the artifact.

        Returns:
            ValidationResult: Classified outcome; never raises for tool failures.
        """

        request = self.request(project_dir, produce_artifact)
        result_file = allocate_result_file(self._temp_dir)
        reconciler = ArtifactReconciler(request.project_dir, enabled=request.produce_artifact)
        try:
            with reconciler.session():
                invocation = self._invoker(request.java_path, build_arguments(request, result_file), request.timeout)
                if _finished_normally(invocation):
                    reconciler.mark_invoked()
                    reconciler.locate()
            return self._classify_validation(request, invocation, result_file, reconciler.report)
        finally:
            remove_quietly(result_file)

    def generate(self, project_dir: Path) -> ValidationResult:
        """Package ``project_dir`` without requesting JSON output.

        The process exit code is the only success signal: ``0`` is clean,
        ``1`` means validation errors (generation may have been aborted), any
        other code is an execution failure.

        Args:
            project_dir: Expanded EPUB directory.

        Returns:
            ValidationResult: Classified outcome with the artifact location.
        """

        request = self.request(project_dir, True)
        reconciler = ArtifactReconciler(request.project_dir, enabled=True)
        with reconciler.session():
            invocation = self._invoker(request.java_path, build_arguments(request, None), request.timeout)
            if _finished_normally(invocation):
                reconciler.mark_invoked()
                reconciler.locate()
        return self._classify_generation(request, invocation, reconciler.report)

    def _classify_validation(
        self,
        request: RunRequest,
        invocation: Invocation,
        result_file: Path,
        report: ReconcileReport,
    ) -> ValidationResult:
        failure = self._classify_process_failure(request, invocation, report)
        if failure is not None:
            return failure

        try:
            check_result = load_check_result(result_file)
        except ResultFileError as exc:
            LOGGER.debug("%s", exc)
            return _result(
                request,
                OutcomeKind.EXECUTION_FAILURE,
                report,
                error=_execution_failure_message(invocation),
            )

        kind = OutcomeKind.VALIDATION_FAILED if check_result.has_errors() else OutcomeKind.SUCCESS
        return _result(request, kind, report, check_result=check_result)

    def _classify_generation(
        self,
        request: RunRequest,
        invocation: Invocation,
        report: ReconcileReport,
    ) -> ValidationResult:
        failure = self._classify_process_failure(request, invocation, report)
        if failure is not None:
            return failure

        code = invocation.returncode
        if code not in _GENERATION_EXIT_CODES:
            stderr = invocation.stderr.strip()
            return _result(
                request,
                OutcomeKind.EXECUTION_FAILURE,
                report,
                error=f"{TOOL_NAME} failed with exit code {code}.\n{stderr}".rstrip(),
            )
        if report.artifact_path is not None:
            return _result(request, OutcomeKind.SUCCESS, report)
        if code == EXIT_VALIDATION_ERRORS:
            return _result(
                request,
                OutcomeKind.VALIDATION_FAILED,
                report,
                error=(
                    f"{TOOL_NAME} aborted EPUB generation due to validation errors. Fix the errors and try again."
                ),
            )
        return _result(
            request,
            OutcomeKind.EXECUTION_FAILURE,
            report,
            error=f"{TOOL_NAME} did not generate an EPUB file.",
        )

    def _classify_process_failure(
        self,
        request: RunRequest,
        invocation: Invocation,
        report: ReconcileReport,
    ) -> ValidationResult | None:
        if invocation.status is InvocationStatus.NOT_FOUND:
            return _result(
                request,
                OutcomeKind.TOOL_NOT_FOUND,
                report,
                error=(
                    f'Java not found at "{request.java_path}". Please install Java 11 or above, '
                    "or configure the path in settings (java_path).\n\n"
                    f"Download Java: {JAVA_DOWNLOAD_URL}"
                ),
            )
        if invocation.status is InvocationStatus.SPAWN_FAILED:
            return _result(
                request,
                OutcomeKind.EXECUTION_FAILURE,
                report,
                error=f"Failed to run {TOOL_NAME}: {invocation.reason}",
            )
        if invocation.status is InvocationStatus.TIMED_OUT or invocation.signalled:
            return _result(
                request,
                OutcomeKind.TIMEOUT,
                report,
                error=(
                    f"{TOOL_NAME} timed out after {request.timeout:g} seconds. "
                    "You can increase the timeout in settings (timeout)."
                ),
            )
        return None


def _execution_failure_message(invocation: Invocation) -> str:
    message = f"{TOOL_NAME} failed to produce valid output."
    stderr = invocation.stderr.strip()
    if stderr:
        message += f"\nDetails: {stderr}"
    if invocation.returncode not in (None, EXIT_CLEAN):
        message += f"\nExit code: {invocation.returncode}"
    return message


def _result(
    request: RunRequest,
    kind: OutcomeKind,
    report: ReconcileReport,
    *,
    check_result: CheckResult | None = None,
    error: str | None = None,
) -> ValidationResult:
    return ValidationResult(
        success=kind is OutcomeKind.SUCCESS,
        project_dir=request.project_dir,
        kind=kind,
        check_result=check_result,
        error=error,
        artifact_path=report.artifact_path,
        notes=tuple(report.notes),
    )


__all__ = ["Invoker", "ValidationRunner", "build_arguments"]
