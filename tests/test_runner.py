# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the single-directory validation runner."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from pyepubcheck.config import EpubCheckConfig
from pyepubcheck.core.models import OutcomeKind, RunRequest
from pyepubcheck.execution import ValidationRunner, build_arguments
from pyepubcheck.runtime.process import Invocation, InvocationStatus

from .helpers import make_check_result, make_message


class StubInvoker:
    """Invoker double that writes validator output instead of spawning Java."""

    def __init__(
        self,
        *,
        result: dict[str, Any] | str | None = None,
        artifact: str | None = None,
        invocation: Invocation | None = None,
        on_call: Callable[[Sequence[str]], None] | None = None,
    ) -> None:
        self.result = result
        self.artifact = artifact
        self.invocation = invocation or Invocation(status=InvocationStatus.EXITED, returncode=0)
        self.on_call = on_call
        self.calls: list[tuple[str, list[str], float | None]] = []
        self.result_files: list[Path] = []

    def __call__(self, binary: str, args: Sequence[str], timeout: float | None) -> Invocation:
        arguments = list(args)
        self.calls.append((binary, arguments, timeout))
        project = Path(arguments[arguments.index("exp") + 1])
        if "--json" in arguments:
            target = Path(arguments[arguments.index("--json") + 1])
            self.result_files.append(target)
            if self.result is not None:
                payload = self.result if isinstance(self.result, str) else json.dumps(self.result)
                target.write_text(payload, encoding="utf-8")
        if self.artifact is not None:
            name = f"{project.name}.epub"
            where = project / name if self.artifact == "inside" else project.parent / name
            where.write_text("NEW", encoding="utf-8")
        if self.on_call is not None:
            self.on_call(arguments)
        return self.invocation


def _runner(invoker: StubInvoker, jar: Path, tmp_path: Path, **kwargs: Any) -> ValidationRunner:
    return ValidationRunner(jar_path=jar, invoker=invoker, temp_dir=tmp_path, **kwargs)


def test_build_arguments_orders_flags(tmp_path: Path) -> None:
    request = RunRequest(
        project_dir=tmp_path / "book",
        produce_artifact=True,
        timeout=10,
        jar_path=tmp_path / "epubcheck.jar",
        java_path="java",
    )

    arguments = build_arguments(request, tmp_path / "out.json")

    assert arguments == [
        "-jar",
        str(tmp_path / "epubcheck.jar"),
        "-mode",
        "exp",
        str(tmp_path / "book"),
        "--json",
        str(tmp_path / "out.json"),
        "--save",
    ]


def test_build_arguments_without_json_or_save(tmp_path: Path) -> None:
    request = RunRequest(
        project_dir=tmp_path / "book",
        produce_artifact=False,
        timeout=10,
        jar_path=tmp_path / "epubcheck.jar",
        java_path="java",
    )

    arguments = build_arguments(request, None)

    assert "--json" not in arguments
    assert "--save" not in arguments


def test_clean_run_sets_canonical_artifact(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(result=make_check_result(), artifact="sibling")

    result = _runner(invoker, fake_jar, tmp_path).run(epub_project)

    assert result.success
    assert result.kind is OutcomeKind.SUCCESS
    assert result.artifact_path == epub_project.parent / "book.epub"
    assert result.check_result is not None
    assert result.check_result.publication is not None
    assert result.check_result.publication.title == "Sample Book"
    assert list(epub_project.parent.glob(".epubcheck-protect-*")) == []


def test_existing_artifact_survives_as_numbered_copy(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    canonical = epub_project.parent / "book.epub"
    canonical.write_text("ORIGINAL", encoding="utf-8")
    invoker = StubInvoker(result=make_check_result(), artifact="sibling")

    result = _runner(invoker, fake_jar, tmp_path).run(epub_project)

    assert result.artifact_path == canonical
    assert canonical.read_text(encoding="utf-8") == "NEW"
    assert (epub_project.parent / "book (2).epub").read_text(encoding="utf-8") == "ORIGINAL"


def test_errors_in_output_mark_validation_failed(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(
        result=make_check_result(make_message("ERROR"), make_message("WARNING", message_id="OPF-001")),
        invocation=Invocation(status=InvocationStatus.EXITED, returncode=1),
    )

    result = _runner(invoker, fake_jar, tmp_path).run(epub_project, produce_artifact=False)

    assert not result.success
    assert result.kind is OutcomeKind.VALIDATION_FAILED
    assert result.error is None
    assert result.check_result is not None
    assert len(result.check_result.messages) == 2
    assert "--save" not in invoker.calls[0][1]


def test_result_file_is_removed_after_run(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(result=make_check_result())

    _runner(invoker, fake_jar, tmp_path).run(epub_project)

    assert invoker.result_files
    assert not invoker.result_files[0].exists()


def test_result_files_are_unique_per_run(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(result=make_check_result())
    runner = _runner(invoker, fake_jar, tmp_path)

    runner.run(epub_project)
    runner.run(epub_project)

    assert invoker.result_files[0] != invoker.result_files[1]


def test_missing_output_is_execution_failure(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(
        invocation=Invocation(status=InvocationStatus.EXITED, returncode=2, stderr="Unable to access jarfile\n"),
    )

    result = _runner(invoker, fake_jar, tmp_path).run(epub_project)

    assert result.kind is OutcomeKind.EXECUTION_FAILURE
    assert result.is_execution_error
    assert result.error is not None
    assert result.error.startswith("EPUBCheck failed to produce valid output.")
    assert "Details: Unable to access jarfile" in result.error
    assert "Exit code: 2" in result.error


def test_malformed_output_is_execution_failure(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(result='{"messages": "not a list"}')

    result = _runner(invoker, fake_jar, tmp_path).run(epub_project)

    assert result.kind is OutcomeKind.EXECUTION_FAILURE
    assert result.check_result is None


def test_undecodable_output_is_execution_failure(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    def _write_bytes(arguments: Sequence[str]) -> None:
        target = Path(arguments[arguments.index("--json") + 1])
        target.write_bytes(b'{"checker": {"name": "\xff\xfe"}, "messages": []}')

    invoker = StubInvoker(on_call=_write_bytes)

    result = _runner(invoker, fake_jar, tmp_path).run(epub_project)

    assert result.kind is OutcomeKind.EXECUTION_FAILURE
    assert result.check_result is None
    assert result.error is not None
    assert not invoker.result_files[0].exists()


def test_missing_launcher_is_tool_not_found(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    canonical = epub_project.parent / "book.epub"
    canonical.write_text("ORIGINAL", encoding="utf-8")
    invoker = StubInvoker(invocation=Invocation(status=InvocationStatus.NOT_FOUND, reason="missing"))

    result = _runner(invoker, fake_jar, tmp_path, java_path="/opt/java/bin/java").run(epub_project)

    assert result.kind is OutcomeKind.TOOL_NOT_FOUND
    assert result.error is not None
    assert '"/opt/java/bin/java"' in result.error
    assert "https://adoptium.net/" in result.error
    assert canonical.read_text(encoding="utf-8") == "ORIGINAL"


def test_signalled_process_counts_as_timeout(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(invocation=Invocation(status=InvocationStatus.EXITED, returncode=-9))

    result = _runner(invoker, fake_jar, tmp_path, timeout=30).run(epub_project)

    assert result.kind is OutcomeKind.TIMEOUT
    assert result.error == (
        "EPUBCheck timed out after 30 seconds. You can increase the timeout in settings (timeout)."
    )


def test_timeout_restores_existing_artifact(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    canonical = epub_project.parent / "book.epub"
    canonical.write_text("ORIGINAL", encoding="utf-8")
    invoker = StubInvoker(invocation=Invocation(status=InvocationStatus.TIMED_OUT, returncode=-9))

    result = _runner(invoker, fake_jar, tmp_path, timeout=5).run(epub_project)

    assert result.kind is OutcomeKind.TIMEOUT
    assert result.artifact_path is None
    assert canonical.read_text(encoding="utf-8") == "ORIGINAL"
    assert list(epub_project.parent.glob(".epubcheck-protect-*")) == []


def test_generate_without_artifact_after_exit_one(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(invocation=Invocation(status=InvocationStatus.EXITED, returncode=1))

    result = _runner(invoker, fake_jar, tmp_path).generate(epub_project)

    assert result.kind is OutcomeKind.VALIDATION_FAILED
    assert result.artifact_path is None
    assert result.error is not None
    assert "aborted EPUB generation" in result.error
    assert "--json" not in invoker.calls[0][1]


def test_generate_success_reports_artifact(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(artifact="inside")

    result = _runner(invoker, fake_jar, tmp_path).generate(epub_project)

    assert result.success
    assert result.artifact_path == epub_project.parent / "book.epub"
    assert not (epub_project / "book.epub").exists()


def test_generate_unexpected_exit_code(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker(invocation=Invocation(status=InvocationStatus.EXITED, returncode=3, stderr="crash"))

    result = _runner(invoker, fake_jar, tmp_path).generate(epub_project)

    assert result.kind is OutcomeKind.EXECUTION_FAILURE
    assert result.error == "EPUBCheck failed with exit code 3.\ncrash"


def test_generate_clean_exit_without_artifact(epub_project: Path, fake_jar: Path, tmp_path: Path) -> None:
    invoker = StubInvoker()

    result = _runner(invoker, fake_jar, tmp_path).generate(epub_project)

    assert result.kind is OutcomeKind.EXECUTION_FAILURE
    assert result.error == "EPUBCheck did not generate an EPUB file."


def test_from_config_requires_jar() -> None:
    with pytest.raises(ValueError):
        ValidationRunner.from_config(EpubCheckConfig())


def test_from_config_copies_settings(fake_jar: Path) -> None:
    runner = ValidationRunner.from_config(EpubCheckConfig(jar_path=fake_jar, java_path="/usr/bin/java", timeout=5))

    assert runner.jar_path == fake_jar
    assert runner.java_path == "/usr/bin/java"
    assert runner.timeout == 5


def test_real_process_timeout_removes_result_file(
    epub_project: Path,
    fake_jar: Path,
    tmp_path: Path,
    fake_validator: Callable[..., Path],
) -> None:
    record = tmp_path / "args.json"
    launcher = fake_validator(sleep=30, record=str(record), result=make_check_result())
    runner = ValidationRunner(jar_path=fake_jar, java_path=str(launcher), timeout=1, temp_dir=tmp_path)

    result = runner.run(epub_project)

    assert result.kind is OutcomeKind.TIMEOUT
    arguments = json.loads(record.read_text(encoding="utf-8"))
    result_file = Path(arguments[arguments.index("--json") + 1])
    assert not result_file.exists()


def test_real_process_round_trip(
    epub_project: Path,
    fake_jar: Path,
    tmp_path: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(result=make_check_result(make_message("WARNING")), artifact="inside")
    runner = ValidationRunner(jar_path=fake_jar, java_path=str(launcher), timeout=30, temp_dir=tmp_path)

    result = runner.run(epub_project)

    assert result.kind is OutcomeKind.SUCCESS
    assert result.artifact_path == epub_project.parent / "book.epub"
    assert list(tmp_path.glob("epubcheck-*.json")) == []
