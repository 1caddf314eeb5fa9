# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI tests driving the commands against a fake validator launcher."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pyepubcheck.cli import app as cli_app
from pyepubcheck.cli.app import app

from .helpers import make_check_result, make_message


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("EPUBCHECK_JAR", "EPUBCHECK_JAVA", "EPUBCHECK_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def _invoke(root: Path, jar: Path, launcher: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(
        app,
        [*args, "--root", str(root), "--jar", str(jar), "--java", str(launcher), "--no-emoji"],
    )


def test_validate_clean_project(
    epub_project: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(result=make_check_result(), artifact="sibling")

    result = _invoke(epub_project.parent, fake_jar, launcher, "validate")

    assert result.exit_code == 0, result.output
    assert "EPUB OK" in result.output
    assert "EPUB written to book.epub" in result.output
    assert (epub_project.parent / "book.epub").is_file()


def test_validate_reports_diagnostics_and_fails(
    epub_project: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(result=make_check_result(make_message("ERROR")), exit=1)

    result = _invoke(epub_project.parent, fake_jar, launcher, "validate", str(epub_project))

    assert result.exit_code == 1
    assert "book/EPUB/content.xhtml:5:3: error [RSC-005] Error while parsing file" in result.output
    assert "1 error" in result.output


def test_validate_without_jar_is_configuration_error(tmp_path: Path, epub_project: Path) -> None:
    result = CliRunner().invoke(app, ["validate", "--root", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 2
    assert "epubcheck.jar" in result.output


def test_validate_without_projects(
    tmp_path: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(result=make_check_result())

    result = _invoke(tmp_path, fake_jar, launcher, "validate")

    assert result.exit_code == 1
    assert "No EPUB projects found" in result.output


def test_validate_skips_non_project_paths(
    tmp_path: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(result=make_check_result())
    plain = tmp_path / "plain"
    plain.mkdir()

    result = _invoke(tmp_path, fake_jar, launcher, "validate", str(plain))

    assert result.exit_code == 1
    assert "is not a valid EPUB project" in result.output


def test_generate_reports_location(
    epub_project: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(artifact="inside")

    result = _invoke(epub_project.parent, fake_jar, launcher, "generate")

    assert result.exit_code == 0, result.output
    assert "book.epub generated successfully at book.epub" in result.output
    assert not (epub_project / "book.epub").exists()


def test_generate_aborted_by_validation_errors(
    epub_project: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(exit=1)

    result = _invoke(epub_project.parent, fake_jar, launcher, "generate")

    assert result.exit_code == 1
    assert "aborted EPUB generation" in result.output


def test_report_writes_json_file(
    epub_project: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(result=make_check_result(make_message("WARNING")), artifact="sibling")
    output_dir = epub_project.parent / "reports"

    result = _invoke(
        epub_project.parent,
        fake_jar,
        launcher,
        "report",
        "--format",
        "json",
        "--output-dir",
        str(output_dir),
    )

    assert result.exit_code == 0, result.output
    [report] = list(output_dir.glob("book-epubcheck-report-*.json"))
    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload[0]["messages"][0]["severity"] == "WARNING"


def test_report_rejects_unknown_format(
    epub_project: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
) -> None:
    launcher = fake_validator(result=make_check_result())

    result = _invoke(epub_project.parent, fake_jar, launcher, "report", "--format", "pdf")

    assert result.exit_code == 2


def test_unzip_extracts_and_checks(
    tmp_path: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    archive = tmp_path / "novel.epub"
    archive.write_bytes(b"PK")
    record = tmp_path / "args.json"
    launcher = fake_validator(result=make_check_result(), record=str(record))

    def _extract(path: Path, *, platform: str | None = None) -> Path:
        destination = path.parent / path.stem
        destination.mkdir()
        (destination / "mimetype").write_text("application/epub+zip", encoding="utf-8")
        return destination

    monkeypatch.setattr(cli_app, "extract_epub", _extract)

    result = _invoke(tmp_path, fake_jar, launcher, "unzip", str(archive), "--delete-archive")

    assert result.exit_code == 0, result.output
    assert "Extracted novel.epub to novel" in result.output
    assert not archive.exists()
    arguments = json.loads(record.read_text(encoding="utf-8"))
    assert "--save" not in arguments
    assert arguments[arguments.index("exp") + 1] == str(tmp_path / "novel")


def test_unzip_reports_extraction_failure(
    tmp_path: Path,
    fake_jar: Path,
    fake_validator: Callable[..., Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    archive = tmp_path / "broken.epub"
    archive.write_bytes(b"PK")
    launcher = fake_validator(result=make_check_result())
    monkeypatch.setattr(cli_app, "extract_epub", lambda path, platform=None: None)

    result = _invoke(tmp_path, fake_jar, launcher, "unzip")

    assert result.exit_code == 1
    assert "Failed to extract broken.epub" in result.output
    assert archive.exists()
