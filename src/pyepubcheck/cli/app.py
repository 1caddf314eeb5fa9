# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the validator commands."""

from __future__ import annotations

from pathlib import Path

import typer

from ..config import ConfigError, apply_overrides, resolve_report_directory
from ..constants import EPUB_SUFFIX
from ..discovery import find_epub_files
from ..execution import BatchMode, run_batch
from ..extractor import extract_epub
from ..reporting import write_report
from .models import (
    ARCHIVES_ARGUMENT,
    CONFIG_OPTION,
    DELETE_ARCHIVE_OPTION,
    DIRECTORIES_ARGUMENT,
    EMOJI_OPTION,
    FORMAT_OPTION,
    JAR_OPTION,
    JAVA_OPTION,
    OUTPUT_DIR_OPTION,
    ROOT_OPTION,
    TIMEOUT_OPTION,
    VERBOSE_OPTION,
    build_common_options,
)
from .services import (
    EXIT_CONFIG_ERROR,
    build_runner,
    display_path,
    emit_results,
    emit_summary,
    load_runtime_config,
    prepare_logger,
    progress_reporter,
    resolve_directories,
)
from .shared import CLIError

app = typer.Typer(
    name="pyepubcheck",
    help="Validate and package expanded EPUB projects with EPUBCheck.",
    add_completion=False,
    no_args_is_help=True,
)


@app.command("validate")
def validate_command(
    directories: DIRECTORIES_ARGUMENT = None,
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    jar: JAR_OPTION = None,
    java: JAVA_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Package each project into a sibling ``.epub`` and validate it.

    Raises:
        typer.Exit: Always raised with ``0`` on success, ``1`` on failures and
            ``2`` on configuration errors.
    """

    options = build_common_options(
        root=root, config_file=config_file, jar=jar, java=java, timeout=timeout, emoji=emoji, verbose=verbose
    )
    logger = prepare_logger(options)
    try:
        runner = build_runner(load_runtime_config(options))
        targets = resolve_directories(directories, options.root, logger=logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    results = run_batch(runner, targets, mode=BatchMode.VALIDATE, on_progress=progress_reporter(logger, "Validating"))
    emit_results(results, options.root, logger=logger)
    for result in results:
        if result.artifact_path is not None:
            logger.info(f"EPUB written to {display_path(result.artifact_path, options.root)}")
    summary = emit_summary(results, logger=logger)
    raise typer.Exit(code=0 if summary.ok else 1)


@app.command("generate")
def generate_command(
    directories: DIRECTORIES_ARGUMENT = None,
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    jar: JAR_OPTION = None,
    java: JAVA_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Package each project into a sibling ``.epub`` without JSON output."""

    options = build_common_options(
        root=root, config_file=config_file, jar=jar, java=java, timeout=timeout, emoji=emoji, verbose=verbose
    )
    logger = prepare_logger(options)
    try:
        runner = build_runner(load_runtime_config(options))
        targets = resolve_directories(directories, options.root, logger=logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    results = run_batch(runner, targets, mode=BatchMode.GENERATE, on_progress=progress_reporter(logger, "Generating"))
    failed = 0
    for result in results:
        for note in result.notes:
            logger.warn(f"{result.project_dir.name}: {note}")
        if result.success and result.artifact_path is not None:
            logger.ok(
                f"{result.artifact_path.name} generated successfully at "
                f"{display_path(result.artifact_path, options.root)}"
            )
            continue
        failed += 1
        logger.fail(f"{result.project_dir.name}: {result.error or 'EPUB generation failed.'}")
    raise typer.Exit(code=1 if failed else 0)


@app.command("report")
def report_command(
    directories: DIRECTORIES_ARGUMENT = None,
    report_format: FORMAT_OPTION = None,
    output_dir: OUTPUT_DIR_OPTION = None,
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    jar: JAR_OPTION = None,
    java: JAVA_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Validate each project and save a report file."""

    options = build_common_options(
        root=root, config_file=config_file, jar=jar, java=java, timeout=timeout, emoji=emoji, verbose=verbose
    )
    logger = prepare_logger(options)
    report_overrides: dict[str, object] = {}
    if report_format is not None:
        report_overrides["report_format"] = report_format.lower()
    if output_dir is not None:
        report_overrides["report_directory"] = output_dir
    try:
        config = apply_overrides(load_runtime_config(options), report_overrides)
        runner = build_runner(config)
        targets = resolve_directories(directories, options.root, logger=logger)
    except ConfigError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    results = run_batch(runner, targets, mode=BatchMode.VALIDATE, on_progress=progress_reporter(logger, "Validating"))
    emit_results(results, options.root, logger=logger)
    summary = emit_summary(results, logger=logger)

    report_path = write_report(results, resolve_report_directory(config, options.root), config.report_format)
    if report_path is None:
        logger.fail("Failed to save the validation report.")
        raise typer.Exit(code=1)
    logger.ok(f"Report saved to {display_path(report_path, options.root)}")
    raise typer.Exit(code=0 if summary.ok else 1)


@app.command("unzip")
def unzip_command(
    archives: ARCHIVES_ARGUMENT = None,
    delete_archive: DELETE_ARCHIVE_OPTION = None,
    root: ROOT_OPTION = Path("."),
    config_file: CONFIG_OPTION = None,
    jar: JAR_OPTION = None,
    java: JAVA_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Extract packaged ``.epub`` files and validate the extracted projects."""

    options = build_common_options(
        root=root, config_file=config_file, jar=jar, java=java, timeout=timeout, emoji=emoji, verbose=verbose
    )
    logger = prepare_logger(options)
    try:
        config = load_runtime_config(options)
        runner = build_runner(config)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    candidates = [path.expanduser().absolute() for path in archives] if archives else find_epub_files(options.root)
    if not candidates:
        logger.fail(f"No .epub files found in {options.root}.")
        raise typer.Exit(code=1)

    remove_archive = config.delete_epub_after_unzip if delete_archive is None else delete_archive
    extracted: list[Path] = []
    failures = 0
    for archive in candidates:
        if not archive.is_file() or archive.suffix.lower() != EPUB_SUFFIX:
            logger.warn(f"{archive} is not an .epub file")
            failures += 1
            continue
        destination = extract_epub(archive)
        if destination is None:
            logger.fail(f"Failed to extract {archive.name}.")
            failures += 1
            continue
        logger.ok(f"Extracted {archive.name} to {display_path(destination, options.root)}")
        extracted.append(destination)
        if remove_archive:
            try:
                archive.unlink()
            except OSError as exc:
                logger.warn(f"Could not delete {archive.name}: {exc}")

    if not extracted:
        raise typer.Exit(code=1)

    results = run_batch(runner, extracted, mode=BatchMode.CHECK, on_progress=progress_reporter(logger, "Validating"))
    emit_results(results, options.root, logger=logger)
    summary = emit_summary(results, logger=logger)
    raise typer.Exit(code=0 if summary.ok and not failures else 1)


def main() -> None:
    """Run the ``pyepubcheck`` console script."""

    app()


__all__ = ["app", "main"]
