# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helper services shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ..config import ConfigError, EpubCheckConfig, apply_overrides, load_config, validate_jar_path
from ..core.models import Diagnostic, ValidationResult
from ..core.severity import DiagnosticSeverity
from ..diagnostics import DiagnosticCollection, update_diagnostics
from ..discovery import detect_epub_directories, is_epub_directory
from ..execution import BatchSummary, ProgressCallback, ValidationRunner, status_text, summarize, summary_message
from ..logging import configure_verbose_logging
from .models import CommonOptions
from .shared import CLIError, CLILogger, build_cli_logger

EXIT_CONFIG_ERROR = 2


def prepare_logger(options: CommonOptions) -> CLILogger:
    """Return the CLI logger, enabling debug logging when requested."""

    logger = build_cli_logger(emoji=options.emoji)
    if options.verbose:
        configure_verbose_logging()
    return logger


def load_runtime_config(options: CommonOptions, *, require_jar: bool = True) -> EpubCheckConfig:
    """Load configuration for ``options.root`` and apply command-line overrides.

    Args:
        options: Parsed common options.
        require_jar: Whether the validator jar must exist on disk.

    Returns:
        EpubCheckConfig: Effective configuration.

    Raises:
        CLIError: With exit code ``2`` when configuration is invalid.
    """

    try:
        config = apply_overrides(load_config(options.root, options.config_file), options.overrides())
        if require_jar:
            validate_jar_path(config)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_CONFIG_ERROR) from exc
    return config


def build_runner(config: EpubCheckConfig) -> ValidationRunner:
    """Return a runner for the validator installation named by ``config``."""

    try:
        return ValidationRunner.from_config(config)
    except ValueError as exc:
        raise CLIError(str(exc), exit_code=EXIT_CONFIG_ERROR) from exc


def resolve_directories(paths: Sequence[Path] | None, root: Path, *, logger: CLILogger) -> list[Path]:
    """Return the project directories a command should process.

    Explicit paths that are not EPUB projects are reported and skipped.

    Raises:
        CLIError: When no project directory remains.
    """

    if not paths:
        found = detect_epub_directories(root)
        if not found:
            raise CLIError(f"No EPUB projects found in {root}. A project needs a 'mimetype' file.")
        return found

    directories: list[Path] = []
    for path in paths:
        candidate = path.expanduser().absolute()
        if is_epub_directory(candidate):
            directories.append(candidate)
        else:
            logger.warn(f"{candidate} is not a valid EPUB project (missing 'mimetype' file)")
    if not directories:
        raise CLIError("No valid EPUB project directories were given.")
    return directories


def display_path(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` when possible."""

    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def progress_reporter(logger: CLILogger, verb: str) -> ProgressCallback:
    """Return a batch progress callback that announces each directory."""

    def _report(index: int, total: int, directory: Path) -> None:
        suffix = f" ({index}/{total})" if total > 1 else ""
        logger.info(f"{verb} {directory.name}{suffix}...")

    return _report


def _emit_diagnostic(diagnostic: Diagnostic, root: Path, *, logger: CLILogger) -> None:
    start = diagnostic.range.start
    first_line, *rest = diagnostic.message.split("\n")
    text = (
        f"{display_path(diagnostic.file, root)}:{start.line + 1}:{start.character + 1}: "
        f"{diagnostic.severity.value} [{diagnostic.code}] {first_line}"
    )
    if diagnostic.severity is DiagnosticSeverity.ERROR:
        logger.fail(text)
    elif diagnostic.severity is DiagnosticSeverity.WARNING:
        logger.warn(text)
    else:
        logger.info(text)
    for line in rest:
        logger.echo(f"    {line}")


def emit_results(results: Sequence[ValidationResult], root: Path, *, logger: CLILogger) -> DiagnosticCollection:
    """Print run errors, reconciliation notes and diagnostics for a batch.

    Returns:
        DiagnosticCollection: Diagnostics published for the batch.
    """

    for result in results:
        for note in result.notes:
            logger.warn(f"{result.project_dir.name}: {note}")
        if result.error:
            logger.fail(f"{result.project_dir.name}: {result.error}")

    collection = DiagnosticCollection()
    update_diagnostics(collection, results)
    if len(collection):
        logger.section("Diagnostics")
    for path in collection.files():
        for diagnostic in collection.get(path):
            _emit_diagnostic(diagnostic, root, logger=logger)
    return collection


def emit_summary(results: Sequence[ValidationResult], *, logger: CLILogger) -> BatchSummary:
    """Print the batch status line and return the aggregated summary."""

    summary = summarize(results)
    status = status_text(summary, len(results))
    if summary.ok:
        logger.ok(f"{status}. {summary_message(summary)}")
    elif summary.has_execution_error and summary.errors == 0:
        logger.fail(status)
    else:
        logger.fail(f"{status}. {summary_message(summary)}")
    return summary


__all__ = [
    "EXIT_CONFIG_ERROR",
    "build_runner",
    "display_path",
    "emit_results",
    "emit_summary",
    "load_runtime_config",
    "prepare_logger",
    "progress_reporter",
    "resolve_directories",
]
