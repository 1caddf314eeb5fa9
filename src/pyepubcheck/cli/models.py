# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared option declarations and data structures for the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Workspace root scanned for EPUB projects."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Explicit TOML configuration file."),
]
JAR_OPTION = Annotated[
    Path | None,
    typer.Option("--jar", help="Path to epubcheck.jar (overrides configuration)."),
]
JAVA_OPTION = Annotated[
    str | None,
    typer.Option("--java", help="Java launcher used to run the jar."),
]
TIMEOUT_OPTION = Annotated[
    float | None,
    typer.Option("--timeout", help="Seconds before a validator run is killed."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log internal progress at debug level."),
]
DIRECTORIES_ARGUMENT = Annotated[
    list[Path] | None,
    typer.Argument(help="EPUB project directories; the workspace is scanned when omitted."),
]
ARCHIVES_ARGUMENT = Annotated[
    list[Path] | None,
    typer.Argument(help="Packaged .epub files; the workspace is scanned when omitted."),
]
FORMAT_OPTION = Annotated[
    str | None,
    typer.Option("--format", "-f", help="Report format: markdown, text or json."),
]
OUTPUT_DIR_OPTION = Annotated[
    Path | None,
    typer.Option("--output-dir", "-o", help="Directory that receives the report."),
]
DELETE_ARCHIVE_OPTION = Annotated[
    bool | None,
    typer.Option(
        "--delete-archive/--keep-archive",
        help="Delete each .epub after extracting it (defaults to configuration).",
        show_default=False,
    ),
]


@dataclass(slots=True)
class CommonOptions:
    """Options shared by every command."""

    root: Path
    config_file: Path | None
    jar: Path | None
    java: str | None
    timeout: float | None
    emoji: bool
    verbose: bool

    def overrides(self) -> dict[str, object]:
        """Return configuration values supplied on the command line."""

        values: dict[str, object] = {"jar_path": self.jar, "java_path": self.java, "timeout": self.timeout}
        return {key: value for key, value in values.items() if value is not None}


def build_common_options(
    *,
    root: Path | None,
    config_file: Path | None,
    jar: Path | None,
    java: str | None,
    timeout: float | None,
    emoji: bool,
    verbose: bool,
) -> CommonOptions:
    """Return :class:`CommonOptions` with ``root`` made absolute."""

    resolved_root = (root or Path.cwd()).expanduser().absolute()
    return CommonOptions(
        root=resolved_root,
        config_file=config_file.expanduser() if config_file is not None else None,
        jar=jar,
        java=java,
        timeout=timeout,
        emoji=emoji,
        verbose=verbose,
    )


__all__ = [
    "ARCHIVES_ARGUMENT",
    "CONFIG_OPTION",
    "DELETE_ARCHIVE_OPTION",
    "DIRECTORIES_ARGUMENT",
    "EMOJI_OPTION",
    "FORMAT_OPTION",
    "JAR_OPTION",
    "JAVA_OPTION",
    "OUTPUT_DIR_OPTION",
    "ROOT_OPTION",
    "TIMEOUT_OPTION",
    "VERBOSE_OPTION",
    "CommonOptions",
    "build_common_options",
]
