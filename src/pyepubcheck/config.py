# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for pyepubcheck."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import DEFAULT_JAVA_PATH, DEFAULT_TIMEOUT_SECONDS
from .filesystem.paths import expand_path

ReportFormat = Literal["markdown", "text", "json"]

CONFIG_FILE_NAME: Final[str] = ".epubcheck.toml"
PYPROJECT_FILE_NAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "pyepubcheck"

ENV_OVERRIDES: Final[dict[str, str]] = {
    "EPUBCHECK_JAR": "jar_path",
    "EPUBCHECK_JAVA": "java_path",
    "EPUBCHECK_TIMEOUT": "timeout",
}


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class EpubCheckConfig(BaseModel):
    """Settings for locating the validator and writing reports."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    jar_path: Path | None = None
    java_path: str = DEFAULT_JAVA_PATH
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    report_format: ReportFormat = "markdown"
    report_directory: Path | None = None
    delete_epub_after_unzip: bool = False

    @field_validator("jar_path", "report_directory", mode="before")
    @classmethod
    def _expand_user(cls, value: object) -> object:
        """Expand ``~`` and treat empty strings as unset.

        Args:
            value: Raw path value supplied by a configuration source.

        Returns:
            object: Expanded path, ``None``, or the untouched value.
        """

        if value is None:
            return None
        if isinstance(value, str):
            if not value.strip():
                return None
            return expand_path(value)
        if isinstance(value, Path):
            return expand_path(value)
        return value

    @field_validator("java_path", mode="before")
    @classmethod
    def _default_java(cls, value: object) -> object:
        """Fall back to the default launcher when the value is blank."""

        if isinstance(value, str) and not value.strip():
            return DEFAULT_JAVA_PATH
        return value


def _read_toml(path: Path) -> dict[str, Any]:
    """Return the TOML document at ``path`` or an empty mapping.

    Raises:
        ConfigError: If the file exists but is not valid TOML.
    """

    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to read configuration from {path}: {exc}") from exc


def _pyproject_section(path: Path) -> dict[str, Any]:
    document = _read_toml(path)
    tool_section = document.get(PYPROJECT_TOOL_KEY, {})
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return dict(section)


def _env_section(env: Mapping[str, str]) -> dict[str, Any]:
    return {key: env[name] for name, key in ENV_OVERRIDES.items() if env.get(name)}


def load_config(
    root: Path,
    config_file: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> EpubCheckConfig:
    """Load configuration for ``root`` from all supported sources.

    Sources are merged in increasing precedence: built-in defaults,
    ``[tool.pyepubcheck]`` in ``pyproject.toml``, ``.epubcheck.toml``, an
    explicit ``config_file``, then ``EPUBCHECK_*`` environment variables.

    Args:
        root: Workspace root searched for configuration files.
        config_file: Optional explicit TOML file.
        env: Environment mapping; defaults to :data:`os.environ`.

    Returns:
        EpubCheckConfig: Validated configuration.

    Raises:
        ConfigError: If any source is malformed or a value fails validation.
    """

    if config_file is not None and not config_file.is_file():
        raise ConfigError(f"Configuration file {config_file} does not exist")

    merged: dict[str, Any] = {}
    merged.update(_pyproject_section(root / PYPROJECT_FILE_NAME))
    merged.update(_read_toml(root / CONFIG_FILE_NAME))
    if config_file is not None:
        merged.update(_read_toml(config_file))
    merged.update(_env_section(os.environ if env is None else env))

    try:
        return EpubCheckConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def apply_overrides(config: EpubCheckConfig, overrides: Mapping[str, object]) -> EpubCheckConfig:
    """Return a copy of ``config`` with ``overrides`` merged in and validated.

    Raises:
        ConfigError: If an override fails validation.
    """

    if not overrides:
        return config
    try:
        return EpubCheckConfig.model_validate({**config.model_dump(), **overrides})
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def validate_jar_path(config: EpubCheckConfig) -> Path:
    """Return the configured jar path after checking it exists.

    Args:
        config: Loaded configuration.

    Returns:
        Path: Existing validator jar.

    Raises:
        ConfigError: If the jar path is unset or missing on disk.
    """

    if config.jar_path is None:
        raise ConfigError(
            "Please configure the path to epubcheck.jar (jar_path in .epubcheck.toml, "
            "EPUBCHECK_JAR, or --jar).",
        )
    if not config.jar_path.is_file():
        raise ConfigError(f'epubcheck.jar not found at "{config.jar_path}". Please check your settings.')
    return config.jar_path


def resolve_report_directory(config: EpubCheckConfig, root: Path) -> Path:
    """Return where reports should be written, defaulting to ``root``."""

    return config.report_directory if config.report_directory is not None else root


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "EpubCheckConfig",
    "ReportFormat",
    "apply_overrides",
    "load_config",
    "resolve_report_directory",
    "validate_jar_path",
]
