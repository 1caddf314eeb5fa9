# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the pyepubcheck package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeAlias

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .severity import CheckSeverity, DiagnosticSeverity, is_blocking

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]


class _CheckModel(BaseModel):
    """Base model for the validator's JSON document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class CheckLocation(_CheckModel):
    """Source location attached to a validator message (1-based)."""

    path: str
    line: int = -1
    column: int = -1
    context: str | None = None


class CheckMessage(_CheckModel):
    """Single validation message reported by the validator."""

    id: str = Field(alias="ID")
    severity: CheckSeverity | str = Field(union_mode="left_to_right")
    message: str
    suggestion: str | None = None
    additional_locations: int = Field(default=0, alias="additionalLocations")
    locations: tuple[CheckLocation, ...] = Field(default_factory=tuple)

    @field_validator("severity", mode="before")
    @classmethod
    def _normalise_severity(cls, value: object) -> object:
        """Upper-case textual severities before enum coercion.

        Args:
            value: Raw severity value from the JSON payload.

        Returns:
            object: Normalised severity candidate.
        """

        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def blocking(self) -> bool:
        """Return whether the message marks the publication as invalid."""

        return is_blocking(self.severity)

    @property
    def severity_label(self) -> str:
        """Return the textual severity as reported by the validator."""

        return self.severity.value if isinstance(self.severity, CheckSeverity) else str(self.severity)


class Checker(_CheckModel):
    """Identity of the validator that produced a result."""

    name: str = ""
    version: str | None = None
    checker_version: str | None = Field(default=None, alias="checkerVersion")

    @property
    def display_version(self) -> str:
        """Return the most specific version string available."""

        return self.checker_version or self.version or "unknown"


class Publication(_CheckModel):
    """Publication metadata extracted by the validator."""

    title: str | None = None
    creator: tuple[str, ...] = Field(default_factory=tuple)
    language: str | None = None
    publisher: str | None = None
    identifier: str | None = None
    date: str | None = None
    epub_version: str | None = Field(default=None, validation_alias=AliasChoices("ePubVersion", "epub_version"))

    @field_validator("creator", mode="before")
    @classmethod
    def _coerce_creator(cls, value: object) -> object:
        """Accept a single creator string as a one-element tuple."""

        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value


class ManifestItem(_CheckModel):
    """Manifest entry described by the validator."""

    id: str
    file_name: str = Field(alias="fileName")
    media_type: str = ""


class CheckResult(_CheckModel):
    """Parsed validator output document."""

    checker: Checker
    publication: Publication | None = None
    items: tuple[ManifestItem, ...] = Field(default_factory=tuple)
    messages: tuple[CheckMessage, ...]

    def has_errors(self) -> bool:
        """Return whether any message is FATAL or ERROR.

        Returns:
            bool: ``True`` when the publication failed validation.
        """

        return any(message.blocking for message in self.messages)


class OutcomeKind(str, Enum):
    """Classify how a validator run finished."""

    SUCCESS = "success"
    VALIDATION_FAILED = "validation_failed"
    EXECUTION_FAILURE = "execution_failure"
    TIMEOUT = "timeout"
    TOOL_NOT_FOUND = "tool_not_found"


@dataclass(frozen=True, slots=True)
class RunRequest:
    """Immutable parameters for a single validator invocation."""

    project_dir: Path
    produce_artifact: bool
    timeout: float
    jar_path: Path
    java_path: str


class ValidationResult(BaseModel):
    """Caller-facing outcome of one validator run.

    :attr:`kind` records how the run finished. Consumers should rely on it,
    not on :attr:`error`, to tell execution problems from validation findings.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    project_dir: Path
    kind: OutcomeKind
    check_result: CheckResult | None = None
    error: str | None = None
    artifact_path: Path | None = None
    notes: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def is_execution_error(self) -> bool:
        """Return whether the run failed before producing validation output."""

        return self.check_result is None and self.error is not None


class Position(BaseModel):
    """Zero-based line/character pair."""

    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class Range(BaseModel):
    """Half-open range between two positions."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class Diagnostic(BaseModel):
    """Location-anchored diagnostic derived from a validator message."""

    model_config = ConfigDict(frozen=True)

    file: Path
    range: Range
    message: str
    severity: DiagnosticSeverity
    code: str
    source: str


__all__ = [
    "CheckLocation",
    "CheckMessage",
    "CheckResult",
    "Checker",
    "Diagnostic",
    "JsonValue",
    "ManifestItem",
    "OutcomeKind",
    "Position",
    "Publication",
    "Range",
    "RunRequest",
    "ValidationResult",
]
