# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Destinations that receive mapped diagnostics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..core.models import Diagnostic, ValidationResult
from .mapper import DiagnosticMapper, LineLookup


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receiver of immutable diagnostic batches (problems panel, CI annotations, ...)."""

    def clear(self) -> None:
        """Drop every previously published diagnostic."""

    def publish(self, diagnostics: Mapping[Path, Sequence[Diagnostic]]) -> None:
        """Replace the diagnostics for each file in ``diagnostics``."""


class DiagnosticCollection:
    """In-memory :class:`DiagnosticSink` keyed by absolute file path."""

    def __init__(self) -> None:
        self._entries: dict[Path, tuple[Diagnostic, ...]] = {}

    def clear(self) -> None:
        self._entries.clear()

    def publish(self, diagnostics: Mapping[Path, Sequence[Diagnostic]]) -> None:
        for path, entries in diagnostics.items():
            self._entries[path] = tuple(entries)

    def get(self, path: Path) -> tuple[Diagnostic, ...]:
        """Return the diagnostics currently stored for ``path``."""

        return self._entries.get(path, ())

    def files(self) -> list[Path]:
        """Return the files that currently carry diagnostics, sorted."""

        return sorted(self._entries)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())


def update_diagnostics(
    sink: DiagnosticSink,
    results: Iterable[ValidationResult],
    *,
    line_lookup: LineLookup | None = None,
) -> dict[Path, list[Diagnostic]]:
    """Clear ``sink`` and publish the diagnostics for one batch.

    Args:
        sink: Destination for the diagnostics.
        results: Batch results from the runner.
        line_lookup: Optional file line provider for range widening.

    Returns:
        dict[Path, list[Diagnostic]]: The mapping that was published.
    """

    mapped = DiagnosticMapper(line_lookup).map_results(results)
    sink.clear()
    sink.publish(mapped)
    return mapped


__all__ = ["DiagnosticCollection", "DiagnosticSink", "update_diagnostics"]
