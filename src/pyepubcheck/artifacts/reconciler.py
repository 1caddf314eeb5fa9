# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Protect, locate, and restore packaged artifacts around a validator run.

The validator's ``--save`` flag writes ``<name>.epub`` either inside the
project directory or next to it, replacing whatever is already there. The
reconciler parks a pre-existing artifact under a hidden name before the run,
moves the freshly generated artifact to the canonical sibling path afterwards,
and finally puts the parked file back without overwriting anything.

States advance ``START -> PROTECTED -> INVOKED -> LOCATED -> RESTORED -> END``.
Any state may jump straight to ``RESTORED`` so every exit path resolves the
backup; :meth:`ArtifactReconciler.session` enforces this.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final

from ..filesystem.paths import (
    backup_path_for,
    canonical_artifact_path,
    inside_artifact_path,
    unique_path,
)

LOGGER = logging.getLogger(__name__)


class ReconcileState(str, Enum):
    """Lifecycle states of a reconciliation session."""

    START = "start"
    PROTECTED = "protected"
    INVOKED = "invoked"
    LOCATED = "located"
    RESTORED = "restored"
    END = "end"


class ReconcileStateError(RuntimeError):
    """Raised when reconciliation steps are called out of order."""


_TRANSITIONS: Final[dict[ReconcileState, frozenset[ReconcileState]]] = {
    ReconcileState.START: frozenset({ReconcileState.PROTECTED, ReconcileState.RESTORED}),
    ReconcileState.PROTECTED: frozenset({ReconcileState.INVOKED, ReconcileState.LOCATED, ReconcileState.RESTORED}),
    ReconcileState.INVOKED: frozenset({ReconcileState.LOCATED, ReconcileState.RESTORED}),
    ReconcileState.LOCATED: frozenset({ReconcileState.RESTORED}),
    ReconcileState.RESTORED: frozenset({ReconcileState.END}),
    ReconcileState.END: frozenset(),
}


@dataclass(frozen=True, slots=True)
class ProtectedBackup:
    """A pre-existing artifact temporarily renamed out of the way."""

    original: Path
    backup: Path


@dataclass(slots=True)
class ReconcileReport:
    """Where things ended up after a reconciliation session."""

    artifact_path: Path | None = None
    restored_path: Path | None = None
    notes: list[str] = field(default_factory=list)

    def note(self, message: str) -> None:
        """Record a best-effort failure that did not stop the run."""

        LOGGER.warning(message)
        self.notes.append(message)


class ArtifactReconciler:
    """Bracket one validator run with artifact protection and recovery."""

    def __init__(
        self,
        project_dir: Path,
        *,
        enabled: bool = True,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        """Create a reconciler for ``project_dir``.

        Args:
            project_dir: Expanded EPUB directory being packaged.
            enabled: ``False`` when the run does not produce an artifact; every
                step then becomes a no-op apart from state tracking.
            clock: Nanosecond clock used for backup names.
        """

        self.project_dir = Path(project_dir)
        self.canonical_path = canonical_artifact_path(self.project_dir)
        self.enabled = enabled
        self.state = ReconcileState.START
        self.backup: ProtectedBackup | None = None
        self.report = ReconcileReport()
        self._clock = clock
        self._unprotected_stat: tuple[int, int] | None = None

    def _advance(self, target: ReconcileState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise ReconcileStateError(f"cannot move from {self.state.value} to {target.value}")
        self.state = target

    def protect(self) -> ProtectedBackup | None:
        """Move an existing canonical artifact aside before the run.

        A failed rename is recorded and the run proceeds unprotected.

        Returns:
            ProtectedBackup | None: The parked artifact, if any.
        """

        self._advance(ReconcileState.PROTECTED)
        if not self.enabled or not self.canonical_path.exists():
            return None
        backup = unique_path(backup_path_for(self.canonical_path, clock=self._clock))
        try:
            self.canonical_path.rename(backup)
        except OSError as exc:
            self._unprotected_stat = self._stat_signature(self.canonical_path)
            self.report.note(f"Could not protect existing {self.canonical_path.name}: {exc}")
            return None
        LOGGER.debug("protected %s as %s", self.canonical_path, backup)
        self.backup = ProtectedBackup(original=self.canonical_path, backup=backup)
        return self.backup

    def mark_invoked(self) -> None:
        """Record that the validator process has finished."""

        self._advance(ReconcileState.INVOKED)

    def locate(self) -> Path | None:
        """Find the generated artifact and settle it at the canonical path.

        Returns:
            Path | None: Final artifact location, or ``None`` when nothing was produced.
        """

        self._advance(ReconcileState.LOCATED)
        if not self.enabled:
            return None

        inside = inside_artifact_path(self.project_dir)
        if inside.is_file():
            self.report.artifact_path = self._settle_inside_artifact(inside)
        elif self.canonical_path.is_file() and not self._is_unprotected_original():
            self.report.artifact_path = self.canonical_path
        return self.report.artifact_path

    def _settle_inside_artifact(self, inside: Path) -> Path:
        if self.canonical_path.exists():
            # Only reachable when protection failed; the file there is the user's.
            self.report.note(
                f"{self.canonical_path.name} is occupied; leaving the generated artifact at {inside}",
            )
            return inside
        try:
            inside.rename(self.canonical_path)
        except OSError as exc:
            self.report.note(f"Could not move generated artifact to {self.canonical_path}: {exc}")
            return inside
        LOGGER.debug("moved %s to %s", inside, self.canonical_path)
        return self.canonical_path

    @staticmethod
    def _stat_signature(path: Path) -> tuple[int, int] | None:
        try:
            stat = path.stat()
        except OSError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def _is_unprotected_original(self) -> bool:
        if self._unprotected_stat is None:
            return False
        return self._stat_signature(self.canonical_path) == self._unprotected_stat

    def restore(self) -> Path | None:
        """Return the parked artifact to a free name.

        The canonical path is used when it is empty; otherwise the first free
        ``<stem> (N)<suffix>`` name. Calling this more than once is harmless.

        Returns:
            Path | None: Where the original artifact now lives, if one was parked.
        """

        if self.state in {ReconcileState.RESTORED, ReconcileState.END}:
            return self.report.restored_path
        self._advance(ReconcileState.RESTORED)
        backup = self.backup
        if backup is None or not backup.backup.exists():
            return None

        destination = unique_path(backup.original)
        try:
            backup.backup.rename(destination)
        except OSError as exc:
            self.report.note(f"Could not restore {backup.original.name} to {destination.name}: {exc}")
            destination = self._restore_fallback(backup)
            if destination is None:
                return None
        LOGGER.debug("restored %s to %s", backup.backup, destination)
        self.report.restored_path = destination
        return destination

    def _restore_fallback(self, backup: ProtectedBackup) -> Path | None:
        if backup.original.exists():
            self.report.note(f"Original artifact left at {backup.backup}")
            return None
        try:
            backup.backup.rename(backup.original)
        except OSError as exc:
            self.report.note(f"Original artifact left at {backup.backup}: {exc}")
            return None
        return backup.original

    def finish(self) -> ReconcileReport:
        """Close the session, restoring first if that has not happened yet.

        Returns:
            ReconcileReport: Final artifact and restore locations.
        """

        self.restore()
        self._advance(ReconcileState.END)
        return self.report

    @contextmanager
    def session(self) -> Iterator[ArtifactReconciler]:
        """Protect on entry and always restore on exit.

        Yields:
            ArtifactReconciler: This reconciler, already in ``PROTECTED`` state.
        """

        self.protect()
        try:
            yield self
        finally:
            self.finish()


__all__ = [
    "ArtifactReconciler",
    "ProtectedBackup",
    "ReconcileReport",
    "ReconcileState",
    "ReconcileStateError",
]
