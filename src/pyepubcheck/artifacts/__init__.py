# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Artifact protection and placement around validator runs."""

from __future__ import annotations

from .reconciler import (
    ArtifactReconciler,
    ProtectedBackup,
    ReconcileReport,
    ReconcileState,
    ReconcileStateError,
)

__all__ = [
    "ArtifactReconciler",
    "ProtectedBackup",
    "ReconcileReport",
    "ReconcileState",
    "ReconcileStateError",
]
