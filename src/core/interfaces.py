# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Protocols of the engine's external collaborators.

The engine consumes three collaborators and owns none of them:
- RecordStore: read-only point lookups and membership queries
- AuditSink: notified by callers after a decision
- Clock: institutional "now", never consulted by validation

Implementations raise StoreUnavailableError for connectivity problems;
the engine lets it propagate unchanged.
"""

from datetime import date, datetime
from typing import Protocol, runtime_checkable

from src.models.decisions import AuditEvent
from src.models.entities import (
    ActivityRecord,
    Child,
    Classroom,
    CurriculumEntry,
    CurriculumMatrix,
    Enrollment,
    Plan,
    Unit,
)


@runtime_checkable
class RecordStore(Protocol):
    """Read-only view of the tenant records the engine judges."""

    def get_unit(self, unit_id: str) -> Unit | None: ...

    def list_unit_ids(self, tenant_id: str) -> list[str]:
        """Return the identifiers of every active unit of a tenant."""
        ...

    def get_classroom(self, classroom_id: str) -> Classroom | None: ...

    def has_active_teacher_link(self, teacher_id: str, classroom_id: str) -> bool:
        """Check for an active teacher <-> classroom link, live."""
        ...

    def list_teacher_classroom_ids(self, teacher_id: str, unit_id: str | None = None) -> list[str]:
        """Return active classrooms the teacher is actively linked to."""
        ...

    def get_child(self, child_id: str) -> Child | None: ...

    def get_enrollment(self, child_id: str, classroom_id: str) -> Enrollment | None:
        """Return the child's enrollment in a classroom.

        An active enrollment is preferred over inactive ones.
        """
        ...

    def get_plan(self, plan_id: str) -> Plan | None: ...

    def get_curriculum_matrix(self, matrix_id: str) -> CurriculumMatrix | None: ...

    def get_curriculum_entry(self, entry_id: str) -> CurriculumEntry | None: ...

    def find_curriculum_matrices(
        self,
        tenant_id: str,
        year: int,
        segment: str,
        version: int,
    ) -> list[CurriculumMatrix]:
        """Return matrices of a tenant matching year, segment and version."""
        ...

    def count_plans_for_matrix(self, matrix_id: str) -> int:
        """Return how many plans reference a curriculum matrix."""
        ...

    def get_activity_record(self, record_id: str) -> ActivityRecord | None: ...


@runtime_checkable
class AuditSink(Protocol):
    """Receives decision notifications from callers."""

    def record(self, event: AuditEvent) -> None: ...


@runtime_checkable
class Clock(Protocol):
    """Supplies current institutional time."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...
