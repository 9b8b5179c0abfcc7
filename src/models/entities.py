# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Read models of the entities the engine judges.

These are immutable snapshots handed out by a RecordStore. The engine
never mutates them; persistence belongs to the calling application.
"""

from datetime import date, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from src.models.common import (
    ActivityRecordStatus,
    EnrollmentStatus,
    MatrixStatus,
    PlanStatus,
)


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


class Unit(_Snapshot):
    """A physical site belonging to a tenant."""

    id: str
    tenant_id: str
    name: str = ""
    is_active: bool = True


class Classroom(_Snapshot):
    """A group of children within a unit."""

    id: str
    tenant_id: str
    unit_id: str
    name: str = ""
    is_active: bool = True


class TeacherLink(_Snapshot):
    """Assignment of a teacher to a classroom."""

    classroom_id: str
    teacher_id: str
    is_active: bool = True


class Child(_Snapshot):
    """A child attending a tenant's units."""

    id: str
    tenant_id: str
    first_name: str = ""
    last_name: str = ""


class Enrollment(_Snapshot):
    """Enrollment of a child in a classroom."""

    id: str
    child_id: str
    classroom_id: str
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    enrolled_on: date | None = None

    @property
    def is_active(self) -> bool:
        """Check if the enrollment is active."""
        return self.status == EnrollmentStatus.ACTIVE


class Plan(_Snapshot):
    """A time-boxed pedagogical plan governing a classroom's records.

    Attributes:
        start_date: First institutional day covered (inclusive).
        end_date: Last institutional day covered (inclusive).
            An inverted interval covers no day at all.
        curriculum_matrix_id: Linked curriculum matrix, if any.
    """

    id: str
    classroom_id: str
    start_date: date
    end_date: date
    status: PlanStatus = PlanStatus.DRAFT
    curriculum_matrix_id: str | None = None
    title: str = ""


class CurriculumMatrix(_Snapshot):
    """A tenant's dated curriculum content catalog."""

    id: str
    tenant_id: str
    year: int
    segment: str
    version: int = 1
    name: str = ""
    status: MatrixStatus = MatrixStatus.ACTIVE

    @property
    def is_retired(self) -> bool:
        """Check if the matrix was retired."""
        return self.status == MatrixStatus.RETIRED


class CurriculumEntry(_Snapshot):
    """A dated item of a curriculum matrix.

    Attributes:
        date: Calendar date of the entry. Stores may hand out either a
            plain date or a UTC instant marking that date.
        experience_field: BNCC field of experience (campo de experiência).
        objective_code: Learning objective code.
    """

    id: str
    matrix_id: str
    date: datetime | date
    experience_field: str | None = None
    objective_code: str | None = None


class ActivityRecordCandidate(_Snapshot):
    """A proposed activity (diary event) record, before it is written."""

    child_id: str
    classroom_id: str
    plan_id: str
    curriculum_entry_id: str
    event_date: datetime
    event_type: str | None = None
    title: str = ""
    description: str = ""
    tags: tuple[str, ...] = ()
    media_urls: tuple[str, ...] = ()


class ActivityRecord(_Snapshot):
    """A stored activity (diary event) record.

    tenant_id and unit_id are denormalized from the classroom at creation
    so that scope checks need no join.
    """

    id: str
    child_id: str
    classroom_id: str
    plan_id: str
    curriculum_entry_id: str
    event_date: datetime
    tenant_id: str
    unit_id: str
    created_by: str
    status: ActivityRecordStatus = ActivityRecordStatus.ACTIVE
    event_type: str | None = None
    title: str = ""
    description: str = ""

    @property
    def is_archived(self) -> bool:
        """Check if the record was archived."""
        return self.status == ActivityRecordStatus.ARCHIVED

    def to_candidate(self, **changes: Any) -> ActivityRecordCandidate:
        """Build the candidate this record would become after changes.

        Args:
            **changes: Field overrides (event_date, plan_id, ...).

        Returns:
            Merged candidate.
        """
        fields = {
            "child_id": self.child_id,
            "classroom_id": self.classroom_id,
            "plan_id": self.plan_id,
            "curriculum_entry_id": self.curriculum_entry_id,
            "event_date": self.event_date,
            "event_type": self.event_type,
            "title": self.title,
            "description": self.description,
        }
        fields.update({key: value for key, value in changes.items() if value is not None})
        return ActivityRecordCandidate(**fields)


class ActivityRecordChanges(_Snapshot):
    """Partial update of an activity record. None means unchanged."""

    event_date: datetime | None = None
    plan_id: str | None = None
    curriculum_entry_id: str | None = None
    classroom_id: str | None = None
    child_id: str | None = None
    event_type: str | None = None
    title: str | None = None
    description: str | None = None
    tags: tuple[str, ...] | None = None

    # Changing any of these re-binds the record to plan and curriculum
    BINDING_FIELDS: ClassVar[frozenset[str]] = frozenset({
        "event_date",
        "plan_id",
        "curriculum_entry_id",
        "classroom_id",
        "child_id",
    })

    def touches_bindings(self) -> bool:
        """Check if the change requires re-running the consistency chain."""
        return any(getattr(self, name) is not None for name in self.BINDING_FIELDS)
