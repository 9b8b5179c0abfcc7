# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models of the record store.

Model classes are also exported with a Model suffix so they never clash
with the snapshot types of src.models.entities.
"""

from src.infrastructure.database.models.base import Base, IdMixin, new_id
from src.infrastructure.database.models.pedagogy import (
    ActivityRecord,
    CurriculumEntry,
    CurriculumMatrix,
    Plan,
)
from src.infrastructure.database.models.school import (
    Child,
    Classroom,
    ClassroomTeacher,
    Enrollment,
    Tenant,
    Unit,
)

ActivityRecordModel = ActivityRecord
ChildModel = Child
ClassroomModel = Classroom
ClassroomTeacherModel = ClassroomTeacher
CurriculumEntryModel = CurriculumEntry
CurriculumMatrixModel = CurriculumMatrix
EnrollmentModel = Enrollment
PlanModel = Plan
TenantModel = Tenant
UnitModel = Unit

__all__ = [
    "Base",
    "IdMixin",
    "new_id",
    "ActivityRecord",
    "Child",
    "Classroom",
    "ClassroomTeacher",
    "CurriculumEntry",
    "CurriculumMatrix",
    "Enrollment",
    "Plan",
    "Tenant",
    "Unit",
    "ActivityRecordModel",
    "ChildModel",
    "ClassroomModel",
    "ClassroomTeacherModel",
    "CurriculumEntryModel",
    "CurriculumMatrixModel",
    "EnrollmentModel",
    "PlanModel",
    "TenantModel",
    "UnitModel",
]
