# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy implementation of the RecordStore protocol.

Rows are converted to immutable snapshots before they leave a session,
so callers never hold live ORM objects. Database failures surface as
StoreUnavailableError and are never retried here.

Example:
    from src.infrastructure.database import DatabaseManager, SqlAlchemyRecordStore

    manager = DatabaseManager(settings)
    store = SqlAlchemyRecordStore(manager.session)
    plan = store.get_plan(plan_id)
"""

from contextlib import AbstractContextManager
from typing import Callable, TypeVar

from sqlalchemy import Select, case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.errors import StoreUnavailableError
from src.infrastructure.database.models import (
    ActivityRecordModel,
    ChildModel,
    ClassroomModel,
    ClassroomTeacherModel,
    CurriculumEntryModel,
    CurriculumMatrixModel,
    EnrollmentModel,
    PlanModel,
    UnitModel,
)
from src.models.common import (
    ActivityRecordStatus,
    EnrollmentStatus,
    MatrixStatus,
    PlanStatus,
)
from src.models.decisions import RecordFilter
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
from src.utils.datetime import ensure_utc
from src.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SessionFactory = Callable[[], AbstractContextManager[Session]]


class SqlAlchemyRecordStore:
    """Read-only record store backed by a relational database.

    Attributes:
        session_factory: Callable returning a session context manager,
            typically DatabaseManager.session.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    def _read(self, operation: str, query: Callable[[Session], T]) -> T:
        try:
            with self.session_factory() as session:
                return query(session)
        except SQLAlchemyError as e:
            logger.error("Record store query failed", operation=operation, error=str(e))
            raise StoreUnavailableError(f"Record store unavailable during {operation}", e) from e

    # Units and classrooms

    def get_unit(self, unit_id: str) -> Unit | None:
        def query(session: Session) -> Unit | None:
            row = session.get(UnitModel, unit_id)
            return _unit(row) if row else None

        return self._read("get_unit", query)

    def list_unit_ids(self, tenant_id: str) -> list[str]:
        stmt = (
            select(UnitModel.id)
            .where(UnitModel.tenant_id == tenant_id, UnitModel.is_active.is_(True))
            .order_by(UnitModel.id)
        )
        return self._read("list_unit_ids", lambda s: list(s.execute(stmt).scalars()))

    def get_classroom(self, classroom_id: str) -> Classroom | None:
        def query(session: Session) -> Classroom | None:
            row = session.get(ClassroomModel, classroom_id)
            return _classroom(row) if row else None

        return self._read("get_classroom", query)

    def has_active_teacher_link(self, teacher_id: str, classroom_id: str) -> bool:
        stmt = select(func.count()).select_from(ClassroomTeacherModel).where(
            ClassroomTeacherModel.teacher_id == teacher_id,
            ClassroomTeacherModel.classroom_id == classroom_id,
            ClassroomTeacherModel.is_active.is_(True),
        )
        return self._read("has_active_teacher_link", lambda s: s.execute(stmt).scalar_one() > 0)

    def list_teacher_classroom_ids(self, teacher_id: str, unit_id: str | None = None) -> list[str]:
        stmt = (
            select(ClassroomTeacherModel.classroom_id)
            .join(ClassroomModel, ClassroomModel.id == ClassroomTeacherModel.classroom_id)
            .where(
                ClassroomTeacherModel.teacher_id == teacher_id,
                ClassroomTeacherModel.is_active.is_(True),
                ClassroomModel.is_active.is_(True),
            )
            .order_by(ClassroomTeacherModel.classroom_id)
        )
        if unit_id is not None:
            stmt = stmt.where(ClassroomModel.unit_id == unit_id)
        return self._read("list_teacher_classroom_ids", lambda s: list(s.execute(stmt).scalars()))

    # Children

    def get_child(self, child_id: str) -> Child | None:
        def query(session: Session) -> Child | None:
            row = session.get(ChildModel, child_id)
            if row is None:
                return None
            return Child(
                id=row.id,
                tenant_id=row.tenant_id,
                first_name=row.first_name,
                last_name=row.last_name,
            )

        return self._read("get_child", query)

    def get_enrollment(self, child_id: str, classroom_id: str) -> Enrollment | None:
        active_first = case((EnrollmentModel.status == EnrollmentStatus.ACTIVE.value, 0), else_=1)
        stmt = (
            select(EnrollmentModel)
            .where(
                EnrollmentModel.child_id == child_id,
                EnrollmentModel.classroom_id == classroom_id,
            )
            .order_by(active_first, EnrollmentModel.enrolled_on.desc())
            .limit(1)
        )

        def query(session: Session) -> Enrollment | None:
            row = session.execute(stmt).scalar_one_or_none()
            if row is None:
                return None
            return Enrollment(
                id=row.id,
                child_id=row.child_id,
                classroom_id=row.classroom_id,
                status=EnrollmentStatus(row.status),
                enrolled_on=row.enrolled_on,
            )

        return self._read("get_enrollment", query)

    # Plans and curriculum

    def get_plan(self, plan_id: str) -> Plan | None:
        def query(session: Session) -> Plan | None:
            row = session.get(PlanModel, plan_id)
            if row is None:
                return None
            return Plan(
                id=row.id,
                classroom_id=row.classroom_id,
                start_date=row.start_date,
                end_date=row.end_date,
                status=PlanStatus(row.status),
                curriculum_matrix_id=row.curriculum_matrix_id,
                title=row.title,
            )

        return self._read("get_plan", query)

    def get_curriculum_matrix(self, matrix_id: str) -> CurriculumMatrix | None:
        def query(session: Session) -> CurriculumMatrix | None:
            row = session.get(CurriculumMatrixModel, matrix_id)
            return _matrix(row) if row else None

        return self._read("get_curriculum_matrix", query)

    def get_curriculum_entry(self, entry_id: str) -> CurriculumEntry | None:
        def query(session: Session) -> CurriculumEntry | None:
            row = session.get(CurriculumEntryModel, entry_id)
            if row is None:
                return None
            return CurriculumEntry(
                id=row.id,
                matrix_id=row.matrix_id,
                date=row.date,
                experience_field=row.experience_field,
                objective_code=row.objective_code,
            )

        return self._read("get_curriculum_entry", query)

    def find_curriculum_matrices(
        self,
        tenant_id: str,
        year: int,
        segment: str,
        version: int,
    ) -> list[CurriculumMatrix]:
        stmt = select(CurriculumMatrixModel).where(
            CurriculumMatrixModel.tenant_id == tenant_id,
            CurriculumMatrixModel.year == year,
            CurriculumMatrixModel.segment == segment,
            CurriculumMatrixModel.version == version,
        )
        return self._read(
            "find_curriculum_matrices",
            lambda s: [_matrix(row) for row in s.execute(stmt).scalars()],
        )

    def count_plans_for_matrix(self, matrix_id: str) -> int:
        stmt = select(func.count()).select_from(PlanModel).where(
            PlanModel.curriculum_matrix_id == matrix_id
        )
        return self._read("count_plans_for_matrix", lambda s: s.execute(stmt).scalar_one())

    # Activity records

    def get_activity_record(self, record_id: str) -> ActivityRecord | None:
        def query(session: Session) -> ActivityRecord | None:
            row = session.get(ActivityRecordModel, record_id)
            return _activity_record(row) if row else None

        return self._read("get_activity_record", query)

    def list_activity_records(
        self,
        record_filter: RecordFilter,
        include_archived: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ActivityRecord]:
        """List activity records visible through a scope filter.

        Args:
            record_filter: Filter from ActivityRecordService.list_filter.
            include_archived: Include archived records.
            limit: Maximum rows returned.
            offset: Rows skipped.

        Returns:
            Records ordered by event date, newest first.
        """
        if record_filter.is_empty:
            return []

        stmt = _apply_filter(select(ActivityRecordModel), record_filter)
        if not include_archived:
            stmt = stmt.where(ActivityRecordModel.status == ActivityRecordStatus.ACTIVE.value)
        stmt = (
            stmt.order_by(ActivityRecordModel.event_date.desc(), ActivityRecordModel.id)
            .limit(limit)
            .offset(offset)
        )
        return self._read(
            "list_activity_records",
            lambda s: [_activity_record(row) for row in s.execute(stmt).scalars()],
        )


def _apply_filter(stmt: Select, record_filter: RecordFilter) -> Select:
    if record_filter.unrestricted:
        return stmt
    if record_filter.tenant_id is not None:
        stmt = stmt.where(ActivityRecordModel.tenant_id == record_filter.tenant_id)
    if record_filter.unit_ids is not None:
        stmt = stmt.where(ActivityRecordModel.unit_id.in_(sorted(record_filter.unit_ids)))
    if record_filter.classroom_ids is not None:
        stmt = stmt.where(ActivityRecordModel.classroom_id.in_(sorted(record_filter.classroom_ids)))
    return stmt


def _unit(row: UnitModel) -> Unit:
    return Unit(id=row.id, tenant_id=row.tenant_id, name=row.name, is_active=row.is_active)


def _classroom(row: ClassroomModel) -> Classroom:
    return Classroom(
        id=row.id,
        tenant_id=row.tenant_id,
        unit_id=row.unit_id,
        name=row.name,
        is_active=row.is_active,
    )


def _matrix(row: CurriculumMatrixModel) -> CurriculumMatrix:
    return CurriculumMatrix(
        id=row.id,
        tenant_id=row.tenant_id,
        year=row.year,
        segment=row.segment,
        version=row.version,
        name=row.name,
        status=MatrixStatus(row.status),
    )


def _activity_record(row: ActivityRecordModel) -> ActivityRecord:
    return ActivityRecord(
        id=row.id,
        child_id=row.child_id,
        classroom_id=row.classroom_id,
        plan_id=row.plan_id,
        curriculum_entry_id=row.curriculum_entry_id,
        # SQLite drops tzinfo on the way back
        event_date=ensure_utc(row.event_date),
        tenant_id=row.tenant_id,
        unit_id=row.unit_id,
        created_by=row.created_by,
        status=ActivityRecordStatus(row.status),
        event_type=row.event_type,
        title=row.title,
        description=row.description,
    )
