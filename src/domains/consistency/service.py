# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Consistency chain for activity record writes.

An activity (diary event) record may only be written when it is bound
consistently to its child, classroom, governing plan and curriculum
entry. The checks run in a fixed order and stop at the first failure:

    1. child exists and is actively enrolled in the classroom
    2. classroom exists
    3. caller may access the classroom
    4. plan exists
    5. plan is ACTIVE
    6. event date inside the plan period (inclusive)
    7. plan belongs to the classroom
    8. curriculum entry exists
    9. event date is the entry's institutional day
   10. entry belongs to the plan's matrix (when the plan has one)

Steps 1-4 are existence and membership checks, 5-7 bind the record to
its plan, 8-10 bind it to curriculum content. A failure is terminal for
the write attempt and its detail is reported to the caller verbatim.
"""

from collections.abc import Callable
from dataclasses import dataclass

from src.core.interfaces import RecordStore
from src.domains.access import AccessValidator
from src.domains.calendar import PedagogicalCalendar, get_calendar
from src.domains.planning.service import permits_activity_records
from src.models.common import DecisionCode
from src.models.decisions import AccessTarget, Scope, ValidationResult
from src.models.entities import (
    ActivityRecordCandidate,
    Child,
    Classroom,
    CurriculumEntry,
    Enrollment,
    Plan,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChainInput:
    """Everything a chain run judges, loaded by the caller."""

    candidate: ActivityRecordCandidate
    scope: Scope
    child: Child | None
    classroom: Classroom | None
    plan: Plan | None
    entry: CurriculumEntry | None
    enrollment: Enrollment | None


Check = Callable[[ChainInput], ValidationResult | None]


class ConsistencyChain:
    """Runs the ordered activity record checks.

    Attributes:
        access_validator: Validator used for the classroom access step.
        calendar: Calendar used for day comparisons and message dates.
    """

    def __init__(
        self,
        access_validator: AccessValidator,
        calendar: PedagogicalCalendar | None = None,
    ) -> None:
        self.access_validator = access_validator
        self.calendar = calendar or get_calendar()
        self._checks: tuple[Check, ...] = (
            self._check_enrollment,
            self._check_classroom_exists,
            self._check_classroom_access,
            self._check_plan_exists,
            self._check_plan_active,
            self._check_plan_window,
            self._check_plan_classroom,
            self._check_entry_exists,
            self._check_entry_date,
            self._check_entry_matrix,
        )

    def validate(
        self,
        candidate: ActivityRecordCandidate,
        scope: Scope,
        *,
        child: Child | None,
        classroom: Classroom | None,
        plan: Plan | None,
        entry: CurriculumEntry | None,
        enrollment: Enrollment | None,
    ) -> ValidationResult:
        """Validate a candidate against its related entities.

        Args:
            candidate: Proposed record.
            scope: Resolved scope of the caller.
            child: Referenced child, None if missing.
            classroom: Referenced classroom, None if missing.
            plan: Referenced plan, None if missing.
            entry: Referenced curriculum entry, None if missing.
            enrollment: The child's enrollment in the candidate classroom.

        Returns:
            Accepted result carrying the tenant/unit the write must carry,
            or the first rejection.
        """
        data = ChainInput(
            candidate=candidate,
            scope=scope,
            child=child,
            classroom=classroom,
            plan=plan,
            entry=entry,
            enrollment=enrollment,
        )

        for step, check in enumerate(self._checks, start=1):
            rejection = check(data)
            if rejection is not None:
                result = rejection.model_copy(update={"step": step})
                logger.info(
                    "Activity record rejected",
                    principal_id=scope.principal_id,
                    step=step,
                    code=result.code.value,
                    child_id=candidate.child_id,
                    classroom_id=candidate.classroom_id,
                    plan_id=candidate.plan_id,
                )
                return result

        # Classroom presence was established by step 2
        return ValidationResult.accepted(
            tenant_id=data.classroom.tenant_id,
            unit_id=data.classroom.unit_id,
        )

    def _check_enrollment(self, data: ChainInput) -> ValidationResult | None:
        if data.child is None:
            return ValidationResult.rejected(DecisionCode.NOT_FOUND, "Child not found")

        enrollment = data.enrollment
        if (
            enrollment is None
            or not enrollment.is_active
            or enrollment.child_id != data.child.id
            or enrollment.classroom_id != data.candidate.classroom_id
        ):
            return ValidationResult.rejected(
                DecisionCode.NOT_ENROLLED,
                "Child is not enrolled in this classroom",
            )
        return None

    def _check_classroom_exists(self, data: ChainInput) -> ValidationResult | None:
        if data.classroom is None:
            return ValidationResult.rejected(DecisionCode.NOT_FOUND, "Classroom not found")
        return None

    def _check_classroom_access(self, data: ChainInput) -> ValidationResult | None:
        decision = self.access_validator.check(data.scope, AccessTarget.for_classroom(data.classroom))
        if not decision.allowed:
            return ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                f"Not allowed to write records in this classroom: {decision.reason}",
            )
        return None

    def _check_plan_exists(self, data: ChainInput) -> ValidationResult | None:
        if data.plan is None:
            return ValidationResult.rejected(DecisionCode.NOT_FOUND, "Plan not found")
        return None

    def _check_plan_active(self, data: ChainInput) -> ValidationResult | None:
        if not permits_activity_records(data.plan.status):
            return ValidationResult.rejected(
                DecisionCode.PLAN_NOT_ACTIVE,
                f"Only active plans accept records. Current status: {data.plan.status.value.upper()}",
            )
        return None

    def _check_plan_window(self, data: ChainInput) -> ValidationResult | None:
        plan = data.plan
        event_date = data.candidate.event_date
        if not self.calendar.within(event_date, plan.start_date, plan.end_date):
            return ValidationResult.rejected(
                DecisionCode.OUT_OF_PLAN_WINDOW,
                f"Event date ({self.calendar.format(event_date)}) must fall within the plan period "
                f"({self.calendar.format(plan.start_date)} - {self.calendar.format(plan.end_date)})",
            )
        return None

    def _check_plan_classroom(self, data: ChainInput) -> ValidationResult | None:
        if data.plan.classroom_id != data.candidate.classroom_id:
            return ValidationResult.rejected(
                DecisionCode.PLAN_CLASSROOM_MISMATCH,
                "The plan does not belong to the given classroom",
            )
        return None

    def _check_entry_exists(self, data: ChainInput) -> ValidationResult | None:
        if data.entry is None:
            return ValidationResult.rejected(DecisionCode.NOT_FOUND, "Curriculum entry not found")
        return None

    def _check_entry_date(self, data: ChainInput) -> ValidationResult | None:
        event_date = data.candidate.event_date
        if not self.calendar.same_institutional_day(event_date, data.entry.date):
            return ValidationResult.rejected(
                DecisionCode.ENTRY_DATE_MISMATCH,
                f"Event date ({self.calendar.format(event_date)}) does not match the "
                f"curriculum entry date ({self.calendar.format(data.entry.date)})",
            )
        return None

    def _check_entry_matrix(self, data: ChainInput) -> ValidationResult | None:
        matrix_id = data.plan.curriculum_matrix_id
        # A plan may run without a curriculum matrix
        if matrix_id is not None and data.entry.matrix_id != matrix_id:
            return ValidationResult.rejected(
                DecisionCode.ENTRY_MATRIX_MISMATCH,
                "The curriculum entry does not belong to the plan's curriculum matrix",
            )
        return None


def validate_activity_record(
    candidate: ActivityRecordCandidate,
    scope: Scope,
    *,
    child: Child | None,
    classroom: Classroom | None,
    plan: Plan | None,
    entry: CurriculumEntry | None,
    enrollment: Enrollment | None,
    store: RecordStore,
    calendar: PedagogicalCalendar | None = None,
) -> ValidationResult:
    """Validate an activity record write against its related entities.

    Args:
        candidate: Proposed record.
        scope: Resolved scope of the caller.
        child: Referenced child, None if missing.
        classroom: Referenced classroom, None if missing.
        plan: Referenced plan, None if missing.
        entry: Referenced curriculum entry, None if missing.
        enrollment: The child's enrollment in the candidate classroom.
        store: Record store for the live access lookup.
        calendar: Calendar to use, defaults to the configured one.

    Returns:
        Accepted result or the first rejection.
    """
    chain = ConsistencyChain(AccessValidator(store), calendar=calendar)
    return chain.validate(
        candidate,
        scope,
        child=child,
        classroom=classroom,
        plan=plan,
        entry=entry,
        enrollment=enrollment,
    )
