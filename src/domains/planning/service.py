# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Plan status gate and plan write policy.

Plans move DRAFT -> ACTIVE -> CLOSED, and ACTIVE -> DRAFT is allowed for
rework. CLOSED is terminal: no status change, no edits, no new records.

Who may act:
- Status transitions: TENANT_OWNER, REGIONAL_STAFF and UNIT_STAFF (SUPER
  bypasses the role check, never the state machine). Teachers never.
- Plan creation: any level but TEACHER.
- Plan edits: never on CLOSED plans; teachers only on DRAFT plans of
  classrooms they are actively linked to.

A plan with existing activity records may still be deactivated or closed.
"""

from collections.abc import Mapping

from src.domains.access import AccessValidator
from src.models.common import DecisionCode, PlanStatus, RoleLevel
from src.models.decisions import AccessTarget, Scope, ValidationResult
from src.models.entities import Classroom, Plan
from src.utils.logging import get_logger

logger = get_logger(__name__)

PLAN_TRANSITIONS: Mapping[PlanStatus, frozenset[PlanStatus]] = {
    PlanStatus.DRAFT: frozenset({PlanStatus.ACTIVE}),
    PlanStatus.ACTIVE: frozenset({PlanStatus.CLOSED, PlanStatus.DRAFT}),
    PlanStatus.CLOSED: frozenset(),
}

TRANSITION_LEVELS: frozenset[RoleLevel] = frozenset({
    RoleLevel.SUPER,
    RoleLevel.TENANT_OWNER,
    RoleLevel.REGIONAL_STAFF,
    RoleLevel.UNIT_STAFF,
})


def permits_activity_records(status: PlanStatus) -> bool:
    """Check if a plan in this status accepts new activity records."""
    return status == PlanStatus.ACTIVE


def is_terminal(status: PlanStatus) -> bool:
    """Check if a plan status has no outgoing transition."""
    return not PLAN_TRANSITIONS[status]


def is_valid_transition(current: PlanStatus, target: PlanStatus) -> bool:
    """Check the state machine alone, ignoring who asks."""
    return target in PLAN_TRANSITIONS[current]


class PlanStatusGate:
    """Validates plan status transitions.

    Attributes:
        access_validator: Validator for the plan's classroom, used by
            validate_plan_transition.
    """

    def __init__(self, access_validator: AccessValidator | None = None) -> None:
        self.access_validator = access_validator

    def validate_transition(
        self,
        scope: Scope,
        current: PlanStatus,
        target: PlanStatus,
    ) -> ValidationResult:
        """Validate a status change for a caller.

        Args:
            scope: Resolved scope of the caller.
            current: Current plan status.
            target: Requested plan status.

        Returns:
            Accepted result, FORBIDDEN for callers without transition
            rights, or INVALID_TRANSITION.
        """
        if not scope.has_level(*TRANSITION_LEVELS):
            return ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                "Only tenant, regional or unit staff can change plan status",
            )

        if not is_valid_transition(current, target):
            return ValidationResult.rejected(
                DecisionCode.INVALID_TRANSITION,
                f"Invalid status transition: {current.value.upper()} -> {target.value.upper()}",
            )

        return ValidationResult.accepted()

    def validate_plan_transition(
        self,
        scope: Scope,
        plan: Plan,
        classroom: Classroom,
        target: PlanStatus,
    ) -> ValidationResult:
        """Validate a status change of a concrete plan.

        Runs the role gate, the access check on the plan's classroom, then
        the state machine.

        Args:
            scope: Resolved scope of the caller.
            plan: Plan whose status would change.
            classroom: The plan's classroom.
            target: Requested plan status.

        Returns:
            Accepted result or the first rejection.
        """
        if self.access_validator is None:
            raise ValueError("PlanStatusGate needs an access validator for plan transitions")

        if not scope.has_level(*TRANSITION_LEVELS):
            return self.validate_transition(scope, plan.status, target)

        decision = self.access_validator.check(scope, AccessTarget.for_classroom(classroom))
        if not decision.allowed:
            return ValidationResult.rejected(DecisionCode.FORBIDDEN, decision.reason or "Access denied")

        result = self.validate_transition(scope, plan.status, target)
        if result.ok:
            logger.debug(
                "Plan transition allowed",
                plan_id=plan.id,
                principal_id=scope.principal_id,
                current=plan.status.value,
                target=target.value,
            )
        return result


class PlanPolicy:
    """Plan creation and edit rules."""

    def __init__(self, access_validator: AccessValidator) -> None:
        self.access_validator = access_validator

    def can_create_plan(self, scope: Scope, classroom: Classroom) -> ValidationResult:
        """Check if a caller may create a plan for a classroom.

        Teachers never create plans, whatever their classroom links.
        """
        if scope.highest_level is None:
            return ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                "No role allows creating plans",
            )
        if scope.highest_level == RoleLevel.TEACHER:
            return ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                "Teachers cannot create plans",
            )
        return self._check_classroom(scope, classroom)

    def can_edit_plan(self, scope: Scope, plan: Plan, classroom: Classroom) -> ValidationResult:
        """Check if a caller may edit a plan's content."""
        if plan.status == PlanStatus.CLOSED:
            return ValidationResult.rejected(
                DecisionCode.PLAN_CLOSED,
                "Closed plans cannot be edited",
            )

        if scope.highest_level == RoleLevel.TEACHER and plan.status != PlanStatus.DRAFT:
            return ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                f"Teachers can only edit draft plans. Current status: {plan.status.value.upper()}",
            )

        return self._check_classroom(scope, classroom)

    def _check_classroom(self, scope: Scope, classroom: Classroom) -> ValidationResult:
        decision = self.access_validator.check(scope, AccessTarget.for_classroom(classroom))
        if not decision.allowed:
            return ValidationResult.rejected(DecisionCode.FORBIDDEN, decision.reason or "Access denied")
        return ValidationResult.accepted()
