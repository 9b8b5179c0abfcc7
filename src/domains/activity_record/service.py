# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Activity record service for authorizing diary event writes.

This module provides the ActivityRecordService class for:
- Authorizing the creation of activity records
- Authorizing updates (re-running the consistency chain when the record
  is re-bound to another date, plan, entry, classroom or child)
- Authorizing archival (soft delete)
- Translating a principal's scope into a listing filter

The service loads the related entities from the record store, asks the
engine components for a decision and notifies the audit sink. It never
writes records itself.
"""

from src.core.errors import InvalidStateError
from src.core.interfaces import AuditSink, Clock, RecordStore
from src.domains.access import AccessValidator
from src.domains.calendar import InstitutionalClock, PedagogicalCalendar, get_calendar
from src.domains.consistency import ConsistencyChain
from src.domains.scope import ScopeResolver
from src.models.common import AuditAction, DecisionCode, RoleLevel
from src.models.decisions import (
    AccessTarget,
    AuditEvent,
    RecordFilter,
    Scope,
    ValidationResult,
)
from src.models.entities import (
    ActivityRecord,
    ActivityRecordCandidate,
    ActivityRecordChanges,
)
from src.models.principal import Principal
from src.utils.logging import get_logger

logger = get_logger(__name__)

ENTITY_TYPE = "ActivityRecord"

# Besides the record's creator, these levels may edit or archive it
EDIT_LEVELS: frozenset[RoleLevel] = frozenset({
    RoleLevel.SUPER,
    RoleLevel.TENANT_OWNER,
    RoleLevel.UNIT_STAFF,
})


class ActivityRecordService:
    """Service authorizing activity record writes.

    Attributes:
        store: Read-only record store.
        audit_sink: Optional sink notified after every decision.
        clock: Clock used to stamp audit events.
    """

    def __init__(
        self,
        store: RecordStore,
        audit_sink: AuditSink | None = None,
        clock: Clock | None = None,
        calendar: PedagogicalCalendar | None = None,
        scope_resolver: ScopeResolver | None = None,
    ) -> None:
        """Initialize the activity record service.

        Args:
            store: Read-only record store.
            audit_sink: Optional sink notified after decisions.
            clock: Clock for audit timestamps.
            calendar: Calendar for day comparisons.
            scope_resolver: Resolver override (defaults to one over store).
        """
        self.store = store
        self.audit_sink = audit_sink
        calendar = calendar or get_calendar()
        self.clock = clock or InstitutionalClock(calendar)
        self.scope_resolver = scope_resolver or ScopeResolver(store)
        self.access_validator = AccessValidator(store)
        self.chain = ConsistencyChain(self.access_validator, calendar=calendar)

    def authorize_create(
        self,
        principal: Principal,
        candidate: ActivityRecordCandidate,
    ) -> ValidationResult:
        """Decide whether an activity record may be created.

        Args:
            principal: Authenticated caller.
            candidate: Proposed record.

        Returns:
            Accepted result carrying the tenant/unit the new record must
            be stamped with, or the first rejection.

        Raises:
            StoreUnavailableError: If the record store cannot be reached.
        """
        try:
            scope = self.scope_resolver.resolve(principal)
        except InvalidStateError as e:
            result = ValidationResult.rejected(DecisionCode.INVALID_STATE, e.message)
        else:
            result = self._run_chain(scope, candidate)

        self._notify(
            AuditAction.CREATE,
            principal,
            None,
            result,
            tenant_id=result.tenant_id or principal.tenant_id,
            unit_id=result.unit_id,
            metadata={"classroom_id": candidate.classroom_id, "plan_id": candidate.plan_id},
        )
        return result

    def authorize_update(
        self,
        principal: Principal,
        record_id: str,
        changes: ActivityRecordChanges,
    ) -> ValidationResult:
        """Decide whether an activity record may be updated.

        Args:
            principal: Authenticated caller.
            record_id: Record to update.
            changes: Requested changes.

        Returns:
            Accepted result or the first rejection.
        """
        record, scope, result = self._authorize_existing(principal, record_id)
        if result is None:
            if changes.touches_bindings():
                candidate = record.to_candidate(**changes.model_dump(exclude_none=True))
                result = self._run_chain(scope, candidate)
            else:
                result = ValidationResult.accepted(tenant_id=record.tenant_id, unit_id=record.unit_id)

        self._notify_existing(AuditAction.UPDATE, principal, record_id, record, result)
        return result

    def authorize_archive(self, principal: Principal, record_id: str) -> ValidationResult:
        """Decide whether an activity record may be archived.

        Records are never hard-deleted; archiving flips their status.

        Args:
            principal: Authenticated caller.
            record_id: Record to archive.

        Returns:
            Accepted result or the first rejection.
        """
        record, _, result = self._authorize_existing(principal, record_id)
        if result is None:
            result = ValidationResult.accepted(tenant_id=record.tenant_id, unit_id=record.unit_id)

        self._notify_existing(AuditAction.ARCHIVE, principal, record_id, record, result)
        return result

    def list_filter(self, principal: Principal, unit_id: str | None = None) -> RecordFilter:
        """Translate a principal's scope into a listing filter.

        Args:
            principal: Authenticated caller.
            unit_id: Optional unit to narrow a teacher's classrooms to.

        Returns:
            Filter restricting listings to the principal's scope.

        Raises:
            InvalidStateError: If the principal is malformed.
        """
        scope = self.scope_resolver.resolve(principal, unit_id=unit_id)
        return scope_filter(scope)

    def _run_chain(self, scope: Scope, candidate: ActivityRecordCandidate) -> ValidationResult:
        child = self.store.get_child(candidate.child_id)
        enrollment = None
        if child is not None:
            enrollment = self.store.get_enrollment(child.id, candidate.classroom_id)

        return self.chain.validate(
            candidate,
            scope,
            child=child,
            classroom=self.store.get_classroom(candidate.classroom_id),
            plan=self.store.get_plan(candidate.plan_id),
            entry=self.store.get_curriculum_entry(candidate.curriculum_entry_id),
            enrollment=enrollment,
        )

    def _authorize_existing(
        self,
        principal: Principal,
        record_id: str,
    ) -> tuple[ActivityRecord | None, Scope | None, ValidationResult | None]:
        """Run the checks shared by update and archive.

        Returns:
            The record (if found), the resolved scope (if resolved) and a
            rejection, or None when the caller may act on the record.
        """
        record = self.store.get_activity_record(record_id)
        if record is None:
            return None, None, ValidationResult.rejected(DecisionCode.NOT_FOUND, "Activity record not found")

        try:
            scope = self.scope_resolver.resolve(principal)
        except InvalidStateError as e:
            return record, None, ValidationResult.rejected(DecisionCode.INVALID_STATE, e.message)

        decision = self.access_validator.check(scope, AccessTarget.for_activity_record(record))
        if not decision.allowed:
            return record, scope, ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                f"Access denied to this activity record: {decision.reason}",
            )

        if record.is_archived:
            return record, scope, ValidationResult.rejected(
                DecisionCode.RECORD_ARCHIVED,
                "Archived activity records cannot be changed",
            )

        if record.created_by != principal.id and not scope.has_level(*EDIT_LEVELS):
            return record, scope, ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                "Only the author or unit, tenant or platform staff can change this record",
            )

        return record, scope, None

    def _notify_existing(
        self,
        action: AuditAction,
        principal: Principal,
        record_id: str,
        record: ActivityRecord | None,
        result: ValidationResult,
    ) -> None:
        self._notify(
            action,
            principal,
            record_id,
            result,
            tenant_id=record.tenant_id if record else principal.tenant_id,
            unit_id=record.unit_id if record else None,
        )

    def _notify(
        self,
        action: AuditAction,
        principal: Principal,
        entity_id: str | None,
        result: ValidationResult,
        *,
        tenant_id: str | None,
        unit_id: str | None,
        metadata: dict | None = None,
    ) -> None:
        if self.audit_sink is None:
            return

        event = AuditEvent(
            action=action,
            entity_type=ENTITY_TYPE,
            entity_id=entity_id,
            actor_id=principal.id,
            tenant_id=tenant_id,
            unit_id=unit_id,
            allowed=result.ok,
            code=result.code,
            detail=result.detail,
            occurred_at=self.clock.now(),
            metadata=metadata or {},
        )
        try:
            self.audit_sink.record(event)
        except Exception:
            # Audit delivery must not change the decision
            logger.exception(
                "Audit sink failed",
                action=action.value,
                entity_id=entity_id,
                actor_id=principal.id,
            )


def scope_filter(scope: Scope) -> RecordFilter:
    """Translate a scope into a listing filter.

    Uses the scope's highest ranked level, mirroring the access check.

    Args:
        scope: Resolved scope.

    Returns:
        Listing filter. A scope without a recognized level yields a
        filter that matches nothing.
    """
    level = scope.highest_level
    if level == RoleLevel.SUPER:
        return RecordFilter(unrestricted=True)
    if level == RoleLevel.TENANT_OWNER:
        return RecordFilter(tenant_id=scope.tenant_id)
    if level in (RoleLevel.REGIONAL_STAFF, RoleLevel.UNIT_STAFF):
        return RecordFilter(tenant_id=scope.tenant_id, unit_ids=scope.unit_ids)
    if level == RoleLevel.TEACHER:
        return RecordFilter(tenant_id=scope.tenant_id, classroom_ids=scope.classroom_ids)
    return RecordFilter()
