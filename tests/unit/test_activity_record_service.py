# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for ActivityRecordService."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from src.core.errors import StoreUnavailableError
from src.domains.activity_record import ActivityRecordService, scope_filter
from src.domains.calendar import PedagogicalCalendar
from src.models.common import ActivityRecordStatus, AuditAction, DecisionCode, PlanStatus, RoleLevel
from src.models.decisions import RecordFilter, Scope
from src.models.entities import ActivityRecord, ActivityRecordCandidate, ActivityRecordChanges
from src.models.principal import Principal, RoleGrant
from tests.fakes import (
    CLASSROOM_ID,
    OTHER_UNIT_ID,
    PLAN_ID,
    RECORD_ID,
    STAFF_ID,
    TEACHER_ID,
    TENANT_ID,
    UNIT_ID,
    FixedClock,
    InMemoryRecordStore,
    ListAuditSink,
)

UTC = timezone.utc
NOW = datetime(2025, 3, 15, 15, 0, tzinfo=UTC)


@pytest.fixture
def audit() -> ListAuditSink:
    """Provide an audit sink collecting events."""
    return ListAuditSink()


@pytest.fixture
def service(
    store: InMemoryRecordStore,
    audit: ListAuditSink,
    calendar: PedagogicalCalendar,
    activity_record: ActivityRecord,
) -> ActivityRecordService:
    """Provide a service with the sample record stored."""
    store.add_record(activity_record)
    return ActivityRecordService(store, audit_sink=audit, clock=FixedClock(NOW), calendar=calendar)


class TestAuthorizeCreate:
    """Tests for ActivityRecordService.authorize_create."""

    def test_accepted_for_linked_teacher(
        self, service: ActivityRecordService, teacher: Principal, candidate: ActivityRecordCandidate
    ) -> None:
        """Test that a consistent record is accepted and stamped."""
        result = service.authorize_create(teacher, candidate)

        assert result.ok is True
        assert (result.tenant_id, result.unit_id) == (TENANT_ID, UNIT_ID)

    def test_audit_event_emitted(
        self,
        service: ActivityRecordService,
        audit: ListAuditSink,
        teacher: Principal,
        candidate: ActivityRecordCandidate,
    ) -> None:
        """Test that the decision is reported to the audit sink."""
        service.authorize_create(teacher, candidate)

        [event] = audit.events
        assert event.action == AuditAction.CREATE
        assert event.actor_id == TEACHER_ID
        assert event.allowed is True
        assert event.occurred_at == NOW
        assert event.metadata == {"classroom_id": CLASSROOM_ID, "plan_id": PLAN_ID}

    def test_rejection_audited_with_code(
        self,
        service: ActivityRecordService,
        store: InMemoryRecordStore,
        audit: ListAuditSink,
        teacher: Principal,
        candidate: ActivityRecordCandidate,
    ) -> None:
        """Test that rejections reach the audit sink with their code."""
        store.add_plan(store.plans[PLAN_ID].model_copy(update={"status": PlanStatus.DRAFT}))

        result = service.authorize_create(teacher, candidate)

        assert result.code == DecisionCode.PLAN_NOT_ACTIVE
        assert audit.events[0].allowed is False
        assert audit.events[0].code == DecisionCode.PLAN_NOT_ACTIVE

    def test_malformed_principal_is_invalid_state(
        self, service: ActivityRecordService, candidate: ActivityRecordCandidate
    ) -> None:
        """Test that a unit staff principal without unit is a typed rejection."""
        principal = Principal(
            id=STAFF_ID,
            tenant_id=TENANT_ID,
            grants=(RoleGrant(level=RoleLevel.UNIT_STAFF),),
        )

        result = service.authorize_create(principal, candidate)

        assert result.code == DecisionCode.INVALID_STATE

    def test_missing_child_skips_enrollment_lookup(
        self,
        service: ActivityRecordService,
        store: InMemoryRecordStore,
        teacher: Principal,
        candidate: ActivityRecordCandidate,
    ) -> None:
        """Test that unknown children are NOT_FOUND."""
        result = service.authorize_create(teacher, candidate.model_copy(update={"child_id": "ghost"}))

        assert result.code == DecisionCode.NOT_FOUND
        assert "get_enrollment" not in store.calls

    def test_store_unavailable_propagates(self, teacher: Principal, candidate: ActivityRecordCandidate) -> None:
        """Test that store failures are not turned into decisions."""
        store = MagicMock()
        store.list_teacher_classroom_ids.return_value = [CLASSROOM_ID]
        store.get_child.side_effect = StoreUnavailableError("timeout")
        audit = MagicMock()
        service = ActivityRecordService(store, audit_sink=audit, clock=FixedClock(NOW))

        with pytest.raises(StoreUnavailableError):
            service.authorize_create(teacher, candidate)

        audit.record.assert_not_called()

    def test_audit_failure_does_not_change_decision(
        self, store: InMemoryRecordStore, teacher: Principal, candidate: ActivityRecordCandidate, calendar
    ) -> None:
        """Test that a failing audit sink is logged and ignored."""
        audit = MagicMock()
        audit.record.side_effect = RuntimeError("sink down")
        service = ActivityRecordService(store, audit_sink=audit, clock=FixedClock(NOW), calendar=calendar)

        assert service.authorize_create(teacher, candidate).ok is True

    def test_works_without_audit_sink(
        self, store: InMemoryRecordStore, teacher: Principal, candidate: ActivityRecordCandidate, calendar
    ) -> None:
        """Test that the audit sink is optional."""
        service = ActivityRecordService(store, calendar=calendar)

        assert service.authorize_create(teacher, candidate).ok is True


class TestAuthorizeUpdate:
    """Tests for ActivityRecordService.authorize_update."""

    def test_author_edits_text(self, service: ActivityRecordService, teacher: Principal, store) -> None:
        """Test that text-only changes skip the consistency chain."""
        store.calls.clear()

        result = service.authorize_update(teacher, RECORD_ID, ActivityRecordChanges(title="New title"))

        assert result.ok is True
        assert "get_plan" not in store.calls

    def test_rebinding_reruns_chain(self, service: ActivityRecordService, teacher: Principal) -> None:
        """Test that moving the event date re-validates the entry date."""
        changes = ActivityRecordChanges(event_date=datetime(2025, 3, 20, 12, 0, tzinfo=UTC))

        result = service.authorize_update(teacher, RECORD_ID, changes)

        assert result.code == DecisionCode.ENTRY_DATE_MISMATCH
        assert result.step == 9

    def test_rebinding_to_inactive_plan_rejected(
        self, service: ActivityRecordService, store: InMemoryRecordStore, teacher: Principal
    ) -> None:
        """Test that records cannot move under a closed plan."""
        closed = store.plans[PLAN_ID].model_copy(update={"id": "plan-closed", "status": PlanStatus.CLOSED})
        store.add_plan(closed)

        result = service.authorize_update(teacher, RECORD_ID, ActivityRecordChanges(plan_id="plan-closed"))

        assert result.code == DecisionCode.PLAN_NOT_ACTIVE

    def test_unit_staff_edits_others_record(
        self, service: ActivityRecordService, unit_staff: Principal
    ) -> None:
        """Test that unit staff may edit records of their unit."""
        assert service.authorize_update(unit_staff, RECORD_ID, ActivityRecordChanges(title="x")).ok is True

    def test_other_teacher_of_classroom_cannot_edit(
        self, service: ActivityRecordService, store: InMemoryRecordStore
    ) -> None:
        """Test that co-teachers cannot edit records they did not write."""
        store.link_teacher("teacher-bia", CLASSROOM_ID)
        colleague = Principal(
            id="teacher-bia",
            tenant_id=TENANT_ID,
            unit_id=UNIT_ID,
            grants=(RoleGrant(level=RoleLevel.TEACHER),),
        )

        result = service.authorize_update(colleague, RECORD_ID, ActivityRecordChanges(title="x"))

        assert result.code == DecisionCode.FORBIDDEN

    def test_regional_staff_reads_but_cannot_edit(
        self, service: ActivityRecordService
    ) -> None:
        """Test that regional staff are not among the editing levels."""
        regional = Principal(
            id="regional-eva",
            tenant_id=TENANT_ID,
            grants=(RoleGrant(level=RoleLevel.REGIONAL_STAFF, unit_scope=frozenset({UNIT_ID})),),
        )

        result = service.authorize_update(regional, RECORD_ID, ActivityRecordChanges(title="x"))

        assert result.code == DecisionCode.FORBIDDEN
        assert result.detail == "Only the author or unit, tenant or platform staff can change this record"

    def test_missing_record(self, service: ActivityRecordService, teacher: Principal, audit) -> None:
        """Test that unknown records are NOT_FOUND and audited."""
        result = service.authorize_update(teacher, "ghost", ActivityRecordChanges(title="x"))

        assert result.code == DecisionCode.NOT_FOUND
        assert audit.events[0].entity_id == "ghost"

    def test_out_of_scope_record_forbidden(
        self, service: ActivityRecordService, store: InMemoryRecordStore
    ) -> None:
        """Test that unit staff of another unit are denied."""
        other_staff = Principal(
            id="staff-caio",
            tenant_id=TENANT_ID,
            unit_id=OTHER_UNIT_ID,
            grants=(RoleGrant(level=RoleLevel.UNIT_STAFF),),
        )

        result = service.authorize_update(other_staff, RECORD_ID, ActivityRecordChanges(title="x"))

        assert result.code == DecisionCode.FORBIDDEN
        assert result.detail.startswith("Access denied to this activity record")

    def test_archived_record_frozen(
        self,
        service: ActivityRecordService,
        store: InMemoryRecordStore,
        activity_record: ActivityRecord,
        teacher: Principal,
    ) -> None:
        """Test that archived records cannot change."""
        store.add_record(activity_record.model_copy(update={"status": ActivityRecordStatus.ARCHIVED}))

        result = service.authorize_update(teacher, RECORD_ID, ActivityRecordChanges(title="x"))

        assert result.code == DecisionCode.RECORD_ARCHIVED


class TestAuthorizeArchive:
    """Tests for ActivityRecordService.authorize_archive."""

    def test_author_archives(self, service: ActivityRecordService, teacher: Principal, audit) -> None:
        """Test that authors may archive their records."""
        result = service.authorize_archive(teacher, RECORD_ID)

        assert result.ok is True
        assert audit.events[0].action == AuditAction.ARCHIVE
        assert audit.events[0].unit_id == UNIT_ID

    def test_tenant_owner_archives(self, service: ActivityRecordService, tenant_owner: Principal) -> None:
        """Test that tenant owners may archive any record of the tenant."""
        assert service.authorize_archive(tenant_owner, RECORD_ID).ok is True

    def test_archive_twice_rejected(
        self,
        service: ActivityRecordService,
        store: InMemoryRecordStore,
        activity_record: ActivityRecord,
        teacher: Principal,
    ) -> None:
        """Test that ARCHIVED is terminal."""
        store.add_record(activity_record.model_copy(update={"status": ActivityRecordStatus.ARCHIVED}))

        assert service.authorize_archive(teacher, RECORD_ID).code == DecisionCode.RECORD_ARCHIVED

    def test_unlinked_author_loses_access(
        self, service: ActivityRecordService, store: InMemoryRecordStore, teacher: Principal
    ) -> None:
        """Test that authorship does not outlive the teacher link."""
        store.link_teacher(TEACHER_ID, CLASSROOM_ID, is_active=False)

        assert service.authorize_archive(teacher, RECORD_ID).code == DecisionCode.FORBIDDEN


class TestListFilter:
    """Tests for listing filters."""

    def test_super_unrestricted(self, service: ActivityRecordService, super_admin: Principal) -> None:
        """Test that SUPER listings are unrestricted."""
        assert service.list_filter(super_admin) == RecordFilter(unrestricted=True)

    def test_tenant_owner_by_tenant(self, service: ActivityRecordService, tenant_owner: Principal) -> None:
        """Test that tenant owners list their tenant."""
        record_filter = service.list_filter(tenant_owner)

        assert record_filter.tenant_id == TENANT_ID
        assert record_filter.unit_ids is None
        assert record_filter.classroom_ids is None

    def test_unit_staff_by_unit(self, service: ActivityRecordService, unit_staff: Principal) -> None:
        """Test that unit staff list their unit."""
        assert service.list_filter(unit_staff).unit_ids == frozenset({UNIT_ID})

    def test_teacher_by_classrooms(self, service: ActivityRecordService, teacher: Principal) -> None:
        """Test that teachers list their linked classrooms."""
        assert service.list_filter(teacher).classroom_ids == frozenset({CLASSROOM_ID})

    def test_teacher_narrowed_to_unit(self, service: ActivityRecordService, teacher: Principal) -> None:
        """Test that a unit without links yields an empty filter."""
        record_filter = service.list_filter(teacher, unit_id=OTHER_UNIT_ID)

        assert record_filter.is_empty is True

    def test_no_level_matches_nothing(self) -> None:
        """Test that an unprivileged scope lists nothing."""
        assert scope_filter(Scope(principal_id="nobody")).is_empty is True
