# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the rank-ordered access validator."""

from unittest.mock import MagicMock

import pytest

from src.core.errors import ForbiddenError
from src.domains.access import ACCESS_PREDICATES, AccessValidator, check_access
from src.models.common import DecisionCode, RoleLevel
from src.models.decisions import AccessDecision, AccessTarget, Scope
from tests.fakes import (
    CLASSROOM_ID,
    OTHER_CLASSROOM_ID,
    OTHER_TENANT_ID,
    OTHER_UNIT_ID,
    TEACHER_ID,
    TENANT_ID,
    UNIT_ID,
    InMemoryRecordStore,
)

NORTH = AccessTarget(tenant_id=TENANT_ID, unit_id=UNIT_ID, classroom_id=CLASSROOM_ID)
SOUTH = AccessTarget(tenant_id=TENANT_ID, unit_id=OTHER_UNIT_ID, classroom_id=OTHER_CLASSROOM_ID)
FOREIGN = AccessTarget(tenant_id=OTHER_TENANT_ID, unit_id="unit-foreign", classroom_id="classroom-foreign-a")


def scope_of(*levels: RoleLevel, **fields) -> Scope:
    fields.setdefault("principal_id", TEACHER_ID)
    fields.setdefault("tenant_id", TENANT_ID)
    return Scope(levels=frozenset(levels), **fields)


@pytest.fixture
def validator(store: InMemoryRecordStore) -> AccessValidator:
    """Provide a validator over the sample store."""
    return AccessValidator(store)


class TestSuper:
    """Tests for the SUPER bypass."""

    @pytest.mark.parametrize("target", [NORTH, SOUTH, FOREIGN, AccessTarget(tenant_id="anything")])
    def test_always_allows(self, validator: AccessValidator, target: AccessTarget) -> None:
        """Test that SUPER is allowed whatever the target."""
        decision = validator.check(scope_of(RoleLevel.SUPER, tenant_id=None), target)

        assert decision.allowed is True
        assert decision.level == RoleLevel.SUPER

    def test_super_decides_before_lower_levels(self, validator: AccessValidator) -> None:
        """Test that SUPER wins even when a teacher predicate would deny."""
        scope = scope_of(RoleLevel.TEACHER, RoleLevel.SUPER)

        assert validator.check(scope, FOREIGN).allowed is True


class TestTenantOwner:
    """Tests for TENANT_OWNER access."""

    def test_allows_own_tenant(self, validator: AccessValidator) -> None:
        """Test that any unit of the tenant is reachable."""
        scope = scope_of(RoleLevel.TENANT_OWNER)

        assert validator.check(scope, NORTH).allowed is True
        assert validator.check(scope, SOUTH).allowed is True

    def test_denies_other_tenant(self, validator: AccessValidator) -> None:
        """Test tenant isolation."""
        decision = validator.check(scope_of(RoleLevel.TENANT_OWNER), FOREIGN)

        assert decision.allowed is False
        assert decision.code == DecisionCode.FORBIDDEN
        assert decision.reason == "Target belongs to another tenant"


class TestRegionalStaff:
    """Tests for REGIONAL_STAFF access."""

    def test_allows_unit_in_scope(self, validator: AccessValidator) -> None:
        """Test that units in the resolved set are reachable."""
        scope = scope_of(RoleLevel.REGIONAL_STAFF, unit_ids=frozenset({UNIT_ID}))

        assert validator.check(scope, NORTH).allowed is True

    def test_denies_unit_out_of_scope(self, validator: AccessValidator) -> None:
        """Test that other units of the tenant are denied."""
        scope = scope_of(RoleLevel.REGIONAL_STAFF, unit_ids=frozenset({UNIT_ID}))

        decision = validator.check(scope, SOUTH)

        assert decision.allowed is False
        assert decision.reason == "Target unit is outside the staff unit scope"

    def test_denies_target_without_unit(self, validator: AccessValidator) -> None:
        """Test that tenant-level targets are outside a unit scope."""
        scope = scope_of(RoleLevel.REGIONAL_STAFF, unit_ids=frozenset({UNIT_ID}))

        assert validator.check(scope, AccessTarget(tenant_id=TENANT_ID)).allowed is False


class TestUnitStaff:
    """Tests for UNIT_STAFF access."""

    def test_allows_own_unit(self, validator: AccessValidator) -> None:
        """Test that the home unit is reachable."""
        scope = scope_of(RoleLevel.UNIT_STAFF, unit_id=UNIT_ID, unit_ids=frozenset({UNIT_ID}))

        assert validator.check(scope, NORTH).allowed is True

    def test_denies_other_unit(self, validator: AccessValidator) -> None:
        """Test that sibling units are denied."""
        scope = scope_of(RoleLevel.UNIT_STAFF, unit_id=UNIT_ID, unit_ids=frozenset({UNIT_ID}))

        decision = validator.check(scope, SOUTH)

        assert decision.allowed is False
        assert decision.reason == "Target belongs to another unit"


class TestTeacher:
    """Tests for TEACHER access."""

    def test_allows_linked_classroom(self, validator: AccessValidator) -> None:
        """Test that an active link grants access."""
        assert validator.check(scope_of(RoleLevel.TEACHER), NORTH).allowed is True

    def test_denies_unlinked_classroom(self, validator: AccessValidator) -> None:
        """Test that classrooms without a link are denied."""
        decision = validator.check(scope_of(RoleLevel.TEACHER), SOUTH)

        assert decision.allowed is False
        assert decision.reason == "No active teacher link to the classroom"

    def test_denies_after_link_deactivated(
        self, store: InMemoryRecordStore, validator: AccessValidator
    ) -> None:
        """Test that a formerly active link no longer grants access."""
        scope = scope_of(RoleLevel.TEACHER, classroom_ids=frozenset({CLASSROOM_ID}))
        assert validator.check(scope, NORTH).allowed is True

        store.link_teacher(TEACHER_ID, CLASSROOM_ID, is_active=False)

        # The scope still lists the classroom; the live lookup wins
        assert validator.check(scope, NORTH).allowed is False

    def test_live_lookup_ignores_scope_snapshot(
        self, store: InMemoryRecordStore, validator: AccessValidator
    ) -> None:
        """Test that a link created after scope resolution is honoured."""
        scope = scope_of(RoleLevel.TEACHER, classroom_ids=frozenset())
        store.link_teacher(TEACHER_ID, OTHER_CLASSROOM_ID)

        assert validator.check(scope, SOUTH).allowed is True

    def test_denies_target_without_classroom(self, validator: AccessValidator) -> None:
        """Test that teachers have no unit-wide visibility."""
        decision = validator.check(scope_of(RoleLevel.TEACHER), AccessTarget(tenant_id=TENANT_ID, unit_id=UNIT_ID))

        assert decision.allowed is False
        assert decision.reason == "Teachers only reach classroom records"

    def test_denies_other_tenant_without_lookup(self) -> None:
        """Test that tenant isolation is checked before the link lookup."""
        store = MagicMock()
        store.has_active_teacher_link.return_value = True

        decision = AccessValidator(store).check(scope_of(RoleLevel.TEACHER), FOREIGN)

        assert decision.allowed is False
        store.has_active_teacher_link.assert_not_called()


class TestRankOrder:
    """Tests for first-matching-rank dispatch."""

    def test_highest_rank_decides_even_when_lower_would_allow(self, validator: AccessValidator) -> None:
        """Test that a unit staff denial is final for a linked teacher."""
        scope = scope_of(
            RoleLevel.UNIT_STAFF,
            RoleLevel.TEACHER,
            unit_id=OTHER_UNIT_ID,
            unit_ids=frozenset({OTHER_UNIT_ID}),
        )

        decision = validator.check(scope, NORTH)

        assert decision.allowed is False
        assert decision.level == RoleLevel.UNIT_STAFF

    def test_no_levels_denied(self, validator: AccessValidator) -> None:
        """Test default-deny for scopes without recognized levels."""
        decision = validator.check(scope_of(), NORTH)

        assert decision.allowed is False
        assert decision.code == DecisionCode.FORBIDDEN
        assert decision.reason == "No recognized role level"

    def test_missing_predicate_denies(self, store: InMemoryRecordStore) -> None:
        """Test that a level without a predicate never grants access."""
        predicates = {k: v for k, v in ACCESS_PREDICATES.items() if k != RoleLevel.TEACHER}

        decision = AccessValidator(store, predicates).check(scope_of(RoleLevel.TEACHER), NORTH)

        assert decision.allowed is False

    def test_table_covers_every_level(self) -> None:
        """Test that each role level has a predicate."""
        assert set(ACCESS_PREDICATES) == set(RoleLevel)


class TestDecisionHelpers:
    """Tests for decision enforcement helpers."""

    def test_raise_for_denial(self, store: InMemoryRecordStore) -> None:
        """Test that a denial can be enforced as ForbiddenError."""
        decision = check_access(scope_of(RoleLevel.TEACHER), SOUTH, store)

        with pytest.raises(ForbiddenError) as exc_info:
            decision.raise_for_denial()

        assert exc_info.value.code == DecisionCode.FORBIDDEN
        assert exc_info.value.details["level"] == "teacher"

    def test_allow_is_truthy(self) -> None:
        """Test boolean conversion of decisions."""
        assert bool(AccessDecision.allow(RoleLevel.SUPER)) is True
        assert bool(AccessDecision.deny("nope")) is False
