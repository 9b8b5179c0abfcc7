# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access validation against resolved scopes.

Every entity's access path goes through one rank-ordered predicate table.
Predicates are evaluated in descending role rank and the first rank the
scope holds decides, even if a lower ranked predicate would also match.
A scope holding no recognized level is denied.

Teacher access is checked against the live teacher link table rather than
the classroom set captured in the scope, since assignments can change
between scope resolution and the check.
"""

from collections.abc import Callable, Mapping

from src.core.interfaces import RecordStore
from src.models.common import ROLE_RANK_ORDER, RoleLevel
from src.models.decisions import AccessDecision, AccessTarget, Scope
from src.utils.logging import get_logger

logger = get_logger(__name__)

AccessPredicate = Callable[[Scope, AccessTarget, RecordStore], AccessDecision]


def _other_tenant(scope: Scope, target: AccessTarget) -> bool:
    return target.tenant_id != scope.tenant_id


def _allow_super(scope: Scope, target: AccessTarget, store: RecordStore) -> AccessDecision:
    return AccessDecision.allow(RoleLevel.SUPER)


def _check_tenant_owner(scope: Scope, target: AccessTarget, store: RecordStore) -> AccessDecision:
    if _other_tenant(scope, target):
        return AccessDecision.deny("Target belongs to another tenant", RoleLevel.TENANT_OWNER)
    return AccessDecision.allow(RoleLevel.TENANT_OWNER)


def _check_regional_staff(scope: Scope, target: AccessTarget, store: RecordStore) -> AccessDecision:
    level = RoleLevel.REGIONAL_STAFF
    if _other_tenant(scope, target):
        return AccessDecision.deny("Target belongs to another tenant", level)
    if target.unit_id is None or target.unit_id not in scope.unit_ids:
        return AccessDecision.deny("Target unit is outside the staff unit scope", level)
    return AccessDecision.allow(level)


def _check_unit_staff(scope: Scope, target: AccessTarget, store: RecordStore) -> AccessDecision:
    level = RoleLevel.UNIT_STAFF
    if _other_tenant(scope, target):
        return AccessDecision.deny("Target belongs to another tenant", level)
    if scope.unit_id is None or target.unit_id != scope.unit_id:
        return AccessDecision.deny("Target belongs to another unit", level)
    return AccessDecision.allow(level)


def _check_teacher(scope: Scope, target: AccessTarget, store: RecordStore) -> AccessDecision:
    level = RoleLevel.TEACHER
    if _other_tenant(scope, target):
        return AccessDecision.deny("Target belongs to another tenant", level)
    if target.classroom_id is None:
        return AccessDecision.deny("Teachers only reach classroom records", level)
    if not store.has_active_teacher_link(scope.principal_id, target.classroom_id):
        return AccessDecision.deny("No active teacher link to the classroom", level)
    return AccessDecision.allow(level)


ACCESS_PREDICATES: Mapping[RoleLevel, AccessPredicate] = {
    RoleLevel.SUPER: _allow_super,
    RoleLevel.TENANT_OWNER: _check_tenant_owner,
    RoleLevel.REGIONAL_STAFF: _check_regional_staff,
    RoleLevel.UNIT_STAFF: _check_unit_staff,
    RoleLevel.TEACHER: _check_teacher,
}


class AccessValidator:
    """Evaluates the rank-ordered predicate table.

    Attributes:
        store: Record store used for live teacher link lookups.
    """

    def __init__(
        self,
        store: RecordStore,
        predicates: Mapping[RoleLevel, AccessPredicate] = ACCESS_PREDICATES,
    ) -> None:
        """Initialize the validator.

        Args:
            store: Record store for live lookups.
            predicates: Predicate per role level.
        """
        self.store = store
        self._predicates = predicates

    def check(self, scope: Scope, target: AccessTarget) -> AccessDecision:
        """Decide whether a scope may access a target.

        Args:
            scope: Resolved scope of the caller.
            target: Coordinates of the record being accessed.

        Returns:
            Allow or deny decision.

        Raises:
            StoreUnavailableError: If a live lookup cannot reach the store.
        """
        for level in ROLE_RANK_ORDER:
            if level not in scope.levels:
                continue
            predicate = self._predicates.get(level)
            if predicate is None:
                break
            decision = predicate(scope, target, self.store)
            if decision.allowed:
                logger.debug(
                    "Access allowed",
                    principal_id=scope.principal_id,
                    level=level.value,
                    tenant_id=target.tenant_id,
                    unit_id=target.unit_id,
                    classroom_id=target.classroom_id,
                )
            else:
                logger.info(
                    "Access denied",
                    principal_id=scope.principal_id,
                    level=level.value,
                    reason=decision.reason,
                    tenant_id=target.tenant_id,
                    unit_id=target.unit_id,
                    classroom_id=target.classroom_id,
                )
            return decision

        logger.info("Access denied, no recognized role", principal_id=scope.principal_id)
        return AccessDecision.deny("No recognized role level")


def check_access(scope: Scope, target: AccessTarget, store: RecordStore) -> AccessDecision:
    """Decide whether a scope may access a target.

    Args:
        scope: Resolved scope of the caller.
        target: Coordinates of the record being accessed.
        store: Record store for live teacher link lookups.

    Returns:
        Allow or deny decision.
    """
    return AccessValidator(store).check(scope, target)
