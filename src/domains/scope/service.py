# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Scope resolution for principals.

This module computes which tenant, units and classrooms a principal may
reach. Resolution is driven by the principal's highest ranked role level:

- SUPER: every tenant (a bypass, not a broadened filter)
- TENANT_OWNER: the principal's tenant
- REGIONAL_STAFF: the units of its unit scope, or every unit of the tenant
  when no scope is configured (see _resolve_regional_fallback)
- UNIT_STAFF: exactly the principal's own unit
- TEACHER: classrooms of the principal's active teacher links

Resolution has no side effects. The resulting Scope is a point-in-time
snapshot and must not be cached across requests.
"""

from collections.abc import Callable

from src.core.config import get_settings
from src.core.errors import InvalidStateError
from src.core.interfaces import RecordStore
from src.models.common import RoleLevel
from src.models.decisions import Scope
from src.models.principal import Principal
from src.utils.logging import get_logger

logger = get_logger(__name__)


class ScopeResolver:
    """Resolves principals to scopes.

    Attributes:
        store: Record store used for unit and teacher link lookups.
        regional_scope_fallback: Whether an empty regional unit scope
            grants every unit of the tenant.
    """

    def __init__(
        self,
        store: RecordStore,
        regional_scope_fallback: bool | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            store: Record store for lookups.
            regional_scope_fallback: Override of the configured fallback
                behaviour for empty regional scopes.
        """
        self.store = store
        if regional_scope_fallback is None:
            regional_scope_fallback = get_settings().access.regional_scope_fallback
        self.regional_scope_fallback = regional_scope_fallback

        self._resolvers: dict[RoleLevel, Callable[[Principal, str | None], Scope]] = {
            RoleLevel.SUPER: self._resolve_super,
            RoleLevel.TENANT_OWNER: self._resolve_tenant_owner,
            RoleLevel.REGIONAL_STAFF: self._resolve_regional_staff,
            RoleLevel.UNIT_STAFF: self._resolve_unit_staff,
            RoleLevel.TEACHER: self._resolve_teacher,
        }

    def resolve(self, principal: Principal, unit_id: str | None = None) -> Scope:
        """Resolve the scope of a principal.

        Args:
            principal: Authenticated caller.
            unit_id: Optional unit to narrow a teacher's classrooms to.

        Returns:
            Scope of the principal.

        Raises:
            InvalidStateError: If the principal lacks a tenant (non-SUPER)
                or a unit staff principal lacks a unit.
            StoreUnavailableError: If the store cannot be reached.
        """
        level = principal.highest_level
        if level is None:
            # No recognized grant: an empty scope, denied downstream
            logger.info("Principal has no role grants", principal_id=principal.id)
            return Scope(principal_id=principal.id, tenant_id=principal.tenant_id)

        if level != RoleLevel.SUPER and not principal.tenant_id:
            raise InvalidStateError(
                "Principal has no tenant",
                details={"principal_id": principal.id, "level": level.value},
            )

        scope = self._resolvers[level](principal, unit_id)
        logger.debug(
            "Scope resolved",
            principal_id=principal.id,
            level=level.value,
            units=len(scope.unit_ids),
            classrooms=len(scope.classroom_ids),
            fallback_applied=scope.fallback_applied,
        )
        return scope

    def _base(self, principal: Principal) -> dict:
        return {
            "principal_id": principal.id,
            "tenant_id": principal.tenant_id,
            "levels": principal.levels,
            "unit_id": principal.unit_id,
        }

    def _resolve_super(self, principal: Principal, unit_id: str | None) -> Scope:
        return Scope(**self._base(principal))

    def _resolve_tenant_owner(self, principal: Principal, unit_id: str | None) -> Scope:
        return Scope(**self._base(principal))

    def _resolve_regional_staff(self, principal: Principal, unit_id: str | None) -> Scope:
        unit_ids: set[str] = set()
        for grant in principal.grants_for(RoleLevel.REGIONAL_STAFF):
            unit_ids.update(grant.unit_scope)

        if unit_ids:
            return Scope(**self._base(principal), unit_ids=frozenset(unit_ids))

        if self.regional_scope_fallback:
            return self._resolve_regional_fallback(principal)

        logger.info(
            "Regional staff without unit scope, fallback disabled",
            principal_id=principal.id,
        )
        return Scope(**self._base(principal))

    def _resolve_regional_fallback(self, principal: Principal) -> Scope:
        """Grant every unit of the tenant to an unscoped regional principal.

        "No scope configured" is not "no access" for regional staff.
        """
        unit_ids = frozenset(self.store.list_unit_ids(principal.tenant_id))
        logger.info(
            "Regional staff unit scope fallback applied",
            principal_id=principal.id,
            tenant_id=principal.tenant_id,
            units=len(unit_ids),
        )
        return Scope(**self._base(principal), unit_ids=unit_ids, fallback_applied=True)

    def _resolve_unit_staff(self, principal: Principal, unit_id: str | None) -> Scope:
        if not principal.unit_id:
            raise InvalidStateError(
                "Unit staff principal has no unit",
                details={"principal_id": principal.id},
            )
        return Scope(**self._base(principal), unit_ids=frozenset({principal.unit_id}))

    def _resolve_teacher(self, principal: Principal, unit_id: str | None) -> Scope:
        classroom_ids = self.store.list_teacher_classroom_ids(principal.id, unit_id=unit_id)
        return Scope(**self._base(principal), classroom_ids=frozenset(classroom_ids))


def resolve_scope(
    principal: Principal,
    store: RecordStore,
    unit_id: str | None = None,
) -> Scope:
    """Resolve the scope of a principal.

    Args:
        principal: Authenticated caller.
        store: Record store for lookups.
        unit_id: Optional unit to narrow a teacher's classrooms to.

    Returns:
        Scope of the principal.
    """
    return ScopeResolver(store).resolve(principal, unit_id=unit_id)
