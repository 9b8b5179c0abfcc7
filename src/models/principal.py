# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Principal (caller) models.

A principal is the authenticated caller of an operation. It belongs to one
tenant, optionally to one unit, and holds an ordered set of role grants.
"""

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import ROLE_RANK_ORDER, RoleLevel


class RoleGrant(BaseModel):
    """A role level granted to a principal.

    Attributes:
        level: Granted role level.
        unit_scope: Unit identifiers the grant is limited to. Only read for
            REGIONAL_STAFF grants; empty means no scope was configured.
    """

    model_config = ConfigDict(frozen=True)

    level: RoleLevel
    unit_scope: frozenset[str] = Field(default_factory=frozenset)


class Principal(BaseModel):
    """Authenticated caller.

    Attributes:
        id: User identifier.
        tenant_id: Tenant (mantenedora) the user belongs to.
        unit_id: Unit the user is attached to, if any.
        grants: Role grants in the order they were issued.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    tenant_id: str | None = None
    unit_id: str | None = None
    grants: tuple[RoleGrant, ...] = ()

    @property
    def levels(self) -> frozenset[RoleLevel]:
        """Return every role level the principal holds."""
        return frozenset(grant.level for grant in self.grants)

    @property
    def highest_level(self) -> RoleLevel | None:
        """Return the highest ranked level held, or None without grants."""
        for level in ROLE_RANK_ORDER:
            if level in self.levels:
                return level
        return None

    def has_level(self, *levels: RoleLevel) -> bool:
        """Check if the principal holds any of the given levels."""
        return any(level in self.levels for level in levels)

    def grants_for(self, level: RoleLevel) -> list[RoleGrant]:
        """Return the grants of a given level, in issue order."""
        return [grant for grant in self.grants if grant.level == level]
