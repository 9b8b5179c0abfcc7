# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Scope, target and decision models.

Decisions are returned as values. A caller that prefers exceptions can
call raise_for_denial() / raise_for_rejection() to enforce them.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.core.errors import error_for
from src.models.common import ROLE_RANK_ORDER, AuditAction, DecisionCode, RoleLevel
from src.models.entities import ActivityRecord, Classroom


class Scope(BaseModel):
    """Point-in-time set of records a principal may reach.

    A scope must not be reused across logically distinct requests: teacher
    links and unit scopes can change between requests.

    Attributes:
        principal_id: Principal the scope was resolved for.
        tenant_id: Tenant of the principal (None only for SUPER callers
            without a home tenant).
        levels: Every role level the principal holds.
        unit_id: Home unit (UNIT_STAFF reach).
        unit_ids: Units reachable through a REGIONAL_STAFF grant.
        classroom_ids: Classrooms reachable through TEACHER links.
        fallback_applied: True when the regional unit set is the whole
            tenant because no unit scope was configured.
    """

    model_config = ConfigDict(frozen=True)

    principal_id: str
    tenant_id: str | None = None
    levels: frozenset[RoleLevel] = Field(default_factory=frozenset)
    unit_id: str | None = None
    unit_ids: frozenset[str] = Field(default_factory=frozenset)
    classroom_ids: frozenset[str] = Field(default_factory=frozenset)
    fallback_applied: bool = False

    @property
    def all_tenants(self) -> bool:
        """Check if the scope crosses tenant boundaries (SUPER)."""
        return RoleLevel.SUPER in self.levels

    @property
    def highest_level(self) -> RoleLevel | None:
        """Return the highest ranked level of the scope."""
        for level in ROLE_RANK_ORDER:
            if level in self.levels:
                return level
        return None

    def has_level(self, *levels: RoleLevel) -> bool:
        """Check if the scope holds any of the given levels."""
        return any(level in self.levels for level in levels)


class AccessTarget(BaseModel):
    """Tenant, unit and classroom coordinates of a record being accessed."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    unit_id: str | None = None
    classroom_id: str | None = None

    @classmethod
    def for_classroom(cls, classroom: Classroom) -> "AccessTarget":
        """Build the target of a classroom."""
        return cls(
            tenant_id=classroom.tenant_id,
            unit_id=classroom.unit_id,
            classroom_id=classroom.id,
        )

    @classmethod
    def for_activity_record(cls, record: ActivityRecord) -> "AccessTarget":
        """Build the target of a stored activity record."""
        return cls(
            tenant_id=record.tenant_id,
            unit_id=record.unit_id,
            classroom_id=record.classroom_id,
        )


class AccessDecision(BaseModel):
    """Allow/deny outcome of an access check.

    Attributes:
        allowed: Whether access is granted.
        level: Role level whose predicate decided.
        code: Denial code (None when allowed).
        reason: Human-readable denial reason.
    """

    model_config = ConfigDict(frozen=True)

    allowed: bool
    level: RoleLevel | None = None
    code: DecisionCode | None = None
    reason: str | None = None

    @classmethod
    def allow(cls, level: RoleLevel) -> "AccessDecision":
        """Build an allow decision."""
        return cls(allowed=True, level=level)

    @classmethod
    def deny(
        cls,
        reason: str,
        level: RoleLevel | None = None,
        code: DecisionCode = DecisionCode.FORBIDDEN,
    ) -> "AccessDecision":
        """Build a deny decision."""
        return cls(allowed=False, level=level, code=code, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

    def raise_for_denial(self) -> None:
        """Raise the matching GuardError if access was denied."""
        if not self.allowed:
            raise error_for(
                self.code or DecisionCode.FORBIDDEN,
                self.reason or "Access denied",
                {"level": self.level.value if self.level else None},
            )


class ValidationResult(BaseModel):
    """Outcome of a consistency, lifecycle or guard check.

    Attributes:
        ok: Whether the write may proceed.
        code: Rejection code (None when ok).
        detail: Human-readable rejection detail, reported verbatim.
        step: Position of the failed check in its chain, if any.
        tenant_id: Tenant the write must carry (set on accepted creates).
        unit_id: Unit the write must carry (set on accepted creates).
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    code: DecisionCode | None = None
    detail: str | None = None
    step: int | None = None
    tenant_id: str | None = None
    unit_id: str | None = None

    @classmethod
    def accepted(cls, tenant_id: str | None = None, unit_id: str | None = None) -> "ValidationResult":
        """Build an accepted result."""
        return cls(ok=True, tenant_id=tenant_id, unit_id=unit_id)

    @classmethod
    def rejected(cls, code: DecisionCode, detail: str, step: int | None = None) -> "ValidationResult":
        """Build a rejected result."""
        return cls(ok=False, code=code, detail=detail, step=step)

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_rejection(self) -> None:
        """Raise the matching GuardError if the check failed."""
        if not self.ok:
            raise error_for(
                self.code or DecisionCode.REJECTED,
                self.detail or "Rejected",
                {"step": self.step},
            )


class RecordFilter(BaseModel):
    """Listing filter derived from a scope, for read paths.

    Exactly one dimension restricts the listing; an unrestricted filter
    belongs to SUPER callers only.
    """

    model_config = ConfigDict(frozen=True)

    unrestricted: bool = False
    tenant_id: str | None = None
    unit_ids: frozenset[str] | None = None
    classroom_ids: frozenset[str] | None = None

    @property
    def is_empty(self) -> bool:
        """Check if the filter can never match anything."""
        if self.unrestricted:
            return False
        if self.classroom_ids is not None:
            return not self.classroom_ids
        if self.unit_ids is not None:
            return not self.unit_ids
        return self.tenant_id is None


class AuditEvent(BaseModel):
    """Decision notification handed to an audit sink by callers."""

    model_config = ConfigDict(frozen=True)

    action: AuditAction
    entity_type: str
    entity_id: str | None
    actor_id: str
    tenant_id: str | None
    unit_id: str | None = None
    allowed: bool
    code: DecisionCode | None = None
    detail: str | None = None
    occurred_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
