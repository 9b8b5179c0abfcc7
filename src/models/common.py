# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums for the access and consistency engine.

Every lifecycle is modelled as an explicit status enum with a known set of
terminal states, never as a nullable "deleted at" marker.
"""

from enum import Enum


class RoleLevel(str, Enum):
    """Role levels of a principal, from widest to narrowest reach.

    Rank order matters: access predicates are evaluated from the highest
    ranked level the principal holds, and the first one decides.
    - SUPER: Platform operator, crosses tenant boundaries
    - TENANT_OWNER: Owns a tenant (mantenedora) and everything in it
    - REGIONAL_STAFF: Central staff scoped to a set of units
    - UNIT_STAFF: Direction/coordination of a single unit
    - TEACHER: Sees only classrooms it is actively linked to
    """

    SUPER = "super"
    TENANT_OWNER = "tenant_owner"
    REGIONAL_STAFF = "regional_staff"
    UNIT_STAFF = "unit_staff"
    TEACHER = "teacher"


# Descending rank, used as the tie-break order everywhere
ROLE_RANK_ORDER: tuple[RoleLevel, ...] = (
    RoleLevel.SUPER,
    RoleLevel.TENANT_OWNER,
    RoleLevel.REGIONAL_STAFF,
    RoleLevel.UNIT_STAFF,
    RoleLevel.TEACHER,
)


class PlanStatus(str, Enum):
    """Lifecycle of a pedagogical plan. CLOSED is terminal."""

    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class EnrollmentStatus(str, Enum):
    """Status of a child's enrollment in a classroom.

    Only ACTIVE counts as enrolled. Statuses this engine does not know
    (e.g. "pending" from an upstream system) load as OTHER.
    """

    ACTIVE = "active"
    SUSPENDED = "suspended"
    TRANSFERRED = "transferred"
    WITHDRAWN = "withdrawn"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> "EnrollmentStatus":
        return cls.OTHER


class MatrixStatus(str, Enum):
    """Lifecycle of a curriculum matrix. RETIRED is terminal."""

    ACTIVE = "active"
    RETIRED = "retired"


class ActivityRecordStatus(str, Enum):
    """Lifecycle of a diary activity record. ARCHIVED is terminal."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class AuditAction(str, Enum):
    """Kind of operation an audit event describes."""

    CREATE = "create"
    UPDATE = "update"
    ARCHIVE = "archive"
    STATUS_CHANGE = "status_change"


class DecisionCode(str, Enum):
    """Machine-readable reason attached to a refused decision.

    The consistency codes map one-to-one to the checks that gate an
    activity record write, in the order they are evaluated.
    """

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_STATE = "invalid_state"
    REJECTED = "rejected"
    STORE_UNAVAILABLE = "store_unavailable"

    # Activity record consistency
    NOT_ENROLLED = "not_enrolled"
    PLAN_NOT_ACTIVE = "plan_not_active"
    OUT_OF_PLAN_WINDOW = "out_of_plan_window"
    PLAN_CLASSROOM_MISMATCH = "plan_classroom_mismatch"
    ENTRY_DATE_MISMATCH = "entry_date_mismatch"
    ENTRY_MATRIX_MISMATCH = "entry_matrix_mismatch"

    # Lifecycle and curriculum guards
    INVALID_TRANSITION = "invalid_transition"
    PLAN_CLOSED = "plan_closed"
    RECORD_ARCHIVED = "record_archived"
    MATRIX_IN_USE = "matrix_in_use"
    DUPLICATE_MATRIX = "duplicate_matrix"
