# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum matrix mutation guard.

This module gates writes to curriculum matrices:
- Creation: tenant owners and regional staff, one non-retired matrix per
  tenant + year + segment + version
- Updates: same roles; year and segment are frozen while plans reference
  the matrix
- Retirement: tenant owners only, and only while unreferenced

Retiring is a status flip to RETIRED; matrices are never deleted.
"""

from src.core.interfaces import RecordStore
from src.models.common import DecisionCode, RoleLevel
from src.models.decisions import Scope, ValidationResult
from src.models.entities import CurriculumMatrix
from src.utils.logging import get_logger

logger = get_logger(__name__)

MATRIX_WRITE_LEVELS: frozenset[RoleLevel] = frozenset({
    RoleLevel.SUPER,
    RoleLevel.TENANT_OWNER,
    RoleLevel.REGIONAL_STAFF,
})

MATRIX_RETIRE_LEVELS: frozenset[RoleLevel] = frozenset({
    RoleLevel.SUPER,
    RoleLevel.TENANT_OWNER,
})

DEFAULT_MATRIX_VERSION = 1


class CurriculumMatrixGuard:
    """Validates curriculum matrix creation, updates and retirement.

    Attributes:
        store: Record store for duplicate lookups and reference counts.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def check_create(
        self,
        scope: Scope,
        tenant_id: str,
        year: int,
        segment: str,
        version: int | None = None,
    ) -> ValidationResult:
        """Validate the creation of a matrix.

        Args:
            scope: Resolved scope of the caller.
            tenant_id: Tenant that will own the matrix.
            year: School year.
            segment: Education segment (e.g. EI01, EI02).
            version: Matrix version, defaults to 1.

        Returns:
            Accepted result or the first rejection.
        """
        version = version or DEFAULT_MATRIX_VERSION

        rejection = self._check_role(scope, MATRIX_WRITE_LEVELS, tenant_id)
        if rejection is not None:
            return rejection

        duplicate = self._find_live_duplicate(tenant_id, year, segment, version)
        if duplicate is not None:
            return ValidationResult.rejected(
                DecisionCode.DUPLICATE_MATRIX,
                f"A matrix for {segment} in {year} version {version} already exists",
            )

        return ValidationResult.accepted(tenant_id=tenant_id)

    def check_update(
        self,
        scope: Scope,
        matrix: CurriculumMatrix,
        *,
        year: int | None = None,
        segment: str | None = None,
        version: int | None = None,
    ) -> ValidationResult:
        """Validate an update of a matrix.

        Year and segment may not be reassigned while any plan references
        the matrix; other fields are free to change.

        Args:
            scope: Resolved scope of the caller.
            matrix: Matrix being updated.
            year: New year, None if unchanged.
            segment: New segment, None if unchanged.
            version: New version, None if unchanged.

        Returns:
            Accepted result or the first rejection.
        """
        rejection = self._check_role(scope, MATRIX_WRITE_LEVELS, matrix.tenant_id)
        if rejection is not None:
            return rejection

        if matrix.is_retired:
            return ValidationResult.rejected(
                DecisionCode.INVALID_STATE,
                "Retired matrices cannot be changed",
            )

        reassigns = (year is not None and year != matrix.year) or (
            segment is not None and segment != matrix.segment
        )
        if reassigns:
            plans = self.store.count_plans_for_matrix(matrix.id)
            if plans > 0:
                logger.info(
                    "Matrix reassignment blocked",
                    matrix_id=matrix.id,
                    plans=plans,
                    principal_id=scope.principal_id,
                )
                return ValidationResult.rejected(
                    DecisionCode.MATRIX_IN_USE,
                    f"Cannot change year or segment of a matrix referenced by {plans} plan(s)",
                )

        new_key = (
            year if year is not None else matrix.year,
            segment if segment is not None else matrix.segment,
            version if version is not None else matrix.version,
        )
        if new_key != (matrix.year, matrix.segment, matrix.version):
            duplicate = self._find_live_duplicate(matrix.tenant_id, *new_key, exclude_id=matrix.id)
            if duplicate is not None:
                return ValidationResult.rejected(
                    DecisionCode.DUPLICATE_MATRIX,
                    f"A matrix for {new_key[1]} in {new_key[0]} version {new_key[2]} already exists",
                )

        return ValidationResult.accepted(tenant_id=matrix.tenant_id)

    def check_retire(self, scope: Scope, matrix: CurriculumMatrix) -> ValidationResult:
        """Validate the retirement (soft delete) of a matrix."""
        rejection = self._check_role(scope, MATRIX_RETIRE_LEVELS, matrix.tenant_id)
        if rejection is not None:
            return rejection

        if matrix.is_retired:
            return ValidationResult.rejected(
                DecisionCode.INVALID_STATE,
                "Matrix is already retired",
            )

        plans = self.store.count_plans_for_matrix(matrix.id)
        if plans > 0:
            return ValidationResult.rejected(
                DecisionCode.MATRIX_IN_USE,
                f"Cannot retire a matrix referenced by {plans} plan(s)",
            )

        return ValidationResult.accepted(tenant_id=matrix.tenant_id)

    def _check_role(
        self,
        scope: Scope,
        levels: frozenset[RoleLevel],
        tenant_id: str,
    ) -> ValidationResult | None:
        if not scope.has_level(*levels):
            return ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                "Not allowed to manage curriculum matrices",
            )
        if not scope.all_tenants and scope.tenant_id != tenant_id:
            return ValidationResult.rejected(
                DecisionCode.FORBIDDEN,
                "Matrix belongs to another tenant",
            )
        return None

    def _find_live_duplicate(
        self,
        tenant_id: str,
        year: int,
        segment: str,
        version: int,
        exclude_id: str | None = None,
    ) -> CurriculumMatrix | None:
        for matrix in self.store.find_curriculum_matrices(tenant_id, year, segment, version):
            if matrix.is_retired or matrix.id == exclude_id:
                continue
            return matrix
        return None
