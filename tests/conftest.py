# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (engine components over an in-memory store)
- Integration tests (SQLAlchemy record store over SQLite)
"""

from collections.abc import Iterator
from datetime import date, datetime, timezone

import pytest

from src.core.config import clear_settings_cache
from src.domains.calendar import PedagogicalCalendar
from src.models.common import EnrollmentStatus, PlanStatus, RoleLevel
from src.models.entities import (
    ActivityRecord,
    ActivityRecordCandidate,
    Child,
    Classroom,
    CurriculumEntry,
    CurriculumMatrix,
    Enrollment,
    Plan,
    Unit,
)
from src.models.principal import Principal, RoleGrant
from tests.fakes import (
    CHILD_ID,
    CLASSROOM_ID,
    ENTRY_ID,
    FOREIGN_CLASSROOM_ID,
    FOREIGN_UNIT_ID,
    MATRIX_ID,
    OTHER_CLASSROOM_ID,
    OTHER_TENANT_ID,
    OTHER_UNIT_ID,
    PLAN_ID,
    RECORD_ID,
    STAFF_ID,
    TEACHER_ID,
    TENANT_ID,
    UNIT_ID,
    InMemoryRecordStore,
)


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_environment() -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "development",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "GUARD_DB_URL_OVERRIDE": "sqlite+pysqlite:///:memory:",
        "CALENDAR_TIMEZONE": "America/Sao_Paulo",
        "ACCESS_REGIONAL_SCOPE_FALLBACK": "true",
    }


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Drop cached settings around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a real database engine)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def calendar() -> PedagogicalCalendar:
    """Provide the institutional calendar (America/Sao_Paulo)."""
    return PedagogicalCalendar(timezone="America/Sao_Paulo")


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Provide a populated in-memory record store.

    Layout:
        tenant TENANT_ID with units north and south, one classroom each.
        Teacher ana is linked to the north classroom only.
        Child clara is actively enrolled in the north classroom.
        Plan march (ACTIVE, 2025-03-01..2025-03-31) uses matrix 2025,
        which holds entry 0315 dated 2025-03-15.
        A second tenant owns its own unit.
    """
    fake = InMemoryRecordStore()
    fake.add_unit(Unit(id=UNIT_ID, tenant_id=TENANT_ID, name="North"))
    fake.add_unit(Unit(id=OTHER_UNIT_ID, tenant_id=TENANT_ID, name="South"))
    fake.add_unit(Unit(id=FOREIGN_UNIT_ID, tenant_id=OTHER_TENANT_ID, name="Foreign"))
    fake.add_classroom(
        Classroom(id=CLASSROOM_ID, tenant_id=TENANT_ID, unit_id=UNIT_ID, name="Maternal A")
    )
    fake.add_classroom(
        Classroom(id=OTHER_CLASSROOM_ID, tenant_id=TENANT_ID, unit_id=OTHER_UNIT_ID, name="Maternal B")
    )
    fake.add_classroom(
        Classroom(id=FOREIGN_CLASSROOM_ID, tenant_id=OTHER_TENANT_ID, unit_id=FOREIGN_UNIT_ID)
    )
    fake.link_teacher(TEACHER_ID, CLASSROOM_ID)
    fake.add_child(Child(id=CHILD_ID, tenant_id=TENANT_ID, first_name="Clara"))
    fake.add_enrollment(
        Enrollment(
            id="enrollment-1",
            child_id=CHILD_ID,
            classroom_id=CLASSROOM_ID,
            status=EnrollmentStatus.ACTIVE,
            enrolled_on=date(2025, 2, 3),
        )
    )
    fake.add_matrix(
        CurriculumMatrix(id=MATRIX_ID, tenant_id=TENANT_ID, year=2025, segment="EI", version=1)
    )
    fake.add_entry(
        CurriculumEntry(id=ENTRY_ID, matrix_id=MATRIX_ID, date=date(2025, 3, 15), objective_code="EI02EO01")
    )
    fake.add_plan(
        Plan(
            id=PLAN_ID,
            classroom_id=CLASSROOM_ID,
            start_date=date(2025, 3, 1),
            end_date=date(2025, 3, 31),
            status=PlanStatus.ACTIVE,
            curriculum_matrix_id=MATRIX_ID,
            title="March",
        )
    )
    return fake


@pytest.fixture
def teacher() -> Principal:
    """Provide a teacher principal of the north unit."""
    return Principal(
        id=TEACHER_ID,
        tenant_id=TENANT_ID,
        unit_id=UNIT_ID,
        grants=(RoleGrant(level=RoleLevel.TEACHER),),
    )


@pytest.fixture
def unit_staff() -> Principal:
    """Provide a unit staff principal of the north unit."""
    return Principal(
        id=STAFF_ID,
        tenant_id=TENANT_ID,
        unit_id=UNIT_ID,
        grants=(RoleGrant(level=RoleLevel.UNIT_STAFF),),
    )


@pytest.fixture
def tenant_owner() -> Principal:
    """Provide a tenant owner principal."""
    return Principal(
        id="owner-diana",
        tenant_id=TENANT_ID,
        grants=(RoleGrant(level=RoleLevel.TENANT_OWNER),),
    )


@pytest.fixture
def super_admin() -> Principal:
    """Provide a platform-wide principal."""
    return Principal(id="root", grants=(RoleGrant(level=RoleLevel.SUPER),))


@pytest.fixture
def candidate() -> ActivityRecordCandidate:
    """Provide a candidate that passes every consistency check.

    15/03/2025 12:00 UTC is 09:00 in Sao Paulo, the same day as the entry.
    """
    return ActivityRecordCandidate(
        child_id=CHILD_ID,
        classroom_id=CLASSROOM_ID,
        plan_id=PLAN_ID,
        curriculum_entry_id=ENTRY_ID,
        event_date=datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc),
        event_type="ATIVIDADE",
        title="Paint with fingers",
    )


@pytest.fixture
def activity_record() -> ActivityRecord:
    """Provide a stored activity record created by the teacher."""
    return ActivityRecord(
        id=RECORD_ID,
        child_id=CHILD_ID,
        classroom_id=CLASSROOM_ID,
        plan_id=PLAN_ID,
        curriculum_entry_id=ENTRY_ID,
        event_date=datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc),
        tenant_id=TENANT_ID,
        unit_id=UNIT_ID,
        created_by=TEACHER_ID,
        title="Paint with fingers",
    )
