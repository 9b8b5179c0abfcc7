# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Composition root for PedagogyGuard.

This module wires the engine components together from settings:
- Structured logging
- Database manager and SQLAlchemy record store
- Institutional calendar and clock
- Audit sink
- Scope resolution, access validation and the decision services

Example:
    >>> with guard_lifespan() as guard:
    ...     result = guard.activity_records.authorize_create(principal, candidate)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from src.core.config import Settings, get_settings
from src.core.interfaces import AuditSink, RecordStore
from src.domains.access import AccessValidator
from src.domains.activity_record import ActivityRecordService
from src.domains.calendar import InstitutionalClock, PedagogicalCalendar
from src.domains.consistency import ConsistencyChain
from src.domains.curriculum import CurriculumMatrixGuard
from src.domains.planning import PlanPolicy, PlanStatusGate
from src.domains.scope import ScopeResolver
from src.infrastructure.audit import StructlogAuditSink
from src.infrastructure.database import DatabaseManager, SqlAlchemyRecordStore
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class Guard:
    """Wired engine components sharing one store, calendar and sink."""

    settings: Settings
    store: RecordStore
    calendar: PedagogicalCalendar
    clock: InstitutionalClock
    audit_sink: AuditSink | None
    scope_resolver: ScopeResolver
    access_validator: AccessValidator
    consistency_chain: ConsistencyChain
    plan_status_gate: PlanStatusGate
    plan_policy: PlanPolicy
    matrix_guard: CurriculumMatrixGuard
    activity_records: ActivityRecordService
    database: DatabaseManager | None = None

    def close(self) -> None:
        """Release the database pool, if this guard owns one."""
        if self.database is not None:
            self.database.close()
            logger.info("Record store closed")


def create_guard(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    audit_sink: AuditSink | None = None,
    configure_logging: bool = True,
) -> Guard:
    """Build the engine components.

    When no store is given, a DatabaseManager is created from the
    database settings and a SqlAlchemyRecordStore is put on top of it.

    Args:
        settings: Settings to use, defaults to the cached environment settings.
        store: Record store override (tests, custom backends).
        audit_sink: Audit sink override, defaults to StructlogAuditSink.
        configure_logging: Whether to configure structlog.

    Returns:
        Wired Guard instance.

    Raises:
        DatabaseError: If the database engine cannot be created.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    database = None
    if store is None:
        database = DatabaseManager(settings)
        store = SqlAlchemyRecordStore(database.session)

    calendar = PedagogicalCalendar(
        timezone=settings.calendar.timezone,
        date_format=settings.calendar.date_format,
    )
    clock = InstitutionalClock(calendar)
    audit_sink = audit_sink or StructlogAuditSink()
    scope_resolver = ScopeResolver(
        store, regional_scope_fallback=settings.access.regional_scope_fallback
    )
    access_validator = AccessValidator(store)

    logger.info(
        "PedagogyGuard initialized",
        environment=settings.environment,
        timezone=settings.calendar.timezone,
        owns_database=database is not None,
    )

    return Guard(
        settings=settings,
        store=store,
        calendar=calendar,
        clock=clock,
        audit_sink=audit_sink,
        scope_resolver=scope_resolver,
        access_validator=access_validator,
        consistency_chain=ConsistencyChain(access_validator, calendar=calendar),
        plan_status_gate=PlanStatusGate(access_validator),
        plan_policy=PlanPolicy(access_validator),
        matrix_guard=CurriculumMatrixGuard(store),
        activity_records=ActivityRecordService(
            store,
            audit_sink=audit_sink,
            clock=clock,
            calendar=calendar,
            scope_resolver=scope_resolver,
        ),
        database=database,
    )


@contextmanager
def guard_lifespan(settings: Settings | None = None, **kwargs) -> Iterator[Guard]:
    """Create a guard and close it on exit.

    Args:
        settings: Settings to use.
        **kwargs: Forwarded to create_guard.

    Yields:
        Wired Guard instance.
    """
    guard = create_guard(settings, **kwargs)
    try:
        yield guard
    finally:
        guard.close()
