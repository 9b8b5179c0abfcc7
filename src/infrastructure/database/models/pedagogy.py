# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pedagogical models: curriculum matrices, plans and activity records.

Lifecycles are explicit status columns. Matrices are retired and activity
records archived; neither is ever deleted.
"""

import datetime
from typing import List, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, IdMixin
from src.models.common import ActivityRecordStatus, MatrixStatus, PlanStatus


class CurriculumMatrix(IdMixin, Base):
    """A tenant's dated curriculum catalog."""

    __tablename__ = "curriculum_matrices"
    __table_args__ = (
        # At most one non-retired matrix per tenant + year + segment + version
        Index(
            "uq_curriculum_matrices_live",
            "tenant_id",
            "year",
            "segment",
            "version",
            unique=True,
            postgresql_where=text("status <> 'retired'"),
            sqlite_where=text("status <> 'retired'"),
        ),
    )

    tenant_id: Mapped[str] = mapped_column(ForeignKey("tenants.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    segment: Mapped[str] = mapped_column(String(20), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=MatrixStatus.ACTIVE.value)

    entries: Mapped[List["CurriculumEntry"]] = relationship(back_populates="matrix")
    plans: Mapped[List["Plan"]] = relationship(back_populates="curriculum_matrix")


class CurriculumEntry(IdMixin, Base):
    """A dated item of a curriculum matrix."""

    __tablename__ = "curriculum_entries"

    matrix_id: Mapped[str] = mapped_column(ForeignKey("curriculum_matrices.id"), nullable=False, index=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    experience_field: Mapped[Optional[str]] = mapped_column(String(120))
    objective_code: Mapped[Optional[str]] = mapped_column(String(40))

    matrix: Mapped["CurriculumMatrix"] = relationship(back_populates="entries")


class Plan(IdMixin, Base):
    """A time-boxed pedagogical plan of a classroom."""

    __tablename__ = "plans"

    classroom_id: Mapped[str] = mapped_column(ForeignKey("classrooms.id"), nullable=False, index=True)
    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=PlanStatus.DRAFT.value)
    curriculum_matrix_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("curriculum_matrices.id"), index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    curriculum_matrix: Mapped[Optional["CurriculumMatrix"]] = relationship(back_populates="plans")


class ActivityRecord(IdMixin, Base):
    """A diary event record of a child, bound to plan and curriculum."""

    __tablename__ = "activity_records"
    __table_args__ = (
        Index("ix_activity_records_scope", "tenant_id", "unit_id", "classroom_id"),
    )

    child_id: Mapped[str] = mapped_column(ForeignKey("children.id"), nullable=False, index=True)
    classroom_id: Mapped[str] = mapped_column(ForeignKey("classrooms.id"), nullable=False)
    plan_id: Mapped[str] = mapped_column(ForeignKey("plans.id"), nullable=False, index=True)
    curriculum_entry_id: Mapped[str] = mapped_column(ForeignKey("curriculum_entries.id"), nullable=False)
    event_date: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    unit_id: Mapped[str] = mapped_column(String(36), nullable=False)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ActivityRecordStatus.ACTIVE.value
    )
    event_type: Mapped[Optional[str]] = mapped_column(String(40))
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
