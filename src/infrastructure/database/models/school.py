# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School structure models: tenants, units, classrooms, children.

Every tenant-scoped row carries tenant_id so scope filters need no join.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, IdMixin
from src.models.common import EnrollmentStatus


class Tenant(IdMixin, Base):
    """Tenant (mantenedora), the root of isolation."""

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    units: Mapped[List["Unit"]] = relationship(back_populates="tenant")

    def __repr__(self) -> str:
        return f"<Tenant {self.id}: {self.name}>"


class Unit(IdMixin, Base):
    """A physical site of a tenant."""

    __tablename__ = "units"

    tenant_id: Mapped[str] = mapped_column(ForeignKey("tenants.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    tenant: Mapped["Tenant"] = relationship(back_populates="units")
    classrooms: Mapped[List["Classroom"]] = relationship(back_populates="unit")

    def __repr__(self) -> str:
        return f"<Unit {self.id}: {self.name}>"


class Classroom(IdMixin, Base):
    """A group of children within a unit."""

    __tablename__ = "classrooms"

    tenant_id: Mapped[str] = mapped_column(ForeignKey("tenants.id"), nullable=False, index=True)
    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    unit: Mapped["Unit"] = relationship(back_populates="classrooms")
    teacher_links: Mapped[List["ClassroomTeacher"]] = relationship(back_populates="classroom")

    def __repr__(self) -> str:
        return f"<Classroom {self.id}: {self.name}>"


class ClassroomTeacher(IdMixin, Base):
    """Teacher assignment to a classroom."""

    __tablename__ = "classroom_teachers"
    __table_args__ = (
        UniqueConstraint("classroom_id", "teacher_id", name="uq_classroom_teacher"),
        Index("ix_classroom_teachers_teacher_active", "teacher_id", "is_active"),
    )

    classroom_id: Mapped[str] = mapped_column(ForeignKey("classrooms.id"), nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    classroom: Mapped["Classroom"] = relationship(back_populates="teacher_links")


class Child(IdMixin, Base):
    """A child attending a tenant's units."""

    __tablename__ = "children"

    tenant_id: Mapped[str] = mapped_column(ForeignKey("tenants.id"), nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")

    enrollments: Mapped[List["Enrollment"]] = relationship(back_populates="child")


class Enrollment(IdMixin, Base):
    """Enrollment of a child in a classroom."""

    __tablename__ = "enrollments"
    __table_args__ = (
        Index("ix_enrollments_child_classroom", "child_id", "classroom_id"),
    )

    child_id: Mapped[str] = mapped_column(ForeignKey("children.id"), nullable=False)
    classroom_id: Mapped[str] = mapped_column(ForeignKey("classrooms.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=EnrollmentStatus.ACTIVE.value)
    enrolled_on: Mapped[Optional[date]] = mapped_column(Date)

    child: Mapped["Child"] = relationship(back_populates="enrollments")
