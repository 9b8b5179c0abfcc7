# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the record store.

This package provides:
- DatabaseManager: sync SQLAlchemy engine and session handling
- SqlAlchemyRecordStore: RecordStore implementation over the models
- Models for tenants, units, classrooms, children, plans, curriculum
  matrices and activity records

Example:
    from src.infrastructure.database import DatabaseManager, SqlAlchemyRecordStore

    manager = DatabaseManager(get_settings())
    store = SqlAlchemyRecordStore(manager.session)
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    DatabaseManager,
    create_store_engine,
)
from src.infrastructure.database.models import Base
from src.infrastructure.database.store import SqlAlchemyRecordStore

__all__ = [
    "Base",
    "DatabaseError",
    "DatabaseManager",
    "SqlAlchemyRecordStore",
    "create_store_engine",
]
