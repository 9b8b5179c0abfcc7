# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Activity record domain package.

This package provides activity (diary event) record authorization:
- Creation behind the consistency chain
- Updates and archival restricted to authors and unit/tenant staff
- Scope-based listing filters
"""

from src.domains.activity_record.service import (
    EDIT_LEVELS,
    ActivityRecordService,
    scope_filter,
)

__all__ = [
    "ActivityRecordService",
    "EDIT_LEVELS",
    "scope_filter",
]
