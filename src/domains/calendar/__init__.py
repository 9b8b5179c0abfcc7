# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pedagogical calendar domain package.

Centralizes institutional-day equality so every component compares the
same logical day the same way.
"""

from src.domains.calendar.service import (
    DEFAULT_TIMEZONE,
    InstitutionalClock,
    PedagogicalCalendar,
    get_calendar,
    same_institutional_day,
)

__all__ = [
    "DEFAULT_TIMEZONE",
    "PedagogicalCalendar",
    "InstitutionalClock",
    "get_calendar",
    "same_institutional_day",
]
