# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for PedagogyGuard.

Design Decisions:
-----------------
1. Instants are stored in UTC (PostgreSQL TIMESTAMPTZ)
2. Naive datetimes reaching the engine are interpreted as UTC
3. Calendar-day semantics ("which school day is this?") are never derived
   here; they belong to src.domains.calendar, which converts to the
   institutional timezone first.

Usage:
------
    from src.utils.datetime import utc_now, ensure_utc

    occurred_at = utc_now()
    event_at = ensure_utc(payload_datetime)
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def to_zone(dt: datetime, zone: ZoneInfo) -> datetime:
    """Convert an instant to the wall-clock time of a timezone.

    Args:
        dt: Datetime to convert (naive values are treated as UTC).
        zone: Target timezone.

    Returns:
        Timezone-aware datetime in the target zone.
    """
    return ensure_utc(dt).astimezone(zone)


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    dt_utc = ensure_utc(dt)
    return dt_utc.isoformat()


def parse_iso(iso_string: str | None) -> datetime | None:
    """Parse an ISO 8601 datetime string.

    Args:
        iso_string: ISO 8601 formatted string.

    Returns:
        Timezone-aware UTC datetime or None.
    """
    if iso_string is None:
        return None

    dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return ensure_utc(dt)
