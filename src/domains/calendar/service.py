# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pedagogical calendar: institutional day normalization.

Stored instants may originate as UTC midnight markers while users think
in local school days. Every "is this the same day?" question in the
engine is answered here, in the institution's fixed civil timezone, and
nowhere else.

Rules:
- Aware datetimes are converted to the institutional timezone.
- Naive datetimes are treated as UTC before conversion.
- Plain dates carry no time of day and are taken as the day itself.

Example:
    >>> calendar = PedagogicalCalendar("America/Sao_Paulo")
    >>> calendar.same_institutional_day(
    ...     datetime(2026, 2, 9, 22, 0, tzinfo=timezone.utc),
    ...     date(2026, 2, 9),
    ... )
    True
"""

from collections.abc import Callable
from datetime import date, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from src.core.config import get_settings
from src.utils.datetime import to_zone, utc_now

DEFAULT_TIMEZONE = "America/Sao_Paulo"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"

DayLike = datetime | date


class PedagogicalCalendar:
    """Normalizes instants to institutional calendar days.

    Attributes:
        zone: The institution's fixed civil timezone.
        date_format: strftime format for user-facing dates.
    """

    def __init__(
        self,
        timezone: str | ZoneInfo = DEFAULT_TIMEZONE,
        date_format: str = DEFAULT_DATE_FORMAT,
    ) -> None:
        """Initialize the calendar.

        Args:
            timezone: IANA name or ZoneInfo of the institution.
            date_format: strftime format for user-facing dates.
        """
        self.zone = timezone if isinstance(timezone, ZoneInfo) else ZoneInfo(timezone)
        self.date_format = date_format

    def institutional_day(self, value: DayLike) -> date:
        """Return the institutional calendar day of an instant or date.

        Args:
            value: Instant (aware or naive-UTC) or plain date.

        Returns:
            Calendar date in the institutional timezone.
        """
        # datetime is a date subclass, so test it first
        if isinstance(value, datetime):
            return to_zone(value, self.zone).date()
        return value

    def same_institutional_day(self, a: DayLike, b: DayLike) -> bool:
        """Check if two values fall on the same institutional day.

        Only (year, month, day) in the institutional timezone are compared.
        Two instants a millisecond apart across local midnight are different
        days; two instants hours apart on the same local date are not.
        """
        return self.institutional_day(a) == self.institutional_day(b)

    def within(self, value: DayLike, start: DayLike, end: DayLike) -> bool:
        """Check if a value falls in an inclusive day interval."""
        day = self.institutional_day(value)
        return self.institutional_day(start) <= day <= self.institutional_day(end)

    def format(self, value: DayLike) -> str:
        """Format the institutional day of a value for messages."""
        return self.institutional_day(value).strftime(self.date_format)


class InstitutionalClock:
    """Clock reporting current time in the institutional timezone.

    Not used by validation; callers use it for defaults and audit stamps.
    """

    def __init__(
        self,
        calendar: PedagogicalCalendar,
        now_fn: Callable[[], datetime] = utc_now,
    ) -> None:
        self._calendar = calendar
        self._now_fn = now_fn

    def now(self) -> datetime:
        """Return the current instant in the institutional timezone."""
        return to_zone(self._now_fn(), self._calendar.zone)

    def today(self) -> date:
        """Return the current institutional day."""
        return self._calendar.institutional_day(self._now_fn())


@lru_cache(maxsize=1)
def get_calendar() -> PedagogicalCalendar:
    """Get the calendar configured by application settings.

    Returns:
        Cached PedagogicalCalendar instance.
    """
    settings = get_settings()
    return PedagogicalCalendar(
        timezone=settings.calendar.timezone,
        date_format=settings.calendar.date_format,
    )


def same_institutional_day(
    a: DayLike,
    b: DayLike,
    calendar: PedagogicalCalendar | None = None,
) -> bool:
    """Check if two values fall on the same institutional day.

    Args:
        a: First instant or date.
        b: Second instant or date.
        calendar: Calendar to use, defaults to the configured one.

    Returns:
        True if both map to the same local calendar date.
    """
    return (calendar or get_calendar()).same_institutional_day(a, b)
