"""
Bookable time window for a date, derived from an instance's weekly hours.
"""

from __future__ import annotations

from datetime import date as Date
from typing import Optional

from .models import DAY_NAMES, TimeWindow, WeeklyHours

FALLBACK_WINDOW = TimeWindow(min="06:00", max="22:00")

DEFAULT_DAY = "monday"


def day_name(date: Optional[Date]) -> str:
    """Map a date to its day-name key; no date means Monday."""
    if date is None:
        return DEFAULT_DAY
    # isoweekday: Monday=1 .. Sunday=7, so % 7 puts Sunday at 0
    return DAY_NAMES[date.isoweekday() % 7]


class WorkingHoursRangeResolver:
    """
    Computes the selectable time window for a date.

    A missing table or a closed day yields the fallback window rather than
    an empty one, so operators can still book manual overrides outside the
    regular schedule.

    The upper bound is the closing time plus one hour so that bookings can
    start close to closing; it is capped at 23:59.
    """

    def __init__(self, fallback: TimeWindow = FALLBACK_WINDOW):
        self.fallback = fallback

    def resolve(self, weekly_hours: Optional[WeeklyHours], date: Optional[Date] = None) -> TimeWindow:
        """
        Resolve the window for ``date``.

        Args:
            weekly_hours: Day name -> hours table, or None if not configured
            date: Target date (datetime and pendulum values work too)

        Returns:
            TimeWindow with zero-padded ``HH:MM`` bounds
        """
        if not weekly_hours:
            return self.fallback

        day_hours = weekly_hours.get(day_name(date))
        if day_hours is None:
            return self.fallback

        close_hour = int(day_hours.close[0:2]) + 1
        close_minute = int(day_hours.close[3:5])

        if close_hour >= 24:
            max_hour, max_minute = 23, 59
        else:
            max_hour, max_minute = close_hour, close_minute

        return TimeWindow(
            min=day_hours.open[:5],
            max=f"{max_hour:02d}:{max_minute:02d}",
        )


def resolve(weekly_hours: Optional[WeeklyHours], date: Optional[Date] = None) -> TimeWindow:
    """Resolve the time window using the default fallback."""
    return WorkingHoursRangeResolver().resolve(weekly_hours, date)
