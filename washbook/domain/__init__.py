"""
Domain layer - Pure business logic without external dependencies.
"""

from .history import ReservationHistoryGrouper
from .models import (
    ChangeRecord,
    DayHours,
    GroupedChange,
    ServiceDiff,
    SortedChangeRecords,
    TimeWindow,
    WeeklyHours,
)
from .time_slots import TimeSlotGenerator
from .working_hours import WorkingHoursRangeResolver

__all__ = [
    "ChangeRecord",
    "DayHours",
    "GroupedChange",
    "ReservationHistoryGrouper",
    "ServiceDiff",
    "SortedChangeRecords",
    "TimeSlotGenerator",
    "TimeWindow",
    "WeeklyHours",
    "WorkingHoursRangeResolver",
]
