"""
Application service for offering bookable times on a date.

The service fetches an instance's weekly hours through a data source
adapter and delegates the window and slot computation to the domain-level
``WorkingHoursRangeResolver`` and ``TimeSlotGenerator``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date as Date
from typing import List, Optional, Protocol

from ..domain.models import TimeWindow, WeeklyHours
from ..domain.time_slots import TimeSlotGenerator
from ..domain.working_hours import WorkingHoursRangeResolver

logger = logging.getLogger(__name__)


class WorkingHoursSourceProtocol(Protocol):
    """Protocol describing the data source behaviour needed by the service."""

    def get_working_hours(self, instance_id: str) -> Optional[WeeklyHours]:
        """Return the instance's weekly hours, or None if not configured."""


@dataclass(frozen=True)
class DaySlots:
    """Resolved window and selectable labels for one date."""
    date: Optional[Date]
    window: TimeWindow
    slots: List[str]


class BookingSlotService:
    """
    Orchestrates working-hours retrieval and slot generation.

    Dependency inversion toward a protocol makes it easy to plug in the REST
    client, the JSON file source, or a stub in tests.
    """

    def __init__(
        self,
        hours_source: WorkingHoursSourceProtocol,
        resolver: Optional[WorkingHoursRangeResolver] = None,
        generator: Optional[TimeSlotGenerator] = None,
    ) -> None:
        self._hours_source = hours_source
        self._resolver = resolver or WorkingHoursRangeResolver()
        self._generator = generator or TimeSlotGenerator()

    def slots_for_date(
        self,
        *,
        instance_id: str,
        date: Optional[Date],
        step_minutes: Optional[int] = None,
    ) -> DaySlots:
        """Fetch the instance's hours and compute the slots for ``date``."""
        weekly_hours = self._hours_source.get_working_hours(instance_id)
        if weekly_hours is None:
            logger.debug("No working hours for instance %s, using fallback window", instance_id)

        return self.calculate(weekly_hours=weekly_hours, date=date, step_minutes=step_minutes)

    def calculate(
        self,
        *,
        weekly_hours: Optional[WeeklyHours],
        date: Optional[Date],
        step_minutes: Optional[int] = None,
    ) -> DaySlots:
        """Compute the window and slot labels from an already fetched table."""
        window = self._resolver.resolve(weekly_hours, date)
        slots = self._generator.for_window(window, step_minutes)
        return DaySlots(date=date, window=window, slots=slots)
