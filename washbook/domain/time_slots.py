"""
Enumeration of discrete bookable time labels inside a window.
"""

from __future__ import annotations

from typing import List, Tuple

from .models import TimeWindow


def parse_hhmm(value: str) -> Tuple[int, int]:
    """
    Split an ``HH:MM[:SS]`` string into (hour, minute).

    Malformed input raises ValueError from ``int()``; callers are expected
    to pass well-formed times.
    """
    hour, minute = value.split(":")[:2]
    return int(hour), int(minute)


def format_hhmm(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


class TimeSlotGenerator:
    """
    Generates ``HH:MM`` labels from ``min`` to ``max`` (inclusive) at a
    fixed step.

    Precondition: ``step_minutes`` is positive. It is not checked here; the
    configured step is validated when the config is loaded.
    """

    def __init__(self, step_minutes: int = 15):
        self.step_minutes = step_minutes

    def generate(self, min: str, max: str, step_minutes: int | None = None) -> List[str]:
        """
        Build the slot labels for a window.

        Args:
            min: First slot, ``HH:MM``
            max: Last allowed slot, ``HH:MM``
            step_minutes: Override for the generator's step

        Returns:
            Ordered list of labels; empty when min is after max
        """
        step = self.step_minutes if step_minutes is None else step_minutes

        hour, minute = parse_hhmm(min)
        max_hour, max_minute = parse_hhmm(max)

        slots: List[str] = []
        while (hour, minute) <= (max_hour, max_minute):
            slots.append(format_hhmm(hour, minute))
            minute += step
            if minute >= 60:
                hour += minute // 60
                minute %= 60

        return slots

    def for_window(self, window: TimeWindow, step_minutes: int | None = None) -> List[str]:
        """Generate slots covering a resolved TimeWindow."""
        return self.generate(window.min, window.max, step_minutes)


def generate(min: str, max: str, step_minutes: int) -> List[str]:
    """Generate slot labels between ``min`` and ``max`` inclusive."""
    return TimeSlotGenerator(step_minutes).generate(min, max)
