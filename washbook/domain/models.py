"""
Domain models for working hours, time windows and reservation change history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Literal, Mapping, Optional, Sequence, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import UnsortedHistoryError

# Indexed like a JavaScript getDay(): 0=Sunday, 6=Saturday
DAY_NAMES: Tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

ChangeType = Literal["created", "updated"]
ChangedByType = Literal["admin", "customer", "system"]


@dataclass(frozen=True)
class DayHours:
    """
    Opening hours of a single weekday.

    Both values are ``HH:MM`` (or ``HH:MM:SS``) strings as stored by the
    backend. Invariant: open must not be later than close.
    """
    open: str
    close: str

    def __post_init__(self):
        if self.open > self.close:
            raise ValueError(f"Opening time {self.open} must not be after closing time {self.close}")


# Day name -> hours; None or a missing key means the day is closed.
WeeklyHours = Dict[str, Optional[DayHours]]


def weekly_hours_from_dict(data: Mapping[str, Any] | None) -> WeeklyHours | None:
    """
    Build ``WeeklyHours`` from the raw JSON stored on an instance.

    Unknown keys are ignored. Returns None when no table is configured.
    """
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValueError(f"Working hours must be an object, got {type(data).__name__}")

    hours: WeeklyHours = {}
    for day in DAY_NAMES:
        entry = data.get(day)
        if entry is None:
            hours[day] = None
        elif isinstance(entry, DayHours):
            hours[day] = entry
        elif not isinstance(entry, Mapping):
            raise ValueError(f"Hours for {day} must be an object, got {type(entry).__name__}")
        else:
            hours[day] = DayHours(open=entry["open"], close=entry["close"])
    return hours


@dataclass(frozen=True)
class TimeWindow:
    """Earliest and latest selectable ``HH:MM`` time for a date."""
    min: str
    max: str

    def __str__(self) -> str:
        return f"{self.min} - {self.max}"


@dataclass(frozen=True)
class ChangeRecord:
    """
    One field-level change of a reservation.

    ``batch_id`` correlates all field changes produced by a single edit
    (e.g. one form submission). Values are whatever JSON the backend
    stored for the field.
    """
    id: str
    reservation_id: Optional[str]
    change_type: ChangeType
    field_name: Optional[str]
    old_value: Any
    new_value: Any
    batch_id: str
    changed_by_username: str
    changed_by_type: ChangedByType
    created_at: str

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "ChangeRecord":
        """
        Build a record from a raw ``reservation_changes`` row.

        Raises:
            KeyError: If a required column is missing
            TypeError: If ``created_at`` is not a string
            ValueError: If ``created_at`` is not a parseable timestamp
        """
        created_at = row["created_at"]
        if not isinstance(created_at, str):
            raise TypeError(f"created_at must be a string, got {type(created_at).__name__}")
        # ParserError subclasses ValueError
        if not isinstance(pendulum.parse(created_at), DateTime):
            raise ValueError(f"created_at is not a timestamp: {created_at}")

        return cls(
            id=str(row["id"]),
            reservation_id=row.get("reservation_id"),
            change_type=row["change_type"],
            field_name=row.get("field_name"),
            old_value=row.get("old_value"),
            new_value=row.get("new_value"),
            batch_id=str(row["batch_id"]),
            changed_by_username=row.get("changed_by_username") or "",
            changed_by_type=row["changed_by_type"],
            created_at=created_at,
        )

    def created_at_datetime(self) -> DateTime:
        """Parse ``created_at`` into an aware datetime."""
        return pendulum.parse(self.created_at)


@dataclass
class GroupedChange:
    """All change records of one edit batch, in input order."""
    batch_id: str
    changed_by_username: str
    changed_by_type: ChangedByType
    created_at: str
    changes: List[ChangeRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ServiceDiff:
    """Labels added to and removed from a list of ids."""
    added: List[str]
    removed: List[str]


class SortedChangeRecords(Sequence[ChangeRecord]):
    """
    Immutable sequence of change records in ascending ``created_at`` order.

    History grouping relies on the order records arrive in; wrapping them
    here makes that precondition explicit instead of silently re-sorting.
    """

    def __init__(self, records: Iterable[ChangeRecord]):
        self._records: Tuple[ChangeRecord, ...] = tuple(records)

        previous: DateTime | None = None
        for record in self._records:
            current = record.created_at_datetime()
            if previous is not None and current < previous:
                raise UnsortedHistoryError(
                    f"Change {record.id} at {record.created_at} is older than the record before it"
                )
            previous = current

    def __getitem__(self, index):
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ChangeRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"SortedChangeRecords({len(self._records)} records)"
