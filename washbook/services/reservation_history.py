"""
Application service for a reservation's audit trail.

Change records come from a data source that delivers them oldest first;
the service makes that ordering explicit with ``SortedChangeRecords``
before grouping and describing them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from ..domain.history import (
    ReservationHistoryGrouper,
    describe_change,
    describe_created,
    format_group_header,
)
from ..domain.models import ChangeRecord, GroupedChange, SortedChangeRecords


class ChangeHistorySourceProtocol(Protocol):
    """Protocol describing the data source behaviour needed by the service."""

    def get_reservation_changes(self, reservation_id: str) -> List[ChangeRecord]:
        """Return change records sorted by ``created_at`` ascending."""


@dataclass
class HistoryEntry:
    """A grouped batch together with its rendered lines."""
    group: GroupedChange
    header: str
    lines: List[str] = field(default_factory=list)


class ReservationHistoryService:
    """Fetches, groups and renders reservation change history."""

    def __init__(
        self,
        history_source: ChangeHistorySourceProtocol,
        *,
        services: Optional[Dict[str, str]] = None,
        stations: Optional[Dict[str, str]] = None,
        employees: Optional[Dict[str, str]] = None,
        timezone: str = "Europe/Warsaw",
        grouper: Optional[ReservationHistoryGrouper] = None,
    ) -> None:
        self._history_source = history_source
        self._services = services or {}
        self._stations = stations or {}
        self._employees = employees or {}
        self._timezone = timezone
        self._grouper = grouper or ReservationHistoryGrouper()

    def grouped_history(self, reservation_id: str) -> List[GroupedChange]:
        """
        Fetch and group the history of one reservation.

        Raises:
            UnsortedHistoryError: If the source breaks its ordering contract
        """
        records = SortedChangeRecords(
            self._history_source.get_reservation_changes(reservation_id)
        )
        return self._grouper.group(records)

    def history_entries(self, reservation_id: str) -> List[HistoryEntry]:
        """Grouped history with a header and display lines per batch."""
        entries: List[HistoryEntry] = []

        for group in self.grouped_history(reservation_id):
            if group.changes and group.changes[0].change_type == "created":
                entries.append(
                    HistoryEntry(
                        group=group,
                        header=format_group_header(group, self._timezone),
                        lines=describe_created(group, services=self._services, stations=self._stations),
                    )
                )
                continue

            lines: List[str] = []
            for change in group.changes:
                lines.extend(
                    describe_change(
                        change,
                        services=self._services,
                        stations=self._stations,
                        employees=self._employees,
                    )
                )
            entries.append(
                HistoryEntry(
                    group=group,
                    header=format_group_header(group, self._timezone),
                    lines=lines,
                )
            )

        return entries
