"""
File-backed data source for working hours and reservation history.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.exceptions import DataSourceError
from ..domain.models import ChangeRecord, WeeklyHours, weekly_hours_from_dict

logger = logging.getLogger(__name__)


class JsonFileDataSource:
    """
    Data source that reads a JSON export of the backend tables.

    Expected layout::

        {
            "instances": {"<id>": {"working_hours": {"monday": {"open": "08:00", "close": "18:00"}}}},
            "reservation_changes": [{"id": "...", "reservation_id": "...", ...}]
        }

    Useful for fixtures and for running the CLI without backend access.
    """

    def __init__(self, data_file: Path):
        """
        Initialize the data source.

        Args:
            data_file: Path to the JSON export
        """
        self.data_file = data_file
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.data_file.exists():
            raise DataSourceError(f"Data file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise DataSourceError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataSourceError(f"{self.data_file} must contain a JSON object at the root level.")

        logger.debug("Loaded data file %s", self.data_file)
        return data

    def _table(self, name: str, expected: type) -> Any:
        table = self._data.get(name, expected())
        if not isinstance(table, expected):
            raise DataSourceError(
                f"'{name}' in {self.data_file} must be a JSON {'object' if expected is dict else 'array'}"
            )
        return table

    def get_working_hours(self, instance_id: str) -> Optional[WeeklyHours]:
        """Return the instance's weekly hours, or None if it has none."""
        instance = self._table("instances", dict).get(instance_id)
        if instance is None:
            logger.debug("Instance %s not found in %s", instance_id, self.data_file)
            return None
        if not isinstance(instance, dict):
            raise DataSourceError(f"Instance {instance_id} in {self.data_file} must be a JSON object")

        try:
            return weekly_hours_from_dict(instance.get("working_hours"))
        except (KeyError, TypeError, ValueError) as exc:
            raise DataSourceError(f"Invalid working hours for instance {instance_id}: {exc}") from exc

    def get_reservation_changes(self, reservation_id: str) -> List[ChangeRecord]:
        """
        Return the reservation's change records, oldest first.

        Rows that cannot be parsed are skipped with a warning.
        """
        records: List[ChangeRecord] = []

        for row in self._table("reservation_changes", list):
            if not isinstance(row, dict):
                logger.warning("Skipping change row that is not an object: %r", row)
                continue
            if row.get("reservation_id") != reservation_id:
                continue

            try:
                records.append(ChangeRecord.from_dict(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed change row %s: %s", row.get("id"), exc)
                continue

        records.sort(key=lambda record: record.created_at_datetime())
        return records
