"""
REST client for the hosted booking backend (PostgREST-style endpoints).
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..domain.exceptions import DataSourceError
from ..domain.models import ChangeRecord, WeeklyHours, weekly_hours_from_dict

logger = logging.getLogger(__name__)


class RestDataClient:
    """
    Fetches working hours and reservation history over HTTP.

    The backend exposes tables under ``/rest/v1/<table>`` and sorts
    ``reservation_changes`` by ``created_at`` ascending on request.
    """

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the REST client.

        Args:
            base_url: Backend project URL, e.g. https://xyz.example.co
            api_key: API key sent as ``apikey`` and bearer token
            timeout: Request timeout in seconds
            session: Optional requests session (for connection reuse)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json"
        }

    def _get(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}{self.REST_PATH}/{table}"
        logger.debug("GET %s %s", url, params)

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise DataSourceError(f"Failed to fetch {table} from backend: {e}") from e
        except ValueError as e:
            raise DataSourceError(f"Backend returned invalid JSON for {table}: {e}") from e

        if not isinstance(data, list):
            raise DataSourceError(f"Unexpected response for {table}: expected a list of rows")

        return data

    def get_working_hours(self, instance_id: str) -> Optional[WeeklyHours]:
        """Fetch the instance's weekly hours; None if unset or unknown."""
        rows = self._get(
            "instances",
            {"id": f"eq.{instance_id}", "select": "working_hours"}
        )
        if not rows:
            return None
        if not isinstance(rows[0], dict):
            raise DataSourceError(f"Unexpected instances row for {instance_id}: expected an object")

        try:
            return weekly_hours_from_dict(rows[0].get("working_hours"))
        except (KeyError, TypeError, ValueError) as exc:
            raise DataSourceError(f"Invalid working hours for instance {instance_id}: {exc}") from exc

    def get_reservation_changes(self, reservation_id: str) -> List[ChangeRecord]:
        """Fetch the reservation's change records, oldest first."""
        rows = self._get(
            "reservation_changes",
            {
                "reservation_id": f"eq.{reservation_id}",
                "select": "*",
                "order": "created_at.asc"
            }
        )

        records: List[ChangeRecord] = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning("Skipping change row that is not an object: %r", row)
                continue

            try:
                records.append(ChangeRecord.from_dict(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed change row %s: %s", row.get("id"), exc)
                continue

        return records
