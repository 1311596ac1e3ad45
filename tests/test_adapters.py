"""
Tests for the JSON file and REST data sources.
"""

import json

import pytest
import requests

from washbook.adapters.json_data_source import JsonFileDataSource
from washbook.adapters.rest_client import RestDataClient
from washbook.domain.exceptions import DataSourceError
from washbook.domain.models import DayHours


def _row(id, batch_id, created_at, reservation_id="r1", **extra):
    row = {
        "id": id,
        "reservation_id": reservation_id,
        "change_type": "updated",
        "field_name": "status",
        "old_value": "pending",
        "new_value": "confirmed",
        "batch_id": batch_id,
        "changed_by_username": "admin",
        "changed_by_type": "admin",
        "created_at": created_at,
    }
    row.update(extra)
    return row


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "export.json"
    path.write_text(json.dumps({
        "instances": {
            "i1": {"working_hours": {"monday": {"open": "08:00", "close": "18:00"}, "sunday": None}},
            "i2": {"working_hours": None},
        },
        "reservation_changes": [
            _row("2", "b", "2024-11-25T10:00:00+00:00"),
            _row("1", "a", "2024-11-25T09:00:00+00:00"),
            _row("3", "c", "2024-11-25T08:00:00+00:00", reservation_id="r2"),
            {"id": "broken", "reservation_id": "r1"},
        ],
    }), encoding="utf-8")
    return path


class TestJsonFileDataSource:
    """Tests for JsonFileDataSource."""

    def test_working_hours(self, data_file):
        source = JsonFileDataSource(data_file)

        hours = source.get_working_hours("i1")

        assert hours["monday"] == DayHours(open="08:00", close="18:00")
        assert hours["sunday"] is None
        assert source.get_working_hours("i2") is None
        assert source.get_working_hours("unknown") is None

    def test_changes_are_filtered_and_sorted(self, data_file):
        source = JsonFileDataSource(data_file)

        changes = source.get_reservation_changes("r1")

        assert [c.id for c in changes] == ["1", "2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataSourceError, match="not found"):
            JsonFileDataSource(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DataSourceError, match="Invalid JSON"):
            JsonFileDataSource(path)

    def test_invalid_working_hours(self, tmp_path):
        path = tmp_path / "bad_hours.json"
        path.write_text(json.dumps({
            "instances": {"i1": {"working_hours": {"monday": {"open": "18:00", "close": "08:00"}}}}
        }), encoding="utf-8")
        with pytest.raises(DataSourceError, match="Invalid working hours"):
            JsonFileDataSource(path).get_working_hours("i1")


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._payload


class FakeSession:
    """Records GET calls and replays canned responses."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class TestRestDataClient:
    """Tests for RestDataClient."""

    def test_working_hours_request(self):
        session = FakeSession(FakeResponse([
            {"working_hours": {"friday": {"open": "09:00", "close": "17:00"}}}
        ]))
        client = RestDataClient("https://backend.example/", "key", timeout=5, session=session)

        hours = client.get_working_hours("i1")

        assert hours["friday"] == DayHours(open="09:00", close="17:00")
        call = session.calls[0]
        assert call["url"] == "https://backend.example/rest/v1/instances"
        assert call["params"] == {"id": "eq.i1", "select": "working_hours"}
        assert call["headers"]["apikey"] == "key"
        assert call["headers"]["Authorization"] == "Bearer key"
        assert call["timeout"] == 5

    def test_unknown_instance(self):
        client = RestDataClient("https://backend.example", "key", session=FakeSession(FakeResponse([])))
        assert client.get_working_hours("i1") is None

    def test_changes_request_orders_ascending(self):
        session = FakeSession(FakeResponse([
            _row("1", "a", "2024-11-25T09:00:00+00:00"),
            {"id": "broken"},
        ]))
        client = RestDataClient("https://backend.example", "key", session=session)

        changes = client.get_reservation_changes("r1")

        assert [c.id for c in changes] == ["1"]
        assert session.calls[0]["params"]["order"] == "created_at.asc"
        assert session.calls[0]["params"]["reservation_id"] == "eq.r1"

    def test_http_error_becomes_data_source_error(self):
        client = RestDataClient(
            "https://backend.example", "key", session=FakeSession(FakeResponse({}, status_code=500))
        )
        with pytest.raises(DataSourceError, match="Failed to fetch instances"):
            client.get_working_hours("i1")

    def test_connection_error(self):
        session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
        client = RestDataClient("https://backend.example", "key", session=session)
        with pytest.raises(DataSourceError):
            client.get_reservation_changes("r1")

    def test_non_list_payload(self):
        client = RestDataClient(
            "https://backend.example", "key", session=FakeSession(FakeResponse({"message": "x"}))
        )
        with pytest.raises(DataSourceError, match="expected a list"):
            client.get_reservation_changes("r1")


class TestMalformedData:
    """Bad rows are skipped and bad shapes become DataSourceError."""

    def _write(self, tmp_path, payload):
        path = tmp_path / "export.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return JsonFileDataSource(path)

    @pytest.mark.parametrize("created_at", [None, "not a date", 12345])
    def test_json_skips_rows_with_bad_created_at(self, tmp_path, created_at):
        source = self._write(tmp_path, {"reservation_changes": [
            _row("1", "a", "2024-11-25T09:00:00+00:00"),
            _row("2", "b", created_at),
        ]})

        assert [c.id for c in source.get_reservation_changes("r1")] == ["1"]

    def test_json_skips_rows_that_are_not_objects(self, tmp_path):
        source = self._write(tmp_path, {"reservation_changes": [
            "garbage",
            ["r1"],
            _row("1", "a", "2024-11-25T09:00:00+00:00"),
        ]})

        assert [c.id for c in source.get_reservation_changes("r1")] == ["1"]

    @pytest.mark.parametrize("working_hours", ["closed", ["monday"], {"monday": "08:00-16:00"}])
    def test_json_working_hours_of_wrong_shape(self, tmp_path, working_hours):
        source = self._write(tmp_path, {"instances": {"i1": {"working_hours": working_hours}}})

        with pytest.raises(DataSourceError, match="Invalid working hours"):
            source.get_working_hours("i1")

    def test_json_instances_not_an_object(self, tmp_path):
        source = self._write(tmp_path, {"instances": ["i1"]})

        with pytest.raises(DataSourceError, match="must be a JSON object"):
            source.get_working_hours("i1")

    def test_json_instance_not_an_object(self, tmp_path):
        source = self._write(tmp_path, {"instances": {"i1": "closed"}})

        with pytest.raises(DataSourceError, match="must be a JSON object"):
            source.get_working_hours("i1")

    def test_json_changes_not_an_array(self, tmp_path):
        source = self._write(tmp_path, {"reservation_changes": {"id": "1"}})

        with pytest.raises(DataSourceError, match="must be a JSON array"):
            source.get_reservation_changes("r1")

    def test_rest_skips_bad_rows(self):
        session = FakeSession(FakeResponse([
            _row("1", "a", "2024-11-25T09:00:00+00:00"),
            _row("2", "b", None),
            _row("3", "c", "yesterday"),
            "garbage",
        ]))
        client = RestDataClient("https://backend.example", "key", session=session)

        assert [c.id for c in client.get_reservation_changes("r1")] == ["1"]

    @pytest.mark.parametrize("working_hours", ["closed", [1, 2]])
    def test_rest_working_hours_of_wrong_shape(self, working_hours):
        session = FakeSession(FakeResponse([{"working_hours": working_hours}]))
        client = RestDataClient("https://backend.example", "key", session=session)

        with pytest.raises(DataSourceError, match="Invalid working hours"):
            client.get_working_hours("i1")

    def test_rest_instance_row_not_an_object(self):
        client = RestDataClient("https://backend.example", "key", session=FakeSession(FakeResponse(["x"])))

        with pytest.raises(DataSourceError, match="expected an object"):
            client.get_working_hours("i1")
