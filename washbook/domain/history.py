"""
Reservation audit trail: grouping field-level changes into edit batches
and rendering them as readable (Polish) lines.

Everything here is pure; records are fetched by the data-access layer.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

import pendulum

from .models import ChangeRecord, GroupedChange, ServiceDiff

LabelLookup = Union[Callable[[str], Optional[str]], Mapping[str, str]]

STATUS_LABELS: Dict[str, str] = {
    "pending": "Oczekująca",
    "confirmed": "Potwierdzona",
    "in_progress": "W trakcie",
    "completed": "Zrealizowana",
    "released": "Wydana",
    "cancelled": "Anulowana",
    "no_show": "Nieobecność",
    "change_requested": "Prośba o zmianę",
}

FIELD_ICONS: Dict[str, str] = {
    "service_ids": "🔧",
    "dates": "📅",
    "times": "⏱️",
    "station_id": "🏢",
    "price": "💰",
    "status": "📊",
    "customer_name": "👤",
    "vehicle_plate": "🚗",
    "car_size": "📏",
    "admin_notes": "📝",
    "offer_number": "📋",
    "change_request_note": "💬",
    "assigned_employee_ids": "👥",
}

DEFAULT_ICON = "•"
REMOVED_EMPLOYEE = "Usunięty"
EMPTY = "-"


class ReservationHistoryGrouper:
    """
    Groups change records by ``batch_id``.

    Batches come out in order of first appearance in the input, which the
    data source delivers sorted by ``created_at`` ascending. Nothing is
    re-sorted here, so interleaved batches keep their causal order.
    """

    def group(self, records: Iterable[ChangeRecord]) -> List[GroupedChange]:
        grouped: Dict[str, GroupedChange] = {}

        for record in records:
            batch = grouped.get(record.batch_id)
            if batch is None:
                batch = GroupedChange(
                    batch_id=record.batch_id,
                    changed_by_username=record.changed_by_username,
                    changed_by_type=record.changed_by_type,
                    created_at=record.created_at,
                    changes=[],
                )
                grouped[record.batch_id] = batch
            batch.changes.append(record)

        return list(grouped.values())


def group(records: Iterable[ChangeRecord]) -> List[GroupedChange]:
    """Group change records into edit batches."""
    return ReservationHistoryGrouper().group(records)


def _as_lookup(labels: Optional[LabelLookup]) -> Callable[[str], Optional[str]]:
    if labels is None:
        return lambda _id: None
    if callable(labels):
        return labels
    return labels.get


def _diff_ids(
    old_ids: Optional[Iterable[str]],
    new_ids: Optional[Iterable[str]],
    labels: Optional[LabelLookup],
    missing: Callable[[str], str],
) -> ServiceDiff:
    lookup = _as_lookup(labels)
    # dict.fromkeys keeps a set's membership semantics with a stable order
    old_set = dict.fromkeys(old_ids or [])
    new_set = dict.fromkeys(new_ids or [])

    added = [lookup(item) or missing(item) for item in new_set if item not in old_set]
    removed = [lookup(item) or missing(item) for item in old_set if item not in new_set]

    return ServiceDiff(added=added, removed=removed)


def diff_service_ids(
    old_ids: Optional[Iterable[str]],
    new_ids: Optional[Iterable[str]],
    label_lookup: Optional[LabelLookup] = None,
) -> ServiceDiff:
    """
    Compute which services were added and removed.

    Both lists are treated as sets. Ids are rendered through
    ``label_lookup`` (a callable or a mapping); unmapped ids are shown as-is.
    """
    return _diff_ids(old_ids, new_ids, label_lookup, missing=lambda item: item)


def diff_employee_ids(
    old_ids: Optional[Iterable[str]],
    new_ids: Optional[Iterable[str]],
    employees: Optional[LabelLookup] = None,
) -> ServiceDiff:
    """Like diff_service_ids, but unknown employees are shown as removed accounts."""
    return _diff_ids(old_ids, new_ids, employees, missing=lambda _item: REMOVED_EMPLOYEE)


def translate_status(code: Optional[str]) -> str:
    """Polish label of a reservation status; unknown codes pass through."""
    if not code:
        return EMPTY
    return STATUS_LABELS.get(code, code)


def field_icon(field_name: Optional[str]) -> str:
    return FIELD_ICONS.get(field_name or "", DEFAULT_ICON)


def short_time(value: Optional[str]) -> str:
    """``HH:MM:SS`` -> ``HH:MM``."""
    if not value:
        return EMPTY
    return value[:5]


def _or_empty(value: Any) -> str:
    return EMPTY if value is None or value == "" else str(value)


def _nested(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    return None


def _short_date(value: Optional[str]) -> str:
    if not value:
        return EMPTY
    return pendulum.parse(value).format("D MMM", locale="pl")


def describe_change(
    record: ChangeRecord,
    services: Optional[LabelLookup] = None,
    stations: Optional[LabelLookup] = None,
    employees: Optional[LabelLookup] = None,
) -> List[str]:
    """
    Render one field change as display lines.

    Most fields produce a single ``old → new`` line; list fields produce
    one line per non-empty side of the diff (possibly none).
    """
    icon = field_icon(record.field_name)
    old, new = record.old_value, record.new_value
    name = record.field_name

    if name in ("service_ids", "assigned_employee_ids"):
        if name == "service_ids":
            diff = diff_service_ids(old, new, services)
        else:
            diff = diff_employee_ids(old, new, employees)
        lines = []
        if diff.added:
            lines.append(f"{icon} Dodano: {', '.join(diff.added)}")
        if diff.removed:
            lines.append(f"{icon} Usunięto: {', '.join(diff.removed)}")
        return lines

    if name == "price":
        return [f"{icon} Cena: {_or_empty(old)} zł → {_or_empty(new)} zł"]

    if name == "status":
        return [f"{icon} Status: {translate_status(old)} → {translate_status(new)}"]

    if name == "station_id":
        lookup = _as_lookup(stations)
        old_label = lookup(old) if old else None
        new_label = lookup(new) if new else None
        return [f"{icon} Stanowisko: {old_label or EMPTY} → {new_label or EMPTY}"]

    if name == "times":
        old_range = f"{short_time(_nested(old, 'start_time'))}-{short_time(_nested(old, 'end_time'))}"
        new_range = f"{short_time(_nested(new, 'start_time'))}-{short_time(_nested(new, 'end_time'))}"
        return [f"{icon} Godzina: {old_range} → {new_range}"]

    if name == "dates":
        old_date = _short_date(_nested(old, "reservation_date"))
        new_date = _short_date(_nested(new, "reservation_date"))
        return [f"{icon} Termin: {old_date} → {new_date}"]

    if name == "change_request_note":
        return [f'"{new}"']

    if name == "customer_name":
        return [f"{icon} Klient: {old or EMPTY} → {new or EMPTY}"]

    if name == "vehicle_plate":
        return [f"{icon} Pojazd: {old or EMPTY} → {new or EMPTY}"]

    if name == "car_size":
        return [f"{icon} Rozmiar: {(old or EMPTY).upper()} → {(new or EMPTY).upper()}"]

    if name == "admin_notes":
        if not old and new:
            return [f"{icon} Dodano notatkę"]
        if old and not new:
            return [f"{icon} Usunięto notatkę"]
        return [f"{icon} Zmieniono notatkę"]

    if name == "offer_number":
        return [f"{icon} Oferta: #{old or EMPTY} → #{new or EMPTY}"]

    return [f"{icon} {name}: {json.dumps(old, ensure_ascii=False)} → {json.dumps(new, ensure_ascii=False)}"]


def format_group_header(group: GroupedChange, timezone: str = "Europe/Warsaw") -> str:
    """Author and local timestamp line shown above a batch."""
    author = group.changed_by_username
    if group.changed_by_type == "customer":
        author += " (klient)"
    when = pendulum.parse(group.created_at).in_timezone(timezone)
    return f"{author} • {when.format('D MMM, HH:mm', locale='pl')}"


def describe_created(
    group: GroupedChange,
    services: Optional[LabelLookup] = None,
    stations: Optional[LabelLookup] = None,
) -> List[str]:
    """
    Render the snapshot stored by a ``created`` batch.

    The first record's ``new_value`` holds the whole reservation as it was
    created. Returns no lines when there is no snapshot.
    """
    snapshot = group.changes[0].new_value if group.changes else None
    if not isinstance(snapshot, Mapping):
        return []

    lines = ["Rezerwacja utworzona"]

    reservation_date = snapshot.get("reservation_date")
    if reservation_date:
        line = f"{FIELD_ICONS['dates']} {pendulum.parse(reservation_date).format('D MMM YYYY', locale='pl')}"
        if snapshot.get("start_time") and snapshot.get("end_time"):
            line += f", {short_time(snapshot['start_time'])}-{short_time(snapshot['end_time'])}"
        lines.append(line)

    station_id = snapshot.get("station_id")
    station_name = _as_lookup(stations)(station_id) if station_id else None
    if station_name:
        lines.append(f"{FIELD_ICONS['station_id']} Stanowisko: {station_name}")

    service_lookup = _as_lookup(services)
    service_names = [service_lookup(item) or item for item in snapshot.get("service_ids") or []]
    if service_names:
        lines.append(f"{FIELD_ICONS['service_ids']} {', '.join(service_names)}")

    if snapshot.get("vehicle_plate"):
        line = f"{FIELD_ICONS['vehicle_plate']} {snapshot['vehicle_plate']}"
        if snapshot.get("car_size"):
            line += f" ({snapshot['car_size'].upper()})"
        lines.append(line)

    if snapshot.get("price") is not None:
        lines.append(f"{FIELD_ICONS['price']} {snapshot['price']} zł")
    if snapshot.get("admin_notes"):
        lines.append(f"{FIELD_ICONS['admin_notes']} {snapshot['admin_notes']}")
    if snapshot.get("offer_number"):
        lines.append(f"{FIELD_ICONS['offer_number']} #{snapshot['offer_number']}")

    return lines
