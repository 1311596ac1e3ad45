"""
Shared fixtures for washbook tests.
"""

from typing import Any

import pytest

from washbook.domain.models import ChangeRecord


def make_change(
    id: str = "c1",
    batch_id: str = "b1",
    field_name: str | None = "status",
    old_value: Any = None,
    new_value: Any = None,
    created_at: str = "2024-11-25T09:30:00+00:00",
    change_type: str = "updated",
    changed_by_username: str = "admin",
    changed_by_type: str = "admin",
    reservation_id: str = "r1",
) -> ChangeRecord:
    return ChangeRecord(
        id=id,
        reservation_id=reservation_id,
        change_type=change_type,
        field_name=field_name,
        old_value=old_value,
        new_value=new_value,
        batch_id=batch_id,
        changed_by_username=changed_by_username,
        changed_by_type=changed_by_type,
        created_at=created_at,
    )


@pytest.fixture
def change_factory():
    return make_change
