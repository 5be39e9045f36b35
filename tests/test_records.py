from __future__ import annotations

import uuid
from datetime import UTC, datetime

import pytest

from task_api.errors import DecodeError
from task_api.models import Task, new_task
from task_api.storage.records import (
    TaskRecord,
    parse_sort_timestamp,
    primary_key,
    sort_timestamp,
    status_partition,
)


def test_record_key_schema() -> None:
    task = new_task("Test Task", "test@example.com")
    written_at = datetime(2023, 1, 1, 12, 30, 5, 123456, tzinfo=UTC)

    record = TaskRecord.from_task(task, written_at=written_at)

    assert record.PK == "#test@example.com"
    assert record.SK == f"#{task.id}"
    assert record.GS1PK == "#test@example.com#OPEN"
    assert record.GS1SK == "#2023-01-01T12:30:05.123456Z"
    assert record.id == str(task.id)
    assert record.title == "Test Task"
    assert record.owner == "test@example.com"
    assert record.status == "OPEN"


def test_helpers_agree_with_record() -> None:
    task = Task(id=uuid.uuid4(), title="Closed", status="CLOSED", owner="ops")
    record = TaskRecord.from_task(task)

    assert primary_key("ops", task.id) == {"PK": record.PK, "SK": record.SK}
    assert status_partition("ops", "CLOSED") == record.GS1PK


def test_sort_timestamps_order_chronologically() -> None:
    earlier = datetime(2024, 5, 1, 9, 59, 59, 999999, tzinfo=UTC)
    later = datetime(2024, 5, 1, 10, 0, 0, 1, tzinfo=UTC)
    assert sort_timestamp(earlier) < sort_timestamp(later)


@pytest.mark.parametrize("status", ["OPEN", "CLOSED"])
def test_record_round_trip(status: str) -> None:
    task = Task(id=uuid.uuid4(), title="Write report", status=status, owner="a@x.com")
    record = TaskRecord.from_task(task)

    decoded = record.to_task()
    assert decoded == task
    assert TaskRecord.from_task(decoded, written_at=parse_sort_timestamp(record.GS1SK)) == record


def test_item_round_trip() -> None:
    record = TaskRecord.from_task(new_task("Item", "owner"))
    assert TaskRecord.from_item(record.to_item()) == record


def test_to_task_rejects_non_uuid_id() -> None:
    record = TaskRecord(
        PK="#test@example.com",
        SK="#abc",
        GS1PK="#test@example.com#OPEN",
        GS1SK="#2023-01-01T00:00:00.000000Z",
        id="abc",
        title="Broken",
        owner="test@example.com",
        status="OPEN",
    )
    with pytest.raises(DecodeError, match="not a UUID"):
        record.to_task()


def test_to_task_rejects_unknown_status() -> None:
    record = TaskRecord.from_task(new_task("Odd", "owner")).model_copy(update={"status": "DONE"})
    with pytest.raises(DecodeError):
        record.to_task()


def test_from_item_rejects_missing_attributes() -> None:
    with pytest.raises(DecodeError, match="Malformed task record"):
        TaskRecord.from_item({"PK": "#owner", "SK": "#id"})
