from __future__ import annotations

import uuid

import pytest

from task_api.errors import DecodeError, NotFoundError
from task_api.models import Task, new_task
from task_api.storage.memory import InMemoryTaskStore
from task_api.storage.records import TaskRecord

OWNER = "test@example.com"


def test_add_then_get_by_id(store: InMemoryTaskStore) -> None:
    task = new_task("Test Task", OWNER)
    store.add(task)

    assert store.get_by_id(task.id, OWNER) == task


def test_get_by_id_missing(store: InMemoryTaskStore) -> None:
    with pytest.raises(NotFoundError):
        store.get_by_id(uuid.uuid4(), OWNER)


def test_get_by_id_is_scoped_to_owner(store: InMemoryTaskStore) -> None:
    task = new_task("Test Task", OWNER)
    store.add(task)

    with pytest.raises(NotFoundError):
        store.get_by_id(task.id, "other@example.com")


def test_list_open_and_closed(store: InMemoryTaskStore) -> None:
    open_task = new_task("Open Task", OWNER)
    closed_task = Task(id=uuid.uuid4(), title="Closed Task", status="CLOSED", owner=OWNER)
    store.add(open_task)
    store.add(closed_task)

    assert store.list_open(OWNER) == [open_task]
    assert store.list_closed(OWNER) == [closed_task]
    assert store.list_by_status(OWNER, "CLOSED") == [closed_task]


def test_list_unknown_owner_is_empty(store: InMemoryTaskStore) -> None:
    assert store.list_open("nobody") == []


def test_upsert_replaces_and_moves_to_end(store: InMemoryTaskStore) -> None:
    first = new_task("first", OWNER)
    second = new_task("second", OWNER)
    store.add(first)
    store.add(second)

    renamed = first.model_copy(update={"title": "first again"})
    store.add(renamed)

    assert store.list_open(OWNER) == [second, renamed]
    assert store.get_by_id(first.id, OWNER).title == "first again"


def test_corrupt_record_raises_decode_error(store: InMemoryTaskStore) -> None:
    task = new_task("Test Task", OWNER)
    store.add(task)
    record = TaskRecord.from_task(task)
    store._records[(record.PK, record.SK)] = record.model_copy(update={"id": "not-a-uuid"})

    with pytest.raises(DecodeError):
        store.get_by_id(task.id, OWNER)
