"""In-memory storage backend for tests and local development."""

from __future__ import annotations

from uuid import UUID

from task_api.errors import NotFoundError
from task_api.models import TASK_STATUS_CLOSED, TASK_STATUS_OPEN, Task, TaskStatus
from task_api.storage.records import TaskRecord, primary_key, status_partition


class InMemoryTaskStore:
    """Keeps records under the same key schema the DynamoDB table uses."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], TaskRecord] = {}

    def migrate(self) -> None:
        return None

    def add(self, task: Task) -> None:
        record = TaskRecord.from_task(task)
        slot = (record.PK, record.SK)
        # Drop first so an upsert lands at the end, like a fresh GS1SK would.
        self._records.pop(slot, None)
        self._records[slot] = record

    def get_by_id(self, task_id: UUID, owner: str) -> Task:
        key = primary_key(owner, task_id)
        record = self._records.get((key["PK"], key["SK"]))
        if record is None:
            raise NotFoundError("task not found")
        return record.to_task()

    def list_by_status(self, owner: str, status: TaskStatus) -> list[Task]:
        partition = status_partition(owner, status)
        matching = [record for record in self._records.values() if record.GS1PK == partition]
        return [record.to_task() for record in sorted(matching, key=lambda item: item.GS1SK)]

    def list_open(self, owner: str) -> list[Task]:
        return self.list_by_status(owner, TASK_STATUS_OPEN)

    def list_closed(self, owner: str) -> list[Task]:
        return self.list_by_status(owner, TASK_STATUS_CLOSED)
