"""Mapping between a Task and its single-table storage record.

Key schema:
- Primary key: PK = "#<owner>", SK = "#<task id>".
- Secondary index GS1: GS1PK = "#<owner>#<status>", GS1SK = "#<write time>".

GS1SK is stamped when the record is written, so listing a status partition
returns tasks in insertion order. Rewriting a task gives it a fresh GS1SK.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from task_api.errors import DecodeError
from task_api.models import Task, TaskStatus

KEY_PREFIX = "#"
PARTITION_KEY = "PK"
SORT_KEY = "SK"
INDEX_PARTITION_KEY = "GS1PK"
INDEX_SORT_KEY = "GS1SK"
STATUS_INDEX_NAME = "GS1"

# Fixed width so lexicographic order matches chronological order.
SORT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def primary_key(owner: str, task_id: UUID | str) -> dict[str, str]:
    return {
        PARTITION_KEY: f"{KEY_PREFIX}{owner}",
        SORT_KEY: f"{KEY_PREFIX}{task_id}",
    }


def status_partition(owner: str, status: TaskStatus | str) -> str:
    return f"{KEY_PREFIX}{owner}{KEY_PREFIX}{status}"


def sort_timestamp(now: datetime | None = None) -> str:
    moment = now or datetime.now(tz=UTC)
    return moment.astimezone(UTC).strftime(SORT_TIMESTAMP_FORMAT)


def parse_sort_timestamp(value: str) -> datetime:
    """Recover the write time from a GS1SK value (with or without the prefix)."""
    raw = value[len(KEY_PREFIX) :] if value.startswith(KEY_PREFIX) else value
    return datetime.strptime(raw, SORT_TIMESTAMP_FORMAT).replace(tzinfo=UTC)


class TaskRecord(BaseModel):
    """One stored item: key attributes plus the task fields."""

    PK: str
    SK: str
    GS1PK: str
    GS1SK: str
    id: str
    title: str
    owner: str
    status: str

    @classmethod
    def from_task(cls, task: Task, *, written_at: datetime | None = None) -> TaskRecord:
        key = primary_key(task.owner, task.id)
        return cls(
            PK=key[PARTITION_KEY],
            SK=key[SORT_KEY],
            GS1PK=status_partition(task.owner, task.status),
            GS1SK=f"{KEY_PREFIX}{sort_timestamp(written_at)}",
            id=str(task.id),
            title=task.title,
            owner=task.owner,
            status=task.status,
        )

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> TaskRecord:
        """Validate a raw backend item; raises DecodeError on bad shape."""
        try:
            return cls.model_validate(item)
        except PydanticValidationError as exc:
            raise DecodeError(f"Malformed task record: {exc}") from exc

    def to_item(self) -> dict[str, str]:
        return self.model_dump()

    def to_task(self) -> Task:
        try:
            task_id = UUID(self.id)
        except ValueError as exc:
            raise DecodeError(f"Stored task id is not a UUID: {self.id!r}") from exc
        try:
            return Task(id=task_id, title=self.title, status=self.status, owner=self.owner)
        except PydanticValidationError as exc:
            raise DecodeError(f"Stored task {self.id} is invalid: {exc}") from exc
