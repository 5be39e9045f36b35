"""Storage interface for task persistence."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from task_api.models import Task, TaskStatus


class TaskStore(Protocol):
    def migrate(self) -> None: ...

    def add(self, task: Task) -> None: ...

    def get_by_id(self, task_id: UUID, owner: str) -> Task: ...

    def list_by_status(self, owner: str, status: TaskStatus) -> list[Task]: ...

    def list_open(self, owner: str) -> list[Task]: ...

    def list_closed(self, owner: str) -> list[Task]: ...
