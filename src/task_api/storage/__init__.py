"""Storage backends and the task record key schema."""

from task_api.storage.base import TaskStore
from task_api.storage.dynamodb import DynamoTaskStore
from task_api.storage.memory import InMemoryTaskStore
from task_api.storage.records import TaskRecord

__all__ = [
    "DynamoTaskStore",
    "InMemoryTaskStore",
    "TaskRecord",
    "TaskStore",
]
