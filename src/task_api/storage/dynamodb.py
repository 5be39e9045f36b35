"""DynamoDB-backed task storage.

Beginner terms:
- Table resource: boto3's high-level handle for one DynamoDB table.
- GSI (global secondary index): alternate key used here to list tasks
  by (owner, status) in insertion order.
- LastEvaluatedKey: cursor DynamoDB returns when a query has more pages.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from uuid import UUID

import boto3
from boto3.dynamodb.conditions import Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from task_api.errors import InternalError, NotFoundError
from task_api.models import TASK_STATUS_CLOSED, TASK_STATUS_OPEN, Task, TaskStatus
from task_api.storage.records import (
    INDEX_PARTITION_KEY,
    INDEX_SORT_KEY,
    PARTITION_KEY,
    SORT_KEY,
    STATUS_INDEX_NAME,
    TaskRecord,
    primary_key,
    status_partition,
)

if TYPE_CHECKING:
    from task_api.config.settings import Settings

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (ClientError, BotoCoreError)


class DynamoTaskStore:
    """Persist tasks in one DynamoDB table with a status index."""

    def __init__(
        self,
        table: Any,
        *,
        index_name: str = STATUS_INDEX_NAME,
        page_size: int | None = None,
    ) -> None:
        self.table = table
        self.index_name = index_name
        self.page_size = page_size

    @classmethod
    def from_settings(cls, settings: Settings) -> DynamoTaskStore:
        """Build the boto3 table resource described by settings."""
        client_config = Config(
            connect_timeout=settings.dynamodb_connect_timeout_s,
            read_timeout=settings.dynamodb_read_timeout_s,
        )
        resource = boto3.resource(
            "dynamodb",
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url or None,
            config=client_config,
        )
        table = resource.Table(settings.resolved_table_name())
        return cls(table, page_size=settings.query_page_size)

    def migrate(self) -> None:
        """Create the table and its status index if they do not exist yet."""
        client = self.table.meta.client
        try:
            client.describe_table(TableName=self.table.name)
            return
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                raise InternalError(f"failed to describe table: {exc}") from exc

        logger.info("task_store event=create_table table=%s", self.table.name)
        try:
            client.create_table(
                TableName=self.table.name,
                BillingMode="PAY_PER_REQUEST",
                AttributeDefinitions=[
                    {"AttributeName": name, "AttributeType": "S"}
                    for name in (PARTITION_KEY, SORT_KEY, INDEX_PARTITION_KEY, INDEX_SORT_KEY)
                ],
                KeySchema=[
                    {"AttributeName": PARTITION_KEY, "KeyType": "HASH"},
                    {"AttributeName": SORT_KEY, "KeyType": "RANGE"},
                ],
                GlobalSecondaryIndexes=[
                    {
                        "IndexName": self.index_name,
                        "KeySchema": [
                            {"AttributeName": INDEX_PARTITION_KEY, "KeyType": "HASH"},
                            {"AttributeName": INDEX_SORT_KEY, "KeyType": "RANGE"},
                        ],
                        "Projection": {"ProjectionType": "ALL"},
                    }
                ],
            )
            client.get_waiter("table_exists").wait(TableName=self.table.name)
        except _BACKEND_ERRORS as exc:
            raise InternalError(f"failed to create table: {exc}") from exc

    def add(self, task: Task) -> None:
        item = TaskRecord.from_task(task).to_item()
        try:
            self.table.put_item(Item=item)
        except _BACKEND_ERRORS as exc:
            logger.warning(
                "task_store op=add owner=%s task_id=%s error=%s", task.owner, task.id, exc
            )
            raise InternalError(f"failed to put task in DynamoDB: {exc}") from exc

    def get_by_id(self, task_id: UUID, owner: str) -> Task:
        try:
            result = self.table.get_item(Key=primary_key(owner, task_id))
        except _BACKEND_ERRORS as exc:
            logger.warning("task_store op=get owner=%s task_id=%s error=%s", owner, task_id, exc)
            raise InternalError(f"failed to get task from DynamoDB: {exc}") from exc

        item = result.get("Item")
        if item is None:
            raise NotFoundError("task not found")
        return TaskRecord.from_item(item).to_task()

    def list_by_status(self, owner: str, status: TaskStatus) -> list[Task]:
        """Query one status partition, following cursors until exhausted.

        A failure on any page aborts the whole listing; callers never see a
        partial result.
        """
        query_args: dict[str, Any] = {
            "IndexName": self.index_name,
            "KeyConditionExpression": Key(INDEX_PARTITION_KEY).eq(status_partition(owner, status)),
            "ScanIndexForward": True,
        }
        if self.page_size is not None:
            query_args["Limit"] = self.page_size

        tasks: list[Task] = []
        start_key: dict[str, Any] | None = None
        pages = 0
        while True:
            if start_key:
                query_args["ExclusiveStartKey"] = start_key
            try:
                page = self.table.query(**query_args)
            except _BACKEND_ERRORS as exc:
                logger.warning(
                    "task_store op=list owner=%s status=%s page=%s error=%s",
                    owner,
                    status,
                    pages,
                    exc,
                )
                raise InternalError(f"failed to query tasks: {exc}") from exc
            pages += 1

            for item in page.get("Items", []):
                tasks.append(TaskRecord.from_item(item).to_task())

            start_key = page.get("LastEvaluatedKey")
            if not start_key:
                break

        logger.debug(
            "task_store op=list owner=%s status=%s pages=%s total=%s",
            owner,
            status,
            pages,
            len(tasks),
        )
        return tasks

    def list_open(self, owner: str) -> list[Task]:
        return self.list_by_status(owner, TASK_STATUS_OPEN)

    def list_closed(self, owner: str) -> list[Task]:
        return self.list_by_status(owner, TASK_STATUS_CLOSED)
