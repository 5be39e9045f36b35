"""Pydantic models for the task entity and the HTTP payloads.

Terms used in this file:
- Owner: tenant identifier that scopes every task operation.
- Status: OPEN on creation; CLOSED is listable but nothing sets it yet.
"""

from __future__ import annotations

from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

TaskStatus = Literal["OPEN", "CLOSED"]

TASK_STATUS_OPEN: TaskStatus = "OPEN"
TASK_STATUS_CLOSED: TaskStatus = "CLOSED"


class Task(BaseModel):
    """Canonical task shape returned by the API and the stores."""

    id: UUID
    title: str = Field(min_length=1)
    status: TaskStatus = TASK_STATUS_OPEN
    owner: str = Field(min_length=1)


class CreateTaskRequest(BaseModel):
    """Request body for POST /tasks/."""

    # Emptiness is checked by the route so callers get a field-specific message.
    title: str = ""
    owner: str = ""


class ErrorResponse(BaseModel):
    message: str


def new_task(title: str, owner: str, task_id: UUID | None = None) -> Task:
    """Build a freshly created task; new tasks always start OPEN."""
    return Task(
        id=task_id or uuid4(),
        title=title,
        status=TASK_STATUS_OPEN,
        owner=owner,
    )


def normalize_status(raw: str | None) -> TaskStatus:
    """Map a ``status`` query value to a listable status (default OPEN)."""
    if raw == TASK_STATUS_CLOSED:
        return TASK_STATUS_CLOSED
    return TASK_STATUS_OPEN
