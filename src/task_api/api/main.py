"""FastAPI app entrypoint for the task API.

Routes:
- GET  /health/           liveness probe
- GET  /tasks/            list an owner's tasks by status
- POST /tasks/            create a task
- GET  /tasks/{task_id}   fetch one task scoped to an owner
- GET  /tasks/{task_id}/...  same as above; segments after the id are ignored

Every response, errors included, is JSON. Errors carry ``{"message": ...}``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_api.config.settings import Settings, get_settings
from task_api.errors import (
    InternalError,
    MethodNotAllowed,
    NotFoundError,
    RouteNotFound,
    TaskApiError,
    ValidationError,
)
from task_api.models import CreateTaskRequest, ErrorResponse, Task, new_task, normalize_status
from task_api.storage.base import TaskStore
from task_api.storage.dynamodb import DynamoTaskStore
from task_api.storage.memory import InMemoryTaskStore

logger = logging.getLogger(__name__)

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def build_storage(settings: Settings) -> TaskStore:
    """Pick the storage backend named in settings."""
    if settings.storage_backend == "memory":
        store: TaskStore = InMemoryTaskStore()
    else:
        store = DynamoTaskStore.from_settings(settings)
    if settings.auto_create_table:
        store.migrate()
    logger.info(
        "task_store event=ready backend=%s table=%s",
        settings.storage_backend,
        settings.resolved_table_name(),
    )
    return store


def _ensure_runtime_state(
    app: FastAPI,
    *,
    settings: Settings,
    storage_override: TaskStore | None,
) -> None:
    if not hasattr(app.state, "storage"):
        app.state.storage = storage_override or build_storage(settings)

    if not hasattr(app.state, "settings"):
        app.state.settings = settings


def _error_response(error: TaskApiError, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(message=error.message).model_dump(),
        headers=headers,
    )


def _routing_error(exc: StarletteHTTPException) -> TaskApiError:
    message = str(exc.detail)
    if exc.status_code == 404:
        return RouteNotFound(message)
    if exc.status_code == 405:
        return MethodNotAllowed(message)
    return TaskApiError(message, status_code=exc.status_code)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskApiError)
    async def task_api_error(_: Request, exc: TaskApiError) -> JSONResponse:
        return _error_response(exc)

    # Starlette raises these for unmatched paths (404) and wrong methods (405).
    @app.exception_handler(StarletteHTTPException)
    async def http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(_routing_error(exc), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
            for error in exc.errors()
        )
        return _error_response(ValidationError(f"Invalid request body: {details}"))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "task_api event=unhandled_error method=%s path=%s",
            request.method,
            request.url.path,
        )
        return _error_response(InternalError("Internal Server Error"))


def create_app(
    *,
    storage: TaskStore | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()
    logging.getLogger("task_api").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _ensure_runtime_state(app, settings=settings, storage_override=storage)
        yield

    app_lifespan = lifespan if storage is None else None
    # Paths match exactly; no slash redirects.
    app = FastAPI(title=settings.app_name, lifespan=app_lifespan, redirect_slashes=False)
    _register_error_handlers(app)

    # Keep test paths reliable when lifespan is not executed by the client.
    if storage is not None:
        _ensure_runtime_state(app, settings=settings, storage_override=storage)

    def _get_task_storage(request: Request) -> TaskStore:
        if not hasattr(request.app.state, "storage"):
            _ensure_runtime_state(request.app, settings=settings, storage_override=storage)
        return request.app.state.storage

    @app.get("/health/")
    def health() -> dict[str, str]:
        return {"message": "OK"}

    @app.get("/tasks/", response_model=list[Task], responses=_ERROR_RESPONSES)
    def list_tasks(
        request: Request,
        owner: str | None = None,
        status: str | None = None,
    ) -> list[Task]:
        if not owner:
            raise ValidationError("Owner is required")
        task_status = normalize_status(status)

        task_storage = _get_task_storage(request)
        try:
            tasks = task_storage.list_by_status(owner, task_status)
        except TaskApiError as exc:
            raise InternalError(f"Failed to list tasks: {exc.message}") from exc

        logger.info(
            "task_api event=list owner=%s status=%s total=%s", owner, task_status, len(tasks)
        )
        return tasks

    @app.post("/tasks/", response_model=Task, status_code=201, responses=_ERROR_RESPONSES)
    def create_task(payload: CreateTaskRequest, request: Request) -> Task:
        if not payload.title:
            raise ValidationError("Title is required")
        if not payload.owner:
            raise ValidationError("Owner is required")

        task = new_task(payload.title, payload.owner)
        task_storage = _get_task_storage(request)
        try:
            task_storage.add(task)
        except TaskApiError as exc:
            raise InternalError(f"Failed to create task: {exc.message}") from exc

        logger.info("task_api event=create owner=%s task_id=%s", task.owner, task.id)
        return task

    @app.get("/tasks/{task_id}", response_model=Task, responses=_ERROR_RESPONSES)
    def get_task(task_id: str, request: Request, owner: str | None = None) -> Task:
        try:
            parsed_id = UUID(task_id)
        except ValueError as exc:
            raise ValidationError(f"Invalid task ID: {exc}") from exc
        if not owner:
            raise ValidationError("Owner is required")

        task_storage = _get_task_storage(request)
        try:
            return task_storage.get_by_id(parsed_id, owner)
        except NotFoundError as exc:
            raise NotFoundError(f"Task not found: {exc.message}") from exc

    # Anything after the id segment is ignored: /tasks/<id>/ and /tasks/<id>/x both address <id>.
    @app.get("/tasks/{task_id}/{trailing:path}", response_model=Task, responses=_ERROR_RESPONSES)
    def get_task_with_trailing_path(
        task_id: str, trailing: str, request: Request, owner: str | None = None
    ) -> Task:
        _ = trailing
        return get_task(task_id, request, owner)

    return app


# Module-level app for `uvicorn task_api.api.main:app`.
app = create_app()
