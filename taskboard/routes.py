"""
HTTP routes for the task board API.
"""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from taskboard.config import Settings, get_settings
from taskboard.dependencies import get_task_store
from taskboard.schemas import (
    Column,
    CreateTaskRequest,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    Task,
    TasksResponse,
    UpdateTaskRequest,
)
from taskboard.store import StoreError, TaskStore

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _current_millis() -> int:
    return time.time_ns() // 1_000_000


def _generate_task_id() -> str:
    # Two creations in the same millisecond get the same id.
    return f"task-{_current_millis()}"


def _group_by_column(tasks: list[Task]) -> TasksResponse:
    grouped = TasksResponse()
    lanes = {
        Column.TODO: grouped.todo,
        Column.ACTIVE: grouped.active,
        Column.COMPLETED: grouped.completed,
    }
    for task in tasks:
        column = Column.parse(task.column)
        if column is None:
            continue
        lanes[column].append(task)
    return grouped


@health_router.get("/health", response_model=HealthResponse)
def health_check(settings: Settings = Depends(get_settings)):
    """Liveness only; storage is not consulted."""
    return HealthResponse(status="healthy", service=settings.service_name)


@router.get(
    "/tasks",
    response_model=TasksResponse,
    response_model_exclude_none=True,
    responses={500: _ERROR_RESPONSES[500]},
)
def list_tasks(store: TaskStore = Depends(get_task_store)):
    try:
        tasks = store.list_tasks()
    except StoreError:
        logger.exception("Error fetching tasks")
        return _error(500, "Failed to fetch tasks")
    return _group_by_column(tasks)


@router.post(
    "/tasks",
    response_model=Task,
    response_model_exclude_none=True,
    status_code=201,
    responses={400: _ERROR_RESPONSES[400], 500: _ERROR_RESPONSES[500]},
)
def create_task(
    payload: CreateTaskRequest, store: TaskStore = Depends(get_task_store)
):
    task = Task(
        taskId=_generate_task_id(),
        text=payload.text,
        column=Column.TODO.value,
    )
    try:
        store.insert_task(task)
    except StoreError:
        logger.exception("Error creating task")
        return _error(500, "Failed to create task")
    return task


@router.put(
    "/tasks/{task_id}",
    response_model=Task,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
def update_task(
    task_id: str,
    payload: UpdateTaskRequest,
    store: TaskStore = Depends(get_task_store),
):
    """
    Apply a partial update, then read the task back. The two steps are not
    atomic: a delete that lands in between yields a distinct not-found.
    """
    fields = payload.changed_fields()
    if not fields:
        return _error(400, "No fields to update")

    try:
        matched = store.update_task(task_id, fields)
    except StoreError:
        logger.exception("Error updating task %s", task_id)
        return _error(500, "Failed to update task")
    if not matched:
        return _error(404, "Task not found")

    try:
        task = store.get_task(task_id)
    except StoreError:
        logger.exception("Error fetching updated task %s", task_id)
        return _error(500, "Failed to fetch updated task")
    if task is None:
        return _error(404, "Task not found after update")
    return task


@router.delete(
    "/tasks/{task_id}",
    response_model=MessageResponse,
    responses={404: _ERROR_RESPONSES[404], 500: _ERROR_RESPONSES[500]},
)
def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    try:
        deleted = store.delete_task(task_id)
    except StoreError:
        logger.exception("Error deleting task %s", task_id)
        return _error(500, "Failed to delete task")
    if not deleted:
        return _error(404, "Task not found")
    return MessageResponse(message="Task deleted successfully")
