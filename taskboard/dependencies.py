"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from taskboard.config import get_settings
from taskboard.store import InMemoryTaskStore, MongoTaskStore, TaskStore

_task_store: TaskStore | None = None


def get_task_store() -> TaskStore:
    """
    Return the process-wide task store so every request shares one
    database connection pool.
    """
    global _task_store
    if _task_store is not None:
        return _task_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _task_store = InMemoryTaskStore()
    else:
        _task_store = MongoTaskStore(
            settings.mongodb_uri,
            settings.database_name,
            settings.tasks_collection,
        )
    return _task_store


def reset_task_store() -> None:
    """Drop the cached store so the next call rebuilds it from settings."""
    global _task_store
    _task_store = None
