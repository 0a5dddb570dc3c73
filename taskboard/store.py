"""
Task storage for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Protocol

from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from taskboard.schemas import Task

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the document store cannot complete an operation."""


class TaskStore(Protocol):
    """Interface for task persistence."""

    def list_tasks(self) -> list[Task]:
        ...

    def insert_task(self, task: Task) -> None:
        ...

    def update_task(self, task_id: str, fields: dict) -> bool:
        ...

    def get_task(self, task_id: str) -> Optional[Task]:
        ...

    def delete_task(self, task_id: str) -> bool:
        ...

    def ping(self) -> None:
        ...


def task_filter(task_id: str) -> dict:
    return {"taskId": task_id}


def set_update(fields: dict) -> dict:
    return {"$set": dict(fields)}


def decode_tasks(documents: Iterable[dict]) -> list[Task]:
    """
    Decode raw documents in scan order, skipping any that do not form a task.
    """
    tasks: list[Task] = []
    for document in documents:
        try:
            tasks.append(Task.model_validate(document))
        except ValidationError as exc:
            logger.warning(
                "Error reading task %s: %s", document.get("_id"), exc
            )
    return tasks


def _decode_one(document: dict) -> Task:
    try:
        return Task.model_validate(document)
    except ValidationError as exc:
        raise StoreError(f"Stored task {document.get('_id')} is malformed") from exc


class InMemoryTaskStore:
    """Simple in-memory task collection for development and tests."""

    def __init__(self):
        self.documents: list[dict] = []
        self._lock = threading.Lock()

    def insert_document(self, document: dict) -> dict:
        """Store a raw document as-is, assigning an _id like the database would."""
        stored = dict(document)
        stored.setdefault("_id", uuid.uuid4().hex[:24])
        with self._lock:
            self.documents.append(stored)
        return stored

    def list_tasks(self) -> list[Task]:
        with self._lock:
            snapshot = [dict(document) for document in self.documents]
        return decode_tasks(snapshot)

    def insert_task(self, task: Task) -> None:
        self.insert_document(task.to_document())

    def update_task(self, task_id: str, fields: dict) -> bool:
        with self._lock:
            for document in self.documents:
                if document.get("taskId") == task_id:
                    document.update(fields)
                    return True
        return False

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            found = next(
                (dict(d) for d in self.documents if d.get("taskId") == task_id),
                None,
            )
        if found is None:
            return None
        return _decode_one(found)

    def delete_task(self, task_id: str) -> bool:
        with self._lock:
            for index, document in enumerate(self.documents):
                if document.get("taskId") == task_id:
                    del self.documents[index]
                    return True
        return False

    def ping(self) -> None:
        return None

    def reset(self) -> None:
        """Clear all stored documents (useful in tests)."""
        with self._lock:
            self.documents.clear()


@contextmanager
def _driver_errors(action: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        raise StoreError(f"Failed to {action}") from exc


class MongoTaskStore:
    """
    pymongo-backed implementation. The client keeps its own thread-safe
    connection pool, so one instance is shared by every request.
    """

    def __init__(
        self,
        mongodb_uri: str,
        database_name: str,
        collection_name: str = "tasks",
        client: Optional[MongoClient] = None,
    ):
        if not mongodb_uri:
            raise ValueError("MONGODB_URI is required for MongoTaskStore")
        with _driver_errors("create MongoDB client"):
            self.client = client if client is not None else MongoClient(mongodb_uri)
        self.collection = self.client[database_name][collection_name]

    def ping(self) -> None:
        with _driver_errors("reach MongoDB"):
            self.client.admin.command("ping")

    def list_tasks(self) -> list[Task]:
        # Drain the cursor inside the guard so a mid-scan failure returns nothing.
        with _driver_errors("fetch tasks"):
            documents = list(self.collection.find({}))
        return decode_tasks(documents)

    def insert_task(self, task: Task) -> None:
        with _driver_errors("insert task"):
            self.collection.insert_one(task.to_document())

    def update_task(self, task_id: str, fields: dict) -> bool:
        with _driver_errors("update task"):
            result = self.collection.update_one(
                task_filter(task_id), set_update(fields)
            )
        return result.matched_count > 0

    def get_task(self, task_id: str) -> Optional[Task]:
        with _driver_errors("fetch task"):
            document = self.collection.find_one(task_filter(task_id))
        if document is None:
            return None
        return _decode_one(document)

    def delete_task(self, task_id: str) -> bool:
        with _driver_errors("delete task"):
            result = self.collection.delete_one(task_filter(task_id))
        return result.deleted_count > 0
