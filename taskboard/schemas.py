"""
Pydantic schemas for the task board API and the stored task documents.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Column(str, Enum):
    """Board lanes that the grouped listing knows about."""

    TODO = "todo"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str) -> Optional["Column"]:
        """Return the matching lane, or None for a value outside the board."""
        try:
            return cls(value)
        except ValueError:
            return None


class Task(BaseModel):
    """A task card as stored in the document database and sent to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    taskId: str
    text: str
    column: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Optional[str]:
        # ObjectId from the driver, plain string from the in-memory store.
        if value is None:
            return None
        return str(value)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class CreateTaskRequest(BaseModel):
    text: str


class UpdateTaskRequest(BaseModel):
    text: Optional[str] = None
    column: Optional[str] = None

    def changed_fields(self) -> dict:
        """Fields the client actually supplied; null counts as absent."""
        return self.model_dump(exclude_none=True)


class TasksResponse(BaseModel):
    todo: list[Task] = Field(default_factory=list)
    active: list[Task] = Field(default_factory=list)
    completed: list[Task] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
