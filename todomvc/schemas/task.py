"""
TodoMVC — Pydantic Entry Schemas
==================================

What:  The task record shared by the server and the Python client.
How:   Plain pydantic models; `todomvc.codec` converts them to and from
       MessagePack, and the ORM model converts rows into `Entry`.
"""

import uuid
from typing import List

from pydantic import BaseModel, Field


class Entry(BaseModel):
    """
    A single to-do item.

    `editing` is a client-side edit-mode flag, persisted alongside the rest
    of the record.
    """
    id: uuid.UUID = Field(default=uuid.UUID(int=0), description="Task identifier (UUID)")
    content: str = Field(default="", description="Free-text task content")
    completed: bool = Field(default=False, description="Whether the task is done")
    editing: bool = Field(default=False, description="Whether the task is in edit mode")

    @classmethod
    def new(cls, content: str) -> "Entry":
        """Fresh entry with a random id, not completed and not being edited."""
        return cls(id=uuid.uuid4(), content=content)


Entries = List[Entry]


class TaskRequest(BaseModel):
    """Body of the create-task call."""
    content: str = Field(description="Content of the task to create")


class HealthResponse(BaseModel):
    """
    Health check response showing service and dependency status.

    status is `healthy` when the database answers `SELECT 1`, `unhealthy`
    otherwise.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
