"""
TodoMVC — Custom Exception Hierarchy
======================================

What:  Application-specific exceptions for the persistence and API layers.
How:   Each exception carries a human-readable message and an optional context
       dict. Global exception handlers (registered in main.py) map them to an
       HTTP status and return the message as plain text.
Who:   Raised by the task service and the wire codec; caught by handlers.

Exception Hierarchy:
    TodoMVCError (base)
    ├── ValidationError              → 400 Bad Request
    │   └── PayloadError             → 400 (undecodable MessagePack body)
    ├── UnsupportedMediaTypeError    → 415 Unsupported Media Type
    ├── NotFoundError                → 404 Not Found
    │   ├── TaskNotFoundError        → 404 (no row for the id)
    │   └── TableEmptyError          → 404 (delete against an empty table)
    └── DatabaseError                → 500 Internal Server Error
        └── AmbiguousIdError         → 500 (several rows share one id)
"""

from typing import Any, Dict, Optional
from uuid import UUID


class TodoMVCError(Exception):
    """
    Base exception for all TodoMVC application errors.

    Attributes:
        message:  Human-readable description, returned in the response body
        context:  Additional debug info (logged, never returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TodoMVCError):
    """
    Raised when client input fails validation.

    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class PayloadError(ValidationError):
    """A request or response body could not be decoded as the expected MessagePack shape."""

    def __init__(self, message: str = "Malformed MessagePack payload", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, field="body", context=context)


class UnsupportedMediaTypeError(TodoMVCError):
    """
    Raised when a request body is not `application/msgpack`.

    HTTP: 415 Unsupported Media Type
    """

    def __init__(self, content_type: Optional[str] = None, expected: str = "application/msgpack"):
        got = content_type or "none"
        super().__init__(
            message=f"Unsupported content type '{got}'; expected '{expected}'",
            context={"content_type": got, "expected": expected},
        )


class NotFoundError(TodoMVCError):
    """
    Raised when a requested resource does not exist, or could not be looked up.

    HTTP: 404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class TaskNotFoundError(NotFoundError):
    """No task row matches the id."""

    def __init__(self, task_id: UUID):
        super().__init__(resource="task", resource_id=str(task_id))
        self.task_id = task_id


class TableEmptyError(NotFoundError):
    """A delete was attempted while the task table holds no rows at all."""

    def __init__(self, task_id: Optional[UUID] = None):
        super().__init__(
            resource="task",
            resource_id=str(task_id) if task_id else None,
            message="Task table is empty!",
        )
        self.task_id = task_id


class DatabaseError(TodoMVCError):
    """
    Raised when a database operation fails.

    HTTP: 500 Internal Server Error. Driver details stay in `context`.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AmbiguousIdError(DatabaseError):
    """
    More than one row was returned for a single id.

    Only reachable if the primary key constraint has been bypassed.
    """

    def __init__(self, task_id: UUID, count: int):
        super().__init__(
            message=(
                f"Task ids are UUIDs, but {count} tasks were returned "
                f"when querying id: {task_id}"
            ),
            context={"task_id": str(task_id), "count": count},
        )
        self.task_id = task_id
        self.count = count
