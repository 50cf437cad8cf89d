"""
TodoMVC — Task Route Handlers
===============================

What:  The six task endpoints, one persistence operation each.
How:   Decode the MessagePack body, delegate to TaskService, encode the
       result. Error statuses come from the global exception handlers.

Endpoints:
    POST   /task        TaskRequest      → Entry              (500 on failure)
    GET    /tasks                        → [Entry]            (500 on failure)
    GET    /task?id=                     → Entry | nil        (404 on failure)
    PUT    /task?id=    Entry            → "Acknowledged"     (404 on failure)
    POST   /tasks       [Entry]          → "Acknowledged"     (500 on failure)
    DELETE /task?id=                     → "Acknowledged"     (404 on failure)
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from todomvc import codec
from todomvc.database import get_db_session
from todomvc.exceptions import NotFoundError, TodoMVCError, UnsupportedMediaTypeError
from todomvc.responses import MsgPackResponse
from todomvc.services.task_service import task_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tasks"])

ACKNOWLEDGED = "Acknowledged"

_MSGPACK_BODY = {
    "requestBody": {
        "required": True,
        "content": {codec.MSGPACK_MEDIA_TYPE: {"schema": {"type": "string", "format": "binary"}}},
    }
}


async def read_msgpack_body(request: Request) -> Any:
    """Dependency: the request body decoded from MessagePack."""
    content_type = request.headers.get("content-type")
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type != codec.MSGPACK_MEDIA_TYPE:
        raise UnsupportedMediaTypeError(content_type)
    return codec.decode(await request.body())


@contextmanager
def _not_found_on_failure(task_id: UUID) -> Iterator[None]:
    """Report any persistence failure of a single-task call as 404."""
    try:
        yield
    except NotFoundError:
        raise
    except TodoMVCError as e:
        raise NotFoundError(
            resource="task",
            resource_id=str(task_id),
            message=e.message,
            context=e.context,
        ) from e


@router.post(
    "/task",
    response_class=MsgPackResponse,
    summary="Create a task",
    openapi_extra=_MSGPACK_BODY,
)
async def create_task(
    body: Any = Depends(read_msgpack_body),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> MsgPackResponse:
    """Create a task from `{content}` and return the stored entry."""
    task_request = codec.task_request_from_wire(body)
    entry = await task_service.create(db, task_request.content)
    return MsgPackResponse(codec.entry_to_wire(entry))


@router.get("/tasks", response_class=MsgPackResponse, summary="List all tasks")
async def get_tasks(
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> MsgPackResponse:
    entries = await task_service.list_tasks(db)
    return MsgPackResponse([codec.entry_to_wire(e) for e in entries])


@router.post(
    "/tasks",
    response_class=PlainTextResponse,
    summary="Upsert a list of tasks",
    openapi_extra=_MSGPACK_BODY,
)
async def update_all_tasks(
    body: Any = Depends(read_msgpack_body),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> PlainTextResponse:
    """Update every entry that exists and insert the others."""
    entries = codec.entries_from_wire(body)
    await task_service.update_all(db, entries)
    return PlainTextResponse(ACKNOWLEDGED)


@router.get("/task", response_class=MsgPackResponse, summary="Get a single task")
async def get_task(
    task_id: UUID = Query(alias="id", description="Task id"),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> MsgPackResponse:
    """
    Return the entry, or MessagePack nil when no task has the id.

    Absence is a successful answer; only a failed lookup yields 404.
    """
    with _not_found_on_failure(task_id):
        entry = await task_service.get_by_id(db, task_id)
    return MsgPackResponse(None if entry is None else codec.entry_to_wire(entry))


@router.put(
    "/task",
    response_class=PlainTextResponse,
    summary="Replace a task",
    openapi_extra=_MSGPACK_BODY,
)
async def update_task(
    task_id: UUID = Query(alias="id", description="Task id"),
    body: Any = Depends(read_msgpack_body),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> PlainTextResponse:
    """Overwrite content, completed and editing of the task with full-entry payload."""
    entry = codec.entry_from_wire(body)
    with _not_found_on_failure(task_id):
        await task_service.update(db, task_id, entry)
    return PlainTextResponse(ACKNOWLEDGED)


@router.delete("/task", response_class=PlainTextResponse, summary="Delete a task")
async def delete_task(
    task_id: UUID = Query(alias="id", description="Task id"),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> PlainTextResponse:
    with _not_found_on_failure(task_id):
        await task_service.remove(db, task_id)
    return PlainTextResponse(ACKNOWLEDGED)
