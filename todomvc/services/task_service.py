"""
TodoMVC — Task Service (Persistence Operations)
=================================================

What:  Create/read/update/delete operations against the `task` table.
How:   Every method receives the request's AsyncSession explicitly; the
       session (and its pooled connection) is owned by the caller.
Who:   Called by the task route handlers.

Error Handling:
    SQLAlchemy failures are wrapped in DatabaseError with a descriptive
    message. Domain conditions raise their own types: TaskNotFoundError,
    TableEmptyError, AmbiguousIdError. Operations are single-attempt.

Transactions:
    All statements of one call run inside the caller's session, which commits
    once at the end of the request. `update_all` is therefore all-or-nothing.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todomvc.exceptions import (
    AmbiguousIdError,
    DatabaseError,
    TableEmptyError,
    TaskNotFoundError,
    TodoMVCError,
)
from todomvc.models.task import Task
from todomvc.schemas.task import Entry

logger = logging.getLogger(__name__)


class TaskService:
    """
    Persistence operations for task entries.

    Stateless: the session is passed to each call.
    """

    async def create(self, db: AsyncSession, content: str) -> Entry:
        """
        Insert a new task with a fresh id, not completed and not editing.

        Raises:
            DatabaseError: The insert failed
        """
        task = Task.from_entry(Entry.new(content))
        try:
            db.add(task)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating task: %s", str(e))
            raise DatabaseError(
                message=f"Could not create task: {e}",
                context={"error_type": type(e).__name__},
            ) from e
        logger.info("Task created: %s", task.id)
        return task.to_entry()

    async def list_tasks(self, db: AsyncSession) -> List[Entry]:
        """Every row in the table, in no particular order."""
        try:
            result = await db.execute(select(Task))
            return [t.to_entry() for t in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing tasks: %s", str(e), exc_info=True)
            raise DatabaseError(
                message=f"Could not list tasks: {e}",
                context={"error_type": type(e).__name__},
            ) from e

    async def get_by_id(self, db: AsyncSession, task_id: UUID) -> Optional[Entry]:
        """
        The task with `task_id`, or None when there is none.

        Raises:
            AmbiguousIdError: More than one row carries the id
            DatabaseError: The query failed
        """
        try:
            result = await db.execute(select(Task).where(Task.id == task_id))
            tasks = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error fetching task %s: %s", task_id, str(e))
            raise DatabaseError(
                message=f"Could not retrieve task {task_id}: {e}",
                context={"task_id": str(task_id)},
            ) from e

        if len(tasks) > 1:
            raise AmbiguousIdError(task_id, len(tasks))
        if not tasks:
            return None
        return tasks[0].to_entry()

    async def count(self, db: AsyncSession) -> int:
        try:
            result = await db.execute(select(func.count(Task.id)))
            return result.scalar() or 0
        except SQLAlchemyError as e:
            raise DatabaseError(message=f"Could not count tasks: {e}") from e

    async def update(self, db: AsyncSession, task_id: UUID, entry: Entry) -> None:
        """
        Overwrite content, completed and editing of the row with `task_id`.

        The id inside `entry` is ignored; a row's id never changes.

        Raises:
            TaskNotFoundError: No row has `task_id`
            DatabaseError: The statement failed
        """
        stmt = (
            update(Task)
            .where(Task.id == task_id)
            .values(
                content=entry.content,
                completed=entry.completed,
                editing=entry.editing,
            )
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Database error updating task %s: %s", task_id, str(e))
            raise DatabaseError(
                message=f"Could not update task {task_id}: {e}",
                context={"task_id": str(task_id)},
            ) from e

        if result.rowcount == 0:
            raise TaskNotFoundError(task_id)
        logger.debug("Task updated: %s", task_id)

    async def update_all(self, db: AsyncSession, entries: Iterable[Entry]) -> None:
        """
        Upsert every entry: update the row if it exists, insert it otherwise.

        A failed lookup also leads to an insert. Each lookup runs in its own
        savepoint, so a failed statement only rolls back that savepoint and
        leaves the surrounding transaction usable. Insert failures propagate.
        """
        updated = inserted = 0
        for entry in entries:
            try:
                async with db.begin_nested():
                    existing = await self.get_by_id(db, entry.id)
            except TodoMVCError as e:
                logger.warning("Lookup of task %s failed, inserting instead: %s", entry.id, e.message)
                existing = None

            if existing is not None:
                await self.update(db, entry.id, entry)
                updated += 1
            else:
                await self._insert(db, entry)
                inserted += 1
        logger.info("Bulk update: %d updated, %d inserted", updated, inserted)

    async def remove(self, db: AsyncSession, task_id: UUID) -> None:
        """
        Delete the row with `task_id` after confirming that it exists.

        Raises:
            DatabaseError: The existence check failed
            TableEmptyError: The table has no rows at all
            TaskNotFoundError: No row has `task_id`
        """
        try:
            existing = await self.get_by_id(db, task_id)
        except TodoMVCError as e:
            raise DatabaseError(
                message=f"Cannot get such task with id: {task_id}, reason: {e.message}",
                context={"task_id": str(task_id)},
            ) from e

        if existing is None:
            if await self.count(db) == 0:
                raise TableEmptyError(task_id)
            raise TaskNotFoundError(task_id)

        try:
            await db.execute(delete(Task).where(Task.id == task_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting task %s: %s", task_id, str(e))
            raise DatabaseError(
                message=f"Could not delete task {task_id}: {e}",
                context={"task_id": str(task_id)},
            ) from e
        logger.info("Task removed: %s", task_id)

    async def _insert(self, db: AsyncSession, entry: Entry) -> None:
        try:
            db.add(Task.from_entry(entry))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error inserting task %s: %s", entry.id, str(e))
            raise DatabaseError(
                message=f"Could not insert task {entry.id}: {e}",
                context={"task_id": str(entry.id)},
            ) from e


task_service = TaskService()
