"""
TodoMVC — Task Service Tests
==============================

What:  Persistence operations against a real SQLite database, plus failure
       paths against a mock session.

What we test:
    ✅ create → fresh id, completed/editing false, visible in list
    ✅ get_by_id on a deleted id returns None
    ✅ update then get returns the new fields with the id unchanged
    ✅ update on a missing id raises TaskNotFoundError
    ✅ update_all updates existing rows and inserts unknown ones
    ✅ a failed lookup in update_all only undoes its own savepoint
    ✅ remove distinguishes an empty table from a missing id
    ✅ duplicate rows for one id raise AmbiguousIdError
    ✅ driver errors surface as DatabaseError
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from todomvc.exceptions import (
    AmbiguousIdError,
    DatabaseError,
    TableEmptyError,
    TaskNotFoundError,
)
from todomvc.models.task import Task
from todomvc.schemas.task import Entry
from todomvc.services.task_service import TaskService


async def _list(database):
    async with database.session() as session:
        return await TaskService().list_tasks(session)


async def _get(database, task_id):
    async with database.session() as session:
        return await TaskService().get_by_id(session, task_id)


class TestCreateAndRead:

    def setup_method(self):
        self.service = TaskService()

    @pytest.mark.asyncio
    async def test_create_returns_fresh_entry(self, database):
        async with database.session() as session:
            entry = await self.service.create(session, "buy milk")

        assert entry.content == "buy milk"
        assert entry.completed is False
        assert entry.editing is False
        assert entry.id != uuid.UUID(int=0)

        listed = await _list(database)
        assert [e.id for e in listed] == [entry.id]

    @pytest.mark.asyncio
    async def test_create_generates_unique_ids(self, database):
        async with database.session() as session:
            first = await self.service.create(session, "same text")
            second = await self.service.create(session, "same text")

        assert first.id != second.id
        assert len(await _list(database)) == 2

    @pytest.mark.asyncio
    async def test_get_by_id_missing_returns_none(self, db_session):
        assert await self.service.get_by_id(db_session, uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_get_by_id_after_remove_returns_none(self, database):
        async with database.session() as session:
            keep = await self.service.create(session, "keep")
            gone = await self.service.create(session, "gone")
        async with database.session() as session:
            await self.service.remove(session, gone.id)

        assert await _get(database, gone.id) is None
        assert (await _get(database, keep.id)).content == "keep"


class TestUpdate:

    def setup_method(self):
        self.service = TaskService()

    @pytest.mark.asyncio
    async def test_update_overwrites_fields_keeps_id(self, database):
        async with database.session() as session:
            created = await self.service.create(session, "draft")

        payload = Entry(id=uuid.uuid4(), content="final", completed=True, editing=True)
        async with database.session() as session:
            await self.service.update(session, created.id, payload)

        fetched = await _get(database, created.id)
        assert fetched.id == created.id
        assert fetched.content == "final"
        assert fetched.completed is True
        assert fetched.editing is True
        assert await _get(database, payload.id) is None

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, db_session):
        with pytest.raises(TaskNotFoundError):
            await self.service.update(db_session, uuid.uuid4(), Entry.new("x"))

    @pytest.mark.asyncio
    async def test_update_all_upserts(self, database):
        async with database.session() as session:
            existing = await self.service.create(session, "old")

        changed = existing.model_copy(update={"content": "new", "completed": True})
        fresh = Entry.new("inserted")
        async with database.session() as session:
            await self.service.update_all(session, [changed, fresh])

        by_id = {e.id: e for e in await _list(database)}
        assert set(by_id) == {existing.id, fresh.id}
        assert by_id[existing.id].content == "new"
        assert by_id[existing.id].completed is True
        assert by_id[fresh.id].content == "inserted"

    @pytest.mark.asyncio
    async def test_update_all_inserts_when_lookup_fails(self, database):
        entry = Entry.new("after failed lookup")
        with patch.object(
            self.service, "get_by_id", AsyncMock(side_effect=DatabaseError("lookup broke"))
        ):
            async with database.session() as session:
                await self.service.update_all(session, [entry])

        assert (await _get(database, entry.id)).content == "after failed lookup"

    @pytest.mark.asyncio
    async def test_failed_lookup_rolls_back_only_its_savepoint(self, database):
        kept = Entry.new("kept")
        stray = Entry.new("written by the failed lookup")

        async def broken_lookup(db, task_id):
            db.add(Task.from_entry(stray))
            await db.flush()
            raise DatabaseError("lookup broke")

        async with database.session() as session:
            await self.service.create(session, "earlier in the batch")
            with patch.object(self.service, "get_by_id", AsyncMock(side_effect=broken_lookup)):
                await self.service.update_all(session, [kept])

        contents = sorted(e.content for e in await _list(database))
        assert contents == ["earlier in the batch", "kept"]

    @pytest.mark.asyncio
    async def test_update_all_empty_list_is_noop(self, db_session):
        await self.service.update_all(db_session, [])
        assert await self.service.count(db_session) == 0


class TestRemove:

    def setup_method(self):
        self.service = TaskService()

    @pytest.mark.asyncio
    async def test_remove_on_empty_table(self, db_session):
        with pytest.raises(TableEmptyError) as exc_info:
            await self.service.remove(db_session, uuid.uuid4())
        assert exc_info.value.message == "Task table is empty!"

    @pytest.mark.asyncio
    async def test_remove_missing_id_with_rows_present(self, db_session):
        await self.service.create(db_session, "present")
        with pytest.raises(TaskNotFoundError) as exc_info:
            await self.service.remove(db_session, uuid.uuid4())
        assert not isinstance(exc_info.value, TableEmptyError)

    @pytest.mark.asyncio
    async def test_remove_when_lookup_fails(self, db_session):
        task_id = uuid.uuid4()
        with patch.object(
            self.service, "get_by_id", AsyncMock(side_effect=AmbiguousIdError(task_id, 2))
        ):
            with pytest.raises(DatabaseError) as exc_info:
                await self.service.remove(db_session, task_id)
        assert exc_info.value.message.startswith(f"Cannot get such task with id: {task_id}")


class TestFailurePaths:

    def setup_method(self):
        self.service = TaskService()

    @pytest.mark.asyncio
    async def test_duplicate_rows_raise_ambiguous(self, mock_db_session):
        task_id = uuid.uuid4()
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = [MagicMock(), MagicMock()]
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(AmbiguousIdError) as exc_info:
            await self.service.get_by_id(mock_db_session, task_id)
        assert exc_info.value.count == 2

    @pytest.mark.asyncio
    async def test_list_wraps_driver_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )
        with pytest.raises(DatabaseError):
            await self.service.list_tasks(mock_db_session)

    @pytest.mark.asyncio
    async def test_create_wraps_flush_error(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        )
        with pytest.raises(DatabaseError):
            await self.service.create(mock_db_session, "never stored")
