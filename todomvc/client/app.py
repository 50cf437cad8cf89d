"""
TodoMVC — Client Application
==============================

What:  Turns user actions into state mutations plus one API push each.
How:   Each action mutates `State` synchronously, then starts the matching
       API call as an asyncio task. Mutations are optimistic: when a push
       fails the error is logged and the local mirror is left as it is.

In-flight tracking:
    `current_task` remembers only the most recent push. Starting a new push
    forgets the previous one without cancelling it; its result is still
    applied when it completes. Completed pushes are applied in the order
    they finish.

Must be driven from inside a running event loop.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set, TypeVar
from uuid import UUID

from todomvc.client.api import TodoApi
from todomvc.client.state import Filter, State
from todomvc.schemas.task import Entry

logger = logging.getLogger("todomvc.client")

T = TypeVar("T")


def _snapshot(entries: List[Entry]) -> List[Entry]:
    return [e.model_copy() for e in entries]


class TodoApp:
    def __init__(self, api: TodoApi, state: Optional[State] = None):
        self.api = api
        self.state = state or State()
        self.current_task: Optional[asyncio.Task] = None
        # Strong references keep fire-and-forget tasks alive until they finish
        self._in_flight: Set[asyncio.Task] = set()

    # ── Push plumbing ─────────────────────────────────────────────────────

    def _push(
        self,
        coro: Awaitable[T],
        description: str,
        on_success: Optional[Callable[[T], None]] = None,
    ) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._in_flight.add(task)
        self.current_task = task

        def _done(t: asyncio.Task) -> None:
            self._in_flight.discard(t)
            if t.cancelled():
                logger.info("%s cancelled", description)
                self._forget(t)
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Error, occur: %s, reason: %s", description, exc)
                self._forget(t)
                return
            if on_success is not None:
                on_success(t.result())
            else:
                logger.info("%s succeeded", description)

        task.add_done_callback(_done)
        return task

    def _forget(self, task: asyncio.Task) -> None:
        if self.current_task is task:
            self.current_task = None

    async def drain(self) -> None:
        """Wait until every push started so far has finished."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _on_entries(self, entries: List[Entry]) -> None:
        logger.info("Fetch entries success.")
        self.state.entries = entries

    def _on_created(self, entry: Entry) -> None:
        logger.info("Create entry success.")
        self.state.entries.append(entry)

    def _push_update(self, entry: Entry, description: str) -> asyncio.Task:
        return self._push(self.api.update(entry.model_copy()), description)

    def _push_update_all(self, description: str) -> asyncio.Task:
        return self._push(self.api.update_all(_snapshot(self.state.entries)), description)

    def _push_remove(self, task_id: UUID) -> asyncio.Task:
        return self._push(self.api.remove(task_id), "remove task")

    # ── Actions ───────────────────────────────────────────────────────────

    def start(self) -> asyncio.Task:
        """Load the full entry list from the server into the mirror."""
        return self._push(self.api.fetch_all(), "fetch all tasks", self._on_entries)

    def update_input(self, value: str) -> None:
        self.state.value = value

    def update_edit_input(self, value: str) -> None:
        self.state.edit_value = value

    def set_filter(self, flt: Filter) -> None:
        self.state.filter = flt

    def add(self) -> Optional[asyncio.Task]:
        """Create a task from the trimmed input buffer; the buffer is always cleared."""
        content = self.state.value.strip()
        self.state.value = ""
        if not content:
            return None
        return self._push(self.api.create(content), "create task", self._on_created)

    def remove(self, idx: int) -> asyncio.Task:
        entry = self.state.remove(idx)
        return self._push_remove(entry.id)

    def toggle(self, idx: int) -> asyncio.Task:
        entry = self.state.toggle(idx)
        return self._push_update(entry, "toggle completed")

    def toggle_all(self, value: Optional[bool] = None) -> asyncio.Task:
        """Set completed on every filtered entry; defaults to flipping the all-completed state."""
        if value is None:
            value = not self.state.is_all_completed()
        self.state.toggle_all(value)
        return self._push_update_all("toggle all tasks as completed")

    def toggle_edit(self, idx: int) -> asyncio.Task:
        self.state.edit_value = self.state.entry_at(idx).content
        entry = self.state.toggle_edit(idx)
        return self._push_update(entry, "toggle edit")

    def complete_edit(self, idx: int, content: Optional[str] = None) -> asyncio.Task:
        """
        Commit the edit of the entry at `idx`.

        `content` defaults to the trimmed edit buffer. Empty content removes
        the entry instead of updating it.
        """
        if content is None:
            content = self.state.edit_value.strip()
        entry, removed = self.state.complete_edit(idx, content)
        self.state.edit_value = ""
        if removed:
            return self._push_remove(entry.id)
        return self._push_update(entry, "finish edit task")

    def clear_completed(self) -> asyncio.Task:
        """
        Drop completed entries locally, delete them on the server, then push
        the surviving entries as one bulk update.
        """
        removed = self.state.clear_completed()
        for entry in removed:
            self._push_remove(entry.id)
        return self._push_update_all("clear all completed tasks")
