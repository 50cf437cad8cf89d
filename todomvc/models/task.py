"""
TodoMVC — Task SQLAlchemy Model
=================================

What:  ORM model for the single `task` table.
How:   Inherits from the shared DeclarativeBase; Alembic migration 001
       creates the same table.
Who:   Used by TaskService for every CRUD operation.

Table:
    id         UUID primary key, generated client-side of the database (uuid4)
    content    TEXT, free text
    completed  BOOLEAN, default false
    editing    BOOLEAN, default false
"""

import uuid

from sqlalchemy import Boolean, Text, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from todomvc.database import Base
from todomvc.schemas.task import Entry


class Task(Base):
    """
    One persisted to-do item.

    Lifecycle:
        1. Inserted when a user submits non-empty content, or by a bulk
           update that carries an unknown id
        2. Overwritten by single or bulk updates (content/completed/editing)
        3. Deleted when the user removes it or clears its content
    """

    __tablename__ = "task"

    # sqlalchemy.Uuid maps to native UUID on PostgreSQL and CHAR(32) elsewhere
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    editing: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    @classmethod
    def from_entry(cls, entry: Entry) -> "Task":
        """Row carrying every field of `entry`, id included."""
        return cls(
            id=entry.id,
            content=entry.content,
            completed=entry.completed,
            editing=entry.editing,
        )

    def to_entry(self) -> Entry:
        return Entry(
            id=self.id,
            content=self.content,
            completed=self.completed,
            editing=self.editing,
        )

    def __repr__(self) -> str:
        return (
            f"<Task(id={self.id}, completed={self.completed}, "
            f"editing={self.editing})>"
        )
