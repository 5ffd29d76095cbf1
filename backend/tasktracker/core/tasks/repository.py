import logging
import uuid
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.core.tasks.models import Task, tasks
from tasktracker.db.base import utcnow
from tasktracker.db.session import Database
from tasktracker.errors import NotFoundError, StorageError

log = logging.getLogger(__name__)

STORAGE_FAILURES = (SQLAlchemyError, OSError)


def _parse_id(task_id: str | None) -> uuid.UUID | None:
    if not task_id:
        return None
    try:
        return uuid.UUID(str(task_id))
    except ValueError:
        return None


def task_to_row(task: Task) -> dict[str, Any]:
    return {
        "id": uuid.UUID(task.id),
        "title": task.title,
        "description": task.description or "",
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


def row_to_task(row: RowMapping) -> Task:
    return Task(
        id=str(row["id"]),
        title=row["title"],
        description=row["description"] or "",
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class TaskRepository:
    """Reads and writes task rows. The store is read fresh on every call."""

    def __init__(self, db: Database):
        self.db = db

    async def create(self, task: Task) -> Task:
        if not task.id:
            task.id = str(uuid.uuid4())
        else:
            key = _parse_id(task.id)
            if key is None:
                raise StorageError(f"Task id {task.id!r} is not a valid UUID")
            task.id = str(key)
        if task.created_at is None:
            task.created_at = utcnow()
        try:
            async with self.db.session() as session:
                await session.execute(insert(tasks).values(**task_to_row(task)))
        except STORAGE_FAILURES as e:
            raise StorageError("Error creating task", cause=e) from e
        log.debug("[DB] Inserted task %s", task.id)
        return task

    async def get(self, task_id: str) -> Task:
        key = _parse_id(task_id)
        if key is None:
            raise NotFoundError(f"Task {task_id!r} not found")
        try:
            async with self.db.session() as session:
                result = await session.execute(select(tasks).where(tasks.c.id == key))
                row = result.mappings().one_or_none()
        except STORAGE_FAILURES as e:
            raise StorageError("Error fetching task", cause=e) from e
        if row is None:
            raise NotFoundError(f"Task {task_id!r} not found")
        return row_to_task(row)

    async def list(self) -> list[Task]:
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(tasks).order_by(tasks.c.created_at, tasks.c.id)
                )
                rows = result.mappings().all()
        except STORAGE_FAILURES as e:
            raise StorageError("Error fetching tasks", cause=e) from e
        return [row_to_task(row) for row in rows]

    async def update(self, task: Task) -> Task:
        """Overwrite title and description. Raises NotFoundError when no row matches."""
        key = _parse_id(task.id)
        if key is None:
            raise NotFoundError(f"Task {task.id!r} not found")
        updated_at = utcnow()
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    update(tasks)
                    .where(tasks.c.id == key)
                    .values(title=task.title, description=task.description or "", updated_at=updated_at)
                )
                matched = result.rowcount
        except STORAGE_FAILURES as e:
            raise StorageError("Error updating task", cause=e) from e
        if not matched:
            raise NotFoundError(f"Task {task.id!r} not found")
        task.updated_at = updated_at
        return task

    async def delete(self, task_id: str) -> None:
        """Remove the row if present. Deleting a missing task is not an error."""
        key = _parse_id(task_id)
        if key is None:
            log.debug("[DB] Delete of malformed task id %r ignored", task_id)
            return
        try:
            async with self.db.session() as session:
                result = await session.execute(delete(tasks).where(tasks.c.id == key))
                removed = result.rowcount
        except STORAGE_FAILURES as e:
            raise StorageError("Error deleting task", cause=e) from e
        if not removed:
            log.debug("[DB] Delete matched no row for task %s", task_id)
