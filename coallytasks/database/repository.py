"""Repository layer for task database operations."""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from sqlalchemy import asc
from sqlalchemy.orm import Session

from coallytasks.models.task import Task
from coallytasks.database.models import TaskDB

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "completed")


class InvalidTaskId(ValueError):
    """Raised when a task id is not a well-formed UUID."""


def normalize_task_id(task_id: str) -> str:
    """Return the canonical string form of a task id.

    Raises:
        InvalidTaskId: If the id is not a UUID
    """
    try:
        return str(uuid.UUID(str(task_id)))
    except (ValueError, AttributeError, TypeError):
        raise InvalidTaskId(f"Cast to UUID failed for value \"{task_id}\"")


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get_any(self, task_id: str) -> Optional[Task]:
        """Get task by ID regardless of owner."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == normalize_task_id(task_id)).first()
        return task_db.to_pydantic() if task_db else None

    def get(self, owner: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific owner."""
        task_db = self._owned(owner, task_id)
        return task_db.to_pydantic() if task_db else None

    def find(self, owner: str, completed: Optional[bool] = None) -> List[Task]:
        """Get all tasks for an owner in creation order, optionally filtered by completion."""
        query = self.db.query(TaskDB).filter(TaskDB.owner == owner)
        if completed is not None:
            query = query.filter(TaskDB.completed == completed)
        tasks_db = query.order_by(asc(TaskDB.created_at), asc(TaskDB.id)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def update(self, owner: str, task_id: str, changes: Dict[str, Any]) -> Optional[Task]:
        """Apply a partial update to a task owned by ``owner``.

        Only keys in ``UPDATABLE_FIELDS`` are written. ``updated_at`` is always
        moved forward, even when ``changes`` is empty.

        Returns:
            Updated Task, or None if no such task is owned by ``owner``
        """
        task_db = self._owned(owner, task_id)
        if not task_db:
            return None

        for field in UPDATABLE_FIELDS:
            if field in changes:
                setattr(task_db, field, changes[field])

        now = datetime.utcnow()
        if task_db.updated_at is not None and now <= task_db.updated_at:
            now = task_db.updated_at + timedelta(microseconds=1)
        task_db.updated_at = now

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_db.id}: {sorted(changes)}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, owner: str, task_id: str) -> Optional[Task]:
        """Permanently delete a task owned by ``owner``.

        Returns:
            The removed Task, or None if no such task is owned by ``owner``
        """
        task_db = self._owned(owner, task_id)
        if not task_db:
            return None

        removed = task_db.to_pydantic()
        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {removed.id}")
            return removed
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def _owned(self, owner: str, task_id: str) -> Optional[TaskDB]:
        return self.db.query(TaskDB).filter(
            TaskDB.id == normalize_task_id(task_id),
            TaskDB.owner == owner,
        ).first()
