"""Ownership-scoped task operations.

Every operation except ``get_by_id`` is restricted to tasks whose owner is
the requesting user; a task owned by someone else is reported exactly like a
task that does not exist.
"""

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from coallytasks.database.repository import InvalidTaskId, TaskRepository
from coallytasks.errors import (
    NotFound,
    TASK_ALREADY_DELETED_MESSAGE,
    TASK_NOT_FOUND_MESSAGE,
    UpdateFailed,
    ValidationError,
)
from coallytasks.models.task import Task, TaskPatch
from coallytasks.validation import TASK_CREATE_RULES, Violation, ensure_valid

logger = logging.getLogger(__name__)


def _violations_from(exc: PydanticValidationError) -> List[Violation]:
    violations = []
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        violations.append(Violation(str(loc[0]), err.get("msg", "Invalid value")))
    return violations


class TaskService:
    """CRUD over tasks on behalf of an authenticated user."""

    def __init__(self, tasks: TaskRepository):
        self.tasks = tasks

    def create(self, owner: str, payload: Mapping[str, Any]) -> Task:
        """Create a task owned by ``owner``.

        Raises:
            ValidationError: If the title is missing or blank, or a field has the wrong type
        """
        ensure_valid(payload, TASK_CREATE_RULES)

        now = datetime.utcnow()
        try:
            task = Task(
                owner=owner,
                title=payload["title"],
                description=payload.get("description"),
                completed=payload.get("completed", False),
                created_at=now,
                updated_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(_violations_from(e))

        created = self.tasks.create(task)
        logger.info(f"User {owner} created task {created.id}")
        return created

    def list(self, owner: str, completed: Optional[bool] = None) -> List[Task]:
        """All tasks owned by ``owner``, optionally filtered by completion state."""
        return self.tasks.find(owner, completed=completed)

    def get_by_id(self, task_id: str) -> Task:
        """Fetch a task by id without checking who owns it.

        Kept for compatibility with existing clients; use ``get_owned_by_id``
        when the caller must only see its own tasks.

        Raises:
            NotFound: If no task has this id
        """
        try:
            task = self.tasks.get_any(task_id)
        except InvalidTaskId:
            task = None
        if task is None:
            raise NotFound(TASK_NOT_FOUND_MESSAGE)
        return task

    def get_owned_by_id(self, owner: str, task_id: str) -> Task:
        """Fetch a task by id, only if ``owner`` owns it.

        Raises:
            NotFound: If no task with this id is owned by ``owner``
        """
        try:
            task = self.tasks.get(owner, task_id)
        except InvalidTaskId:
            task = None
        if task is None:
            raise NotFound(TASK_NOT_FOUND_MESSAGE)
        return task

    def update(self, owner: str, task_id: str, payload: Any) -> Task:
        """Partially update a task; fields absent from ``payload`` keep their values.

        Raises:
            UpdateFailed: If the id is malformed, the payload cannot be applied,
                or the database rejects the change
            NotFound: If no task with this id is owned by ``owner``
        """
        if not isinstance(payload, Mapping):
            raise UpdateFailed("Request body must be a JSON object")

        try:
            changes = TaskPatch(**payload).model_dump(exclude_unset=True)
        except PydanticValidationError as e:
            raise UpdateFailed(str(e))

        if "title" in changes and not (changes["title"] or "").strip():
            raise UpdateFailed("title must not be empty")
        if "completed" in changes and changes["completed"] is None:
            raise UpdateFailed("completed must be a boolean")

        try:
            task = self.tasks.update(owner, task_id, changes)
        except (InvalidTaskId, SQLAlchemyError) as e:
            raise UpdateFailed(str(e))

        if task is None:
            raise NotFound(TASK_NOT_FOUND_MESSAGE)
        logger.info(f"User {owner} updated task {task.id}")
        return task

    def delete(self, owner: str, task_id: str) -> Task:
        """Delete a task owned by ``owner`` and return it.

        Raises:
            NotFound: If the task was already deleted, never existed, or is not owned by ``owner``
        """
        try:
            task = self.tasks.delete(owner, task_id)
        except InvalidTaskId:
            task = None
        if task is None:
            raise NotFound(TASK_ALREADY_DELETED_MESSAGE)
        logger.info(f"User {owner} deleted task {task.id}")
        return task
