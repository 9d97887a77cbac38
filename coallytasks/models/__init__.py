"""Data models for coallytasks."""

from coallytasks.models.task import Task, TaskPatch
from coallytasks.models.user import User

__all__ = [
    "Task",
    "TaskPatch",
    "User",
]
