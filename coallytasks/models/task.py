"""Task data model for coallytasks."""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from coallytasks.models.timestamps import UTCDateTime


class Task(BaseModel):
    """Canonical Task model.

    Serialized with the wire names clients already use (``_id``,
    ``createdAt``, ``updatedAt``); constructed with either those names or the
    Python field names.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id", description="Unique task identifier (UUID v4)")
    owner: str = Field(..., description="ID of the user who owns this task")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    completed: bool = Field(False, description="Whether the task is done")
    created_at: UTCDateTime = Field(default_factory=datetime.utcnow, alias="createdAt", description="Task creation timestamp")
    updated_at: UTCDateTime = Field(default_factory=datetime.utcnow, alias="updatedAt", description="Task last update timestamp")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class TaskPatch(BaseModel):
    """Fields a client may change on an existing task. Unknown keys are ignored."""

    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None

    class Config:
        """Pydantic configuration."""
        extra = "ignore"
