"""Request/response models for the HTTP API."""

from typing import Optional
from pydantic import BaseModel, Field

from coallytasks.models.timestamps import UTCDateTime


class TaskResponse(BaseModel):
    """Task as returned by list: everything except the owner."""

    id: str = Field(..., alias="_id")
    title: str
    description: Optional[str] = None
    completed: bool
    created_at: UTCDateTime = Field(..., alias="createdAt")
    updated_at: UTCDateTime = Field(..., alias="updatedAt")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class TaskDetailResponse(BaseModel):
    """Task as returned by the single-item fetch: no id, no owner."""

    title: str
    description: Optional[str] = None
    completed: bool
    created_at: UTCDateTime = Field(..., alias="createdAt")
    updated_at: UTCDateTime = Field(..., alias="updatedAt")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class UserResponse(BaseModel):
    """Registered user. The password hash is never included."""

    id: str = Field(..., alias="_id")
    name: str
    email: str
    created_at: UTCDateTime = Field(..., alias="createdAt")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class TokenResponse(BaseModel):
    """Response model for login."""
    token: str


class ProjectInfo(BaseModel):
    """Entry returned by the root endpoint."""
    name: str
