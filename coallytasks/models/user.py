"""User data model for coallytasks."""

import uuid
from datetime import datetime
from pydantic import BaseModel, Field

from coallytasks.models.timestamps import UTCDateTime


class User(BaseModel):
    """User model for coallytasks."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id", description="Unique user identifier (UUID v4)")
    name: str = Field(..., description="User display name")
    email: str = Field(..., description="User email address")
    password_hash: str = Field(..., exclude=True, description="bcrypt hash of the user's password")
    created_at: UTCDateTime = Field(default_factory=datetime.utcnow, alias="createdAt", description="User creation timestamp")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
