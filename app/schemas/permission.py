"""Permission API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PermissionCreate(BaseModel):
    """Request body for creating a permission (name is usually resource:action)."""

    name: str = Field(..., min_length=1, max_length=100, examples=["user:create"])
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=255)
    resource: str = Field(..., min_length=1, max_length=50, examples=["user"])
    action: str = Field(..., min_length=1, max_length=50, examples=["create"])


class PermissionUpdate(BaseModel):
    """Request body for updating a permission (partial)."""

    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    status: int | None = Field(default=None, ge=0, le=1)


class PermissionResponse(BaseModel):
    """Permission list/detail response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: str
    resource: str
    action: str
    status: int
    created_at: datetime
    updated_at: datetime
