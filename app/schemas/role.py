"""Role API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.permission import PermissionResponse


class RoleCreateRequest(BaseModel):
    """Request body for creating a role."""

    name: str = Field(..., min_length=1, max_length=50, examples=["admin"])
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=255)


class RoleUpdate(BaseModel):
    """Request body for updating a role (partial)."""

    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    status: int | None = Field(default=None, ge=0, le=1)


class RoleSummary(BaseModel):
    """Role without relationships."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str
    description: str
    status: int
    created_at: datetime
    updated_at: datetime


class RoleResponse(RoleSummary):
    """Role list/detail response including its permissions."""

    permissions: list[PermissionResponse] = Field(default_factory=list)
