"""User API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.role import RoleResponse, RoleSummary


class UserCreateRequest(BaseModel):
    """Request body for creating a user."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    nickname: str | None = Field(default=None, max_length=50)


class UserUpdate(BaseModel):
    """Request body for updating a user (partial)."""

    email: EmailStr | None = None
    nickname: str | None = Field(default=None, max_length=50)
    password: str | None = Field(default=None, min_length=6, max_length=128)
    status: int | None = Field(default=None, ge=0, le=1)


class UserSummary(BaseModel):
    """User response without relationships (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    nickname: str | None
    status: int
    created_at: datetime
    updated_at: datetime


class UserResponse(UserSummary):
    """User list response with assigned roles."""

    roles: list[RoleSummary] = Field(default_factory=list)


class UserDetailResponse(UserSummary):
    """User detail with roles and each role's permissions."""

    roles: list[RoleResponse] = Field(default_factory=list)
