"""Schemas shared by several resources: pagination envelope and id-list bodies."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

ItemT = TypeVar("ItemT")


class Page(BaseModel, Generic[ItemT]):
    """Paginated list response."""

    items: list[ItemT]
    total: int
    page: int
    page_size: int


class RoleIdsRequest(BaseModel):
    """Body for assigning or removing roles."""

    role_ids: list[int] = Field(..., max_length=1000)


class PermissionIdsRequest(BaseModel):
    """Body for assigning or removing permissions."""

    permission_ids: list[int] = Field(..., max_length=1000)


class UserIdsRequest(BaseModel):
    """Body for assigning or removing users."""

    user_ids: list[int] = Field(..., max_length=1000)
