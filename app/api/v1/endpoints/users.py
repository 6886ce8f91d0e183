"""Users API: CRUD and role assignment."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import (
    Pagination,
    get_audit_context,
    get_user_service,
    get_user_service_for_write,
)
from app.application.services import UserService
from app.core.limiter import limit_writes
from app.schemas.common import Page, RoleIdsRequest
from app.schemas.role import RoleSummary
from app.schemas.user import (
    UserCreateRequest,
    UserDetailResponse,
    UserResponse,
    UserUpdate,
)
from app.shared.context import AuditContext

router = APIRouter()

ReadService = Annotated[UserService, Depends(get_user_service)]
WriteService = Annotated[UserService, Depends(get_user_service_for_write)]
Ctx = Annotated[AuditContext, Depends(get_audit_context)]


@router.post("", response_model=UserDetailResponse, status_code=201)
@limit_writes
async def create_user(
    request: Request,
    body: UserCreateRequest,
    service: WriteService,
    ctx: Ctx,
):
    """Create a user (409 when email or username is taken)."""
    user = await service.create_user(
        username=body.username,
        email=body.email,
        password=body.password,
        nickname=body.nickname,
        ctx=ctx,
    )
    return UserDetailResponse.model_validate(user)


@router.get("", response_model=Page[UserResponse])
async def list_users(
    service: ReadService,
    pagination: Annotated[Pagination, Depends()],
):
    """List users with their roles (paginated)."""
    users, total = await service.list_users(pagination.page, pagination.page_size)
    return Page[UserResponse](
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/{user_id}", response_model=UserDetailResponse)
async def get_user(user_id: int, service: ReadService):
    """Get user with roles and permissions."""
    return UserDetailResponse.model_validate(await service.get_user(user_id))


@router.put("/{user_id}", response_model=UserDetailResponse)
@limit_writes
async def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    service: WriteService,
    ctx: Ctx,
):
    """Partial update (email, nickname, password, status)."""
    user = await service.update_user(user_id, body.model_dump(exclude_unset=True), ctx)
    return UserDetailResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
@limit_writes
async def delete_user(
    request: Request,
    user_id: int,
    service: WriteService,
    ctx: Ctx,
) -> Response:
    """Soft-delete a user."""
    await service.delete_user(user_id, ctx)
    return Response(status_code=204)


@router.get("/{user_id}/roles", response_model=list[RoleSummary])
async def get_user_roles(user_id: int, service: ReadService):
    """List roles assigned to a user."""
    roles = await service.get_roles(user_id)
    return [RoleSummary.model_validate(r) for r in roles]


@router.post("/{user_id}/roles", response_model=list[RoleSummary])
@limit_writes
async def assign_user_roles(
    request: Request,
    user_id: int,
    body: RoleIdsRequest,
    service: WriteService,
    ctx: Ctx,
):
    """Assign roles (unknown ids ignored, existing assignments kept)."""
    roles = await service.assign_roles(user_id, body.role_ids, ctx)
    return [RoleSummary.model_validate(r) for r in roles]


@router.delete("/{user_id}/roles", response_model=list[RoleSummary])
@limit_writes
async def remove_user_roles(
    request: Request,
    user_id: int,
    body: RoleIdsRequest,
    service: WriteService,
    ctx: Ctx,
):
    """Remove role assignments."""
    roles = await service.remove_roles(user_id, body.role_ids, ctx)
    return [RoleSummary.model_validate(r) for r in roles]
