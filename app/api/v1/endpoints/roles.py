"""Roles API: CRUD, role-permission and role-user assignment."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import (
    Pagination,
    get_audit_context,
    get_role_service,
    get_role_service_for_write,
)
from app.application.services import RoleService
from app.core.limiter import limit_writes
from app.schemas.common import Page, PermissionIdsRequest, UserIdsRequest
from app.schemas.permission import PermissionResponse
from app.schemas.role import RoleCreateRequest, RoleResponse, RoleUpdate
from app.schemas.user import UserSummary
from app.shared.context import AuditContext

router = APIRouter()

ReadService = Annotated[RoleService, Depends(get_role_service)]
WriteService = Annotated[RoleService, Depends(get_role_service_for_write)]
Ctx = Annotated[AuditContext, Depends(get_audit_context)]


@router.post("", response_model=RoleResponse, status_code=201)
@limit_writes
async def create_role(
    request: Request,
    body: RoleCreateRequest,
    service: WriteService,
    ctx: Ctx,
):
    """Create a role (409 when the name is taken)."""
    role = await service.create_role(
        name=body.name,
        display_name=body.display_name,
        description=body.description,
        ctx=ctx,
    )
    return RoleResponse.model_validate(role)


@router.get("", response_model=Page[RoleResponse])
async def list_roles(
    service: ReadService,
    pagination: Annotated[Pagination, Depends()],
):
    """List roles with their permissions (paginated)."""
    roles, total = await service.list_roles(pagination.page, pagination.page_size)
    return Page[RoleResponse](
        items=[RoleResponse.model_validate(r) for r in roles],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: int, service: ReadService):
    """Get role with permissions."""
    return RoleResponse.model_validate(await service.get_role(role_id))


@router.put("/{role_id}", response_model=RoleResponse)
@limit_writes
async def update_role(
    request: Request,
    role_id: int,
    body: RoleUpdate,
    service: WriteService,
    ctx: Ctx,
):
    """Partial update (display_name, description, status)."""
    role = await service.update_role(role_id, body.model_dump(exclude_unset=True), ctx)
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", status_code=204)
@limit_writes
async def delete_role(
    request: Request,
    role_id: int,
    service: WriteService,
    ctx: Ctx,
) -> Response:
    """Soft-delete a role."""
    await service.delete_role(role_id, ctx)
    return Response(status_code=204)


@router.get("/{role_id}/permissions", response_model=list[PermissionResponse])
async def get_role_permissions(role_id: int, service: ReadService):
    permissions = await service.get_permissions(role_id)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.post("/{role_id}/permissions", response_model=list[PermissionResponse])
@limit_writes
async def assign_role_permissions(
    request: Request,
    role_id: int,
    body: PermissionIdsRequest,
    service: WriteService,
    ctx: Ctx,
):
    """Assign permissions (unknown ids ignored, existing assignments kept)."""
    permissions = await service.assign_permissions(role_id, body.permission_ids, ctx)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.delete("/{role_id}/permissions", response_model=list[PermissionResponse])
@limit_writes
async def remove_role_permissions(
    request: Request,
    role_id: int,
    body: PermissionIdsRequest,
    service: WriteService,
    ctx: Ctx,
):
    permissions = await service.remove_permissions(role_id, body.permission_ids, ctx)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.get("/{role_id}/users", response_model=list[UserSummary])
async def get_role_users(role_id: int, service: ReadService):
    users = await service.get_users(role_id)
    return [UserSummary.model_validate(u) for u in users]


@router.post("/{role_id}/users", response_model=list[UserSummary])
@limit_writes
async def assign_role_users(
    request: Request,
    role_id: int,
    body: UserIdsRequest,
    service: WriteService,
    ctx: Ctx,
):
    """Give the role to users (unknown ids ignored, existing assignments kept)."""
    users = await service.assign_users(role_id, body.user_ids, ctx)
    return [UserSummary.model_validate(u) for u in users]


@router.delete("/{role_id}/users", response_model=list[UserSummary])
@limit_writes
async def remove_role_users(
    request: Request,
    role_id: int,
    body: UserIdsRequest,
    service: WriteService,
    ctx: Ctx,
):
    users = await service.remove_users(role_id, body.user_ids, ctx)
    return [UserSummary.model_validate(u) for u in users]
