"""Permissions API: CRUD and lookup by resource/action."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    Pagination,
    get_audit_context,
    get_permission_service,
    get_permission_service_for_write,
)
from app.application.services import PermissionService
from app.core.limiter import limit_writes
from app.schemas.common import Page
from app.schemas.permission import PermissionCreate, PermissionResponse, PermissionUpdate
from app.shared.context import AuditContext

router = APIRouter()

ReadService = Annotated[PermissionService, Depends(get_permission_service)]
WriteService = Annotated[PermissionService, Depends(get_permission_service_for_write)]
Ctx = Annotated[AuditContext, Depends(get_audit_context)]


@router.post("", response_model=PermissionResponse, status_code=201)
@limit_writes
async def create_permission(
    request: Request,
    body: PermissionCreate,
    service: WriteService,
    ctx: Ctx,
):
    """Create a permission (409 when the name is taken)."""
    permission = await service.create_permission(
        name=body.name,
        display_name=body.display_name,
        description=body.description,
        resource=body.resource,
        action=body.action,
        ctx=ctx,
    )
    return PermissionResponse.model_validate(permission)


@router.get("", response_model=Page[PermissionResponse])
async def list_permissions(
    service: ReadService,
    pagination: Annotated[Pagination, Depends()],
):
    permissions, total = await service.list_permissions(pagination.page, pagination.page_size)
    return Page[PermissionResponse](
        items=[PermissionResponse.model_validate(p) for p in permissions],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


# Declared before /{permission_id} so "lookup" is not parsed as an id.
@router.get("/lookup", response_model=PermissionResponse)
async def lookup_permission(
    service: ReadService,
    resource: Annotated[str, Query(min_length=1)],
    action: Annotated[str, Query(min_length=1)],
):
    """Find a permission by resource and action."""
    return PermissionResponse.model_validate(
        await service.find_by_resource_action(resource, action)
    )


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(permission_id: int, service: ReadService):
    return PermissionResponse.model_validate(await service.get_permission(permission_id))


@router.put("/{permission_id}", response_model=PermissionResponse)
@limit_writes
async def update_permission(
    request: Request,
    permission_id: int,
    body: PermissionUpdate,
    service: WriteService,
    ctx: Ctx,
):
    """Partial update (display_name, description, status)."""
    permission = await service.update_permission(
        permission_id, body.model_dump(exclude_unset=True), ctx
    )
    return PermissionResponse.model_validate(permission)


@router.delete("/{permission_id}", status_code=204)
@limit_writes
async def delete_permission(
    request: Request,
    permission_id: int,
    service: WriteService,
    ctx: Ctx,
) -> Response:
    """Soft-delete a permission."""
    await service.delete_permission(permission_id, ctx)
    return Response(status_code=204)
