"""Audit log API: read-only access to the change history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import Pagination, get_audit_log_service
from app.application.services import AuditLogService
from app.schemas.audit_log import AuditLogEntryResponse
from app.schemas.common import Page
from app.shared.enums import AuditAction

router = APIRouter()

Service = Annotated[AuditLogService, Depends(get_audit_log_service)]


@router.get("", response_model=Page[AuditLogEntryResponse])
async def list_audit_logs(
    service: Service,
    pagination: Annotated[Pagination, Depends()],
    table_name: str | None = None,
    record_id: Annotated[int | None, Query(ge=1)] = None,
    action: AuditAction | None = None,
    user_id: Annotated[int | None, Query(ge=0)] = None,
):
    """List change-history entries, newest first, with optional filters."""
    entries, total = await service.list_entries(
        pagination.page,
        pagination.page_size,
        table_name=table_name,
        record_id=record_id,
        action=action.value if action else None,
        user_id=user_id,
    )
    return Page[AuditLogEntryResponse](
        items=[AuditLogEntryResponse.model_validate(e) for e in entries],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/{entry_id}", response_model=AuditLogEntryResponse)
async def get_audit_log(entry_id: int, service: Service):
    return AuditLogEntryResponse.model_validate(await service.get_entry(entry_id))
