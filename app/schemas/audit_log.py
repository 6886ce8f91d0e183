"""Request/response schemas for audit log API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuditLogEntryResponse(BaseModel):
    """Single audit log entry (read). old_values/new_values are JSON text ("" when absent)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    table_name: str
    record_id: int
    action: str
    old_values: str
    new_values: str
    user_id: int
    ip: str
