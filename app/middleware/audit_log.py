"""API audit log middleware.

Writes one line per mutating request (POST/PUT/PATCH/DELETE) to the
app.audit logger: acting user, client address, method, path, status and
request id. This is the request-level trail; the field-level change history
lives in the audit_logs table. Never alters the response.
"""

from __future__ import annotations

import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.shared.request_audit import (
    get_acting_user_id,
    get_audit_action_from_method,
    get_client_ip,
)
from app.shared.telemetry.logging import AUDIT_LOGGER_NAME

audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
logger = logging.getLogger(__name__)

_MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def AuditLogMiddleware(app: Callable) -> Callable:
    """Log mutating requests to the audit logger."""

    class _Middleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next: Callable) -> Response:
            response = await call_next(request)
            if request.method not in _MUTATING_METHODS:
                return response
            try:
                audit_logger.info(
                    "%s %s %s status=%d user_id=%d ip=%s request_id=%s",
                    get_audit_action_from_method(request.method),
                    request.method,
                    request.url.path,
                    response.status_code,
                    get_acting_user_id(request),
                    get_client_ip(request),
                    getattr(request.state, "request_id", ""),
                )
            except Exception as e:
                logger.warning("Failed to write audit log line: %s", e, exc_info=True)
            return response

    return _Middleware(app)
