"""HTTP middleware: request ID, request logging, audit log.

Applied in main app; order matters (last added = outermost).
Import and use from app.main.
"""

from app.middleware.audit_log import AuditLogMiddleware
from app.middleware.request_id import RequestIDMiddleware
from app.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "AuditLogMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
]
