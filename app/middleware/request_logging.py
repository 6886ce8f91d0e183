"""Request logging middleware.

One line per HTTP request on logger app.request: method, path, status,
latency, client address and request id. 5xx is logged at ERROR, 4xx at
WARNING, everything else at INFO. Raw ASGI.
"""

import logging
import time
from typing import Callable

from app.middleware.request_id import get_header
from app.shared.request_audit import resolve_client_ip

logger = logging.getLogger("app.request")


def _client_ip(scope: dict) -> str:
    client = scope.get("client")
    return resolve_client_ip(get_header(scope, "X-Forwarded-For"), client[0] if client else None)


def RequestLoggingMiddleware(app: Callable) -> Callable:
    """Wrap an ASGI app with per-request access logging."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        started = time.perf_counter()
        status_code = 500

        async def send_capturing_status(message: dict) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await app(scope, receive, send_capturing_status)
        finally:
            latency_ms = (time.perf_counter() - started) * 1000
            if status_code >= 500:
                level = logging.ERROR
            elif status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            logger.log(
                level,
                "%s %s %d %.1fms ip=%s request_id=%s",
                scope.get("method", ""),
                scope.get("path", ""),
                status_code,
                latency_ms,
                _client_ip(scope),
                scope.get("state", {}).get("request_id", ""),
                extra={
                    "method": scope.get("method", ""),
                    "path": scope.get("path", ""),
                    "status": status_code,
                    "latency_ms": round(latency_ms, 1),
                },
            )

    return asgi_app
