"""Shared helpers for audit attribution: derive who and where from a Starlette Request."""

from __future__ import annotations

import ipaddress

from starlette.requests import Request

from app.shared.context import AuditContext

_BEARER_PREFIX = "bearer "


def resolve_client_ip(forwarded: str | None, peer: str | None) -> str:
    """Return the first X-Forwarded-For hop when it parses as an IP address, else the peer.

    Anything that is not a literal address (hostnames, junk, oversized values)
    is ignored so the stored address always fits the audit column.
    """
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        try:
            return str(ipaddress.ip_address(first_hop))
        except ValueError:
            pass
    return peer or ""


def get_client_ip(request: Request) -> str:
    """Return the client address: valid X-Forwarded-For first hop, else the peer host, else ""."""
    return resolve_client_ip(
        request.headers.get("X-Forwarded-For"),
        request.client.host if request.client else None,
    )


def get_acting_user_id(request: Request) -> int:
    """Return the user id from a valid Bearer token; 0 when absent or invalid.

    Tokens attribute writes only, so an unusable token makes the request
    anonymous rather than rejecting it.
    """
    from app.infrastructure.security.jwt import decode_user_id

    auth = request.headers.get("Authorization", "")
    if not auth.lower().startswith(_BEARER_PREFIX):
        return 0
    token = auth[len(_BEARER_PREFIX):].strip()
    if not token:
        return 0
    try:
        return decode_user_id(token)
    except ValueError:
        return 0


def build_audit_context(request: Request) -> AuditContext:
    """Return the AuditContext (acting user, client address) for a request."""
    return AuditContext(
        user_id=get_acting_user_id(request),
        ip_address=get_client_ip(request),
    )


def get_audit_action_from_method(method: str) -> str:
    """Map HTTP method to audit action."""
    return {
        "POST": "create",
        "PUT": "update",
        "PATCH": "update",
        "DELETE": "delete",
    }.get(method, method.lower())
