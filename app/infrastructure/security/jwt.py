"""Access tokens for acting-user attribution.

A token's subject is the user id. Tokens do not grant anything: they only
tell the service who performed a write so the change history can name them.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import get_settings


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Return a signed JWT whose subject is user_id.

    Args:
        user_id: Id of the authenticated user.
        expires_delta: Optional TTL; else settings.access_token_expire_minutes.
    """
    settings = get_settings()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "exp": datetime.now(UTC) + ttl,
    }
    return cast(
        str,
        jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm),
    )


def decode_user_id(token: str) -> int:
    """Verify a JWT and return its subject as a user id.

    Raises:
        ValueError: If the token is invalid, expired, or its subject is not a positive id.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError("Token subject is not a user id") from e
    if user_id <= 0:
        raise ValueError("Token subject is not a user id")
    return user_id
