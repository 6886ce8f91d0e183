"""Auth application service: password login issuing access tokens."""

from __future__ import annotations

from typing import Any

from app.domain.exceptions import AuthenticationException
from app.infrastructure.security.jwt import create_access_token
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class AuthService:
    """Exchange email and password for a bearer token."""

    def __init__(self, user_repo: Any) -> None:
        self._user_repo = user_repo

    async def login(self, email: str, password: str) -> str:
        """Return an access token. Raises AuthenticationException on bad credentials or disabled user."""
        user = await self._user_repo.authenticate(email, password)
        if user is None:
            logger.info("Failed login attempt")
            raise AuthenticationException("Invalid email or password")
        return create_access_token(user.id)
