"""Auth API: password login returning a bearer token.

The token's subject is the user id; sending it as `Authorization: Bearer`
attributes subsequent writes to that user in the change history.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import get_auth_service
from app.application.services import AuthService
from app.core.limiter import limit_auth
from app.schemas.auth import LoginRequest, TokenResponse

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
@limit_auth
async def login(
    request: Request,
    body: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Authenticate with email and password; return JWT (401 on failure)."""
    token = await auth_service.login(body.email, body.password)
    return TokenResponse(access_token=token)
