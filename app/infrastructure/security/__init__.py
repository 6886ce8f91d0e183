"""Security: access tokens and password hashing."""

from app.infrastructure.security.jwt import create_access_token, decode_user_id
from app.infrastructure.security.password import hash_password, verify_password

__all__ = [
    "create_access_token",
    "decode_user_id",
    "hash_password",
    "verify_password",
]
