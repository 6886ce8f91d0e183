"""Password hashing for user accounts (bcrypt over a SHA-256 digest).

bcrypt only looks at the first 72 bytes of its input, so the password is
first reduced to a base64 SHA-256 digest (44 bytes) and that digest is what
bcrypt hashes. Hashes are stored in users.password and never leave the
service (responses and audit snapshots both omit the column).
"""

import base64
import hashlib

import bcrypt

BCRYPT_ROUNDS = 12


def _digest(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return the bcrypt hash to store for a plain-text password."""
    return bcrypt.hashpw(_digest(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, stored_hash: str) -> bool:
    """Return True if password matches stored_hash; malformed hashes never match."""
    try:
        return bool(bcrypt.checkpw(_digest(password), stored_hash.encode("utf-8")))
    except (ValueError, TypeError):
        return False
