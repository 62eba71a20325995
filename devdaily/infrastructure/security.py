"""Password hashing and token generation."""

import secrets

import bcrypt

from devdaily.infrastructure.config import settings


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt at the configured cost."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash
        return False


def generate_token() -> str:
    return secrets.token_urlsafe(32)
