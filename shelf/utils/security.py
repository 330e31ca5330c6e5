"""Security utilities: JWT session tokens, download token checks."""

import hmac
from datetime import datetime, timedelta, timezone

import jwt

from shelf.config import settings


# --- JWT Tokens ---

def create_access_token(user_id: str, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": user_id,
        "role": role,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a session token. Raises jwt.PyJWTError on failure."""
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != "access" or not payload.get("role"):
        raise jwt.InvalidTokenError("not a session token")
    return payload


# --- Download Token ---

def valid_download_token(token: str | None) -> bool:
    if not token or not settings.download_token:
        return False
    return hmac.compare_digest(token.encode(), settings.download_token.encode())
