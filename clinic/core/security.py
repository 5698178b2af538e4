"""
Credential primitives for patients, doctors and the configured admin.

Passwords are stored as salted ``pbkdf2_sha256`` hashes. Sessions are HS256
tokens with an absolute expiry and no refresh; ``iat`` and ``exp`` are added
here so every issuer gets the same lifetime handling.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt
from passlib.context import CryptContext

SESSION_TOKEN_ALGORITHM = "HS256"

_passwords = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return _passwords.hash(password)


def verify_password(password: str, stored_hash: str | None) -> bool:
    """False for a wrong password and for rows whose hash is empty or unreadable."""
    if not stored_hash:
        return False
    try:
        return _passwords.verify(password, stored_hash)
    except ValueError:
        return False


def encode_session_token(claims: dict[str, Any], *, secret: str, ttl: timedelta) -> str:
    issued_at = datetime.now(timezone.utc)
    body = dict(claims)
    body["iat"] = int(issued_at.timestamp())
    body["exp"] = int((issued_at + ttl).timestamp())
    return jwt.encode(body, secret, algorithm=SESSION_TOKEN_ALGORITHM)


def decode_session_token(token: str, *, secret: str) -> dict[str, Any]:
    """Verify signature and expiry; raises ``jose.JWTError`` otherwise."""
    return jwt.decode(token, secret, algorithms=[SESSION_TOKEN_ALGORITHM])
