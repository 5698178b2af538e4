from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from clinic.core.config import Settings
from clinic.core.errors import Forbidden, Unauthorized
from clinic.core.security import decode_session_token

bearer = HTTPBearer(auto_error=False)

DOCTOR_ONLY_MESSAGE = "Access denied. Doctor authentication required."


@dataclass(frozen=True)
class Principal:
    id: int
    email: str
    role: str
    name: str | None = None
    department: str | None = None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _principal_from_claims(claims: dict) -> Principal:
    try:
        principal_id = int(claims.get("id", claims.get("sub")))
    except (TypeError, ValueError) as exc:
        raise Forbidden() from exc
    role = str(claims.get("role") or "").strip()
    if not role:
        raise Forbidden()
    return Principal(
        id=principal_id,
        email=str(claims.get("email") or ""),
        role=role,
        name=claims.get("name"),
        department=claims.get("department"),
    )


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> Principal:
    if not creds or not creds.credentials:
        raise Unauthorized()
    try:
        claims = decode_session_token(creds.credentials, secret=settings.JWT_SECRET)
    except JWTError as exc:
        raise Forbidden() from exc
    principal = _principal_from_claims(claims)
    request.state.principal = principal
    return principal


def require_role(*roles: str, message: str = "Access denied"):
    def _inner(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise Forbidden(message)
        return principal
    return _inner
