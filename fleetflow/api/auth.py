"""
Authentication collaborator.

Tokens are HS256 JWTs issued by the identity service; this module only
validates them and turns the payload into a ``Principal``.  No
authorization decisions are made here or anywhere in the core.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from fleetflow.config import settings
from fleetflow.domain.entities import Principal

security = HTTPBearer(auto_error=False)


def create_access_token(
    data: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed access token.

    ``data`` should carry ``sub`` and ``user_id`` (and optionally ``role``).
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token payload, or None if the token is invalid or expired."""
    try:
        return jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """FastAPI dependency: every exposed operation requires a caller identity."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    user_id = payload.get("user_id")
    subject = payload.get("sub")
    if user_id is None or not subject:
        raise _unauthorized("Invalid token payload")

    try:
        return Principal(
            user_id=int(user_id), subject=str(subject), role=payload.get("role")
        )
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload") from None
