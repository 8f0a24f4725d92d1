"""
Authentication for Session Updates

Bearer JWT (HS256) authentication guarding session status changes.
Two roles are recognised:
- admin: may update any session
- peer: may update only sessions assigned to the peer named in the token subject
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict

from app.config import AUTH_ALGORITHM, AUTH_SECRET, AUTH_TOKEN_TTL_MINUTES
from app.errors import ForbiddenError
from app.models import TutoringSession

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)

ROLE_ADMIN = "admin"
ROLE_PEER = "peer"
ROLES = {ROLE_ADMIN, ROLE_PEER}


class Principal(BaseModel):
    """Authenticated caller"""
    model_config = ConfigDict(frozen=True)

    subject: str
    role: str


def create_access_token(subject: str, role: str, expires_minutes: int = AUTH_TOKEN_TTL_MINUTES) -> str:
    """
    Issue a signed token.

    Args:
        subject: Peer id for peer tokens, any operator name for admin tokens
        role: "admin" or "peer"
        expires_minutes: Token lifetime

    Raises:
        ValueError: If role is unknown
    """
    if role not in ROLES:
        raise ValueError(f"Invalid role: {role}. Must be one of: {sorted(ROLES)}")

    payload = {
        "sub": str(subject),
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, AUTH_SECRET, algorithm=AUTH_ALGORITHM)


def _unauthorized(code: str, message: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": details
            }
        },
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_access_token(token: str) -> Principal:
    """
    Verify a bearer token and extract the caller.

    Raises:
        HTTPException: 401 if the token is expired, tampered with or malformed
    """
    try:
        payload = jwt.decode(token, AUTH_SECRET, algorithms=[AUTH_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("AUTH_002", "Invalid or expired token", "The provided token has expired")
    except jwt.InvalidTokenError:
        logger.warning("Invalid token attempt")
        raise _unauthorized("AUTH_002", "Invalid or expired token", "The provided token is not valid")

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or role not in ROLES:
        raise _unauthorized("AUTH_003", "Invalid token claims", "Token must carry a subject and a known role")

    return Principal(subject=subject, role=role)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """FastAPI dependency resolving the bearer token into a Principal."""
    if credentials is None:
        raise _unauthorized("AUTH_001", "Authorization header missing", "Please provide a valid bearer token")
    return decode_access_token(credentials.credentials)


def ensure_can_update_session(principal: Principal, record: TutoringSession) -> None:
    """
    Reject callers who may not change this session.

    Raises:
        ForbiddenError: If a peer token targets another peer's session
    """
    if principal.role == ROLE_ADMIN:
        return
    if principal.role == ROLE_PEER and principal.subject == str(record.peer_id):
        return

    logger.warning(f"Forbidden session update: {principal.role}:{principal.subject} on session {record.id}")
    raise ForbiddenError(
        "Not allowed to update this session",
        {"entity": "session", "id": str(record.id), "operation": "update_session"},
    )
