"""
Session API Endpoints

GET /api/v1/sessions - Sessions, most recently updated first
PATCH /api/v1/sessions/{session_id} - Update status, schedule, topic or remarks
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import Principal, ensure_can_update_session, get_current_principal
from app.api.dependencies import no_store
from app.config import SESSION_LIST_LIMIT
from app.database import get_db
from app.schemas import SessionOut, SessionUpdate
from app.services import session_service

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"], dependencies=[Depends(no_store)])


class SessionListResponse(BaseModel):
    data: List[SessionOut]
    metadata: Dict[str, Any]


class SessionResponse(BaseModel):
    data: SessionOut
    metadata: Dict[str, Any]


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    limit: int = Query(SESSION_LIST_LIMIT, ge=1, le=SESSION_LIST_LIMIT),
    db: AsyncSession = Depends(get_db),
):
    """List sessions with student and peer details, newest update first."""
    sessions = await session_service.list_sessions(db, limit=limit)
    return SessionListResponse(
        data=sessions,
        metadata={"timestamp": datetime.now(timezone.utc).isoformat(), "count": len(sessions)},
    )


@router.patch("/{session_id}", response_model=SessionResponse)
async def update_session(
    changes: SessionUpdate,
    session_id: uuid.UUID = Path(..., description="Session UUID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a session. Any status may be set from any other status.

    Requires a bearer token: admins may update any session, peers only their
    own.

    Raises:
        401: Missing or invalid token
        403: Peer token for another peer's session
        404: If the session does not exist
    """
    session = await session_service.update_session(
        db,
        session_id,
        changes,
        authorize=lambda record: ensure_can_update_session(principal, record),
    )
    return SessionResponse(
        data=session,
        metadata={"timestamp": datetime.now(timezone.utc).isoformat()},
    )
