"""
Session Lifecycle Service

Updates and lists tutoring sessions. Status transitions are open: any status
may be set from any other, including leaving a terminal state. Leaving
completed/cancelled is logged as a warning but still applied.
"""
import logging
import uuid
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import SESSION_LIST_LIMIT
from app.errors import NotFoundError
from app.models import Peer, SessionStatus, Student, TERMINAL_STATUSES, TutoringSession
from app.models.timestamps import utcnow
from app.schemas import PeerOut, SessionOut, SessionUpdate, StudentOut
from app.services import storage

logger = logging.getLogger(__name__)


def transition_status(record: TutoringSession, new_status: SessionStatus) -> SessionStatus:
    """
    Set a session's status without any transition graph.

    Args:
        record: Session to change
        new_status: Target status

    Returns:
        The previous status
    """
    previous = SessionStatus(record.status)
    if previous in TERMINAL_STATUSES and new_status not in TERMINAL_STATUSES:
        logger.warning(
            f"Session {record.id} leaving terminal status: {previous.value} -> {new_status.value}"
        )

    record.status = new_status.value
    record.updated_at = utcnow()
    return previous


def session_view(
    record: TutoringSession,
    student: Optional[Student] = None,
    peer: Optional[Peer] = None,
) -> SessionOut:
    """Serialize a session with its (optional) student and peer."""
    view = SessionOut.model_validate(record)
    return view.model_copy(update={
        "student": StudentOut.model_validate(student) if student is not None else None,
        "peer": PeerOut.model_validate(peer) if peer is not None else None,
    })


async def populate_sessions(db: AsyncSession, records: List[TutoringSession]) -> List[SessionOut]:
    """Attach student and peer details to a batch of sessions."""
    related = await storage.find_students_and_peers_by_ids(
        db,
        student_ids=[r.student_id for r in records],
        peer_ids=[r.peer_id for r in records],
    )
    return [
        session_view(r, related["students"].get(r.student_id), related["peers"].get(r.peer_id))
        for r in records
    ]


async def list_sessions(db: AsyncSession, limit: Optional[int] = None) -> List[SessionOut]:
    """Most recently updated sessions first."""
    records = await storage.list_sessions(db, limit or SESSION_LIST_LIMIT)
    return await populate_sessions(db, records)


async def update_session(
    db: AsyncSession,
    session_id: uuid.UUID,
    changes: SessionUpdate,
    authorize: Optional[Callable[[TutoringSession], None]] = None,
) -> SessionOut:
    """
    Update a session's status and/or schedule details.

    Args:
        session_id: Session to update
        changes: Fields to change; omitted fields stay as they are
        authorize: Called with the loaded session before any change; raises
            to reject the caller

    Returns:
        Updated session with student and peer attached

    Raises:
        NotFoundError: If the session does not exist
        StorageFailureError: If the write fails
    """
    record = await storage.find_session_by_id(db, session_id)
    if record is None:
        raise NotFoundError("session", session_id, "update_session")

    if authorize is not None:
        authorize(record)

    fields = changes.model_dump(exclude_unset=True, exclude_none=True)
    new_status = fields.pop("status", None)
    if new_status is not None:
        previous = transition_status(record, SessionStatus(new_status))
        logger.info(f"Session {record.id} status {previous.value} -> {record.status}")

    fields["updated_at"] = utcnow()
    record = await storage.update_record(db, record, fields)

    views = await populate_sessions(db, [record])
    return views[0]
