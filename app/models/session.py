"""Session model - Scheduled tutoring sessions between a student and a peer"""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, CheckConstraint, Index, Uuid
from sqlalchemy.sql import func

from app.database import Base
from app.models.timestamps import utcnow


class SessionStatus(str, enum.Enum):
    """Session lifecycle states.

    pending: created interactively from a chosen candidate
    matched: created by the bulk matcher
    active, completed, cancelled: set later through session updates
    """

    PENDING = "pending"
    MATCHED = "matched"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED})


class TutoringSession(Base):
    """Durable record of a student/peer pairing.

    Student and peer are referenced by id only; they are validated when the
    session is created and may outlive (or be deleted before) the session.
    """

    __tablename__ = "sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, nullable=False)
    peer_id = Column(Uuid, nullable=False)
    topic = Column(String(200), nullable=False, default="General")
    scheduled_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    status = Column(String(20), nullable=False, default=SessionStatus.PENDING.value)
    remarks = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    # Indexes for performance
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'matched', 'active', 'completed', 'cancelled')",
            name="sessions_status_check",
        ),
        Index("idx_sessions_updated_at", "updated_at"),
        Index("idx_sessions_student", "student_id"),
        Index("idx_sessions_peer", "peer_id"),
    )

    def __repr__(self):
        return f"<TutoringSession(id={self.id}, student={self.student_id}, peer={self.peer_id}, status={self.status})>"
