"""SQLAlchemy ORM Models for the peer matching schema"""
from app.models.student import Student
from app.models.peer import Peer
from app.models.session import TutoringSession, SessionStatus, TERMINAL_STATUSES

__all__ = [
    "Student",
    "Peer",
    "TutoringSession",
    "SessionStatus",
    "TERMINAL_STATUSES",
]
