"""
Storage Access

Async queries and writes for students, peers and sessions. Every database
error is logged, rolled back and re-raised as StorageFailureError naming the
operation, so callers never see raw SQLAlchemy exceptions.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import StorageFailureError
from app.models import Peer, Student, TutoringSession

logger = logging.getLogger(__name__)

Record = TypeVar("Record", Student, Peer, TutoringSession)


@asynccontextmanager
async def storage_operation(db: AsyncSession, operation: str, entity: Optional[str] = None):
    """Translate database errors into StorageFailureError after a rollback."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Storage failure in {operation}: {e}", exc_info=True)
        await db.rollback()
        raise StorageFailureError(operation, entity) from e


# Lookups


async def find_by_id(db: AsyncSession, model: Type[Record], record_id: uuid.UUID) -> Optional[Record]:
    async with storage_operation(db, f"find_{model.__tablename__}_by_id", model.__tablename__):
        return await db.get(model, record_id)


async def find_student_by_id(db: AsyncSession, student_id: uuid.UUID) -> Optional[Student]:
    return await find_by_id(db, Student, student_id)


async def find_peer_by_id(db: AsyncSession, peer_id: uuid.UUID) -> Optional[Peer]:
    return await find_by_id(db, Peer, peer_id)


async def find_session_by_id(db: AsyncSession, session_id: uuid.UUID) -> Optional[TutoringSession]:
    return await find_by_id(db, TutoringSession, session_id)


async def find_students(db: AsyncSession, ids: Optional[Iterable[uuid.UUID]] = None) -> List[Student]:
    """
    Fetch students in a stable order (oldest first, then id).

    Args:
        ids: Restrict to these ids; unknown ids are ignored. None or empty
            means all students.
    """
    stmt = select(Student).order_by(Student.created_at.asc(), Student.id.asc())
    ids = list(ids or [])
    if ids:
        stmt = stmt.where(Student.id.in_(ids))

    async with storage_operation(db, "find_students", "student"):
        result = await db.execute(stmt)
        return list(result.scalars().all())


async def find_peers(
    db: AsyncSession,
    ids: Optional[Iterable[uuid.UUID]] = None,
    domain: Optional[str] = None,
) -> List[Peer]:
    """
    Fetch peers in a stable order (oldest first, then id).

    Args:
        ids: Restrict to these ids; unknown ids are ignored
        domain: Case-insensitive domain filter
    """
    stmt = select(Peer).order_by(Peer.created_at.asc(), Peer.id.asc())
    ids = list(ids or [])
    if ids:
        stmt = stmt.where(Peer.id.in_(ids))
    if domain:
        stmt = stmt.where(func.lower(Peer.domain) == domain.lower())

    async with storage_operation(db, "find_peers", "peer"):
        result = await db.execute(stmt)
        return list(result.scalars().all())


async def list_recent(
    db: AsyncSession,
    model: Type[Record],
    limit: int,
    domain: Optional[str] = None,
) -> List[Record]:
    """Newest records first, for listing endpoints."""
    stmt = select(model).order_by(model.created_at.desc(), model.id.desc()).limit(limit)
    if domain and model is Peer:
        stmt = stmt.where(func.lower(Peer.domain) == domain.lower())

    async with storage_operation(db, f"list_{model.__tablename__}", model.__tablename__):
        result = await db.execute(stmt)
        return list(result.scalars().all())


async def list_sessions(db: AsyncSession, limit: int) -> List[TutoringSession]:
    """Sessions ordered by most recently updated."""
    stmt = (
        select(TutoringSession)
        .order_by(TutoringSession.updated_at.desc(), TutoringSession.id.desc())
        .limit(limit)
    )
    async with storage_operation(db, "list_sessions", "session"):
        result = await db.execute(stmt)
        return list(result.scalars().all())


async def find_students_and_peers_by_ids(
    db: AsyncSession,
    student_ids: Iterable[uuid.UUID],
    peer_ids: Iterable[uuid.UUID],
) -> Dict[str, Dict[uuid.UUID, Any]]:
    """Load the students and peers referenced by a batch of sessions."""
    student_ids = set(student_ids)
    peer_ids = set(peer_ids)
    students: Dict[uuid.UUID, Student] = {}
    peers: Dict[uuid.UUID, Peer] = {}

    async with storage_operation(db, "populate_sessions"):
        if student_ids:
            result = await db.execute(select(Student).where(Student.id.in_(student_ids)))
            students = {s.id: s for s in result.scalars().all()}
        if peer_ids:
            result = await db.execute(select(Peer).where(Peer.id.in_(peer_ids)))
            peers = {p.id: p for p in result.scalars().all()}

    return {"students": students, "peers": peers}


# Writes


async def create_record(db: AsyncSession, record: Record) -> Record:
    """
    Insert and commit a record.

    Column defaults are Python-side and sessions keep attributes after
    commit, so the record is complete without a reload. A StorageFailureError
    here always means nothing was written.
    """
    async with storage_operation(db, f"create_{record.__tablename__}", record.__tablename__):
        db.add(record)
        await db.commit()
    return record


async def update_record(db: AsyncSession, record: Record, changes: Dict[str, Any]) -> Record:
    """Apply field changes and commit."""
    async with storage_operation(db, f"update_{record.__tablename__}", record.__tablename__):
        for name, value in changes.items():
            setattr(record, name, value)
        await db.commit()
    return record


async def delete_record(db: AsyncSession, record: Record) -> None:
    async with storage_operation(db, f"delete_{record.__tablename__}", record.__tablename__):
        await db.delete(record)
        await db.commit()


async def create_session(db: AsyncSession, **fields: Any) -> TutoringSession:
    """Persist a new tutoring session."""
    return await create_record(db, TutoringSession(**fields))
