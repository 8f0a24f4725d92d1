"""
Matching Service

Connects the scoring engine to storage:
- score a single (student, peer) pair
- rank candidate peers for one student
- create a session for a chosen peer
- run a bulk greedy match across students and peers, committing sessions

Every call recomputes scores from freshly loaded rows; nothing is cached.
"""
import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import BULK_MATCH_DEADLINE_SECONDS, CANDIDATE_LIMIT
from app.errors import EmptyCandidateSetError, InputValidationError, InsufficientInputError, NotFoundError
from app.models import Peer, SessionStatus, Student
from app.models.timestamps import utcnow
from app.schemas import AssignmentOut, CandidateOut, PeerOut, SessionOut, StudentOut
from app.services import storage
from app.services.bulk_matcher import BulkMatcher, BulkMatchOutcome, MatchEdge
from app.services.candidate_ranker import rank_candidates
from app.services.match_scorer import MatchScorer, ScoreResult, get_match_scorer
from app.services.session_service import session_view

logger = logging.getLogger(__name__)


class MatchingService:
    """Score, rank and commit student/peer matches"""

    def __init__(
        self,
        scorer: Optional[MatchScorer] = None,
        candidate_limit: int = CANDIDATE_LIMIT,
        bulk_deadline_seconds: float = BULK_MATCH_DEADLINE_SECONDS,
    ):
        self.scorer = scorer or get_match_scorer()
        self.bulk_matcher = BulkMatcher(self.scorer)
        self.candidate_limit = candidate_limit
        self.bulk_deadline_seconds = bulk_deadline_seconds
        # One bulk run at a time per process
        self._bulk_lock = asyncio.Lock()

    async def _require_student(self, db: AsyncSession, student_id: uuid.UUID, operation: str) -> Student:
        student = await storage.find_student_by_id(db, student_id)
        if student is None:
            raise NotFoundError("student", student_id, operation)
        return student

    async def _require_peer(
        self,
        db: AsyncSession,
        peer_id: uuid.UUID,
        operation: str,
        message: Optional[str] = None,
    ) -> Peer:
        peer = await storage.find_peer_by_id(db, peer_id)
        if peer is None:
            raise NotFoundError("peer", peer_id, operation, message=message)
        return peer

    async def score_pair(self, db: AsyncSession, student_id: uuid.UUID, peer_id: uuid.UUID) -> ScoreResult:
        """
        Compute the compatibility score for one student and one peer.

        Raises:
            NotFoundError: If either the student or the peer does not exist
        """
        student = await self._require_student(db, student_id, "compute_score")
        peer = await self._require_peer(db, peer_id, "compute_score")
        return self.scorer.score(student, peer)

    async def rank_candidates_for_student(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        limit: Optional[int] = None,
    ) -> List[CandidateOut]:
        """
        Rank every peer for a student and return the best few.

        Args:
            student_id: Student to find peers for
            limit: Number of candidates to return (defaults to CANDIDATE_LIMIT)

        Returns:
            Candidates best first, each with score and breakdown

        Raises:
            NotFoundError: If the student does not exist
            EmptyCandidateSetError: If there are no peers at all
            InputValidationError: If limit is below 1
        """
        if limit is not None and limit < 1:
            raise InputValidationError(
                "Candidate limit must be at least 1",
                {"field": "limit", "value": limit, "operation": "rank_candidates"},
            )

        student = await self._require_student(db, student_id, "rank_candidates")

        peers = await storage.find_peers(db)
        if not peers:
            raise EmptyCandidateSetError()

        ranked = rank_candidates(student, peers, limit=limit or self.candidate_limit, scorer=self.scorer)

        return [
            CandidateOut(
                peer=PeerOut.model_validate(candidate.peer),
                score=candidate.score,
                breakdown=candidate.result.breakdown,
            )
            for candidate in ranked
        ]

    async def create_matched_session(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        peer_id: uuid.UUID,
        topic: Optional[str] = None,
        scheduled_at: Optional[datetime] = None,
        remarks: Optional[str] = None,
    ) -> Tuple[SessionOut, ScoreResult]:
        """
        Commit a student to a chosen peer as a pending session.

        Topic defaults to the student's subject, then "General".

        Returns:
            Tuple of (created session, score of the pair)

        Raises:
            NotFoundError: "Student not found" / "Chosen peer not found"
            StorageFailureError: If the session cannot be saved
        """
        student = await self._require_student(db, student_id, "create_matched_session")
        peer = await self._require_peer(db, peer_id, "create_matched_session", message="Chosen peer not found")

        score = self.scorer.score(student, peer)

        record = await storage.create_session(
            db,
            student_id=student.id,
            peer_id=peer.id,
            topic=topic or student.subject or "General",
            scheduled_at=scheduled_at or utcnow(),
            status=SessionStatus.PENDING.value,
            remarks=remarks or "",
        )

        logger.info(
            f"Session {record.id} created: student={student.id} peer={peer.id} score={score.total}"
        )

        return session_view(record, student, peer), score

    async def run_bulk_match(
        self,
        db: AsyncSession,
        student_ids: Optional[Sequence[uuid.UUID]] = None,
        peer_ids: Optional[Sequence[uuid.UUID]] = None,
    ) -> Dict[str, Any]:
        """
        Greedily pair students with peers and save a matched session per pair.

        Args:
            student_ids: Restrict to these students (None or empty = all)
            peer_ids: Restrict to these peers (None or empty = all)

        Returns:
            dict: {
                "created": [AssignmentOut, ...],
                "total_created": int,
                "failed": int,
                "edges_considered": int,
                "duration_ms": float
            }

        Raises:
            InsufficientInputError: If no students or no peers are selected
            MatchDeadlineExceeded: If scoring runs past the deadline
        """
        async with self._bulk_lock:
            start_time = time.time()

            students = await storage.find_students(db, student_ids)
            peers = await storage.find_peers(db, peer_ids)
            if not students or not peers:
                raise InsufficientInputError(len(students), len(peers))

            deadline = None
            if self.bulk_deadline_seconds > 0:
                deadline = time.monotonic() + self.bulk_deadline_seconds

            edges = self.bulk_matcher.plan(students, peers, deadline=deadline)

            # Serialize up front: a failed commit rolls back and expires the ORM rows
            student_views = {s.id: StudentOut.model_validate(s) for s in students}
            peer_views = {p.id: PeerOut.model_validate(p) for p in peers}

            async def commit(edge: MatchEdge) -> AssignmentOut:
                record = await storage.create_session(
                    db,
                    student_id=edge.student_id,
                    peer_id=edge.peer_id,
                    topic="General",
                    scheduled_at=utcnow(),
                    status=SessionStatus.MATCHED.value,
                    remarks=f"auto-match (score {edge.score:g})",
                )
                session = session_view(record).model_copy(update={
                    "student": student_views[edge.student_id],
                    "peer": peer_views[edge.peer_id],
                })
                return AssignmentOut(session=session, score=edge.score, breakdown=edge.breakdown)

            outcome: BulkMatchOutcome = await self.bulk_matcher.commit_assignments(edges, commit)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                f"Bulk match complete: {len(students)} students, {len(peers)} peers, "
                f"{outcome.edges_considered} edges, {outcome.total_created} created, "
                f"{outcome.failed} failed, {duration_ms:.2f}ms"
            )

            return {
                "created": outcome.created,
                "total_created": outcome.total_created,
                "failed": outcome.failed,
                "edges_considered": outcome.edges_considered,
                "duration_ms": round(duration_ms, 2),
            }


# Singleton instance
_matching_service_instance: Optional[MatchingService] = None


def get_matching_service() -> MatchingService:
    """Get singleton instance of MatchingService"""
    global _matching_service_instance
    if _matching_service_instance is None:
        _matching_service_instance = MatchingService()
    return _matching_service_instance
