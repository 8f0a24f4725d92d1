"""
Matching API Endpoints

POST /api/v1/match/score - Score one student/peer pair
POST /api/v1/match/candidates - Top ranked peers for a student
POST /api/v1/match/sessions - Create a pending session for a chosen peer
POST /api/v1/match/bulk - Greedy bulk match, creating matched sessions
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import no_store
from app.database import get_db
from app.schemas import AssignmentOut, CandidateOut, SessionOut
from app.services.match_scorer import ScoreResult
from app.services.matching_service import get_matching_service

router = APIRouter(prefix="/api/v1/match", tags=["matching"], dependencies=[Depends(no_store)])


# Request/Response models


class ScoreRequest(BaseModel):
    """Request model for scoring a pair"""
    student_id: uuid.UUID
    peer_id: uuid.UUID


class CandidatesRequest(BaseModel):
    """Request model for ranking candidates"""
    student_id: uuid.UUID
    limit: Optional[int] = Field(None, ge=1, le=100, description="Number of candidates (default 3)")


class CreateSessionRequest(BaseModel):
    """Request model for committing a student to a chosen peer"""
    student_id: uuid.UUID
    peer_id: uuid.UUID
    topic: Optional[str] = Field(None, max_length=200)
    scheduled_at: Optional[datetime] = None
    remarks: Optional[str] = None


class BulkMatchRequest(BaseModel):
    """Request model for bulk matching; empty lists mean everyone"""
    student_ids: List[uuid.UUID] = Field(default_factory=list)
    peer_ids: List[uuid.UUID] = Field(default_factory=list)


class ScoreResponse(BaseModel):
    data: ScoreResult
    metadata: Dict[str, Any]


class CandidatesData(BaseModel):
    student_id: uuid.UUID
    candidates: List[CandidateOut]


class CandidatesResponse(BaseModel):
    data: CandidatesData
    metadata: Dict[str, Any]


class CreatedSessionData(BaseModel):
    session: SessionOut
    score: ScoreResult


class CreatedSessionResponse(BaseModel):
    data: CreatedSessionData
    metadata: Dict[str, Any]


class BulkMatchSummary(BaseModel):
    total_created: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    edges_considered: int = Field(..., ge=0)
    duration_ms: float


class BulkMatchData(BaseModel):
    created: List[AssignmentOut]
    summary: BulkMatchSummary


class BulkMatchResponse(BaseModel):
    data: BulkMatchData
    metadata: Dict[str, Any]


def _metadata() -> Dict[str, Any]:
    return {"timestamp": datetime.now(timezone.utc).isoformat()}


# API Endpoints


@router.post("/score", response_model=ScoreResponse)
async def compute_score(request: ScoreRequest, db: AsyncSession = Depends(get_db)):
    """
    Score one student/peer pair.

    Returns total (0-1) and the domain, budget, rating and experience
    components.

    Raises:
        404: If the student or the peer does not exist
    """
    result = await get_matching_service().score_pair(db, request.student_id, request.peer_id)
    return ScoreResponse(data=result, metadata=_metadata())


@router.post("/candidates", response_model=CandidatesResponse)
async def rank_candidates(request: CandidatesRequest, db: AsyncSession = Depends(get_db)):
    """
    Rank peers for a student (top 3 by default).

    Ties on score go to the cheaper peer, then the higher rated, then the more
    experienced. Nothing is written.

    Raises:
        404: If the student does not exist or no peers exist
    """
    candidates = await get_matching_service().rank_candidates_for_student(
        db, request.student_id, limit=request.limit
    )
    return CandidatesResponse(
        data=CandidatesData(student_id=request.student_id, candidates=candidates),
        metadata={**_metadata(), "count": len(candidates)},
    )


@router.post("/sessions", response_model=CreatedSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_matched_session(request: CreateSessionRequest, db: AsyncSession = Depends(get_db)):
    """
    Create a pending session between a student and the chosen peer.

    Raises:
        404: "Student not found" or "Chosen peer not found"
        503: If the session cannot be saved
    """
    session, score = await get_matching_service().create_matched_session(
        db,
        request.student_id,
        request.peer_id,
        topic=request.topic,
        scheduled_at=request.scheduled_at,
        remarks=request.remarks,
    )
    return CreatedSessionResponse(
        data=CreatedSessionData(session=session, score=score),
        metadata=_metadata(),
    )


@router.post("/bulk", response_model=BulkMatchResponse)
async def run_bulk_match(request: Optional[BulkMatchRequest] = None, db: AsyncSession = Depends(get_db)):
    """
    Greedy bulk match across students and peers.

    Each student and each peer receives at most one new "matched" session per
    run. Sessions that fail to save are skipped and counted in summary.failed.

    Raises:
        400: If no students or no peers are selected
        503: If scoring exceeds the configured deadline
    """
    request = request or BulkMatchRequest()
    result = await get_matching_service().run_bulk_match(
        db,
        student_ids=request.student_ids,
        peer_ids=request.peer_ids,
    )
    return BulkMatchResponse(
        data=BulkMatchData(
            created=result["created"],
            summary=BulkMatchSummary(
                total_created=result["total_created"],
                failed=result["failed"],
                edges_considered=result["edges_considered"],
                duration_ms=result["duration_ms"],
            ),
        ),
        metadata=_metadata(),
    )
