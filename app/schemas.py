"""Pydantic schemas shared by the matching services and API routes"""
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.session import SessionStatus
from app.services.match_scorer import ScoreBreakdown


class StudentBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    subject: str = Field(..., min_length=1, max_length=100)
    range_budget: float = Field(..., description="Maximum the student is willing to pay")
    rating: float = 1
    experience: float = Field(1, description="Years of experience in the subject")


class StudentCreate(StudentBase):
    """Request body for registering a student"""


class StudentUpdate(BaseModel):
    """Partial update; omitted fields stay unchanged"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    subject: Optional[str] = Field(None, min_length=1, max_length=100)
    range_budget: Optional[float] = None
    rating: Optional[float] = None
    experience: Optional[float] = None


class StudentOut(StudentBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class PeerBase(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    domain: Optional[str] = Field(None, max_length=100)
    experience: float = 0
    rating: float = 0
    charges: float = 3000


class PeerCreate(PeerBase):
    """Request body for registering a peer tutor"""


class PeerUpdate(BaseModel):
    """Partial update; omitted fields stay unchanged"""
    name: Optional[str] = Field(None, max_length=200)
    domain: Optional[str] = Field(None, max_length=100)
    experience: Optional[float] = None
    rating: Optional[float] = None
    charges: Optional[float] = None


class PeerOut(PeerBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class SessionOut(BaseModel):
    """Session with the referenced student and peer, when they still exist"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    student_id: uuid.UUID
    peer_id: uuid.UUID
    topic: str
    scheduled_at: datetime
    status: SessionStatus
    remarks: str
    created_at: datetime
    updated_at: datetime
    student: Optional[StudentOut] = None
    peer: Optional[PeerOut] = None


class SessionUpdate(BaseModel):
    """Fields a session update may change; status transitions are unrestricted"""
    status: Optional[SessionStatus] = None
    scheduled_at: Optional[datetime] = None
    remarks: Optional[str] = None
    topic: Optional[str] = Field(None, max_length=200)


class CandidateOut(BaseModel):
    peer: PeerOut
    score: float = Field(..., ge=0, le=1)
    breakdown: ScoreBreakdown


class AssignmentOut(BaseModel):
    """One session committed by a bulk run"""
    session: SessionOut
    score: float = Field(..., ge=0, le=1)
    breakdown: ScoreBreakdown
