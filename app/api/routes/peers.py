"""
Peer API Endpoints

Registration and maintenance of peer tutors.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import ENTITY_LIST_LIMIT
from app.database import get_db
from app.errors import NotFoundError
from app.models import Peer
from app.schemas import PeerCreate, PeerOut, PeerUpdate
from app.services import storage

router = APIRouter(prefix="/api/v1/peers", tags=["peers"])


class PeerListResponse(BaseModel):
    data: List[PeerOut]


class PeerResponse(BaseModel):
    data: PeerOut


async def _get_peer_or_404(db: AsyncSession, peer_id: uuid.UUID, operation: str) -> Peer:
    peer = await storage.find_peer_by_id(db, peer_id)
    if peer is None:
        raise NotFoundError("peer", peer_id, operation)
    return peer


@router.post("", response_model=PeerResponse, status_code=status.HTTP_201_CREATED)
async def create_peer(payload: PeerCreate, db: AsyncSession = Depends(get_db)):
    peer = await storage.create_record(db, Peer(**payload.model_dump()))
    return PeerResponse(data=PeerOut.model_validate(peer))


@router.get("", response_model=PeerListResponse)
async def list_peers(
    domain: Optional[str] = Query(None, description="Case-insensitive domain filter"),
    limit: int = Query(ENTITY_LIST_LIMIT, ge=1, le=ENTITY_LIST_LIMIT),
    db: AsyncSession = Depends(get_db),
):
    """Peers, newest first"""
    peers = await storage.list_recent(db, Peer, limit, domain=domain)
    return PeerListResponse(data=[PeerOut.model_validate(p) for p in peers])


@router.get("/{peer_id}", response_model=PeerResponse)
async def get_peer(
    peer_id: uuid.UUID = Path(..., description="Peer UUID"),
    db: AsyncSession = Depends(get_db),
):
    peer = await _get_peer_or_404(db, peer_id, "get_peer")
    return PeerResponse(data=PeerOut.model_validate(peer))


@router.put("/{peer_id}", response_model=PeerResponse)
async def update_peer(
    payload: PeerUpdate,
    peer_id: uuid.UUID = Path(..., description="Peer UUID"),
    db: AsyncSession = Depends(get_db),
):
    peer = await _get_peer_or_404(db, peer_id, "update_peer")
    peer = await storage.update_record(db, peer, payload.model_dump(exclude_unset=True, exclude_none=True))
    return PeerResponse(data=PeerOut.model_validate(peer))


@router.delete("/{peer_id}")
async def delete_peer(
    peer_id: uuid.UUID = Path(..., description="Peer UUID"),
    db: AsyncSession = Depends(get_db),
):
    """Delete a peer. Existing sessions keep their reference."""
    peer = await _get_peer_or_404(db, peer_id, "delete_peer")
    await storage.delete_record(db, peer)
    return {"message": "Peer deleted", "id": str(peer_id)}
