"""Peer model - Peer tutors offering sessions in a domain"""
from sqlalchemy import Column, String, Float, DateTime, Index, Uuid
from sqlalchemy.sql import func
import uuid

from app.database import Base
from app.models.timestamps import utcnow


class Peer(Base):
    """Peer tutor with domain, track record and price"""

    __tablename__ = "peers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=True)
    domain = Column(String(100), nullable=True)
    experience = Column(Float, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0)
    charges = Column(Float, nullable=False, default=3000)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_peers_domain", "domain"),
        Index("idx_peers_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Peer(id={self.id}, name={self.name}, domain={self.domain}, charges={self.charges})>"
