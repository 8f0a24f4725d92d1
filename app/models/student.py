"""Student model - Learners looking for a peer tutor"""
from sqlalchemy import Column, String, Float, DateTime, Index, Uuid
from sqlalchemy.sql import func
import uuid

from app.database import Base
from app.models.timestamps import utcnow


class Student(Base):
    """Student with the subject they need help in and a budget ceiling"""

    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    subject = Column(String(100), nullable=False)
    range_budget = Column(Float, nullable=False)
    rating = Column(Float, nullable=False, default=1)
    experience = Column(Float, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_students_subject", "subject"),
        Index("idx_students_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Student(id={self.id}, name={self.name}, subject={self.subject})>"
