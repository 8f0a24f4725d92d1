"""
Student API Endpoints

Registration and maintenance of students looking for a tutor.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import ENTITY_LIST_LIMIT
from app.database import get_db
from app.errors import NotFoundError
from app.models import Student
from app.schemas import StudentCreate, StudentOut, StudentUpdate
from app.services import storage

router = APIRouter(prefix="/api/v1/students", tags=["students"])


class StudentListResponse(BaseModel):
    data: List[StudentOut]


class StudentResponse(BaseModel):
    data: StudentOut


async def _get_student_or_404(db: AsyncSession, student_id: uuid.UUID, operation: str) -> Student:
    student = await storage.find_student_by_id(db, student_id)
    if student is None:
        raise NotFoundError("student", student_id, operation)
    return student


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(payload: StudentCreate, db: AsyncSession = Depends(get_db)):
    student = await storage.create_record(db, Student(**payload.model_dump()))
    return StudentResponse(data=StudentOut.model_validate(student))


@router.get("", response_model=StudentListResponse)
async def list_students(
    limit: int = Query(ENTITY_LIST_LIMIT, ge=1, le=ENTITY_LIST_LIMIT),
    db: AsyncSession = Depends(get_db),
):
    """Students, newest first"""
    students = await storage.list_recent(db, Student, limit)
    return StudentListResponse(data=[StudentOut.model_validate(s) for s in students])


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: uuid.UUID = Path(..., description="Student UUID"),
    db: AsyncSession = Depends(get_db),
):
    student = await _get_student_or_404(db, student_id, "get_student")
    return StudentResponse(data=StudentOut.model_validate(student))


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    payload: StudentUpdate,
    student_id: uuid.UUID = Path(..., description="Student UUID"),
    db: AsyncSession = Depends(get_db),
):
    student = await _get_student_or_404(db, student_id, "update_student")
    student = await storage.update_record(db, student, payload.model_dump(exclude_unset=True, exclude_none=True))
    return StudentResponse(data=StudentOut.model_validate(student))


@router.delete("/{student_id}")
async def delete_student(
    student_id: uuid.UUID = Path(..., description="Student UUID"),
    db: AsyncSession = Depends(get_db),
):
    """Delete a student. Existing sessions keep their reference."""
    student = await _get_student_or_404(db, student_id, "delete_student")
    await storage.delete_record(db, student)
    return {"message": "Student deleted", "id": str(student_id)}
