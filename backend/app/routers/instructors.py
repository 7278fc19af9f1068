from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.security import get_current_user
from app.db.session import get_db
from app.models.follow import InstructorFollow
from app.models.user import User, UserRole
from app.schemas.quiz import QuizWithProgress
from app.services.dashboard import DashboardService

router = APIRouter(prefix="/api/instructors", tags=["instructors"])


def _get_instructor(db: Session, instructor_id: str) -> User:
    try:
        iid = uuid.UUID(instructor_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail="Not Found") from e

    instructor = db.scalar(select(User).where(User.id == iid, User.role == UserRole.instructor))
    if instructor is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return instructor


@router.post("/{instructor_id}/follow")
def follow_instructor(instructor_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    instructor = _get_instructor(db, instructor_id)
    if instructor.id == user.id:
        raise HTTPException(status_code=400, detail="cannot follow yourself")

    existing = db.scalar(
        select(InstructorFollow).where(
            InstructorFollow.follower_id == user.id,
            InstructorFollow.instructor_id == instructor.id,
        )
    )
    if existing is None:
        db.add(InstructorFollow(follower_id=user.id, instructor_id=instructor.id))
        db.commit()
    return {"ok": True, "following": True}


@router.delete("/{instructor_id}/follow")
def unfollow_instructor(instructor_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    instructor = _get_instructor(db, instructor_id)
    db.execute(
        delete(InstructorFollow).where(
            InstructorFollow.follower_id == user.id,
            InstructorFollow.instructor_id == instructor.id,
        )
    )
    db.commit()
    return {"ok": True, "following": False}


@router.get("/{instructor_id}/quizzes", response_model=list[QuizWithProgress])
def instructor_quizzes(instructor_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    instructor = _get_instructor(db, instructor_id)
    return DashboardService(db).instructor_quizzes(instructor, user)
