from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.attempt import QuizAttempt
from app.models.follow import InstructorFollow
from app.models.quiz import Question, Quiz
from app.models.user import User
from app.schemas.quiz import DashboardQuizzes, QuizWithProgress
from app.services.quizzes import question_to_public

T = TypeVar("T")


def _quiz_key(item: Any) -> str | None:
    raw = item.get("id") if isinstance(item, Mapping) else getattr(item, "id", None)
    return None if raw is None else str(raw)


def reconcile(active: Iterable[T], attempted: Iterable[Any]) -> list[T]:
    """Active quizzes minus those already attempted, compared by id only.

    Order of ``active`` is kept; ``attempted`` is not touched.
    """
    # Items without an id never match each other.
    attempted_ids = {key for key in map(_quiz_key, attempted) if key is not None}
    return [q for q in active if _quiz_key(q) not in attempted_ids]


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def _with_progress(self, user: User, quizzes: list[Quiz]) -> list[QuizWithProgress]:
        """Batch-decorate quizzes with teacher name, questions and the user's best progress."""
        if not quizzes:
            return []

        quiz_ids = [q.id for q in quizzes]
        owner_ids = {q.user_id for q in quizzes}

        names = dict(self.db.execute(select(User.id, User.name).where(User.id.in_(owner_ids))).all())

        rows = self.db.execute(
            select(QuizAttempt.quiz_id, func.count(QuizAttempt.id), func.max(QuizAttempt.progress))
            .where(QuizAttempt.user_id == user.id, QuizAttempt.quiz_id.in_(quiz_ids))
            .group_by(QuizAttempt.quiz_id)
        ).all()
        attempts = {quiz_id: (int(cnt or 0), best) for quiz_id, cnt, best in rows}

        questions_by_quiz: dict[uuid.UUID, list[Question]] = {}
        for q in self.db.scalars(
            select(Question).where(Question.quiz_id.in_(quiz_ids)).order_by(Question.quiz_id, Question.position)
        ):
            questions_by_quiz.setdefault(q.quiz_id, []).append(q)

        items = []
        for quiz in quizzes:
            count, best = attempts.get(quiz.id, (0, None))
            items.append(
                QuizWithProgress(
                    id=str(quiz.id),
                    title=quiz.title,
                    description=quiz.description,
                    user_id=str(quiz.user_id),
                    is_active=bool(quiz.is_active),
                    created_at=quiz.created_at,
                    updated_at=quiz.updated_at,
                    questions=[question_to_public(q) for q in questions_by_quiz.get(quiz.id, [])],
                    progress=best,
                    teacher_name=names.get(quiz.user_id, ""),
                    is_attempted=count > 0,
                )
            )
        return items

    def active_quizzes(self, user: User) -> list[QuizWithProgress]:
        quizzes = self.db.scalars(
            select(Quiz)
            .join(InstructorFollow, InstructorFollow.instructor_id == Quiz.user_id)
            .where(InstructorFollow.follower_id == user.id, Quiz.is_active == True)  # noqa: E712
            .order_by(Quiz.created_at.desc())
        ).all()
        return self._with_progress(user, list(quizzes))

    def attempted_quizzes(self, user: User) -> list[QuizWithProgress]:
        attempted_ids = select(QuizAttempt.quiz_id).where(QuizAttempt.user_id == user.id)
        quizzes = self.db.scalars(
            select(Quiz).where(Quiz.id.in_(attempted_ids)).order_by(Quiz.created_at.desc())
        ).all()
        return self._with_progress(user, list(quizzes))

    def instructor_quizzes(self, instructor: User, viewer: User) -> list[QuizWithProgress]:
        quizzes = self.db.scalars(
            select(Quiz)
            .where(Quiz.user_id == instructor.id, Quiz.is_active == True)  # noqa: E712
            .order_by(Quiz.created_at.desc())
        ).all()
        return self._with_progress(viewer, list(quizzes))

    def get_dashboard_quizzes(self, user: User) -> DashboardQuizzes:
        # The two lists are sourced independently and may overlap; see reconcile().
        return DashboardQuizzes(
            active_quizzes=self.active_quizzes(user),
            attempted_quizzes=self.attempted_quizzes(user),
        )
