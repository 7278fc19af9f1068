from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from app.models.attempt import QuizAttempt
from app.models.quiz import Question, Quiz
from app.models.user import User
from app.schemas.quiz import QuestionPublic, QuizCreateRequest, QuizPublic


class QuizAccessError(Exception):
    def __init__(self, quiz_id: uuid.UUID | str | None = None):
        super().__init__(str(quiz_id) if quiz_id is not None else "")
        self.quiz_id = quiz_id


class QuizNotFound(QuizAccessError):
    pass


class QuizNotOwned(QuizAccessError):
    pass


def parse_quiz_id(raw: str) -> uuid.UUID:
    # A malformed id can never match a stored quiz.
    try:
        return uuid.UUID(str(raw))
    except ValueError as e:
        raise QuizNotFound(raw) from e


def question_to_public(q: Question) -> QuestionPublic:
    return QuestionPublic(
        id=str(q.id),
        position=int(q.position or 0),
        prompt=q.prompt or "",
        correct_answer=q.correct_answer or "",
        explanation=q.explanation,
    )


def quiz_to_public(quiz: Quiz, questions: list[Question] | None = None) -> QuizPublic:
    items = sorted(questions or [], key=lambda q: int(q.position or 0))
    return QuizPublic(
        id=str(quiz.id),
        title=quiz.title,
        description=quiz.description,
        user_id=str(quiz.user_id),
        is_active=bool(quiz.is_active),
        created_at=quiz.created_at,
        updated_at=quiz.updated_at,
        questions=[question_to_public(q) for q in items],
    )


class QuizService:
    """Quiz persistence with ownership enforced inside the write itself.

    Every mutation is a single ``UPDATE/DELETE ... WHERE id = :quiz AND
    user_id = :caller``; a separate lookup only runs after the conditional
    write matched nothing, to tell a missing quiz from a foreign one.
    Callers own the transaction (commit / rollback).
    """

    def __init__(self, db: Session):
        self.db = db

    def _questions(self, quiz_id: uuid.UUID) -> list[Question]:
        return list(
            self.db.scalars(select(Question).where(Question.quiz_id == quiz_id).order_by(Question.position))
        )

    def _miss(self, quiz_id: uuid.UUID) -> QuizAccessError:
        exists = self.db.scalar(select(Quiz.id).where(Quiz.id == quiz_id))
        if exists is None:
            return QuizNotFound(quiz_id)
        return QuizNotOwned(quiz_id)

    def create_quiz(self, owner: User, payload: QuizCreateRequest) -> Quiz:
        quiz = Quiz(
            title=payload.title.strip(),
            description=payload.description,
            user_id=owner.id,
            is_active=bool(payload.is_active),
        )
        self.db.add(quiz)
        self.db.flush()

        for position, q in enumerate(payload.questions):
            self.db.add(
                Question(
                    quiz_id=quiz.id,
                    position=position,
                    prompt=q.prompt,
                    correct_answer=q.correct_answer,
                    explanation=q.explanation,
                )
            )
        self.db.flush()
        return quiz

    def get_owned(self, quiz_id: uuid.UUID, user: User) -> QuizPublic:
        quiz = self.db.scalar(select(Quiz).where(Quiz.id == quiz_id, Quiz.user_id == user.id))
        if quiz is None:
            raise self._miss(quiz_id)
        return quiz_to_public(quiz, self._questions(quiz.id))

    def delete_owned(self, quiz_id: uuid.UUID, user: User) -> QuizPublic:
        """Hard-delete a quiz owned by ``user``; returns the pre-delete snapshot."""
        owned = select(Quiz.id).where(Quiz.id == quiz_id, Quiz.user_id == user.id)

        questions = list(
            self.db.scalars(
                delete(Question)
                .where(Question.quiz_id.in_(owned))
                .returning(Question)
                .execution_options(synchronize_session=False)
            )
        )
        self.db.execute(
            delete(QuizAttempt)
            .where(QuizAttempt.quiz_id.in_(owned))
            .execution_options(synchronize_session=False)
        )
        quiz = self.db.scalars(
            delete(Quiz)
            .where(Quiz.id == quiz_id, Quiz.user_id == user.id)
            .returning(Quiz)
            .execution_options(synchronize_session=False)
        ).one_or_none()

        if quiz is None:
            raise self._miss(quiz_id)
        return quiz_to_public(quiz, questions)

    def update_owned(self, quiz_id: uuid.UUID, user: User, values: dict[str, Any]) -> QuizPublic:
        """Apply an allow-listed patch to a quiz owned by ``user``."""
        stmt = (
            update(Quiz)
            .where(Quiz.id == quiz_id, Quiz.user_id == user.id)
            .values(**values, updated_at=datetime.utcnow())
            .returning(Quiz)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        quiz = self.db.scalars(stmt).one_or_none()
        if quiz is None:
            raise self._miss(quiz_id)
        return quiz_to_public(quiz, self._questions(quiz.id))

    def record_attempt(
        self,
        quiz_id: uuid.UUID,
        user: User,
        *,
        progress: int | None,
        finished: bool,
    ) -> QuizAttempt:
        quiz = self.db.scalar(select(Quiz).where(Quiz.id == quiz_id, Quiz.is_active == True))  # noqa: E712
        if quiz is None:
            raise QuizNotFound(quiz_id)

        now = datetime.utcnow()
        attempt = QuizAttempt(
            quiz_id=quiz.id,
            user_id=user.id,
            progress=progress,
            started_at=now,
            finished_at=now if finished else None,
        )
        self.db.add(attempt)
        self.db.flush()
        return attempt
