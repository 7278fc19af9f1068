from __future__ import annotations

import argparse
import os
import sys

# Make `app` importable when run from the repo root or inside the container.
sys.path.append("/app")
sys.path.append(os.getcwd())

from passlib.context import CryptContext
from sqlalchemy import select

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.attempt import QuizAttempt
from app.models.follow import InstructorFollow
from app.models.quiz import Question, Quiz
from app.models.user import User, UserRole

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _get_or_create_user(db, *, name: str, role: UserRole, password: str) -> User:
    user = db.scalar(select(User).where(User.name == name))
    if user is not None:
        return user
    user = User(name=name, role=role, password_hash=pwd_context.hash(password))
    db.add(user)
    db.flush()
    return user


def seed(*, password: str, n_quizzes: int) -> None:
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        teacher = _get_or_create_user(db, name="demo_instructor", role=UserRole.instructor, password=password)
        learner = _get_or_create_user(db, name="demo_learner", role=UserRole.learner, password=password)

        followed = db.scalar(
            select(InstructorFollow).where(
                InstructorFollow.follower_id == learner.id,
                InstructorFollow.instructor_id == teacher.id,
            )
        )
        if followed is None:
            db.add(InstructorFollow(follower_id=learner.id, instructor_id=teacher.id))

        existing = db.scalars(select(Quiz).where(Quiz.user_id == teacher.id)).all()
        if existing:
            print(f"demo data already present ({len(existing)} quizzes)")
            db.commit()
            return

        quizzes = []
        for i in range(1, n_quizzes + 1):
            quiz = Quiz(title=f"Demo quiz {i}", description=f"Warm-up set #{i}", user_id=teacher.id, is_active=True)
            db.add(quiz)
            db.flush()
            db.add(Question(quiz_id=quiz.id, position=0, prompt=f"{i} + {i} = ?\nA) {2 * i}\nB) {i}", correct_answer="A"))
            quizzes.append(quiz)

        # First quiz counts as attempted, so it shows up in both source lists.
        if quizzes:
            db.add(QuizAttempt(quiz_id=quizzes[0].id, user_id=learner.id, progress=100))

        db.commit()
        print(f"seeded instructor={teacher.id} learner={learner.id} quizzes={len(quizzes)}")


def main() -> None:
    p = argparse.ArgumentParser(description="Seed demo users, follows, quizzes and one attempt")
    p.add_argument("--password", default="demo-pass-123", help="Password for both demo users")
    p.add_argument("--quizzes", type=int, default=3, help="Number of quizzes for the demo instructor")
    args = p.parse_args()
    seed(password=args.password, n_quizzes=max(0, int(args.quizzes)))


if __name__ == "__main__":
    main()
