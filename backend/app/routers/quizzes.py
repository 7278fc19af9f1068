from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.rate_limit import mutation_rate_limit
from app.core.security import get_current_user, require_roles
from app.core.security_audit_log import audit_log
from app.db.session import get_db
from app.models.user import User, UserRole
from app.schemas.quiz import AttemptCreateRequest, AttemptPublic, QuizCreateRequest, QuizPatch, QuizPublic
from app.services.quizzes import QuizNotFound, QuizNotOwned, QuizService, parse_quiz_id, quiz_to_public

logger = logging.getLogger("quizboard.quizzes")

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])


def _deny(db: Session, request: Request, *, user: User, quiz_id, action: str) -> HTTPException:
    db.rollback()
    audit_log(
        db=db,
        request=request,
        event_type="quiz_mutation_denied",
        actor_user_id=user.id,
        quiz_id=quiz_id,
        meta={"action": action},
    )
    db.commit()
    return HTTPException(status_code=401, detail="Unauthorized")


async def _raw_body(request: Request) -> bytes:
    # Decoded by the handler: malformed JSON is a 500 like any other bad payload.
    return await request.body()


@router.post("", response_model=QuizPublic, status_code=201)
def create_quiz(
    body: QuizCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_roles(UserRole.instructor)),
):
    service = QuizService(db)
    quiz = service.create_quiz(user, body)
    db.commit()
    db.refresh(quiz)
    return quiz_to_public(quiz, list(quiz.questions))


@router.get("/{quiz_id}", response_model=QuizPublic)
def get_quiz(quiz_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        return QuizService(db).get_owned(parse_quiz_id(quiz_id), user)
    except QuizNotFound as e:
        raise HTTPException(status_code=404, detail="Not Found") from e
    except QuizNotOwned as e:
        raise HTTPException(status_code=401, detail="Unauthorized") from e


@router.delete("/{quiz_id}", response_model=QuizPublic)
def delete_quiz(
    quiz_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    _: object = mutation_rate_limit("delete"),
):
    try:
        qid = parse_quiz_id(quiz_id)
        snapshot = QuizService(db).delete_owned(qid, user)
        audit_log(db=db, request=request, event_type="quiz_deleted", actor_user_id=user.id, quiz_id=qid, meta={"title": snapshot.title})
        db.commit()
    except QuizNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail="Not Found") from e
    except QuizNotOwned as e:
        raise _deny(db, request, user=user, quiz_id=e.quiz_id, action="delete") from e
    except Exception as e:
        db.rollback()
        logger.exception("[QUIZ_DELETE] %s", quiz_id)
        raise HTTPException(status_code=500, detail="Internal Error") from e

    return snapshot


@router.patch("/{quiz_id}", response_model=QuizPublic)
def update_quiz(
    quiz_id: str,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    _: object = mutation_rate_limit("update"),
    raw_body: bytes = Depends(_raw_body),
):
    try:
        qid = parse_quiz_id(quiz_id)
        payload = json.loads(raw_body)
        if not isinstance(payload, dict):
            raise ValueError("patch body must be a JSON object")
        values = QuizPatch.model_validate(payload).to_values()

        quiz = QuizService(db).update_owned(qid, user, values)
        audit_log(
            db=db,
            request=request,
            event_type="quiz_updated",
            actor_user_id=user.id,
            quiz_id=qid,
            meta={"fields": sorted(values)},
        )
        db.commit()
    except QuizNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail="Not Found") from e
    except QuizNotOwned as e:
        raise _deny(db, request, user=user, quiz_id=e.quiz_id, action="update") from e
    except Exception as e:
        db.rollback()
        logger.exception("[QUIZ_UPDATE] %s", quiz_id)
        raise HTTPException(status_code=500, detail="Internal Error") from e

    return quiz


@router.post("/{quiz_id}/attempts", response_model=AttemptPublic, status_code=201)
def record_attempt(
    quiz_id: str,
    body: AttemptCreateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        attempt = QuizService(db).record_attempt(
            parse_quiz_id(quiz_id),
            user,
            progress=body.progress,
            finished=body.finished,
        )
    except QuizNotFound as e:
        raise HTTPException(status_code=404, detail="Not Found") from e
    db.commit()
    db.refresh(attempt)

    return AttemptPublic(
        id=str(attempt.id),
        quiz_id=str(attempt.quiz_id),
        user_id=str(attempt.user_id),
        progress=attempt.progress,
        started_at=attempt.started_at,
        finished_at=attempt.finished_at,
    )
