from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.security import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.dashboard import DashboardView
from app.schemas.quiz import DashboardQuizzes
from app.services.dashboard import DashboardService
from app.services.dashboard_client import DashboardFetch
from app.services.dashboard_view import build_dashboard_view

router = APIRouter(prefix="/api", tags=["dashboard"])


def _require_self(user: User, user_id: str | None) -> None:
    # A dashboard is only ever readable by the user it belongs to.
    if user_id is not None and str(user_id).strip() != str(user.id):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.get("/dashboardquizzes", response_model=DashboardQuizzes)
def dashboard_quizzes(
    user_id: str | None = Query(default=None, alias="userId"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _require_self(user, user_id)
    return DashboardService(db).get_dashboard_quizzes(user)


@router.get("/dashboard", response_model=DashboardView)
def dashboard_view(
    user_id: str | None = Query(default=None, alias="userId"),
    path: str = Query(default="/dashboard"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _require_self(user, user_id)
    data = DashboardService(db).get_dashboard_quizzes(user)
    return build_dashboard_view(DashboardFetch.from_data(data), path=path)
