from __future__ import annotations

from collections.abc import Sequence

from app.schemas.dashboard import DashboardSection, DashboardView, InfoCard, QuizCardView, QuizListView
from app.schemas.quiz import QuizWithProgress
from app.services.dashboard import reconcile
from app.services.dashboard_client import DashboardFetch

NO_QUIZZES_MESSAGE = "No quizzes found"

BASE_GRID_CLASS = "grid sm:grid-cols-2 md:grid-cols-2 lg:grid-cols-3 gap-4"
WIDE_GRID_CLASS = "md:grid-cols-3 lg:grid-cols-4"


def build_quiz_list(items: Sequence[QuizWithProgress], path: str = "") -> QuizListView:
    p = str(path or "")
    wide = "collection" in p or "instructors" in p
    grid_class = f"{BASE_GRID_CLASS} {WIDE_GRID_CLASS}" if wide else BASE_GRID_CLASS

    cards = [
        QuizCardView(
            id=item.id,
            title=item.title,
            teacher_name=item.teacher_name,
            description=item.description,
            is_active=item.is_active,
        )
        for item in items
    ]
    return QuizListView(
        grid_class=grid_class,
        cards=cards,
        empty_message=None if cards else NO_QUIZZES_MESSAGE,
    )


def build_dashboard_view(outcome: DashboardFetch | None, path: str = "") -> DashboardView:
    """Turn a fetch outcome into what the dashboard shows.

    ``None`` means the fetch has not finished yet and only the skeleton is shown.
    A failed fetch looks exactly like an empty dashboard; ``status`` still says
    ``error`` so the two stay distinguishable to callers.
    """
    if outcome is None:
        return DashboardView(status="loading", skeleton=True)

    if outcome.data is not None:
        active = list(outcome.data.active_quizzes)
        attempted = list(outcome.data.attempted_quizzes)
    else:
        active, attempted = [], []

    filtered_active = reconcile(active, attempted)

    info_cards = [
        InfoCard(label="Active Quizzes", icon="clock", number_of_items=len(filtered_active)),
        InfoCard(label="Attempted", icon="check-circle", number_of_items=len(attempted), variant="success"),
    ]

    sections: list[DashboardSection] = []
    if filtered_active:
        sections.append(DashboardSection(title="Active Quizzes", quiz_list=build_quiz_list(filtered_active, path)))
    if attempted:
        sections.append(DashboardSection(title="Attempted Quizzes", quiz_list=build_quiz_list(attempted, path)))

    status = outcome.status
    if status == "ok" and not sections:
        status = "empty"

    return DashboardView(
        status=status,
        info_cards=info_cards,
        sections=sections,
        empty_message=None if sections else NO_QUIZZES_MESSAGE,
    )
