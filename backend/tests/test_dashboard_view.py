from app.schemas.quiz import DashboardQuizzes, QuizWithProgress
from app.services.dashboard_client import DashboardFetch
from app.services.dashboard_view import BASE_GRID_CLASS, NO_QUIZZES_MESSAGE, build_dashboard_view, build_quiz_list


def _quiz(qid: str, *, description: str | None = "desc", attempted: bool = False) -> QuizWithProgress:
    return QuizWithProgress(
        id=qid,
        title=f"Quiz {qid}",
        description=description,
        user_id="teacher-1",
        is_active=True,
        teacher_name="Ms. Rivera",
        progress=100 if attempted else None,
        is_attempted=attempted,
    )


def _fetch(active, attempted) -> DashboardFetch:
    return DashboardFetch.from_data(DashboardQuizzes(active_quizzes=active, attempted_quizzes=attempted))


def _counts(view):
    return {c.label: c.number_of_items for c in view.info_cards}


def test_overlap_is_removed_from_active_section():
    view = build_dashboard_view(_fetch([_quiz("1"), _quiz("2")], [_quiz("2", attempted=True)]))

    assert view.status == "ok"
    assert _counts(view) == {"Active Quizzes": 1, "Attempted": 1}
    assert [s.title for s in view.sections] == ["Active Quizzes", "Attempted Quizzes"]
    assert [c.id for c in view.sections[0].quiz_list.cards] == ["1"]
    assert [c.id for c in view.sections[1].quiz_list.cards] == ["2"]
    assert view.empty_message is None


def test_both_empty_shows_no_quizzes_found():
    view = build_dashboard_view(_fetch([], []))

    assert view.status == "empty"
    assert _counts(view) == {"Active Quizzes": 0, "Attempted": 0}
    assert view.sections == []
    assert view.empty_message == NO_QUIZZES_MESSAGE


def test_only_attempted_section_when_active_all_attempted():
    view = build_dashboard_view(_fetch([_quiz("1")], [_quiz("1", attempted=True)]))

    assert [s.title for s in view.sections] == ["Attempted Quizzes"]
    assert _counts(view)["Active Quizzes"] == 0


def test_failed_fetch_renders_like_empty_state_but_keeps_error_status():
    view = build_dashboard_view(DashboardFetch.failed("ConnectError"))
    empty = build_dashboard_view(_fetch([], []))

    assert view.status == "error"
    assert view.info_cards == empty.info_cards
    assert view.sections == empty.sections
    assert view.empty_message == empty.empty_message


def test_loading_shows_skeleton_only():
    view = build_dashboard_view(None)
    assert view.skeleton is True
    assert view.status == "loading"
    assert view.info_cards == []


def test_attempted_card_uses_success_variant():
    view = build_dashboard_view(_fetch([], [_quiz("9", attempted=True)]))
    attempted = [c for c in view.info_cards if c.label == "Attempted"][0]
    assert attempted.variant == "success"
    assert attempted.icon == "check-circle"


def test_quiz_list_grid_widens_on_collection_and_instructor_pages():
    items = [_quiz("1")]
    assert build_quiz_list(items, "/dashboard").grid_class == BASE_GRID_CLASS
    assert "lg:grid-cols-4" in build_quiz_list(items, "/collection/abc").grid_class
    assert "md:grid-cols-3" in build_quiz_list(items, "/instructors/42").grid_class


def test_quiz_list_cards_and_empty_message():
    listing = build_quiz_list([_quiz("1", description=None), _quiz("2", description="")])
    assert [c.description for c in listing.cards] == [None, ""]
    assert listing.cards[0].teacher_name == "Ms. Rivera"
    assert listing.empty_message is None

    assert build_quiz_list([]).empty_message == NO_QUIZZES_MESSAGE
