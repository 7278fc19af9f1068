from app.models.user import UserRole


def _follow(client, headers, instructor_id):
    r = client.post(f"/api/instructors/{instructor_id}/follow", headers=headers)
    assert r.status_code == 200
    assert r.json()["following"] is True


def test_dashboard_lists_overlap_and_view_reconciles(client, instructor, learner, create_quiz):
    teacher_id, teacher_headers = instructor
    learner_id, learner_headers = learner

    q1 = create_quiz(teacher_headers, title="Algebra")
    q2 = create_quiz(teacher_headers, title="Geometry")
    create_quiz(teacher_headers, title="Draft", isActive=False)

    _follow(client, learner_headers, teacher_id)
    r = client.post(f"/api/quizzes/{q2['id']}/attempts", json={"progress": 75}, headers=learner_headers)
    assert r.status_code == 201

    r = client.get("/api/dashboardquizzes", params={"userId": str(learner_id)}, headers=learner_headers)
    assert r.status_code == 200
    data = r.json()

    active_ids = {q["id"] for q in data["activeQuizzes"]}
    attempted_ids = [q["id"] for q in data["attemptedQuizzes"]]
    assert active_ids == {q1["id"], q2["id"]}
    assert attempted_ids == [q2["id"]]

    attempted = data["attemptedQuizzes"][0]
    assert attempted["isAttempted"] is True
    assert attempted["progress"] == 75
    assert attempted["teacherName"]
    assert len(attempted["questions"]) == 2

    r = client.get("/api/dashboard", params={"userId": str(learner_id)}, headers=learner_headers)
    assert r.status_code == 200
    view = r.json()
    counts = {c["label"]: c["number_of_items"] for c in view["info_cards"]}
    assert counts == {"Active Quizzes": 1, "Attempted": 1}
    assert view["sections"][0]["quiz_list"]["cards"][0]["id"] == q1["id"]
    assert view["empty_message"] is None


def test_dashboard_for_new_user_is_empty(client, learner):
    learner_id, headers = learner

    r = client.get("/api/dashboardquizzes", params={"userId": str(learner_id)}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"activeQuizzes": [], "attemptedQuizzes": []}

    r = client.get("/api/dashboard", headers=headers)
    view = r.json()
    assert view["status"] == "empty"
    assert view["empty_message"] == "No quizzes found"
    assert [c["number_of_items"] for c in view["info_cards"]] == [0, 0]


def test_dashboard_of_another_user_is_unauthorized(client, learner, make_user):
    _, headers = learner
    other_id, _ = make_user(UserRole.learner)

    r = client.get("/api/dashboardquizzes", params={"userId": str(other_id)}, headers=headers)
    assert r.status_code == 401
    assert client.get("/api/dashboardquizzes", params={"userId": str(other_id)}).status_code == 401


def test_unfollow_removes_active_quizzes(client, instructor, learner, create_quiz):
    teacher_id, teacher_headers = instructor
    _, learner_headers = learner
    create_quiz(teacher_headers)

    _follow(client, learner_headers, teacher_id)
    _follow(client, learner_headers, teacher_id)
    assert len(client.get("/api/dashboardquizzes", headers=learner_headers).json()["activeQuizzes"]) == 1

    r = client.delete(f"/api/instructors/{teacher_id}/follow", headers=learner_headers)
    assert r.status_code == 200
    assert client.get("/api/dashboardquizzes", headers=learner_headers).json()["activeQuizzes"] == []


def test_instructor_quizzes_and_unknown_instructor(client, instructor, learner, create_quiz):
    teacher_id, teacher_headers = instructor
    learner_id, learner_headers = learner
    quiz = create_quiz(teacher_headers)

    r = client.get(f"/api/instructors/{teacher_id}/quizzes", headers=learner_headers)
    assert r.status_code == 200
    assert [q["id"] for q in r.json()] == [quiz["id"]]
    assert r.json()[0]["isAttempted"] is False

    assert client.get(f"/api/instructors/{learner_id}/quizzes", headers=learner_headers).status_code == 404
    assert client.post("/api/instructors/nope/follow", headers=learner_headers).status_code == 404


def test_attempt_on_inactive_quiz_is_not_found(client, instructor, learner, create_quiz):
    _, teacher_headers = instructor
    _, learner_headers = learner
    quiz = create_quiz(teacher_headers, isActive=False)

    r = client.post(f"/api/quizzes/{quiz['id']}/attempts", json={"progress": 10}, headers=learner_headers)
    assert r.status_code == 404
