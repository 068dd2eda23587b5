import uuid

from conftest import headers_for
from fastapi.testclient import TestClient

from residency.main import app
from residency.models.grade import Grade
from residency.models.student import Student

client = TestClient(app)


def _create_grade(rotation) -> dict:
    res = client.post(
        "/api/v1/grades",
        json={"student_id": str(rotation.student.id), "subject_id": str(rotation.subject.id)},
        headers=headers_for(rotation.teacher_user),
    )
    assert res.status_code == 201, res.text
    return res.json()


def _evaluate(rotation, grade_id: str, **overrides):
    payload = {
        "theoretical": 6.5,
        "teaching_activity": 5.5,
        "competency_scores": [7, 6, 5, 7, 6, 6, 5, 7],
        "feedback": "Sólida comprensión de la anatomía en TC y RM.",
    }
    payload.update(overrides)
    return client.post(
        f"/api/v1/grades/{grade_id}/evaluate",
        json=payload,
        headers=headers_for(rotation.teacher_user),
    )


def test_requests_without_actor_are_rejected():
    assert client.get("/api/v1/grades").status_code == 401
    assert client.get("/api/v1/grades", headers={"X-User-Id": "not-a-uuid"}).status_code == 400
    assert client.get("/api/v1/grades", headers={"X-User-Id": str(uuid.uuid4())}).status_code == 404


def test_new_grade_is_in_progress(rotation):
    grade = _create_grade(rotation)
    assert grade["status"] == "in_progress"
    assert grade["final_grade"] == "N/A"
    assert grade["competency_scores"] == [None] * 8
    assert grade["is_finalized"] is False


def test_evaluate_returns_grade_report_and_survey(rotation):
    grade = _create_grade(rotation)
    res = _evaluate(rotation, grade["id"])
    assert res.status_code == 200, res.text
    body = res.json()

    assert body["grade"]["is_finalized"] is True
    assert body["grade"]["final_grade"] == "6.3"
    assert body["grade"]["status"] == "pending_acceptance"
    assert body["report"]["status"] == "pending_acceptance"
    assert body["report"]["grade_summary"]["final_grade"] == "6.3"
    assert body["survey"]["status"] == "incomplete"
    assert body["survey"]["grade_id"] == grade["id"]


def test_second_evaluation_reports_no_new_survey(rotation):
    grade = _create_grade(rotation)
    assert _evaluate(rotation, grade["id"]).status_code == 200

    res = _evaluate(rotation, grade["id"], theoretical=7.0)
    assert res.status_code == 200
    assert res.json()["survey"] is None

    surveys = client.get("/api/v1/surveys", headers=headers_for(rotation.admin)).json()
    assert len(surveys) == 1


def test_evaluation_input_is_validated(rotation):
    grade = _create_grade(rotation)
    assert _evaluate(rotation, grade["id"], competency_scores=[8]).status_code == 422
    assert _evaluate(rotation, grade["id"], competency_scores=[7] * 9).status_code == 422
    assert _evaluate(rotation, grade["id"], theoretical=7.5).status_code == 422


def test_evaluation_without_components_conflicts(rotation):
    grade = _create_grade(rotation)
    res = _evaluate(rotation, grade["id"], theoretical=None, teaching_activity=None, competency_scores=[])
    assert res.status_code == 409


def test_students_cannot_grade(rotation):
    grade = _create_grade(rotation)
    res = client.post(
        f"/api/v1/grades/{grade['id']}/evaluate",
        json={"theoretical": 7.0},
        headers=headers_for(rotation.student_user),
    )
    assert res.status_code == 403

    res = client.post(
        "/api/v1/grades",
        json={"student_id": str(rotation.student.id), "subject_id": str(rotation.subject.id)},
        headers=headers_for(rotation.student_user),
    )
    assert res.status_code == 403


def test_unknown_grade_is_not_found(rotation):
    res = _evaluate(rotation, str(uuid.uuid4()))
    assert res.status_code == 404
    res = client.get(f"/api/v1/grades/{uuid.uuid4()}", headers=headers_for(rotation.admin))
    assert res.status_code == 404


def test_patch_open_grade_then_locked_after_evaluation(rotation):
    grade = _create_grade(rotation)
    res = client.patch(
        f"/api/v1/grades/{grade['id']}",
        json={"grade1": 5.0, "competency_scores": [6, 6]},
        headers=headers_for(rotation.teacher_user),
    )
    assert res.status_code == 200, res.text
    assert res.json()["grade1"] == 5.0
    assert res.json()["competency_average"] == 6.0
    assert res.json()["status"] == "in_progress"

    _evaluate(rotation, grade["id"])
    res = client.patch(
        f"/api/v1/grades/{grade['id']}",
        json={"grade1": 2.0},
        headers=headers_for(rotation.teacher_user),
    )
    assert res.status_code == 409


def test_patch_null_clears_a_component_and_omitted_fields_stay(rotation):
    grade = _create_grade(rotation)
    teacher = headers_for(rotation.teacher_user)
    client.patch(
        f"/api/v1/grades/{grade['id']}",
        json={"grade1": 5.0, "grade3": 4.0, "competency_scores": [6, 6]},
        headers=teacher,
    )

    res = client.patch(f"/api/v1/grades/{grade['id']}", json={"grade1": None}, headers=teacher)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["grade1"] is None
    assert body["grade3"] == 4.0
    assert body["competency_scores"][:2] == [6, 6]

    res = client.patch(
        f"/api/v1/grades/{grade['id']}", json={"competency_scores": None}, headers=teacher
    )
    assert res.json()["competency_scores"] == [None] * 8
    assert res.json()["competency_average"] is None


def test_students_only_see_their_own_grades(rotation, db_session):
    own = _create_grade(rotation)
    other_student_id = uuid.uuid4()
    db_session.add(Student(id=other_student_id, name="Luis", last_name="Martínez"))
    db_session.flush()
    db_session.add(
        Grade(id=uuid.uuid4(), student_id=other_student_id, subject_id=rotation.subject.id)
    )
    db_session.commit()

    res = client.get("/api/v1/grades", headers=headers_for(rotation.student_user))
    assert res.status_code == 200
    assert [g["id"] for g in res.json()] == [own["id"]]

    res = client.get(
        "/api/v1/grades",
        params={"student_id": str(other_student_id)},
        headers=headers_for(rotation.student_user),
    )
    assert res.status_code == 403

    admin_view = client.get("/api/v1/grades", headers=headers_for(rotation.admin)).json()
    assert len(admin_view) == 2


def test_list_filters_by_status_and_competency_range(rotation):
    evaluated = _create_grade(rotation)
    _evaluate(rotation, evaluated["id"])
    empty = _create_grade(rotation)
    admin = headers_for(rotation.admin)

    res = client.get("/api/v1/grades", params={"status": "pending_acceptance"}, headers=admin)
    assert [g["id"] for g in res.json()] == [evaluated["id"]]

    res = client.get("/api/v1/grades", params={"min_competency": 6.0}, headers=admin)
    assert [g["id"] for g in res.json()] == [evaluated["id"]]

    res = client.get("/api/v1/grades", params={"max_competency": 6.0}, headers=admin)
    assert res.json() == []

    res = client.get("/api/v1/grades", headers=admin)
    assert {g["id"] for g in res.json()} == {evaluated["id"], empty["id"]}


def test_list_sorting(rotation):
    first = _create_grade(rotation)
    second = _create_grade(rotation)
    _evaluate(rotation, second["id"])
    admin = headers_for(rotation.admin)

    res = client.get(
        "/api/v1/grades", params={"sort": "final_grade", "descending": "true"}, headers=admin
    )
    assert [g["id"] for g in res.json()] == [second["id"], first["id"]]

    res = client.get("/api/v1/grades", params={"sort": "shoe_size"}, headers=admin)
    assert res.status_code == 422


def test_only_administrators_delete_grades(rotation):
    grade = _create_grade(rotation)
    res = client.delete(f"/api/v1/grades/{grade['id']}", headers=headers_for(rotation.teacher_user))
    assert res.status_code == 403

    res = client.delete(f"/api/v1/grades/{grade['id']}", headers=headers_for(rotation.admin))
    assert res.status_code == 204
    res = client.get(f"/api/v1/grades/{grade['id']}", headers=headers_for(rotation.admin))
    assert res.status_code == 404
