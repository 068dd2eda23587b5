import uuid

from conftest import headers_for
from fastapi.testclient import TestClient

from residency.main import app

client = TestClient(app)


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_user_picker_lists_active_users(rotation):
    res = client.get("/api/v1/users")
    assert res.status_code == 200
    roles = sorted(u["role"] for u in res.json())
    assert roles == ["administrator", "student", "teacher"]


def test_me_and_permissions(rotation):
    res = client.get("/api/v1/users/me", headers=headers_for(rotation.teacher_user))
    assert res.json()["id"] == str(rotation.teacher_user.id)

    res = client.get("/api/v1/users/me/permissions", headers=headers_for(rotation.student_user))
    body = res.json()
    assert body["role"] == "student"
    assert (body["can_create"], body["can_edit"], body["can_delete"]) == (False, True, False)
    assert "SITE_MANAGEMENT" not in body["visible_views"]
    assert "GRADES" in body["visible_views"]

    res = client.get("/api/v1/users/me/permissions", headers=headers_for(rotation.admin))
    assert len(res.json()["visible_views"]) == 13


def test_create_and_list_students(rotation):
    res = client.post(
        "/api/v1/students",
        json={"name": "Luis", "last_name": "Martínez", "email": "luis.martinez@email.com"},
        headers=headers_for(rotation.teacher_user),
    )
    assert res.status_code == 201, res.text
    assert res.json()["full_name"] == "Luis Martínez"

    res = client.get("/api/v1/students", headers=headers_for(rotation.student_user))
    assert {s["name"] for s in res.json()} == {"Ana", "Luis"}


def test_students_cannot_create_catalog_entries(rotation):
    res = client.post(
        "/api/v1/students",
        json={"name": "X", "last_name": "Y"},
        headers=headers_for(rotation.student_user),
    )
    assert res.status_code == 403


def test_only_administrators_delete(rotation):
    path = f"/api/v1/students/{rotation.student.id}"
    assert client.delete(path, headers=headers_for(rotation.teacher_user)).status_code == 403
    assert client.delete(path, headers=headers_for(rotation.admin)).status_code == 204
    assert client.delete(path, headers=headers_for(rotation.admin)).status_code == 404


def test_subject_codes_are_unique(rotation):
    payload = {"name": "Física de Radiaciones", "code": "RAD-102", "credits": 8, "semester": 1}
    admin = headers_for(rotation.admin)
    assert client.post("/api/v1/subjects", json=payload, headers=admin).status_code == 201
    assert client.post("/api/v1/subjects", json=payload, headers=admin).status_code == 409

    res = client.post(
        "/api/v1/subjects",
        json={**payload, "code": "RAD-103", "teacher_id": str(uuid.uuid4())},
        headers=admin,
    )
    assert res.status_code == 404


def test_deleting_a_teacher_unassigns_their_subjects(rotation):
    admin = headers_for(rotation.admin)
    res = client.delete(f"/api/v1/teachers/{rotation.teacher.id}", headers=admin)
    assert res.status_code == 204

    subjects = client.get("/api/v1/subjects", headers=admin).json()
    assert [s["teacher_id"] for s in subjects] == [None]


def test_teacher_records_annotations(rotation):
    res = client.post(
        "/api/v1/annotations",
        json={"student_id": str(rotation.student.id), "type": "positive", "text": "  Excelente iniciativa.  "},
        headers=headers_for(rotation.teacher_user),
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["author_id"] == str(rotation.teacher.id)
    assert body["text"] == "Excelente iniciativa."

    client.post(
        "/api/v1/annotations",
        json={"student_id": str(rotation.student.id), "type": "observation", "text": "Repasar protocolos."},
        headers=headers_for(rotation.teacher_user),
    )

    res = client.get("/api/v1/annotations", headers=headers_for(rotation.student_user))
    assert [a["type"] for a in res.json()] == ["observation", "positive"]

    res = client.get(
        "/api/v1/annotations", params={"type": "positive"}, headers=headers_for(rotation.admin)
    )
    assert [a["text"] for a in res.json()] == ["Excelente iniciativa."]


def test_annotation_validation(rotation):
    teacher = headers_for(rotation.teacher_user)
    res = client.post(
        "/api/v1/annotations",
        json={"student_id": str(rotation.student.id), "type": "praise", "text": "x"},
        headers=teacher,
    )
    assert res.status_code == 422

    res = client.post(
        "/api/v1/annotations",
        json={"student_id": str(uuid.uuid4()), "type": "negative", "text": "x"},
        headers=teacher,
    )
    assert res.status_code == 404

    res = client.post(
        "/api/v1/annotations",
        json={"student_id": str(rotation.student.id), "type": "negative", "text": "x"},
        headers=headers_for(rotation.student_user),
    )
    assert res.status_code == 403


def _link_grade(rotation) -> str:
    res = client.post(
        "/api/v1/grades",
        json={"student_id": str(rotation.student.id), "subject_id": str(rotation.subject.id)},
        headers=headers_for(rotation.admin),
    )
    assert res.status_code == 201, res.text
    return res.json()["id"]


def _finalize(rotation, grade_id: str) -> dict:
    res = client.post(
        f"/api/v1/grades/{grade_id}/evaluate",
        json={"theoretical": 6.0},
        headers=headers_for(rotation.admin),
    )
    assert res.status_code == 200, res.text
    return res.json()


def test_subject_with_grades_cannot_be_deleted(rotation):
    admin = headers_for(rotation.admin)
    grade_id = _link_grade(rotation)

    res = client.delete(f"/api/v1/subjects/{rotation.subject.id}", headers=admin)
    assert res.status_code == 409

    grades = client.get("/api/v1/grades", headers=admin).json()
    assert [g["id"] for g in grades] == [grade_id]
    assert _finalize(rotation, grade_id)["grade"]["is_finalized"] is True


def test_deleting_a_student_removes_their_open_grades_and_annotations(rotation):
    admin = headers_for(rotation.admin)
    _link_grade(rotation)
    client.post(
        "/api/v1/annotations",
        json={"student_id": str(rotation.student.id), "type": "observation", "text": "Puntual."},
        headers=admin,
    )

    res = client.delete(f"/api/v1/students/{rotation.student.id}", headers=admin)
    assert res.status_code == 204

    assert client.get("/api/v1/grades", headers=admin).json() == []
    assert client.get("/api/v1/annotations", headers=admin).json() == []

    res = client.delete(f"/api/v1/subjects/{rotation.subject.id}", headers=admin)
    assert res.status_code == 204


def test_student_with_reports_cannot_be_deleted(rotation):
    admin = headers_for(rotation.admin)
    _finalize(rotation, _link_grade(rotation))

    res = client.delete(f"/api/v1/students/{rotation.student.id}", headers=admin)
    assert res.status_code == 409
    assert len(client.get("/api/v1/grades", headers=admin).json()) == 1
    assert len(client.get("/api/v1/reports", headers=admin).json()) == 1


def test_deleting_a_teacher_keeps_their_reports(rotation):
    admin = headers_for(rotation.admin)
    body = _finalize(rotation, _link_grade(rotation))
    assert body["report"]["teacher_id"] == str(rotation.teacher.id)

    res = client.delete(f"/api/v1/teachers/{rotation.teacher.id}", headers=admin)
    assert res.status_code == 204

    report = client.get(f"/api/v1/reports/{body['report']['id']}", headers=admin).json()
    assert report["teacher_id"] is None
    survey = client.get(f"/api/v1/surveys/{body['survey']['id']}", headers=admin).json()
    assert survey["teacher_id"] is None
