import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy.orm import Session

from residency.core.db import Base, SessionLocal, engine
from residency.core.permissions import UserRole
from residency.models.student import Student
from residency.models.subject import Subject
from residency.models.teacher import Teacher
from residency.models.user import User


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_user(db: Session, role: UserRole, name: str) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{name.lower()}_{uuid.uuid4().hex[:6]}@residencia.cl",
        full_name=name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def rotation(db_session: Session) -> SimpleNamespace:
    """Admin, one teacher owning one subject, and one enrolled student."""
    admin = make_user(db_session, UserRole.ADMINISTRATOR, "Admin")
    teacher_user = make_user(db_session, UserRole.TEACHER, "Ricardo")
    student_user = make_user(db_session, UserRole.STUDENT, "Ana")

    teacher = Teacher(id=uuid.uuid4(), user_id=teacher_user.id, name="Ricardo", last_name="Pérez")
    student = Student(id=uuid.uuid4(), user_id=student_user.id, name="Ana", last_name="González")
    db_session.add_all([teacher, student])
    db_session.flush()

    subject = Subject(
        id=uuid.uuid4(),
        name="Anatomía Radiológica",
        code=f"RAD-{uuid.uuid4().hex[:4]}",
        teacher_id=teacher.id,
        credits=10,
        semester=1,
    )
    db_session.add(subject)
    db_session.commit()

    return SimpleNamespace(
        admin=admin,
        teacher_user=teacher_user,
        student_user=student_user,
        teacher=teacher,
        student=student,
        subject=subject,
    )


def headers_for(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}
