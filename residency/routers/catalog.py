import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from residency.core.db import get_db
from residency.core.deps import get_current_user
from residency.core.permissions import Capability, require_permission
from residency.models.annotation import Annotation
from residency.models.grade import Grade, GradeReport
from residency.models.student import Student
from residency.models.subject import Subject
from residency.models.survey import Survey
from residency.models.teacher import Teacher
from residency.models.user import User
from residency.schemas.catalog import (
    StudentCreate,
    StudentSummary,
    SubjectCreate,
    SubjectSummary,
    TeacherCreate,
    TeacherSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


def _has_history(db: Session, report_clause, survey_clause) -> bool:
    """Reports and surveys are kept for good, so they pin their student and subject."""
    return (
        db.query(GradeReport.id).filter(report_clause).first() is not None
        or db.query(Survey.id).filter(survey_clause).first() is not None
    )


@router.get("/students", response_model=list[StudentSummary])
def list_students(
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return db.query(Student).order_by(Student.last_name, Student.name).all()


@router.post("/students", response_model=StudentSummary, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: StudentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_permission(current_user.role, Capability.CREATE)
    student = Student(id=uuid.uuid4(), **payload.model_dump())
    db.add(student)
    db.commit()
    db.refresh(student)
    logger.info(f"Student {student.full_name} added")
    return student


@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_permission(current_user.role, Capability.DELETE)
    student = db.get(Student, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    if _has_history(db, GradeReport.student_id == student_id, Survey.student_id == student_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Student has reports or surveys and cannot be deleted",
        )

    grades = db.query(Grade).filter(Grade.student_id == student_id).delete(synchronize_session=False)
    notes = db.query(Annotation).filter(Annotation.student_id == student_id).delete(
        synchronize_session=False
    )
    db.delete(student)
    db.commit()
    logger.info(f"Student {student_id} deleted with {grades} grades and {notes} annotations")
    return None


@router.get("/teachers", response_model=list[TeacherSummary])
def list_teachers(
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return db.query(Teacher).order_by(Teacher.last_name, Teacher.name).all()


@router.post("/teachers", response_model=TeacherSummary, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_permission(current_user.role, Capability.CREATE)
    teacher = Teacher(id=uuid.uuid4(), **payload.model_dump())
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    logger.info(f"Teacher {teacher.full_name} added")
    return teacher


@router.delete("/teachers/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_teacher(
    teacher_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_permission(current_user.role, Capability.DELETE)
    teacher = db.get(Teacher, teacher_id)
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher not found")
    db.query(Subject).filter(Subject.teacher_id == teacher_id).update({Subject.teacher_id: None})
    db.delete(teacher)
    db.commit()
    return None


@router.get("/subjects", response_model=list[SubjectSummary])
def list_subjects(
    teacher_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    query = db.query(Subject)
    if teacher_id:
        query = query.filter(Subject.teacher_id == teacher_id)
    return query.order_by(Subject.semester, Subject.code).all()


@router.post("/subjects", response_model=SubjectSummary, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_permission(current_user.role, Capability.CREATE)
    if payload.teacher_id and not db.get(Teacher, payload.teacher_id):
        raise HTTPException(status_code=404, detail="Teacher not found")
    if db.query(Subject).filter(Subject.code == payload.code).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")

    subject = Subject(id=uuid.uuid4(), **payload.model_dump())
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(
    subject_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_permission(current_user.role, Capability.DELETE)
    subject = db.get(Subject, subject_id)
    if not subject:
        raise HTTPException(status_code=404, detail="Subject not found")
    if db.query(Grade).filter(Grade.subject_id == subject_id).first() or _has_history(
        db, GradeReport.subject_id == subject_id, Survey.subject_id == subject_id
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Subject has grades and cannot be deleted",
        )
    db.delete(subject)
    db.commit()
    return None
