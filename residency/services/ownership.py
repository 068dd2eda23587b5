import uuid

from sqlalchemy.orm import Session

from residency.core.errors import PermissionDeniedError
from residency.core.permissions import UserRole
from residency.models.student import Student
from residency.models.subject import Subject
from residency.models.teacher import Teacher
from residency.models.user import User


def student_profile(db: Session, user: User) -> Student | None:
    if user.role != UserRole.STUDENT:
        return None
    return db.query(Student).filter(Student.user_id == user.id).first()


def teacher_profile(db: Session, user: User) -> Teacher | None:
    if user.role != UserRole.TEACHER:
        return None
    return db.query(Teacher).filter(Teacher.user_id == user.id).first()


def require_own_student_record(db: Session, user: User, student_id: uuid.UUID) -> Student:
    student = student_profile(db, user)
    if not student or student.id != student_id:
        raise PermissionDeniedError("Record belongs to another student")
    return student


def require_subject_teacher(db: Session, user: User, subject: Subject) -> None:
    """Teachers act only on subjects assigned to them (or unassigned ones)."""
    if user.role == UserRole.ADMINISTRATOR:
        return
    if user.role != UserRole.TEACHER:
        raise PermissionDeniedError("Only teachers and administrators can grade")
    teacher = teacher_profile(db, user)
    if not teacher:
        raise PermissionDeniedError("Teacher profile not found")
    if subject.teacher_id and subject.teacher_id != teacher.id:
        raise PermissionDeniedError("Subject not assigned to teacher")


def scope_student_filter(
    db: Session, user: User, requested: uuid.UUID | None
) -> uuid.UUID | None:
    """Students only ever read their own records; others read as requested."""
    if user.role != UserRole.STUDENT:
        return requested
    student = student_profile(db, user)
    if not student:
        raise PermissionDeniedError("Student profile not found")
    if requested is not None and requested != student.id:
        raise PermissionDeniedError("Record belongs to another student")
    return student.id
