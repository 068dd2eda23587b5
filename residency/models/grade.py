import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from residency.core.clock import utcnow
from residency.core.db import Base

COMPETENCY_SLOTS = 8


def empty_competency_scores() -> list[int | None]:
    return [None] * COMPETENCY_SLOTS


class ReportStatus(str, enum.Enum):
    PENDING_ACCEPTANCE = "pending_acceptance"
    COMPLETED = "completed"


class Grade(Base):
    __tablename__ = "grades"
    __table_args__ = (
        Index("idx_grades_student", "student_id"),
        Index("idx_grades_subject", "subject_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("students.id", name="grades_student_id_fkey", ondelete="CASCADE"),
        nullable=False,
    )
    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("subjects.id", name="grades_subject_id_fkey", ondelete="RESTRICT"),
        nullable=False,
    )
    # Theoretical exam (60%)
    grade1: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Competency average (30%)
    grade2: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Teaching activity (10%)
    grade3: Mapped[float | None] = mapped_column(Float, nullable=True)
    competency_scores: Mapped[list[int | None]] = mapped_column(
        JSON, default=empty_competency_scores, nullable=False
    )
    is_finalized: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_modified: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class GradeReport(Base):
    __tablename__ = "grade_reports"
    __table_args__ = (
        Index("idx_grade_reports_grade", "grade_id"),
        Index("idx_grade_reports_student", "student_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Reports outlive an administratively deleted grade, so no FK here.
    grade_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", name="grade_reports_student_id_fkey"), nullable=False
    )
    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("subjects.id", name="grade_reports_subject_id_fkey"), nullable=False
    )
    teacher_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("teachers.id", name="grade_reports_teacher_id_fkey", ondelete="SET NULL"),
        nullable=True,
    )
    generated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    grade_summary: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    competency_scores: Mapped[list[int | None]] = mapped_column(JSON, nullable=False)
    feedback: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, name="report_status", values_callable=lambda e: [m.value for m in e]),
        default=ReportStatus.PENDING_ACCEPTANCE,
        nullable=False,
    )
    signed_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
