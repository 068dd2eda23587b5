import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from residency.core.db import Base


class SurveyStatus(str, enum.Enum):
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"


class Survey(Base):
    __tablename__ = "surveys"
    __table_args__ = (UniqueConstraint("grade_id", name="surveys_grade_id_key"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    grade_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", name="surveys_student_id_fkey"), nullable=False
    )
    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("subjects.id", name="surveys_subject_id_fkey"), nullable=False
    )
    teacher_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("teachers.id", name="surveys_teacher_id_fkey", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[SurveyStatus] = mapped_column(
        Enum(SurveyStatus, name="survey_status", values_callable=lambda e: [m.value for m in e]),
        default=SurveyStatus.INCOMPLETE,
        nullable=False,
    )
    # Ordered [{"question_id": int, "answer": str}, ...]
    answers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
