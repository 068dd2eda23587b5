import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from residency.models.grade import ReportStatus


class GradeReportResponse(BaseModel):
    id: uuid.UUID
    grade_id: uuid.UUID
    student_id: uuid.UUID
    subject_id: uuid.UUID
    teacher_id: uuid.UUID | None = None
    generated_at: datetime
    grade_summary: dict[str, Any]
    competency_scores: list[int | None]
    feedback: str
    status: ReportStatus
    signed_at: datetime
    accepted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ReportAcceptRequest(BaseModel):
    consent: bool
