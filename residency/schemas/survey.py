import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from residency.models.survey import SurveyStatus


class SurveyAnswer(BaseModel):
    question_id: int = Field(..., ge=1)
    answer: str


class SurveyResponse(BaseModel):
    id: uuid.UUID
    grade_id: uuid.UUID
    student_id: uuid.UUID
    subject_id: uuid.UUID
    teacher_id: uuid.UUID | None = None
    status: SurveyStatus
    answers: list[SurveyAnswer] = []
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class SurveySubmit(BaseModel):
    answers: list[SurveyAnswer] = Field(..., min_length=1)
