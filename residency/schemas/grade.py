import uuid
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from residency.services.scoring import GradeStatus, normalize_competency_scores

CompetencyScores = Annotated[list[int | None], AfterValidator(normalize_competency_scores)]
GradeValue = Annotated[float, Field(ge=1.0, le=7.0)]


class GradeCreate(BaseModel):
    student_id: uuid.UUID
    subject_id: uuid.UUID


class GradeUpdate(BaseModel):
    grade1: GradeValue | None = None
    grade3: GradeValue | None = None
    competency_scores: CompetencyScores | None = None


class EvaluationRequest(BaseModel):
    theoretical: GradeValue | None = None
    teaching_activity: GradeValue | None = None
    competency_scores: CompetencyScores = Field(default_factory=list)
    feedback: str = ""


class GradeResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    subject_id: uuid.UUID
    grade1: float | None = None
    grade2: float | None = None
    grade3: float | None = None
    competency_scores: list[int | None]
    is_finalized: bool
    last_modified: datetime
    final_grade: str
    competency_average: float | None = None
    status: GradeStatus

    model_config = ConfigDict(from_attributes=True)
