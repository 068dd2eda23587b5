from pydantic import BaseModel

from residency.schemas.grade import GradeResponse
from residency.schemas.report import GradeReportResponse
from residency.schemas.survey import SurveyResponse


class EvaluationResponse(BaseModel):
    grade: GradeResponse
    report: GradeReportResponse
    survey: SurveyResponse | None = None
