import uuid
from collections import defaultdict
from collections.abc import Iterable

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from residency.core.db import get_db
from residency.core.deps import get_current_user
from residency.models.grade import Grade, GradeReport
from residency.models.subject import Subject
from residency.models.user import User
from residency.schemas.evaluation import EvaluationResponse
from residency.schemas.grade import EvaluationRequest, GradeCreate, GradeResponse, GradeUpdate
from residency.schemas.report import GradeReportResponse
from residency.schemas.survey import SurveyResponse
from residency.services.evaluation_service import evaluation_service
from residency.services.ownership import scope_student_filter
from residency.services.query import RecordFilters, filter_and_sort
from residency.services.scoring import (
    GradeStatus,
    compute_competency_average,
    compute_final_grade,
    grade_status,
)

router = APIRouter(prefix="/grades", tags=["grades"])


def _reports_by_grade(db: Session, grade_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, list[GradeReport]]:
    ids = list(grade_ids)
    grouped: dict[uuid.UUID, list[GradeReport]] = defaultdict(list)
    if not ids:
        return grouped
    for report in db.query(GradeReport).filter(GradeReport.grade_id.in_(ids)).all():
        grouped[report.grade_id].append(report)
    return grouped


def to_grade_response(grade: Grade, reports: Iterable[GradeReport]) -> GradeResponse:
    return GradeResponse(
        id=grade.id,
        student_id=grade.student_id,
        subject_id=grade.subject_id,
        grade1=grade.grade1,
        grade2=grade.grade2,
        grade3=grade.grade3,
        competency_scores=list(grade.competency_scores or []),
        is_finalized=grade.is_finalized,
        last_modified=grade.last_modified,
        final_grade=compute_final_grade(grade),
        competency_average=compute_competency_average(grade),
        status=grade_status(grade, reports),
    )


def _require_grade_visible(db: Session, user: User, grade_id: uuid.UUID) -> Grade:
    grade = db.get(Grade, grade_id)
    if not grade:
        raise HTTPException(status_code=404, detail="Grade not found")
    scope_student_filter(db, user, grade.student_id)
    return grade


@router.post("", response_model=GradeResponse, status_code=status.HTTP_201_CREATED)
def create_grade(
    payload: GradeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    grade = evaluation_service.create_grade(
        db,
        actor=current_user,
        student_id=payload.student_id,
        subject_id=payload.subject_id,
    )
    return to_grade_response(grade, [])


@router.get("", response_model=list[GradeResponse])
def list_grades(
    student_id: uuid.UUID | None = None,
    subject_id: uuid.UUID | None = None,
    teacher_id: uuid.UUID | None = None,
    status: GradeStatus | None = None,
    min_competency: float | None = None,
    max_competency: float | None = None,
    sort: str | None = "last_modified",
    descending: bool = True,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    filters = RecordFilters(
        student_id=scope_student_filter(db, current_user, student_id),
        subject_id=subject_id,
        teacher_id=teacher_id,
        status=status,
        min_competency=min_competency,
        max_competency=max_competency,
    )

    grades = db.query(Grade).all()
    reports = _reports_by_grade(db, (g.id for g in grades))
    teacher_of_subject = {s.id: s.teacher_id for s in db.query(Subject).all()}

    try:
        selected = filter_and_sort(
            grades,
            filters,
            sort,
            descending=descending,
            teacher_of_subject=teacher_of_subject,
            status_of=lambda grade: grade_status(grade, reports[grade.id]),
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return [to_grade_response(grade, reports[grade.id]) for grade in selected]


@router.get("/{grade_id}", response_model=GradeResponse)
def get_grade(
    grade_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    grade = _require_grade_visible(db, current_user, grade_id)
    return to_grade_response(grade, _reports_by_grade(db, [grade.id])[grade.id])


@router.patch("/{grade_id}", response_model=GradeResponse)
def update_grade(
    grade_id: uuid.UUID,
    payload: GradeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    grade = evaluation_service.update_scores(
        db,
        grade_id=grade_id,
        actor=current_user,
        changes=payload.model_dump(exclude_unset=True),
    )
    return to_grade_response(grade, _reports_by_grade(db, [grade.id])[grade.id])


@router.delete("/{grade_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_grade(
    grade_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    evaluation_service.delete_grade(db, grade_id=grade_id, actor=current_user)
    return None


@router.post("/{grade_id}/evaluate", response_model=EvaluationResponse)
def evaluate_grade(
    grade_id: uuid.UUID,
    payload: EvaluationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = evaluation_service.evaluate(
        db,
        grade_id=grade_id,
        actor=current_user,
        theoretical=payload.theoretical,
        teaching_activity=payload.teaching_activity,
        competency_scores=payload.competency_scores,
        feedback=payload.feedback,
    )
    reports = _reports_by_grade(db, [result.grade.id])[result.grade.id]
    return EvaluationResponse(
        grade=to_grade_response(result.grade, reports),
        report=GradeReportResponse.model_validate(result.report),
        survey=SurveyResponse.model_validate(result.survey) if result.survey else None,
    )
