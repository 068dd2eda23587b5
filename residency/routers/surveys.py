import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from residency.core.db import get_db
from residency.core.deps import get_current_user
from residency.models.subject import Subject
from residency.models.survey import Survey, SurveyStatus
from residency.models.user import User
from residency.schemas.survey import SurveyResponse, SurveySubmit
from residency.services.ownership import scope_student_filter
from residency.services.query import RecordFilters, filter_and_sort
from residency.services.survey_service import survey_service

router = APIRouter(prefix="/surveys", tags=["surveys"])


@router.get("", response_model=list[SurveyResponse])
def list_surveys(
    student_id: uuid.UUID | None = None,
    subject_id: uuid.UUID | None = None,
    teacher_id: uuid.UUID | None = None,
    status: SurveyStatus | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    filters = RecordFilters(
        student_id=scope_student_filter(db, current_user, student_id),
        subject_id=subject_id,
        teacher_id=teacher_id,
        status=status,
    )
    teacher_of_subject = {s.id: s.teacher_id for s in db.query(Subject).all()}
    return filter_and_sort(
        db.query(Survey).all(),
        filters,
        "completed_at",
        descending=True,
        teacher_of_subject=teacher_of_subject,
    )


@router.get("/{survey_id}", response_model=SurveyResponse)
def get_survey(
    survey_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    survey = db.get(Survey, survey_id)
    if not survey:
        raise HTTPException(status_code=404, detail="Survey not found")
    scope_student_filter(db, current_user, survey.student_id)
    return survey


@router.post("/{survey_id}/submit", response_model=SurveyResponse)
def submit_survey(
    survey_id: uuid.UUID,
    payload: SurveySubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return survey_service.submit(
        db,
        survey_id=survey_id,
        actor=current_user,
        answers=[answer.model_dump() for answer in payload.answers],
    )
