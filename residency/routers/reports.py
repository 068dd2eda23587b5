import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from residency.core.db import get_db
from residency.core.deps import get_current_user
from residency.models.grade import GradeReport, ReportStatus
from residency.models.subject import Subject
from residency.models.user import User
from residency.schemas.report import GradeReportResponse, ReportAcceptRequest
from residency.services.evaluation_service import evaluation_service
from residency.services.ownership import scope_student_filter
from residency.services.query import RecordFilters, filter_and_sort

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=list[GradeReportResponse])
def list_reports(
    student_id: uuid.UUID | None = None,
    subject_id: uuid.UUID | None = None,
    teacher_id: uuid.UUID | None = None,
    status: ReportStatus | None = None,
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
        db.query(GradeReport).all(),
        filters,
        "generated_at",
        descending=True,
        teacher_of_subject=teacher_of_subject,
    )


@router.get("/{report_id}", response_model=GradeReportResponse)
def get_report(
    report_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    report = db.get(GradeReport, report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    scope_student_filter(db, current_user, report.student_id)
    return report


@router.post("/{report_id}/accept", response_model=GradeReportResponse)
def accept_report(
    report_id: uuid.UUID,
    payload: ReportAcceptRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return evaluation_service.accept_report(
        db,
        report_id=report_id,
        actor=current_user,
        consent=payload.consent,
    )
