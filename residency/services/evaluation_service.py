import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from residency.core.clock import utcnow
from residency.core.errors import InvalidTransitionError, NotFoundError, PermissionDeniedError
from residency.core.permissions import Capability, UserRole, require_permission
from residency.models.grade import Grade, GradeReport, ReportStatus, empty_competency_scores
from residency.models.student import Student
from residency.models.subject import Subject
from residency.models.survey import Survey
from residency.models.user import User
from residency.services.ownership import require_own_student_record, require_subject_teacher
from residency.services.scoring import (
    GradeComponents,
    average_competency_scores,
    compute_final_grade,
    compute_final_grade_value,
    normalize_competency_scores,
)
from residency.services.survey_service import survey_service

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"grade1", "grade3", "competency_scores"})


@dataclass
class EvaluationResult:
    grade: Grade
    report: GradeReport
    survey: Survey | None


def _normalize_scores(scores: Sequence[int | None] | None) -> list[int | None]:
    try:
        return normalize_competency_scores(scores)
    except ValueError as exc:
        raise InvalidTransitionError(str(exc)) from exc


class EvaluationService:
    """Grade lifecycle: created -> finalized (report pending) -> accepted."""

    def _require_grade(self, db: Session, grade_id: uuid.UUID) -> Grade:
        grade = db.get(Grade, grade_id)
        if not grade:
            raise NotFoundError("Grade not found")
        return grade

    def _require_rotation(self, db: Session, grade: Grade) -> tuple[Student, Subject]:
        student = db.get(Student, grade.student_id)
        if not student:
            raise NotFoundError("Student not found")
        subject = db.get(Subject, grade.subject_id)
        if not subject:
            raise NotFoundError("Subject not found")
        return student, subject

    def create_grade(
        self,
        db: Session,
        *,
        actor: User,
        student_id: uuid.UUID,
        subject_id: uuid.UUID,
    ) -> Grade:
        require_permission(actor.role, Capability.CREATE)

        if not db.get(Student, student_id):
            raise NotFoundError("Student not found")
        subject = db.get(Subject, subject_id)
        if not subject:
            raise NotFoundError("Subject not found")
        require_subject_teacher(db, actor, subject)

        grade = Grade(
            id=uuid.uuid4(),
            student_id=student_id,
            subject_id=subject_id,
            competency_scores=empty_competency_scores(),
            is_finalized=False,
            last_modified=utcnow(),
        )
        db.add(grade)
        db.commit()
        db.refresh(grade)
        logger.info(f"Linked student {student_id} to subject {subject_id} (grade {grade.id})")
        return grade

    def update_scores(
        self,
        db: Session,
        *,
        grade_id: uuid.UUID,
        actor: User,
        changes: Mapping[str, Any],
    ) -> Grade:
        """
        Partial edit of an open grade.

        Only keys present in `changes` are touched; an explicit None clears
        the component (or every competency slot).
        """
        require_permission(actor.role, Capability.EDIT)
        grade = self._require_grade(db, grade_id)
        _, subject = self._require_rotation(db, grade)
        require_subject_teacher(db, actor, subject)

        if grade.is_finalized:
            raise InvalidTransitionError("Grade is finalized; submit a new evaluation instead")

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidTransitionError(f"Fields not editable: {', '.join(sorted(unknown))}")

        for field_name, value in changes.items():
            if field_name == "competency_scores":
                value = _normalize_scores(value)
            setattr(grade, field_name, value)

        grade.last_modified = utcnow()
        db.add(grade)
        db.commit()
        db.refresh(grade)
        return grade

    def evaluate(
        self,
        db: Session,
        *,
        grade_id: uuid.UUID,
        actor: User,
        theoretical: float | None,
        teaching_activity: float | None,
        competency_scores: Sequence[int | None] | None,
        feedback: str = "",
    ) -> EvaluationResult:
        """
        Finalize a grade and emit its report and rotation survey.

        Score write, finalization flag, report and survey are committed as a
        single unit; on any failure nothing is persisted.

        Re-evaluating an already finalized grade is accepted and appends a
        new report; the survey cascade is a no-op the second time.
        """
        require_permission(actor.role, Capability.EDIT)
        if actor.role == UserRole.STUDENT:
            raise PermissionDeniedError("Students cannot evaluate grades")

        grade = self._require_grade(db, grade_id)
        student, subject = self._require_rotation(db, grade)
        require_subject_teacher(db, actor, subject)

        scores = _normalize_scores(competency_scores)
        competency_average = average_competency_scores(scores)
        components = GradeComponents(
            grade1=theoretical,
            grade2=competency_average,
            grade3=teaching_activity,
            competency_scores=scores,
        )
        final_value = compute_final_grade_value(components)
        if final_value is None:
            raise InvalidTransitionError("Evaluation has no gradable components")

        now = utcnow()
        try:
            grade.grade1 = theoretical
            grade.grade2 = competency_average
            grade.grade3 = teaching_activity
            grade.competency_scores = list(scores)
            grade.is_finalized = True
            grade.last_modified = now
            db.add(grade)

            report = GradeReport(
                id=uuid.uuid4(),
                grade_id=grade.id,
                student_id=student.id,
                subject_id=subject.id,
                teacher_id=subject.teacher_id,
                generated_at=now,
                grade_summary={
                    "grade1": theoretical,
                    "grade2": competency_average,
                    "grade3": teaching_activity,
                    "final_grade": compute_final_grade(components),
                    "final_grade_value": final_value,
                },
                competency_scores=list(scores),
                feedback=(feedback or "").strip(),
                status=ReportStatus.PENDING_ACCEPTANCE,
                signed_at=now,
            )
            db.add(report)
            db.flush()

            survey = survey_service.ensure_survey_for_grade(
                db,
                grade_id=grade.id,
                student_id=student.id,
                subject_id=subject.id,
                teacher_id=subject.teacher_id,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(grade)
        db.refresh(report)
        if survey is not None:
            db.refresh(survey)

        logger.info(
            f"Grade {grade.id} finalized with {report.grade_summary['final_grade']}; "
            f"report {report.id} pending acceptance"
        )
        return EvaluationResult(grade=grade, report=report, survey=survey)

    def accept_report(
        self,
        db: Session,
        *,
        report_id: uuid.UUID,
        actor: User,
        consent: bool,
    ) -> GradeReport:
        require_permission(actor.role, Capability.EDIT)

        report = db.get(GradeReport, report_id)
        if not report:
            raise NotFoundError("Report not found")

        require_own_student_record(db, actor, report.student_id)

        if not consent:
            raise InvalidTransitionError("Report acceptance requires explicit consent")
        if report.status == ReportStatus.COMPLETED:
            raise InvalidTransitionError("Report already accepted")

        report.status = ReportStatus.COMPLETED
        report.accepted_at = utcnow()
        db.add(report)
        db.commit()
        db.refresh(report)

        logger.info(f"Report {report.id} accepted by student {report.student_id}")
        return report

    def delete_grade(self, db: Session, *, grade_id: uuid.UUID, actor: User) -> None:
        require_permission(actor.role, Capability.DELETE)
        grade = self._require_grade(db, grade_id)
        db.delete(grade)
        db.commit()
        logger.info(f"Grade {grade_id} deleted by {actor.email}")


evaluation_service = EvaluationService()
