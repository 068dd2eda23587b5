import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from residency.core.clock import utcnow
from residency.core.errors import InvalidTransitionError, NotFoundError
from residency.core.permissions import Capability, require_permission
from residency.models.subject import Subject
from residency.models.survey import Survey, SurveyStatus
from residency.models.user import User
from residency.services.ownership import require_own_student_record

logger = logging.getLogger(__name__)


class SurveyService:
    """Rotation surveys: one per finalized grade, answered by its student."""

    def get_for_grade(self, db: Session, grade_id: uuid.UUID) -> Survey | None:
        return db.query(Survey).filter(Survey.grade_id == grade_id).first()

    def ensure_survey_for_grade(
        self,
        db: Session,
        *,
        grade_id: uuid.UUID,
        student_id: uuid.UUID,
        subject_id: uuid.UUID,
        teacher_id: uuid.UUID | None = None,
    ) -> Survey | None:
        """
        Create the rotation survey for a grade unless one already exists.

        Returns the new survey, or None when the grade already had one. The
        survey is flushed into the caller's transaction, not committed.
        """
        if self.get_for_grade(db, grade_id) is not None:
            logger.info(f"Survey already exists for grade {grade_id}; skipping cascade")
            return None

        if teacher_id is None:
            subject = db.get(Subject, subject_id)
            teacher_id = subject.teacher_id if subject else None

        survey = Survey(
            id=uuid.uuid4(),
            grade_id=grade_id,
            student_id=student_id,
            subject_id=subject_id,
            teacher_id=teacher_id,
            status=SurveyStatus.INCOMPLETE,
            answers=[],
        )
        db.add(survey)
        db.flush()
        logger.info(f"Created rotation survey {survey.id} for grade {grade_id}")
        return survey

    def submit(
        self,
        db: Session,
        *,
        survey_id: uuid.UUID,
        actor: User,
        answers: Sequence[dict[str, Any]],
    ) -> Survey:
        require_permission(actor.role, Capability.EDIT)

        survey = db.get(Survey, survey_id)
        if not survey:
            raise NotFoundError("Survey not found")

        student = require_own_student_record(db, actor, survey.student_id)

        if survey.status == SurveyStatus.COMPLETED:
            raise InvalidTransitionError("Survey already completed")
        if not answers:
            raise InvalidTransitionError("A survey needs at least one answer")

        survey.answers = [
            {"question_id": int(item["question_id"]), "answer": str(item["answer"])}
            for item in answers
        ]
        survey.status = SurveyStatus.COMPLETED
        survey.completed_at = utcnow()
        db.add(survey)
        db.commit()
        db.refresh(survey)

        logger.info(f"Survey {survey.id} completed by student {student.id}")
        return survey


survey_service = SurveyService()
