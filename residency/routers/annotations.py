import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from residency.core.clock import utcnow
from residency.core.db import get_db
from residency.core.deps import get_current_user
from residency.core.permissions import Capability, require_permission
from residency.models.annotation import Annotation, AnnotationType
from residency.models.student import Student
from residency.models.user import User
from residency.schemas.annotation import AnnotationCreate, AnnotationResponse
from residency.services.ownership import scope_student_filter, teacher_profile
from residency.services.query import RecordFilters, filter_and_sort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/annotations", tags=["annotations"])


@router.post("", response_model=AnnotationResponse, status_code=status.HTTP_201_CREATED)
def create_annotation(
    payload: AnnotationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_permission(current_user.role, Capability.CREATE)
    if not db.get(Student, payload.student_id):
        raise HTTPException(status_code=404, detail="Student not found")

    author = teacher_profile(db, current_user)
    annotation = Annotation(
        id=uuid.uuid4(),
        student_id=payload.student_id,
        author_id=author.id if author else None,
        type=payload.type,
        text=payload.text,
        created_at=utcnow(),
    )
    db.add(annotation)
    db.commit()
    db.refresh(annotation)
    logger.info(f"Annotation ({annotation.type.value}) recorded for student {payload.student_id}")
    return annotation


@router.get("", response_model=list[AnnotationResponse])
def list_annotations(
    student_id: uuid.UUID | None = None,
    teacher_id: uuid.UUID | None = None,
    type: AnnotationType | None = None,
    descending: bool = True,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Annotation history, newest first by default."""
    filters = RecordFilters(
        student_id=scope_student_filter(db, current_user, student_id),
        teacher_id=teacher_id,
        status=type,
    )
    return filter_and_sort(
        db.query(Annotation).all(),
        filters,
        "created_at",
        descending=descending,
    )
