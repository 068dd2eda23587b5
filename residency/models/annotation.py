import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from residency.core.clock import utcnow
from residency.core.db import Base


class AnnotationType(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    OBSERVATION = "observation"


class Annotation(Base):
    __tablename__ = "annotations"
    __table_args__ = (Index("idx_annotations_student", "student_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("students.id", name="annotations_student_id_fkey", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("teachers.id", name="annotations_author_id_fkey", ondelete="SET NULL"),
        nullable=True,
    )
    type: Mapped[AnnotationType] = mapped_column(
        Enum(AnnotationType, name="annotation_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
