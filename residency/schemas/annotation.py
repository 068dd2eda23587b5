import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, constr

from residency.models.annotation import AnnotationType


class AnnotationCreate(BaseModel):
    student_id: uuid.UUID
    type: AnnotationType
    text: constr(strip_whitespace=True, min_length=1)


class AnnotationResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    author_id: uuid.UUID | None = None
    type: AnnotationType
    text: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
