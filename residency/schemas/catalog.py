import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, constr

from residency.models.teacher import AcademicRank, ContractType


class StudentCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=120)
    last_name: constr(strip_whitespace=True, min_length=1, max_length=120)
    user_id: uuid.UUID | None = None
    rut: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    admission_date: date | None = None
    birth_date: date | None = None
    undergrad_university: str | None = None
    nationality: str | None = None


class StudentSummary(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID | None = None
    name: str
    last_name: str
    full_name: str
    rut: str | None = None
    email: str | None = None
    admission_date: date | None = None

    model_config = ConfigDict(from_attributes=True)


class TeacherCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=120)
    last_name: constr(strip_whitespace=True, min_length=1, max_length=120)
    user_id: uuid.UUID | None = None
    rut: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    contract_type: ContractType | None = None
    academic_rank: AcademicRank | None = None


class TeacherSummary(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID | None = None
    name: str
    last_name: str
    full_name: str
    email: str | None = None
    contract_type: ContractType | None = None
    academic_rank: AcademicRank | None = None

    model_config = ConfigDict(from_attributes=True)


class SubjectCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    code: constr(strip_whitespace=True, min_length=1, max_length=40)
    teacher_id: uuid.UUID | None = None
    credits: int | None = None
    semester: int | None = None
    description: str | None = None


class SubjectSummary(BaseModel):
    id: uuid.UUID
    name: str
    code: str
    teacher_id: uuid.UUID | None = None
    credits: int | None = None
    semester: int | None = None
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)
