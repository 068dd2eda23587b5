import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from residency.core.clock import utcnow
from residency.core.db import Base


class ContractType(str, enum.Enum):
    PLANTA = "planta"
    HONORARIOS = "honorarios"
    AD_HONOREM = "ad_honorem"


class AcademicRank(str, enum.Enum):
    ADJUNTO = "adjunto"
    TITULAR = "titular"
    COLABORADOR = "colaborador"


class Teacher(Base):
    __tablename__ = "teachers"
    __table_args__ = (UniqueConstraint("user_id", name="teachers_user_id_key"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", name="teachers_user_id_fkey"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    rut: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    contract_type: Mapped[ContractType | None] = mapped_column(
        Enum(ContractType, name="contract_type", values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    academic_rank: Mapped[AcademicRank | None] = mapped_column(
        Enum(AcademicRank, name="academic_rank", values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}".strip()
