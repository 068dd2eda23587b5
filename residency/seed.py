import logging
import uuid
from datetime import date, datetime

from sqlalchemy.orm import Session

from residency.core.db import SessionLocal, init_db
from residency.core.permissions import UserRole
from residency.models.annotation import Annotation, AnnotationType
from residency.models.grade import Grade, GradeReport, ReportStatus
from residency.models.student import Student
from residency.models.subject import Subject
from residency.models.survey import Survey, SurveyStatus
from residency.models.teacher import AcademicRank, ContractType, Teacher
from residency.models.user import User
from residency.services.scoring import GradeComponents, compute_final_grade, compute_final_grade_value

logger = logging.getLogger(__name__)

STUDENTS = [
    {
        "name": "Ana",
        "last_name": "González",
        "rut": "19.123.456-7",
        "email": "ana.gonzalez@email.com",
        "admission_date": date(2022, 3, 1),
        "phone": "+56912345678",
        "undergrad_university": "Universidad de Chile",
        "nationality": "Chilena",
        "birth_date": date(1998, 3, 15),
    },
    {
        "name": "Luis",
        "last_name": "Martínez",
        "rut": "20.987.654-3",
        "email": "luis.martinez@email.com",
        "admission_date": date(2023, 3, 1),
        "phone": "+56987654321",
        "undergrad_university": "P. Universidad Católica",
        "nationality": "Chilena",
        "birth_date": date(1999, 11, 20),
    },
    {
        "name": "Carla",
        "last_name": "Soto",
        "rut": "21.456.789-K",
        "email": "carla.soto@email.com",
        "admission_date": date(2024, 3, 1),
        "phone": "+56911223344",
        "undergrad_university": "Universidad de Concepción",
        "nationality": "Chilena",
        "birth_date": date(2000, 7, 1),
    },
]

TEACHERS = [
    {
        "name": "Ricardo",
        "last_name": "Pérez",
        "rut": "12.345.678-9",
        "email": "ricardo.perez@grua.cl",
        "phone": "+56955667788",
        "contract_type": ContractType.PLANTA,
        "academic_rank": AcademicRank.TITULAR,
    },
    {
        "name": "Mónica",
        "last_name": "Herrera",
        "rut": "14.876.543-2",
        "email": "monica.herrera@grua.cl",
        "phone": "+56933445566",
        "contract_type": ContractType.HONORARIOS,
        "academic_rank": AcademicRank.COLABORADOR,
    },
]

# (name, code, teacher index, credits, semester, description)
SUBJECTS = [
    ("Anatomía Radiológica", "RAD-101", 0, 10, 1, "Estudio de la anatomía humana a través de imágenes radiológicas."),
    ("Física de Radiaciones", "RAD-102", 1, 8, 1, "Principios físicos de la radiación y su aplicación diagnóstica."),
    ("Procedimientos Especiales", "RAD-201", 0, 12, 3, "Técnicas y protocolos para procedimientos avanzados e intervencionistas."),
]

# (student index, subject index, grade1, grade2, grade3, competency scores, last modified, finalized)
GRADES = [
    (0, 0, 6.5, 6.1, 5.5, [7, 6, 5, 7, 6, 6, 5, 7], datetime(2024, 5, 10, 10, 0), True),
    (0, 1, 5.8, 6.0, 6.0, [6, 6, 6, 6, 6, 6, 6, 6], datetime(2024, 5, 11, 11, 30), False),
    (1, 0, 7.0, 7.0, 7.0, [7, 7, 7, 7, 7, 7, 7, 7], datetime(2024, 5, 12, 9, 0), True),
    (2, 2, 3.9, 3.8, 3.5, [4, 4, 3, 4, 4, 3, 4, 5], datetime(2024, 5, 13, 14, 0), False),
    (1, 1, 6.2, 6.3, None, [7, 6, 6, 7, 6, 6, 6, 6], datetime(2024, 5, 14, 16, 0), False),
]

# (grade index, feedback, generated, signed, accepted)
REPORTS = [
    (
        0,
        "Sólida comprensión de la anatomía en TC y RM. Se sugiere reforzar la "
        "identificación de variantes anatómicas menos comunes.",
        datetime(2024, 5, 10, 10, 5),
        datetime(2024, 5, 11, 9, 0),
        None,
    ),
    (
        2,
        "Dominio excepcional en todos los aspectos de la anatomía radiológica. "
        "Felicitaciones por un desempeño sobresaliente.",
        datetime(2024, 5, 14, 16, 5),
        datetime(2024, 5, 15, 11, 0),
        datetime(2024, 5, 16, 15, 0),
    ),
]

# (student index, author index, created, type, text)
ANNOTATIONS = [
    (0, 0, datetime(2024, 3, 15, 9, 0), AnnotationType.POSITIVE, "Excelente iniciativa durante la rotación de Radiología Pediátrica."),
    (0, 1, datetime(2024, 4, 22, 14, 30), AnnotationType.OBSERVATION, "Repasar protocolos de contraste en pacientes con insuficiencia renal."),
    (1, 0, datetime(2024, 5, 10, 11, 0), AnnotationType.POSITIVE, "Excelente presentación de caso clínico sobre patologías intersticiales."),
    (2, 1, datetime(2024, 5, 18, 16, 0), AnnotationType.NEGATIVE, "Llegada tardía a la reunión clínica sin justificación previa."),
]


def _user(db: Session, email: str, full_name: str, role: UserRole) -> User:
    user = db.query(User).filter_by(email=email).first()
    if not user:
        user = User(id=uuid.uuid4(), email=email, full_name=full_name, role=role, is_active=True)
        db.add(user)
        db.flush()
        logger.info(f"Created User: {email} ({role.value})")
    return user


def seed_db(db: Session) -> None:
    if db.query(Student).first():
        logger.info("Database already seeded, skipping")
        return

    logger.info("Seeding database...")
    _user(db, "admin@residencia.cl", "Administración del Programa", UserRole.ADMINISTRATOR)

    teachers = []
    for data in TEACHERS:
        user = _user(db, data["email"], f"{data['name']} {data['last_name']}", UserRole.TEACHER)
        teacher = Teacher(id=uuid.uuid4(), user_id=user.id, **data)
        db.add(teacher)
        teachers.append(teacher)

    students = []
    for data in STUDENTS:
        user = _user(db, data["email"], f"{data['name']} {data['last_name']}", UserRole.STUDENT)
        student = Student(id=uuid.uuid4(), user_id=user.id, **data)
        db.add(student)
        students.append(student)

    subjects = []
    for name, code, teacher_index, credits, semester, description in SUBJECTS:
        subject = Subject(
            id=uuid.uuid4(),
            name=name,
            code=code,
            teacher_id=teachers[teacher_index].id,
            credits=credits,
            semester=semester,
            description=description,
        )
        db.add(subject)
        subjects.append(subject)
    db.flush()

    grades = []
    for student_index, subject_index, g1, g2, g3, scores, modified, finalized in GRADES:
        grade = Grade(
            id=uuid.uuid4(),
            student_id=students[student_index].id,
            subject_id=subjects[subject_index].id,
            grade1=g1,
            grade2=g2,
            grade3=g3,
            competency_scores=scores,
            is_finalized=finalized,
            last_modified=modified,
        )
        db.add(grade)
        grades.append(grade)
    db.flush()

    for grade_index, feedback, generated, signed, accepted in REPORTS:
        grade = grades[grade_index]
        subject = db.get(Subject, grade.subject_id)
        components = GradeComponents(grade.grade1, grade.grade2, grade.grade3, grade.competency_scores)
        db.add(
            GradeReport(
                id=uuid.uuid4(),
                grade_id=grade.id,
                student_id=grade.student_id,
                subject_id=grade.subject_id,
                teacher_id=subject.teacher_id,
                generated_at=generated,
                grade_summary={
                    "grade1": grade.grade1,
                    "grade2": grade.grade2,
                    "grade3": grade.grade3,
                    "final_grade": compute_final_grade(components),
                    "final_grade_value": compute_final_grade_value(components),
                },
                competency_scores=list(grade.competency_scores),
                feedback=feedback,
                status=ReportStatus.COMPLETED if accepted else ReportStatus.PENDING_ACCEPTANCE,
                signed_at=signed,
                accepted_at=accepted,
            )
        )
        db.add(
            Survey(
                id=uuid.uuid4(),
                grade_id=grade.id,
                student_id=grade.student_id,
                subject_id=grade.subject_id,
                teacher_id=subject.teacher_id,
                status=SurveyStatus.INCOMPLETE,
                answers=[],
            )
        )

    for student_index, author_index, created, kind, text in ANNOTATIONS:
        db.add(
            Annotation(
                id=uuid.uuid4(),
                student_id=students[student_index].id,
                author_id=teachers[author_index].id,
                created_at=created,
                type=kind,
                text=text,
            )
        )

    db.commit()
    logger.info("Seeding complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        seed_db(session)
    finally:
        session.close()
