"""
Weighted final grade computation.

Components (1.0-7.0 scale):
- grade1: theoretical exam, 60%
- grade2: competency average, 30%
- grade3: teaching activity, 10%

Only present components contribute; their weights are rescaled to sum to 1.
"""

import enum
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from residency.models.grade import COMPETENCY_SLOTS, GradeReport, ReportStatus

NOT_AVAILABLE = "N/A"

THEORETICAL_WEIGHT = 0.60
COMPETENCY_WEIGHT = 0.30
TEACHING_ACTIVITY_WEIGHT = 0.10

MIN_COMPETENCY_SCORE = 1
MAX_COMPETENCY_SCORE = 7


@dataclass
class GradeComponents:
    """Detached grade inputs, scored before anything is written."""

    grade1: float | None = None
    grade2: float | None = None
    grade3: float | None = None
    competency_scores: list[int | None] = field(default_factory=list)


class GradeStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    GRADES_OK = "grades_ok"
    PENDING_ACCEPTANCE = "pending_acceptance"
    COMPLETED = "completed"


def _finite(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_competency_scores(scores: Sequence[int | None] | None) -> list[int | None]:
    """Return exactly COMPETENCY_SLOTS entries, each None or an int in 1..7."""
    if scores is None:
        return [None] * COMPETENCY_SLOTS
    if len(scores) > COMPETENCY_SLOTS:
        raise ValueError(f"At most {COMPETENCY_SLOTS} competency scores are allowed")

    normalized: list[int | None] = []
    for score in scores:
        if score is None:
            normalized.append(None)
            continue
        if isinstance(score, bool) or not isinstance(score, int):
            raise ValueError(f"Competency score must be an integer, got {score!r}")
        if not MIN_COMPETENCY_SCORE <= score <= MAX_COMPETENCY_SCORE:
            raise ValueError(
                f"Competency score must be between {MIN_COMPETENCY_SCORE} "
                f"and {MAX_COMPETENCY_SCORE}, got {score}"
            )
        normalized.append(score)
    normalized.extend([None] * (COMPETENCY_SLOTS - len(normalized)))
    return normalized


def average_competency_scores(scores: Iterable[int | None] | None) -> float | None:
    """Mean of the set sub-scores; unset entries are skipped, not zeroed."""
    present = [value for value in (_finite(s) for s in (scores or [])) if value is not None]
    if not present:
        return None
    return sum(present) / len(present)


def compute_competency_average(grade: Any) -> float | None:
    explicit = _finite(getattr(grade, "grade2", None))
    if explicit is not None:
        return explicit
    return average_competency_scores(getattr(grade, "competency_scores", None))


def compute_final_grade_value(grade: Any) -> float | None:
    weighted = (
        (_finite(getattr(grade, "grade1", None)), THEORETICAL_WEIGHT),
        (compute_competency_average(grade), COMPETENCY_WEIGHT),
        (_finite(getattr(grade, "grade3", None)), TEACHING_ACTIVITY_WEIGHT),
    )
    present = [(value, weight) for value, weight in weighted if value is not None]
    if not present:
        return None

    total_weight = sum(weight for _, weight in present)
    return sum(value * weight for value, weight in present) / total_weight


def format_grade(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    # Half-up on the exact binary value: 6.25 -> "6.3", but 6.35 is stored
    # as 6.3499... and displays as "6.3", same as the dashboard.
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_final_grade(grade: Any) -> str:
    return format_grade(compute_final_grade_value(grade))


def has_all_components(grade: Any) -> bool:
    return (
        _finite(getattr(grade, "grade1", None)) is not None
        and compute_competency_average(grade) is not None
        and _finite(getattr(grade, "grade3", None)) is not None
    )


def grade_status(grade: Any, reports: Iterable[GradeReport] = ()) -> GradeStatus:
    """Grade-manager status; the most recent report wins."""
    latest: GradeReport | None = None
    for report in reports:
        if report.grade_id != grade.id:
            continue
        if latest is None or report.generated_at >= latest.generated_at:
            latest = report

    if latest is not None:
        if latest.status == ReportStatus.COMPLETED:
            return GradeStatus.COMPLETED
        return GradeStatus.PENDING_ACCEPTANCE
    if has_all_components(grade):
        return GradeStatus.GRADES_OK
    return GradeStatus.IN_PROGRESS
