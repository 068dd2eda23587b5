"""
Filtering and ordering for the read-side views.

Filters compose as a conjunction of predicates; ordering uses a named sort
key with missing values always placed last.
"""

import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from residency.services.scoring import compute_competency_average, compute_final_grade_value

Predicate = Callable[[Any], bool]


@dataclass
class RecordFilters:
    student_id: uuid.UUID | None = None
    subject_id: uuid.UUID | None = None
    teacher_id: uuid.UUID | None = None
    status: str | None = None
    min_competency: float | None = None
    max_competency: float | None = None


def _status_value(value: Any) -> Any:
    return getattr(value, "value", value)


def default_status_of(record: Any) -> Any:
    if hasattr(record, "status"):
        return _status_value(record.status)
    return _status_value(getattr(record, "type", None))


def teacher_resolver(
    teacher_of_subject: Mapping[uuid.UUID, uuid.UUID | None] | None = None,
) -> Callable[[Any], uuid.UUID | None]:
    """Own teacher_id/author_id first, then the subject's assigned teacher."""
    subject_teachers = teacher_of_subject or {}

    def resolve(record: Any) -> uuid.UUID | None:
        for attr in ("teacher_id", "author_id"):
            value = getattr(record, attr, None)
            if value is not None:
                return value
        subject_id = getattr(record, "subject_id", None)
        if subject_id is None:
            return None
        return subject_teachers.get(subject_id)

    return resolve


def equals(getter: Callable[[Any], Any], expected: Any) -> Predicate:
    return lambda record: getter(record) == expected


def in_range(
    getter: Callable[[Any], float | None],
    minimum: float | None,
    maximum: float | None,
) -> Predicate:
    """
    Numeric range match.

    With no bounds every record matches, including those without a value.
    With any bound set, records without a value never match.
    """
    if minimum is None and maximum is None:
        return lambda record: True

    def matches(record: Any) -> bool:
        value = getter(record)
        if value is None:
            return False
        if minimum is not None and value < minimum:
            return False
        if maximum is not None and value > maximum:
            return False
        return True

    return matches


def build_predicates(
    filters: RecordFilters,
    *,
    teacher_of_subject: Mapping[uuid.UUID, uuid.UUID | None] | None = None,
    status_of: Callable[[Any], Any] | None = None,
) -> list[Predicate]:
    predicates: list[Predicate] = []
    if filters.student_id is not None:
        predicates.append(equals(lambda r: getattr(r, "student_id", None), filters.student_id))
    if filters.subject_id is not None:
        predicates.append(equals(lambda r: getattr(r, "subject_id", None), filters.subject_id))
    if filters.teacher_id is not None:
        predicates.append(equals(teacher_resolver(teacher_of_subject), filters.teacher_id))
    if filters.status is not None:
        resolve_status = status_of or default_status_of
        expected = _status_value(filters.status)
        predicates.append(lambda r: _status_value(resolve_status(r)) == expected)
    predicates.append(
        in_range(compute_competency_average, filters.min_competency, filters.max_competency)
    )
    return predicates


SORT_KEYS: dict[str, Callable[[Any], Any]] = {
    "last_modified": lambda r: getattr(r, "last_modified", None),
    "created_at": lambda r: getattr(r, "created_at", None),
    "generated_at": lambda r: getattr(r, "generated_at", None),
    "completed_at": lambda r: getattr(r, "completed_at", None),
    "final_grade": compute_final_grade_value,
    "competency_average": compute_competency_average,
    "status": lambda r: default_status_of(r),
    "type": lambda r: _status_value(getattr(r, "type", None)),
}


def filter_and_sort(
    collection: Iterable[Any],
    filters: RecordFilters | None = None,
    sort_key: str | Callable[[Any], Any] | None = None,
    *,
    descending: bool = False,
    teacher_of_subject: Mapping[uuid.UUID, uuid.UUID | None] | None = None,
    status_of: Callable[[Any], Any] | None = None,
) -> list[Any]:
    predicates = build_predicates(
        filters or RecordFilters(),
        teacher_of_subject=teacher_of_subject,
        status_of=status_of,
    )
    selected = [record for record in collection if all(p(record) for p in predicates)]
    if sort_key is None:
        return selected

    if isinstance(sort_key, str):
        if sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_key}")
        key = SORT_KEYS[sort_key]
    else:
        key = sort_key

    present = [record for record in selected if key(record) is not None]
    missing = [record for record in selected if key(record) is None]
    present.sort(key=key, reverse=descending)
    return present + missing
