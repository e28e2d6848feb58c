"""Aggregation engine.

Statistics are computed from the current grade set on every call.

- Per-subject aggregate for one student: sum, count and latest grade,
  where "latest" is the grade with the highest grade id.
- Student overall average: mean of the per-subject means, so each
  subject weighs the same regardless of its number of attempts.
- Subject average across students: flat mean over all grade rows.

"No data" is None everywhere, never 0.0.
"""

from __future__ import annotations

from dataclasses import dataclass

from records.core.entity_store import DataStore
from records.core.models import NONE_MARKER


@dataclass
class SubjectAggregate:
    """Running statistics for one student's grades in one subject."""

    subject_id: int
    sum: int = 0
    count: int = 0
    latest_grade_id: int = 0
    latest_value: int = 0
    latest_attempt: int = 0

    @property
    def average(self) -> float | None:
        if self.count == 0:
            return None
        return self.sum / self.count


@dataclass(frozen=True)
class SubjectStats:
    """Flat statistics for one subject across all students."""

    subject_id: int
    average: float | None
    count: int


def subject_aggregates_for_student(
    store: DataStore, student_id: int
) -> dict[int, SubjectAggregate]:
    """Group a student's grades by subject.

    Returns:
        Mapping subject_id -> SubjectAggregate, ordered by subject id
    """
    aggregates: dict[int, SubjectAggregate] = {}
    for grade in store.grades:
        if grade.student_id != student_id:
            continue
        agg = aggregates.setdefault(grade.subject_id, SubjectAggregate(grade.subject_id))
        agg.sum += grade.value
        agg.count += 1
        if grade.id > agg.latest_grade_id:
            agg.latest_grade_id = grade.id
            agg.latest_value = grade.value
            agg.latest_attempt = grade.attempt
    return dict(sorted(aggregates.items()))


def average_subjects_for_student(store: DataStore, student_id: int) -> float | None:
    """Overall average: mean of per-subject means, None if nothing is graded."""
    averages = [
        agg.average
        for agg in subject_aggregates_for_student(store, student_id).values()
        if agg.average is not None
    ]
    if not averages:
        return None
    return sum(averages) / len(averages)


def average_all_for_subject(store: DataStore, subject_id: int) -> SubjectStats:
    """Flat average of every grade row for a subject, all attempts included."""
    values = [g.value for g in store.grades if g.subject_id == subject_id]
    return SubjectStats(subject_id, average_from_values(values), len(values))


def grades_for_student_subject(
    store: DataStore, student_id: int, subject_id: int
) -> list[int]:
    """Grade values of one (student, subject) pair in attempt order."""
    grades = [
        g
        for g in store.grades
        if g.student_id == student_id and g.subject_id == subject_id
    ]
    grades.sort(key=lambda g: g.attempt)
    return [g.value for g in grades]


def grades_by_subject_for_student(store: DataStore, student_id: int) -> dict[int, list[int]]:
    """Attempt histories of one student, keyed by subject id (sorted)."""
    by_subject: dict[int, list] = {}
    for grade in store.grades:
        if grade.student_id == student_id:
            by_subject.setdefault(grade.subject_id, []).append(grade)
    return {
        subject_id: [g.value for g in sorted(grades, key=lambda g: g.attempt)]
        for subject_id, grades in sorted(by_subject.items())
    }


def average_from_values(values: list[int]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def format_avg(value: float | None, none_marker: str = NONE_MARKER) -> str:
    """Two-decimal display of an average; None renders as the none marker."""
    if value is None:
        return none_marker
    return f"{value:.2f}"


def join_grades(values: list[int]) -> str:
    return ", ".join(str(v) for v in values)
