"""Filter and sort engine for student result sets.

Filters compose conjunctively: group filter, name substring, minimum
overall average. Every sort order ends with the student id, so output is
reproducible for identical input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from records.core.aggregation import average_subjects_for_student
from records.core.entity_store import DataStore
from records.core.errors import ValidationError
from records.core.models import Student

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def fold_ascii(text: str) -> str:
    """Lowercase ASCII letters only; other characters are left alone."""
    return text.translate(_ASCII_LOWER)


class GroupFilterKind(Enum):
    ALL = "all"
    UNGROUPED = "ungrouped"
    SPECIFIC = "specific"


@dataclass(frozen=True)
class GroupFilter:
    """Which students to keep by group: all, ungrouped, or one group."""

    kind: GroupFilterKind = GroupFilterKind.ALL
    group_id: int | None = None

    @classmethod
    def all(cls) -> GroupFilter:
        return cls(GroupFilterKind.ALL)

    @classmethod
    def ungrouped(cls) -> GroupFilter:
        return cls(GroupFilterKind.UNGROUPED)

    @classmethod
    def specific(cls, group_id: int) -> GroupFilter:
        if group_id <= 0:
            raise ValidationError(f"Некорректный ID группы: {group_id}")
        return cls(GroupFilterKind.SPECIFIC, group_id)

    @classmethod
    def from_choice(cls, value: int) -> GroupFilter:
        """Map menu input: 0 = all, -1 = no group, >0 = that group."""
        if value == 0:
            return cls.all()
        if value == -1:
            return cls.ungrouped()
        return cls.specific(value)

    def matches(self, student: Student) -> bool:
        if self.kind is GroupFilterKind.ALL:
            return True
        if self.kind is GroupFilterKind.UNGROUPED:
            return not student.has_group
        return student.group_id == self.group_id


class SortKey(Enum):
    ID = "id"
    NAME = "name"
    AVERAGE = "average"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class StudentResult:
    """A student with their overall average (None if no grades)."""

    student: Student
    average: float | None


def filter_students(
    store: DataStore,
    group_filter: GroupFilter | None = None,
    name_query: str = "",
    min_average: float | None = None,
) -> list[StudentResult]:
    """Select students matching every given filter, in store order.

    Args:
        store: Source store
        group_filter: Group restriction (default: all students)
        name_query: Case-insensitive substring of the name; blank = no filter
        min_average: Minimum overall average; students without an average
            never pass this filter

    Returns:
        StudentResult list with averages attached
    """
    group_filter = group_filter or GroupFilter.all()
    query = name_query.strip().casefold()

    results: list[StudentResult] = []
    for student in store.students:
        if not group_filter.matches(student):
            continue
        if query and query not in student.name.casefold():
            continue
        average = average_subjects_for_student(store, student.id)
        if min_average is not None and (average is None or average < min_average):
            continue
        results.append(StudentResult(student, average))
    return results


def _sort_key(key: SortKey):
    if key is SortKey.ID:
        return lambda r: (r.student.id,)
    if key is SortKey.NAME:
        return lambda r: (fold_ascii(r.student.name), r.student.id)
    # Undefined averages sort below every real value.
    return lambda r: (
        r.average is not None,
        r.average if r.average is not None else 0.0,
        r.student.id,
    )


def sort_results(
    results: list[StudentResult],
    key: SortKey = SortKey.ID,
    order: SortOrder = SortOrder.ASC,
) -> list[StudentResult]:
    """Sort results by key; descending order is the exact reverse of ascending."""
    return sorted(results, key=_sort_key(key), reverse=order is SortOrder.DESC)


def students_for_group_sorted(
    store: DataStore, group_filter: GroupFilter | None = None
) -> list[Student]:
    """Students passing the group filter, by case-folded name then id."""
    group_filter = group_filter or GroupFilter.all()
    students = [s for s in store.students if group_filter.matches(s)]
    students.sort(key=lambda s: (fold_ascii(s.name), s.id))
    return students


def rank_by_average(store: DataStore) -> list[StudentResult]:
    """Students with a defined average, best first, ties by ascending id."""
    results = [r for r in filter_students(store) if r.average is not None]
    results.sort(key=lambda r: (-r.average, r.student.id))
    return results
