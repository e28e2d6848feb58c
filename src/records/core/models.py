"""Entity records held by the DataStore.

Records are frozen: readers get values they cannot change, and every
mutation goes through a DataStore method that swaps in a new record.
"""

from __future__ import annotations

from dataclasses import dataclass

MIN_GRADE = 1
MAX_GRADE = 5
PASS_GRADE = 3

# Display labels
NONE_MARKER = "нет"
MISSING_GRADE = "-"
NO_GROUP = "Без группы"
UNKNOWN = "Неизвестно"
UNKNOWN_GROUP = "Неизвестная группа"


@dataclass(frozen=True)
class Group:
    """A study group."""

    id: int
    name: str


@dataclass(frozen=True)
class Subject:
    """A subject students are graded in."""

    id: int
    name: str


@dataclass(frozen=True)
class Student:
    """A student; group_id is None when the student has no group."""

    id: int
    name: str
    group_id: int | None = None

    @property
    def has_group(self) -> bool:
        return self.group_id is not None


@dataclass(frozen=True)
class Grade:
    """One graded attempt of a student at a subject."""

    id: int
    student_id: int
    subject_id: int
    value: int
    attempt: int

    @property
    def passed(self) -> bool:
        return self.value >= PASS_GRADE
