"""Entity store and referential integrity.

Responsibilities:
- Hold the four entity collections in insertion order
- Assign ids from per-collection counters that never move backwards
- Enforce referential integrity on create (foreign keys) and delete (cascades)
- Track attempt numbers for (student, subject) pairs

Readers use the tuple properties and find_* lookups; only the create_*,
edit_* and delete_* methods change state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

import structlog

from records.core.errors import IntegrityError, NotFoundError
from records.core.models import (
    NO_GROUP,
    UNKNOWN,
    UNKNOWN_GROUP,
    Grade,
    Group,
    Student,
    Subject,
)
from records.utils.validators import normalize_name, validate_grade_value

logger = structlog.get_logger(__name__)


class _Keep:
    """Marker for "leave this field as it is" in edit calls."""

    def __repr__(self) -> str:
        return "KEEP"


KEEP = _Keep()


@dataclass(frozen=True)
class CascadeReport:
    """Outcome of a delete: what was removed and how many dependents changed."""

    kind: str
    entity_id: int
    name: str
    affected: int = 0


def _next_id_from(records: Iterable) -> int:
    return max((r.id for r in records), default=0) + 1


class DataStore:
    """In-memory aggregate of groups, subjects, students and grades."""

    def __init__(self) -> None:
        self._groups: list[Group] = []
        self._subjects: list[Subject] = []
        self._students: list[Student] = []
        self._grades: list[Grade] = []
        self.next_group_id = 1
        self.next_subject_id = 1
        self.next_student_id = 1
        self.next_grade_id = 1

    @classmethod
    def from_records(
        cls,
        groups: Iterable[Group] = (),
        subjects: Iterable[Subject] = (),
        students: Iterable[Student] = (),
        grades: Iterable[Grade] = (),
    ) -> DataStore:
        """Build a store from existing records, recomputing the id counters.

        Records are taken as-is; callers loading external data are expected
        to have dropped orphans already.
        """
        store = cls()
        store._groups = list(groups)
        store._subjects = list(subjects)
        store._students = list(students)
        store._grades = list(grades)
        store.next_group_id = _next_id_from(store._groups)
        store.next_subject_id = _next_id_from(store._subjects)
        store.next_student_id = _next_id_from(store._students)
        store.next_grade_id = _next_id_from(store._grades)
        return store

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def groups(self) -> tuple[Group, ...]:
        return tuple(self._groups)

    @property
    def subjects(self) -> tuple[Subject, ...]:
        return tuple(self._subjects)

    @property
    def students(self) -> tuple[Student, ...]:
        return tuple(self._students)

    @property
    def grades(self) -> tuple[Grade, ...]:
        return tuple(self._grades)

    def find_group(self, group_id: int) -> Group | None:
        for group in self._groups:
            if group.id == group_id:
                return group
        return None

    def find_subject(self, subject_id: int) -> Subject | None:
        for subject in self._subjects:
            if subject.id == subject_id:
                return subject
        return None

    def find_student(self, student_id: int) -> Student | None:
        for student in self._students:
            if student.id == student_id:
                return student
        return None

    def find_grade(self, grade_id: int) -> Grade | None:
        for grade in self._grades:
            if grade.id == grade_id:
                return grade
        return None

    def get_group(self, group_id: int) -> Group:
        """Like find_group but raises NotFoundError."""
        group = self.find_group(group_id)
        if group is None:
            raise NotFoundError("group", group_id)
        return group

    def get_subject(self, subject_id: int) -> Subject:
        subject = self.find_subject(subject_id)
        if subject is None:
            raise NotFoundError("subject", subject_id)
        return subject

    def get_student(self, student_id: int) -> Student:
        student = self.find_student(student_id)
        if student is None:
            raise NotFoundError("student", student_id)
        return student

    def get_grade(self, grade_id: int) -> Grade:
        grade = self.find_grade(grade_id)
        if grade is None:
            raise NotFoundError("grade", grade_id)
        return grade

    def group_name(self, group_id: int | None) -> str:
        """Group name for display, with labels for "no group" and dangling ids."""
        if group_id is None:
            return NO_GROUP
        group = self.find_group(group_id)
        return group.name if group else UNKNOWN_GROUP

    def student_name(self, student_id: int) -> str:
        student = self.find_student(student_id)
        return student.name if student else UNKNOWN

    def subject_name(self, subject_id: int) -> str:
        subject = self.find_subject(subject_id)
        return subject.name if subject else UNKNOWN

    def is_empty(self) -> bool:
        return not (self._groups or self._subjects or self._students or self._grades)

    def snapshot(self) -> tuple[tuple, tuple, tuple, tuple]:
        """Content of all four collections, ignoring id counters."""
        return (self.groups, self.subjects, self.students, self.grades)

    # =========================================================================
    # ATTEMPT TRACKER
    # =========================================================================

    def next_attempt(self, student_id: int, subject_id: int) -> int:
        """Next attempt number for a (student, subject) pair.

        Computed from the current grades on every call: one past the highest
        existing attempt, or 1 when the pair has no grades. Gaps are never
        filled.
        """
        attempts = [
            g.attempt
            for g in self._grades
            if g.student_id == student_id and g.subject_id == subject_id
        ]
        return max(attempts, default=0) + 1

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_group(self, name: str) -> int:
        group = Group(id=self.next_group_id, name=normalize_name(name))
        self.next_group_id += 1
        self._groups.append(group)
        logger.info("store.group_created", group_id=group.id)
        return group.id

    def create_subject(self, name: str) -> int:
        subject = Subject(id=self.next_subject_id, name=normalize_name(name))
        self.next_subject_id += 1
        self._subjects.append(subject)
        logger.info("store.subject_created", subject_id=subject.id)
        return subject.id

    def create_student(self, name: str, group_id: int | None = None) -> int:
        """Add a student.

        Args:
            name: Full name (trimmed, must not be empty)
            group_id: Existing group id, or None for no group

        Returns:
            The new student id

        Raises:
            IntegrityError: If group_id does not reference an existing group
        """
        name = normalize_name(name)
        if group_id is not None and self.find_group(group_id) is None:
            raise IntegrityError(f"Группа не найдена: {group_id}")
        student = Student(id=self.next_student_id, name=name, group_id=group_id)
        self.next_student_id += 1
        self._students.append(student)
        logger.info("store.student_created", student_id=student.id, group_id=group_id)
        return student.id

    def create_grade(self, student_id: int, subject_id: int, value: int) -> Grade:
        """Record a new attempt for a student at a subject.

        The attempt number comes from next_attempt at creation time.

        Raises:
            ValidationError: If value is outside MIN_GRADE..MAX_GRADE
            IntegrityError: If the student or subject does not exist
        """
        value = validate_grade_value(value)
        if self.find_student(student_id) is None:
            raise IntegrityError(f"Студент не найден: {student_id}")
        if self.find_subject(subject_id) is None:
            raise IntegrityError(f"Предмет не найден: {subject_id}")

        grade = Grade(
            id=self.next_grade_id,
            student_id=student_id,
            subject_id=subject_id,
            value=value,
            attempt=self.next_attempt(student_id, subject_id),
        )
        self.next_grade_id += 1
        self._grades.append(grade)
        logger.info(
            "store.grade_created",
            grade_id=grade.id,
            student_id=student_id,
            subject_id=subject_id,
            attempt=grade.attempt,
        )
        return grade

    # =========================================================================
    # EDIT
    # =========================================================================

    def _swap(self, records: list, old, new) -> None:
        records[records.index(old)] = new

    def edit_group(self, group_id: int, name: str) -> bool:
        """Rename a group. Returns True if anything changed."""
        group = self.get_group(group_id)
        name = normalize_name(name)
        if name == group.name:
            return False
        self._swap(self._groups, group, replace(group, name=name))
        logger.info("store.group_edited", group_id=group_id)
        return True

    def edit_subject(self, subject_id: int, name: str) -> bool:
        subject = self.get_subject(subject_id)
        name = normalize_name(name)
        if name == subject.name:
            return False
        self._swap(self._subjects, subject, replace(subject, name=name))
        logger.info("store.subject_edited", subject_id=subject_id)
        return True

    def edit_student(self, student_id: int, name=KEEP, group_id=KEEP) -> bool:
        """Change a student's name and/or group.

        Args:
            student_id: Student to edit
            name: New name, or KEEP
            group_id: New group id, None to clear the group, or KEEP

        Returns:
            True if anything changed

        Raises:
            NotFoundError: Unknown student
            IntegrityError: group_id does not reference an existing group
        """
        student = self.get_student(student_id)
        changes = {}
        if name is not KEEP:
            name = normalize_name(name)
            if name != student.name:
                changes["name"] = name
        if group_id is not KEEP:
            if group_id is not None and self.find_group(group_id) is None:
                raise IntegrityError(f"Группа не найдена: {group_id}")
            if group_id != student.group_id:
                changes["group_id"] = group_id
        if not changes:
            return False
        self._swap(self._students, student, replace(student, **changes))
        logger.info("store.student_edited", student_id=student_id, fields=sorted(changes))
        return True

    def edit_grade(self, grade_id: int, value: int) -> bool:
        """Change a grade's value. The attempt number never changes."""
        grade = self.get_grade(grade_id)
        value = validate_grade_value(value)
        if value == grade.value:
            return False
        self._swap(self._grades, grade, replace(grade, value=value))
        logger.info("store.grade_edited", grade_id=grade_id)
        return True

    # =========================================================================
    # DELETE (cascades)
    # =========================================================================

    def delete_group(self, group_id: int) -> CascadeReport:
        """Delete a group and clear group_id on the students that pointed to it."""
        group = self.get_group(group_id)
        updated = 0
        students = []
        for student in self._students:
            if student.group_id == group_id:
                student = replace(student, group_id=None)
                updated += 1
            students.append(student)
        self._groups.remove(group)
        self._students = students
        logger.info("store.group_deleted", group_id=group_id, students_updated=updated)
        return CascadeReport("group", group_id, group.name, updated)

    def delete_subject(self, subject_id: int) -> CascadeReport:
        """Delete a subject together with all of its grades."""
        subject = self.get_subject(subject_id)
        kept = [g for g in self._grades if g.subject_id != subject_id]
        removed = len(self._grades) - len(kept)
        self._subjects.remove(subject)
        self._grades = kept
        logger.info("store.subject_deleted", subject_id=subject_id, grades_removed=removed)
        return CascadeReport("subject", subject_id, subject.name, removed)

    def delete_student(self, student_id: int) -> CascadeReport:
        """Delete a student together with all of their grades."""
        student = self.get_student(student_id)
        kept = [g for g in self._grades if g.student_id != student_id]
        removed = len(self._grades) - len(kept)
        self._students.remove(student)
        self._grades = kept
        logger.info("store.student_deleted", student_id=student_id, grades_removed=removed)
        return CascadeReport("student", student_id, student.name, removed)

    def delete_grade(self, grade_id: int) -> CascadeReport:
        grade = self.get_grade(grade_id)
        self._grades.remove(grade)
        logger.info("store.grade_deleted", grade_id=grade_id)
        return CascadeReport("grade", grade_id, str(grade.value))
