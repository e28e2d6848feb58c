"""Operation command table.

Maps operation ids ("student.add", "journal.matrix", ...) to handlers.
Every handler takes the store plus keyword arguments and returns an
OperationResult; core errors become failed results here, so callers
never see RecordsError from run_operation.

Mutating handlers set OperationResult.mutated when the store actually
changed; the caller decides whether and how to persist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import structlog

from records.core import journal, reports
from records.core.entity_store import KEEP, DataStore
from records.core.errors import RecordsError
from records.core.filters import (
    GroupFilter,
    SortKey,
    SortOrder,
    filter_students,
    sort_results,
)
from records.utils.table import TableView
from records.utils.validators import normalize_name

logger = structlog.get_logger(__name__)


@dataclass
class OperationResult:
    """Outcome of an operation."""

    success: bool
    message: str = ""
    mutated: bool = False
    lines: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str = "", mutated: bool = False, **data: Any) -> OperationResult:
        return cls(success=True, message=message, mutated=mutated, data=data)

    @classmethod
    def view(cls, view: TableView) -> OperationResult:
        return cls(success=True, lines=view.render(), data={"view": view})

    @classmethod
    def fail(cls, message: str) -> OperationResult:
        return cls(success=False, message=message)


Handler = Callable[..., OperationResult]


# =============================================================================
# GROUPS
# =============================================================================


def add_group(store: DataStore, name: str) -> OperationResult:
    group_id = store.create_group(name)
    return OperationResult.ok(f"Добавлена группа с ID {group_id}.", mutated=True, group_id=group_id)


def edit_group(store: DataStore, group_id: int, name: str) -> OperationResult:
    changed = store.edit_group(group_id, name)
    return OperationResult.ok("Группа обновлена.", mutated=changed)


def delete_group(store: DataStore, group_id: int) -> OperationResult:
    report = store.delete_group(group_id)
    return OperationResult.ok(
        f"Группа удалена. Студентов обновлено: {report.affected}.",
        mutated=True,
        cascade=report,
    )


def add_student_to_group(store: DataStore, group_id: int, name: str) -> OperationResult:
    store.get_group(group_id)
    return add_student(store, name=name, group_id=group_id)


# =============================================================================
# SUBJECTS
# =============================================================================


def add_subject(store: DataStore, name: str) -> OperationResult:
    subject_id = store.create_subject(name)
    return OperationResult.ok(
        f"Добавлен предмет с ID {subject_id}.", mutated=True, subject_id=subject_id
    )


def edit_subject(store: DataStore, subject_id: int, name: str) -> OperationResult:
    changed = store.edit_subject(subject_id, name)
    return OperationResult.ok("Предмет обновлен.", mutated=changed)


def delete_subject(store: DataStore, subject_id: int) -> OperationResult:
    report = store.delete_subject(subject_id)
    return OperationResult.ok(
        f"Предмет удален. Удалено связанных оценок: {report.affected}.",
        mutated=True,
        cascade=report,
    )


# =============================================================================
# STUDENTS
# =============================================================================


def add_student(
    store: DataStore,
    name: str,
    group_id: int | None = None,
    new_group_name: str | None = None,
) -> OperationResult:
    """Add a student, optionally creating their group first.

    Args:
        store: Store to modify
        name: Student name
        group_id: Existing group, or None
        new_group_name: If given, a new group is created and used instead
            of group_id
    """
    name = normalize_name(name)
    messages = []
    if new_group_name is not None:
        group_id = store.create_group(new_group_name)
        messages.append(f"Создана группа с ID {group_id}.")
    student_id = store.create_student(name, group_id)
    messages.append(f"Добавлен студент с ID {student_id}.")
    return OperationResult.ok(
        "\n".join(messages), mutated=True, student_id=student_id, group_id=group_id
    )


def edit_student(store: DataStore, student_id: int, name=KEEP, group_id=KEEP) -> OperationResult:
    changed = store.edit_student(student_id, name=name, group_id=group_id)
    return OperationResult.ok("Студент обновлен.", mutated=changed)


def delete_student(store: DataStore, student_id: int) -> OperationResult:
    report = store.delete_student(student_id)
    return OperationResult.ok(
        f"Студент удален. Удалено связанных оценок: {report.affected}.",
        mutated=True,
        cascade=report,
    )


def search_students(
    store: DataStore,
    group_filter: GroupFilter | None = None,
    name_query: str = "",
    min_average: float | None = None,
    sort_key: SortKey = SortKey.ID,
    sort_order: SortOrder = SortOrder.ASC,
) -> OperationResult:
    results = sort_results(
        filter_students(store, group_filter, name_query, min_average), sort_key, sort_order
    )
    result = OperationResult.view(reports.search_results(store, results))
    result.data["results"] = results
    return result


def student_details(store: DataStore) -> OperationResult:
    return OperationResult(success=True, lines=reports.student_details(store))


# =============================================================================
# GRADES
# =============================================================================


def add_grade(store: DataStore, student_id: int, subject_id: int, value: int) -> OperationResult:
    grade = store.create_grade(student_id, subject_id, value)
    return OperationResult.ok(
        f"Добавлена оценка с ID {grade.id} (попытка {grade.attempt}).",
        mutated=True,
        grade=grade,
    )


def edit_grade(store: DataStore, grade_id: int, value: int) -> OperationResult:
    changed = store.edit_grade(grade_id, value)
    return OperationResult.ok("Оценка обновлена.", mutated=changed)


def delete_grade(store: DataStore, grade_id: int) -> OperationResult:
    report = store.delete_grade(grade_id)
    return OperationResult.ok("Оценка удалена.", mutated=True, cascade=report)


# =============================================================================
# COMMAND TABLE
# =============================================================================


def _view(build: Callable[..., TableView]) -> Handler:
    def handler(store: DataStore, **kwargs: Any) -> OperationResult:
        return OperationResult.view(build(store, **kwargs))

    handler.__name__ = build.__name__
    return handler


OPERATIONS: dict[str, Handler] = {
    "group.add": add_group,
    "group.edit": edit_group,
    "group.delete": delete_group,
    "group.list": _view(reports.list_groups),
    "group.add_student": add_student_to_group,
    "subject.add": add_subject,
    "subject.edit": edit_subject,
    "subject.delete": delete_subject,
    "subject.list": _view(reports.list_subjects),
    "student.add": add_student,
    "student.edit": edit_student,
    "student.delete": delete_student,
    "student.list": _view(reports.list_students),
    "student.details": student_details,
    "student.search": search_students,
    "grade.add": add_grade,
    "grade.edit": edit_grade,
    "grade.delete": delete_grade,
    "grade.list": _view(reports.list_grades),
    "report.overall": _view(reports.overall_averages),
    "report.subjects": _view(reports.subject_averages),
    "report.subject_detail": _view(reports.subject_detail),
    "report.top": _view(reports.top_students),
    "report.retakes": _view(reports.retakes),
    "journal.matrix": _view(journal.build_matrix),
    "journal.by_subject": _view(journal.build_by_subject),
    "journal.by_student": _view(journal.build_by_student),
}


def run_operation(store: DataStore, operation_id: str, **kwargs: Any) -> OperationResult:
    """Dispatch an operation by id.

    Args:
        store: Shared store, passed to the handler
        operation_id: Key of OPERATIONS
        **kwargs: Handler arguments

    Returns:
        The handler's OperationResult, or a failed result carrying the
        error message if the operation is unknown or raised RecordsError
    """
    handler = OPERATIONS.get(operation_id)
    if handler is None:
        return OperationResult.fail(f"Неизвестная операция: {operation_id}")

    try:
        result = handler(store, **kwargs)
    except RecordsError as e:
        logger.warning("operation.failed", operation=operation_id, error=str(e))
        return OperationResult.fail(str(e))

    logger.debug("operation.completed", operation=operation_id, mutated=result.mutated)
    return result
