"""Journal builder.

Read-only views composed from the store and the aggregation engine:
- build_matrix: student x subject table of latest grades
- build_by_subject: attempt histories of every student in one subject
- build_by_student: attempt histories of one student in every subject

"Latest" is the grade with the highest id for the pair; histories are
listed in attempt order.
"""

from __future__ import annotations

from records.core.aggregation import (
    average_from_values,
    average_subjects_for_student,
    format_avg,
    grades_for_student_subject,
    join_grades,
    subject_aggregates_for_student,
)
from records.core.entity_store import DataStore
from records.core.filters import GroupFilter, GroupFilterKind, students_for_group_sorted
from records.core.models import MISSING_GRADE, NONE_MARKER
from records.utils.table import Column, TableView

SUBJECT_COLUMN_WIDTH = 8


def group_filter_caption(store: DataStore, group_filter: GroupFilter) -> list[str]:
    """Caption line describing a group filter (nothing for "all")."""
    if group_filter.kind is GroupFilterKind.UNGROUPED:
        return ["Группа: без группы"]
    if group_filter.kind is GroupFilterKind.SPECIFIC:
        return [f"Группа: {store.group_name(group_filter.group_id)}"]
    return []


def _history_cells(store: DataStore, student_id: int, subject_id: int) -> list[str]:
    """Grades, average, latest value and attempt count for one pair."""
    values = grades_for_student_subject(store, student_id, subject_id)
    if not values:
        return [NONE_MARKER, format_avg(None), NONE_MARKER, "0"]
    latest = subject_aggregates_for_student(store, student_id)[subject_id].latest_value
    return [
        join_grades(values),
        format_avg(average_from_values(values)),
        str(latest),
        str(len(values)),
    ]


def build_matrix(store: DataStore, group_filter: GroupFilter | None = None) -> TableView:
    """Student x subject matrix of latest grades plus each student's average."""
    group_filter = group_filter or GroupFilter.all()
    if not store.students:
        return TableView.message("Нет студентов.")
    if not store.subjects:
        return TableView.message("Нет предметов.")

    students = students_for_group_sorted(store, group_filter)
    if not students:
        return TableView.message("Нет студентов для выбранного фильтра.")

    columns = [Column("ID", 4, True), Column("ФИО", 24), Column("Группа", 18)]
    columns += [Column(s.name, SUBJECT_COLUMN_WIDTH, True) for s in store.subjects]
    columns.append(Column("Ср.балл", 10, True))

    rows = []
    for student in students:
        aggregates = subject_aggregates_for_student(store, student.id)
        row = [str(student.id), student.name, store.group_name(student.group_id)]
        for subject in store.subjects:
            agg = aggregates.get(subject.id)
            row.append(str(agg.latest_value) if agg else MISSING_GRADE)
        row.append(format_avg(average_subjects_for_student(store, student.id)))
        rows.append(row)

    return TableView(
        columns=columns,
        rows=rows,
        title=["Электронный журнал (последние оценки):", *group_filter_caption(store, group_filter)],
    )


def build_by_subject(
    store: DataStore, subject_id: int, group_filter: GroupFilter | None = None
) -> TableView:
    """Every (filtered) student's attempt history in one subject.

    Raises:
        NotFoundError: If the subject does not exist
    """
    group_filter = group_filter or GroupFilter.all()
    subject = store.get_subject(subject_id)

    students = students_for_group_sorted(store, group_filter)
    if not students:
        return TableView.message("Нет студентов для выбранного фильтра.")

    columns = [
        Column("ID", 4, True),
        Column("ФИО", 24),
        Column("Группа", 18),
        Column("Оценки", 24),
        Column("Ср.балл", 10, True),
        Column("Последн.", 10, True),
        Column("Попыток", 8, True),
    ]
    rows = [
        [str(s.id), s.name, store.group_name(s.group_id), *_history_cells(store, s.id, subject.id)]
        for s in students
    ]
    return TableView(
        columns=columns,
        rows=rows,
        title=[
            f"Электронный журнал по предмету: {subject.name}",
            *group_filter_caption(store, group_filter),
        ],
    )


def build_by_student(store: DataStore, student_id: int) -> TableView:
    """One student's attempt history in every subject, with the overall average.

    Raises:
        NotFoundError: If the student does not exist
    """
    student = store.get_student(student_id)
    if not store.subjects:
        return TableView.message("Нет предметов.")

    columns = [
        Column("ID", 4, True),
        Column("Предмет", 26),
        Column("Оценки", 24),
        Column("Ср.балл", 10, True),
        Column("Последн.", 10, True),
        Column("Попыток", 8, True),
    ]
    rows = [
        [str(subject.id), subject.name, *_history_cells(store, student.id, subject.id)]
        for subject in store.subjects
    ]
    overall = format_avg(average_subjects_for_student(store, student.id))
    return TableView(
        columns=columns,
        rows=rows,
        title=[
            f"Электронный журнал студента: {student.name}",
            f"Группа: {store.group_name(student.group_id)}",
        ],
        footer=[f"Средний балл по предметам: {overall}"],
    )
