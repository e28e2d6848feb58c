"""Listings and statistical reports.

Plain listings (groups, subjects, students, grades), the detailed student
list, search results, and the reports: overall averages, subject
averages, subject detail, top-N and retakes.
"""

from __future__ import annotations

from records.core.aggregation import (
    average_all_for_subject,
    average_from_values,
    average_subjects_for_student,
    format_avg,
    grades_by_subject_for_student,
    join_grades,
    subject_aggregates_for_student,
)
from records.core.entity_store import DataStore
from records.core.errors import ValidationError
from records.core.filters import StudentResult, rank_by_average
from records.core.models import PASS_GRADE
from records.utils.table import Column, TableView, render_line, render_row

STUDENT_COLUMNS = [
    Column("ID", 4, True),
    Column("ФИО", 28),
    Column("Группа", 20),
    Column("Ср.балл", 12, True),
]


# =============================================================================
# LISTINGS
# =============================================================================


def list_groups(store: DataStore) -> TableView:
    return TableView(
        columns=[Column("ID", 4, True), Column("Название", 28)],
        rows=[[str(g.id), g.name] for g in store.groups],
        title=["Группы:"],
        empty_message="Нет групп.",
    )


def list_subjects(store: DataStore) -> TableView:
    return TableView(
        columns=[Column("ID", 4, True), Column("Название", 28)],
        rows=[[str(s.id), s.name] for s in store.subjects],
        title=["Предметы:"],
        empty_message="Нет предметов.",
    )


def list_students(store: DataStore) -> TableView:
    return TableView(
        columns=[Column("ID", 4, True), Column("ФИО", 28), Column("Группа", 20)],
        rows=[[str(s.id), s.name, store.group_name(s.group_id)] for s in store.students],
        title=["Студенты:"],
        empty_message="Нет студентов.",
    )


def list_grades(store: DataStore) -> TableView:
    return TableView(
        columns=[
            Column("ID", 4, True),
            Column("Студент", 24),
            Column("Предмет", 24),
            Column("Попытка", 8, True),
            Column("Оценка", 8, True),
        ],
        rows=[
            [
                str(g.id),
                store.student_name(g.student_id),
                store.subject_name(g.subject_id),
                str(g.attempt),
                str(g.value),
            ]
            for g in store.grades
        ],
        title=["Оценки:"],
        empty_message="Нет оценок.",
    )


def student_details(store: DataStore) -> list[str]:
    """Every student with a nested per-subject breakdown.

    Returns:
        Output lines (the nested tables do not fit a single TableView)
    """
    if not store.students:
        return ["Нет студентов."]

    widths = [c.width for c in STUDENT_COLUMNS]
    align = [c.align_right for c in STUDENT_COLUMNS]
    sub_widths = [4, 26, 10, 10, 30]
    sub_align = [True, False, True, True, False]

    lines = ["Список студентов:", render_line(widths)]
    lines.append(render_row([c.header for c in STUDENT_COLUMNS], widths, align))
    lines.append(render_line(widths))
    for student in store.students:
        lines.append(
            render_row(
                [
                    str(student.id),
                    student.name,
                    store.group_name(student.group_id),
                    format_avg(average_subjects_for_student(store, student.id)),
                ],
                widths,
                align,
            )
        )
        aggregates = subject_aggregates_for_student(store, student.id)
        if not aggregates:
            lines.append("  Предметы: нет")
            continue

        histories = grades_by_subject_for_student(store, student.id)
        lines.append("  Предметы:")
        lines.append(render_line(sub_widths))
        lines.append(render_row(["ID", "Предмет", "Ср.балл", "Последн.", "Оценки"], sub_widths, sub_align))
        lines.append(render_line(sub_widths))
        for subject_id, agg in aggregates.items():
            lines.append(
                render_row(
                    [
                        str(subject_id),
                        store.subject_name(subject_id),
                        format_avg(agg.average),
                        str(agg.latest_value),
                        join_grades(histories[subject_id]),
                    ],
                    sub_widths,
                    sub_align,
                )
            )
        lines.append(render_line(sub_widths))
    lines.append(render_line(widths))
    return lines


def search_results(store: DataStore, results: list[StudentResult]) -> TableView:
    return TableView(
        columns=STUDENT_COLUMNS,
        rows=[
            [
                str(r.student.id),
                r.student.name,
                store.group_name(r.student.group_id),
                format_avg(r.average),
            ]
            for r in results
        ],
        title=[f"Результаты ({len(results)}):"],
        empty_message="Нет подходящих студентов.",
    )


# =============================================================================
# REPORTS
# =============================================================================


def overall_averages(store: DataStore) -> TableView:
    """Each student's overall average plus the mean of the defined ones."""
    if not store.students:
        return TableView.message("Нет студентов.")

    rows = []
    defined = []
    for student in store.students:
        average = average_subjects_for_student(store, student.id)
        if average is not None:
            defined.append(average)
        rows.append(
            [str(student.id), student.name, store.group_name(student.group_id), format_avg(average)]
        )
    total = sum(defined) / len(defined) if defined else None
    return TableView(
        columns=STUDENT_COLUMNS,
        rows=rows,
        title=["Средние по студентам (все оценки по предметам):"],
        footer=[f"Общий средний балл: {format_avg(total)}"],
    )


def subject_averages(store: DataStore) -> TableView:
    """Flat average and grade count of every subject."""
    rows = []
    for subject in store.subjects:
        stats = average_all_for_subject(store, subject.id)
        rows.append([str(subject.id), subject.name, format_avg(stats.average), str(stats.count)])
    return TableView(
        columns=[
            Column("ID", 4, True),
            Column("Предмет", 28),
            Column("Ср.балл", 12, True),
            Column("Оценок", 10, True),
        ],
        rows=rows,
        title=["Средние по предметам (все оценки):"],
        empty_message="Нет предметов.",
    )


def subject_detail(store: DataStore, subject_id: int) -> TableView:
    """Students graded in one subject, ordered by student id.

    Raises:
        NotFoundError: If the subject does not exist
    """
    subject = store.get_subject(subject_id)
    student_ids = sorted({g.student_id for g in store.grades if g.subject_id == subject_id})
    if not student_ids:
        return TableView.message(f"Нет оценок по предмету {subject.name}.")

    rows = []
    for student_id in student_ids:
        grades = sorted(
            (g for g in store.grades if g.subject_id == subject_id and g.student_id == student_id),
            key=lambda g: g.attempt,
        )
        values = [g.value for g in grades]
        latest = max(grades, key=lambda g: g.id).value
        rows.append(
            [
                store.student_name(student_id),
                format_avg(average_from_values(values)),
                str(latest),
                join_grades(values),
            ]
        )
    return TableView(
        columns=[
            Column("Студент", 28),
            Column("Ср.балл", 10, True),
            Column("Последн.", 10, True),
            Column("Оценки", 36),
        ],
        rows=rows,
        title=[f"Подробности по предмету: {subject.name}"],
    )


def top_students(store: DataStore, n: int) -> TableView:
    """The n students with the highest overall average.

    Raises:
        ValidationError: If n is outside 1..number of ranked students
    """
    ranked = rank_by_average(store)
    if not ranked:
        return TableView.message("Нет оценок.")
    if n < 1 or n > len(ranked):
        raise ValidationError(f"Значение должно быть между 1 и {len(ranked)}.")

    rows = [
        [str(place), r.student.name, store.group_name(r.student.group_id), format_avg(r.average)]
        for place, r in enumerate(ranked[:n], 1)
    ]
    return TableView(
        columns=[Column("#", 3, True), *STUDENT_COLUMNS[1:]],
        rows=rows,
        title=[f"Топ {n} студентов:"],
    )


def retakes(store: DataStore) -> TableView:
    """Student/subject pairs whose latest grade is below the passing grade."""
    if not store.students or not store.subjects:
        return TableView.message("Нет студентов или предметов.")

    rows = []
    for student in store.students:
        for subject_id, agg in subject_aggregates_for_student(store, student.id).items():
            if not store.get_grade(agg.latest_grade_id).passed:
                rows.append([student.name, store.subject_name(subject_id), str(agg.latest_value)])
    return TableView(
        columns=[Column("Студент", 28), Column("Предмет", 28), Column("Оценка", 10, True)],
        rows=rows,
        title=[f"Пересдачи (последняя оценка < {PASS_GRADE}):"],
        empty_message=f"Пересдачи (последняя оценка < {PASS_GRADE}): нет.",
    )
