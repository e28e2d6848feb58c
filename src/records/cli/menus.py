"""Interactive menus for the records shell.

Each menu is a table of numbered entries. An entry's action collects
input with the prompt helpers below, then runs a core operation through
the Session, which prints the outcome and autosaves after mutations.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from records.core.entity_store import KEEP, DataStore
from records.core.errors import ExportError, ValidationError
from records.core.filters import GroupFilter, SortKey, SortOrder, rank_by_average
from records.core.models import MAX_GRADE, MIN_GRADE
from records.core.operations import OperationResult, run_operation
from records.db.store_repository import save_store
from records.export.csv_exporter import EXPORT_FILES, export_csv
from records.utils.validators import check_range, parse_float, parse_int

logger = structlog.get_logger(__name__)

MAX_ID = 2**31 - 1


# =============================================================================
# SESSION
# =============================================================================


class Session:
    """Shared state of one interactive run: the store and where it is saved."""

    def __init__(
        self,
        store: DataStore,
        db_path: Path,
        export_dir: Path,
        console: Console,
    ):
        self.store = store
        self.db_path = db_path
        self.export_dir = export_dir
        self.console = console

    def print_lines(self, lines: list[str]) -> None:
        for line in lines:
            self.console.print(line, markup=False, highlight=False, soft_wrap=True)

    def say(self, text: str) -> None:
        self.print_lines([text])

    def show(self, result: OperationResult) -> None:
        self.print_lines(result.lines)
        if not result.message:
            return
        if result.success:
            self.console.print(f"[green]✓ {escape(result.message)}[/green]")
        else:
            self.console.print(f"[red]✗ {escape(result.message)}[/red]")

    def run(self, operation_id: str, **kwargs) -> OperationResult:
        """Run an operation, print its outcome, autosave if it changed the store."""
        result = run_operation(self.store, operation_id, **kwargs)
        self.show(result)
        if result.mutated:
            self.autosave()
        return result

    def autosave(self) -> bool:
        saved = save_store(self.store, self.db_path)
        if not saved:
            self.console.print("[yellow]⚠ Автосохранение не удалось.[/yellow]")
        return saved

    def final_save(self) -> bool:
        saved = save_store(self.store, self.db_path)
        if saved:
            self.console.print("Данные сохранены.")
        else:
            self.console.print("[yellow]⚠ Не удалось сохранить данные.[/yellow]")
        return saved

    def export(self) -> bool:
        try:
            export_csv(self.store, self.export_dir)
        except ExportError as e:
            self.console.print(f"[red]✗ {escape(str(e))}[/red]")
            return False
        self.say(f"Экспортировано в папку '{self.export_dir}': {', '.join(EXPORT_FILES)}")
        return True


# =============================================================================
# PROMPT HELPERS
# =============================================================================


def read_line(prompt: str, allow_empty: bool = False) -> str:
    """Prompt for a line of text, re-asking while it is blank (unless allowed)."""
    while True:
        text = typer.prompt(prompt, default="", show_default=False)
        if allow_empty or text.strip():
            return text
        typer.echo("Поле не может быть пустым.")


def read_int(prompt: str, min_value: int, max_value: int) -> int:
    """Prompt until the input is an integer within [min_value, max_value]."""
    while True:
        try:
            return check_range(parse_int(read_line(prompt, True)), min_value, max_value)
        except ValidationError as e:
            typer.echo(str(e))


def read_int_optional(prompt: str, min_value: int, max_value: int) -> int | None:
    """Like read_int, but blank input returns None."""
    while True:
        text = read_line(prompt, True)
        if not text.strip():
            return None
        try:
            return check_range(parse_int(text), min_value, max_value)
        except ValidationError as e:
            typer.echo(str(e))


def read_float_optional(prompt: str, min_value: float, max_value: float) -> float | None:
    while True:
        text = read_line(prompt, True)
        if not text.strip():
            return None
        try:
            return check_range(parse_float(text), min_value, max_value)
        except ValidationError as e:
            typer.echo(str(e))


def read_existing_id(
    prompt: str, find: Callable[[int], object], not_found: str
) -> int | None:
    """Prompt for an id that must exist; 0 cancels and returns None."""
    while True:
        value = read_int(prompt, 0, MAX_ID)
        if value == 0:
            return None
        if find(value) is not None:
            return value
        typer.echo(not_found)


def read_group_filter(session: Session, prompt: str) -> GroupFilter:
    """Prompt for a group filter: 0 = all, -1 = no group, >0 = that group."""
    while True:
        value = read_int(prompt, -1, MAX_ID)
        if value <= 0 or session.store.find_group(value):
            return GroupFilter.from_choice(value)
        typer.echo("Группа не найдена.")


def _ask_group_filter(session: Session) -> GroupFilter:
    if not session.store.groups:
        return GroupFilter.all()
    session.run("group.list")
    return read_group_filter(session, "ID группы (0 - все, -1 - без группы)")


# =============================================================================
# STUDENTS
# =============================================================================


def add_student(session: Session) -> None:
    store = session.store
    name = read_line("Имя студента")
    group_id = None
    new_group_name = None

    if not store.groups:
        if read_int("Группы отсутствуют. Создать новую? 1-да, 0-нет", 0, 1) == 1:
            new_group_name = read_line("Название новой группы")
    else:
        session.run("group.list")
        while True:
            choice = read_int("ID группы (0 - без группы, -1 - создать новую)", -1, MAX_ID)
            if choice == 0:
                break
            if choice == -1:
                new_group_name = read_line("Название новой группы")
                break
            if store.find_group(choice):
                group_id = choice
                break
            typer.echo("Группа не найдена.")

    session.run("student.add", name=name, group_id=group_id, new_group_name=new_group_name)


def edit_student(session: Session) -> None:
    store = session.store
    if not store.students:
        session.say("Нет студентов для редактирования.")
        return
    session.run("student.list")
    student_id = read_int("ID студента для редактирования", 1, MAX_ID)
    if store.find_student(student_id) is None:
        session.say("Студент не найден.")
        return

    name = read_line("Новое имя (пусто - оставить)", True).strip() or KEEP
    group_id = KEEP
    if store.groups:
        session.run("group.list")
        while True:
            choice = read_int_optional(
                "Новый ID группы (пусто - оставить, 0 - без группы)", 0, MAX_ID
            )
            if choice is None:
                break
            if choice == 0:
                group_id = None
                break
            if store.find_group(choice):
                group_id = choice
                break
            typer.echo("Группа не найдена.")

    session.run("student.edit", student_id=student_id, name=name, group_id=group_id)


def delete_student(session: Session) -> None:
    if not session.store.students:
        session.say("Нет студентов для удаления.")
        return
    session.run("student.list")
    session.run("student.delete", student_id=read_int("ID студента для удаления", 1, MAX_ID))


def search_students(session: Session) -> None:
    if not session.store.students:
        session.say("Нет студентов.")
        return
    group_filter = _ask_group_filter(session)
    name_query = read_line("ФИО (часть, пусто - без фильтра)", True)
    min_average = read_float_optional(
        "Мин. средний балл (пусто - без фильтра)", 0.0, float(MAX_GRADE)
    )
    sort_key = [SortKey.ID, SortKey.NAME, SortKey.AVERAGE][
        read_int("Сортировка: 1) ID 2) ФИО 3) Средний балл", 1, 3) - 1
    ]
    order_choice = read_int("Порядок: 1) Возрастание 2) Убывание", 1, 2)
    sort_order = SortOrder.ASC if order_choice == 1 else SortOrder.DESC
    session.run(
        "student.search",
        group_filter=group_filter,
        name_query=name_query,
        min_average=min_average,
        sort_key=sort_key,
        sort_order=sort_order,
    )


# =============================================================================
# GROUPS
# =============================================================================


def add_group(session: Session) -> None:
    session.run("group.add", name=read_line("Название группы"))


def edit_group(session: Session) -> None:
    if not session.store.groups:
        session.say("Нет групп для редактирования.")
        return
    session.run("group.list")
    group_id = read_int("ID группы для редактирования", 1, MAX_ID)
    group = session.store.find_group(group_id)
    if group is None:
        session.say("Группа не найдена.")
        return
    name = read_line("Новое название (пусто - оставить)", True).strip() or group.name
    session.run("group.edit", group_id=group_id, name=name)


def delete_group(session: Session) -> None:
    if not session.store.groups:
        session.say("Нет групп для удаления.")
        return
    session.run("group.list")
    session.run("group.delete", group_id=read_int("ID группы для удаления", 1, MAX_ID))


def add_student_to_group(session: Session) -> None:
    if not session.store.groups:
        session.say("Сначала добавьте группы.")
        return
    session.run("group.list")
    while True:
        group_id = read_int("ID группы для добавления студента", 1, MAX_ID)
        if session.store.find_group(group_id):
            break
        typer.echo("Группа не найдена.")
    session.run("group.add_student", group_id=group_id, name=read_line("Имя студента"))


# =============================================================================
# SUBJECTS
# =============================================================================


def add_subject(session: Session) -> None:
    session.run("subject.add", name=read_line("Название предмета"))


def edit_subject(session: Session) -> None:
    if not session.store.subjects:
        session.say("Нет предметов для редактирования.")
        return
    session.run("subject.list")
    subject_id = read_int("ID предмета для редактирования", 1, MAX_ID)
    subject = session.store.find_subject(subject_id)
    if subject is None:
        session.say("Предмет не найден.")
        return
    name = read_line("Новое название (пусто - оставить)", True).strip() or subject.name
    session.run("subject.edit", subject_id=subject_id, name=name)


def delete_subject(session: Session) -> None:
    if not session.store.subjects:
        session.say("Нет предметов для удаления.")
        return
    session.run("subject.list")
    session.run("subject.delete", subject_id=read_int("ID предмета для удаления", 1, MAX_ID))


# =============================================================================
# GRADES
# =============================================================================


def add_grade(session: Session) -> None:
    store = session.store
    if not store.students:
        if read_int("Студентов нет. Создать сейчас? 1-да, 0-нет", 0, 1) == 1:
            add_student(session)
        if not store.students:
            session.say("Сначала добавьте студентов.")
            return
    if not store.subjects:
        if read_int("Предметов нет. Создать сейчас? 1-да, 0-нет", 0, 1) == 1:
            add_subject(session)
        if not store.subjects:
            session.say("Сначала добавьте предметы.")
            return

    session.run("student.list")
    student_id = read_existing_id("ID студента (0 - отмена)", store.find_student, "Студент не найден.")
    if student_id is None:
        session.say("Операция отменена.")
        return
    session.run("subject.list")
    subject_id = read_existing_id("ID предмета (0 - отмена)", store.find_subject, "Предмет не найден.")
    if subject_id is None:
        session.say("Операция отменена.")
        return
    value = read_int(f"Оценка ({MIN_GRADE}-{MAX_GRADE})", MIN_GRADE, MAX_GRADE)
    session.run("grade.add", student_id=student_id, subject_id=subject_id, value=value)


def edit_grade(session: Session) -> None:
    if not session.store.grades:
        session.say("Нет оценок для редактирования.")
        return
    session.run("grade.list")
    grade_id = read_int("ID оценки для редактирования", 1, MAX_ID)
    grade = session.store.find_grade(grade_id)
    if grade is None:
        session.say("Оценка не найдена.")
        return
    value = read_int_optional(
        f"Новая оценка ({MIN_GRADE}-{MAX_GRADE}, пусто - оставить)", MIN_GRADE, MAX_GRADE
    )
    session.run("grade.edit", grade_id=grade_id, value=grade.value if value is None else value)


def delete_grade(session: Session) -> None:
    if not session.store.grades:
        session.say("Нет оценок для удаления.")
        return
    session.run("grade.list")
    session.run("grade.delete", grade_id=read_int("ID оценки для удаления", 1, MAX_ID))


# =============================================================================
# REPORTS & JOURNAL
# =============================================================================


def report_subject_detail(session: Session) -> None:
    if not session.store.subjects:
        session.say("Нет предметов.")
        return
    session.run("subject.list")
    subject_id = read_int("ID предмета для подробностей", 1, MAX_ID)
    session.run("report.subject_detail", subject_id=subject_id)


def report_top(session: Session) -> None:
    if not session.store.students:
        session.say("Нет студентов.")
        return
    ranked = rank_by_average(session.store)
    if not ranked:
        session.say("Нет оценок.")
        return
    n = read_int(f"Топ N (1..{len(ranked)})", 1, len(ranked))
    session.run("report.top", n=n)


def journal_matrix(session: Session) -> None:
    if not session.store.students or not session.store.subjects:
        session.run("journal.matrix")
        return
    session.run("journal.matrix", group_filter=_ask_group_filter(session))


def journal_by_subject(session: Session) -> None:
    store = session.store
    if not store.students:
        session.say("Нет студентов.")
        return
    if not store.subjects:
        session.say("Нет предметов.")
        return
    session.run("subject.list")
    subject_id = read_existing_id("ID предмета (0 - отмена)", store.find_subject, "Предмет не найден.")
    if subject_id is None:
        session.say("Операция отменена.")
        return
    session.run("journal.by_subject", subject_id=subject_id, group_filter=_ask_group_filter(session))


def journal_by_student(session: Session) -> None:
    store = session.store
    if not store.students:
        session.say("Нет студентов.")
        return
    session.run("student.list")
    student_id = read_existing_id("ID студента (0 - отмена)", store.find_student, "Студент не найден.")
    if student_id is None:
        session.say("Операция отменена.")
        return
    session.run("journal.by_student", student_id=student_id)


# =============================================================================
# MENU TABLES
# =============================================================================


@dataclass(frozen=True)
class MenuEntry:
    label: str
    action: Callable[[Session], None]


def _op(operation_id: str) -> Callable[[Session], None]:
    return lambda session: session.run(operation_id)


STUDENTS_MENU = {
    1: MenuEntry("Добавить студента", add_student),
    2: MenuEntry("Редактировать студента", edit_student),
    3: MenuEntry("Удалить студента", delete_student),
    4: MenuEntry("Список студентов", _op("student.details")),
    5: MenuEntry("Поиск, фильтры и сортировка", search_students),
}

GROUPS_MENU = {
    1: MenuEntry("Добавить группу", add_group),
    2: MenuEntry("Редактировать группу", edit_group),
    3: MenuEntry("Удалить группу", delete_group),
    4: MenuEntry("Список групп", _op("group.list")),
    5: MenuEntry("Добавить студента в группу", add_student_to_group),
}

SUBJECTS_MENU = {
    1: MenuEntry("Добавить предмет", add_subject),
    2: MenuEntry("Редактировать предмет", edit_subject),
    3: MenuEntry("Удалить предмет", delete_subject),
    4: MenuEntry("Список предметов", _op("subject.list")),
}

GRADES_MENU = {
    1: MenuEntry("Добавить оценку", add_grade),
    2: MenuEntry("Редактировать оценку", edit_grade),
    3: MenuEntry("Удалить оценку", delete_grade),
    4: MenuEntry("Список оценок", _op("grade.list")),
}

REPORTS_MENU = {
    1: MenuEntry("Средние по студентам", _op("report.overall")),
    2: MenuEntry("Средние по предметам", _op("report.subjects")),
    3: MenuEntry("Подробности по предмету", report_subject_detail),
    4: MenuEntry("Топ-N студентов", report_top),
    5: MenuEntry("Пересдачи", _op("report.retakes")),
}

JOURNAL_MENU = {
    1: MenuEntry("Сводный журнал (последние оценки)", journal_matrix),
    2: MenuEntry("Журнал по предмету (все попытки)", journal_by_subject),
    3: MenuEntry("Журнал по студенту (все попытки)", journal_by_student),
}


def run_menu(session: Session, title: str, entries: dict[int, MenuEntry]) -> None:
    """Show a numbered menu until the user picks 0."""
    while True:
        session.console.print(f"\n[bold]\\[{escape(title)}][/bold]")
        for number, entry in entries.items():
            session.say(f"{number}) {entry.label}")
        session.say("0) Назад")
        choice = read_int("Выберите", 0, len(entries))
        if choice == 0:
            return
        entries[choice].action(session)


def _submenu(title: str, entries: dict[int, MenuEntry]) -> Callable[[Session], None]:
    return lambda session: run_menu(session, title, entries)


MAIN_MENU = {
    1: MenuEntry("Студенты", _submenu("Студенты", STUDENTS_MENU)),
    2: MenuEntry("Группы", _submenu("Группы", GROUPS_MENU)),
    3: MenuEntry("Предметы", _submenu("Предметы", SUBJECTS_MENU)),
    4: MenuEntry("Оценки", _submenu("Оценки", GRADES_MENU)),
    5: MenuEntry("Отчеты", _submenu("Отчеты", REPORTS_MENU)),
    6: MenuEntry("Электронный журнал", _submenu("Электронный журнал", JOURNAL_MENU)),
    7: MenuEntry("Экспорт в CSV (Excel)", lambda session: session.export()),
}


def main_menu(session: Session) -> None:
    """Top-level loop; returns when the user picks 0 (exit)."""
    while True:
        session.console.print("\n[bold]\\[Главное меню][/bold]")
        for number, entry in MAIN_MENU.items():
            session.say(f"{number}) {entry.label}")
        session.say("0) Выход")
        choice = read_int("Выберите", 0, len(MAIN_MENU))
        if choice == 0:
            logger.debug("shell.exit_requested")
            return
        MAIN_MENU[choice].action(session)
