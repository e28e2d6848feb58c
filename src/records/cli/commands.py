"""CLI commands for the academic records manager.

- shell: interactive menu (default when no command is given)
- report: print one of the summary reports
- journal: print a gradebook view
- export: write the four CSV files
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from records.cli.menus import Session, main_menu
from records.config.app_config import load_app_config
from records.config.log_setup import configure_logging
from records.core.entity_store import DataStore
from records.core.errors import PersistenceError
from records.core.filters import GroupFilter, rank_by_average
from records.db.store_repository import load_store

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="records",
    help="Учет студентов, групп, предметов и оценок.",
)

console = Console()


class ReportKind(str, Enum):
    students = "students"
    subjects = "subjects"
    top = "top"
    retakes = "retakes"


class JournalView(str, Enum):
    matrix = "matrix"
    subject = "subject"
    student = "student"


def _open_session(export_dir: Path | None = None, announce: bool = False) -> Session:
    """Load config, set up logging and read the store from disk.

    A database that cannot be read is reported and replaced by an empty
    store; the next save overwrites it.
    """
    config = load_app_config()
    configure_logging(config.logging.level)
    db_path = config.storage.db_path

    try:
        store, existed = load_store(db_path)
    except PersistenceError as e:
        console.print(f"[yellow]⚠ {escape(str(e))}[/yellow]")
        console.print("[yellow]⚠ Начинаем с пустой базы.[/yellow]")
        store, existed = DataStore(), False

    if announce:
        if existed:
            console.print(f"Данные загружены из {escape(str(db_path))}.")
        else:
            console.print("База данных не найдена, будет создана новая.")

    return Session(
        store=store,
        db_path=db_path,
        export_dir=export_dir or config.storage.export_path,
        console=console,
    )


def _exit_on_failure(session: Session, operation_id: str, **kwargs) -> None:
    result = session.run(operation_id, **kwargs)
    if not result.success:
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Без команды запускается интерактивное меню."""
    if ctx.invoked_subcommand is None:
        shell()


@app.command()
def shell() -> None:
    """Интерактивное меню."""
    session = _open_session(announce=True)
    logger.info("shell.started", db_path=str(session.db_path))
    try:
        main_menu(session)
    except typer.Abort:
        # stdin closed or Ctrl+C
        console.print()
    session.final_save()
    console.print("До свидания.")


@app.command()
def report(
    kind: ReportKind = typer.Argument(..., help="students, subjects, top, retakes"),
    n: int = typer.Option(10, "--n", "-n", min=1, help="Size of the top-N report"),
) -> None:
    """Вывести отчет."""
    session = _open_session()
    if kind is ReportKind.students:
        _exit_on_failure(session, "report.overall")
    elif kind is ReportKind.subjects:
        _exit_on_failure(session, "report.subjects")
    elif kind is ReportKind.top:
        ranked = rank_by_average(session.store)
        if not ranked:
            session.say("Нет оценок.")
            return
        _exit_on_failure(session, "report.top", n=min(n, len(ranked)))
    else:
        _exit_on_failure(session, "report.retakes")


@app.command()
def journal(
    view: JournalView = typer.Argument(JournalView.matrix, help="matrix, subject, student"),
    entity_id: int | None = typer.Option(
        None, "--id", help="Subject id (subject view) or student id (student view)"
    ),
    group: int | None = typer.Option(None, "--group", "-g", help="Only students of this group"),
    ungrouped: bool = typer.Option(False, "--ungrouped", help="Only students without a group"),
) -> None:
    """Вывести электронный журнал."""
    if group is not None and ungrouped:
        console.print("[red]✗ --group и --ungrouped нельзя указывать вместе.[/red]")
        raise typer.Exit(code=1)

    session = _open_session()
    if group is not None:
        if session.store.find_group(group) is None:
            console.print("[red]✗ Группа не найдена.[/red]")
            raise typer.Exit(code=1)
        group_filter = GroupFilter.specific(group)
    elif ungrouped:
        group_filter = GroupFilter.ungrouped()
    else:
        group_filter = GroupFilter.all()

    if view is JournalView.matrix:
        _exit_on_failure(session, "journal.matrix", group_filter=group_filter)
        return

    if entity_id is None:
        console.print("[red]✗ Укажите --id.[/red]")
        raise typer.Exit(code=1)
    if view is JournalView.subject:
        _exit_on_failure(
            session, "journal.by_subject", subject_id=entity_id, group_filter=group_filter
        )
    else:
        _exit_on_failure(session, "journal.by_student", student_id=entity_id)


@app.command()
def export(
    directory: Path | None = typer.Option(None, "--dir", "-d", help="Target directory"),
) -> None:
    """Экспортировать данные в CSV (Excel)."""
    session = _open_session(export_dir=directory)
    if not session.export():
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
