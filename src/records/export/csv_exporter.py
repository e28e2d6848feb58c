"""CSV export of the four entity collections.

Files are written for spreadsheet software set to a comma-decimal
locale: ";" as the field delimiter and a UTF-8 byte-order mark.
Rows end with CRLF. Fields containing the delimiter, a quote, CR or LF
are quoted with embedded quotes doubled.

Output:
    <export_dir>/export_groups.csv
    <export_dir>/export_students.csv
    <export_dir>/export_subjects.csv
    <export_dir>/export_grades.csv
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

import structlog

from records.core.entity_store import DataStore
from records.core.errors import ExportError

logger = structlog.get_logger(__name__)

CSV_DELIMITER = ";"

EXPORT_FILES = (
    "export_groups.csv",
    "export_students.csv",
    "export_subjects.csv",
    "export_grades.csv",
)


def _write_csv(path: Path, header: list[str], rows: Iterable[list]) -> None:
    # utf-8-sig writes the BOM
    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        writer = csv.writer(
            f,
            delimiter=CSV_DELIMITER,
            quotechar='"',
            quoting=csv.QUOTE_MINIMAL,
            lineterminator="\r\n",
        )
        writer.writerow(header)
        writer.writerows(rows)


def export_csv(store: DataStore, export_dir: Path) -> list[Path]:
    """Write one CSV file per collection.

    Args:
        store: Store to export
        export_dir: Target directory (created if missing)

    Returns:
        Paths of the written files, in EXPORT_FILES order

    Raises:
        ExportError: If the directory or a file cannot be written
    """
    groups_path, students_path, subjects_path, grades_path = (
        export_dir / name for name in EXPORT_FILES
    )
    try:
        export_dir.mkdir(parents=True, exist_ok=True)
        _write_csv(
            groups_path,
            ["ID_группы", "Название_группы"],
            ([g.id, g.name] for g in store.groups),
        )
        _write_csv(
            students_path,
            ["ID_студента", "Имя_студента", "ID_группы", "Группа"],
            (
                [s.id, s.name, s.group_id or 0, store.group_name(s.group_id)]
                for s in store.students
            ),
        )
        _write_csv(
            subjects_path,
            ["ID_предмета", "Название_предмета"],
            ([s.id, s.name] for s in store.subjects),
        )
        _write_csv(
            grades_path,
            ["ID_оценки", "ID_студента", "ID_предмета", "Попытка", "Оценка"],
            ([g.id, g.student_id, g.subject_id, g.attempt, g.value] for g in store.grades),
        )
    except OSError as e:
        logger.warning("export.failed", export_dir=str(export_dir), error=str(e))
        raise ExportError(f"Не удалось открыть файлы для экспорта: {e}") from e

    paths = [groups_path, students_path, subjects_path, grades_path]
    logger.info("export.completed", export_dir=str(export_dir), files=len(paths))
    return paths
