"""Tests for CSV export."""

import pytest

from records.core.errors import ExportError
from records.export.csv_exporter import EXPORT_FILES, export_csv


def _read_lines(path):
    return path.read_bytes().decode("utf-8-sig").split("\r\n")


class TestExportCsv:
    """Tests for export_csv."""

    def test_writes_four_files(self, sample_store, tmp_path):
        paths = export_csv(sample_store, tmp_path / "out")
        assert [p.name for p in paths] == list(EXPORT_FILES)
        assert all(p.exists() for p in paths)

    def test_bom_and_semicolon(self, sample_store, tmp_path):
        """Files start with a UTF-8 BOM and use ";" as delimiter."""
        groups_path = export_csv(sample_store, tmp_path)[0]
        raw = groups_path.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        assert _read_lines(groups_path)[:2] == ["ID_группы;Название_группы", "1;ИВТ-21"]

    def test_students_without_group_written_as_zero(self, sample_store, tmp_path):
        students_path = export_csv(sample_store, tmp_path)[1]
        lines = _read_lines(students_path)
        assert lines[0] == "ID_студента;Имя_студента;ID_группы;Группа"
        assert "4;Alpha Smith;0;Без группы" in lines
        assert "1;Иванов Иван;1;ИВТ-21" in lines

    def test_grades_columns(self, sample_store, tmp_path):
        grades_path = export_csv(sample_store, tmp_path)[3]
        lines = _read_lines(grades_path)
        assert lines[0] == "ID_оценки;ID_студента;ID_предмета;Попытка;Оценка"
        assert lines[2] == "2;1;1;2;4"

    def test_special_characters_quoted(self, store, tmp_path):
        """Delimiters and quotes inside a field are quoted and doubled."""
        store.create_subject('Физика; "основы"')
        subjects_path = export_csv(store, tmp_path)[2]
        assert _read_lines(subjects_path)[1] == '1;"Физика; ""основы"""'

    def test_line_breaks_inside_field_quoted(self, store, tmp_path):
        """A bare CR or LF inside a name is quoted so the row stays intact."""
        store.create_subject("Физика\rоснова")
        store.create_subject("Химия\nорганика")
        subjects_path = export_csv(store, tmp_path)[2]
        lines = _read_lines(subjects_path)
        assert lines[1] == '1;"Физика\rоснова"'
        assert lines[2] == '2;"Химия\nорганика"'
        assert lines[3] == ""

    def test_empty_store_writes_headers(self, store, tmp_path):
        paths = export_csv(store, tmp_path)
        assert _read_lines(paths[0]) == ["ID_группы;Название_группы", ""]

    def test_unwritable_directory(self, sample_store, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(ExportError, match="Не удалось открыть файлы для экспорта"):
            export_csv(sample_store, blocker)
