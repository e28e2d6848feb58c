"""Tests for the gradebook views."""

import pytest

from records.core.entity_store import DataStore
from records.core.errors import NotFoundError
from records.core.filters import GroupFilter
from records.core.journal import build_by_student, build_by_subject, build_matrix


class TestMatrix:
    """Tests for build_matrix."""

    def test_rows_sorted_by_name_with_latest_grades(self, sample_store):
        """One row per student; cells hold the latest grade or "-"."""
        view = build_matrix(sample_store)
        assert [c.header for c in view.columns] == [
            "ID", "ФИО", "Группа", "Math", "Physics", "History", "Ср.балл"
        ]
        assert [row[0] for row in view.rows] == ["4", "1", "2", "3"]
        ivanov = view.rows[1]
        assert ivanov[3:] == ["4", "5", "-", "4.00"]
        alpha = view.rows[0]
        assert alpha[2] == "Без группы"
        assert alpha[3:] == ["-", "-", "-", "нет"]

    def test_group_filter(self, sample_store):
        view = build_matrix(sample_store, GroupFilter.specific(2))
        assert [row[0] for row in view.rows] == ["3"]
        assert "Группа: ПМ-22" in view.title

    def test_ungrouped_caption(self, sample_store):
        view = build_matrix(sample_store, GroupFilter.ungrouped())
        assert "Группа: без группы" in view.title

    def test_empty_cases(self, store):
        assert build_matrix(store).render() == ["Нет студентов."]
        store.create_student("Ann")
        assert build_matrix(store).render() == ["Нет предметов."]
        store.create_subject("Math")
        assert build_matrix(store, GroupFilter.ungrouped()).rows
        store.create_group("G")
        assert build_matrix(store, GroupFilter.specific(1)).render() == [
            "Нет студентов для выбранного фильтра."
        ]

    def test_long_subject_names_fit_column(self, sample_store):
        sample_store.create_subject("Математический анализ")
        lines = build_matrix(sample_store).render()
        assert "Матем..." in lines[2]


class TestBySubject:
    """Tests for build_by_subject."""

    def test_history_cells(self, sample_store):
        """Grades in attempt order, average, latest value, attempts."""
        view = build_by_subject(sample_store, 1)
        by_id = {row[0]: row for row in view.rows}
        assert by_id["1"][3:] == ["2, 4", "3.00", "4", "2"]
        assert by_id["4"][3:] == ["нет", "нет", "нет", "0"]
        assert view.title[0] == "Электронный журнал по предмету: Math"

    def test_unknown_subject(self, sample_store):
        with pytest.raises(NotFoundError):
            build_by_subject(sample_store, 99)


class TestByStudent:
    """Tests for build_by_student."""

    def test_every_subject_listed(self, sample_store):
        view = build_by_student(sample_store, 1)
        assert [row[1] for row in view.rows] == ["Math", "Physics", "History"]
        assert view.rows[2][2:] == ["нет", "нет", "нет", "0"]
        assert view.footer == ["Средний балл по предметам: 4.00"]
        assert "Группа: ИВТ-21" in view.title

    def test_no_subjects(self):
        store = DataStore()
        sid = store.create_student("Ann")
        assert build_by_student(store, sid).render() == ["Нет предметов."]

    def test_unknown_student(self, sample_store):
        with pytest.raises(NotFoundError):
            build_by_student(sample_store, 99)
