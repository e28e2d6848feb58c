"""Tests for fixed-width table rendering."""

from records.utils.table import (
    Column,
    TableView,
    fit_cell,
    pad_cell,
    render_line,
    render_row,
    render_table,
)


class TestFitCell:
    """Tests for fit_cell truncation."""

    def test_short_text_unchanged(self):
        assert fit_cell("Math", 8) == "Math"

    def test_exact_width_unchanged(self):
        assert fit_cell("12345678", 8) == "12345678"

    def test_long_cyrillic_truncated_by_characters(self):
        """Truncation counts characters, not bytes."""
        assert fit_cell("Иванов Иван Иванович", 8) == "Ивано..."

    def test_narrow_columns_hard_truncate(self):
        """Widths of 3 or less get no ellipsis."""
        assert fit_cell("Иванов", 3) == "Ива"
        assert fit_cell("abc", 1) == "a"


class TestPadding:
    """Tests for pad_cell and rows."""

    def test_pad_left_and_right(self):
        assert pad_cell("5", 4) == "5   "
        assert pad_cell("5", 4, align_right=True) == "   5"
        assert pad_cell("Ёж", 4) == "Ёж  "

    def test_render_line(self):
        assert render_line([2, 3]) == "+----+-----+"

    def test_render_row(self):
        row = render_row(["1", "Иванов Иван Иванович"], [4, 8], [True, False])
        assert row == "|    1 | Ивано... |"

    def test_missing_cells_render_blank(self):
        assert render_row(["1"], [2, 2]) == "| 1  |    |"

    def test_zero_width_clamped_to_one(self):
        assert render_line([0]) == "+---+"


class TestTables:
    """Tests for render_table and TableView."""

    def test_render_table_layout(self):
        lines = render_table([Column("ID", 2, True), Column("Имя", 5)], [["1", "Анна"]])
        assert lines == [
            "+----+-------+",
            "| ID | Имя   |",
            "+----+-------+",
            "|  1 | Анна  |",
            "+----+-------+",
        ]

    def test_all_lines_same_length(self):
        lines = render_table(
            [Column("ID", 4, True), Column("ФИО", 10)],
            [["1", "Очень длинное имя студента"], ["22", "Ann"]],
        )
        assert len({len(line) for line in lines}) == 1

    def test_view_with_title_and_footer(self):
        view = TableView(
            columns=[Column("A", 1)], rows=[["x"]], title=["T"], footer=["F"]
        )
        lines = view.render()
        assert lines[0] == "T"
        assert lines[-1] == "F"

    def test_empty_view_renders_message(self):
        view = TableView(columns=[Column("A", 1)], empty_message="Нет данных.")
        assert view.render() == ["Нет данных."]
        assert TableView.message("Пусто.").render() == ["Пусто."]
