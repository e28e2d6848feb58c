"""Tests for input validation helpers."""

import pytest

from records.core.errors import ValidationError
from records.utils.validators import (
    check_range,
    normalize_name,
    parse_float,
    parse_int,
    validate_grade_value,
)


class TestParseInt:
    """Tests for parse_int."""

    def test_valid(self):
        assert parse_int(" 42 ") == 42
        assert parse_int("-1") == -1

    @pytest.mark.parametrize("text", ["", "  ", "abc", "4.5", "12abc"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_int(text)

    def test_empty_message(self):
        with pytest.raises(ValidationError, match="Введите число."):
            parse_int("")


class TestParseFloat:
    """Tests for parse_float."""

    def test_comma_decimal_mark(self):
        assert parse_float("3,5") == pytest.approx(3.5)
        assert parse_float("4.25") == pytest.approx(4.25)

    @pytest.mark.parametrize("text", ["", "x", "nan", "inf"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_float(text)


class TestRanges:
    """Tests for check_range and grade validation."""

    def test_check_range(self):
        assert check_range(3, 1, 5) == 3
        with pytest.raises(ValidationError, match="между 1 и 5"):
            check_range(6, 1, 5)

    def test_grade_bounds(self):
        assert validate_grade_value(1) == 1
        assert validate_grade_value(5) == 5
        with pytest.raises(ValidationError):
            validate_grade_value(0)

    def test_grade_must_be_int(self):
        with pytest.raises(ValidationError):
            validate_grade_value(4.0)


class TestNormalizeName:
    """Tests for normalize_name."""

    def test_trims(self):
        assert normalize_name("  Анна ") == "Анна"

    def test_blank_rejected(self):
        with pytest.raises(ValidationError, match="Поле не может быть пустым."):
            normalize_name("\t ")
