"""Input validation helpers.

Functions:
- parse_int(text) -> int: Strict integer parse (whole string must match)
- parse_float(text) -> float: Strict float parse, accepts "," as decimal mark
- validate_grade_value(value) -> int: Check grade bounds
- normalize_name(text) -> str: Trim and reject empty names
- check_range(value, min_value, max_value) -> value
"""

from __future__ import annotations

import math

from records.core.errors import ValidationError
from records.core.models import MAX_GRADE, MIN_GRADE


def parse_int(text: str) -> int:
    """Parse an integer from user input.

    Args:
        text: Raw input, surrounding whitespace is ignored

    Returns:
        Parsed integer

    Raises:
        ValidationError: If text is empty or not a whole integer
    """
    stripped = text.strip()
    if not stripped:
        raise ValidationError("Введите число.")
    try:
        return int(stripped)
    except ValueError:
        raise ValidationError("Введите корректное целое число.") from None


def parse_float(text: str) -> float:
    """Parse a finite float from user input ("3,5" and "3.5" both accepted)."""
    stripped = text.strip().replace(",", ".")
    if not stripped:
        raise ValidationError("Введите число.")
    try:
        value = float(stripped)
    except ValueError:
        raise ValidationError("Введите корректное число.") from None
    if not math.isfinite(value):
        raise ValidationError("Введите корректное число.")
    return value


def check_range(value, min_value, max_value):
    """Return value if it lies in [min_value, max_value], else raise."""
    if value < min_value or value > max_value:
        raise ValidationError(f"Значение должно быть между {min_value} и {max_value}.")
    return value


def validate_grade_value(value: int) -> int:
    """Check a grade value against MIN_GRADE..MAX_GRADE."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Оценка должна быть целым числом.")
    return check_range(value, MIN_GRADE, MAX_GRADE)


def normalize_name(text: str) -> str:
    """Trim a name and reject it if nothing is left."""
    name = (text or "").strip()
    if not name:
        raise ValidationError("Поле не может быть пустым.")
    return name
