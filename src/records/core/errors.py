"""Exception hierarchy for the academic records core.

The core raises these; the operation layer turns them into failed
OperationResult values and the CLI recovers from ValidationError by
prompting again.
"""

from __future__ import annotations


class RecordsError(Exception):
    """Base exception for all records errors."""


class ValidationError(RecordsError):
    """Malformed input: out-of-range grade, empty name, bad number."""


_NOT_FOUND_MESSAGES = {
    "group": "Группа не найдена",
    "subject": "Предмет не найден",
    "student": "Студент не найден",
    "grade": "Оценка не найдена",
}


class NotFoundError(RecordsError):
    """Entity id does not exist in the store."""

    def __init__(self, kind: str, entity_id: int):
        self.kind = kind
        self.entity_id = entity_id
        message = _NOT_FOUND_MESSAGES.get(kind, f"{kind} not found")
        super().__init__(f"{message}: {entity_id}")


class IntegrityError(RecordsError):
    """Foreign key references an entity that does not exist."""


class PersistenceError(RecordsError):
    """Durable store could not be read or written."""


class ExportError(RecordsError):
    """Export files could not be written."""
