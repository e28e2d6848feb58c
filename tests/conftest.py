"""Shared fixtures for the records test suite."""

from pathlib import Path

import pytest
import structlog

from records.config.app_config import clear_config_cache
from records.core.entity_store import DataStore


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Reset the config cache and structlog setup around every test."""
    clear_config_cache()
    yield
    clear_config_cache()
    structlog.reset_defaults()


@pytest.fixture
def store() -> DataStore:
    """Empty store."""
    return DataStore()


@pytest.fixture
def sample_store() -> DataStore:
    """Two groups, three subjects, four students and a handful of grades.

    Students:
        1 Иванов Иван   (ИВТ-21)  Math: 2, 4 (latest 4)  Physics: 5
        2 Петрова Анна  (ИВТ-21)  Math: 5                Physics: 2
        3 Сидоров Олег  (ПМ-22)   Math: 3
        4 Alpha Smith   (no group) no grades
    Subjects: 1 Math, 2 Physics, 3 History (no grades)
    """
    s = DataStore()
    ivt = s.create_group("ИВТ-21")
    pm = s.create_group("ПМ-22")
    math = s.create_subject("Math")
    physics = s.create_subject("Physics")
    s.create_subject("History")

    ivanov = s.create_student("Иванов Иван", ivt)
    petrova = s.create_student("Петрова Анна", ivt)
    sidorov = s.create_student("Сидоров Олег", pm)
    s.create_student("Alpha Smith")

    s.create_grade(ivanov, math, 2)
    s.create_grade(ivanov, math, 4)
    s.create_grade(ivanov, physics, 5)
    s.create_grade(petrova, math, 5)
    s.create_grade(petrova, physics, 2)
    s.create_grade(sidorov, math, 3)
    return s


@pytest.fixture
def db_file(tmp_path) -> Path:
    """Path for a database file that does not exist yet."""
    return tmp_path / "data" / "data_store.db"
