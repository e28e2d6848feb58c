"""Academic records manager: groups, students, subjects and graded attempts."""

__version__ = "0.1.0"
