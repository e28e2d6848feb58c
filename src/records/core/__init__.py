"""Core business logic.

Modules:
- models: record types and grading constants
- entity_store: the in-memory store and its integrity rules
- aggregation: averages and grade histories
- filters: group filters, search and sorting
- reports / journal: table views over the store
- operations: operation ids mapped to handlers
"""

__all__ = [
    "models",
    "entity_store",
    "aggregation",
    "filters",
    "reports",
    "journal",
    "operations",
]
