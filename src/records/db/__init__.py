"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Whole-store load and save
"""

from records.db.database import get_db, init_db
from records.db.store_repository import load_store, save_store

__all__ = ["get_db", "init_db", "load_store", "save_store"]
