"""Database store layer - provides persistence for the application.

This module re-exports the persistence adapters and schema helpers.
"""

from finplan.store.base import PersistenceAdapter, PersistenceError
from finplan.store.schema import database_exists, get_db_path, get_snapshot_path, init_database
from finplan.store.snapshot import SnapshotAdapter
from finplan.store.sqlite import SqliteAdapter

__all__ = [
    # Adapters
    "PersistenceAdapter",
    "PersistenceError",
    "SnapshotAdapter",
    "SqliteAdapter",
    # Schema
    "database_exists",
    "get_db_path",
    "get_snapshot_path",
    "init_database",
]
