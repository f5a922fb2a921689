"""
Adapters layer - Storage backends (SQLAlchemy and in-memory).
"""

from .memory_storage import MemoryStorage
from .sql_storage import SqlStorage, create_db_engine

__all__ = ["MemoryStorage", "SqlStorage", "create_db_engine"]
