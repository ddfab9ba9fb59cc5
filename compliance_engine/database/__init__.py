"""
Database module for the compliance engine.

Handles:
- Task definitions (the per-venue checklist catalog)
- Completion records (append-only, with sign-off fields)
"""

from .connection import (
    get_database,
    Database,
    init_database,
    close_database,
    normalize_database_url,
)
from ..exceptions import DatabaseError, DatabaseConnectionError
from .models import (
    Base,
    TaskDefinitionDB,
    CompletionRecordDB,
)

__all__ = [
    "get_database",
    "Database",
    "init_database",
    "close_database",
    "normalize_database_url",
    "DatabaseError",
    "DatabaseConnectionError",
    "Base",
    "TaskDefinitionDB",
    "CompletionRecordDB",
]
