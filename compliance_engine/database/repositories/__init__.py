"""
Repository classes for database operations.
"""

from .task_definitions import TaskDefinitionRepository, get_task_definition_repository, parse_definition
from .completions import CompletionRepository, get_completion_repository

__all__ = [
    "TaskDefinitionRepository",
    "get_task_definition_repository",
    "parse_definition",
    "CompletionRepository",
    "get_completion_repository",
]
