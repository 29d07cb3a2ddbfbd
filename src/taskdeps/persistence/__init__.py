"""Persistence module for task documents."""

from taskdeps.persistence._utils import atomic_write_json
from taskdeps.persistence.store import TaskFileStore, find_tasks_path

__all__ = [
    "TaskFileStore",
    "atomic_write_json",
    "find_tasks_path",
]
