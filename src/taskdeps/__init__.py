"""taskdeps - dependency graph consistency for task lists.

This package keeps the dependency graph of a persisted task list consistent
while tasks and subtasks are edited by people and agents:

- Identifier parsing for task ids and ``parent.sub`` subtask ids
- An in-memory task document with dependency edges
- Validation that reports dangling, self, duplicate, cyclic and
  premature-completion problems
- Repair with a readable change log
- Mutation operations (add/remove dependency, set status)
- A file store and result-dict tools around the core

Example:
    >>> from taskdeps import TaskFileStore, repair, get_settings
    >>> store = TaskFileStore.from_settings(get_settings())
    >>> result = repair(store.load())
    >>> if result.changed:
    ...     store.save(result.document)
"""

from taskdeps.config import (
    Settings,
    SettingsContext,
    get_settings,
    reload_settings,
    set_settings,
)
from taskdeps.errors import (
    DependencyError,
    DuplicateNodeId,
    ForeignNodeError,
    InvalidDependency,
    InvalidStatus,
    NodeNotFound,
    PrematureCompletionError,
    TasksFileError,
    WouldCreateCycle,
)
from taskdeps.graph import (
    ChangeEntry,
    Finding,
    FindingKind,
    NodeId,
    RepairResult,
    Subtask,
    Task,
    TaskDocument,
    add_dependency,
    can_complete,
    find_cycles,
    parse_identifier,
    remove_dependency,
    repair,
    set_status,
    validate,
)
from taskdeps.logging import configure_logging, get_logger
from taskdeps.persistence import TaskFileStore

__all__ = [
    # Settings
    "Settings",
    "SettingsContext",
    "get_settings",
    "set_settings",
    "reload_settings",
    # Logging
    "configure_logging",
    "get_logger",
    # Errors
    "DependencyError",
    "NodeNotFound",
    "InvalidDependency",
    "WouldCreateCycle",
    "PrematureCompletionError",
    "InvalidStatus",
    "TasksFileError",
    "DuplicateNodeId",
    "ForeignNodeError",
    # Graph core
    "NodeId",
    "parse_identifier",
    "Task",
    "Subtask",
    "TaskDocument",
    "Finding",
    "FindingKind",
    "validate",
    "find_cycles",
    "repair",
    "RepairResult",
    "ChangeEntry",
    "can_complete",
    "add_dependency",
    "remove_dependency",
    "set_status",
    # Persistence
    "TaskFileStore",
]

__version__ = "0.1.0"
