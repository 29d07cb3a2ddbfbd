"""Dependency graph core.

This package keeps the dependency graph of a task document consistent:
identifier resolution, the in-memory model, validation, repair, status
consistency, and the mutation operations built on top of them.

Example:
    >>> from taskdeps.graph import TaskDocument, add_dependency, repair, validate
    >>> doc = TaskDocument.from_dict(data)
    >>> add_dependency(doc, 2, 1)
    >>> result = repair(doc)
    >>> validate(result.document)
    []
"""

from taskdeps.graph.changes import ChangeEntry, ChangeKind
from taskdeps.graph.findings import (
    Cycle,
    DanglingReference,
    DuplicateDependency,
    Finding,
    FindingKind,
    PrematureCompletion,
    SelfReference,
    count_by_kind,
)
from taskdeps.graph.identifiers import NodeId, format_identifier, parse_identifier
from taskdeps.graph.model import Node, Subtask, Task, TaskDocument
from taskdeps.graph.operations import (
    add_dependency,
    remove_dependency,
    remove_subtask,
    remove_task,
    set_status,
)
from taskdeps.graph.repair import RepairResult, repair
from taskdeps.graph.status import (
    blocking_dependencies,
    can_complete,
    find_premature_completions,
    ready_nodes,
)
from taskdeps.graph.validator import find_cycles, is_consistent, validate

__all__ = [
    # Identifiers
    "NodeId",
    "parse_identifier",
    "format_identifier",
    # Model
    "Node",
    "Task",
    "Subtask",
    "TaskDocument",
    # Findings
    "Finding",
    "FindingKind",
    "DanglingReference",
    "SelfReference",
    "DuplicateDependency",
    "Cycle",
    "PrematureCompletion",
    "count_by_kind",
    # Validation and repair
    "validate",
    "find_cycles",
    "is_consistent",
    "repair",
    "RepairResult",
    "ChangeEntry",
    "ChangeKind",
    # Status
    "can_complete",
    "blocking_dependencies",
    "find_premature_completions",
    "ready_nodes",
    # Operations
    "add_dependency",
    "remove_dependency",
    "set_status",
    "remove_task",
    "remove_subtask",
]
