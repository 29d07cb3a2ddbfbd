"""Mutation operations on a task document.

These are the calls the rest of the application makes. Each one validates
its own request before touching the document and raises a DependencyError
subclass when it refuses; a refused operation leaves the document exactly
as it was.
"""

from collections import deque
from typing import Any, Sequence

from taskdeps.constants import DEFAULT_STATUSES, DONE
from taskdeps.errors import (
    InvalidDependency,
    InvalidStatus,
    NodeNotFound,
    PrematureCompletionError,
    WouldCreateCycle,
)
from taskdeps.graph.changes import ChangeEntry, ChangeKind
from taskdeps.graph.identifiers import NodeId
from taskdeps.graph.model import TaskDocument
from taskdeps.graph.status import blocking_dependencies
from taskdeps.logging import Loggers

logger = Loggers.graph()


def _require_node(document: TaskDocument, raw: Any, role: str = "Task") -> NodeId:
    node_id = document.resolve(raw)
    if node_id is None:
        raise NodeNotFound(
            f"{role} {raw} not found",
            details={"id": str(raw)},
        )
    return node_id


def find_path(document: TaskDocument, start: NodeId, goal: NodeId) -> list[NodeId] | None:
    """Breadth-first search along dependency edges from ``start`` to ``goal``.

    Returns:
        The node path including both ends, or None if ``goal`` is unreachable.
    """
    parents: dict[NodeId, NodeId | None] = {start: None}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        if current == goal:
            path = [current]
            while parents[path[-1]] is not None:
                path.append(parents[path[-1]])  # type: ignore[arg-type]
            return list(reversed(path))
        for dep_id in document.dependencies_of(current):
            if dep_id not in parents:
                parents[dep_id] = current
                queue.append(dep_id)
    return None


def add_dependency(document: TaskDocument, from_id: Any, to_id: Any) -> ChangeEntry:
    """Make ``from_id`` depend on ``to_id``.

    Args:
        document: Document to mutate.
        from_id: The dependent node (task id or ``"parent.sub"``).
        to_id: The node it will depend on.

    Returns:
        ChangeEntry describing the added edge.

    Raises:
        NodeNotFound: If either identifier does not resolve.
        InvalidDependency: For self edges, existing edges, or a task
            reference from a subtask that would be read as a sibling.
        WouldCreateCycle: If ``to_id`` already reaches ``from_id``.
    """
    source = _require_node(document, from_id)
    target = _require_node(document, to_id, role="Dependency")

    if source == target:
        raise InvalidDependency(
            f"{source.kind().capitalize()} {source} cannot depend on itself",
            details={"id": str(source)},
        )
    if document.has_edge(source, target):
        raise InvalidDependency(
            f"{source.kind().capitalize()} {source} already depends on {target}",
            details={"id": str(source), "depends_on": str(target)},
        )
    if source.is_subtask and not target.is_subtask:
        sibling = NodeId(source.task_id, target.task_id)
        if sibling in document:
            raise InvalidDependency(
                f"Dependency {target} from subtask {source} is ambiguous: "
                f"it would be read as sibling subtask {sibling}",
                details={"id": str(source), "depends_on": str(target)},
            )

    path = find_path(document, target, source)
    if path is not None:
        cycle = " → ".join(str(node) for node in [source, *path])
        raise WouldCreateCycle(
            f"Adding dependency {source} → {target} would create cycle {cycle}",
            details={"cycle": [str(node) for node in [source, *path]]},
        )

    document.add_edge(document.get(source), document.get(target))  # type: ignore[arg-type]
    logger.info("dependency_added", source=str(source), target=str(target))
    return ChangeEntry(kind=ChangeKind.ADDED_DEPENDENCY, node=source, target=str(target))


def remove_dependency(document: TaskDocument, from_id: Any, to_id: Any) -> ChangeEntry:
    """Remove the dependency ``from_id -> to_id``.

    ``to_id`` is matched the way the dependent's own list is read, so a
    plain number on a subtask first names a sibling. Entries that no longer
    resolve can be removed by giving their raw value.

    Raises:
        NodeNotFound: If ``from_id`` does not resolve or the edge is absent.
    """
    source = _require_node(document, from_id)
    node = document.get(source)
    target = document.resolve(to_id, context=source)

    if target is not None:
        removed = document.retain_dependencies(
            node, lambda raw, resolved: resolved != target  # type: ignore[arg-type]
        )
        label = str(target)
    else:
        wanted = str(to_id).strip()
        removed = document.retain_dependencies(
            node,
            lambda raw, resolved: not (resolved is None and str(raw).strip() == wanted),  # type: ignore[arg-type]
        )
        label = wanted

    if not removed:
        raise NodeNotFound(
            f"{source.kind().capitalize()} {source} does not depend on {label}",
            details={"id": str(source), "depends_on": label},
        )

    logger.info("dependency_removed", source=str(source), target=label)
    return ChangeEntry(kind=ChangeKind.REMOVED_DEPENDENCY, node=source, target=label)


def set_status(
    document: TaskDocument,
    node_id: Any,
    status: str,
    *,
    force: bool = False,
    allowed_statuses: Sequence[str] | None = None,
) -> ChangeEntry:
    """Set the status of a task or subtask.

    Setting ``done`` requires every dependency to be done, unless ``force``
    is given; a forced completion is left for the validator to flag.

    Args:
        document: Document to mutate.
        node_id: Task id or ``"parent.sub"``.
        status: New status.
        force: Allow completion with unfinished dependencies.
        allowed_statuses: Valid statuses (defaults to the built-in set).

    Raises:
        NodeNotFound: If the node does not exist.
        InvalidStatus: If ``status`` is not allowed.
        PrematureCompletionError: If completing while blocked without force.
    """
    target = _require_node(document, node_id)
    allowed = list(DEFAULT_STATUSES if allowed_statuses is None else allowed_statuses)
    if status not in allowed:
        raise InvalidStatus(
            f"Invalid status: {status}. Valid: {', '.join(allowed)}",
            details={"status": status, "allowed": allowed},
        )

    if status == DONE:
        blockers = blocking_dependencies(document, target)
        if blockers and not force:
            raise PrematureCompletionError(
                f"{target.kind().capitalize()} {target} cannot be marked done: "
                f"dependencies {', '.join(str(b) for b in blockers)} are not done",
                details={"id": str(target), "blocking": [str(b) for b in blockers]},
            )
        if blockers:
            logger.warning(
                "premature_completion_forced",
                node=str(target),
                blocking=[str(b) for b in blockers],
            )

    node = document.get(target)
    previous = node.status  # type: ignore[union-attr]
    node.status = status  # type: ignore[union-attr]
    logger.info("status_changed", node=str(target), previous=previous, status=status)
    return ChangeEntry(kind=ChangeKind.STATUS_CHANGED, node=target, target=status)


def remove_task(document: TaskDocument, task_id: Any) -> ChangeEntry:
    """Remove a top-level task and its subtasks.

    Other nodes keep their references to it; run a repair afterwards to
    clean them up.

    Raises:
        NodeNotFound: If the task does not exist or the id names a subtask.
    """
    target = _require_node(document, task_id)
    if target.is_subtask:
        raise NodeNotFound(f"{task_id} is a subtask, not a task", details={"id": str(task_id)})
    document.remove_node(target)
    logger.info("node_removed", node=str(target))
    return ChangeEntry(kind=ChangeKind.REMOVED_NODE, node=target)


def remove_subtask(document: TaskDocument, subtask_id: Any) -> ChangeEntry:
    """Remove a single subtask given its ``"parent.sub"`` id.

    Raises:
        NodeNotFound: If the subtask does not exist.
    """
    target = _require_node(document, subtask_id, role="Subtask")
    if not target.is_subtask:
        raise NodeNotFound(f"{subtask_id} is not a subtask id", details={"id": str(subtask_id)})
    document.remove_node(target)
    logger.info("node_removed", node=str(target))
    return ChangeEntry(kind=ChangeKind.REMOVED_NODE, node=target)
