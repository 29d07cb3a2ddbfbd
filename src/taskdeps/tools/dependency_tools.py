"""Dependency management tools.

Each tool runs one load → operate → save cycle against a tasks file and
returns a result dict (``success`` plus ``data`` or ``error``), so it can be
exposed directly through a protocol server or called from scripts:

- validate_dependencies: Report problems without changing anything
- fix_dependencies: Repair structural problems and save the result
- add_dependency / remove_dependency: Edit a single edge
- set_task_status: Change the status of one or more tasks/subtasks
- list_tasks: List tasks with status and dependencies
- next_tasks: List pending work whose dependencies are all done

The calling layer is responsible for serializing concurrent calls against
the same file.

Example:
    >>> result = fix_dependencies(project_root="/path/to/project")
    >>> result["data"]["message"]
    'Fixed 2 dependency issues'
"""

from typing import Any

from taskdeps.config import get_settings
from taskdeps.errors import NodeNotFound
from taskdeps.graph import operations
from taskdeps.graph.findings import count_by_kind
from taskdeps.graph.model import Node, TaskDocument
from taskdeps.graph.repair import repair
from taskdeps.graph.status import ready_nodes
from taskdeps.graph.validator import validate
from taskdeps.logging import Loggers, bind_context
from taskdeps.persistence import TaskFileStore, find_tasks_path
from taskdeps.tools.registry import ToolCategory, register_tool, with_result_wrapper

logger = Loggers.tools()


def _open_store(file: str, project_root: str) -> TaskFileStore:
    path = find_tasks_path(get_settings(), project_root=project_root or None, file=file or None)
    bind_context(tasks_file=str(path))
    return TaskFileStore(path)


def _split_ids(ids: str | int) -> list[str]:
    return [part.strip() for part in str(ids).split(",") if part.strip()]


@register_tool(
    category=ToolCategory.DEPENDENCIES,
    description="Check task dependencies for dangling references, self references, duplicates, cycles and premature completion without changing anything.",
)
@with_result_wrapper
def validate_dependencies(file: str = "", project_root: str = "") -> dict[str, Any]:
    """Validate task dependencies.

    Args:
        file: Path to the tasks file (default: configured tasks file).
        project_root: Root directory of the project.

    Returns:
        Findings and counts by kind.
    """
    store = _open_store(file, project_root)
    findings = validate(store.load())
    logger.info("dependencies_validated", findings=len(findings))
    return {
        "valid": not findings,
        "findings": [finding.to_dict() for finding in findings],
        "summary": count_by_kind(findings),
        "message": (
            "All dependencies are valid"
            if not findings
            else f"Found {len(findings)} dependency issues"
        ),
    }


@register_tool(
    category=ToolCategory.DEPENDENCIES,
    description="Fix invalid dependencies in tasks automatically.",
    writes=True,
)
@with_result_wrapper
def fix_dependencies(
    file: str = "",
    project_root: str = "",
    revert_premature: bool | None = None,
) -> dict[str, Any]:
    """Repair dependencies and save the result if anything changed.

    Args:
        file: Path to the tasks file (default: configured tasks file).
        project_root: Root directory of the project.
        revert_premature: Reset done tasks with unfinished dependencies
            (default: the ``revert_premature_completion`` setting).

    Returns:
        The change log and any flagged premature completions.
    """
    settings = get_settings()
    if revert_premature is None:
        revert_premature = settings.revert_premature_completion

    store = _open_store(file, project_root)
    result = repair(
        store.load(),
        revert_premature=revert_premature,
        reset_status=settings.reset_status,
    )
    if result.changed:
        store.save(result.document)

    data = result.to_dict()
    data["message"] = (
        f"Fixed {len(result.changes)} dependency issues"
        if result.changed
        else "No dependency issues found"
    )
    if result.flagged:
        data["message"] += f"; {len(result.flagged)} premature completions flagged"
    return data


@register_tool(
    category=ToolCategory.DEPENDENCIES,
    description="Add a dependency: the task or subtask 'id' will depend on 'depends_on'.",
    writes=True,
)
@with_result_wrapper
def add_dependency(
    id: str,
    depends_on: str,
    file: str = "",
    project_root: str = "",
) -> dict[str, Any]:
    """Add a dependency between two tasks or subtasks.

    Args:
        id: Task id (or ``"parent.sub"``) that will depend on another.
        depends_on: Task id (or ``"parent.sub"``) to depend on.
        file: Path to the tasks file.
        project_root: Root directory of the project.
    """
    store = _open_store(file, project_root)
    document = store.load()
    entry = operations.add_dependency(document, id, depends_on)
    store.save(document)
    return {"id": str(entry.node), "depends_on": entry.target, "message": entry.message}


@register_tool(
    category=ToolCategory.DEPENDENCIES,
    description="Remove a dependency from a task or subtask.",
    writes=True,
)
@with_result_wrapper
def remove_dependency(
    id: str,
    depends_on: str,
    file: str = "",
    project_root: str = "",
) -> dict[str, Any]:
    """Remove a dependency from a task or subtask.

    Args:
        id: Task id (or ``"parent.sub"``) to remove the dependency from.
        depends_on: Dependency to remove.
        file: Path to the tasks file.
        project_root: Root directory of the project.
    """
    store = _open_store(file, project_root)
    document = store.load()
    entry = operations.remove_dependency(document, id, depends_on)
    store.save(document)
    return {"id": str(entry.node), "depends_on": entry.target, "message": entry.message}


@register_tool(
    category=ToolCategory.STATUS,
    description="Set the status of one or more tasks or subtasks (comma-separated ids). Marking done requires all dependencies to be done unless force is set.",
    writes=True,
)
@with_result_wrapper
def set_task_status(
    id: str,
    status: str,
    force: bool = False,
    file: str = "",
    project_root: str = "",
) -> dict[str, Any]:
    """Set task status.

    Either every id is updated or the file is left untouched.

    Args:
        id: One id or several comma-separated ids (``"3,4.1"``).
        status: New status.
        force: Allow marking done while dependencies are unfinished.
        file: Path to the tasks file.
        project_root: Root directory of the project.
    """
    node_ids = _split_ids(id)
    if not node_ids:
        raise NodeNotFound("No task id given", details={"id": str(id)})

    settings = get_settings()
    store = _open_store(file, project_root)
    document = store.load()
    entries = [
        operations.set_status(
            document,
            node_id,
            status,
            force=force,
            allowed_statuses=settings.statuses,
        )
        for node_id in node_ids
    ]
    store.save(document)
    return {
        "updated": [str(entry.node) for entry in entries],
        "status": status,
        "message": "; ".join(entry.message for entry in entries),
    }


def _describe_node(document: TaskDocument, node: Node) -> dict[str, Any]:
    return {
        "id": str(node.node_id),
        "title": node.title,
        "status": node.status,
        "dependencies": [str(dep) for dep in document.dependencies_of(node.node_id)],
    }


@register_tool(
    category=ToolCategory.QUERY,
    description="List tasks with their status and resolved dependencies, optionally filtered by status (comma-separated) and with subtasks.",
)
@with_result_wrapper
def list_tasks(
    status: str = "",
    with_subtasks: bool = False,
    file: str = "",
    project_root: str = "",
) -> dict[str, Any]:
    """List tasks in document order.

    The status filter applies to top-level tasks; a listed task carries all
    of its subtasks when ``with_subtasks`` is set.

    Args:
        status: Only list tasks with one of these statuses (``"pending,review"``).
        with_subtasks: Include each task's subtasks.
        file: Path to the tasks file.
        project_root: Root directory of the project.
    """
    wanted = set(_split_ids(status))
    store = _open_store(file, project_root)
    document = store.load()

    items = []
    for task in document.tasks:
        if wanted and task.status not in wanted:
            continue
        item = _describe_node(document, task)
        if with_subtasks:
            item["subtasks"] = [_describe_node(document, subtask) for subtask in task.subtasks]
        items.append(item)

    by_status: dict[str, int] = {}
    for task in document.tasks:
        by_status[task.status] = by_status.get(task.status, 0) + 1

    return {
        "tasks": items,
        "count": len(items),
        "total": len(document.tasks),
        "by_status": by_status,
        "filter": sorted(wanted),
        "message": f"{len(items)} of {len(document.tasks)} tasks listed",
    }


@register_tool(
    category=ToolCategory.QUERY,
    description="List pending tasks and subtasks whose dependencies are all done.",
)
@with_result_wrapper
def next_tasks(limit: int = 3, file: str = "", project_root: str = "") -> dict[str, Any]:
    """Get the next tasks ready to work on.

    Args:
        limit: Maximum number of tasks to return.
        file: Path to the tasks file.
        project_root: Root directory of the project.
    """
    store = _open_store(file, project_root)
    document = store.load()
    items = [_describe_node(document, node) for node in ready_nodes(document)[:limit]]
    return {
        "tasks": items,
        "count": len(items),
        "message": f"{len(items)} tasks ready" if items else "No tasks are ready",
    }
