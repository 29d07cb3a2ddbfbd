"""In-memory task document with dependency edges.

A TaskDocument wraps the parsed contents of a tasks file: top-level tasks,
each with an ordered list of subtasks, and a dependency list on every node.
Dependency entries are kept exactly as they were written (ints, numeric
strings, or ``"parent.sub"`` strings) and are resolved through an index that
is built once per load.

The document never checks for cycles on its own; it has to be able to hold
broken states so they can be validated and repaired.

Example:
    >>> doc = TaskDocument.from_dict({"tasks": [
    ...     {"id": 1, "title": "Setup", "status": "done"},
    ...     {"id": 2, "title": "Build", "dependencies": [1]},
    ... ]})
    >>> [str(target) for _, target in doc.edges(NodeId(2))]
    ['1']
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from taskdeps.constants import PENDING
from taskdeps.errors import DuplicateNodeId, ForeignNodeError
from taskdeps.graph.identifiers import NodeId, format_identifier, parse_identifier
from taskdeps.logging import Loggers

logger = Loggers.graph()

RawId = int | str

_SUBTASK_KEYS = ("id", "title", "description", "status", "dependencies", "details")
_TASK_KEYS = _SUBTASK_KEYS + ("priority", "testStrategy", "subtasks")


def _coerce_id(value: Any) -> Any:
    """Turn numeric string ids into ints; leave anything else untouched."""
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value.strip())
    return value


@dataclass
class Subtask:
    """A unit of work scoped to a parent task.

    Attributes:
        id: Local id, unique within the parent (1-based).
        title: Short title.
        status: Current status.
        dependencies: Raw dependency identifiers, in listed order.
        description: Optional longer description.
        details: Optional implementation notes.
        parent_id: Id of the owning task. Set by the document, not stored.
        extra: Unknown keys carried through load/save unchanged.
    """

    id: int
    title: str
    status: str = PENDING
    dependencies: list[RawId] = field(default_factory=list)
    description: str = ""
    details: str = ""
    parent_id: int = field(default=0, repr=False)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def node_id(self) -> NodeId:
        return NodeId(self.parent_id, self.id)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "dependencies": list(self.dependencies),
        }
        if self.details:
            data["details"] = self.details
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], parent_id: int = 0) -> "Subtask":
        return cls(
            id=_coerce_id(data["id"]),
            title=data.get("title", ""),
            status=data.get("status", PENDING),
            dependencies=list(data.get("dependencies") or []),
            description=data.get("description", ""),
            details=data.get("details", ""),
            parent_id=parent_id,
            extra={k: v for k, v in data.items() if k not in _SUBTASK_KEYS},
        )


@dataclass
class Task:
    """A top-level unit of work.

    Attributes:
        id: Unique positive integer id.
        title: Short title.
        status: Current status.
        dependencies: Raw dependency identifiers, in listed order.
        subtasks: Ordered subtasks.
        description: Optional longer description.
        details: Optional implementation notes.
        priority: Optional priority label.
        test_strategy: Optional verification notes (``testStrategy`` on disk).
        extra: Unknown keys carried through load/save unchanged.
    """

    id: int
    title: str
    status: str = PENDING
    dependencies: list[RawId] = field(default_factory=list)
    subtasks: list[Subtask] = field(default_factory=list)
    description: str = ""
    details: str = ""
    priority: str = ""
    test_strategy: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def node_id(self) -> NodeId:
        return NodeId(self.id)

    def get_subtask(self, subtask_id: int) -> Subtask | None:
        for subtask in self.subtasks:
            if subtask.id == subtask_id:
                return subtask
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "dependencies": list(self.dependencies),
        }
        if self.priority:
            data["priority"] = self.priority
        if self.details:
            data["details"] = self.details
        if self.test_strategy:
            data["testStrategy"] = self.test_strategy
        data["subtasks"] = [subtask.to_dict() for subtask in self.subtasks]
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        task_id = _coerce_id(data["id"])
        return cls(
            id=task_id,
            title=data.get("title", ""),
            status=data.get("status", PENDING),
            dependencies=list(data.get("dependencies") or []),
            subtasks=[
                Subtask.from_dict(item, parent_id=task_id)
                for item in data.get("subtasks") or []
            ],
            description=data.get("description", ""),
            details=data.get("details", ""),
            priority=data.get("priority", ""),
            test_strategy=data.get("testStrategy", ""),
            extra={k: v for k, v in data.items() if k not in _TASK_KEYS},
        )


Node = Task | Subtask


class TaskDocument:
    """A task list plus the lookup index over all of its nodes.

    Provides:
    - O(1) lookup of tasks and subtasks by NodeId
    - Resolution of raw dependency identifiers
    - Iteration over nodes and edges in document order
    - Edge mutation primitives (add, remove, remove all edges to a node)

    Node handles passed to the mutation primitives must come from this
    document; handles from another instance raise ForeignNodeError.

    Task ids, and subtask ids within one parent, must be unique; a
    duplicate raises DuplicateNodeId.
    """

    def __init__(
        self,
        tasks: list[Task] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.tasks: list[Task] = list(tasks or [])
        self.extra: dict[str, Any] = dict(extra or {})
        self._index: dict[NodeId, Node] = {}
        self.reindex()

    # -- index ---------------------------------------------------------

    def reindex(self) -> None:
        """Rebuild the lookup index after nodes were added or removed."""
        self._index = {}
        for task in self.tasks:
            self._register(task.node_id, task)
            for subtask in task.subtasks:
                subtask.parent_id = task.id
                self._register(subtask.node_id, subtask)

    def _register(self, node_id: NodeId, node: Node) -> None:
        if node_id in self._index:
            raise DuplicateNodeId(
                f"Duplicate {node_id.kind()} id {node_id}",
                details={"id": str(node_id)},
            )
        self._index[node_id] = node

    def _require_owned(self, node: Node) -> NodeId:
        node_id = node.node_id
        if self._index.get(node_id) is not node:
            raise ForeignNodeError(
                f"{node_id.kind().capitalize()} {node_id} does not belong to this document"
            )
        return node_id

    # -- queries -------------------------------------------------------

    def get(self, node_id: NodeId) -> Node | None:
        """Get a task or subtask by its NodeId."""
        return self._index.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self._index)

    def resolve(self, raw: Any, context: NodeId | None = None) -> NodeId | None:
        """Resolve a raw identifier to an existing node.

        Inside a subtask's dependency list (``context`` is a subtask id), a
        plain integer first names a sibling subtask and falls back to the
        top-level task with that id.

        Args:
            raw: Raw identifier as written in the document.
            context: The node whose dependency list ``raw`` came from.

        Returns:
            NodeId of the existing node, or None if it does not resolve.
        """
        parsed = parse_identifier(raw)
        if parsed is None:
            return None
        if context is not None and context.is_subtask and not parsed.is_subtask:
            sibling = NodeId(context.task_id, parsed.task_id)
            if sibling in self._index:
                return sibling
        return parsed if parsed in self._index else None

    def nodes(self) -> Iterator[Node]:
        """Iterate indexed tasks and subtasks in document order."""
        for task in self.tasks:
            if self._index.get(task.node_id) is task:
                yield task
            for subtask in task.subtasks:
                if self._index.get(subtask.node_id) is subtask:
                    yield subtask

    def node_ids(self) -> list[NodeId]:
        return [node.node_id for node in self.nodes()]

    def edges(self, node_id: NodeId) -> Iterator[tuple[RawId, NodeId | None]]:
        """Iterate ``(raw, resolved)`` pairs of a node's dependency list.

        ``resolved`` is None for entries that do not resolve.
        """
        node = self._index.get(node_id)
        if node is None:
            return
        for raw in node.dependencies:
            yield raw, self.resolve(raw, node_id)

    def dependencies_of(self, node_id: NodeId) -> list[NodeId]:
        """Distinct resolvable dependencies of a node, excluding itself."""
        result: list[NodeId] = []
        for _, target in self.edges(node_id):
            if target is not None and target != node_id and target not in result:
                result.append(target)
        return result

    def has_edge(self, from_id: NodeId, to_id: NodeId) -> bool:
        return any(target == to_id for _, target in self.edges(from_id))

    def dependents_of(self, node_id: NodeId) -> list[NodeId]:
        """Nodes that list ``node_id`` as a dependency."""
        return [
            other.node_id
            for other in self.nodes()
            if other.node_id != node_id and self.has_edge(other.node_id, node_id)
        ]

    # -- edge mutation -------------------------------------------------

    def add_edge(self, from_node: Node, to_node: Node) -> bool:
        """Append a dependency edge ``from_node -> to_node``.

        Duplicate and self edges are rejected by returning False. Cycles are
        not checked here.
        """
        from_id = self._require_owned(from_node)
        to_id = self._require_owned(to_node)
        if from_id == to_id or self.has_edge(from_id, to_id):
            return False
        from_node.dependencies.append(format_identifier(to_id, context=from_id))
        return True

    def remove_edge(self, from_node: Node, to_node: Node) -> int:
        """Remove every entry of ``from_node`` that resolves to ``to_node``.

        Returns:
            Number of entries removed.
        """
        from_id = self._require_owned(from_node)
        to_id = self._require_owned(to_node)
        removed = self.retain_dependencies(
            from_node, lambda raw, target: target != to_id
        )
        if removed:
            logger.debug("edge_removed", source=str(from_id), target=str(to_id))
        return len(removed)

    def remove_all_edges_to(self, target: Node) -> list[NodeId]:
        """Remove every edge pointing at ``target``.

        Returns:
            Ids of the nodes whose dependency lists changed.
        """
        target_id = self._require_owned(target)
        changed: list[NodeId] = []
        for node in self.nodes():
            if node is target:
                continue
            if self.retain_dependencies(node, lambda raw, resolved: resolved != target_id):
                changed.append(node.node_id)
        return changed

    def retain_dependencies(
        self,
        node: Node,
        keep: Callable[[RawId, NodeId | None], bool],
    ) -> list[RawId]:
        """Keep only the dependency entries for which ``keep`` is true.

        Args:
            node: Node whose dependency list is filtered.
            keep: Called with each ``(raw, resolved)`` pair, in order.

        Returns:
            The raw entries that were removed, in listed order.
        """
        node_id = self._require_owned(node)
        kept: list[RawId] = []
        removed: list[RawId] = []
        for raw in node.dependencies:
            if keep(raw, self.resolve(raw, node_id)):
                kept.append(raw)
            else:
                removed.append(raw)
        if removed:
            node.dependencies[:] = kept
        return removed

    # -- node removal --------------------------------------------------

    def remove_node(self, node_id: NodeId) -> Node | None:
        """Remove a task (with its subtasks) or a single subtask.

        References held by other nodes are left in place; they become
        dangling and are cleaned up by the next repair pass. Siblings that
        name a removed subtask by its local id are rewritten to the
        composite id first, so the reference dangles instead of falling
        back to the top-level task with the same number.

        Returns:
            The removed node, or None if it did not exist.
        """
        node = self._index.get(node_id)
        if node is None:
            return None
        if isinstance(node, Subtask):
            parent = self._index[NodeId(node_id.task_id)]
            for sibling in parent.subtasks:  # type: ignore[union-attr]
                if sibling is not node:
                    self._pin_local_references(sibling, node_id)
            parent.subtasks[:] = [s for s in parent.subtasks if s is not node]  # type: ignore[union-attr]
        else:
            self.tasks[:] = [t for t in self.tasks if t is not node]
        self.reindex()
        return node

    def _pin_local_references(self, sibling: Subtask, target_id: NodeId) -> None:
        context = sibling.node_id
        pinned: list[RawId] = []
        for raw in sibling.dependencies:
            parsed = parse_identifier(raw)
            local = parsed is not None and not parsed.is_subtask
            if local and self.resolve(raw, context) == target_id:
                pinned.append(str(target_id))
                logger.debug("local_reference_pinned", node=str(context), target=str(target_id))
            else:
                pinned.append(raw)
        sibling.dependencies[:] = pinned

    # -- serialization -------------------------------------------------

    def copy(self) -> "TaskDocument":
        """Return an independent deep copy of the document."""
        return TaskDocument(copy.deepcopy(self.tasks), copy.deepcopy(self.extra))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"tasks": [task.to_dict() for task in self.tasks]}
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskDocument":
        tasks = [Task.from_dict(item) for item in data.get("tasks") or []]
        extra = {k: v for k, v in data.items() if k != "tasks"}
        return cls(tasks, extra)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskDocument):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"TaskDocument(tasks={len(self.tasks)}, nodes={len(self._index)})"
