"""Task and subtask identifier parsing.

Identifiers arrive from hand- and agent-edited JSON, so they can be ints,
numeric strings, or composite ``"<parent>.<sub>"`` strings. Everything that
does not parse cleanly becomes ``None`` so callers can report it as a
dangling reference instead of crashing.

Example:
    >>> parse_identifier(" 4.2 ")
    NodeId(task_id=4, subtask_id=2)
    >>> parse_identifier("4.2.1") is None
    True
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, order=True)
class NodeId:
    """Canonical identity of a task (``subtask_id`` is None) or subtask."""

    task_id: int
    subtask_id: int | None = None

    @property
    def is_subtask(self) -> bool:
        return self.subtask_id is not None

    @property
    def parent_id(self) -> "NodeId | None":
        """Identity of the owning task, for subtasks only."""
        if self.subtask_id is None:
            return None
        return NodeId(self.task_id)

    def kind(self) -> str:
        return "subtask" if self.is_subtask else "task"

    def __str__(self) -> str:
        if self.subtask_id is None:
            return str(self.task_id)
        return f"{self.task_id}.{self.subtask_id}"


def _parse_positive_int(text: str) -> int | None:
    # rejects signs, inner whitespace, decimal points and non-ASCII digits
    if not text or not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value > 0 else None


def parse_identifier(raw: Any) -> NodeId | None:
    """Parse a raw identifier into a NodeId.

    Args:
        raw: An int, a numeric string, or a ``"<int>.<int>"`` string.

    Returns:
        The parsed NodeId, or None if the identifier is malformed.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return NodeId(raw) if raw > 0 else None
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if text.count(".") == 1:
        parent_text, sub_text = text.split(".")
        parent_id = _parse_positive_int(parent_text)
        subtask_id = _parse_positive_int(sub_text)
        if parent_id is None or subtask_id is None:
            return None
        return NodeId(parent_id, subtask_id)

    task_id = _parse_positive_int(text)
    return NodeId(task_id) if task_id is not None else None


def format_identifier(node_id: NodeId, context: NodeId | None = None) -> int | str:
    """Return the stored form of a reference to ``node_id``.

    Tasks are stored as plain ints. A subtask referencing a sibling uses the
    sibling's local id; every other subtask reference uses the composite
    string.
    """
    if node_id.subtask_id is None:
        return node_id.task_id
    if context is not None and context.is_subtask and context.task_id == node_id.task_id:
        return node_id.subtask_id
    return str(node_id)
