"""Change log entries produced by repairs and mutations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from taskdeps.graph.identifiers import NodeId


class ChangeKind(str, Enum):
    """Kinds of changes applied to a document."""

    REMOVED_DANGLING = "removed_dangling"
    REMOVED_SELF = "removed_self"
    REMOVED_DUPLICATE = "removed_duplicate"
    BROKE_CYCLE = "broke_cycle"
    REVERTED_STATUS = "reverted_status"
    ADDED_DEPENDENCY = "added_dependency"
    REMOVED_DEPENDENCY = "removed_dependency"
    STATUS_CHANGED = "status_changed"
    REMOVED_NODE = "removed_node"


@dataclass(frozen=True)
class ChangeEntry:
    """One applied change.

    Attributes:
        kind: What kind of change was made.
        node: The node whose data changed.
        target: The other side of the change (dependency id or new status).
        reason: Why the change was made, if it was corrective.
    """

    kind: ChangeKind
    node: NodeId
    target: str = ""
    reason: str = ""

    @property
    def message(self) -> str:
        if self.kind is ChangeKind.REVERTED_STATUS:
            text = f"reset status of {self.node} to {self.target}"
        elif self.kind is ChangeKind.STATUS_CHANGED:
            text = f"set status of {self.node} to {self.target}"
        elif self.kind is ChangeKind.ADDED_DEPENDENCY:
            text = f"added dependency {self.node} → {self.target}"
        elif self.kind is ChangeKind.REMOVED_NODE:
            text = f"removed {self.node.kind()} {self.node}"
        else:
            text = f"removed dependency {self.node} → {self.target}"
        return f"{text} ({self.reason})" if self.reason else text

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "node": str(self.node),
            "target": self.target,
            "reason": self.reason,
            "message": self.message,
        }

    def __str__(self) -> str:
        return self.message
