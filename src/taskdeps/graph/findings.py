"""Findings reported by dependency validation.

Findings are plain data: a kind, the identifiers involved, and a readable
message. They never format for a particular output medium; ``to_dict()``
gives a presentation layer everything it needs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from taskdeps.graph.identifiers import NodeId, parse_identifier


class FindingKind(str, Enum):
    """Kinds of data-quality problems."""

    DANGLING_REFERENCE = "dangling_reference"
    SELF_REFERENCE = "self_reference"
    DUPLICATE_DEPENDENCY = "duplicate_dependency"
    CYCLE = "cycle"
    PREMATURE_COMPLETION = "premature_completion"


# Kinds the repairer fixes unconditionally
STRUCTURAL_KINDS = frozenset({
    FindingKind.DANGLING_REFERENCE,
    FindingKind.SELF_REFERENCE,
    FindingKind.DUPLICATE_DEPENDENCY,
    FindingKind.CYCLE,
})


def describe_missing(raw: Any) -> str:
    """Explain why a raw identifier does not resolve."""
    parsed = parse_identifier(raw)
    if parsed is None:
        return f"malformed identifier {raw!r}"
    return f"{parsed.kind()} {parsed} does not exist"


class Finding(ABC):
    """Base class for validation findings."""

    kind: FindingKind

    @property
    @abstractmethod
    def message(self) -> str:
        """Readable one-line description."""

    @property
    def is_structural(self) -> bool:
        return self.kind in STRUCTURAL_KINDS

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class DanglingReference(Finding):
    """A dependency identifier that does not resolve to any node."""

    node: NodeId
    bad_id: Any

    kind = FindingKind.DANGLING_REFERENCE

    @property
    def message(self) -> str:
        return f"{self.node.kind()} {self.node} depends on {self.bad_id} ({describe_missing(self.bad_id)})"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "node": str(self.node), "bad_id": self.bad_id}


@dataclass(frozen=True)
class SelfReference(Finding):
    """A node that lists itself as a dependency."""

    node: NodeId

    kind = FindingKind.SELF_REFERENCE

    @property
    def message(self) -> str:
        return f"{self.node.kind()} {self.node} depends on itself"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "node": str(self.node)}


@dataclass(frozen=True)
class DuplicateDependency(Finding):
    """A dependency listed more than once on the same node."""

    node: NodeId
    id: NodeId

    kind = FindingKind.DUPLICATE_DEPENDENCY

    @property
    def message(self) -> str:
        return f"{self.node.kind()} {self.node} lists dependency {self.id} more than once"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "node": str(self.node), "id": str(self.id)}


@dataclass(frozen=True)
class Cycle(Finding):
    """A dependency cycle, in traversal order.

    The closing edge runs from the last node back to the first.
    """

    nodes: tuple[NodeId, ...]

    kind = FindingKind.CYCLE

    @property
    def closing_edge(self) -> tuple[NodeId, NodeId]:
        return self.nodes[-1], self.nodes[0]

    def path(self) -> str:
        return " → ".join(str(node) for node in (*self.nodes, self.nodes[0]))

    @property
    def message(self) -> str:
        return f"dependency cycle {self.path()}"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "nodes": [str(node) for node in self.nodes]}


@dataclass(frozen=True)
class PrematureCompletion(Finding):
    """A done node with a dependency that is not done."""

    node: NodeId
    blocking_id: NodeId
    blocking_status: str = ""

    kind = FindingKind.PREMATURE_COMPLETION

    @property
    def message(self) -> str:
        return (
            f"{self.node.kind()} {self.node} is done but dependency "
            f"{self.blocking_id} is {self.blocking_status or 'not done'}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "node": str(self.node),
            "blocking_id": str(self.blocking_id),
            "blocking_status": self.blocking_status,
        }


def count_by_kind(findings: list[Finding]) -> dict[str, int]:
    """Return finding counts keyed by kind value, including zero counts."""
    counts = {kind.value: 0 for kind in FindingKind}
    for finding in findings:
        counts[finding.kind.value] += 1
    return counts
