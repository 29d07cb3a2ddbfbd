"""Dependency repair.

``repair`` takes the findings of a validation pass and applies a fixed
policy to a copy of the document:

1. Remove dangling references.
2. Remove self references.
3. Collapse duplicate dependencies, keeping the first occurrence.
4. Break cycles one at a time by removing the closing edge of the first
   reported cycle, re-running detection after each removal.
5. Report premature completions without touching them, unless the caller
   opts in to resetting the offending statuses.

The input document is never modified, and repairing an already repaired
document changes nothing.

Example:
    >>> result = repair(document)
    >>> for entry in result.changes:
    ...     print(entry.message)
    removed dependency 3 → 1 (breaks cycle 1 → 2 → 3 → 1)
"""

from dataclasses import dataclass, field
from typing import Any

from taskdeps.constants import PENDING
from taskdeps.graph.changes import ChangeEntry, ChangeKind
from taskdeps.graph.findings import (
    DanglingReference,
    DuplicateDependency,
    Finding,
    PrematureCompletion,
    SelfReference,
    describe_missing,
)
from taskdeps.graph.identifiers import NodeId
from taskdeps.graph.model import TaskDocument
from taskdeps.graph.status import find_premature_completions
from taskdeps.graph.validator import find_cycles, find_edge_problems
from taskdeps.logging import Loggers

logger = Loggers.graph()


@dataclass
class RepairResult:
    """Outcome of a repair pass.

    Attributes:
        document: The repaired copy.
        changes: Corrective actions, in the order they were applied.
        flagged: Premature completions left in place for the caller.
    """

    document: TaskDocument
    changes: list[ChangeEntry] = field(default_factory=list)
    flagged: list[PrematureCompletion] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def summary(self) -> dict[str, int]:
        """Count changes by kind, plus the number of flagged findings."""
        counts = {kind.value: 0 for kind in ChangeKind}
        for entry in self.changes:
            counts[entry.kind.value] += 1
        counts = {kind: count for kind, count in counts.items() if count}
        counts["flagged"] = len(self.flagged)
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed": self.changed,
            "changes": [entry.to_dict() for entry in self.changes],
            "flagged": [finding.to_dict() for finding in self.flagged],
            "summary": self.summary(),
        }


def _nodes_with(findings: list[Finding], finding_type: type) -> list[NodeId]:
    nodes: list[NodeId] = []
    for finding in findings:
        if isinstance(finding, finding_type) and finding.node not in nodes:  # type: ignore[attr-defined]
            nodes.append(finding.node)  # type: ignore[attr-defined]
    return nodes


def _remove_dangling(document: TaskDocument, findings: list[Finding]) -> list[ChangeEntry]:
    changes = []
    for node_id in _nodes_with(findings, DanglingReference):
        node = document.get(node_id)
        removed = document.retain_dependencies(node, lambda raw, target: target is not None)
        for raw in removed:
            changes.append(ChangeEntry(
                kind=ChangeKind.REMOVED_DANGLING,
                node=node_id,
                target=str(raw),
                reason=describe_missing(raw),
            ))
    return changes


def _remove_self_references(document: TaskDocument, findings: list[Finding]) -> list[ChangeEntry]:
    changes = []
    for node_id in _nodes_with(findings, SelfReference):
        node = document.get(node_id)
        removed = document.retain_dependencies(node, lambda raw, target: target != node_id)
        for _ in removed:
            changes.append(ChangeEntry(
                kind=ChangeKind.REMOVED_SELF,
                node=node_id,
                target=str(node_id),
                reason="self-reference",
            ))
    return changes


def _collapse_duplicates(document: TaskDocument, findings: list[Finding]) -> list[ChangeEntry]:
    changes = []
    for node_id in _nodes_with(findings, DuplicateDependency):
        node = document.get(node_id)
        seen: set[NodeId] = set()

        def keep_first(raw: Any, target: NodeId | None) -> bool:
            if target is None:
                return True
            if target in seen:
                changes.append(ChangeEntry(
                    kind=ChangeKind.REMOVED_DUPLICATE,
                    node=node_id,
                    target=str(target),
                    reason="duplicate",
                ))
                return False
            seen.add(target)
            return True

        document.retain_dependencies(node, keep_first)
    return changes


def _break_cycles(document: TaskDocument) -> list[ChangeEntry]:
    changes = []
    # Each pass removes one edge, so this terminates
    cycles = find_cycles(document)
    while cycles:
        cycle = cycles[0]
        last, first = cycle.closing_edge
        document.remove_edge(document.get(last), document.get(first))
        changes.append(ChangeEntry(
            kind=ChangeKind.BROKE_CYCLE,
            node=last,
            target=str(first),
            reason=f"breaks cycle {cycle.path()}",
        ))
        cycles = find_cycles(document)
    return changes


def _revert_premature(
    document: TaskDocument, reset_status: str
) -> list[ChangeEntry]:
    changes = []
    # Resetting a node can expose its own done dependents, so run to a fixed point
    premature = find_premature_completions(document)
    while premature:
        handled: set[NodeId] = set()
        for finding in premature:
            if finding.node in handled:
                continue
            handled.add(finding.node)
            document.get(finding.node).status = reset_status  # type: ignore[union-attr]
            changes.append(ChangeEntry(
                kind=ChangeKind.REVERTED_STATUS,
                node=finding.node,
                target=reset_status,
                reason=f"dependency {finding.blocking_id} is {finding.blocking_status}",
            ))
        premature = find_premature_completions(document)
    return changes


def repair(
    document: TaskDocument,
    *,
    revert_premature: bool = False,
    reset_status: str = PENDING,
) -> RepairResult:
    """Repair structural dependency problems on a copy of ``document``.

    Args:
        document: Document to repair. Left untouched.
        revert_premature: Reset done nodes with unfinished dependencies to
            ``reset_status`` instead of only flagging them.
        reset_status: Status used when reverting premature completions.

    Returns:
        RepairResult with the repaired copy, the change log, and any
        premature completions that were flagged but not fixed.
    """
    repaired = document.copy()
    edge_findings = find_edge_problems(repaired)

    changes = _remove_dangling(repaired, edge_findings)
    changes.extend(_remove_self_references(repaired, edge_findings))
    changes.extend(_collapse_duplicates(repaired, edge_findings))
    changes.extend(_break_cycles(repaired))

    if revert_premature:
        changes.extend(_revert_premature(repaired, reset_status))
    flagged = find_premature_completions(repaired)

    for entry in changes:
        logger.debug("dependency_repair", kind=entry.kind.value, change=entry.message)
    logger.info(
        "dependencies_repaired",
        changes=len(changes),
        flagged=len(flagged),
    )
    return RepairResult(document=repaired, changes=changes, flagged=flagged)
