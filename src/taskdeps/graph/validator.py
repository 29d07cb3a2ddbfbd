"""Read-only dependency validation.

``validate`` walks a document and reports every problem it finds without
changing anything. Order is deterministic: per-edge findings follow document
order (tasks, then each task's subtasks) and listed dependency order, then
cycles in traversal order, then premature completions.

Example:
    >>> findings = validate(document)
    >>> [f.kind.value for f in findings]
    ['dangling_reference', 'cycle']
"""

from taskdeps.graph.findings import (
    Cycle,
    DanglingReference,
    DuplicateDependency,
    Finding,
    SelfReference,
)
from taskdeps.graph.identifiers import NodeId
from taskdeps.graph.model import TaskDocument
from taskdeps.graph.status import find_premature_completions

_WHITE, _GRAY, _BLACK = 0, 1, 2


def find_edge_problems(document: TaskDocument) -> list[Finding]:
    """Report dangling, self and duplicate dependency entries."""
    findings: list[Finding] = []
    for node in document.nodes():
        node_id = node.node_id
        seen: set[NodeId] = set()
        self_reported = False
        for raw, target in document.edges(node_id):
            if target is None:
                findings.append(DanglingReference(node=node_id, bad_id=raw))
            elif target == node_id:
                if not self_reported:
                    findings.append(SelfReference(node=node_id))
                    self_reported = True
            elif target in seen:
                findings.append(DuplicateDependency(node=node_id, id=target))
            else:
                seen.add(target)
    return findings


def find_cycles(document: TaskDocument) -> list[Cycle]:
    """Find dependency cycles with an iterative depth-first search.

    Self edges and unresolved entries are left out of the graph. Every back
    edge found during the walk yields one cycle: the slice of the current
    path from the revisited node to the top. Each node is expanded once.

    Returns:
        Cycles in traversal order.
    """
    color: dict[NodeId, int] = {}
    cycles: list[Cycle] = []

    for root in document.node_ids():
        if color.get(root, _WHITE) != _WHITE:
            continue

        path = [root]
        position = {root: 0}
        color[root] = _GRAY
        pending = [iter(document.dependencies_of(root))]

        while pending:
            descended = False
            for target in pending[-1]:
                state = color.get(target, _WHITE)
                if state == _GRAY:
                    cycles.append(Cycle(nodes=tuple(path[position[target]:])))
                elif state == _WHITE:
                    color[target] = _GRAY
                    position[target] = len(path)
                    path.append(target)
                    pending.append(iter(document.dependencies_of(target)))
                    descended = True
                    break
            if not descended:
                pending.pop()
                finished = path.pop()
                del position[finished]
                color[finished] = _BLACK

    return cycles


def validate(document: TaskDocument) -> list[Finding]:
    """Run every check and return all findings.

    Never raises for data problems; an empty list means the document is
    consistent.
    """
    findings = find_edge_problems(document)
    findings.extend(find_cycles(document))
    findings.extend(find_premature_completions(document))
    return findings


def is_consistent(document: TaskDocument, include_status: bool = True) -> bool:
    """Check whether a document has no findings.

    Args:
        document: Document to check.
        include_status: Also require that no premature completion exists.
    """
    findings = validate(document)
    if not include_status:
        findings = [f for f in findings if f.is_structural]
    return not findings
