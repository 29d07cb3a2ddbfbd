"""Status consistency checks.

A node may only be ``done`` once every dependency it resolves to is done.
"""

from taskdeps.constants import DONE, PENDING
from taskdeps.errors import NodeNotFound
from taskdeps.graph.findings import PrematureCompletion
from taskdeps.graph.identifiers import NodeId
from taskdeps.graph.model import Node, TaskDocument


def blocking_dependencies(document: TaskDocument, node_id: NodeId) -> list[NodeId]:
    """Resolved dependencies of ``node_id`` that are not done.

    Raises:
        NodeNotFound: If the node does not exist.
    """
    if node_id not in document:
        raise NodeNotFound(f"{node_id.kind().capitalize()} {node_id} not found")
    return [
        dep_id
        for dep_id in document.dependencies_of(node_id)
        if document.get(dep_id).status != DONE  # type: ignore[union-attr]
    ]


def can_complete(document: TaskDocument, node_id: NodeId) -> bool:
    """True iff every resolved dependency of the node is done."""
    return not blocking_dependencies(document, node_id)


def find_premature_completions(document: TaskDocument) -> list[PrematureCompletion]:
    """Report every done node that still has an unfinished dependency."""
    findings = []
    for node in document.nodes():
        if node.status != DONE:
            continue
        for dep_id in blocking_dependencies(document, node.node_id):
            findings.append(
                PrematureCompletion(
                    node=node.node_id,
                    blocking_id=dep_id,
                    blocking_status=document.get(dep_id).status,  # type: ignore[union-attr]
                )
            )
    return findings


def ready_nodes(document: TaskDocument) -> list[Node]:
    """Get all nodes that are ready to start.

    A node is ready if:
    - Its status is pending
    - All its resolved dependencies are done

    Returns:
        Ready tasks and subtasks in document order.
    """
    return [
        node
        for node in document.nodes()
        if node.status == PENDING and can_complete(document, node.node_id)
    ]
