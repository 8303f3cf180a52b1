"""
Canvas validation - Check documents for structural integrity.

This is the first gate of every compile. Unlike an advisory lint pass it is
fail-fast: the first violation raises and nothing is compiled.
"""

from typing import TYPE_CHECKING

from .errors import CanvasIntegrityError

if TYPE_CHECKING:
    from .models import CanvasDocument


def validate_canvas(document: "CanvasDocument") -> set[str]:
    """
    Validate a document, raising on the first structural problem.

    Checks for:
    - Nodes with an empty or whitespace-only id
    - Duplicate node ids (after trimming)
    - Edges with an empty id, or duplicate edge ids
    - Edges missing fromNode or toNode
    - Edges referencing a node that does not exist

    Args:
        document: The document to validate

    Returns:
        The set of normalized node ids

    Raises:
        CanvasIntegrityError: naming the offending id
    """
    node_ids: set[str] = set()
    for node in document.nodes:
        node_id = node.key
        if not node_id:
            raise CanvasIntegrityError("node missing id")
        if node_id in node_ids:
            raise CanvasIntegrityError(f"duplicate node id: {node_id}", node_id=node_id)
        node_ids.add(node_id)

    edge_ids: set[str] = set()
    for edge in document.edges:
        edge_id = edge.key
        if not edge_id:
            raise CanvasIntegrityError("edge missing id")
        if edge_id in edge_ids:
            raise CanvasIntegrityError(f"duplicate edge id: {edge_id}", edge_id=edge_id)
        edge_ids.add(edge_id)

        source, target = edge.source, edge.target
        if not source or not target:
            raise CanvasIntegrityError(f"edge {edge_id} missing fromNode/toNode", edge_id=edge_id)
        if source not in node_ids:
            raise CanvasIntegrityError(
                f"edge {edge_id} references missing fromNode: {source}",
                node_id=source,
                edge_id=edge_id,
            )
        if target not in node_ids:
            raise CanvasIntegrityError(
                f"edge {edge_id} references missing toNode: {target}",
                node_id=target,
                edge_id=edge_id,
            )

    return node_ids
