"""
Deterministic ordering of nodes and edges.

Node order depends on context:
- Top level: position first (y, then x), then type, color and content
- Inside a group: type, color and content only; the group already scopes
  the nodes spatially
- With flow sorting, nodes in the same flow follow arrow depth, and whole
  flows are placed by their top-left anchor

Orders are built from sort keys rather than pairwise comparisons, and every
key ends on the node (or edge) id. The order is therefore total and does not
depend on the input order.
"""

import math
from typing import TYPE_CHECKING, Any

from .analysis import FlowGroup, build_flow_groups, index_flow_groups

if TYPE_CHECKING:
    from .models import Edge, Node
    from .settings import CompileSettings

# Ranks at an anchor: a flow goes before a loose node sitting exactly on it
_FLOW_RANK = 0
_LOOSE_RANK = 1


def _content_key(node: "Node", color_sort: bool) -> tuple:
    """Type priority, then color, then semantic key, then id."""
    color = node.color_key() if color_sort else ""
    return (node.type_priority(), color, node.semantic_key(), node.key)


def _flow_member_key(node: "Node", flow: FlowGroup, color_sort: bool) -> tuple:
    color = node.color_key() if color_sort else ""
    return (
        flow.anchor,
        _FLOW_RANK,
        flow.key,
        flow.depth(node.key),
        node.position(),
        color,
        node.semantic_key(),
        node.key,
    )


def node_sort_key(
    node: "Node",
    settings: "CompileSettings",
    flows: dict[str, FlowGroup],
    within_group: bool = False,
) -> tuple[Any, ...]:
    """
    Build the sort key of a node.

    With flow sorting, each flow is one block keyed by its anchor and its
    smallest member id, and its members follow their depth inside the block.
    Loose nodes are then keyed by their own position so that they interleave
    with the flow blocks, even inside a group.

    Args:
        node: The node to key
        settings: Compile settings (color and flow sorting switches)
        flows: Node id to flow group, empty unless flow sorting is on
        within_group: Use in-group ordering (no spatial keys)
    """
    color_sort = settings.color_sort_nodes
    flow = flows.get(node.key)
    if flow is not None:
        return _flow_member_key(node, flow, color_sort)

    if within_group and not flows:
        return _content_key(node, color_sort)

    return (node.position(), _LOOSE_RANK) + _content_key(node, color_sort)


def sort_nodes(
    nodes: list["Node"],
    edges: list["Edge"],
    settings: "CompileSettings",
    within_group: bool = False,
) -> list["Node"]:
    """
    Sort a node subset.

    Flow groups are computed over the subset itself, using only the edges
    whose both endpoints are in it.

    Returns:
        A new sorted list; the input list is left untouched
    """
    flows: dict[str, FlowGroup] = {}
    if settings.flow_sort_nodes:
        flows = index_flow_groups(build_flow_groups(nodes, edges))

    return sorted(nodes, key=lambda n: node_sort_key(n, settings, flows, within_group))


def edge_sort_key(
    edge: "Edge",
    settings: "CompileSettings",
    positions: dict[str, tuple[float, float]],
    flows: dict[str, FlowGroup],
) -> tuple[Any, ...]:
    """
    Build the sort key of an edge.

    Order: source flow depth, target flow depth (flow sorting only; ends
    outside any flow sort after every flow depth), source position, target
    position, color, id.
    """
    origin = (0, 0)
    key: tuple[Any, ...] = ()
    if flows:
        key += (_end_depth(edge.source, flows), _end_depth(edge.target, flows))

    color = edge.color_key() if settings.color_sort_edges else ""
    return key + (
        positions.get(edge.source, origin),
        positions.get(edge.target, origin),
        color,
        edge.key,
    )


def _end_depth(node_id: str, flows: dict[str, FlowGroup]) -> float:
    flow = flows.get(node_id)
    return flow.depth(node_id) if flow is not None else math.inf


def sort_edges(
    edges: list["Edge"],
    nodes: list["Node"],
    settings: "CompileSettings",
) -> list["Edge"]:
    """
    Sort edges by the topology of the nodes they connect.

    Returns:
        A new sorted list; the input list is left untouched
    """
    positions = {n.key: n.position() for n in nodes}
    flows: dict[str, FlowGroup] = {}
    if settings.flow_sort_nodes:
        flows = index_flow_groups(build_flow_groups(nodes, edges))

    return sorted(edges, key=lambda e: edge_sort_key(e, settings, positions, flows))
