"""
Flow analysis - Connected components and topological layering.

A "flow" is a set of two or more nodes joined by directional edges. Inside a
flow every node gets a depth (its longest-path layer from the flow's
sources), which the sorter uses to order nodes along the direction of the
arrows.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Edge, Node

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class FlowGroup:
    """A connected component of directional edges with per-node depths."""
    node_ids: list[str] = field(default_factory=list)
    min_y: float = 0
    min_x: float = 0
    flow_order: dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Smallest member id; orders flows that share an anchor."""
        return min(self.node_ids, default="")

    @property
    def anchor(self) -> tuple[float, float]:
        """Top-most, then left-most (y, x) position of the flow."""
        return (self.min_y, self.min_x)

    def depth(self, node_id: str) -> int:
        return self.flow_order.get(node_id, 0)


def _add_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


def find_flow_components(
    nodes: list["Node"],
    edges: list["Edge"],
) -> tuple[list[list[str]], dict[str, list[str]]]:
    """
    Find connected components using BFS over directional edges only.

    Edges with an endpoint outside ``nodes`` are ignored, as are edges
    marked non-directional on both ends. Bidirectional edges join
    components but contribute no direction.

    Args:
        nodes: The candidate node set
        edges: All edges of the document

    Returns:
        (components, outgoing) where components holds every component of two
        or more nodes as an ordered id list, and outgoing maps each node id to
        the ids its directed edges point at.
    """
    node_ids = [n.key for n in nodes]
    adjacency: dict[str, list[str]] = {nid: [] for nid in node_ids}
    outgoing: dict[str, list[str]] = {nid: [] for nid in node_ids}

    for edge in edges:
        source, target = edge.source, edge.target
        if source not in adjacency or target not in adjacency:
            continue
        if not edge.is_directional():
            continue

        _add_unique(adjacency[source], target)
        _add_unique(adjacency[target], source)

        direction = edge.direction()
        if direction is not None:
            frm, to = direction
            _add_unique(outgoing[frm], to)

    visited: set[str] = set()
    components: list[list[str]] = []

    for start_node in node_ids:
        if start_node in visited:
            continue

        component: list[str] = []
        queue = [start_node]

        while queue:
            current = queue.pop(0)
            if current in visited:
                continue

            visited.add(current)
            component.append(current)

            for neighbor in adjacency[current]:
                if neighbor not in visited:
                    queue.append(neighbor)

        # Singletons are not flows
        if len(component) > 1:
            components.append(component)

    return components, outgoing


def layer_component(component: list[str], outgoing: dict[str, list[str]]) -> dict[str, int]:
    """
    Assign longest-path depths inside one component (Kahn's algorithm).

    Nodes with no incoming edge from inside the component start at depth 0.
    A node's depth is the maximum over its predecessors' depth + 1. Nodes
    left over because they sit on a cycle all get one more than the deepest
    assigned depth, and the sorter orders them among themselves by position
    and content.
    """
    members = set(component)
    indegree: dict[str, int] = {nid: 0 for nid in component}
    for nid in component:
        for target in outgoing.get(nid, []):
            if target in members:
                indegree[target] += 1

    flow_order: dict[str, int] = {}
    queue: list[str] = []
    for nid in component:
        if indegree[nid] == 0:
            flow_order[nid] = 0
            queue.append(nid)

    while queue:
        current = queue.pop(0)
        current_depth = flow_order[current]
        for target in outgoing.get(current, []):
            if target not in members:
                continue
            indegree[target] -= 1
            flow_order[target] = max(flow_order.get(target, 0), current_depth + 1)
            if indegree[target] == 0:
                queue.append(target)

    # Nodes never reached sit on (or behind) a cycle
    unresolved = [nid for nid in component if nid not in flow_order]
    if unresolved:
        residual_depth = max(flow_order.values(), default=-1) + 1
        for nid in unresolved:
            flow_order[nid] = residual_depth
        logger.debug("Flow of %d nodes has %d cyclic nodes at depth %d",
                     len(component), len(unresolved), residual_depth)

    return flow_order


def build_flow_groups(nodes: list["Node"], edges: list["Edge"]) -> list[FlowGroup]:
    """
    Partition ``nodes`` into flow groups.

    Args:
        nodes: The node subset being sorted
        edges: All edges of the document (edges leaving the subset are ignored)

    Returns:
        One FlowGroup per component of two or more nodes
    """
    positions = {n.key: n.position() for n in nodes}
    components, outgoing = find_flow_components(nodes, edges)

    groups: list[FlowGroup] = []
    for component in components:
        min_y, min_x = min(positions[nid] for nid in component)
        groups.append(FlowGroup(
            node_ids=component,
            min_y=min_y,
            min_x=min_x,
            flow_order=layer_component(component, outgoing),
        ))

    logger.debug("Found %d flow groups among %d nodes", len(groups), len(nodes))
    return groups


def index_flow_groups(groups: list[FlowGroup]) -> dict[str, FlowGroup]:
    """Map each node id to the flow group it belongs to."""
    index: dict[str, FlowGroup] = {}
    for group in groups:
        for nid in group.node_ids:
            index[nid] = group
    return index

