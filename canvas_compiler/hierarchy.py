"""
Containment hierarchy - which group does each node sit in?

Group membership is never stored in a canvas; it is derived from geometry on
every pass. A node belongs to the smallest group whose rectangle fully
contains its own.
"""

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import Node

logger = logging.getLogger(__name__)


def _innermost_parent(node: "Node", groups: list["Node"]) -> Optional["Node"]:
    parent: Optional["Node"] = None
    for group in groups:
        if group is node or group.key == node.key:
            continue
        if not group.contains(node):
            continue
        if node.is_group and group.area() == node.area() and group.key > node.key:
            # Identical rectangles: the lexically smaller id is the outer group,
            # otherwise the two groups would claim each other.
            continue
        if parent is None or (group.area(), group.key) < (parent.area(), parent.key):
            parent = group
    return parent


def build_hierarchy(nodes: list["Node"]) -> dict[str, list["Node"]]:
    """
    Assign every node to its innermost enclosing group.

    Non-group nodes and nested groups use the same rule: among the groups
    containing the node, the one with the smallest area wins, equal areas
    going to the lexically smaller id.

    Args:
        nodes: All nodes of the document

    Returns:
        Map from group id to its immediate children (non-groups first, then
        groups, each in input order). Nodes with no enclosing group have no
        entry anywhere and are roots.
    """
    groups = [n for n in nodes if n.is_group]
    non_groups = [n for n in nodes if not n.is_group]

    children: dict[str, list["Node"]] = {}
    for node in non_groups + groups:
        parent = _innermost_parent(node, groups)
        if parent is not None:
            children.setdefault(parent.key, []).append(node)

    logger.debug("Containment: %d of %d groups have children", len(children), len(groups))
    return children


def child_ids(children: dict[str, list["Node"]]) -> set[str]:
    """Ids of every node that has a parent group."""
    return {child.key for members in children.values() for child in members}
