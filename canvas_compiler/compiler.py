"""
Canvas compiler - Canonical, stably-ordered canvas documents.

Compilation never changes content; it only reorders. The output holds a
shallow copy of every input node and edge:

1. Validate ids and edge references (fail fast)
2. Derive the group containment hierarchy from geometry
3. Flatten the hierarchy in preorder: loose nodes first, then root groups,
   each group immediately followed by its subtree
4. Sort edges by the positions (and optionally flow depth) of their ends
"""

import logging
from typing import Optional, Union

from .hierarchy import build_hierarchy, child_ids
from .models import CanvasDocument, Edge, Node
from .settings import CompileSettings
from .sorting import sort_edges, sort_nodes
from .validation import validate_canvas

logger = logging.getLogger(__name__)


class _Flattener:
    """Preorder walk of the containment hierarchy."""

    def __init__(
        self,
        children: dict[str, list[Node]],
        edges: list[Edge],
        settings: CompileSettings,
    ):
        self.children = children
        self.edges = edges
        self.settings = settings
        # Child groups are already bucketed by color through their parent,
        # so they are ordered without the color key
        self.group_settings = settings.model_copy(update={"color_sort_nodes": False})
        self.result: list[Node] = []
        self.processed: set[str] = set()

    def add(self, node: Node) -> None:
        if node.key in self.processed:
            return
        self.processed.add(node.key)
        self.result.append(node)

        members = self.children.get(node.key) if node.is_group else None
        if not members:
            return

        ordered = sort_nodes(members, self.edges, self.settings, within_group=True)
        child_groups = [c for c in ordered if c.is_group]
        child_nodes = [c for c in ordered if not c.is_group]
        child_groups = sort_nodes(child_groups, self.edges, self.group_settings)

        for child in child_nodes:
            self.add(child)
        for child in child_groups:
            self.add(child)


def flatten_hierarchy(
    nodes: list[Node],
    children: dict[str, list[Node]],
    edges: list[Edge],
    settings: CompileSettings,
) -> list[Node]:
    """
    Flatten nodes into canonical order.

    Args:
        nodes: All nodes of the document
        children: Containment map from ``build_hierarchy``
        edges: All edges (used for flow sorting)
        settings: Compile settings

    Returns:
        Every node exactly once, in canonical order
    """
    contained = child_ids(children)
    root_nodes = [n for n in nodes if not n.is_group and n.key not in contained]
    root_groups = [n for n in nodes if n.is_group and n.key not in contained]

    root_nodes = sort_nodes(root_nodes, edges, settings, within_group=settings.semantic_sort_orphans)
    root_groups = sort_nodes(root_groups, edges, settings)

    flattener = _Flattener(children, edges, settings)
    for node in root_nodes + root_groups:
        flattener.add(node)
    return flattener.result


def compile_canvas(
    document: Union[CanvasDocument, dict],
    settings: Optional[Union[CompileSettings, dict]] = None,
) -> CanvasDocument:
    """
    Compile a canvas into its canonical form.

    Args:
        document: A CanvasDocument or raw parsed canvas JSON
        settings: CompileSettings, a settings dict, or None for defaults

    Returns:
        A new CanvasDocument with the same nodes and edges in canonical order

    Raises:
        CanvasFormatError: if a record is malformed
        CanvasIntegrityError: on missing/duplicate ids or dangling edges
    """
    canvas = CanvasDocument.coerce(document)
    opts = CompileSettings.coerce(settings)

    validate_canvas(canvas)

    nodes = [n.model_copy() for n in canvas.nodes]
    edges = [e.model_copy() for e in canvas.edges]

    children = build_hierarchy(nodes)
    out_nodes = flatten_hierarchy(nodes, children, edges, opts)
    out_edges = sort_edges(edges, nodes, opts)

    logger.debug("Compiled %d nodes and %d edges", len(out_nodes), len(out_edges))
    return CanvasDocument(nodes=out_nodes, edges=out_edges)
