"""
Pure export - Strip visual metadata from a compiled canvas.

The pure document keeps what a reader of the diagram needs and drops what a
renderer needs:
- Nodes keep id, type, their content field and any custom color
- Labeled edges move into the nodes they touch, as ``to`` (outgoing) and
  ``from`` (incoming) relations
- Unlabeled edges stay as bare top-level records, unless flow sorting
  already encodes them in node order
"""

import logging
import re
from typing import Any, Optional, Union

from .models import CanvasDocument, Edge, PureDocument, PureEdge, PureNode, Relation
from .settings import ExportSettings

logger = logging.getLogger(__name__)

_PALETTE_INDEX = re.compile(r"^\d+$")

_CONTENT_FIELDS = ("text", "file", "url", "label")


def is_custom_color(value: Any) -> bool:
    """
    Check whether a color survives export.

    Digit-only strings are legacy palette indexes ("1".."6") and carry no
    meaning outside the editor; anything else non-empty is kept verbatim.
    """
    if not isinstance(value, str):
        return False
    value = value.strip()
    return bool(value) and not _PALETTE_INDEX.match(value)


def _relation(other: str, edge: Edge) -> Relation:
    if is_custom_color(edge.color):
        return Relation(node=other, label=edge.label, color=edge.color)
    return Relation(node=other, label=edge.label)


def build_relations(labeled_edges: list[Edge]) -> tuple[dict[str, list[Relation]], dict[str, list[Relation]]]:
    """
    Index labeled edges by endpoint.

    Returns:
        (outgoing, incoming): outgoing maps a node id to relations naming the
        edge targets, incoming maps a node id to relations naming the sources
    """
    outgoing: dict[str, list[Relation]] = {}
    incoming: dict[str, list[Relation]] = {}
    for edge in labeled_edges:
        outgoing.setdefault(edge.source, []).append(_relation(edge.target, edge))
        incoming.setdefault(edge.target, []).append(_relation(edge.source, edge))
    return outgoing, incoming


def strip_metadata(
    document: Union[CanvasDocument, dict],
    settings: Optional[Union[ExportSettings, dict]] = None,
) -> PureDocument:
    """
    Export a canvas as a pure document.

    Node and edge order is preserved, so the input should normally be the
    output of ``compile_canvas``.

    Args:
        document: A CanvasDocument or raw parsed canvas JSON
        settings: ExportSettings, a settings dict, or None for defaults

    Returns:
        The pure document
    """
    canvas = CanvasDocument.coerce(document)
    opts = ExportSettings.coerce(settings)

    labeled = [e for e in canvas.edges if e.has_label]
    unlabeled = [e for e in canvas.edges if not e.has_label]
    outgoing, incoming = build_relations(labeled)

    nodes: list[PureNode] = []
    for node in canvas.nodes:
        fields: dict[str, Any] = {"id": node.id, "type": node.type}
        for name in _CONTENT_FIELDS:
            if name in node.model_fields_set:
                fields[name] = getattr(node, name)
        if is_custom_color(node.color):
            fields["color"] = node.color
        if node.key in incoming:
            fields["from"] = incoming[node.key]
        if node.key in outgoing:
            fields["to"] = outgoing[node.key]
        nodes.append(PureNode(**fields))

    edges: list[PureEdge] = []
    if not opts.strip_edges:
        for edge in unlabeled:
            if is_custom_color(edge.color):
                edges.append(PureEdge(id=edge.id, fromNode=edge.from_node, toNode=edge.to_node, color=edge.color))
            else:
                edges.append(PureEdge(id=edge.id, fromNode=edge.from_node, toNode=edge.to_node))

    logger.debug(
        "Exported %d nodes, embedded %d labeled edges, kept %d edges",
        len(nodes), len(labeled), len(edges),
    )
    return PureDocument(nodes=nodes, edges=edges)
