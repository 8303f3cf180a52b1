"""
Canvas Compiler - Deterministic canonical and pure forms of canvas documents.

This package provides the compile/export core used by the CLI and the MCP
tools, ensuring a single source of truth for ordering and export rules.
"""

from .models import (
    # Enums
    NodeType,
    EdgeEnd,
    # Core models
    Node,
    Edge,
    CanvasDocument,
    # Export models
    Relation,
    PureNode,
    PureEdge,
    PureDocument,
)

from .errors import CanvasError, CanvasIntegrityError, CanvasFormatError
from .settings import CompileSettings, ExportSettings
from .validation import validate_canvas
from .hierarchy import build_hierarchy
from .analysis import FlowGroup, build_flow_groups
from .sorting import sort_nodes, sort_edges
from .compiler import compile_canvas
from .exporter import strip_metadata, is_custom_color

__all__ = [
    # Enums
    "NodeType",
    "EdgeEnd",
    # Models
    "Node",
    "Edge",
    "CanvasDocument",
    "Relation",
    "PureNode",
    "PureEdge",
    "PureDocument",
    # Errors
    "CanvasError",
    "CanvasIntegrityError",
    "CanvasFormatError",
    # Settings
    "CompileSettings",
    "ExportSettings",
    # Pipeline
    "validate_canvas",
    "build_hierarchy",
    "FlowGroup",
    "build_flow_groups",
    "sort_nodes",
    "sort_edges",
    "compile_canvas",
    "strip_metadata",
    "is_custom_color",
]
