#!/usr/bin/env python3
"""
Canvas Compiler MCP Server

Provides MCP tools for AI agents to compile canvas documents into canonical
or pure JSON. Everything runs in-process; no editor needs to be open.
"""

import json
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .compiler import compile_canvas
from .exporter import strip_metadata
from .files import compile_canvas_file, parse_canvas
from .settings import CompileSettings, ExportSettings

# Create MCP server
mcp = FastMCP("canvas-compiler")


def _compile_settings(
    color_sort_nodes: bool,
    color_sort_edges: bool,
    flow_sort_nodes: bool,
    semantic_sort_orphans: bool,
) -> CompileSettings:
    return CompileSettings(
        color_sort_nodes=color_sort_nodes,
        color_sort_edges=color_sort_edges,
        flow_sort_nodes=flow_sort_nodes,
        semantic_sort_orphans=semantic_sort_orphans,
    )


# ============================================================================
# COMPILE TOOLS
# ============================================================================

@mcp.tool()
def canvas_compile(
    canvas_json: str,
    color_sort_nodes: bool = True,
    color_sort_edges: bool = True,
    flow_sort_nodes: bool = False,
    semantic_sort_orphans: bool = False,
) -> str:
    """
    Compile a canvas into canonical order.

    Args:
        canvas_json: The .canvas file contents (JSON with nodes and edges)
        color_sort_nodes: Group nodes at the same position by color
        color_sort_edges: Group edges with the same endpoints by color
        flow_sort_nodes: Order nodes along arrow flows
        semantic_sort_orphans: Order ungrouped nodes by content instead of position

    Returns the canonical canvas JSON. Content is unchanged; only order is.
    """
    settings = _compile_settings(color_sort_nodes, color_sort_edges, flow_sort_nodes, semantic_sort_orphans)
    compiled = compile_canvas(parse_canvas(canvas_json, "canvas_json"), settings)
    return json.dumps(compiled.to_json_dict(), indent=2)


@mcp.tool()
def canvas_export(
    canvas_json: str,
    color_sort_nodes: bool = True,
    color_sort_edges: bool = True,
    flow_sort_nodes: bool = False,
    semantic_sort_orphans: bool = False,
    strip_edges: bool = False,
) -> str:
    """
    Compile a canvas and strip its visual metadata.

    Positions, sizes and palette colors are removed. Labeled edges are
    embedded into their nodes as `to`/`from` relations.

    Args:
        canvas_json: The .canvas file contents
        color_sort_nodes: Group nodes at the same position by color
        color_sort_edges: Group edges with the same endpoints by color
        flow_sort_nodes: Order nodes along arrow flows (also drops unlabeled edges)
        semantic_sort_orphans: Order ungrouped nodes by content instead of position
        strip_edges: Drop unlabeled edges even without flow sorting

    Returns the pure JSON document.
    """
    settings = _compile_settings(color_sort_nodes, color_sort_edges, flow_sort_nodes, semantic_sort_orphans)
    compiled = compile_canvas(parse_canvas(canvas_json, "canvas_json"), settings)
    pure = strip_metadata(compiled, ExportSettings(
        flow_sort=flow_sort_nodes,
        strip_edges_when_flow_sorted=strip_edges,
    ))
    return json.dumps(pure.to_json_dict(), indent=2)


@mcp.tool()
def canvas_compile_file(
    in_path: str,
    out_path: Optional[str] = None,
    pure: bool = False,
    flow_sort_nodes: bool = False,
    strip_edges: bool = False,
) -> str:
    """
    Compile a canvas file on disk.

    Args:
        in_path: Full path to the .canvas file
        out_path: Where to write (defaults to <stem>.json or <stem>.pure.json beside the input)
        pure: Write the pure export instead of the canonical canvas
        flow_sort_nodes: Order nodes along arrow flows
        strip_edges: Drop unlabeled edges from the pure export

    Returns a summary with the output path and node/edge counts.
    """
    result = compile_canvas_file(
        in_path,
        out_path,
        settings=CompileSettings(flow_sort_nodes=flow_sort_nodes),
        export_settings=ExportSettings(flow_sort=flow_sort_nodes, strip_edges_when_flow_sorted=strip_edges),
        strip=pure,
    )
    return json.dumps(result, indent=2)


def main():
    mcp.run()


if __name__ == "__main__":
    main()
