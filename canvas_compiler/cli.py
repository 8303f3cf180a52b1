#!/usr/bin/env python3
"""Canvas compiler CLI - compile canvases to canonical or pure JSON."""

import argparse
import json
import logging
import sys

from .errors import CanvasError
from .files import compile_canvas_file
from .settings import CompileSettings, ExportSettings, load_settings_file

logger = logging.getLogger(__name__)


def _json_out(data, code=0):
    print(json.dumps(data, indent=2))
    sys.exit(code)


def _build_settings(args):
    """Merge the settings file (if any) with command-line overrides."""
    raw = load_settings_file(args.settings) if args.settings else {}
    compile_settings = CompileSettings.coerce(raw)
    export_settings = ExportSettings.coerce(raw)

    overrides = {}
    if args.no_color_sort_nodes:
        overrides["color_sort_nodes"] = False
    if args.no_color_sort_edges:
        overrides["color_sort_edges"] = False
    if args.flow_sort:
        overrides["flow_sort_nodes"] = True
    if args.semantic_sort_orphans:
        overrides["semantic_sort_orphans"] = True
    compile_settings = compile_settings.model_copy(update=overrides)

    export_overrides = {}
    if args.flow_sort:
        export_overrides["flow_sort"] = True
    if getattr(args, "strip_edges", False):
        export_overrides["strip_edges_when_flow_sorted"] = True
    export_settings = export_settings.model_copy(update=export_overrides)

    return compile_settings, export_settings


def _run(args, strip):
    try:
        compile_settings, export_settings = _build_settings(args)
        result = compile_canvas_file(
            args.in_path,
            args.out,
            settings=compile_settings,
            export_settings=export_settings,
            strip=strip,
        )
    except (CanvasError, OSError) as e:
        logger.debug("Compilation failed", exc_info=True)
        _json_out(e.to_dict() if isinstance(e, CanvasError) else {"status": "error", "error": str(e)}, 1)
    _json_out({"status": "ok", **result})


# ── Commands ─────────────────────────────────────────────────────────────────

def cmd_compile(args):
    _run(args, strip=False)


def cmd_export(args):
    _run(args, strip=True)


# ── Main ─────────────────────────────────────────────────────────────────────

def _add_common(p):
    p.add_argument("--in", dest="in_path", required=True, help="Path to the .canvas file")
    p.add_argument("--out", default=None, help="Output path (default: beside the input)")
    p.add_argument("--settings", default=None, help="JSON settings file (camelCase keys)")
    p.add_argument("--no-color-sort-nodes", action="store_true")
    p.add_argument("--no-color-sort-edges", action="store_true")
    p.add_argument("--flow-sort", action="store_true", help="Order nodes along arrow flows")
    p.add_argument("--semantic-sort-orphans", action="store_true",
                   help="Order ungrouped nodes by content instead of position")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="canvas-compiler",
        description="Compile canvas documents into deterministic, LLM-friendly JSON",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compile", help="Write the canonical canvas")
    _add_common(p)

    p = sub.add_parser("export", help="Write the metadata-free pure document")
    _add_common(p)
    p.add_argument("--strip-edges", action="store_true",
                   help="Drop unlabeled edges even without flow sorting")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmd_map = {
        "compile": cmd_compile,
        "export": cmd_export,
    }
    cmd_map[args.command](args)


if __name__ == "__main__":
    main()
