"""
File shim - read canvases from disk and write compiled output.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from .compiler import compile_canvas
from .errors import CanvasFormatError
from .exporter import strip_metadata
from .settings import CompileSettings, ExportSettings

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_STRIPPED_SUFFIXES = (".canvas", ".json")


def parse_canvas(text: str, source: str = "canvas") -> Any:
    """Parse canvas JSON text, naming ``source`` and the error position on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CanvasFormatError(
            f"invalid JSON in {source} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def read_canvas(path: PathLike) -> Any:
    """Read and parse a canvas (or any JSON) file."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_canvas(text, str(path))


def dumps(data: Any) -> str:
    """Serialize with 2-space indentation and a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json(path: PathLike, data: Any) -> Path:
    """Write JSON output, creating parent directories as needed."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(dumps(data), encoding="utf-8")
    logger.debug("Wrote %s", out)
    return out


def default_output_path(in_path: PathLike, pure: bool = False) -> Path:
    """
    Output path beside the input.

    ``board.canvas`` compiles to ``board.json`` and exports to
    ``board.pure.json``.
    """
    source = Path(in_path)
    stem = source.name
    for suffix in _STRIPPED_SUFFIXES:
        if stem.lower().endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    return source.with_name(f"{stem}.pure.json" if pure else f"{stem}.json")


def compile_canvas_file(
    in_path: PathLike,
    out_path: Optional[PathLike] = None,
    settings: Optional[Union[CompileSettings, dict]] = None,
    export_settings: Optional[Union[ExportSettings, dict]] = None,
    strip: bool = False,
) -> dict:
    """
    Compile (and optionally export) a canvas file.

    Args:
        in_path: The .canvas file to read
        out_path: Where to write; defaults to ``default_output_path``
        settings: Compile settings
        export_settings: Export settings, used when ``strip`` is set
        strip: Write the pure export instead of the canonical canvas

    Returns:
        Summary with paths and node/edge counts in and out
    """
    source = Path(in_path).resolve()
    data = read_canvas(source)

    compiled = compile_canvas(data, settings)
    output = strip_metadata(compiled, export_settings) if strip else compiled

    target = Path(out_path).resolve() if out_path else default_output_path(source, pure=strip)
    write_json(target, output.to_json_dict())

    return {
        "inPath": str(source),
        "outPath": str(target),
        "nodesIn": len(compiled.nodes),
        "edgesIn": len(compiled.edges),
        "nodesOut": len(output.nodes),
        "edgesOut": len(output.edges),
    }
