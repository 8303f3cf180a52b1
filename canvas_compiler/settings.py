"""
Settings for the compiler and the exporter.

Keys are accepted in the camelCase form the host application persists
(``colorSortNodes``) as well as in snake_case. Unknown keys are ignored so a
single settings file can feed both entry points.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import CanvasFormatError


class CompileSettings(BaseModel):
    """Options recognized by ``compile_canvas``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    color_sort_nodes: bool = Field(True, alias="colorSortNodes")
    color_sort_edges: bool = Field(True, alias="colorSortEdges")
    flow_sort_nodes: bool = Field(False, alias="flowSortNodes")
    semantic_sort_orphans: bool = Field(False, alias="semanticSortOrphans")

    @classmethod
    def coerce(cls, settings: Union["CompileSettings", dict, None]) -> "CompileSettings":
        if isinstance(settings, cls):
            return settings
        return _validate_settings(cls, settings)


class ExportSettings(BaseModel):
    """Options recognized by ``strip_metadata``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    flow_sort: bool = Field(False, alias="flowSort")
    strip_edges_when_flow_sorted: bool = Field(False, alias="stripEdgesWhenFlowSorted")

    @property
    def strip_edges(self) -> bool:
        """Unlabeled edges are dropped when node order already encodes the flow."""
        return self.flow_sort or self.strip_edges_when_flow_sorted

    @classmethod
    def coerce(cls, settings: Union["ExportSettings", dict, None]) -> "ExportSettings":
        if isinstance(settings, cls):
            return settings
        return _validate_settings(cls, settings)


def _validate_settings(model: type, settings: Optional[dict]) -> Any:
    try:
        return model.model_validate(settings or {})
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise CanvasFormatError(f"invalid setting {location}: {first['msg']}") from e


def load_settings_file(path: Union[str, Path]) -> dict[str, Any]:
    """
    Load a JSON settings file.

    Args:
        path: File holding a JSON object of settings

    Returns:
        The raw settings dict, to be passed to ``CompileSettings.coerce``
        and ``ExportSettings.coerce``
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data: Optional[Any] = json.loads(text)
    except json.JSONDecodeError as e:
        raise CanvasFormatError(
            f"invalid settings JSON in {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e
    if not isinstance(data, dict):
        raise CanvasFormatError(f"settings file {path} must hold a JSON object")
    return data
