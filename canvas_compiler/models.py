"""
Core data models for canvas documents.

These models define the schema the compiler and exporter work on:
- Nodes: positioned boxes of type text, file, link or group
- Edges: connections between nodes, directional or not
- CanvasDocument: the ordered node and edge lists
- Pure* models: the metadata-free shapes produced by the exporter

Field Naming Convention:
- JSON keeps the canvas field names (`fromNode`, `toNode`, `fromEnd`, `toEnd`)
- Python attributes are snake_case and mapped through aliases
- Unknown fields are kept as extras so they survive compilation unchanged
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, ValidationError, field_validator

from .errors import CanvasFormatError


# Booleans and numeric strings are rejected, not converted
Number = Union[StrictInt, StrictFloat]


class NodeType(str, Enum):
    """Node kinds understood by the sorter and exporter."""
    TEXT = "text"
    FILE = "file"
    LINK = "link"
    GROUP = "group"


class EdgeEnd(str, Enum):
    """Edge endpoint markers."""
    NONE = "none"
    ARROW = "arrow"


def normalized_id(value: Any) -> str:
    """Return the comparison form of an identifier (trimmed string)."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _coerce_id(value: Any) -> Any:
    # JSON numbers and booleans are valid ids; everything else is left for
    # pydantic to reject.
    if value is None:
        return ""
    if isinstance(value, (bool, int, float)):
        return normalized_id(value)
    return value


def _coord(value: Optional[Number]) -> Number:
    return value if value is not None else 0


class Node(BaseModel):
    """A node in the canvas."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = ""
    type: str
    text: Optional[str] = None
    file: Optional[str] = None
    url: Optional[str] = None
    label: Optional[str] = None
    x: Optional[Number] = None
    y: Optional[Number] = None
    width: Optional[Number] = None
    height: Optional[Number] = None
    color: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:
        return _coerce_id(value)

    @property
    def key(self) -> str:
        """Normalized id used for lookups and comparisons."""
        return normalized_id(self.id)

    @property
    def is_group(self) -> bool:
        return self.type == NodeType.GROUP.value

    def position(self) -> tuple[Number, Number]:
        """Get the (y, x) position used for spatial ordering."""
        return (_coord(self.y), _coord(self.x))

    def rect(self) -> tuple[Number, Number, Number, Number]:
        """Get the rectangle (x, y, width, height); missing values are 0."""
        return (_coord(self.x), _coord(self.y), _coord(self.width), _coord(self.height))

    def area(self) -> Number:
        _, _, width, height = self.rect()
        return width * height

    def contains(self, other: "Node") -> bool:
        """Check whether ``other`` lies entirely within this node's rectangle."""
        gx, gy, gw, gh = self.rect()
        nx, ny, nw, nh = other.rect()
        return nx >= gx and ny >= gy and nx + nw <= gx + gw and ny + nh <= gy + gh

    def semantic_key(self) -> str:
        """
        Human-readable sort key.

        Text nodes sort by their text, file nodes by the file name, link nodes
        by url and groups by label. Anything else falls back to the id.
        """
        if self.type == NodeType.TEXT.value and isinstance(self.text, str):
            return self.text.lower().strip()
        if self.type == NodeType.FILE.value and isinstance(self.file, str):
            filename = self.file.split("/")[-1] or self.file
            return filename.lower().strip()
        if self.type == NodeType.LINK.value and isinstance(self.url, str):
            return self.url.lower().strip()
        if self.type == NodeType.GROUP.value and isinstance(self.label, str):
            return self.label.lower().strip()
        return self.key.lower()

    def type_priority(self) -> int:
        # Links go after everything else at the same position
        return 1 if self.type == NodeType.LINK.value else 0

    def color_key(self) -> str:
        return self.color.lower() if isinstance(self.color, str) else ""

    def to_json_dict(self) -> dict:
        """Convert to a JSON-serializable dict holding only the fields that were given."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class Edge(BaseModel):
    """
    An edge connecting two nodes.

    Direction is not stored; it is derived from the endpoint markers. An edge
    without ``toEnd`` renders with an arrow at its target, so it counts as
    directional unless its ``fromEnd`` says otherwise.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = ""
    from_node: str = Field("", alias="fromNode")
    to_node: str = Field("", alias="toNode")
    from_end: Optional[str] = Field(None, alias="fromEnd")
    to_end: Optional[str] = Field(None, alias="toEnd")
    color: Optional[str] = None
    label: Any = None

    @field_validator("id", "from_node", "to_node", mode="before")
    @classmethod
    def normalize_ids(cls, value: Any) -> Any:
        return _coerce_id(value)

    @property
    def key(self) -> str:
        return normalized_id(self.id)

    @property
    def source(self) -> str:
        return normalized_id(self.from_node)

    @property
    def target(self) -> str:
        return normalized_id(self.to_node)

    @property
    def has_label(self) -> bool:
        """True when the edge carries a ``label`` field, whatever its value."""
        return "label" in self.model_fields_set

    def is_directional(self) -> bool:
        arrow = EdgeEnd.ARROW.value
        if self.from_end == arrow or self.to_end == arrow:
            return True
        return self.to_end is None and self.from_end != arrow

    def direction(self) -> Optional[tuple[str, str]]:
        """
        Get the (source, target) pair for layering.

        Returns None for edges with arrows on both ends; those link nodes
        into the same flow without ordering them.
        """
        arrow = EdgeEnd.ARROW.value
        to_end = self.to_end if self.to_end is not None else arrow
        if self.from_end == arrow and to_end == arrow:
            return None
        if self.from_end == arrow:
            return (self.target, self.source)
        return (self.source, self.target)

    def color_key(self) -> str:
        return self.color.lower() if isinstance(self.color, str) else ""

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class CanvasDocument(BaseModel):
    """
    The complete canvas structure.
    This is what gets loaded from and written back to .canvas files.
    """
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return {
            "nodes": [n.to_json_dict() for n in self.nodes],
            "edges": [e.to_json_dict() for e in self.edges],
        }

    @classmethod
    def from_json_dict(cls, data: Any) -> "CanvasDocument":
        """Create a CanvasDocument from parsed JSON, failing fast on malformed records."""
        if not isinstance(data, dict):
            raise CanvasFormatError(
                f"canvas must be a JSON object, got {type(data).__name__}"
            )
        try:
            return cls.model_validate({
                "nodes": data.get("nodes") or [],
                "edges": data.get("edges") or [],
            })
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise CanvasFormatError(f"invalid canvas record at {location}: {first['msg']}") from e

    @classmethod
    def coerce(cls, document: Union["CanvasDocument", dict]) -> "CanvasDocument":
        """Accept either a parsed document or raw JSON data."""
        if isinstance(document, cls):
            return document
        return cls.from_json_dict(document)


# --- Export shapes ---

class Relation(BaseModel):
    """A labeled edge embedded into one of its endpoint nodes."""
    node: str
    label: Any = None
    color: Optional[str] = None

    def to_json_dict(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PureNode(BaseModel):
    """A node with spatial and palette metadata removed."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    text: Optional[str] = None
    file: Optional[str] = None
    url: Optional[str] = None
    label: Optional[str] = None
    color: Optional[str] = None
    from_: list[Relation] = Field(default_factory=list, alias="from")
    to: list[Relation] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class PureEdge(BaseModel):
    """An unlabeled edge kept in the pure export."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_node: str = Field(alias="fromNode")
    to_node: str = Field(alias="toNode")
    color: Optional[str] = None

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class PureDocument(BaseModel):
    """The exporter's output document."""
    nodes: list[PureNode] = Field(default_factory=list)
    edges: list[PureEdge] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return {
            "nodes": [n.to_json_dict() for n in self.nodes],
            "edges": [e.to_json_dict() for e in self.edges],
        }
