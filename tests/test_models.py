"""Tests for canvas models."""

import pytest

from canvas_compiler.errors import CanvasFormatError
from canvas_compiler.models import CanvasDocument, Edge, Node, normalized_id

from factories import canvas, edge, group, text


def test_normalized_id_trims_and_stringifies():
    assert normalized_id("  abc  ") == "abc"
    assert normalized_id(123) == "123"
    assert normalized_id(True) == "true"
    assert normalized_id(None) == ""


def test_numeric_ids_are_coerced_to_strings():
    node = Node.model_validate({"id": 42, "type": "text"})
    assert node.id == "42"

    e = Edge.model_validate({"id": 7, "fromNode": 1, "toNode": 2})
    assert (e.id, e.source, e.target) == ("7", "1", "2")


def test_node_roundtrip_keeps_extra_fields_and_int_coordinates():
    raw = text("a", x=10, y=20, styleAttributes={"border": "dashed"})
    node = Node.model_validate(raw)
    out = node.to_json_dict()

    assert out["styleAttributes"] == {"border": "dashed"}
    assert out["x"] == 10 and isinstance(out["x"], int)
    assert set(out) == set(raw)


def test_node_missing_fields_are_not_emitted():
    node = Node.model_validate({"id": "a", "type": "text"})
    assert node.to_json_dict() == {"id": "a", "type": "text"}
    assert node.rect() == (0, 0, 0, 0)


def test_semantic_keys():
    assert Node.model_validate(text("t", body="  Hello World ")).semantic_key() == "hello world"
    assert Node.model_validate({"id": "f", "type": "file", "file": "notes/Deep/Plan.MD"}).semantic_key() == "plan.md"
    assert Node.model_validate({"id": "l", "type": "link", "url": "HTTPS://X.org"}).semantic_key() == "https://x.org"
    assert Node.model_validate(group("g", 0, 0, 10, 10, label="Ideas")).semantic_key() == "ideas"
    # Groups without a label fall back to the id
    assert Node.model_validate(group("G-1", 0, 0, 10, 10)).semantic_key() == "g-1"


def test_contains_is_inclusive_of_edges():
    outer = Node.model_validate(group("g", 0, 0, 100, 100))
    assert outer.contains(Node.model_validate(text("a", x=0, y=0, width=100, height=100)))
    assert not outer.contains(Node.model_validate(text("b", x=50, y=50, width=60, height=10)))


@pytest.mark.parametrize("ends,expected", [
    ({}, True),
    ({"fromEnd": "none"}, True),
    ({"fromEnd": "none", "toEnd": "none"}, False),
    ({"fromEnd": "arrow", "toEnd": "none"}, True),
    ({"toEnd": "arrow"}, True),
    ({"fromEnd": "arrow"}, True),
])
def test_edge_is_directional(ends, expected):
    assert Edge.model_validate(edge("e", "a", "b", **ends)).is_directional() is expected


def test_edge_direction_follows_arrow_end():
    assert Edge.model_validate(edge("e", "a", "b")).direction() == ("a", "b")
    assert Edge.model_validate(edge("e", "a", "b", fromEnd="arrow", toEnd="none")).direction() == ("b", "a")
    assert Edge.model_validate(edge("e", "a", "b", fromEnd="arrow", toEnd="arrow")).direction() is None
    assert Edge.model_validate(edge("e", "a", "b", fromEnd="arrow")).direction() is None


def test_edge_has_label_even_when_empty():
    assert Edge.model_validate(edge("e", "a", "b", label="")).has_label
    assert Edge.model_validate(edge("e", "a", "b", label=None)).has_label
    assert not Edge.model_validate(edge("e", "a", "b")).has_label


def test_document_missing_arrays_are_empty():
    doc = CanvasDocument.from_json_dict({})
    assert doc.nodes == [] and doc.edges == []


def test_document_rejects_non_object():
    with pytest.raises(CanvasFormatError, match="JSON object"):
        CanvasDocument.from_json_dict([1, 2])


def test_document_rejects_malformed_record():
    with pytest.raises(CanvasFormatError, match=r"nodes\.1\.x"):
        CanvasDocument.from_json_dict(canvas([text("a"), text("b", x="left")]))


@pytest.mark.parametrize("field,value", [
    ("x", "10"),
    ("y", True),
    ("width", "100.5"),
    ("height", False),
])
def test_coordinates_are_not_converted(field, value):
    with pytest.raises(CanvasFormatError, match=rf"nodes\.0\.{field}"):
        CanvasDocument.from_json_dict(canvas([text("a", **{field: value})]))


def test_float_coordinates_are_kept():
    node = Node.model_validate(text("a", x=10.5, y=-3))
    assert node.to_json_dict()["x"] == 10.5
    assert node.to_json_dict()["y"] == -3


def test_document_requires_node_type():
    with pytest.raises(CanvasFormatError, match=r"nodes\.0\.type"):
        CanvasDocument.from_json_dict({"nodes": [{"id": "a"}]})
