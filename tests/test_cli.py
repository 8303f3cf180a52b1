"""Tests for the file shim and the command line."""

import json
from pathlib import Path

import pytest

from canvas_compiler.cli import main
from canvas_compiler.errors import CanvasFormatError
from canvas_compiler.files import (
    compile_canvas_file,
    default_output_path,
    parse_canvas,
    read_canvas,
    write_json,
)

from factories import canvas, edge, text


@pytest.fixture
def canvas_file(tmp_path):
    doc = canvas(
        [text("b", y=100, body="second"), text("a", y=0, body="first")],
        [edge("e1", "a", "b"), edge("e2", "b", "a", label="back")],
    )
    path = tmp_path / "board.canvas"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


def _run_cli(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code, capsys.readouterr().out


# ── File shim ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("name,pure,expected", [
    ("board.canvas", False, "board.json"),
    ("board.canvas", True, "board.pure.json"),
    ("Board.CANVAS", False, "Board.json"),
    ("notes.json", True, "notes.pure.json"),
    ("plain", False, "plain.json"),
])
def test_default_output_path(tmp_path, name, pure, expected):
    assert default_output_path(tmp_path / name, pure=pure) == tmp_path / expected


def test_read_canvas_reports_position(tmp_path):
    path = tmp_path / "broken.canvas"
    path.write_text('{"nodes": [', encoding="utf-8")
    with pytest.raises(CanvasFormatError, match="line 1"):
        read_canvas(path)


def test_parse_canvas_names_its_source():
    with pytest.raises(CanvasFormatError, match="invalid JSON in inline at line 2"):
        parse_canvas('{\n  "nodes": [,]\n}', "inline")


def test_write_json_creates_parents(tmp_path):
    out = write_json(tmp_path / "nested" / "dir" / "out.json", {"nodes": ["é"]})
    content = out.read_text(encoding="utf-8")
    assert content.endswith("\n")
    assert "é" in content
    assert json.loads(content) == {"nodes": ["é"]}


def test_compile_canvas_file_summary(canvas_file):
    summary = compile_canvas_file(canvas_file)
    assert summary == {
        "inPath": str(canvas_file.resolve()),
        "outPath": str(canvas_file.with_name("board.json").resolve()),
        "nodesIn": 2,
        "edgesIn": 2,
        "nodesOut": 2,
        "edgesOut": 2,
    }
    written = json.loads(Path(summary["outPath"]).read_text(encoding="utf-8"))
    assert [n["id"] for n in written["nodes"]] == ["a", "b"]


def test_compile_canvas_file_pure(canvas_file, tmp_path):
    out = tmp_path / "out" / "pure.json"
    summary = compile_canvas_file(canvas_file, out, strip=True)
    assert summary["outPath"] == str(out.resolve())
    assert summary["edgesOut"] == 1
    written = json.loads(out.read_text(encoding="utf-8"))
    assert written["edges"] == [{"id": "e1", "fromNode": "a", "toNode": "b"}]


# ── CLI ──────────────────────────────────────────────────────────────────────

def test_cli_compile(canvas_file, capsys):
    code, out = _run_cli(["compile", "--in", str(canvas_file)], capsys)
    assert code == 0
    result = json.loads(out)
    assert result["status"] == "ok"
    assert Path(result["outPath"]).name == "board.json"
    assert Path(result["outPath"]).exists()


def test_cli_export_with_flow_sort_drops_unlabeled_edges(canvas_file, tmp_path, capsys):
    out_path = tmp_path / "flow.json"
    code, out = _run_cli(["export", "--in", str(canvas_file), "--out", str(out_path), "--flow-sort"], capsys)
    assert code == 0
    assert json.loads(out)["edgesOut"] == 0
    written = json.loads(out_path.read_text(encoding="utf-8"))
    assert written["edges"] == []


def test_cli_export_strip_edges(canvas_file, tmp_path, capsys):
    out_path = tmp_path / "stripped.json"
    code, _ = _run_cli(["export", "--in", str(canvas_file), "--out", str(out_path), "--strip-edges"], capsys)
    assert code == 0
    assert json.loads(out_path.read_text(encoding="utf-8"))["edges"] == []


def test_cli_settings_file(canvas_file, tmp_path, capsys):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"flowSort": True}), encoding="utf-8")
    out_path = tmp_path / "pure.json"
    code, _ = _run_cli(
        ["export", "--in", str(canvas_file), "--out", str(out_path), "--settings", str(settings)],
        capsys,
    )
    assert code == 0
    assert json.loads(out_path.read_text(encoding="utf-8"))["edges"] == []


def test_cli_integrity_error_exits_1(tmp_path, capsys):
    path = tmp_path / "dup.canvas"
    path.write_text(json.dumps(canvas([text("a"), text("a")])), encoding="utf-8")
    code, out = _run_cli(["compile", "--in", str(path)], capsys)
    assert code == 1
    assert json.loads(out) == {"status": "error", "error": "duplicate node id: a", "node_id": "a"}
    assert not path.with_name("dup.json").exists()


def test_cli_missing_file_exits_1(tmp_path, capsys):
    code, out = _run_cli(["compile", "--in", str(tmp_path / "nope.canvas")], capsys)
    assert code == 1
    assert json.loads(out)["status"] == "error"


def test_cli_bad_settings_exits_1(canvas_file, tmp_path, capsys):
    settings = tmp_path / "settings.json"
    settings.write_text("[]", encoding="utf-8")
    code, out = _run_cli(["compile", "--in", str(canvas_file), "--settings", str(settings)], capsys)
    assert code == 1
    assert "must hold a JSON object" in json.loads(out)["error"]


def test_cli_usage_error_exits_2(capsys):
    code, _ = _run_cli(["compile"], capsys)
    assert code == 2
