"""Tests for laying out and printing the render forest."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from models import ExportOptions, LayoutOptions, Member
from services import export_service
from services.layout_service import layout_forest
from services.tree_builder import build


@pytest.fixture
def exports_dir(tmp_path: Path, monkeypatch) -> Path:
    target = tmp_path / "exports"
    monkeypatch.setattr(export_service, "EXPORTS_DIR", target)
    return target


class TestLayout:
    """Tests for layout_forest."""

    def test_empty_forest(self):
        assert layout_forest([], LayoutOptions()) == ([], [])

    def test_parent_centred_over_children(self):
        members = [
            Member(id="p", name="P", children=["a", "b"]),
            Member(id="a", name="A", father="p"),
            Member(id="b", name="B", father="p"),
        ]
        placed, edges = layout_forest(build(members), LayoutOptions(spacing_x=100, spacing_y=50))

        by_id = {p["member"].id: p for p in placed}
        assert by_id["a"]["x"] == 0
        assert by_id["b"]["x"] == 100
        assert by_id["p"]["x"] == 50
        assert by_id["p"]["y"] == 0
        assert by_id["a"]["y"] == 50
        assert sorted(edges) == [(0, 1), (0, 2)]

    def test_trees_are_placed_side_by_side(self, cyclic_pair):
        placed, _ = layout_forest(build(cyclic_pair), LayoutOptions(spacing_x=100))
        roots = [p for p in placed if p["y"] == 0]
        assert sorted(p["x"] for p in roots) == [0, 100]

    def test_left_right_direction_swaps_axes(self, chain):
        placed, _ = layout_forest(build(chain), LayoutOptions(direction="left-right", spacing_y=70))
        assert [p["x"] for p in placed] == [0, 70, 140]
        assert {p["y"] for p in placed} == {0}


class TestPrintExport:
    """Tests for export_tree."""

    def test_png(self, chain, exports_dir: Path):
        path = export_service.export_tree(build(chain), ExportOptions(format="png", width=640, height=480))

        assert Path(path).parent == exports_dir
        with Image.open(path) as img:
            assert img.size == (640, 480)

    def test_jpg(self, chain, exports_dir: Path):
        path = export_service.export_tree(build(chain), ExportOptions(format="jpg", width=320, height=200))
        assert path.endswith(".jpg")
        assert Path(path).exists()

    def test_pdf(self, chain, exports_dir: Path):
        path = export_service.export_tree(build(chain), ExportOptions(format="pdf"))
        assert Path(path).read_bytes().startswith(b"%PDF")

    def test_empty_tree_pdf(self, exports_dir: Path):
        path = export_service.export_tree([], ExportOptions(format="pdf", orientation="portrait"))
        assert Path(path).exists()
