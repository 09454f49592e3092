"""Tests for PNG/PDF export (needs the optional pycairo dependency)."""

import pytest

pytest.importorskip("cairo")

from mindmapper.image import ImageExporter, parse_color  # noqa: E402
from mindmapper.models import Document, Node, Edge, Position  # noqa: E402


@pytest.fixture
def document():
    return Document(
        name="Picture",
        nodes=[Node("1", position=Position(250, 0), label="Root"),
               Node("a", position=Position(500, 0), label="Child", color="#c00"),
               Node("b", position=Position(500, 100), label="Hidden", hidden=True)],
        edges=[Edge("e1", "1", "a"), Edge("e2", "1", "b")],
    )


def test_parse_color():
    assert parse_color("#333") == pytest.approx((0.2, 0.2, 0.2))
    assert parse_color("#ff0000") == (1.0, 0.0, 0.0)
    assert parse_color("red") == (0.2, 0.2, 0.2)


def test_export_png(document, tmp_path):
    out = tmp_path / "map.png"
    assert ImageExporter().export_png(document, str(out)) is True
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_export_pdf(document, tmp_path):
    out = tmp_path / "map.pdf"
    assert ImageExporter().export_pdf(document, str(out)) is True
    assert out.read_bytes()[:4] == b"%PDF"


def test_nothing_visible(tmp_path):
    document = Document(nodes=[Node("1", hidden=True)])
    assert ImageExporter().export_png(document, str(tmp_path / "x.png")) is False
