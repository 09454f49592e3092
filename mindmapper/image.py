"""PNG/PDF rendering of a single map with pycairo."""

import math
from datetime import datetime
from typing import Dict, Tuple

import cairo

from mindmapper.models import Document, Node
from mindmapper.tree import visible_graph

Box = Tuple[float, float, float, float]


def parse_color(value: str) -> Tuple[float, float, float]:
    """``#rgb`` / ``#rrggbb`` to cairo floats; anything else is dark grey."""
    text = (value or "").lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        return (0.2, 0.2, 0.2)
    try:
        r, g, b = (int(text[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return (0.2, 0.2, 0.2)
    return (r / 255, g / 255, b / 255)


class ImageExporter:
    """Draws a map at its stored node positions."""

    COLORS = {
        'background': (1.0, 1.0, 1.0),
        'surface': (1.0, 1.0, 1.0),
        'connection': (0.55, 0.55, 0.55),
    }

    NODE_PADDING = 20
    NODE_MIN_WIDTH = 100
    NODE_MAX_WIDTH = 300
    NODE_HEIGHT = 40
    MARGIN = 50

    def _calc_size(self, node: Node) -> Tuple[float, float]:
        text_width = len(node.label) * 8 + self.NODE_PADDING * 2
        return max(self.NODE_MIN_WIDTH, min(self.NODE_MAX_WIDTH, text_width)), self.NODE_HEIGHT

    def _boxes(self, document: Document) -> Tuple[Dict[str, Box], list, list]:
        nodes, edges = visible_graph(document.nodes, document.edges)
        boxes = {}
        for node in nodes:
            w, h = self._calc_size(node)
            boxes[node.id] = (node.position.x, node.position.y, w, h)
        return boxes, nodes, edges

    @staticmethod
    def _bounds(boxes: Dict[str, Box]) -> Box:
        min_x = min(b[0] for b in boxes.values())
        min_y = min(b[1] for b in boxes.values())
        max_x = max(b[0] + b[2] for b in boxes.values())
        max_y = max(b[1] + b[3] for b in boxes.values())
        return min_x, min_y, max_x, max_y

    def export_png(self, document: Document, filepath: str,
                   scale: float = 2.0, transparent: bool = False) -> bool:
        """Export a map to a PNG image."""
        boxes, nodes, edges = self._boxes(document)
        if not boxes:
            return False

        min_x, min_y, max_x, max_y = self._bounds(boxes)
        width = int((max_x - min_x + self.MARGIN * 2) * scale)
        height = int((max_y - min_y + self.MARGIN * 2) * scale)

        surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
        cr = cairo.Context(surface)
        cr.scale(scale, scale)
        cr.translate(-min_x + self.MARGIN, -min_y + self.MARGIN)

        if not transparent:
            cr.set_source_rgb(*self.COLORS['background'])
            cr.paint()

        self._draw(cr, nodes, edges, boxes)
        surface.write_to_png(filepath)
        return True

    def export_pdf(self, document: Document, filepath: str) -> bool:
        """Export a map to a single-page PDF sized to fit."""
        boxes, nodes, edges = self._boxes(document)
        if not boxes:
            return False

        min_x, min_y, max_x, max_y = self._bounds(boxes)
        width = max_x - min_x + self.MARGIN * 2
        height = max_y - min_y + self.MARGIN * 2

        surface = cairo.PDFSurface(filepath, width, height)
        surface.set_metadata(cairo.PDF_METADATA_TITLE, document.name)
        surface.set_metadata(cairo.PDF_METADATA_CREATE_DATE, datetime.now().isoformat())
        cr = cairo.Context(surface)
        cr.translate(-min_x + self.MARGIN, -min_y + self.MARGIN)

        cr.set_source_rgb(*self.COLORS['background'])
        cr.paint()

        self._draw(cr, nodes, edges, boxes)
        surface.finish()
        return True

    def _draw(self, cr, nodes, edges, boxes: Dict[str, Box]):
        for edge in edges:
            self._draw_connection(cr, boxes[edge.source], boxes[edge.target])
        for node in nodes:
            self._draw_node(cr, node, boxes[node.id])

    def _draw_connection(self, cr, parent: Box, child: Box):
        """Bezier from the parent's right side to the child's left side."""
        px, py, pw, ph = parent
        cx, cy, cw, ch = child
        start_x, start_y = px + pw, py + ph / 2
        end_x, end_y = cx, cy + ch / 2
        ctrl = abs(end_x - start_x) * 0.5

        cr.set_source_rgb(*self.COLORS['connection'])
        cr.set_line_width(2)
        cr.set_line_cap(cairo.LINE_CAP_ROUND)
        cr.move_to(start_x, start_y)
        cr.curve_to(start_x + ctrl, start_y, end_x - ctrl, end_y, end_x, end_y)
        cr.stroke()

    def _draw_node(self, cr, node: Node, box: Box):
        x, y, w, h = box
        color = parse_color(node.color)

        self._draw_rounded_rect(cr, x, y, w, h, 8)
        cr.set_source_rgb(*self.COLORS['surface'])
        cr.fill_preserve()
        cr.set_source_rgb(*color)
        cr.set_line_width(2)
        cr.stroke()

        cr.select_font_face("Sans", cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_NORMAL)
        cr.set_font_size(13)
        extents = cr.text_extents(node.label)
        cr.move_to(x + self.NODE_PADDING, y + h / 2 + extents.height / 2 - 2)
        cr.show_text(node.label)

    def _draw_rounded_rect(self, cr, x, y, w, h, radius):
        """Draw a rounded rectangle path."""
        cr.new_path()
        cr.arc(x + w - radius, y + radius, radius, -math.pi / 2, 0)
        cr.arc(x + w - radius, y + h - radius, radius, 0, math.pi / 2)
        cr.arc(x + radius, y + h - radius, radius, math.pi / 2, math.pi)
        cr.arc(x + radius, y + radius, radius, math.pi, 3 * math.pi / 2)
        cr.close_path()
