"""Grid placement for newly created child nodes."""

from typing import Iterable

from mindmapper.models import Node, Position

COLUMN_OFFSET = 250
ROW_OFFSET = 100


def column_count(parent: Node, nodes: Iterable[Node],
                 column_offset: float = COLUMN_OFFSET) -> int:
    """Number of nodes already sitting in the column right of ``parent``."""
    column_x = parent.position.x + column_offset
    return sum(1 for n in nodes if n.position.x == column_x)


def place_child(parent: Node, sibling_count: int,
                column_offset: float = COLUMN_OFFSET,
                row_offset: float = ROW_OFFSET) -> Position:
    """Position for a new child: one column right, stacked below its siblings."""
    return Position(
        x=parent.position.x + column_offset,
        y=parent.position.y + sibling_count * row_offset,
    )
