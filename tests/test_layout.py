"""Tests for child placement."""

from mindmapper.layout import COLUMN_OFFSET, ROW_OFFSET, column_count, place_child
from mindmapper.models import Node, Position


def test_third_child_goes_below_two_siblings():
    parent = Node("1", position=Position(100, 100))
    position = place_child(parent, 2)
    assert position.x == 100 + COLUMN_OFFSET
    assert position.y == 100 + 2 * ROW_OFFSET


def test_column_count_only_counts_the_next_column():
    parent = Node("1", position=Position(100, 100))
    nodes = [
        parent,
        Node("a", position=Position(100 + COLUMN_OFFSET, 100)),
        Node("b", position=Position(100 + COLUMN_OFFSET, 900)),
        Node("c", position=Position(100 + 2 * COLUMN_OFFSET, 100)),
    ]
    assert column_count(parent, nodes) == 2


def test_repeated_placement_never_overlaps():
    parent = Node("1", position=Position(0, 0))
    nodes = [parent]
    for i in range(6):
        position = place_child(parent, column_count(parent, nodes))
        nodes.append(Node(f"c{i}", position=position))

    coordinates = [(n.position.x, n.position.y) for n in nodes[1:]]
    assert len(set(coordinates)) == 6


def test_custom_offsets():
    parent = Node("1", position=Position(10, 20))
    assert place_child(parent, 3, column_offset=50, row_offset=5) == Position(60, 35)
