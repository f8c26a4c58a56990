"""
Tests for AABB collision detection.
"""

from plinko.core.collision import Box, boxes_overlap, circle_box


class TestBoxesOverlap:
    """Test the strict overlap predicate."""

    def test_partial_overlap(self):
        assert boxes_overlap(Box(0, 0, 1, 1), Box(0.5, 0.5, 1, 1))

    def test_edge_touching_is_not_collision(self):
        assert not boxes_overlap(Box(0, 0, 1, 1), Box(1, 0, 1, 1))
        assert not boxes_overlap(Box(0, 0, 1, 1), Box(0, 1, 1, 1))

    def test_corner_touching_is_not_collision(self):
        assert not boxes_overlap(Box(0, 0, 1, 1), Box(1, 1, 1, 1))

    def test_disjoint(self):
        assert not boxes_overlap(Box(0, 0, 1, 1), Box(5, 5, 1, 1))

    def test_containment(self):
        assert boxes_overlap(Box(0, 0, 10, 10), Box(2, 2, 1, 1))
        assert boxes_overlap(Box(2, 2, 1, 1), Box(0, 0, 10, 10))

    def test_symmetric(self):
        a = Box(0, 0, 2, 3)
        b = Box(1.5, 2.5, 4, 4)
        assert a.overlaps(b) == b.overlaps(a)


class TestCircleBox:
    """Test circumscribed squares."""

    def test_circle_box_is_centred(self):
        box = circle_box(10, 20, 5)
        assert box == Box(5, 15, 10, 10)
        assert box.right == 15
        assert box.bottom == 25
