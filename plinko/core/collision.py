"""
Collision Detection
===================

Axis-aligned bounding-box overlap tests used for ball-vs-peg and
ball-vs-slot checks.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle anchored at its top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps(self, other: "Box") -> bool:
        """True if the two boxes intersect. Touching edges do not count."""
        return boxes_overlap(self, other)


def boxes_overlap(a: Box, b: Box) -> bool:
    """
    Strict AABB intersection test.

    Args:
        a: First box.
        b: Second box.

    Returns:
        True if the interiors of the boxes overlap.
    """
    return (
        a.x < b.right
        and a.right > b.x
        and a.y < b.bottom
        and a.bottom > b.y
    )


def circle_box(x: float, y: float, radius: float) -> Box:
    """Circumscribed square of a circle centred at (x, y)."""
    return Box(x - radius, y - radius, 2 * radius, 2 * radius)
