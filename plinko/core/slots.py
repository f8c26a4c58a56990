"""
Slot Layout
===========

Partitions the board width into contiguous scoring slots along the
bottom edge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from plinko.core.collision import Box
from plinko.core.config_loader import ConfigurationError


@dataclass(frozen=True)
class Slot:
    """A scoring zone: an axis-aligned rectangle plus its point value."""
    start_x: float
    end_x: float
    start_y: float
    end_y: float
    value: int

    @property
    def width(self) -> float:
        return self.end_x - self.start_x

    @property
    def height(self) -> float:
        return self.end_y - self.start_y

    @property
    def center_x(self) -> float:
        return (self.start_x + self.end_x) / 2

    @property
    def box(self) -> Box:
        return Box(self.start_x, self.start_y, self.width, self.height)


def build_slots(
    values: Sequence[int],
    board_width: float,
    board_height: float,
    slot_height: float
) -> List[Slot]:
    """
    Build one slot per value, left to right.

    Slot i spans x in [i * w, (i + 1) * w) with w = board_width / len(values),
    and y in [board_height - slot_height, board_height]. The last slot ends
    exactly at board_width.

    Args:
        values: Point values, left to right.
        board_width: Board width.
        board_height: Board height.
        slot_height: Height of the slot band.

    Returns:
        Slots in the same order as values.

    Raises:
        ConfigurationError: On empty values or non-positive dimensions.
    """
    if not values:
        raise ConfigurationError("At least one slot value is required")
    if board_width <= 0 or board_height <= 0 or slot_height <= 0:
        raise ConfigurationError(
            f"Slot dimensions must be positive "
            f"(width={board_width}, height={board_height}, slot_height={slot_height})"
        )
    if any(v < 0 for v in values):
        raise ConfigurationError(f"Slot values must not be negative: {list(values)}")

    slot_width = board_width / len(values)
    start_y = board_height - slot_height
    last = len(values) - 1

    slots = []
    for i, value in enumerate(values):
        # Pin the final edge so the partition closes exactly on board_width
        end_x = board_width if i == last else (i + 1) * slot_width
        slots.append(Slot(
            start_x=i * slot_width,
            end_x=end_x,
            start_y=start_y,
            end_y=board_height,
            value=int(value)
        ))
    return slots


def find_slot_at(slots: Sequence[Slot], x: float) -> Optional[int]:
    """Index of the slot whose [start_x, end_x) span contains x, or None."""
    for i, slot in enumerate(slots):
        if slot.start_x <= x < slot.end_x:
            return i
    return None
