"""
Peg Layout
==========

Generates peg positions for the two board shapes:

- grid: rows x columns, every other row shifted by half a column
- pyramid: triangular, row i holds i + 1 pegs centred on the board
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from plinko.core.collision import Box, circle_box
from plinko.core.config_loader import (
    GameConfig,
    ConfigurationError,
    LAYOUT_GRID,
    LAYOUT_PYRAMID,
)
from plinko.core.slots import Slot, build_slots


# Collision radius shared by every peg
PEG_RADIUS = 5.0


@dataclass(frozen=True)
class Peg:
    """A fixed circular obstacle. Its id is its index in the layout."""
    x: float
    y: float
    radius: float = PEG_RADIUS

    @property
    def box(self) -> Box:
        return circle_box(self.x, self.y, self.radius)


def generate_grid_pegs(
    start_x: float,
    end_x: float,
    start_y: float,
    end_y: float,
    num_cols: int,
    num_rows: int
) -> List[Peg]:
    """
    Generate a staggered grid of pegs inside [start_x, end_x] x [start_y, end_y].

    Even rows are shifted right by half a column. The column pitch is
    (end_x - start_x) / (num_cols - 0.5) rather than the classic
    (num_cols - 1): the shifted rows then end exactly on end_x instead of
    half a pitch past it.

    Args:
        start_x: Left bound.
        end_x: Right bound.
        start_y: Top bound (first row).
        end_y: Bottom bound (last row).
        num_cols: Pegs per row, at least 2.
        num_rows: Number of rows, at least 2.

    Returns:
        num_rows * num_cols pegs in row-major order.

    Raises:
        ConfigurationError: If fewer than 2 columns or rows are requested.
    """
    if num_cols < 2 or num_rows < 2:
        raise ConfigurationError(
            f"Grid layout needs at least 2 columns and 2 rows, got {num_cols}x{num_rows}"
        )
    if end_x <= start_x or end_y <= start_y:
        raise ConfigurationError("Grid bounds are empty")

    x_spacing = (end_x - start_x) / (num_cols - 0.5)
    y_spacing = (end_y - start_y) / (num_rows - 1)

    pegs = []
    for row in range(num_rows):
        shift = 0.5 if row % 2 == 0 else 0.0
        y = start_y + y_spacing * row
        for col in range(num_cols):
            pegs.append(Peg(start_x + x_spacing * (col + shift), y))
    return pegs


def generate_pyramid_pegs(
    board_width: float,
    start_y: float,
    rows: int,
    peg_radius: float = PEG_RADIUS
) -> List[Peg]:
    """
    Generate a centred triangle of pegs.

    Row i (0-indexed) holds i + 1 pegs spaced 2 * peg_radius + spacing apart,
    where spacing = board_width / (rows * 2 + 1).

    Args:
        board_width: Board width, used for spacing and centring.
        start_y: Y coordinate of the apex row.
        rows: Number of rows, at least 1.
        peg_radius: Peg radius.

    Returns:
        rows * (rows + 1) / 2 pegs in row-major order.
    """
    if rows < 1:
        raise ConfigurationError(f"Pyramid layout needs at least 1 row, got {rows}")
    if board_width <= 0:
        raise ConfigurationError(f"Board width must be positive, got {board_width}")

    spacing = board_width / (rows * 2 + 1)
    step = 2 * peg_radius + spacing

    pegs = []
    for row in range(rows):
        row_start_x = (board_width - row * step) / 2
        y = start_y + row * step
        for j in range(row + 1):
            pegs.append(Peg(row_start_x + j * step, y, peg_radius))
    return pegs


def peg_bounds(config: GameConfig) -> Tuple[float, float, float, float]:
    """Padded peg area as (min_x, max_x, min_y, max_y)."""
    board = config.board
    return (
        board.left_pad,
        board.width - board.right_pad,
        board.top_pad,
        board.height - board.bottom_pad,
    )


def generate_pegs(config: GameConfig) -> List[Peg]:
    """
    Generate pegs for the configured layout kind.

    Raises:
        ConfigurationError: If the layout kind is unknown or any peg falls
            outside the padded board area.
    """
    board = config.board
    min_x, max_x, min_y, max_y = peg_bounds(config)

    if board.layout_kind == LAYOUT_GRID:
        pegs = generate_grid_pegs(min_x, max_x, min_y, max_y, board.columns, board.rows)
    elif board.layout_kind == LAYOUT_PYRAMID:
        pegs = generate_pyramid_pegs(board.width, min_y, board.pyramid_rows)
    else:
        raise ConfigurationError(f"Unknown layout kind: '{board.layout_kind}'")

    # Small tolerance for accumulated float error at the far edges
    eps = 1e-6
    for i, peg in enumerate(pegs):
        if not (min_x - eps <= peg.x <= max_x + eps and min_y - eps <= peg.y <= max_y + eps):
            raise ConfigurationError(
                f"Peg {i} at ({peg.x:.1f}, {peg.y:.1f}) lies outside the padded "
                f"board area [{min_x}, {max_x}] x [{min_y}, {max_y}]"
            )
    return pegs


def generate_layout(config: GameConfig) -> Tuple[List[Peg], List[Slot]]:
    """
    Generate the full board: pegs and scoring slots.

    Args:
        config: Game configuration.

    Returns:
        (pegs, slots) tuple.
    """
    pegs = generate_pegs(config)
    slots = build_slots(
        config.slots.values,
        config.board.width,
        config.board.height,
        config.slots.height
    )
    return pegs, slots
