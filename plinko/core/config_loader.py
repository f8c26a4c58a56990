"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple

import yaml


LAYOUT_GRID = "grid"
LAYOUT_PYRAMID = "pyramid"
LAYOUT_KINDS = (LAYOUT_GRID, LAYOUT_PYRAMID)

WEIGHTING_BONUS = "bonus"
WEIGHTING_INVERSE = "inverse"
WEIGHTINGS = (WEIGHTING_BONUS, WEIGHTING_INVERSE)

BACKEND_REFERENCE = "reference"
BACKEND_PYMUNK = "pymunk"
BACKENDS = (BACKEND_REFERENCE, BACKEND_PYMUNK)


class ConfigurationError(ValueError):
    """Raised when a board or game configuration cannot be used."""


@dataclass(frozen=True)
class BoardConfig:
    """Board geometry and peg field settings."""
    width: float          # Board width in pixels
    height: float         # Board height in pixels
    left_pad: float       # Peg-free margin on each side
    right_pad: float
    top_pad: float
    bottom_pad: float
    columns: int          # Grid layout pegs per row
    rows: int             # Grid layout row count
    pyramid_rows: int     # Pyramid layout row count
    layout_kind: str      # "grid" or "pyramid"


@dataclass(frozen=True)
class BallConfig:
    """Ball size and reference cadence."""
    radius: float
    start_y: float        # Y coordinate of the ball centre at round start
    tick_step: float      # Vertical advance per tick (reference backend)


@dataclass(frozen=True)
class SlotConfig:
    """Scoring slots along the bottom edge."""
    values: Tuple[int, ...]
    height: float
    thickness: float      # Floor thickness the settled ball rests on


@dataclass(frozen=True)
class OutcomeConfig:
    """Weighted target selection parameters."""
    weighting: str              # "bonus" or "inverse"
    low_value_threshold: int    # Values below this get the favor bonus
    favor_bonus: float
    disfavor_bonus: float


@dataclass(frozen=True)
class SessionConfig:
    """Player balance and round parameters."""
    starting_balance: int
    stake: int
    bias_enabled: bool
    max_ticks_per_round: int


@dataclass(frozen=True)
class PhysicsConfig:
    """Backend selection and rigid-body parameters (pymunk backend only)."""
    backend: str
    gravity: float
    dt: float
    substeps: int
    ball_mass: float
    elasticity: float
    friction: float


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable; use with_layout() or dataclasses.replace()
    to derive variants.
    """
    board: BoardConfig
    ball: BallConfig
    slots: SlotConfig
    outcome: OutcomeConfig
    session: SessionConfig
    physics: PhysicsConfig

    @property
    def num_slots(self) -> int:
        """Number of scoring slots."""
        return len(self.slots.values)

    def with_layout(self, layout_kind: str) -> "GameConfig":
        """Return a copy of this config using a different layout kind."""
        config = replace(self, board=replace(self.board, layout_kind=layout_kind))
        _validate_config(config)
        return config

    def with_backend(self, backend: str) -> "GameConfig":
        """Return a copy of this config using a different physics backend."""
        config = replace(self, physics=replace(self.physics, backend=backend))
        _validate_config(config)
        return config


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    board = config.board

    if board.width <= 0 or board.height <= 0:
        raise ConfigurationError(
            f"Board dimensions must be positive, got {board.width}x{board.height}"
        )

    for name in ("left_pad", "right_pad", "top_pad", "bottom_pad"):
        if getattr(board, name) < 0:
            raise ConfigurationError(f"board.{name} must not be negative")

    if board.left_pad + board.right_pad >= board.width:
        raise ConfigurationError("Horizontal padding leaves no room for pegs")
    if board.top_pad + board.bottom_pad >= board.height:
        raise ConfigurationError("Vertical padding leaves no room for pegs")

    if board.layout_kind not in LAYOUT_KINDS:
        raise ConfigurationError(
            f"layout_kind must be one of {LAYOUT_KINDS}, got '{board.layout_kind}'"
        )

    if board.columns < 2 or board.rows < 2:
        raise ConfigurationError(
            f"Grid layout needs at least 2 columns and 2 rows, "
            f"got {board.columns}x{board.rows}"
        )
    if board.pyramid_rows < 1:
        raise ConfigurationError(f"pyramid_rows must be >= 1, got {board.pyramid_rows}")

    if not config.slots.values:
        raise ConfigurationError("At least one slot value is required")
    if any(v < 0 for v in config.slots.values):
        raise ConfigurationError(f"Slot values must not be negative: {config.slots.values}")
    if config.slots.height <= 0 or config.slots.height > board.height:
        raise ConfigurationError(f"Invalid slot height: {config.slots.height}")

    if config.ball.radius <= 0:
        raise ConfigurationError(f"Ball radius must be positive, got {config.ball.radius}")
    if config.ball.tick_step <= 0:
        raise ConfigurationError(f"tick_step must be positive, got {config.ball.tick_step}")

    if config.outcome.weighting not in WEIGHTINGS:
        raise ConfigurationError(
            f"weighting must be one of {WEIGHTINGS}, got '{config.outcome.weighting}'"
        )

    if config.session.stake <= 0:
        raise ConfigurationError(f"Stake must be positive, got {config.session.stake}")
    if config.session.max_ticks_per_round <= 0:
        raise ConfigurationError("max_ticks_per_round must be positive")

    if config.physics.backend not in BACKENDS:
        raise ConfigurationError(
            f"backend must be one of {BACKENDS}, got '{config.physics.backend}'"
        )
    if config.physics.substeps < 1:
        raise ConfigurationError("physics.substeps must be >= 1")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        width=float(board_data["width"]),
        height=float(board_data["height"]),
        left_pad=float(board_data.get("left_pad", 40)),
        right_pad=float(board_data.get("right_pad", 40)),
        top_pad=float(board_data.get("top_pad", 80)),
        bottom_pad=float(board_data.get("bottom_pad", 80)),
        columns=int(board_data["columns"]),
        rows=int(board_data["rows"]),
        pyramid_rows=int(board_data.get("pyramid_rows", board_data["rows"])),
        layout_kind=str(board_data.get("layout_kind", LAYOUT_GRID))
    )

    ball_data = raw["ball"]
    ball = BallConfig(
        radius=float(ball_data["radius"]),
        start_y=float(ball_data["start_y"]),
        tick_step=float(ball_data.get("tick_step", 1.0))
    )

    slot_data = raw["slots"]
    slots = SlotConfig(
        values=tuple(int(v) for v in slot_data["values"]),
        height=float(slot_data.get("height", 40)),
        thickness=float(slot_data.get("thickness", 5))
    )

    outcome_data = raw.get("outcome", {})
    outcome = OutcomeConfig(
        weighting=str(outcome_data.get("weighting", WEIGHTING_BONUS)),
        low_value_threshold=int(outcome_data.get("low_value_threshold", 4)),
        favor_bonus=float(outcome_data.get("favor_bonus", 2.0)),
        disfavor_bonus=float(outcome_data.get("disfavor_bonus", 0.5))
    )

    session_data = raw["session"]
    session = SessionConfig(
        starting_balance=int(session_data["starting_balance"]),
        stake=int(session_data["stake"]),
        bias_enabled=bool(session_data.get("bias_enabled", False)),
        max_ticks_per_round=int(session_data.get("max_ticks_per_round", 5000))
    )

    # Physics section is optional; the reference stepper needs none of it
    physics_data = raw.get("physics", {})
    physics = PhysicsConfig(
        backend=str(physics_data.get("backend", BACKEND_REFERENCE)),
        gravity=float(physics_data.get("gravity", 900.0)),
        dt=float(physics_data.get("dt", 1.0 / 60.0)),
        substeps=int(physics_data.get("substeps", 3)),
        ball_mass=float(physics_data.get("ball_mass", 1.0)),
        elasticity=float(physics_data.get("elasticity", 0.5)),
        friction=float(physics_data.get("friction", 0.3))
    )

    config = GameConfig(
        board=board,
        ball=ball,
        slots=slots,
        outcome=outcome,
        session=session,
        physics=physics
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
