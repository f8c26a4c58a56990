"""
Plinko Core - The simulation and outcome-selection engine.

Main exports:
- GameSession: Board, balance and round lifecycle
- generate_layout: Pegs and slots for a configuration
- OutcomeSelector: Value-weighted target slot draw
- ReferenceStepper / make_stepper: Per-tick ball simulation
- GameConfig: Configuration loaded from game_config.yaml
"""

from plinko.core.config_loader import (
    GameConfig,
    ConfigurationError,
    load_config,
    LAYOUT_GRID,
    LAYOUT_PYRAMID,
)
from plinko.core.collision import Box, boxes_overlap
from plinko.core.layout import Peg, PEG_RADIUS, generate_layout
from plinko.core.slots import Slot, build_slots
from plinko.core.outcome_selector import OutcomeSelector
from plinko.core.stepper import (
    Ball,
    RoundState,
    RoundStepResult,
    Stepper,
    ReferenceStepper,
    make_stepper,
)
from plinko.core.session import GameSession, RoundStartResult

__all__ = [
    "GameConfig",
    "ConfigurationError",
    "load_config",
    "LAYOUT_GRID",
    "LAYOUT_PYRAMID",
    "Box",
    "boxes_overlap",
    "Peg",
    "PEG_RADIUS",
    "generate_layout",
    "Slot",
    "build_slots",
    "OutcomeSelector",
    "Ball",
    "RoundState",
    "RoundStepResult",
    "Stepper",
    "ReferenceStepper",
    "make_stepper",
    "GameSession",
    "RoundStartResult",
]
