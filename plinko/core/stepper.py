"""
Simulation Stepper
==================

Advances the ball one tick at a time.

Round phases:
- idle: ball stationary, ticks are no-ops
- falling: ball descending through the peg field
- settled: ball has landed in a slot; terminal for the round

The Stepper base class owns the shared tick skeleton (phase gate, floor
backstop, slot collision and scoring). Backends fill in how the ball moves:
ReferenceStepper here, PymunkStepper in physics_world.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from plinko.core.collision import Box, circle_box
from plinko.core.config_loader import (
    GameConfig,
    ConfigurationError,
    BACKEND_REFERENCE,
    BACKEND_PYMUNK,
)
from plinko.core.layout import Peg
from plinko.core.slots import Slot


PHASE_IDLE = "idle"
PHASE_FALLING = "falling"
PHASE_SETTLED = "settled"


@dataclass
class Ball:
    """The single ball of a round. (x, y) is its centre."""
    x: float
    y: float
    radius: float

    @property
    def width(self) -> float:
        return 2 * self.radius

    @property
    def height(self) -> float:
        return 2 * self.radius

    @property
    def box(self) -> Box:
        return circle_box(self.x, self.y, self.radius)

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y


@dataclass
class RoundState:
    """Mutable per-round simulation state, owned by the session."""
    ball: Ball
    phase: str = PHASE_IDLE
    last_peg_hit_id: Optional[int] = None
    target_slot_index: Optional[int] = None
    settled_slot_index: Optional[int] = None
    ticks: int = 0

    @property
    def is_ball_moving(self) -> bool:
        return self.phase == PHASE_FALLING


@dataclass
class RoundStepResult:
    """Outcome of a single tick."""
    status: str
    ball_position: Optional[Tuple[float, float]] = None
    slot_index: Optional[int] = None
    points: int = 0

    @property
    def is_settled(self) -> bool:
        return self.status == PHASE_SETTLED

    @property
    def is_falling(self) -> bool:
        return self.status == PHASE_FALLING

    @property
    def is_idle(self) -> bool:
        return self.status == PHASE_IDLE

    @staticmethod
    def still_falling(position: Tuple[float, float]) -> "RoundStepResult":
        return RoundStepResult(PHASE_FALLING, ball_position=position)

    @staticmethod
    def settled(
        slot_index: int,
        points: int,
        position: Tuple[float, float]
    ) -> "RoundStepResult":
        return RoundStepResult(
            PHASE_SETTLED,
            ball_position=position,
            slot_index=slot_index,
            points=points
        )

    @staticmethod
    def idle() -> "RoundStepResult":
        return RoundStepResult(PHASE_IDLE)


def find_slot_hit(box: Box, slots: Sequence[Slot]) -> Optional[int]:
    """Index of the first slot (left to right) overlapping box, or None."""
    for i, slot in enumerate(slots):
        if box.overlaps(slot.box):
            return i
    return None


class Stepper:
    """
    Physics capability: advance a round by one tick.

    Subclasses implement _deflect() and _fall(); everything else is shared.
    """

    def __init__(
        self,
        config: GameConfig,
        pegs: Sequence[Peg],
        slots: Sequence[Slot],
        rng: random.Random
    ):
        """
        Initialize stepper.

        Args:
            config: Game configuration.
            pegs: Peg layout for the board.
            slots: Scoring slots for the board.
            rng: Random source for deflection decisions.
        """
        self._config = config
        self._pegs: List[Peg] = list(pegs)
        self._slots: List[Slot] = list(slots)
        self._rng = rng
        self._board_width = config.board.width
        self._board_height = config.board.height
        self._slot_thickness = config.slots.thickness

    @property
    def pegs(self) -> List[Peg]:
        return self._pegs

    @property
    def slots(self) -> List[Slot]:
        return self._slots

    def begin_round(self, state: RoundState) -> None:
        """Hook called after the session places a fresh ball."""

    def step(self, state: RoundState) -> RoundStepResult:
        """
        Advance the round by one tick.

        Args:
            state: Round state; mutated in place.

        Returns:
            RoundStepResult describing the tick.
        """
        if state.phase != PHASE_FALLING:
            return RoundStepResult.idle()

        ball = state.ball

        # Backstop: never sink through the floor if no slot caught the ball
        if ball.y + ball.height / 2 >= self._board_height - ball.width / 2:
            return RoundStepResult.still_falling(ball.position)

        state.ticks += 1
        self._deflect(state)

        slot_index = find_slot_hit(ball.box, self._slots)
        if slot_index is not None:
            slot = self._slots[slot_index]
            state.phase = PHASE_SETTLED
            state.settled_slot_index = slot_index
            ball.y = slot.end_y - self._slot_thickness - ball.height / 2
            self._on_settled(state)
            return RoundStepResult.settled(slot_index, slot.value, ball.position)

        self._fall(state)
        return RoundStepResult.still_falling(ball.position)

    def _deflect(self, state: RoundState) -> None:
        raise NotImplementedError

    def _fall(self, state: RoundState) -> None:
        raise NotImplementedError

    def _on_settled(self, state: RoundState) -> None:
        """Hook for backends that hold engine state for the ball."""


class ReferenceStepper(Stepper):
    """
    Kinematic stepper: constant fall speed, fixed-size sideways hops on
    peg contact, optionally steered towards the round's target slot.
    """

    def __init__(
        self,
        config: GameConfig,
        pegs: Sequence[Peg],
        slots: Sequence[Slot],
        rng: random.Random
    ):
        super().__init__(config, pegs, slots, rng)
        self._tick_step = config.ball.tick_step
        self._peg_boxes = [peg.box for peg in self._pegs]

    def find_peg_hit(self, box: Box, skip_id: Optional[int] = None) -> Optional[int]:
        """Index of the first peg overlapping box, ignoring skip_id."""
        for peg_id, peg_box in enumerate(self._peg_boxes):
            if peg_id == skip_id:
                continue
            if box.overlaps(peg_box):
                return peg_id
        return None

    def horizontal_shift(self, ball: Ball, target_slot_index: Optional[int]) -> float:
        """
        Signed sideways hop for a peg contact, before wall reflection.

        Towards the target slot centre when one is set, otherwise a coin flip.
        """
        magnitude = ball.width
        if target_slot_index is not None:
            target_x = self._slots[target_slot_index].center_x
            if ball.x < target_x:
                return magnitude
            if ball.x > target_x:
                return -magnitude
        return magnitude if self._rng.random() < 0.5 else -magnitude

    def _deflect(self, state: RoundState) -> None:
        ball = state.ball
        peg_id = self.find_peg_hit(ball.box, skip_id=state.last_peg_hit_id)
        if peg_id is None:
            return

        state.last_peg_hit_id = peg_id
        shift = self.horizontal_shift(ball, state.target_slot_index)

        # Reflect off the side walls
        left = ball.x - ball.radius + shift
        if left <= 0 or left + ball.width >= self._board_width:
            shift = -shift

        ball.x += shift

    def _fall(self, state: RoundState) -> None:
        state.ball.y += self._tick_step


def make_stepper(
    config: GameConfig,
    pegs: Sequence[Peg],
    slots: Sequence[Slot],
    rng: random.Random
) -> Stepper:
    """
    Build the stepper selected by config.physics.backend.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    backend = config.physics.backend
    if backend == BACKEND_REFERENCE:
        return ReferenceStepper(config, pegs, slots, rng)
    if backend == BACKEND_PYMUNK:
        from plinko.core.physics_world import PymunkStepper
        return PymunkStepper(config, pegs, slots, rng)
    raise ConfigurationError(f"Unknown physics backend: '{backend}'")
