"""
Physics World
=============

Rigid-body backend built on a pymunk Space: static circular pegs, side
walls and one dynamic ball. The core only reads the ball's position back
after each step; slot detection and scoring stay in the shared Stepper.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

import pymunk

from plinko.core.config_loader import GameConfig
from plinko.core.layout import Peg
from plinko.core.slots import Slot
from plinko.core.stepper import Stepper, RoundState


# Collision types for pymunk
COLLISION_TYPE_BALL = 1
COLLISION_TYPE_PEG = 2
COLLISION_TYPE_WALL = 3

# Max horizontal spawn speed (px/s)
SPAWN_JITTER = 2.0


class PhysicsWorld:
    """
    Manages the pymunk simulation for one board.

    Handles:
    - Space creation with downward gravity (screen coordinates, y down)
    - Static peg circles and wall segments
    - Ball body creation and removal
    - Peg contact tracking
    """

    def __init__(self, config: GameConfig, pegs: Sequence[Peg]):
        """
        Initialize physics world.

        Args:
            config: Game configuration.
            pegs: Peg layout to turn into static circles.
        """
        self._config = config
        physics = config.physics

        self._space = pymunk.Space()
        self._space.gravity = (0.0, physics.gravity)

        self._peg_shapes: List[pymunk.Circle] = []
        self._wall_shapes: List[pymunk.Segment] = []
        self._create_pegs(pegs)
        self._create_walls()

        self._ball_body: Optional[pymunk.Body] = None
        self._ball_shape: Optional[pymunk.Circle] = None
        self._last_peg_contact: Optional[int] = None

        self._space.on_collision(
            COLLISION_TYPE_BALL,
            COLLISION_TYPE_PEG,
            begin=self._on_peg_contact
        )

    def _create_pegs(self, pegs: Sequence[Peg]) -> None:
        """Create one static circle per peg."""
        static_body = self._space.static_body
        for peg_id, peg in enumerate(pegs):
            shape = pymunk.Circle(static_body, peg.radius, (peg.x, peg.y))
            shape.elasticity = self._config.physics.elasticity
            shape.friction = self._config.physics.friction
            shape.collision_type = COLLISION_TYPE_PEG
            shape.peg_id = peg_id
            self._peg_shapes.append(shape)
        self._space.add(*self._peg_shapes)

    def _create_walls(self) -> None:
        """Create side walls and a floor under the slot band."""
        board = self._config.board
        static_body = self._space.static_body
        thickness = 2.0

        for a, b in (
            ((0, 0), (0, board.height)),
            ((board.width, 0), (board.width, board.height)),
            ((0, board.height), (board.width, board.height)),
        ):
            wall = pymunk.Segment(static_body, a, b, thickness)
            wall.elasticity = self._config.physics.elasticity
            wall.friction = self._config.physics.friction
            wall.collision_type = COLLISION_TYPE_WALL
            self._wall_shapes.append(wall)

        self._space.add(*self._wall_shapes)

    def _on_peg_contact(self, arbiter: pymunk.Arbiter, space: pymunk.Space, data) -> None:
        for shape in arbiter.shapes:
            if shape.collision_type == COLLISION_TYPE_PEG:
                self._last_peg_contact = shape.peg_id

    @property
    def space(self) -> pymunk.Space:
        """The pymunk Space instance."""
        return self._space

    @property
    def peg_count(self) -> int:
        return len(self._peg_shapes)

    @property
    def has_ball(self) -> bool:
        return self._ball_body is not None

    @property
    def last_peg_contact(self) -> Optional[int]:
        """Id of the most recent peg the ball touched, if any."""
        return self._last_peg_contact

    def spawn_ball(
        self,
        x: float,
        y: float,
        radius: float,
        velocity: Tuple[float, float] = (0, 0)
    ) -> None:
        """
        Place a fresh ball at (x, y), replacing any previous one.

        Args:
            x: Centre X coordinate.
            y: Centre Y coordinate.
            radius: Ball radius.
            velocity: Initial velocity (default stationary).
        """
        self.remove_ball()

        mass = self._config.physics.ball_mass
        body = pymunk.Body(mass, pymunk.moment_for_circle(mass, 0, radius))
        body.position = (x, y)
        body.velocity = velocity

        shape = pymunk.Circle(body, radius)
        shape.elasticity = self._config.physics.elasticity
        shape.friction = self._config.physics.friction
        shape.collision_type = COLLISION_TYPE_BALL

        self._space.add(body, shape)
        self._ball_body = body
        self._ball_shape = shape
        self._last_peg_contact = None

    def remove_ball(self) -> None:
        """Remove the ball from the space, if present."""
        if self._ball_body is not None:
            self._space.remove(self._ball_body, self._ball_shape)
        self._ball_body = None
        self._ball_shape = None

    def step(self, dt: Optional[float] = None) -> None:
        """
        Advance physics simulation by one timestep.

        Args:
            dt: Timestep duration. Uses config default if None.
        """
        if dt is None:
            dt = self._config.physics.dt

        substeps = self._config.physics.substeps
        for _ in range(substeps):
            self._space.step(dt / substeps)

    def ball_position(self) -> Tuple[float, float]:
        """Current ball centre."""
        if self._ball_body is None:
            raise RuntimeError("No ball in the physics world")
        return self._ball_body.position.x, self._ball_body.position.y


class PymunkStepper(Stepper):
    """
    Stepper backed by PhysicsWorld.

    Peg deflection and falling both come from the rigid-body step; the
    core copies the resulting position into the round's Ball. Target-slot
    steering is not applied because the engine's bodies are never pushed
    from the outside.
    """

    def __init__(
        self,
        config: GameConfig,
        pegs: Sequence[Peg],
        slots: Sequence[Slot],
        rng: random.Random
    ):
        super().__init__(config, pegs, slots, rng)
        self._world = PhysicsWorld(config, self._pegs)

    @property
    def world(self) -> PhysicsWorld:
        return self._world

    def begin_round(self, state: RoundState) -> None:
        ball = state.ball
        # A ball dropped dead centre on a peg would balance on it forever
        nudge = self._rng.uniform(-SPAWN_JITTER, SPAWN_JITTER)
        self._world.spawn_ball(ball.x, ball.y, ball.radius, velocity=(nudge, 0.0))

    def _deflect(self, state: RoundState) -> None:
        if not self._world.has_ball:
            self.begin_round(state)

        self._world.step()
        state.ball.x, state.ball.y = self._world.ball_position()

        contact = self._world.last_peg_contact
        if contact is not None:
            state.last_peg_hit_id = contact

    def _fall(self, state: RoundState) -> None:
        # Gravity already moved the ball during _deflect
        pass

    def _on_settled(self, state: RoundState) -> None:
        self._world.remove_ball()
