"""
Tests for the pymunk physics backend.
"""

import random

import pytest

from plinko.core.config_loader import BACKEND_PYMUNK
from plinko.core.layout import Peg, generate_layout
from plinko.core.physics_world import PhysicsWorld, PymunkStepper
from plinko.core.session import GameSession
from plinko.core.stepper import Ball, RoundState, make_stepper, PHASE_FALLING


@pytest.fixture
def pymunk_config(config):
    return config.with_backend(BACKEND_PYMUNK)


@pytest.fixture
def world(pymunk_config):
    pegs, _ = generate_layout(pymunk_config)
    return PhysicsWorld(pymunk_config, pegs)


class TestPhysicsWorld:
    """Test space construction and ball lifecycle."""

    def test_pegs_become_static_circles(self, world, pymunk_config):
        expected = pymunk_config.board.columns * pymunk_config.board.rows
        assert world.peg_count == expected

    def test_ball_falls_under_gravity(self, world):
        world.spawn_ball(100, 20, 6)
        _, y0 = world.ball_position()

        for _ in range(10):
            world.step()

        x, y = world.ball_position()
        assert y > y0
        assert x == pytest.approx(100)

    def test_respawn_replaces_ball(self, world):
        world.spawn_ball(100, 20, 6)
        world.spawn_ball(300, 20, 6)
        assert world.ball_position() == (300, 20)
        assert len(world.space.bodies) == 1

    def test_remove_ball(self, world):
        world.spawn_ball(100, 20, 6)
        world.remove_ball()
        assert not world.has_ball
        with pytest.raises(RuntimeError):
            world.ball_position()

    def test_peg_contact_recorded(self, pymunk_config):
        world = PhysicsWorld(pymunk_config, [Peg(100, 100)])
        world.spawn_ball(100, 80, 6)

        for _ in range(60):
            world.step()
            if world.last_peg_contact is not None:
                break

        assert world.last_peg_contact == 0


class TestPymunkStepper:
    """Test the stepper adapter."""

    def test_selected_by_config(self, pymunk_config):
        pegs, slots = generate_layout(pymunk_config)
        stepper = make_stepper(pymunk_config, pegs, slots, random.Random(0))
        assert isinstance(stepper, PymunkStepper)

    def test_position_read_back(self, pymunk_config):
        pegs, slots = generate_layout(pymunk_config)
        stepper = PymunkStepper(pymunk_config, pegs, slots, random.Random(0))
        state = RoundState(ball=Ball(x=100, y=20, radius=6), phase=PHASE_FALLING)
        stepper.begin_round(state)

        result = stepper.step(state)

        assert result.is_falling
        assert result.ball_position == stepper.world.ball_position()
        assert state.ball.y > 20

    def test_session_round_settles(self, pymunk_config):
        session = GameSession(config=pymunk_config, seed=3)
        session.start_round()

        result = session.run_until_settled()

        assert result.is_settled
        assert session.balance == 90 + result.points
        assert not session.stepper.world.has_ball
        assert session.step().is_idle

    def test_consecutive_rounds(self, pymunk_config):
        session = GameSession(config=pymunk_config, seed=4)
        for _ in range(3):
            result = session.play_round()
            assert result.is_settled
        assert session.rounds_played == 3
