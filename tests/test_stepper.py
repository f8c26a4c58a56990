"""
Tests for the reference simulation stepper.
"""

import random
from dataclasses import replace

import pytest

from conftest import FixedRandom
from plinko.core.config_loader import ConfigurationError, BACKEND_REFERENCE
from plinko.core.layout import Peg
from plinko.core.slots import build_slots
from plinko.core.stepper import (
    Ball,
    RoundState,
    ReferenceStepper,
    make_stepper,
    PHASE_IDLE,
    PHASE_FALLING,
    PHASE_SETTLED,
)


BALL_RADIUS = 6


@pytest.fixture
def slots(config):
    # Two slots on the default 800x600 board: [0, 400) and [400, 800)
    return build_slots([3, 7], config.board.width, config.board.height, config.slots.height)


def make_state(x, y, phase=PHASE_FALLING, target=None):
    return RoundState(
        ball=Ball(x=x, y=y, radius=BALL_RADIUS),
        phase=phase,
        target_slot_index=target
    )


class TestPhases:
    """Test phase gating."""

    def test_idle_is_noop(self, config, slots):
        stepper = ReferenceStepper(config, [], slots, random.Random(0))
        state = make_state(100, 100, phase=PHASE_IDLE)

        result = stepper.step(state)

        assert result.is_idle
        assert state.ball.position == (100, 100)

    def test_falling_advances_one_tick_step(self, config, slots):
        stepper = ReferenceStepper(config, [], slots, random.Random(0))
        state = make_state(100, 100)

        result = stepper.step(state)

        assert result.is_falling
        assert result.ball_position == (100, 100 + config.ball.tick_step)

    def test_settles_in_slot_and_snaps_to_floor(self, config, slots):
        stepper = ReferenceStepper(config, [], slots, random.Random(0))
        # Bottom edge at 560 only touches the slot top; one more tick overlaps
        state = make_state(200, 554)

        first = stepper.step(state)
        assert first.is_falling
        assert state.ball.y == 555

        second = stepper.step(state)
        assert second.is_settled
        assert second.slot_index == 0
        assert second.points == 3
        assert state.phase == PHASE_SETTLED
        assert state.settled_slot_index == 0
        expected_y = config.board.height - config.slots.thickness - BALL_RADIUS
        assert state.ball.y == expected_y
        assert second.ball_position == (200, expected_y)

    def test_first_matching_slot_wins(self, config, slots):
        stepper = ReferenceStepper(config, [], slots, random.Random(0))
        # Ball box spans the 400 boundary between the two slots
        state = make_state(400, 555)

        result = stepper.step(state)

        assert result.is_settled
        assert result.slot_index == 0
        assert result.points == 3

    def test_settled_is_terminal(self, config, slots):
        stepper = ReferenceStepper(config, [], slots, random.Random(0))
        state = make_state(600, 555)

        assert stepper.step(state).is_settled
        position = state.ball.position
        for _ in range(5):
            assert stepper.step(state).is_idle
        assert state.ball.position == position
        assert state.phase == PHASE_SETTLED

    def test_floor_backstop(self, config):
        # No slots: nothing catches the ball before the floor
        stepper = ReferenceStepper(config, [], [], random.Random(0))
        state = make_state(100, config.board.height - 2 * BALL_RADIUS)

        for _ in range(3):
            result = stepper.step(state)
            assert result.is_falling
        assert state.ball.y == config.board.height - 2 * BALL_RADIUS
        assert state.phase == PHASE_FALLING


class TestDeflection:
    """Test peg contact handling."""

    def test_peg_hit_shifts_by_ball_width(self, config, slots):
        stepper = ReferenceStepper(config, [Peg(100, 100)], slots, FixedRandom(0.1))
        state = make_state(100, 90)

        stepper.step(state)

        assert state.last_peg_hit_id == 0
        assert state.ball.x == 100 + 2 * BALL_RADIUS

    def test_random_sign_can_go_left(self, config, slots):
        stepper = ReferenceStepper(config, [Peg(100, 100)], slots, FixedRandom(0.9))
        state = make_state(100, 90)

        stepper.step(state)

        assert state.ball.x == 100 - 2 * BALL_RADIUS

    def test_same_peg_not_retriggered(self, config, slots):
        stepper = ReferenceStepper(config, [Peg(100, 100)], slots, FixedRandom(0.1))
        # Start offset so the ball still overlaps the peg after its hop
        state = make_state(95, 90)

        stepper.step(state)
        assert state.ball.x == 107
        assert state.ball.box.overlaps(stepper.pegs[0].box)

        stepper.step(state)
        assert state.ball.x == 107
        assert state.last_peg_hit_id == 0

    def test_no_hit_keeps_x(self, config, slots):
        stepper = ReferenceStepper(config, [Peg(300, 300)], slots, FixedRandom(0.1))
        state = make_state(100, 90)

        stepper.step(state)

        assert state.ball.x == 100
        assert state.last_peg_hit_id is None

    def test_reflects_off_left_wall(self, config, slots):
        stepper = ReferenceStepper(config, [Peg(8, 100)], slots, FixedRandom(0.9))
        state = make_state(8, 90)

        stepper.step(state)

        assert state.ball.x == 20

    def test_reflects_off_right_wall(self, config, slots):
        stepper = ReferenceStepper(config, [Peg(792, 100)], slots, FixedRandom(0.1))
        state = make_state(792, 90)

        stepper.step(state)

        assert state.ball.x == 780

    def test_bias_steers_towards_target(self, config, slots):
        # Coin flip says left, but the target slot is to the right
        stepper = ReferenceStepper(config, [Peg(100, 100)], slots, FixedRandom(0.9))
        state = make_state(100, 90, target=1)

        stepper.step(state)

        assert state.ball.x == 112

    def test_bias_steers_left(self, config, slots):
        stepper = ReferenceStepper(config, [Peg(700, 100)], slots, FixedRandom(0.1))
        state = make_state(700, 90, target=0)

        stepper.step(state)

        assert state.ball.x == 688

    def test_centred_on_target_uses_coin_flip(self, config, slots):
        stepper = ReferenceStepper(config, [], slots, FixedRandom(0.9))
        ball = Ball(x=slots[0].center_x, y=0, radius=BALL_RADIUS)
        assert stepper.horizontal_shift(ball, 0) == -2 * BALL_RADIUS

    def test_find_peg_hit_skips_last(self, config, slots):
        pegs = [Peg(100, 100), Peg(104, 100)]
        stepper = ReferenceStepper(config, pegs, slots, random.Random(0))
        box = Ball(x=102, y=100, radius=BALL_RADIUS).box

        assert stepper.find_peg_hit(box) == 0
        assert stepper.find_peg_hit(box, skip_id=0) == 1


class TestMakeStepper:
    """Test backend selection."""

    def test_reference_backend(self, config, slots):
        assert config.physics.backend == BACKEND_REFERENCE
        stepper = make_stepper(config, [], slots, random.Random(0))
        assert isinstance(stepper, ReferenceStepper)

    def test_unknown_backend(self, config, slots):
        bad = replace(config, physics=replace(config.physics, backend="box2d"))
        with pytest.raises(ConfigurationError):
            make_stepper(bad, [], slots, random.Random(0))
