"""
Game Session
============

Main game orchestrator: owns the board, the player's balance and the
lifecycle of each round (stake, optional outcome pre-selection, ticks until
the ball settles, payout).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from plinko.core.config_loader import (
    GameConfig,
    ConfigurationError,
    LAYOUT_GRID,
    get_config,
)
from plinko.core.layout import Peg, generate_layout
from plinko.core.outcome_selector import OutcomeSelector
from plinko.core.slots import Slot
from plinko.core.stepper import (
    Ball,
    RoundState,
    RoundStepResult,
    Stepper,
    make_stepper,
    PHASE_IDLE,
    PHASE_FALLING,
)


START_OK = "ok"
START_INSUFFICIENT_BALANCE = "insufficient_balance"


@dataclass
class RoundStartResult:
    """Result of trying to start a round."""
    status: str
    balance: int

    @property
    def is_ok(self) -> bool:
        return self.status == START_OK

    @staticmethod
    def ok(balance: int) -> "RoundStartResult":
        return RoundStartResult(START_OK, balance)

    @staticmethod
    def insufficient_balance(balance: int) -> "RoundStartResult":
        return RoundStartResult(START_INSUFFICIENT_BALANCE, balance)


class GameSession:
    """
    One player's game on one board.

    Orchestrates:
    - Peg and slot layout
    - Outcome selection (bias mode)
    - The physics stepper
    - Balance, stake and payouts

    Not safe for concurrent use; a host driving several games should keep
    one session per game.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        debug: bool = False
    ):
        """
        Initialize session.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Ignored if rng is given.
            rng: Injected random source for deflections, outcome draws and
                ball placement.
            debug: If True, print round lifecycle events.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._rng = rng if rng is not None else random.Random(seed)
        self._debug = debug

        self._selector = OutcomeSelector(config)

        self._balance: int = config.session.starting_balance
        self._stake: int = config.session.stake
        self._bias_enabled: bool = config.session.bias_enabled

        self._rounds_played: int = 0
        self._total_staked: int = 0
        self._total_paid: int = 0
        self._last_result: Optional[RoundStepResult] = None
        self._target_pending: bool = False

        self._pegs: List[Peg] = []
        self._slots: List[Slot] = []
        self._stepper: Stepper
        self._round = RoundState(ball=self._idle_ball())
        self._build_board()

        if self._bias_enabled:
            self._refresh_target()

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def stake(self) -> int:
        return self._stake

    @property
    def bias_enabled(self) -> bool:
        return self._bias_enabled

    @property
    def is_ball_moving(self) -> bool:
        return self._round.is_ball_moving

    @property
    def phase(self) -> str:
        """Current round phase: idle, falling or settled."""
        return self._round.phase

    @property
    def target_slot_index(self) -> Optional[int]:
        return self._round.target_slot_index

    @property
    def last_peg_hit_id(self) -> Optional[int]:
        return self._round.last_peg_hit_id

    @property
    def ball(self) -> Ball:
        return self._round.ball

    @property
    def pegs(self) -> List[Peg]:
        return self._pegs

    @property
    def slots(self) -> List[Slot]:
        return self._slots

    @property
    def slot_values(self) -> List[int]:
        return [slot.value for slot in self._slots]

    @property
    def layout_kind(self) -> str:
        return self._config.board.layout_kind

    @property
    def stepper(self) -> Stepper:
        return self._stepper

    @property
    def rounds_played(self) -> int:
        return self._rounds_played

    @property
    def total_staked(self) -> int:
        return self._total_staked

    @property
    def total_paid(self) -> int:
        return self._total_paid

    @property
    def last_result(self) -> Optional[RoundStepResult]:
        """Result of the most recent settled round, if any."""
        return self._last_result

    def _build_board(self) -> None:
        """Regenerate pegs, slots and the stepper from the current config."""
        self._pegs, self._slots = generate_layout(self._config)
        self._stepper = make_stepper(self._config, self._pegs, self._slots, self._rng)

    def _idle_ball(self) -> Ball:
        return Ball(
            x=self._config.board.width / 2,
            y=self._config.ball.start_y,
            radius=self._config.ball.radius
        )

    def _start_x(self) -> float:
        """Random x within the padded bounds for grids, centred for pyramids."""
        board = self._config.board
        if board.layout_kind == LAYOUT_GRID:
            return self._rng.uniform(board.left_pad, board.width - board.right_pad)
        return board.width / 2

    def _refresh_target(self) -> None:
        self._round.target_slot_index = self._selector.select(self.slot_values, self._rng)
        self._target_pending = True
        if self._debug:
            print(f"[DEBUG] Target slot: {self._round.target_slot_index}")

    def start_round(self) -> RoundStartResult:
        """
        Stake a bet and drop a new ball.

        Returns:
            RoundStartResult.ok on success, or insufficient_balance with the
            session left unchanged.
        """
        if self._balance < self._stake:
            if self._debug:
                print(f"[DEBUG] Bet declined: balance={self._balance}, stake={self._stake}")
            return RoundStartResult.insufficient_balance(self._balance)

        self._balance -= self._stake
        self._total_staked += self._stake
        self._rounds_played += 1

        # A target drawn while idle steers exactly one round
        target = None
        if self._bias_enabled:
            target = self._round.target_slot_index
            if target is None or not self._target_pending:
                target = self._selector.select(self.slot_values, self._rng)
        self._target_pending = False

        ball = Ball(
            x=self._start_x(),
            y=self._config.ball.start_y,
            radius=self._config.ball.radius
        )
        self._round = RoundState(
            ball=ball,
            phase=PHASE_FALLING,
            last_peg_hit_id=None,
            target_slot_index=target
        )
        self._stepper.begin_round(self._round)

        if self._debug:
            print(f"[DEBUG] Round {self._rounds_played}: ball at ({ball.x:.1f}, {ball.y:.1f}), "
                  f"target={target}, balance={self._balance}")

        return RoundStartResult.ok(self._balance)

    def step(self) -> RoundStepResult:
        """
        Advance the active round by one tick.

        Returns:
            RoundStepResult; a settled result carries the points already
            added to the balance. Idle once the round is over.
        """
        last_peg = self._round.last_peg_hit_id
        result = self._stepper.step(self._round)

        if self._debug and self._round.last_peg_hit_id != last_peg:
            print(f"[DEBUG] Peg hit: {self._round.last_peg_hit_id}, "
                  f"ball at ({self._round.ball.x:.1f}, {self._round.ball.y:.1f})")

        if result.is_settled:
            self._balance += result.points
            self._total_paid += result.points
            self._last_result = result
            if self._debug:
                print(f"[DEBUG] Settled in slot {result.slot_index}: +{result.points}, "
                      f"balance={self._balance}")

        return result

    def run_until_settled(
        self,
        max_ticks: Optional[int] = None,
        tick_callback: Optional[Callable[[RoundStepResult], None]] = None
    ) -> RoundStepResult:
        """
        Tick until the round ends or the tick cap is hit.

        Args:
            max_ticks: Tick cap. Uses session.max_ticks_per_round if None.
            tick_callback: Optional callback invoked with every tick result.

        Returns:
            The settled result, or the last falling result if the cap was
            reached. Idle if no round was active.
        """
        if max_ticks is None:
            max_ticks = self._config.session.max_ticks_per_round

        result = RoundStepResult.idle()
        for _ in range(max_ticks):
            result = self.step()
            if tick_callback is not None:
                tick_callback(result)
            if not result.is_falling:
                break
        return result

    def play_round(self) -> Optional[RoundStepResult]:
        """Start a round and run it to rest. None if the bet was declined."""
        if not self.start_round().is_ok:
            return None
        return self.run_until_settled()

    def toggle_bias(self) -> bool:
        """
        Flip bias mode.

        Turning bias on draws a target right away so the next round is
        steered; turning it off clears the target.

        Returns:
            The new bias state.
        """
        self._bias_enabled = not self._bias_enabled
        if self._bias_enabled:
            self._refresh_target()
        else:
            self._round.target_slot_index = None
            self._target_pending = False
        return self._bias_enabled

    def set_layout_kind(self, layout_kind: str) -> None:
        """
        Switch board shape, regenerate the layout and return to idle.

        Raises:
            ConfigurationError: If the layout kind is unknown or the new
                layout does not fit the board.
        """
        self._config = self._config.with_layout(layout_kind)
        self._build_board()
        self._round = RoundState(ball=self._idle_ball(), phase=PHASE_IDLE)
        if self._bias_enabled:
            self._refresh_target()

    def set_stake(self, stake: int) -> None:
        """Change the stake for future rounds."""
        if stake <= 0:
            raise ConfigurationError(f"Stake must be positive, got {stake}")
        self._stake = stake

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Restore the starting balance and counters and return to idle.

        Args:
            seed: New random seed. Keeps the current random source if None.
        """
        if seed is not None:
            self._seed = seed
            self._rng.seed(seed)

        self._balance = self._config.session.starting_balance
        self._stake = self._config.session.stake
        self._rounds_played = 0
        self._total_staked = 0
        self._total_paid = 0
        self._last_result = None
        self._round = RoundState(ball=self._idle_ball(), phase=PHASE_IDLE)
        if self._bias_enabled:
            self._refresh_target()

    def get_info(self) -> Dict[str, Any]:
        """Summary counters for hosts and evaluation."""
        return {
            "balance": self._balance,
            "stake": self._stake,
            "rounds_played": self._rounds_played,
            "total_staked": self._total_staked,
            "total_paid": self._total_paid,
            "bias_enabled": self._bias_enabled,
            "layout_kind": self.layout_kind,
            "phase": self.phase,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with board size, pegs, slots and ball state. Entities are
            identified by their index.
        """
        ball = self._round.ball
        return {
            "board_width": self._config.board.width,
            "board_height": self._config.board.height,
            "layout_kind": self.layout_kind,
            "pegs": [
                {"id": i, "x": peg.x, "y": peg.y, "radius": peg.radius}
                for i, peg in enumerate(self._pegs)
            ],
            "slots": [
                {
                    "id": i,
                    "start_x": slot.start_x,
                    "end_x": slot.end_x,
                    "start_y": slot.start_y,
                    "end_y": slot.end_y,
                    "value": slot.value,
                }
                for i, slot in enumerate(self._slots)
            ],
            "ball": {"x": ball.x, "y": ball.y, "radius": ball.radius},
            "phase": self.phase,
            "last_peg_hit_id": self._round.last_peg_hit_id,
            "target_slot_index": self._round.target_slot_index,
            "balance": self._balance,
            "stake": self._stake,
        }
