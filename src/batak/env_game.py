"""
Environment wrapper around the Batak engine for RL.

Design:
- Single-agent view: one learning seat per env instance.
- Episode = one match of N rounds. Reward is given only at the end of the
  match and equals the match total of the learning seat's team.
- At each step, the env exposes a decision point for the learning seat:
  a bid, a trump declaration (when it owns the bid) or a card.
- Other seats are heuristic players. Their decisions and the learner's go
  through the same ``BatakTable.dispatch`` entry point.
"""
from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Dict, List, Optional

from .agents import HeuristicPlayer
from .deal import Seat, Team, team_of
from .env import NUM_ACTIONS, decode_action, encode_observation, legal_action_mask
from .game import BatakTable, Phase, RoundState


@dataclass
class StepResult:
    """Container returned by BatakEnv.step/reset for clarity."""

    obs: List[float]
    reward: float
    done: bool
    info: dict
    legal_actions_mask: List[bool]


class BatakEnv:
    """
    4-player Batak environment (single learning seat, full match episodes).

    Public API (minimal, Gym-like but without external dependency):
      - reset() -> StepResult          # start new match, first decision for learning seat
      - step(action: int) -> StepResult
    """

    def __init__(
        self,
        num_rounds: int = 5,
        learning_seat: Seat = Seat.SOUTH,
        rng: Optional[random.Random] = None,
    ) -> None:
        assert num_rounds > 0
        self.num_rounds = num_rounds
        self.learning_seat = Seat(learning_seat)
        self.rng = rng or random.Random()

        self._table: Optional[BatakTable] = None
        self._rounds_played: int = 0
        self._done: bool = True
        self._opponents: Dict[Seat, HeuristicPlayer] = {
            seat: HeuristicPlayer(seat, plays_dummy=False)
            for seat in Seat
            if seat != self.learning_seat
        }

    @property
    def table(self) -> BatakTable:
        assert self._table is not None, "call reset() first"
        return self._table

    @property
    def state(self) -> RoundState:
        assert self.table.round is not None
        return self.table.round

    # ---- Public API ----

    def reset(self) -> StepResult:
        """Start a new match and return the first decision for the learning seat."""
        self._table = BatakTable(rng=self.rng)
        self._rounds_played = 0
        self._done = False
        self._table.start_round()
        return self._advance()

    def step(self, action: int) -> StepResult:
        """Apply an action for the learning seat at the current decision point."""
        if self._done:
            return self._terminal(reward=0.0)
        state = self.state
        engine_action = decode_action(state, self.learning_seat, action)
        result = self.table.dispatch(engine_action)
        if not result.accepted:
            raise ValueError(f"Invalid action {action} ({engine_action!r}): {result.reason}")
        return self._advance()

    # ---- Internal helpers ----

    def _advance(self) -> StepResult:
        """Let heuristic seats move until the learner must decide or the match ends."""
        while True:
            state = self.state
            if state.phase == Phase.FINISHED:
                self._rounds_played += 1
                if self._rounds_played >= self.num_rounds:
                    self._done = True
                    score = self.table.score.us if team_of(self.learning_seat) == Team.US else self.table.score.them
                    return self._terminal(reward=float(score))
                self.table.start_round()
                continue

            seat = state.turn
            if seat == self.learning_seat:
                return StepResult(
                    obs=encode_observation(state, seat),
                    reward=0.0,
                    done=False,
                    info={
                        "phase": state.phase.value,
                        "round_index": self._rounds_played,
                        "dealer": state.dealer.label,
                    },
                    legal_actions_mask=legal_action_mask(state, seat),
                )

            decision = self._opponents[seat].decide(state)
            assert decision is not None
            result = self.table.dispatch(decision)
            assert result.accepted, result.reason

    def _terminal(self, reward: float) -> StepResult:
        return StepResult(
            obs=[],
            reward=reward,
            done=True,
            info={
                "phase": "done",
                "totals": self.table.score.as_tuple(),
                "rounds_played": self._rounds_played,
            },
            legal_actions_mask=[False] * NUM_ACTIONS,
        )


__all__ = ["StepResult", "BatakEnv"]
