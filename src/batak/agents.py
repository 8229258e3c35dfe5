"""
Decision makers for non-human seats and the generic policy interface.

- ``Policy``: ``act(obs, legal_actions_mask) -> action_index`` over the flat
  observations of ``batak.env``; used by the environment and the ``eval`` command.
- ``RandomAgent``: uniform among legal actions.
- ``HeuristicPlayer``: reads a ``RoundState`` and returns the action a seat
  wants to take, stamped with the round generation so that a decision
  delivered late (after a new round started) is discarded by the engine.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Sequence

from .deal import Seat
from .game import (
    Action,
    BidAction,
    Phase,
    PlayAction,
    RoundState,
    TrumpAction,
    heuristic_bid,
    heuristic_play,
    heuristic_trump,
)


class Policy(Protocol):
    """Stateless or stateful decision policy working on flat observations."""

    def act(self, obs: Sequence[float], legal_actions_mask: Iterable[bool]) -> int:
        """
        Choose an action index given an observation and a boolean legal-action mask.

        Implementations must only return indices where ``legal_actions_mask[i]`` is
        true; callers are free to validate or fall back to a default if needed.
        """


@dataclass
class RandomAgent:
    """
    Baseline policy that samples uniformly among legal actions.

    Usage:
        agent = RandomAgent(seed=42)
        action = agent.act(obs, legal_actions_mask)
    """

    seed: int | None = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def act(self, obs: Sequence[float], legal_actions_mask: Iterable[bool]) -> int:
        """Pick a random legal action given an observation and a boolean mask."""
        legal_indices: List[int] = [i for i, ok in enumerate(legal_actions_mask) if ok]
        if not legal_indices:
            raise ValueError("No legal actions available for RandomAgent")
        return self._rng.choice(legal_indices)


class HeuristicPlayer:
    """
    Rule-of-thumb player for one seat (bid heuristic + card-selection heuristic).

    With ``plays_dummy`` the bid owner also chooses the cards of the exposed
    dummy hand, as at a real table; without it every seat plays its own cards.
    """

    def __init__(self, seat: Seat, plays_dummy: bool = True):
        self.seat = seat
        self.plays_dummy = plays_dummy

    def wants_to_act(self, state: RoundState) -> bool:
        """True when the round is waiting on this seat (or on the dummy it controls)."""
        if state.phase not in (Phase.BIDDING, Phase.TRUMP_SELECTION, Phase.PLAYING):
            return False
        if state.phase == Phase.PLAYING and self.plays_dummy:
            return state.controller_of(state.turn) == self.seat
        return state.turn == self.seat

    def decide(self, state: RoundState) -> Action | None:
        """Action for the seat currently to move, or None if it is not our decision."""
        if not self.wants_to_act(state):
            return None
        seat = state.turn
        if state.phase == Phase.BIDDING:
            return BidAction(seat, heuristic_bid(state, seat), state.generation)
        if state.phase == Phase.TRUMP_SELECTION:
            return TrumpAction(seat, heuristic_trump(state, seat), state.generation)
        return PlayAction(seat, heuristic_play(state, seat), state.generation)


__all__ = ["Policy", "RandomAgent", "HeuristicPlayer"]
