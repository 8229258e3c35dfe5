"""
Round scoring: contract made/failed by trick count, sweep (Çiz) bonus,
surrender, and the zero-trick penalty for either team.
"""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from .bidding import SWEEP
from .deal import Team

SWEEP_MADE_SCORE = 150
SWEEP_LOST_SCORE = -100
SURRENDER_BASE = 14
TRICKS_PER_ROUND = 13


class RoundResult(str, Enum):
    CONTRACT_MADE = "contract_made"
    CONTRACT_FAILED = "contract_failed"
    SWEEP_MADE = "sweep_made"
    SWEEP_FAILED = "sweep_failed"
    BIDDER_SURRENDERED = "bidder_surrendered"
    DEFENDERS_SURRENDERED = "defenders_surrendered"

    @property
    def label(self) -> str:
        return RESULT_LABELS[self]


RESULT_LABELS = {
    RoundResult.CONTRACT_MADE: "Contract made",
    RoundResult.CONTRACT_FAILED: "Contract failed",
    RoundResult.SWEEP_MADE: "Sweep made!",
    RoundResult.SWEEP_FAILED: "Sweep failed, round void",
    RoundResult.BIDDER_SURRENDERED: "Bidding team surrendered",
    RoundResult.DEFENDERS_SURRENDERED: "Defending team surrendered",
}


class TeamScores(NamedTuple):
    """Points for one round, per team."""
    us: int
    them: int

    def for_team(self, team: Team) -> int:
        return self.us if team == Team.US else self.them


def _by_team(bidder_team: Team, bidder_pts: int, other_pts: int) -> TeamScores:
    if bidder_team == Team.US:
        return TeamScores(us=bidder_pts, them=other_pts)
    return TeamScores(us=other_pts, them=bidder_pts)


def score_round(
    bidder_team: Team,
    bid: int,
    bidder_tricks: int,
    other_tricks: int,
) -> tuple[RoundResult, TeamScores]:
    """
    Score a round that was played out (or stopped by a broken sweep).

    - Sweep: +150 / -100 if the bidding team took all 13 tricks, else the
      round is void (0 / 0).
    - Otherwise the bidding team scores its tricks if it reached the bid,
      -bid if not. The other team scores its tricks, or -bid if it took none.
    """
    if bid == SWEEP:
        if bidder_tricks == TRICKS_PER_ROUND:
            return RoundResult.SWEEP_MADE, _by_team(bidder_team, SWEEP_MADE_SCORE, SWEEP_LOST_SCORE)
        return RoundResult.SWEEP_FAILED, TeamScores(0, 0)

    made = bidder_tricks >= bid
    bidder_pts = bidder_tricks if made else -bid
    other_pts = other_tricks if other_tricks > 0 else -bid
    result = RoundResult.CONTRACT_MADE if made else RoundResult.CONTRACT_FAILED
    return result, _by_team(bidder_team, bidder_pts, other_pts)


def score_surrender(
    bidder_team: Team,
    surrendering_team: Team,
    bid: int,
) -> tuple[RoundResult, TeamScores]:
    """The surrendering team loses the bid; the other team gets 14 - bid."""
    conceded = SURRENDER_BASE - bid
    if surrendering_team == bidder_team:
        return RoundResult.BIDDER_SURRENDERED, _by_team(bidder_team, -bid, conceded)
    return RoundResult.DEFENDERS_SURRENDERED, _by_team(bidder_team, conceded, -bid)
