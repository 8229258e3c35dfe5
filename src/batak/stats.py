"""
Per-player statistics across rounds and the league tier they earn.

A ``PlayerStats`` is updated from the ``RoundSummary`` of every finished
round the player sat in. The league is derived from total points only, so it
can go down again after a run of failed contracts.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .deal import Seat, other_team, team_of
from .game import RoundSummary
from .scoring import RoundResult


class League(str, Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    DIAMOND = "DIAMOND"


# Highest threshold first; a player belongs to the first tier it reaches.
LEAGUE_THRESHOLDS: tuple[tuple[League, int], ...] = (
    (League.DIAMOND, 600),
    (League.GOLD, 300),
    (League.SILVER, 100),
)


def league_for_points(points: int) -> League:
    for league, threshold in LEAGUE_THRESHOLDS:
        if points >= threshold:
            return league
    return League.BRONZE


@dataclass
class PlayerStats:
    """Running totals for one player."""

    total_games: int = 0
    wins: int = 0
    sweep_count: int = 0
    total_points: int = 0
    league: League = League.BRONZE

    @property
    def win_rate(self) -> float:
        return self.wins / self.total_games if self.total_games else 0.0


def record_round(stats: PlayerStats, summary: RoundSummary, seat: Seat) -> PlayerStats:
    """
    Fold one finished round into ``stats`` (in place) from ``seat``'s point of view.

    - one more game;
    - a win when the seat's team scored more than the other team this round;
    - a sweep when the seat's team bid the sweep and made it;
    - the team's round score added to total points, league recomputed.
    """
    team = team_of(seat)
    own = summary.score_for(team)
    other = summary.score_for(other_team(team))

    stats.total_games += 1
    if own > other:
        stats.wins += 1
    if summary.result == RoundResult.SWEEP_MADE and summary.bidder_team == team:
        stats.sweep_count += 1
    stats.total_points += own
    stats.league = league_for_points(stats.total_points)
    return stats


__all__ = ["League", "LEAGUE_THRESHOLDS", "league_for_points", "PlayerStats", "record_round"]
