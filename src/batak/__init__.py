"""Batak game engine (four players, fixed partnerships, dummy hand)."""

__version__ = "0.1.0"

from .deck import Card, Suit, make_deck_52, card_from_label
from .deal import Seat, Team, Deal, deal_52, next_player, partner, team_of, first_to_bid
from .bidding import PASS, SWEEP, BiddingResult, BiddingState, run_bidding
from .play import MoveCheck, validate_move, legal_plays, current_winner, trick_winner
from .scoring import RoundResult, TeamScores, score_round, score_surrender
from .heuristics import CardMemory, evaluate_bid, select_move
from .game import (
    Phase,
    BidAction,
    TrumpAction,
    PlayAction,
    SurrenderAction,
    ActionResult,
    RoundSummary,
    RoundState,
    BatakTable,
    run_round,
    play_one_round,
    run_match,
)
from .stats import League, PlayerStats, record_round
