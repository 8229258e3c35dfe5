"""
Round and match orchestration: deal -> bid -> trump -> play -> score.

``RoundState`` is the authoritative state of one round and the only place it
is mutated. Every inbound action (human or heuristic) goes through
``RoundState.dispatch`` and is checked against round generation, phase and
turn before it is applied; rejected actions leave the state untouched.
``BatakTable`` carries the match (score, dealer rotation, generations).
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, NamedTuple, Union

from .bidding import PASS, SWEEP, BiddingResult, BiddingState, bid_label
from .deal import Deal, Seat, Team, deal_52, next_dealer, next_player, partner, team_of, team_seats
from .deck import Card, Suit
from .heuristics import CardMemory, evaluate_bid, select_move
from .play import legal_plays, trick_winner, validate_move
from .scoring import RoundResult, TeamScores, score_round, score_surrender

log = logging.getLogger(__name__)

STALE_ACTION = "stale action from another round"
NO_ROUND = "no round in progress"
NOT_YOUR_TURN = "not your turn"
CARD_NOT_IN_HAND = "card is not in that hand"
NOT_BID_OWNER = "only the bid owner declares trump"
NOTHING_TO_SURRENDER = "nothing to surrender before the bid is decided"
NOT_A_SUIT = "trump must be one of the four suits"


class Phase(str, Enum):
    IDLE = "idle"
    BIDDING = "bidding"
    TRUMP_SELECTION = "trump_selection"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class BidAction:
    seat: Seat
    value: int | None  # 8..13, SWEEP, or PASS (None)
    generation: int | None = None


@dataclass(frozen=True)
class TrumpAction:
    seat: Seat
    suit: Suit
    generation: int | None = None


@dataclass(frozen=True)
class PlayAction:
    seat: Seat
    card: Card
    generation: int | None = None


@dataclass(frozen=True)
class SurrenderAction:
    seat: Seat
    generation: int | None = None


Action = Union[BidAction, TrumpAction, PlayAction, SurrenderAction]


class ActionResult(NamedTuple):
    accepted: bool
    reason: str | None = None


ACCEPTED = ActionResult(True)


class RoundSummary(NamedTuple):
    """Outcome of a finished round, as shown to players and fed to statistics."""
    bidder: Seat
    bid: int
    trump: Suit | None
    result: RoundResult
    us_score: int
    them_score: int
    tricks: tuple[int, int, int, int]  # per seat: south, west, north, east
    forced: bool = False

    @property
    def result_label(self) -> str:
        return self.result.label

    @property
    def bidder_team(self) -> Team:
        return team_of(self.bidder)

    def score_for(self, team: Team) -> int:
        return self.us_score if team == Team.US else self.them_score


class RoundState:
    """Mutable state for one round: hands, bidding, trump, trick, tallies, memory."""

    def __init__(self, deal: Deal, generation: int = 0):
        self.hands: list[list[Card]] = [list(h) for h in deal.hands]
        self.dealer: Seat = deal.dealer
        self.generation = generation
        self.phase: Phase = Phase.BIDDING
        self.bidding = BiddingState(deal.dealer)
        self.turn: Seat = self.bidding.turn
        self.trump: Suit | None = None
        self.trick: list[tuple[Seat, Card]] = []
        self.last_trick: list[tuple[Seat, Card]] = []
        self.tricks_won: list[int] = [0, 0, 0, 0]
        self.memory = CardMemory()
        self.summary: RoundSummary | None = None

    # ---- Observable state ----

    @property
    def bid_result(self) -> BiddingResult | None:
        return self.bidding.result

    @property
    def bid_owner(self) -> Seat | None:
        return self.bidding.owner

    @property
    def bid_value(self) -> int:
        """Current bid (0 while nobody has raised)."""
        return self.bidding.current

    @property
    def active_bidders(self) -> list[Seat]:
        return list(self.bidding.active)

    @property
    def bidder_team(self) -> Team | None:
        owner = self.bid_owner if self.bidding.done else None
        return team_of(owner) if owner is not None else None

    @property
    def dummy_seat(self) -> Seat | None:
        """Partner of the bid owner; its hand is exposed once bidding is over."""
        if not self.bidding.done:
            return None
        assert self.bid_owner is not None
        return partner(self.bid_owner)

    @property
    def dummy_hand(self) -> list[Card] | None:
        seat = self.dummy_seat
        return list(self.hands[seat]) if seat is not None else None

    def is_bidder(self, seat: Seat) -> bool:
        """True for both seats of the bidding team."""
        team = self.bidder_team
        return team is not None and team_of(seat) == team

    def controller_of(self, seat: Seat) -> Seat:
        """Seat that chooses the cards of ``seat``: the bid owner plays the dummy."""
        if seat == self.dummy_seat:
            assert self.bid_owner is not None
            return self.bid_owner
        return seat

    def team_tricks(self, team: Team) -> int:
        return sum(self.tricks_won[s] for s in team_seats(team))

    def legal_cards(self, seat: Seat) -> list[Card]:
        return legal_plays(self.hands[seat], self.trick, self.trump)

    def legal_bids(self, seat: Seat) -> list[int | None]:
        if self.phase != Phase.BIDDING:
            return []
        return self.bidding.legal_bids(seat)

    # ---- Inbound actions ----

    def submit_bid(self, seat: Seat, value: int | None, generation: int | None = None) -> ActionResult:
        return self.dispatch(BidAction(seat, value, generation))

    def select_trump(self, seat: Seat, suit: Suit, generation: int | None = None) -> ActionResult:
        return self.dispatch(TrumpAction(seat, suit, generation))

    def play_card(self, seat: Seat, card: Card, generation: int | None = None) -> ActionResult:
        return self.dispatch(PlayAction(seat, card, generation))

    def surrender(self, seat: Seat, generation: int | None = None) -> ActionResult:
        return self.dispatch(SurrenderAction(seat, generation))

    def dispatch(self, action: Action) -> ActionResult:
        """Validate ``action`` against the current round and apply it if legal."""
        if action.generation is not None and action.generation != self.generation:
            return self._reject(action, STALE_ACTION)
        if isinstance(action, BidAction):
            return self._on_bid(action)
        if isinstance(action, TrumpAction):
            return self._on_trump(action)
        if isinstance(action, PlayAction):
            return self._on_play(action)
        if isinstance(action, SurrenderAction):
            return self._on_surrender(action)
        raise TypeError(f"Unknown action {action!r}")

    def _reject(self, action: Action, reason: str) -> ActionResult:
        log.debug("round %d: rejected %r: %s", self.generation, action, reason)
        return ActionResult(False, reason)

    def _wrong_phase(self, action: Action) -> ActionResult:
        return self._reject(action, f"{type(action).__name__} not allowed during {self.phase.value}")

    def _on_bid(self, action: BidAction) -> ActionResult:
        if self.phase != Phase.BIDDING:
            return self._wrong_phase(action)
        reason = self.bidding.rejection(action.seat, action.value)
        if reason is not None:
            return self._reject(action, reason)
        result = self.bidding.apply(action.seat, action.value)
        self.turn = self.bidding.turn
        if result is not None:
            log.debug(
                "round %d: %s takes the bid at %s%s",
                self.generation, result.owner.label, bid_label(result.value),
                " (forced)" if result.forced else "",
            )
            self.phase = Phase.TRUMP_SELECTION
        return ACCEPTED

    def _on_trump(self, action: TrumpAction) -> ActionResult:
        if self.phase != Phase.TRUMP_SELECTION:
            return self._wrong_phase(action)
        if action.seat != self.bid_owner:
            return self._reject(action, NOT_BID_OWNER)
        suit = action.suit
        if not isinstance(suit, int) or isinstance(suit, bool) or suit not in {int(s) for s in Suit}:
            return self._reject(action, NOT_A_SUIT)
        self.trump = Suit(suit)
        self.phase = Phase.PLAYING
        # The bid owner leads the first trick whatever the seating.
        self.turn = action.seat
        return ACCEPTED

    def _on_play(self, action: PlayAction) -> ActionResult:
        if self.phase != Phase.PLAYING:
            return self._wrong_phase(action)
        seat, card = action.seat, action.card
        if seat != self.turn:
            return self._reject(action, NOT_YOUR_TURN)
        hand = self.hands[seat]
        if card not in hand:
            return self._reject(action, CARD_NOT_IN_HAND)
        check = validate_move(card, hand, self.trick, self.trump)
        if not check.valid:
            return self._reject(action, check.reason)

        hand.remove(card)
        self.trick.append((seat, card))
        self.memory.remember(card)
        if len(self.trick) < 4:
            self.turn = next_player(seat)
            return ACCEPTED

        self._resolve_trick()
        return ACCEPTED

    def _on_surrender(self, action: SurrenderAction) -> ActionResult:
        if self.phase not in (Phase.TRUMP_SELECTION, Phase.PLAYING):
            if self.phase == Phase.BIDDING:
                return self._reject(action, NOTHING_TO_SURRENDER)
            return self._wrong_phase(action)
        bidder_team = self.bidder_team
        assert bidder_team is not None
        result, scores = score_surrender(bidder_team, team_of(action.seat), self.bid_value)
        self._finish(result, scores)
        return ACCEPTED

    # ---- Trick and round end ----

    def _resolve_trick(self) -> None:
        winner = trick_winner(self.trick, self.trump)
        self.tricks_won[winner] += 1
        self.last_trick = self.trick
        self.trick = []

        owner = self.bid_owner
        assert owner is not None
        if self.bid_value == SWEEP and team_of(winner) != team_of(owner):
            self._finish_by_tricks()
            return
        if all(not h for h in self.hands):
            self._finish_by_tricks()
            return
        self.turn = winner

    def _finish_by_tricks(self) -> None:
        bidder_team = self.bidder_team
        assert bidder_team is not None, "cannot score a round without a bid owner"
        defenders = Team.THEM if bidder_team == Team.US else Team.US
        result, scores = score_round(
            bidder_team,
            self.bid_value,
            self.team_tricks(bidder_team),
            self.team_tricks(defenders),
        )
        self._finish(result, scores)

    def _finish(self, result: RoundResult, scores: TeamScores) -> None:
        assert self.bid_owner is not None
        bid_result = self.bid_result
        self.summary = RoundSummary(
            bidder=self.bid_owner,
            bid=self.bid_value,
            trump=self.trump,
            result=result,
            us_score=scores.us,
            them_score=scores.them,
            tricks=(self.tricks_won[0], self.tricks_won[1], self.tricks_won[2], self.tricks_won[3]),
            forced=bool(bid_result and bid_result.forced),
        )
        self.phase = Phase.FINISHED
        log.info(
            "round %d finished: %s (bidder %s, bid %s) US %+d THEM %+d",
            self.generation, result.label, self.bid_owner.label,
            bid_label(self.bid_value), scores.us, scores.them,
        )


@dataclass
class MatchScore:
    """Running match totals; a void round (failed sweep) adds nothing."""
    us: int = 0
    them: int = 0

    def add(self, summary: RoundSummary) -> None:
        self.us += summary.us_score
        self.them += summary.them_score

    def as_tuple(self) -> tuple[int, int]:
        return (self.us, self.them)


class BatakTable:
    """
    A match at one table: the current round, the match score, the dealer.

    Each ``start_round`` bumps ``generation``; actions stamped with an older
    generation (e.g. a delayed bot decision) are discarded.
    """

    def __init__(self, rng: random.Random | None = None, dealer: Seat = Seat.EAST):
        self.rng = rng or random.Random()
        self.dealer = dealer
        self.generation = 0
        self.score = MatchScore()
        self.round: RoundState | None = None
        self.history: list[RoundSummary] = []

    @property
    def phase(self) -> Phase:
        return self.round.phase if self.round is not None else Phase.IDLE

    def start_round(self, dealer: Seat | None = None, deal: Deal | None = None) -> RoundState:
        """
        Deal a fresh round. Without an explicit dealer the deal passes to the
        next seat (the initial dealer deals the first round).
        """
        if dealer is None:
            dealer = self.dealer if self.round is None else next_dealer(self.dealer)
        if self.round is not None and self.round.phase != Phase.FINISHED:
            log.debug("round %d abandoned in phase %s", self.generation, self.round.phase.value)
        self.dealer = dealer
        self.generation += 1
        if deal is None:
            deal = deal_52(rng=self.rng, dealer=dealer)
        else:
            deal = Deal(hands=deal.hands, dealer=dealer)
        self.round = RoundState(deal, generation=self.generation)
        return self.round

    def submit_bid(self, seat: Seat, value: int | None, generation: int | None = None) -> ActionResult:
        return self.dispatch(BidAction(seat, value, generation))

    def select_trump(self, seat: Seat, suit: Suit, generation: int | None = None) -> ActionResult:
        return self.dispatch(TrumpAction(seat, suit, generation))

    def play_card(self, seat: Seat, card: Card, generation: int | None = None) -> ActionResult:
        return self.dispatch(PlayAction(seat, card, generation))

    def surrender(self, seat: Seat, generation: int | None = None) -> ActionResult:
        return self.dispatch(SurrenderAction(seat, generation))

    def dispatch(self, action: Action) -> ActionResult:
        if self.round is None:
            return ActionResult(False, NO_ROUND)
        state = self.round
        was_finished = state.phase == Phase.FINISHED
        result = state.dispatch(action)
        if result.accepted and not was_finished and state.phase == Phase.FINISHED:
            assert state.summary is not None
            self.score.add(state.summary)
            self.history.append(state.summary)
        return result


# ---- Default (heuristic) decisions ----


def heuristic_bid(state: RoundState, seat: Seat) -> int | None:
    """Sweep when the hand is worth it, raise to the hand's value, else pass."""
    evaluation = evaluate_bid(state.hands[seat])
    if evaluation.bid == SWEEP:
        return SWEEP
    if evaluation.bid is not None and evaluation.bid > state.bid_value:
        return evaluation.bid
    return PASS


def heuristic_trump(state: RoundState, seat: Seat) -> Suit:
    return evaluate_bid(state.hands[seat]).suit


def heuristic_play(state: RoundState, seat: Seat) -> Card:
    return select_move(
        list(state.hands[seat]),
        list(state.trick),
        state.trump,
        seat,
        is_bidder=state.is_bidder(seat),
        dummy_hand=state.dummy_hand,
        memory=state.memory,
    )


BidFn = Callable[[RoundState, Seat], Union[int, None]]
TrumpFn = Callable[[RoundState, Seat], Suit]
PlayFn = Callable[[RoundState, Seat], Card]


def run_round(
    table: BatakTable,
    get_bid: BidFn = heuristic_bid,
    get_trump: TrumpFn = heuristic_trump,
    get_play: PlayFn = heuristic_play,
    dealer: Seat | None = None,
) -> RoundSummary:
    """
    Start and play a full round at ``table``. Decisions go through the same
    validated entry points as human input; an illegal decision raises ValueError.
    """
    state = table.start_round(dealer)
    gen = state.generation

    while state.phase == Phase.BIDDING:
        seat = state.turn
        bid = get_bid(state, seat)
        res = table.submit_bid(seat, bid, generation=gen)
        if not res.accepted:
            raise ValueError(f"Illegal bid {bid_label(bid)} by {seat.label}: {res.reason}")

    if state.phase == Phase.TRUMP_SELECTION:
        seat = state.turn
        suit = get_trump(state, seat)
        res = table.select_trump(seat, suit, generation=gen)
        if not res.accepted:
            raise ValueError(f"Illegal trump {suit!r} by {seat.label}: {res.reason}")

    while state.phase == Phase.PLAYING:
        seat = state.turn
        card = get_play(state, seat)
        res = table.play_card(seat, card, generation=gen)
        if not res.accepted:
            raise ValueError(f"Illegal play {card} by {seat.label}: {res.reason}; legal {state.legal_cards(seat)}")

    assert state.summary is not None
    return state.summary


def play_one_round(
    get_bid: BidFn = heuristic_bid,
    get_trump: TrumpFn = heuristic_trump,
    get_play: PlayFn = heuristic_play,
    dealer: Seat = Seat.EAST,
    rng: random.Random | None = None,
) -> tuple[RoundSummary, RoundState]:
    """Deal, bid and play one round on a fresh table."""
    table = BatakTable(rng=rng, dealer=dealer)
    summary = run_round(table, get_bid, get_trump, get_play, dealer=dealer)
    assert table.round is not None
    return summary, table.round


def run_match(
    num_rounds: int,
    get_bid: BidFn = heuristic_bid,
    get_trump: TrumpFn = heuristic_trump,
    get_play: PlayFn = heuristic_play,
    rng: random.Random | None = None,
    dealer: Seat = Seat.EAST,
) -> tuple[tuple[int, int], list[RoundSummary]]:
    """
    Run a match of ``num_rounds``. The dealer rotates every round.
    Returns ((total_us, total_them), per-round summaries).
    """
    table = BatakTable(rng=rng, dealer=dealer)
    for _ in range(num_rounds):
        run_round(table, get_bid, get_trump, get_play)
    return table.score.as_tuple(), list(table.history)
