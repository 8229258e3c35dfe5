"""
Heuristic bidding and card play for non-human seats.

- ``evaluate_bid``: scores every candidate trump suit from the hand alone and
  turns the best score into a bid (pass below 8, sweep above 13).
- ``select_move``: picks one legal card. It drains trumps when on the bidding
  team, baits an exposed dummy when defending, cashes master cards, never
  overtakes a winning partner and wins tricks as cheaply as possible.

Card counting relies on a ``CardMemory`` owned by the round.
"""
from __future__ import annotations

import math
from typing import Iterable, NamedTuple, Sequence

from .bidding import MAX_BID, MIN_BID, SWEEP
from .deal import Seat, partner
from .deck import RANK_ACE, RANK_KING, RANK_QUEEN, Card, Suit
from .play import Trick, lead_suit, legal_plays

TRUMPS_PER_DECK = 13

# High-card points for bidding, plus a bonus when the card is in the trump suit.
HONOUR_POINTS = {RANK_ACE: 1.0, RANK_KING: 0.8, RANK_QUEEN: 0.5}
TRUMP_HONOUR_BONUS = 0.2
LONG_SUIT_THRESHOLD = 3
PARTNER_THRESHOLD = 4.0
PARTNER_BONUS = 2.2

BAIT_RANK_LIMIT = 10


class CardMemory:
    """Append-only log of the cards played this round."""

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._played: list[Card] = list(cards)

    def remember(self, card: Card) -> None:
        self._played.append(card)

    def reset(self) -> None:
        self._played.clear()

    @property
    def played(self) -> list[Card]:
        return list(self._played)

    def __len__(self) -> int:
        return len(self._played)

    def __contains__(self, card: object) -> bool:
        return card in self._played

    def count_suit(self, suit: Suit) -> int:
        return sum(1 for c in self._played if c.suit == suit)

    def is_master(self, card: Card) -> bool:
        """True when every higher rank of the card's suit has already been played."""
        played_ranks = {c.rank for c in self._played if c.suit == card.suit}
        return all(rank in played_ranks for rank in range(card.rank + 1, RANK_ACE + 1))


class BidEvaluation(NamedTuple):
    """``bid`` is None for a pass, 8..13, or SWEEP (14)."""
    bid: int | None
    suit: Suit
    points: float


def suit_strength(hand: Sequence[Card], trump: Suit) -> float:
    """Bidding points of ``hand`` assuming ``trump`` is declared."""
    length = sum(1 for c in hand if c.suit == trump)
    points = float(max(0, length - LONG_SUIT_THRESHOLD))
    for c in hand:
        value = HONOUR_POINTS.get(c.rank, 0.0)
        if c.suit == trump:
            value += TRUMP_HONOUR_BONUS
        points += value
    # Partner is expected to bring a couple of tricks to a strong hand.
    if points >= PARTNER_THRESHOLD:
        points += PARTNER_BONUS
    return points


def evaluate_bid(hand: Sequence[Card]) -> BidEvaluation:
    """Best trump suit for ``hand`` and the bid it supports."""
    best_suit = Suit.SPADES
    best_points = 0.0
    for suit in Suit:
        points = suit_strength(hand, suit)
        if points > best_points:
            best_points = points
            best_suit = suit

    value = math.floor(best_points)
    if value < MIN_BID:
        return BidEvaluation(None, best_suit, best_points)
    if value > MAX_BID:
        return BidEvaluation(SWEEP, best_suit, best_points)
    return BidEvaluation(value, best_suit, best_points)


def _lowest(cards: Sequence[Card], trump: Suit | None) -> Card:
    # Equal ranks: keep trumps back.
    return min(cards, key=lambda c: (c.rank, c.suit == trump, int(c.suit)))


def _highest(cards: Sequence[Card]) -> Card:
    return max(cards, key=lambda c: (c.rank, -int(c.suit)))


def _lead(
    hand: Sequence[Card],
    legal: list[Card],
    trump: Suit | None,
    is_bidder: bool,
    dummy_hand: Sequence[Card] | None,
    memory: CardMemory,
) -> Card:
    trumps = [c for c in legal if c.suit == trump]
    if is_bidder and trumps and trump is not None:
        held = sum(1 for c in hand if c.suit == trump)
        if memory.count_suit(trump) + held < TRUMPS_PER_DECK:
            return _highest(trumps)

    if not is_bidder and dummy_hand:
        for suit in Suit:
            if suit == trump:
                continue
            dummy_ranks = {c.rank for c in dummy_hand if c.suit == suit}
            trappable = RANK_KING in dummy_ranks or RANK_QUEEN in dummy_ranks
            if trappable and RANK_ACE not in dummy_ranks:
                baits = [c for c in legal if c.suit == suit and c.rank < BAIT_RANK_LIMIT]
                if baits:
                    return _highest(baits)

    masters = [c for c in legal if memory.is_master(c)]
    if masters:
        return _highest(masters)

    side_cards = [c for c in legal if c.suit != trump]
    if side_cards:
        return _lowest(side_cards, trump)
    return _lowest(legal, trump)


def _follow(
    legal: list[Card],
    trick: Trick,
    trump: Suit | None,
    seat: Seat,
) -> Card:
    led = lead_suit(trick)
    table_trumps = [(p, c) for p, c in trick if trump is not None and c.suit == trump]
    if table_trumps:
        top_seat, top_card = max(table_trumps, key=lambda pc: pc[1].rank)
    else:
        top_seat, top_card = max(((p, c) for p, c in trick if c.suit == led), key=lambda pc: pc[1].rank)
    top_rank = top_card.rank

    if top_seat == partner(seat):
        return _lowest(legal, trump)

    following = led != trump and all(c.suit == led for c in legal)
    if following and (table_trumps or top_rank == RANK_ACE):
        return _lowest(legal, trump)

    if table_trumps:
        winners = [c for c in legal if c.suit == trump and c.rank > top_rank]
    else:
        winners = [c for c in legal if c.suit == led and c.rank > top_rank]
        if not any(c.suit == led for c in legal):
            winners = [c for c in legal if c.suit == trump]
    if winners:
        return _lowest(winners, trump)

    return _lowest(legal, trump)


def select_move(
    hand: Sequence[Card],
    trick: Trick,
    trump: Suit | None,
    seat: Seat,
    is_bidder: bool,
    dummy_hand: Sequence[Card] | None = None,
    memory: CardMemory | None = None,
) -> Card:
    """
    Choose the card ``seat`` plays. ``is_bidder`` is True for both seats of
    the bidding team; ``dummy_hand`` is the exposed partner-of-bidder hand.
    """
    if memory is None:
        memory = CardMemory()
    legal = legal_plays(hand, trick, trump)
    if not legal:
        # Upstream invariant broken; keep the game running.
        return hand[0]
    if len(legal) == 1:
        return legal[0]
    if not trick:
        return _lead(hand, legal, trump, is_bidder, dummy_hand, memory)
    return _follow(legal, trick, trump, seat)
