"""
Trick-taking: move validation (the referee) and trick winner.
Batak rules: follow suit and beat the table if you can; void in the led suit,
you must trump; if the trick is already trumped you must overtrump when you
can, otherwise still play a (losing) trump.
"""
from __future__ import annotations

from typing import NamedTuple, Sequence

from .deal import Seat
from .deck import Card, Suit

Trick = Sequence[tuple[Seat, Card]]

MUST_FOLLOW = "must follow suit"
MUST_BEAT = "must beat"
MUST_TRUMP = "must trump"
MUST_OVERTRUMP = "must overtrump"


class MoveCheck(NamedTuple):
    """Verdict of the referee for one proposed card."""
    valid: bool
    reason: str | None = None


def lead_suit(trick: Trick) -> Suit | None:
    """Suit of the first card of the trick, or None for an empty trick."""
    if not trick:
        return None
    return trick[0][1].suit


def highest_of_suit(trick: Trick, suit: Suit) -> int | None:
    """Highest rank of ``suit`` on the table, or None if that suit was not played."""
    ranks = [c.rank for _, c in trick if c.suit == suit]
    return max(ranks) if ranks else None


def is_trumped(trick: Trick, trump: Suit | None) -> bool:
    return trump is not None and any(c.suit == trump for _, c in trick)


def has_suit(hand: Sequence[Card], suit: Suit | None) -> bool:
    return suit is not None and any(c.suit == suit for c in hand)


def can_beat(hand: Sequence[Card], suit: Suit, rank: int) -> bool:
    return any(c.suit == suit and c.rank > rank for c in hand)


def validate_move(
    card: Card,
    hand: Sequence[Card],
    trick: Trick,
    trump: Suit | None,
) -> MoveCheck:
    """
    Check one card against the hand and the cards already on the table.
    trick: list of (seat, card) in play order.
    """
    if not trick:
        return MoveCheck(True)

    led = lead_suit(trick)
    assert led is not None
    trumped = is_trumped(trick, trump)

    if has_suit(hand, led):
        if card.suit != led:
            return MoveCheck(False, MUST_FOLLOW)
        # Once the trick is trumped a led-suit card cannot win; no need to beat.
        if not trumped:
            top = highest_of_suit(trick, led)
            assert top is not None
            if can_beat(hand, led, top) and card.rank <= top:
                return MoveCheck(False, MUST_BEAT)
        return MoveCheck(True)

    if has_suit(hand, trump):
        assert trump is not None
        if card.suit != trump:
            return MoveCheck(False, MUST_TRUMP)
        if trumped:
            top_trump = highest_of_suit(trick, trump)
            assert top_trump is not None
            if can_beat(hand, trump, top_trump) and card.rank <= top_trump:
                return MoveCheck(False, MUST_OVERTRUMP)
        return MoveCheck(True)

    return MoveCheck(True)


def legal_plays(
    hand: Sequence[Card],
    trick: Trick,
    trump: Suit | None,
) -> list[Card]:
    """Cards of ``hand`` the referee accepts for the current trick (hand order)."""
    return [c for c in hand if validate_move(c, hand, trick, trump).valid]


def current_winner(trick: Trick, trump: Suit | None) -> tuple[Seat, Card] | None:
    """
    (seat, card) currently taking a partial or full trick: highest trump if
    any trump was played, else highest card of the led suit.
    """
    if not trick:
        return None
    trumps = [(p, c) for p, c in trick if trump is not None and c.suit == trump]
    if trumps:
        return max(trumps, key=lambda pc: pc[1].rank)
    led = trick[0][1].suit
    followers = [(p, c) for p, c in trick if c.suit == led]
    return max(followers, key=lambda pc: pc[1].rank)


def trick_winner(trick: Trick, trump: Suit | None) -> Seat:
    """
    Seat that wins a complete trick.
    Highest trump wins if trump was played; otherwise highest of the led suit.
    """
    assert len(trick) == 4, f"trick must hold 4 cards to be resolved, got {len(trick)}"
    winner = current_winner(trick, trump)
    assert winner is not None
    return winner[0]
