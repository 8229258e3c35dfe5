"""
Batak deck: 52 cards (4 suits × 13 ranks, 2..A).
Suit order is the display priority: Spades < Hearts < Clubs < Diamonds.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum


class Suit(IntEnum):
    """Maça, Kupa, Sinek, Karo. Value order is the display priority."""
    SPADES = 0
    HEARTS = 1
    CLUBS = 2
    DIAMONDS = 3

    @property
    def symbol(self) -> str:
        return "♠♥♣♦"[self]


# Rank in a suit: 2..10, 11=Vale (J), 12=Kız (Q), 13=Papaz (K), 14=As (A)
RANK_MIN = 2
RANK_JACK = 11
RANK_QUEEN = 12
RANK_KING = 13
RANK_ACE = 14

RANKS = tuple(range(RANK_MIN, RANK_ACE + 1))

_RANK_LABELS = {RANK_JACK: "J", RANK_QUEEN: "Q", RANK_KING: "K", RANK_ACE: "A"}


@dataclass(frozen=True)
class Card:
    """A single playing card; equal cards share suit and rank."""

    suit: Suit
    rank: int  # 2..14

    def __post_init__(self) -> None:
        assert RANK_MIN <= self.rank <= RANK_ACE, f"bad rank {self.rank}"

    @property
    def id(self) -> str:
        """Stable identifier, e.g. ``SPADES-14``."""
        return f"{self.suit.name}-{self.rank}"

    def is_trump(self, trump: Suit | None) -> bool:
        return trump is not None and self.suit == trump

    def __str__(self) -> str:
        rank_str = _RANK_LABELS.get(self.rank) or str(self.rank)
        return f"{rank_str}{self.suit.symbol}"

    def __repr__(self) -> str:
        return str(self)


def make_card(suit: Suit, rank: int) -> Card:
    return Card(suit=suit, rank=rank)


def card_from_label(label: str) -> Card:
    """
    Parse a display label back into a card: ``"A♠"``, ``"10♦"``, ``"QH"``.
    Suit may be given as symbol or as its initial letter (S, H, C, D).
    """
    label = label.strip()
    if len(label) < 2:
        raise ValueError(f"invalid card label {label!r}")
    rank_str, suit_str = label[:-1].upper(), label[-1].upper()
    suit_chars = {"♠": Suit.SPADES, "♥": Suit.HEARTS, "♣": Suit.CLUBS, "♦": Suit.DIAMONDS,
                  "S": Suit.SPADES, "H": Suit.HEARTS, "C": Suit.CLUBS, "D": Suit.DIAMONDS}
    if suit_str not in suit_chars:
        raise ValueError(f"invalid suit in card label {label!r}")
    by_label = {v: k for k, v in _RANK_LABELS.items()}
    if rank_str in by_label:
        rank = by_label[rank_str]
    elif rank_str.isdigit() and RANK_MIN <= int(rank_str) <= 10:
        rank = int(rank_str)
    else:
        raise ValueError(f"invalid rank in card label {label!r}")
    return make_card(suit_chars[suit_str], rank)


def make_deck_52() -> list[Card]:
    """Build the 52-card deck in canonical order (suit, then ascending rank)."""
    deck: list[Card] = []
    for s in Suit:
        for rank in RANKS:
            deck.append(make_card(s, rank))
    return deck


def shuffle_deck(deck: list[Card], rng: random.Random | None = None) -> list[Card]:
    """
    Return a uniformly shuffled copy of ``deck``; the input is left untouched.
    ``random.Random.shuffle`` is a Fisher–Yates shuffle.
    """
    if rng is None:
        rng = random.Random()
    shuffled = list(deck)
    rng.shuffle(shuffled)
    return shuffled


def sort_hand(hand: list[Card]) -> list[Card]:
    """
    Display order: suit priority (Spades, Hearts, Clubs, Diamonds), then
    rank descending. Presentation only; rule code never depends on it.
    """
    return sorted(hand, key=lambda c: (int(c.suit), -c.rank))


def cards_of_suit(cards: list[Card], suit: Suit) -> list[Card]:
    return [c for c in cards if c.suit == suit]
