"""
Seats, partnerships and the 4 × 13 distribution.
Play goes reverse-clockwise: south -> east -> north -> west -> south.
South+North play as "US", West+East as "THEM".
"""
from __future__ import annotations

import random
from enum import Enum, IntEnum
from typing import NamedTuple

from .deck import Card, make_deck_52, shuffle_deck, sort_hand


class Seat(IntEnum):
    """Fixed seats; the value is also the slice index used when dealing."""
    SOUTH = 0
    WEST = 1
    NORTH = 2
    EAST = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class Team(str, Enum):
    US = "US"
    THEM = "THEM"


# Deal slices: south gets cards 0..12, west 13..25, north 26..38, east 39..51.
DEAL_ORDER = (Seat.SOUTH, Seat.WEST, Seat.NORTH, Seat.EAST)
HAND_SIZE = 13


def next_player(seat: Seat) -> Seat:
    """Reverse-clockwise successor: south -> east -> north -> west -> south."""
    return Seat((seat - 1) % 4)


def partner(seat: Seat) -> Seat:
    """South <-> North, West <-> East."""
    return Seat((seat + 2) % 4)


def team_of(seat: Seat) -> Team:
    return Team.US if seat in (Seat.SOUTH, Seat.NORTH) else Team.THEM


def team_seats(team: Team) -> tuple[Seat, Seat]:
    return (Seat.SOUTH, Seat.NORTH) if team == Team.US else (Seat.WEST, Seat.EAST)


def other_team(team: Team) -> Team:
    return Team.THEM if team == Team.US else Team.US


def seat_order_from(first: Seat) -> list[Seat]:
    """All four seats in play order starting at ``first``."""
    order = [first]
    while len(order) < 4:
        order.append(next_player(order[-1]))
    return order


class Deal(NamedTuple):
    """Result of a deal. Hands are lists indexed by Seat (can be mutated for play)."""
    hands: tuple[list[Card], list[Card], list[Card], list[Card]]  # south, west, north, east
    dealer: Seat


def deal_52(
    deck: list[Card] | None = None,
    rng: random.Random | None = None,
    dealer: Seat = Seat.EAST,
) -> Deal:
    """
    Shuffle and deal 13 cards to each seat in fixed slice order.
    Hands come back in display order (``sort_hand``).
    """
    if deck is None:
        deck = make_deck_52()
    assert len(deck) == 52, "a Batak deal needs the full 52-card deck"
    shuffled = shuffle_deck(deck, rng)
    hands: list[list[Card]] = [[], [], [], []]
    for seat in DEAL_ORDER:
        start = int(seat) * HAND_SIZE
        hands[seat] = sort_hand(shuffled[start:start + HAND_SIZE])
    return Deal(hands=(hands[0], hands[1], hands[2], hands[3]), dealer=dealer)


def next_dealer(dealer: Seat) -> Seat:
    """Dealer rotates in play direction."""
    return next_player(dealer)


def first_to_bid(dealer: Seat) -> Seat:
    """The seat after the dealer speaks first."""
    return next_player(dealer)
