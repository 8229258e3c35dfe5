"""
Observation / action encoding for Batak.

Flat observations from one seat's point of view that:
- Represent the seat's **full hand**, card-by-card.
- Show the exposed dummy hand and every card already played, so a model can
  learn the same card counting the heuristics do ("is my King a master?").
- Encode the trick by relative seat, so partner and opponents are told apart.
- Encode the bidding state (current bid, owner, seats still bidding, dealer).

One global action space covers the three decision kinds:

- 0..7   : bids  (PASS, 8, 9, 10, 11, 12, 13, SWEEP)
- 8..11  : trump (Spades, Hearts, Clubs, Diamonds)
- 12..63 : cards (suit-major, rank 2..A)

This module has no RL library dependency; it only turns engine state into
vectors and action indices into engine actions.
"""
from __future__ import annotations

from typing import Iterable, List

from .bidding import MAX_BID, MIN_BID, PASS, SWEEP
from .deal import Seat, seat_order_from, team_of, other_team
from .deck import RANK_MIN, RANKS, Card, Suit, make_card
from .game import Action, BidAction, Phase, PlayAction, RoundState, TrumpAction

NUM_CARDS: int = 52
BID_VALUES: tuple[int | None, ...] = (PASS, *range(MIN_BID, MAX_BID + 1), SWEEP)
NUM_BID_ACTIONS: int = len(BID_VALUES)  # 8
NUM_TRUMP_ACTIONS: int = len(Suit)      # 4
NUM_CARD_ACTIONS: int = NUM_CARDS
TRUMP_OFFSET: int = NUM_BID_ACTIONS
CARD_OFFSET: int = NUM_BID_ACTIONS + NUM_TRUMP_ACTIONS
NUM_ACTIONS: int = CARD_OFFSET + NUM_CARD_ACTIONS  # 8 + 4 + 52 = 64

_PHASES = (Phase.BIDDING, Phase.TRUMP_SELECTION, Phase.PLAYING)
_BID_LEVELS = 9  # none, 7 (forced), 8..13, 14
OBS_SIZE: int = (
    3 * NUM_CARDS     # hand, dummy hand, played cards
    + 4 * NUM_CARDS   # trick, by relative seat
    + 5               # trump (none + 4 suits)
    + len(_PHASES)
    + _BID_LEVELS
    + 4               # bid owner, relative
    + 4               # seats still bidding, relative
    + 4               # dealer, relative
    + 2               # tricks taken by own team / other team, scaled to [0, 1]
)


def _one_hot(index: int | None, size: int) -> List[int]:
    vec = [0] * size
    if index is None:
        return vec
    if 0 <= index < size:
        vec[index] = 1
    return vec


def card_index(card: Card) -> int:
    """Stable index 0..51 matching make_deck_52(): suit-major, then rank 2..14."""
    return int(card.suit) * len(RANKS) + (card.rank - RANK_MIN)


def card_from_index(index: int) -> Card:
    assert 0 <= index < NUM_CARDS
    suit, offset = divmod(index, len(RANKS))
    return make_card(Suit(suit), offset + RANK_MIN)


def encode_card_set(cards: Iterable[Card]) -> List[int]:
    """Binary 52-dim vector for a set of cards: 1 if card is present, else 0."""
    vec = [0] * NUM_CARDS
    for c in cards:
        vec[card_index(c)] = 1
    return vec


def relative_position(seat: Seat, other: Seat) -> int:
    """0 for ``seat`` itself, then 1..3 in play order (2 is always the partner)."""
    return seat_order_from(seat).index(other)


def encode_observation(state: RoundState, seat: Seat) -> List[float]:
    """
    Observation of ``state`` as seen by ``seat``:

    - 52 bits: own hand
    - 52 bits: dummy hand (zeros until bidding is over)
    - 52 bits: cards played this round
    - 4 × 52 bits: current trick, one block per relative seat
    - one-hots: trump, phase, bid level, bid owner, dealer; active-bidder flags
    - 2 scalars: tricks of own team and other team / 13
    """
    hand_vec = encode_card_set(state.hands[seat])
    dummy_vec = encode_card_set(state.dummy_hand or [])
    played_vec = encode_card_set(state.memory.played)

    trick_blocks: List[List[int]] = [[0] * NUM_CARDS for _ in range(4)]
    for player, card in state.trick:
        trick_blocks[relative_position(seat, player)][card_index(card)] = 1

    meta: List[int] = []
    meta.extend(_one_hot(0 if state.trump is None else int(state.trump) + 1, 5))
    meta.extend(_one_hot(_PHASES.index(state.phase) if state.phase in _PHASES else None, len(_PHASES)))
    bid = state.bid_value
    meta.extend(_one_hot(0 if bid == 0 else bid - 6, _BID_LEVELS))
    owner = state.bid_owner
    meta.extend(_one_hot(None if owner is None else relative_position(seat, owner), 4))
    active = [0] * 4
    if state.phase == Phase.BIDDING:
        for s in state.active_bidders:
            active[relative_position(seat, s)] = 1
    meta.extend(active)
    meta.extend(_one_hot(relative_position(seat, state.dealer), 4))

    own = team_of(seat)
    tallies = [state.team_tricks(own) / 13.0, state.team_tricks(other_team(own)) / 13.0]

    vec_int: List[int] = hand_vec + dummy_vec + played_vec
    for block in trick_blocks:
        vec_int.extend(block)
    vec_int.extend(meta)
    obs = [float(x) for x in vec_int] + tallies
    assert len(obs) == OBS_SIZE
    return obs


def bid_action_index(value: int | None) -> int:
    return BID_VALUES.index(value)


def legal_action_mask(state: RoundState, seat: Seat) -> List[bool]:
    """
    Legal-action mask over the global action space for ``seat`` right now.
    All False when the round is not waiting on ``seat``.
    """
    mask = [False] * NUM_ACTIONS
    if state.turn != seat:
        return mask
    if state.phase == Phase.BIDDING:
        for value in state.legal_bids(seat):
            mask[bid_action_index(value)] = True
    elif state.phase == Phase.TRUMP_SELECTION:
        for i in range(NUM_TRUMP_ACTIONS):
            mask[TRUMP_OFFSET + i] = True
    elif state.phase == Phase.PLAYING:
        for card in state.legal_cards(seat):
            mask[CARD_OFFSET + card_index(card)] = True
    return mask


def decode_action(state: RoundState, seat: Seat, action: int) -> Action:
    """Turn a global action index into an engine action stamped with the round generation."""
    if not 0 <= action < NUM_ACTIONS:
        raise ValueError(f"Action index {action} out of range")
    if action < TRUMP_OFFSET:
        return BidAction(seat, BID_VALUES[action], state.generation)
    if action < CARD_OFFSET:
        return TrumpAction(seat, Suit(action - TRUMP_OFFSET), state.generation)
    return PlayAction(seat, card_from_index(action - CARD_OFFSET), state.generation)


def encode_action(action: Action) -> int:
    """Inverse of ``decode_action`` for bid, trump and play actions."""
    if isinstance(action, BidAction):
        return bid_action_index(action.value)
    if isinstance(action, TrumpAction):
        return TRUMP_OFFSET + int(action.suit)
    if isinstance(action, PlayAction):
        return CARD_OFFSET + card_index(action.card)
    raise ValueError(f"Action {action!r} has no index")


__all__ = [
    "NUM_CARDS",
    "NUM_ACTIONS",
    "NUM_BID_ACTIONS",
    "NUM_TRUMP_ACTIONS",
    "NUM_CARD_ACTIONS",
    "OBS_SIZE",
    "BID_VALUES",
    "card_index",
    "card_from_index",
    "encode_card_set",
    "encode_observation",
    "legal_action_mask",
    "decode_action",
    "encode_action",
]
