"""
Bidding (ihale) for 4 players.
First to speak = seat after the dealer; seats raise (8..13), declare the
sweep (Çiz, 14) or pass. A pass is final for the round. When nobody raises,
the deal is forced onto the dealer at 7.
"""
from __future__ import annotations

from typing import Callable, Sequence

from .deal import Seat, first_to_bid, next_player

PASS = None
MIN_BID = 8
MAX_BID = 13
SWEEP = 14
FORCED_BID = 7

NOT_YOUR_TURN = "not your turn to bid"
BIDDING_OVER = "bidding is over"
OUT_OF_RANGE = f"bid must be between {MIN_BID} and {MAX_BID}, or the sweep"
TOO_LOW = "bid must be higher than the current bid"
NOT_A_BID = "bid must be a number or a pass"

BidHistory = list[tuple[Seat, int | None]]


def bid_label(value: int | None) -> str:
    if value is None:
        return "pass"
    if value == SWEEP:
        return "sweep"
    return str(value)


class BiddingResult:
    """Result of the bidding phase."""
    __slots__ = ("owner", "value", "forced", "bids")

    def __init__(self, owner: Seat, value: int, forced: bool, bids: BidHistory):
        self.owner = owner
        self.value = value
        # forced: nobody raised, the dealer was given the minimum
        self.forced = forced
        self.bids = bids

    @property
    def is_sweep(self) -> bool:
        return self.value == SWEEP

    def __repr__(self) -> str:
        return f"BiddingResult(owner={self.owner.label}, value={bid_label(self.value)}, forced={self.forced})"


class BiddingState:
    """
    Turn-by-turn bidding. ``current`` is 0 until a numeric bid is made.
    ``active`` only ever shrinks; ``result`` is set once bidding is decided.
    """

    def __init__(self, dealer: Seat):
        self.dealer = dealer
        self.active: list[Seat] = list(Seat)
        self.turn: Seat = first_to_bid(dealer)
        self.current: int = 0
        self.owner: Seat | None = None
        self.history: BidHistory = []
        self.result: BiddingResult | None = None

    @property
    def done(self) -> bool:
        return self.result is not None

    def rejection(self, seat: Seat, bid: int | None) -> str | None:
        """Reason why ``seat`` may not make ``bid`` now, or None if it may."""
        if self.done:
            return BIDDING_OVER
        if seat != self.turn:
            return NOT_YOUR_TURN
        if bid is PASS:
            return None
        if not isinstance(bid, int) or isinstance(bid, bool):
            return NOT_A_BID
        if bid == SWEEP:
            return None
        if not MIN_BID <= bid <= MAX_BID:
            return OUT_OF_RANGE
        if bid <= self.current:
            return TOO_LOW
        return None

    def legal_bids(self, seat: Seat) -> list[int | None]:
        """Every bid ``seat`` could make right now (PASS first)."""
        candidates: list[int | None] = [PASS, *range(MIN_BID, MAX_BID + 1), SWEEP]
        return [b for b in candidates if self.rejection(seat, b) is None]

    def apply(self, seat: Seat, bid: int | None) -> BiddingResult | None:
        """Apply a bid already accepted by ``rejection``. Returns the result once decided."""
        reason = self.rejection(seat, bid)
        assert reason is None, reason
        self.history.append((seat, bid))

        if bid == SWEEP:
            self.current = SWEEP
            self.owner = seat
            return self._finish(seat, SWEEP, forced=False)

        if bid is PASS:
            self.active.remove(seat)
            if len(self.active) == 1:
                if self.current == 0:
                    # Nobody raised: the dealer carries the hand at the minimum,
                    # whoever the last remaining seat is.
                    self.current = FORCED_BID
                    self.owner = self.dealer
                    return self._finish(self.dealer, FORCED_BID, forced=True)
                self.owner = self.active[0]
                return self._finish(self.active[0], self.current, forced=False)
            self.turn = self._next_active(seat)
            return None

        self.current = bid
        self.owner = seat
        self.turn = self._next_active(seat)
        return None

    def _next_active(self, seat: Seat) -> Seat:
        nxt = next_player(seat)
        while nxt not in self.active:
            nxt = next_player(nxt)
        return nxt

    def _finish(self, owner: Seat, value: int, forced: bool) -> BiddingResult:
        self.result = BiddingResult(owner=owner, value=value, forced=forced, bids=list(self.history))
        self.turn = owner
        return self.result


def run_bidding(
    dealer: Seat,
    get_bid: Callable[[Seat, Sequence[tuple[Seat, int | None]], int], int | None],
) -> BiddingResult:
    """
    Run a whole bidding round. get_bid(seat, history, current_bid) returns a
    bid value, SWEEP or PASS (None). Bidding always ends with an owner.
    """
    state = BiddingState(dealer)
    while True:
        seat = state.turn
        bid = get_bid(seat, list(state.history), state.current)
        reason = state.rejection(seat, bid)
        if reason is not None:
            raise ValueError(f"Illegal bid {bid_label(bid)} by {seat.label}: {reason}")
        result = state.apply(seat, bid)
        if result is not None:
            return result
