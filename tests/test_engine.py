"""Tests for the Batak engine: deck, deal, referee, bidding, scoring, round state."""
import random

import pytest

from batak.bidding import (
    FORCED_BID,
    NOT_A_BID,
    OUT_OF_RANGE,
    PASS,
    SWEEP,
    TOO_LOW,
    BiddingState,
    run_bidding,
)
from batak.deal import Deal, Seat, Team, deal_52, first_to_bid, next_player, partner, team_of
from batak.deck import Card, Suit, card_from_label, make_deck_52, shuffle_deck, sort_hand
from batak.game import (
    CARD_NOT_IN_HAND,
    NOT_BID_OWNER,
    NOT_A_SUIT,
    NOTHING_TO_SURRENDER,
    STALE_ACTION,
    BatakTable,
    Phase,
    heuristic_play,
    play_one_round,
    run_round,
    run_match,
)
from batak.play import (
    MUST_BEAT,
    MUST_FOLLOW,
    MUST_OVERTRUMP,
    MUST_TRUMP,
    current_winner,
    legal_plays,
    trick_winner,
    validate_move,
)
from batak.scoring import RoundResult, TeamScores, score_round, score_surrender


def c(label: str) -> Card:
    return card_from_label(label)


def _segregated_deal() -> Deal:
    """South holds every spade, west every heart, north every club, east every diamond."""
    deck = make_deck_52()
    by_suit = [sort_hand([card for card in deck if card.suit == s]) for s in Suit]
    return Deal(hands=(by_suit[0], by_suit[1], by_suit[2], by_suit[3]), dealer=Seat.EAST)


def _play_first_legal(table: BatakTable) -> None:
    state = table.round
    while state.phase == Phase.PLAYING:
        seat = state.turn
        assert table.play_card(seat, state.legal_cards(seat)[0]).accepted


# ---- Deck and deal ----


def test_deck_52_distinct():
    deck = make_deck_52()
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert {card.id for card in deck} == {f"{s.name}-{r}" for s in Suit for r in range(2, 15)}


def test_shuffle_keeps_cards_and_input():
    deck = make_deck_52()
    shuffled = shuffle_deck(deck, random.Random(5))
    assert deck == make_deck_52()
    assert sorted(shuffled, key=lambda x: (x.suit, x.rank)) == deck


def test_card_labels():
    assert c("A♠") == Card(Suit.SPADES, 14)
    assert c("10d") == Card(Suit.DIAMONDS, 10)
    assert c("QH") == Card(Suit.HEARTS, 12)
    assert str(Card(Suit.CLUBS, 11)) == "J♣"
    with pytest.raises(ValueError):
        card_from_label("1S")
    with pytest.raises(ValueError):
        card_from_label("AX")


def test_deal_produces_disjoint_hands():
    for seed in range(20):
        deal = deal_52(rng=random.Random(seed))
        assert all(len(h) == 13 for h in deal.hands)
        all_cards = [card for h in deal.hands for card in h]
        assert set(all_cards) == set(make_deck_52())
        assert deal.dealer == Seat.EAST


def test_deal_hands_are_sorted_for_display():
    deal = deal_52(rng=random.Random(1))
    for hand in deal.hands:
        assert hand == sort_hand(hand)


def test_seating():
    assert next_player(Seat.SOUTH) == Seat.EAST
    assert next_player(Seat.EAST) == Seat.NORTH
    assert next_player(Seat.NORTH) == Seat.WEST
    assert next_player(Seat.WEST) == Seat.SOUTH
    assert partner(Seat.SOUTH) == Seat.NORTH
    assert partner(Seat.EAST) == Seat.WEST
    assert team_of(Seat.NORTH) == Team.US
    assert team_of(Seat.WEST) == Team.THEM
    assert first_to_bid(Seat.EAST) == Seat.NORTH


# ---- Referee ----


def test_any_card_may_lead():
    hand = [c("2♠"), c("A♥"), c("5♦")]
    assert legal_plays(hand, [], Suit.HEARTS) == hand


def test_must_follow_and_beat():
    trick = [(Seat.SOUTH, c("7♠"))]
    hand = [c("K♠"), c("5♠"), c("3♥")]
    assert validate_move(c("K♠"), hand, trick, Suit.HEARTS).valid
    assert validate_move(c("5♠"), hand, trick, Suit.HEARTS).reason == MUST_BEAT
    assert validate_move(c("3♥"), hand, trick, Suit.HEARTS).reason == MUST_FOLLOW


def test_follow_low_when_unable_to_beat():
    trick = [(Seat.SOUTH, c("7♠"))]
    hand = [c("5♠"), c("2♥")]
    assert legal_plays(hand, trick, Suit.HEARTS) == [c("5♠")]


def test_no_beat_obligation_once_trumped():
    trick = [(Seat.SOUTH, c("7♠")), (Seat.EAST, c("2♥"))]
    hand = [c("5♠"), c("K♠"), c("9♥")]
    assert legal_plays(hand, trick, Suit.HEARTS) == [c("5♠"), c("K♠")]


def test_void_must_trump():
    trick = [(Seat.SOUTH, c("7♠"))]
    hand = [c("2♥"), c("Q♥"), c("3♣")]
    assert validate_move(c("3♣"), hand, trick, Suit.HEARTS).reason == MUST_TRUMP
    assert validate_move(c("2♥"), hand, trick, Suit.HEARTS).valid


def test_must_overtrump_when_able():
    trick = [(Seat.SOUTH, c("7♠")), (Seat.EAST, c("5♥"))]
    hand = [c("2♥"), c("Q♥"), c("3♣")]
    assert validate_move(c("2♥"), hand, trick, Suit.HEARTS).reason == MUST_OVERTRUMP
    assert legal_plays(hand, trick, Suit.HEARTS) == [c("Q♥")]


def test_losing_trump_still_forced():
    trick = [(Seat.SOUTH, c("7♠")), (Seat.EAST, c("A♥"))]
    hand = [c("2♥"), c("3♣")]
    assert legal_plays(hand, trick, Suit.HEARTS) == [c("2♥")]


def test_void_without_trump_plays_anything():
    trick = [(Seat.SOUTH, c("7♠"))]
    hand = [c("3♣"), c("9♦")]
    assert legal_plays(hand, trick, Suit.HEARTS) == hand


def test_validator_soundness_random():
    rng = random.Random(99)
    for _ in range(300):
        deck = shuffle_deck(make_deck_52(), rng)
        hand = deck[:13]
        trick_cards = deck[13:13 + rng.randint(1, 3)]
        trick = [(Seat(i), card) for i, card in enumerate(trick_cards)]
        trump = rng.choice(list(Suit))
        led = trick[0][1].suit
        legal = legal_plays(hand, trick, trump)
        assert legal, "some card is always playable"

        trumped = any(card.suit == trump for _, card in trick)
        if any(card.suit == led for card in hand):
            assert all(card.suit == led for card in legal)
            if not trumped:
                top = max(card.rank for _, card in trick if card.suit == led)
                if any(card.suit == led and card.rank > top for card in hand):
                    assert all(card.rank > top for card in legal)
        elif trumped and any(card.suit == trump for card in hand):
            top_trump = max(card.rank for _, card in trick if card.suit == trump)
            if any(card.suit == trump and card.rank > top_trump for card in hand):
                assert all(card.suit == trump and card.rank > top_trump for card in legal)


# ---- Resolver ----


def test_highest_of_lead_suit_wins():
    trick = [
        (Seat.SOUTH, c("7♠")),
        (Seat.WEST, c("K♠")),
        (Seat.NORTH, c("2♦")),
        (Seat.EAST, c("A♠")),
    ]
    assert trick_winner(trick, Suit.HEARTS) == Seat.EAST


def test_low_trump_beats_everything():
    trick = [
        (Seat.SOUTH, c("7♠")),
        (Seat.WEST, c("K♠")),
        (Seat.NORTH, c("2♦")),
        (Seat.EAST, c("3♥")),
    ]
    assert trick_winner(trick, Suit.HEARTS) == Seat.EAST


def test_off_suit_discard_never_wins():
    trick = [
        (Seat.SOUTH, c("2♠")),
        (Seat.EAST, c("A♦")),
        (Seat.NORTH, c("A♣")),
        (Seat.WEST, c("3♠")),
    ]
    assert trick_winner(trick, Suit.HEARTS) == Seat.WEST


def test_current_winner_partial_trick():
    assert current_winner([], Suit.HEARTS) is None
    trick = [(Seat.SOUTH, c("9♠")), (Seat.EAST, c("4♥"))]
    assert current_winner(trick, Suit.HEARTS) == (Seat.EAST, c("4♥"))


def test_incomplete_trick_cannot_be_resolved():
    with pytest.raises(AssertionError):
        trick_winner([(Seat.SOUTH, c("9♠"))], Suit.HEARTS)


# ---- Bidding ----


def test_bidding_all_pass_forces_dealer():
    result = run_bidding(Seat.EAST, lambda seat, history, current: PASS)
    assert result.owner == Seat.EAST
    assert result.value == FORCED_BID
    assert result.forced
    assert [seat for seat, _ in result.bids] == [Seat.NORTH, Seat.WEST, Seat.SOUTH]


def test_bidding_one_raise():
    def get_bid(seat, history, current):
        return 8 if seat == Seat.NORTH else PASS

    result = run_bidding(Seat.EAST, get_bid)
    assert result.owner == Seat.NORTH
    assert result.value == 8
    assert not result.forced


def test_bidding_skips_passed_seats():
    state = BiddingState(Seat.EAST)
    assert state.turn == Seat.NORTH
    state.apply(Seat.NORTH, 8)
    state.apply(Seat.WEST, PASS)
    state.apply(Seat.SOUTH, 9)
    state.apply(Seat.EAST, PASS)
    state.apply(Seat.NORTH, 10)
    assert state.turn == Seat.SOUTH
    result = state.apply(Seat.SOUTH, PASS)
    assert result is not None
    assert result.owner == Seat.NORTH
    assert result.value == 10
    assert state.turn == Seat.NORTH


def test_bidding_rejections():
    state = BiddingState(Seat.EAST)
    assert state.rejection(Seat.SOUTH, 8) is not None
    assert state.rejection(Seat.NORTH, 7) == OUT_OF_RANGE
    assert state.rejection(Seat.NORTH, 15) == OUT_OF_RANGE
    state.apply(Seat.NORTH, 10)
    assert state.rejection(Seat.WEST, 10) == TOO_LOW
    assert state.legal_bids(Seat.WEST) == [PASS, 11, 12, 13, SWEEP]


def test_sweep_ends_bidding_immediately():
    state = BiddingState(Seat.EAST)
    result = state.apply(Seat.NORTH, SWEEP)
    assert result is not None
    assert result.is_sweep
    assert result.owner == Seat.NORTH
    assert state.done


def test_bid_monotonic_random():
    rng = random.Random(4)
    for _ in range(50):
        seen: list[int] = []

        def get_bid(seat, history, current):
            seen.append(current)
            options = [PASS] + [v for v in range(8, 14) if v > current]
            return rng.choice(options)

        result = run_bidding(rng.choice(list(Seat)), get_bid)
        assert seen == sorted(seen)
        assert result.forced or result.value >= max(seen)


def test_run_bidding_rejects_illegal_bid():
    with pytest.raises(ValueError):
        run_bidding(Seat.EAST, lambda seat, history, current: 5)


# ---- Scoring ----


def test_contract_made_with_zero_trick_penalty():
    result, scores = score_round(Team.US, 9, 9, 0)
    assert result == RoundResult.CONTRACT_MADE
    assert scores == TeamScores(us=9, them=-9)


def test_contract_failed():
    result, scores = score_round(Team.THEM, 10, 8, 5)
    assert result == RoundResult.CONTRACT_FAILED
    assert scores == TeamScores(us=5, them=-10)


def test_sweep_made_and_failed():
    result, scores = score_round(Team.THEM, SWEEP, 13, 0)
    assert result == RoundResult.SWEEP_MADE
    assert scores == TeamScores(us=-100, them=150)

    result, scores = score_round(Team.US, SWEEP, 5, 1)
    assert result == RoundResult.SWEEP_FAILED
    assert scores == TeamScores(0, 0)


def test_surrender_scoring():
    result, scores = score_surrender(Team.US, Team.US, 10)
    assert result == RoundResult.BIDDER_SURRENDERED
    assert scores == TeamScores(us=-10, them=4)

    result, scores = score_surrender(Team.US, Team.THEM, 10)
    assert result == RoundResult.DEFENDERS_SURRENDERED
    assert scores == TeamScores(us=4, them=-10)


# ---- Round state machine ----


def test_round_starts_in_bidding():
    table = BatakTable(rng=random.Random(0))
    assert table.phase == Phase.IDLE
    state = table.start_round()
    assert state.phase == Phase.BIDDING
    assert state.turn == Seat.NORTH
    assert state.dealer == Seat.EAST
    assert state.dummy_hand is None


def test_dealer_rotates_between_rounds():
    table = BatakTable(rng=random.Random(0))
    assert table.start_round().dealer == Seat.EAST
    assert table.start_round().dealer == Seat.NORTH
    assert table.start_round().dealer == Seat.WEST


def test_stale_action_is_discarded():
    table = BatakTable(rng=random.Random(0))
    old = table.start_round()
    old_generation = old.generation
    state = table.start_round()
    res = table.submit_bid(state.turn, PASS, generation=old_generation)
    assert not res.accepted
    assert res.reason == STALE_ACTION
    assert state.bidding.history == []


def test_wrong_turn_and_wrong_phase_rejected():
    table = BatakTable(rng=random.Random(0))
    state = table.start_round()
    assert not table.submit_bid(Seat.SOUTH, 8).accepted
    card = state.hands[Seat.NORTH][0]
    res = table.play_card(Seat.NORTH, card)
    assert not res.accepted
    assert "bidding" in res.reason
    assert table.surrender(Seat.NORTH).reason == NOTHING_TO_SURRENDER
    assert state.phase == Phase.BIDDING


def test_unknown_action_type_raises():
    class Bogus:
        seat = Seat.SOUTH
        generation = None

    table = BatakTable(rng=random.Random(0))
    state = table.start_round()
    with pytest.raises(TypeError):
        state.dispatch(Bogus())


def test_forced_bid_round_with_zero_trick_penalty():
    table = BatakTable()
    state = table.start_round(deal=_segregated_deal())
    for seat in (Seat.NORTH, Seat.WEST, Seat.SOUTH):
        assert table.submit_bid(seat, PASS).accepted
    assert state.phase == Phase.TRUMP_SELECTION
    assert state.bid_owner == Seat.EAST
    assert state.bid_value == FORCED_BID
    assert state.turn == Seat.EAST

    assert table.select_trump(Seat.WEST, Suit.DIAMONDS).reason == NOT_BID_OWNER
    assert table.select_trump(Seat.EAST, Suit.DIAMONDS).accepted
    assert state.phase == Phase.PLAYING
    assert state.turn == Seat.EAST
    assert state.dummy_seat == Seat.WEST
    assert state.controller_of(Seat.WEST) == Seat.EAST
    assert state.is_bidder(Seat.WEST) and not state.is_bidder(Seat.SOUTH)

    _play_first_legal(table)
    summary = state.summary
    assert summary is not None
    assert summary.result == RoundResult.CONTRACT_MADE
    assert summary.forced
    assert summary.tricks == (0, 0, 0, 13)
    assert (summary.us_score, summary.them_score) == (-FORCED_BID, 13)
    assert table.score.as_tuple() == (-FORCED_BID, 13)


def test_card_not_in_hand_rejected():
    table = BatakTable()
    state = table.start_round(deal=_segregated_deal())
    table.submit_bid(Seat.NORTH, 8)
    for seat in (Seat.WEST, Seat.SOUTH, Seat.EAST):
        table.submit_bid(seat, PASS)
    table.select_trump(Seat.NORTH, Suit.CLUBS)
    assert table.play_card(Seat.NORTH, c("A♠")).reason == CARD_NOT_IN_HAND
    assert len(state.hands[Seat.NORTH]) == 13


def test_malformed_bid_and_trump_are_rejected():
    table = BatakTable()
    state = table.start_round(deal=_segregated_deal())
    assert table.submit_bid(Seat.NORTH, "PASS").reason == NOT_A_BID
    assert table.submit_bid(Seat.NORTH, True).reason == NOT_A_BID
    assert state.bidding.history == []
    table.submit_bid(Seat.NORTH, 8)
    for seat in (Seat.WEST, Seat.SOUTH, Seat.EAST):
        table.submit_bid(seat, PASS)
    assert table.select_trump(Seat.NORTH, 9).reason == NOT_A_SUIT
    assert table.select_trump(Seat.NORTH, "clubs").reason == NOT_A_SUIT
    assert state.phase == Phase.TRUMP_SELECTION
    assert table.select_trump(Seat.NORTH, Suit.CLUBS).accepted


def test_sweep_made_scores_150():
    table = BatakTable()
    state = table.start_round(deal=_segregated_deal())
    assert table.submit_bid(Seat.NORTH, SWEEP).accepted
    assert table.select_trump(Seat.NORTH, Suit.CLUBS).accepted
    _play_first_legal(table)
    assert state.summary.result == RoundResult.SWEEP_MADE
    assert (state.summary.us_score, state.summary.them_score) == (150, -100)


def test_broken_sweep_ends_round_at_once():
    table = BatakTable()
    state = table.start_round(deal=_segregated_deal())
    table.submit_bid(Seat.NORTH, SWEEP)
    table.select_trump(Seat.NORTH, Suit.HEARTS)
    table.play_card(Seat.NORTH, c("2♣"))
    # West is void in clubs and holds every heart: it must trump and takes the trick.
    assert table.play_card(Seat.WEST, c("2♥")).accepted
    table.play_card(Seat.SOUTH, c("2♠"))
    table.play_card(Seat.EAST, c("2♦"))
    assert state.phase == Phase.FINISHED
    assert state.summary.result == RoundResult.SWEEP_FAILED
    assert state.summary.tricks == (0, 1, 0, 0)
    assert table.score.as_tuple() == (0, 0)


def test_surrender_after_bid_counts_once():
    table = BatakTable()
    state = table.start_round(deal=_segregated_deal())
    table.submit_bid(Seat.NORTH, 10)
    for seat in (Seat.WEST, Seat.SOUTH, Seat.EAST):
        table.submit_bid(seat, PASS)
    assert table.surrender(Seat.SOUTH).accepted
    assert state.summary.result == RoundResult.BIDDER_SURRENDERED
    assert table.score.as_tuple() == (-10, 4)
    assert not table.surrender(Seat.SOUTH).accepted
    assert table.score.as_tuple() == (-10, 4)
    assert len(table.history) == 1


def test_new_round_resets_memory_and_tallies():
    table = BatakTable(rng=random.Random(8))
    run_round(table)
    old = table.round
    assert len(old.memory) == 52 or old.summary.result == RoundResult.SWEEP_FAILED
    fresh = table.start_round()
    assert fresh is not old
    assert len(fresh.memory) == 0
    assert fresh.tricks_won == [0, 0, 0, 0]
    assert fresh.trump is None
    assert fresh.generation == old.generation + 1


def test_play_one_round_returns_finished_state():
    summary, state = play_one_round(rng=random.Random(8))
    assert state.phase == Phase.FINISHED
    assert state.summary == summary
    assert state.dealer == Seat.EAST


def test_heuristic_match_plays_only_legal_cards():
    def checked_play(state, seat):
        card = heuristic_play(state, seat)
        assert card in state.legal_cards(seat)
        return card

    for seed in range(5):
        (us, them), summaries = run_match(4, get_play=checked_play, rng=random.Random(seed))
        assert len(summaries) == 4
        assert us == sum(s.us_score for s in summaries)
        assert them == sum(s.them_score for s in summaries)
        for s in summaries:
            if s.result in (RoundResult.CONTRACT_MADE, RoundResult.CONTRACT_FAILED):
                assert sum(s.tricks) == 13
                bidder_tricks = sum(s.tricks[seat] for seat in Seat if team_of(seat) == s.bidder_team)
                expected = score_round(s.bidder_team, s.bid, bidder_tricks, 13 - bidder_tricks)
                assert expected == (s.result, TeamScores(s.us_score, s.them_score))
