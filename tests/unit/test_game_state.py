import pytest

from hhreplay.engine.enums import ActionType, EventKind, Street
from hhreplay.engine.events import HandEvent
from hhreplay.engine.game_state import compute_replay_state
from hhreplay.engine.hand_parser import parse_hand
from hhreplay.engine.player import Player


def _stacks(state):
    return {p.name: p.current_stack for p in state.players}


def _bets(state):
    return {p.name: p.bet for p in state.players}


class TestHeadsUpFlop:
    """Blinds, a flop and a called bet between two players."""

    @pytest.fixture
    def hand(self, parsed_hand):
        return parsed_hand("heads_up_flop")

    def test_initial_state(self, hand):
        state = compute_replay_state(hand.players, hand.events, -1)
        assert state.index == -1
        assert state.pot == 0
        assert state.street == Street.PREFLOP
        assert state.board == ()
        assert state.last_action == "Hand Started"
        assert _stacks(state) == {"Alice": 10000, "Bob": 10000}

    def test_blinds_go_in_front(self, hand):
        state = compute_replay_state(hand.players, hand.events, 1)
        assert _stacks(state) == {"Alice": 9900, "Bob": 9800}
        assert _bets(state) == {"Alice": 100, "Bob": 200}
        assert state.pot == 0
        assert state.current_bet == 200
        assert state.player("Bob").action == "BB"
        assert state.last_action == "Bob posts BB"
        assert state.last_actor == "Bob"

    def test_flop_sweeps_bets(self, hand):
        state = compute_replay_state(hand.players, hand.events, 2)
        assert state.pot == 300
        assert _bets(state) == {"Alice": 0, "Bob": 0}
        assert state.board == ("Ah", "Kd", "2c")
        assert state.street == Street.FLOP
        assert state.current_bet == 0
        assert all(p.action == "" for p in state.players)

    def test_bet_and_call(self, hand):
        state = compute_replay_state(hand.players, hand.events, 4)
        assert state.pot == 300
        assert _bets(state) == {"Alice": 500, "Bob": 500}
        assert _stacks(state) == {"Alice": 9400, "Bob": 9300}
        assert state.player("Bob").action == "Call"
        assert state.last_action == "calls $5"
        assert state.total_chips() == 20000

    def test_no_hero_without_hole_cards(self, hand):
        state = compute_replay_state(hand.players, hand.events, 4)
        assert state.hero is None
        assert state.hero_facing_bet == 0


class TestShowdownHand:
    """Three-way hand that reaches showdown and pays the winner."""

    @pytest.fixture
    def hand(self, parsed_hand):
        return parsed_hand("showdown")

    def test_preflop_raise_and_hero_facing(self, hand):
        state = compute_replay_state(hand.players, hand.events, 1)
        assert state.hero == "Carol"
        assert state.hero_facing_bet == 200

        state = compute_replay_state(hand.players, hand.events, 2)
        assert state.player("Carol").bet == 600
        assert state.current_bet == 600
        assert state.hero_facing_bet == 0

    def test_fold_marks_inactive(self, hand):
        state = compute_replay_state(hand.players, hand.events, 3)
        alice = state.player("Alice")
        assert not alice.is_active
        assert alice.action == "Fold"
        assert alice.bet == 100

    def test_flop_check_raise(self, hand):
        state = compute_replay_state(hand.players, hand.events, 8)
        assert state.player("Bob").bet == 1800
        assert state.current_bet == 1800
        assert state.hero_facing_bet == 1000

        state = compute_replay_state(hand.players, hand.events, 9)
        assert _stacks(state)["Carol"] == 15600
        assert _stacks(state)["Bob"] == 122650
        assert state.hero_facing_bet == 0

    def test_board_grows_street_by_street(self, hand):
        assert compute_replay_state(hand.players, hand.events, 10).board == ("8s", "7d", "2c", "Kh")
        assert compute_replay_state(hand.players, hand.events, 13).board == ("8s", "7d", "2c", "Kh", "3s")

    def test_showdown_sweeps(self, hand):
        state = compute_replay_state(hand.players, hand.events, 16)
        assert state.street == Street.SHOWDOWN
        assert state.pot == 10900
        assert all(p.bet == 0 for p in state.players)
        assert state.hero_facing_bet == 0

    def test_winner_collects(self, hand):
        state = compute_replay_state(hand.players, hand.events, 17)
        assert state.pot == 0
        assert _stacks(state) == {"Alice": 19900, "Bob": 119650, "Carol": 23500}
        assert state.player("Carol").action == "Win"
        assert state.last_action == "collected $109 from pot"
        assert state.warnings == ()

    def test_to_dict_is_plain_data(self, hand):
        data = compute_replay_state(hand.players, hand.events, 17).to_dict()
        assert data["street"] == "Showdown"
        assert data["pot"] == 0.0
        assert data["players"][2]["current_stack"] == 235.0
        assert data["players"][2]["hole_cards"] == ["Qh", "Qd"]


class TestUncalledBet:
    def test_ignored_refund_leaves_chips_in_pot(self, parsed_hand):
        hand = parsed_hand("uncalled")
        state = compute_replay_state(hand.players, hand.events, len(hand.events) - 1)
        assert state.pot == 450
        assert state.player("Alice").current_stack == 9900
        assert state.total_chips() == 30000

    def test_tracked_refund_returns_bet(self, parsed_hand):
        hand = parsed_hand("uncalled", track_refunds=True)
        refunded = compute_replay_state(hand.players, hand.events, 9)
        alice = refunded.player("Alice")
        assert alice.bet == 0
        assert alice.current_stack == 9700
        assert alice.action == "Uncalled"
        assert refunded.current_bet == 0

        final = compute_replay_state(hand.players, hand.events, 10)
        assert final.pot == 0
        assert final.player("Alice").current_stack == 10350


class TestReducerEdges:
    """Malformed timelines still replay without raising."""

    def test_raise_pays_only_the_difference(self):
        hand = parse_hand(
            "Seat 1: A ($100)\nSeat 2: B ($100)\n"
            "A: posts small blind $1\nB: posts big blind $2\nA: raises $4 to $6"
        )
        state = compute_replay_state(hand.players, hand.events, 2)
        assert state.player("A").current_stack == 9400
        assert state.player("A").bet == 600
        assert state.current_bet == 600

    def test_raise_without_total_moves_no_chips(self):
        hand = parse_hand(
            "Seat 1: A ($100)\nSeat 2: B ($100)\n"
            "A: posts small blind $1\nB: posts big blind $2\nB: raises all-in"
        )
        before = compute_replay_state(hand.players, hand.events, 1)
        after = compute_replay_state(hand.players, hand.events, 2)
        b = after.player("B")
        assert (b.current_stack, b.bet) == (9800, 200)
        assert b.action == "Raise"
        assert after.current_bet == before.current_bet == 200
        assert len(after.warnings) == 1

    def test_raise_not_above_high_bet_moves_no_chips(self):
        hand = parse_hand(
            "Seat 1: A ($100)\nSeat 2: B ($100)\n"
            "A: posts small blind $1\nB: posts big blind $2\nA: raises $1 to $2"
        )
        state = compute_replay_state(hand.players, hand.events, 2)
        assert (state.player("A").current_stack, state.player("A").bet) == (9900, 100)
        assert state.warnings

    def test_ante_goes_straight_to_pot(self):
        players = [Player(seat=1, name="A", initial_stack=1000)]
        events = [HandEvent(kind=EventKind.BLIND, description="Ante", player="A",
                            action=ActionType.ANTE, amount=25)]
        state = compute_replay_state(players, events, 0)
        assert state.pot == 25
        assert state.player("A").bet == 0
        assert state.player("A").current_stack == 975

    def test_overdrawn_stack_is_not_clamped(self):
        hand = parse_hand("Seat 1: A ($1)\nA: bets $5")
        state = compute_replay_state(hand.players, hand.events, 0)
        assert state.player("A").current_stack == -400
        assert len(state.warnings) == 1
        assert state.total_chips() == 100

    def test_collect_more_than_pot_warns(self):
        hand = parse_hand("Seat 1: A ($10)\nSeat 2: B ($10)\nA: bets $2\nB collected $5 from pot")
        state = compute_replay_state(hand.players, hand.events, 1)
        assert state.pot == -300
        assert state.player("B").current_stack == 1500
        assert state.warnings

    def test_unknown_player_is_ignored(self):
        players = [Player(seat=1, name="A", initial_stack=1000)]
        events = [HandEvent(kind=EventKind.ACTION, description="bets $5", player="Zed",
                            action=ActionType.BET, amount=500)]
        state = compute_replay_state(players, events, 0)
        assert state.pot == 0
        assert state.player("A").current_stack == 1000
        assert state.last_action == "Hand Started"

    def test_street_without_cards(self):
        players = [Player(seat=1, name="A", initial_stack=1000)]
        events = [HandEvent(kind=EventKind.STREET, description="Turn Dealt", street=Street.TURN)]
        state = compute_replay_state(players, events, 0)
        assert state.street == Street.TURN
        assert state.board == ()

    def test_inputs_untouched_and_order_free(self, parsed_hand):
        hand = parsed_hand("showdown")
        before = (hand.players, hand.events)
        late = compute_replay_state(hand.players, hand.events, 17)
        early = compute_replay_state(hand.players, hand.events, 2)
        assert compute_replay_state(hand.players, hand.events, 17) == late
        assert compute_replay_state(hand.players, hand.events, 2) == early
        assert (hand.players, hand.events) == before
        assert hand.players[0].initial_stack == 20000


class TestIndexValidation:
    @pytest.mark.parametrize("index", [-2, 5, 100])
    def test_out_of_range(self, parsed_hand, index):
        hand = parsed_hand("heads_up_flop")
        with pytest.raises(IndexError):
            compute_replay_state(hand.players, hand.events, index)

    @pytest.mark.parametrize("index", ["1", 1.0, True, None])
    def test_not_an_int(self, parsed_hand, index):
        hand = parsed_hand("heads_up_flop")
        with pytest.raises(TypeError):
            compute_replay_state(hand.players, hand.events, index)

    def test_empty_timeline(self):
        players = [Player(seat=1, name="A", initial_stack=1000)]
        state = compute_replay_state(players, [], -1)
        assert state.player("A").current_stack == 1000
        with pytest.raises(IndexError):
            compute_replay_state(players, [], 0)
