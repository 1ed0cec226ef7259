"""
Tests for the reducer (state transitions).

Tests:
- Card selection and the phase machine
- Moves, entries and winning
- Portals (claim, choice, steal)
- Turn flow, hotseat gating and reset
- Rejections leave the state untouched
"""

import pytest

from ..engine_core.action import Action, ActionType, ActionPayload
from ..engine_core.board import CENTER, PlayerColor, Position
from ..engine_core.reducer import (
    INVALID_ACTION,
    NO_HANDLER,
    Reducer,
    apply_action,
    game_reducer,
)
from ..engine_core.state import GamePhase, LogAction, SupportType
from .conftest import add_support, place, place_at_index, red_cell, select

RED_HERO = "player-0-hero"
BLUE_HERO = "player-1-hero"


class TestCardSelection:
    """Tests for SELECT_CARD / UNSELECT_CARD."""

    def test_select_card(self, two_player_state):
        card = two_player_state.get_hand("player-0").cards[1]
        result = apply_action(two_player_state, Action.select_card(card.card_id))

        assert result.success
        assert result.new_state.selected_card == card
        assert result.new_state.phase == GamePhase.SELECT_ACTION

    def test_reselect_from_select_action(self, two_player_state):
        hand = two_player_state.get_hand("player-0")
        state = game_reducer(two_player_state, Action.select_card(hand.cards[0].card_id))
        state = game_reducer(state, Action.select_card(hand.cards[2].card_id))

        assert state.selected_card == hand.cards[2]
        assert state.phase == GamePhase.SELECT_ACTION

    def test_select_card_not_in_hand(self, two_player_state):
        other = two_player_state.get_hand("player-1").cards[0]
        result = apply_action(two_player_state, Action.select_card(other.card_id))

        assert not result.success
        assert result.error_code == INVALID_ACTION

    def test_unselect(self, two_player_state):
        state = select(two_player_state, 3)
        result = apply_action(state, Action.unselect_card())

        assert result.success
        assert result.new_state.selected_card is None
        assert result.new_state.phase == GamePhase.SELECT_CARD

    def test_unselect_without_selection(self, two_player_state):
        assert not apply_action(two_player_state, Action.unselect_card()).success


class TestMovePiece:
    """Tests for MOVE_PIECE."""

    def test_move_consumes_card_and_ends_turn(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 3)
        state = select(state, 2)
        played = state.selected_card

        result = apply_action(state, Action.move_piece(RED_HERO))

        assert result.success
        new_state = result.new_state
        assert new_state.get_piece(RED_HERO).path_index == 5
        hand = new_state.get_hand("player-0")
        assert played not in hand.cards
        assert played in hand.discard
        assert len(hand.cards) == 3
        assert new_state.current_player_id == "player-1"
        assert new_state.phase == GamePhase.SELECT_CARD
        assert new_state.turn_number == state.turn_number + 1
        assert new_state.log[-1].action == LogAction.MOVED
        assert new_state.log[-1].card_value == 2

    def test_intercepted_support_is_removed(self, four_player_state):
        """An enemy Blocker stops a support as it would a hero; the card is still spent."""
        escort_id = "player-0-escort-test"
        state = add_support(four_player_state, "player-0", SupportType.ESCORT, red_cell(2))
        state = add_support(state, "player-1", SupportType.BLOCKER, red_cell(4))
        state = select(state, 4)
        played = state.selected_card

        result = apply_action(state, Action.move_piece(escort_id))

        assert result.success
        new_state = result.new_state
        assert new_state.get_piece(escort_id) is None
        roster = new_state.get_roster("player-0")
        assert SupportType.ESCORT in roster.available
        assert roster.on_field == ()
        assert new_state.get_piece("player-1-blocker-test").position == red_cell(4)
        hand = new_state.get_hand("player-0")
        assert len(hand.cards) == 3
        assert played in hand.discard
        assert new_state.current_player_id == "player-1"
        assert new_state.log[-1].action == LogAction.INTERCEPTED

    def test_move_without_card(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 3)
        assert not apply_action(state, Action.move_piece(RED_HERO)).success

    def test_move_opponent_piece(self, two_player_state):
        state = place_at_index(two_player_state, BLUE_HERO, 3)
        state = select(state, 2)
        assert not apply_action(state, Action.move_piece(BLUE_HERO)).success

    def test_exact_count_wins(self, two_player_state):
        """A hero at index 45 playing a 3 reaches the center and wins."""
        state = place_at_index(two_player_state, RED_HERO, 45)
        state = select(state, 3)

        result = apply_action(state, Action.move_piece(RED_HERO))

        assert result.success
        new_state = result.new_state
        assert new_state.phase == GamePhase.GAME_OVER
        assert new_state.winner == "player-0"
        hero = new_state.get_piece(RED_HERO)
        assert hero.is_finished
        assert hero.position == CENTER
        assert new_state.log[-1].action == LogAction.FINISHED

    def test_overshoot_rejected(self, two_player_state):
        """A hero at index 46 playing a 5 is rejected; nothing changes."""
        state = place_at_index(two_player_state, RED_HERO, 46)
        state = select(state, 5)

        result = apply_action(state, Action.move_piece(RED_HERO))

        assert not result.success
        assert result.new_state is state
        assert result.new_state.phase == GamePhase.SELECT_ACTION

    def test_no_actions_after_game_over(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 45)
        state = game_reducer(select(state, 3), Action.move_piece(RED_HERO))

        for action in (Action.end_turn(), Action.refresh_hand(), Action.start_turn()):
            result = apply_action(state, action)
            assert not result.success
            assert result.new_state is state


class TestEnterPiece:
    """Tests for ENTER_PIECE."""

    def test_enter_at_start(self, two_player_state):
        state = select(two_player_state, 1)
        result = apply_action(state, Action.enter_piece(RED_HERO))

        assert result.success
        hero = result.new_state.get_piece(RED_HERO)
        assert hero.position == Position(0, 3)
        assert hero.path_index == 0
        assert result.new_state.log[-1].action == LogAction.ENTERED

    def test_enter_blocked_by_opponent_on_start(self, two_player_state):
        state = place(two_player_state, BLUE_HERO, Position(0, 3))
        state = select(state, 1)
        assert not apply_action(state, Action.enter_piece(RED_HERO)).success

    def test_enter_next_to_own_support(self, two_player_state):
        state = add_support(two_player_state, "player-0", SupportType.ESCORT, Position(0, 3))
        state = select(state, 1)
        result = apply_action(state, Action.enter_piece(RED_HERO))
        assert result.success
        assert len(result.new_state.pieces_at(Position(0, 3))) == 2

    def test_enter_through_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.RED: Position(1, 1)})
        state = select(state, 1)

        result = apply_action(state, Action.enter_piece(RED_HERO, use_portal=True))

        assert result.success
        hero = result.new_state.get_piece(RED_HERO)
        assert hero.position == Position(1, 1)
        assert hero.path_index == 26

    def test_enter_through_occupied_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.RED: Position(1, 1)})
        state = add_support(state, "player-0", SupportType.ESCORT, Position(1, 1))
        state = select(state, 1)
        assert not apply_action(state, Action.enter_piece(RED_HERO, use_portal=True)).success

    def test_enter_without_portal(self, two_player_state):
        state = select(two_player_state, 1)
        assert not apply_action(state, Action.enter_piece(RED_HERO, use_portal=True)).success

    def test_enter_piece_already_on_board(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 3)
        state = select(state, 1)
        assert not apply_action(state, Action.enter_piece(RED_HERO)).success


class TestPortals:
    """Tests for claiming, choosing and stealing portals."""

    def test_first_portal_is_claimed_automatically(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 24)
        state = select(state, 2)

        new_state = game_reducer(state, Action.move_piece(RED_HERO))

        assert new_state.claimed_portals == {PlayerColor.RED: Position(1, 1)}
        assert new_state.current_player_id == "player-1"
        assert new_state.log[-1].action == LogAction.CLAIMED

    def test_second_portal_offers_choice(self, two_player_state):
        """Landing on an unclaimed portal while owning one asks first."""
        state = two_player_state._copy_with(claimed_portals={PlayerColor.RED: Position(1, 1)})
        state = place_at_index(state, RED_HERO, 28)
        state = select(state, 2)

        new_state = game_reducer(state, Action.move_piece(RED_HERO))

        assert new_state.phase == GamePhase.PORTAL_CHOICE
        assert new_state.pending_portal == Position(5, 1)
        assert new_state.current_player_id == "player-0"
        assert new_state.selected_card is None

    def test_skip_keeps_old_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.RED: Position(1, 1)})
        state = place_at_index(state, RED_HERO, 28)
        state = game_reducer(select(state, 2), Action.move_piece(RED_HERO))
        log_length = len(state.log)

        result = apply_action(state, Action.skip_portal())

        assert result.success
        assert result.new_state.claimed_portals == {PlayerColor.RED: Position(1, 1)}
        assert result.new_state.pending_portal is None
        assert result.new_state.current_player_id == "player-1"
        assert len(result.new_state.log) == log_length

    def test_claim_replaces_old_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.RED: Position(1, 1)})
        state = place_at_index(state, RED_HERO, 28)
        state = game_reducer(select(state, 2), Action.move_piece(RED_HERO))

        new_state = game_reducer(state, Action.claim_portal())

        assert new_state.claimed_portals == {PlayerColor.RED: Position(5, 1)}
        assert new_state.log[-1].action == LogAction.CLAIMED
        assert new_state.current_player_id == "player-1"

    def test_landing_on_someone_elses_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(1, 1)})
        state = place_at_index(state, RED_HERO, 24)

        new_state = game_reducer(select(state, 2), Action.move_piece(RED_HERO))

        assert new_state.claimed_portals == {PlayerColor.BLUE: Position(1, 1)}
        assert new_state.phase == GamePhase.SELECT_CARD

    def test_claim_outside_portal_choice(self, two_player_state):
        assert not apply_action(two_player_state, Action.claim_portal()).success
        assert not apply_action(two_player_state, Action.skip_portal()).success

    def test_steal_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(5, 5)})
        state = place(state, RED_HERO, Position(5, 5))
        state = select(state, 1)

        result = apply_action(state, Action.steal_portal(Position(5, 5)))

        assert result.success
        assert result.new_state.claimed_portals == {PlayerColor.RED: Position(5, 5)}
        entry = result.new_state.log[-1]
        assert entry.action == LogAction.STOLE
        assert entry.target_player == "CPU 1"
        assert result.new_state.current_player_id == "player-1"

    def test_steal_needs_a_piece_on_the_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(5, 5)})
        state = select(state, 1)
        assert not apply_action(state, Action.steal_portal(Position(5, 5))).success

    def test_third_color_on_the_portal_does_not_count(self, four_player_state):
        state = four_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(5, 5)})
        state = place(state, "player-2-hero", Position(5, 5))
        state = select(state, 1)

        result = apply_action(state, Action.steal_portal(Position(5, 5)))

        assert not result.success
        assert result.new_state is state

    def test_cannot_steal_own_portal(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.RED: Position(5, 5)})
        state = place(state, RED_HERO, Position(5, 5))
        state = select(state, 1)
        assert not apply_action(state, Action.steal_portal(Position(5, 5))).success

    def test_steal_only_in_select_action(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(5, 5)})
        state = place(state, RED_HERO, Position(5, 5))
        assert not apply_action(state, Action.steal_portal(Position(5, 5))).success


class TestPusher:
    """Tests for ACTIVATE_PUSHER / EXECUTE_PUSH / CANCEL_ABILITY."""

    @pytest.fixture
    def pusher_state(self, two_player_state):
        state = add_support(two_player_state, "player-0", SupportType.PUSHER, Position(5, 5))
        return place(state, BLUE_HERO, Position(5, 4))

    def test_activate_enters_targeting(self, pusher_state):
        result = apply_action(pusher_state, Action.activate_pusher("player-0-pusher-test"))

        assert result.success
        assert result.new_state.phase == GamePhase.SELECT_PUSH_TARGET
        assert result.new_state.ability_piece_id == "player-0-pusher-test"

    def test_push_moves_target_and_keeps_turn(self, pusher_state):
        state = game_reducer(pusher_state, Action.activate_pusher("player-0-pusher-test"))
        result = apply_action(state, Action.execute_push(BLUE_HERO))

        assert result.success
        new_state = result.new_state
        assert new_state.get_piece(BLUE_HERO).position == Position(5, 3)
        assert new_state.phase == GamePhase.SELECT_ACTION
        assert new_state.current_player_id == "player-0"
        assert new_state.pusher_used_this_turn
        assert new_state.log[-1].action == LogAction.PUSHED

    def test_push_is_once_per_turn(self, pusher_state):
        state = game_reducer(pusher_state, Action.activate_pusher("player-0-pusher-test"))
        state = game_reducer(state, Action.execute_push(BLUE_HERO))
        assert not apply_action(state, Action.activate_pusher("player-0-pusher-test")).success

    def test_push_does_not_use_a_card(self, pusher_state):
        state = select(pusher_state, 4)
        hand = state.get_hand("player-0")
        state = game_reducer(state, Action.activate_pusher("player-0-pusher-test"))
        state = game_reducer(state, Action.execute_push(BLUE_HERO))
        assert state.get_hand("player-0") == hand
        assert state.selected_card is not None

    def test_cancel(self, pusher_state):
        state = game_reducer(pusher_state, Action.activate_pusher("player-0-pusher-test"))
        result = apply_action(state, Action.cancel_ability())

        assert result.success
        assert result.new_state.phase == GamePhase.SELECT_ACTION
        assert result.new_state.ability_piece_id is None
        assert not result.new_state.pusher_used_this_turn

    def test_push_target_must_be_adjacent(self, pusher_state):
        state = place(pusher_state, BLUE_HERO, Position(0, 0))
        state = game_reducer(state, Action.activate_pusher("player-0-pusher-test"))
        result = apply_action(state, Action.execute_push(BLUE_HERO))
        assert not result.success
        assert result.new_state is state

    def test_push_enemy_hero_into_center_wins_for_them(self, two_player_state):
        """A hero shoved onto the center finishes, and its owner wins."""
        state = add_support(two_player_state, "player-0", SupportType.PUSHER, Position(5, 5))
        state = place(state, BLUE_HERO, Position(4, 4))
        state = game_reducer(state, Action.activate_pusher("player-0-pusher-test"))

        result = apply_action(state, Action.execute_push(BLUE_HERO))

        assert result.success
        assert result.new_state.phase == GamePhase.GAME_OVER
        assert result.new_state.winner == "player-1"
        assert result.new_state.get_piece(BLUE_HERO).is_finished

    def test_push_support_into_center_removes_it(self, two_player_state):
        state = add_support(two_player_state, "player-0", SupportType.PUSHER, Position(5, 5))
        state = add_support(state, "player-1", SupportType.ESCORT, Position(4, 4))
        state = game_reducer(state, Action.activate_pusher("player-0-pusher-test"))

        new_state = game_reducer(state, Action.execute_push("player-1-escort-test"))

        assert new_state.get_piece("player-1-escort-test") is None
        assert new_state.phase == GamePhase.SELECT_ACTION
        assert new_state.log[-1].action == LogAction.DISMISSED

    def test_push_captures_occupants(self, pusher_state):
        state = add_support(pusher_state, "player-1", SupportType.BLOCKER, Position(5, 3))
        state = place_at_index(state, RED_HERO, 32)  # (5, 3)
        state = game_reducer(state, Action.activate_pusher("player-0-pusher-test"))

        new_state = game_reducer(state, Action.execute_push(BLUE_HERO))

        assert new_state.get_piece(BLUE_HERO).position == Position(5, 3)
        assert new_state.get_piece("player-1-blocker-test") is None
        assert new_state.get_piece(RED_HERO).position is None

    def test_cannot_activate_someone_elses_pusher(self, two_player_state):
        state = add_support(two_player_state, "player-1", SupportType.PUSHER, Position(5, 5))
        assert not apply_action(state, Action.activate_pusher("player-1-pusher-test")).success


class TestTurnFlow:
    """Tests for END_TURN, REFRESH_HAND, START_TURN and RESET_GAME."""

    def test_end_turn_skips(self, two_player_state):
        result = apply_action(two_player_state, Action.end_turn())

        assert result.success
        assert result.new_state.current_player_id == "player-1"
        assert result.new_state.log[-1].action == LogAction.SKIPPED

    def test_end_turn_keeps_selected_card_in_hand(self, two_player_state):
        state = select(two_player_state, 3)
        card = state.selected_card
        new_state = game_reducer(state, Action.end_turn())
        assert card in new_state.get_hand("player-0").cards
        assert new_state.selected_card is None

    def test_turn_order_wraps(self, four_player_state):
        state = four_player_state
        seen = []
        for _ in range(5):
            state = game_reducer(state, Action.end_turn())
            seen.append(state.current_player_id)
        assert seen == ["player-1", "player-2", "player-3", "player-0", "player-1"]

    def test_refresh_hand(self, two_player_state):
        old_cards = two_player_state.get_hand("player-0").cards
        result = apply_action(two_player_state, Action.refresh_hand())

        assert result.success
        hand = result.new_state.get_hand("player-0")
        assert len(hand.cards) == 3
        assert set(old_cards) <= set(hand.discard)
        assert hand.total_cards == 18
        assert result.new_state.log[-1].action == LogAction.REFRESHED
        assert result.new_state.current_player_id == "player-1"

    def test_hotseat_requires_start_turn(self, hotseat_state):
        assert not hotseat_state.turn_ready
        card = hotseat_state.get_hand("player-0").cards[0]

        rejected = apply_action(hotseat_state, Action.select_card(card.card_id))
        assert not rejected.success

        started = game_reducer(hotseat_state, Action.start_turn())
        assert started.turn_ready
        assert game_reducer(started, Action.select_card(card.card_id)).selected_card == card

    def test_hotseat_next_player_not_ready(self, hotseat_state):
        state = game_reducer(hotseat_state, Action.start_turn())
        state = game_reducer(state, Action.end_turn())
        assert state.current_player_id == "player-1"
        assert not state.turn_ready

    def test_start_turn_when_ready(self, two_player_state):
        assert not apply_action(two_player_state, Action.start_turn()).success

    def test_reset_game(self, two_player_state):
        state = game_reducer(two_player_state, Action.end_turn())
        new_state = game_reducer(state, Action.reset_game(player_count=3, seed=99))

        assert new_state.num_players == 3
        assert new_state.random_seed == 99
        assert new_state.log == ()
        assert new_state.current_player_id == "player-0"

    def test_reset_is_allowed_after_game_over(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 45)
        state = game_reducer(select(state, 3), Action.move_piece(RED_HERO))
        new_state = game_reducer(state, Action.reset_game(player_count=2))

        assert new_state.phase == GamePhase.SELECT_CARD
        assert new_state.random_seed == state.random_seed + 1

    def test_reset_with_bad_player_count(self, two_player_state):
        action = Action(ActionType.RESET_GAME, ActionPayload(player_count=5))
        assert not apply_action(two_player_state, action).success


class TestReducerContract:
    """Tests for the reducer's general guarantees."""

    def test_rejection_returns_same_state(self, two_player_state):
        result = Reducer().apply(two_player_state, Action.move_piece("nope"))
        assert not result.success
        assert result.new_state is two_player_state
        assert result.error

    @pytest.mark.parametrize("fixture", ["two_player_state", "hotseat_state"])
    def test_unknown_action_type_is_rejected(self, fixture, request):
        state = request.getfixturevalue(fixture)
        result = apply_action(state, Action("teleport"))
        assert not result.success
        assert result.error_code == NO_HANDLER
        assert result.new_state is state

    def test_unknown_action_type_after_game_over(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 45)
        state = game_reducer(select(state, 3), Action.move_piece(RED_HERO))
        result = apply_action(state, Action("teleport"))
        assert not result.success
        assert result.error_code == NO_HANDLER
        assert result.new_state is state

    def test_game_reducer_returns_state(self, two_player_state):
        assert game_reducer(two_player_state, Action.unselect_card()) is two_player_state

    def test_accepted_action_reports_log_lines(self, two_player_state):
        result = apply_action(two_player_state, Action.end_turn())
        assert result.state_changes == ["You skipped"]

    def test_prior_state_is_untouched(self, two_player_state):
        before = two_player_state
        snapshot = (before.pieces, before.hands, before.log, dict(before.claimed_portals))
        game_reducer(select(before, 1), Action.enter_piece(RED_HERO))
        assert (before.pieces, before.hands, before.log, dict(before.claimed_portals)) == snapshot

    def test_same_input_same_output(self, two_player_state):
        state = select(two_player_state, 1)
        assert game_reducer(state, Action.enter_piece(RED_HERO)) == game_reducer(
            state, Action.enter_piece(RED_HERO)
        )

    def test_cards_are_conserved(self, four_player_state):
        state = four_player_state
        for _ in range(12):
            state = game_reducer(select(state, 1), Action.enter_piece(f"{state.current_player_id}-hero"))
            state = game_reducer(state, Action.refresh_hand())
        for hand in state.hands:
            assert hand.total_cards == 18
            ids = [c.card_id for c in hand.cards + hand.deck + hand.discard]
            assert len(ids) == len(set(ids))
