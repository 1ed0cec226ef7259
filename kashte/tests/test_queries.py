"""
Tests for read-only queries.
"""

from ..engine_core.board import PlayerColor, Position
from ..engine_core.queries import (
    ValidMoves,
    can_summon,
    get_effective_move_distance,
    get_stealable_portals,
    get_valid_moves,
    has_any_move,
)
from ..engine_core.state import Card, GamePhase, PlayerHand, SupportType
from .conftest import add_support, place, place_at_index, red_cell, select

RED_HERO = "player-0-hero"
BLUE_HERO = "player-1-hero"


class TestValidMoves:
    """Tests for get_valid_moves."""

    def test_nothing_without_a_card(self, two_player_state):
        assert get_valid_moves(two_player_state, RED_HERO) == ValidMoves()

    def test_hero_at_home_can_enter(self, two_player_state):
        moves = get_valid_moves(select(two_player_state, 2), RED_HERO)
        assert moves.can_enter_start
        assert not moves.can_enter_portal
        assert not moves.can_move
        assert moves.any

    def test_portal_entry_when_claimed(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.RED: Position(5, 1)})
        moves = get_valid_moves(select(state, 2), RED_HERO)
        assert moves.can_enter_start
        assert moves.can_enter_portal

    def test_on_board_piece(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 10)
        moves = get_valid_moves(state, RED_HERO, card_value=4)
        assert moves == ValidMoves(can_move=True)

    def test_overshoot_is_not_valid(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 46)
        assert not get_valid_moves(state, RED_HERO, card_value=5).any
        assert get_valid_moves(state, RED_HERO, card_value=2).can_move

    def test_opponent_piece(self, two_player_state):
        state = place_at_index(two_player_state, BLUE_HERO, 10)
        assert not get_valid_moves(state, BLUE_HERO, card_value=2).any

    def test_support_at_home_does_nothing(self, two_player_state):
        state = add_support(two_player_state, "player-0", SupportType.ESCORT, Position(2, 0))
        piece = state.get_piece("player-0-escort-test")
        state = state.with_piece(piece.sent_home())
        assert not get_valid_moves(state, "player-0-escort-test", card_value=1).any


class TestEffectiveDistance:
    """Tests for get_effective_move_distance."""

    def test_plain(self, two_player_state):
        state = place_at_index(two_player_state, RED_HERO, 10)
        assert get_effective_move_distance(state, RED_HERO, card_value=3) == 3

    def test_with_escort(self, two_player_state):
        state = place(two_player_state, RED_HERO, Position(2, 0))
        state = add_support(state, "player-0", SupportType.ESCORT, Position(2, 1))
        assert get_effective_move_distance(state, RED_HERO, card_value=3) == 4

    def test_uses_selected_card(self, two_player_state):
        state = select(place_at_index(two_player_state, RED_HERO, 10), 5)
        assert get_effective_move_distance(state, RED_HERO) == 5

    def test_unknown_piece(self, two_player_state):
        assert get_effective_move_distance(two_player_state, "ghost", card_value=3) == 0


class TestStealablePortals:
    """Tests for get_stealable_portals."""

    def test_listed_when_standing_on_it(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(1, 5)})
        state = place(state, RED_HERO, Position(1, 5))
        assert get_stealable_portals(select(state, 1)) == [Position(1, 5)]

    def test_only_while_choosing_an_action(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(1, 5)})
        state = place(state, RED_HERO, Position(1, 5))
        assert state.phase == GamePhase.SELECT_CARD
        assert get_stealable_portals(state) == []

    def test_not_without_a_piece(self, two_player_state):
        state = two_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(1, 5)})
        assert get_stealable_portals(select(state, 1)) == []

    def test_not_through_a_third_color(self, four_player_state):
        state = four_player_state._copy_with(claimed_portals={PlayerColor.BLUE: Position(1, 5)})
        state = place(state, "player-2-hero", Position(1, 5))
        assert get_stealable_portals(select(state, 1)) == []


class TestSummonQueries:
    """Tests for can_summon and has_any_move."""

    def test_can_summon(self, two_player_state):
        state = select(two_player_state, 1)
        assert can_summon(state, SupportType.PUSHER)
        assert not can_summon(state, SupportType.PUSHER, use_portal=True)

    def test_cannot_summon_before_selecting(self, two_player_state):
        assert not can_summon(two_player_state, SupportType.PUSHER)

    def test_fresh_game_has_moves(self, two_player_state):
        assert has_any_move(two_player_state)

    def test_no_moves_when_stuck(self, two_player_state):
        """Everything overshoots the center and the field is full."""
        state = place_at_index(two_player_state, RED_HERO, 47)
        for support_type, index in (
            (SupportType.ESCORT, 44),
            (SupportType.BLOCKER, 45),
            (SupportType.ASSASSIN, 46),
        ):
            state = add_support(state, "player-0", support_type, red_cell(index))
        hand = state.get_hand("player-0")
        state = state.with_hand(
            PlayerHand(
                player_id=hand.player_id,
                cards=tuple(Card(card.card_id, 6) for card in hand.cards),
                deck=hand.deck,
                discard=hand.discard,
            )
        )
        assert not has_any_move(state)
