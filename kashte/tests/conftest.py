"""
Pytest fixtures for Kashte tests.

Board coordinates used throughout, as path indices for red:
  0 (0,3) red entry    4 (1,0)    5 (2,0)    6 (3,0) yellow entry
  24 (1,3)  26 (1,1) portal  28 (3,1)  30 (5,1) portal
  45 (4,4)  46 (3,4)  47 (2,4)  48 (3,3) center
"""

import pytest

from ..engine_core.abilities import deploy
from ..engine_core.board import PlayerColor, Position, get_position_for_player, path_index_for
from ..engine_core.setup import create_initial_state
from ..engine_core.state import Card, GamePhase, GameState, Piece, PlayerHand, SupportType


@pytest.fixture
def two_player_state() -> GameState:
    """Red human ("player-0") against a blue AI ("player-1")."""
    return create_initial_state(player_count=2, seed=7)


@pytest.fixture
def four_player_state() -> GameState:
    """Red human, then blue, green and yellow AIs."""
    return create_initial_state(player_count=4, seed=7)


@pytest.fixture
def hotseat_state() -> GameState:
    """Two humans passing one device."""
    return create_initial_state(player_count=2, is_hotseat=True, seed=7)


def place(state: GameState, piece_id: str, cell: Position) -> GameState:
    """Put an existing piece on a cell, path index per its own color."""
    piece = state.get_piece(piece_id)
    return state.with_piece(piece.moved_to(cell, path_index_for(piece.color, cell)))


def place_at_index(state: GameState, piece_id: str, red_index: int) -> GameState:
    """Put an existing piece on the cell red reaches at red_index."""
    return place(state, piece_id, get_position_for_player(PlayerColor.RED, red_index))


def add_support(
    state: GameState,
    player_id: str,
    support_type: SupportType,
    cell: Position,
) -> GameState:
    """Deploy a support straight onto a cell, bypassing the summon rules."""
    player = state.get_player(player_id)
    piece = Piece(
        piece_id=f"{player_id}-{support_type.value}-test",
        player_id=player_id,
        color=player.color,
        support_type=support_type,
        position=cell,
        path_index=path_index_for(player.color, cell),
    )
    roster = state.get_roster(player_id)
    return state.with_new_piece(piece).with_roster(deploy(roster, support_type, piece.piece_id))


def red_cell(index: int) -> Position:
    return get_position_for_player(PlayerColor.RED, index)


def select(state: GameState, value: int) -> GameState:
    """Make the current player's first card a `value` and select it."""
    hand = state.get_hand(state.current_player_id)
    card = Card(hand.cards[0].card_id, value)
    hand = PlayerHand(
        player_id=hand.player_id,
        cards=(card,) + hand.cards[1:],
        deck=hand.deck,
        discard=hand.discard,
    )
    return state.with_hand(hand)._copy_with(selected_card=card, phase=GamePhase.SELECT_ACTION)
