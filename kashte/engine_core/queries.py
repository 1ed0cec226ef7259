"""
Queries - Read-only questions a UI or a bot asks about a GameState.

Nothing here changes state. Every answer is computed with the same
helpers the reducer uses, so a query saying "yes" means the matching
action will be accepted.
"""

from __future__ import annotations
from dataclasses import dataclass

from .board import Position
from .state import GamePhase, GameState, SupportRoster, SupportType
from .movement import calculate_move, effective_steps, entry_cell
from .abilities import (
    summon_entry,
    get_push_targets,
    can_activate_pusher,
)


@dataclass(frozen=True)
class ValidMoves:
    """What the selected card lets one piece do."""
    can_move: bool = False
    can_enter_start: bool = False
    can_enter_portal: bool = False

    @property
    def any(self) -> bool:
        return self.can_move or self.can_enter_start or self.can_enter_portal


def get_valid_moves(state: GameState, piece_id: str, card_value: int | None = None) -> ValidMoves:
    """
    Legal uses of a card for one of the current player's pieces.

    card_value defaults to the selected card; with neither nothing is legal.
    """
    if card_value is None:
        if state.selected_card is None:
            return ValidMoves()
        card_value = state.selected_card.value

    player = state.current_player
    piece = state.get_piece(piece_id)
    if player is None or piece is None or piece.player_id != player.player_id:
        return ValidMoves()
    if piece.is_finished:
        return ValidMoves()

    if piece.position is None:
        if not piece.is_hero:
            return ValidMoves()
        return ValidMoves(
            can_enter_start=entry_cell(state, player) is not None,
            can_enter_portal=entry_cell(state, player, use_portal=True) is not None,
        )

    steps = effective_steps(state.pieces, piece, card_value, state.rules)
    resolution = calculate_move(state.pieces, piece, player.color, steps, state.rules)
    return ValidMoves(can_move=not resolution.blocked)


def get_effective_move_distance(
    state: GameState,
    piece_id: str,
    card_value: int | None = None,
) -> int:
    """Steps a piece would travel with the card, bonuses included. 0 if unknown."""
    piece = state.get_piece(piece_id)
    if piece is None:
        return 0
    if card_value is None:
        if state.selected_card is None:
            return 0
        card_value = state.selected_card.value
    return effective_steps(state.pieces, piece, card_value, state.rules)


def get_stealable_portals(state: GameState) -> list[Position]:
    """
    Opponent portals the current player has a piece standing on.

    Deliberately narrower than "any opposing piece on the portal": a third
    color's piece on someone else's portal lets nobody else steal it.
    """
    if state.phase != GamePhase.SELECT_ACTION:
        return []
    player = state.current_player
    if player is None:
        return []

    stealable = []
    for color, position in state.claimed_portals.items():
        if color == player.color:
            continue
        if any(p.player_id == player.player_id for p in state.pieces_at(position)):
            stealable.append(position)
    return stealable


def get_current_roster(state: GameState) -> SupportRoster | None:
    return state.get_roster(state.current_player_id)


def can_summon(state: GameState, support_type: SupportType, use_portal: bool = False) -> bool:
    if state.phase != GamePhase.SELECT_ACTION:
        return False
    player = state.current_player
    if player is None:
        return False
    return summon_entry(state, player, support_type, use_portal) is not None


def has_any_move(state: GameState) -> bool:
    """
    Whether any card in the current hand can be spent on a move, an entry
    or a summon.

    Bots use this to decide between playing and refreshing.
    """
    player = state.current_player
    hand = state.get_hand(state.current_player_id)
    if player is None or hand is None:
        return False

    roster = state.get_roster(player.player_id)
    if roster is not None and roster.available:
        if roster.on_field_count < state.rules.max_supports_on_field and hand.cards:
            return True

    own_pieces = [p for p in state.pieces if p.player_id == player.player_id]
    for value in sorted({card.value for card in hand.cards}):
        for piece in own_pieces:
            if get_valid_moves(state, piece.piece_id, value).any:
                return True
    return False


__all__ = [
    "ValidMoves",
    "get_valid_moves",
    "get_effective_move_distance",
    "get_stealable_portals",
    "get_current_roster",
    "get_push_targets",
    "can_summon",
    "can_activate_pusher",
    "has_any_move",
]
