"""
Action Generator - Generates all legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. The API to show available actions
3. Validation (is this action in legal_actions?)

Design: Generates Action objects, not just action types.
This ensures all generated actions are fully specified.
RESET_GAME is a system action and is never generated.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import GameState, GamePhase, Player, SupportType, ALL_SUPPORT_TYPES
from .action import Action
from .queries import (
    can_activate_pusher,
    can_summon,
    get_push_targets,
    get_stealable_portals,
    get_valid_moves,
)


@dataclass
class ActionGenerator:
    """
    Generates legal actions for the current game state.

    Every generated action is accepted by the reducer when applied to the
    same state.
    """

    def generate(self, state: GameState) -> list[Action]:
        """
        Generate all legal actions for the current player.

        Returns a list of fully-specified Action objects.
        """
        if state.phase == GamePhase.GAME_OVER:
            return []

        player = state.current_player
        if player is None:
            return []

        # Hotseat: nothing but the turn start until the player is at the board
        if not state.turn_ready:
            return [Action.start_turn()]

        if state.phase == GamePhase.PORTAL_CHOICE:
            return [Action.claim_portal(), Action.skip_portal()]

        if state.phase == GamePhase.SELECT_PUSH_TARGET:
            return self._generate_push_actions(state)

        actions = []
        if state.phase == GamePhase.SELECT_ACTION:
            actions.extend(self._generate_move_actions(state, player))
            actions.extend(self._generate_summon_actions(state))
            actions.extend(Action.steal_portal(pos) for pos in get_stealable_portals(state))
            actions.append(Action.unselect_card())

        actions.extend(self._generate_select_actions(state, player))
        actions.extend(self._generate_pusher_actions(state, player))

        # Refreshing and skipping are always available while choosing
        actions.append(Action.refresh_hand())
        actions.append(Action.end_turn())
        return actions

    def _generate_select_actions(self, state: GameState, player: Player) -> list[Action]:
        """One select per card in hand, except the card already selected."""
        hand = state.get_hand(player.player_id)
        if not hand:
            return []
        selected_id = state.selected_card.card_id if state.selected_card else None
        return [
            Action.select_card(card.card_id)
            for card in hand.cards
            if card.card_id != selected_id
        ]

    def _generate_move_actions(self, state: GameState, player: Player) -> list[Action]:
        """Moves and entries for the selected card."""
        actions = []
        for piece in state.pieces:
            if piece.player_id != player.player_id:
                continue
            moves = get_valid_moves(state, piece.piece_id)
            if moves.can_move:
                actions.append(Action.move_piece(piece.piece_id))
            if moves.can_enter_start:
                actions.append(Action.enter_piece(piece.piece_id))
            if moves.can_enter_portal:
                actions.append(Action.enter_piece(piece.piece_id, use_portal=True))
        return actions

    def _generate_summon_actions(self, state: GameState) -> list[Action]:
        actions = []
        for support_type in ALL_SUPPORT_TYPES:
            for use_portal in (False, True):
                if can_summon(state, support_type, use_portal):
                    actions.append(Action.summon_support(support_type, use_portal))
        return actions

    def _generate_pusher_actions(self, state: GameState, player: Player) -> list[Action]:
        return [
            Action.activate_pusher(piece.piece_id)
            for piece in state.pieces
            if piece.player_id == player.player_id
            and piece.support_type == SupportType.PUSHER
            and can_activate_pusher(state, piece.piece_id)
        ]

    def _generate_push_actions(self, state: GameState) -> list[Action]:
        actions = [
            Action.execute_push(target.piece_id)
            for target in get_push_targets(state, state.ability_piece_id)
        ]
        actions.append(Action.cancel_ability())
        return actions


def legal_actions(state: GameState) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    return ActionGenerator().generate(state)


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific action is legal."""
    return action in legal_actions(state)
