"""
Simple Bot - The built-in opponent.

Plays the first useful thing it finds, in this order:
1. Move a piece that is already on the board
2. Enter the hero from home, through the portal when it can
3. Summon a support
4. Refresh the hand

A hand with no usable card is refreshed before any card is picked.

Around that it always claims a newly reached portal, uses its Pusher on
enemy pieces when that cannot hand an opponent the win, and starts its
own turn in hotseat games.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .policy import BotPolicy, BotDecision
from ..engine_core.action import Action
from ..engine_core.board import get_push_destination, is_center
from ..engine_core.state import GamePhase, GameState, SupportType, ALL_SUPPORT_TYPES
from ..engine_core.queries import (
    can_activate_pusher,
    can_summon,
    get_push_targets,
    get_valid_moves,
    has_any_move,
)

logger = logging.getLogger(__name__)


def _push_target(state: GameState, pusher_id: str) -> str | None:
    """First enemy piece the Pusher can shove without sending it to the center."""
    pusher = state.get_piece(pusher_id)
    if pusher is None:
        return None
    for target in get_push_targets(state, pusher_id):
        if target.player_id == pusher.player_id:
            continue
        if is_center(get_push_destination(pusher.position, target.position)):
            continue
        return target.piece_id
    return None


def _usable_pusher(state: GameState) -> str | None:
    for piece in state.pieces:
        if (
            piece.player_id == state.current_player_id
            and piece.support_type == SupportType.PUSHER
            and can_activate_pusher(state, piece.piece_id)
            and _push_target(state, piece.piece_id) is not None
        ):
            return piece.piece_id
    return None


def get_ai_action(state: GameState) -> Action | None:
    """
    The simple bot's next action, or None when it has nothing to do
    (game over, or not this bot's decision to make).
    """
    if state.phase == GamePhase.GAME_OVER or state.current_player is None:
        return None

    if not state.turn_ready:
        return Action.start_turn()

    if state.phase == GamePhase.PORTAL_CHOICE:
        # The new portal is always further along than the old one
        return Action.claim_portal()

    if state.phase == GamePhase.SELECT_PUSH_TARGET:
        target_id = _push_target(state, state.ability_piece_id)
        if target_id is None:
            return Action.cancel_ability()
        return Action.execute_push(target_id)

    hand = state.get_hand(state.current_player_id)
    if not hand or not hand.cards:
        return Action.refresh_hand()

    pusher_id = _usable_pusher(state)
    if pusher_id is not None:
        return Action.activate_pusher(pusher_id)

    # A push resolved before any card was chosen lands here with no card
    if state.phase == GamePhase.SELECT_CARD or state.selected_card is None:
        if not has_any_move(state):
            return Action.refresh_hand()
        return Action.select_card(hand.cards[0].card_id)

    if state.phase != GamePhase.SELECT_ACTION:
        return None

    own_pieces = [
        p for p in state.pieces
        if p.player_id == state.current_player_id and not p.is_finished
    ]

    for piece in own_pieces:
        if piece.position is not None and get_valid_moves(state, piece.piece_id).can_move:
            return Action.move_piece(piece.piece_id)

    for piece in own_pieces:
        if piece.position is None:
            moves = get_valid_moves(state, piece.piece_id)
            if moves.can_enter_portal:
                return Action.enter_piece(piece.piece_id, use_portal=True)
            if moves.can_enter_start:
                return Action.enter_piece(piece.piece_id)

    for support_type in ALL_SUPPORT_TYPES:
        if can_summon(state, support_type, use_portal=True):
            return Action.summon_support(support_type, use_portal=True)
        if can_summon(state, support_type):
            return Action.summon_support(support_type)

    return Action.refresh_hand()


@dataclass
class SimpleBot(BotPolicy):
    """
    BotPolicy wrapper around get_ai_action.

    Falls back to the first legal action if the priority rules come up
    with something the generator did not offer.
    """

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        action = get_ai_action(state)
        if action is None or action not in legal_actions:
            logger.warning(
                "Simple bot proposed %s outside the legal set; playing %s",
                action.action_type.value if action else None,
                legal_actions[0].action_type.value,
            )
            return BotDecision(
                action=legal_actions[0],
                explanation="Fell back to first legal action",
                evaluated_actions=len(legal_actions),
            )

        return BotDecision(
            action=action,
            explanation=f"Priority rule: {action.action_type.value}",
            evaluated_actions=len(legal_actions),
        )
