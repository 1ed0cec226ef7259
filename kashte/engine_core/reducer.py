"""
Reducer - Applies actions to game state.

The reducer is the single point of state transition.
All state changes must go through apply_action() / game_reducer().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying; a rejected action returns the unchanged state
- Never raises: unexpected handler errors become failure results
- Delegates movement to movement.py and abilities to abilities.py
"""

from __future__ import annotations
import logging

from .board import PlayerColor, is_summon_position, path_index_for
from .state import GameState, GamePhase, LogAction, Player
from .action import Action, ActionType, ActionResult
from .deck import play_card, draw_card, get_card_by_id, refresh_hand
from .movement import calculate_move, effective_steps, apply_move, entry_cell
from .abilities import (
    summon_entry,
    summon_support,
    can_activate_pusher,
    execute_push,
)
from .setup import create_initial_state, MIN_PLAYERS, MAX_PLAYERS

logger = logging.getLogger(__name__)

INVALID_ACTION = "INVALID_ACTION"
NO_HANDLER = "NO_HANDLER"
HANDLER_ERROR = "HANDLER_ERROR"

CARD_PHASES = {GamePhase.SELECT_CARD, GamePhase.SELECT_ACTION}


class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state (including the rules) is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the new state, or a failure carrying the
        unchanged state.
        """
        if not isinstance(action.action_type, ActionType):
            logger.debug("Rejected unknown action type %r", action.action_type)
            return ActionResult.failure(
                f"Unknown action type: {action.action_type!r}",
                error_code=NO_HANDLER,
                state=state,
            )

        validation_error = self._validate_action(state, action)
        if validation_error:
            logger.debug("Rejected %s: %s", action.action_type.value, validation_error)
            return ActionResult.failure(validation_error, error_code=INVALID_ACTION, state=state)

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=NO_HANDLER,
                state=state,
            )

        try:
            result = handler(state, action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code=HANDLER_ERROR, state=state)

        if not result.success:
            logger.debug("Rejected %s: %s", action.action_type.value, result.error)
            result.new_state = state
            return result

        new_state = result.new_state
        if new_state is not state and len(new_state.log) > len(state.log):
            result.state_changes = [
                entry.describe() for entry in new_state.log[len(state.log):]
            ] + result.state_changes
        return result

    def _validate_action(self, state: GameState, action: Action) -> str | None:
        """
        Checks common to every action.

        Returns error message if invalid, None if valid.
        """
        if action.action_type == ActionType.RESET_GAME:
            return None

        if state.phase == GamePhase.GAME_OVER:
            return "Game is over - no actions allowed"

        if state.current_player is None:
            return f"Unknown current player {state.current_player_id}"

        if action.action_type == ActionType.START_TURN:
            if state.turn_ready:
                return "Turn already started"
            return None

        if not state.turn_ready:
            return f"{state.current_player.name} has not started their turn"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.SELECT_CARD: self._handle_select_card,
            ActionType.UNSELECT_CARD: self._handle_unselect_card,
            ActionType.ENTER_PIECE: self._handle_enter_piece,
            ActionType.MOVE_PIECE: self._handle_move_piece,
            ActionType.SUMMON_SUPPORT: self._handle_summon_support,
            ActionType.CLAIM_PORTAL: self._handle_claim_portal,
            ActionType.SKIP_PORTAL: self._handle_skip_portal,
            ActionType.STEAL_PORTAL: self._handle_steal_portal,
            ActionType.ACTIVATE_PUSHER: self._handle_activate_pusher,
            ActionType.EXECUTE_PUSH: self._handle_execute_push,
            ActionType.CANCEL_ABILITY: self._handle_cancel_ability,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.START_TURN: self._handle_start_turn,
            ActionType.REFRESH_HAND: self._handle_refresh_hand,
            ActionType.RESET_GAME: self._handle_reset_game,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Card selection
    # =========================================================================

    def _handle_select_card(self, state: GameState, action: Action) -> ActionResult:
        if state.phase not in CARD_PHASES:
            return _reject(f"Cannot select a card during {state.phase.value}")

        hand = state.get_hand(state.current_player_id)
        if not hand:
            return _reject("Current player has no hand")

        card = get_card_by_id(hand, action.payload.card_id)
        if not card:
            return _reject(f"Card {action.payload.card_id} not in hand")

        new_state = state._copy_with(selected_card=card, phase=GamePhase.SELECT_ACTION)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{state.current_player.name} selected a {card.value}"],
        )

    def _handle_unselect_card(self, state: GameState, action: Action) -> ActionResult:
        if state.phase != GamePhase.SELECT_ACTION:
            return _reject("No card to unselect")

        new_state = state._copy_with(selected_card=None, phase=GamePhase.SELECT_CARD)
        return ActionResult.success_with_state(new_state)

    # =========================================================================
    # Card-consuming moves
    # =========================================================================

    def _handle_enter_piece(self, state: GameState, action: Action) -> ActionResult:
        """Bring the hero in from home at the start cell or the claimed portal."""
        if state.phase != GamePhase.SELECT_ACTION or state.selected_card is None:
            return _reject("Select a card first")

        player = state.current_player
        piece = state.get_piece(action.payload.piece_id)
        if not piece or piece.player_id != player.player_id:
            return _reject(f"Piece {action.payload.piece_id} is not yours")
        if piece.position is not None or piece.is_finished:
            return _reject("Piece is not at home")

        entry = entry_cell(state, player, action.payload.use_portal)
        if entry is None:
            return _reject("Entry is blocked")

        path_index = path_index_for(player.color, entry)
        if path_index < 0:
            return _reject("Entry cell is not on the path")

        card_value = state.selected_card.value
        new_state = state.with_piece(piece.moved_to(entry, path_index))
        new_state = _consume_selected_card(new_state)
        new_state = new_state.with_log(
            new_state.make_log_entry(player, LogAction.ENTERED, card_value=card_value)
        )
        return ActionResult.success_with_state(_end_turn(new_state))

    def _handle_move_piece(self, state: GameState, action: Action) -> ActionResult:
        """Move an on-board piece by the selected card (plus modifiers)."""
        if state.phase != GamePhase.SELECT_ACTION or state.selected_card is None:
            return _reject("Select a card first")

        player = state.current_player
        piece = state.get_piece(action.payload.piece_id)
        if not piece or piece.player_id != player.player_id:
            return _reject(f"Piece {action.payload.piece_id} is not yours")
        if not piece.is_on_board:
            return _reject("Piece is not on the board")

        card_value = state.selected_card.value
        steps = effective_steps(state.pieces, piece, card_value, state.rules)
        resolution = calculate_move(state.pieces, piece, player.color, steps, state.rules)
        if resolution.blocked:
            return _reject("Move is blocked")

        applied = apply_move(state, player, piece, resolution, card_value)
        new_state = _consume_selected_card(applied.state)

        hero = new_state.get_hero(player.player_id)
        if hero is not None and hero.is_finished:
            return ActionResult.success_with_state(_finish_game(new_state, player.player_id))

        survivor = applied.survivor
        if survivor is not None and is_summon_position(survivor.position):
            already_claimed = survivor.position in new_state.claimed_portals.values()
            if not already_claimed:
                if player.color not in new_state.claimed_portals:
                    claimed = {**new_state.claimed_portals, player.color: survivor.position}
                    new_state = new_state._copy_with(claimed_portals=claimed).with_log(
                        new_state.make_log_entry(player, LogAction.CLAIMED)
                    )
                else:
                    new_state = new_state._copy_with(
                        phase=GamePhase.PORTAL_CHOICE,
                        pending_portal=survivor.position,
                    )
                    return ActionResult.success_with_state(new_state)

        return ActionResult.success_with_state(_end_turn(new_state))

    def _handle_summon_support(self, state: GameState, action: Action) -> ActionResult:
        if state.phase != GamePhase.SELECT_ACTION or state.selected_card is None:
            return _reject("Select a card first")

        support_type = action.payload.support_type
        if support_type is None:
            return _reject("No support type given")

        player = state.current_player
        entry = summon_entry(state, player, support_type, action.payload.use_portal)
        if entry is None:
            return _reject(f"Cannot summon {support_type.value}")

        card_value = state.selected_card.value
        new_state = summon_support(state, player, support_type, entry)
        new_state = _consume_selected_card(new_state)
        new_state = new_state.with_log(
            new_state.make_log_entry(
                player, LogAction.SUMMONED, card_value=card_value, piece_type=support_type,
            )
        )
        return ActionResult.success_with_state(_end_turn(new_state))

    # =========================================================================
    # Portals
    # =========================================================================

    def _handle_claim_portal(self, state: GameState, action: Action) -> ActionResult:
        if state.phase != GamePhase.PORTAL_CHOICE or state.pending_portal is None:
            return _reject("No portal to claim")

        player = state.current_player
        claimed = {**state.claimed_portals, player.color: state.pending_portal}
        new_state = state._copy_with(claimed_portals=claimed, pending_portal=None)
        new_state = new_state.with_log(new_state.make_log_entry(player, LogAction.CLAIMED))
        return ActionResult.success_with_state(_end_turn(new_state))

    def _handle_skip_portal(self, state: GameState, action: Action) -> ActionResult:
        if state.phase != GamePhase.PORTAL_CHOICE:
            return _reject("No portal choice pending")

        new_state = _end_turn(state._copy_with(pending_portal=None))
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{state.current_player.name} kept their portal"],
        )

    def _handle_steal_portal(self, state: GameState, action: Action) -> ActionResult:
        """
        Take over another color's portal.

        Only the stealer's own piece standing on the portal allows it; a
        piece of some third color on the cell does not. This is narrower
        than letting any opposing piece there open the portal to theft.
        """
        if state.phase != GamePhase.SELECT_ACTION:
            return _reject(f"Cannot steal a portal during {state.phase.value}")

        position = action.payload.position
        player = state.current_player

        previous_owner = None
        for color, pos in state.claimed_portals.items():
            if pos == position:
                previous_owner = color
                break
        if previous_owner is None or previous_owner == player.color:
            return _reject("Not an opponent's portal")

        standing = [
            p for p in state.pieces_at(position)
            if p.player_id == player.player_id and p.color != previous_owner
        ]
        if not standing:
            return _reject("You have no piece on that portal")

        claimed = {c: p for c, p in state.claimed_portals.items() if c != previous_owner}
        claimed[player.color] = position

        victim = state.get_player_by_color(previous_owner)
        new_state = state._copy_with(
            claimed_portals=claimed,
            selected_card=None,
            pending_portal=None,
        )
        new_state = new_state.with_log(
            new_state.make_log_entry(
                player, LogAction.STOLE, target_player=victim.name if victim else None,
            )
        )
        return ActionResult.success_with_state(_end_turn(new_state))

    # =========================================================================
    # Pusher ability
    # =========================================================================

    def _handle_activate_pusher(self, state: GameState, action: Action) -> ActionResult:
        if state.phase not in CARD_PHASES:
            return _reject(f"Cannot use an ability during {state.phase.value}")
        if not can_activate_pusher(state, action.payload.piece_id):
            return _reject("Pusher cannot be used")

        new_state = state._copy_with(
            phase=GamePhase.SELECT_PUSH_TARGET,
            ability_piece_id=action.payload.piece_id,
        )
        return ActionResult.success_with_state(new_state)

    def _handle_execute_push(self, state: GameState, action: Action) -> ActionResult:
        """Resolve the push; free, so the turn continues unless the game ends."""
        if state.phase != GamePhase.SELECT_PUSH_TARGET or state.ability_piece_id is None:
            return _reject("No ability is being targeted")

        outcome = execute_push(
            state, state.current_player, state.ability_piece_id, action.payload.piece_id,
        )
        if outcome is None:
            return _reject(f"Cannot push {action.payload.piece_id}")

        new_state = outcome.state._copy_with(
            ability_piece_id=None,
            pusher_used_this_turn=True,
        )
        if outcome.winner_id is not None:
            return ActionResult.success_with_state(_finish_game(new_state, outcome.winner_id))

        return ActionResult.success_with_state(new_state._copy_with(phase=GamePhase.SELECT_ACTION))

    def _handle_cancel_ability(self, state: GameState, action: Action) -> ActionResult:
        if state.phase != GamePhase.SELECT_PUSH_TARGET:
            return _reject("No ability to cancel")

        new_state = state._copy_with(phase=GamePhase.SELECT_ACTION, ability_piece_id=None)
        return ActionResult.success_with_state(new_state)

    # =========================================================================
    # Turn flow
    # =========================================================================

    def _handle_end_turn(self, state: GameState, action: Action) -> ActionResult:
        """Voluntary skip. The selected card, if any, stays in hand."""
        if state.phase not in CARD_PHASES:
            return _reject(f"Cannot end the turn during {state.phase.value}")

        new_state = state.with_log(state.make_log_entry(state.current_player, LogAction.SKIPPED))
        return ActionResult.success_with_state(_end_turn(new_state))

    def _handle_start_turn(self, state: GameState, action: Action) -> ActionResult:
        new_state = state._copy_with(turn_ready=True)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{state.current_player.name} started their turn"],
        )

    def _handle_refresh_hand(self, state: GameState, action: Action) -> ActionResult:
        """Discard the hand, draw a fresh one, and end the turn."""
        if state.phase not in CARD_PHASES:
            return _reject(f"Cannot refresh during {state.phase.value}")

        player = state.current_player
        hand = state.get_hand(player.player_id)
        if not hand:
            return _reject("Current player has no hand")

        new_hand = refresh_hand(hand, state.make_rng(), state.rules.hand_size)
        new_state = state.with_hand(new_hand)._copy_with(selected_card=None)
        new_state = new_state.with_log(new_state.make_log_entry(player, LogAction.REFRESHED))
        return ActionResult.success_with_state(_end_turn(new_state))

    def _handle_reset_game(self, state: GameState, action: Action) -> ActionResult:
        payload = action.payload
        player_count = payload.player_count if payload.player_count is not None else 4
        if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
            return _reject(f"Player count must be {MIN_PLAYERS}-{MAX_PLAYERS}")

        seed = payload.seed if payload.seed is not None else state.random_seed + 1
        new_state = create_initial_state(
            player_count=player_count,
            human_color=payload.human_color or PlayerColor.RED,
            is_hotseat=payload.is_hotseat,
            seed=seed,
            rules=state.rules,
            ai_only=bool(state.players) and all(p.is_ai for p in state.players),
        )
        return ActionResult.success_with_state(new_state, changes=["New game"])


def _reject(message: str) -> ActionResult:
    return ActionResult.failure(message, error_code=INVALID_ACTION)


def _consume_selected_card(state: GameState) -> GameState:
    """Play the selected card to the discard pile and draw a replacement."""
    hand = state.get_hand(state.current_player_id)
    if hand is None or state.selected_card is None:
        return state._copy_with(selected_card=None)
    hand = play_card(hand, state.selected_card.card_id)
    hand = draw_card(hand, state.make_rng())
    return state.with_hand(hand)._copy_with(selected_card=None)


def _end_turn(state: GameState) -> GameState:
    """
    Pass play to the next seat.

    Clears the selected card, pending portal and ability targeting, and
    resets the once-per-turn Pusher flag. In hotseat mode the next human
    must explicitly start their turn.
    """
    ids = [p.player_id for p in state.players]
    current_index = ids.index(state.current_player_id)
    next_player: Player = state.players[(current_index + 1) % len(state.players)]

    turn_ready = next_player.is_ai if state.is_hotseat else True

    logger.debug("Turn %d: %s to play", state.turn_number + 1, next_player.name)
    return state._copy_with(
        current_player_id=next_player.player_id,
        phase=GamePhase.SELECT_CARD,
        selected_card=None,
        pending_portal=None,
        ability_piece_id=None,
        pusher_used_this_turn=False,
        turn_ready=turn_ready,
        turn_number=state.turn_number + 1,
    )


def _finish_game(state: GameState, winner_id: str) -> GameState:
    winner = state.get_player(winner_id)
    logger.info("Game over: %s wins", winner.name if winner else winner_id)
    return state._copy_with(
        phase=GamePhase.GAME_OVER,
        winner=winner_id,
        selected_card=None,
        pending_portal=None,
        ability_piece_id=None,
    )


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    return Reducer().apply(state, action)


def game_reducer(state: GameState, action: Action) -> GameState:
    """The bare transition function: the new state, or the same state if rejected."""
    return Reducer().apply(state, action).new_state
