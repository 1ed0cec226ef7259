"""
Support Roster & Abilities - Summoning, removal and the Pusher ability.

Supports are ephemeral pieces. A player's roster tracks which types can
still be summoned (the pool), which pieces are deployed, and which types
are lost for good. At most MAX_SUPPORTS_ON_FIELD supports are deployed at
once, and each type can be deployed at most once since summoning takes it
out of the pool.

The Pusher is the only active ability: once per turn, without a card, it
shoves an adjacent piece one cell further away.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .board import (
    ENTRY_POSITIONS,
    Position,
    are_adjacent,
    get_push_destination,
    is_center,
    path_index_for,
    CENTER_INDEX,
)
from .state import (
    ALL_SUPPORT_TYPES,
    GameState,
    LogAction,
    LogEntry,
    Piece,
    Player,
    SupportRoster,
    SupportType,
)
from .rules import GameRules, DEFAULT_RULES

logger = logging.getLogger(__name__)

MAX_SUPPORTS_ON_FIELD = DEFAULT_RULES.max_supports_on_field


# =============================================================================
# Roster bookkeeping
# =============================================================================

def create_roster(player_id: str) -> SupportRoster:
    """A roster with every support type in the pool."""
    return SupportRoster(
        player_id=player_id,
        available=frozenset(ALL_SUPPORT_TYPES),
        on_field=(),
        lost=frozenset(),
    )


def deploy(roster: SupportRoster, support_type: SupportType, piece_id: str) -> SupportRoster:
    """Take a type out of the pool and record its piece as deployed."""
    return SupportRoster(
        player_id=roster.player_id,
        available=roster.available - {support_type},
        on_field=roster.on_field + (piece_id,),
        lost=roster.lost,
    )


def release(
    roster: SupportRoster,
    support_type: SupportType,
    piece_id: str,
    rules: GameRules,
) -> SupportRoster:
    """Drop a deployed piece; its type returns to the pool (or is lost)."""
    on_field = tuple(pid for pid in roster.on_field if pid != piece_id)
    if rules.return_lost_supports:
        return SupportRoster(
            player_id=roster.player_id,
            available=roster.available | {support_type},
            on_field=on_field,
            lost=roster.lost,
        )
    return SupportRoster(
        player_id=roster.player_id,
        available=roster.available,
        on_field=on_field,
        lost=roster.lost | {support_type},
    )


def remove_support(state: GameState, piece_id: str) -> GameState:
    """Delete a support piece from the board and release it from its roster."""
    piece = state.get_piece(piece_id)
    if piece is None or not piece.is_support:
        return state

    new_state = state.without_piece(piece_id)
    roster = state.get_roster(piece.player_id)
    if roster is not None:
        new_state = new_state.with_roster(
            release(roster, piece.support_type, piece_id, state.rules)
        )
    return new_state


def capture_piece(state: GameState, piece_id: str) -> GameState:
    """
    Resolve a capture.

    A hero goes back home; a support is destroyed and released.
    """
    piece = state.get_piece(piece_id)
    if piece is None:
        return state
    if piece.is_hero:
        return state.with_piece(piece.sent_home())
    return remove_support(state, piece_id)


def capture_log_entry(
    state: GameState,
    actor: Player,
    captured: Piece,
    offset: int = 0,
) -> LogEntry:
    victim = state.get_player(captured.player_id)
    return state.make_log_entry(
        actor,
        LogAction.CAPTURED,
        target_player=victim.name if victim else None,
        piece_type=captured.support_type,
        offset=offset,
    )


# =============================================================================
# Summoning
# =============================================================================

def summon_entry(
    state: GameState,
    player: Player,
    support_type: SupportType,
    use_portal: bool = False,
) -> Position | None:
    """
    Where a support of this type would be summoned, or None if it can't be.

    Requires a selected card, the type in the pool and room on the field.
    Portal summoning additionally needs a claimed portal and a card of at
    least rules.portal_summon_min_value. Entry cells are never checked for
    occupancy when summoning.
    """
    if state.selected_card is None:
        return None

    roster = state.get_roster(player.player_id)
    if roster is None:
        return None
    if support_type not in roster.available:
        return None
    if roster.on_field_count >= state.rules.max_supports_on_field:
        return None

    if use_portal:
        portal = state.claimed_portals.get(player.color)
        if portal is None:
            return None
        if state.selected_card.value < state.rules.portal_summon_min_value:
            return None
        return portal

    return ENTRY_POSITIONS[player.color]


def summon_support(
    state: GameState,
    player: Player,
    support_type: SupportType,
    entry: Position,
) -> GameState:
    """Place a new support piece on its entry cell and deploy it."""
    piece = Piece(
        piece_id=f"{player.player_id}-{support_type.value}-{state.turn_number}",
        player_id=player.player_id,
        color=player.color,
        support_type=support_type,
        position=entry,
        path_index=path_index_for(player.color, entry),
    )
    roster = state.get_roster(player.player_id)
    new_state = state.with_new_piece(piece).with_roster(
        deploy(roster, support_type, piece.piece_id)
    )
    logger.debug("%s summoned %s at %s", player.name, support_type.value, entry)
    return new_state


# =============================================================================
# Pusher
# =============================================================================

def can_activate_pusher(state: GameState, piece_id: str) -> bool:
    """An own, deployed, unfinished Pusher, and the ability unused this turn."""
    if state.pusher_used_this_turn:
        return False
    piece = state.get_piece(piece_id)
    if piece is None:
        return False
    return (
        piece.player_id == state.current_player_id
        and piece.support_type == SupportType.PUSHER
        and piece.is_on_board
    )


def get_push_targets(state: GameState, pusher_id: str) -> list[Piece]:
    """Unfinished pieces adjacent to the Pusher that have a legal push destination."""
    pusher = state.get_piece(pusher_id)
    if pusher is None or not pusher.is_on_board:
        return []

    targets = []
    for piece in state.pieces:
        if piece.piece_id == pusher.piece_id or not piece.is_on_board:
            continue
        if not are_adjacent(pusher.position, piece.position):
            continue
        if get_push_destination(pusher.position, piece.position) is None:
            continue
        targets.append(piece)
    return targets


@dataclass(frozen=True)
class PushOutcome:
    """Result of a push: the new state and, if a hero reached the center, the winner."""
    state: GameState
    destination: Position
    winner_id: str | None = None


def execute_push(state: GameState, actor: Player, pusher_id: str, target_id: str) -> PushOutcome | None:
    """
    Push a target one cell away from the Pusher.

    Every unfinished piece already on the destination is captured by the
    arriving piece. A hero pushed onto the center finishes (and wins for
    its owner); a support pushed onto the center is removed.
    """
    pusher = state.get_piece(pusher_id)
    target = state.get_piece(target_id)
    if pusher is None or target is None:
        return None
    if target_id not in {p.piece_id for p in get_push_targets(state, pusher_id)}:
        return None

    destination = get_push_destination(pusher.position, target.position)
    victim = state.get_player(target.player_id)

    new_state = state
    entries = [
        state.make_log_entry(
            actor,
            LogAction.PUSHED,
            target_player=victim.name if victim else None,
            piece_type=target.support_type,
        )
    ]
    for occupant in state.pieces_at(destination):
        if occupant.piece_id == target.piece_id:
            continue
        entries.append(capture_log_entry(state, actor, occupant, offset=len(entries)))
        new_state = capture_piece(new_state, occupant.piece_id)

    winner_id = None
    if is_center(destination):
        if target.is_hero:
            new_state = new_state.with_piece(
                target.moved_to(destination, CENTER_INDEX, finished=True)
            )
            if victim is not None:
                entries.append(
                    state.make_log_entry(victim, LogAction.FINISHED, offset=len(entries))
                )
            winner_id = target.player_id
        else:
            new_state = remove_support(new_state, target.piece_id)
            entries.append(
                state.make_log_entry(
                    actor,
                    LogAction.DISMISSED,
                    target_player=victim.name if victim else None,
                    piece_type=target.support_type,
                    offset=len(entries),
                )
            )
    else:
        new_state = new_state.with_piece(
            target.moved_to(destination, path_index_for(target.color, destination))
        )

    return PushOutcome(
        state=new_state.with_log(*entries),
        destination=destination,
        winner_id=winner_id,
    )
