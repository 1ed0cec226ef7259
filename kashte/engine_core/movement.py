"""
Move Resolver - Computes where a card move takes a piece.

Resolution order:
1. Effective steps: card value plus Escort / Assassin bonuses
2. Overshooting the center is illegal (the center needs an exact count)
3. Interception: an enemy Blocker on any intermediate cell stops the mover
   there and captures it
4. Landing: cell capacity, own pieces, safe-cell protection for heroes,
   otherwise capture of the opposing occupant

calculate_move() is pure over the piece list; apply_move() turns a
resolution into a new GameState with log entries.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from .board import (
    CENTER_INDEX,
    ENTRY_POSITIONS,
    PlayerColor,
    Position,
    are_adjacent,
    get_position_for_player,
    is_safe_position,
)
from .state import GameState, LogAction, Piece, Player, SupportType
from .rules import GameRules, DEFAULT_RULES
from .abilities import capture_piece, capture_log_entry, remove_support


@dataclass(frozen=True)
class MoveResolution:
    """
    Outcome of a prospective move.

    blocked moves are illegal and leave the state unchanged. When
    intercepted_by is set the mover stops at final_index and is captured
    there by that Blocker.
    """
    blocked: bool
    start_index: int
    final_index: int
    steps: int = 0
    captured_piece_id: str | None = None
    intercepted_by: str | None = None

    @property
    def is_intercepted(self) -> bool:
        return self.intercepted_by is not None

    @property
    def reaches_center(self) -> bool:
        return not self.blocked and not self.is_intercepted and self.final_index == CENTER_INDEX

    @classmethod
    def illegal(cls, start_index: int, steps: int = 0) -> MoveResolution:
        return cls(blocked=True, start_index=start_index, final_index=start_index, steps=steps)


def count_adjacent_escorts(pieces: Iterable[Piece], mover: Piece) -> int:
    """Own, unfinished Escorts one step away from the mover."""
    if mover.position is None:
        return 0
    return sum(
        1 for p in pieces
        if p.player_id == mover.player_id
        and p.support_type == SupportType.ESCORT
        and p.is_on_board
        and are_adjacent(p.position, mover.position)
    )


def effective_steps(
    pieces: Iterable[Piece],
    mover: Piece,
    base: int,
    rules: GameRules = DEFAULT_RULES,
) -> int:
    """Card value plus movement modifiers."""
    steps = base
    if mover.is_hero:
        bonus = count_adjacent_escorts(pieces, mover) * rules.escort_bonus
        if rules.max_escort_bonus is not None:
            bonus = min(bonus, rules.max_escort_bonus)
        steps += bonus
    elif mover.support_type == SupportType.ASSASSIN:
        steps += rules.assassin_bonus
    return steps


def calculate_move(
    pieces: tuple[Piece, ...] | list[Piece],
    mover: Piece,
    color: PlayerColor,
    steps: int,
    rules: GameRules = DEFAULT_RULES,
) -> MoveResolution:
    """
    Resolve moving a piece `steps` cells along the color's path.

    `steps` is the effective step count (see effective_steps).
    """
    start_index = mover.path_index
    if mover.position is None or mover.is_finished or steps < 1:
        return MoveResolution.illegal(start_index, steps)

    target_index = start_index + steps
    if target_index > CENTER_INDEX:
        return MoveResolution.illegal(start_index, steps)

    # Intermediate cells only: not the start, not the destination
    for index in range(start_index + 1, target_index):
        cell = get_position_for_player(color, index)
        for p in pieces:
            if (
                p.position == cell
                and not p.is_finished
                and p.support_type == SupportType.BLOCKER
                and p.player_id != mover.player_id
            ):
                return MoveResolution(
                    blocked=False,
                    start_index=start_index,
                    final_index=index,
                    steps=steps,
                    intercepted_by=p.piece_id,
                )

    target_pos = get_position_for_player(color, target_index)
    if target_pos is None:
        return MoveResolution.illegal(start_index, steps)

    occupants = [
        p for p in pieces
        if p.piece_id != mover.piece_id
        and p.position == target_pos
        and not p.is_finished
    ]

    if len(occupants) >= rules.max_pieces_per_cell:
        return MoveResolution.illegal(start_index, steps)

    if any(p.player_id == mover.player_id for p in occupants):
        return MoveResolution.illegal(start_index, steps)

    captured_id = None
    for occupant in occupants:
        if occupant.is_hero and is_safe_position(target_pos):
            # Safe cells shelter heroes: the mover lands beside them
            continue
        captured_id = occupant.piece_id
        break

    return MoveResolution(
        blocked=False,
        start_index=start_index,
        final_index=target_index,
        steps=steps,
        captured_piece_id=captured_id,
    )


@dataclass(frozen=True)
class AppliedMove:
    """A resolved move applied to the state."""
    state: GameState
    survivor: Piece | None       # the mover after the move, None if it was removed or sent home
    hero_finished: bool = False


def apply_move(
    state: GameState,
    actor: Player,
    mover: Piece,
    resolution: MoveResolution,
    card_value: int | None = None,
) -> AppliedMove:
    """
    Apply a non-blocked resolution.

    Captures are resolved first, then the mover's own fate: an intercepted
    mover is captured, a capturing Assassin sacrifices itself, a support
    reaching the center is dismissed, a hero reaching it finishes.
    """
    if resolution.blocked:
        return AppliedMove(state=state, survivor=mover)

    entries = []
    new_state = state

    if resolution.is_intercepted:
        blocker = state.get_piece(resolution.intercepted_by)
        blocker_owner = state.get_player(blocker.player_id) if blocker else None
        entries.append(
            state.make_log_entry(
                actor,
                LogAction.INTERCEPTED,
                card_value=card_value,
                target_player=blocker_owner.name if blocker_owner else None,
                piece_type=mover.support_type,
            )
        )
        new_state = capture_piece(new_state, mover.piece_id)
        return AppliedMove(state=new_state.with_log(*entries), survivor=None)

    final_pos = get_position_for_player(mover.color, resolution.final_index)
    finishing = resolution.reaches_center

    entries.append(
        state.make_log_entry(
            actor,
            LogAction.FINISHED if finishing and mover.is_hero else LogAction.MOVED,
            card_value=card_value,
            piece_type=mover.support_type,
        )
    )

    if resolution.captured_piece_id is not None:
        captured = state.get_piece(resolution.captured_piece_id)
        entries.append(capture_log_entry(state, actor, captured, offset=len(entries)))
        new_state = capture_piece(new_state, captured.piece_id)

    moved = mover.moved_to(final_pos, resolution.final_index, finished=finishing and mover.is_hero)
    new_state = new_state.with_piece(moved)

    if mover.support_type == SupportType.ASSASSIN and resolution.captured_piece_id is not None:
        entries.append(
            state.make_log_entry(
                actor, LogAction.SACRIFICED,
                piece_type=SupportType.ASSASSIN, offset=len(entries),
            )
        )
        new_state = remove_support(new_state, mover.piece_id)
        return AppliedMove(state=new_state.with_log(*entries), survivor=None)

    if finishing and mover.is_support:
        entries.append(
            state.make_log_entry(
                actor, LogAction.DISMISSED,
                piece_type=mover.support_type, offset=len(entries),
            )
        )
        new_state = remove_support(new_state, mover.piece_id)
        return AppliedMove(state=new_state.with_log(*entries), survivor=None)

    return AppliedMove(
        state=new_state.with_log(*entries),
        survivor=moved,
        hero_finished=finishing and mover.is_hero,
    )


def entry_cell(state: GameState, player: Player, use_portal: bool = False) -> Position | None:
    """
    Where the player's hero would enter from home, or None if blocked.

    The start cell is blocked when full or when an opponent stands on it.
    The claimed portal is blocked by any piece at all.
    """
    if use_portal:
        portal = state.claimed_portals.get(player.color)
        if portal is None or state.pieces_at(portal):
            return None
        return portal

    start = ENTRY_POSITIONS[player.color]
    occupants = state.pieces_at(start)
    if len(occupants) >= state.rules.max_pieces_per_cell:
        return None
    if any(p.player_id != player.player_id for p in occupants):
        return None
    return start
