"""
Game Setup - Builds the opening GameState.

Seating: the human's chosen color sits first, the remaining colors follow
in fixed order, and the table is cut to the player count. Each player gets
one hero at home, a shuffled deck with an opening hand, and a full support
roster.
"""

from __future__ import annotations
import random

from .board import ALL_COLORS, PlayerColor
from .deck import create_player_hand
from .abilities import create_roster
from .rules import GameRules, DEFAULT_RULES
from .state import GamePhase, GameState, Piece, Player


MIN_PLAYERS = 2
MAX_PLAYERS = len(ALL_COLORS)

COLOR_NAMES: dict[PlayerColor, str] = {
    PlayerColor.RED: "Red",
    PlayerColor.BLUE: "Blue",
    PlayerColor.GREEN: "Green",
    PlayerColor.YELLOW: "Yellow",
}


def hero_id(player_id: str) -> str:
    return f"{player_id}-hero"


def create_players(
    player_count: int,
    human_color: PlayerColor,
    is_hotseat: bool,
    ai_only: bool = False,
) -> tuple[Player, ...]:
    """Seat the players. In hotseat mode everyone is human and named by color."""
    others = [c for c in ALL_COLORS if c != human_color]
    colors = [human_color, *others][:player_count]

    players = []
    for idx, color in enumerate(colors):
        if is_hotseat:
            name = COLOR_NAMES[color]
            is_ai = False
        elif ai_only:
            name = f"CPU {idx + 1}"
            is_ai = True
        else:
            name = "You" if idx == 0 else f"CPU {idx}"
            is_ai = idx > 0
        players.append(Player(player_id=f"player-{idx}", color=color, name=name, is_ai=is_ai))
    return tuple(players)


def create_initial_state(
    player_count: int = 4,
    human_color: PlayerColor = PlayerColor.RED,
    is_hotseat: bool = False,
    seed: int = 0,
    rules: GameRules = DEFAULT_RULES,
    ai_only: bool = False,
) -> GameState:
    """
    Create the opening state.

    Raises ValueError for a player count outside 2-4.
    """
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise ValueError(f"player_count must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {player_count}")

    players = create_players(player_count, PlayerColor(human_color), is_hotseat, ai_only)
    rng = random.Random(seed)

    pieces = tuple(
        Piece(piece_id=hero_id(p.player_id), player_id=p.player_id, color=p.color)
        for p in players
    )
    hands = tuple(create_player_hand(p.player_id, rng, rules.hand_size) for p in players)
    rosters = tuple(create_roster(p.player_id) for p in players)

    first = players[0]
    return GameState(
        players=players,
        pieces=pieces,
        hands=hands,
        rosters=rosters,
        current_player_id=first.player_id,
        phase=GamePhase.SELECT_CARD,
        is_hotseat=is_hotseat,
        # In hotseat mode a human must explicitly start their turn
        turn_ready=(not is_hotseat) or first.is_ai,
        claimed_portals={},
        random_seed=seed,
        rules=rules,
    )
