"""
Game Rules - Tunable rule constants.

The defaults are the standard rules. A GameRules instance travels inside
GameState so every transition is evaluated against the rules the game was
created with.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class GameRules:
    """
    Numeric rule knobs.

    Movement bonuses stack: a hero gets escort_bonus per adjacent own
    Escort, an Assassin always gets assassin_bonus. max_escort_bonus caps
    the escort part; None leaves it unbounded.
    """
    hand_size: int = 3
    max_pieces_per_cell: int = 2
    max_supports_on_field: int = 3

    escort_bonus: int = 1
    max_escort_bonus: int | None = None
    assassin_bonus: int = 2

    # Minimum card value to summon through a claimed portal
    portal_summon_min_value: int = 3

    # False sends destroyed supports to the roster's lost set instead of
    # back to the pool
    return_lost_supports: bool = True

    def __post_init__(self):
        if self.hand_size < 1:
            raise ValueError("hand_size must be at least 1")
        if self.max_pieces_per_cell < 1:
            raise ValueError("max_pieces_per_cell must be at least 1")
        if self.max_supports_on_field < 0:
            raise ValueError("max_supports_on_field cannot be negative")
        if self.max_escort_bonus is not None and self.max_escort_bonus < 0:
            raise ValueError("max_escort_bonus cannot be negative")


DEFAULT_RULES = GameRules()
