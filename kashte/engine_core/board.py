"""
Board Topology - Static geometry of the 7x7 race board.

The board is a square spiral:
- Outer ring (24 cells), entered by each color at its own entry cell
- Ring 1 (16 cells), whose four corners are the summon points (portals)
- Ring 2 (8 cells)
- A single shared center cell (the finish)

Every color walks the same cells in the same counter-clockwise order,
rotated so that its path starts at its own entry. All functions here are
pure and the tables are built once at import time.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class PlayerColor(str, Enum):
    """Seat colors, in fixed seating order."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


ALL_COLORS: tuple[PlayerColor, ...] = (
    PlayerColor.RED,
    PlayerColor.BLUE,
    PlayerColor.GREEN,
    PlayerColor.YELLOW,
)


@dataclass(frozen=True)
class Position:
    """A cell on the grid. Equality is by value."""
    row: int
    col: int

    def offset(self, d_row: int, d_col: int) -> Position:
        return Position(self.row + d_row, self.col + d_col)


class CellType(str, Enum):
    """Classification of a grid cell."""
    EMPTY = "empty"
    PATH = "path"
    SAFE = "safe"
    ENTRY = "entry"
    SUMMON = "summon"
    CENTER = "center"


BOARD_SIZE = 7
CENTER = Position(3, 3)


def _ring(*cells: tuple[int, int]) -> tuple[Position, ...]:
    return tuple(Position(r, c) for r, c in cells)


# Counter-clockwise from (0, 3)
OUTER_RING = _ring(
    (0, 3), (0, 2), (0, 1), (0, 0),
    (1, 0), (2, 0), (3, 0),
    (4, 0), (5, 0), (6, 0),
    (6, 1), (6, 2), (6, 3),
    (6, 4), (6, 5), (6, 6),
    (5, 6), (4, 6), (3, 6),
    (2, 6), (1, 6), (0, 6),
    (0, 5), (0, 4),
)

RING_1 = _ring(
    (1, 3), (1, 2), (1, 1),
    (2, 1), (3, 1),
    (4, 1), (5, 1),
    (5, 2), (5, 3),
    (5, 4), (5, 5),
    (4, 5), (3, 5),
    (2, 5), (1, 5),
    (1, 4),
)

RING_2 = _ring(
    (2, 3), (2, 2),
    (3, 2), (4, 2),
    (4, 3), (4, 4),
    (3, 4), (2, 4),
)

# Where each color joins each ring
OUTER_ENTRY_INDEX: dict[PlayerColor, int] = {
    PlayerColor.RED: 0,
    PlayerColor.YELLOW: 6,
    PlayerColor.GREEN: 12,
    PlayerColor.BLUE: 18,
}
RING_1_ENTRY_INDEX: dict[PlayerColor, int] = {
    PlayerColor.RED: 0,      # (1,3)
    PlayerColor.YELLOW: 4,   # (3,1)
    PlayerColor.GREEN: 8,    # (5,3)
    PlayerColor.BLUE: 12,    # (3,5)
}
RING_2_ENTRY_INDEX: dict[PlayerColor, int] = {
    PlayerColor.RED: 0,      # (2,3)
    PlayerColor.YELLOW: 2,   # (3,2)
    PlayerColor.GREEN: 4,    # (4,3)
    PlayerColor.BLUE: 6,     # (3,4)
}


def _rotated(ring: tuple[Position, ...], start: int) -> list[Position]:
    return [ring[(start + i) % len(ring)] for i in range(len(ring))]


def build_player_path(color: PlayerColor) -> tuple[Position, ...]:
    """Build the full path for a color: outer ring, ring 1, ring 2, center."""
    path: list[Position] = []
    path.extend(_rotated(OUTER_RING, OUTER_ENTRY_INDEX[color]))
    path.extend(_rotated(RING_1, RING_1_ENTRY_INDEX[color]))
    path.extend(_rotated(RING_2, RING_2_ENTRY_INDEX[color]))
    path.append(CENTER)
    return tuple(path)


PLAYER_PATHS: dict[PlayerColor, tuple[Position, ...]] = {
    color: build_player_path(color) for color in ALL_COLORS
}

TOTAL_PATH_LENGTH = len(OUTER_RING) + len(RING_1) + len(RING_2) + 1  # 49
CENTER_INDEX = TOTAL_PATH_LENGTH - 1

ALL_PATH_CELLS: frozenset[Position] = frozenset(OUTER_RING + RING_1 + RING_2 + (CENTER,))

ENTRY_POSITIONS: dict[PlayerColor, Position] = {
    PlayerColor.RED: Position(0, 3),
    PlayerColor.BLUE: Position(3, 6),
    PlayerColor.GREEN: Position(6, 3),
    PlayerColor.YELLOW: Position(3, 0),
}

# Entry squares are the only safe squares
SAFE_POSITIONS: frozenset[Position] = frozenset(ENTRY_POSITIONS.values())

# Ring 1 corners, one per quadrant
SUMMON_POSITIONS: tuple[Position, ...] = _ring((1, 1), (1, 5), (5, 1), (5, 5))

_PATH_INDEX: dict[PlayerColor, dict[Position, int]] = {
    color: {pos: idx for idx, pos in enumerate(path)}
    for color, path in PLAYER_PATHS.items()
}

_NEIGHBOR_DELTAS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


def is_path_cell(pos: Position) -> bool:
    return pos in ALL_PATH_CELLS


def is_safe_position(pos: Position) -> bool:
    return pos in SAFE_POSITIONS


def is_summon_position(pos: Position) -> bool:
    return pos in SUMMON_POSITIONS


def is_center(pos: Position) -> bool:
    return pos == CENTER


def get_position_for_player(color: PlayerColor, path_index: int) -> Position | None:
    """Map a path index to a cell for a color; None when off the path."""
    path = PLAYER_PATHS[color]
    if path_index < 0 or path_index >= len(path):
        return None
    return path[path_index]


def path_index_for(color: PlayerColor, pos: Position) -> int:
    """Inverse of get_position_for_player; -1 when the cell is not on the path."""
    return _PATH_INDEX[color].get(pos, -1)


def get_cell_type(pos: Position) -> CellType:
    """Classify a cell. Entry takes precedence over safe."""
    if is_center(pos):
        return CellType.CENTER
    if not is_path_cell(pos):
        return CellType.EMPTY
    if pos in ENTRY_POSITIONS.values():
        return CellType.ENTRY
    if is_safe_position(pos):
        return CellType.SAFE
    if is_summon_position(pos):
        return CellType.SUMMON
    return CellType.PATH


def get_entry_color(pos: Position) -> PlayerColor | None:
    for color, entry in ENTRY_POSITIONS.items():
        if entry == pos:
            return color
    return None


def get_adjacent_positions(pos: Position) -> list[Position]:
    """All path cells at Chebyshev distance 1 (8 directions)."""
    adjacent = []
    for d_row, d_col in _NEIGHBOR_DELTAS:
        neighbor = pos.offset(d_row, d_col)
        if is_path_cell(neighbor):
            adjacent.append(neighbor)
    return adjacent


def are_adjacent(a: Position, b: Position) -> bool:
    """True when at most one step apart on both axes, excluding the same cell."""
    row_diff = abs(a.row - b.row)
    col_diff = abs(a.col - b.col)
    return row_diff <= 1 and col_diff <= 1 and (row_diff > 0 or col_diff > 0)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def get_direction(from_pos: Position, to_pos: Position) -> tuple[int, int]:
    """Unit step (d_row, d_col) pointing from one cell toward another."""
    return _sign(to_pos.row - from_pos.row), _sign(to_pos.col - from_pos.col)


def get_push_destination(pusher_pos: Position, target_pos: Position) -> Position | None:
    """
    Cell a target lands on when pushed away from the pusher.

    Returns None when the result is not a path cell (no pushing off the board).
    """
    d_row, d_col = get_direction(pusher_pos, target_pos)
    destination = target_pos.offset(d_row, d_col)
    if is_path_cell(destination):
        return destination
    return None
