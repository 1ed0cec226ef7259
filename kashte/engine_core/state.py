"""
Game State - The immutable snapshot the reducer operates on.

Design principles:
- Immutable: every dataclass here is frozen and holds tuples, so a
  transition can only produce a new state, never edit an old one
- Self-contained: the rules and the random seed travel inside the state,
  so (state, action) fully determines the next state
- Observable: every successful transition appends to the game log
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
import random

from .board import PlayerColor, Position
from .rules import GameRules, DEFAULT_RULES


class GamePhase(str, Enum):
    """Turn phases."""
    SELECT_CARD = "select_card"
    SELECT_ACTION = "select_action"
    PORTAL_CHOICE = "portal_choice"
    SELECT_PUSH_TARGET = "select_push_target"
    GAME_OVER = "game_over"


class PieceKind(str, Enum):
    HERO = "hero"
    SUPPORT = "support"


class SupportType(str, Enum):
    """Summonable support units."""
    ESCORT = "escort"        # +1 move to an adjacent own hero
    BLOCKER = "blocker"      # intercepts enemies passing through
    ASSASSIN = "assassin"    # +2 move, dies after capturing
    PUSHER = "pusher"        # free once-per-turn push


ALL_SUPPORT_TYPES: tuple[SupportType, ...] = (
    SupportType.ESCORT,
    SupportType.BLOCKER,
    SupportType.ASSASSIN,
    SupportType.PUSHER,
)


class LogAction(str, Enum):
    """Kinds of game log entries."""
    MOVED = "moved"
    ENTERED = "entered"
    CAPTURED = "captured"
    FINISHED = "finished"
    SKIPPED = "skipped"
    REFRESHED = "refreshed"
    CLAIMED = "claimed"
    STOLE = "stole"
    SUMMONED = "summoned"
    INTERCEPTED = "intercepted"
    SACRIFICED = "sacrificed"
    DISMISSED = "dismissed"
    PUSHED = "pushed"


@dataclass(frozen=True)
class Card:
    """A movement card. Identity is the card_id, never reused."""
    card_id: str
    value: int

    def __post_init__(self):
        if not 1 <= self.value <= 6:
            raise ValueError(f"Card value must be 1-6, got {self.value}")


@dataclass(frozen=True)
class PlayerHand:
    """
    A player's draw pile, held cards and discard pile.

    A card instance lives in exactly one of the three at a time.
    """
    player_id: str
    cards: tuple[Card, ...] = ()
    deck: tuple[Card, ...] = ()
    discard: tuple[Card, ...] = ()

    @property
    def total_cards(self) -> int:
        return len(self.cards) + len(self.deck) + len(self.discard)


@dataclass(frozen=True)
class Piece:
    """
    A piece on (or off) the board.

    A hero has no support_type; a support always has one. The kind is
    derived from support_type, so a hero carrying a subtype cannot exist.
    position is None exactly when path_index is -1 (at home).
    """
    piece_id: str
    player_id: str
    color: PlayerColor
    support_type: SupportType | None = None
    position: Position | None = None
    path_index: int = -1
    is_finished: bool = False

    def __post_init__(self):
        if (self.position is None) != (self.path_index == -1):
            raise ValueError(
                f"Piece {self.piece_id}: position and path_index disagree"
            )

    @property
    def kind(self) -> PieceKind:
        return PieceKind.HERO if self.support_type is None else PieceKind.SUPPORT

    @property
    def is_hero(self) -> bool:
        return self.support_type is None

    @property
    def is_support(self) -> bool:
        return self.support_type is not None

    @property
    def is_on_board(self) -> bool:
        return self.position is not None and not self.is_finished

    def moved_to(self, position: Position, path_index: int, finished: bool = False) -> Piece:
        return replace(self, position=position, path_index=path_index, is_finished=finished)

    def sent_home(self) -> Piece:
        return replace(self, position=None, path_index=-1, is_finished=False)


@dataclass(frozen=True)
class Player:
    player_id: str
    color: PlayerColor
    name: str
    is_ai: bool = False


@dataclass(frozen=True)
class SupportRoster:
    """
    Which support types a player can summon.

    available: types in the pool
    on_field: ids of deployed support pieces
    lost: types that never come back
    """
    player_id: str
    available: frozenset[SupportType] = frozenset(ALL_SUPPORT_TYPES)
    on_field: tuple[str, ...] = ()
    lost: frozenset[SupportType] = frozenset()

    def __post_init__(self):
        if self.available & self.lost:
            raise ValueError("A support type cannot be both available and lost")

    @property
    def on_field_count(self) -> int:
        return len(self.on_field)


@dataclass(frozen=True)
class LogEntry:
    """One human-readable line of the game log."""
    entry_id: str
    player_name: str
    player_color: PlayerColor
    action: LogAction
    card_value: int | None = None
    target_player: str | None = None
    piece_type: SupportType | None = None

    def describe(self) -> str:
        text = f"{self.player_name} {self.action.value}"
        if self.piece_type is not None:
            text += f" {self.piece_type.value}"
        if self.target_player is not None:
            text += f" ({self.target_player})"
        if self.card_value is not None:
            text += f" [{self.card_value}]"
        return text


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    players: tuple[Player, ...]
    pieces: tuple[Piece, ...]
    hands: tuple[PlayerHand, ...]
    rosters: tuple[SupportRoster, ...]
    current_player_id: str

    phase: GamePhase = GamePhase.SELECT_CARD
    selected_card: Card | None = None
    winner: str | None = None
    log: tuple[LogEntry, ...] = ()

    is_hotseat: bool = False
    turn_ready: bool = True

    # color -> claimed summon cell; never mutated, always copied
    claimed_portals: dict[PlayerColor, Position] = field(default_factory=dict)
    pending_portal: Position | None = None

    ability_piece_id: str | None = None
    pusher_used_this_turn: bool = False

    turn_number: int = 0
    random_seed: int = 0
    rules: GameRules = DEFAULT_RULES

    @property
    def current_player(self) -> Player | None:
        return self.get_player(self.current_player_id)

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def get_player(self, player_id: str) -> Player | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def get_player_by_color(self, color: PlayerColor) -> Player | None:
        for p in self.players:
            if p.color == color:
                return p
        return None

    def get_piece(self, piece_id: str) -> Piece | None:
        for piece in self.pieces:
            if piece.piece_id == piece_id:
                return piece
        return None

    def get_hand(self, player_id: str) -> PlayerHand | None:
        for hand in self.hands:
            if hand.player_id == player_id:
                return hand
        return None

    def get_roster(self, player_id: str) -> SupportRoster | None:
        for roster in self.rosters:
            if roster.player_id == player_id:
                return roster
        return None

    def get_hero(self, player_id: str) -> Piece | None:
        for piece in self.pieces:
            if piece.player_id == player_id and piece.is_hero:
                return piece
        return None

    def pieces_at(self, position: Position) -> list[Piece]:
        """Non-finished pieces standing on a cell."""
        return [
            p for p in self.pieces
            if p.position == position and not p.is_finished
        ]

    def with_piece(self, piece: Piece) -> GameState:
        """Return new state with a piece replaced (matched by id)."""
        new_pieces = tuple(
            piece if p.piece_id == piece.piece_id else p
            for p in self.pieces
        )
        return self._copy_with(pieces=new_pieces)

    def with_new_piece(self, piece: Piece) -> GameState:
        return self._copy_with(pieces=self.pieces + (piece,))

    def without_piece(self, piece_id: str) -> GameState:
        return self._copy_with(
            pieces=tuple(p for p in self.pieces if p.piece_id != piece_id)
        )

    def with_hand(self, hand: PlayerHand) -> GameState:
        """Return new state with updated hand."""
        new_hands = tuple(
            hand if h.player_id == hand.player_id else h
            for h in self.hands
        )
        return self._copy_with(hands=new_hands)

    def with_roster(self, roster: SupportRoster) -> GameState:
        """Return new state with updated roster."""
        new_rosters = tuple(
            roster if r.player_id == roster.player_id else r
            for r in self.rosters
        )
        return self._copy_with(rosters=new_rosters)

    def with_log(self, *entries: LogEntry) -> GameState:
        """Return new state with entries appended to the log."""
        return self._copy_with(log=self.log + tuple(entries))

    def make_log_entry(
        self,
        player: Player,
        action: LogAction,
        card_value: int | None = None,
        target_player: str | None = None,
        piece_type: SupportType | None = None,
        offset: int = 0,
    ) -> LogEntry:
        """Build a log entry numbered after the current log (plus offset)."""
        return LogEntry(
            entry_id=f"log-{len(self.log) + offset + 1}",
            player_name=player.name,
            player_color=player.color,
            action=action,
            card_value=card_value,
            target_player=target_player,
            piece_type=piece_type,
        )

    def make_rng(self) -> random.Random:
        """
        Deterministic RNG for this snapshot.

        Seeded from the game seed, the turn and the log length, so the same
        state always shuffles the same way.
        """
        return random.Random(f"{self.random_seed}:{self.turn_number}:{len(self.log)}")

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return GameState(
            players=kwargs.get("players", self.players),
            pieces=kwargs.get("pieces", self.pieces),
            hands=kwargs.get("hands", self.hands),
            rosters=kwargs.get("rosters", self.rosters),
            current_player_id=kwargs.get("current_player_id", self.current_player_id),
            phase=kwargs.get("phase", self.phase),
            selected_card=kwargs.get("selected_card", self.selected_card),
            winner=kwargs.get("winner", self.winner),
            log=kwargs.get("log", self.log),
            is_hotseat=kwargs.get("is_hotseat", self.is_hotseat),
            turn_ready=kwargs.get("turn_ready", self.turn_ready),
            claimed_portals=kwargs.get("claimed_portals", self.claimed_portals),
            pending_portal=kwargs.get("pending_portal", self.pending_portal),
            ability_piece_id=kwargs.get("ability_piece_id", self.ability_piece_id),
            pusher_used_this_turn=kwargs.get("pusher_used_this_turn", self.pusher_used_this_turn),
            turn_number=kwargs.get("turn_number", self.turn_number),
            random_seed=kwargs.get("random_seed", self.random_seed),
            rules=kwargs.get("rules", self.rules),
        )
