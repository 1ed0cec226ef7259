"""
Bot Policy - How an AI seat picks its next action.

A policy sees the state and the actions the generator offers for it, and
answers with one of them. Policies are advisory: they never touch state,
the caller dispatches the chosen action through the reducer like any
human input.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    The action a bot settled on.

    explanation and confidence are for logs and the UI; the loop only
    looks at action.
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0
    evaluated_actions: int = 0


class BotPolicy(ABC):
    """
    Base class for AI seats.

    Subclasses range from a coin flip (RandomPolicy) to the priority
    rules of SimpleBot.
    """

    @abstractmethod
    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Pick one of legal_actions for the seat to play in state.

        Raises:
            ValueError: if legal_actions is empty
        """

    def get_name(self) -> str:
        return self.__class__.__name__


def _require_actions(legal_actions: list[Action]):
    if not legal_actions:
        raise ValueError("No legal actions available")


class RandomPolicy(BotPolicy):
    """Uniform pick; seeded, so simulations replay."""

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        _require_actions(legal_actions)
        return BotDecision(
            action=self.rng.choice(legal_actions),
            explanation="Random pick",
            confidence=1.0 / len(legal_actions),
            evaluated_actions=len(legal_actions),
        )


class FirstLegalPolicy(BotPolicy):
    """Always the first generated action. Handy for deterministic tests."""

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        _require_actions(legal_actions)
        return BotDecision(
            action=legal_actions[0],
            explanation="First legal action",
            evaluated_actions=1,
        )
