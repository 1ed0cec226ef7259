"""
Bots module - AI opponents.

Provides:
- BotPolicy: Interface for bot decision-making
- SimpleBot / get_ai_action: the built-in priority-rule opponent
- RandomPolicy, FirstLegalPolicy: baselines for tests and simulations
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .simple_bot import SimpleBot, get_ai_action

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "SimpleBot",
    "get_ai_action",
]
