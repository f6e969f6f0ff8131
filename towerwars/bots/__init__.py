"""
Bots module - Simple automated players.

Provides:
- BotPolicy: Interface for bot decision-making
- RandomPolicy: Uniform choice among turn actions
- FirstLegalPolicy: Deterministic first choice
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
]
