"""Exception hierarchy raised by the simulation core.

Callers are expected to branch on these; the engine never catches its own
errors and never silently no-ops an illegal call.
"""
from __future__ import annotations

__all__ = [
    "GameError",
    "InvalidOperationError",
    "TerminalStateError",
    "InsufficientCapitalError",
    "DeckExhaustedError",
    "InvalidChoiceError",
    "ContentError",
]


class GameError(Exception):
    """Base class for every error raised by the simulation core."""


class InvalidOperationError(GameError, RuntimeError):
    """The requested operation is illegal for the current state."""


class TerminalStateError(InvalidOperationError):
    """Advance was called on a CEO who has already been ousted or retired."""


class InsufficientCapitalError(InvalidOperationError):
    """A political-capital spend exceeded the available balance."""

    def __init__(self, cost: int, available: int):
        super().__init__(f"Cannot spend {cost} PC: only {available} PC available")
        self.cost = cost
        self.available = available


class DeckExhaustedError(InvalidOperationError):
    """Both the draw pile and the discard pile are empty."""


class InvalidChoiceError(GameError, ValueError):
    """An input referenced a choice, card, crisis or response that does not exist."""


class ContentError(GameError, ValueError):
    """Game content (cards, crises, responses) is malformed."""
