"""Immutable draw-pile / discard-pile container."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

from ..errors import DeckExhaustedError
from ..rng import SeededRng

__all__ = ["Deck"]

T = TypeVar("T")


@dataclass(frozen=True)
class Deck(Generic[T]):
    """Draw pile plus discard pile.

    The multiset ``draw_pile + discard_pile`` only changes through ``deal`` (cards
    leave for a hand) and ``discard`` (cards come back).  Drawing from an empty
    draw pile reshuffles the discard pile with the caller's random source.
    """

    draw_pile: Tuple[T, ...] = ()
    discard_pile: Tuple[T, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "draw_pile", tuple(self.draw_pile))
        object.__setattr__(self, "discard_pile", tuple(self.discard_pile))

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------
    @classmethod
    def create(cls, cards: Iterable[T], rng: SeededRng) -> "Deck[T]":
        pile = list(cards)
        rng.shuffle(pile)
        return cls(tuple(pile), ())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def draw_count(self) -> int:
        return len(self.draw_pile)

    @property
    def discard_count(self) -> int:
        return len(self.discard_pile)

    @property
    def is_empty(self) -> bool:
        return not self.draw_pile and not self.discard_pile

    def __len__(self) -> int:
        return self.draw_count + self.discard_count

    def peek(self) -> Optional[T]:
        """Top of the draw pile without drawing, or ``None`` if the pile is empty."""
        return self.draw_pile[0] if self.draw_pile else None

    # ------------------------------------------------------------------
    # Transformers
    # ------------------------------------------------------------------
    def reshuffle(self, rng: SeededRng) -> "Deck[T]":
        """Shuffle the discard pile under the remaining draw pile."""
        pile = list(self.discard_pile)
        rng.shuffle(pile)
        return Deck(self.draw_pile + tuple(pile), ())

    def _ensure_drawable(self, rng: SeededRng) -> "Deck[T]":
        deck = self if self.draw_pile else self.reshuffle(rng)
        if not deck.draw_pile:
            raise DeckExhaustedError("Cannot draw: draw and discard piles are both empty")
        return deck

    def draw(self, rng: SeededRng) -> Tuple[T, "Deck[T]"]:
        """Draw the top card; it moves straight to the discard pile."""
        deck = self._ensure_drawable(rng)
        card = deck.draw_pile[0]
        return card, Deck(deck.draw_pile[1:], deck.discard_pile + (card,))

    def deal(self, count: int, rng: SeededRng) -> Tuple[List[T], "Deck[T]"]:
        """Remove up to ``count`` cards for a hand, reshuffling as needed."""
        dealt: List[T] = []
        deck: Deck[T] = self
        while len(dealt) < count and not deck.is_empty:
            deck = deck._ensure_drawable(rng)
            dealt.append(deck.draw_pile[0])
            deck = Deck(deck.draw_pile[1:], deck.discard_pile)
        return dealt, deck

    def discard(self, *cards: T) -> "Deck[T]":
        return Deck(self.draw_pile, self.discard_pile + tuple(cards))
