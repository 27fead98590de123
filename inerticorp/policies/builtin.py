"""Built-in autopilot policies."""
from __future__ import annotations

from typing import Optional

import numpy as np

from ..config import GameConfig
from ..core.cards import Choice, EventCard, PlayableCard
from ..core.effects import MeterEffect, ProfitEffect
from ..core.quarter import GamePhase
from ..engine import inputs
from . import Policy, register_policy

__all__ = ["Passive", "Balanced", "Gambler"]


def _affordable_choices(card: EventCard, political_capital: int) -> list:
    return [c for c in card.choices if c.pc_cost <= political_capital]


def _cheapest_choice(card: EventCard, political_capital: int) -> Choice:
    """First affordable choice, or the cheapest one when nothing is affordable."""
    affordable = _affordable_choices(card, political_capital)
    if affordable:
        return affordable[0]
    return min(card.choices, key=lambda c: c.pc_cost)


def expected_value(card: PlayableCard) -> float:
    """Meter gain of the expected outcome, with profit counted at a fifth of a point per $1M."""
    value = 0.0
    for effect in card.outcomes.expected:
        if isinstance(effect, MeterEffect):
            value += effect.delta
        elif isinstance(effect, ProfitEffect):
            value += effect.delta / 5
    return value - 2 * card.corporate_intensity


@register_policy
class Passive(Policy):
    """Never plays a card; takes the first affordable crisis choice."""

    def decide(self, state, /):
        if state.phase is GamePhase.CRISIS and state.current_crisis is not None:
            choice = _cheapest_choice(state.current_crisis, state.resources.political_capital)
            return inputs.for_choice(choice.id)
        return inputs.empty()


@register_policy
class Balanced(Policy):
    """Plays up to two cards with the best expected meter gain and retires as soon as it can."""

    MAX_CARDS = 2

    def decide(self, state, /):
        phase = state.phase
        if phase is GamePhase.PLAY_CARDS:
            return self._play(state)
        if phase is GamePhase.CRISIS and state.current_crisis is not None:
            return inputs.for_choice(self._choose(state.current_crisis, state.resources.political_capital).id)
        if phase is GamePhase.RESOLUTION and state.ceo.can_retire:
            return inputs.for_retirement()
        return inputs.empty()

    def _play(self, state):
        played = state.cards_played_count
        if played >= self.MAX_CARDS or not state.can_play_card or not state.can_afford_next_card:
            return inputs.end_card_play()
        best: Optional[PlayableCard] = max(state.hand, key=expected_value, default=None)
        if best is None or expected_value(best) <= 0:
            return inputs.end_card_play()
        return inputs.for_play_card(best.id, end_after=played + 1 >= self.MAX_CARDS)

    @staticmethod
    def _choose(card: EventCard, political_capital: int) -> Choice:
        affordable = _affordable_choices(card, political_capital)
        paid = [c for c in affordable if c.pc_cost > 0 and not c.is_corporate]
        if paid:
            return max(paid, key=lambda c: c.pc_cost)
        clean = [c for c in affordable if not c.is_corporate]
        if clean:
            return clean[0]
        return _cheapest_choice(card, political_capital)


@register_policy
class Gambler(Policy):
    """Random play from a numpy generator seeded with the game seed."""

    PLAY_PROBABILITY = 0.7

    def __init__(self, cfg: GameConfig):
        super().__init__(cfg)
        self.rng = np.random.default_rng(cfg.seed)

    def decide(self, state, /):
        phase = state.phase
        if phase is GamePhase.PLAY_CARDS:
            if not (state.can_play_card and state.can_afford_next_card):
                return inputs.end_card_play()
            if self.rng.random() >= self.PLAY_PROBABILITY:
                return inputs.end_card_play()
            card = state.hand.cards[int(self.rng.integers(len(state.hand)))]
            return inputs.for_play_card(card.id)
        if phase is GamePhase.CRISIS and state.current_crisis is not None:
            affordable = _affordable_choices(state.current_crisis, state.resources.political_capital)
            if not affordable:
                return inputs.for_choice(_cheapest_choice(state.current_crisis, 0).id)
            return inputs.for_choice(affordable[int(self.rng.integers(len(affordable)))].id)
        if phase is GamePhase.RESOLUTION and state.ceo.can_retire:
            return inputs.for_retirement()
        return inputs.empty()
