"""Project cards the CEO plays, event cards with choices, and the hand."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple

from ..errors import ContentError, InvalidChoiceError, InvalidOperationError
from ..rng import SeededRng
from .effects import Effect, MeterEffect, ProfitEffect
from .meters import Meter, OrgState
from .outcomes import OutcomeProfile, OutcomeTier, roll_crisis_choice
from .profit import scale_revenue_profit

__all__ = [
    "CardCategory",
    "RiskLevel",
    "PlayableCard",
    "Choice",
    "EventCard",
    "CardHand",
    "affinity_synergy_bonus",
]

MIN_CHOICES = 2
MAX_CHOICES = 4


class CardCategory(Enum):
    ACTION = "Action"
    RESPONSE = "Response"
    CORPORATE = "Corporate"
    EMAIL = "Email"
    REVENUE = "Revenue"


class RiskLevel(IntEnum):
    SAFE = 1
    MODERATE = 2
    VOLATILE = 3


def _profit_of(effects: Iterable[Effect]) -> int:
    return sum(e.delta for e in effects if isinstance(e, ProfitEffect))


def _describe_meters(effects: Iterable[Effect]) -> str:
    parts = [f"{e.meter.value} {e.delta:+d}" for e in effects if isinstance(e, MeterEffect)]
    return ", ".join(parts) if parts else "No effect"


@dataclass(frozen=True)
class PlayableCard:
    id: str
    title: str
    description: str
    outcomes: OutcomeProfile
    corporate_intensity: int = 0
    category: CardCategory = CardCategory.ACTION
    meter_affinity: Optional[Meter] = None
    risk_level: RiskLevel = RiskLevel.MODERATE

    @property
    def is_corporate(self) -> bool:
        return self.corporate_intensity > 0

    @property
    def is_revenue(self) -> bool:
        return self.category is CardCategory.REVENUE

    def affinity_modifier(self, org: OrgState) -> int:
        """Risk relief (positive) or extra risk (negative) from the affinity meter."""
        if self.meter_affinity is None:
            return 0
        value = org.get_meter(self.meter_affinity)
        if value >= 70:
            return 15
        if value >= 60:
            return 8
        if value < 25:
            return -15
        if value < 40:
            return -8
        return 0

    # ------------------------------------------------------------------
    # Forecast helpers
    # ------------------------------------------------------------------
    def revenue_range(self, target_amount: Optional[int] = None, delivery: int = 0) -> Tuple[int, int]:
        """(worst, best) listed profit across tiers, scaled when ``target_amount`` is given."""
        profits = [_profit_of(self.outcomes.effects_for(t)) for t in OutcomeTier]
        if target_amount is not None:
            profits = [scale_revenue_profit(p, target_amount, delivery) for p in profits]
        return min(profits), max(profits)

    def forecast_summary(self) -> str:
        if self.is_revenue:
            low, high = self.revenue_range()
            if low or high:
                return f"${low}M" if low == high else f"${low}M to ${high}M"
        return _describe_meters(self.outcomes.expected)

    def zero_meter_warnings(self, org: OrgState) -> List[Meter]:
        """Meters the Bad outcome would drive to zero."""
        return [
            e.meter
            for e in self.outcomes.bad
            if isinstance(e, MeterEffect) and e.delta < 0 and org.get_meter(e.meter) + e.delta <= 0
        ]


def affinity_synergy_bonus(card: PlayableCard, played: Sequence[PlayableCard]) -> int:
    """Good-weight bonus for stacking cards that share a meter affinity this quarter."""
    if card.meter_affinity is None:
        return 0
    matches = sum(1 for c in played if c.meter_affinity is card.meter_affinity)
    if matches >= 2:
        return 10
    if matches == 1:
        return 5
    return 0


@dataclass(frozen=True)
class Choice:
    """One option of an event card.

    Either ``effects`` apply flatly, or ``outcome_profile`` is rolled with the
    fixed crisis-choice distribution selected by the PC cost and evil delta.
    """

    id: str
    label: str
    effects: Tuple[Effect, ...] = ()
    outcome_profile: Optional[OutcomeProfile] = None
    corporate_intensity_delta: int = 0
    pc_cost: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "effects", tuple(self.effects))

    @property
    def is_tiered(self) -> bool:
        return self.outcome_profile is not None

    @property
    def is_corporate(self) -> bool:
        return self.corporate_intensity_delta > 0

    def resolve(self, rng: SeededRng) -> Tuple[Optional[OutcomeTier], Tuple[Effect, ...]]:
        """Tier (``None`` for flat choices) and the effects to apply."""
        if self.outcome_profile is None:
            return None, self.effects
        return roll_crisis_choice(self.outcome_profile, rng, self.pc_cost, self.corporate_intensity_delta)


@dataclass(frozen=True)
class EventCard:
    id: str
    title: str
    description: str
    choices: Tuple[Choice, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "choices", tuple(self.choices))
        if not MIN_CHOICES <= len(self.choices) <= MAX_CHOICES:
            raise ContentError(
                f"Event card '{self.id}' needs {MIN_CHOICES}-{MAX_CHOICES} choices, got {len(self.choices)}"
            )
        ids = [c.id for c in self.choices]
        if len(set(ids)) != len(ids):
            raise ContentError(f"Event card '{self.id}' has duplicate choice ids: {ids}")

    @property
    def choice_ids(self) -> Tuple[str, ...]:
        return tuple(c.id for c in self.choices)

    def get_choice(self, choice_id: str) -> Choice:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        raise InvalidChoiceError(
            f"Choice '{choice_id}' not found on '{self.id}'. Available: {list(self.choice_ids)}"
        )


@dataclass(frozen=True)
class CardHand:
    cards: Tuple[PlayableCard, ...] = ()

    MAX_SIZE = 7

    def __post_init__(self) -> None:
        object.__setattr__(self, "cards", tuple(self.cards))
        if len(self.cards) > self.MAX_SIZE:
            raise InvalidOperationError(f"A hand holds at most {self.MAX_SIZE} cards")

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self):
        return iter(self.cards)

    @property
    def is_full(self) -> bool:
        return len(self.cards) >= self.MAX_SIZE

    @property
    def space(self) -> int:
        return self.MAX_SIZE - len(self.cards)

    def contains(self, card_id: str) -> bool:
        return any(c.id == card_id for c in self.cards)

    def get(self, card_id: str) -> PlayableCard:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise InvalidChoiceError(f"Card '{card_id}' is not in hand")

    def with_card_removed(self, card_id: str) -> "CardHand":
        card = self.get(card_id)
        return CardHand(tuple(c for c in self.cards if c is not card))

    def with_cards_added(self, cards: Iterable[PlayableCard]) -> "CardHand":
        return CardHand(self.cards + tuple(cards))
