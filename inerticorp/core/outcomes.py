"""Tiered outcome resolution.

A card's ``OutcomeProfile`` holds one effect list per tier.  ``get_weights`` turns
the contextual signals of the moment (alignment, board pressure, evil score,
position risk, honeymoon, momentum, affinity synergy) into a Good / Expected /
Bad distribution summing to 100, and ``OutcomeProfile.roll`` draws a tier from
it with a single cumulative-weight draw.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Sequence, Tuple

from ..rng import SeededRng

if TYPE_CHECKING:  # pragma: no cover
    from .effects import Effect

__all__ = [
    "OutcomeTier",
    "OutcomeWeights",
    "OutcomeProfile",
    "get_weights",
    "crisis_choice_weights",
    "roll_tier",
    "roll_crisis_choice",
]

BASE_GOOD = 20
BASE_BAD = 20
WEIGHT_MIN = 5
WEIGHT_MAX = 60
EXPECTED_MIN = 10
EXPECTED_MAX = 90
HONEYMOON_QUARTERS = 3
HONEYMOON_GOOD_BONUS = 15
HONEYMOON_BAD_REDUCTION = 10


class OutcomeTier(Enum):
    GOOD = "Good"
    EXPECTED = "Expected"
    BAD = "Bad"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OutcomeWeights:
    good: int
    expected: int
    bad: int

    @property
    def total(self) -> int:
        return self.good + self.expected + self.bad

    def __iter__(self):
        return iter((self.good, self.expected, self.bad))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def get_weights(
    alignment: int,
    pressure_level: int,
    evil_score: int,
    additional_risk_modifier: int = 0,
    quarter_number: int = HONEYMOON_QUARTERS + 1,
    momentum_bonus: int = 0,
    affinity_synergy_bonus: int = 0,
    is_corporate_card: bool = False,
) -> OutcomeWeights:
    """Good / Expected / Bad weights for a card play; always sums to 100."""
    alignment_mod = int((alignment - 50) / 5)
    pressure_mod = pressure_level - 1
    evil_mod = evil_score // 2

    good_bonus = 0
    bad_reduction = 0
    if quarter_number <= HONEYMOON_QUARTERS:
        fade = HONEYMOON_QUARTERS - quarter_number + 1
        good_bonus = HONEYMOON_GOOD_BONUS * fade // HONEYMOON_QUARTERS
        bad_reduction = HONEYMOON_BAD_REDUCTION * fade // HONEYMOON_QUARTERS

    evil_path = 0
    if is_corporate_card:
        if evil_score >= 20:
            evil_path = 10
        elif evil_score >= 10:
            evil_path = 5

    good = (
        BASE_GOOD + alignment_mod - pressure_mod - evil_mod
        + good_bonus + momentum_bonus + affinity_synergy_bonus + evil_path
    )
    bad = BASE_BAD - alignment_mod + pressure_mod + evil_mod + additional_risk_modifier - bad_reduction

    good = _clamp(good, WEIGHT_MIN, WEIGHT_MAX)
    bad = _clamp(bad, WEIGHT_MIN, WEIGHT_MAX)
    expected = 100 - good - bad

    # Expected keeps its floor; the shortfall comes out of Bad first, then Good.
    if expected < EXPECTED_MIN:
        shortfall = EXPECTED_MIN - expected
        from_bad = min(shortfall, bad - WEIGHT_MIN)
        bad -= from_bad
        good -= shortfall - from_bad
        expected = EXPECTED_MIN
    return OutcomeWeights(good, expected, bad)


def crisis_choice_weights(pc_cost: int = 0, corporate_delta: int = 0) -> OutcomeWeights:
    """Fixed distributions for crisis choices: paid, corporate, or standard."""
    if pc_cost > 0:
        return OutcomeWeights(70, 20, 10)
    if corporate_delta > 0:
        return OutcomeWeights(70, 10, 20)
    return OutcomeWeights(20, 70, 10)


def roll_tier(weights: OutcomeWeights, rng: SeededRng) -> OutcomeTier:
    total = weights.total
    if total <= 0:
        return OutcomeTier.EXPECTED
    roll = rng.next_int(0, total)
    if roll < weights.good:
        return OutcomeTier.GOOD
    if roll < weights.good + weights.expected:
        return OutcomeTier.EXPECTED
    return OutcomeTier.BAD


@dataclass(frozen=True)
class OutcomeProfile:
    """Effect lists keyed by tier."""

    good: Tuple["Effect", ...] = ()
    expected: Tuple["Effect", ...] = ()
    bad: Tuple["Effect", ...] = ()

    def __post_init__(self) -> None:
        for name in ("good", "expected", "bad"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @classmethod
    def uniform(cls, effects: Sequence["Effect"]) -> "OutcomeProfile":
        effects = tuple(effects)
        return cls(effects, effects, effects)

    def effects_for(self, tier: OutcomeTier) -> Tuple["Effect", ...]:
        if tier is OutcomeTier.GOOD:
            return self.good
        if tier is OutcomeTier.BAD:
            return self.bad
        return self.expected

    def roll(
        self,
        rng: SeededRng,
        alignment: int,
        pressure_level: int,
        evil_score: int,
        additional_risk_modifier: int = 0,
        quarter_number: int = HONEYMOON_QUARTERS + 1,
        momentum_bonus: int = 0,
        affinity_synergy_bonus: int = 0,
        is_corporate_card: bool = False,
    ) -> Tuple[OutcomeTier, Tuple["Effect", ...]]:
        weights = get_weights(
            alignment,
            pressure_level,
            evil_score,
            additional_risk_modifier,
            quarter_number,
            momentum_bonus,
            affinity_synergy_bonus,
            is_corporate_card,
        )
        tier = roll_tier(weights, rng)
        return tier, self.effects_for(tier)


def roll_crisis_choice(
    profile: OutcomeProfile,
    rng: SeededRng,
    pc_cost: int = 0,
    corporate_delta: int = 0,
) -> Tuple[OutcomeTier, Tuple["Effect", ...]]:
    tier = roll_tier(crisis_choice_weights(pc_cost, corporate_delta), rng)
    return tier, profile.effects_for(tier)
