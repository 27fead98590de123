"""Quarterly profit model and money formatting (amounts are in millions)."""
from __future__ import annotations

from .meters import OrgState
from ..rng import SeededRng

__all__ = [
    "growth_multiplier",
    "calculate_base_operations",
    "delivery_multiplier",
    "target_scaling",
    "revenue_diminishing_returns",
    "scale_revenue_profit",
    "format_profit",
    "format_signed_profit",
]

BASE_OPERATIONS_MIN = 80
BASE_OPERATIONS_MAX = 140
NEGATIVE_CHANCE = 8
QUARTERLY_GROWTH_RATE = 0.02

HIGH_METER_THRESHOLD = 60
LOW_METER_THRESHOLD = 35
METER_BONUS = 10
METER_PENALTY = 15
VARIANCE = 15

# Revenue cards are balanced around a $25M target
BASELINE_TARGET = 25


def growth_multiplier(quarters_elapsed: int) -> float:
    return 1.0 + quarters_elapsed * QUARTERLY_GROWTH_RATE


def _meter_modifier(value: int, bonus: int, penalty: int) -> int:
    if value >= HIGH_METER_THRESHOLD:
        return bonus
    if value < LOW_METER_THRESHOLD:
        return -penalty
    return 0


def calculate_base_operations(org: OrgState, rng: SeededRng, quarters_elapsed: int = 0) -> int:
    """Profit from ongoing operations before any projects.

    An 8% market-downturn roll short-circuits into a small, possibly negative,
    result.  Otherwise a base draw is adjusted by Delivery, Runway and (at half
    weight) Governance, plus a symmetric variance.  All ranges grow 2% per
    quarter elapsed.
    """
    g = growth_multiplier(quarters_elapsed)

    if rng.next_int(0, 100) < NEGATIVE_CHANCE:
        return rng.next_int(int(-30 * g), int(21 * g))

    base = rng.next_int(int(BASE_OPERATIONS_MIN * g), int(BASE_OPERATIONS_MAX * g) + 1)

    bonus = int(METER_BONUS * g)
    penalty = int(METER_PENALTY * g)
    modifiers = (
        _meter_modifier(org.delivery, bonus, penalty)
        + _meter_modifier(org.runway, bonus, penalty)
        + _meter_modifier(org.governance, bonus // 2, penalty // 2)
    )

    spread = int(VARIANCE * g)
    variance = rng.next_int(-spread, spread + 1)
    return base + modifiers + variance


def delivery_multiplier(delivery: int) -> float:
    if delivery >= 90:
        return 1.05
    if delivery >= 80:
        return 1.03
    return 1.0


def target_scaling(target_amount: int) -> float:
    return max(0.5, target_amount / BASELINE_TARGET)


def revenue_diminishing_returns(revenue_cards_before: int) -> float:
    if revenue_cards_before <= 0:
        return 1.0
    if revenue_cards_before == 1:
        return 0.65
    return 0.35


def scale_revenue_profit(base_profit: int, target_amount: int, delivery: int, revenue_cards_before: int = 0) -> int:
    """Scale a revenue card's listed profit to the board's current growth target."""
    return int(
        base_profit
        * target_scaling(target_amount)
        * delivery_multiplier(delivery)
        * revenue_diminishing_returns(revenue_cards_before)
    )


# ------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------

def format_profit(amount: int) -> str:
    """``$150M``, ``-$20M``, ``$1.2B``."""
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    if value >= 1000:
        return f"{sign}${value / 1000:.1f}B"
    return f"{sign}${value}M"


def format_signed_profit(amount: int) -> str:
    """``+$15M`` or ``-$15M``."""
    if amount >= 0:
        return f"+${amount}M"
    return f"-${abs(amount)}M"
