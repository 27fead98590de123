"""Quarterly change in board favorability.

``calculate`` scores the quarter's financial result; the adjustment helpers
layer caps and penalties on top for critically low meters and for a CEO who
coasts without running projects.  All functions are pure.
"""
from __future__ import annotations

from typing import NamedTuple, Optional

from ..config import DIFFICULTIES, DifficultySettings
from .meters import OrgState

__all__ = [
    "Adjustment",
    "calculate",
    "tenure_decay",
    "weak_streak_penalty",
    "max_gain_for_streak",
    "get_low_meter_adjustment",
    "expected_project_count",
    "get_low_activity_adjustment",
    "apply_cap",
]

BASE_SUCCESS_REWARD = 8
DIRECTIVE_FAILED_PENALTY = -4
NEGATIVE_PROFIT_PENALTY = -10
PROFIT_DECLINE_PENALTY = -3
BASE_MAX_LOSS = -12
GRACE_PERIOD_QUARTERS = 4

CRITICAL_METER_THRESHOLD = 10
LOW_METER_THRESHOLD = 20

_DEFAULT_SETTINGS = DIFFICULTIES["nadella"]


class Adjustment(NamedTuple):
    """Cap on positive gains (``None`` = uncapped), penalty to add, and the board's reason."""

    max_gain: Optional[int]
    penalty: int
    reason: Optional[str]


NO_ADJUSTMENT = Adjustment(None, 0, None)


def weak_streak_penalty(streak: int) -> int:
    if streak <= 0:
        return 0
    return {1: -1, 2: -3, 3: -5}.get(streak, -7)


def max_gain_for_streak(streak: int) -> Optional[int]:
    if streak <= 0:
        return None
    return {1: 6, 2: 2}.get(streak, 0)


def apply_cap(delta: int, max_gain: Optional[int]) -> int:
    if max_gain is not None and delta > max_gain:
        return max_gain
    return delta


def _success_reward(pressure_level: int, quarters_survived: int, settings: DifficultySettings) -> int:
    reward = BASE_SUCCESS_REWARD + settings.success_reward_bonus
    if quarters_survived < GRACE_PERIOD_QUARTERS:
        return reward
    if settings.is_hard and pressure_level >= 5:
        reward -= 1
    return max(5, reward)


def _max_loss(quarters_survived: int) -> int:
    if quarters_survived < GRACE_PERIOD_QUARTERS:
        return BASE_MAX_LOSS
    tenure = quarters_survived - GRACE_PERIOD_QUARTERS
    return BASE_MAX_LOSS - min(6, (tenure // 4) * 2)


def _evil_penalty_on_success(evil_score: int) -> int:
    if evil_score >= 20:
        return 3
    if evil_score >= 10:
        return 1
    return 0


def _evil_scrutiny_on_failure(evil_score: int) -> int:
    if evil_score >= 20:
        return 8
    if evil_score >= 10:
        return 4
    if evil_score >= 5:
        return 2
    return 0


def calculate(
    last_profit: int,
    current_profit: int,
    directive_met: bool,
    pressure_level: int,
    evil_score: int = 0,
    weak_project_streak: int = 0,
    quarters_survived: int = 0,
    settings: DifficultySettings | None = None,
) -> int:
    """Signed favorability delta for the quarter."""
    settings = settings or _DEFAULT_SETTINGS
    streak_penalty = weak_streak_penalty(weak_project_streak)
    max_gain = max_gain_for_streak(weak_project_streak)
    reward = _success_reward(pressure_level, quarters_survived, settings)

    if current_profit >= 0 and directive_met:
        if current_profit <= last_profit:
            reward //= 2
        gain = reward - _evil_penalty_on_success(evil_score) + streak_penalty
        return apply_cap(gain, max_gain)

    change = 0
    if current_profit < 0:
        change += NEGATIVE_PROFIT_PENALTY - min(4, abs(current_profit) // 5)
    elif current_profit < last_profit:
        change += PROFIT_DECLINE_PENALTY
    if not directive_met:
        change += DIRECTIVE_FAILED_PENALTY
    change -= pressure_level
    change -= _evil_scrutiny_on_failure(evil_score)
    change += streak_penalty
    return max(change, _max_loss(quarters_survived))


def tenure_decay(quarters_survived: int, settings: DifficultySettings | None = None) -> int:
    """-1 per quarter once the board tires of a long tenure."""
    settings = settings or _DEFAULT_SETTINGS
    if settings.tenure_decay_enabled and quarters_survived >= settings.tenure_decay_start_quarter:
        return -1
    return 0


def get_low_meter_adjustment(org: OrgState) -> Adjustment:
    critical = org.meters_below(CRITICAL_METER_THRESHOLD)
    zeroed = org.meters_below(1)
    if len(critical) >= 2 or zeroed:
        names = ", ".join(m.value for m in critical)
        return Adjustment(0, -5, f"Organization in crisis: {names} critically low")
    if len(critical) == 1:
        return Adjustment(0, -2, f"{critical[0].value} critically low - board concerned")
    if org.meters_below(LOW_METER_THRESHOLD):
        return Adjustment(2, 0, "Metrics concerning")
    return NO_ADJUSTMENT


def expected_project_count(quarter_index: int) -> int:
    return 1 if quarter_index < 2 else 2


def get_low_activity_adjustment(projects_played: int, quarter_index: int) -> Adjustment:
    """Penalty for running fewer projects than the board expects, scaled by tenure."""
    expected = expected_project_count(quarter_index)
    if projects_played >= expected or quarter_index < 2:
        return NO_ADJUSTMENT
    multiplier = 1 + quarter_index // 3
    if projects_played == 0:
        return Adjustment(0, -5 * multiplier, "Board expects active strategic leadership")
    return Adjustment(
        0,
        -4 * multiplier,
        f"Board expected {expected}+ projects, only {projects_played} delivered",
    )
