"""Board ouster risk as a d20 threshold, and the roll that resolves it."""
from __future__ import annotations

from ..rng import SeededRng

__all__ = [
    "get_ouster_threshold",
    "get_ouster_risk",
    "roll_for_ouster",
    "get_risk_description",
    "MAX_THRESHOLD",
    "MAX_RISK_PERCENT",
]

HONEYMOON_QUARTERS = 8
MAX_THRESHOLD = 14
MAX_RISK_PERCENT = 70
DIE_SIDES = 20


def _base_threshold(favorability: int) -> int:
    if favorability >= 40:
        return 1
    if favorability >= 25:
        return 2
    if favorability >= 10:
        return 3
    return 4


def get_ouster_threshold(
    favorability: int,
    pressure_level: int,
    quarters_survived: int = 0,
    evil_score: int = 0,
    directive_met: bool = False,
    profit_positive: bool = False,
    profit_improving: bool = False,
    profit_grew: bool = False,
    consecutive_negative_quarters: int = 0,
    weak_project_streak: int = 0,
    cards_played: int = 1,
) -> int:
    """Ousted on a d20 roll at or below this value; clamped to ``[0, 14]``.

    ``profit_grew`` is the older single flag: it grants both the profit-positive
    and the profit-improving bonus.
    """
    if favorability >= 55:
        return 0

    threshold = _base_threshold(favorability) + pressure_level // 2

    if quarters_survived < 4:
        threshold = max(0, threshold - 4)
    elif quarters_survived < 6:
        threshold = max(0, threshold - 2)
    elif quarters_survived < HONEYMOON_QUARTERS:
        threshold = max(0, threshold - 1)

    if evil_score == 0:
        threshold = max(0, threshold - 2)
    elif evil_score < 5:
        threshold = max(0, threshold - 1)

    if profit_grew:
        profit_positive = profit_improving = True
    # Base operations alone do not earn the board's confidence
    if cards_played > 0:
        if directive_met:
            threshold = max(0, threshold - 2)
        if profit_positive:
            threshold = max(0, threshold - 1)
        if profit_improving:
            threshold = max(0, threshold - 1)

    if consecutive_negative_quarters >= 3:
        threshold += 4
    elif consecutive_negative_quarters >= 2:
        threshold += 2

    if weak_project_streak >= 6:
        threshold += 10
    elif weak_project_streak >= 4:
        threshold += 6
    elif weak_project_streak >= 2:
        threshold += 3

    return max(0, min(threshold, MAX_THRESHOLD))


def get_ouster_risk(favorability: int, pressure_level: int, **factors) -> int:
    """Ouster probability in percent, ``0..70``."""
    threshold = get_ouster_threshold(favorability, pressure_level, **factors)
    return min(MAX_RISK_PERCENT, threshold * 100 // DIE_SIDES)


def roll_for_ouster(rng: SeededRng, favorability: int, pressure_level: int, **factors) -> bool:
    """Roll a d20; ousted iff the roll is at or below the threshold.

    No draw is made when the threshold is 0.
    """
    threshold = get_ouster_threshold(favorability, pressure_level, **factors)
    if threshold == 0:
        return False
    return rng.next_int(1, DIE_SIDES + 1) <= threshold


def get_risk_description(
    favorability: int,
    pressure_level: int,
    quarters_survived: int = 0,
    evil_score: int = 0,
    directive_met: bool = False,
    profit_grew: bool = False,
) -> str:
    threshold = get_ouster_threshold(
        favorability,
        pressure_level,
        quarters_survived=quarters_survived,
        evil_score=evil_score,
        directive_met=directive_met,
        profit_grew=profit_grew,
    )
    risk = threshold * 100 // DIE_SIDES

    notes = []
    if quarters_survived < HONEYMOON_QUARTERS:
        notes.append("honeymoon")
    if evil_score < 10:
        notes.append("ethical")
    if directive_met or profit_grew:
        notes.append("performing")
    suffix = f" ({', '.join(notes)})" if notes else ""

    if threshold == 0:
        return f"Safe - Board is confident{suffix}"
    if threshold == 1:
        return f"Low ({risk}%) - Oust on natural 1{suffix}"
    if threshold == 2:
        return f"Moderate ({risk}%) - Oust on 1-2{suffix}"
    if threshold <= 4:
        label = "Elevated"
    elif threshold <= 8:
        label = "High"
    else:
        label = "Critical"
    return f"{label} ({risk}%) - Oust on 1-{threshold}{suffix}"
