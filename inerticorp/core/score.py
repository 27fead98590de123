"""Quarterly bonus and the end-of-game score."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple

from .ceo import CEOState
from .meters import Meter, OrgState
from .resources import ResourceState

__all__ = ["QuarterlyBonus", "ScoreBreakdown", "calculate_quarterly_bonus", "calculate_final_score"]

PC_CONVERSION_RATE = 5
PROJECTS_BONUS_RATE = 1
RETIRED_MULTIPLIER = 2.0
OUSTED_MULTIPLIER = 0.5
# Game stopped while the CEO is still in office
IN_OFFICE_MULTIPLIER = 1.0


class QuarterlyBonus(NamedTuple):
    amount: int
    reasons: List[str]


@dataclass(frozen=True)
class ScoreBreakdown:
    accumulated_bonus: int
    golden_parachute: int
    pc_conversion: int
    political_capital: int
    projects_bonus: int
    total_projects: int
    subtotal: int
    multiplier: float
    multiplier_reason: str
    final_score: int


def calculate_quarterly_bonus(ceo: CEOState, org: OrgState, directive_met: bool, profit_delta: int) -> QuarterlyBonus:
    """Bonus (in millions) accrued toward retirement, with the board's reasons."""
    bonus = 2
    reasons = ["+$2M: Quarterly base compensation"]

    if directive_met:
        bonus += 4
        reasons.append("+$4M: Met board directive")
    if profit_delta > 0:
        bonus += 3
        reasons.append("+$3M: Profit growth quarter-over-quarter")
    if all(org.get_meter(m) >= 40 for m in Meter):
        bonus += 3
        reasons.append("+$3M: All organizational metrics healthy")
    if ceo.board_favorability >= 70:
        bonus += 2
        reasons.append("+$2M: Strong board confidence")
    if ceo.evil_delta_this_quarter <= 0:
        bonus += 2
        reasons.append("+$2M: Maintained ethical standards")

    if not directive_met:
        bonus -= 3
        reasons.append("-$3M: Failed board directive")
    critical = org.meters_below(20)
    if critical:
        penalty = 2 * len(critical)
        bonus -= penalty
        reasons.append(f"-${penalty}M: Critical metrics ({', '.join(m.value for m in critical)})")
    if ceo.evil_score >= 15:
        bonus -= 3
        reasons.append("-$3M: Reputation concerns (Evil 15+)")

    return QuarterlyBonus(max(0, bonus), reasons)


def calculate_final_score(ceo: CEOState, resources: ResourceState) -> ScoreBreakdown:
    parachute = ceo.parachute_payout
    pc_conversion = resources.political_capital * PC_CONVERSION_RATE
    projects_bonus = ceo.total_cards_played * PROJECTS_BONUS_RATE
    subtotal = ceo.accumulated_bonus + parachute + pc_conversion + projects_bonus
    if ceo.has_retired:
        multiplier, reason = RETIRED_MULTIPLIER, "Graceful Retirement"
    elif ceo.is_ousted:
        multiplier, reason = OUSTED_MULTIPLIER, "Ousted"
    else:
        multiplier, reason = IN_OFFICE_MULTIPLIER, "Still In Office"
    return ScoreBreakdown(
        accumulated_bonus=ceo.accumulated_bonus,
        golden_parachute=parachute,
        pc_conversion=pc_conversion,
        political_capital=resources.political_capital,
        projects_bonus=projects_bonus,
        total_projects=ceo.total_cards_played,
        subtotal=subtotal,
        multiplier=multiplier,
        multiplier_reason=reason,
        final_score=max(0, int(subtotal * multiplier)),
    )
