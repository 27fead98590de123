"""2d6 crisis resolver.

A response attempt rolls two six-sided dice, adds the response's mitigation
bonus, an alignment modifier and a severity penalty, and compares the result
against fixed thresholds: 10+ succeeds, 6-9 is mixed, anything lower fails.
A success bought below the crisis's minimum spend is downgraded to mixed.
Staff quality is drawn separately; inept staff on a non-success saddle the
company with an extra lingering side effect.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Tuple

from ..core.meters import Meter, OrgState
from ..core.outcomes import OutcomeTier
from ..core.resources import ResourceState
from ..errors import InsufficientCapitalError
from ..rng import SeededRng
from .instance import CrisisInstance
from .response import CrisisResponse, StaffQuality

__all__ = ["ResolutionResult", "resolve", "calculate_success_chance", "roll_modifier"]

SUCCESS_THRESHOLD = 10
MIXED_THRESHOLD = 6
INEPT_SIDE_EFFECT = "inept_project_manager"

TIER_LABELS = {
    OutcomeTier.GOOD: "Success",
    OutcomeTier.EXPECTED: "Mixed",
    OutcomeTier.BAD: "Fail",
}


@dataclass(frozen=True)
class ResolutionResult:
    tier: OutcomeTier
    staff: StaffQuality
    crisis: CrisisInstance
    meter_deltas: Mapping[Meter, int] = field(default_factory=dict)
    spawned_effects: Tuple[str, ...] = ()
    aftershocks: Tuple[str, ...] = ()
    raw_roll: int = 0
    modified_roll: int = 0
    narrative: str = ""

    @property
    def label(self) -> str:
        return TIER_LABELS[self.tier]


def roll_modifier(crisis: CrisisInstance, response: CrisisResponse, org: OrgState) -> int:
    """Net modifier on the 2d6 roll."""
    alignment = 1 if org.alignment >= 60 else (-1 if org.alignment < 30 else 0)
    severity = -(crisis.severity - 3) if crisis.severity > 3 else 0
    return response.total_mitigation_bonus(crisis) + alignment + severity


def _tier_for(modified_roll: int) -> OutcomeTier:
    if modified_roll >= SUCCESS_THRESHOLD:
        return OutcomeTier.GOOD
    if modified_roll >= MIXED_THRESHOLD:
        return OutcomeTier.EXPECTED
    return OutcomeTier.BAD


_STAFF_NOTES = {
    StaffQuality.GOOD: "Your team executed flawlessly.",
    StaffQuality.MEH: "The team did... okay.",
    StaffQuality.INEPT: "The assigned PM somehow made everything worse.",
}


def _narrative(crisis: CrisisInstance, tier: OutcomeTier, staff: StaffQuality, roll: int) -> str:
    if tier is OutcomeTier.GOOD:
        outcome = f"'{crisis.title}' has been fully resolved."
    elif tier is OutcomeTier.EXPECTED:
        outcome = f"'{crisis.title}' is partially contained, but issues remain."
    else:
        outcome = f"'{crisis.title}' has escalated despite our efforts."
    return f"{outcome} {_STAFF_NOTES[staff]} (Roll: {roll})"


def resolve(
    crisis: CrisisInstance,
    response: CrisisResponse,
    resources: ResourceState,
    org: OrgState,
    rng: SeededRng,
) -> ResolutionResult:
    """Resolve one response attempt.  Draws three values: two dice, then staff."""
    if not resources.can_afford(response.cost):
        raise InsufficientCapitalError(response.cost, resources.political_capital)

    raw = rng.next_int(1, 7) + rng.next_int(1, 7)
    modified = raw + roll_modifier(crisis, response, org)

    tier = _tier_for(modified)
    if tier is OutcomeTier.GOOD and not crisis.can_fully_mitigate_with(response.cost):
        tier = OutcomeTier.EXPECTED

    staff = response.staff.determine(rng.next_int(0, 100))
    outcome = response.outcomes.for_tier(tier)

    spawned = list(outcome.spawn_effects)
    if staff is StaffQuality.INEPT and tier is not OutcomeTier.GOOD:
        spawned.append(INEPT_SIDE_EFFECT)

    return ResolutionResult(
        tier=tier,
        staff=staff,
        crisis=outcome.apply_to(crisis),
        meter_deltas=dict(outcome.meter_deltas),
        spawned_effects=tuple(spawned),
        aftershocks=tuple(outcome.aftershocks),
        raw_roll=raw,
        modified_roll=modified,
        narrative=_narrative(crisis, tier, staff, modified),
    )


def calculate_success_chance(crisis: CrisisInstance, response: CrisisResponse, org: OrgState) -> int:
    """Percent chance (truncated) that the modified 2d6 roll reaches the success threshold."""
    target = SUCCESS_THRESHOLD - roll_modifier(crisis, response, org)
    hits = sum(1 for d1 in range(1, 7) for d2 in range(1, 7) if d1 + d2 >= target)
    return hits * 100 // 36
