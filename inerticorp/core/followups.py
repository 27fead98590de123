"""Delayed consequences of projects played in earlier quarters."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..crisis.instance import CrisisDefinition, CrisisInstance, CrisisState
from ..rng import SeededRng
from .effects import MeterEffect
from .meters import Meter
from .outcomes import OutcomeTier

__all__ = ["FollowUpType", "PendingFollowUp", "FollowUpResult", "check_all"]

MAX_QUARTERS_ELIGIBLE = 3
BASE_CHANCE = 20
CHANCE_PER_QUARTER = 5
MAX_CHANCE = 40
GOOD_WEIGHT = 20
MEH_WEIGHT = 50

FOLLOW_UP_METERS = (Meter.DELIVERY, Meter.MORALE, Meter.GOVERNANCE, Meter.ALIGNMENT)


class FollowUpType(Enum):
    GOOD = "Good"
    MEH = "Meh"
    CRISIS = "Crisis"


@dataclass(frozen=True)
class PendingFollowUp:
    card_id: str
    card_title: str
    played_at_quarter: int
    original_outcome: OutcomeTier

    def quarters_since_played(self, current_quarter: int) -> int:
        return current_quarter - self.played_at_quarter

    def has_expired(self, current_quarter: int) -> bool:
        return self.quarters_since_played(current_quarter) > MAX_QUARTERS_ELIGIBLE


@dataclass(frozen=True)
class FollowUpResult:
    follow_up: PendingFollowUp
    type: FollowUpType
    effect: Optional[MeterEffect] = None
    crisis: Optional[CrisisInstance] = None

    @property
    def message(self) -> str:
        title = self.follow_up.card_title
        if self.crisis is not None:
            return f"Fallout from '{title}': {self.crisis.title}"
        if self.effect is not None:
            return f"Follow-up on '{title}': {self.effect.meter.value} {self.effect.delta:+d}"
        return f"Follow-up on '{title}'"


def _determine_type(roll: int, original: OutcomeTier) -> FollowUpType:
    good, meh = GOOD_WEIGHT, MEH_WEIGHT
    if original is OutcomeTier.GOOD:
        good += 10
        meh -= 5
    elif original is OutcomeTier.BAD:
        good -= 10
        meh -= 10
    if roll <= good:
        return FollowUpType.GOOD
    if roll <= good + meh:
        return FollowUpType.MEH
    return FollowUpType.CRISIS


def _pick_meter(rng: SeededRng) -> Meter:
    return FOLLOW_UP_METERS[rng.next_int(0, len(FOLLOW_UP_METERS))]


def _meh_effect(rng: SeededRng) -> MeterEffect:
    meter = _pick_meter(rng)
    positive = rng.next_int(1, 101) <= 60
    magnitude = rng.next_int(2, 6)
    return MeterEffect(meter, magnitude if positive else -magnitude)


def check_all(
    pending: Sequence[PendingFollowUp],
    current_quarter: int,
    crisis_pool: Sequence[CrisisDefinition],
    crises: CrisisState,
    rng: SeededRng,
) -> Tuple[List[PendingFollowUp], List[FollowUpResult], CrisisState]:
    """Roll every eligible follow-up once.

    Returns the follow-ups still pending, the ones that fired, and the crisis
    state with any crises the fired follow-ups opened.  Without a crisis pool a
    crisis roll degrades to a meh result.
    """
    remaining: List[PendingFollowUp] = []
    results: List[FollowUpResult] = []
    for follow_up in pending:
        if follow_up.has_expired(current_quarter):
            continue
        chance = min(MAX_CHANCE, BASE_CHANCE + follow_up.quarters_since_played(current_quarter) * CHANCE_PER_QUARTER)
        if rng.next_int(1, 101) > chance:
            remaining.append(follow_up)
            continue

        kind = _determine_type(rng.next_int(1, 101), follow_up.original_outcome)
        if kind is FollowUpType.CRISIS and crisis_pool:
            definition = crisis_pool[rng.next_int(0, len(crisis_pool))]
            crises, instance = crises.create_crisis(definition, current_quarter, f"followup:{follow_up.card_id}")
            results.append(FollowUpResult(follow_up, kind, crisis=instance))
        elif kind is FollowUpType.GOOD:
            effect = MeterEffect(_pick_meter(rng), rng.next_int(3, 8))
            results.append(FollowUpResult(follow_up, kind, effect=effect))
        else:
            results.append(FollowUpResult(follow_up, FollowUpType.MEH, effect=_meh_effect(rng)))
    return remaining, results, crises
