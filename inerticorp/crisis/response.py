"""Purchasable crisis responses and the staff assigned to carry them out."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Tuple

from ..core.meters import Meter
from ..core.outcomes import OutcomeTier
from .instance import CrisisInstance

__all__ = [
    "StaffQuality",
    "StaffQualityWeights",
    "CrisisOperation",
    "ResponseOutcome",
    "ResponseOutcomes",
    "CrisisResponse",
]


class StaffQuality(Enum):
    INEPT = "Inept"
    MEH = "Meh"
    GOOD = "Good"


@dataclass(frozen=True)
class StaffQualityWeights:
    inept: int
    meh: int
    good: int

    def __post_init__(self) -> None:
        if min(self.inept, self.meh, self.good) < 0:
            raise ValueError("staff weights must be non-negative")
        if self.total <= 0:
            raise ValueError("staff weights must not all be zero")

    @property
    def total(self) -> int:
        return self.inept + self.meh + self.good

    def determine(self, roll: int) -> StaffQuality:
        """Map a ``0..99`` roll onto the weights."""
        normalized = roll % self.total
        if normalized < self.inept:
            return StaffQuality.INEPT
        if normalized < self.inept + self.meh:
            return StaffQuality.MEH
        return StaffQuality.GOOD

    @classmethod
    def preset(cls, name: str) -> "StaffQualityWeights":
        try:
            return STAFF_PRESETS[name.lower()]
        except KeyError as exc:
            raise KeyError(f"Staff preset '{name}' not found. Available: {list(STAFF_PRESETS)}") from exc


STAFF_PRESETS = {
    "premium": StaffQualityWeights(5, 25, 70),
    "standard": StaffQualityWeights(20, 50, 30),
    "budget": StaffQualityWeights(60, 30, 10),
}


class CrisisOperation(Enum):
    NONE = "None"
    MITIGATE = "Mitigate"
    REDUCE_SEVERITY = "ReduceSeverity"
    EXTEND_DEADLINE = "ExtendDeadline"
    ESCALATE = "Escalate"


@dataclass(frozen=True)
class ResponseOutcome:
    operation: CrisisOperation = CrisisOperation.NONE
    meter_deltas: Mapping[Meter, int] = field(default_factory=dict)
    spawn_effects: Tuple[str, ...] = ()
    aftershocks: Tuple[str, ...] = ()
    amount: int = 1

    def apply_to(self, crisis: CrisisInstance) -> CrisisInstance:
        if self.operation is CrisisOperation.MITIGATE:
            return crisis.with_mitigated()
        if self.operation is CrisisOperation.REDUCE_SEVERITY:
            return crisis.with_reduced_severity(self.amount)
        if self.operation is CrisisOperation.EXTEND_DEADLINE:
            return crisis.with_extended_deadline(self.amount)
        if self.operation is CrisisOperation.ESCALATE:
            return crisis.with_escalated()
        return crisis


@dataclass(frozen=True)
class ResponseOutcomes:
    success: ResponseOutcome
    mixed: ResponseOutcome
    fail: ResponseOutcome

    def for_tier(self, tier: OutcomeTier) -> ResponseOutcome:
        if tier is OutcomeTier.GOOD:
            return self.success
        if tier is OutcomeTier.BAD:
            return self.fail
        return self.mixed


@dataclass(frozen=True)
class CrisisResponse:
    id: str
    title: str
    description: str
    cost: int
    mitigation_bonus: int
    staff: StaffQualityWeights
    outcomes: ResponseOutcomes
    effective_tags: Tuple[str, ...] = ()

    def total_mitigation_bonus(self, crisis: CrisisInstance) -> int:
        """Listed bonus, +1 when any effective tag matches the crisis."""
        tag_bonus = 1 if any(t in crisis.tags for t in self.effective_tags) else 0
        return self.mitigation_bonus + tag_bonus
