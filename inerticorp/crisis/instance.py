"""Crisis definitions, live crisis instances and the set of open crises."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from ..core.meters import Meter

__all__ = ["CrisisStatus", "CrisisDefinition", "CrisisInstance", "CrisisState"]

MIN_SEVERITY = 1
MAX_SEVERITY = 5


class CrisisStatus(Enum):
    ACTIVE = "Active"
    MITIGATED = "Mitigated"
    ESCALATED = "Escalated"
    EXPIRED = "Expired"


def _clamp_severity(value: int) -> int:
    return max(MIN_SEVERITY, min(MAX_SEVERITY, int(value)))


@dataclass(frozen=True)
class CrisisDefinition:
    """Template from which crisis instances are created."""

    id: str
    title: str
    description: str
    severity: int
    deadline_after: int
    base_impact: Mapping[Meter, int] = field(default_factory=dict)
    ongoing_impact: Mapping[Meter, int] = field(default_factory=dict)
    tags: Tuple[str, ...] = ()
    minimum_spend: Optional[int] = None

    def create_instance(self, instance_id: str, created_turn: int, origin: str) -> "CrisisInstance":
        return CrisisInstance(
            instance_id=instance_id,
            definition_id=self.id,
            title=self.title,
            description=self.description,
            severity=self.severity,
            tags=tuple(self.tags),
            created_turn=created_turn,
            deadline_turn=created_turn + self.deadline_after,
            base_impact=dict(self.base_impact),
            ongoing_impact=dict(self.ongoing_impact),
            origin=origin,
            minimum_spend=self.minimum_spend,
        )


@dataclass(frozen=True)
class CrisisInstance:
    """One live crisis.

    ``base_impact`` hits once if the deadline passes unresolved;
    ``ongoing_impact`` hits every Resolution phase while the crisis is active.
    """

    instance_id: str
    definition_id: str
    title: str
    description: str
    severity: int
    tags: Tuple[str, ...]
    created_turn: int
    deadline_turn: int
    base_impact: Mapping[Meter, int]
    ongoing_impact: Mapping[Meter, int]
    origin: str
    minimum_spend: Optional[int] = None
    status: CrisisStatus = CrisisStatus.ACTIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "severity", _clamp_severity(self.severity))

    @property
    def is_active(self) -> bool:
        return self.status is CrisisStatus.ACTIVE

    def is_overdue(self, current_turn: int) -> bool:
        return self.deadline_turn <= current_turn

    def can_fully_mitigate_with(self, spend: int) -> bool:
        return self.minimum_spend is None or spend >= self.minimum_spend

    # ------------------------------------------------------------------
    # Transformers
    # ------------------------------------------------------------------
    def with_reduced_severity(self, amount: int = 1) -> "CrisisInstance":
        return replace(self, severity=self.severity - amount)

    def with_extended_deadline(self, turns: int = 1) -> "CrisisInstance":
        return replace(self, deadline_turn=self.deadline_turn + turns)

    def with_mitigated(self) -> "CrisisInstance":
        return replace(self, status=CrisisStatus.MITIGATED)

    def with_escalated(self) -> "CrisisInstance":
        return replace(self, status=CrisisStatus.ESCALATED)

    def with_expired(self) -> "CrisisInstance":
        return replace(self, status=CrisisStatus.EXPIRED)


@dataclass(frozen=True)
class CrisisState:
    """Open crises, in creation order.

    Closed crises (mitigated, escalated, expired) are dropped from the state and
    handed back to the caller instead.  ``next_serial`` keeps instance ids unique.
    """

    crises: Tuple[CrisisInstance, ...] = ()
    next_serial: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "crises", tuple(self.crises))

    def __len__(self) -> int:
        return len(self.crises)

    @property
    def active(self) -> List[CrisisInstance]:
        return [c for c in self.crises if c.is_active]

    def get(self, instance_id: str) -> Optional[CrisisInstance]:
        for crisis in self.crises:
            if crisis.instance_id == instance_id:
                return crisis
        return None

    def generate_instance_id(self, turn: int) -> str:
        return f"crisis_q{turn}_{self.next_serial}"

    def add(self, crisis: CrisisInstance) -> "CrisisState":
        return CrisisState(self.crises + (crisis,), self.next_serial + 1)

    def update(self, crisis: CrisisInstance) -> "CrisisState":
        crises = tuple(crisis if c.instance_id == crisis.instance_id else c for c in self.crises)
        return replace(self, crises=crises)

    def remove(self, instance_id: str) -> "CrisisState":
        return replace(self, crises=tuple(c for c in self.crises if c.instance_id != instance_id))

    def create_crisis(self, definition: CrisisDefinition, turn: int, origin: str) -> Tuple["CrisisState", CrisisInstance]:
        instance = definition.create_instance(self.generate_instance_id(turn), turn, origin)
        return self.add(instance), instance

    def process_deadlines(self, current_turn: int) -> Tuple["CrisisState", List[CrisisInstance]]:
        """Expire every active crisis whose deadline has arrived."""
        expired = [c.with_expired() for c in self.crises if c.is_active and c.is_overdue(current_turn)]
        gone = {c.instance_id for c in expired}
        remaining = tuple(c for c in self.crises if c.instance_id not in gone)
        return replace(self, crises=remaining), expired

    def total_ongoing_impact(self) -> Dict[Meter, int]:
        totals: Dict[Meter, int] = {}
        for crisis in self.active:
            for meter, delta in crisis.ongoing_impact.items():
                totals[meter] = totals.get(meter, 0) + delta
        return totals
