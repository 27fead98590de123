"""Organizational meters: five bounded health indicators of the company."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List

__all__ = ["Meter", "OrgState", "METER_MIN", "METER_MAX"]

METER_MIN = 0
METER_MAX = 100
DEFAULT_METER_VALUE = 60


class Meter(Enum):
    DELIVERY = "Delivery"
    MORALE = "Morale"
    GOVERNANCE = "Governance"
    ALIGNMENT = "Alignment"
    RUNWAY = "Runway"

    @classmethod
    def parse(cls, name: str) -> "Meter":
        """Case-insensitive lookup by display value or member name."""
        key = str(name).strip().lower()
        for meter in cls:
            if key in (meter.value.lower(), meter.name.lower()):
                return meter
        raise ValueError(f"Unknown meter '{name}'. Available: {[m.value for m in cls]}")

    @property
    def field_name(self) -> str:
        return self.name.lower()


def _clamp(value: int) -> int:
    return max(METER_MIN, min(METER_MAX, int(value)))


@dataclass(frozen=True)
class OrgState:
    """Snapshot of the five meters, each clamped to ``[0, 100]`` on construction."""

    delivery: int = DEFAULT_METER_VALUE
    morale: int = DEFAULT_METER_VALUE
    governance: int = DEFAULT_METER_VALUE
    alignment: int = DEFAULT_METER_VALUE
    runway: int = DEFAULT_METER_VALUE

    def __post_init__(self) -> None:
        for meter in Meter:
            object.__setattr__(self, meter.field_name, _clamp(getattr(self, meter.field_name)))

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------
    @classmethod
    def default(cls) -> "OrgState":
        return cls()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def get_meter(self, meter: Meter) -> int:
        return getattr(self, meter.field_name)

    def meters_below(self, threshold: int) -> List[Meter]:
        return [m for m in Meter if self.get_meter(m) < threshold]

    def lowest_meter(self) -> Meter:
        """Lowest meter; ties resolve to canonical order."""
        return min(Meter, key=self.get_meter)

    # ------------------------------------------------------------------
    # Transformers
    # ------------------------------------------------------------------
    def with_meter_change(self, meter: Meter, delta: int) -> "OrgState":
        return replace(self, **{meter.field_name: self.get_meter(meter) + delta})

    def with_meter_changes(self, deltas: Dict[Meter, int]) -> "OrgState":
        org = self
        for meter, delta in deltas.items():
            org = org.with_meter_change(meter, delta)
        return org

    def __str__(self) -> str:
        return ", ".join(f"{m.value}={self.get_meter(m)}" for m in Meter)
