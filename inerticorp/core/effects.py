"""Effect kinds applied by cards, crisis choices and follow-ups.

Every effect returns a new ``OrgState`` plus one ``LogEntry``; the input state is
never touched.  Profit and fine effects leave the meters alone: the engine reads
their amounts to update the quarter's project profit.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Tuple, Union

from ..errors import ContentError
from .log import LogEntry
from .meters import Meter, OrgState
from .profit import format_signed_profit

__all__ = [
    "MeterEffect",
    "ProfitEffect",
    "FineEffect",
    "Effect",
    "apply_effects",
    "effect_from_dict",
]


@dataclass(frozen=True)
class MeterEffect:
    meter: Meter
    delta: int

    def apply(self, org: OrgState) -> Tuple[OrgState, LogEntry]:
        message = f"{self.meter.value} {self.delta:+d}"
        return org.with_meter_change(self.meter, self.delta), LogEntry.meter_change(self.meter, self.delta, message)


@dataclass(frozen=True)
class ProfitEffect:
    delta: int

    def apply(self, org: OrgState) -> Tuple[OrgState, LogEntry]:
        return org, LogEntry.info(f"Profit {format_signed_profit(self.delta)}", delta=self.delta)


@dataclass(frozen=True)
class FineEffect:
    amount: int
    reason: str = "Legal settlement"

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", max(0, int(self.amount)))

    def apply(self, org: OrgState) -> Tuple[OrgState, LogEntry]:
        return org, LogEntry.info(f"Fine: ${self.amount}M ({self.reason})", delta=-self.amount)


Effect = Union[MeterEffect, ProfitEffect, FineEffect]


def apply_effects(org: OrgState, effects: Iterable[Effect]) -> Tuple[OrgState, List[LogEntry]]:
    """Apply ``effects`` in order, one log entry each."""
    entries: List[LogEntry] = []
    for effect in effects:
        org, entry = effect.apply(org)
        entries.append(entry)
    return org, entries


# ------------------------------------------------------------------
# Content serialisation
# ------------------------------------------------------------------

def effect_from_dict(data: Mapping) -> Effect:
    """Build an effect from its YAML form.

    ``{meter: Morale, delta: -5}``, ``{profit: 15}`` or ``{fine: 10, reason: ...}``.
    """
    if "meter" in data:
        try:
            return MeterEffect(Meter.parse(data["meter"]), int(data.get("delta", 0)))
        except ValueError as exc:
            raise ContentError(str(exc)) from exc
    if "profit" in data:
        return ProfitEffect(int(data["profit"]))
    if "fine" in data:
        return FineEffect(int(data["fine"]), data.get("reason", "Legal settlement"))
    raise ContentError(f"Unrecognised effect: {dict(data)}")

