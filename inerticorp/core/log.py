"""Structured in-game log returned by every engine step."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from .meters import Meter
from .outcomes import OutcomeTier
from .quarter import GamePhase

__all__ = ["LogCategory", "LogEntry", "QuarterLog"]


class LogCategory(Enum):
    INFO = "Info"
    METER_CHANGE = "MeterChange"
    EVENT = "Event"
    OUTCOME = "Outcome"


@dataclass(frozen=True)
class LogEntry:
    category: LogCategory
    message: str
    meter: Optional[Meter] = None
    delta: Optional[int] = None
    tier: Optional[OutcomeTier] = None

    @classmethod
    def info(cls, message: str, delta: Optional[int] = None) -> "LogEntry":
        return cls(LogCategory.INFO, message, delta=delta)

    @classmethod
    def meter_change(cls, meter: Meter, delta: int, message: str) -> "LogEntry":
        return cls(LogCategory.METER_CHANGE, message, meter=meter, delta=delta)

    @classmethod
    def event(cls, message: str) -> "LogEntry":
        return cls(LogCategory.EVENT, message)

    @classmethod
    def outcome(cls, tier: OutcomeTier, title: str, label: str) -> "LogEntry":
        return cls(LogCategory.OUTCOME, f"[{tier.value}] {title}: {label}", tier=tier)

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class QuarterLog:
    """Ordered entries produced by one ``advance`` call."""

    quarter_number: int
    phase: GamePhase
    entries: Tuple[LogEntry, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    def with_entries(self, entries: Iterable[LogEntry]) -> "QuarterLog":
        return QuarterLog(self.quarter_number, self.phase, self.entries + tuple(entries))

    @property
    def outcome_tiers(self) -> Tuple[OutcomeTier, ...]:
        return tuple(e.tier for e in self.entries if e.tier is not None)

    def meter_deltas(self) -> dict:
        """Net change per meter across the log."""
        totals: dict = {}
        for e in self.entries:
            if e.category is LogCategory.METER_CHANGE and e.meter is not None:
                totals[e.meter] = totals.get(e.meter, 0) + (e.delta or 0)
        return totals

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
