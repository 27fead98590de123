"""Lingering effects spawned by crisis responses (e.g. an inept project manager)."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from ..core.meters import Meter

__all__ = ["SideEffectDefinition", "ActiveSideEffect"]


@dataclass(frozen=True)
class SideEffectDefinition:
    id: str
    title: str
    duration: int
    recurring_impact: Mapping[Meter, int] = field(default_factory=dict)

    def activate(self) -> "ActiveSideEffect":
        return ActiveSideEffect(self.id, self.title, self.duration, dict(self.recurring_impact))


@dataclass(frozen=True)
class ActiveSideEffect:
    """Applies ``recurring_impact`` once per Resolution until ``remaining_quarters`` runs out."""

    effect_id: str
    title: str
    remaining_quarters: int
    recurring_impact: Mapping[Meter, int] = field(default_factory=dict)

    @property
    def is_expired(self) -> bool:
        return self.remaining_quarters <= 0

    def tick(self) -> "ActiveSideEffect":
        return replace(self, remaining_quarters=self.remaining_quarters - 1)
