"""Political Capital ledger and its earn / spend / decay economics."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Tuple

from ..config import GameConfig
from ..errors import InsufficientCapitalError
from .meters import Meter, OrgState

__all__ = ["ResourceState", "EXCHANGE_RATES", "restraint_bonus"]

# Meter points surrendered for one point of political capital
EXCHANGE_RATES: Dict[Meter, int] = {
    Meter.DELIVERY: 10,
    Meter.MORALE: 10,
    Meter.ALIGNMENT: 10,
    Meter.GOVERNANCE: 15,
    Meter.RUNWAY: 20,
}


def restraint_bonus(cards_played: int) -> int:
    """PC refunded at the end of the card phase for playing few cards."""
    return {0: 3, 1: 2, 2: 1}.get(cards_played, 0)


@dataclass(frozen=True)
class ResourceState:
    """Political capital clamped to ``[0, maximum]`` on construction."""

    political_capital: int = 10
    maximum: int = 20
    decay_threshold: int = 10
    decay_amount: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "political_capital", max(0, min(self.maximum, int(self.political_capital))))

    @classmethod
    def initial(cls, cfg: GameConfig) -> "ResourceState":
        return cls(
            political_capital=cfg.starting_political_capital,
            maximum=cfg.max_political_capital,
            decay_threshold=cfg.pc_decay_threshold,
            decay_amount=cfg.pc_decay_amount,
        )

    def can_afford(self, cost: int) -> bool:
        return self.political_capital >= cost

    def with_change(self, delta: int) -> "ResourceState":
        return replace(self, political_capital=self.political_capital + delta)

    def with_spend(self, cost: int) -> "ResourceState":
        """Spend ``cost`` PC; raises instead of partially spending."""
        if cost < 0:
            raise ValueError("cost must be non-negative")
        if not self.can_afford(cost):
            raise InsufficientCapitalError(cost, self.political_capital)
        return self.with_change(-cost)

    def with_turn_end_adjustments(self, org: OrgState) -> "ResourceState":
        """Quarter-end income from Governance and Alignment, loss from low Morale, then decay."""
        delta = 0
        if org.governance >= 60:
            delta += 1
        if org.alignment >= 60:
            delta += 1
        if org.morale < 30:
            delta -= 1
        value = self.political_capital + delta
        if value > self.decay_threshold:
            value -= self.decay_amount
        return replace(self, political_capital=value)

    # ------------------------------------------------------------------
    # Meter exchange
    # ------------------------------------------------------------------
    @staticmethod
    def exchange_rate(meter: Meter) -> Tuple[int, int]:
        """``(meter_cost, pc_gain)`` for one exchange."""
        return EXCHANGE_RATES[meter], 1

    @staticmethod
    def can_exchange(org: OrgState, meter: Meter) -> bool:
        return org.get_meter(meter) >= EXCHANGE_RATES[meter]
