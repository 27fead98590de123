"""Quarter number and phase marker of the four-phase cycle."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

__all__ = ["GamePhase", "QuarterState"]


class GamePhase(Enum):
    BOARD_DEMAND = "BoardDemand"
    PLAY_CARDS = "PlayCards"
    CRISIS = "Crisis"
    RESOLUTION = "Resolution"

    def next(self) -> "GamePhase":
        order = list(GamePhase)
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class QuarterState:
    quarter_number: int = 1
    phase: GamePhase = GamePhase.BOARD_DEMAND

    def __post_init__(self) -> None:
        if self.quarter_number < 1:
            raise ValueError("quarter_number starts at 1")

    @classmethod
    def initial(cls) -> "QuarterState":
        return cls()

    def with_phase(self, phase: GamePhase) -> "QuarterState":
        return replace(self, phase=phase)

    def next_quarter(self) -> "QuarterState":
        return QuarterState(self.quarter_number + 1, GamePhase.BOARD_DEMAND)

    @property
    def fiscal_year(self) -> int:
        return (self.quarter_number - 1) // 4 + 1

    @property
    def quarter_in_year(self) -> int:
        return (self.quarter_number - 1) % 4 + 1

    @property
    def formatted(self) -> str:
        return f"Y{self.fiscal_year}Q{self.quarter_in_year}"
