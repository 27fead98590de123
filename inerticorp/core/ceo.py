"""Status of the player-CEO: board standing, ethics, profit history and exit flags."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from ..config import DifficultySettings

__all__ = ["CEOState"]

MAX_PRESSURE_LEVEL = 8
PROFIT_HISTORY_SIZE = 3
BASE_PARACHUTE = 10


@dataclass(frozen=True)
class CEOState:
    """Immutable CEO record.

    ``board_favorability`` is clamped to ``[0, 100]`` and ``evil_score`` floored at
    0 on construction.  Profits are in millions.
    """

    board_favorability: int = 75
    pressure_level: int = 1
    quarters_survived: int = 0
    evil_score: int = 0
    total_profit: int = 0
    accumulated_bonus: int = 0
    retirement_threshold: int = 140

    last_quarter_profit: int = 0
    current_quarter_profit: int = 0
    consecutive_successes: int = 0
    last_quarterly_bonus: int = 0
    evil_score_last_quarter: int = 0
    consecutive_negative_quarters: int = 0
    weak_project_streak: int = 0
    total_cards_played: int = 0
    recent_profits: Tuple[int, ...] = ()

    is_ousted: bool = False
    has_retired: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "board_favorability", max(0, min(100, int(self.board_favorability))))
        object.__setattr__(self, "evil_score", max(0, int(self.evil_score)))
        object.__setattr__(self, "recent_profits", tuple(self.recent_profits))

    @classmethod
    def initial(cls, settings: DifficultySettings) -> "CEOState":
        return cls(
            board_favorability=settings.starting_favorability,
            retirement_threshold=settings.retirement_threshold,
        )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return self.is_ousted or self.has_retired

    @property
    def can_retire(self) -> bool:
        return self.accumulated_bonus >= self.retirement_threshold

    @property
    def momentum_bonus(self) -> int:
        """Good-weight bonus earned by consecutive Good card outcomes."""
        if self.consecutive_successes >= 3:
            return 5
        if self.consecutive_successes == 2:
            return 3
        return 0

    @property
    def evil_delta_this_quarter(self) -> int:
        return self.evil_score - self.evil_score_last_quarter

    @property
    def parachute_payout(self) -> int:
        """Severance in millions: tenure pays, evil costs, never below the contractual base."""
        if self.total_cards_played == 0:
            return BASE_PARACHUTE
        return max(BASE_PARACHUTE, BASE_PARACHUTE + self.quarters_survived * 3 - self.evil_score * 2)

    @property
    def profit_trajectory(self) -> int:
        """Latest recorded profit minus the mean of the older entries."""
        if len(self.recent_profits) < 2:
            return 0
        older = self.recent_profits[:-1]
        return self.recent_profits[-1] - int(sum(older) / len(older))

    @property
    def is_profit_improving(self) -> bool:
        return self.profit_trajectory > 0

    # ------------------------------------------------------------------
    # Transformers
    # ------------------------------------------------------------------
    def with_quarter_complete(self) -> "CEOState":
        quarters = self.quarters_survived + 1
        return replace(
            self,
            quarters_survived=quarters,
            pressure_level=min(quarters // 2, MAX_PRESSURE_LEVEL),
        )

    def with_favorability_change(self, delta: int) -> "CEOState":
        return replace(self, board_favorability=self.board_favorability + delta)

    def with_evil_change(self, delta: int) -> "CEOState":
        return replace(self, evil_score=self.evil_score + delta)

    def with_profit_added(self, profit: int) -> "CEOState":
        return replace(self, total_profit=self.total_profit + profit)

    def with_current_profit_added(self, delta: int) -> "CEOState":
        return replace(self, current_quarter_profit=self.current_quarter_profit + delta)

    def with_success_result(self, was_success: bool) -> "CEOState":
        return replace(self, consecutive_successes=self.consecutive_successes + 1 if was_success else 0)

    def with_profit_recorded(self, quarter_profit: int) -> "CEOState":
        profits = (self.recent_profits + (quarter_profit,))[-PROFIT_HISTORY_SIZE:]
        negative = self.consecutive_negative_quarters + 1 if quarter_profit < 0 else 0
        return replace(self, recent_profits=profits, consecutive_negative_quarters=negative)

    def with_project_performance_recorded(self, project_profit: int) -> "CEOState":
        streak = self.weak_project_streak + 1 if project_profit <= 0 else 0
        return replace(self, weak_project_streak=streak)

    def with_cards_played_recorded(self, count: int) -> "CEOState":
        return replace(self, total_cards_played=self.total_cards_played + count)

    def with_bonus_awarded(self, bonus: int) -> "CEOState":
        return replace(
            self,
            accumulated_bonus=self.accumulated_bonus + bonus,
            last_quarterly_bonus=bonus,
        )

    def with_evil_snapshot(self) -> "CEOState":
        return replace(self, evil_score_last_quarter=self.evil_score)

    def with_quarter_closed(self, quarter_profit: int) -> "CEOState":
        """Roll the quarter's profit into ``last_quarter_profit`` and reset the running total."""
        return replace(self, last_quarter_profit=quarter_profit, current_quarter_profit=0)

    def with_ousted(self) -> "CEOState":
        return replace(self, is_ousted=True)

    def with_retirement(self) -> "CEOState":
        return replace(self, has_retired=True)
