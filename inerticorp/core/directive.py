"""Board directives: the profit bar the CEO must clear each quarter."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

__all__ = ["BoardDirective", "PROFIT_FLOOR", "PROFIT_INCREASE", "generate"]


def _profit_floor_requirement(pressure_level: int) -> int:
    return min(21, 5 + pressure_level * 2)


def _profit_floor_met(last_profit: int, current_profit: int, pressure_level: int) -> bool:
    return current_profit >= _profit_floor_requirement(pressure_level)


def _profit_increase_requirement(pressure_level: int) -> int:
    return 5 + int(math.floor(math.sqrt(pressure_level * 8)))


def _profit_increase_met(last_profit: int, current_profit: int, pressure_level: int) -> bool:
    return current_profit - last_profit >= _profit_increase_requirement(pressure_level)


@dataclass(frozen=True)
class BoardDirective:
    id: str
    title: str
    requirement: Callable[[int], int]
    evaluate: Callable[[int, int, int], bool]

    def required_amount(self, pressure_level: int) -> int:
        return self.requirement(pressure_level)

    def is_met(self, last_profit: int, current_profit: int, pressure_level: int) -> bool:
        return self.evaluate(last_profit, current_profit, pressure_level)

    def describe(self, pressure_level: int) -> str:
        return f"{self.title}: ${self.required_amount(pressure_level)}M target"


PROFIT_FLOOR = BoardDirective(
    id="profit_floor",
    title="Achieve Quarterly Profit",
    requirement=_profit_floor_requirement,
    evaluate=_profit_floor_met,
)

# Growth target; also sets the scale of revenue cards
PROFIT_INCREASE = BoardDirective(
    id="profit_increase",
    title="Increase Quarterly Profit",
    requirement=_profit_increase_requirement,
    evaluate=_profit_increase_met,
)


def generate(pressure_level: int) -> BoardDirective:
    """Directive for the coming quarter."""
    return PROFIT_FLOOR
