"""Player inputs accepted by ``advance``.

The set is closed: every variant below is handled by the quarter engine, and
the factory helpers mirror the names used by callers (``for_choice``,
``end_card_play`` and so on).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..core.meters import Meter

__all__ = [
    "EmptyInput",
    "ChoiceInput",
    "PlayCardInput",
    "EndCardPlayInput",
    "MeterExchangeInput",
    "MeterBoostInput",
    "BoardSchmoozeInput",
    "ReorgInput",
    "EvilRedemptionInput",
    "RetirementInput",
    "QuarterInput",
    "empty",
    "for_choice",
    "for_play_card",
    "end_card_play",
    "for_meter_exchange",
    "for_meter_boost",
    "for_board_schmooze",
    "for_reorg",
    "for_evil_redemption",
    "for_retirement",
]


@dataclass(frozen=True)
class EmptyInput:
    pass


@dataclass(frozen=True)
class ChoiceInput:
    choice_id: str


@dataclass(frozen=True)
class PlayCardInput:
    card_id: str
    end_after: bool = False


@dataclass(frozen=True)
class EndCardPlayInput:
    pass


@dataclass(frozen=True)
class MeterExchangeInput:
    meter: Meter
    amount: int = 1


@dataclass(frozen=True)
class MeterBoostInput:
    meter: Meter


@dataclass(frozen=True)
class BoardSchmoozeInput:
    pass


@dataclass(frozen=True)
class ReorgInput:
    pass


@dataclass(frozen=True)
class EvilRedemptionInput:
    pass


@dataclass(frozen=True)
class RetirementInput:
    pass


QuarterInput = Union[
    EmptyInput,
    ChoiceInput,
    PlayCardInput,
    EndCardPlayInput,
    MeterExchangeInput,
    MeterBoostInput,
    BoardSchmoozeInput,
    ReorgInput,
    EvilRedemptionInput,
    RetirementInput,
]


# ------------------------------------------------------------------
# Factory helpers
# ------------------------------------------------------------------

def empty() -> EmptyInput:
    return EmptyInput()


def for_choice(choice_id: str) -> ChoiceInput:
    return ChoiceInput(choice_id)


def for_play_card(card_id: str, end_after: bool = False) -> PlayCardInput:
    return PlayCardInput(card_id, end_after)


def end_card_play() -> EndCardPlayInput:
    return EndCardPlayInput()


def for_meter_exchange(meter: Meter | str, amount: int = 1) -> MeterExchangeInput:
    if not isinstance(meter, Meter):
        meter = Meter.parse(meter)
    if amount < 1:
        raise ValueError("amount must be at least 1")
    return MeterExchangeInput(meter, amount)


def for_meter_boost(meter: Meter | str) -> MeterBoostInput:
    if not isinstance(meter, Meter):
        meter = Meter.parse(meter)
    return MeterBoostInput(meter)


def for_board_schmooze() -> BoardSchmoozeInput:
    return BoardSchmoozeInput()


def for_reorg() -> ReorgInput:
    return ReorgInput()


def for_evil_redemption() -> EvilRedemptionInput:
    return EvilRedemptionInput()


def for_retirement() -> RetirementInput:
    return RetirementInput()
