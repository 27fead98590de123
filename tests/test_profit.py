"""Profit, board directives and scoring."""
import pytest

from inerticorp.config import DIFFICULTIES
from inerticorp.core import directive
from inerticorp.core.ceo import CEOState
from inerticorp.core.meters import OrgState
from inerticorp.core.profit import (
    calculate_base_operations,
    format_profit,
    format_signed_profit,
    growth_multiplier,
    scale_revenue_profit,
)
from inerticorp.core.resources import ResourceState
from inerticorp.core.score import calculate_final_score, calculate_quarterly_bonus
from inerticorp.rng import SeededRng


def test_base_operations_deterministic():
    org = OrgState.default()
    assert calculate_base_operations(org, SeededRng(3)) == calculate_base_operations(org, SeededRng(3))


def test_base_operations_range():
    org = OrgState.default()
    rng = SeededRng(12)
    values = [calculate_base_operations(org, rng) for _ in range(400)]
    # Downturn quarters land in [-30, 20]; normal quarters in [80 + 25 - 15, 140 + 25 + 15]
    assert all(-30 <= v <= 180 for v in values)
    assert sum(v >= 80 for v in values) > 300


def test_low_meters_hurt_operations():
    strong, weak = OrgState.default(), OrgState(delivery=20, runway=20, governance=20)
    strong_total = sum(calculate_base_operations(strong, SeededRng(s)) for s in range(50))
    weak_total = sum(calculate_base_operations(weak, SeededRng(s)) for s in range(50))
    assert strong_total > weak_total


def test_growth_multiplier():
    assert growth_multiplier(0) == 1.0
    assert growth_multiplier(10) == pytest.approx(1.2)


@pytest.mark.parametrize(
    "base, target, delivery, before, expected",
    [
        (20, 25, 60, 0, 20),
        (20, 10, 60, 0, 10),     # scaling floor 0.5
        (20, 50, 60, 0, 40),
        (20, 25, 90, 0, 21),
        (30, 25, 60, 1, 19),
        (30, 25, 60, 2, 10),
    ],
)
def test_scale_revenue_profit(base, target, delivery, before, expected):
    assert scale_revenue_profit(base, target, delivery, before) == expected


@pytest.mark.parametrize("amount, text", [(150, "$150M"), (-20, "-$20M"), (1300, "$1.3B")])
def test_format_profit(amount, text):
    assert format_profit(amount) == text


def test_format_signed_profit():
    assert format_signed_profit(15) == "+$15M"
    assert format_signed_profit(-15) == "-$15M"


# ------------------------------------------------------------------
# Directives
# ------------------------------------------------------------------

@pytest.mark.parametrize("pressure, floor", [(0, 5), (1, 7), (4, 13), (8, 21)])
def test_profit_floor(pressure, floor):
    assert directive.PROFIT_FLOOR.required_amount(pressure) == floor
    assert directive.PROFIT_FLOOR.is_met(0, floor, pressure)
    assert not directive.PROFIT_FLOOR.is_met(0, floor - 1, pressure)


@pytest.mark.parametrize("pressure, required", [(0, 5), (1, 7), (2, 9), (8, 13)])
def test_profit_increase(pressure, required):
    assert directive.PROFIT_INCREASE.required_amount(pressure) == required
    assert directive.PROFIT_INCREASE.is_met(100, 100 + required, pressure)


def test_generate_returns_profit_floor():
    assert directive.generate(3) is directive.PROFIT_FLOOR
    assert "$11M" in directive.generate(3).describe(3)


# ------------------------------------------------------------------
# Score
# ------------------------------------------------------------------

def test_quarterly_bonus_good_quarter():
    ceo = CEOState.initial(DIFFICULTIES["nadella"])
    bonus, reasons = calculate_quarterly_bonus(ceo, OrgState.default(), True, 10)
    assert bonus == 16
    assert len(reasons) == 6


def test_quarterly_bonus_bad_quarter_floors_at_zero():
    ceo = CEOState.initial(DIFFICULTIES["nadella"]).with_favorability_change(-40).with_evil_change(20)
    bonus, _ = calculate_quarterly_bonus(ceo, OrgState(morale=5, runway=5), False, -10)
    assert bonus == 0


def test_final_score_retired_vs_ousted():
    ceo = CEOState.initial(DIFFICULTIES["nadella"]).with_bonus_awarded(100).with_cards_played_recorded(10)
    for _ in range(8):
        ceo = ceo.with_quarter_complete()
    resources = ResourceState(4)
    retired = calculate_final_score(ceo.with_retirement(), resources)
    # 100 bonus + 34 parachute + 20 PC + 10 projects
    assert retired.subtotal == 164
    assert retired.final_score == 328
    ousted = calculate_final_score(ceo.with_ousted(), resources)
    assert ousted.final_score == 82
    assert ousted.multiplier_reason == "Ousted"


def test_final_score_while_still_in_office():
    ceo = CEOState.initial(DIFFICULTIES["nadella"]).with_bonus_awarded(20)
    score = calculate_final_score(ceo, ResourceState(2))
    # 20 bonus + 10 parachute + 10 PC
    assert score.subtotal == 40
    assert score.multiplier == 1.0
    assert score.multiplier_reason == "Still In Office"
    assert score.final_score == 40
