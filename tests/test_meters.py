"""OrgState clamping, CEOState bookkeeping and the quarter marker."""
import pytest

from inerticorp.config import DIFFICULTIES
from inerticorp.core.ceo import CEOState
from inerticorp.core.meters import Meter, OrgState
from inerticorp.core.quarter import GamePhase, QuarterState
from inerticorp.rng import SeededRng


def test_default_org_is_sixty_everywhere():
    org = OrgState.default()
    assert all(org.get_meter(m) == 60 for m in Meter)


def test_meter_order_is_canonical():
    assert [m.value for m in Meter] == ["Delivery", "Morale", "Governance", "Alignment", "Runway"]


@pytest.mark.parametrize("delta, expected", [(50, 100), (-70, 0), (15, 75), (0, 60)])
def test_meter_change_clamps(delta, expected):
    org = OrgState.default().with_meter_change(Meter.MORALE, delta)
    assert org.morale == expected


def test_meters_stay_in_range_under_random_changes():
    rng = SeededRng(2024)
    org = OrgState.default()
    for _ in range(500):
        meter = list(Meter)[rng.next_int(0, 5)]
        org = org.with_meter_change(meter, rng.next_int(-40, 41))
        assert all(0 <= org.get_meter(m) <= 100 for m in Meter)


def test_with_meter_change_leaves_original_untouched():
    org = OrgState.default()
    org.with_meter_change(Meter.RUNWAY, -20)
    assert org.runway == 60


def test_lowest_meter_ties_use_canonical_order():
    org = OrgState(delivery=40, morale=40, governance=70, alignment=80, runway=90)
    assert org.lowest_meter() is Meter.DELIVERY
    assert org.meters_below(41) == [Meter.DELIVERY, Meter.MORALE]


@pytest.mark.parametrize("name", ["delivery", "Delivery", " RUNWAY "])
def test_meter_parse(name):
    assert Meter.parse(name) in (Meter.DELIVERY, Meter.RUNWAY)


def test_meter_parse_unknown():
    with pytest.raises(ValueError):
        Meter.parse("synergy")


# ------------------------------------------------------------------
# CEO
# ------------------------------------------------------------------

def test_ceo_initial_from_settings():
    ceo = CEOState.initial(DIFFICULTIES["icahn"])
    assert ceo.board_favorability == 65
    assert ceo.retirement_threshold == 180
    assert not ceo.is_terminal


@pytest.mark.parametrize("quarters, pressure", [(1, 0), (2, 1), (3, 1), (9, 4), (30, 8)])
def test_pressure_grows_every_two_quarters(quarters, pressure):
    ceo = CEOState.initial(DIFFICULTIES["nadella"])
    for _ in range(quarters):
        ceo = ceo.with_quarter_complete()
    assert ceo.quarters_survived == quarters
    assert ceo.pressure_level == pressure


def test_favorability_clamped():
    ceo = CEOState.initial(DIFFICULTIES["nadella"])
    assert ceo.with_favorability_change(100).board_favorability == 100
    assert ceo.with_favorability_change(-200).board_favorability == 0


def test_momentum_bonus():
    ceo = CEOState.initial(DIFFICULTIES["nadella"])
    assert ceo.momentum_bonus == 0
    ceo = ceo.with_success_result(True).with_success_result(True)
    assert ceo.momentum_bonus == 3
    ceo = ceo.with_success_result(True)
    assert ceo.momentum_bonus == 5
    assert ceo.with_success_result(False).momentum_bonus == 0


def test_parachute_payout():
    ceo = CEOState.initial(DIFFICULTIES["nadella"])
    assert ceo.parachute_payout == 10
    ceo = ceo.with_cards_played_recorded(4)
    for _ in range(6):
        ceo = ceo.with_quarter_complete()
    assert ceo.parachute_payout == 28
    assert ceo.with_evil_change(20).parachute_payout == 10


def test_profit_history_and_trajectory():
    ceo = CEOState.initial(DIFFICULTIES["nadella"])
    for profit in (100, 80, 90, 130):
        ceo = ceo.with_profit_recorded(profit)
    assert ceo.recent_profits == (80, 90, 130)
    assert ceo.profit_trajectory == 45
    assert ceo.is_profit_improving


def test_negative_and_weak_streaks():
    ceo = CEOState.initial(DIFFICULTIES["nadella"])
    ceo = ceo.with_profit_recorded(-5).with_profit_recorded(-1)
    assert ceo.consecutive_negative_quarters == 2
    assert ceo.with_profit_recorded(10).consecutive_negative_quarters == 0
    ceo = ceo.with_project_performance_recorded(0).with_project_performance_recorded(-3)
    assert ceo.weak_project_streak == 2
    assert ceo.with_project_performance_recorded(4).weak_project_streak == 0


def test_quarter_closed_resets_running_profit():
    ceo = CEOState.initial(DIFFICULTIES["nadella"]).with_current_profit_added(12)
    ceo = ceo.with_quarter_closed(140)
    assert ceo.last_quarter_profit == 140
    assert ceo.current_quarter_profit == 0


def test_can_retire():
    ceo = CEOState.initial(DIFFICULTIES["welch"])
    assert not ceo.can_retire
    assert ceo.with_bonus_awarded(120).can_retire


# ------------------------------------------------------------------
# Quarter marker
# ------------------------------------------------------------------

def test_phase_cycle():
    assert GamePhase.BOARD_DEMAND.next() is GamePhase.PLAY_CARDS
    assert GamePhase.RESOLUTION.next() is GamePhase.BOARD_DEMAND


@pytest.mark.parametrize("number, label", [(1, "Y1Q1"), (4, "Y1Q4"), (5, "Y2Q1"), (10, "Y3Q2")])
def test_quarter_formatting(number, label):
    assert QuarterState(number).formatted == label


def test_next_quarter_resets_phase():
    q = QuarterState(3, GamePhase.RESOLUTION).next_quarter()
    assert q == QuarterState(4, GamePhase.BOARD_DEMAND)


def test_quarter_number_starts_at_one():
    with pytest.raises(ValueError):
        QuarterState(0)
