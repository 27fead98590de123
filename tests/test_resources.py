"""Political capital economics."""
import pytest

from inerticorp.config import GameConfig
from inerticorp.core.meters import Meter, OrgState
from inerticorp.core.resources import ResourceState, restraint_bonus
from inerticorp.errors import InsufficientCapitalError, InvalidOperationError
from inerticorp.rng import SeededRng


def test_initial_from_config():
    res = ResourceState.initial(GameConfig(starting_political_capital=7, max_political_capital=12))
    assert res.political_capital == 7
    assert res.maximum == 12


@pytest.mark.parametrize("delta, expected", [(-50, 0), (50, 20), (3, 13)])
def test_change_clamps(delta, expected):
    assert ResourceState(10).with_change(delta).political_capital == expected


def test_spend():
    assert ResourceState(5).with_spend(5).political_capital == 0


def test_overspend_raises_and_leaves_balance():
    res = ResourceState(2)
    with pytest.raises(InsufficientCapitalError) as info:
        res.with_spend(3)
    assert isinstance(info.value, InvalidOperationError)
    assert (info.value.cost, info.value.available) == (3, 2)
    assert res.political_capital == 2


def test_negative_spend_rejected():
    with pytest.raises(ValueError):
        ResourceState(5).with_spend(-1)


def test_balance_stays_in_range_under_random_ops():
    rng = SeededRng(8)
    res = ResourceState(10)
    org = OrgState.default()
    for _ in range(300):
        op = rng.next_int(0, 3)
        if op == 0:
            res = res.with_change(rng.next_int(-8, 9))
        elif op == 1:
            cost = rng.next_int(0, 6)
            if res.can_afford(cost):
                res = res.with_spend(cost)
        else:
            res = res.with_turn_end_adjustments(org)
        assert 0 <= res.political_capital <= res.maximum


@pytest.mark.parametrize(
    "pc, org, expected",
    [
        (5, OrgState(), 7),                                   # +1 governance, +1 alignment
        (10, OrgState(), 11),                                 # 12 exceeds decay threshold
        (5, OrgState(governance=50, alignment=50, morale=20), 4),
        (11, OrgState(governance=50, alignment=50), 10),      # decay only
    ],
)
def test_turn_end_adjustments(pc, org, expected):
    assert ResourceState(pc).with_turn_end_adjustments(org).political_capital == expected


@pytest.mark.parametrize("played, bonus", [(0, 3), (1, 2), (2, 1), (3, 0)])
def test_restraint_bonus(played, bonus):
    assert restraint_bonus(played) == bonus


@pytest.mark.parametrize(
    "meter, cost", [(Meter.DELIVERY, 10), (Meter.MORALE, 10), (Meter.ALIGNMENT, 10), (Meter.GOVERNANCE, 15), (Meter.RUNWAY, 20)]
)
def test_exchange_rates(meter, cost):
    assert ResourceState.exchange_rate(meter) == (cost, 1)
    assert ResourceState.can_exchange(OrgState.default(), meter)
    low = OrgState.default().with_meter_change(meter, cost - 61)
    assert not ResourceState.can_exchange(low, meter)
