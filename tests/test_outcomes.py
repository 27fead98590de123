"""Outcome weighting and tier rolls."""
import itertools

import pytest

from inerticorp.core.effects import MeterEffect
from inerticorp.core.meters import Meter
from inerticorp.core.outcomes import (
    EXPECTED_MAX,
    EXPECTED_MIN,
    WEIGHT_MAX,
    WEIGHT_MIN,
    OutcomeProfile,
    OutcomeTier,
    OutcomeWeights,
    crisis_choice_weights,
    get_weights,
    roll_tier,
)
from inerticorp.rng import SeededRng


def test_neutral_weights():
    assert get_weights(50, 1, 0) == OutcomeWeights(20, 60, 20)


def test_alignment_shifts_good_and_bad():
    w = get_weights(80, 1, 0)
    assert (w.good, w.bad) == (26, 14)


def test_honeymoon_first_quarter():
    w = get_weights(50, 1, 0, quarter_number=1)
    assert w.good == 35
    assert w.bad == 10


def test_weight_grid_invariant():
    grid = itertools.product(
        range(0, 101, 20),      # alignment
        range(0, 9, 2),         # pressure
        (0, 5, 15, 40),         # evil
        (-15, 0, 20, 60),       # risk modifier
        (1, 2, 3, 10),          # quarter
        (0, 5),                 # momentum
        (0, 10),                # synergy
        (False, True),          # corporate card
    )
    for args in grid:
        w = get_weights(*args)
        assert w.total == 100, args
        assert WEIGHT_MIN <= w.good <= WEIGHT_MAX, args
        assert WEIGHT_MIN <= w.bad <= WEIGHT_MAX, args
        assert EXPECTED_MIN <= w.expected <= EXPECTED_MAX, args


def test_expected_floor_takes_from_bad_first():
    w = get_weights(50, 8, 0, additional_risk_modifier=60, momentum_bonus=60)
    assert w.expected == EXPECTED_MIN
    assert w.good == WEIGHT_MAX
    assert w.bad == 30


def test_corporate_card_evil_path_bonus():
    plain = get_weights(50, 1, 20)
    corporate = get_weights(50, 1, 20, is_corporate_card=True)
    assert corporate.good == plain.good + 10


@pytest.mark.parametrize(
    "pc_cost, delta, expected",
    [(2, 0, OutcomeWeights(70, 20, 10)), (0, 1, OutcomeWeights(70, 10, 20)), (0, 0, OutcomeWeights(20, 70, 10))],
)
def test_crisis_choice_weights(pc_cost, delta, expected):
    assert crisis_choice_weights(pc_cost, delta) == expected


def test_roll_tier_respects_degenerate_weights():
    rng = SeededRng(1)
    assert all(roll_tier(OutcomeWeights(100, 0, 0), rng) is OutcomeTier.GOOD for _ in range(20))
    assert all(roll_tier(OutcomeWeights(0, 0, 100), rng) is OutcomeTier.BAD for _ in range(20))


def test_roll_tier_frequencies_follow_weights():
    rng = SeededRng(3)
    tiers = [roll_tier(OutcomeWeights(20, 60, 20), rng) for _ in range(5000)]
    expected_share = tiers.count(OutcomeTier.EXPECTED) / len(tiers)
    assert 0.55 < expected_share < 0.65


def test_profile_roll_returns_matching_effects():
    profile = OutcomeProfile(
        good=[MeterEffect(Meter.MORALE, 5)],
        expected=[MeterEffect(Meter.MORALE, 1)],
        bad=[MeterEffect(Meter.MORALE, -5)],
    )
    rng = SeededRng(11)
    for _ in range(30):
        tier, effects = profile.roll(rng, 50, 1, 0)
        assert effects == profile.effects_for(tier)


def test_uniform_profile():
    effects = [MeterEffect(Meter.RUNWAY, 2)]
    profile = OutcomeProfile.uniform(effects)
    assert all(profile.effects_for(t) == tuple(effects) for t in OutcomeTier)
