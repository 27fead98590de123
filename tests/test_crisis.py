"""Crisis lifecycle, responses and the 2d6 resolver."""
import pytest

from inerticorp.core.meters import Meter, OrgState
from inerticorp.core.outcomes import OutcomeTier
from inerticorp.core.resources import ResourceState
from inerticorp.crisis.instance import CrisisDefinition, CrisisState, CrisisStatus
from inerticorp.crisis.resolver import INEPT_SIDE_EFFECT, calculate_success_chance, resolve, roll_modifier
from inerticorp.crisis.response import (
    CrisisOperation,
    CrisisResponse,
    ResponseOutcome,
    ResponseOutcomes,
    StaffQuality,
    StaffQualityWeights,
)
from inerticorp.crisis.side_effects import SideEffectDefinition
from inerticorp.errors import InsufficientCapitalError
from inerticorp.rng import SeededRng

OUTAGE = CrisisDefinition(
    id="CRISIS_OUTAGE",
    title="Datacenter outage",
    description="",
    severity=3,
    deadline_after=2,
    base_impact={Meter.DELIVERY: -10},
    ongoing_impact={Meter.MORALE: -2},
    tags=("technical",),
)


def make_response(bonus=0, cost=1, staff=StaffQualityWeights(0, 0, 100), tags=()):
    return CrisisResponse(
        id="RESP",
        title="Response",
        description="",
        cost=cost,
        mitigation_bonus=bonus,
        staff=staff,
        outcomes=ResponseOutcomes(
            success=ResponseOutcome(CrisisOperation.MITIGATE, {Meter.MORALE: 2}),
            mixed=ResponseOutcome(CrisisOperation.REDUCE_SEVERITY, spawn_effects=("burnout",)),
            fail=ResponseOutcome(CrisisOperation.ESCALATE, {Meter.RUNWAY: -5}, aftershocks=("CRISIS_OUTAGE",)),
        ),
        effective_tags=tags,
    )


def test_create_crisis_assigns_serial_ids():
    state = CrisisState()
    state, first = state.create_crisis(OUTAGE, 2, "test")
    state, second = state.create_crisis(OUTAGE, 2, "test")
    assert first.instance_id != second.instance_id
    assert first.deadline_turn == 4
    assert len(state) == 2
    assert state.get(first.instance_id) == first
    assert state.get("nope") is None


def test_deadlines_expire_at_deadline_turn():
    state, crisis = CrisisState().create_crisis(OUTAGE, 1, "test")
    same, expired = state.process_deadlines(2)
    assert expired == []
    assert len(same) == 1
    after, expired = state.process_deadlines(3)
    assert [c.instance_id for c in expired] == [crisis.instance_id]
    assert expired[0].status is CrisisStatus.EXPIRED
    assert len(after) == 0


def test_ongoing_impact_sums_active_crises():
    state, _ = CrisisState().create_crisis(OUTAGE, 1, "a")
    state, second = state.create_crisis(OUTAGE, 1, "b")
    assert state.total_ongoing_impact() == {Meter.MORALE: -4}
    state = state.update(second.with_mitigated())
    assert state.total_ongoing_impact() == {Meter.MORALE: -2}


def test_severity_clamped():
    crisis = OUTAGE.create_instance("x", 1, "t")
    assert crisis.with_reduced_severity(10).severity == 1


@pytest.mark.parametrize(
    "roll, quality",
    [(0, StaffQuality.INEPT), (19, StaffQuality.INEPT), (20, StaffQuality.MEH), (69, StaffQuality.MEH), (70, StaffQuality.GOOD)],
)
def test_staff_quality_standard(roll, quality):
    assert StaffQualityWeights.preset("standard").determine(roll) is quality


def test_unknown_staff_preset():
    with pytest.raises(KeyError):
        StaffQualityWeights.preset("rockstar")


def test_roll_modifier_components():
    crisis = OUTAGE.create_instance("x", 1, "t")
    response = make_response(bonus=1, tags=("technical",))
    assert roll_modifier(crisis, response, OrgState(alignment=65)) == 3
    severe = CrisisDefinition("S", "S", "", 5, 1).create_instance("y", 1, "t")
    assert roll_modifier(severe, make_response(), OrgState(alignment=20)) == -3


def test_success_chance():
    crisis = OUTAGE.create_instance("x", 1, "t")
    assert calculate_success_chance(crisis, make_response(), OrgState(alignment=50)) == 16
    assert calculate_success_chance(crisis, make_response(bonus=2), OrgState(alignment=50)) == 41
    assert calculate_success_chance(crisis, make_response(bonus=10), OrgState(alignment=50)) == 100


def test_resolve_success_mitigates():
    crisis = OUTAGE.create_instance("x", 1, "t")
    result = resolve(crisis, make_response(bonus=20), ResourceState(5), OrgState(alignment=50), SeededRng(1))
    assert result.tier is OutcomeTier.GOOD
    assert result.label == "Success"
    assert result.crisis.status is CrisisStatus.MITIGATED
    assert result.meter_deltas == {Meter.MORALE: 2}
    assert 2 <= result.raw_roll <= 12
    assert result.modified_roll == result.raw_roll + 20


def test_resolve_applies_alignment_bonus():
    crisis = OUTAGE.create_instance("x", 1, "t")
    result = resolve(crisis, make_response(bonus=20), ResourceState(5), OrgState(alignment=60), SeededRng(1))
    assert result.modified_roll == result.raw_roll + 21


@pytest.mark.parametrize("weights", [(0, 0, 0), (-1, 50, 51)])
def test_staff_weights_rejected(weights):
    with pytest.raises(ValueError):
        StaffQualityWeights(*weights)


def test_resolve_fail_escalates_and_schedules_aftershock():
    crisis = OUTAGE.create_instance("x", 1, "t")
    result = resolve(crisis, make_response(bonus=-20), ResourceState(5), OrgState(), SeededRng(1))
    assert result.tier is OutcomeTier.BAD
    assert result.crisis.status is CrisisStatus.ESCALATED
    assert result.aftershocks == ("CRISIS_OUTAGE",)
    assert "escalated" in result.narrative


def test_minimum_spend_caps_at_mixed():
    definition = CrisisDefinition("P", "Probe", "", 3, 2, minimum_spend=3)
    crisis = definition.create_instance("x", 1, "t")
    result = resolve(crisis, make_response(bonus=20, cost=1), ResourceState(5), OrgState(), SeededRng(2))
    assert result.tier is OutcomeTier.EXPECTED
    assert result.crisis.severity == 2
    assert result.spawned_effects == ("burnout",)


def test_inept_staff_spawns_side_effect_unless_success():
    inept = StaffQualityWeights(100, 0, 0)
    crisis = OUTAGE.create_instance("x", 1, "t")
    failed = resolve(crisis, make_response(bonus=-20, staff=inept), ResourceState(5), OrgState(), SeededRng(3))
    assert failed.staff is StaffQuality.INEPT
    assert INEPT_SIDE_EFFECT in failed.spawned_effects
    won = resolve(crisis, make_response(bonus=20, staff=inept), ResourceState(5), OrgState(), SeededRng(3))
    assert INEPT_SIDE_EFFECT not in won.spawned_effects


def test_resolve_unaffordable_raises():
    crisis = OUTAGE.create_instance("x", 1, "t")
    with pytest.raises(InsufficientCapitalError):
        resolve(crisis, make_response(cost=4), ResourceState(3), OrgState(), SeededRng(0))


def test_resolve_is_deterministic():
    crisis = OUTAGE.create_instance("x", 1, "t")
    a = resolve(crisis, make_response(), ResourceState(5), OrgState(), SeededRng(77))
    b = resolve(crisis, make_response(), ResourceState(5), OrgState(), SeededRng(77))
    assert a == b


def test_side_effect_lifecycle():
    definition = SideEffectDefinition("burnout", "Burnout", 2, {Meter.MORALE: -3})
    active = definition.activate()
    assert active.remaining_quarters == 2
    active = active.tick()
    assert not active.is_expired
    assert active.tick().is_expired
