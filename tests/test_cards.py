"""Project cards, event cards and the hand."""
import pytest

from inerticorp.core.cards import (
    CardCategory,
    CardHand,
    Choice,
    EventCard,
    PlayableCard,
    affinity_synergy_bonus,
)
from inerticorp.core.effects import MeterEffect, ProfitEffect
from inerticorp.core.meters import Meter, OrgState
from inerticorp.core.outcomes import OutcomeProfile, OutcomeTier
from inerticorp.errors import ContentError, InvalidChoiceError, InvalidOperationError
from inerticorp.rng import SeededRng


def make_card(card_id="P1", affinity=None, category=CardCategory.ACTION, intensity=0, profile=None):
    profile = profile or OutcomeProfile(
        good=[MeterEffect(Meter.DELIVERY, 6)],
        expected=[MeterEffect(Meter.DELIVERY, 3)],
        bad=[MeterEffect(Meter.DELIVERY, -30)],
    )
    return PlayableCard(
        id=card_id,
        title=f"Card {card_id}",
        description="",
        outcomes=profile,
        corporate_intensity=intensity,
        category=category,
        meter_affinity=affinity,
    )


@pytest.mark.parametrize(
    "value, modifier",
    [(90, 15), (70, 15), (65, 8), (60, 8), (50, 0), (40, 0), (39, -8), (25, -8), (24, -15), (0, -15)],
)
def test_affinity_modifier(value, modifier):
    card = make_card(affinity=Meter.MORALE)
    org = OrgState.default().with_meter_change(Meter.MORALE, value - 60)
    assert card.affinity_modifier(org) == modifier


def test_no_affinity_no_modifier():
    assert make_card().affinity_modifier(OrgState(morale=0)) == 0


def test_affinity_synergy():
    card = make_card("A", affinity=Meter.RUNWAY)
    same = make_card("B", affinity=Meter.RUNWAY)
    other = make_card("C", affinity=Meter.MORALE)
    assert affinity_synergy_bonus(card, []) == 0
    assert affinity_synergy_bonus(card, [other]) == 0
    assert affinity_synergy_bonus(card, [same, other]) == 5
    assert affinity_synergy_bonus(card, [same, same]) == 10
    assert affinity_synergy_bonus(make_card(), [same]) == 0


def test_card_flags():
    assert make_card(intensity=2).is_corporate
    assert not make_card().is_corporate
    assert make_card(category=CardCategory.REVENUE).is_revenue


def test_revenue_forecast():
    profile = OutcomeProfile(good=[ProfitEffect(30)], expected=[ProfitEffect(20)], bad=[ProfitEffect(-5)])
    card = make_card(category=CardCategory.REVENUE, profile=profile)
    assert card.revenue_range() == (-5, 30)
    assert card.forecast_summary() == "$-5M to $30M"
    assert make_card().forecast_summary() == "Delivery +3"


def test_zero_meter_warnings():
    card = make_card()
    assert card.zero_meter_warnings(OrgState.default()) == []
    assert card.zero_meter_warnings(OrgState(delivery=25)) == [Meter.DELIVERY]


# ------------------------------------------------------------------
# Event cards and choices
# ------------------------------------------------------------------

def make_event(*choices):
    return EventCard("E1", "Server fire", "", choices)


def test_event_card_choice_count_validated():
    with pytest.raises(ContentError):
        make_event(Choice("a", "A"))
    with pytest.raises(ContentError):
        make_event(*[Choice(str(i), str(i)) for i in range(5)])


def test_event_card_duplicate_ids_rejected():
    with pytest.raises(ContentError):
        make_event(Choice("a", "A"), Choice("a", "Again"))


def test_get_choice():
    card = make_event(Choice("a", "A"), Choice("b", "B"))
    assert card.get_choice("b").label == "B"
    assert card.choice_ids == ("a", "b")
    with pytest.raises(InvalidChoiceError):
        card.get_choice("zzz")


def test_flat_choice_resolves_without_tier():
    choice = Choice("a", "A", effects=[MeterEffect(Meter.MORALE, 2)])
    tier, effects = choice.resolve(SeededRng(0))
    assert tier is None
    assert effects == (MeterEffect(Meter.MORALE, 2),)
    assert not choice.is_tiered


def test_tiered_choice_uses_profile():
    profile = OutcomeProfile(good=[ProfitEffect(1)], expected=[ProfitEffect(2)], bad=[ProfitEffect(3)])
    choice = Choice("a", "A", outcome_profile=profile, pc_cost=1)
    tier, effects = choice.resolve(SeededRng(4))
    assert tier in OutcomeTier
    assert effects == profile.effects_for(tier)


# ------------------------------------------------------------------
# Hand
# ------------------------------------------------------------------

def test_hand_limits_and_lookup():
    hand = CardHand(tuple(make_card(f"P{i}") for i in range(7)))
    assert hand.is_full
    assert hand.space == 0
    with pytest.raises(InvalidOperationError):
        hand.with_cards_added([make_card("P9")])
    smaller = hand.with_card_removed("P3")
    assert len(smaller) == 6
    assert not smaller.contains("P3")
    with pytest.raises(InvalidChoiceError):
        smaller.get("P3")
