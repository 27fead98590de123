"""Quarter engine: the four-phase state machine.

``advance(state, input, rng)`` is a pure step function.  It reads the current
phase, applies the input and returns the next state together with a
``QuarterLog`` of everything that happened.  The only mutable object involved is
the ``SeededRng``, advanced in an order fixed by the state and the input, so a
(seed, input sequence) pair always replays to the same game.

Phase order: BoardDemand -> PlayCards -> Crisis -> Resolution -> BoardDemand of
the next quarter.  The Crisis phase is skipped when ending the card phase draws
no crisis card.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..config import GameConfig
from ..core import favorability, ouster
from ..core.cards import CardHand, affinity_synergy_bonus
from ..core.directive import PROFIT_FLOOR, PROFIT_INCREASE, generate
from ..core.effects import FineEffect, MeterEffect, ProfitEffect, apply_effects
from ..core.followups import FollowUpType, PendingFollowUp, check_all
from ..core.log import LogEntry, QuarterLog
from ..core.meters import Meter, OrgState
from ..core.outcomes import OutcomeTier
from ..core.profit import calculate_base_operations, format_profit, format_signed_profit, scale_revenue_profit
from ..core.resources import ResourceState, restraint_bonus
from ..core.score import calculate_final_score, calculate_quarterly_bonus
from ..core.quarter import GamePhase
from ..crisis.resolver import resolve
from ..crisis.instance import CrisisStatus
from ..crisis.response import CrisisResponse
from ..errors import InvalidChoiceError, InvalidOperationError, InsufficientCapitalError, TerminalStateError
from ..rng import SeededRng
from .inputs import (
    BoardSchmoozeInput,
    ChoiceInput,
    EmptyInput,
    EndCardPlayInput,
    EvilRedemptionInput,
    MeterBoostInput,
    MeterExchangeInput,
    PlayCardInput,
    QuarterInput,
    ReorgInput,
    RetirementInput,
)
from .state import QuarterGameState

__all__ = ["advance", "respond_to_crisis"]

logger = logging.getLogger(__name__)

Step = Tuple[QuarterGameState, List[LogEntry]]

REVENUE_NEGLECT_CARDS = 3
REVENUE_NEGLECT_METER_PENALTY = -8
REVENUE_NEGLECT_FAVORABILITY_PENALTY = -15
REFRESH_CARD_COUNT = 3
EXCEPTIONAL_AWARD_CHANCE = 40


def _check_not_terminal(state: QuarterGameState) -> None:
    if state.ceo.is_ousted:
        raise TerminalStateError("Cannot advance: CEO has been ousted")
    if state.ceo.has_retired:
        raise TerminalStateError("Cannot advance: CEO has retired")


# ------------------------------------------------------------------
# Engine entry-point
# ------------------------------------------------------------------

def advance(
    state: QuarterGameState,
    inp: QuarterInput,
    rng: SeededRng,
    cfg: Optional[GameConfig] = None,
) -> Tuple[QuarterGameState, QuarterLog]:
    """Advance ``state`` by one phase.

    ``cfg`` defaults to the config the game was created with.  Raises
    ``TerminalStateError`` once the CEO is ousted or retired.
    """
    _check_not_terminal(state)
    if cfg is not None and cfg is not state.config:
        state = replace(state, config=cfg)

    phase = state.phase
    quarter_number = state.quarter_number
    new_state, entries = _PHASE_HANDLERS[phase](state, inp, rng)
    logger.debug(
        "Q%d %s -> Q%d %s (%d log entries)",
        quarter_number,
        phase.value,
        new_state.quarter_number,
        new_state.phase.value,
        len(entries),
    )
    return new_state, QuarterLog(quarter_number, phase, entries)


# ------------------------------------------------------------------
# BoardDemand
# ------------------------------------------------------------------

def _advance_board_demand(state: QuarterGameState, inp: QuarterInput, rng: SeededRng) -> Step:
    pressure = state.ceo.pressure_level
    directive = state.current_directive or generate(pressure)
    entries = [LogEntry.info(f"Board Directive: {directive.describe(pressure)}")]
    new_state = replace(
        state,
        current_directive=directive,
        quarter=state.quarter.with_phase(GamePhase.PLAY_CARDS),
    )
    return new_state, entries


# ------------------------------------------------------------------
# PlayCards
# ------------------------------------------------------------------

def _exchange_meter(state: QuarterGameState, inp: MeterExchangeInput, rng: SeededRng) -> Step:
    entries: List[LogEntry] = []
    meter_cost, pc_gain = ResourceState.exchange_rate(inp.meter)
    for _ in range(inp.amount):
        if not ResourceState.can_exchange(state.org, inp.meter):
            entries.append(LogEntry.info(f"Insufficient {inp.meter.value} for exchange"))
            break
        state = replace(
            state,
            org=state.org.with_meter_change(inp.meter, -meter_cost),
            resources=state.resources.with_change(pc_gain),
        )
        entries.append(LogEntry.meter_change(inp.meter, -meter_cost, f"Exchanged {meter_cost} {inp.meter.value} for {pc_gain} PC"))
    return state, entries


def _boost_meter(state: QuarterGameState, inp: MeterBoostInput, rng: SeededRng) -> Step:
    cfg = state.config
    if not state.resources.can_afford(cfg.meter_boost_cost):
        return state, [LogEntry.info(f"Insufficient PC for meter boost (need {cfg.meter_boost_cost})")]
    old_value = state.org.get_meter(inp.meter)
    state = replace(
        state,
        org=state.org.with_meter_change(inp.meter, cfg.meter_boost_amount),
        resources=state.resources.with_spend(cfg.meter_boost_cost),
    )
    new_value = state.org.get_meter(inp.meter)
    message = f"Spent {cfg.meter_boost_cost} PC to boost {inp.meter.value}: {old_value} -> {new_value}"
    return state, [LogEntry.meter_change(inp.meter, new_value - old_value, message)]


def _schmooze_board(state: QuarterGameState, inp: BoardSchmoozeInput, rng: SeededRng) -> Step:
    cfg = state.config
    if not state.resources.can_afford(cfg.schmooze_cost):
        return state, [LogEntry.info(f"Insufficient PC for board schmoozing (need {cfg.schmooze_cost})")]
    resources = state.resources.with_spend(cfg.schmooze_cost)
    success = rng.next_int(0, 100) >= cfg.schmooze_failure_chance
    change = rng.next_int(1, 6) if success else -rng.next_int(1, 4)
    ceo = state.ceo.with_favorability_change(change)
    if success:
        message = f"Board schmoozing successful! Favorability {change:+d} (now {ceo.board_favorability})"
    else:
        message = f"Board schmoozing backfired! Favorability {change:+d} (now {ceo.board_favorability})"
    return replace(state, ceo=ceo, resources=resources), [LogEntry.info(message, delta=change)]


def _reorg(state: QuarterGameState, inp: ReorgInput, rng: SeededRng) -> Step:
    cfg = state.config
    if not state.resources.can_afford(cfg.reorg_cost):
        return state, [LogEntry.info(f"Insufficient PC for re-org (need {cfg.reorg_cost})")]
    deck = state.project_deck.discard(*state.hand.cards)
    drawn, deck = deck.deal(CardHand.MAX_SIZE, rng)
    state = replace(
        state,
        resources=state.resources.with_spend(cfg.reorg_cost),
        project_deck=deck,
        hand=CardHand(tuple(drawn)),
    )
    return state, [LogEntry.info(f"Re-org complete! Spent {cfg.reorg_cost} PC, drew {len(drawn)} new project cards")]


def _redeem_evil(state: QuarterGameState, inp: EvilRedemptionInput, rng: SeededRng) -> Step:
    cfg = state.config
    if not state.resources.can_afford(cfg.redemption_cost):
        return state, [LogEntry.info(f"Insufficient PC for image rehabilitation (need {cfg.redemption_cost})")]
    if state.ceo.evil_score <= 0:
        return state, [LogEntry.info("Your reputation is already spotless!")]
    state = replace(
        state,
        resources=state.resources.with_spend(cfg.redemption_cost),
        ceo=state.ceo.with_evil_change(-1),
    )
    message = f"Image rehabilitated! Spent {cfg.redemption_cost} PC, Evil -1 (now {state.ceo.evil_score})"
    return state, [LogEntry.info(message)]


def _play_card(state: QuarterGameState, inp: PlayCardInput, rng: SeededRng) -> Step:
    card = state.hand.get(inp.card_id)
    if state.cards_played_count >= state.config.max_cards_per_quarter:
        raise InvalidOperationError(
            f"Cannot play more than {state.config.max_cards_per_quarter} cards in a quarter"
        )

    position = state.cards_played_count
    cost = state.next_card_cost
    entries: List[LogEntry] = []
    resources = state.resources
    if cost > 0:
        resources = resources.with_spend(cost)
        entries.append(LogEntry.info(f"Card #{position + 1} cost: {cost} PC"))

    entries.append(LogEntry.info(f"Played: {card.title}"))
    position_risk = state.next_card_risk
    affinity = card.affinity_modifier(state.org)
    if position_risk > 0:
        entries.append(LogEntry.info(f"Position risk: +{position_risk}% bad outcome chance"))
    if affinity > 0:
        entries.append(LogEntry.info(f"Strong {card.meter_affinity.value}: -{affinity}% risk (affinity bonus)"))
    elif affinity < 0:
        entries.append(LogEntry.info(f"Weak {card.meter_affinity.value}: +{-affinity}% risk (affinity penalty)"))

    ceo = state.ceo
    synergy = affinity_synergy_bonus(card, state.cards_played_this_quarter)
    if ceo.momentum_bonus > 0:
        entries.append(LogEntry.info(f"Momentum: +{ceo.momentum_bonus}% good chance ({ceo.consecutive_successes} streak)"))
    if synergy > 0:
        entries.append(LogEntry.info(f"Affinity synergy: +{synergy}% good chance"))

    tier, effects = card.outcomes.roll(
        rng,
        state.org.alignment,
        ceo.pressure_level,
        ceo.evil_score,
        additional_risk_modifier=position_risk - affinity,
        quarter_number=state.quarter_number,
        momentum_bonus=ceo.momentum_bonus,
        affinity_synergy_bonus=synergy,
        is_corporate_card=card.is_corporate,
    )
    entries.append(LogEntry.outcome(tier, card.title, "played"))

    org, effect_entries = apply_effects(state.org, effects)
    entries.extend(effect_entries)

    profit = 0
    target = PROFIT_INCREASE.required_amount(ceo.pressure_level)
    for effect in effects:
        if isinstance(effect, ProfitEffect):
            if card.is_revenue:
                profit += scale_revenue_profit(effect.delta, target, org.delivery, state.revenue_cards_played)
            else:
                profit += effect.delta
        elif isinstance(effect, FineEffect):
            profit -= effect.amount
    if profit != 0:
        ceo = ceo.with_current_profit_added(profit)
        entries.append(LogEntry.info(f"Profit impact: {format_signed_profit(profit)}", delta=profit))

    if tier is OutcomeTier.GOOD:
        ceo = ceo.with_success_result(True)
        if ceo.consecutive_successes >= 2:
            entries.append(LogEntry.info(f"Momentum building: {ceo.consecutive_successes} consecutive successes!"))
    elif tier is OutcomeTier.BAD:
        if ceo.consecutive_successes >= 2:
            entries.append(LogEntry.info("Momentum lost!"))
        ceo = ceo.with_success_result(False)

    if card.is_corporate:
        ceo = ceo.with_evil_change(card.corporate_intensity).with_favorability_change(card.corporate_intensity)
        entries.append(LogEntry.info(f"Corporate card: EvilScore +{card.corporate_intensity}"))

    follow_up = PendingFollowUp(card.id, card.title, state.quarter_number, tier)
    state = replace(
        state,
        org=org,
        ceo=ceo,
        resources=resources,
        hand=state.hand.with_card_removed(card.id),
        project_deck=state.project_deck.discard(card),
        cards_played_this_quarter=state.cards_played_this_quarter + (card,),
        pending_follow_ups=state.pending_follow_ups + (follow_up,),
    )

    if state.can_play_card and state.can_afford_next_card and not inp.end_after:
        return state, entries
    state, end_entries = _end_card_play(state, rng)
    return state, entries + end_entries


def _end_card_play(state: QuarterGameState, rng: SeededRng) -> Step:
    """Close the card phase: restraint bonus, neglect penalty, hand refresh, crisis draw."""
    entries: List[LogEntry] = []
    played = state.cards_played_count

    bonus = restraint_bonus(played)
    if bonus > 0:
        state = replace(state, resources=state.resources.with_change(bonus))
        plural = "" if played == 1 else "s"
        entries.append(LogEntry.info(f"Restraint bonus: +{bonus} PC (played {played} card{plural})", delta=bonus))

    if state.revenue_cards_played >= REVENUE_NEGLECT_CARDS:
        org = state.org.with_meter_changes({
            Meter.MORALE: REVENUE_NEGLECT_METER_PENALTY,
            Meter.GOVERNANCE: REVENUE_NEGLECT_METER_PENALTY,
            Meter.ALIGNMENT: REVENUE_NEGLECT_METER_PENALTY,
        })
        ceo = state.ceo.with_favorability_change(REVENUE_NEGLECT_FAVORABILITY_PENALTY)
        state = replace(state, org=org, ceo=ceo)
        entries.append(LogEntry.event(
            f"Organizational neglect: Revenue-only focus hurts meters ({REVENUE_NEGLECT_METER_PENALTY}) "
            f"and board favor ({REVENUE_NEGLECT_FAVORABILITY_PENALTY})"
        ))

    if played == 0 and len(state.hand) >= REFRESH_CARD_COUNT:
        order = list(range(len(state.hand)))
        rng.shuffle(order)
        picked = set(order[:REFRESH_CARD_COUNT])
        replaced = [c for i, c in enumerate(state.hand.cards) if i in picked]
        kept = [c for i, c in enumerate(state.hand.cards) if i not in picked]
        drawn, deck = state.project_deck.discard(*replaced).deal(REFRESH_CARD_COUNT, rng)
        state = replace(state, hand=CardHand(tuple(kept + drawn)), project_deck=deck)
        entries.append(LogEntry.info(f"No projects executed - refreshed {REFRESH_CARD_COUNT} cards from hand"))

    crisis_card = None
    deck = state.crisis_deck
    if not deck.is_empty and rng.next_int(1, 101) <= state.config.crisis_draw_chance:
        crisis_card, deck = deck.draw(rng)
        entries.append(LogEntry.event(f"Crisis: {crisis_card.title}"))
    state = replace(state, crisis_deck=deck, current_crisis=crisis_card)

    state, follow_up_entries = _check_follow_ups(state)
    entries.extend(follow_up_entries)

    entries.append(LogEntry.info("Ending card play phase"))
    next_phase = GamePhase.CRISIS if crisis_card is not None else GamePhase.RESOLUTION
    return state.with_phase(next_phase), entries


def _check_follow_ups(state: QuarterGameState) -> Step:
    """Roll pending project follow-ups on their own stream."""
    if not state.pending_follow_ups:
        return state, []
    follow_up_rng = SeededRng.derived(state.seed, state.quarter_number, "followups")
    remaining, results, crises = check_all(
        state.pending_follow_ups,
        state.quarter_number,
        state.content.crisis_definitions,
        state.crises,
        follow_up_rng,
    )
    org = state.org
    entries: List[LogEntry] = []
    for result in results:
        if result.type is FollowUpType.CRISIS:
            entries.append(LogEntry.event(result.message))
        elif result.effect is not None:
            org, _ = result.effect.apply(org)
            entries.append(LogEntry.meter_change(result.effect.meter, result.effect.delta, result.message))
    return replace(state, org=org, crises=crises, pending_follow_ups=tuple(remaining)), entries


def _end_card_play_input(state: QuarterGameState, inp: QuarterInput, rng: SeededRng) -> Step:
    return _end_card_play(state, rng)


_PLAY_CARDS_HANDLERS: Dict[type, Callable[..., Step]] = {
    MeterExchangeInput: _exchange_meter,
    MeterBoostInput: _boost_meter,
    BoardSchmoozeInput: _schmooze_board,
    ReorgInput: _reorg,
    EvilRedemptionInput: _redeem_evil,
    PlayCardInput: _play_card,
    EndCardPlayInput: _end_card_play_input,
    EmptyInput: _end_card_play_input,
}


def _advance_play_cards(state: QuarterGameState, inp: QuarterInput, rng: SeededRng) -> Step:
    try:
        handler = _PLAY_CARDS_HANDLERS[type(inp)]
    except KeyError as exc:
        raise InvalidOperationError(f"{type(inp).__name__} is not valid during PlayCards") from exc
    return handler(state, inp, rng)


# ------------------------------------------------------------------
# Crisis
# ------------------------------------------------------------------

def _advance_crisis(state: QuarterGameState, inp: QuarterInput, rng: SeededRng) -> Step:
    card = state.current_crisis
    if card is None:
        return state.with_phase(GamePhase.RESOLUTION), [LogEntry.info("No situations requiring attention this quarter.")]
    if isinstance(inp, EmptyInput):
        return state, [LogEntry.info(f"Awaiting response to: {card.title}")]
    if not isinstance(inp, ChoiceInput):
        raise InvalidOperationError(f"{type(inp).__name__} is not valid during Crisis; choose one of {list(card.choice_ids)}")

    choice = card.get_choice(inp.choice_id)
    entries = [LogEntry.info(f"[{card.title}] Response: {choice.label}")]

    resources = state.resources
    if choice.pc_cost > 0:
        resources = resources.with_spend(choice.pc_cost)
        entries.append(LogEntry.info(f"Spent {choice.pc_cost} PC to handle the situation"))

    tier, effects = choice.resolve(rng)
    if tier is not None:
        entries.append(LogEntry.outcome(tier, card.title, choice.label))

    org, effect_entries = apply_effects(state.org, effects)
    entries.extend(effect_entries)

    ceo = state.ceo
    profit = sum(e.delta for e in effects if isinstance(e, ProfitEffect))
    profit -= sum(e.amount for e in effects if isinstance(e, FineEffect))
    if profit != 0:
        ceo = ceo.with_current_profit_added(profit)

    if choice.is_corporate:
        delta = choice.corporate_intensity_delta
        ceo = ceo.with_evil_change(delta).with_favorability_change(delta)
        entries.append(LogEntry.info(f"Corporate choice: EvilScore +{delta}, Favorability +{delta}"))

    state = replace(
        state,
        org=org,
        ceo=ceo,
        resources=resources,
        current_crisis=None,
        quarter=state.quarter.with_phase(GamePhase.RESOLUTION),
    )
    return state, entries


# ------------------------------------------------------------------
# Resolution
# ------------------------------------------------------------------

def _passive_recovery(org: OrgState) -> Tuple[OrgState, List[Tuple[Meter, int]]]:
    """The lowest meters drift back toward the middle."""
    ordered = sorted(Meter, key=org.get_meter)
    recoveries: List[Tuple[Meter, int]] = []

    lowest = org.get_meter(ordered[0])
    if lowest < 50:
        recoveries.append((ordered[0], min(5, 50 - lowest)))
    elif lowest < 60:
        recoveries.append((ordered[0], 3))

    second = org.get_meter(ordered[1])
    if second < 45:
        recoveries.append((ordered[1], min(3, 45 - second)))

    third = org.get_meter(ordered[2])
    if third < 35:
        recoveries.append((ordered[2], min(2, 35 - third)))

    for meter, boost in recoveries:
        org = org.with_meter_change(meter, boost)
    return org, recoveries


def _performance_effects(org: OrgState, profit: int, profit_delta: int, cards_played: int, rng: SeededRng) -> Tuple[OrgState, List[str]]:
    """Quarter-over-quarter results nudge Morale, Alignment and Runway; project results nudge Delivery."""
    notes: List[str] = []
    if profit_delta >= 15:
        deltas = {Meter.MORALE: rng.next_int(2, 7), Meter.ALIGNMENT: rng.next_int(1, 5), Meter.RUNWAY: rng.next_int(2, 6)}
        label = "Excellent results!"
    elif profit_delta >= 5:
        deltas = {Meter.MORALE: rng.next_int(1, 4), Meter.ALIGNMENT: rng.next_int(0, 3), Meter.RUNWAY: rng.next_int(1, 4)}
        label = "Good results!"
    elif profit_delta <= -15:
        deltas = {Meter.MORALE: -rng.next_int(2, 7), Meter.ALIGNMENT: -rng.next_int(1, 5), Meter.RUNWAY: -rng.next_int(2, 6)}
        label = "Poor results!"
    elif profit_delta <= -5:
        deltas = {Meter.MORALE: -rng.next_int(1, 4), Meter.ALIGNMENT: -rng.next_int(0, 3), Meter.RUNWAY: -rng.next_int(1, 4)}
        label = "Disappointing results:"
    else:
        deltas = {}
        label = ""
    deltas = {m: d for m, d in deltas.items() if d != 0}
    if deltas:
        org = org.with_meter_changes(deltas)
        notes.append(f"{label} " + ", ".join(f"{m.value} {d:+d}" for m, d in deltas.items()))

    if cards_played > 0:
        if profit >= 20:
            boost = rng.next_int(2, 7)
            org = org.with_meter_change(Meter.DELIVERY, boost)
            notes.append(f"Strong project execution! Delivery +{boost}")
        elif profit >= 10:
            boost = rng.next_int(1, 4)
            org = org.with_meter_change(Meter.DELIVERY, boost)
            notes.append(f"Solid project execution. Delivery +{boost}")
        elif profit <= -20:
            penalty = rng.next_int(2, 7)
            org = org.with_meter_change(Meter.DELIVERY, -penalty)
            notes.append(f"Project failures impacting operations. Delivery -{penalty}")
        elif profit <= -10:
            penalty = rng.next_int(1, 4)
            org = org.with_meter_change(Meter.DELIVERY, -penalty)
            notes.append(f"Project execution issues. Delivery -{penalty}")
    return org, notes


def _exceptional_rewards(
    directive_met: bool, profit_delta: int, bonus: int, org: OrgState, rng: SeededRng
) -> List[Tuple[Meter, int]]:
    exceptional = bonus >= 10 and directive_met
    outstanding = profit_delta >= 30
    if not (exceptional or outstanding):
        return []
    if rng.next_int(0, 100) >= EXCEPTIONAL_AWARD_CHANCE:
        return []
    rewards: List[Tuple[Meter, int]] = []
    if outstanding:
        rewards.append((Meter.RUNWAY, rng.next_int(3, 8)))
    if exceptional:
        lowest = org.lowest_meter()
        if org.get_meter(lowest) < 70:
            rewards.append((lowest, rng.next_int(2, 6)))
    return rewards


def _apply_adjustment(change: int, adjustment: favorability.Adjustment, kind: str, entries: List[LogEntry]) -> int:
    if adjustment.penalty != 0:
        change += adjustment.penalty
        entries.append(LogEntry.info(f"{kind}: {adjustment.reason} ({adjustment.penalty:+d})"))
    capped = favorability.apply_cap(change, adjustment.max_gain)
    if capped != change:
        entries.append(LogEntry.info(f"Favor capped: {adjustment.reason} (was {change:+d}, now {capped:+d})"))
    return capped


def _retire(state: QuarterGameState) -> Step:
    ceo = state.ceo.with_retirement()
    score = calculate_final_score(ceo, state.resources)
    logger.debug("CEO retired after %d quarters (score %d)", ceo.quarters_survived, score.final_score)
    entries = [
        LogEntry.event("CEO RETIRES IN GLORY!"),
        LogEntry.info(f"Final Score: {score.final_score}"),
    ]
    return replace(state, ceo=ceo), entries


def _advance_resolution(state: QuarterGameState, inp: QuarterInput, rng: SeededRng) -> Step:
    if isinstance(inp, RetirementInput):
        if state.ceo.can_retire:
            return _retire(state)
        retire_note = [LogEntry.info(
            f"Retirement unavailable: ${state.ceo.accumulated_bonus}M of ${state.ceo.retirement_threshold}M bonus earned"
        )]
    else:
        retire_note = []

    cfg = state.config
    quarter_number = state.quarter_number
    entries: List[LogEntry] = retire_note + [LogEntry.info(f"Quarter {quarter_number} Resolution")]
    ceo = state.ceo
    org = state.org

    # Open crises: ongoing impact, then deadlines
    for meter, delta in state.crises.total_ongoing_impact().items():
        if delta != 0:
            org = org.with_meter_change(meter, delta)
            entries.append(LogEntry.meter_change(meter, delta, f"Crisis ongoing impact: {meter.value} {delta:+d}"))
    crises, expired = state.crises.process_deadlines(quarter_number)
    for crisis in expired:
        entries.append(LogEntry.event(f"Crisis expired: {crisis.title}"))
        for meter, delta in crisis.base_impact.items():
            org = org.with_meter_change(meter, delta)
            entries.append(LogEntry.meter_change(meter, delta, f"  {meter.value}: {delta:+d}"))

    # Lingering side effects
    side_effects = []
    for effect in state.side_effects:
        for meter, delta in effect.recurring_impact.items():
            org = org.with_meter_change(meter, delta)
            entries.append(LogEntry.meter_change(meter, delta, f"{effect.title}: {meter.value} {delta:+d}"))
        ticked = effect.tick()
        if not ticked.is_expired:
            side_effects.append(ticked)

    org, recoveries = _passive_recovery(org)
    if recoveries:
        entries.append(LogEntry.info("Org stabilization: " + ", ".join(f"{m.value} +{d}" for m, d in recoveries)))

    # Profit
    cards_played = state.cards_played_count
    base_operations = calculate_base_operations(org, rng, ceo.quarters_survived)
    project_impact = ceo.current_quarter_profit
    profit = base_operations + project_impact
    entries.append(LogEntry.info(f"Projects Completed: {cards_played}"))
    for card in state.cards_played_this_quarter:
        entries.append(LogEntry.info(f"  - {card.title}"))
    entries.append(LogEntry.info(f"Base Operations: {format_signed_profit(base_operations)}"))
    if project_impact != 0:
        entries.append(LogEntry.info(f"Project Impact: {format_signed_profit(project_impact)}"))
    entries.append(LogEntry.info(f"Total Quarterly Profit: {format_profit(profit)}", delta=profit))

    profit_delta = profit - ceo.last_quarter_profit
    org, notes = _performance_effects(org, profit, profit_delta, cards_played, rng)
    entries.extend(LogEntry.info(n) for n in notes)

    # Directive
    pressure = ceo.pressure_level
    directive = state.current_directive or PROFIT_FLOOR
    directive_met = directive.is_met(ceo.last_quarter_profit, profit, pressure)
    weak_quarter = cards_played == 0 or project_impact <= 0
    if directive_met and weak_quarter and ceo.weak_project_streak >= 1:
        directive_met = False
        entries.append(LogEntry.event("Board Override: Sustained lack of strategic initiative"))
    status = "Directive Met" if directive_met else "Directive Failed"
    entries.append(LogEntry.info(f"{status}: {directive.describe(pressure)}"))

    # Favorability
    change = favorability.calculate(
        ceo.last_quarter_profit,
        profit,
        directive_met,
        pressure,
        ceo.evil_score,
        weak_project_streak=ceo.weak_project_streak,
        quarters_survived=ceo.quarters_survived,
        settings=cfg.settings,
    )
    decay = favorability.tenure_decay(ceo.quarters_survived, cfg.settings)
    change += decay
    if cards_played == 0 and change > 0:
        change = 0
        entries.append(LogEntry.info("Board unimpressed: No strategic initiatives executed"))
    if decay < 0:
        entries.append(LogEntry.info(f"Board expectations risen ({decay} tenure adjustment)"))
    if cards_played > 0:
        change += 1
        entries.append(LogEntry.info("Initiative Bonus: +1 Favor (active leadership)"))
    change = _apply_adjustment(change, favorability.get_low_meter_adjustment(org), "Board Concern", entries)
    change = _apply_adjustment(
        change,
        favorability.get_low_activity_adjustment(cards_played, ceo.quarters_survived),
        "Activity Concern",
        entries,
    )
    entries.append(LogEntry.info(f"Board Favorability: {change:+d}", delta=change))

    # Bonus
    if cards_played == 0:
        bonus = 0
        entries.append(LogEntry.info("No Bonus: No strategic initiatives executed this quarter"))
    else:
        bonus, reasons = calculate_quarterly_bonus(ceo, org, directive_met, profit_delta)
        entries.append(LogEntry.info(f"Quarterly Bonus: ${bonus}M", delta=bonus))
        entries.extend(LogEntry.info(f"  {r}") for r in reasons)

    new_ceo = (
        ceo.with_profit_added(profit)
        .with_profit_recorded(profit)
        .with_project_performance_recorded(project_impact)
        .with_cards_played_recorded(cards_played)
        .with_favorability_change(change)
        .with_quarter_complete()
        .with_bonus_awarded(bonus)
        .with_evil_snapshot()
        .with_quarter_closed(profit)
    )

    for meter, delta in _exceptional_rewards(directive_met, profit_delta, bonus, org, rng):
        org = org.with_meter_change(meter, delta)
        entries.append(LogEntry.meter_change(meter, delta, f"Board Award: +{delta} {meter.value}"))

    ousted = ouster.roll_for_ouster(
        rng,
        new_ceo.board_favorability,
        new_ceo.pressure_level,
        quarters_survived=new_ceo.quarters_survived,
        evil_score=new_ceo.evil_score,
        directive_met=directive_met,
        profit_positive=profit >= 0,
        profit_improving=new_ceo.is_profit_improving,
        consecutive_negative_quarters=new_ceo.consecutive_negative_quarters,
        weak_project_streak=new_ceo.weak_project_streak,
        cards_played=cards_played,
    )
    if ousted:
        new_ceo = new_ceo.with_ousted()
        entries.append(LogEntry.event(f"CEO OUSTED! Golden Parachute: ${new_ceo.parachute_payout}M"))
        logger.debug("CEO ousted in quarter %d (favorability %d)", quarter_number, new_ceo.board_favorability)
        state = replace(
            state,
            org=org,
            ceo=new_ceo,
            crises=crises,
            side_effects=tuple(side_effects),
            current_crisis=None,
        )
        return state, entries

    entries.append(LogEntry.info(
        f"Survived Quarter {quarter_number}. "
        f"Favorability: {new_ceo.board_favorability}, Pressure: {new_ceo.pressure_level}"
    ))
    if new_ceo.can_retire:
        entries.append(LogEntry.info(f"RETIREMENT AVAILABLE! Accumulated Bonus: ${new_ceo.accumulated_bonus}M"))
    else:
        entries.append(LogEntry.info(
            f"Accumulated Bonus: ${new_ceo.accumulated_bonus}M (${new_ceo.retirement_threshold}M to retire)"
        ))

    resources = state.resources.with_turn_end_adjustments(org)
    pc_delta = resources.political_capital - state.resources.political_capital
    if pc_delta != 0:
        entries.append(LogEntry.info(f"Political Capital: {pc_delta:+d} (now {resources.political_capital})", delta=pc_delta))

    drawn, project_deck = state.project_deck.deal(state.hand.space, rng)
    state = replace(
        state,
        quarter=state.quarter.next_quarter(),
        org=org,
        ceo=new_ceo,
        resources=resources,
        hand=state.hand.with_cards_added(drawn),
        project_deck=project_deck,
        current_crisis=None,
        current_directive=generate(new_ceo.pressure_level),
        cards_played_this_quarter=(),
        crises=crises,
        side_effects=tuple(side_effects),
    )
    return state, entries


_PHASE_HANDLERS: Dict[GamePhase, Callable[[QuarterGameState, QuarterInput, SeededRng], Step]] = {
    GamePhase.BOARD_DEMAND: _advance_board_demand,
    GamePhase.PLAY_CARDS: _advance_play_cards,
    GamePhase.CRISIS: _advance_crisis,
    GamePhase.RESOLUTION: _advance_resolution,
}


# ------------------------------------------------------------------
# Crisis instance responses
# ------------------------------------------------------------------

def respond_to_crisis(
    state: QuarterGameState,
    instance_id: str,
    response: Union[str, CrisisResponse],
    rng: SeededRng,
) -> Tuple[QuarterGameState, QuarterLog]:
    """Spend a response on an open crisis instance and resolve it with the 2d6 resolver.

    Raises ``InvalidChoiceError`` for an unknown instance or response id and
    ``InsufficientCapitalError`` when the response costs more PC than available;
    in both cases nothing is spent.
    """
    _check_not_terminal(state)
    crisis = state.crises.get(instance_id)
    if crisis is None:
        raise InvalidChoiceError(f"No open crisis '{instance_id}'. Open: {[c.instance_id for c in state.crises.crises]}")
    if isinstance(response, str):
        try:
            response = state.content.response(response)
        except KeyError as exc:
            raise InvalidChoiceError(str(exc)) from exc

    result = resolve(crisis, response, state.resources, state.org, rng)
    resources = state.resources.with_spend(response.cost)
    entries = [
        LogEntry.info(f"Responded to {crisis.title} with {response.title} ({response.cost} PC)"),
        LogEntry.outcome(result.tier, crisis.title, result.label),
        LogEntry.info(result.narrative),
    ]

    org = state.org
    for meter, delta in result.meter_deltas.items():
        org, entry = MeterEffect(meter, delta).apply(org)
        entries.append(entry)

    crises = state.crises
    updated = result.crisis
    if updated.status is CrisisStatus.MITIGATED:
        crises = crises.remove(updated.instance_id)
        entries.append(LogEntry.event(f"Crisis mitigated: {updated.title}"))
    elif updated.status is CrisisStatus.ESCALATED:
        crises = crises.remove(updated.instance_id)
        entries.append(LogEntry.event(f"Crisis escalated: {updated.title}"))
        for meter, delta in updated.base_impact.items():
            org, entry = MeterEffect(meter, delta).apply(org)
            entries.append(entry)
    else:
        crises = crises.update(updated)

    side_effects = list(state.side_effects)
    for effect_id in result.spawned_effects:
        definition = state.content.side_effects[effect_id]
        side_effects.append(definition.activate())
        entries.append(LogEntry.event(f"Side effect: {definition.title} ({definition.duration} quarters)"))

    for definition_id in result.aftershocks:
        definition = state.content.crisis_definition(definition_id)
        crises, instance = crises.create_crisis(definition, state.quarter_number, f"aftershock:{crisis.instance_id}")
        entries.append(LogEntry.event(f"Aftershock: {instance.title}"))

    logger.debug("Crisis %s resolved as %s (roll %d)", crisis.instance_id, result.label, result.modified_roll)
    state = replace(state, org=org, resources=resources, crises=crises, side_effects=tuple(side_effects))
    return state, QuarterLog(state.quarter_number, state.phase, entries)
