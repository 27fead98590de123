"""Game content: project cards, crisis event cards, crisis definitions and responses.

Content ships as YAML (``inerticorp/data/content.yaml``) and is parsed into the
immutable core types here.  A custom file can be supplied through
``GameConfig.content_path``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

from .core.cards import CardCategory, Choice, EventCard, PlayableCard, RiskLevel
from .core.effects import Effect, effect_from_dict
from .core.meters import Meter
from .core.outcomes import OutcomeProfile
from .crisis.instance import CrisisDefinition
from .crisis.resolver import INEPT_SIDE_EFFECT
from .crisis.response import (
    CrisisOperation,
    CrisisResponse,
    ResponseOutcome,
    ResponseOutcomes,
    StaffQualityWeights,
)
from .crisis.side_effects import SideEffectDefinition
from .errors import ContentError

__all__ = ["GameContent", "load_content", "parse_content"]

logger = logging.getLogger(__name__)

DEFAULT_CONTENT = "content.yaml"


@dataclass(frozen=True)
class GameContent:
    project_cards: Tuple[PlayableCard, ...]
    crisis_cards: Tuple[EventCard, ...]
    crisis_definitions: Tuple[CrisisDefinition, ...] = ()
    crisis_responses: Tuple[CrisisResponse, ...] = ()
    side_effects: Mapping[str, SideEffectDefinition] = field(default_factory=dict)

    def crisis_definition(self, definition_id: str) -> CrisisDefinition:
        for definition in self.crisis_definitions:
            if definition.id == definition_id:
                return definition
        raise KeyError(f"Crisis definition '{definition_id}' not found")

    def response(self, response_id: str) -> CrisisResponse:
        for response in self.crisis_responses:
            if response.id == response_id:
                return response
        raise KeyError(
            f"Crisis response '{response_id}' not found. Available: {[r.id for r in self.crisis_responses]}"
        )

    def project_card(self, card_id: str) -> PlayableCard:
        for card in self.project_cards:
            if card.id == card_id:
                return card
        raise KeyError(f"Project card '{card_id}' not found")


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------

def _effects(items) -> List[Effect]:
    return [effect_from_dict(item) for item in (items or [])]


def _profile(data: Mapping) -> OutcomeProfile:
    return OutcomeProfile(
        good=_effects(data.get("good")),
        expected=_effects(data.get("expected")),
        bad=_effects(data.get("bad")),
    )


def _meter_map(data: Optional[Mapping]) -> Dict[Meter, int]:
    try:
        return {Meter.parse(k): int(v) for k, v in (data or {}).items()}
    except ValueError as exc:
        raise ContentError(str(exc)) from exc


def _require(data: Mapping, key: str, kind: str):
    try:
        return data[key]
    except KeyError as exc:
        raise ContentError(f"{kind} entry is missing '{key}': {dict(data)}") from exc


def _project_card(data: Mapping) -> PlayableCard:
    affinity = data.get("meter_affinity")
    try:
        category = CardCategory(data.get("category", CardCategory.ACTION.value))
        risk = RiskLevel(int(data.get("risk_level", RiskLevel.MODERATE)))
        meter = Meter.parse(affinity) if affinity else None
    except ValueError as exc:
        raise ContentError(f"Project card '{data.get('id')}': {exc}") from exc
    return PlayableCard(
        id=_require(data, "id", "Project card"),
        title=_require(data, "title", "Project card"),
        description=data.get("description", ""),
        outcomes=_profile(_require(data, "outcomes", "Project card")),
        corporate_intensity=int(data.get("corporate_intensity", 0)),
        category=category,
        meter_affinity=meter,
        risk_level=risk,
    )


def _choice(data: Mapping) -> Choice:
    outcomes = data.get("outcomes")
    return Choice(
        id=_require(data, "id", "Choice"),
        label=_require(data, "label", "Choice"),
        effects=_effects(data.get("effects")),
        outcome_profile=_profile(outcomes) if outcomes else None,
        corporate_intensity_delta=int(data.get("corporate_intensity_delta", 0)),
        pc_cost=int(data.get("pc_cost", 0)),
    )


def _crisis_card(data: Mapping) -> EventCard:
    return EventCard(
        id=_require(data, "id", "Crisis card"),
        title=_require(data, "title", "Crisis card"),
        description=data.get("description", ""),
        choices=tuple(_choice(c) for c in _require(data, "choices", "Crisis card")),
    )


def _crisis_definition(data: Mapping) -> CrisisDefinition:
    minimum = data.get("minimum_spend")
    return CrisisDefinition(
        id=_require(data, "id", "Crisis definition"),
        title=_require(data, "title", "Crisis definition"),
        description=data.get("description", ""),
        severity=int(data.get("severity", 3)),
        deadline_after=int(data.get("deadline_after", 2)),
        base_impact=_meter_map(data.get("base_impact")),
        ongoing_impact=_meter_map(data.get("ongoing_impact")),
        tags=tuple(data.get("tags", ())),
        minimum_spend=None if minimum is None else int(minimum),
    )


def _response_outcome(data: Optional[Mapping]) -> ResponseOutcome:
    data = data or {}
    try:
        operation = CrisisOperation(data.get("operation", CrisisOperation.NONE.value))
    except ValueError as exc:
        raise ContentError(str(exc)) from exc
    return ResponseOutcome(
        operation=operation,
        meter_deltas=_meter_map(data.get("meter_deltas")),
        spawn_effects=tuple(data.get("spawn_effects", ())),
        aftershocks=tuple(data.get("aftershocks", ())),
        amount=int(data.get("amount", 1)),
    )


def _crisis_response(data: Mapping) -> CrisisResponse:
    outcomes = _require(data, "outcomes", "Crisis response")
    staff = data.get("staff", "standard")
    try:
        weights = StaffQualityWeights(**staff) if isinstance(staff, Mapping) else StaffQualityWeights.preset(staff)
    except (KeyError, TypeError, ValueError) as exc:
        raise ContentError(f"Crisis response '{data.get('id')}': bad staff weights {staff!r}") from exc
    return CrisisResponse(
        id=_require(data, "id", "Crisis response"),
        title=_require(data, "title", "Crisis response"),
        description=data.get("description", ""),
        cost=int(data.get("cost", 0)),
        mitigation_bonus=int(data.get("mitigation_bonus", 0)),
        staff=weights,
        outcomes=ResponseOutcomes(
            success=_response_outcome(outcomes.get("success")),
            mixed=_response_outcome(outcomes.get("mixed")),
            fail=_response_outcome(outcomes.get("fail")),
        ),
        effective_tags=tuple(data.get("effective_tags", ())),
    )


def _side_effect(data: Mapping) -> SideEffectDefinition:
    effect_id = _require(data, "id", "Side effect")
    return SideEffectDefinition(
        id=effect_id,
        title=data.get("title", effect_id),
        duration=int(data.get("duration", 1)),
        recurring_impact=_meter_map(data.get("recurring_impact")),
    )


def _check_references(content: GameContent) -> None:
    definition_ids = {d.id for d in content.crisis_definitions}
    for response in content.crisis_responses:
        for outcome in (response.outcomes.success, response.outcomes.mixed, response.outcomes.fail):
            for effect_id in outcome.spawn_effects:
                if effect_id not in content.side_effects:
                    raise ContentError(f"Response '{response.id}' spawns unknown side effect '{effect_id}'")
            for aftershock in outcome.aftershocks:
                if aftershock not in definition_ids:
                    raise ContentError(f"Response '{response.id}' schedules unknown crisis '{aftershock}'")
    if content.crisis_responses and INEPT_SIDE_EFFECT not in content.side_effects:
        raise ContentError(f"Content with crisis responses must define the '{INEPT_SIDE_EFFECT}' side effect")


def parse_content(data: Mapping) -> GameContent:
    """Build ``GameContent`` from an already-loaded YAML mapping."""
    if not isinstance(data, Mapping):
        raise ContentError("Content root must be a mapping")
    project_cards = tuple(_project_card(c) for c in data.get("project_cards") or ())
    if not project_cards:
        raise ContentError("Content defines no project cards")
    ids = [c.id for c in project_cards]
    if len(set(ids)) != len(ids):
        raise ContentError("Project card ids must be unique")

    side_effects = [_side_effect(s) for s in data.get("side_effects") or ()]
    content = GameContent(
        project_cards=project_cards,
        crisis_cards=tuple(_crisis_card(c) for c in data.get("crisis_cards") or ()),
        crisis_definitions=tuple(_crisis_definition(c) for c in data.get("crisis_definitions") or ()),
        crisis_responses=tuple(_crisis_response(r) for r in data.get("crisis_responses") or ()),
        side_effects={effect.id: effect for effect in side_effects},
    )
    _check_references(content)
    return content


def load_content(path: os.PathLike | str | None = None) -> GameContent:
    """Load content from ``path``, or the packaged default when ``path`` is None."""
    if path is None:
        text = resources.files("inerticorp").joinpath("data").joinpath(DEFAULT_CONTENT).read_text(encoding="utf-8")
        source = f"<package>/{DEFAULT_CONTENT}"
    else:
        with open(path, "r", encoding="utf-8") as fh:
            text = fh.read()
        source = str(path)
    content = parse_content(yaml.safe_load(text))
    logger.debug(
        "Loaded %d project cards, %d crisis cards, %d crisis definitions from %s",
        len(content.project_cards),
        len(content.crisis_cards),
        len(content.crisis_definitions),
        source,
    )
    return content
