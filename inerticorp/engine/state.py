"""Complete game snapshot threaded through the quarter engine."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from ..config import GameConfig
from ..content import GameContent, load_content
from ..core.cards import CardHand, EventCard, PlayableCard
from ..core.ceo import CEOState
from ..core.deck import Deck
from ..core.directive import BoardDirective, generate
from ..core.followups import PendingFollowUp
from ..core.meters import OrgState
from ..core.quarter import GamePhase, QuarterState
from ..core.resources import ResourceState
from ..core.score import ScoreBreakdown, calculate_final_score
from ..crisis.instance import CrisisState
from ..crisis.side_effects import ActiveSideEffect
from ..rng import SeededRng

__all__ = ["QuarterGameState", "new_game"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuarterGameState:
    """Everything ``advance`` reads and writes.  Never mutate in place."""

    seed: int
    quarter: QuarterState
    org: OrgState
    ceo: CEOState
    resources: ResourceState
    hand: CardHand
    project_deck: Deck[PlayableCard]
    crisis_deck: Deck[EventCard]
    content: GameContent = field(repr=False, compare=False)
    config: GameConfig = field(repr=False, compare=False)
    current_crisis: Optional[EventCard] = None
    current_directive: Optional[BoardDirective] = None
    cards_played_this_quarter: Tuple[PlayableCard, ...] = ()
    pending_follow_ups: Tuple[PendingFollowUp, ...] = ()
    crises: CrisisState = field(default_factory=CrisisState)
    side_effects: Tuple[ActiveSideEffect, ...] = ()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def phase(self) -> GamePhase:
        return self.quarter.phase

    @property
    def quarter_number(self) -> int:
        return self.quarter.quarter_number

    @property
    def is_terminal(self) -> bool:
        return self.ceo.is_terminal

    @property
    def cards_played_count(self) -> int:
        return len(self.cards_played_this_quarter)

    @property
    def revenue_cards_played(self) -> int:
        return sum(1 for c in self.cards_played_this_quarter if c.is_revenue)

    @property
    def can_play_card(self) -> bool:
        return self.cards_played_count < self.config.max_cards_per_quarter and len(self.hand) > 0

    @property
    def next_card_cost(self) -> int:
        """PC cost of the next card this quarter (the last listed cost once the cap is reached)."""
        costs = self.config.card_pc_costs
        return costs[min(self.cards_played_count, len(costs) - 1)]

    @property
    def next_card_risk(self) -> int:
        risks = self.config.card_risk_modifiers
        return risks[min(self.cards_played_count, len(risks) - 1)]

    @property
    def can_afford_next_card(self) -> bool:
        return self.resources.can_afford(self.next_card_cost)

    @property
    def final_score(self) -> ScoreBreakdown:
        return calculate_final_score(self.ceo, self.resources)

    def with_phase(self, phase: GamePhase) -> "QuarterGameState":
        return replace(self, quarter=self.quarter.with_phase(phase))


def new_game(cfg: GameConfig, content: GameContent | None = None, rng: SeededRng | None = None) -> QuarterGameState:
    """Fresh game at quarter 1, BoardDemand, with a dealt hand.

    Deck shuffles and the opening deal draw from ``rng`` (``cfg.make_rng()`` when
    omitted), so a game is fully reproduced by its seed.
    """
    if content is None:
        content = load_content(cfg.content_path)
    rng = rng or cfg.make_rng()

    project_deck = Deck.create(content.project_cards, rng)
    crisis_deck = Deck.create(content.crisis_cards, rng)
    cards, project_deck = project_deck.deal(CardHand.MAX_SIZE, rng)

    ceo = CEOState.initial(cfg.settings)
    logger.debug("New game: seed=%d difficulty=%s hand=%d", cfg.seed, cfg.difficulty, len(cards))
    return QuarterGameState(
        seed=cfg.seed,
        quarter=QuarterState.initial(),
        org=OrgState.default(),
        ceo=ceo,
        resources=ResourceState.initial(cfg),
        hand=CardHand(tuple(cards)),
        project_deck=project_deck,
        crisis_deck=crisis_deck,
        content=content,
        config=cfg,
        current_directive=generate(ceo.pressure_level),
    )
