"""Game runner that plays a single game to the end with an autopilot policy."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config import GameConfig
from ..content import GameContent, load_content
from .quarter_engine import advance
from .state import QuarterGameState, new_game

if TYPE_CHECKING:
    from ..policies import Policy

__all__ = ["GameResult", "play_game", "run_once"]

logger = logging.getLogger(__name__)

OUTCOME_OUSTED = "ousted"
OUTCOME_RETIRED = "retired"
OUTCOME_TIMEOUT = "timeout"


@dataclass
class GameResult:
    """Container returned by `play_game`."""

    seed: int
    policy: str
    outcome: str
    quarters_survived: int
    favorability: int
    evil_score: int
    total_profit: int
    accumulated_bonus: int
    final_score: int
    log_entries: int

    # Final snapshot for richer post-analysis
    state: QuarterGameState | None = None


def _outcome(state: QuarterGameState) -> str:
    if state.ceo.is_ousted:
        return OUTCOME_OUSTED
    if state.ceo.has_retired:
        return OUTCOME_RETIRED
    return OUTCOME_TIMEOUT


# ------------------------------------------------------------------
# Runner entry-points
# ------------------------------------------------------------------

def play_game(cfg: GameConfig, policy: "Policy", content: GameContent | None = None) -> GameResult:
    """Drive ``advance`` with ``policy`` until the CEO leaves or ``cfg.max_quarters`` pass."""
    if content is None:
        content = load_content(cfg.content_path)
    rng = cfg.make_rng()
    state = new_game(cfg, content, rng)
    logger.info("Starting game seed=%d difficulty=%s policy=%s", cfg.seed, cfg.difficulty, policy.name)

    log_entries = 0
    while not state.is_terminal and state.quarter_number <= cfg.max_quarters:
        state, log = advance(state, policy.decide(state), rng, cfg)
        log_entries += len(log)

    score = state.final_score
    result = GameResult(
        seed=cfg.seed,
        policy=policy.name,
        outcome=_outcome(state),
        quarters_survived=state.ceo.quarters_survived,
        favorability=state.ceo.board_favorability,
        evil_score=state.ceo.evil_score,
        total_profit=state.ceo.total_profit,
        accumulated_bonus=state.ceo.accumulated_bonus,
        final_score=score.final_score,
        log_entries=log_entries,
        state=state,
    )
    logger.info(
        "Game seed=%d finished: %s after %d quarters (score %d)",
        cfg.seed,
        result.outcome,
        result.quarters_survived,
        result.final_score,
    )
    return result


def run_once(cfg: GameConfig, policy_name: str) -> GameResult:
    """Play one game with the registered policy ``policy_name``."""
    from ..policies import get_policy

    policy_cls = get_policy(policy_name)
    return play_game(cfg, policy_cls(cfg))
