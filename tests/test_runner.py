"""Running whole games with a policy, serially and in a process pool."""
import pytest

from inerticorp.config import GameConfig
from inerticorp.engine.runner import OUTCOME_OUSTED, OUTCOME_RETIRED, OUTCOME_TIMEOUT, play_game, run_once
from inerticorp.parallel import run_batch
from inerticorp.policies import get_policy


def test_run_once_is_deterministic():
    cfg = GameConfig(seed=17)
    first = run_once(cfg, "Balanced")
    second = run_once(cfg, "Balanced")
    first.state = second.state = None
    assert first == second


@pytest.mark.parametrize("policy", ["Passive", "Balanced", "Gambler"])
def test_game_ends_with_known_outcome(policy):
    result = run_once(GameConfig(seed=4), policy)
    assert result.outcome in {OUTCOME_OUSTED, OUTCOME_RETIRED, OUTCOME_TIMEOUT}
    assert result.policy == policy
    assert result.log_entries > 0
    assert result.final_score >= 0
    if result.outcome != OUTCOME_TIMEOUT:
        assert result.state.is_terminal


def test_max_quarters_stops_the_game():
    cfg = GameConfig(seed=2, max_quarters=2)
    result = play_game(cfg, get_policy("Passive")(cfg))
    assert result.quarters_survived <= 2
    if result.outcome == OUTCOME_TIMEOUT:
        assert result.state.quarter_number == 3


def test_run_batch_matches_serial_runs():
    cfgs = [GameConfig(seed=s, max_quarters=6) for s in range(3)]
    batch = run_batch(cfgs, "Balanced", processes=2)
    assert [r.seed for r in batch] == [0, 1, 2]
    for cfg, result in zip(cfgs, batch):
        assert result.state is None
        serial = run_once(cfg, "Balanced")
        serial.state = None
        assert serial == result
