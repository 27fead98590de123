"""Policy registry and built-in autopilot policies."""
from dataclasses import replace

import pytest

from inerticorp.config import GameConfig
from inerticorp.content import load_content
from inerticorp.core.quarter import GamePhase
from inerticorp.engine import inputs
from inerticorp.engine.quarter_engine import advance
from inerticorp.engine.state import new_game
from inerticorp.policies import Policy, available_policies, get_policy, register_policy
from inerticorp.policies.builtin import expected_value

CONTENT = load_content()


def test_builtins_registered():
    assert {"Passive", "Balanced", "Gambler"} <= set(available_policies())


def test_unknown_policy_lists_available():
    with pytest.raises(KeyError, match="Available"):
        get_policy("Reckless")


def test_register_rejects_non_policy():
    with pytest.raises(TypeError):
        register_policy(object)
    with pytest.raises(TypeError):
        register_policy(lambda state: None)


def test_register_rejects_duplicate():
    with pytest.raises(KeyError):
        @register_policy
        class Passive(Policy):  # noqa: F811
            def decide(self, state, /):
                return inputs.empty()


def test_policy_name_defaults_to_class_name():
    assert get_policy("Balanced")(GameConfig()).name == "Balanced"


def test_expected_value_penalises_corporate_cards():
    for card in CONTENT.project_cards:
        if card.is_corporate:
            assert expected_value(card) < expected_value(replace(card, corporate_intensity=0))


@pytest.mark.parametrize("name", ["Passive", "Balanced", "Gambler"])
def test_policy_plays_valid_inputs(name):
    cfg = GameConfig(seed=5, crisis_draw_chance=100)
    policy = get_policy(name)(cfg)
    rng = cfg.make_rng()
    state = new_game(cfg, CONTENT, rng)
    phases = set()
    for _ in range(40):
        if state.is_terminal:
            break
        phases.add(state.phase)
        # Any invalid input would raise
        state, _ = advance(state, policy.decide(state), rng)
    assert GamePhase.CRISIS in phases
    assert state.quarter_number > 1 or state.is_terminal


def test_passive_never_plays_cards():
    cfg = GameConfig(seed=3, crisis_draw_chance=0)
    policy = get_policy("Passive")(cfg)
    rng = cfg.make_rng()
    state = new_game(cfg, CONTENT, rng)
    for _ in range(8):
        if state.is_terminal:
            break
        state, _ = advance(state, policy.decide(state), rng)
        assert state.ceo.total_cards_played == 0


def test_balanced_caps_cards_per_quarter():
    cfg = GameConfig(seed=9, crisis_draw_chance=0)
    policy = get_policy("Balanced")(cfg)
    rng = cfg.make_rng()
    state = new_game(cfg, CONTENT, rng)
    while state.quarter_number == 1:
        state, _ = advance(state, policy.decide(state), rng)
        assert state.cards_played_count <= 2


def test_gambler_is_seeded():
    cfg = GameConfig(seed=21)
    state = new_game(cfg, CONTENT, cfg.make_rng())
    state, _ = advance(state, inputs.empty(), cfg.make_rng())
    first, second = get_policy("Gambler")(cfg), get_policy("Gambler")(cfg)
    assert [first.decide(state) for _ in range(5)] == [second.decide(state) for _ in range(5)]
