"""Command-line entry points."""
import pytest
import yaml

from inerticorp import cli
from inerticorp.config import GameConfig


def test_dump_config(tmp_path, capsys):
    out = tmp_path / "icahn.yaml"
    cli.main(["dump-config", "--out", str(out), "--difficulty", "icahn"])
    data = yaml.safe_load(out.read_text())
    assert data["difficulty"] == "icahn"
    assert GameConfig.from_yaml(out).difficulty == "icahn"
    assert "Config saved" in capsys.readouterr().out


def test_run_prints_outcome(tmp_path, capsys):
    path = tmp_path / "cfg.yaml"
    GameConfig(seed=1, max_quarters=4).to_yaml(path)
    cli.main(["run", "--config", str(path), "--policy", "Balanced", "--seed", "8"])
    out = capsys.readouterr().out
    assert out.startswith("Outcome = ")
    assert "seed=8" in out


def test_run_show_log(tmp_path, capsys):
    path = tmp_path / "cfg.yaml"
    GameConfig(seed=1, max_quarters=2).to_yaml(path)
    cli.main(["run", "--config", str(path), "--policy", "Passive", "--show-log"])
    out = capsys.readouterr().out
    assert "[Q1 BoardDemand]" in out
    assert "Final score = " in out


def test_unknown_policy_fails(tmp_path):
    path = tmp_path / "cfg.yaml"
    GameConfig().to_yaml(path)
    with pytest.raises(KeyError):
        cli.main(["run", "--config", str(path), "--policy", "Nope"])


def test_subcommand_required():
    with pytest.raises(SystemExit):
        cli.main([])
