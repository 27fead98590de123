"""Command-line interface entry-point.

Usage examples
--------------
Play a single game:
    python -m inerticorp.cli run --config cfgs/default.yaml --policy Balanced

Batch (sweep seeds 0..99):
    python -m inerticorp.cli batch --config cfgs/default.yaml --policy Balanced --seeds 0 99

Write a default config:
    python -m inerticorp.cli dump-config --out cfgs/icahn.yaml --difficulty icahn
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

import numpy as np

from .config import DIFFICULTIES, GameConfig
from .content import load_content
from .engine.quarter_engine import advance
from .engine.runner import OUTCOME_RETIRED, run_once
from .engine.state import new_game
from .parallel import run_batch
from .policies import available_policies, get_policy

SUBCOMMANDS = {"run", "batch", "dump-config"}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _parse_args(argv: List[str] | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inerticorp", description="InertiCorp quarterly simulation")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Process log level",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------
    p_run = subparsers.add_parser("run", help="Play a single game with an autopilot policy")
    p_run.add_argument("--config", required=True, type=Path, help="YAML config file")
    p_run.add_argument("--policy", required=True, help=f"Policy name (one of {available_policies()})")
    p_run.add_argument("--seed", type=int, default=None, help="Override the seed from the config")
    p_run.add_argument("--show-log", action="store_true", help="Print the in-game log of every phase")

    # ------------------------------------------------------------------
    # batch
    # ------------------------------------------------------------------
    p_batch = subparsers.add_parser("batch", help="Play many seeds in parallel")
    p_batch.add_argument("--config", required=True, type=Path, help="YAML config file")
    p_batch.add_argument("--policy", required=True, help="Policy name")
    p_batch.add_argument(
        "--seeds",
        nargs=2,
        type=int,
        metavar=("START", "END"),
        help="Inclusive range of seeds to iterate (START END)",
        required=True,
    )
    p_batch.add_argument("--processes", type=int, default=None, help="Number of worker processes")

    # ------------------------------------------------------------------
    # dump-config
    # ------------------------------------------------------------------
    p_dump = subparsers.add_parser("dump-config", help="Write a default YAML config")
    p_dump.add_argument("--out", required=True, type=Path, help="Output YAML path")
    p_dump.add_argument("--difficulty", choices=list(DIFFICULTIES), default="nadella", help="Difficulty preset")
    return parser


def _play_with_log(cfg: GameConfig, policy_name: str) -> None:
    """Play one game printing every phase's log entries as they happen."""
    policy = get_policy(policy_name)(cfg)
    content = load_content(cfg.content_path)
    rng = cfg.make_rng()
    state = new_game(cfg, content, rng)
    while not state.is_terminal and state.quarter_number <= cfg.max_quarters:
        state, log = advance(state, policy.decide(state), rng, cfg)
        for entry in log:
            print(f"[Q{log.quarter_number} {log.phase.value}] {entry}")
    score = state.final_score
    print(f"Final score = {score.final_score} ({score.multiplier_reason}, x{score.multiplier})")


def main(argv: List[str] | None = None) -> None:
    """Main entry point for the command-line interface."""
    parser = _parse_args(argv)
    args = parser.parse_args(argv)
    if args.cmd not in SUBCOMMANDS:
        print(f"Invalid subcommand '{args.cmd}'. Must be one of {SUBCOMMANDS}")
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    if args.cmd == "run":
        cfg = GameConfig.from_yaml(args.config)
        if args.seed is not None:
            cfg.seed = args.seed
        if args.show_log:
            _play_with_log(cfg, args.policy)
            return
        result = run_once(cfg, args.policy)
        print(
            f"Outcome = {result.outcome} after {result.quarters_survived} quarters "
            f"(score={result.final_score}, favorability={result.favorability}, "
            f"evil={result.evil_score}, policy={args.policy}, seed={result.seed})"
        )

    elif args.cmd == "batch":
        start_seed, end_seed = args.seeds
        cfgs = []
        for seed in range(start_seed, end_seed + 1):
            c = GameConfig.from_yaml(args.config)
            c.seed = seed
            cfgs.append(c)

        results = run_batch(cfgs, args.policy, processes=args.processes)
        quarters = np.array([r.quarters_survived for r in results], dtype=float)
        scores = np.array([r.final_score for r in results], dtype=float)
        retired = np.array([r.outcome == OUTCOME_RETIRED for r in results])
        print(
            f"Seeds {start_seed}..{end_seed} (policy={args.policy}): "
            f"quarters survived {quarters.mean():.2f} +/- {quarters.std():.2f}, "
            f"retirement rate {retired.mean():.1%}, mean score {scores.mean():.1f}"
        )

    elif args.cmd == "dump-config":
        cfg = GameConfig(difficulty=args.difficulty)
        cfg.to_yaml(args.out)
        print(f"Config saved to {args.out}")
    else:
        raise ValueError(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    main(sys.argv[1:])
