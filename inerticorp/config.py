"""Game configuration definitions.

Every tunable of a game session lives here: the seed, the difficulty preset and
the political-capital and card-play economics.  A single ``GameConfig`` is passed
explicitly into ``new_game`` and ``advance``; nothing reads a global difficulty.
Configs can be created programmatically or loaded from YAML files to drive
batch runs.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .rng import SeededRng

__all__ = [
    "DifficultySettings",
    "DIFFICULTIES",
    "GameConfig",
]

DEFAULT_YAML_INDENT = 2


@dataclass(frozen=True)
class DifficultySettings:
    """Board temperament preset.

    Attributes
    ----------
    retirement_threshold
        Accumulated bonus required before the CEO may retire.
    tenure_decay_start_quarter
        Quarters survived after which favorability erodes by 1 per quarter.
    tenure_decay_enabled
        Whether tenure decay applies at all.
    success_reward_bonus
        Added to the base favorability reward for a successful quarter.
    starting_favorability
        Board favorability at game start.
    """

    name: str
    retirement_threshold: int
    tenure_decay_start_quarter: int
    tenure_decay_enabled: bool
    success_reward_bonus: int
    starting_favorability: int
    description: str = ""

    @property
    def is_hard(self) -> bool:
        return self.success_reward_bonus < 0


DIFFICULTIES: Dict[str, DifficultySettings] = {
    "welch": DifficultySettings(
        name="welch",
        retirement_threshold=120,
        tenure_decay_start_quarter=99,
        tenure_decay_enabled=False,
        success_reward_bonus=1,
        starting_favorability=80,
        description="Forgiving board, no tenure fatigue.",
    ),
    "nadella": DifficultySettings(
        name="nadella",
        retirement_threshold=140,
        tenure_decay_start_quarter=16,
        tenure_decay_enabled=True,
        success_reward_bonus=0,
        starting_favorability=75,
        description="Standard board expectations.",
    ),
    "icahn": DifficultySettings(
        name="icahn",
        retirement_threshold=180,
        tenure_decay_start_quarter=6,
        tenure_decay_enabled=True,
        success_reward_bonus=-1,
        starting_favorability=65,
        description="Activist board, impatient and hard to please.",
    ),
}


@dataclass
class GameConfig:
    """Container for all per-game tunables.

    Attributes
    ----------
    seed
        Seed of the game's random stream.
    difficulty
        Key into ``DIFFICULTIES`` (``welch``, ``nadella`` or ``icahn``).
    card_pc_costs
        Political-capital cost of the 1st, 2nd and 3rd card played in a quarter.
    card_risk_modifiers
        Extra Bad weight for the 1st, 2nd and 3rd card played in a quarter.
    crisis_draw_chance
        Percent chance that ending the card phase draws a crisis card.
    max_quarters
        Safety stop for automated runs; the engine itself never reads it.
    content_path
        Optional YAML content file replacing the packaged cards and crises.
    """

    seed: int = 0
    difficulty: str = "nadella"

    starting_political_capital: int = 10
    max_political_capital: int = 20
    pc_decay_threshold: int = 10
    pc_decay_amount: int = 1

    max_cards_per_quarter: int = 3
    card_pc_costs: List[int] = field(default_factory=lambda: [0, 1, 2])
    card_risk_modifiers: List[int] = field(default_factory=lambda: [0, 10, 20])

    crisis_draw_chance: int = 33

    meter_boost_cost: int = 1
    meter_boost_amount: int = 5
    schmooze_cost: int = 2
    schmooze_failure_chance: int = 15
    reorg_cost: int = 3
    redemption_cost: int = 2

    max_quarters: int = 40
    content_path: Optional[str] = None

    # Free-form field to store arbitrary user metadata (e.g., experiment name).
    tag: str = ""

    # Automatically filled, not expected to be loaded from file.
    _yaml_path: Optional[Path] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        self.difficulty = str(self.difficulty).lower()
        self.card_pc_costs = [int(c) for c in self.card_pc_costs]
        self.card_risk_modifiers = [int(r) for r in self.card_risk_modifiers]
        if len(self.card_pc_costs) < self.max_cards_per_quarter:
            raise ValueError("card_pc_costs needs one entry per card allowed in a quarter")
        if len(self.card_risk_modifiers) < self.max_cards_per_quarter:
            raise ValueError("card_risk_modifiers needs one entry per card allowed in a quarter")
        if not 0 <= self.crisis_draw_chance <= 100:
            raise ValueError("crisis_draw_chance must be a percentage")
        # Fail early on an unknown preset
        _ = self.settings

    # ------------------------------------------------------------------
    # Difficulty
    # ------------------------------------------------------------------
    @property
    def settings(self) -> DifficultySettings:
        try:
            return DIFFICULTIES[self.difficulty]
        except KeyError as exc:
            raise KeyError(
                f"Difficulty '{self.difficulty}' not found. Available: {list(DIFFICULTIES)}"
            ) from exc

    def make_rng(self) -> SeededRng:
        """Fresh random stream for this config's seed."""
        return SeededRng(self.seed)

    # ------------------------------------------------------------------
    # YAML helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_yaml(cls, path: os.PathLike | str) -> "GameConfig":
        """Load a configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        cfg = cls(**data)
        cfg._yaml_path = Path(path)
        return cfg

    def to_dict(self) -> dict:
        data = asdict(self)
        for f in fields(self):
            if f.name.startswith("_"):
                data.pop(f.name)
        return data

    def to_yaml(self, path: os.PathLike | str) -> None:
        """Save the config to YAML."""
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(self.to_dict(), fh, indent=DEFAULT_YAML_INDENT, sort_keys=False)

    # Convenience str representation for logging
    def __str__(self) -> str:  # noqa: DunderStr
        return f"GameConfig(difficulty={self.difficulty}, seed={self.seed})"
