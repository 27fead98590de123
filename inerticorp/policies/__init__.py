"""
Policy module: registry, abstract base class, and built-in autopilot policies.

A policy looks at a ``QuarterGameState`` and returns the next ``QuarterInput``.
Policies drive games for the runner, the batch runner and the CLI.

Usage Example:
--------------

from inerticorp.policies import Policy, get_policy, register_policy
from inerticorp.engine import inputs

@register_policy
class AlwaysEnd(Policy):
    def decide(self, state):
        return inputs.end_card_play()

policy_cls = get_policy("AlwaysEnd")
policy = policy_cls(cfg)
inp = policy.decide(state)
"""
from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Dict, Type

from ..config import GameConfig

__all__ = [
    "Policy",
    "register_policy",
    "get_policy",
    "available_policies",
    "builtin",
]

# Policy registry: maps policy names to classes
_REGISTRY: Dict[str, Type["Policy"]] = {}


class Policy(ABC):
    """
    Abstract interface every autopilot policy must implement.
    All policies should inherit from this class and implement `decide`.
    """
    def __init__(self, cfg: GameConfig):
        self.cfg = cfg

    @abstractmethod
    def decide(self, state, /):
        """
        Decide the input for the current phase of ``state``.
        Must return an input that is valid for that phase.
        """

    @property
    def name(self) -> str:
        """Name used in results and logs (defaults to class name)."""
        return self.__class__.__name__


# ------------------------------------------------------------------
# Registry helpers
# ------------------------------------------------------------------

def register_policy(cls: Type["Policy"]) -> Type["Policy"]:
    """
    Class decorator to register policies in the global registry.
    Raises if duplicate or invalid registration is attempted.
    """
    if not inspect.isclass(cls):
        raise TypeError("@register_policy can only decorate classes")
    if not issubclass(cls, Policy):
        raise TypeError("Registered class must inherit from Policy")

    key = cls.__name__
    if key in _REGISTRY:
        raise KeyError(f"Policy '{key}' is already registered")
    _REGISTRY[key] = cls
    return cls


def get_policy(name: str) -> Type["Policy"]:
    """
    Retrieve a policy class by name from the registry.
    Raises KeyError if not found.
    """
    try:
        return _REGISTRY[name]
    except KeyError as exc:
        raise KeyError(
            f"Policy '{name}' not found in registry. Available: {list(_REGISTRY)}"
        ) from exc


def available_policies() -> list:
    return list(_REGISTRY)


# ------------------------------------------------------------------
# Register built-in policies
# ------------------------------------------------------------------

from . import builtin
