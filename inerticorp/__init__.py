"""InertiCorp quarterly simulation core."""
from __future__ import annotations

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version(__name__)
except _metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = ["config", "content", "core", "crisis", "engine", "policies"]

# Import to register built-in policies
from . import policies
