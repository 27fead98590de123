"""Deterministic random source shared by every stochastic rule of the game."""
from __future__ import annotations

import zlib
from typing import MutableSequence, TypeVar

import numpy as np

__all__ = ["SeededRng"]

T = TypeVar("T")

_SEED_MASK = 0xFFFF_FFFF_FFFF_FFFF


def _key_to_int(key) -> int:
    if isinstance(key, str):
        return zlib.crc32(key.encode("utf-8"))
    return int(key) & _SEED_MASK


class SeededRng:
    """Seeded PCG64 stream with bounded-integer, float and shuffle draws.

    The same seed followed by the same call sequence yields identical values
    across processes and runs.  Every consumer receives the instance explicitly;
    nothing in the package reads a global generator.
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._gen = np.random.Generator(np.random.PCG64(self.seed & _SEED_MASK))

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------
    @classmethod
    def derived(cls, seed: int, *keys) -> "SeededRng":
        """Independent stream keyed by ``seed`` and ``keys`` (ints or strings).

        Used for side rolls that must not shift the main game stream.
        """
        entropy = [int(seed) & _SEED_MASK] + [_key_to_int(k) for k in keys]
        rng = cls.__new__(cls)
        rng.seed = int(seed)
        rng._gen = np.random.Generator(np.random.PCG64(np.random.SeedSequence(entropy)))
        return rng

    # ------------------------------------------------------------------
    # Draws
    # ------------------------------------------------------------------
    def next_int(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high)``."""
        if high <= low:
            raise ValueError(f"next_int requires high > low (got {low}, {high})")
        return int(self._gen.integers(low, high))

    def next_double(self) -> float:
        """Uniform float in ``[0, 1)``."""
        return float(self._gen.random())

    def shuffle(self, seq: MutableSequence[T]) -> None:
        """Fisher–Yates shuffle of ``seq`` in place."""
        for i in range(len(seq) - 1, 0, -1):
            j = self.next_int(0, i + 1)
            seq[i], seq[j] = seq[j], seq[i]

    def __repr__(self) -> str:
        return f"SeededRng(seed={self.seed})"
