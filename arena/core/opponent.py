"""
Simulated AI opponent

Formula:
  progress = clamp(0, 100, (elapsed / 300) × 100 × speed + U(0, 10))

Speed by difficulty (unknown values use medium):
  easy = 0.4, medium = 0.7, hard = 1.2

Progress is re-derived from elapsed time on every reading, so the jitter term
can make consecutive readings go down as well as up.
"""
import math
import random
from typing import Dict, Optional, Protocol

from arena.models import OpponentProgress


REFERENCE_DURATION = 300.0    # seconds for a speed-1.0 opponent to finish
MAX_JITTER = 10.0
DEFAULT_DIFFICULTY = "medium"

SPEED_MULTIPLIERS: Dict[str, float] = {
    "easy": 0.4,
    "medium": 0.7,
    "hard": 1.2,
}

NARRATION_SNIPPETS = [
    "# Analyzing input data structure...",
    "# Implementing core algorithm...",
    "# Optimizing for edge cases...",
    "# Running performance benchmarks...",
    "# Finalizing solution...",
]


class OpponentSourceError(RuntimeError):
    """Raised when an opponent progress source cannot produce a reading"""


def speed_for(difficulty: Optional[str]) -> float:
    return SPEED_MULTIPLIERS.get(difficulty, SPEED_MULTIPLIERS[DEFAULT_DIFFICULTY])


def base_progress(difficulty: Optional[str], elapsed_seconds: float) -> float:
    """
    Deterministic part of the opponent's progress (no jitter, no clamping)

    Args:
        difficulty: "easy" | "medium" | "hard"
        elapsed_seconds: Seconds since the battle started

    Returns:
        Expected progress before jitter
    """
    return (elapsed_seconds / REFERENCE_DURATION) * 100 * speed_for(difficulty)


def narration_for(progress: float) -> str:
    """Phase description for a progress reading (one phase per 20%)"""
    index = math.floor(progress / 20)
    index = min(max(index, 0), len(NARRATION_SNIPPETS) - 1)
    return NARRATION_SNIPPETS[index]


def advance_opponent(
    difficulty: Optional[str],
    elapsed_seconds: float,
    rng: Optional[random.Random] = None
) -> OpponentProgress:
    """
    Read the opponent's progress at a point in time

    Args:
        difficulty: "easy" | "medium" | "hard" (anything else → medium)
        elapsed_seconds: Seconds since the battle started (>= 0)
        rng: Random source for the jitter term

    Returns:
        OpponentProgress with progress in [0, 100]
    """
    rng = rng or random
    jitter = rng.uniform(0, MAX_JITTER)
    progress = min(100.0, max(0.0, base_progress(difficulty, elapsed_seconds) + jitter))

    return OpponentProgress(
        progress=progress,
        narration_snippet=narration_for(progress)
    )


class OpponentProgressSource(Protocol):
    """Anything that can report the opponent's progress for a tick"""

    def advance(self, difficulty: str, elapsed_seconds: float) -> OpponentProgress:
        ...


class LocalOpponentSource:
    """In-process simulator"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng

    def advance(self, difficulty: str, elapsed_seconds: float) -> OpponentProgress:
        return advance_opponent(difficulty, elapsed_seconds, rng=self.rng)
