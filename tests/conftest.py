"""
Shared fixtures
"""
import pytest

from arena import state
from arena.models import ArenaParams


class FixedRandom:
    """Stand-in for random.Random that always lands at the same fraction of a range"""

    def __init__(self, fraction: float = 0.0):
        self.fraction = fraction

    def random(self) -> float:
        return self.fraction

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.fraction


@pytest.fixture
def make_rng():
    return FixedRandom


@pytest.fixture
def manual_clock():
    """Fresh server state with ticks driven by the caller"""
    state.configure(ArenaParams(auto_clock=False))
    yield state.ENGINE
    state.configure(ArenaParams())
