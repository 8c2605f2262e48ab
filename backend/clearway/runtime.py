"""
Runtime Capabilities - Clock and Random Source

Every component that branches on the current time takes a Clock, and every
component that samples a mock factor (location variation, weather,
historical performance) takes a RandomSource. Tests inject FixedClock and a
seeded RandomSource to get reproducible results.
"""

import random
from datetime import datetime, timedelta
from typing import Optional, Protocol, Sequence, TypeVar

T = TypeVar('T')


class Clock(Protocol):
    """Source of the current time"""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock (local time)"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """
    Manually controlled clock for tests and replays

    Usage:
        clock = FixedClock(datetime(2024, 1, 15, 8, 30))
        clock.advance(minutes=6)
    """

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime):
        self.current = current

    def advance(self, seconds: float = 0, minutes: float = 0):
        self.current = self.current + timedelta(seconds=seconds, minutes=minutes)


class RandomSource:
    """
    Injectable pseudo-random source

    Wraps a private random.Random so callers never touch the module-level
    generator. Pass a seed for reproducible sequences.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        """Uniform float in [0, 1)"""
        return self._rng.random()

    def uniform_below(self, upper: float) -> float:
        """Uniform float in [0, upper)"""
        return self._rng.random() * upper

    def choice(self, options: Sequence[T]) -> T:
        return self._rng.choice(options)
