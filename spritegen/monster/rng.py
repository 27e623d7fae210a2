"""
Seeded random stream shared by every stochastic decision of one generation.

Every draw is positional: the same seed and the same sequence of calls give
bit-identical results. Stages receive the stream explicitly, nothing in the
package touches module-level random state.
"""

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

_SEED_LIMIT = 2**31 - 1


class RandomSource:
    """Thin wrapper over ``random.Random`` with half-open integer ranges."""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = random.SystemRandom().randrange(_SEED_LIMIT)
        self.seed = int(seed)
        self._rng = random.Random(self.seed)

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"

    def reseed(self, seed: int) -> None:
        self.seed = int(seed)
        self._rng.seed(self.seed)

    def randrange(self, low: int, high: int) -> int:
        """Integer in [low, high). An empty range yields ``low``."""
        if high <= low:
            return low
        return self._rng.randrange(low, high)

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high], both ends included."""
        return self.randrange(low, high + 1)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self._rng.random()

    def chance(self, p: float) -> bool:
        return self._rng.random() < p

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise IndexError("cannot choose from an empty sequence")
        return seq[self.randrange(0, len(seq))]

    def next_seed(self) -> int:
        return self._rng.randrange(_SEED_LIMIT)

    def spawn(self) -> "RandomSource":
        """Independent sub-stream, e.g. one per worker."""
        return RandomSource(self.next_seed())


def ensure_rng(rng=None, seed: Optional[int] = None) -> RandomSource:
    if isinstance(rng, RandomSource):
        return rng
    return RandomSource(seed)
