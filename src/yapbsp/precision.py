"""Floating point comparison with a fixed tolerance.

Every geometric predicate in yapBSP goes through a
:class:`PrecisionContext`.  Planes and lines carry the context they were
built with, so all classifications made while building or querying one
tree agree with each other.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

## suggested tolerance for unit-scale models; never applied implicitly
DEFAULT_EPSILON = 1e-10


@dataclass(frozen=True)
class PrecisionContext:
    """Immutable epsilon-based comparator for reals and points."""

    epsilon: float

    def __post_init__(self) -> None:
        if not (isinstance(self.epsilon, (int, float)) and not isinstance(self.epsilon, bool)):
            raise ValueError(f'bad epsilon value: {self.epsilon!r}')
        if not math.isfinite(self.epsilon) or self.epsilon <= 0.0:
            raise ValueError(f'epsilon must be finite and positive, got {self.epsilon}')

    def compare(self, a: float, b: float) -> int:
        """Return ``0`` if ``a`` and ``b`` are equal within epsilon, else
        ``-1`` or ``1`` as ``a`` is less than or greater than ``b``."""

        if self.eq(a, b):
            return 0
        return -1 if a < b else 1

    def eq(self, a: float, b: float) -> bool:
        if a == b:
            # covers matching infinities
            return True
        return abs(a - b) <= self.epsilon

    def eq_zero(self, x: float) -> bool:
        return abs(x) <= self.epsilon

    def sign(self, x: float) -> int:
        return self.compare(x, 0.0)

    def lt(self, a: float, b: float) -> bool:
        return self.compare(a, b) < 0

    def lte(self, a: float, b: float) -> bool:
        return self.compare(a, b) <= 0

    def gt(self, a: float, b: float) -> bool:
        return self.compare(a, b) > 0

    def gte(self, a: float, b: float) -> bool:
        return self.compare(a, b) >= 0

    def vec_eq(self, a: Sequence[float], b: Sequence[float]) -> bool:
        """Component-wise equality of two points or vectors."""

        if len(a) != len(b):
            return False
        return all(self.eq(x, y) for x, y in zip(a, b))


__all__ = ['DEFAULT_EPSILON', 'PrecisionContext']
