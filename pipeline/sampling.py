"""Discrete sampling helpers used by the synthetic annotator."""
from __future__ import annotations

import random
from typing import Optional, Sequence


def choose(weights: Sequence[float], rng: Optional[random.Random] = None) -> int:
    """Draw an index with probability proportional to ``weights``.

    ``weights`` must be non-empty with a positive sum. When floating point
    rounding pushes the draw past the final cumulative weight the last index
    is returned. Zero-weight entries are skipped by the scan.
    """

    rng = rng or random
    draw = rng.random() * sum(weights)
    cumulative = 0.0
    for index, weight in enumerate(weights):
        cumulative += weight
        if weight > 0 and draw <= cumulative:
            return index
    return len(weights) - 1


def uniform_int(low: int, high: int, rng: Optional[random.Random] = None) -> int:
    """Inclusive uniform integer draw."""

    rng = rng or random
    return rng.randint(low, high)


__all__ = ["choose", "uniform_int"]
