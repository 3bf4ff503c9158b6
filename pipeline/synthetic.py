"""Synthetic secondary-structure annotations for demo and offline use.

The generator lays out back-to-back runs of coil, helix and strand with
family-specific run lengths and symbol preferences so that the output looks
like a plausible DSSP track. It is only used when a caller asks for it; it
never stands in for a failed predictor call.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pipeline.models import ResidueAnnotation, clamp_confidence
from pipeline.sampling import choose, uniform_int

LOGGER = logging.getLogger(__name__)

CONFIDENCE3_JITTER = 0.05
CONFIDENCE_SPREAD = 0.28


@dataclass(frozen=True)
class StructureFamily:
    """Run-length and symbol preferences for one 3-state family."""

    name: str
    prior: float
    run_length: Tuple[int, int]
    symbols: Tuple[str, ...]
    symbol_weights: Tuple[float, ...]
    confidence_base: float


FAMILIES: Tuple[StructureFamily, ...] = (
    StructureFamily("C", 0.45, (2, 10), ("C", "T", "S"), (0.7, 0.2, 0.1), 0.60),
    StructureFamily("H", 0.35, (6, 20), ("H", "G", "I"), (0.8, 0.15, 0.05), 0.72),
    StructureFamily("E", 0.20, (6, 20), ("E", "B"), (0.9, 0.1), 0.72),
)


def derive_confidence3(confidence8: float, rng: Optional[random.Random] = None) -> float:
    """Jitter a clamped 8-state confidence downward for the coarse alphabet."""

    rng = rng or random
    return clamp_confidence(confidence8 - rng.random() * CONFIDENCE3_JITTER)


def _pick_family(rng: Optional[random.Random]) -> StructureFamily:
    return FAMILIES[choose([family.prior for family in FAMILIES], rng)]


def _pick_symbol(family: StructureFamily, rng: Optional[random.Random]) -> str:
    return family.symbols[choose(family.symbol_weights, rng)]


def generate_annotations(length: int, rng: Optional[random.Random] = None) -> List[ResidueAnnotation]:
    """Return ``length`` synthetic residue annotations indexed from 1."""

    source = rng or random
    annotations: List[ResidueAnnotation] = []
    while len(annotations) < length:
        family = _pick_family(rng)
        run_length = uniform_int(*family.run_length, rng=rng)
        for _ in range(min(run_length, length - len(annotations))):
            confidence8 = clamp_confidence(family.confidence_base + source.random() * CONFIDENCE_SPREAD)
            annotations.append(
                ResidueAnnotation(
                    index=len(annotations) + 1,
                    state8=_pick_symbol(family, rng),
                    confidence8=confidence8,
                    confidence3=derive_confidence3(confidence8, rng),
                )
            )

    LOGGER.debug("Generated %d synthetic residue annotations", len(annotations))
    return annotations


__all__ = ["FAMILIES", "StructureFamily", "derive_confidence3", "generate_annotations"]
