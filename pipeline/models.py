"""Data structures shared by the annotation pipeline and its consumers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from pipeline.states import STATE3_ORDER, STATE8_ORDER, reduce_state

CONFIDENCE_FLOOR = 0.5
CONFIDENCE_CEILING = 0.98


def clamp_confidence(value: float) -> float:
    """Clamp a confidence into the closed reporting interval."""

    return max(CONFIDENCE_FLOOR, min(CONFIDENCE_CEILING, float(value)))


@dataclass(frozen=True)
class ResidueAnnotation:
    """Secondary-structure label and confidence for one residue."""

    index: int
    state8: str
    confidence8: float
    confidence3: float

    @property
    def state3(self) -> str:
        return reduce_state(self.state8)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "state8": self.state8,
            "state3": self.state3,
            "conf8": self.confidence8,
            "conf3": self.confidence3,
        }


@dataclass(frozen=True)
class EntrySummary:
    residues: int
    chains: int

    def to_dict(self) -> Dict[str, int]:
        return {"residues": self.residues, "chains": self.chains}


@dataclass(frozen=True)
class AnnotationStatistics:
    """Aggregate figures derived from a full annotation."""

    average_confidence8: float
    average_confidence3: float
    composition8: Dict[str, int]
    composition3: Dict[str, int]

    @property
    def fraction3(self) -> Dict[str, float]:
        total = sum(self.composition3.values())
        if not total:
            return {symbol: 0.0 for symbol in STATE3_ORDER}
        return {symbol: count / total for symbol, count in self.composition3.items()}

    @classmethod
    def from_annotations(cls, annotations: Sequence[ResidueAnnotation]) -> "AnnotationStatistics":
        composition8 = {symbol: 0 for symbol in STATE8_ORDER}
        composition3 = {symbol: 0 for symbol in STATE3_ORDER}
        for residue in annotations:
            # unknown 8-state symbols from a remote predictor are still counted
            composition8[residue.state8] = composition8.get(residue.state8, 0) + 1
            composition3[residue.state3] += 1

        count = len(annotations)
        if count:
            average8 = sum(residue.confidence8 for residue in annotations) / count
            average3 = sum(residue.confidence3 for residue in annotations) / count
        else:
            average8 = average3 = 0.0

        return cls(
            average_confidence8=average8,
            average_confidence3=average3,
            composition8=composition8,
            composition3=composition3,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_confidence8": round(self.average_confidence8, 3),
            "average_confidence3": round(self.average_confidence3, 3),
            "composition8": dict(self.composition8),
            "composition3": dict(self.composition3),
            "fraction3": {symbol: round(value, 3) for symbol, value in self.fraction3.items()},
        }


@dataclass(frozen=True)
class SampleRecord:
    """A submission remembered in the recent-samples history."""

    display_name: str
    identifier: str = ""
    sequence: str = ""

    @property
    def key(self) -> Tuple[str, str]:
        return (self.identifier, self.sequence)

    def to_dict(self) -> Dict[str, str]:
        return {"display_name": self.display_name, "identifier": self.identifier, "sequence": self.sequence}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SampleRecord":
        return cls(
            display_name=str(payload.get("display_name") or ""),
            identifier=str(payload.get("identifier") or ""),
            sequence=str(payload.get("sequence") or ""),
        )


@dataclass(frozen=True)
class AnnotationRequest:
    """Raw user input for one pipeline run."""

    sequence: str = ""
    identifier: str = ""
    synthetic: bool = False
    sample_name: Optional[str] = None


@dataclass(frozen=True)
class AnnotationResult:
    """Immutable outcome of a successful pipeline run."""

    annotations: Tuple[ResidueAnnotation, ...]
    summary: EntrySummary
    statistics: AnnotationStatistics
    display_sequence: str
    display_identifier: str = ""
    synthetic: bool = False
    transitions: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "statistics": self.statistics.to_dict(),
            "sequence": self.display_sequence,
            "pdb_id": self.display_identifier or None,
            "synthetic": self.synthetic,
            "predictions": [residue.to_dict() for residue in self.annotations],
        }


__all__ = [
    "AnnotationRequest",
    "AnnotationResult",
    "AnnotationStatistics",
    "CONFIDENCE_CEILING",
    "CONFIDENCE_FLOOR",
    "EntrySummary",
    "ResidueAnnotation",
    "SampleRecord",
    "clamp_confidence",
]
