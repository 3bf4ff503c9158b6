"""Pydantic models for annotation requests and responses."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, validator

from pipeline.models import AnnotationRequest, AnnotationResult, SampleRecord


class PredictRequest(BaseModel):
    """Annotation request; supply either ``sequence`` or ``pdb_id``."""

    sequence: Optional[str] = Field(None, description="One-letter or FASTA amino-acid sequence")
    pdb_id: Optional[str] = Field(None, description="4-character PDB identifier, e.g. 1CRN")
    synthetic: bool = Field(False, description="Generate demo labels instead of calling the predictor")
    sample_name: Optional[str] = Field(None, description="Display name when the input came from a predefined sample")

    @validator("sequence", "pdb_id")
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:  # noqa: D417
        if value is None or not value.strip():
            return None
        return value

    def to_request(self) -> AnnotationRequest:
        return AnnotationRequest(
            sequence=self.sequence or "",
            identifier=self.pdb_id or "",
            synthetic=self.synthetic,
            sample_name=self.sample_name,
        )


class ResiduePrediction(BaseModel):
    index: int
    state8: str
    state3: str
    conf8: float = Field(..., ge=0.5, le=0.98)
    conf3: float = Field(..., ge=0.5, le=0.98)


class EntrySummaryModel(BaseModel):
    residues: int
    chains: int


class StatisticsModel(BaseModel):
    average_confidence8: float
    average_confidence3: float
    composition8: Dict[str, int]
    composition3: Dict[str, int]
    fraction3: Dict[str, float]


class PredictResponse(BaseModel):
    """Full annotation returned by ``POST /predict``."""

    summary: EntrySummaryModel
    statistics: StatisticsModel
    sequence: str
    pdb_id: Optional[str] = None
    synthetic: bool = False
    predictions: List[ResiduePrediction] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: AnnotationResult) -> "PredictResponse":
        return cls(**result.to_dict())


class SampleModel(BaseModel):
    display_name: str
    identifier: str = ""
    sequence: str = ""

    @classmethod
    def from_record(cls, record: SampleRecord) -> "SampleModel":
        return cls(**record.to_dict())


class SubmitResponse(BaseModel):
    task_id: str
    job_id: str
    status: str = "queued"


__all__ = [
    "EntrySummaryModel",
    "PredictRequest",
    "PredictResponse",
    "ResiduePrediction",
    "SampleModel",
    "StatisticsModel",
    "SubmitResponse",
]
