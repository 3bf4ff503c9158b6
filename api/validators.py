"""Translation of annotation errors into HTTP responses."""
from __future__ import annotations

from typing import Dict, Type

from fastapi import HTTPException, status

from pipeline.errors import (
    AnnotationError,
    CatalogUnreachable,
    EntryNotFound,
    InputConflict,
    InputMissing,
    InsecureTransportError,
    InvalidIdentifierFormat,
    InvalidSequenceAlphabet,
    NoPolymerChains,
    NoProteinSequencesFound,
    PredictionRejected,
    PredictorUnreachable,
    SubmissionInProgress,
)

_STATUS_BY_ERROR: Dict[Type[AnnotationError], int] = {
    InputConflict: status.HTTP_400_BAD_REQUEST,
    InputMissing: status.HTTP_400_BAD_REQUEST,
    InvalidSequenceAlphabet: status.HTTP_400_BAD_REQUEST,
    InvalidIdentifierFormat: status.HTTP_400_BAD_REQUEST,
    EntryNotFound: status.HTTP_404_NOT_FOUND,
    NoPolymerChains: status.HTTP_404_NOT_FOUND,
    NoProteinSequencesFound: status.HTTP_404_NOT_FOUND,
    PredictionRejected: status.HTTP_502_BAD_GATEWAY,
    CatalogUnreachable: status.HTTP_503_SERVICE_UNAVAILABLE,
    PredictorUnreachable: status.HTTP_503_SERVICE_UNAVAILABLE,
    InsecureTransportError: status.HTTP_503_SERVICE_UNAVAILABLE,
    SubmissionInProgress: status.HTTP_409_CONFLICT,
}


def status_for(exc: AnnotationError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[error_type]
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def ensure_synthetic_allowed(requested: bool, allowed: bool) -> None:
    if requested and not allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Synthetic annotations are disabled on this server",
        )


__all__ = ["ensure_synthetic_allowed", "status_for"]
