"""Exception taxonomy for the residue annotation pipeline."""
from __future__ import annotations

from typing import Optional


class AnnotationError(RuntimeError):
    """Base class for every failure surfaced to the user by the pipeline."""

    default_message = "Annotation failed"

    def __init__(self, message: Optional[str] = None):
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class InputConflict(AnnotationError):
    default_message = "Provide either a sequence or a PDB ID, not both"


class InputMissing(AnnotationError):
    default_message = "Please enter a sequence or a valid 4-character PDB ID (e.g., 1CRN)"


class InvalidSequenceAlphabet(AnnotationError):
    default_message = "Sequence contains characters outside the 20 canonical amino acids"


class InvalidIdentifierFormat(AnnotationError):
    default_message = "PDB ID must be exactly 4 characters (e.g., 1CRN)"


class EntryNotFound(AnnotationError):
    default_message = "PDB entry not found"


class NoPolymerChains(AnnotationError):
    default_message = "No polymer entities found in entry"


class NoProteinSequencesFound(AnnotationError):
    default_message = "No protein sequences found for this entry"


class CatalogUnreachable(AnnotationError):
    default_message = "Structure catalog is not reachable"


class PredictorUnreachable(AnnotationError):
    default_message = "Predictor backend is not reachable. Is the server running and are CORS/HTTPS correct?"


class PredictionRejected(AnnotationError):
    """Raised when the predictor answers with a non-success status."""

    default_message = "Prediction failed"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class SubmissionInProgress(AnnotationError):
    default_message = "A prediction is already running for this session"


class InsecureTransportError(AnnotationError):
    default_message = "Refusing to call an http:// predictor from an https:// page"


__all__ = [
    "AnnotationError",
    "CatalogUnreachable",
    "EntryNotFound",
    "InputConflict",
    "InputMissing",
    "InsecureTransportError",
    "InvalidIdentifierFormat",
    "InvalidSequenceAlphabet",
    "NoPolymerChains",
    "NoProteinSequencesFound",
    "PredictionRejected",
    "PredictorUnreachable",
    "SubmissionInProgress",
]
