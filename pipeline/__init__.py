"""Residue secondary-structure annotation pipeline.

The runner and session modules depend on :mod:`integrations`; import them
directly (``from pipeline.runner import run_pipeline``).
"""

from .errors import AnnotationError
from .models import AnnotationRequest, AnnotationResult, ResidueAnnotation
from .states import reduce_state
from .synthetic import generate_annotations

__all__ = [
    "AnnotationError",
    "AnnotationRequest",
    "AnnotationResult",
    "ResidueAnnotation",
    "generate_annotations",
    "reduce_state",
]
