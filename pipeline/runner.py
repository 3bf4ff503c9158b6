"""Orchestration of a single residue annotation run.

The module exposes :func:`run_pipeline` as the integration point for the API,
the worker and the command-line script. A run validates the raw input,
resolves a PDB ID to its protein chains when needed, asks the predictor (or
the synthetic annotator, when explicitly requested) for per-residue labels and
derives the summary statistics.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Protocol

from integrations.catalog import select_primary_chain
from integrations.predictor import PredictionOutcome
from pipeline.errors import (
    AnnotationError,
    InputConflict,
    InputMissing,
    InvalidIdentifierFormat,
    InvalidSequenceAlphabet,
)
from pipeline.models import AnnotationRequest, AnnotationResult, AnnotationStatistics, EntrySummary
from pipeline.sequence import is_valid_identifier, normalize_identifier, normalize_sequence, validate_sequence
from pipeline.synthetic import generate_annotations

LOGGER = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    PREDICTING = "predicting"
    READY = "ready"
    FAILED = "failed"


class ChainResolver(Protocol):
    def resolve(self, identifier: str) -> List[str]:
        ...


class Predictor(Protocol):
    def predict(self, sequence: Optional[str] = None, pdb_id: Optional[str] = None) -> PredictionOutcome:
        ...


@dataclass(frozen=True)
class ValidatedInput:
    """Input after normalization; exactly one of the fields is non-empty."""

    sequence: str = ""
    identifier: str = ""


@dataclass
class PipelineRun:
    """Tracks the state machine of one run."""

    state: PipelineState = PipelineState.IDLE
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])
    on_transition: Optional[Callable[[PipelineState], None]] = None

    def advance(self, state: PipelineState) -> None:
        LOGGER.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)
        if self.on_transition is not None:
            self.on_transition(state)


def validate_request(request: AnnotationRequest) -> ValidatedInput:
    """Normalize raw input and enforce the sequence-xor-identifier rule."""

    sequence = normalize_sequence(request.sequence)
    identifier = normalize_identifier(request.identifier)

    if sequence and identifier:
        raise InputConflict()
    if not sequence and not identifier:
        raise InputMissing()
    if sequence and not validate_sequence(sequence):
        raise InvalidSequenceAlphabet()
    if identifier and not is_valid_identifier(identifier):
        raise InvalidIdentifierFormat()
    return ValidatedInput(sequence=sequence, identifier=identifier)


def run_pipeline(
    request: AnnotationRequest,
    *,
    resolver: ChainResolver,
    client: Optional[Predictor],
    rng: Optional[random.Random] = None,
    on_transition: Optional[Callable[[PipelineState], None]] = None,
) -> AnnotationResult:
    """Execute one annotation run.

    Parameters
    ----------
    request:
        Raw user input. ``synthetic=True`` replaces the predictor call with
        :func:`pipeline.synthetic.generate_annotations`.
    resolver:
        Collaborator turning a PDB ID into protein chain sequences.
    client:
        Remote predictor; may be ``None`` only for synthetic runs.

    Returns
    -------
    AnnotationResult
        The full, immutable annotation. Any exception raised on the way leaves
        the run in ``FAILED`` and propagates to the caller.
    """

    run = PipelineRun(on_transition=on_transition)
    try:
        run.advance(PipelineState.VALIDATING)
        validated = validate_request(request)

        if validated.identifier:
            run.advance(PipelineState.RESOLVING)
            chains = resolver.resolve(validated.identifier)
            working_sequence = select_primary_chain(chains)
            summary = EntrySummary(residues=len(working_sequence), chains=len(chains))
        else:
            working_sequence = validated.sequence
            summary = EntrySummary(residues=len(working_sequence), chains=1)

        run.advance(PipelineState.PREDICTING)
        outcome = _predict(validated, working_sequence, request.synthetic, client, rng)
    except AnnotationError as exc:
        run.advance(PipelineState.FAILED)
        LOGGER.info("Annotation failed: %s", exc.user_message)
        raise
    except Exception:
        run.advance(PipelineState.FAILED)
        LOGGER.exception("Annotation failed unexpectedly")
        raise

    annotations = tuple(outcome.annotations)
    result = AnnotationResult(
        annotations=annotations,
        summary=summary,
        statistics=AnnotationStatistics.from_annotations(annotations),
        display_sequence=outcome.used_sequence or working_sequence,
        display_identifier=outcome.found_pdb_id or validated.identifier,
        synthetic=request.synthetic,
        transitions=tuple(state.value for state in run.history + [PipelineState.READY]),
    )
    run.advance(PipelineState.READY)
    LOGGER.info(
        "Annotated %d residues (%d chain(s) in entry)%s",
        len(annotations),
        summary.chains,
        " [synthetic]" if request.synthetic else "",
    )
    return result


def _predict(
    validated: ValidatedInput,
    working_sequence: str,
    synthetic: bool,
    client: Optional[Predictor],
    rng: Optional[random.Random],
) -> PredictionOutcome:
    if synthetic:
        return PredictionOutcome(annotations=generate_annotations(len(working_sequence), rng))
    if client is None:
        raise AnnotationError("No predictor configured; request a synthetic annotation instead")
    if validated.sequence:
        return client.predict(sequence=validated.sequence)
    return client.predict(pdb_id=validated.identifier)


__all__ = [
    "ChainResolver",
    "PipelineRun",
    "PipelineState",
    "Predictor",
    "ValidatedInput",
    "run_pipeline",
    "validate_request",
]
