"""Single-owner mutable context wrapping pipeline runs for one user."""
from __future__ import annotations

import logging
import random
import threading
from typing import List, Optional

from pipeline.errors import AnnotationError, SubmissionInProgress
from pipeline.history import (
    HistoryStore,
    MemoryHistoryStore,
    display_name_for,
    is_unmodified_sample,
    remember_sample,
)
from pipeline.models import AnnotationRequest, AnnotationResult, SampleRecord
from pipeline.runner import ChainResolver, PipelineState, Predictor, run_pipeline
from pipeline.sequence import normalize_identifier, normalize_sequence

LOGGER = logging.getLogger(__name__)


class AnnotationSession:
    """Holds the current result, the loading guard and the sample history.

    A submission while another one is in flight is refused, not queued.
    """

    def __init__(
        self,
        resolver: ChainResolver,
        client: Optional[Predictor],
        history_store: Optional[HistoryStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.resolver = resolver
        self.client = client
        self.history_store = history_store or MemoryHistoryStore()
        self.rng = rng
        self._guard = threading.Lock()
        self.state = PipelineState.IDLE
        self.result: Optional[AnnotationResult] = None
        self.error: Optional[str] = None
        self.history: List[SampleRecord] = self.history_store.load()

    @property
    def loading(self) -> bool:
        return self._guard.locked()

    def _set_state(self, state: PipelineState) -> None:
        self.state = state

    def submit(self, request: AnnotationRequest) -> AnnotationResult:
        if not self._guard.acquire(blocking=False):
            raise SubmissionInProgress()

        self.result = None
        self.error = None
        try:
            result = run_pipeline(
                request,
                resolver=self.resolver,
                client=self.client,
                rng=self.rng,
                on_transition=self._set_state,
            )
            self.result = result
            self._record(request)
        except AnnotationError as exc:
            self.error = exc.user_message
            raise
        except Exception:
            self.error = AnnotationError.default_message
            raise
        finally:
            self._guard.release()
        return result

    def _record(self, request: AnnotationRequest) -> None:
        identifier = normalize_identifier(request.identifier)
        sequence = normalize_sequence(request.sequence)
        record = SampleRecord(
            display_name=display_name_for(identifier, sequence, request.sample_name),
            identifier=identifier,
            sequence=sequence,
        )
        if is_unmodified_sample(record):
            LOGGER.debug("Not recording predefined sample %s", record.display_name)
            return
        if self.history and self.history[0].key == record.key:
            return
        self.history = remember_sample(self.history, record)
        self.history_store.save(self.history)


__all__ = ["AnnotationSession"]
