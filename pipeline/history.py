"""Recent-samples history persisted between sessions."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from pipeline.models import SampleRecord

LOGGER = logging.getLogger(__name__)

HISTORY_KEY = "ss-annotator.history"
HISTORY_LIMIT = 5

PREDEFINED_SAMPLES: Sequence[SampleRecord] = (
    SampleRecord("Crambin", identifier="1CRN"),
    SampleRecord("Ubiquitin", identifier="1UBQ"),
    SampleRecord("Hen egg-white lysozyme", identifier="1LYZ"),
    SampleRecord("Trp-cage miniprotein", sequence="NLYIQWLKDGGPSSGRPPPS"),
)


class HistoryStore(Protocol):
    def load(self) -> List[SampleRecord]:
        ...

    def save(self, records: Sequence[SampleRecord]) -> None:
        ...


class MemoryHistoryStore:
    """Keeps history for the lifetime of the process only."""

    def __init__(self, records: Optional[Sequence[SampleRecord]] = None) -> None:
        self._records: List[SampleRecord] = list(records or [])

    def load(self) -> List[SampleRecord]:
        return list(self._records)

    def save(self, records: Sequence[SampleRecord]) -> None:
        self._records = list(records)


class JsonHistoryStore:
    """History stored under :data:`HISTORY_KEY` inside a JSON key-value file.

    Other keys in the file are left untouched so the file can be shared with
    other persisted client state.
    """

    def __init__(self, path: os.PathLike | str, key: str = HISTORY_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _read_state(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            state = json.loads(self.path.read_text())
        except json.JSONDecodeError:
            LOGGER.warning("Ignoring unreadable history file %s", self.path)
            return {}
        return state if isinstance(state, dict) else {}

    def load(self) -> List[SampleRecord]:
        raw = self._read_state().get(self.key) or []
        records: List[SampleRecord] = []
        for entry in raw:
            if isinstance(entry, dict):
                records.append(SampleRecord.from_dict(entry))
        return records[:HISTORY_LIMIT]

    def save(self, records: Sequence[SampleRecord]) -> None:
        state = self._read_state()
        state[self.key] = [record.to_dict() for record in records]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(state, indent=2))


def is_unmodified_sample(record: SampleRecord) -> bool:
    """True when ``record`` is one of :data:`PREDEFINED_SAMPLES` picked by name and left unedited.

    A hand-typed ID or sequence that happens to match a sample carries no
    sample name and is therefore recorded like any other input.
    """

    return any(
        record.display_name == sample.display_name and record.key == sample.key for sample in PREDEFINED_SAMPLES
    )


def remember_sample(
    records: Sequence[SampleRecord],
    record: SampleRecord,
    limit: int = HISTORY_LIMIT,
) -> List[SampleRecord]:
    """Put ``record`` first, drop older duplicates and cap the list."""

    updated = [record]
    updated.extend(existing for existing in records if existing.key != record.key)
    return updated[:limit]


def display_name_for(identifier: str, sequence: str, sample_name: Optional[str] = None) -> str:
    if sample_name:
        return sample_name
    if identifier:
        return identifier
    preview = sequence[:12]
    return f"{preview}…" if len(sequence) > 12 else preview


__all__ = [
    "HISTORY_KEY",
    "HISTORY_LIMIT",
    "HistoryStore",
    "JsonHistoryStore",
    "MemoryHistoryStore",
    "PREDEFINED_SAMPLES",
    "display_name_for",
    "is_unmodified_sample",
    "remember_sample",
]
