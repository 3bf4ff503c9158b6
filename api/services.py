"""Construction of pipeline collaborators from settings, and per-client sessions."""
from __future__ import annotations

import hashlib
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Optional

from integrations.catalog import EntryResolver
from integrations.predictor import PredictionClient
from pipeline.history import JsonHistoryStore
from pipeline.session import AnnotationSession

from .config import Settings, get_settings

SESSION_CACHE_SIZE = 256

_sessions: "OrderedDict[str, AnnotationSession]" = OrderedDict()
_sessions_lock = threading.Lock()


def build_resolver(settings: Optional[Settings] = None) -> EntryResolver:
    settings = settings or get_settings()
    return EntryResolver(
        settings.catalog_base_url,
        timeout=settings.request_timeout,
        max_workers=settings.catalog_max_workers,
    )


def build_client(settings: Optional[Settings] = None) -> PredictionClient:
    settings = settings or get_settings()
    return PredictionClient(settings.predictor_base_url, timeout=settings.request_timeout)


def history_path(identity: str, settings: Optional[Settings] = None) -> Path:
    """History file for one client; the identity is hashed so API keys never reach the disk."""

    settings = settings or get_settings()
    digest = hashlib.sha256(identity.encode("utf-8")).hexdigest()[:16]
    return Path(settings.history_dir) / f"{digest}.json"


def build_session(identity: str, settings: Optional[Settings] = None) -> AnnotationSession:
    settings = settings or get_settings()
    return AnnotationSession(
        resolver=build_resolver(settings),
        client=build_client(settings),
        history_store=JsonHistoryStore(history_path(identity, settings)),
    )


def get_session(identity: str) -> AnnotationSession:
    """Return the session owned by ``identity``, creating it on first use.

    At most :data:`SESSION_CACHE_SIZE` sessions are kept; the least recently
    used idle ones are dropped first. History survives eviction on disk.
    """

    with _sessions_lock:
        session = _sessions.get(identity)
        if session is not None:
            _sessions.move_to_end(identity)
            return session
        session = build_session(identity)
        _sessions[identity] = session
        _evict_idle_sessions()
        return session


def _evict_idle_sessions() -> None:
    for identity in list(_sessions)[:-1]:
        if len(_sessions) <= SESSION_CACHE_SIZE:
            break
        if not _sessions[identity].loading:
            del _sessions[identity]


def reset_sessions() -> None:
    with _sessions_lock:
        _sessions.clear()


__all__ = ["SESSION_CACHE_SIZE", "build_client", "build_resolver", "build_session", "get_session", "history_path", "reset_sessions"]
