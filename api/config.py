"""Application configuration loaded from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from pipeline.errors import InsecureTransportError


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Runtime settings derived from environment variables."""

    storage_root: str
    redis_url: str
    queue_name: str
    api_key: str
    cors_origins: List[str]
    rate_limit_per_minute: int
    predictor_base_url: str
    catalog_base_url: str
    request_timeout: float
    catalog_max_workers: int
    history_dir: str
    task_state_file: str
    public_scheme: str
    allow_synthetic: bool


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from the environment."""

    cors_origins_raw = os.getenv("CORS_ORIGINS")
    cors_origins = [origin.strip() for origin in cors_origins_raw.split(",") if origin.strip()] if cors_origins_raw else ["*"]

    return Settings(
        storage_root=os.getenv("STORAGE_ROOT", "/tmp/ss_annotations"),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        queue_name=os.getenv("QUEUE_NAME", "default"),
        api_key=os.getenv("API_KEY", ""),
        cors_origins=cors_origins,
        rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "30")),
        predictor_base_url=os.getenv("PREDICTOR_BASE_URL", "http://127.0.0.1:8001"),
        catalog_base_url=os.getenv("CATALOG_BASE_URL", "https://data.rcsb.org/rest/v1/core"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
        catalog_max_workers=int(os.getenv("CATALOG_MAX_WORKERS", "8")),
        history_dir=os.getenv("HISTORY_DIR", "/tmp/ss_annotations/history"),
        task_state_file=os.getenv("TASK_STATE_FILE", "/tmp/ss_annotations/task_state.json"),
        public_scheme=os.getenv("PUBLIC_SCHEME", "http").strip().lower(),
        allow_synthetic=_env_flag("ALLOW_SYNTHETIC", True),
    )


def check_transport_security(settings: Settings) -> None:
    """Refuse an insecure predictor endpoint when clients are served over https.

    Run once at startup, before any annotation request is handled.
    """

    if settings.public_scheme == "https" and settings.predictor_base_url.lower().startswith("http://"):
        raise InsecureTransportError(
            f"Mixed content: clients are served over https but the predictor is at {settings.predictor_base_url}. "
            "Expose the predictor through a public https URL or serve the clients over http."
        )


__all__ = ["Settings", "check_transport_security", "get_settings"]
