"""JSON-file persistence of background annotation task state."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from api.config import get_settings

TASK_STATUSES = ("queued", "started", "succeeded", "failed")


def _state_file() -> Path:
    return Path(get_settings().task_state_file)


def _load_state() -> Dict[str, Any]:
    state_file = _state_file()
    if not state_file.exists():
        return {}
    try:
        return json.loads(state_file.read_text())
    except json.JSONDecodeError:
        return {}


def _write_state(state: Dict[str, Any]) -> None:
    state_file = _state_file()
    state_file.parent.mkdir(parents=True, exist_ok=True)
    state_file.write_text(json.dumps(state, indent=2))


def create_task(task_id: str, payload: Dict[str, Any]) -> None:
    state = _load_state()
    state[task_id] = {"status": "queued", "result_metadata": None, "error": None, **payload}
    _write_state(state)


def update_task(task_id: str, **updates: Any) -> None:
    status = updates.get("status")
    if status is not None and status not in TASK_STATUSES:
        raise ValueError(f"unknown task status: {status}")
    state = _load_state()
    state.setdefault(task_id, {}).update(updates)
    _write_state(state)


def get_task(task_id: str) -> Optional[Dict[str, Any]]:
    return _load_state().get(task_id)


__all__ = ["TASK_STATUSES", "create_task", "get_task", "update_task"]
