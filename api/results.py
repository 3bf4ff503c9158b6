"""Result retrieval helpers for background annotation tasks."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from . import task_store
from .storage import ARTIFACT_MEDIA_TYPES


def _build_download_entry(task_id: str, label: str, path: Optional[str]) -> Optional[Dict[str, Any]]:
    if not path:
        return None

    file_path = Path(path)
    if not file_path.exists():
        return None

    return {
        "artifact": label,
        "url": f"/download/{task_id}/{label}",
        "filename": file_path.name,
        "size": file_path.stat().st_size,
    }


def get_result(task_id: str) -> Dict[str, Any]:
    """Return task status, summary, statistics and available download links."""

    task = task_store.get_task(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="task_id not found")

    metadata = task.get("result_metadata") or {}
    artifacts = metadata.get("artifacts") or {}
    downloads: List[Dict[str, Any]] = []
    for label in ARTIFACT_MEDIA_TYPES:
        entry = _build_download_entry(task_id, label, artifacts.get(label))
        if entry:
            downloads.append(entry)

    return {
        "task_id": task_id,
        "status": task.get("status", "unknown"),
        "summary": metadata.get("summary"),
        "statistics": metadata.get("statistics"),
        "pdb_id": metadata.get("pdb_id"),
        "synthetic": metadata.get("synthetic", False),
        "downloads": downloads,
        "error": task.get("error"),
    }


def artifact_path(task_id: str, artifact: str) -> Path:
    """Resolve a downloadable artifact, restricted to the known labels."""

    task = task_store.get_task(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="task_id not found")

    artifacts = (task.get("result_metadata") or {}).get("artifacts") or {}
    selected = artifacts.get(artifact) if artifact in ARTIFACT_MEDIA_TYPES else None
    if not selected:
        raise HTTPException(status_code=404, detail="artifact not found")

    file_path = Path(selected)
    if not file_path.exists():
        raise HTTPException(status_code=404, detail="artifact file missing")
    return file_path


__all__ = ["artifact_path", "get_result"]
