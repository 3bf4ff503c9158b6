"""Task-scoped directories and annotation artifacts on disk."""
from __future__ import annotations

import os
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

from pipeline.export import csv_filename, write_csv, write_result_json
from pipeline.models import AnnotationResult

ARTIFACT_MEDIA_TYPES: Dict[str, str] = {
    "csv8": "text/csv",
    "csv3": "text/csv",
    "summary_json": "application/json",
}


def generate_task_id() -> str:
    """Generate a unique task identifier."""

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    random_token = secrets.token_hex(8)
    return f"task-{timestamp}-{random_token}"


def create_temp_directory(base_dir: os.PathLike | str, task_id: str) -> Path:
    """Create a task-specific directory."""

    task_path = Path(base_dir) / task_id
    task_path.mkdir(parents=True, exist_ok=True)
    return task_path


def write_artifacts(task_dir: Path, result: AnnotationResult) -> Dict[str, str]:
    """Write both CSV tracks and the JSON payload, returning artifact paths by label."""

    identifier = result.display_identifier or None
    csv8 = write_csv(task_dir / csv_filename(identifier, "8"), result.annotations, "8")
    csv3 = write_csv(task_dir / csv_filename(identifier, "3"), result.annotations, "3")
    summary = write_result_json(task_dir / "annotation.json", result)
    return {"csv8": str(csv8), "csv3": str(csv3), "summary_json": str(summary)}


__all__ = ["ARTIFACT_MEDIA_TYPES", "create_temp_directory", "generate_task_id", "write_artifacts"]
