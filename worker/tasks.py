"""Background tasks executed by the worker process."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from api import storage, task_store
from api.services import build_client, build_resolver
from pipeline.models import AnnotationRequest
from pipeline.runner import run_pipeline

logger = logging.getLogger(__name__)


def run_annotation(task_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Run the annotation pipeline for a queued submission.

    The worker delegates to :mod:`pipeline.runner` for the algorithm. This
    function updates task status, writes the CSV/JSON artifacts into the task
    directory and stores their locations in the task store.
    """

    task_store.update_task(task_id, status="started")
    task_dir = Path(payload["task_dir"])
    task_dir.mkdir(parents=True, exist_ok=True)

    request = AnnotationRequest(
        sequence=payload.get("sequence") or "",
        identifier=payload.get("pdb_id") or "",
        synthetic=bool(payload.get("synthetic")),
    )

    try:
        result = run_pipeline(request, resolver=build_resolver(), client=build_client())
        artifacts = storage.write_artifacts(task_dir, result)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Task %s failed", task_id)
        task_store.update_task(task_id, status="failed", error=getattr(exc, "user_message", str(exc)))
        raise

    result_metadata = {
        "summary": result.summary.to_dict(),
        "statistics": result.statistics.to_dict(),
        "pdb_id": result.display_identifier or None,
        "sequence": result.display_sequence,
        "synthetic": result.synthetic,
        "artifacts": artifacts,
    }
    task_store.update_task(task_id, status="succeeded", result_metadata=result_metadata)
    logger.info(
        "Task %s annotated %d residues (average confidence %.3f)",
        task_id,
        result.summary.residues,
        result.statistics.average_confidence8,
    )
    return result_metadata
