"""CSV and JSON exporters for annotation results."""
from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pipeline.models import AnnotationResult, ResidueAnnotation

CSV_MODES = ("8", "3")

_CSV_HEADERS: Dict[str, List[str]] = {
    "8": ["index", "state8", "conf8"],
    "3": ["index", "state3", "conf3"],
}


def _check_mode(mode: str) -> str:
    if mode not in CSV_MODES:
        raise ValueError(f"CSV mode must be one of {', '.join(CSV_MODES)}, got {mode!r}")
    return mode


def csv_rows(annotations: Iterable[ResidueAnnotation], mode: str = "8") -> List[List[str]]:
    _check_mode(mode)
    rows: List[List[str]] = []
    for residue in annotations:
        if mode == "8":
            rows.append([str(residue.index), residue.state8, f"{residue.confidence8:.3f}"])
        else:
            rows.append([str(residue.index), residue.state3, f"{residue.confidence3:.3f}"])
    return rows


def render_csv(annotations: Iterable[ResidueAnnotation], mode: str = "8") -> str:
    """Return the CSV text for the 8-state or 3-state track, header first."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(_CSV_HEADERS[_check_mode(mode)])
    writer.writerows(csv_rows(annotations, mode))
    return buffer.getvalue()


def csv_filename(identifier: Optional[str], mode: str = "8") -> str:
    stem = (identifier or "").strip().upper() or "entry"
    return f"{stem}-predictions-{_check_mode(mode)}-state.csv"


def write_csv(destination: Path, annotations: Iterable[ResidueAnnotation], mode: str = "8") -> Path:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(render_csv(annotations, mode))
    return destination


def write_result_json(destination: Path, result: AnnotationResult) -> Path:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(result.to_dict(), indent=2))
    return destination


__all__ = ["CSV_MODES", "csv_filename", "csv_rows", "render_csv", "write_csv", "write_result_json"]
