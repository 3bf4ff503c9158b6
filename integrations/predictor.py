"""Client for the remote secondary-structure predictor service."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests

from pipeline.errors import PredictionRejected, PredictorUnreachable
from pipeline.models import ResidueAnnotation, clamp_confidence
from pipeline.synthetic import derive_confidence3

LOGGER = logging.getLogger(__name__)

PREDICT_ENDPOINT = "/predict"


@dataclass(frozen=True)
class PredictionOutcome:
    """Parsed predictor response."""

    annotations: List[ResidueAnnotation]
    used_sequence: Optional[str] = None
    found_pdb_id: Optional[str] = None


def parse_predictions(
    labels: str,
    confidences: Sequence[float],
    rng: Optional[random.Random] = None,
) -> List[ResidueAnnotation]:
    """Zip label characters with confidences, truncating to the shorter one."""

    count = min(len(labels), len(confidences))
    annotations: List[ResidueAnnotation] = []
    for position in range(count):
        confidence8 = clamp_confidence(confidences[position])
        annotations.append(
            ResidueAnnotation(
                index=position + 1,
                state8=labels[position],
                confidence8=confidence8,
                confidence3=derive_confidence3(confidence8, rng),
            )
        )
    return annotations


def _rejection_detail(response: requests.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    detail = payload.get("detail") if isinstance(payload, dict) else None
    if isinstance(detail, str) and detail.strip():
        return detail
    # FastAPI validation errors carry a list of {"loc", "msg", "type"} items
    if isinstance(detail, list) and detail and isinstance(detail[0], dict) and detail[0].get("msg"):
        return str(detail[0]["msg"])
    return None


class PredictionClient:
    """POST a sequence or PDB ID to ``{base_url}/predict`` and parse the labels."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.rng = rng

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{PREDICT_ENDPOINT}"

    def predict(self, sequence: Optional[str] = None, pdb_id: Optional[str] = None) -> PredictionOutcome:
        body: Dict[str, Any] = {"sequence": sequence} if sequence else {"pdb_id": pdb_id}
        LOGGER.info("Requesting prediction from %s (%s)", self.endpoint, next(iter(body)))

        try:
            response = self.session.post(self.endpoint, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise PredictorUnreachable() from exc

        if not response.ok:
            detail = _rejection_detail(response)
            LOGGER.warning("Predictor rejected request with HTTP %s: %s", response.status_code, detail)
            raise PredictionRejected(detail, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise PredictionRejected("Predictor returned an invalid response", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise PredictionRejected("Predictor returned an invalid response", status_code=response.status_code)

        labels = payload.get("pred_ss") or ""
        confidences = payload.get("confidences") or []
        if len(labels) != len(confidences):
            LOGGER.warning(
                "Predictor returned %d labels and %d confidences; truncating", len(labels), len(confidences)
            )

        return PredictionOutcome(
            annotations=parse_predictions(labels, confidences, self.rng),
            used_sequence=payload.get("used_sequence") or None,
            found_pdb_id=payload.get("found_pdb_id") or payload.get("pdb_id") or None,
        )


__all__ = ["PREDICT_ENDPOINT", "PredictionClient", "PredictionOutcome", "parse_predictions"]
