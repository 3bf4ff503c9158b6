"""Resolve PDB entries to protein chain sequences through the RCSB Data API."""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence

import requests

from pipeline.errors import CatalogUnreachable, EntryNotFound, NoPolymerChains, NoProteinSequencesFound

LOGGER = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://data.rcsb.org/rest/v1/core"
PROTEIN_TYPE_MARKERS = ("polypeptide", "protein")

_SEQUENCE_NOISE = re.compile(r"[\s;]+")


def is_protein_polymer(polymer_type: Optional[str]) -> bool:
    if not isinstance(polymer_type, str) or not polymer_type:
        return False
    lowered = polymer_type.lower()
    return any(marker in lowered for marker in PROTEIN_TYPE_MARKERS)


def extract_chain_sequence(entity: Dict[str, Any]) -> Optional[str]:
    """Return the one-letter sequence of a protein polymer entity, if usable."""

    entity_poly = entity.get("entity_poly") if isinstance(entity, dict) else None
    if not isinstance(entity_poly, dict) or not is_protein_polymer(entity_poly.get("type")):
        return None
    raw = entity_poly.get("pdbx_seq_one_letter_code_can") or entity_poly.get("pdbx_seq_one_letter_code")
    if not isinstance(raw, str):
        return None
    sequence = _SEQUENCE_NOISE.sub("", raw)
    return sequence or None


def select_primary_chain(sequences: Sequence[str]) -> str:
    """Pick the longest chain; the first one seen wins ties."""

    primary = sequences[0]
    for sequence in sequences[1:]:
        if len(sequence) > len(primary):
            primary = sequence
    return primary


class EntryResolver:
    """Fetch an entry and its polymer entities, keeping protein chains only."""

    def __init__(
        self,
        base_url: str = DEFAULT_CATALOG_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 20,
        max_workers: int = 8,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_workers = max(1, max_workers)

    def fetch_entry(self, identifier: str) -> Dict[str, Any]:
        url = f"{self.base_url}/entry/{identifier}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CatalogUnreachable(f"Could not reach structure catalog: {exc}") from exc
        if not response.ok:
            LOGGER.info("Catalog returned %s for entry %s", response.status_code, identifier)
            raise EntryNotFound()
        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogUnreachable("Structure catalog returned an unreadable entry record") from exc
        if not isinstance(payload, dict):
            raise CatalogUnreachable("Structure catalog returned an unreadable entry record")
        return payload

    def fetch_chain(self, identifier: str, entity_id: str) -> Optional[str]:
        """Return the chain sequence or ``None`` when the chain should be skipped."""

        url = f"{self.base_url}/polymer_entity/{identifier}/{entity_id}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            LOGGER.warning("Skipping entity %s/%s: %s", identifier, entity_id, exc)
            return None
        if not response.ok:
            LOGGER.warning("Skipping entity %s/%s: HTTP %s", identifier, entity_id, response.status_code)
            return None
        try:
            payload = response.json()
        except ValueError:
            LOGGER.warning("Skipping entity %s/%s: invalid JSON", identifier, entity_id)
            return None
        sequence = extract_chain_sequence(payload)
        if sequence is None:
            LOGGER.debug("Entity %s/%s is not a usable protein chain", identifier, entity_id)
        return sequence

    def resolve(self, identifier: str) -> List[str]:
        """Return the protein chain sequences of ``identifier`` in completion order."""

        identifier = identifier.strip().upper()
        entry = self.fetch_entry(identifier)
        container = entry.get("rcsb_entry_container_identifiers")
        if not isinstance(container, dict):
            container = {}
        entity_ids = [str(entity_id) for entity_id in container.get("polymer_entity_ids") or []]
        if not entity_ids:
            raise NoPolymerChains()

        sequences: List[str] = []
        workers = min(self.max_workers, len(entity_ids))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.fetch_chain, identifier, entity_id) for entity_id in entity_ids]
            for future in as_completed(futures):
                sequence = future.result()
                if sequence:
                    sequences.append(sequence)

        if not sequences:
            raise NoProteinSequencesFound()

        LOGGER.info(
            "Resolved %s to %d protein chain(s) out of %d polymer entities",
            identifier,
            len(sequences),
            len(entity_ids),
        )
        return sequences


__all__ = [
    "DEFAULT_CATALOG_URL",
    "EntryResolver",
    "extract_chain_sequence",
    "is_protein_polymer",
    "select_primary_chain",
]
