"""Normalization and validation of user-entered sequences and PDB IDs."""
from __future__ import annotations

import io
import re
from typing import Optional

from Bio import SeqIO
from Bio.Data.IUPACData import protein_letters

CANONICAL_AMINO_ACIDS = frozenset(protein_letters)

_STRIP_PATTERN = re.compile(r"[\s;]+")
_IDENTIFIER_PATTERN = re.compile(r"^\w{4}$", re.ASCII)
_FASTA_PATTERN = re.compile(r"^[\s;]*>")


def _first_fasta_record(text: str) -> str:
    records = SeqIO.parse(io.StringIO(text), "fasta")
    first = next(records, None)
    return str(first.seq) if first is not None else ""


def normalize_sequence(text: Optional[str]) -> str:
    """Strip whitespace and ``;`` separators and upper-case the residues.

    FASTA input is accepted; only the first record is kept and its header is
    discarded.
    """

    if not text:
        return ""
    fasta = _FASTA_PATTERN.match(text)
    if fasta:
        text = _first_fasta_record(text[fasta.end() - 1 :])
    return _STRIP_PATTERN.sub("", text).upper()


def validate_sequence(sequence: str) -> bool:
    """Return True when every residue is one of the 20 canonical amino acids."""

    return all(residue in CANONICAL_AMINO_ACIDS for residue in sequence)


def normalize_identifier(text: Optional[str]) -> str:
    return (text or "").strip().upper()


def is_valid_identifier(identifier: str) -> bool:
    """Check the 4-character PDB ID format (e.g. ``1CRN``)."""

    return bool(_IDENTIFIER_PATTERN.match(identifier))


__all__ = [
    "CANONICAL_AMINO_ACIDS",
    "is_valid_identifier",
    "normalize_identifier",
    "normalize_sequence",
    "validate_sequence",
]
