"""Annotate a sequence or PDB entry from the command line without the API.

Usage::

    python scripts/annotate.py --pdb-id 1CRN --output-dir out/
    python scripts/annotate.py --sequence ACDEFGHIKL --synthetic
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from api.config import check_transport_security, get_settings
from api.services import build_client, build_resolver
from pipeline.errors import AnnotationError
from pipeline.export import csv_filename, write_csv, write_result_json
from pipeline.models import AnnotationRequest
from pipeline.runner import run_pipeline

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _read_sequence(args: argparse.Namespace) -> str:
    if args.fasta:
        return Path(args.fasta).read_text()
    return args.sequence or ""


def main() -> None:
    parser = argparse.ArgumentParser(description="Per-residue secondary-structure annotation")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--sequence", help="One-letter amino-acid sequence")
    source.add_argument("--fasta", help="FASTA file; the first record is annotated")
    source.add_argument("--pdb-id", help="4-character PDB identifier, e.g. 1CRN")
    parser.add_argument("--synthetic", action="store_true", help="Generate demo labels instead of calling the predictor")
    parser.add_argument("--output-dir", default=None, help="Write 8-state/3-state CSVs and the JSON payload here")
    args = parser.parse_args()

    settings = get_settings()
    request = AnnotationRequest(
        sequence=_read_sequence(args),
        identifier=args.pdb_id or "",
        synthetic=args.synthetic,
    )

    try:
        if not args.synthetic:
            check_transport_security(settings)
        result = run_pipeline(request, resolver=build_resolver(settings), client=build_client(settings))
    except AnnotationError as exc:
        raise SystemExit(f"Annotation failed: {exc.user_message}") from exc

    print(f"Entry summary: {result.summary.residues} residues across {result.summary.chains} chain(s)")
    print(f"Average confidence: {result.statistics.average_confidence8:.3f}")
    print("8-state: " + "".join(residue.state8 for residue in result.annotations))
    print("3-state: " + "".join(residue.state3 for residue in result.annotations))

    if args.output_dir:
        output_dir = Path(args.output_dir)
        identifier = result.display_identifier or None
        for mode in ("8", "3"):
            path = write_csv(output_dir / csv_filename(identifier, mode), result.annotations, mode)
            logger.info("Wrote %s", path)
        summary_path = write_result_json(output_dir / "annotation.json", result)
        logger.info("Wrote %s", summary_path)
        print(json.dumps(result.statistics.to_dict(), indent=2))


if __name__ == "__main__":
    main()
