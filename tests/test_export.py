import json

import pytest

from pipeline.export import csv_filename, render_csv, write_csv, write_result_json
from pipeline.models import AnnotationResult, AnnotationStatistics, EntrySummary, ResidueAnnotation

ANNOTATIONS = (
    ResidueAnnotation(index=1, state8="G", confidence8=0.91234, confidence3=0.9),
    ResidueAnnotation(index=2, state8="B", confidence8=0.5, confidence3=0.5),
    ResidueAnnotation(index=3, state8="T", confidence8=0.98, confidence3=0.9555),
)


def test_render_8_state_csv():
    assert render_csv(ANNOTATIONS, "8") == "index,state8,conf8\n1,G,0.912\n2,B,0.500\n3,T,0.980\n"


def test_render_3_state_csv():
    assert render_csv(ANNOTATIONS, "3") == "index,state3,conf3\n1,H,0.900\n2,E,0.500\n3,C,0.956\n"


def test_render_empty_annotation_has_header_only():
    assert render_csv([], "3") == "index,state3,conf3\n"


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        render_csv(ANNOTATIONS, "5")


def test_csv_filename():
    assert csv_filename("1crn", "8") == "1CRN-predictions-8-state.csv"
    assert csv_filename(None, "3") == "entry-predictions-3-state.csv"
    assert csv_filename("  ", "8") == "entry-predictions-8-state.csv"


def test_write_artifacts(tmp_path):
    result = AnnotationResult(
        annotations=ANNOTATIONS,
        summary=EntrySummary(residues=3, chains=1),
        statistics=AnnotationStatistics.from_annotations(ANNOTATIONS),
        display_sequence="ACD",
    )
    csv_path = write_csv(tmp_path / "out" / "a.csv", result.annotations, "8")
    json_path = write_result_json(tmp_path / "out" / "a.json", result)

    assert csv_path.read_text().startswith("index,state8,conf8\n")
    payload = json.loads(json_path.read_text())
    assert payload["summary"] == {"residues": 3, "chains": 1}
    assert payload["pdb_id"] is None
    assert payload["predictions"][0] == {"index": 1, "state8": "G", "state3": "H", "conf8": 0.91234, "conf3": 0.9}
    assert payload["statistics"]["composition3"] == {"H": 1, "E": 1, "C": 1}
