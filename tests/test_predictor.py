import random

import pytest
import requests

from integrations.predictor import PredictionClient, parse_predictions
from pipeline.errors import PredictionRejected, PredictorUnreachable

BASE = "http://predictor.test"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _client(response):
    session = FakeSession(response)
    return PredictionClient(BASE + "/", session=session, rng=random.Random(0)), session


def test_mismatched_lengths_truncate_to_shorter():
    client, _ = _client(FakeResponse(200, {"pred_ss": "HHHEE", "confidences": [0.9, 0.8, 0.7]}))
    outcome = client.predict(sequence="ACDEF")
    assert len(outcome.annotations) == 3
    assert [residue.state8 for residue in outcome.annotations] == ["H", "H", "H"]
    assert [residue.index for residue in outcome.annotations] == [1, 2, 3]


def test_more_confidences_than_labels():
    annotations = parse_predictions("HE", [0.9, 0.8, 0.7, 0.6], random.Random(1))
    assert len(annotations) == 2


def test_confidences_are_clamped():
    client, _ = _client(FakeResponse(200, {"pred_ss": "HEC", "confidences": [0.1, 1.5, 0.7]}))
    annotations = client.predict(sequence="ACD").annotations
    assert [residue.confidence8 for residue in annotations] == [0.5, 0.98, 0.7]
    for residue in annotations:
        assert 0.5 <= residue.confidence3 <= residue.confidence8


def test_states_are_reduced():
    client, _ = _client(FakeResponse(200, {"pred_ss": "GBSX", "confidences": [0.8] * 4}))
    annotations = client.predict(sequence="ACDE").annotations
    assert [residue.state3 for residue in annotations] == ["H", "E", "C", "C"]


def test_sequence_body_and_echoed_fields():
    client, session = _client(
        FakeResponse(200, {"pred_ss": "CC", "confidences": [0.6, 0.6], "used_sequence": "AC", "found_pdb_id": "1CRN"})
    )
    outcome = client.predict(sequence="AC")
    assert session.posts == [(f"{BASE}/predict", {"sequence": "AC"})]
    assert outcome.used_sequence == "AC"
    assert outcome.found_pdb_id == "1CRN"


def test_pdb_id_body_and_fallback_echo():
    client, session = _client(FakeResponse(200, {"pred_ss": "C", "confidences": [0.6], "pdb_id": "1UBQ"}))
    outcome = client.predict(pdb_id="1UBQ")
    assert session.posts[0][1] == {"pdb_id": "1UBQ"}
    assert outcome.found_pdb_id == "1UBQ"
    assert outcome.used_sequence is None


def test_missing_arrays_produce_empty_annotation():
    client, _ = _client(FakeResponse(200, {}))
    assert client.predict(sequence="A").annotations == []


def test_rejection_carries_server_detail():
    client, _ = _client(FakeResponse(422, {"detail": "Sequence too long"}))
    with pytest.raises(PredictionRejected) as excinfo:
        client.predict(sequence="A")
    assert excinfo.value.user_message == "Sequence too long"
    assert excinfo.value.status_code == 422


def test_rejection_without_json_uses_generic_message():
    client, _ = _client(FakeResponse(500, ValueError("html error page")))
    with pytest.raises(PredictionRejected) as excinfo:
        client.predict(sequence="A")
    assert str(excinfo.value) == "Prediction failed"
    assert excinfo.value.detail is None


def test_transport_failure():
    client, _ = _client(requests.ConnectionError("refused"))
    with pytest.raises(PredictorUnreachable):
        client.predict(sequence="A")


def test_validation_error_list_uses_first_message():
    detail = [{"loc": ["body", "sequence"], "msg": "field required", "type": "value_error.missing"}]
    client, _ = _client(FakeResponse(422, {"detail": detail}))
    with pytest.raises(PredictionRejected) as excinfo:
        client.predict(sequence="A")
    assert excinfo.value.user_message == "field required"


def test_unrecognised_detail_falls_back_to_generic_message():
    client, _ = _client(FakeResponse(400, {"detail": {"code": 17}}))
    with pytest.raises(PredictionRejected) as excinfo:
        client.predict(sequence="A")
    assert excinfo.value.user_message == "Prediction failed"


def test_success_payload_that_is_not_an_object():
    client, _ = _client(FakeResponse(200, ["H", "E"]))
    with pytest.raises(PredictionRejected):
        client.predict(sequence="AC")
