import dataclasses
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from api import main, services, task_store
from integrations.predictor import PredictionOutcome
from pipeline.errors import PredictorUnreachable
from pipeline.history import MemoryHistoryStore
from pipeline.models import ResidueAnnotation
from pipeline.session import AnnotationSession

CRAMBIN = "TTCCPSIVARSNFNVCRLPGTPEAICATYTGCIIIPGATCPGDYAN"


class StubResolver:
    def resolve(self, identifier):
        return [CRAMBIN, "MKT"]


class StubClient:
    def __init__(self, error=None):
        self.error = error

    def predict(self, sequence=None, pdb_id=None):
        if self.error is not None:
            raise self.error
        length = len(sequence) if sequence else len(CRAMBIN)
        annotations = [
            ResidueAnnotation(index=i + 1, state8="H" if i % 2 else "E", confidence8=0.8, confidence3=0.77)
            for i in range(length)
        ]
        return PredictionOutcome(annotations, found_pdb_id=pdb_id)


class InlineQueue:
    """Runs jobs at enqueue time, standing in for an RQ worker."""

    def __init__(self):
        self.jobs = []

    def enqueue(self, func, *args):
        self.jobs.append(args)
        try:
            func(*args)
        except Exception:  # noqa: BLE001
            pass
        return SimpleNamespace(id=f"job-{len(self.jobs)}")


@pytest.fixture
def client(monkeypatch, tmp_path):
    stores = {}

    def build_session(identity, settings=None):
        store = stores.setdefault(identity, MemoryHistoryStore())
        return AnnotationSession(StubResolver(), StubClient(), history_store=store)

    monkeypatch.setattr(services, "build_session", build_session)
    services.reset_sessions()
    main._rate_limit_registry.clear()

    monkeypatch.setattr(
        main,
        "settings",
        dataclasses.replace(main.settings, storage_root=str(tmp_path / "tasks"), api_key="", rate_limit_per_minute=100),
    )
    monkeypatch.setattr(task_store, "_state_file", lambda: tmp_path / "task_state.json")
    queue = InlineQueue()
    monkeypatch.setattr(main, "get_queue", lambda name=None: queue)

    import worker.tasks as tasks

    monkeypatch.setattr(tasks, "build_resolver", StubResolver)
    monkeypatch.setattr(tasks, "build_client", StubClient)

    with TestClient(main.app) as test_client:
        yield test_client
    services.reset_sessions()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_states_and_samples(client):
    legend = client.get("/states").json()
    assert legend["3"] == {"H": "helix", "E": "strand", "C": "coil"}
    assert set(legend["8"]) == set("HGIEBTSC")

    samples = client.get("/samples").json()
    assert [sample["identifier"] for sample in samples[:3]] == ["1CRN", "1UBQ", "1LYZ"]


def test_predict_sequence(client):
    response = client.post("/predict", json={"sequence": "ACDEFGHIKL"})
    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {"residues": 10, "chains": 1}
    assert len(body["predictions"]) == 10
    assert body["predictions"][1] == {"index": 2, "state8": "H", "state3": "H", "conf8": 0.8, "conf3": 0.77}
    assert body["statistics"]["composition3"] == {"H": 5, "E": 5, "C": 0}


def test_predict_identifier_uses_longest_chain(client):
    body = client.post("/predict", json={"pdb_id": "1crn"}).json()
    assert body["summary"] == {"residues": 46, "chains": 2}
    assert body["pdb_id"] == "1CRN"
    assert body["sequence"] == CRAMBIN


def test_predict_input_errors(client):
    conflict = client.post("/predict", json={"sequence": "ACD", "pdb_id": "1CRN"})
    assert conflict.status_code == 400
    assert "either" in conflict.json()["detail"].lower()

    assert client.post("/predict", json={"sequence": "  "}).status_code == 400
    assert client.post("/predict", json={"sequence": "XYZ123"}).status_code == 400
    assert client.post("/predict", json={"pdb_id": "12345"}).status_code == 400


def test_predictor_outage_maps_to_503(client, monkeypatch):
    def failing_session(identity, settings=None):
        return AnnotationSession(StubResolver(), StubClient(error=PredictorUnreachable()))

    monkeypatch.setattr(services, "build_session", failing_session)
    services.reset_sessions()
    response = client.post("/predict", json={"sequence": "ACD"})
    assert response.status_code == 503
    assert response.json()["detail"] == PredictorUnreachable.default_message


def test_history_is_per_client(client):
    client.post("/predict", json={"sequence": "ACDE"}, headers={"X-API-Key": "alice"})
    client.post("/predict", json={"pdb_id": "2ABC"}, headers={"X-API-Key": "alice"})
    client.post("/predict", json={"pdb_id": "1CRN", "sample_name": "Crambin"}, headers={"X-API-Key": "alice"})

    alice = client.get("/history", headers={"X-API-Key": "alice"}).json()
    assert [entry["identifier"] for entry in alice] == ["2ABC", ""]
    assert client.get("/history", headers={"X-API-Key": "bob"}).json() == []


def test_synthetic_can_be_disabled(client, monkeypatch):
    monkeypatch.setattr(main, "settings", dataclasses.replace(main.settings, allow_synthetic=False))
    response = client.post("/predict", json={"sequence": "ACD", "synthetic": True})
    assert response.status_code == 400


def test_api_key_enforced(client, monkeypatch):
    monkeypatch.setattr(main, "settings", dataclasses.replace(main.settings, api_key="secret"))
    assert client.get("/history").status_code == 401
    assert client.get("/history", headers={"X-API-Key": "secret"}).status_code == 200


def test_rate_limit(client, monkeypatch):
    monkeypatch.setattr(main, "settings", dataclasses.replace(main.settings, rate_limit_per_minute=2))
    headers = {"X-API-Key": "carol"}
    assert client.get("/history", headers=headers).status_code == 200
    assert client.get("/history", headers=headers).status_code == 200
    assert client.get("/history", headers=headers).status_code == 429


def test_submit_and_download(client):
    response = client.post("/submit", json={"sequence": "ACDEF"})
    assert response.status_code == 200
    submitted = response.json()
    assert submitted["status"] == "queued"

    result = client.get(f"/result/{submitted['task_id']}").json()
    assert result["status"] == "succeeded"
    assert result["summary"] == {"residues": 5, "chains": 1}
    assert {entry["artifact"] for entry in result["downloads"]} == {"csv8", "csv3", "summary_json"}

    csv3 = client.get(f"/download/{submitted['task_id']}/csv3")
    assert csv3.status_code == 200
    assert csv3.text.splitlines()[0] == "index,state3,conf3"
    assert len(csv3.text.splitlines()) == 6


def test_submit_rejects_invalid_input_before_queueing(client):
    response = client.post("/submit", json={"pdb_id": "1CRN", "sequence": "AC"})
    assert response.status_code == 400


def test_unknown_task_and_artifact(client):
    assert client.get("/result/task-missing").status_code == 404
    submitted = client.post("/submit", json={"pdb_id": "1CRN"}).json()
    assert client.get(f"/download/{submitted['task_id']}/pdb").status_code == 404
