"""
HTTP tests through the FastAPI app with an in-memory container.
"""

import pytest
from fastapi.testclient import TestClient

from preopflow.app import create_app
from preopflow.core.config import CircuitSettings, DatabaseSettings, Settings
from preopflow.core.container import build_container

MARIA = {"name": "Maria Silva", "specialty": "ORTOPEDIA", "flow_type": "circuito_preop"}


@pytest.fixture
def client(clock):
    settings = Settings(
        app_env="testing",
        database=DatabaseSettings(backend="memory"),
        circuit=CircuitSettings(expiry_sweeper_enabled=False),
    )
    app = create_app(container=build_container(settings, clock=clock))
    with TestClient(app) as client:
        yield client


def _station(client, step, number=1):
    stations = client.get("/stations", params={"step": step}).json()["data"]
    return next(s for s in stations if s["station_number"] == number)


def _register(client, **overrides):
    response = client.post("/patients", json={**MARIA, **overrides})
    assert response.status_code == 201
    return response.json()["data"]


def test_default_stations_are_seeded(client):
    response = client.get("/stations")
    assert response.status_code == 200
    stations = response.json()["data"]
    assert len(stations) == 10
    exams = _station(client, "exames_lab_ecg", 2)
    assert exams["capacity"] == 2
    assert exams["name"] == "Exames Lab/ECG 2"


def test_register_patient(client):
    response = client.post("/patients", json=MARIA, headers={"X-Request-ID": "req-42"})

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["request_id"] == "req-42"
    assert response.headers["X-Request-ID"] == "req-42"
    data = body["data"]
    assert data["patient_id"].startswith("PAT-")
    assert data["flow_type_label"] == "Circuito Pré-Operatório"
    assert [s["step"] for s in data["steps"]] == ["triagem_medica", "exames_lab_ecg", "agendamento"]
    assert all(s["status"] == "pending" for s in data["steps"])


@pytest.mark.parametrize(
    "payload",
    [
        {**MARIA, "name": "   "},
        {**MARIA, "specialty": "DERMATO"},
        {**MARIA, "flow_type": "walk_in"},
    ],
)
def test_register_rejects_bad_input(client, payload):
    response = client.post("/patients", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "INVALID_INPUT"
    assert body["category"] == "validation"


def test_station_round_trip(client):
    patient = _register(client)
    triage = _station(client, "triagem_medica")

    called = client.post(f"/stations/{triage['station_id']}/call-next")
    assert called.status_code == 200
    assert called.json()["data"]["patient"]["patient_id"] == patient["patient_id"]

    board = client.get("/announcements/active").json()["data"]
    assert [a["station_name"] for a in board] == ["Triagem Médica 1"]

    again = client.post(f"/stations/{triage['station_id']}/call-next")
    assert again.status_code == 409
    assert again.json()["error"] == "STATION_CAPACITY_EXCEEDED"
    assert again.json()["category"] == "precondition"

    assert client.post(f"/stations/{triage['station_id']}/start").status_code == 200
    finished = client.post(f"/stations/{triage['station_id']}/finish", json={})
    assert finished.status_code == 200
    assert finished.json()["data"]["step"]["status"] == "completed"
    assert finished.json()["data"]["patient_completed"] is False

    stats = {s["step"]: s for s in client.get("/steps/queue-stats").json()["data"]}
    assert stats["triagem_medica"]["completed"] == 1
    assert stats["exames_lab_ecg"]["pending"] == 1


def test_specialist_finish_with_indication(client):
    patient = _register(client, flow_type="consulta_especialista")
    station = _station(client, "especialista")
    client.put(f"/stations/{station['station_id']}/specialty", json={"specialty": "ORTOPEDIA"})
    client.post(f"/stations/{station['station_id']}/call-next")
    client.post(f"/stations/{station['station_id']}/start")

    response = client.post(
        f"/stations/{station['station_id']}/finish",
        json={"surgery_indicated": True, "needs_cardio": True},
    )

    assert response.status_code == 200
    assert response.json()["data"]["reentered_circuit"] is True
    steps = client.get(f"/patients/{patient['patient_id']}/steps").json()["data"]["steps"]
    assert {s["step"] for s in steps} == {
        "especialista", "triagem_medica", "exames_lab_ecg", "agendamento", "cardiologista",
    }


def test_specialty_on_non_specialist_station_is_rejected(client):
    triage = _station(client, "triagem_medica")
    response = client.put(
        f"/stations/{triage['station_id']}/specialty", json={"specialty": "ORTOPEDIA"}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_STATION_CONFIGURATION"


def test_unknown_station_is_404(client):
    response = client.post("/stations/STN-missing/call-next")
    assert response.status_code == 404
    assert response.json()["error"] == "STATION_NOT_FOUND"


def test_duplicate_station_is_409(client):
    response = client.post(
        "/stations", json={"step": "triagem_medica", "station_number": 1, "name": "Outra"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "DUPLICATE_STATION"


def test_add_step_conflicts(client):
    patient = _register(client)
    url = f"/patients/{patient['patient_id']}/steps"

    assert client.post(url, json={"step": "exame_imagem"}).status_code == 201
    duplicate = client.post(url, json={"step": "exame_imagem"})
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "STEP_ALREADY_ADDED"


def test_pending_scheduling_and_report(client):
    patient = _register(client)
    response = client.post(
        f"/patients/{patient['patient_id']}/pending-scheduling", json={"reason": "Sem vaga"}
    )
    assert response.json()["data"]["pending_surgery_scheduling"] is True

    report = client.get("/reports/day", params={"date": "2026-03-02"})
    assert report.status_code == 200
    data = report.json()["data"]
    assert data["total_patients"] == 1
    assert data["pending_scheduling"][0]["scheduling_pending_reason"] == "Sem vaga"
    assert len(data["step_reports"]) == 6


def test_report_window_must_be_complete(client):
    response = client.get("/reports/day", params={"start": "2026-03-02T00:00:00Z"})
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_WINDOW"


def test_list_and_remove_patients(client):
    patient = _register(client)
    listed = client.get("/patients", params={"date": "2026-03-02"}).json()["data"]
    assert [p["patient_id"] for p in listed] == [patient["patient_id"]]
    assert client.get("/patients", params={"date": "2026-03-01"}).json()["data"] == []

    assert client.delete(f"/patients/{patient['patient_id']}").status_code == 200
    missing = client.get(f"/patients/{patient['patient_id']}/steps")
    assert missing.status_code == 404
    assert missing.json()["error"] == "PATIENT_NOT_FOUND"


def test_health_endpoints(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["data"]["status"] == "healthy"
    assert health.json()["data"]["service"] == "PreopFlow"

    ready = client.get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["data"]["database"] == "ok"

    root = client.get("/").json()
    assert root["service"] == "PreopFlow"
    assert "stations" in root["endpoints"]


def test_announcement_limit_must_be_positive(client):
    response = client.get("/announcements/active", params={"limit": 0})
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_INPUT"
