import json
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from importflow.application import reset_dossier_state
from importflow.core.settings import WorkflowSettings


@pytest.fixture()
def client(tmp_path):
    from importflow.app import create_app

    app = create_app(WorkflowSettings(data_dir=tmp_path / "store"))
    with TestClient(app) as test_client:
        yield test_client
    reset_dossier_state()


def test_worklist_sorted_by_eta(client):
    response = client.get("/api/dossiers", params={"sort": "eta_asc"})
    assert response.status_code == 200
    data = response.json()
    assert [item["eta"] for item in data["items"]] == ["2025-08-30", "2025-09-21", "2025-10-05"]
    assert data["selected"] == "IMP-24097"


def test_worklist_filters(client):
    response = client.get("/api/dossiers", params={"q": "schenker", "stage": "Entry Scheduling"})
    assert [item["id"] for item in response.json()["items"]] == ["IMP-24160"]

    response = client.get("/api/dossiers", params={"stage": "Customs"})
    assert response.status_code == 400


def test_send_to_qf_reports_missing_documents(client):
    response = client.post("/api/dossiers/IMP-24122/send-to-qf", json={"role": "COMEX"})
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["kind"] == "precondition"
    assert detail["missing"] == ["packing-list", "bill-of-lading", "safety-data-sheet"]


def test_role_mismatch_is_forbidden(client):
    response = client.post("/api/dossiers/IMP-24097/approve-qf", json={"role": "COMEX"})
    assert response.status_code == 403
    assert response.json()["detail"]["kind"] == "authorization"


def test_end_to_end_release(client, tmp_path):
    assert client.put("/api/session/role", json={"role": "Operations"}).status_code == 200
    response = client.post("/api/dossiers/IMP-24160/schedule-entry")
    assert response.status_code == 200
    assert response.json()["message"] == "Entry scheduled"

    response = client.post(
        "/api/dossiers/IMP-24160/receipts",
        json={"lot": "L1", "expiry": "2025-12", "quantity": 100, "cold_chain": True},
    )
    assert response.status_code == 200
    receipts = response.json()["dossier"]["receipts"]
    assert receipts == [
        {"lot": "L1", "expiry": "2025-12", "quantity": 100.0, "cold_chain": True, "temperature_ok": True}
    ]

    response = client.post("/api/dossiers/IMP-24160/final-release", json={"role": "QF"})
    assert response.status_code == 200
    assert response.json()["dossier"]["stage_index"] == 6

    view = client.get("/api/dossiers/IMP-24160").json()
    assert view["stage"] == "Closed"
    assert view["progress"] == 100

    stored = json.loads((tmp_path / "store" / "importflow_dossiers_v1.json").read_text(encoding="utf-8"))
    assert next(item for item in stored if item["id"] == "IMP-24160")["stage_index"] == 6


def test_toggle_document_and_comment(client):
    response = client.post("/api/dossiers/IMP-24122/documents/packing-list/toggle", json={"role": "COMEX"})
    assert response.status_code == 200
    assert response.json()["dossier"]["documents"]["packing-list"] == "uploaded"

    response = client.post("/api/dossiers/IMP-24122/documents/packing-list/toggle", json={"role": "QF"})
    assert response.status_code == 403

    response = client.post("/api/dossiers/IMP-24122/comments", json={"text": ""})
    assert response.status_code == 400

    response = client.post("/api/dossiers/IMP-24122/comments", json={"text": "waiting for BL"})
    assert response.status_code == 200
    assert response.json()["dossier"]["history"][0]["actor"] == "Comment"


def test_export_downloads_json_file(client):
    response = client.get("/api/dossiers/IMP-24097/export")
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="IMP-24097.json"'
    assert response.json()["id"] == "IMP-24097"


def test_create_and_reset(client):
    created = client.post("/api/dossiers").json()
    new_id = created["dossier"]["id"]
    items = client.get("/api/dossiers").json()
    assert items["selected"] == new_id
    assert len(items["items"]) == 4

    assert client.post("/api/dossiers/reset").status_code == 200
    assert len(client.get("/api/dossiers").json()["items"]) == 3


def test_unknown_values(client):
    assert client.get("/api/dossiers/IMP-00000").status_code == 404
    assert client.post("/api/dossiers/IMP-00000/approve-qf", json={"role": "QF"}).status_code == 404
    assert client.put("/api/session/role", json={"role": "Admin"}).status_code == 400
    assert client.get("/api/session/role").json()["roles"] == ["COMEX", "QF", "Operations"]
