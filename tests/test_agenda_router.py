"""Tests for the /agenda routes."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from clinic_agenda.application.services.agenda_service import AgendaService
from clinic_agenda.config import Settings
from clinic_agenda.main import create_app
from clinic_agenda.models.appointment import Appointment, Modality


class CountingIds:
    def __init__(self):
        self.n = 0

    def new_id(self):
        self.n += 1
        return f"appt-{self.n}"


class FixedTokens:
    def new_token(self):
        return "r00m12345"


@pytest.fixture
def client():
    existing = Appointment(
        id="a1",
        start=datetime(2024, 6, 12, 10),
        end=datetime(2024, 6, 12, 11),
        title="Maria",
        professional_id="p1",
        professional_name="Dr. Ana Souza",
        modality=Modality.IN_PERSON,
        patient_name="Maria",
    )
    agenda = AgendaService.build(
        appointments=[existing],
        professionals={"p1": "Dr. Ana Souza"},
        id_generator=CountingIds(),
        token_generator=FixedTokens(),
        settings=Settings(_env_file=None),
        clock=lambda: datetime(2024, 6, 12, 9, 0),
    )
    return TestClient(create_app(agenda=agenda))


def test_render_week(client):
    response = client.get("/agenda/render")
    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "week"
    assert data["dates"][0] == "2024-06-09"
    assert len(data["columns"]) == 7
    event = data["columns"][3]["events"][0]
    assert event["appointment"]["id"] == "a1"
    assert event["top_px"] == 48 + 2 * 64
    assert event["appointment"]["presentation_tag"] == "in_person"
    assert len(data["time_rows"]) == 11


def test_click_edit_and_save_remote_session(client):
    response = client.post("/agenda/slots/click", json={"date": "2024-06-12", "hour": 14})
    assert response.status_code == 200
    assert response.json()["start"] == "2024-06-12T14:00:00"
    assert response.json()["end"] == "2024-06-12T15:00:00"

    response = client.patch("/agenda/draft", json={"patient_name": "Joana", "modality": "remote"})
    assert response.status_code == 200
    assert response.json()["issues"] == []

    response = client.post("/agenda/draft/save")
    assert response.status_code == 200
    saved = response.json()
    assert saved["meeting_reference"] == "https://meet.psimanager.com/r00m12345"
    assert saved["presentation_tag"] == "remote"
    assert saved["status"] == "scheduled"

    sessions = client.get("/agenda/remote-sessions").json()
    assert [s["id"] for s in sessions] == [saved["id"]]


def test_save_with_missing_patient_returns_issues(client):
    client.post("/agenda/slots/click", json={"date": "2024-06-12", "hour": 15})
    response = client.post("/agenda/draft/save")
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["issues"][0]["field"] == "patient"
    assert client.get("/agenda/draft").status_code == 200


def test_month_mode_refused_while_drafting(client):
    client.post("/agenda/quick-create", json={})
    response = client.post("/agenda/mode", json={"mode": "month"})
    assert response.status_code == 409
    client.post("/agenda/draft/cancel")
    assert client.post("/agenda/mode", json={"mode": "month"}).status_code == 200


def test_month_cell_drill_down(client):
    client.post("/agenda/mode", json={"mode": "month"})
    response = client.post("/agenda/month-cell", json={"date": "2024-06-20"})
    assert response.json() == {"mode": "day", "anchor_date": "2024-06-20"}


def test_block_draft_rejects_patient_fields(client):
    client.post("/agenda/slots/click", json={"date": "2024-06-12", "hour": 16})
    response = client.patch("/agenda/draft", json={"kind": "block", "patient_name": "Joana"})
    assert response.status_code == 422
    response = client.patch("/agenda/draft", json={"kind": "block"})
    assert response.json()["label"] == "Blocked"
    assert response.json()["modality"] is None


def test_status_and_remove(client):
    response = client.put("/agenda/appointments/a1/status", json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert client.put("/agenda/appointments/a1/status", json={"status": "canceled"}).status_code == 409
    assert client.delete("/agenda/appointments/a1").status_code == 200
    assert client.delete("/agenda/appointments/a1").status_code == 404


def test_summary_and_now_indicator(client):
    summary = client.get("/agenda/summary").json()
    assert summary["total"] == 1
    assert summary["next_appointment"]["id"] == "a1"
    assert client.get("/agenda/now-indicator").json() == {"offset_px": 48 + 64}


def test_navigation(client):
    assert client.post("/agenda/navigate", json={"direction": "next"}).json()["anchor_date"] == "2024-06-19"
    assert client.post("/agenda/today").json()["anchor_date"] == "2024-06-12"
    assert client.post("/agenda/navigate", json={"direction": "up"}).status_code == 422


def test_null_start_or_end_is_rejected_and_draft_kept(client):
    client.post("/agenda/slots/click", json={"date": "2024-06-12", "hour": 14})
    response = client.patch("/agenda/draft", json={"start": None})
    assert response.status_code == 422
    assert response.json()["issues"] == [{"field": "start", "message": "cannot be null"}]
    response = client.patch("/agenda/draft", json={"end": None, "duration_minutes": None})
    assert response.status_code == 422
    draft = client.get("/agenda/draft").json()
    assert draft["start"] == "2024-06-12T14:00:00"
    assert draft["is_valid"] is False
    assert draft["out_of_hours"] is False
