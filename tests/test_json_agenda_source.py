import json
from datetime import datetime

import pydantic
import pytest

from clinic_agenda.infrastructure.seed.json_agenda_source import JsonAgendaSource, StaticAgendaSource
from clinic_agenda.models.appointment import AppointmentKind, Modality, PresentationTag
from clinic_agenda.models.availability import SlotAvailability


def write_seed(tmp_path, data):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_loads_professionals_appointments_and_hours(tmp_path):
    path = write_seed(tmp_path, {
        "professionals": [{"id": "p1", "name": "Dr. Ana Souza"}],
        "appointments": [
            {"id": "a1", "start": "2024-06-12T14:00:00", "professional_id": "p1",
             "patient_name": "Maria", "modality": "remote", "meeting_reference": "https://meet.psimanager.com/a1"},
            {"id": "a2", "start": "2024-06-12T16:00:00", "end": "2024-06-12T17:00:00", "professional_id": "ghost",
             "kind": "block", "title": "Supervision"},
        ],
        "availability": [
            {"dayKey": "wednesday", "active": True, "start": "08:00", "end": "18:00", "lunchStart": "12:00", "lunchEnd": "13:00"},
        ],
    })
    source = JsonAgendaSource(path)
    assert source.load_professionals() == {"p1": "Dr. Ana Souza"}
    a1, a2 = source.load_appointments()
    assert a1.end == datetime(2024, 6, 12, 14, 50)
    assert a1.title == "Maria"
    assert a1.modality == Modality.REMOTE
    assert a1.presentation_tag == PresentationTag.REMOTE
    assert a2.kind == AppointmentKind.BLOCK
    assert a2.professional_name == "Unknown Professional"
    hours = source.load_availability()
    assert hours.status_at(datetime(2024, 6, 12, 12, 15)) == SlotAvailability.BREAK


def test_missing_availability_is_none(tmp_path):
    source = JsonAgendaSource(write_seed(tmp_path, {"professionals": [], "appointments": []}))
    assert source.load_availability() is None
    assert source.load_appointments() == []


def test_block_with_modality_is_rejected(tmp_path):
    path = write_seed(tmp_path, {"appointments": [
        {"id": "b1", "start": "2024-06-12T10:00:00", "professional_id": "p1", "kind": "block", "modality": "remote"},
    ]})
    with pytest.raises(pydantic.ValidationError):
        JsonAgendaSource(path).load_appointments()


def test_static_source_returns_copies():
    source = StaticAgendaSource(professionals={"p1": "Dr. Ana"})
    source.load_professionals()["p2"] = "x"
    assert source.load_professionals() == {"p1": "Dr. Ana"}
    assert source.load_availability() is None


def test_untitled_blocks_and_personal_time_use_their_labels(tmp_path):
    path = write_seed(tmp_path, {
        "professionals": [{"id": "p1", "name": "Dr. Ana Souza"}],
        "appointments": [
            {"id": "b1", "start": "2024-06-12T12:00:00", "professional_id": "p1", "kind": "block"},
            {"id": "x1", "start": "2024-06-12T13:00:00", "professional_id": "p1", "kind": "personal"},
            {"id": "c1", "start": "2024-06-12T14:00:00", "professional_id": "p1"},
        ],
    })
    b1, x1, c1 = JsonAgendaSource(path).load_appointments()
    assert b1.title == "Blocked"
    assert x1.title == "Personal"
    assert c1.title == "Consultation"
