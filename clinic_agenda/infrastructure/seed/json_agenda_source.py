import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ...application.ports.agenda_source import AgendaSource
from ...models.appointment import BLOCK_LABEL, PERSONAL_LABEL, Appointment, AppointmentKind
from ...models.availability import WeeklyAvailability
from ...schemas.agenda.seed import AgendaSeed, AppointmentSeed

logger = logging.getLogger(__name__)

UNKNOWN_PROFESSIONAL = "Unknown Professional"


def default_title(a: AppointmentSeed) -> str:
    if a.kind == AppointmentKind.BLOCK:
        return BLOCK_LABEL
    if a.kind == AppointmentKind.PERSONAL:
        return PERSONAL_LABEL
    return a.patient_name or "Consultation"


class StaticAgendaSource(AgendaSource):
    def __init__(self, appointments: Iterable[Appointment] = (), professionals: Optional[Dict[str, str]] = None,
                 availability: Optional[WeeklyAvailability] = None) -> None:
        self._appointments = list(appointments)
        self._professionals = dict(professionals or {})
        self._availability = availability

    def load_appointments(self) -> List[Appointment]:
        return list(self._appointments)

    def load_professionals(self) -> Dict[str, str]:
        return dict(self._professionals)

    def load_availability(self) -> Optional[WeeklyAvailability]:
        return self._availability


class JsonAgendaSource(AgendaSource):
    """Reads professionals, appointments and weekly hours from a JSON seed file."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self._seed: Optional[AgendaSeed] = None

    def _load(self) -> AgendaSeed:
        if self._seed is None:
            with self.path.open("r", encoding="utf-8") as f:
                self._seed = AgendaSeed.model_validate(json.load(f))
            logger.info(f"Loaded agenda seed from {self.path}")
        return self._seed

    def load_professionals(self) -> Dict[str, str]:
        return {p.id: p.name for p in self._load().professionals}

    def load_appointments(self) -> List[Appointment]:
        directory = self.load_professionals()
        return [self._to_appointment(a, directory) for a in self._load().appointments]

    def load_availability(self) -> Optional[WeeklyAvailability]:
        schedule = self._load().availability
        if schedule is None:
            return None
        return WeeklyAvailability.from_schedule(day.model_dump() for day in schedule)

    def _to_appointment(self, a: AppointmentSeed, directory: Dict[str, str]) -> Appointment:
        name = directory.get(a.professional_id)
        if name is None:
            logger.warning(f"Appointment {a.id} references unknown professional {a.professional_id}")
            name = UNKNOWN_PROFESSIONAL
        return Appointment(
            id=a.id,
            start=a.start,
            end=a.end or a.start + timedelta(minutes=a.duration_minutes),
            title=a.title or default_title(a),
            professional_id=a.professional_id,
            professional_name=name,
            kind=a.kind,
            modality=a.modality,
            status=a.status,
            patient_id=a.patient_id,
            patient_name=a.patient_name,
            meeting_reference=a.meeting_reference,
            notes=a.notes,
            service_id=a.service_id,
        )
