import logging
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional

from ...exceptions import AppointmentNotFoundError, InvalidRangeError, ValidationError
from ...models.appointment import Appointment

logger = logging.getLogger(__name__)

_FIELD_NAMES = {f.name for f in fields(Appointment)}


class AppointmentIndex:
    """In-memory appointment collection kept in insertion order.

    Double-booking is allowed: insert never checks for overlaps.
    """

    def __init__(self, appointments: Iterable[Appointment] = ()):
        self._items: Dict[str, Appointment] = {}
        for appt in appointments:
            self.insert(appt)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items.values()))

    def __contains__(self, appointment_id: str) -> bool:
        return appointment_id in self._items

    def get(self, appointment_id: str) -> Appointment:
        appt = self._items.get(appointment_id)
        if appt is None:
            raise AppointmentNotFoundError(appointment_id)
        return appt

    def insert(self, appointment: Appointment) -> Appointment:
        if appointment.end <= appointment.start:
            logger.warning(f"Rejected appointment {appointment.id}: invalid range")
            raise InvalidRangeError(appointment.start, appointment.end)
        if appointment.id in self._items:
            raise ValidationError([("id", f"duplicate id {appointment.id}")])
        self._items[appointment.id] = appointment
        return appointment

    def remove(self, appointment_id: str) -> Appointment:
        appt = self.get(appointment_id)
        del self._items[appointment_id]
        logger.info(f"Removed appointment {appointment_id}")
        return appt

    def update(self, appointment_id: str, patch: Mapping[str, object]) -> Appointment:
        current = self.get(appointment_id)
        if "id" in patch and patch["id"] != appointment_id:
            raise ValidationError([("id", "appointment id cannot be changed")])
        unknown = sorted(set(patch) - _FIELD_NAMES)
        if unknown:
            raise ValidationError([(name, "unknown field") for name in unknown])
        updated = replace(current, **{k: v for k, v in patch.items() if k != "id"})
        if updated.end <= updated.start:
            raise InvalidRangeError(updated.start, updated.end)
        # dict assignment on an existing key keeps its insertion position
        self._items[appointment_id] = updated
        return updated

    def appointments_on(self, day: date) -> List[Appointment]:
        return [a for a in self._items.values() if a.start.date() == day]

    def overlapping(self, start: datetime, end: datetime, professional_id: Optional[str] = None,
                    exclude_id: Optional[str] = None) -> List[Appointment]:
        """Appointments intersecting [start, end). Query only, nothing is rejected."""
        return [
            a for a in self._items.values()
            if a.start < end and start < a.end
            and (professional_id is None or a.professional_id == professional_id)
            and a.id != exclude_id
        ]


def sorted_for_display(appointments: Iterable[Appointment]) -> List[Appointment]:
    # sorted() is stable, so equal starts keep insertion order
    return sorted(appointments, key=lambda a: a.start)
