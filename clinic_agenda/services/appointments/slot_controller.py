import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Mapping, Optional, Union

from ...exceptions import IllegalStateError, SchedulingError, TimeOutOfRangeError
from ...models.appointment import (
    Appointment,
    AppointmentKind,
    AppointmentStatus,
    BlockDetails,
    ConsultationDetails,
    Draft,
    DraftDetails,
    Modality,
    PersonalDetails,
)
from ...models.availability import WeeklyAvailability
from ..calendar.time_axis import TimeAxis
from .appointment_factory import AppointmentFactory
from .appointment_index import AppointmentIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Drafting:
    draft: Draft


InteractionState = Union[Idle, Drafting]

IDLE = Idle()


@dataclass(frozen=True)
class SaveOutcome:
    saved: bool
    appointment: Optional[Appointment] = None
    error: Optional[SchedulingError] = None


class SlotInteractionController:
    """Draft lifecycle: Idle -> Drafting -> (save | cancel) -> Idle."""

    def __init__(
        self,
        index: AppointmentIndex,
        factory: AppointmentFactory,
        professional_directory: Mapping[str, str],
        default_professional_id: Optional[str] = None,
        default_duration_minutes: int = 60,
        time_axis: Optional[TimeAxis] = None,
        availability: Optional[WeeklyAvailability] = None,
    ):
        self.index = index
        self.factory = factory
        self.professional_directory = professional_directory
        self.default_professional_id = default_professional_id
        self.default_duration = timedelta(minutes=default_duration_minutes)
        self.time_axis = time_axis
        self.availability = availability
        self.state: InteractionState = IDLE

    @property
    def draft(self) -> Optional[Draft]:
        return self.state.draft if isinstance(self.state, Drafting) else None

    @property
    def is_drafting(self) -> bool:
        return isinstance(self.state, Drafting)

    def on_slot_click(self, day: date, hour: float) -> Draft:
        if self.time_axis is not None and not (self.time_axis.day_start <= hour < self.time_axis.day_end):
            raise TimeOutOfRangeError(hour, self.time_axis.day_start, self.time_axis.day_end)
        start = datetime.combine(day, time()) + timedelta(hours=hour)
        return self._open(start)

    def on_grid_click(self, day: date, offset_px: float) -> Draft:
        if self.time_axis is None:
            raise IllegalStateError("No time axis configured for pixel clicks")
        return self.on_slot_click(day, self.time_axis.offset_to_hour(offset_px))

    def on_quick_create(self, now: datetime) -> Draft:
        return self._open(now.replace(minute=0, second=0, microsecond=0))

    def open_existing(self, appointment_id: str) -> Draft:
        self._ensure_idle()
        appt = self.index.get(appointment_id)
        if appt.kind == AppointmentKind.CONSULTATION:
            details: DraftDetails = ConsultationDetails(
                patient_id=appt.patient_id,
                patient_name=appt.patient_name or (appt.title if not appt.patient_id else None),
                modality=appt.modality or Modality.IN_PERSON,
                meeting_reference=appt.meeting_reference,
            )
        elif appt.kind == AppointmentKind.BLOCK:
            details = BlockDetails(label=appt.title)
        else:
            details = PersonalDetails(label=appt.title)
        draft = Draft(
            start=appt.start,
            end=appt.end,
            professional_id=appt.professional_id,
            details=details,
            notes=appt.notes,
            service_id=appt.service_id,
            editing_id=appt.id,
        )
        return self._enter(draft)

    def edit(self, **changes) -> Draft:
        """Apply form changes to the open draft. An invalid range is flagged on the draft, not raised."""
        if {"editing_id", "overlapping_ids", "out_of_hours"} & set(changes):
            raise ValueError("editing_id, overlapping_ids and out_of_hours are managed by the controller")
        draft = self._require_draft()
        duration = changes.pop("duration_minutes", None)
        draft = replace(draft, **changes)
        if duration is not None:
            draft = draft.with_duration(duration)
        return self._enter(draft)

    def set_times(self, start: datetime, end: datetime) -> Draft:
        return self._enter(self._require_draft().with_range(start, end))

    def set_duration(self, minutes: int) -> Draft:
        return self.edit(duration_minutes=minutes)

    def save(self, draft: Optional[Draft] = None) -> SaveOutcome:
        if draft is not None:
            self._enter(draft)
        draft = self._require_draft()
        try:
            if draft.editing_id:
                current = self.index.get(draft.editing_id)
                patch = self.factory.patch_for(draft, self.professional_directory, current.meeting_reference)
                appointment = self.index.update(draft.editing_id, patch)
                logger.info(f"Updated appointment {appointment.id}")
            else:
                appointment = self.index.insert(self.factory.create(draft, self.professional_directory))
                logger.info(f"Committed appointment {appointment.id} for {appointment.professional_id} at {appointment.start.isoformat()}")
        except SchedulingError as e:
            logger.warning(f"Draft not saved: {e.detail}")
            return SaveOutcome(saved=False, error=e)
        self.state = IDLE
        return SaveOutcome(saved=True, appointment=appointment)

    def cancel(self) -> None:
        self.state = IDLE

    def discard_if_editing(self, appointment_id: str) -> None:
        if self.draft is not None and self.draft.editing_id == appointment_id:
            self.state = IDLE

    def _open(self, start: datetime) -> Draft:
        self._ensure_idle()
        draft = Draft(
            start=start,
            end=start + self.default_duration,
            professional_id=self.default_professional_id,
        )
        return self._enter(draft)

    def _enter(self, draft: Draft) -> Draft:
        clashes = tuple(
            a.id for a in self.index.overlapping(draft.start, draft.end, draft.professional_id, exclude_id=draft.editing_id)
            if a.status != AppointmentStatus.CANCELED
        ) if draft.end > draft.start and draft.professional_id else ()
        out_of_hours = (
            self.availability is not None
            and draft.range_error is None
            and not self.availability.covers(draft.start, draft.end)
        )
        draft = replace(draft, overlapping_ids=clashes, out_of_hours=out_of_hours)
        self.state = Drafting(draft)
        return draft

    def _ensure_idle(self) -> None:
        if self.is_drafting:
            raise IllegalStateError("A draft is already open")

    def _require_draft(self) -> Draft:
        if not isinstance(self.state, Drafting):
            raise IllegalStateError("No draft is open")
        return self.state.draft
