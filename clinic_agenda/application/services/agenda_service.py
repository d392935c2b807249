import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Union

from ...config import Settings, get_settings
from ...exceptions import IllegalStateError, InvalidStatusTransitionError
from ...models.appointment import Appointment, AppointmentStatus, Draft
from ...models.availability import WeeklyAvailability
from ...services.appointments.appointment_factory import AppointmentFactory
from ...services.appointments.appointment_index import AppointmentIndex, sorted_for_display
from ...services.appointments.slot_controller import SaveOutcome, SlotInteractionController
from ...services.calendar.period_calculator import PeriodCalculator, ViewMode
from ...services.calendar.time_axis import TimeAxis
from ...services.calendar.view_model import CalendarRender, CalendarViewModel, CalendarViewState
from ..ports.id_generator import IdGenerator, TokenGenerator

logger = logging.getLogger(__name__)

DIRECTIONS = {"prev": -1, "next": 1}
TERMINAL_STATUSES = {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED}


@dataclass(frozen=True)
class DaySummary:
    date: date
    total: int
    remote: int
    next_appointment: Optional[Appointment]
    ends_at: Optional[datetime]


@dataclass
class AgendaService:
    """One agenda session: the navigation and mutation surface the UI talks to.

    Callers serialize access; nothing here is thread-safe.
    """

    index: AppointmentIndex
    view: CalendarViewModel
    slots: SlotInteractionController
    professionals: Dict[str, str] = field(default_factory=dict)
    clock: Callable[[], datetime] = datetime.now

    @classmethod
    def build(
        cls,
        appointments: Iterable[Appointment],
        professionals: Dict[str, str],
        id_generator: IdGenerator,
        token_generator: TokenGenerator,
        availability: Optional[WeeklyAvailability] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
        mode: ViewMode = ViewMode.WEEK,
    ) -> "AgendaService":
        s = settings or get_settings()
        index = AppointmentIndex(appointments)
        axis = TimeAxis(
            day_start=s.AGENDA_DAY_START_HOUR,
            day_end=s.AGENDA_DAY_END_HOUR,
            row_height=s.AGENDA_ROW_HEIGHT_PX,
            header_height=s.AGENDA_HEADER_HEIGHT_PX,
            granularity_minutes=s.AGENDA_SLOT_GRANULARITY_MINUTES,
        )
        periods = PeriodCalculator(first_weekday=s.AGENDA_FIRST_WEEKDAY, month_weeks=s.MONTH_GRID_WEEKS)
        view = CalendarViewModel(
            index,
            periods=periods,
            axis=axis,
            availability=availability,
            mode=mode,
            today=lambda: clock().date(),
        )
        factory = AppointmentFactory(
            id_generator=id_generator,
            token_generator=token_generator,
            meeting_url_template=s.MEETING_URL_TEMPLATE,
        )
        default_professional = s.DEFAULT_PROFESSIONAL_ID
        if default_professional is None and len(professionals) == 1:
            default_professional = next(iter(professionals))
        slots = SlotInteractionController(
            index,
            factory,
            professionals,
            default_professional_id=default_professional,
            default_duration_minutes=s.AGENDA_DEFAULT_DURATION_MINUTES,
            time_axis=axis,
            availability=availability,
        )
        logger.info(f"Agenda session ready with {len(index)} appointments and {len(professionals)} professionals")
        return cls(index=index, view=view, slots=slots, professionals=professionals, clock=clock)

    # Navigation surface

    def render(self) -> CalendarRender:
        return self.view.render()

    def set_mode(self, mode: Union[ViewMode, str]) -> CalendarViewState:
        mode = ViewMode(mode)
        if mode == ViewMode.MONTH and self.slots.is_drafting:
            raise IllegalStateError("Close the open draft before switching to the month view")
        return self.view.set_mode(mode)

    def navigate(self, direction: Union[int, str]) -> CalendarViewState:
        if isinstance(direction, str):
            if direction not in DIRECTIONS:
                raise ValueError("direction must be 'prev' or 'next'")
            direction = DIRECTIONS[direction]
        return self.view.navigate(direction)

    def jump_to_today(self) -> CalendarViewState:
        return self.view.jump_to_today()

    def select_month_cell(self, day: date) -> CalendarViewState:
        return self.view.select_month_cell(day)

    def current_time_offset(self, now: Optional[datetime] = None) -> Optional[float]:
        return self.view.current_time_offset(now or self.clock())

    # Mutation surface

    @property
    def draft(self) -> Optional[Draft]:
        return self.slots.draft

    def on_slot_click(self, day: date, hour: float) -> Draft:
        if self.view.mode == ViewMode.MONTH:
            raise IllegalStateError("Slots can only be clicked in the day or week view")
        return self.slots.on_slot_click(day, hour)

    def on_grid_click(self, day: date, offset_px: float) -> Draft:
        if self.view.mode == ViewMode.MONTH:
            raise IllegalStateError("Slots can only be clicked in the day or week view")
        return self.slots.on_grid_click(day, offset_px)

    def on_quick_create(self, now: Optional[datetime] = None) -> Draft:
        now = now or self.clock()
        if self.view.mode == ViewMode.MONTH:
            self.view.show_day(now.date())
        return self.slots.on_quick_create(now)

    def open_existing(self, appointment_id: str) -> Draft:
        if self.view.mode == ViewMode.MONTH:
            self.view.show_day(self.index.get(appointment_id).start.date())
        return self.slots.open_existing(appointment_id)

    def edit_draft(self, **changes) -> Draft:
        return self.slots.edit(**changes)

    def save(self, draft: Optional[Draft] = None) -> SaveOutcome:
        return self.slots.save(draft)

    def cancel(self) -> None:
        self.slots.cancel()

    def remove(self, appointment_id: str) -> Appointment:
        removed = self.index.remove(appointment_id)
        self.slots.discard_if_editing(appointment_id)
        return removed

    def update_status(self, appointment_id: str, status: Union[AppointmentStatus, str]) -> Appointment:
        status = AppointmentStatus(status)
        current = self.index.get(appointment_id)
        if current.status == status:
            raise InvalidStatusTransitionError(f"Appointment is already {status.value}")
        if current.status in TERMINAL_STATUSES:
            raise InvalidStatusTransitionError(f"Cannot change a {current.status.value} appointment")
        updated = self.index.update(appointment_id, {"status": status})
        logger.info(f"Appointment {appointment_id} status -> {status.value}")
        return updated

    # Read models

    def day_summary(self, day: Optional[date] = None, now: Optional[datetime] = None) -> DaySummary:
        now = now or self.clock()
        day = day or now.date()
        todays = [a for a in sorted_for_display(self.index.appointments_on(day))
                  if a.status != AppointmentStatus.CANCELED]
        upcoming = [a for a in todays if a.status == AppointmentStatus.SCHEDULED and a.start > now]
        return DaySummary(
            date=day,
            total=len(todays),
            remote=sum(1 for a in todays if a.is_remote),
            next_appointment=upcoming[0] if upcoming else None,
            ends_at=max((a.end for a in todays), default=None),
        )

    def upcoming_remote(self, now: Optional[datetime] = None) -> List[Appointment]:
        now = now or self.clock()
        return sorted_for_display(
            a for a in self.index
            if a.is_remote and a.status == AppointmentStatus.SCHEDULED and a.start >= now
        )
