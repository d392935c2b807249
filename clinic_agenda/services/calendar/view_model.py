import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Optional, Tuple, Union

from ...exceptions import IllegalStateError, TimeOutOfRangeError
from ...models.appointment import Appointment, PresentationTag
from ...models.availability import SlotAvailability, WeeklyAvailability
from ..appointments.appointment_index import AppointmentIndex, sorted_for_display
from .period_calculator import PeriodCalculator, ViewMode
from .time_axis import TimeAxis, fractional_hour

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarViewState:
    mode: ViewMode
    anchor_date: date


@dataclass(frozen=True)
class PositionedAppointment:
    appointment: Appointment
    top_px: float
    height_px: float

    @property
    def tag(self) -> PresentationTag:
        return self.appointment.presentation_tag


@dataclass(frozen=True)
class DayColumn:
    date: date
    events: Tuple[PositionedAppointment, ...]
    # appointments that fall outside the visible hours; reported, never clamped
    out_of_range: Tuple[Appointment, ...] = ()


@dataclass(frozen=True)
class TimeRow:
    hour: int
    label: str
    top_px: float
    availability: Tuple[SlotAvailability, ...] = ()


@dataclass(frozen=True)
class MonthCell:
    date: date
    in_month: bool
    appointments: Tuple[Appointment, ...]


@dataclass(frozen=True)
class WeekRow:
    cells: Tuple[MonthCell, ...]


@dataclass(frozen=True)
class CalendarRender:
    mode: ViewMode
    anchor_date: date
    title: str
    dates: Tuple[date, ...]
    rows: Tuple[Union[TimeRow, WeekRow], ...]
    columns: Tuple[DayColumn, ...] = ()
    hidden_dates: Tuple[date, ...] = ()


def period_title(mode: ViewMode, anchor: date, dates: Tuple[date, ...]) -> str:
    if mode == ViewMode.DAY:
        return anchor.strftime("%A, %B %d, %Y")
    if mode == ViewMode.MONTH:
        return anchor.strftime("%B %Y")
    first, last = dates[0], dates[-1]
    if first.year != last.year:
        return f"{first.strftime('%b %d, %Y')} - {last.strftime('%b %d, %Y')}"
    return f"{first.strftime('%b %d')} - {last.strftime('%b %d, %Y')}"


class CalendarViewModel:
    """Owns the (mode, anchor date) pair and projects it into a renderable calendar.

    render() reads nothing but the current state, the index and the injected
    availability, so two calls without a mutation in between return equal results.
    """

    def __init__(
        self,
        index: AppointmentIndex,
        periods: Optional[PeriodCalculator] = None,
        axis: Optional[TimeAxis] = None,
        availability: Optional[WeeklyAvailability] = None,
        mode: ViewMode = ViewMode.WEEK,
        anchor_date: Optional[date] = None,
        today: Callable[[], date] = date.today,
    ):
        self.index = index
        self.periods = periods or PeriodCalculator()
        self.axis = axis or TimeAxis()
        self.availability = availability
        self._today = today
        self.state = CalendarViewState(mode=ViewMode(mode), anchor_date=anchor_date or today())

    @property
    def mode(self) -> ViewMode:
        return self.state.mode

    @property
    def anchor_date(self) -> date:
        return self.state.anchor_date

    # Transitions

    def set_mode(self, mode: ViewMode) -> CalendarViewState:
        self.state = replace(self.state, mode=ViewMode(mode))
        logger.debug(f"View mode -> {self.state.mode.value}")
        return self.state

    def navigate(self, direction: int) -> CalendarViewState:
        anchor = self.periods.advance(self.state.anchor_date, self.state.mode, direction)
        self.state = replace(self.state, anchor_date=anchor)
        logger.debug(f"Navigated {direction:+d} {self.state.mode.value} -> {anchor.isoformat()}")
        return self.state

    def jump_to_today(self) -> CalendarViewState:
        self.state = replace(self.state, anchor_date=self._today())
        return self.state

    def select_month_cell(self, day: date) -> CalendarViewState:
        if self.state.mode != ViewMode.MONTH:
            raise IllegalStateError("Month cells can only be selected from the month view")
        self.state = CalendarViewState(mode=ViewMode.DAY, anchor_date=day)
        return self.state

    def show_day(self, day: date) -> CalendarViewState:
        self.state = CalendarViewState(mode=ViewMode.DAY, anchor_date=day)
        return self.state

    # Projection

    def visible_dates(self) -> Tuple[date, ...]:
        return tuple(self.periods.visible_dates(self.state.anchor_date, self.state.mode))

    def render(self) -> CalendarRender:
        mode, anchor = self.state.mode, self.state.anchor_date
        dates = self.visible_dates()
        title = period_title(mode, anchor, dates)
        if mode == ViewMode.MONTH:
            return CalendarRender(
                mode=mode,
                anchor_date=anchor,
                title=title,
                dates=dates,
                rows=self._week_rows(anchor, dates),
                hidden_dates=tuple(self.periods.month_hidden_dates(anchor)),
            )
        return CalendarRender(
            mode=mode,
            anchor_date=anchor,
            title=title,
            dates=dates,
            rows=self._time_rows(dates),
            columns=tuple(self._day_column(d) for d in dates),
        )

    def position(self, appointment: Appointment) -> PositionedAppointment:
        """Raises TimeOutOfRangeError when the box leaves the visible window."""
        start_hour = fractional_hour(appointment.start)
        end_hour = start_hour + (appointment.end - appointment.start).total_seconds() / 3600
        top = self.axis.time_to_offset(start_hour)
        height = self.axis.span_to_height(start_hour, end_hour)
        return PositionedAppointment(appointment=appointment, top_px=top, height_px=height)

    def current_time_offset(self, now: datetime) -> Optional[float]:
        """Vertical offset of the now-line, or None when it is not on screen."""
        if self.state.mode == ViewMode.MONTH or now.date() not in self.visible_dates():
            return None
        try:
            return self.axis.datetime_to_offset(now)
        except TimeOutOfRangeError:
            return None

    def _day_column(self, day: date) -> DayColumn:
        events, hidden = [], []
        for appt in sorted_for_display(self.index.appointments_on(day)):
            try:
                events.append(self.position(appt))
            except TimeOutOfRangeError:
                hidden.append(appt)
        return DayColumn(date=day, events=tuple(events), out_of_range=tuple(hidden))

    def _time_rows(self, dates: Tuple[date, ...]) -> Tuple[TimeRow, ...]:
        rows = []
        for hour in self.axis.hours:
            availability: Tuple[SlotAvailability, ...] = ()
            if self.availability is not None:
                availability = tuple(
                    self.availability.status_at(datetime(d.year, d.month, d.day, hour)) for d in dates
                )
            rows.append(
                TimeRow(
                    hour=hour,
                    label=f"{hour:02d}:00",
                    top_px=self.axis.time_to_offset(hour),
                    availability=availability,
                )
            )
        return tuple(rows)

    def _week_rows(self, anchor: date, dates: Tuple[date, ...]) -> Tuple[WeekRow, ...]:
        cells = [
            MonthCell(
                date=d,
                in_month=(d.year, d.month) == (anchor.year, anchor.month),
                appointments=tuple(sorted_for_display(self.index.appointments_on(d))),
            )
            for d in dates
        ]
        return tuple(WeekRow(cells=tuple(cells[i:i + 7])) for i in range(0, len(cells), 7))
