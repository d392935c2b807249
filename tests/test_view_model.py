from datetime import date, datetime, timedelta

import pytest

from clinic_agenda.exceptions import IllegalStateError
from clinic_agenda.models.appointment import Appointment, AppointmentKind, Modality, PresentationTag
from clinic_agenda.models.availability import SlotAvailability, WeeklyAvailability
from clinic_agenda.services.appointments.appointment_index import AppointmentIndex
from clinic_agenda.services.calendar.period_calculator import ViewMode
from clinic_agenda.services.calendar.time_axis import TimeAxis
from clinic_agenda.services.calendar.view_model import CalendarViewModel, TimeRow, WeekRow


def make_appt(id, start, minutes=60, **kw):
    return Appointment(
        id=id,
        start=start,
        end=start + timedelta(minutes=minutes),
        title=f"Patient {id}",
        professional_id="p1",
        professional_name="Dr. Ana",
        **kw,
    )


def make_view(appointments=(), mode=ViewMode.WEEK, availability=None):
    index = AppointmentIndex(appointments)
    return CalendarViewModel(
        index,
        axis=TimeAxis(day_start=8, day_end=19, row_height=64, header_height=48),
        availability=availability,
        mode=mode,
        anchor_date=date(2024, 6, 12),
        today=lambda: date(2024, 6, 1),
    ), index


def test_week_render_positions_events():
    view, _ = make_view([make_appt("a1", datetime(2024, 6, 12, 14, 30), modality=Modality.REMOTE)])
    out = view.render()
    assert out.dates == tuple(date(2024, 6, 9) + timedelta(days=i) for i in range(7))
    assert len(out.columns) == 7
    wednesday = out.columns[3]
    assert wednesday.date == date(2024, 6, 12)
    [event] = wednesday.events
    assert event.top_px == 48 + 6.5 * 64
    assert event.height_px == 64
    assert event.tag == PresentationTag.REMOTE
    assert all(not col.events for i, col in enumerate(out.columns) if i != 3)


def test_render_is_idempotent():
    view, _ = make_view([make_appt("a1", datetime(2024, 6, 12, 9)), make_appt("a2", datetime(2024, 6, 14, 10))])
    assert view.render() == view.render()
    view.set_mode(ViewMode.MONTH)
    assert view.render() == view.render()


def test_render_depends_only_on_mode_and_anchor():
    view, _ = make_view([make_appt("a1", datetime(2024, 6, 12, 9))])
    before = view.render()
    view.navigate(1)
    view.navigate(-1)
    view.set_mode(ViewMode.DAY)
    view.set_mode(ViewMode.WEEK)
    assert view.render() == before


def test_column_events_sorted_by_start_then_insertion():
    view, _ = make_view([
        make_appt("late", datetime(2024, 6, 12, 16)),
        make_appt("tie-1", datetime(2024, 6, 12, 10)),
        make_appt("tie-2", datetime(2024, 6, 12, 10)),
    ], mode=ViewMode.DAY)
    [column] = view.render().columns
    assert [e.appointment.id for e in column.events] == ["tie-1", "tie-2", "late"]


def test_events_outside_visible_hours_are_reported_not_clamped():
    early = make_appt("early", datetime(2024, 6, 12, 7), minutes=90)
    late = make_appt("late", datetime(2024, 6, 12, 18, 30))
    inside = make_appt("inside", datetime(2024, 6, 12, 18))
    view, _ = make_view([early, late, inside], mode=ViewMode.DAY)
    [column] = view.render().columns
    assert [e.appointment.id for e in column.events] == ["inside"]
    assert [a.id for a in column.out_of_range] == ["early", "late"]
    assert all(e.top_px >= 48 for e in column.events)


def test_time_rows_cover_visible_hours():
    view, _ = make_view()
    rows = view.render().rows
    assert all(isinstance(r, TimeRow) for r in rows)
    assert [r.label for r in rows] == [f"{h:02d}:00" for h in range(8, 19)]
    assert rows[0].top_px == 48
    assert rows[0].availability == ()


def test_time_rows_flag_availability():
    availability = WeeklyAvailability.from_schedule([
        {"dayKey": "wednesday", "active": True, "start": "08:00", "end": "18:00", "lunchStart": "12:00", "lunchEnd": "13:00"},
        {"dayKey": "sunday", "active": False, "start": "", "end": "", "lunchStart": "", "lunchEnd": ""},
    ])
    view, _ = make_view(availability=availability)
    rows = {r.hour: r for r in view.render().rows}
    # columns run Sunday..Saturday, Wednesday is index 3
    assert rows[8].availability[3] == SlotAvailability.AVAILABLE
    assert rows[12].availability[3] == SlotAvailability.BREAK
    assert rows[18].availability[3] == SlotAvailability.OFF_HOURS
    assert rows[10].availability[0] == SlotAvailability.OFF_HOURS
    assert len(rows[10].availability) == 7


def test_mode_and_navigation_transitions():
    view, _ = make_view()
    view.set_mode(ViewMode.MONTH)
    assert view.anchor_date == date(2024, 6, 12)
    view.navigate(1)
    assert view.anchor_date == date(2024, 7, 12)
    view.set_mode(ViewMode.WEEK)
    view.navigate(-1)
    assert view.anchor_date == date(2024, 7, 5)
    view.jump_to_today()
    assert view.anchor_date == date(2024, 6, 1)
    assert view.mode == ViewMode.WEEK


def test_select_month_cell_drills_down_to_day():
    view, _ = make_view(mode=ViewMode.MONTH)
    state = view.select_month_cell(date(2024, 6, 20))
    assert state.mode == ViewMode.DAY
    assert state.anchor_date == date(2024, 6, 20)


def test_select_month_cell_only_from_month_view():
    view, _ = make_view(mode=ViewMode.WEEK)
    with pytest.raises(IllegalStateError):
        view.select_month_cell(date(2024, 6, 20))


def test_month_render_rows_and_hidden_days():
    view, _ = make_view([
        make_appt("a1", datetime(2024, 6, 12, 15)),
        make_appt("a0", datetime(2024, 6, 12, 9), kind=AppointmentKind.BLOCK),
        make_appt("hidden", datetime(2024, 6, 30, 9)),
    ], mode=ViewMode.MONTH)
    out = view.render()
    assert len(out.rows) == 5
    assert all(isinstance(r, WeekRow) and len(r.cells) == 7 for r in out.rows)
    assert out.columns == ()
    first = out.rows[0].cells[0]
    assert first.date == date(2024, 5, 26) and first.in_month is False
    cell = next(c for r in out.rows for c in r.cells if c.date == date(2024, 6, 12))
    assert [a.id for a in cell.appointments] == ["a0", "a1"]
    assert out.hidden_dates == (date(2024, 6, 30),)


def test_period_titles():
    view, _ = make_view(mode=ViewMode.WEEK)
    assert view.render().title == "Jun 09 - Jun 15, 2024"
    view.set_mode(ViewMode.MONTH)
    assert view.render().title == "June 2024"
    view.set_mode(ViewMode.DAY)
    assert view.render().title == "Wednesday, June 12, 2024"


def test_current_time_offset():
    view, _ = make_view(mode=ViewMode.WEEK)
    assert view.current_time_offset(datetime(2024, 6, 12, 14, 30)) == 48 + 6.5 * 64
    assert view.current_time_offset(datetime(2024, 6, 12, 20, 0)) is None
    assert view.current_time_offset(datetime(2024, 6, 20, 10, 0)) is None
    view.set_mode(ViewMode.MONTH)
    assert view.current_time_offset(datetime(2024, 6, 12, 14, 30)) is None
