from dataclasses import replace
from typing import List
from fastapi import APIRouter, Depends, Request
import logging

from ..application.services.agenda_service import AgendaService, DaySummary
from ..exceptions import IllegalStateError, ValidationError, create_success_response
from ..models.appointment import (
    Appointment,
    AppointmentKind,
    BlockDetails,
    ConsultationDetails,
    Draft,
    PersonalDetails,
)
from ..schemas.agenda.agenda import (
    AppointmentResponse,
    DayColumnResponse,
    DaySummaryResponse,
    DraftPatch,
    DraftResponse,
    ModeRequest,
    MonthCellRequest,
    MonthCellResponse,
    NavigateRequest,
    NowIndicatorResponse,
    PositionedAppointmentResponse,
    QuickCreateRequest,
    RenderResponse,
    SlotClickRequest,
    StatusRequest,
    TimeRowResponse,
    ViewStateResponse,
)
from ..services.calendar.view_model import CalendarRender, CalendarViewState, TimeRow, WeekRow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agenda", tags=["Agenda"])

_DRAFT_FIELDS = ("start", "end", "duration_minutes", "professional_id", "notes", "service_id")
_EMPTY_DETAILS = {
    AppointmentKind.CONSULTATION: ConsultationDetails,
    AppointmentKind.BLOCK: BlockDetails,
    AppointmentKind.PERSONAL: PersonalDetails,
}


def get_agenda_service(request: Request) -> AgendaService:
    return request.app.state.agenda


def appointment_out(a: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=a.id,
        start=a.start,
        end=a.end,
        title=a.title,
        professional_id=a.professional_id,
        professional_name=a.professional_name,
        kind=a.kind,
        modality=a.modality,
        status=a.status,
        patient_id=a.patient_id,
        patient_name=a.patient_name,
        meeting_reference=a.meeting_reference,
        notes=a.notes,
        service_id=a.service_id,
        presentation_tag=a.presentation_tag,
        duration_minutes=a.duration_minutes,
    )


def draft_out(d: Draft) -> DraftResponse:
    details = d.details
    out = DraftResponse(
        start=d.start,
        end=d.end,
        professional_id=d.professional_id,
        kind=d.kind,
        notes=d.notes,
        service_id=d.service_id,
        editing_id=d.editing_id,
        overlapping_ids=list(d.overlapping_ids),
        out_of_hours=d.out_of_hours,
        is_valid=d.is_valid,
        issues=[{"field": f, "message": m} for f, m in d.issues],
    )
    if isinstance(details, ConsultationDetails):
        out.patient_id = details.patient_id
        out.patient_name = details.patient_name
        out.modality = details.modality
        out.meeting_reference = details.meeting_reference
    else:
        out.label = details.label
    return out


def render_out(r: CalendarRender) -> RenderResponse:
    return RenderResponse(
        mode=r.mode,
        anchor_date=r.anchor_date,
        title=r.title,
        dates=list(r.dates),
        time_rows=[
            TimeRowResponse(hour=row.hour, label=row.label, top_px=row.top_px, availability=list(row.availability))
            for row in r.rows if isinstance(row, TimeRow)
        ],
        week_rows=[
            [MonthCellResponse(date=c.date, in_month=c.in_month, appointments=[appointment_out(a) for a in c.appointments])
             for c in row.cells]
            for row in r.rows if isinstance(row, WeekRow)
        ],
        columns=[
            DayColumnResponse(
                date=col.date,
                events=[
                    PositionedAppointmentResponse(appointment=appointment_out(e.appointment), top_px=e.top_px, height_px=e.height_px)
                    for e in col.events
                ],
                out_of_range=[appointment_out(a) for a in col.out_of_range],
            )
            for col in r.columns
        ],
        hidden_dates=list(r.hidden_dates),
    )


def state_out(s: CalendarViewState) -> ViewStateResponse:
    return ViewStateResponse(mode=s.mode, anchor_date=s.anchor_date)


def summary_out(s: DaySummary) -> DaySummaryResponse:
    return DaySummaryResponse(
        date=s.date,
        total=s.total,
        remote=s.remote,
        next_appointment=appointment_out(s.next_appointment) if s.next_appointment else None,
        ends_at=s.ends_at,
    )


def draft_changes(draft: Draft, patch: DraftPatch) -> dict:
    """Translate a flat form patch into controller edits, switching the draft variant on a kind change."""
    data = patch.model_dump(exclude_unset=True)
    nulls = [name for name in ("start", "end") if name in data and data[name] is None]
    if nulls:
        raise ValidationError([(name, "cannot be null") for name in nulls])
    if data.get("duration_minutes", 0) is None:
        data.pop("duration_minutes")
    changes = {k: data.pop(k) for k in _DRAFT_FIELDS if k in data}
    kind = data.pop("kind", None) or draft.kind
    details = draft.details if kind == draft.kind else _EMPTY_DETAILS[kind]()
    if data.get("modality", "") is None:
        data.pop("modality")
    if data:
        allowed = {"label"} if kind != AppointmentKind.CONSULTATION else {"patient_id", "patient_name", "modality", "meeting_reference"}
        rejected = sorted(set(data) - allowed)
        if rejected:
            raise ValidationError([(name, f"not valid for a {kind.value}") for name in rejected])
        details = replace(details, **data)
    if details != draft.details:
        changes["details"] = details
    return changes


@router.get("/render", response_model=RenderResponse)
def render(agenda: AgendaService = Depends(get_agenda_service)):
    return render_out(agenda.render())


@router.get("/now-indicator", response_model=NowIndicatorResponse)
def now_indicator(agenda: AgendaService = Depends(get_agenda_service)):
    return NowIndicatorResponse(offset_px=agenda.current_time_offset())


@router.post("/mode", response_model=ViewStateResponse)
def set_mode(body: ModeRequest, agenda: AgendaService = Depends(get_agenda_service)):
    return state_out(agenda.set_mode(body.mode))


@router.post("/navigate", response_model=ViewStateResponse)
def navigate(body: NavigateRequest, agenda: AgendaService = Depends(get_agenda_service)):
    return state_out(agenda.navigate(body.direction))


@router.post("/today", response_model=ViewStateResponse)
def jump_to_today(agenda: AgendaService = Depends(get_agenda_service)):
    return state_out(agenda.jump_to_today())


@router.post("/month-cell", response_model=ViewStateResponse)
def select_month_cell(body: MonthCellRequest, agenda: AgendaService = Depends(get_agenda_service)):
    return state_out(agenda.select_month_cell(body.date))


@router.post("/slots/click", response_model=DraftResponse)
def slot_click(body: SlotClickRequest, agenda: AgendaService = Depends(get_agenda_service)):
    if body.hour is not None:
        return draft_out(agenda.on_slot_click(body.date, body.hour))
    if body.offset_px is not None:
        return draft_out(agenda.on_grid_click(body.date, body.offset_px))
    raise ValidationError([("hour", "hour or offset_px is required")])


@router.post("/quick-create", response_model=DraftResponse)
def quick_create(body: QuickCreateRequest, agenda: AgendaService = Depends(get_agenda_service)):
    return draft_out(agenda.on_quick_create(body.now))


@router.get("/draft", response_model=DraftResponse)
def get_draft(agenda: AgendaService = Depends(get_agenda_service)):
    if agenda.draft is None:
        raise IllegalStateError("No draft is open")
    return draft_out(agenda.draft)


@router.patch("/draft", response_model=DraftResponse)
def edit_draft(body: DraftPatch, agenda: AgendaService = Depends(get_agenda_service)):
    if agenda.draft is None:
        raise IllegalStateError("No draft is open")
    return draft_out(agenda.edit_draft(**draft_changes(agenda.draft, body)))


@router.post("/draft/save", response_model=AppointmentResponse)
def save_draft(agenda: AgendaService = Depends(get_agenda_service)):
    outcome = agenda.save()
    if not outcome.saved:
        raise outcome.error
    return appointment_out(outcome.appointment)


@router.post("/draft/cancel")
def cancel_draft(agenda: AgendaService = Depends(get_agenda_service)):
    agenda.cancel()
    return create_success_response({"message": "Draft discarded"})


@router.post("/appointments/{appointment_id}/edit", response_model=DraftResponse)
def edit_appointment(appointment_id: str, agenda: AgendaService = Depends(get_agenda_service)):
    return draft_out(agenda.open_existing(appointment_id))


@router.delete("/appointments/{appointment_id}")
def remove_appointment(appointment_id: str, agenda: AgendaService = Depends(get_agenda_service)):
    agenda.remove(appointment_id)
    return create_success_response({"message": "Appointment removed", "id": appointment_id})


@router.put("/appointments/{appointment_id}/status", response_model=AppointmentResponse)
def update_status(appointment_id: str, body: StatusRequest, agenda: AgendaService = Depends(get_agenda_service)):
    return appointment_out(agenda.update_status(appointment_id, body.status))


@router.get("/summary", response_model=DaySummaryResponse)
def day_summary(agenda: AgendaService = Depends(get_agenda_service)):
    return summary_out(agenda.day_summary())


@router.get("/remote-sessions", response_model=List[AppointmentResponse])
def remote_sessions(agenda: AgendaService = Depends(get_agenda_service)):
    return [appointment_out(a) for a in agenda.upcoming_remote()]
