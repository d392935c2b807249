# clinic_agenda/schemas/agenda/agenda.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import date, datetime

from ...models.appointment import AppointmentKind, AppointmentStatus, Modality, PresentationTag
from ...models.availability import SlotAvailability
from ...services.calendar.period_calculator import ViewMode


class ModeRequest(BaseModel):
    mode: ViewMode

class NavigateRequest(BaseModel):
    direction: Literal["prev", "next"]

class MonthCellRequest(BaseModel):
    date: date

class SlotClickRequest(BaseModel):
    date: date
    hour: Optional[float] = None
    offset_px: Optional[float] = None

class QuickCreateRequest(BaseModel):
    now: Optional[datetime] = None

class StatusRequest(BaseModel):
    status: AppointmentStatus

class DraftPatch(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    professional_id: Optional[str] = None
    kind: Optional[AppointmentKind] = None
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    modality: Optional[Modality] = None
    meeting_reference: Optional[str] = None
    label: Optional[str] = None
    notes: Optional[str] = None
    service_id: Optional[str] = None


class ViewStateResponse(BaseModel):
    mode: ViewMode
    anchor_date: date

class AppointmentResponse(BaseModel):
    id: str
    start: datetime
    end: datetime
    title: str
    professional_id: str
    professional_name: str
    kind: AppointmentKind
    modality: Optional[Modality] = None
    status: AppointmentStatus
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    meeting_reference: Optional[str] = None
    notes: Optional[str] = None
    service_id: Optional[str] = None
    presentation_tag: PresentationTag
    duration_minutes: int

class DraftResponse(BaseModel):
    start: datetime
    end: datetime
    professional_id: Optional[str] = None
    kind: AppointmentKind
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    modality: Optional[Modality] = None
    meeting_reference: Optional[str] = None
    label: Optional[str] = None
    notes: Optional[str] = None
    service_id: Optional[str] = None
    editing_id: Optional[str] = None
    overlapping_ids: List[str] = []
    out_of_hours: bool = False
    is_valid: bool = False
    issues: List[dict] = []

class PositionedAppointmentResponse(BaseModel):
    appointment: AppointmentResponse
    top_px: float
    height_px: float

class DayColumnResponse(BaseModel):
    date: date
    events: List[PositionedAppointmentResponse]
    out_of_range: List[AppointmentResponse] = []

class TimeRowResponse(BaseModel):
    hour: int
    label: str
    top_px: float
    availability: List[SlotAvailability] = []

class MonthCellResponse(BaseModel):
    date: date
    in_month: bool
    appointments: List[AppointmentResponse]

class RenderResponse(BaseModel):
    mode: ViewMode
    anchor_date: date
    title: str
    dates: List[date]
    time_rows: List[TimeRowResponse] = []
    week_rows: List[List[MonthCellResponse]] = []
    columns: List[DayColumnResponse] = []
    hidden_dates: List[date] = []

class NowIndicatorResponse(BaseModel):
    offset_px: Optional[float] = None

class DaySummaryResponse(BaseModel):
    date: date
    total: int
    remote: int
    next_appointment: Optional[AppointmentResponse] = None
    ends_at: Optional[datetime] = None
