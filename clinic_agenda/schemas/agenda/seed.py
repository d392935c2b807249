# clinic_agenda/schemas/agenda/seed.py
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime

from ...models.appointment import AppointmentKind, AppointmentStatus, Modality


class ProfessionalSeed(BaseModel):
    id: str
    name: str


class AppointmentSeed(BaseModel):
    id: str
    start: datetime
    end: Optional[datetime] = None
    duration_minutes: int = Field(default=50, gt=0)  # used when end is missing
    title: Optional[str] = None
    professional_id: str
    kind: AppointmentKind = AppointmentKind.CONSULTATION
    modality: Optional[Modality] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    meeting_reference: Optional[str] = None
    notes: Optional[str] = None
    service_id: Optional[str] = None

    @model_validator(mode="after")
    def _modality_only_for_consultations(self) -> "AppointmentSeed":
        if self.kind != AppointmentKind.CONSULTATION and self.modality is not None:
            raise ValueError("modality is only meaningful for consultations")
        return self


class ScheduleDaySeed(BaseModel):
    dayKey: str
    active: bool = False
    start: str = ""
    end: str = ""
    lunchStart: str = ""
    lunchEnd: str = ""


class AgendaSeed(BaseModel):
    professionals: List[ProfessionalSeed] = []
    appointments: List[AppointmentSeed] = []
    availability: Optional[List[ScheduleDaySeed]] = None
