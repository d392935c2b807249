# clinic_agenda/models/appointment.py
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union


class AppointmentKind(str, Enum):
    CONSULTATION = "consultation"
    BLOCK = "block"
    PERSONAL = "personal"


class Modality(str, Enum):
    IN_PERSON = "in-person"
    REMOTE = "remote"


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELED = "canceled"


class PresentationTag(str, Enum):
    BLOCK = "block"
    IN_PERSON = "in_person"
    REMOTE = "remote"
    DEFAULT = "default"


BLOCK_LABEL = "Blocked"
PERSONAL_LABEL = "Personal"


def presentation_tag_for(kind: AppointmentKind, modality: Optional[Modality]) -> PresentationTag:
    if kind == AppointmentKind.BLOCK:
        return PresentationTag.BLOCK
    if kind == AppointmentKind.CONSULTATION:
        if modality == Modality.REMOTE:
            return PresentationTag.REMOTE
        if modality == Modality.IN_PERSON:
            return PresentationTag.IN_PERSON
    return PresentationTag.DEFAULT


@dataclass(frozen=True)
class Appointment:
    id: str
    start: datetime
    end: datetime
    title: str
    professional_id: str
    professional_name: str
    kind: AppointmentKind = AppointmentKind.CONSULTATION
    modality: Optional[Modality] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    meeting_reference: Optional[str] = None
    notes: Optional[str] = None
    service_id: Optional[str] = None

    @property
    def presentation_tag(self) -> PresentationTag:
        return presentation_tag_for(self.kind, self.modality)

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    @property
    def is_remote(self) -> bool:
        return self.kind == AppointmentKind.CONSULTATION and self.modality == Modality.REMOTE


# Draft variants. A draft carries exactly one of these, so a block can never hold a modality.

@dataclass(frozen=True)
class ConsultationDetails:
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    modality: Modality = Modality.IN_PERSON
    meeting_reference: Optional[str] = None

    kind = AppointmentKind.CONSULTATION


@dataclass(frozen=True)
class BlockDetails:
    label: str = BLOCK_LABEL

    kind = AppointmentKind.BLOCK


@dataclass(frozen=True)
class PersonalDetails:
    label: str = PERSONAL_LABEL

    kind = AppointmentKind.PERSONAL


DraftDetails = Union[ConsultationDetails, BlockDetails, PersonalDetails]


@dataclass(frozen=True)
class Draft:
    start: datetime
    end: datetime
    professional_id: Optional[str]
    details: DraftDetails = field(default_factory=ConsultationDetails)
    notes: Optional[str] = None
    service_id: Optional[str] = None
    editing_id: Optional[str] = None
    overlapping_ids: Tuple[str, ...] = ()
    # set when the range leaves the professional's working hours; never blocks a save
    out_of_hours: bool = False

    @property
    def kind(self) -> AppointmentKind:
        return self.details.kind

    @property
    def range_error(self) -> Optional[str]:
        if self.end <= self.start:
            return "end must be after start"
        return None

    @property
    def issues(self) -> List[Tuple[str, str]]:
        """Validation flags for the open form; never raises."""
        found = []
        if self.range_error:
            found.append(("end", self.range_error))
        if not self.professional_id:
            found.append(("professional_id", "professional is required"))
        if isinstance(self.details, ConsultationDetails):
            if not (self.details.patient_id or (self.details.patient_name or "").strip()):
                found.append(("patient", "patient or title is required for a consultation"))
        return found

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def with_range(self, start: datetime, end: datetime) -> "Draft":
        return replace(self, start=start, end=end)

    def with_duration(self, minutes: int) -> "Draft":
        return replace(self, end=self.start + timedelta(minutes=minutes))
