import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from ...application.ports.id_generator import IdGenerator, TokenGenerator
from ...exceptions import InvalidRangeError, UnresolvedProfessionalError, ValidationError
from ...models.appointment import (
    Appointment,
    AppointmentStatus,
    ConsultationDetails,
    Draft,
    Modality,
)

logger = logging.getLogger(__name__)


@dataclass
class AppointmentFactory:
    """Turns a validated draft into an Appointment.

    Raises InvalidRangeError, UnresolvedProfessionalError or ValidationError;
    nothing is stored here, the caller hands the result to the index.
    """

    id_generator: IdGenerator
    token_generator: TokenGenerator
    meeting_url_template: str = "https://meet.psimanager.com/{token}"

    def generate_meeting_reference(self) -> str:
        return self.meeting_url_template.format(token=self.token_generator.new_token())

    def validate(self, draft: Draft, professional_directory: Mapping[str, str]) -> str:
        """Return the resolved professional name or raise."""
        if draft.end <= draft.start:
            raise InvalidRangeError(draft.start, draft.end)
        issues = [(f, m) for f, m in draft.issues if f != "professional_id"]
        if issues:
            raise ValidationError(issues)
        if not draft.professional_id or draft.professional_id not in professional_directory:
            raise UnresolvedProfessionalError(draft.professional_id)
        return professional_directory[draft.professional_id]

    def create(self, draft: Draft, professional_directory: Mapping[str, str]) -> Appointment:
        professional_name = self.validate(draft, professional_directory)
        appointment = Appointment(
            id=self.id_generator.new_id(),
            status=AppointmentStatus.SCHEDULED,
            professional_name=professional_name,
            **self._fields_from(draft),
        )
        logger.debug(f"Built appointment {appointment.id} ({appointment.presentation_tag.value})")
        return appointment

    def patch_for(self, draft: Draft, professional_directory: Mapping[str, str],
                  current_reference: Optional[str] = None) -> dict:
        """Field patch applying an edit draft to an existing appointment (id and status untouched)."""
        professional_name = self.validate(draft, professional_directory)
        patch = self._fields_from(draft, current_reference)
        patch["professional_name"] = professional_name
        return patch

    def _fields_from(self, draft: Draft, current_reference: Optional[str] = None) -> dict:
        details = draft.details
        out = {
            "start": draft.start,
            "end": draft.end,
            "professional_id": draft.professional_id,
            "kind": details.kind,
            "notes": draft.notes,
            "service_id": draft.service_id,
            "modality": None,
            "patient_id": None,
            "patient_name": None,
            "meeting_reference": None,
        }
        if isinstance(details, ConsultationDetails):
            patient_name = (details.patient_name or "").strip() or None
            out.update(
                title=patient_name or details.patient_id,
                modality=details.modality,
                patient_id=details.patient_id,
                patient_name=patient_name,
            )
            if details.modality == Modality.REMOTE:
                out["meeting_reference"] = (
                    details.meeting_reference or current_reference or self.generate_meeting_reference()
                )
        else:
            out["title"] = (details.label or "").strip() or type(details)().label
        return out
