"""Field-by-field conversions between ORM rows and transfer schemas."""
from typing import Callable, Optional

from pcms.api.v1.patients.schemas import (
    AttachmentResponse,
    MedicalConditionSchema,
    PatientCreate,
    PatientResponse,
)
from pcms.domain.patients.models import Attachment, MedicalCondition, Patient


def condition_to_schema(condition: MedicalCondition) -> MedicalConditionSchema:
    return MedicalConditionSchema(
        condition=condition.condition,
        notes=condition.notes,
        since=condition.since,
        frequency=condition.frequency,
        history=condition.history,
        status=condition.status,
    )


def condition_from_schema(schema: MedicalConditionSchema) -> MedicalCondition:
    return MedicalCondition(
        condition=schema.condition,
        notes=schema.notes,
        since=schema.since,
        frequency=schema.frequency,
        history=schema.history,
        status=schema.status,
    )


def apply_patient_fields(patient: Patient, data: PatientCreate) -> None:
    """Overwrite the scalar profile fields; the UID and internal key are left alone"""
    patient.name = data.name
    patient.age = data.age
    patient.contact_phone = data.contact_phone
    patient.contact_email = data.contact_email
    patient.contact_address = data.contact_address


def attachment_to_response(attachment: Attachment, url: Optional[str]) -> AttachmentResponse:
    return AttachmentResponse(
        attachment_id=attachment.attachment_uid,
        file_name=attachment.filename,
        document_type=attachment.document_type,
        uploaded_at=attachment.uploaded_at,
        url=url,
    )


def patient_to_response(patient: Patient, url_for: Callable[[str], Optional[str]]) -> PatientResponse:
    """Build the client-facing record, resolving each attachment key through ``url_for``"""
    return PatientResponse(
        patient_id=patient.patient_uid,
        name=patient.name,
        age=patient.age,
        contact_phone=patient.contact_phone,
        contact_email=patient.contact_email,
        contact_address=patient.contact_address,
        medical_history=[condition_to_schema(c) for c in patient.medical_history],
        attachments=[attachment_to_response(a, url_for(a.s3_key)) for a in patient.attachments],
    )
