# Patient aggregate domain module
from pcms.domain.patients.models import (
    ALLOWED_DOCUMENT_TYPES,
    Attachment,
    DocumentType,
    MedicalCondition,
    Patient,
)

__all__ = [
    "ALLOWED_DOCUMENT_TYPES",
    "Attachment",
    "DocumentType",
    "MedicalCondition",
    "Patient",
]
