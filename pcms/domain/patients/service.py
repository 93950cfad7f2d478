from dataclasses import dataclass
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from pcms.core.config import settings
from pcms.core.exceptions import ValidationError
from pcms.domain.patients.models import (
    ALLOWED_DOCUMENT_TYPES,
    MAX_FILENAME_LENGTH,
    Attachment,
    DocumentType,
    Patient,
)
from pcms.domain.patients.repository import PatientRepository
from pcms.domain.patients.mapping import (
    apply_patient_fields,
    condition_from_schema,
    patient_to_response,
)
from pcms.api.v1.patients.schemas import PatientCreate, PatientResponse
from pcms.infrastructure.object_store import ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class UploadedDocument:
    """A file received with a create/update request"""
    filename: str
    content_type: Optional[str]
    data: bytes


def build_attachment_key(patient_uid: uuid.UUID, document_type: str, attachment_uid: uuid.UUID, filename: str) -> str:
    return f"patients/{patient_uid}/{document_type}/{attachment_uid}/{filename}"


def resolve_document_types(files: List[UploadedDocument], document_types: List[str]) -> List[str]:
    """Pair every file with a validated type; blank types become UNKNOWN

    Runs before anything is stored, so a rejected file never reaches the object store.
    """
    if len(files) != len(document_types):
        raise ValidationError(
            message="Each uploaded file must have a corresponding document type.",
            details={"files": len(files), "document_types": len(document_types)}
        )

    resolved = []
    for file, document_type in zip(files, document_types):
        if len(file.filename) > MAX_FILENAME_LENGTH:
            raise ValidationError(
                message=f"File name '{file.filename[:40]}...' is longer than {MAX_FILENAME_LENGTH} characters.",
                details={"max_length": MAX_FILENAME_LENGTH, "length": len(file.filename)},
                error_code="FILENAME_TOO_LONG"
            )
        document_type = (document_type or "").strip()
        if document_type and document_type not in ALLOWED_DOCUMENT_TYPES:
            raise ValidationError(
                message=(
                    f"Invalid document type '{document_type}' for file '{file.filename}'. "
                    f"Allowed values: {', '.join(ALLOWED_DOCUMENT_TYPES)}"
                ),
                details={"file": file.filename, "document_type": document_type},
                error_code="INVALID_DOCUMENT_TYPE"
            )
        resolved.append(document_type or DocumentType.UNKNOWN.value)
    return resolved


class PatientService:
    """Service layer for the patient aggregate: profile, medical history and attachments"""

    def __init__(
        self,
        db: AsyncSession,
        object_store: ObjectStore,
        url_expires_in: int = settings.PRESIGNED_URL_EXPIRE_SECONDS
    ):
        self.db = db
        self.patient_repo = PatientRepository(db)
        self.object_store = object_store
        self.url_expires_in = url_expires_in

    def _presign(self, key: str) -> Optional[str]:
        if not key:
            return None
        return self.object_store.generate_presigned_url(key, self.url_expires_in)

    def _to_response(self, patient: Patient) -> PatientResponse:
        return patient_to_response(patient, self._presign)

    def _new_patient(self, patient_data: PatientCreate) -> Patient:
        patient = Patient(patient_uid=uuid.uuid4())
        apply_patient_fields(patient, patient_data)
        patient.medical_history = [condition_from_schema(c) for c in patient_data.medical_history]
        return patient

    async def _upload_attachments(
        self,
        patient: Patient,
        files: List[UploadedDocument],
        document_types: List[str]
    ) -> None:
        # One file at a time; a failed upload aborts the request without undoing earlier ones
        for file, document_type in zip(files, document_types):
            attachment_uid = uuid.uuid4()
            s3_key = build_attachment_key(patient.patient_uid, document_type, attachment_uid, file.filename)

            await self.object_store.put_object(file.data, s3_key, file.content_type)

            self.patient_repo.add_attachment(patient, Attachment(
                attachment_uid=attachment_uid,
                filename=file.filename,
                document_type=document_type,
                s3_key=s3_key,
                attachment_metadata={
                    "original_filename": file.filename,
                    "document_type": document_type,
                    "uploaded_by": "system"
                }
            ))

    async def list_patients(self, page: int, page_size: int) -> List[PatientResponse]:
        """Get one page of patients ordered by name"""
        patients = await self.patient_repo.get_page(skip=(page - 1) * page_size, limit=page_size)
        return [self._to_response(patient) for patient in patients]

    async def count_patients(self) -> int:
        return await self.patient_repo.count()

    async def get_patient(self, patient_uid: uuid.UUID) -> Optional[PatientResponse]:
        """Get patient by UID with presigned attachment URLs"""
        patient = await self.patient_repo.get_by_uid(patient_uid)
        if patient is None:
            return None
        return self._to_response(patient)

    async def create_patient(self, patient_data: PatientCreate) -> PatientResponse:
        """Create a new patient with its medical history"""
        patient = await self.patient_repo.create(self._new_patient(patient_data))
        logger.info(f"Created patient {patient.patient_uid}")
        return self._to_response(patient)

    async def create_patient_with_files(
        self,
        patient_data: PatientCreate,
        files: List[UploadedDocument],
        document_types: List[str]
    ) -> PatientResponse:
        """Create a patient, then upload each file and record it as an attachment"""
        resolved_types = resolve_document_types(files, document_types)

        # Commit first so the attachments have an internal key to point at
        patient = await self.patient_repo.create(self._new_patient(patient_data))
        logger.info(f"Created patient {patient.patient_uid}")

        await self._upload_attachments(patient, files, resolved_types)
        await self.patient_repo.save()

        patient = await self.patient_repo.get_by_uid(patient.patient_uid)
        return self._to_response(patient)

    async def update_patient(self, patient_uid: uuid.UUID, patient_data: PatientCreate) -> Optional[PatientResponse]:
        """Overwrite profile fields and replace the medical history"""
        return await self.update_patient_with_files(patient_uid, patient_data, [], [])

    async def update_patient_with_files(
        self,
        patient_uid: uuid.UUID,
        patient_data: PatientCreate,
        files: List[UploadedDocument],
        document_types: List[str]
    ) -> Optional[PatientResponse]:
        """Update as ``update_patient`` and append new attachments; existing ones are kept"""
        resolved_types = resolve_document_types(files, document_types)

        patient = await self.patient_repo.get_by_uid(patient_uid)
        if patient is None:
            return None

        apply_patient_fields(patient, patient_data)
        self.patient_repo.replace_conditions(
            patient, [condition_from_schema(c) for c in patient_data.medical_history]
        )

        await self._upload_attachments(patient, files, resolved_types)
        await self.patient_repo.save()

        patient = await self.patient_repo.get_by_uid(patient_uid)
        return self._to_response(patient)

    async def delete_patient(self, patient_uid: uuid.UUID) -> bool:
        """Delete stored documents (best effort), then the patient record"""
        patient = await self.patient_repo.get_by_uid(patient_uid)
        if patient is None:
            return False

        for attachment in patient.attachments:
            try:
                await self.object_store.delete_object(attachment.s3_key)
            except Exception as e:
                # The row goes regardless; the stored object is left behind
                logger.error(f"Error deleting S3 file {attachment.s3_key}: {e}")

        await self.patient_repo.delete(patient)
        logger.info(f"Deleted patient {patient_uid}")
        return True

    async def delete_attachment(self, patient_uid: uuid.UUID, attachment_uid: uuid.UUID) -> bool:
        """Delete one attachment row and its stored document"""
        patient = await self.patient_repo.get_by_uid(patient_uid)
        if patient is None:
            return False

        attachment = next(
            (a for a in patient.attachments if a.attachment_uid == attachment_uid), None
        )
        if attachment is None:
            return False

        try:
            await self.object_store.delete_object(attachment.s3_key)
        except Exception as e:
            logger.error(f"Error deleting S3 file {attachment.s3_key}: {e}")

        self.patient_repo.remove_attachment(patient, attachment)
        await self.patient_repo.save()
        return True
