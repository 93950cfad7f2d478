from fastapi import APIRouter, Depends, HTTPException, status, Query, Request, Response
from pydantic import ValidationError as SchemaValidationError
from starlette.datastructures import UploadFile
from typing import Any, List, Tuple
import json
import uuid

from pcms.api.deps import get_current_principal, get_patient_service
from pcms.api.v1.patients.schemas import PatientCreate, PatientResponse, SuccessResponse
from pcms.core.exceptions import collect_validation_errors
from pcms.domain.patients.service import PatientService, UploadedDocument

router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
    dependencies=[Depends(get_current_principal)],
)

PatientRequest = Tuple[PatientCreate, List[UploadedDocument], List[str]]


def parse_patient(payload: Any) -> PatientCreate:
    """Validate the decoded ``patient`` JSON object"""
    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not parse patient data."
        )
    try:
        return PatientCreate.model_validate(payload)
    except SchemaValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Invalid patient data.",
                "validation_errors": collect_validation_errors(e.errors())
            }
        )


async def read_patient_request(request: Request) -> PatientRequest:
    """
    Read a create/update request.

    multipart/form-data carries the record as JSON in the ``patient`` field,
    any number of ``files`` and one ``documentTypes`` value per file in the
    same order. A plain application/json body is the record without files.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid JSON for patient data."
            )
        return parse_patient(payload), [], []

    form = await request.form()
    patient_json = form.get("patient")
    uploads = [f for f in form.getlist("files") if isinstance(f, UploadFile)]
    document_types = [dt for dt in form.getlist("documentTypes") if isinstance(dt, str)]

    if not isinstance(patient_json, str) or not patient_json.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing patient data."
        )

    if len(document_types) != len(uploads):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each uploaded file must have a corresponding document type."
        )

    try:
        payload = json.loads(patient_json)
    except json.JSONDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON for patient data."
        )
    patient_data = parse_patient(payload)

    files = []
    for upload in uploads:
        files.append(UploadedDocument(
            filename=upload.filename or "unnamed",
            content_type=upload.content_type,
            data=await upload.read()
        ))
    return patient_data, files, document_types


@router.get("", response_model=List[PatientResponse], status_code=status.HTTP_200_OK)
async def get_patients(
    response: Response,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    patient_service: PatientService = Depends(get_patient_service)
):
    """Get patients ordered by name, with their medical history and attachments"""
    patients = await patient_service.list_patients(page, page_size)
    response.headers["X-Total-Count"] = str(await patient_service.count_patients())
    return patients


@router.get("/{patient_id}", response_model=PatientResponse, status_code=status.HTTP_200_OK)
async def get_patient(
    patient_id: uuid.UUID,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Get patient by ID"""
    patient = await patient_service.get_patient(patient_id)
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient with ID {patient_id} not found."
        )
    return patient


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    request: Request,
    response: Response,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Create a new patient, optionally uploading documents (MRI, CAT scan, doctor report)"""
    patient_data, files, document_types = await read_patient_request(request)

    if files:
        patient = await patient_service.create_patient_with_files(patient_data, files, document_types)
    else:
        patient = await patient_service.create_patient(patient_data)

    response.headers["Location"] = f"{request.url.path.rstrip('/')}/{patient.patient_id}"
    return patient


@router.put("/{patient_id}", response_model=PatientResponse, status_code=status.HTTP_200_OK)
async def update_patient(
    patient_id: uuid.UUID,
    request: Request,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Update a patient and replace its medical history; new files are added as attachments"""
    patient_data, files, document_types = await read_patient_request(request)

    if files:
        patient = await patient_service.update_patient_with_files(patient_id, patient_data, files, document_types)
    else:
        patient = await patient_service.update_patient(patient_id, patient_data)

    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient with ID {patient_id} not found."
        )
    return patient


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: uuid.UUID,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Delete a patient and all associated attachments"""
    deleted = await patient_service.delete_patient(patient_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient with ID {patient_id} not found."
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{patient_id}/attachments/{attachment_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK
)
async def delete_attachment(
    patient_id: uuid.UUID,
    attachment_id: uuid.UUID,
    patient_service: PatientService = Depends(get_patient_service)
):
    """Delete a specific attachment for a patient"""
    deleted = await patient_service.delete_attachment(patient_id, attachment_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attachment or Patient not found."
        )
    return SuccessResponse(message="Attachment deleted successfully")
