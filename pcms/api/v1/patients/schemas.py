from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any
from datetime import datetime
import uuid


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, input keys matched case-insensitively"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        lookup = {}
        for name, field in cls.model_fields.items():
            alias = field.alias or name
            lookup[name.lower()] = alias
            lookup[alias.lower()] = alias
        return {lookup.get(str(key).lower(), key): value for key, value in data.items()}


class MedicalConditionSchema(CamelModel):
    """One medical history entry"""
    condition: str = Field(..., min_length=1, max_length=255)
    notes: Optional[str] = None
    since: Optional[str] = Field(None, max_length=100)
    frequency: Optional[str] = Field(None, max_length=100)
    history: Optional[str] = None
    status: Optional[str] = Field(None, max_length=100)


class BasePatientSchema(CamelModel):
    """Base schema for patient data"""
    name: str = Field(..., max_length=200)
    age: Optional[int] = Field(None, ge=0, le=200)
    contact_phone: Optional[str] = Field(None, max_length=50)
    contact_email: Optional[str] = Field(None, max_length=255)
    contact_address: Optional[str] = None
    medical_history: List[MedicalConditionSchema] = []

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Patient name is required')
        return v.strip()

    @field_validator('contact_email')
    @classmethod
    def validate_email(cls, v):
        if v and '@' not in v:
            raise ValueError('Invalid email format')
        return v

    @field_validator('medical_history', mode='before')
    @classmethod
    def default_medical_history(cls, v):
        return [] if v is None else v


class PatientCreate(BasePatientSchema):
    """Schema for creating or replacing a patient; a client-sent patientId is ignored"""
    pass


class AttachmentResponse(CamelModel):
    """Attachment as returned to clients; ``url`` is a presigned link"""
    attachment_id: uuid.UUID
    file_name: str
    document_type: str
    uploaded_at: datetime
    url: Optional[str] = None


class PatientResponse(BasePatientSchema):
    """Schema for patient response data"""
    patient_id: uuid.UUID
    attachments: List[AttachmentResponse] = []


class SuccessResponse(BaseModel):
    """Schema for success responses"""
    message: str
