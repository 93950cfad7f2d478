from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid
import enum

from pcms.infrastructure.database import Base


class DocumentType(str, enum.Enum):
    """Attachment document type enumeration"""
    MRI = "MRI"
    CAT_SCAN = "CAT_SCAN"
    DOCTOR_REPORT = "DOCTOR_REPORT"
    UNKNOWN = "UNKNOWN"


# Types a client may send; UNKNOWN is only assigned by the server
ALLOWED_DOCUMENT_TYPES = (DocumentType.MRI.value, DocumentType.CAT_SCAN.value, DocumentType.DOCTOR_REPORT.value)

# Width of attachments.filename
MAX_FILENAME_LENGTH = 255


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Patient(Base):
    """Patient profile; ``id`` stays internal, ``patient_uid`` is the public identifier"""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_uid = Column(Uuid(as_uuid=True), unique=True, nullable=False, index=True, default=uuid.uuid4)

    name = Column(String(200), nullable=False, index=True)
    age = Column(Integer)
    contact_phone = Column(String(50))
    contact_email = Column(String(255))
    contact_address = Column(Text)

    medical_history = relationship(
        "MedicalCondition",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MedicalCondition.id",
    )
    attachments = relationship(
        "Attachment",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Attachment.id",
    )


class MedicalCondition(Base):
    """One entry of a patient's medical history"""
    __tablename__ = "conditions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)

    condition = Column(String(255), nullable=False, index=True)
    notes = Column(Text)
    since = Column(String(100))
    frequency = Column(String(100))
    history = Column(Text)
    status = Column(String(100))

    patient = relationship("Patient", back_populates="medical_history")


class Attachment(Base):
    """Document stored in the object store under ``s3_key``"""
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    attachment_uid = Column(Uuid(as_uuid=True), unique=True, nullable=False, index=True, default=uuid.uuid4)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)

    filename = Column(String(MAX_FILENAME_LENGTH), nullable=False)
    s3_key = Column(String(1024), nullable=False)
    document_type = Column(String(50), nullable=False, default=DocumentType.UNKNOWN.value)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    # "metadata" is reserved on declarative classes
    attachment_metadata = Column("metadata", JSON, default=dict)

    patient = relationship("Patient", back_populates="attachments")
