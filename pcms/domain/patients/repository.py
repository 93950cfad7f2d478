from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
import uuid

from pcms.domain.patients.models import Patient, MedicalCondition, Attachment


class PatientRepository:
    """Repository for patient aggregate data access operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _aggregate_query(self):
        return select(Patient).options(
            selectinload(Patient.medical_history),
            selectinload(Patient.attachments)
        )

    async def create(self, patient: Patient) -> Patient:
        """Persist a new patient together with its conditions"""
        self.db.add(patient)
        await self.db.commit()
        return await self.get_by_uid(patient.patient_uid)

    async def get_by_uid(self, patient_uid: uuid.UUID) -> Optional[Patient]:
        """Get patient with conditions and attachments by external UID"""
        result = await self.db.execute(
            self._aggregate_query()
            .where(Patient.patient_uid == patient_uid)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_page(self, skip: int = 0, limit: int = 20) -> List[Patient]:
        """Get patients ordered by name"""
        result = await self.db.execute(
            self._aggregate_query()
            .order_by(Patient.name.asc(), Patient.id.asc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Patient.id)))
        return result.scalar()

    def replace_conditions(self, patient: Patient, conditions: List[MedicalCondition]) -> None:
        """Swap the whole medical history; orphaned rows are deleted on flush"""
        patient.medical_history = conditions

    def add_attachment(self, patient: Patient, attachment: Attachment) -> None:
        patient.attachments.append(attachment)

    def remove_attachment(self, patient: Patient, attachment: Attachment) -> None:
        patient.attachments.remove(attachment)

    async def save(self) -> None:
        await self.db.commit()

    async def delete(self, patient: Patient) -> None:
        """Delete patient record; conditions and attachments go with it"""
        await self.db.delete(patient)
        await self.db.commit()
