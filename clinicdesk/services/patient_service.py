"""Patient profile service."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.exceptions import NotFoundException
from clinicdesk.models.patients import patients
from clinicdesk.schemas.patients import PatientUpdate
from clinicdesk.services.records import patient_select


class PatientService:
    """Service for patient profiles."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def get_by_user_id(self, user_id: UUID) -> dict | None:
        """Get the patient profile owned by a user, with account email."""
        result = await self.db.execute(patient_select().where(patients.c.user_id == user_id))
        patient = result.mappings().first()
        return dict(patient) if patient else None

    async def get_profile(self, user_id: UUID) -> dict:
        """
        Get the caller's patient profile.

        Raises:
            NotFoundException: If the user has no patient profile
        """
        patient = await self.get_by_user_id(user_id)
        if not patient:
            raise NotFoundException("Patient not found")
        return patient

    async def update_profile(self, user_id: UUID, data: PatientUpdate) -> dict:
        """Apply allow-listed profile changes."""
        update_data = data.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if update_data:
            update_data["updated_at"] = datetime.now(UTC)
            result = await self.db.execute(
                update(patients).where(patients.c.user_id == user_id).values(**update_data)
            )
            if result.rowcount == 0:  # type: ignore[attr-defined]
                await self.db.rollback()
                raise NotFoundException("Patient not found")
            await self.db.commit()

        return await self.get_profile(user_id)
