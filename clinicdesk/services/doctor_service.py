"""Doctor profile and administration service."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.exceptions import ConflictException, NotFoundException
from clinicdesk.core.roles import Capability, Identity, Role
from clinicdesk.models.doctors import doctors
from clinicdesk.models.users import users
from clinicdesk.schemas.doctors import (
    DayAvailability,
    DoctorCreate,
    DoctorSelfUpdate,
    DoctorUpdate,
)
from clinicdesk.services.records import doctor_select
from clinicdesk.services.user_service import UserService

logger = structlog.get_logger()


class DoctorService:
    """Service for doctor operations."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def get_doctor_by_id(self, doctor_id: UUID) -> dict | None:
        """Get doctor by ID with account email and status."""
        result = await self.db.execute(doctor_select().where(doctors.c.id == doctor_id))
        doctor = result.mappings().first()
        return dict(doctor) if doctor else None

    async def get_by_user_id(self, user_id: UUID) -> dict | None:
        """Get the doctor profile owned by a user."""
        result = await self.db.execute(doctor_select().where(doctors.c.user_id == user_id))
        doctor = result.mappings().first()
        return dict(doctor) if doctor else None

    async def get_profile(self, user_id: UUID) -> dict:
        """
        Get the caller's doctor profile.

        Raises:
            NotFoundException: If the user has no doctor profile
        """
        doctor = await self.get_by_user_id(user_id)
        if not doctor:
            raise NotFoundException("Doctor not found")
        return doctor

    async def update_own_profile(self, user_id: UUID, data: DoctorSelfUpdate) -> dict:
        """Apply the allow-listed changes a doctor may make to their own profile."""
        doctor = await self.get_profile(user_id)
        await self._apply(doctor["id"], _profile_values(data))
        return await self.get_profile(user_id)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    async def create_doctor(self, identity: Identity, data: DoctorCreate) -> dict:
        """
        Create a doctor account and profile in one transaction.

        Raises:
            ConflictException: If the email or license number is already used
        """
        identity.require(Capability.MANAGE_DOCTORS)
        user_service = UserService(self.db)

        if await user_service.get_user_by_email(data.email):
            raise ConflictException("Email already registered")

        existing = await self.db.execute(
            select(doctors.c.id).where(doctors.c.license_number == data.license_number)
        )
        if existing.first() is not None:
            raise ConflictException("License number already exists")

        profile = data.model_dump(mode="json", exclude={"email", "password"})
        profile["consultation_fee"] = data.consultation_fee

        try:
            user = await user_service.create_user(data.email, data.password, Role.DOCTOR)
            result = await self.db.execute(
                doctors.insert().values(user_id=user["id"], **profile).returning(doctors.c.id)
            )
            doctor_id = result.scalar_one()
            await self.db.commit()
        except IntegrityError:
            # Email or license taken by a concurrent create
            await self.db.rollback()
            raise ConflictException("Email or license number already exists")

        logger.info("doctor_created", doctor_id=str(doctor_id), user_id=str(user["id"]))
        return await self.get_doctor_by_id(doctor_id)  # type: ignore[return-value]

    async def update_doctor(self, identity: Identity, doctor_id: UUID, data: DoctorUpdate) -> dict:
        """Apply allow-listed admin changes to a doctor."""
        identity.require(Capability.MANAGE_DOCTORS)
        await self._require_doctor(doctor_id)
        await self._apply(doctor_id, _profile_values(data))
        return await self.get_doctor_by_id(doctor_id)  # type: ignore[return-value]

    async def set_availability(
        self,
        identity: Identity,
        doctor_id: UUID,
        availability: list[DayAvailability],
    ) -> dict:
        """Replace a doctor's weekly availability."""
        identity.require(Capability.MANAGE_DOCTORS)
        await self._require_doctor(doctor_id)
        await self._apply(
            doctor_id,
            {"availability": [day.model_dump(mode="json") for day in availability]},
        )
        return await self.get_doctor_by_id(doctor_id)  # type: ignore[return-value]

    async def deactivate_doctor(self, identity: Identity, doctor_id: UUID) -> None:
        """Deactivate the doctor's account; the profile and history are kept."""
        identity.require(Capability.MANAGE_DOCTORS)
        doctor = await self._require_doctor(doctor_id)
        await self.db.execute(
            update(users)
            .where(users.c.id == doctor["user_id"])
            .values(is_active=False, updated_at=datetime.now(UTC))
        )
        await self.db.commit()
        logger.info("doctor_deactivated", doctor_id=str(doctor_id))

    async def _require_doctor(self, doctor_id: UUID) -> dict:
        doctor = await self.get_doctor_by_id(doctor_id)
        if not doctor:
            raise NotFoundException("Doctor not found")
        return doctor

    async def _apply(self, doctor_id: UUID, values: dict[str, Any]) -> None:
        if not values:
            return
        values["updated_at"] = datetime.now(UTC)
        await self.db.execute(update(doctors).where(doctors.c.id == doctor_id).values(**values))
        await self.db.commit()


def _profile_values(data: DoctorUpdate | DoctorSelfUpdate) -> dict[str, Any]:
    """Changed fields as column values; availability as JSON, fee as Decimal."""
    values = data.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if "consultation_fee" in values:
        values["consultation_fee"] = data.consultation_fee
    return values
