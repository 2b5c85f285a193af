"""Scheduling engine: booking, cancellation and no-show transitions."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.config import settings
from clinicdesk.core.clock import clinic_now, slot_datetime, to_clinic_time
from clinicdesk.core.exceptions import (
    ConflictException,
    InvalidStateException,
    NotFoundException,
)
from clinicdesk.core.roles import Capability, Identity, Role
from clinicdesk.models.appointments import appointments
from clinicdesk.models.doctors import doctors
from clinicdesk.schemas.appointments import AppointmentCreate, AppointmentStatus
from clinicdesk.services.records import appointment_record, appointment_select

logger = structlog.get_logger()

SLOT_TAKEN = "Time slot already booked"


class AppointmentService:
    """Service for booking appointments and moving them between statuses."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def book_appointment(
        self,
        identity: Identity,
        data: AppointmentCreate,
    ) -> dict[str, Any]:
        """
        Book a slot with a doctor for the calling patient.

        The existence check gives a friendly error in the common case; the
        partial unique index on scheduled slots is what actually prevents two
        concurrent bookings from both succeeding.

        Args:
            identity: Calling patient
            data: Appointment creation data

        Returns:
            Created appointment with patient and doctor populated

        Raises:
            NotFoundException: If the doctor does not exist
            ConflictException: If the slot already holds a scheduled appointment
        """
        identity.require(Capability.BOOK_APPOINTMENT)
        patient_id = identity.require_profile()

        doctor = await self.db.execute(select(doctors.c.id).where(doctors.c.id == data.doctor_id))
        if doctor.first() is None:
            raise NotFoundException("Doctor not found")

        if await self._slot_taken(data.doctor_id, data):
            logger.info(
                "appointment_slot_conflict",
                doctor_id=str(data.doctor_id),
                appointment_date=data.appointment_date.isoformat(),
                appointment_time=data.appointment_time,
            )
            raise ConflictException(SLOT_TAKEN)

        stmt = (
            insert(appointments)
            .values(
                patient_id=patient_id,
                doctor_id=data.doctor_id,
                appointment_date=data.appointment_date,
                appointment_time=data.appointment_time,
                reason=data.reason,
                notes=data.notes,
                status=AppointmentStatus.SCHEDULED.value,
            )
            .returning(appointments.c.id)
        )

        try:
            result = await self.db.execute(stmt)
            appointment_id = result.scalar_one()
            await self.db.commit()
        except IntegrityError:
            # Lost the race for the slot to a concurrent booking
            await self.db.rollback()
            logger.info("appointment_slot_race_lost", doctor_id=str(data.doctor_id))
            raise ConflictException(SLOT_TAKEN)

        logger.info(
            "appointment_booked",
            appointment_id=str(appointment_id),
            patient_id=str(patient_id),
            doctor_id=str(data.doctor_id),
        )
        return await self.get_populated(appointment_id)

    async def cancel_appointment(
        self,
        identity: Identity,
        appointment_id: UUID,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Cancel a scheduled appointment.

        Patients may only cancel their own appointments and only with at
        least ``CANCELLATION_WINDOW_HOURS`` notice. Doctors may cancel their
        own appointments and admins any appointment, without a notice window.

        Args:
            identity: Caller
            appointment_id: Appointment ID
            reason: Cancellation reason
            now: Reference time, defaults to the current clinic time

        Returns:
            Cancelled appointment

        Raises:
            NotFoundException: If the appointment is not visible to the caller
            ConflictException: If it is not scheduled or the notice is too short
        """
        if identity.role is Role.PATIENT:
            identity.require(Capability.CANCEL_OWN_APPOINTMENT)
            appointment = await self.get_appointment(
                appointment_id, patient_id=identity.require_profile()
            )
        elif identity.role is Role.DOCTOR:
            identity.require(Capability.CANCEL_DOCTOR_APPOINTMENT)
            appointment = await self.get_appointment(
                appointment_id, doctor_id=identity.require_profile()
            )
        else:
            identity.require(Capability.CANCEL_ANY_APPOINTMENT)
            appointment = await self.get_appointment(appointment_id)

        if appointment["status"] != AppointmentStatus.SCHEDULED.value:
            raise ConflictException("Cannot cancel this appointment")

        if identity.role is Role.PATIENT:
            self._check_cancellation_notice(appointment, now or clinic_now())

        changed = await self._transition(
            appointment_id,
            AppointmentStatus.CANCELLED,
            cancelled_by=identity.role.value,
            cancellation_reason=reason,
        )
        if not changed:
            raise ConflictException("Cannot cancel this appointment")

        logger.info(
            "appointment_cancelled",
            appointment_id=str(appointment_id),
            cancelled_by=identity.role.value,
        )
        return await self.get_populated(appointment_id)

    async def mark_no_show(self, identity: Identity, appointment_id: UUID) -> dict[str, Any]:
        """
        Mark a doctor's scheduled appointment as no-show.

        Raises:
            NotFoundException: If the appointment does not belong to the doctor
            InvalidStateException: If the appointment is not scheduled
        """
        identity.require(Capability.MARK_NO_SHOW)
        appointment = await self.get_appointment(
            appointment_id, doctor_id=identity.require_profile()
        )

        if appointment["status"] != AppointmentStatus.SCHEDULED.value:
            raise InvalidStateException("Cannot mark this appointment as no-show")

        if not await self._transition(appointment_id, AppointmentStatus.NO_SHOW):
            raise InvalidStateException("Cannot mark this appointment as no-show")

        logger.info("appointment_marked_no_show", appointment_id=str(appointment_id))
        return await self.get_populated(appointment_id)

    async def get_appointment(
        self,
        appointment_id: UUID,
        patient_id: UUID | None = None,
        doctor_id: UUID | None = None,
    ) -> dict[str, Any]:
        """
        Get a raw appointment row, optionally scoped to an owner.

        Raises:
            NotFoundException: If no matching appointment exists
        """
        conditions = [appointments.c.id == appointment_id]
        if patient_id is not None:
            conditions.append(appointments.c.patient_id == patient_id)
        if doctor_id is not None:
            conditions.append(appointments.c.doctor_id == doctor_id)

        result = await self.db.execute(select(appointments).where(and_(*conditions)))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Appointment not found")
        return dict(row)

    async def get_populated(self, appointment_id: UUID) -> dict[str, Any]:
        """Get an appointment with patient and doctor populated."""
        result = await self.db.execute(
            appointment_select().where(appointments.c.id == appointment_id)
        )
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Appointment not found")
        return appointment_record(row)

    async def _slot_taken(self, doctor_id: UUID, data: AppointmentCreate) -> bool:
        stmt = select(appointments.c.id).where(
            appointments.c.doctor_id == doctor_id,
            appointments.c.appointment_date == data.appointment_date,
            appointments.c.appointment_time == data.appointment_time,
            appointments.c.status == AppointmentStatus.SCHEDULED.value,
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def _transition(
        self,
        appointment_id: UUID,
        new_status: AppointmentStatus,
        **values: Any,
    ) -> bool:
        """
        Move a scheduled appointment to ``new_status`` and commit.

        The update only matches while the row is still scheduled, so a
        concurrent transition is never overwritten.

        Returns:
            True if the row changed
        """
        stmt = (
            update(appointments)
            .where(
                appointments.c.id == appointment_id,
                appointments.c.status == AppointmentStatus.SCHEDULED.value,
            )
            .values(status=new_status.value, updated_at=datetime.now(UTC), **values)
            .returning(appointments.c.id)
        )
        result = await self.db.execute(stmt)
        changed = result.first() is not None
        await self.db.commit()
        return changed

    @staticmethod
    def _check_cancellation_notice(appointment: dict[str, Any], now: datetime) -> None:
        starts_at = slot_datetime(appointment["appointment_date"], appointment["appointment_time"])
        hours_until = (starts_at - to_clinic_time(now)).total_seconds() / 3600

        if hours_until < settings.cancellation_window_hours:
            raise ConflictException(
                f"Cannot cancel appointment less than {settings.cancellation_window_hours} "
                "hours before scheduled time"
            )
