"""Visit recording: creating and editing visit summaries."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.exceptions import (
    ConflictException,
    InvalidStateException,
    NotFoundException,
)
from clinicdesk.core.roles import Capability, Identity
from clinicdesk.models.appointments import appointments
from clinicdesk.models.visit_summaries import visit_summaries
from clinicdesk.schemas.appointments import AppointmentStatus
from clinicdesk.schemas.visit_summaries import VisitSummaryCreate, VisitSummaryUpdate
from clinicdesk.services.appointment_service import AppointmentService
from clinicdesk.services.records import visit_summary_record, visit_summary_select

logger = structlog.get_logger()

SUMMARY_EXISTS = "Visit summary already exists for this appointment"


class VisitSummaryService:
    """Service for visit summaries."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def add_visit_summary(
        self,
        identity: Identity,
        data: VisitSummaryCreate,
    ) -> dict[str, Any]:
        """
        Record a visit and complete its appointment.

        The summary insert and the appointment's move to ``completed`` are
        committed in a single transaction; if either fails neither is kept.

        Args:
            identity: Calling doctor
            data: Appointment id and clinical fields

        Returns:
            Created visit summary, populated

        Raises:
            NotFoundException: If the appointment is not this doctor's
            ConflictException: If the appointment already has a summary
            InvalidStateException: If the appointment was cancelled or a no-show
        """
        identity.require(Capability.RECORD_VISIT)
        doctor_id = identity.require_profile()

        appointment = await AppointmentService(self.db).get_appointment(
            data.appointment_id, doctor_id=doctor_id
        )

        existing = await self.db.execute(
            select(visit_summaries.c.id).where(
                visit_summaries.c.appointment_id == data.appointment_id
            )
        )
        if existing.first() is not None:
            raise ConflictException(SUMMARY_EXISTS)

        if appointment["status"] != AppointmentStatus.SCHEDULED.value:
            raise InvalidStateException(
                f"Cannot record a visit for a {appointment['status']} appointment"
            )

        summary_id = uuid4()
        now = datetime.now(UTC)
        values = _clinical_values(data)

        try:
            await self.db.execute(
                insert(visit_summaries).values(
                    id=summary_id,
                    appointment_id=data.appointment_id,
                    patient_id=appointment["patient_id"],
                    doctor_id=doctor_id,
                    **values,
                )
            )
            completed = await self.db.execute(
                update(appointments)
                .where(
                    appointments.c.id == data.appointment_id,
                    appointments.c.status == AppointmentStatus.SCHEDULED.value,
                )
                .values(status=AppointmentStatus.COMPLETED.value, updated_at=now)
                .returning(appointments.c.id)
            )
            if completed.first() is None:
                await self.db.rollback()
                raise InvalidStateException("Appointment is no longer scheduled")
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException(SUMMARY_EXISTS)

        logger.info(
            "visit_summary_created",
            visit_summary_id=str(summary_id),
            appointment_id=str(data.appointment_id),
            doctor_id=str(doctor_id),
        )
        return await self.get_populated(summary_id)

    async def update_visit_summary(
        self,
        identity: Identity,
        visit_summary_id: UUID,
        data: VisitSummaryUpdate,
    ) -> dict[str, Any]:
        """
        Update the editable fields of one of the doctor's visit summaries.

        Only fields present in ``data`` are written; an explicit null clears
        the stored value.

        Raises:
            NotFoundException: If the summary does not belong to the doctor
        """
        identity.require(Capability.RECORD_VISIT)
        doctor_id = identity.require_profile()

        result = await self.db.execute(
            select(visit_summaries.c.id).where(
                visit_summaries.c.id == visit_summary_id,
                visit_summaries.c.doctor_id == doctor_id,
            )
        )
        if result.first() is None:
            raise NotFoundException("Visit summary not found")

        update_values = _clinical_values(data, exclude_unset=True)
        if update_values:
            update_values["updated_at"] = datetime.now(UTC)
            await self.db.execute(
                update(visit_summaries)
                .where(visit_summaries.c.id == visit_summary_id)
                .values(**update_values)
            )
            await self.db.commit()
            logger.info("visit_summary_updated", visit_summary_id=str(visit_summary_id))

        return await self.get_populated(visit_summary_id)

    async def get_populated(self, visit_summary_id: UUID) -> dict[str, Any]:
        """Get a visit summary with patient, doctor and appointment populated."""
        result = await self.db.execute(
            visit_summary_select().where(visit_summaries.c.id == visit_summary_id)
        )
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Visit summary not found")
        return visit_summary_record(row)


def _clinical_values(
    data: VisitSummaryCreate | VisitSummaryUpdate,
    exclude_unset: bool = False,
) -> dict[str, Any]:
    """Column values for a summary: nested documents as JSON, dates as dates."""
    values = data.model_dump(mode="json", exclude={"appointment_id"}, exclude_unset=exclude_unset)
    if "follow_up_date" in values:
        values["follow_up_date"] = data.follow_up_date
    return values
