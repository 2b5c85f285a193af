"""Role-scoped read access to appointments, visit summaries and profiles."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.clock import clinic_now, to_clinic_time
from clinicdesk.core.exceptions import NotFoundException
from clinicdesk.core.roles import Capability, Identity
from clinicdesk.models.appointments import appointments
from clinicdesk.models.doctors import doctors
from clinicdesk.models.patients import patients
from clinicdesk.models.visit_summaries import visit_summaries
from clinicdesk.schemas.appointments import HISTORY_STATUSES, AppointmentStatus
from clinicdesk.schemas.common import PageParams
from clinicdesk.services.records import (
    appointment_record,
    appointment_select,
    doctor_select,
    patient_select,
    visit_summary_record,
    visit_summary_select,
)

Page = tuple[list[dict[str, Any]], int]


class RecordQueryService:
    """
    Read-only queries scoped to the caller.

    Each method checks the caller's capability first and then restricts the
    query to records the caller owns, so no endpoint has to repeat either.
    """

    def __init__(self, db: AsyncSession, identity: Identity):
        """Initialize service with database session and caller."""
        self.db = db
        self.identity = identity

    # ------------------------------------------------------------------
    # Patient views
    # ------------------------------------------------------------------

    async def patient_appointments(
        self,
        status: AppointmentStatus | None = None,
        upcoming: bool = False,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """
        List the caller's appointments, newest slot first.

        ``upcoming`` restricts to scheduled appointments whose slot has not
        started yet and overrides ``status``.
        """
        self.identity.require(Capability.VIEW_OWN_APPOINTMENTS)
        conditions = [appointments.c.patient_id == self.identity.require_profile()]

        if upcoming:
            current = to_clinic_time(now) if now else clinic_now()
            today, time_now = current.date(), current.strftime("%H:%M")
            conditions.append(appointments.c.status == AppointmentStatus.SCHEDULED.value)
            conditions.append(
                or_(
                    appointments.c.appointment_date > today,
                    and_(
                        appointments.c.appointment_date == today,
                        appointments.c.appointment_time >= time_now,
                    ),
                )
            )
        elif status:
            conditions.append(appointments.c.status == status.value)

        stmt = appointment_select().where(*conditions).order_by(*_newest_slot_first())
        return await self._fetch_appointments(stmt)

    async def patient_visit_summaries(self) -> list[dict[str, Any]]:
        """List the caller's visit summaries, most recent first."""
        self.identity.require(Capability.VIEW_OWN_VISIT_SUMMARIES)
        stmt = (
            visit_summary_select()
            .where(visit_summaries.c.patient_id == self.identity.require_profile())
            .order_by(visit_summaries.c.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [visit_summary_record(row) for row in result.mappings().all()]

    async def patient_visit_summary(self, visit_summary_id: UUID) -> dict[str, Any]:
        """Get one of the caller's visit summaries."""
        self.identity.require(Capability.VIEW_OWN_VISIT_SUMMARIES)
        stmt = visit_summary_select().where(
            visit_summaries.c.id == visit_summary_id,
            visit_summaries.c.patient_id == self.identity.require_profile(),
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Visit summary not found")
        return visit_summary_record(row)

    async def doctor_directory(
        self,
        page: PageParams,
        specialization: str | None = None,
    ) -> Page:
        """Browse doctors, best rated first, optionally by specialization substring."""
        self.identity.require(Capability.BROWSE_DOCTORS)
        conditions = _specialization_filter(specialization)
        stmt = doctor_select().where(*conditions).order_by(doctors.c.rating.desc())
        return await self._fetch_page(stmt, doctors, conditions, page)

    async def doctor_detail(self, doctor_id: UUID) -> dict[str, Any]:
        """Get a doctor profile for browsing or administration."""
        if not self.identity.can(Capability.MANAGE_DOCTORS):
            self.identity.require(Capability.BROWSE_DOCTORS)
        result = await self.db.execute(doctor_select().where(doctors.c.id == doctor_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Doctor not found")
        return dict(row)

    # ------------------------------------------------------------------
    # Doctor views
    # ------------------------------------------------------------------

    async def doctor_appointments(
        self,
        status: AppointmentStatus | None = None,
        on_date: date | None = None,
    ) -> list[dict[str, Any]]:
        """List the caller's appointments in slot order."""
        self.identity.require(Capability.VIEW_DOCTOR_SCHEDULE)
        conditions = [appointments.c.doctor_id == self.identity.require_profile()]
        if status:
            conditions.append(appointments.c.status == status.value)
        if on_date:
            conditions.append(appointments.c.appointment_date == on_date)

        stmt = appointment_select().where(*conditions).order_by(*_earliest_slot_first())
        return await self._fetch_appointments(stmt)

    async def doctor_today(self, now: datetime | None = None) -> list[dict[str, Any]]:
        """Today's appointments for the caller, by time."""
        self.identity.require(Capability.VIEW_DOCTOR_SCHEDULE)
        today = (to_clinic_time(now) if now else clinic_now()).date()
        stmt = (
            appointment_select()
            .where(
                appointments.c.doctor_id == self.identity.require_profile(),
                appointments.c.appointment_date == today,
            )
            .order_by(appointments.c.appointment_time.asc())
        )
        return await self._fetch_appointments(stmt)

    async def doctor_history(self, page: PageParams) -> Page:
        """Completed, no-show and cancelled appointments, newest slot first."""
        self.identity.require(Capability.VIEW_DOCTOR_SCHEDULE)
        conditions = [
            appointments.c.doctor_id == self.identity.require_profile(),
            appointments.c.status.in_([s.value for s in HISTORY_STATUSES]),
        ]
        stmt = appointment_select().where(*conditions).order_by(*_newest_slot_first())
        return await self._fetch_page(stmt, appointments, conditions, page, appointment_record)

    async def doctor_patient_record(self, patient_id: UUID) -> dict[str, Any]:
        """A patient's profile with the visits the calling doctor performed."""
        self.identity.require(Capability.VIEW_PATIENT_RECORD)
        result = await self.db.execute(patient_select().where(patients.c.id == patient_id))
        patient = result.mappings().first()
        if not patient:
            raise NotFoundException("Patient not found")

        history = await self.db.execute(
            visit_summary_select()
            .where(
                visit_summaries.c.patient_id == patient_id,
                visit_summaries.c.doctor_id == self.identity.require_profile(),
            )
            .order_by(visit_summaries.c.created_at.desc())
        )
        return {
            "patient": dict(patient),
            "visit_history": [visit_summary_record(row) for row in history.mappings().all()],
        }

    # ------------------------------------------------------------------
    # Admin views
    # ------------------------------------------------------------------

    async def all_appointments(
        self,
        page: PageParams,
        on_date: date | None = None,
        doctor_id: UUID | None = None,
        status: AppointmentStatus | None = None,
    ) -> Page:
        """All appointments, newest slot first."""
        self.identity.require(Capability.VIEW_ALL_APPOINTMENTS)
        conditions = []
        if on_date:
            conditions.append(appointments.c.appointment_date == on_date)
        if doctor_id:
            conditions.append(appointments.c.doctor_id == doctor_id)
        if status:
            conditions.append(appointments.c.status == status.value)

        stmt = appointment_select().where(*conditions).order_by(*_newest_slot_first())
        return await self._fetch_page(stmt, appointments, conditions, page, appointment_record)

    async def all_doctors(self, page: PageParams, specialization: str | None = None) -> Page:
        """All doctors with account status, most recently added first."""
        self.identity.require(Capability.MANAGE_DOCTORS)
        conditions = _specialization_filter(specialization)
        stmt = doctor_select().where(*conditions).order_by(doctors.c.created_at.desc())
        return await self._fetch_page(stmt, doctors, conditions, page)

    async def all_patients(self, page: PageParams, search: str | None = None) -> Page:
        """All patients, searchable by name or phone, most recently registered first."""
        self.identity.require(Capability.VIEW_ALL_PATIENTS)
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    patients.c.first_name.ilike(pattern),
                    patients.c.last_name.ilike(pattern),
                    patients.c.phone_number.ilike(pattern),
                )
            )
        stmt = patient_select().where(*conditions).order_by(patients.c.created_at.desc())
        return await self._fetch_page(stmt, patients, conditions, page)

    # ------------------------------------------------------------------

    async def _fetch_appointments(self, stmt: Select) -> list[dict[str, Any]]:
        result = await self.db.execute(stmt)
        return [appointment_record(row) for row in result.mappings().all()]

    async def _fetch_page(
        self,
        stmt: Select,
        table: Any,
        conditions: list,
        page: PageParams,
        shape: Any = dict,
    ) -> Page:
        count_stmt = select(func.count()).select_from(table).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar_one()

        result = await self.db.execute(stmt.offset(page.offset).limit(page.limit))
        return [shape(row) for row in result.mappings().all()], total


def _specialization_filter(specialization: str | None) -> list:
    if not specialization:
        return []
    return [doctors.c.specialization.ilike(f"%{specialization}%")]


def _newest_slot_first() -> tuple:
    return appointments.c.appointment_date.desc(), appointments.c.appointment_time.desc()


def _earliest_slot_first() -> tuple:
    return appointments.c.appointment_date.asc(), appointments.c.appointment_time.asc()
