"""Admin dashboard counts."""

from datetime import datetime

from sqlalchemy import ColumnElement, FromClause, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.clock import clinic_now, month_bounds, to_clinic_time
from clinicdesk.core.roles import Capability, Identity
from clinicdesk.models.appointments import appointments
from clinicdesk.models.doctors import doctors
from clinicdesk.models.patients import patients
from clinicdesk.models.users import users
from clinicdesk.schemas.admin import DashboardStatsResponse
from clinicdesk.schemas.appointments import AppointmentStatus


class DashboardService:
    """Aggregate counts over the record tables, recomputed on every call."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _count(self, table: FromClause, *conditions: ColumnElement[bool]) -> int:
        result = await self.db.execute(select(func.count()).select_from(table).where(*conditions))
        return result.scalar_one()

    async def get_stats(
        self,
        identity: Identity,
        now: datetime | None = None,
    ) -> DashboardStatsResponse:
        """
        Compute dashboard statistics as of ``now``.

        Args:
            identity: Calling admin
            now: Reference time, defaults to the current clinic time

        Returns:
            Patient, doctor and appointment counts
        """
        identity.require(Capability.VIEW_DASHBOARD)

        today = (to_clinic_time(now) if now else clinic_now()).date()
        month_start, next_month_start = month_bounds(today)

        active_doctors = await self._count(
            doctors.join(users, doctors.c.user_id == users.c.id),
            users.c.is_active.is_(True),
        )

        return DashboardStatsResponse(
            total_patients=await self._count(patients),
            total_doctors=active_doctors,
            total_appointments=await self._count(appointments),
            today_appointments=await self._count(
                appointments, appointments.c.appointment_date == today
            ),
            upcoming_appointments=await self._count(
                appointments,
                appointments.c.appointment_date >= today,
                appointments.c.status == AppointmentStatus.SCHEDULED.value,
            ),
            month_appointments=await self._count(
                appointments,
                appointments.c.appointment_date >= month_start,
                appointments.c.appointment_date < next_month_start,
            ),
        )
