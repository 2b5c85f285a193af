"""Clinic-local time helpers."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from clinicdesk.config import settings


def clinic_tz() -> ZoneInfo:
    """Timezone appointment dates and times are expressed in."""
    return ZoneInfo(settings.clinic_timezone)


def clinic_now() -> datetime:
    """Current aware datetime in the clinic timezone."""
    return datetime.now(clinic_tz())


def to_clinic_time(moment: datetime) -> datetime:
    """Convert an aware datetime (naive is taken as clinic-local) to clinic time."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=clinic_tz())
    return moment.astimezone(clinic_tz())


def slot_datetime(appointment_date: date, appointment_time: str) -> datetime:
    """Combine an appointment date and ``HH:MM`` string into an aware datetime."""
    hours, minutes = appointment_time.split(":")
    return datetime.combine(
        appointment_date,
        time(int(hours), int(minutes)),
        tzinfo=clinic_tz(),
    )


def month_bounds(day: date) -> tuple[date, date]:
    """First day of ``day``'s month and first day of the following month."""
    first = day.replace(day=1)
    following = (first + timedelta(days=32)).replace(day=1)
    return first, following
