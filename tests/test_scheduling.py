"""Tests for booking, cancellation and no-show transitions."""

from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock, patch
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from clinicdesk.core.exceptions import (
    ConflictException,
    ForbiddenException,
    InvalidStateException,
    NotFoundException,
)
from clinicdesk.models.appointments import appointments
from clinicdesk.schemas.appointments import AppointmentCreate
from clinicdesk.services.appointment_service import AppointmentService

UTC = ZoneInfo("UTC")


def booking(doctor, appointment_date: date, appointment_time: str = "14:00") -> AppointmentCreate:
    return AppointmentCreate(
        doctor_id=doctor.profile_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        reason="  Persistent headache  ",
    )


# ============================================================================
# Booking
# ============================================================================


@pytest.mark.asyncio
async def test_book_appointment(db_session, patient, doctor, future_date):
    """Booking creates a scheduled appointment populated with the doctor."""
    service = AppointmentService(db_session)

    appointment = await service.book_appointment(patient, booking(doctor, future_date))

    assert appointment["status"] == "scheduled"
    assert appointment["patient_id"] == patient.profile_id
    assert appointment["doctor_id"] == doctor.profile_id
    assert appointment["appointment_time"] == "14:00"
    assert appointment["reason"] == "Persistent headache"
    assert appointment["doctor"]["id"] == doctor.profile_id
    assert appointment["doctor"]["specialization"] == "Cardiology"
    assert appointment["patient"]["first_name"] == "Asha"


@pytest.mark.asyncio
async def test_book_taken_slot_conflicts(db_session, patient, doctor, make_patient, future_date):
    """A second booking of the same scheduled slot is rejected."""
    service = AppointmentService(db_session)
    other = await make_patient(email="other@example.com")

    await service.book_appointment(patient, booking(doctor, future_date))

    with pytest.raises(ConflictException) as exc_info:
        await service.book_appointment(other, booking(doctor, future_date))
    assert exc_info.value.message == "Time slot already booked"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_book_slot_freed_by_cancellation(
    db_session, patient, doctor, make_appointment, future_date
):
    """Cancelled and no-show appointments do not hold their slot."""
    await make_appointment(patient, doctor, future_date, "14:00", status="cancelled")
    await make_appointment(patient, doctor, future_date, "14:00", status="no-show")

    appointment = await AppointmentService(db_session).book_appointment(
        patient, booking(doctor, future_date)
    )

    assert appointment["status"] == "scheduled"


@pytest.mark.asyncio
async def test_same_time_different_doctor_allowed(
    db_session, patient, doctor, make_doctor, future_date
):
    """Slots are per doctor."""
    other_doctor = await make_doctor(email="dr2@example.com", license_number="LIC-2002")
    service = AppointmentService(db_session)

    await service.book_appointment(patient, booking(doctor, future_date))
    second = await service.book_appointment(patient, booking(other_doctor, future_date))

    assert second["doctor_id"] == other_doctor.profile_id


@pytest.mark.asyncio
async def test_scheduled_slot_unique_index(
    db_session, patient, doctor, make_appointment, future_date
):
    """The database itself refuses a second scheduled appointment in a slot."""
    await make_appointment(patient, doctor, future_date, "09:30")

    with pytest.raises(IntegrityError):
        await db_session.execute(
            insert(appointments).values(
                patient_id=patient.profile_id,
                doctor_id=doctor.profile_id,
                appointment_date=future_date,
                appointment_time="09:30",
                status="scheduled",
                reason="Race",
            )
        )
    await db_session.rollback()


@pytest.mark.asyncio
async def test_book_lost_race_conflicts(
    db_session, patient, doctor, make_patient, make_appointment, future_date
):
    """A booking that passes the slot check but hits the index is a conflict."""
    await make_appointment(patient, doctor, future_date, "14:00")
    other = await make_patient(email="other@example.com")

    with patch.object(AppointmentService, "_slot_taken", AsyncMock(return_value=False)):
        with pytest.raises(ConflictException, match="Time slot already booked"):
            await AppointmentService(db_session).book_appointment(
                other, booking(doctor, future_date)
            )

    result = await db_session.execute(
        select(appointments.c.patient_id).where(appointments.c.doctor_id == doctor.profile_id)
    )
    assert result.scalars().all() == [patient.profile_id]


@pytest.mark.asyncio
async def test_book_unknown_doctor(db_session, patient, future_date):
    """Booking with a doctor that does not exist is a not-found error."""
    data = AppointmentCreate(
        doctor_id=uuid4(),
        appointment_date=future_date,
        appointment_time="10:00",
        reason="Checkup",
    )

    with pytest.raises(NotFoundException, match="Doctor not found"):
        await AppointmentService(db_session).book_appointment(patient, data)


@pytest.mark.asyncio
async def test_only_patients_book(db_session, doctor, future_date):
    """Doctors cannot book appointments."""
    with pytest.raises(ForbiddenException):
        await AppointmentService(db_session).book_appointment(doctor, booking(doctor, future_date))


def test_appointment_time_format():
    """Times must be zero-padded 24-hour HH:MM."""
    for value in ("9:00", "24:00", "12:60", "noon"):
        with pytest.raises(ValueError):
            AppointmentCreate(
                doctor_id=uuid4(),
                appointment_date=date(2025, 1, 10),
                appointment_time=value,
                reason="Checkup",
            )


# ============================================================================
# Cancellation
# ============================================================================


@pytest.mark.asyncio
async def test_patient_cancel_well_ahead(db_session, patient, doctor, make_appointment):
    """Scenario: booked for 2025-01-10 14:00, cancelled the day before."""
    appointment_id = await make_appointment(patient, doctor, date(2025, 1, 10), "14:00")

    cancelled = await AppointmentService(db_session).cancel_appointment(
        patient,
        appointment_id,
        reason="Feeling better",
        now=datetime(2025, 1, 9, 14, 0, tzinfo=UTC),
    )

    assert cancelled["status"] == "cancelled"
    assert cancelled["cancelled_by"] == "patient"
    assert cancelled["cancellation_reason"] == "Feeling better"


@pytest.mark.asyncio
async def test_patient_cancel_exactly_two_hours_ahead(
    db_session, patient, doctor, make_appointment
):
    """Exactly the notice window is still allowed."""
    appointment_id = await make_appointment(patient, doctor, date(2025, 1, 10), "14:00")

    cancelled = await AppointmentService(db_session).cancel_appointment(
        patient, appointment_id, now=datetime(2025, 1, 10, 12, 0, tzinfo=UTC)
    )

    assert cancelled["status"] == "cancelled"


@pytest.mark.asyncio
async def test_patient_cancel_inside_window_rejected(
    db_session, patient, doctor, make_appointment
):
    """Less than two hours' notice is refused and the appointment stays scheduled."""
    appointment_id = await make_appointment(patient, doctor, date(2025, 1, 10), "14:00")
    service = AppointmentService(db_session)

    with pytest.raises(ConflictException) as exc_info:
        await service.cancel_appointment(
            patient, appointment_id, now=datetime(2025, 1, 10, 12, 30, tzinfo=UTC)
        )

    assert "less than 2 hours" in exc_info.value.message
    assert (await service.get_appointment(appointment_id))["status"] == "scheduled"


@pytest.mark.asyncio
async def test_cancel_terminal_appointment_rejected(
    db_session, patient, doctor, make_appointment, future_date
):
    """Only scheduled appointments can be cancelled."""
    appointment_id = await make_appointment(patient, doctor, future_date, status="completed")

    with pytest.raises(ConflictException, match="Cannot cancel this appointment"):
        await AppointmentService(db_session).cancel_appointment(patient, appointment_id)


@pytest.mark.asyncio
async def test_patient_cannot_cancel_others_appointment(
    db_session, patient, doctor, make_patient, make_appointment, future_date
):
    """Another patient's appointment is invisible."""
    appointment_id = await make_appointment(patient, doctor, future_date)
    intruder = await make_patient(email="intruder@example.com")

    with pytest.raises(NotFoundException, match="Appointment not found"):
        await AppointmentService(db_session).cancel_appointment(intruder, appointment_id)


@pytest.mark.asyncio
async def test_doctor_cancel_ignores_notice_window(
    db_session, patient, doctor, make_appointment
):
    """Doctors may cancel their own appointments at short notice."""
    appointment_id = await make_appointment(patient, doctor, date(2025, 1, 10), "14:00")

    cancelled = await AppointmentService(db_session).cancel_appointment(
        doctor, appointment_id, now=datetime(2025, 1, 10, 13, 30, tzinfo=UTC)
    )

    assert cancelled["status"] == "cancelled"
    assert cancelled["cancelled_by"] == "doctor"


@pytest.mark.asyncio
async def test_admin_cancels_any_appointment(
    db_session, patient, doctor, admin, make_appointment, future_date
):
    """Admins cancel on the clinic's behalf."""
    appointment_id = await make_appointment(patient, doctor, future_date)

    cancelled = await AppointmentService(db_session).cancel_appointment(admin, appointment_id)

    assert cancelled["cancelled_by"] == "admin"


@pytest.mark.asyncio
async def test_cancellation_frees_slot_for_rebooking(
    db_session, patient, doctor, make_patient, future_date
):
    """After a cancellation the same slot can be booked again."""
    service = AppointmentService(db_session)
    first = await service.book_appointment(patient, booking(doctor, future_date))
    await service.cancel_appointment(patient, first["id"])

    other = await make_patient(email="next@example.com")
    second = await service.book_appointment(other, booking(doctor, future_date))

    assert second["id"] != first["id"]
    result = await db_session.execute(
        select(appointments.c.status).where(appointments.c.doctor_id == doctor.profile_id)
    )
    assert sorted(result.scalars().all()) == ["cancelled", "scheduled"]


# ============================================================================
# No-show
# ============================================================================


@pytest.mark.asyncio
async def test_mark_no_show(db_session, patient, doctor, make_appointment):
    """A doctor marks a scheduled appointment as no-show."""
    appointment_id = await make_appointment(patient, doctor, date.today() - timedelta(days=1))

    updated = await AppointmentService(db_session).mark_no_show(doctor, appointment_id)

    assert updated["status"] == "no-show"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["completed", "cancelled", "no-show"])
async def test_mark_no_show_requires_scheduled(
    db_session, patient, doctor, make_appointment, future_date, status
):
    """Terminal appointments never change status again."""
    appointment_id = await make_appointment(patient, doctor, future_date, status=status)

    with pytest.raises(InvalidStateException):
        await AppointmentService(db_session).mark_no_show(doctor, appointment_id)


@pytest.mark.asyncio
async def test_mark_no_show_other_doctor(
    db_session, patient, doctor, make_doctor, make_appointment, future_date
):
    """Doctors only act on their own appointments."""
    appointment_id = await make_appointment(patient, doctor, future_date)
    other_doctor = await make_doctor(email="dr2@example.com", license_number="LIC-2002")

    with pytest.raises(NotFoundException):
        await AppointmentService(db_session).mark_no_show(other_doctor, appointment_id)
