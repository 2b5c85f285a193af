"""Tests for admin dashboard statistics."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from clinicdesk.core.exceptions import ForbiddenException
from clinicdesk.services.dashboard_service import DashboardService

NOW = datetime(2025, 1, 10, 12, 0, tzinfo=ZoneInfo("UTC"))


@pytest.mark.asyncio
async def test_dashboard_counts(
    db_session, admin, patient, doctor, make_patient, make_doctor, make_appointment
):
    """Counts reflect the stored records as of the given time."""
    await make_patient(email="second@example.com")
    await make_doctor(email="inactive@example.com", license_number="LIC-9", is_active=False)

    await make_appointment(patient, doctor, date(2024, 12, 31), "10:00", status="completed")
    await make_appointment(patient, doctor, date(2025, 1, 2), "10:00", status="no-show")
    await make_appointment(patient, doctor, date(2025, 1, 10), "09:00", status="completed")
    await make_appointment(patient, doctor, date(2025, 1, 10), "16:00")
    await make_appointment(patient, doctor, date(2025, 1, 31), "10:00")
    await make_appointment(patient, doctor, date(2025, 2, 1), "10:00")
    await make_appointment(patient, doctor, date(2025, 2, 3), "10:00", status="cancelled")

    stats = await DashboardService(db_session).get_stats(admin, now=NOW)

    assert stats.total_patients == 2
    assert stats.total_doctors == 1
    assert stats.total_appointments == 7
    assert stats.today_appointments == 2
    assert stats.upcoming_appointments == 3
    assert stats.month_appointments == 4


@pytest.mark.asyncio
async def test_dashboard_empty(db_session, admin):
    """An empty clinic reports zeros."""
    stats = await DashboardService(db_session).get_stats(admin, now=NOW)

    assert stats.model_dump() == {
        "total_patients": 0,
        "total_doctors": 0,
        "total_appointments": 0,
        "today_appointments": 0,
        "upcoming_appointments": 0,
        "month_appointments": 0,
    }


@pytest.mark.asyncio
async def test_dashboard_admin_only(db_session, doctor):
    """Only admins can read dashboard statistics."""
    with pytest.raises(ForbiddenException):
        await DashboardService(db_session).get_stats(doctor, now=NOW)


@pytest.mark.asyncio
async def test_dashboard_endpoint(client, admin, headers):
    """The stats endpoint wraps the counts in the response envelope."""
    response = await client.get("/api/v1/admin/dashboard/stats", headers=headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["total_patients"] == 0
