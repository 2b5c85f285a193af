"""Tests for doctor endpoints."""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient


def visit(appointment_id) -> dict:
    return {
        "appointment_id": str(appointment_id),
        "symptoms": "Persistent cough",
        "diagnosis": "Acute bronchitis",
        "vital_signs": {"temperature": 100.2, "heart_rate": 88},
        "prescription": [
            {
                "medicine_name": "Amoxicillin",
                "dosage": "250mg",
                "frequency": "Three times daily",
                "duration": "7 days",
            }
        ],
        "follow_up_date": (date.today() + timedelta(days=10)).isoformat(),
    }


@pytest.mark.asyncio
class TestDoctorProfileEndpoints:
    """Tests for the doctor's own profile."""

    async def test_get_profile(self, client: AsyncClient, doctor, headers):
        """Test reading own profile."""
        response = await client.get("/api/v1/doctor/profile", headers=headers(doctor))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(doctor.profile_id)
        assert data["email"] == "doctor@example.com"
        assert data["availability"][0]["day"] == "monday"

    async def test_update_profile_allow_list(self, client: AsyncClient, doctor, headers):
        """Test that doctors cannot change identity or credential fields."""
        response = await client.put(
            "/api/v1/doctor/profile",
            json={
                "consultation_fee": 650,
                "bio": "Interventional cardiologist",
                "license_number": "FORGED-1",
                "specialization": "Neurology",
            },
            headers=headers(doctor),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["consultation_fee"] == 650.0
        assert data["bio"] == "Interventional cardiologist"
        assert data["license_number"] == "LIC-1001"
        assert data["specialization"] == "Cardiology"

    async def test_patient_cannot_use_doctor_routes(self, client: AsyncClient, patient, headers):
        """Test that the doctor area is closed to patients."""
        response = await client.get("/api/v1/doctor/appointments", headers=headers(patient))

        assert response.status_code == 403


@pytest.mark.asyncio
class TestDoctorScheduleEndpoints:
    """Tests for the doctor's schedule."""

    async def test_list_appointments_by_date(
        self, client: AsyncClient, patient, doctor, make_appointment, future_date, headers
    ):
        """Test the date filter."""
        await make_appointment(patient, doctor, future_date, "09:00")
        await make_appointment(patient, doctor, future_date + timedelta(days=1), "09:00")

        response = await client.get(
            "/api/v1/doctor/appointments",
            params={"date": future_date.isoformat()},
            headers=headers(doctor),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["patient"]["full_name"] == "Asha Rao"

    async def test_today(self, client: AsyncClient, patient, doctor, make_appointment, headers):
        """Test today's schedule."""
        await make_appointment(patient, doctor, date.today() + timedelta(days=30), "09:00")

        response = await client.get("/api/v1/doctor/appointments/today", headers=headers(doctor))

        assert response.status_code == 200
        assert response.json()["data"] == []

    async def test_history_pagination(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test paginated history."""
        for day in range(1, 4):
            await make_appointment(patient, doctor, date(2024, 6, day), status="completed")

        response = await client.get(
            "/api/v1/doctor/appointments/history",
            params={"page": 2, "limit": 2},
            headers=headers(doctor),
        )

        body = response.json()
        assert body["pagination"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}
        assert [item["appointment_date"] for item in body["data"]] == ["2024-06-01"]

    async def test_mark_no_show(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test marking a no-show."""
        appointment_id = await make_appointment(patient, doctor, date.today())

        response = await client.put(
            f"/api/v1/doctor/appointments/{appointment_id}/no-show", headers=headers(doctor)
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "no-show"

    async def test_mark_no_show_twice(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test that terminal appointments cannot change."""
        appointment_id = await make_appointment(patient, doctor, date.today(), status="no-show")

        response = await client.put(
            f"/api/v1/doctor/appointments/{appointment_id}/no-show", headers=headers(doctor)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot mark this appointment as no-show"

    async def test_cancel_inside_patient_window(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test that doctors can cancel without the patient notice window."""
        appointment_id = await make_appointment(patient, doctor, date.today(), "00:00")

        response = await client.put(
            f"/api/v1/doctor/appointments/{appointment_id}/cancel",
            json={"cancellation_reason": "Emergency surgery"},
            headers=headers(doctor),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "cancelled"
        assert data["cancelled_by"] == "doctor"


@pytest.mark.asyncio
class TestDoctorVisitEndpoints:
    """Tests for patient records and visit summaries."""

    async def test_record_visit(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test recording a visit completes the appointment."""
        appointment_id = await make_appointment(patient, doctor, date.today())

        response = await client.post(
            "/api/v1/doctor/visit-summaries", json=visit(appointment_id), headers=headers(doctor)
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["diagnosis"] == "Acute bronchitis"
        assert data["prescription"][0]["medicine_name"] == "Amoxicillin"
        assert data["patient"]["id"] == str(patient.profile_id)

        appointments = await client.get(
            "/api/v1/doctor/appointments", params={"status": "completed"}, headers=headers(doctor)
        )
        assert [item["id"] for item in appointments.json()["data"]] == [str(appointment_id)]

    async def test_record_visit_twice(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test that a second summary for the same appointment is rejected."""
        appointment_id = await make_appointment(patient, doctor, date.today())
        await client.post(
            "/api/v1/doctor/visit-summaries", json=visit(appointment_id), headers=headers(doctor)
        )

        response = await client.post(
            "/api/v1/doctor/visit-summaries", json=visit(appointment_id), headers=headers(doctor)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Visit summary already exists for this appointment"

    async def test_record_visit_missing_diagnosis(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test that symptoms and diagnosis are required."""
        appointment_id = await make_appointment(patient, doctor, date.today())
        payload = visit(appointment_id)
        del payload["diagnosis"]

        response = await client.post(
            "/api/v1/doctor/visit-summaries", json=payload, headers=headers(doctor)
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["loc"] == ["body", "diagnosis"]

    async def test_update_visit(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test editing a recorded visit."""
        appointment_id = await make_appointment(patient, doctor, date.today())
        created = await client.post(
            "/api/v1/doctor/visit-summaries", json=visit(appointment_id), headers=headers(doctor)
        )
        summary_id = created.json()["data"]["id"]

        response = await client.put(
            f"/api/v1/doctor/visit-summaries/{summary_id}",
            json={"lab_tests": [{"test_name": "Chest X-ray"}]},
            headers=headers(doctor),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["lab_tests"] == [{"test_name": "Chest X-ray", "notes": None}]
        assert data["diagnosis"] == "Acute bronchitis"

    async def test_patient_record(
        self, client: AsyncClient, patient, doctor, make_appointment, headers
    ):
        """Test reading a patient's record and visit history."""
        appointment_id = await make_appointment(patient, doctor, date.today())
        await client.post(
            "/api/v1/doctor/visit-summaries", json=visit(appointment_id), headers=headers(doctor)
        )

        response = await client.get(
            f"/api/v1/doctor/patients/{patient.profile_id}", headers=headers(doctor)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["patient"]["full_name"] == "Asha Rao"
        assert len(data["visit_history"]) == 1
        assert data["visit_history"][0]["appointment"]["id"] == str(appointment_id)
