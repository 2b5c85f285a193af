"""Doctor-facing endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from clinicdesk.dependencies import DatabaseSession, DoctorIdentity
from clinicdesk.schemas.appointments import (
    AppointmentCancel,
    AppointmentResponse,
    AppointmentStatus,
)
from clinicdesk.schemas.common import ApiResponse, PageParams, Pagination
from clinicdesk.schemas.doctors import DoctorResponse, DoctorSelfUpdate
from clinicdesk.schemas.patients import PatientResponse
from clinicdesk.schemas.visit_summaries import (
    VisitSummaryCreate,
    VisitSummaryResponse,
    VisitSummaryUpdate,
)
from clinicdesk.services.appointment_service import AppointmentService
from clinicdesk.services.doctor_service import DoctorService
from clinicdesk.services.query_service import RecordQueryService
from clinicdesk.services.visit_summary_service import VisitSummaryService

router = APIRouter()


class PatientRecordResponse(BaseModel):
    """A patient's profile and the visits recorded by the calling doctor."""

    patient: PatientResponse
    visit_history: list[VisitSummaryResponse]


@router.get(
    "/profile",
    response_model=ApiResponse[DoctorResponse],
    status_code=status.HTTP_200_OK,
    summary="Get own profile",
)
async def get_profile(
    identity: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """Return the caller's doctor profile."""
    doctor = await DoctorService(db).get_profile(identity.user_id)
    return ApiResponse(data=DoctorResponse.model_validate(doctor))


@router.put(
    "/profile",
    response_model=ApiResponse[DoctorResponse],
    status_code=status.HTTP_200_OK,
    summary="Update own profile",
)
async def update_profile(
    data: DoctorSelfUpdate,
    identity: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """Update phone, fee, bio or availability; other fields are ignored."""
    doctor = await DoctorService(db).update_own_profile(identity.user_id, data)
    return ApiResponse(
        message="Profile updated successfully",
        data=DoctorResponse.model_validate(doctor),
    )


# ============================================================================
# Schedule
# ============================================================================


@router.get(
    "/appointments",
    response_model=ApiResponse[list[AppointmentResponse]],
    status_code=status.HTTP_200_OK,
    summary="List own appointments",
)
async def list_appointments(
    identity: DoctorIdentity,
    db: DatabaseSession,
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    on_date: date | None = Query(None, alias="date"),
) -> ApiResponse[list[AppointmentResponse]]:
    """
    List the caller's appointments in slot order.

    Args:
        identity: Calling doctor
        db: Database session
        status_filter: Filter by status
        on_date: Filter by appointment date

    Returns:
        Appointments with patient details
    """
    items = await RecordQueryService(db, identity).doctor_appointments(
        status=status_filter, on_date=on_date
    )
    return ApiResponse(data=[AppointmentResponse.model_validate(item) for item in items])


@router.get(
    "/appointments/today",
    response_model=ApiResponse[list[AppointmentResponse]],
    status_code=status.HTTP_200_OK,
    summary="Today's schedule",
)
async def today_appointments(
    identity: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[list[AppointmentResponse]]:
    """List today's appointments in the clinic timezone, by time."""
    items = await RecordQueryService(db, identity).doctor_today()
    return ApiResponse(data=[AppointmentResponse.model_validate(item) for item in items])


@router.get(
    "/appointments/history",
    response_model=ApiResponse[list[AppointmentResponse]],
    status_code=status.HTTP_200_OK,
    summary="Past appointments",
)
async def appointment_history(
    identity: DoctorIdentity,
    db: DatabaseSession,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse[list[AppointmentResponse]]:
    """Completed, no-show and cancelled appointments, newest first."""
    params = PageParams(page=page, limit=limit)
    items, total = await RecordQueryService(db, identity).doctor_history(params)
    return ApiResponse(
        data=[AppointmentResponse.model_validate(item) for item in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.put(
    "/appointments/{appointment_id}/no-show",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    summary="Mark appointment as no-show",
)
async def mark_no_show(
    appointment_id: UUID,
    identity: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """Mark a scheduled appointment as no-show."""
    appointment = await AppointmentService(db).mark_no_show(identity, appointment_id)
    return ApiResponse(
        message="Appointment marked as no-show",
        data=AppointmentResponse.model_validate(appointment),
    )


@router.put(
    "/appointments/{appointment_id}/cancel",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    summary="Cancel own appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    identity: DoctorIdentity,
    db: DatabaseSession,
    data: AppointmentCancel | None = None,
) -> ApiResponse[AppointmentResponse]:
    """Cancel one of the caller's scheduled appointments; no notice window applies."""
    appointment = await AppointmentService(db).cancel_appointment(
        identity,
        appointment_id,
        reason=data.cancellation_reason if data else None,
    )
    return ApiResponse(
        message="Appointment cancelled successfully",
        data=AppointmentResponse.model_validate(appointment),
    )


# ============================================================================
# Patients and visits
# ============================================================================


@router.get(
    "/patients/{patient_id}",
    response_model=ApiResponse[PatientRecordResponse],
    status_code=status.HTTP_200_OK,
    summary="Get patient record",
)
async def get_patient_record(
    patient_id: UUID,
    identity: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[PatientRecordResponse]:
    """Return a patient's profile and the visits the caller recorded for them."""
    record = await RecordQueryService(db, identity).doctor_patient_record(patient_id)
    return ApiResponse(data=PatientRecordResponse.model_validate(record))


@router.post(
    "/visit-summaries",
    response_model=ApiResponse[VisitSummaryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Record a visit",
)
async def add_visit_summary(
    data: VisitSummaryCreate,
    identity: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[VisitSummaryResponse]:
    """
    Record a visit summary and complete its appointment.

    Args:
        data: Appointment id and clinical details
        identity: Calling doctor
        db: Database session

    Returns:
        The created visit summary
    """
    summary = await VisitSummaryService(db).add_visit_summary(identity, data)
    return ApiResponse(
        message="Visit summary created successfully",
        data=VisitSummaryResponse.model_validate(summary),
    )


@router.put(
    "/visit-summaries/{visit_summary_id}",
    response_model=ApiResponse[VisitSummaryResponse],
    status_code=status.HTTP_200_OK,
    summary="Update a visit summary",
)
async def update_visit_summary(
    visit_summary_id: UUID,
    data: VisitSummaryUpdate,
    identity: DoctorIdentity,
    db: DatabaseSession,
) -> ApiResponse[VisitSummaryResponse]:
    """Update the clinical fields of one of the caller's visit summaries."""
    summary = await VisitSummaryService(db).update_visit_summary(identity, visit_summary_id, data)
    return ApiResponse(
        message="Visit summary updated successfully",
        data=VisitSummaryResponse.model_validate(summary),
    )
