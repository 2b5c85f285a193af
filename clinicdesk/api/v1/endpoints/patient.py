"""Patient-facing endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinicdesk.dependencies import DatabaseSession, PatientIdentity
from clinicdesk.schemas.appointments import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
)
from clinicdesk.schemas.common import ApiResponse, PageParams, Pagination
from clinicdesk.schemas.doctors import DoctorResponse
from clinicdesk.schemas.patients import PatientResponse, PatientUpdate
from clinicdesk.schemas.visit_summaries import VisitSummaryResponse
from clinicdesk.services.appointment_service import AppointmentService
from clinicdesk.services.patient_service import PatientService
from clinicdesk.services.query_service import RecordQueryService

router = APIRouter()


# ============================================================================
# Profile
# ============================================================================


@router.get(
    "/profile",
    response_model=ApiResponse[PatientResponse],
    status_code=status.HTTP_200_OK,
    summary="Get own profile",
)
async def get_profile(
    identity: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[PatientResponse]:
    """Return the caller's patient profile."""
    patient = await PatientService(db).get_profile(identity.user_id)
    return ApiResponse(data=PatientResponse.model_validate(patient))


@router.put(
    "/profile",
    response_model=ApiResponse[PatientResponse],
    status_code=status.HTTP_200_OK,
    summary="Update own profile",
)
async def update_profile(
    data: PatientUpdate,
    identity: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[PatientResponse]:
    """
    Update the caller's profile.

    Only name, phone, address, blood group, allergies and emergency contact
    can change; any other field in the payload is ignored.
    """
    patient = await PatientService(db).update_profile(identity.user_id, data)
    return ApiResponse(
        message="Profile updated successfully",
        data=PatientResponse.model_validate(patient),
    )


# ============================================================================
# Doctor directory
# ============================================================================


@router.get(
    "/doctors",
    response_model=ApiResponse[list[DoctorResponse]],
    status_code=status.HTTP_200_OK,
    summary="Browse doctors",
)
async def list_doctors(
    identity: PatientIdentity,
    db: DatabaseSession,
    specialization: str | None = Query(None, description="Case-insensitive substring"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse[list[DoctorResponse]]:
    """
    List doctors, best rated first.

    Args:
        identity: Calling patient
        db: Database session
        specialization: Filter by specialization
        page: Page number
        limit: Items per page

    Returns:
        One page of doctors with pagination metadata
    """
    params = PageParams(page=page, limit=limit)
    items, total = await RecordQueryService(db, identity).doctor_directory(params, specialization)
    return ApiResponse(
        data=[DoctorResponse.model_validate(item) for item in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.get(
    "/doctors/{doctor_id}",
    response_model=ApiResponse[DoctorResponse],
    status_code=status.HTTP_200_OK,
    summary="Get doctor by ID",
)
async def get_doctor(
    doctor_id: UUID,
    identity: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """Return one doctor's profile."""
    doctor = await RecordQueryService(db, identity).doctor_detail(doctor_id)
    return ApiResponse(data=DoctorResponse.model_validate(doctor))


# ============================================================================
# Appointments
# ============================================================================


@router.post(
    "/appointments",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
)
async def book_appointment(
    data: AppointmentCreate,
    identity: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[AppointmentResponse]:
    """
    Book a slot with a doctor.

    Args:
        data: Doctor, date, time and reason
        identity: Calling patient
        db: Database session

    Returns:
        The scheduled appointment with doctor details
    """
    appointment = await AppointmentService(db).book_appointment(identity, data)
    return ApiResponse(
        message="Appointment booked successfully",
        data=AppointmentResponse.model_validate(appointment),
    )


@router.get(
    "/appointments",
    response_model=ApiResponse[list[AppointmentResponse]],
    status_code=status.HTTP_200_OK,
    summary="List own appointments",
)
async def list_appointments(
    identity: PatientIdentity,
    db: DatabaseSession,
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    upcoming: bool = Query(False, description="Only future scheduled appointments"),
) -> ApiResponse[list[AppointmentResponse]]:
    """List the caller's appointments, most recent slot first."""
    items = await RecordQueryService(db, identity).patient_appointments(
        status=status_filter, upcoming=upcoming
    )
    return ApiResponse(data=[AppointmentResponse.model_validate(item) for item in items])


@router.put(
    "/appointments/{appointment_id}/cancel",
    response_model=ApiResponse[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    summary="Cancel own appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    identity: PatientIdentity,
    db: DatabaseSession,
    data: AppointmentCancel | None = None,
) -> ApiResponse[AppointmentResponse]:
    """Cancel a scheduled appointment at least two hours ahead of its slot."""
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
# Visit summaries
# ============================================================================


@router.get(
    "/visit-summaries",
    response_model=ApiResponse[list[VisitSummaryResponse]],
    status_code=status.HTTP_200_OK,
    summary="List own visit summaries",
)
async def list_visit_summaries(
    identity: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[list[VisitSummaryResponse]]:
    """List the caller's visit summaries, newest first."""
    items = await RecordQueryService(db, identity).patient_visit_summaries()
    return ApiResponse(data=[VisitSummaryResponse.model_validate(item) for item in items])


@router.get(
    "/visit-summaries/{visit_summary_id}",
    response_model=ApiResponse[VisitSummaryResponse],
    status_code=status.HTTP_200_OK,
    summary="Get own visit summary",
)
async def get_visit_summary(
    visit_summary_id: UUID,
    identity: PatientIdentity,
    db: DatabaseSession,
) -> ApiResponse[VisitSummaryResponse]:
    """Return one of the caller's visit summaries."""
    summary = await RecordQueryService(db, identity).patient_visit_summary(visit_summary_id)
    return ApiResponse(data=VisitSummaryResponse.model_validate(summary))
