"""Admin-only endpoints for clinic management."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status

from clinicdesk.dependencies import AdminIdentity, DatabaseSession
from clinicdesk.schemas.admin import DashboardStatsResponse
from clinicdesk.schemas.appointments import (
    AppointmentCancel,
    AppointmentResponse,
    AppointmentStatus,
)
from clinicdesk.schemas.common import ApiResponse, MessageResponse, PageParams, Pagination
from clinicdesk.schemas.doctors import (
    AvailabilityUpdate,
    DoctorCreate,
    DoctorResponse,
    DoctorUpdate,
)
from clinicdesk.schemas.patients import PatientResponse
from clinicdesk.schemas.users import UserResponse, UserStatusUpdate
from clinicdesk.services.appointment_service import AppointmentService
from clinicdesk.services.dashboard_service import DashboardService
from clinicdesk.services.doctor_service import DoctorService
from clinicdesk.services.query_service import RecordQueryService
from clinicdesk.services.user_service import UserService

router = APIRouter()


@router.get(
    "/dashboard/stats",
    response_model=ApiResponse[DashboardStatsResponse],
    summary="Dashboard statistics",
)
async def get_dashboard_stats(
    identity: AdminIdentity,
    db: DatabaseSession,
) -> ApiResponse[DashboardStatsResponse]:
    """
    Patient, doctor and appointment counts as of now.

    Returns:
        Totals plus today, upcoming and this month's appointment counts
    """
    stats = await DashboardService(db).get_stats(identity)
    return ApiResponse(data=stats)


# ============================================================================
# Doctors
# ============================================================================


@router.post(
    "/doctors",
    response_model=ApiResponse[DoctorResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add a doctor",
)
async def add_doctor(
    data: DoctorCreate,
    identity: AdminIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """
    Create a doctor account and profile.

    Args:
        data: Login credentials and profile
        identity: Calling admin
        db: Database session

    Returns:
        The created doctor with account email
    """
    doctor = await DoctorService(db).create_doctor(identity, data)
    return ApiResponse(
        message="Doctor added successfully",
        data=DoctorResponse.model_validate(doctor),
    )


@router.get(
    "/doctors",
    response_model=ApiResponse[list[DoctorResponse]],
    summary="List doctors",
)
async def list_doctors(
    identity: AdminIdentity,
    db: DatabaseSession,
    specialization: str | None = Query(None),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
) -> ApiResponse[list[DoctorResponse]]:
    """List doctors with account status, newest first."""
    params = PageParams(page=page, limit=limit)
    items, total = await RecordQueryService(db, identity).all_doctors(params, specialization)
    return ApiResponse(
        data=[DoctorResponse.model_validate(item) for item in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.get(
    "/doctors/{doctor_id}",
    response_model=ApiResponse[DoctorResponse],
    summary="Get doctor by ID",
)
async def get_doctor(
    doctor_id: UUID,
    identity: AdminIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """Return one doctor with account status."""
    doctor = await RecordQueryService(db, identity).doctor_detail(doctor_id)
    return ApiResponse(data=DoctorResponse.model_validate(doctor))


@router.put(
    "/doctors/{doctor_id}",
    response_model=ApiResponse[DoctorResponse],
    summary="Update a doctor",
)
async def update_doctor(
    doctor_id: UUID,
    data: DoctorUpdate,
    identity: AdminIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """Update allow-listed doctor fields; email and license number cannot change."""
    doctor = await DoctorService(db).update_doctor(identity, doctor_id, data)
    return ApiResponse(
        message="Doctor updated successfully",
        data=DoctorResponse.model_validate(doctor),
    )


@router.delete(
    "/doctors/{doctor_id}",
    response_model=MessageResponse,
    summary="Deactivate a doctor",
)
async def delete_doctor(
    doctor_id: UUID,
    identity: AdminIdentity,
    db: DatabaseSession,
) -> MessageResponse:
    """Deactivate the doctor's account; appointments and visit records are kept."""
    await DoctorService(db).deactivate_doctor(identity, doctor_id)
    return MessageResponse(message="Doctor deactivated successfully")


@router.put(
    "/doctors/{doctor_id}/availability",
    response_model=ApiResponse[DoctorResponse],
    summary="Set doctor availability",
)
async def set_availability(
    doctor_id: UUID,
    data: AvailabilityUpdate,
    identity: AdminIdentity,
    db: DatabaseSession,
) -> ApiResponse[DoctorResponse]:
    """Replace the doctor's weekly availability."""
    doctor = await DoctorService(db).set_availability(identity, doctor_id, data.availability)
    return ApiResponse(
        message="Availability updated successfully",
        data=DoctorResponse.model_validate(doctor),
    )


# ============================================================================
# Appointments
# ============================================================================


@router.get(
    "/appointments",
    response_model=ApiResponse[list[AppointmentResponse]],
    summary="List all appointments",
)
async def list_appointments(
    identity: AdminIdentity,
    db: DatabaseSession,
    on_date: date | None = Query(None, alias="date"),
    doctor_id: UUID | None = Query(None),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse[list[AppointmentResponse]]:
    """
    List appointments across the clinic, newest slot first.

    Args:
        identity: Calling admin
        db: Database session
        on_date: Filter by appointment date
        doctor_id: Filter by doctor
        status_filter: Filter by status
        page: Page number
        limit: Items per page

    Returns:
        One page of appointments with patient and doctor details
    """
    params = PageParams(page=page, limit=limit)
    items, total = await RecordQueryService(db, identity).all_appointments(
        params, on_date=on_date, doctor_id=doctor_id, status=status_filter
    )
    return ApiResponse(
        data=[AppointmentResponse.model_validate(item) for item in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.put(
    "/appointments/{appointment_id}/cancel",
    response_model=ApiResponse[AppointmentResponse],
    summary="Cancel any appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    identity: AdminIdentity,
    db: DatabaseSession,
    data: AppointmentCancel | None = None,
) -> ApiResponse[AppointmentResponse]:
    """Cancel a scheduled appointment on the clinic's behalf."""
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
# Patients and accounts
# ============================================================================


@router.get(
    "/patients",
    response_model=ApiResponse[list[PatientResponse]],
    summary="List patients",
)
async def list_patients(
    identity: AdminIdentity,
    db: DatabaseSession,
    search: str | None = Query(None, description="Name or phone substring"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse[list[PatientResponse]]:
    """List registered patients, newest first."""
    params = PageParams(page=page, limit=limit)
    items, total = await RecordQueryService(db, identity).all_patients(params, search)
    return ApiResponse(
        data=[PatientResponse.model_validate(item) for item in items],
        pagination=Pagination.build(total, page, limit),
    )


@router.patch(
    "/users/{user_id}/status",
    response_model=ApiResponse[UserResponse],
    summary="Activate or deactivate an account",
)
async def update_user_status(
    user_id: UUID,
    data: UserStatusUpdate,
    identity: AdminIdentity,
    db: DatabaseSession,
) -> ApiResponse[UserResponse]:
    """Toggle whether an account may sign in."""
    user = await UserService(db).set_active(identity, user_id, data.is_active)
    state = "activated" if data.is_active else "deactivated"
    return ApiResponse(
        message=f"User {state} successfully",
        data=UserResponse.model_validate(user),
    )
