"""Appointment schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from clinicdesk.schemas.common import TIME_PATTERN
from clinicdesk.schemas.doctors import DoctorBrief
from clinicdesk.schemas.patients import PatientBrief


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


HISTORY_STATUSES = (
    AppointmentStatus.COMPLETED,
    AppointmentStatus.NO_SHOW,
    AppointmentStatus.CANCELLED,
)


class AppointmentCreate(BaseModel):
    """Schema for a patient booking an appointment."""

    doctor_id: UUID
    appointment_date: date
    appointment_time: str = Field(..., pattern=TIME_PATTERN, examples=["14:00"])
    reason: str = Field(..., min_length=1, max_length=500)
    notes: str | None = Field(None, max_length=1000)

    @field_validator("reason", "notes", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        """Trim surrounding whitespace before length checks."""
        return v.strip() if isinstance(v, str) else v


class AppointmentCancel(BaseModel):
    """Schema for cancelling an appointment."""

    cancellation_reason: str | None = Field(None, max_length=1000)


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: UUID
    patient_id: UUID
    doctor_id: UUID
    appointment_date: date
    appointment_time: str
    status: AppointmentStatus
    reason: str
    notes: str | None = None
    cancelled_by: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime
    updated_at: datetime
    patient: PatientBrief | None = None
    doctor: DoctorBrief | None = None

    model_config = {"from_attributes": True}


class AppointmentSlot(BaseModel):
    """Date and time of an appointment, embedded in visit summaries."""

    id: UUID
    appointment_date: date
    appointment_time: str
