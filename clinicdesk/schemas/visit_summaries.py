"""Visit summary schemas for request/response validation."""

from datetime import UTC, date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from clinicdesk.schemas.appointments import AppointmentSlot
from clinicdesk.schemas.doctors import DoctorBrief
from clinicdesk.schemas.patients import PatientBrief


class VitalSigns(BaseModel):
    """Vitals taken during the visit."""

    blood_pressure: str | None = None
    temperature: float | None = None
    heart_rate: int | None = Field(None, ge=0)
    weight: float | None = Field(None, ge=0)
    height: float | None = Field(None, ge=0)


class PrescriptionItem(BaseModel):
    """One prescribed medicine."""

    medicine_name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)
    instructions: str | None = None


class LabTest(BaseModel):
    """Ordered lab test."""

    test_name: str
    notes: str | None = None


class Attachment(BaseModel):
    """File attached to a visit."""

    filename: str
    url: str
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ClinicalFields(BaseModel):
    """Clinical content of a visit summary."""

    symptoms: str = Field(..., min_length=1)
    diagnosis: str = Field(..., min_length=1)
    vital_signs: VitalSigns | None = None
    prescription: list[PrescriptionItem] = []
    lab_tests: list[LabTest] = []
    notes: str | None = None
    follow_up_date: date | None = None
    attachments: list[Attachment] = []


class VisitSummaryCreate(ClinicalFields):
    """Schema for a doctor recording a visit."""

    appointment_id: UUID


class VisitSummaryUpdate(BaseModel):
    """
    Editable visit fields; any other key in the payload is ignored.

    An explicit null clears an optional field. Symptoms and diagnosis cannot
    be cleared, and a null prescription or lab test list becomes empty.
    """

    symptoms: str | None = Field(None, min_length=1)
    diagnosis: str | None = Field(None, min_length=1)
    vital_signs: VitalSigns | None = None
    prescription: list[PrescriptionItem] | None = None
    lab_tests: list[LabTest] | None = None
    notes: str | None = None
    follow_up_date: date | None = None

    @field_validator("symptoms", "diagnosis")
    @classmethod
    def not_cleared(cls, v: str | None) -> str:
        """Reject an explicit null for a required clinical field."""
        if v is None:
            raise ValueError("cannot be cleared")
        return v

    @field_validator("prescription", "lab_tests")
    @classmethod
    def empty_when_null(cls, v: list | None) -> list:
        """Store a cleared list as empty."""
        return [] if v is None else v


class VisitSummaryResponse(BaseModel):
    """Visit summary with populated references."""

    id: UUID
    appointment_id: UUID
    patient_id: UUID
    doctor_id: UUID
    symptoms: str
    diagnosis: str
    vital_signs: VitalSigns | None = None
    prescription: list[PrescriptionItem] = []
    lab_tests: list[LabTest] = []
    notes: str | None = None
    follow_up_date: date | None = None
    attachments: list[Attachment] = []
    created_at: datetime
    updated_at: datetime
    patient: PatientBrief | None = None
    doctor: DoctorBrief | None = None
    appointment: AppointmentSlot | None = None

    model_config = {"from_attributes": True}
