"""Doctor schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, computed_field, field_serializer

from clinicdesk.schemas.common import PHONE_PATTERN, TIME_PATTERN

# ============================================================================
# Availability
# ============================================================================


class WeekDay(str, Enum):
    """Day of the week."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class TimeSlot(BaseModel):
    """Working window within a day."""

    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    is_available: bool = True


class DayAvailability(BaseModel):
    """Working windows for one weekday."""

    day: WeekDay
    slots: list[TimeSlot] = []


class AvailabilityUpdate(BaseModel):
    """Replacement availability list."""

    availability: list[DayAvailability]


# ============================================================================
# Doctor Base Schemas
# ============================================================================


class DoctorBase(BaseModel):
    """Base schema for doctor."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    specialization: str = Field(..., min_length=1, max_length=200)
    qualification: str = Field(..., min_length=1)
    experience: int = Field(..., ge=0)
    license_number: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    consultation_fee: Decimal = Field(..., ge=0, decimal_places=2)
    bio: str | None = Field(None, max_length=500)
    availability: list[DayAvailability] = []


class DoctorCreate(DoctorBase):
    """Schema for an admin creating a doctor account and profile."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class DoctorUpdate(BaseModel):
    """Fields an admin may change on a doctor; other keys are ignored."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    specialization: str | None = Field(None, min_length=1, max_length=200)
    qualification: str | None = Field(None, min_length=1)
    experience: int | None = Field(None, ge=0)
    phone_number: str | None = Field(None, pattern=PHONE_PATTERN)
    consultation_fee: Decimal | None = Field(None, ge=0, decimal_places=2)
    bio: str | None = Field(None, max_length=500)
    availability: list[DayAvailability] | None = None


class DoctorSelfUpdate(BaseModel):
    """Fields a doctor may change on their own profile; other keys are ignored."""

    phone_number: str | None = Field(None, pattern=PHONE_PATTERN)
    consultation_fee: Decimal | None = Field(None, ge=0, decimal_places=2)
    bio: str | None = Field(None, max_length=500)
    availability: list[DayAvailability] | None = None


class DoctorBrief(BaseModel):
    """Doctor fields embedded in appointment and visit listings."""

    id: UUID
    first_name: str
    last_name: str
    specialization: str
    consultation_fee: Decimal | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        """Display name."""
        return f"Dr. {self.first_name} {self.last_name}"

    @field_serializer("consultation_fee", when_used="json")
    def serialize_fee(self, value: Decimal | None) -> float | None:
        """Serialize Decimal to float for JSON."""
        return float(value) if value is not None else None


class DoctorResponse(DoctorBase):
    """Doctor response schema."""

    id: UUID
    user_id: UUID
    email: str | None = None
    is_active: bool | None = None
    consultation_fee: Decimal
    rating: Decimal = Decimal("0")
    total_reviews: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        """Display name."""
        return f"Dr. {self.first_name} {self.last_name}"

    @field_serializer("consultation_fee", "rating", when_used="json")
    def serialize_decimal(self, value: Decimal | None) -> float | None:
        """Serialize Decimal to float for JSON."""
        return float(value) if value is not None else None
