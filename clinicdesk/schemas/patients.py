"""Patient schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from clinicdesk.schemas.common import PHONE_PATTERN


class Gender(str, Enum):
    """Patient gender."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BloodGroup(str, Enum):
    """ABO/Rh blood group."""

    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class Address(BaseModel):
    """Postal address."""

    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str = "India"


class EmergencyContact(BaseModel):
    """Person to reach in an emergency."""

    name: str | None = None
    relationship: str | None = None
    phone_number: str | None = None


class MedicalHistoryEntry(BaseModel):
    """Past condition."""

    condition: str
    diagnosed_date: date | None = None
    notes: str | None = None


def calculate_age(date_of_birth: date, today: date | None = None) -> int:
    """Whole years between a birth date and today."""
    today = today or date.today()
    had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
    return today.year - date_of_birth.year - (0 if had_birthday else 1)


class PatientUpdate(BaseModel):
    """Fields a patient may change on their own profile; other keys are ignored."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone_number: str | None = Field(None, pattern=PHONE_PATTERN)
    address: Address | None = None
    blood_group: BloodGroup | None = None
    allergies: list[str] | None = None
    emergency_contact: EmergencyContact | None = None


class PatientBrief(BaseModel):
    """Patient fields embedded in appointment and visit listings."""

    id: UUID
    first_name: str
    last_name: str
    phone_number: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    blood_group: BloodGroup | None = None
    allergies: list[str] | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        """Display name."""
        return f"{self.first_name} {self.last_name}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def age(self) -> int | None:
        """Age in whole years, when the birth date is known."""
        return calculate_age(self.date_of_birth) if self.date_of_birth else None


class PatientResponse(BaseModel):
    """Full patient profile."""

    id: UUID
    user_id: UUID
    email: str | None = None
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    phone_number: str
    address: Address | None = None
    blood_group: BloodGroup | None = None
    allergies: list[str] = []
    emergency_contact: EmergencyContact | None = None
    medical_history: list[MedicalHistoryEntry] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        """Display name."""
        return f"{self.first_name} {self.last_name}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def age(self) -> int:
        """Age in whole years."""
        return calculate_age(self.date_of_birth)
