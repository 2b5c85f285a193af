"""Authentication schemas."""

from datetime import date

from pydantic import BaseModel, EmailStr, Field

from clinicdesk.schemas.common import PHONE_PATTERN
from clinicdesk.schemas.doctors import DoctorResponse
from clinicdesk.schemas.patients import Gender, PatientResponse
from clinicdesk.schemas.users import UserResponse


class Token(BaseModel):
    """JWT token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefresh(BaseModel):
    """Token refresh / logout request schema."""

    refresh_token: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Email and password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class PatientRegister(BaseModel):
    """Self-registration of a patient account."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    gender: Gender
    phone_number: str = Field(..., pattern=PHONE_PATTERN)


class AccountResponse(BaseModel):
    """An account and its role profile; admins have no profile."""

    user: UserResponse
    profile: PatientResponse | DoctorResponse | None = None


class AuthResponse(AccountResponse):
    """Account, profile and a fresh token pair."""

    tokens: Token
