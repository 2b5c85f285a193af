"""Authentication endpoints."""

from fastapi import APIRouter, status

from clinicdesk.core.roles import Role
from clinicdesk.dependencies import CurrentUser, DatabaseSession, TokenBlacklistDep
from clinicdesk.schemas.auth import (
    AccountResponse,
    AuthResponse,
    LoginRequest,
    PatientRegister,
    Token,
    TokenRefresh,
)
from clinicdesk.schemas.common import ApiResponse, MessageResponse
from clinicdesk.schemas.doctors import DoctorResponse
from clinicdesk.schemas.patients import PatientResponse
from clinicdesk.schemas.users import UserResponse
from clinicdesk.services.auth_service import AuthService

router = APIRouter()


def _account(user: dict, profile: dict | None) -> dict:
    """Shape an account and its profile by role."""
    profile_model: PatientResponse | DoctorResponse | None = None
    if profile is not None:
        if Role(user["role"]) == Role.PATIENT:
            profile_model = PatientResponse.model_validate(profile)
        else:
            profile_model = DoctorResponse.model_validate(profile)
    return {"user": UserResponse.model_validate(user), "profile": profile_model}


@router.post(
    "/register/patient",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a patient account",
)
async def register_patient(
    data: PatientRegister,
    db: DatabaseSession,
    blacklist: TokenBlacklistDep,
) -> ApiResponse[AuthResponse]:
    """
    Create a patient account and profile, and sign it in.

    Args:
        data: Account and profile details
        db: Database session
        blacklist: Revoked refresh tokens

    Returns:
        The new account, its profile and a token pair
    """
    user, profile, tokens = await AuthService(blacklist).register_patient(data, db)
    return ApiResponse(
        message="Patient registered successfully",
        data=AuthResponse(**_account(user, profile), tokens=tokens),
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_200_OK,
    summary="Login with email and password",
)
async def login(
    data: LoginRequest,
    db: DatabaseSession,
    blacklist: TokenBlacklistDep,
) -> ApiResponse[AuthResponse]:
    """Exchange credentials for a token pair."""
    user, profile, tokens = await AuthService(blacklist).login(data.email, data.password, db)
    return ApiResponse(
        message="Login successful",
        data=AuthResponse(**_account(user, profile), tokens=tokens),
    )


@router.post(
    "/refresh-token",
    response_model=ApiResponse[Token],
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
)
async def refresh_token(
    data: TokenRefresh,
    db: DatabaseSession,
    blacklist: TokenBlacklistDep,
) -> ApiResponse[Token]:
    """
    Issue a new token pair from a refresh token.

    Args:
        data: Refresh token
        db: Database session
        blacklist: Revoked refresh tokens

    Returns:
        New access and refresh tokens
    """
    tokens = await AuthService(blacklist).refresh_access_token(data.refresh_token, db)
    return ApiResponse(message="Token refreshed", data=tokens)


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout user",
)
async def logout(
    data: TokenRefresh,
    current_user: CurrentUser,
    blacklist: TokenBlacklistDep,
) -> MessageResponse:
    """Revoke the refresh token so it can no longer be exchanged."""
    AuthService(blacklist).revoke_token(data.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/profile",
    response_model=ApiResponse[AccountResponse],
    status_code=status.HTTP_200_OK,
    summary="Get the current account",
)
async def get_profile(
    current_user: CurrentUser,
    db: DatabaseSession,
) -> ApiResponse[AccountResponse]:
    """Return the signed-in account and its role profile."""
    profile = await AuthService.get_role_profile(
        db, current_user["id"], Role(current_user["role"])
    )
    return ApiResponse(data=AccountResponse(**_account(current_user, profile)))
