"""FastAPI dependencies."""

from collections.abc import Callable
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from clinicdesk.core.redis_client import TokenBlacklist, get_redis_client
from clinicdesk.core.roles import Identity, Role
from clinicdesk.core.security import decode_access_token
from clinicdesk.database import get_db
from clinicdesk.services.doctor_service import DoctorService
from clinicdesk.services.patient_service import PatientService
from clinicdesk.services.user_service import UserService

# Security
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """
    Extract and validate user ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        User ID from token

    Raises:
        UnauthorizedException: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Could not validate credentials")

    user_id_str = payload.get("sub")
    if user_id_str is None or not isinstance(user_id_str, str):
        raise UnauthorizedException("Could not validate credentials")

    try:
        return UUID(user_id_str)
    except ValueError:
        raise UnauthorizedException("Invalid user ID format")


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get current user from database.

    Raises:
        UnauthorizedException: If the user no longer exists
        ForbiddenException: If the account is deactivated
    """
    user = await UserService(db).get_user_by_id(user_id)

    if not user:
        raise UnauthorizedException("User not found")

    if not user["is_active"]:
        raise ForbiddenException("Account is inactive")

    return user


async def get_identity(
    user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Identity:
    """
    Resolve the caller's role and profile.

    The role comes from the stored account rather than the token, so a role
    change takes effect on the next request.
    """
    role = Role(user["role"])
    profile_id = None

    if role == Role.PATIENT:
        patient = await PatientService(db).get_by_user_id(user["id"])
        if not patient:
            raise NotFoundException("Patient not found")
        profile_id = patient["id"]
    elif role == Role.DOCTOR:
        doctor = await DoctorService(db).get_by_user_id(user["id"])
        if not doctor:
            raise NotFoundException("Doctor not found")
        profile_id = doctor["id"]

    return Identity(user_id=user["id"], role=role, profile_id=profile_id)


def require_role(*roles: Role) -> Callable:
    """Build a dependency that admits only callers with one of ``roles``."""

    async def checker(identity: Annotated[Identity, Depends(get_identity)]) -> Identity:
        if identity.role not in roles:
            raise ForbiddenException(
                f"Role '{identity.role.value}' is not authorized to access this route"
            )
        return identity

    return checker


def get_token_blacklist(
    redis_client: Annotated[Redis, Depends(get_redis_client)],
) -> TokenBlacklist:
    """Refresh-token blacklist over the shared Redis client."""
    return TokenBlacklist(redis_client)


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
PatientIdentity = Annotated[Identity, Depends(require_role(Role.PATIENT))]
DoctorIdentity = Annotated[Identity, Depends(require_role(Role.DOCTOR))]
AdminIdentity = Annotated[Identity, Depends(require_role(Role.ADMIN))]
TokenBlacklistDep = Annotated[TokenBlacklist, Depends(get_token_blacklist)]
