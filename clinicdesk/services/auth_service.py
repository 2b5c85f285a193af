"""Authentication service for email/password accounts and JWT."""

from datetime import timedelta
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.config import settings
from clinicdesk.core.exceptions import (
    ConflictException,
    ForbiddenException,
    UnauthorizedException,
)
from clinicdesk.core.redis_client import TokenBlacklist
from clinicdesk.core.roles import Role
from clinicdesk.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    verify_password,
)
from clinicdesk.models.patients import patients
from clinicdesk.schemas.auth import PatientRegister, Token
from clinicdesk.services.doctor_service import DoctorService
from clinicdesk.services.patient_service import PatientService
from clinicdesk.services.user_service import UserService

logger = structlog.get_logger()


class AuthService:
    """Authentication service for handling accounts and JWT operations."""

    def __init__(self, blacklist: TokenBlacklist):
        """Initialize auth service with the refresh-token blacklist."""
        self.blacklist = blacklist

    async def register_patient(
        self, data: PatientRegister, db: AsyncSession
    ) -> tuple[dict, dict, Token]:
        """
        Create a patient account and its profile in one transaction.

        Args:
            data: Registration details
            db: Database session

        Returns:
            Tuple of (user dict, patient profile dict, token pair)

        Raises:
            ConflictException: If the email is already registered
        """
        user_service = UserService(db)
        if await user_service.get_user_by_email(data.email):
            raise ConflictException("Email already registered")

        try:
            user = await user_service.create_user(data.email, data.password, Role.PATIENT)
            await db.execute(
                patients.insert().values(
                    user_id=user["id"],
                    **data.model_dump(mode="json", exclude={"email", "password", "date_of_birth"}),
                    date_of_birth=data.date_of_birth,
                )
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictException("Email already registered")

        profile = await PatientService(db).get_profile(user["id"])
        logger.info("user_registered", user_id=str(user["id"]), role=Role.PATIENT.value)
        return user, profile, self.create_tokens(user["id"], Role.PATIENT)

    async def login(
        self, email: str, password: str, db: AsyncSession
    ) -> tuple[dict, dict | None, Token]:
        """
        Verify credentials and issue tokens.

        Returns:
            Tuple of (user dict, role profile dict or None, token pair)

        Raises:
            UnauthorizedException: If the email or password is wrong
            ForbiddenException: If the account is deactivated
        """
        user_service = UserService(db)
        user = await user_service.get_user_by_email(email)
        if not user or not verify_password(password, user["password_hash"]):
            raise UnauthorizedException("Invalid credentials")
        if not user["is_active"]:
            raise ForbiddenException("Account is inactive")

        await user_service.update_last_login(user["id"])
        user = await user_service.get_user_by_id(user["id"]) or user

        role = Role(user["role"])
        profile = await self.get_role_profile(db, user["id"], role)
        logger.info("user_logged_in", user_id=str(user["id"]), role=role.value)
        return user, profile, self.create_tokens(user["id"], role)

    def create_tokens(self, user_id: UUID | str, role: Role) -> Token:
        """
        Create access and refresh tokens for a user.

        Args:
            user_id: User identifier (internal UUID)
            role: Account role, carried in the access token

        Returns:
            Token pair (access and refresh)
        """
        access_token = create_access_token(
            data={"sub": str(user_id), "role": role.value},
            expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        )

        refresh_token = create_refresh_token(
            data={"sub": str(user_id)},
            expires_delta=timedelta(days=settings.refresh_token_expire_days),
        )

        return Token(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
        )

    async def refresh_access_token(self, refresh_token: str, db: AsyncSession) -> Token:
        """
        Create a new token pair from a refresh token.

        Raises:
            UnauthorizedException: If the refresh token is invalid, revoked, or
                belongs to a missing or inactive account
        """
        payload = decode_refresh_token(refresh_token)
        if payload is None or payload.get("sub") is None:
            raise UnauthorizedException("Invalid refresh token")

        if self.blacklist.is_revoked(refresh_token):
            raise UnauthorizedException("Token has been revoked")

        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            raise UnauthorizedException("Invalid refresh token")

        user = await UserService(db).get_user_by_id(user_id)
        if not user or not user["is_active"]:
            raise UnauthorizedException("Invalid refresh token")

        return self.create_tokens(user_id, Role(user["role"]))

    def revoke_token(self, token: str, ttl: int | None = None) -> None:
        """
        Revoke a refresh token by adding it to blacklist.

        Args:
            token: Token to revoke
            ttl: Lifetime of the blacklist entry, defaults to the refresh token lifetime
        """
        if ttl is None:
            ttl = int(timedelta(days=settings.refresh_token_expire_days).total_seconds())
        self.blacklist.revoke(token, ttl)

    @staticmethod
    async def get_role_profile(db: AsyncSession, user_id: UUID, role: Role) -> dict | None:
        """Load the patient or doctor profile owned by an account."""
        if role == Role.PATIENT:
            return await PatientService(db).get_by_user_id(user_id)
        if role == Role.DOCTOR:
            return await DoctorService(db).get_by_user_id(user_id)
        return None
