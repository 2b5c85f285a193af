"""User service for account operations."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinicdesk.core.exceptions import NotFoundException
from clinicdesk.core.roles import Capability, Identity, Role
from clinicdesk.core.security import get_password_hash
from clinicdesk.models.users import users

logger = structlog.get_logger()


class UserService:
    """Service for user operations."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def create_user(self, email: str, password: str, role: Role) -> dict:
        """
        Insert a user row without committing.

        Callers create the role profile in the same transaction and commit
        both together.
        """
        query = (
            users.insert()
            .values(
                email=email.lower(),
                password_hash=get_password_hash(password),
                role=role.value,
            )
            .returning(users)
        )
        result = await self.db.execute(query)
        return dict(result.mappings().one())

    async def get_user_by_id(self, user_id: UUID) -> dict | None:
        """Get user by ID."""
        result = await self.db.execute(select(users).where(users.c.id == user_id))
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_user_by_email(self, email: str) -> dict | None:
        """Get user by email."""
        result = await self.db.execute(select(users).where(users.c.email == email.lower()))
        user = result.mappings().first()
        return dict(user) if user else None

    async def update_last_login(self, user_id: UUID) -> None:
        """Update user's last login timestamp."""
        query = update(users).where(users.c.id == user_id).values(last_login_at=datetime.now(UTC))
        await self.db.execute(query)
        await self.db.commit()

    async def set_active(self, identity: Identity, user_id: UUID, is_active: bool) -> dict:
        """
        Activate or deactivate an account.

        Raises:
            NotFoundException: If the user does not exist
        """
        identity.require(Capability.MANAGE_USERS)
        query = (
            update(users)
            .where(users.c.id == user_id)
            .values(is_active=is_active, updated_at=datetime.now(UTC))
            .returning(users)
        )
        result = await self.db.execute(query)
        user = result.mappings().first()
        if not user:
            await self.db.rollback()
            raise NotFoundException("User not found")
        await self.db.commit()

        logger.info("user_status_changed", user_id=str(user_id), is_active=is_active)
        return dict(user)
