"""Patient model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    ForeignKey,
    String,
    Table,
    Uuid,
    func,
)

from clinicdesk.models.base import metadata

patients = Table(
    "patients",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    ),
    # Personal information
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("date_of_birth", Date, nullable=False),
    Column("gender", String(10), nullable=False),
    Column("phone_number", String(20), nullable=False),
    Column("address", JSON),
    # Medical information (JSON for flexibility)
    Column("blood_group", String(5)),
    Column("allergies", JSON, nullable=False, default=list),
    Column("emergency_contact", JSON),
    Column("medical_history", JSON, nullable=False, default=list),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
